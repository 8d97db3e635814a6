"""Pattern parsing: segment splitting, wildcard detection, regex compilation.

Nothing in here touches the filesystem.  :func:`resolve_prefix` takes the
home directory lookup as a callable and only calls it for a leading ``~``.
"""

from __future__ import annotations

import posixpath
import re
from typing import Callable, NamedTuple

from .exceptions import InvalidPatternError

ROOT = "/"
HOME = "~"

_MAGIC = frozenset("*?[]")


class ParsedPattern(NamedTuple):
    """A pattern split at its first wildcard segment.

    Attributes:
        prefix: Literal directory path the walk starts from (``"."`` when
            the pattern starts with a wildcard).
        tail: Raw segments from the first wildcard segment onwards.
            Empty for a pattern without wildcards.
    """

    prefix: str
    tail: tuple[str, ...]


def split_segments(pattern: str) -> list[str]:
    """Split *pattern* on ``/``.

    A leading ``/`` (or a run of them) becomes a single ``"/"`` root
    segment.  Empty fragments and ``.`` are dropped, so ``a//b/./c/`` and
    ``a/b/c`` split the same way.  Backslash escapes are left untouched.
    """
    segments = [ROOT] if pattern.startswith("/") else []
    segments.extend(s for s in pattern.split("/") if s not in ("", "."))
    return segments


def is_escaped(segment: str, index: int) -> bool:
    """Return True if ``segment[index]`` follows an odd run of backslashes."""
    count = 0
    i = index - 1
    while i >= 0 and segment[i] == "\\":
        count += 1
        i -= 1
    return count % 2 == 1


def has_magic(segment: str) -> bool:
    """Return True if *segment* holds an unescaped ``*``, ``?``, ``[`` or ``]``."""
    return any(
        ch in _MAGIC and not is_escaped(segment, i)
        for i, ch in enumerate(segment)
    )


def unescape(segment: str) -> str:
    r"""Drop escaping backslashes from a literal segment (``a\*b`` -> ``a*b``).

    A trailing lone backslash has nothing to escape and is kept.
    """
    last = len(segment) - 1
    return "".join(
        ch for i, ch in enumerate(segment)
        if ch != "\\" or is_escaped(segment, i) or i == last
    )


def _class_end(segment: str, start: int) -> int:
    """Index of the ``]`` closing the class opened at *start*, or -1."""
    i = start + 1
    if i < len(segment) and segment[i] == "^":
        i += 1
    # A ``]`` right after the opening bracket is a member, not the end.
    if i < len(segment) and segment[i] == "]":
        i += 1
    while i < len(segment):
        if segment[i] == "]" and not is_escaped(segment, i):
            return i
        i += 1
    return -1


def _translate_class(body: str) -> str:
    out: list[str] = []
    i = 0
    if body.startswith("^"):
        out.append("^")
        i = 1
    first = i
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            i += 1
            out.append(re.escape(body[i]))
        elif ch == "-" and first < i < len(body) - 1:
            out.append("-")
        else:
            out.append(re.escape(ch))
        i += 1
    return "[" + "".join(out) + "]"


def translate(segment: str) -> str:
    """Translate one glob segment into a regular expression string.

    ``*`` matches any run of characters.  ``?`` makes the *following*
    atom optional (``m?ain`` matches ``main`` and ``min``), it does not
    stand for a single character.  ``[...]`` is a character class; a
    leading ``^`` negates it.  Any character preceded by an odd number of
    backslashes is literal.
    """
    atoms: list[str] = []
    optional = False
    i = 0
    n = len(segment)
    while i < n:
        ch = segment[i]
        escaped = is_escaped(segment, i)
        if ch == "\\" and not escaped and i + 1 < n:
            i += 1
            continue
        if escaped or ch not in "*?[":
            atom = re.escape(ch)
        elif ch == "?":
            optional = True
            i += 1
            continue
        elif ch == "*":
            atom = ".*"
        else:
            end = _class_end(segment, i)
            if end < 0:
                atom = re.escape(ch)
            else:
                atom = _translate_class(segment[i + 1:end])
                i = end
        if optional:
            atom = f"(?:{atom})?"
            optional = False
        atoms.append(atom)
        i += 1
    return "(?s:" + "".join(atoms) + r")\Z"


def compile_segment(segment: str, pattern: str | None = None) -> re.Pattern[str]:
    """Compile *segment* into an anchored matcher for one path component.

    *pattern* is the full pattern the segment came from, reported in the
    error; it defaults to the segment itself.

    Raises:
        InvalidPatternError: If a character class is malformed
            (e.g. ``[z-a]``).
    """
    try:
        return re.compile(translate(segment))
    except re.error as exc:
        raise InvalidPatternError(pattern or segment, str(exc)) from exc


def join_segments(segments: list[str]) -> str:
    """Join literal segments into a path; an empty list is ``"."``."""
    if not segments:
        return "."
    return posixpath.join(*segments)


def resolve_prefix(pattern: str, home_directory: Callable[[], str]) -> ParsedPattern:
    """Split *pattern* into its literal prefix and wildcard tail.

    A first segment of exactly ``~`` is replaced by ``home_directory()``.
    Only the first segment is considered, so ``~/~`` names a directory
    called ``~`` inside the home directory.

    Raises:
        InvalidPatternError: If any tail segment is ``..``.
    """
    segments = split_segments(pattern)
    literal: list[str] = []
    tail: tuple[str, ...] = ()
    for index, seg in enumerate(segments):
        if has_magic(seg):
            tail = tuple(segments[index:])
            break
        if index == 0 and seg == HOME:
            literal.append(home_directory())
        else:
            literal.append(unescape(seg))
    if ".." in tail:
        raise InvalidPatternError(
            pattern, "'..' is not allowed after a wildcard segment",
        )
    return ParsedPattern(join_segments(literal), tail)
