"""Lazy glob expansion and single-path matching.

The pattern is resolved into a literal prefix and a wildcard tail (see
:func:`parse_pattern`).  The walker then lists the prefix directory,
matches the first tail segment against its entries, and descends one
directory level per remaining segment.  Nothing below a directory whose
name failed to match is ever listed.
"""

from __future__ import annotations

import posixpath
import re
from logging import getLogger
from typing import Iterator, Sequence

from ._pattern import ROOT, ParsedPattern, compile_segment, resolve_prefix, split_segments, unescape
from .fs import FileSystem, LocalFS

logger = getLogger(__name__)


def parse_pattern(pattern: str, *, fs: FileSystem | None = None) -> ParsedPattern:
    """Split *pattern* into a literal prefix and a wildcard tail.

    A leading ``~`` segment is expanded with ``fs.home_directory()``.

    Raises:
        InvalidPatternError: If a ``..`` segment follows a wildcard segment.
    """
    fs = fs or LocalFS()
    return resolve_prefix(pattern, fs.home_directory)


def _is_visible(segment: str, name: str, include_dotfiles: bool) -> bool:
    """Dotfiles are only matched by a segment that itself starts with ``.``.

    An escaped leading dot (``\\.``) counts as well.
    """
    if include_dotfiles or not name.startswith("."):
        return True
    return unescape(segment[:2]).startswith(".")


def _join(prefix: str, name: str) -> str:
    return posixpath.join(prefix, name) if prefix else name


def _iter_literal(fs: FileSystem, path: str) -> Iterator[str]:
    if fs.exists(path):
        yield path


def _iter_walk(
    fs: FileSystem,
    segments: Sequence[str],
    matchers: Sequence[re.Pattern[str]],
    prefix: str,
    include_dotfiles: bool,
) -> Iterator[str]:
    """Recursive glob generator, depth-first in listing order."""
    scan_dir = prefix or "."
    try:
        entries = fs.list_directory(scan_dir)
    except OSError as exc:
        # Missing, unreadable or vanished directories have nothing to match.
        logger.debug("Skipping %s: %s", scan_dir, exc)
        return
    seg = segments[0]
    rest = segments[1:]
    matcher = matchers[0]
    for name in entries:
        if not _is_visible(seg, name, include_dotfiles):
            continue
        if not matcher.match(name):
            continue
        full = _join(prefix, name)
        if not rest:
            yield full
        elif fs.is_dir(full):
            yield from _iter_walk(fs, rest, matchers[1:], full, include_dotfiles)


def iglob(
    pattern: str,
    *,
    include_dotfiles: bool = False,
    fs: FileSystem | None = None,
) -> Iterator[str]:
    """Expand a glob pattern lazily, yielding matching paths.

    The pattern is parsed immediately, so :class:`InvalidPatternError` is
    raised by this call rather than by the first ``next()``.  The
    filesystem is only touched as results are pulled; abandoning the
    iterator stops the walk.

    Results come depth-first in the order ``fs.list_directory`` returns
    entries, which for :class:`LocalFS` is not sorted.  A pattern without
    wildcards yields its normalized path if it exists.  A relative
    pattern whose first segment is a wildcard yields paths without a
    ``./`` prefix.

    Args:
        pattern: Glob pattern.  ``*`` matches any run of characters within
            one segment, ``?`` makes the following character optional,
            ``[...]`` is a character class and ``\\`` escapes.
        include_dotfiles: Match entries starting with ``.`` even when the
            pattern segment does not start with ``.``.
        fs: Filesystem to walk (default: a new :class:`LocalFS`).
    """
    fs = fs or LocalFS()
    prefix, tail = parse_pattern(pattern, fs=fs)
    if not tail:
        return _iter_literal(fs, prefix)
    matchers = [compile_segment(seg, pattern) for seg in tail]
    start = "" if prefix == "." else prefix
    return _iter_walk(fs, tail, matchers, start, include_dotfiles)


def glob(
    pattern: str,
    *,
    include_dotfiles: bool = False,
    fs: FileSystem | None = None,
) -> list[str]:
    """Expand a glob pattern into a list of matching paths.

    Same results and order as :func:`iglob`; see there for the syntax.
    """
    return list(iglob(pattern, include_dotfiles=include_dotfiles, fs=fs))


def glob_match(
    pattern: str,
    path: str,
    *,
    include_dotfiles: bool = False,
    fs: FileSystem | None = None,
) -> bool:
    """Return True if the existing *path* is one that *pattern* expands to.

    No directory is listed: *path* is canonicalized and compared segment
    by segment against the pattern.  A relative *path* is made absolute
    when the pattern is absolute; an absolute *path* never matches a
    relative pattern.

    Raises:
        InvalidPatternError: If a ``..`` segment follows a wildcard segment.
    """
    fs = fs or LocalFS()
    prefix, tail = parse_pattern(pattern, fs=fs)
    matchers = [compile_segment(seg, pattern) for seg in tail]
    if not fs.exists(path):
        return False

    literal = split_segments(fs.canonicalize(prefix))
    if literal[:1] == [ROOT] and not path.startswith("/"):
        path = fs.absolute(path)
    candidate = split_segments(fs.canonicalize(path))

    if (candidate[:1] == [ROOT]) != (literal[:1] == [ROOT]):
        return False
    if len(candidate) != len(literal) + len(tail):
        return False
    if candidate[:len(literal)] != literal:
        return False
    for seg, matcher, name in zip(tail, matchers, candidate[len(literal):]):
        if not _is_visible(seg, name, include_dotfiles):
            return False
        if not matcher.match(name):
            return False
    return True
