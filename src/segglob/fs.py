"""Filesystem collaborators for the glob walker.

The walker only needs six primitives (see :class:`FileSystem`).
:class:`LocalFS` answers them from the host filesystem, :class:`GitTreeFS`
from one commit's tree in a git repository.
"""

from __future__ import annotations

import os
import posixpath
import stat
from typing import Protocol

from dulwich.objects import Commit, Tag, Tree, valid_hexsha
from dulwich.repo import Repo


class FileSystem(Protocol):
    """What the walker asks of a filesystem."""

    def list_directory(self, path: str) -> list[str]:
        """Return entry names in *path*; raise ``OSError`` if unreadable."""
        ...

    def exists(self, path: str) -> bool: ...

    def is_dir(self, path: str) -> bool: ...

    def home_directory(self) -> str: ...

    def canonicalize(self, path: str) -> str:
        """Resolve ``.`` and ``..`` components of *path*."""
        ...

    def absolute(self, path: str) -> str: ...


class LocalFS:
    """The host filesystem, via :mod:`os`.

    Listing order is whatever :func:`os.listdir` returns; subclass and
    sort in :meth:`list_directory` if callers need a stable order.
    """

    def list_directory(self, path: str) -> list[str]:
        return os.listdir(path)

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def home_directory(self) -> str:
        return os.path.expanduser("~")

    def canonicalize(self, path: str) -> str:
        return os.path.normpath(path)

    def absolute(self, path: str) -> str:
        return os.path.abspath(path)


class GitTreeFS:
    """Read-only view of the tree a git ref points at.

    Paths are relative to the tree root; a leading ``/`` also names the
    root.  Listing order is git tree order (sorted by name bytes).

    Args:
        repo: A dulwich :class:`~dulwich.repo.Repo` or a path to one.
        ref: Ref name (``"HEAD"``, ``"refs/heads/main"``), short branch or
            tag name (``"main"``, ``"v1"``), or hex SHA of a commit or tree.

    Raises:
        KeyError: If *ref* does not resolve to an object.
        ValueError: If *ref* does not peel to a tree.
    """

    def __init__(self, repo: Repo | str | os.PathLike[str], ref: str | bytes = "HEAD"):
        if not isinstance(repo, Repo):
            repo = Repo(os.fspath(repo))
        self._repo = repo
        self._tree_id = self._peel_to_tree(ref)

    def _peel_to_tree(self, ref: str | bytes) -> bytes:
        ref_bytes = ref.encode() if isinstance(ref, str) else ref
        store = self._repo.object_store
        sha = ref_bytes
        for candidate in (ref_bytes, b"refs/heads/" + ref_bytes, b"refs/tags/" + ref_bytes):
            try:
                sha = self._repo.refs[candidate]
            except KeyError:
                continue
            break
        if not valid_hexsha(sha) or sha not in store:
            raise KeyError(f"Unknown ref: {ref!r}")
        obj = store[sha]
        while isinstance(obj, Tag):
            obj = store[obj.object[1]]
        if isinstance(obj, Commit):
            obj = store[obj.tree]
        if not isinstance(obj, Tree):
            raise ValueError(f"Ref does not point at a tree: {ref!r}")
        return obj.id

    def _lookup(self, path: str) -> tuple[int, bytes] | None:
        """Return ``(mode, sha)`` for *path*, or None if it is absent."""
        parts = [p for p in posixpath.normpath(path).split("/") if p not in ("", ".")]
        if ".." in parts:
            return None
        mode, sha = stat.S_IFDIR, self._tree_id
        for part in parts:
            if not stat.S_ISDIR(mode):
                return None
            try:
                mode, sha = self._repo.object_store[sha][part.encode("utf-8", "surrogateescape")]
            except KeyError:
                return None
        return mode, sha

    def list_directory(self, path: str) -> list[str]:
        entry = self._lookup(path)
        if entry is None:
            raise FileNotFoundError(path)
        mode, sha = entry
        if not stat.S_ISDIR(mode):
            raise NotADirectoryError(path)
        tree = self._repo.object_store[sha]
        # Undecodable names round-trip through _lookup, as with os.listdir.
        return [e.path.decode("utf-8", "surrogateescape") for e in tree.iteritems()]

    def exists(self, path: str) -> bool:
        return self._lookup(path) is not None

    def is_dir(self, path: str) -> bool:
        entry = self._lookup(path)
        return entry is not None and stat.S_ISDIR(entry[0])

    def home_directory(self) -> str:
        raise FileNotFoundError("A git tree has no home directory")

    def canonicalize(self, path: str) -> str:
        return posixpath.normpath(path)

    def absolute(self, path: str) -> str:
        return posixpath.join("/", path)
