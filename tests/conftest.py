"""Shared fixtures for segglob tests."""

import stat

import pytest
from dulwich.objects import Blob, Commit, Tree
from dulwich.repo import Repo

from segglob import LocalFS


class SortedFS(LocalFS):
    """LocalFS with a deterministic listing order."""

    def __init__(self, home=None):
        self.home = home
        self.listed = []

    def list_directory(self, path):
        self.listed.append(path)
        return sorted(super().list_directory(path))

    def home_directory(self):
        if self.home is not None:
            return self.home
        return super().home_directory()


@pytest.fixture
def sorted_fs():
    return SortedFS()


@pytest.fixture
def tree(tmp_path, monkeypatch):
    """A small tree, with the working directory set to its root."""
    (tmp_path / "main.rkt").write_text("main")
    (tmp_path / "readme.txt").write_text("readme")
    (tmp_path / ".hidden").write_text("dot")
    for d in ("test1", "test2"):
        (tmp_path / d).mkdir()
        for f in ("file1", "file2", "file3"):
            (tmp_path / d / f).write_text(f)
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.py").write_text("main")
    (tmp_path / "src" / "util.py").write_text("util")
    (tmp_path / "src" / ".config").write_text("cfg")
    (tmp_path / "src" / "sub").mkdir()
    (tmp_path / "src" / "sub" / "deep.txt").write_text("deep")
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "HEAD").write_text("ref")
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def home_fs(tree):
    """SortedFS whose home directory is the tree's ``src``."""
    return SortedFS(home=str(tree / "src"))


def _write_tree(store, files):
    """Store nested *files* ({name: bytes | dict}) and return the tree id."""
    tree = Tree()
    for name, value in files.items():
        if isinstance(value, dict):
            tree.add(name.encode(), stat.S_IFDIR, _write_tree(store, value))
        else:
            blob = Blob.from_string(value)
            store.add_object(blob)
            tree.add(name.encode(), 0o100644, blob.id)
    store.add_object(tree)
    return tree.id


@pytest.fixture
def git_repo(tmp_path):
    """A git repo whose ``refs/heads/main`` commit holds a small tree."""
    repo = Repo.init(str(tmp_path / "repo"), mkdir=True)
    tree_id = _write_tree(repo.object_store, {
        "readme.txt": b"readme",
        ".gitignore": b"*.pyc\n",
        "src": {
            "main.py": b"main",
            "util.py": b"util",
            ".config": b"cfg",
            "sub": {"deep.txt": b"deep"},
        },
        "docs": {"api.md": b"api", "guide.md": b"guide"},
    })
    commit = Commit()
    commit.tree = tree_id
    commit.author = commit.committer = b"Test <test@example.com>"
    commit.author_time = commit.commit_time = 0
    commit.author_timezone = commit.commit_timezone = 0
    commit.message = b"initial\n"
    repo.object_store.add_object(commit)
    repo.refs[b"refs/heads/main"] = commit.id
    yield repo
    repo.close()
