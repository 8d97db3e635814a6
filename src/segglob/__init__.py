from .exceptions import InvalidPatternError
from .fs import FileSystem, GitTreeFS, LocalFS
from .walk import glob, glob_match, iglob, parse_pattern
from ._pattern import ParsedPattern

__all__ = [
    "glob", "iglob", "glob_match", "parse_pattern", "ParsedPattern",
    "InvalidPatternError", "FileSystem", "LocalFS", "GitTreeFS",
]
