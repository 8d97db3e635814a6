"""Exceptions for segglob."""


class InvalidPatternError(ValueError):
    """Raised when a glob pattern cannot be resolved.

    The only rejected shape is a ``..`` segment after the first wildcard
    segment, e.g. ``src/*/../lib``.  ``..`` is fine inside the literal
    prefix (``../src/*.py``).
    """

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid glob pattern {pattern!r}: {reason}")
