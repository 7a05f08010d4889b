"""
Exception types shared across the scaffolding tool.
"""


class ScaffoldError(Exception):
    """Base exception for fatal scaffolding errors."""

    pass


class SourceError(ScaffoldError):
    """Exception raised when a source file edit cannot be applied."""

    pass
