# lapse/exceptions.py
"""
Errors raised when the engine is used incorrectly.

Data problems (unresolved legislation ids, malformed keywords) are never
raised; they are logged and reported as diagnostics.
"""


class LapseError(Exception):
    """Base class for engine errors."""


class CorpusNotLoadedError(LapseError, RuntimeError):
    """Raised when the explorer is queried before a corpus has been loaded."""

    def __init__(self, operation: str = "query"):
        super().__init__(f"Cannot {operation}: no corpus loaded (call load() first)")
        self.operation = operation


class UnknownDimensionError(LapseError, ValueError):
    """Raised when filter options are requested for a dimension that does not exist."""

    def __init__(self, dimension: str):
        super().__init__(f"Unknown filter dimension: {dimension!r}")
        self.dimension = dimension
