"""
ChoirStats - Exceptions
"""


class StatisticsError(Exception):
    """Base class for statistics errors."""


class StatisticsStoreError(StatisticsError):
    """Raised when the persistence backend fails to read or write."""

    def __init__(self, operation: str, key: str, message: str):
        self.operation = operation
        self.key = key
        super().__init__(f"Statistics store {operation} failed for '{key}': {message}")


class InvalidMonthKeyError(StatisticsError, ValueError):
    """Raised for a malformed YYYY-MM key, month number or quarter number."""
