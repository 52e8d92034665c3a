"""Custom exceptions for sheetgrid.

Transport failures are defined in sheetgrid.transport and are never wrapped
by the classes below.
"""

from __future__ import annotations

from typing import Any


class SheetGridError(Exception):
    """Base exception for sheetgrid errors."""

    pass


class InvalidAddressError(SheetGridError, ValueError):
    """Raised when a cell name or coordinate cannot address a cell.

    This is always a caller bug: malformed A1 names ("1A", "A 1"),
    non-positive rows/columns, or keys of the wrong type.
    """

    def __init__(self, value: Any, reason: str) -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid cell address {value!r}: {reason}")


class SyncError(SheetGridError):
    """Base exception for responses the sync engine cannot interpret."""

    pass


class MalformedResponseError(SyncError):
    """Raised when a response is missing fields the engine relies on."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Malformed response: {reason}")


class UnknownLayoutError(SyncError):
    """Raised when a value range has an unrecognized majorDimension."""

    def __init__(self, major_dimension: Any) -> None:
        self.major_dimension = major_dimension
        super().__init__(
            f"Unknown major dimension: {major_dimension!r}. "
            "Expected 'ROWS' or 'COLUMNS'."
        )
