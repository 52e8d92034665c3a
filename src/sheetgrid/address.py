"""
Cell address conversion between A1 notation and 1-based coordinates.

Columns use bijective base-26: A=1 ... Z=26, AA=27, ZZ=702, AAA=703.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from sheetgrid.exceptions import InvalidAddressError

_A1_PATTERN = re.compile(r"([A-Za-z]+)([0-9]+)")


@dataclass(frozen=True, order=True)
class CellAddress:
    """A 1-based (row, col) cell coordinate."""

    row: int
    col: int

    def __post_init__(self) -> None:
        for name, value in (("row", self.row), ("col", self.col)):
            if not _is_int(value):
                raise InvalidAddressError(
                    (self.row, self.col), f"{name} must be an integer"
                )
            if value < 1:
                raise InvalidAddressError(
                    (self.row, self.col), f"{name} must be >= 1 (1-origin)"
                )

    @property
    def a1(self) -> str:
        return encode(self.row, self.col)

    def __str__(self) -> str:
        return self.a1


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def column_letter(col: int) -> str:
    """Convert a 1-based column number to A1 letter(s).

    Examples:
        1 -> A, 26 -> Z, 27 -> AA, 702 -> ZZ, 703 -> AAA
    """
    if not _is_int(col) or col < 1:
        raise InvalidAddressError(col, "column must be an integer >= 1")
    result = ""
    index = col - 1
    while True:
        result = chr(ord("A") + (index % 26)) + result
        index = index // 26 - 1
        if index < 0:
            break
    return result


def column_number(letters: str) -> int:
    """Convert A1 letter(s) to a 1-based column number.

    Examples:
        A -> 1, Z -> 26, AA -> 27, ZZ -> 702, AAA -> 703
    """
    if not isinstance(letters, str) or not letters.isascii() or not letters.isalpha():
        raise InvalidAddressError(letters, "column must be letters only")
    result = 0
    for char in letters.upper():
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result


def encode(row: int, col: int) -> str:
    """Convert 1-based (row, col) to A1 notation.

    Examples:
        (1, 1) -> A1, (2, 3) -> C2, (10, 27) -> AA10
    """
    if not _is_int(row) or row < 1:
        raise InvalidAddressError((row, col), "row must be an integer >= 1")
    return f"{column_letter(col)}{row}"


def decode(name: str) -> CellAddress:
    """Convert an A1 cell name to a CellAddress.

    Letters are case-insensitive. There must be no whitespace or separator
    between the column letters and the row digits.

    Examples:
        "A1" -> CellAddress(1, 1), "c2" -> CellAddress(2, 3)

    Raises:
        InvalidAddressError: If the name is not letters followed by digits,
            or the row is 0.
    """
    if not isinstance(name, str):
        raise InvalidAddressError(name, "cell name must be a string")
    match = _A1_PATTERN.fullmatch(name)
    if not match:
        raise InvalidAddressError(
            name,
            "cell name must be only letters followed by digits "
            "with no spaces in between",
        )
    letters, digits = match.groups()
    return CellAddress(int(digits), column_number(letters))


def parse_cell_key(key: Any) -> CellAddress:
    """Normalize the accepted ways of addressing a cell.

    Accepts an A1 string, a (row, col) pair of integers, or a CellAddress.
    """
    if isinstance(key, CellAddress):
        return key
    if isinstance(key, str):
        return decode(key)
    if isinstance(key, tuple) and len(key) == 2:
        return CellAddress(key[0], key[1])
    raise InvalidAddressError(
        key, "expected an A1 string or a (row, col) pair of integers"
    )


def escape_sheet_title(title: str) -> str:
    """Quote a sheet title for use in A1 notation ranges.

    The title is always wrapped in single quotes, with embedded quotes
    doubled. Unquoted titles that look like cell references ("A1", "Q1")
    would be read as cells of the first sheet.
    """
    escaped = title.replace("'", "''")
    return f"'{escaped}'"


def a1_range(title: str, address: CellAddress) -> str:
    """Build a single-cell range such as "'Sheet1'!B3"."""
    return f"{escape_sheet_title(title)}!{address.a1}"
