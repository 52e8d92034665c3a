"""Sparse in-memory cache of a worksheet's cells.

The cache tracks two independent kinds of pending change:

- Cell edits, recorded in the dirty set until a values update succeeds.
- Metadata edits (title, declared grid size), recorded by ``meta_modified``
  until a sheet properties update succeeds.

The declared size is the sheet's allocated grid as stored on the server. The
content extent is derived from the non-empty cells and memoized.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from sheetgrid.address import CellAddress


@dataclass(frozen=True)
class Extent:
    """Bounding box of the non-empty cells (0, 0 when there are none)."""

    rows: int
    cols: int


class GridCache:
    """Cell values, dirty tracking and extents for one worksheet.

    The cache never talks to the network. SyncEngine fills it via
    replace_all() and drains it via pending_values().
    """

    def __init__(self) -> None:
        self._cells: dict[CellAddress, str] = {}
        # Value before any server-side evaluation. Kept parallel to _cells;
        # the two only diverge once formula results are loaded separately.
        self._input_values: dict[CellAddress, str] = {}
        self._dirty: set[CellAddress] = set()
        self._extent: Extent | None = None
        self._title = ""
        self.declared_rows = 0
        self.declared_cols = 0
        self.meta_modified = False

    # -- Cell access --

    def get(self, addr: CellAddress) -> str:
        """Return the current value, or "" when the cell is absent."""
        return self._cells.get(addr, "")

    def input_value(self, addr: CellAddress) -> str:
        return self._input_values.get(addr, "")

    def set(self, addr: CellAddress, value: str) -> None:
        """Record a local edit.

        Writing past the declared size grows it (and marks the metadata as
        modified so the resize is saved before the values). The content
        extent memo is dropped when the cell switches between empty and
        non-empty.
        """
        previous = self._input_values.get(addr, "")
        self._cells[addr] = value
        self._input_values[addr] = value
        self._dirty.add(addr)

        if addr.row > self.declared_rows or addr.col > self.declared_cols:
            self.declared_rows = max(self.declared_rows, addr.row)
            self.declared_cols = max(self.declared_cols, addr.col)
            self.meta_modified = True

        if bool(previous) != bool(value):
            self._extent = None

    # -- Extents --

    def content_extent(self) -> Extent:
        """Return the memoized bounding box of non-empty cells."""
        if self._extent is None:
            self._extent = _compute_extent(self._input_values)
        return self._extent

    def set_declared_size(self, rows: int, cols: int) -> None:
        for name, value in (("rows", rows), ("cols", cols)):
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ValueError(f"Declared {name} must be an integer >= 0: {value!r}")
        self.declared_rows = rows
        self.declared_cols = cols
        self.meta_modified = True

    @property
    def title(self) -> str:
        return self._title

    @title.setter
    def title(self, title: str) -> None:
        self._title = title
        self.meta_modified = True

    # -- Dirty tracking --

    def is_dirty(self) -> bool:
        return bool(self._dirty)

    @property
    def dirty(self) -> frozenset[CellAddress]:
        return frozenset(self._dirty)

    def clear_dirty(self) -> None:
        self._dirty.clear()

    def clear_meta_modified(self) -> None:
        self.meta_modified = False

    def pending_values(self) -> list[tuple[CellAddress, str]]:
        """Return the dirty cells with their current values, row-major."""
        return [(addr, self._cells.get(addr, "")) for addr in sorted(self._dirty)]

    # -- Bulk replacement --

    def replace_all(
        self,
        entries: Mapping[CellAddress, str],
        declared_rows: int,
        declared_cols: int,
        title: str,
    ) -> None:
        """Discard everything and repopulate from a fresh server snapshot.

        A fresh load has no pending local delta, so dirty cells and
        metadata changes are dropped too.
        """
        self._cells = dict(entries)
        self._input_values = dict(entries)
        self._dirty = set()
        self._extent = None
        self._title = title
        self.declared_rows = declared_rows
        self.declared_cols = declared_cols
        self.meta_modified = False

    def __len__(self) -> int:
        return len(self._cells)


def _compute_extent(values: Mapping[CellAddress, str]) -> Extent:
    rows = 0
    cols = 0
    for addr, value in values.items():
        if value:
            rows = max(rows, addr.row)
            cols = max(cols, addr.col)
    return Extent(rows, cols)
