"""Worksheet - a remote sheet presented as a 2D grid of string cells.

Reads are served from a local cache that is filled by one bulk fetch on
first access. Writes are recorded locally and only reach the server on
save() (or synchronize()).

Example:
    >>> ws = spreadsheet.worksheet_by_title("Sheet1")
    >>> ws[2, 1]
    'hoge'
    >>> ws["A2"] = "fuga"
    >>> ws.is_dirty()
    True
    >>> ws.save()
    True
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any

from sheetgrid.address import CellAddress, parse_cell_key
from sheetgrid.config import Settings, get_settings
from sheetgrid.grid import GridCache
from sheetgrid.sync import SyncEngine
from sheetgrid.transport import Transport

if TYPE_CHECKING:
    from sheetgrid.spreadsheet import Spreadsheet


class LoadState(Enum):
    UNLOADED = "unloaded"
    LOADED = "loaded"


class Worksheet:
    """A single worksheet (tab) of a spreadsheet.

    Cells are addressed either by A1 name or by 1-based (row, col):

        ws[2, 1] == ws["A2"]

    Not thread-safe: a Worksheet shared between threads must be guarded by
    the caller.
    """

    def __init__(
        self,
        transport: Transport,
        spreadsheet_id: str,
        sheet_id: int,
        *,
        settings: Settings | None = None,
        spreadsheet: Spreadsheet | None = None,
    ) -> None:
        """Initialize the worksheet. No request is made until first access.

        Args:
            transport: Transport used for every request
            spreadsheet_id: The spreadsheet (document) identifier
            sheet_id: The numeric sheetId of this worksheet
            settings: Optional settings, defaults to get_settings()
            spreadsheet: The Spreadsheet this worksheet was obtained from
        """
        settings = settings or get_settings()
        self._spreadsheet = spreadsheet
        self._spreadsheet_id = spreadsheet_id
        self._sheet_id = sheet_id
        self._grid = GridCache()
        self._state = LoadState.UNLOADED
        self._engine = SyncEngine(
            transport,
            spreadsheet_id,
            sheet_id,
            self._grid,
            sheets_api_base=settings.sheets_api_base,
            max_cells_per_request=settings.max_cells_per_request,
        )

    @property
    def spreadsheet(self) -> Spreadsheet | None:
        """The owning Spreadsheet, None for a directly constructed worksheet."""
        return self._spreadsheet

    @property
    def spreadsheet_id(self) -> str:
        return self._spreadsheet_id

    @property
    def sheet_id(self) -> int:
        return self._sheet_id

    @property
    def state(self) -> LoadState:
        return self._state

    def _ensure_loaded(self) -> None:
        if self._state is LoadState.UNLOADED:
            self.reload()

    # -- Cells --

    def get(self, key: Any) -> str:
        """Return the content of a cell, "" if it is empty.

        Args:
            key: "A1" style name, (row, col) pair or CellAddress
        """
        addr = parse_cell_key(key)
        self._ensure_loaded()
        return self._grid.get(addr)

    def set(self, key: Any, value: Any) -> None:
        """Update the content of a cell locally.

        The update is not sent to the server until save() is called.
        Writing outside the declared grid grows it.

        Args:
            key: "A1" style name, (row, col) pair or CellAddress
            value: New content; converted with str(), None clears the cell
        """
        addr = parse_cell_key(key)
        self._ensure_loaded()
        self._grid.set(addr, "" if value is None else str(value))

    def __getitem__(self, key: Any) -> str:
        return self.get(key)

    def __setitem__(self, key: Any, value: Any) -> None:
        self.set(key, value)

    def update_cells(
        self, top_row: int, left_col: int, values: Sequence[Sequence[Any]]
    ) -> None:
        """Update a rectangular block of cells.

        e.g. ws.update_cells(2, 3, [["1", "2"], ["3", "4"]]) sets C2, D2, C3, D3.
        """
        for y, line in enumerate(values):
            for x, value in enumerate(line):
                self.set((top_row + y, left_col + x), value)

    def rows(self, skip: int = 0) -> list[list[str]]:
        """Return a snapshot of the content as a list of rows.

        The result is 0-origin: ws.rows()[0][0] == ws[1, 1]. Rows run up to
        num_rows and every row has num_cols entries.

        Args:
            skip: Number of leading rows to leave out (e.g. a header row)
        """
        self._ensure_loaded()
        extent = self._grid.content_extent()
        return [
            [self._grid.get(CellAddress(row, col)) for col in range(1, extent.cols + 1)]
            for row in range(skip + 1, extent.rows + 1)
        ]

    # -- Extents and metadata --

    @property
    def num_rows(self) -> int:
        """Row number of the bottom-most non-empty row."""
        self._ensure_loaded()
        return self._grid.content_extent().rows

    @property
    def num_cols(self) -> int:
        """Column number of the right-most non-empty column."""
        self._ensure_loaded()
        return self._grid.content_extent().cols

    @property
    def max_rows(self) -> int:
        """Number of rows including empty rows."""
        self._ensure_loaded()
        return self._grid.declared_rows

    @max_rows.setter
    def max_rows(self, rows: int) -> None:
        self._ensure_loaded()
        self._grid.set_declared_size(rows, self._grid.declared_cols)

    @property
    def max_cols(self) -> int:
        """Number of columns including empty columns."""
        self._ensure_loaded()
        return self._grid.declared_cols

    @max_cols.setter
    def max_cols(self, cols: int) -> None:
        self._ensure_loaded()
        self._grid.set_declared_size(self._grid.declared_rows, cols)

    @property
    def title(self) -> str:
        """Title of the worksheet (shown as the tab label)."""
        self._ensure_loaded()
        return self._grid.title

    @title.setter
    def title(self, title: str) -> None:
        self._ensure_loaded()
        self._grid.title = title

    def is_dirty(self) -> bool:
        """Return True if there are cell edits which haven't been saved."""
        return self._grid.is_dirty()

    @property
    def dirty_cells(self) -> frozenset[CellAddress]:
        return self._grid.dirty

    # -- Synchronization --

    def reload(self) -> None:
        """Reload the content from the server, discarding unsaved changes."""
        self._engine.reload()
        self._state = LoadState.LOADED

    def save(self) -> bool:
        """Send pending title, size and cell changes to the server.

        Returns:
            True if anything was sent
        """
        return self._engine.save()

    def synchronize(self) -> None:
        """Call save() and then reload()."""
        self._engine.synchronize()
        self._state = LoadState.LOADED

    def __repr__(self) -> str:
        fields = [f"spreadsheet_id={self._spreadsheet_id!r}", f"sheet_id={self._sheet_id!r}"]
        if self._state is LoadState.LOADED:
            fields.append(f"title={self._grid.title!r}")
        return f"<{type(self).__name__} {', '.join(fields)}>"
