"""Sync engine: reconciles a GridCache with the Sheets API.

- reload(): fetch sheet properties and the full value range, then replace
  the cache wholesale
- save(): send pending metadata and pending cell edits as two independent
  batched requests
- synchronize(): save() followed by reload()

Request and response shapes are built and parsed by the module-level
functions so they can be tested without a transport.
"""

from __future__ import annotations

import urllib.parse
from collections.abc import Iterator, Sequence
from typing import Any

from loguru import logger

from sheetgrid.address import CellAddress, a1_range, escape_sheet_title
from sheetgrid.config import SHEETS_API_BASE
from sheetgrid.exceptions import MalformedResponseError, UnknownLayoutError
from sheetgrid.grid import GridCache
from sheetgrid.transport import Transport

SHEET_PROPERTIES_FIELDS = "title,gridProperties(rowCount,columnCount)"
ROWS = "ROWS"
COLUMNS = "COLUMNS"


class SyncEngine:
    """Moves data between one worksheet's GridCache and the server.

    The engine keeps no state of its own besides the identifiers needed to
    build URLs. It never catches transport errors.
    """

    def __init__(
        self,
        transport: Transport,
        spreadsheet_id: str,
        sheet_id: int,
        grid: GridCache,
        *,
        sheets_api_base: str = SHEETS_API_BASE,
        max_cells_per_request: int | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            transport: Transport used for every request
            spreadsheet_id: The spreadsheet (document) identifier
            sheet_id: The numeric sheetId of the worksheet
            grid: Cache owned by the worksheet
            sheets_api_base: Base URL of the spreadsheets collection
            max_cells_per_request: Chunk size for value updates, None for a
                single request
        """
        if max_cells_per_request is not None and max_cells_per_request <= 0:
            raise ValueError("max_cells_per_request must be positive or None")
        self._transport = transport
        self._spreadsheet_id = spreadsheet_id
        self._sheet_id = sheet_id
        self._grid = grid
        self._api_base = sheets_api_base.rstrip("/")
        self._max_cells_per_request = max_cells_per_request
        self._log = logger.bind(spreadsheet_id=spreadsheet_id, sheet_id=sheet_id)

    # -- URLs --

    @property
    def metadata_url(self) -> str:
        return f"{self._api_base}/{self._spreadsheet_id}"

    @property
    def batch_update_url(self) -> str:
        return f"{self._api_base}/{self._spreadsheet_id}:batchUpdate"

    @property
    def batch_values_url(self) -> str:
        return f"{self._api_base}/{self._spreadsheet_id}/values:batchUpdate"

    def values_url(self, title: str) -> str:
        quoted = urllib.parse.quote(escape_sheet_title(title), safe="")
        return f"{self._api_base}/{self._spreadsheet_id}/values/{quoted}"

    # -- Operations --

    def reload(self) -> None:
        """Replace the cache with the server's current state.

        Unsaved local edits are discarded. Callers that care should check
        GridCache.is_dirty() first.

        Raises:
            MalformedResponseError: If the sheet properties or value range
                cannot be interpreted
            UnknownLayoutError: If majorDimension is not ROWS or COLUMNS
        """
        metadata = self._transport.request(
            "GET",
            self.metadata_url,
            params={"includeGridData": "false", "fields": "sheets.properties"},
        )
        title, row_count, column_count = parse_sheet_properties(
            metadata, self._sheet_id
        )

        value_range = self._transport.request(
            "GET",
            self.values_url(title),
            params={
                "valueRenderOption": "UNFORMATTED_VALUE",
                "dateTimeRenderOption": "FORMATTED_STRING",
            },
        )
        entries = parse_value_range(value_range)

        self._grid.replace_all(entries, row_count, column_count, title)
        self._log.debug(
            "Reloaded '{}' ({}x{} declared, {} cells)",
            title,
            row_count,
            column_count,
            len(entries),
        )

    def save(self) -> bool:
        """Send pending changes to the server.

        Metadata (title and declared size) is sent first so that a rename or
        grid growth is in place before values are written into it.

        Returns:
            True if at least one request was sent
        """
        sent = False

        if self._grid.meta_modified:
            body = build_sheet_properties_request(
                self._sheet_id,
                self._grid.title,
                self._grid.declared_rows,
                self._grid.declared_cols,
            )
            self._transport.request("POST", self.batch_update_url, json=body)
            self._grid.clear_meta_modified()
            sent = True
            self._log.debug(
                "Saved sheet properties: '{}' {}x{}",
                self._grid.title,
                self._grid.declared_rows,
                self._grid.declared_cols,
            )

        if self._grid.is_dirty():
            pending = self._grid.pending_values()
            batches = 0
            for chunk in _chunked(pending, self._max_cells_per_request):
                body = build_values_request(self._grid.title, chunk)
                self._transport.request("POST", self.batch_values_url, json=body)
                batches += 1
            self._grid.clear_dirty()
            sent = True
            self._log.debug("Saved {} cells in {} request(s)", len(pending), batches)

        return sent

    def synchronize(self) -> None:
        """Push local edits, then reload the authoritative server state."""
        self.save()
        self.reload()


# -- Request builders --


def build_sheet_properties_request(
    sheet_id: int, title: str, row_count: int, column_count: int
) -> dict[str, Any]:
    """Build a spreadsheets:batchUpdate body renaming and resizing a sheet."""
    return {
        "requests": [
            {
                "updateSheetProperties": {
                    "properties": {
                        "sheetId": sheet_id,
                        "title": title,
                        "gridProperties": {
                            "rowCount": row_count,
                            "columnCount": column_count,
                        },
                    },
                    "fields": SHEET_PROPERTIES_FIELDS,
                }
            }
        ]
    }


def build_values_request(
    title: str, cells: Sequence[tuple[CellAddress, str]]
) -> dict[str, Any]:
    """Build a values:batchUpdate body with one single-cell range per cell."""
    return {
        "valueInputOption": "USER_ENTERED",
        "data": [
            {
                "range": a1_range(title, addr),
                "majorDimension": ROWS,
                "values": [[value]],
            }
            for addr, value in cells
        ],
    }


# -- Response parsers --


def parse_sheet_properties(
    metadata: dict[str, Any], sheet_id: int
) -> tuple[str, int, int]:
    """Extract (title, rowCount, columnCount) of one sheet from metadata.

    Raises:
        MalformedResponseError: If the sheet or any expected field is missing
    """
    sheets = metadata.get("sheets") if isinstance(metadata, dict) else None
    if not isinstance(sheets, list):
        raise MalformedResponseError("spreadsheet metadata has no 'sheets' list")

    for sheet in sheets:
        props = sheet.get("properties") if isinstance(sheet, dict) else None
        if not isinstance(props, dict):
            continue
        # The API omits sheetId for the first sheet when it is 0.
        if props.get("sheetId", 0) != sheet_id:
            continue

        title = props.get("title")
        grid_props = props.get("gridProperties")
        if not isinstance(title, str):
            raise MalformedResponseError(f"sheet {sheet_id} has no title")
        if not isinstance(grid_props, dict):
            raise MalformedResponseError(f"sheet {sheet_id} has no gridProperties")
        row_count = grid_props.get("rowCount")
        column_count = grid_props.get("columnCount")
        if not _is_count(row_count) or not _is_count(column_count):
            raise MalformedResponseError(
                f"sheet {sheet_id} gridProperties lack rowCount/columnCount"
            )
        return title, row_count, column_count

    raise MalformedResponseError(f"sheet {sheet_id} not found in spreadsheet metadata")


def parse_value_range(value_range: dict[str, Any]) -> dict[CellAddress, str]:
    """Convert a ValueRange response into a sparse (row, col) -> value map.

    COLUMNS-major arrays list one column per inner array and are transposed.
    Empty values are not stored.

    Raises:
        MalformedResponseError: If values is not a list of lists
        UnknownLayoutError: If majorDimension is not ROWS or COLUMNS
    """
    if not isinstance(value_range, dict):
        raise MalformedResponseError("value range is not an object")

    values = value_range.get("values")
    if values is None:
        return {}
    if not isinstance(values, list):
        raise MalformedResponseError("'values' is not a list")

    major_dimension = value_range.get("majorDimension")
    if major_dimension not in (ROWS, COLUMNS):
        raise UnknownLayoutError(major_dimension)

    entries: dict[CellAddress, str] = {}
    for outer, line in enumerate(values, start=1):
        if not isinstance(line, list):
            raise MalformedResponseError(f"'values' entry {outer} is not a list")
        for inner, raw in enumerate(line, start=1):
            value = render_value(raw)
            if not value:
                continue
            if major_dimension == ROWS:
                entries[CellAddress(outer, inner)] = value
            else:
                entries[CellAddress(inner, outer)] = value
    return entries


def render_value(raw: Any) -> str:
    """Render an UNFORMATTED_VALUE cell as a string.

    Booleans use the spreadsheet spelling and integral numbers drop ".0".
    """
    if raw is None:
        return ""
    if isinstance(raw, bool):
        return "TRUE" if raw else "FALSE"
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    return str(raw)


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _chunked(
    items: Sequence[tuple[CellAddress, str]], size: int | None
) -> Iterator[Sequence[tuple[CellAddress, str]]]:
    if size is None:
        yield items
        return
    for start in range(0, len(items), size):
        yield items[start : start + size]
