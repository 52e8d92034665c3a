"""Spreadsheet - a document and the worksheets it contains."""

from __future__ import annotations

from typing import Any

from sheetgrid.acl import Acl
from sheetgrid.config import Settings, get_settings
from sheetgrid.exceptions import MalformedResponseError
from sheetgrid.transport import Transport
from sheetgrid.worksheet import Worksheet


class Spreadsheet:
    """A spreadsheet document.

    Worksheets are listed from the spreadsheet metadata on every call to
    worksheets(); each returned Worksheet loads its own cells lazily.
    """

    def __init__(
        self,
        transport: Transport,
        spreadsheet_id: str,
        *,
        settings: Settings | None = None,
    ) -> None:
        self._transport = transport
        self._spreadsheet_id = spreadsheet_id
        self._settings = settings or get_settings()
        self._acl: Acl | None = None

    @property
    def id(self) -> str:
        return self._spreadsheet_id

    @property
    def key(self) -> str:
        return self._spreadsheet_id

    @property
    def metadata_url(self) -> str:
        return f"{self._settings.sheets_api_base}/{self._spreadsheet_id}"

    def _metadata(self) -> dict[str, Any]:
        return self._transport.request(
            "GET",
            self.metadata_url,
            params={
                "includeGridData": "false",
                "fields": "properties.title,sheets.properties",
            },
        )

    @property
    def title(self) -> str:
        """Title of the spreadsheet document."""
        props = self._metadata().get("properties")
        title = props.get("title") if isinstance(props, dict) else None
        if not isinstance(title, str):
            raise MalformedResponseError("spreadsheet metadata has no title")
        return title

    def _sheet_properties(self) -> list[tuple[int, str]]:
        """Return (sheetId, title) for every sheet, in tab order."""
        sheets = self._metadata().get("sheets")
        if not isinstance(sheets, list):
            raise MalformedResponseError(
                f"{self.metadata_url} did not return a list of sheets"
            )
        result = []
        for sheet in sheets:
            props = sheet.get("properties") if isinstance(sheet, dict) else None
            if not isinstance(props, dict) or not isinstance(props.get("title"), str):
                raise MalformedResponseError("sheet entry has no properties.title")
            # The API omits sheetId when it is 0.
            result.append((props.get("sheetId", 0), props["title"]))
        return result

    def _worksheet(self, sheet_id: int) -> Worksheet:
        return Worksheet(
            self._transport,
            self._spreadsheet_id,
            sheet_id,
            settings=self._settings,
            spreadsheet=self,
        )

    def worksheets(self) -> list[Worksheet]:
        """Return the worksheets of the spreadsheet in tab order."""
        return [self._worksheet(sheet_id) for sheet_id, _ in self._sheet_properties()]

    def worksheet_by_title(self, title: str) -> Worksheet | None:
        """Return the first worksheet with the given title, or None."""
        for sheet_id, sheet_title in self._sheet_properties():
            if sheet_title == title:
                return self._worksheet(sheet_id)
        return None

    def worksheet_by_id(self, sheet_id: int) -> Worksheet | None:
        """Return the worksheet with the given sheetId, or None."""
        for candidate, _ in self._sheet_properties():
            if candidate == sheet_id:
                return self._worksheet(sheet_id)
        return None

    @property
    def acl(self) -> Acl:
        """Access control list of the spreadsheet file."""
        if self._acl is None:
            self._acl = Acl(
                self._transport,
                self._spreadsheet_id,
                drive_api_base=self._settings.drive_api_base,
            )
        return self._acl

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self._spreadsheet_id!r}>"
