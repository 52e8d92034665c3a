"""Session - entry point tying a transport and settings together."""

from __future__ import annotations

from types import TracebackType

from sheetgrid.config import Settings, get_settings
from sheetgrid.spreadsheet import Spreadsheet
from sheetgrid.transport import HttpTransport, Transport


class Session:
    """Opens spreadsheets over one transport.

    Example:
        >>> with Session.from_access_token("ya29...") as session:
        ...     ss = session.spreadsheet_by_key("1BxiMVs0XRA5nFMdKvBdBZjgmUUqptlbs74OgvE2upms")
        ...     ws = ss.worksheet_by_title("Sheet1")
        ...     ws["B2"] = "done"
        ...     ws.save()
    """

    def __init__(self, transport: Transport, *, settings: Settings | None = None) -> None:
        self._transport = transport
        self._settings = settings or get_settings()

    @classmethod
    def from_access_token(
        cls, access_token: str, *, settings: Settings | None = None
    ) -> Session:
        """Create a session backed by an HttpTransport."""
        settings = settings or get_settings()
        transport = HttpTransport(access_token, timeout=settings.timeout)
        return cls(transport, settings=settings)

    @property
    def transport(self) -> Transport:
        return self._transport

    def spreadsheet_by_key(self, key: str) -> Spreadsheet:
        """Return the spreadsheet with the given ID (from its URL).

        No request is made until the spreadsheet is used.
        """
        return Spreadsheet(self._transport, key, settings=self._settings)

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> Session:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
