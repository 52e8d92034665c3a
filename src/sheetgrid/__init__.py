"""sheetgrid - Google Sheets worksheets as locally cached, batch-saved grids.

A Worksheet behaves like a randomly addressable 2D grid of string cells.
Cells are loaded with one bulk request on first access and local edits are
sent back in batches on save().
"""

__version__ = "0.1.0"

from loguru import logger

from sheetgrid.acl import Acl, AclEntry
from sheetgrid.address import CellAddress, decode, encode
from sheetgrid.config import Settings, get_settings
from sheetgrid.exceptions import (
    InvalidAddressError,
    MalformedResponseError,
    SheetGridError,
    SyncError,
    UnknownLayoutError,
)
from sheetgrid.grid import Extent, GridCache
from sheetgrid.logging import setup_logging
from sheetgrid.session import Session
from sheetgrid.spreadsheet import Spreadsheet
from sheetgrid.sync import SyncEngine
from sheetgrid.transport import (
    APIError,
    AuthenticationError,
    HttpTransport,
    NotFoundError,
    Transport,
    TransportError,
)
from sheetgrid.worksheet import LoadState, Worksheet

# Silent unless the application opts in via setup_logging().
logger.disable("sheetgrid")

__all__ = [
    "APIError",
    "Acl",
    "AclEntry",
    "AuthenticationError",
    "CellAddress",
    "Extent",
    "GridCache",
    "HttpTransport",
    "InvalidAddressError",
    "LoadState",
    "MalformedResponseError",
    "NotFoundError",
    "Session",
    "Settings",
    "SheetGridError",
    "Spreadsheet",
    "SyncEngine",
    "SyncError",
    "Transport",
    "TransportError",
    "UnknownLayoutError",
    "Worksheet",
    "__version__",
    "decode",
    "encode",
    "get_settings",
    "setup_logging",
]
