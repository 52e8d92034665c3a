"""Shared test fixtures for sheetgrid."""

from __future__ import annotations

import pytest

from sheetgrid.config import Settings
from sheetgrid.worksheet import Worksheet
from tests.fakes import SPREADSHEET_ID, FakeTransport


@pytest.fixture
def settings() -> Settings:
    """Default settings, isolated from the environment and any .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def worksheet(transport: FakeTransport, settings: Settings) -> Worksheet:
    """An unloaded worksheet for sheetId 0 of the fake spreadsheet."""
    return Worksheet(transport, SPREADSHEET_ID, 0, settings=settings)
