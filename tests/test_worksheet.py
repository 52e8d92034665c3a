"""Tests for the Worksheet facade."""

from __future__ import annotations

import pytest

from sheetgrid.address import CellAddress
from sheetgrid.config import Settings
from sheetgrid.exceptions import InvalidAddressError
from sheetgrid.transport import APIError
from sheetgrid.worksheet import LoadState, Worksheet
from tests.fakes import (
    BATCH_UPDATE_URL,
    BATCH_VALUES_URL,
    METADATA_URL,
    SPREADSHEET_ID,
    FakeTransport,
    script_sheet,
    values_url,
)


class TestLazyLoading:
    def test_construction_makes_no_request(
        self, worksheet: Worksheet, transport: FakeTransport
    ) -> None:
        assert worksheet.state is LoadState.UNLOADED
        assert transport.requests == []

    def test_first_read_loads_once(
        self, worksheet: Worksheet, transport: FakeTransport
    ) -> None:
        script_sheet(transport, [["hoge"]])

        assert worksheet[1, 1] == "hoge"
        assert worksheet["A1"] == "hoge"
        assert worksheet.num_rows == 1
        assert worksheet.state is LoadState.LOADED
        assert len(transport.requests) == 2

    def test_first_write_loads(self, worksheet: Worksheet, transport: FakeTransport) -> None:
        script_sheet(transport, [["a", "b"]])
        worksheet["C1"] = "c"
        assert worksheet.rows() == [["a", "b", "c"]]
        assert len(transport.requests) == 2

    @pytest.mark.parametrize(
        "accessor", ["title", "max_rows", "max_cols", "num_rows", "num_cols"]
    )
    def test_accessors_load(
        self, worksheet: Worksheet, transport: FakeTransport, accessor: str
    ) -> None:
        script_sheet(transport, [["a"]])
        getattr(worksheet, accessor)
        assert worksheet.state is LoadState.LOADED

    def test_is_dirty_does_not_load(
        self, worksheet: Worksheet, transport: FakeTransport
    ) -> None:
        assert worksheet.is_dirty() is False
        assert transport.requests == []

    def test_invalid_address_rejected_before_loading(
        self, worksheet: Worksheet, transport: FakeTransport
    ) -> None:
        with pytest.raises(InvalidAddressError):
            worksheet["1A"]
        with pytest.raises(InvalidAddressError):
            worksheet[0, 1] = "x"
        assert transport.requests == []


class TestCells:
    @pytest.fixture(autouse=True)
    def _sheet(self, transport: FakeTransport) -> None:
        script_sheet(transport, [["a", "b"], ["c", "d"], ["e", "f"]], rows=10, cols=10)

    def test_addressing_forms_agree(self, worksheet: Worksheet) -> None:
        assert worksheet[2, 1] == worksheet["A2"] == worksheet[CellAddress(2, 1)] == "c"
        assert worksheet.get("b3") == "f"

    def test_out_of_range_reads_empty(self, worksheet: Worksheet) -> None:
        assert worksheet[500, 500] == ""

    def test_set_marks_dirty(self, worksheet: Worksheet) -> None:
        worksheet[4, 2] = "new"
        assert worksheet[4, 2] == "new"
        assert worksheet.is_dirty()
        assert CellAddress(4, 2) in worksheet.dirty_cells

    def test_set_converts_values(self, worksheet: Worksheet) -> None:
        worksheet.set("A1", 3)
        worksheet.set("B1", None)
        assert worksheet["A1"] == "3"
        assert worksheet["B1"] == ""

    def test_save_clears_dirty(self, worksheet: Worksheet) -> None:
        worksheet["A4"] = "x"
        assert worksheet.save() is True
        assert not worksheet.is_dirty()

    def test_save_without_changes(
        self, worksheet: Worksheet, transport: FakeTransport
    ) -> None:
        worksheet.reload()
        transport.requests.clear()
        assert worksheet.save() is False
        assert transport.requests == []

    def test_update_cells(self, worksheet: Worksheet, transport: FakeTransport) -> None:
        worksheet.update_cells(2, 3, [["1", "2"], ["3", "4"]])
        assert worksheet["C2"] == "1"
        assert worksheet["D2"] == "2"
        assert worksheet["C3"] == "3"
        assert worksheet["D3"] == "4"
        assert worksheet.dirty_cells == frozenset(
            {CellAddress(2, 3), CellAddress(2, 4), CellAddress(3, 3), CellAddress(3, 4)}
        )

    def test_reload_discards_edits(self, worksheet: Worksheet) -> None:
        worksheet["A1"] = "local"
        worksheet.reload()
        assert worksheet["A1"] == "a"
        assert not worksheet.is_dirty()


class TestRows:
    def test_rows_snapshot(self, worksheet: Worksheet, transport: FakeTransport) -> None:
        script_sheet(transport, [["a", "b"], ["c", "d"], ["e", "f"]])
        assert worksheet.rows() == [["a", "b"], ["c", "d"], ["e", "f"]]

    def test_rows_skip(self, worksheet: Worksheet, transport: FakeTransport) -> None:
        script_sheet(transport, [["h1", "h2"], ["c", "d"], ["e", "f"]])
        result = worksheet.rows(1)
        assert result == [["c", "d"], ["e", "f"]]
        assert len(result) == 2
        assert all(len(row) == 2 for row in result)

    def test_rows_padded_to_content_width(
        self, worksheet: Worksheet, transport: FakeTransport
    ) -> None:
        script_sheet(transport, [["a"], ["", "", "c"]])
        assert worksheet.rows() == [["a", "", ""], ["", "", "c"]]

    def test_rows_is_a_snapshot(
        self, worksheet: Worksheet, transport: FakeTransport
    ) -> None:
        script_sheet(transport, [["a"]])
        snapshot = worksheet.rows()
        worksheet["A1"] = "changed"
        assert snapshot == [["a"]]

    def test_empty_sheet(self, worksheet: Worksheet, transport: FakeTransport) -> None:
        script_sheet(transport, None)
        assert worksheet.rows() == []
        assert (worksheet.num_rows, worksheet.num_cols) == (0, 0)


class TestExtents:
    def test_content_extent_follows_edits(
        self, worksheet: Worksheet, transport: FakeTransport
    ) -> None:
        script_sheet(transport, None, rows=10, cols=10)
        worksheet[3, 2] = "x"
        assert (worksheet.num_rows, worksheet.num_cols) == (3, 2)
        worksheet[3, 2] = ""
        assert (worksheet.num_rows, worksheet.num_cols) == (0, 0)

    def test_declared_size_grows_on_write(
        self, worksheet: Worksheet, transport: FakeTransport
    ) -> None:
        script_sheet(transport, None, rows=10, cols=10)
        worksheet[50, 1] = "x"
        assert worksheet.max_rows == 50
        assert worksheet.max_cols == 10

    def test_declared_size_setters(
        self, worksheet: Worksheet, transport: FakeTransport
    ) -> None:
        script_sheet(transport, None, rows=10, cols=10)
        worksheet.max_rows = 200
        worksheet.max_cols = 30
        transport.requests.clear()

        assert worksheet.save() is True
        assert [r.url for r in transport.requests] == [BATCH_UPDATE_URL]
        grid_props = transport.requests[0].json["requests"][0]["updateSheetProperties"][
            "properties"
        ]["gridProperties"]
        assert grid_props == {"rowCount": 200, "columnCount": 30}
        # Metadata edits are not cell edits.
        assert not worksheet.is_dirty()


class TestTitle:
    def test_title_from_server(self, worksheet: Worksheet, transport: FakeTransport) -> None:
        script_sheet(transport, None, title="Data")
        assert worksheet.title == "Data"

    def test_rename_then_write_uses_new_title(
        self, worksheet: Worksheet, transport: FakeTransport
    ) -> None:
        script_sheet(transport, None)
        worksheet.title = "Q1 Sales"
        worksheet["B2"] = "x"
        transport.requests.clear()

        worksheet.save()
        assert [r.url for r in transport.requests] == [BATCH_UPDATE_URL, BATCH_VALUES_URL]
        assert transport.requests[1].json["data"][0]["range"] == "'Q1 Sales'!B2"


class TestSynchronize:
    def test_synchronize_saves_then_reloads(
        self, worksheet: Worksheet, transport: FakeTransport
    ) -> None:
        script_sheet(transport, [["=1+1"]])
        worksheet["A1"] = "=1+1"
        transport.requests.clear()

        worksheet.synchronize()
        assert [(r.method, r.url) for r in transport.requests] == [
            ("POST", BATCH_VALUES_URL),
            ("GET", METADATA_URL),
            ("GET", values_url("Sheet1")),
        ]
        assert not worksheet.is_dirty()

    def test_synchronize_on_unloaded_sheet_loads(
        self, worksheet: Worksheet, transport: FakeTransport
    ) -> None:
        script_sheet(transport, [["a"]])
        worksheet.synchronize()
        assert worksheet.state is LoadState.LOADED
        assert [r.method for r in transport.requests] == ["GET", "GET"]

    def test_failed_save_skips_reload(
        self, worksheet: Worksheet, transport: FakeTransport
    ) -> None:
        script_sheet(transport, [["a"]])
        worksheet["A1"] = "b"
        transport.set_responses("POST", BATCH_VALUES_URL, APIError("boom", 500))
        transport.requests.clear()

        with pytest.raises(APIError):
            worksheet.synchronize()
        assert [r.method for r in transport.requests] == ["POST"]
        assert worksheet.is_dirty()
        assert worksheet["A1"] == "b"

    def test_standalone_worksheet_has_no_spreadsheet(self, worksheet: Worksheet) -> None:
        assert worksheet.spreadsheet is None


class TestSettings:
    def test_chunk_size_from_settings(self, transport: FakeTransport) -> None:
        settings = Settings(_env_file=None, max_cells_per_request=1)
        worksheet = Worksheet(transport, SPREADSHEET_ID, 0, settings=settings)
        script_sheet(transport, None)
        worksheet["A1"] = "1"
        worksheet["A2"] = "2"
        transport.requests.clear()

        worksheet.save()
        assert len(transport.requests_to("POST", BATCH_VALUES_URL)) == 2

    def test_repr(self, worksheet: Worksheet, transport: FakeTransport) -> None:
        assert repr(worksheet) == "<Worksheet spreadsheet_id='ss1', sheet_id=0>"
        script_sheet(transport, None)
        worksheet.reload()
        assert "title='Sheet1'" in repr(worksheet)
