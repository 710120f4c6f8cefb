"""Tests for the part number row indexer."""

from __future__ import annotations

import re
from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest

from bid_reconciler.services.row_indexer import (
    LEAD_TIME_SUBSTITUTIONS,
    RowIndexer,
    normalize_key,
    translate_lead_times,
)
from bid_reconciler.utils.exceptions import SheetReadError, WorkbookOpenError
from bid_reconciler.workbook import Workbook
from tests.fixtures import VENDOR_HEADER, rewrite_member, vendor_row

PN, PRICE, LEAD = 2, 7, 11


@pytest.fixture
def indexer() -> RowIndexer:
    return RowIndexer()


class TestNormalizeKey:
    """Tests for part number normalization."""

    def test_trims_and_lowercases(self) -> None:
        assert normalize_key("  ABC-123 \t") == "abc-123"

    def test_blank(self) -> None:
        assert normalize_key("   ") == ""


class TestTranslateLeadTimes:
    """Tests for the lead time substitution pass."""

    def test_week_marker(self) -> None:
        assert translate_lead_times({"a": "4周"}) == {"a": "4 wks"}

    def test_in_stock_marker(self) -> None:
        assert translate_lead_times({"a": "现货"}) == {"a": "In stock"}

    def test_both_markers_and_plain_values(self) -> None:
        index = {"a": "现货/2周", "b": "6-8 weeks"}

        assert translate_lead_times(index) == {
            "a": "In stock/2 wks",
            "b": "6-8 weeks",
        }

    def test_input_not_modified(self) -> None:
        index = {"a": "4周"}
        translate_lead_times(index)
        assert index == {"a": "4周"}

    def test_substitutions_are_ordered_pairs(self) -> None:
        assert LEAD_TIME_SUBSTITUTIONS == (("周", " wks"), ("现货", "In stock"))


class TestRowIndexer:
    """Tests for RowIndexer.index."""

    def test_key_and_value_trimmed(
        self, indexer: RowIndexer, make_vendor_file: Callable[..., Path]
    ) -> None:
        path = make_vendor_file(vendor_row("  ABC123 ", " 12.50 "))

        index = indexer.index(None, path, PN, PRICE)

        assert index["abc123"] == "12.50"
        assert "  abc123 " not in index

    def test_header_row_is_indexed_like_any_row(
        self, indexer: RowIndexer, make_vendor_file: Callable[..., Path]
    ) -> None:
        path = make_vendor_file(vendor_row("abc123", "12.50"))

        index = indexer.index({}, path, PN, LEAD)

        assert index == {"型号（p/n)": "货期"}

    def test_rows_without_key_or_value_skipped(
        self, indexer: RowIndexer, make_vendor_file: Callable[..., Path]
    ) -> None:
        path = make_vendor_file(
            vendor_row("abc123", None, "4周"),
            vendor_row("   ", "5.00"),
            vendor_row("def456", "   ", "2周"),
            vendor_row("ghi789", 9.5),
        )

        index = indexer.index({}, path, PN, PRICE)

        assert "abc123" not in index
        assert "def456" not in index
        assert index["ghi789"] == "9.5"
        assert "" not in index

    def test_short_rows_skipped(
        self, indexer: RowIndexer, make_vendor_file: Callable[..., Path]
    ) -> None:
        path = make_vendor_file(vendor_row("abc123", "12.50"))

        index = indexer.index({}, path, PN, LEAD)

        assert "abc123" not in index

    def test_last_row_wins(
        self, indexer: RowIndexer, make_vendor_file: Callable[..., Path]
    ) -> None:
        path = make_vendor_file(
            vendor_row("ABC123", "10"),
            vendor_row("abc123", "11"),
        )

        assert indexer.index({}, path, PN, PRICE)["abc123"] == "11"

    def test_later_sheet_wins(
        self, indexer: RowIndexer, make_vendor_file: Callable[..., Path]
    ) -> None:
        path = make_vendor_file(
            sheets={
                "First": [vendor_row("abc123", "10")],
                "Second": [vendor_row("abc123", "20")],
            }
        )

        assert indexer.index({}, path, PN, PRICE)["abc123"] == "20"

    def test_accumulates_across_files(
        self, indexer: RowIndexer, make_vendor_file: Callable[..., Path]
    ) -> None:
        first = make_vendor_file(vendor_row("abc123", "10"), vendor_row("x1", "1"))
        second = make_vendor_file(vendor_row("abc123", "20"), vendor_row("x2", "2"))

        index = indexer.index({}, first, PN, PRICE)
        index = indexer.index(index, second, PN, PRICE)

        assert index["abc123"] == "20"
        assert index["x1"] == "1"
        assert index["x2"] == "2"

    def test_given_index_not_mutated(
        self, indexer: RowIndexer, make_vendor_file: Callable[..., Path]
    ) -> None:
        path = make_vendor_file(vendor_row("abc123", "20"))
        existing = {"abc123": "10", "old": "1"}

        index = indexer.index(existing, path, PN, PRICE)

        assert existing == {"abc123": "10", "old": "1"}
        assert index["abc123"] == "20"
        assert index["old"] == "1"

    def test_empty_workbook_gives_empty_index(
        self, indexer: RowIndexer, make_vendor_file: Callable[..., Path]
    ) -> None:
        path = make_vendor_file(sheets={"Empty": []})

        assert indexer.index(None, path, PN, PRICE) == {}

    def test_missing_file(self, indexer: RowIndexer, tmp_path: Path) -> None:
        with pytest.raises(WorkbookOpenError):
            indexer.index({}, tmp_path / "missing.xlsx", PN, PRICE)

    def test_unreadable_sheet_skipped(
        self, indexer: RowIndexer, make_vendor_file: Callable[..., Path]
    ) -> None:
        path = make_vendor_file(
            sheets={
                "Broken": [vendor_row("abc123", "10")],
                "Good": [VENDOR_HEADER, vendor_row("def456", "20")],
            }
        )
        good_rows = [["", "", "def456", "", "", "", "", "20"]]

        with patch.object(
            Workbook,
            "rows",
            side_effect=[SheetReadError("Broken"), good_rows],
        ):
            index = indexer.index({}, path, PN, PRICE)

        assert index == {"def456": "20"}

    def test_corrupt_sheet_skipped(
        self, indexer: RowIndexer, make_vendor_file: Callable[..., Path]
    ) -> None:
        """A sheet whose XML is cut short is skipped, the others are indexed."""
        path = make_vendor_file(
            sheets={
                "Good": [vendor_row("pn1", "1"), vendor_row("pn2", "2")],
                "Broken": [vendor_row(f"x{n}", str(n)) for n in range(50)],
            }
        )
        rewrite_member(
            path, "xl/worksheets/sheet2.xml", lambda xml: xml[: len(xml) // 2]
        )

        assert indexer.index({}, path, PN, PRICE) == {"pn1": "1", "pn2": "2"}

    def test_rows_past_stale_dimension_indexed(
        self, indexer: RowIndexer, make_vendor_file: Callable[..., Path]
    ) -> None:
        path = make_vendor_file(
            sheets={"Quote": [vendor_row(f"pn{n}", str(n)) for n in range(1, 6)]}
        )
        rewrite_member(
            path,
            "xl/worksheets/sheet1.xml",
            lambda xml: re.sub(rb'ref="[^"]*"', b'ref="A1:H1"', xml, count=1),
        )

        index = indexer.index({}, path, PN, PRICE)

        assert index == {f"pn{n}": str(n) for n in range(1, 6)}
