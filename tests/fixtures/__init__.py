"""Helpers for building vendor and bid workbooks in tests.

Example usage:
    from tests.fixtures import bid_row, vendor_row, write_workbook

    write_workbook(tmp_path / "vendor.xlsx", {"Quote": [vendor_row("abc123", "12.50")]})
"""

import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

from openpyxl import Workbook

VENDOR_HEADER: list[Any] = [None, None, "型号（P/N)", None, None, None, None]
VENDOR_HEADER += ["合计（不含税）", None, None, None, "货期"]

BID_HEADER: list[Any] = [None] * 5 + ["International Part No."] + [None] * 4
BID_HEADER += ["Unit Price CNY"] + [None] * 4 + ["leadtime"]


def vendor_row(part_number: Any, price: Any = None, lead_time: Any = None) -> list[Any]:
    """Vendor sheet row: P/N in C, price in H, lead time in L."""
    row: list[Any] = [None] * 12
    row[2] = part_number
    row[7] = price
    row[11] = lead_time
    return row


def bid_row(part_number: Any, price: Any = None, lead_time: Any = None) -> list[Any]:
    """Bid sheet row: P/N in F, price in K, lead time in P."""
    row: list[Any] = [None] * 16
    row[5] = part_number
    row[10] = price
    row[15] = lead_time
    return row


def write_workbook(path: Path, sheets: dict[str, list[list[Any]]]) -> Path:
    """Save a workbook with one sheet per entry, rows appended from row 1."""
    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(name)
        for row in rows:
            ws.append(row)
    wb.save(path)
    return path


def rewrite_member(
    path: Path, member: str, transform: Callable[[bytes], bytes]
) -> Path:
    """Rewrite one part of a saved xlsx package, keeping every other part."""
    with zipfile.ZipFile(path) as source:
        parts = [(info, source.read(info)) for info in source.infolist()]

    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as target:
        for info, data in parts:
            if info.filename == member:
                data = transform(data)
            target.writestr(info, data)
    return path
