from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from bid_reconciler.config import Settings
from tests.fixtures import BID_HEADER, VENDOR_HEADER, write_workbook

Rows = list[list[Any]]


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings writing backups into a temporary directory."""
    backup_dir = tmp_path / "backups"
    backup_dir.mkdir()
    return Settings(_env_file=None, backup_dir=str(backup_dir))


@pytest.fixture
def make_vendor_file(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a numbered vendor workbook below a header row."""
    created: list[Path] = []

    def _make(*rows: list[Any], sheets: dict[str, Rows] | None = None) -> Path:
        path = tmp_path / f"vendor_{len(created) + 1}.xlsx"
        created.append(path)
        return write_workbook(path, sheets or {"Quote": [VENDOR_HEADER, *rows]})

    return _make


@pytest.fixture
def make_bid_file(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing bid.xlsx below a header row."""

    def _make(*rows: list[Any], sheets: dict[str, Rows] | None = None) -> Path:
        path = tmp_path / "bid.xlsx"
        return write_workbook(path, sheets or {"Bid": [BID_HEADER, *rows]})

    return _make
