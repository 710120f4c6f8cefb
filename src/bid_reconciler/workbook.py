"""openpyxl-backed workbook handle used by the indexer and the merge engine.

All addressing is 0-indexed (row, column). Translation to A1 notation happens
here and nowhere else.
"""

from __future__ import annotations

import math
import os
import tempfile
import zipfile
from datetime import date, datetime, time
from pathlib import Path
from types import TracebackType
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.workbook.workbook import Workbook as OpenpyxlWorkbook

from bid_reconciler.utils.exceptions import SheetReadError, WorkbookOpenError

XLSX_EXTENSION = ".xlsx"


def cell_address(row: int, column: int) -> str:
    """Convert a 0-indexed (row, column) pair to an A1 style address."""
    if row < 0 or column < 0:
        raise ValueError(f"Cell coordinates must be non-negative: ({row}, {column})")
    return f"{get_column_letter(column + 1)}{row + 1}"


def parse_number(text: str) -> float | None:
    """Parse text as a finite float, returning None when it is not numeric.

    Digit separators and surrounding whitespace are not accepted.
    """
    if not isinstance(text, str) or "_" in text or text != text.strip():
        return None
    try:
        number = float(text)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def cell_text(value: Any) -> str:
    """Render a cell value the way it reads in the sheet."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def _trim_trailing_empty(cells: list[str]) -> list[str]:
    end = len(cells)
    while end and cells[end - 1] == "":
        end -= 1
    return cells[:end]


class Workbook:
    """An opened xlsx workbook.

    Editable handles keep a second ``data_only`` copy of the file so that rows
    are read as computed values while formulas survive a save.
    """

    def __init__(
        self,
        path: Path,
        book: OpenpyxlWorkbook,
        values_book: OpenpyxlWorkbook | None = None,
        read_only: bool = False,
    ) -> None:
        self.path = path
        self.read_only = read_only
        self._book = book
        self._values_book = values_book or book

    @classmethod
    def open(cls, path: str | Path, *, read_only: bool = False) -> Workbook:
        """Open the workbook at ``path``.

        Raises:
            WorkbookOpenError: If the file is missing or not a valid xlsx package.
        """
        file_path = Path(path)
        if not file_path.is_file():
            raise WorkbookOpenError(
                str(file_path), message=f"Workbook not found: {file_path}"
            )

        try:
            if read_only:
                book = load_workbook(filename=file_path, read_only=True, data_only=True)
                return cls(file_path, book, read_only=True)
            book = load_workbook(filename=file_path)
            values_book = load_workbook(filename=file_path, data_only=True)
        except (
            InvalidFileException,
            zipfile.BadZipFile,
            KeyError,
            ValueError,
            SyntaxError,
            OSError,
        ) as exc:
            raise WorkbookOpenError(
                str(file_path),
                message=f"Cannot open workbook {file_path}: {exc}",
            ) from exc

        return cls(file_path, book, values_book)

    def sheet_names(self) -> list[str]:
        """List sheet names in workbook order."""
        return list(self._book.sheetnames)

    def rows(self, sheet_name: str) -> list[list[str]]:
        """Read every row of a sheet as cell text.

        The list index is the 0-based physical row index. Trailing empty cells
        are trimmed, so row lengths vary.

        Raises:
            SheetReadError: If the sheet is unknown or has no cell grid.
        """
        if sheet_name not in self._values_book.sheetnames:
            raise SheetReadError(sheet_name, file_path=str(self.path))

        sheet = self._values_book[sheet_name]
        if not hasattr(sheet, "iter_rows"):
            raise SheetReadError(
                sheet_name,
                message=f"Sheet {sheet_name!r} has no cells to read",
                file_path=str(self.path),
            )

        if self.read_only:
            # Stale <dimension> refs would otherwise cut rows off.
            sheet.reset_dimensions()

        try:
            return [
                _trim_trailing_empty([cell_text(value) for value in row])
                for row in sheet.iter_rows(min_row=1, min_col=1, values_only=True)
            ]
        except (
            ValueError,
            TypeError,
            KeyError,
            SyntaxError,
            zipfile.BadZipFile,
            OSError,
        ) as exc:
            raise SheetReadError(
                sheet_name,
                message=f"Cannot read sheet {sheet_name!r}: {exc}",
                file_path=str(self.path),
            ) from exc

    def set_cell_numeric(
        self, sheet_name: str, row: int, column: int, text: str
    ) -> None:
        """Write ``text`` as a number cell.

        Raises:
            ValueError: If ``text`` is not a finite number.
        """
        number = parse_number(text)
        if number is None:
            raise ValueError(f"Not a numeric value: {text!r}")
        value: int | float = number
        try:
            value = int(text)
        except ValueError:
            pass
        self._writable_sheet(sheet_name)[cell_address(row, column)] = value

    def set_cell_string(
        self, sheet_name: str, row: int, column: int, text: str
    ) -> None:
        """Write ``text`` as a plain string cell."""
        cell = self._writable_sheet(sheet_name)[cell_address(row, column)]
        cell.value = text
        cell.data_type = "s"

    def save(self) -> None:
        """Persist the workbook over its source path.

        The workbook is written to a temporary file next to the source and
        then moved over it, so a failed write leaves the source untouched.
        """
        if self.read_only:
            raise ValueError(f"Workbook {self.path} was opened read-only")

        with tempfile.NamedTemporaryFile(
            dir=self.path.parent,
            prefix=f".{self.path.stem}.",
            suffix=XLSX_EXTENSION,
            delete=False,
        ) as temp_file:
            temp_path = Path(temp_file.name)

        try:
            self._book.save(temp_path)
            os.replace(temp_path, self.path)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise

    def save_as(self, path: str | Path) -> None:
        """Persist the workbook to ``path``."""
        if self.read_only:
            raise ValueError(f"Workbook {self.path} was opened read-only")
        self._book.save(Path(path))

    def close(self) -> None:
        """Release file handles held by read-only workbooks."""
        if self.read_only:
            self._book.close()

    def __enter__(self) -> Workbook:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _writable_sheet(self, sheet_name: str) -> Any:
        if self.read_only:
            raise ValueError(f"Workbook {self.path} was opened read-only")
        return self._book[sheet_name]
