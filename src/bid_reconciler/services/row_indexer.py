"""Part number index built from vendor workbooks.

An index maps a normalized part number (lower-cased, trimmed) to the trimmed
text of a value column. Indexing is best-effort: unreadable sheets are skipped
and later rows overwrite earlier ones, in sheet order then row order.
"""

from collections.abc import Mapping
from pathlib import Path

from bid_reconciler.utils.exceptions import SheetReadError
from bid_reconciler.utils.logging import get_logger
from bid_reconciler.workbook import Workbook

logger = get_logger(__name__)

# Applied in order to lead time values only.
LEAD_TIME_SUBSTITUTIONS: tuple[tuple[str, str], ...] = (
    ("周", " wks"),
    ("现货", "In stock"),
)


def normalize_key(text: str) -> str:
    """Normalize a part number for matching."""
    return text.strip().lower()


def translate_lead_times(index: Mapping[str, str]) -> dict[str, str]:
    """Return a copy of a lead time index with Chinese markers in English."""
    translated: dict[str, str] = {}
    for key, value in index.items():
        for token, replacement in LEAD_TIME_SUBSTITUTIONS:
            value = value.replace(token, replacement)
        translated[key] = value
    return translated


class RowIndexer:
    """Scan workbooks into part number keyed indices."""

    def index(
        self,
        index: Mapping[str, str] | None,
        file_path: str | Path,
        key_column: int,
        value_column: int,
    ) -> dict[str, str]:
        """Extend ``index`` with the key/value columns of one workbook.

        The given mapping is not modified; a new dict holding the previous
        entries plus this workbook's rows is returned.

        Args:
            index: Entries accumulated so far, or None to start empty.
            file_path: Workbook to scan.
            key_column: 0-based column holding the part number.
            value_column: 0-based column holding the value.

        Returns:
            The accumulated index.

        Raises:
            WorkbookOpenError: If the workbook cannot be opened.
        """
        result = dict(index or {})
        min_length = max(key_column, value_column) + 1
        added = 0

        with Workbook.open(file_path, read_only=True) as workbook:
            for sheet_name in workbook.sheet_names():
                try:
                    rows = workbook.rows(sheet_name)
                except SheetReadError as exc:
                    logger.warning(
                        "Skipping unreadable sheet",
                        file=str(file_path),
                        sheet=sheet_name,
                        error=exc.message,
                    )
                    continue

                for row in rows:
                    if len(row) < min_length:
                        continue

                    key = normalize_key(row[key_column])
                    value = row[value_column].strip()
                    if key and value:
                        result[key] = value
                        added += 1

        logger.debug(
            "Indexed workbook",
            file=str(file_path),
            key_column=key_column,
            value_column=value_column,
            rows_indexed=added,
            entries=len(result),
        )
        return result
