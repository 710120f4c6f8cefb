"""Change log of the cells written by a merge run."""

from datetime import datetime
from pathlib import Path

import pandas as pd

from bid_reconciler.models import MergeResult
from bid_reconciler.utils.logging import get_logger

logger = get_logger(__name__)

CHANGE_LOG_COLUMNS = [
    "sheet",
    "cell",
    "part_number",
    "field",
    "old_value",
    "new_value",
    "timestamp",
]


def changes_to_dataframe(
    result: MergeResult, timestamp: datetime | None = None
) -> pd.DataFrame:
    """Tabulate the cell changes of a merge result, one row per written cell."""
    stamp = (timestamp or datetime.now()).strftime("%m/%d/%Y %H:%M")
    records = [
        {
            "sheet": change.sheet,
            "cell": change.cell,
            "part_number": change.part_number,
            "field": change.field.value,
            "old_value": change.old_value,
            "new_value": change.new_value,
            "timestamp": stamp,
        }
        for change in result.changes
    ]
    return pd.DataFrame.from_records(records, columns=CHANGE_LOG_COLUMNS)


def write_change_log(
    result: MergeResult, path: str | Path, timestamp: datetime | None = None
) -> Path:
    """Write the change log of ``result`` as UTF-8 CSV and return its path."""
    output = Path(path)
    df = changes_to_dataframe(result, timestamp)
    df.to_csv(output, index=False, encoding="utf-8")
    logger.info("Change log written", path=str(output), rows=len(df))
    return output
