"""Indexing and merge services."""

from bid_reconciler.services.change_log import changes_to_dataframe, write_change_log
from bid_reconciler.services.merge_engine import MergeEngine, VendorIndices
from bid_reconciler.services.row_indexer import (
    LEAD_TIME_SUBSTITUTIONS,
    RowIndexer,
    normalize_key,
    translate_lead_times,
)

__all__ = [
    "LEAD_TIME_SUBSTITUTIONS",
    "MergeEngine",
    "RowIndexer",
    "VendorIndices",
    "changes_to_dataframe",
    "normalize_key",
    "translate_lead_times",
    "write_change_log",
]
