"""Bid Reconciler - fill bid spreadsheets from vendor price and lead time sheets."""

from bid_reconciler.models import MergeResult
from bid_reconciler.services.merge_engine import MergeEngine

__all__ = ["MergeEngine", "MergeResult", "merge"]
__version__ = "0.1.0"


def merge(vendor_file_paths: list[str], bid_file_path: str) -> MergeResult:
    """Run one merge with the default settings."""
    return MergeEngine().merge(vendor_file_paths, bid_file_path)
