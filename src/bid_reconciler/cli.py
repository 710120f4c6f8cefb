"""Command line entry point for running one merge."""

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from bid_reconciler.config import settings, validate_settings_on_startup
from bid_reconciler.services.change_log import write_change_log
from bid_reconciler.services.merge_engine import MergeEngine
from bid_reconciler.utils.exceptions import ReconcilerError, UnsupportedFormatError
from bid_reconciler.utils.logging import configure_logging, get_logger
from bid_reconciler.workbook import XLSX_EXTENSION

logger = get_logger(__name__)


def ensure_xlsx_path(path: str) -> Path:
    """Reject paths that do not end with the xlsx extension."""
    if not path.lower().endswith(XLSX_EXTENSION):
        raise UnsupportedFormatError(path)
    return Path(path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bid-reconciler",
        description=(
            "Search price (H) and lead time (L) by P/N (C) in vendor files and "
            "fill in price (K) and lead time (P) by P/N (F) in the bid file."
        ),
    )
    parser.add_argument("vendor_files", nargs="+", help="Vendor .xlsx files")
    parser.add_argument("--bid", required=True, help="Bid .xlsx file to update")
    parser.add_argument(
        "--change-log",
        default=None,
        help="Optional CSV path receiving every updated cell",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help=f"Logging level (default: {settings.log_level})",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run a merge and print its summary. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level or settings.log_level_int)
    validate_settings_on_startup(settings)

    try:
        vendor_paths = [ensure_xlsx_path(path) for path in args.vendor_files]
        bid_path = ensure_xlsx_path(args.bid)
        result = MergeEngine(settings).merge(vendor_paths, bid_path)
    except ReconcilerError as exc:
        logger.error(
            "Merge failed", exc_info=settings.debug, error_code=exc.error_code.value
        )
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1

    for warning in result.warnings:
        print(f"Warning: {warning.message}", file=sys.stderr)
    print(result.summary())
    if result.backup_path:
        print(f"Backup: {result.backup_path}")

    if args.change_log:
        write_change_log(result, args.change_log)

    return 0


if __name__ == "__main__":
    sys.exit(main())
