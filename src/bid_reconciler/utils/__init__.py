"""Utilities package for bid reconciliation.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
"""

from bid_reconciler.utils.exceptions import (
    BackupError,
    ErrorCode,
    MergeError,
    NoDataError,
    ReconcilerError,
    SaveError,
    SheetReadError,
    UnsupportedFormatError,
    WorkbookError,
    WorkbookOpenError,
)
from bid_reconciler.utils.logging import (
    LogContext,
    StructuredLogger,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)

__all__ = [
    # Exceptions
    "BackupError",
    "ErrorCode",
    "MergeError",
    "NoDataError",
    "ReconcilerError",
    "SaveError",
    "SheetReadError",
    "UnsupportedFormatError",
    "WorkbookError",
    "WorkbookOpenError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
]
