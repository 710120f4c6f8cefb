"""Structured logging utilities for bid reconciliation.

This module provides:
- Run ID tracking using contextvars for correlation across a merge run
- Structured logging with consistent format and metadata
- Performance metrics logging helpers
- Progress tracking for multi-file operations

Usage:
    from bid_reconciler.utils.logging import get_logger, LogContext

    logger = get_logger(__name__)

    with LogContext(run_id="abc-123", bid_file="bid.xlsx"):
        logger.info("Applying index", sheets=3)
"""

import logging
import time
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_run_id_var: ContextVar[str | None] = ContextVar("run_id", default=None)
_extra_context_var: ContextVar[dict[str, Any] | None] = ContextVar(
    "extra_context", default=None
)


def get_run_id() -> str | None:
    """Get the current merge run ID from context."""
    return _run_id_var.get()


def set_run_id(run_id: str | None) -> None:
    """Set the merge run ID in context.

    Args:
        run_id: The run ID to set, or None to clear.
    """
    _run_id_var.set(run_id)


def get_extra_context() -> dict[str, Any]:
    """Get additional context from context vars."""
    ctx = _extra_context_var.get()
    return ctx if ctx is not None else {}


def set_extra_context(context: dict[str, Any]) -> None:
    """Set additional context in context vars."""
    _extra_context_var.set(context)


@dataclass
class PerformanceMetrics:
    """Container for performance metrics of an operation.

    Attributes:
        operation: Name of the operation being measured.
        start_time: When the operation started.
        end_time: When the operation ended.
        duration_seconds: Duration in seconds.
        files_processed: Number of workbooks read.
        rows_scanned: Number of rows scanned.
        cells_updated: Number of cells written.
    """

    operation: str
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    end_time: datetime | None = None
    duration_seconds: float = 0.0
    files_processed: int = 0
    rows_scanned: int = 0
    cells_updated: int = 0

    def finish(self) -> None:
        """Mark the operation as complete and calculate duration."""
        self.end_time = datetime.now(UTC)
        self.duration_seconds = (self.end_time - self.start_time).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging, omitting zero counters."""
        result: dict[str, Any] = {
            "operation": self.operation,
            "duration_seconds": self.duration_seconds,
        }
        if self.files_processed > 0:
            result["files_processed"] = self.files_processed
        if self.rows_scanned > 0:
            result["rows_scanned"] = self.rows_scanned
        if self.cells_updated > 0:
            result["cells_updated"] = self.cells_updated
        return result


class StructuredLogFormatter(logging.Formatter):
    """Log formatter that prefixes records with the active run context."""

    def format(self, record: logging.LogRecord) -> str:
        prefix_parts = []
        run_id = get_run_id()
        if run_id:
            prefix_parts.append(f"run_id={run_id}")
        for key, value in get_extra_context().items():
            prefix_parts.append(f"{key}={value}")

        prefix = f"[{' '.join(prefix_parts)}] " if prefix_parts else ""

        original_msg = record.msg
        record.msg = f"{prefix}{original_msg}"
        result = super().format(record)
        record.msg = original_msg

        return result


class StructuredLogger:
    """Logger wrapper that appends structured key-value pairs to messages."""

    def __init__(self, name: str) -> None:
        self._logger = logging.getLogger(name)
        self._name = name

    @property
    def logger(self) -> logging.Logger:
        """Access the underlying Python logger."""
        return self._logger

    def _build_message(self, message: str, **kwargs: Any) -> str:
        if not kwargs:
            return message

        parts = [f"{k}={v}" for k, v in kwargs.items()]
        return f"{message} | {', '.join(parts)}"

    def debug(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(self._build_message(message, **kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(self._build_message(message, **kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(self._build_message(message, **kwargs))

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        self._logger.error(self._build_message(message, **kwargs), exc_info=exc_info)

    def log_performance(self, metrics: PerformanceMetrics) -> None:
        """Log performance metrics.

        Args:
            metrics: Performance metrics to log.
        """
        self.info(f"Performance: {metrics.operation}", **metrics.to_dict())

    def log_progress(
        self,
        stage: str,
        current: int,
        total: int,
        details: str | None = None,
    ) -> None:
        """Log progress for multi-step operations.

        Args:
            stage: Current processing stage.
            current: Current progress count.
            total: Total items to process.
            details: Optional additional details.
        """
        percentage = (current / total * 100) if total > 0 else 0
        kwargs: dict[str, Any] = {
            "current": current,
            "total": total,
            "percentage": f"{percentage:.1f}%",
        }
        if details:
            kwargs["details"] = details
        self.info(f"Progress: {stage}", **kwargs)

    def log_merge_result(
        self,
        found_keys: int,
        updated_price_cells: int,
        updated_lead_time_cells: int,
        warnings: int,
        saved: bool,
    ) -> None:
        """Log completion of a merge run.

        Runs that finished with vendor warnings are logged at WARNING level.
        """
        kwargs: dict[str, Any] = {
            "found_keys": found_keys,
            "updated_price_cells": updated_price_cells,
            "updated_lead_time_cells": updated_lead_time_cells,
            "saved": saved,
        }
        if warnings:
            kwargs["warnings"] = warnings

        level = logging.WARNING if warnings else logging.INFO
        self._logger.log(level, self._build_message("Merge completed", **kwargs))


class LogContext:
    """Context manager for adding temporary context to logs.

    Usage:
        with LogContext(run_id="123", bid_file="bid.xlsx"):
            logger.info("Processing...")  # Will include run_id and bid_file
    """

    def __init__(self, **kwargs: Any) -> None:
        self._new_context = kwargs
        self._old_context: dict[str, Any] = {}
        self._old_run_id: str | None = None

    def __enter__(self) -> "LogContext":
        self._old_context = get_extra_context().copy()
        self._old_run_id = get_run_id()

        context = dict(self._new_context)
        run_id = context.pop("run_id", None)
        if run_id is not None:
            set_run_id(run_id)

        merged = self._old_context.copy()
        merged.update(context)
        set_extra_context(merged)

        return self

    def __exit__(self, *args: Any) -> None:
        set_extra_context(self._old_context)
        set_run_id(self._old_run_id)


@contextmanager
def timed_operation(
    logger: StructuredLogger,
    operation: str,
) -> Generator[PerformanceMetrics, None, None]:
    """Context manager for timing operations.

    Usage:
        with timed_operation(logger, "merge") as metrics:
            metrics.files_processed = 3

        # Automatically logs: "Performance: merge | duration_seconds=..."

    Args:
        logger: Logger to use for output.
        operation: Name of the operation.

    Yields:
        PerformanceMetrics instance for tracking.
    """
    metrics = PerformanceMetrics(operation=operation)
    try:
        yield metrics
    finally:
        metrics.finish()
        logger.log_performance(metrics)


def configure_logging(level: int | str = logging.INFO) -> None:
    """Send records from every logger to stderr with the run context prefix.

    Args:
        level: Log level (int or string like "INFO").
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(StructuredLogFormatter(LOG_FORMAT))
    root_logger.addHandler(handler)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger for a module.

    Example:
        logger = get_logger(__name__)
        logger.info("Indexed vendor file", entries=120)
    """
    return StructuredLogger(name)


class ProgressTracker:
    """Helper for tracking and logging progress of multi-step operations.

    Usage:
        tracker = ProgressTracker(logger, "Indexing vendor files", total=3)
        for path in paths:
            index(path)
            tracker.update(details=path)
        tracker.complete()
    """

    def __init__(
        self,
        logger: StructuredLogger,
        stage: str,
        total: int,
        log_interval: int = 1,
    ) -> None:
        self._logger = logger
        self._stage = stage
        self._total = total
        self._current = 0
        self._log_interval = log_interval
        self._start_time = time.time()

    def update(self, increment: int = 1, details: str | None = None) -> None:
        """Update progress.

        Args:
            increment: Number of items completed.
            details: Optional details about current item.
        """
        self._current += increment
        if self._current % self._log_interval == 0 or self._current == self._total:
            self._logger.log_progress(
                self._stage,
                self._current,
                self._total,
                details,
            )

    def complete(self) -> float:
        """Mark progress as complete.

        Returns:
            Total duration in seconds.
        """
        duration = time.time() - self._start_time
        self._logger.info(
            f"Completed: {self._stage}",
            total_items=self._total,
            duration_seconds=f"{duration:.2f}",
        )
        return duration
