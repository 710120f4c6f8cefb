"""Centralized exception classes for bid reconciliation.

This module provides a hierarchy of custom exceptions with error codes and
structured error details for consistent error handling throughout the
application.

Exception Hierarchy:
    ReconcilerError (base)
    ├── WorkbookError
    │   ├── WorkbookOpenError
    │   ├── SheetReadError
    │   └── UnsupportedFormatError
    └── MergeError
        ├── NoDataError
        ├── BackupError
        └── SaveError

Error Codes:
    All errors have a unique error code (e.g., "E1001") that can be used
    for programmatic error handling and documentation.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used in the application.

    Error codes are grouped by category:
    - E1xxx: Workbook/file errors
    - E2xxx: Merge run errors
    - E9xxx: Internal/unexpected errors
    """

    # Workbook errors (E1xxx)
    WORKBOOK_OPEN_FAILED = "E1001"
    SHEET_READ_FAILED = "E1002"
    UNSUPPORTED_FORMAT = "E1003"

    # Merge errors (E2xxx)
    MERGE_FAILED = "E2001"
    NO_DATA = "E2002"
    BACKUP_FAILED = "E2003"
    SAVE_FAILED = "E2004"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"


class ReconcilerError(Exception):
    """Base exception for all bid reconciliation errors.

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary for reporting.

        Returns:
            Dictionary with error information.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# Workbook Errors (E1xxx)
# =============================================================================


class WorkbookError(ReconcilerError):
    """Base class for workbook-related errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.WORKBOOK_OPEN_FAILED,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with file path information.

        Args:
            message: Error message.
            error_code: Error code.
            file_path: Path to the problematic workbook.
            details: Additional details.
        """
        details = details or {}
        if file_path:
            details["file_path"] = file_path
        super().__init__(message, error_code, details)
        self.file_path = file_path


class WorkbookOpenError(WorkbookError):
    """Raised when a path cannot be opened as an xlsx workbook.

    Covers missing files, corrupt containers and files of the wrong format.
    """

    def __init__(
        self,
        file_path: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        message = message or f"Cannot open workbook: {file_path}"
        super().__init__(
            message=message,
            error_code=ErrorCode.WORKBOOK_OPEN_FAILED,
            file_path=file_path,
            details=details,
        )


class SheetReadError(WorkbookError):
    """Raised when a single sheet of an otherwise valid workbook is unreadable."""

    def __init__(
        self,
        sheet_name: str,
        message: str | None = None,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with sheet information.

        Args:
            sheet_name: Name of the sheet that could not be read.
            message: Optional custom message.
            file_path: Optional workbook path.
            details: Additional details.
        """
        details = details or {}
        details["sheet_name"] = sheet_name
        message = message or f"Cannot read sheet: {sheet_name}"
        super().__init__(
            message=message,
            error_code=ErrorCode.SHEET_READ_FAILED,
            file_path=file_path,
            details=details,
        )
        self.sheet_name = sheet_name


class UnsupportedFormatError(WorkbookError):
    """Raised when a selected file does not carry the xlsx extension."""

    def __init__(
        self,
        file_path: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        message = message or f"Only xlsx workbooks are supported: {file_path}"
        super().__init__(
            message=message,
            error_code=ErrorCode.UNSUPPORTED_FORMAT,
            file_path=file_path,
            details=details,
        )


# =============================================================================
# Merge Errors (E2xxx)
# =============================================================================


class MergeError(ReconcilerError):
    """Base class for errors that abort a merge run."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.MERGE_FAILED,
        stage: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the stage the run failed in.

        Args:
            message: Error message.
            error_code: Error code.
            stage: Merge stage that was active when the run failed.
            details: Additional details.
        """
        details = details or {}
        if stage:
            details["stage"] = stage
        super().__init__(message, error_code, details)
        self.stage = stage


class NoDataError(MergeError):
    """Raised when no price or lead time data was found in the vendor files."""

    def __init__(
        self,
        vendor_file_count: int,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["vendor_file_count"] = vendor_file_count
        message = message or "No price or lead time data found from vendor file(s)"
        super().__init__(
            message=message,
            error_code=ErrorCode.NO_DATA,
            stage="no_data",
            details=details,
        )
        self.vendor_file_count = vendor_file_count


class BackupError(MergeError):
    """Raised when the pre-write backup of the bid workbook cannot be written.

    The bid workbook is never modified when this is raised.
    """

    def __init__(
        self,
        backup_path: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["backup_path"] = backup_path
        message = message or f"Error writing backup file: {backup_path}"
        super().__init__(
            message=message,
            error_code=ErrorCode.BACKUP_FAILED,
            stage="backing_up",
            details=details,
        )
        self.backup_path = backup_path


class SaveError(MergeError):
    """Raised when the updated bid workbook cannot be saved.

    The in-memory updates were already applied. The file on disk still holds
    its original content and the backup remains the last consistent copy.
    """

    def __init__(
        self,
        file_path: str,
        message: str | None = None,
        backup_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the bid and backup paths.

        Args:
            file_path: Path of the bid workbook that failed to save.
            message: Optional custom message.
            backup_path: Backup taken before the updates were applied.
            details: Additional details.
        """
        details = details or {}
        details["file_path"] = file_path
        if backup_path:
            details["backup_path"] = backup_path
        message = message or f"Error saving bid file: {file_path}"
        super().__init__(
            message=message,
            error_code=ErrorCode.SAVE_FAILED,
            stage="persisting",
            details=details,
        )
        self.file_path = file_path
        self.backup_path = backup_path
