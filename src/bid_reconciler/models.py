"""Pydantic models describing the outcome of a merge run."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from bid_reconciler.utils.exceptions import ReconcilerError


class MergeStage(str, Enum):
    """Stage of a merge run."""

    IDLE = "idle"
    INDEXING = "indexing"
    SUBSTITUTING = "substituting"
    NO_DATA = "no_data"
    READING_TARGET = "reading_target"
    BACKING_UP = "backing_up"
    APPLYING = "applying"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


class ChangeField(str, Enum):
    """Bid sheet field a cell update belongs to."""

    PRICE = "price"
    LEAD_TIME = "lead_time"


class VendorWarning(BaseModel):
    """A vendor file that could not be indexed."""

    model_config = ConfigDict(frozen=True)

    file_path: str = Field(..., description="Vendor workbook path")
    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")

    @classmethod
    def from_error(cls, file_path: str, error: ReconcilerError) -> "VendorWarning":
        """Build a warning from an indexing error."""
        return cls(
            file_path=file_path,
            error_code=error.error_code.value,
            message=error.message,
        )


class CellChange(BaseModel):
    """A single cell written to the bid workbook."""

    model_config = ConfigDict(frozen=True)

    sheet: str = Field(..., description="Bid sheet name")
    row: int = Field(..., ge=0, description="0-based row index")
    column: int = Field(..., ge=0, description="0-based column index")
    cell: str = Field(..., description="A1 style address of the cell")
    part_number: str = Field(..., description="Normalized part number key")
    field: ChangeField = Field(..., description="Which value was written")
    old_value: str | None = Field(
        default=None, description="Previous cell text, None when the row was short"
    )
    new_value: str = Field(..., description="Value written from the vendor index")


class MergeResult(BaseModel):
    """Counts and details produced by one merge run."""

    model_config = ConfigDict(frozen=True)

    found_keys: int = Field(
        ..., ge=0, description="Distinct bid part numbers found in either index"
    )
    updated_price_cells: int = Field(..., ge=0, description="Price cells written")
    updated_lead_time_cells: int = Field(
        ..., ge=0, description="Lead time cells written"
    )
    vendor_file_count: int = Field(default=0, ge=0, description="Vendor files given")
    backup_path: str | None = Field(
        default=None, description="Backup written before the bid file was touched"
    )
    saved: bool = Field(default=False, description="Whether the bid file was saved")
    warnings: tuple[VendorWarning, ...] = Field(
        default=(), description="Vendor files that could not be indexed"
    )
    changes: tuple[CellChange, ...] = Field(
        default=(), description="Every cell written, in scan order"
    )

    @property
    def updated_cells(self) -> int:
        """Total number of cells written."""
        return self.updated_price_cells + self.updated_lead_time_cells

    def summary(self) -> str:
        """Render the result the way the done dialog shows it."""
        return (
            f"{self.found_keys} matching PN(s) found from "
            f"{self.vendor_file_count} vendor file(s).\n"
            f"{self.updated_price_cells} price cell(s) updated.\n"
            f"{self.updated_lead_time_cells} lead time cell(s) updated."
        )
