"""Merge vendor prices and lead times into a bid workbook.

A run indexes every vendor workbook by part number, translates lead time
markers, backs up the bid workbook and then fills its price and lead time
columns for every row whose part number is known.

Columns are fixed by convention (0-based):

    Vendor sheets: P/N in C, price in H, lead time in L
    Bid sheets:    P/N in F, price in K, lead time in P
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from uuid import uuid4

from bid_reconciler.config import Settings
from bid_reconciler.config import settings as default_settings
from bid_reconciler.models import (
    CellChange,
    ChangeField,
    MergeResult,
    MergeStage,
    VendorWarning,
)
from bid_reconciler.services.row_indexer import (
    RowIndexer,
    normalize_key,
    translate_lead_times,
)
from bid_reconciler.utils.exceptions import (
    BackupError,
    NoDataError,
    ReconcilerError,
    SaveError,
    SheetReadError,
    WorkbookOpenError,
)
from bid_reconciler.utils.logging import (
    LogContext,
    ProgressTracker,
    get_logger,
    timed_operation,
)
from bid_reconciler.workbook import Workbook, cell_address, parse_number

logger = get_logger(__name__)

VENDOR_KEY_COLUMN = 2
VENDOR_PRICE_COLUMN = 7
VENDOR_LEAD_TIME_COLUMN = 11

BID_KEY_COLUMN = 5
BID_PRICE_COLUMN = 10
BID_LEAD_TIME_COLUMN = 15


@dataclass
class VendorIndices:
    """Price and lead time indices accumulated over the vendor files."""

    prices: dict[str, str] = field(default_factory=dict)
    lead_times: dict[str, str] = field(default_factory=dict)
    warnings: list[VendorWarning] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.prices and not self.lead_times


@dataclass
class _ApplyOutcome:
    found: set[str] = field(default_factory=set)
    changes: list[CellChange] = field(default_factory=list)
    rows_scanned: int = 0

    def count(self, change_field: ChangeField) -> int:
        return sum(1 for change in self.changes if change.field == change_field)


def _price_differs(existing: str, price: str) -> bool:
    existing_number = parse_number(existing)
    if existing_number is not None:
        return existing_number != parse_number(price)
    return existing != price


class MergeEngine:
    """Run vendor-to-bid merges.

    One engine may run many merges in sequence; it is not safe to share
    between concurrent callers.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        indexer: RowIndexer | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._settings = settings or default_settings
        self._indexer = indexer or RowIndexer()
        self._clock = clock
        self._last_backup_at: datetime | None = None
        self.stage = MergeStage.IDLE

    def merge(
        self,
        vendor_file_paths: Sequence[str | Path],
        bid_file_path: str | Path,
    ) -> MergeResult:
        """Fill the bid workbook from the vendor workbooks.

        Args:
            vendor_file_paths: Vendor workbooks, in priority order (later wins).
            bid_file_path: Bid workbook to update in place.

        Returns:
            Counts of matched part numbers and updated cells.

        Raises:
            NoDataError: If no vendor file yielded any price or lead time.
            WorkbookOpenError: If the bid workbook cannot be opened.
            BackupError: If the backup cannot be written. The bid file is untouched.
            SaveError: If the updated bid workbook cannot be saved.
        """
        bid_path = Path(bid_file_path)
        with (
            LogContext(run_id=uuid4().hex[:12], bid_file=bid_path.name),
            timed_operation(logger, "merge") as metrics,
        ):
            try:
                indices = self.build_indices(vendor_file_paths)
                metrics.files_processed = len(vendor_file_paths)

                if indices.is_empty:
                    self.stage = MergeStage.NO_DATA
                    raise NoDataError(len(vendor_file_paths))

                self.stage = MergeStage.READING_TARGET
                with Workbook.open(bid_path) as workbook:
                    metrics.files_processed += 1
                    backup_path = self._backup(workbook)

                    self.stage = MergeStage.APPLYING
                    outcome = self._apply(workbook, indices.prices, indices.lead_times)
                    metrics.rows_scanned = outcome.rows_scanned
                    metrics.cells_updated = len(outcome.changes)

                    saved = False
                    if outcome.changes:
                        self.stage = MergeStage.PERSISTING
                        self._save(workbook, backup_path)
                        saved = True
            except NoDataError:
                raise
            except ReconcilerError:
                self.stage = MergeStage.FAILED
                raise

            self.stage = MergeStage.DONE
            result = MergeResult(
                found_keys=len(outcome.found),
                updated_price_cells=outcome.count(ChangeField.PRICE),
                updated_lead_time_cells=outcome.count(ChangeField.LEAD_TIME),
                vendor_file_count=len(vendor_file_paths),
                backup_path=str(backup_path),
                saved=saved,
                warnings=tuple(indices.warnings),
                changes=tuple(outcome.changes),
            )
            logger.log_merge_result(
                found_keys=result.found_keys,
                updated_price_cells=result.updated_price_cells,
                updated_lead_time_cells=result.updated_lead_time_cells,
                warnings=len(result.warnings),
                saved=saved,
            )
            return result

    def build_indices(self, vendor_file_paths: Sequence[str | Path]) -> VendorIndices:
        """Index every vendor file in order and translate lead time markers.

        A vendor file that cannot be opened is recorded as a warning and the
        remaining files are still indexed.
        """
        self.stage = MergeStage.INDEXING
        indices = VendorIndices()
        tracker = ProgressTracker(
            logger, "Indexing vendor files", len(vendor_file_paths)
        )

        for path in vendor_file_paths:
            try:
                indices.prices = self._indexer.index(
                    indices.prices, path, VENDOR_KEY_COLUMN, VENDOR_PRICE_COLUMN
                )
                indices.lead_times = self._indexer.index(
                    indices.lead_times, path, VENDOR_KEY_COLUMN, VENDOR_LEAD_TIME_COLUMN
                )
            except WorkbookOpenError as exc:
                logger.warning(
                    "Skipping vendor file", file=str(path), error=exc.message
                )
                indices.warnings.append(VendorWarning.from_error(str(path), exc))
            tracker.update(details=Path(path).name)
        tracker.complete()

        self.stage = MergeStage.SUBSTITUTING
        indices.lead_times = translate_lead_times(indices.lead_times)

        logger.info(
            "Vendor indices built",
            prices=len(indices.prices),
            lead_times=len(indices.lead_times),
            skipped_files=len(indices.warnings),
        )
        return indices

    def next_backup_path(self) -> Path:
        """Return a backup path whose timestamp is later than any issued before."""
        now = self._clock()
        if self._last_backup_at is not None and now <= self._last_backup_at:
            now = self._last_backup_at + timedelta(microseconds=1)
        self._last_backup_at = now

        stamp = now.strftime(self._settings.backup_timestamp_format)
        return self._settings.backup_path / f"backup.{stamp}.xlsx"

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _backup(self, workbook: Workbook) -> Path:
        self.stage = MergeStage.BACKING_UP
        backup_path = self.next_backup_path()
        try:
            workbook.save_as(backup_path)
        except (OSError, ValueError) as exc:
            raise BackupError(
                str(backup_path),
                message=f"Error writing backup file {backup_path}: {exc}",
            ) from exc

        logger.info("Bid file backed up", backup=str(backup_path))
        return backup_path

    def _save(self, workbook: Workbook, backup_path: Path) -> None:
        try:
            workbook.save()
        except (OSError, ValueError) as exc:
            raise SaveError(
                str(workbook.path),
                message=f"Error saving bid file {workbook.path}: {exc}",
                backup_path=str(backup_path),
            ) from exc

    def _apply(
        self,
        workbook: Workbook,
        prices: Mapping[str, str],
        lead_times: Mapping[str, str],
    ) -> _ApplyOutcome:
        outcome = _ApplyOutcome()

        for sheet_name in workbook.sheet_names():
            try:
                rows = workbook.rows(sheet_name)
            except SheetReadError as exc:
                logger.warning(
                    "Skipping unreadable bid sheet",
                    sheet=sheet_name,
                    error=exc.message,
                )
                continue

            for row_index, row in enumerate(rows):
                outcome.rows_scanned += 1
                if len(row) < BID_KEY_COLUMN + 1:
                    continue

                key = normalize_key(row[BID_KEY_COLUMN])
                if not key:
                    continue

                price = prices.get(key)
                if price is not None:
                    outcome.found.add(key)
                    existing = (
                        row[BID_PRICE_COLUMN] if len(row) > BID_PRICE_COLUMN else None
                    )
                    if parse_number(price) is not None and (
                        existing is None or _price_differs(existing, price)
                    ):
                        workbook.set_cell_numeric(
                            sheet_name, row_index, BID_PRICE_COLUMN, price
                        )
                        outcome.changes.append(
                            CellChange(
                                sheet=sheet_name,
                                row=row_index,
                                column=BID_PRICE_COLUMN,
                                cell=cell_address(row_index, BID_PRICE_COLUMN),
                                part_number=key,
                                field=ChangeField.PRICE,
                                old_value=existing,
                                new_value=price,
                            )
                        )

                lead_time = lead_times.get(key)
                if lead_time is not None:
                    outcome.found.add(key)
                    existing = (
                        row[BID_LEAD_TIME_COLUMN]
                        if len(row) > BID_LEAD_TIME_COLUMN
                        else None
                    )
                    if existing is None or existing != lead_time:
                        workbook.set_cell_string(
                            sheet_name, row_index, BID_LEAD_TIME_COLUMN, lead_time
                        )
                        outcome.changes.append(
                            CellChange(
                                sheet=sheet_name,
                                row=row_index,
                                column=BID_LEAD_TIME_COLUMN,
                                cell=cell_address(row_index, BID_LEAD_TIME_COLUMN),
                                part_number=key,
                                field=ChangeField.LEAD_TIME,
                                old_value=existing,
                                new_value=lead_time,
                            )
                        )

        logger.debug(
            "Bid rows scanned",
            rows=outcome.rows_scanned,
            found=len(outcome.found),
            changes=len(outcome.changes),
        )
        return outcome
