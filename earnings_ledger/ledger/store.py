"""
Ledger Store

The recalculation engine. Owns the ordered record set, the optional
initial advance ("anchor") record and the settings fallback, and keeps
every stored `remaining` consistent with the chain after each mutation.

DESIGN DECISION: Every operation is read-whole-set -> compute in memory
-> write-whole-set. Nothing is written until the complete new record set
has been computed, and each mutation is exactly one storage write. A
failure at any point leaves storage as it was.

CONCURRENCY: One logical writer. Mutations on a store instance are
serialised with an asyncio lock; separate processes writing to the same
backend are not coordinated.
"""

import asyncio
from datetime import date
from decimal import Decimal
from typing import Callable, Optional
from uuid import UUID

import structlog

from earnings_ledger.audit import AuditLogger
from earnings_ledger.ledger.arithmetic import Number, balance_delta, to_decimal
from earnings_ledger.ledger.chain import (
    cascade,
    chronological,
    find_anchor,
    first_index_on_or_after,
    inconsistent_records,
    insertion_index,
    starting_balance,
)
from earnings_ledger.models.record import (
    DailyRecord,
    EarningSettings,
    LedgerSummary,
    RecordDraft,
    RecordPatch,
)
from earnings_ledger.services.storage import BackendError, LedgerStorageInterface


logger = structlog.get_logger(__name__)


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class NotFoundError(LedgerError):
    """No record with the given id."""

    def __init__(self, record_id: UUID):
        self.record_id = record_id
        super().__init__(f"Record not found: {record_id}")


class AnchorExistsError(LedgerError):
    """An initial advance record already exists."""

    def __init__(self, existing: DailyRecord):
        self.existing = existing
        super().__init__(
            f"An initial advance record already exists (dated {existing.date.isoformat()})"
        )


def _index_of(chain: list[DailyRecord], record_id: UUID) -> int:
    for index, record in enumerate(chain):
        if record.id == record_id:
            return index
    raise NotFoundError(record_id)


class LedgerStore:
    """
    Maintains running balances over date-ordered daily records.

    Usage:
        store = LedgerStore(LocalFileLedgerStorage("ledger.json"))
        await store.create_anchor(Decimal("1000"), date(2024, 1, 1))
        record = await store.add_record(RecordDraft(date=..., total_earnings=...))
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        cascade_on_insert: bool = True,
        today: Optional[Callable[[], date]] = None,
    ):
        """
        Args:
            storage: Backend holding records and settings
            audit_logger: Where mutation events go; local-only logging if None
            cascade_on_insert: Recompute later records after add_record and
                create_anchor. False reproduces the legacy behaviour where
                only update and delete cascade.
            today: Clock for the default initial advance date
        """
        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        self._cascade_on_insert = cascade_on_insert
        self._today = today or date.today
        self._lock = asyncio.Lock()

        if not cascade_on_insert:
            logger.warning(
                "cascade_on_insert_disabled",
                detail="inserts and initial advance creation will not update later records",
            )

    @property
    def storage(self) -> LedgerStorageInterface:
        return self._storage

    # -------------------------------------------------------------------------
    # Storage round trips
    # -------------------------------------------------------------------------

    async def _load(
        self,
        operation: str,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[list[DailyRecord], EarningSettings]:
        try:
            records = await self._storage.read_all()
            settings = await self._storage.read_settings()
        except BackendError as e:
            await self._audit.log_storage_error(operation, str(e), correlation_id)
            raise
        return chronological(records), settings

    async def _write(
        self,
        chain: list[DailyRecord],
        operation: str,
        settings: Optional[EarningSettings] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        try:
            if settings is None:
                await self._storage.write_all(chain)
            else:
                await self._storage.write_ledger(chain, settings)
        except BackendError as e:
            await self._audit.log_storage_error(operation, str(e), correlation_id)
            raise

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def add_record(
        self,
        draft: RecordDraft,
        correlation_id: Optional[UUID] = None,
    ) -> DailyRecord:
        """
        Add a daily record.

        The record goes after any records already on its date. Its
        remaining balance starts from the resolved predecessor; later
        records are recomputed unless cascade_on_insert is off.
        """
        async with self._lock:
            chain, settings = await self._load("add_record", correlation_id)

            record = DailyRecord.from_draft(draft)
            index = insertion_index(chain, record.date)
            chain.insert(index, record)

            previous = starting_balance(chain, index, settings)
            chain[index] = record.model_copy(update={
                "remaining": balance_delta(previous, record.advance_used, record.total_earnings),
            })

            cascaded = 0
            if self._cascade_on_insert:
                cascaded = cascade(chain, index + 1, settings)

            await self._write(chain, "add_record", correlation_id=correlation_id)

        record = chain[index]
        logger.debug("record_added", record_id=str(record.id), cascaded=cascaded)
        await self._audit.log_record_added(record, cascaded, correlation_id)
        return record

    async def update_record(
        self,
        record_id: UUID,
        patch: RecordPatch,
        correlation_id: Optional[UUID] = None,
    ) -> DailyRecord:
        """
        Apply a patch and recompute the chain from the earlier of the
        record's old and new dates.

        A record whose date is unchanged keeps its place among same-date
        records; a record moved to another date goes after the records
        already there.

        Raises:
            NotFoundError: If no record has `record_id`
            ValidationError: If the patched record is invalid
        """
        async with self._lock:
            chain, settings = await self._load("update_record", correlation_id)

            old_index = _index_of(chain, record_id)
            original = chain.pop(old_index)
            updated = patch.apply_to(original)

            if updated.date == original.date:
                chain.insert(old_index, updated)
            else:
                chain.insert(insertion_index(chain, updated.date), updated)

            start = first_index_on_or_after(chain, min(original.date, updated.date))
            cascaded = cascade(chain, start, settings)

            await self._write(chain, "update_record", correlation_id=correlation_id)

        record = chain[_index_of(chain, record_id)]
        await self._audit.log_record_updated(
            record, sorted(patch.changes()), cascaded, correlation_id
        )
        return record

    async def delete_record(
        self,
        record_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Delete a record and recompute everything after it.

        Deleting the initial advance recomputes the whole chain from
        the settings advance balance.

        Raises:
            NotFoundError: If no record has `record_id`
        """
        async with self._lock:
            chain, settings = await self._load("delete_record", correlation_id)

            index = _index_of(chain, record_id)
            removed = chain.pop(index)

            start = 0 if removed.is_initial_advance else index
            cascaded = cascade(chain, start, settings)

            await self._write(chain, "delete_record", correlation_id=correlation_id)

        await self._audit.log_record_deleted(removed, cascaded, correlation_id)

    async def create_anchor(
        self,
        amount: Number,
        day: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> DailyRecord:
        """
        Create the initial advance record.

        Its remaining is the amount itself. Existing records are
        recomputed against it unless cascade_on_insert is off.

        Raises:
            AnchorExistsError: If an initial advance record already exists
            ValidationError: If the amount is negative
        """
        anchor = DailyRecord.initial_advance(to_decimal(amount), day or self._today())

        async with self._lock:
            chain, settings = await self._load("create_anchor", correlation_id)

            existing = find_anchor(chain)
            if existing is not None:
                raise AnchorExistsError(existing)

            chain.insert(insertion_index(chain, anchor.date), anchor)

            cascaded = 0
            if self._cascade_on_insert:
                cascaded = cascade(chain, 0, settings)

            await self._write(chain, "create_anchor", correlation_id=correlation_id)

        await self._audit.log_anchor_created(anchor, cascaded, correlation_id)
        return anchor

    async def update_settings(
        self,
        settings: EarningSettings,
        correlation_id: Optional[UUID] = None,
    ) -> EarningSettings:
        """
        Save settings. A changed advance balance recomputes the chain in
        the same write, since records without an anchor start from it.
        """
        async with self._lock:
            chain, current = await self._load("update_settings", correlation_id)

            changes = {
                key: value
                for key, value in settings.model_dump().items()
                if getattr(current, key) != value
            }

            cascaded = 0
            if "advance_balance" in changes:
                cascaded = cascade(chain, 0, settings)
                await self._write(chain, "update_settings", settings, correlation_id)
            else:
                try:
                    await self._storage.write_settings(settings)
                except BackendError as e:
                    await self._audit.log_storage_error("update_settings", str(e), correlation_id)
                    raise

        await self._audit.log_settings_updated(changes, cascaded, correlation_id)
        return settings

    async def recalculate(self, correlation_id: Optional[UUID] = None) -> int:
        """
        Recompute every remaining balance from scratch and persist the result.

        Returns:
            Number of records whose stored balance was wrong
        """
        async with self._lock:
            chain, settings = await self._load("recalculate", correlation_id)
            cascaded = cascade(chain, 0, settings)
            if cascaded:
                await self._write(chain, "recalculate", correlation_id=correlation_id)

        await self._audit.log_chain_recalculated(len(chain), cascaded, correlation_id)
        return cascaded

    async def clear_all(self, correlation_id: Optional[UUID] = None) -> None:
        """Remove every record and reset settings to defaults."""
        async with self._lock:
            chain, _ = await self._load("clear_all", correlation_id)
            try:
                await self._storage.clear()
            except BackendError as e:
                await self._audit.log_storage_error("clear_all", str(e), correlation_id)
                raise

        await self._audit.log_ledger_cleared(len(chain), correlation_id)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def list_records(self) -> list[DailyRecord]:
        """All records, newest first."""
        chain, _ = await self._load("list_records")
        return list(reversed(chain))

    async def get_record(self, record_id: UUID) -> Optional[DailyRecord]:
        chain, _ = await self._load("get_record")
        return next((r for r in chain if r.id == record_id), None)

    async def get_record_by_date(self, day: date) -> Optional[DailyRecord]:
        """The most recently added record on `day`, if any."""
        records = await self.list_records()
        return next((r for r in records if r.date == day), None)

    async def get_anchor(self) -> Optional[DailyRecord]:
        chain, _ = await self._load("get_anchor")
        return find_anchor(chain)

    async def get_records_by_date_range(self, start: date, end: date) -> list[DailyRecord]:
        """Records dated within [start, end], newest first."""
        records = await self.list_records()
        return [r for r in records if start <= r.date <= end]

    async def get_settings(self) -> EarningSettings:
        _, settings = await self._load("get_settings")
        return settings

    async def find_inconsistencies(self) -> list[DailyRecord]:
        """Stored records whose remaining disagrees with a from-scratch recompute."""
        chain, settings = await self._load("find_inconsistencies")
        return inconsistent_records(chain, settings)

    async def summarize(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> LedgerSummary:
        """
        Earnings totals over an optional inclusive date range.

        The initial advance counts toward the closing balance only.
        """
        chain, _ = await self._load("summarize")
        in_range = [
            r for r in chain
            if (date_from is None or r.date >= date_from)
            and (date_to is None or r.date <= date_to)
        ]
        earning_days = [r for r in in_range if not r.is_initial_advance]

        return LedgerSummary(
            date_from=date_from,
            date_to=date_to,
            record_count=len(earning_days),
            total_earnings=sum((r.total_earnings for r in earning_days), Decimal("0")),
            total_bookings=sum((r.bookings for r in earning_days), Decimal("0")),
            current_remaining=in_range[-1].remaining if in_range else None,
        )
