"""
Audit Logger

DESIGN DECISION: Every ledger mutation is logged.
This provides:
1. Complete traceability of balance changes
2. Debugging capability when a remaining balance looks wrong
3. User can see history of their edits

The audit logger:
- Is async to match the storage layer
- Never fails a ledger operation: audit persistence errors are logged and dropped
- Carries correlation ids so one form submit can be followed across events
"""

import logging
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from earnings_ledger.models.audit import AuditEvent, AuditEventBuilder
from earnings_ledger.models.record import DailyRecord
from earnings_ledger.services.storage import AuditStorageInterface


# JSON lines on stdout, one per event
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through stdlib logging at `level`."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, when configured (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Where events are appended (Sheets audit tab, memory).
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("earnings_ledger.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Writes the local log line first, then appends to storage if any.

        Returns False only when an attached storage rejected the event.
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_record_added(
        self,
        record: DailyRecord,
        cascaded: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.record_added(
            record_id=record.id,
            day=record.date.isoformat(),
            total_earnings=str(record.total_earnings),
            remaining=str(record.remaining),
            cascaded=cascaded,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_record_updated(
        self,
        record: DailyRecord,
        fields: list[str],
        cascaded: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.record_updated(
            record_id=record.id,
            fields=fields,
            remaining=str(record.remaining),
            cascaded=cascaded,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_record_deleted(
        self,
        record: DailyRecord,
        cascaded: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.record_deleted(
            record_id=record.id,
            day=record.date.isoformat(),
            was_anchor=record.is_initial_advance,
            cascaded=cascaded,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_anchor_created(
        self,
        record: DailyRecord,
        cascaded: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.anchor_created(
            record_id=record.id,
            day=record.date.isoformat(),
            amount=str(record.remaining),
            cascaded=cascaded,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_settings_updated(
        self,
        changes: dict[str, Any],
        cascaded: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.settings_updated(
            changes={key: str(value) for key, value in changes.items()},
            cascaded=cascaded,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_chain_recalculated(
        self,
        record_count: int,
        cascaded: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.chain_recalculated(
            record_count=record_count,
            cascaded=cascaded,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_ledger_cleared(
        self,
        record_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.ledger_cleared(
            record_count=record_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed storage read or write."""
        event = AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    New id shared by every event of one user action.

    Use this at the start of a new user action (e.g., a form submit).
    Pass it as `correlation_id` to each store call the action makes.
    """
    return uuid4()
