"""
Audit Models for Earnings Ledger

Every mutation of the ledger is logged for audit purposes.
This provides:
1. Traceability of every balance change
2. Debugging information when a chain looks wrong
3. Ability to reconstruct history

Events are only ever appended; clear_all removes records, not history.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Records
    RECORD_ADDED = "record_added"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"
    ANCHOR_CREATED = "anchor_created"

    # Whole-ledger operations
    SETTINGS_UPDATED = "settings_updated"
    CHAIN_RECALCULATED = "chain_recalculated"
    LEDGER_CLEARED = "ledger_cleared"

    # Failures
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """How loudly an event is reported in the local log."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    One entry in the ledger history.

    Record events carry the record id as entity_id and the number of
    records whose remaining balance moved in `details`.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Event id"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="UTC time the event was emitted"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # What the event is about
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'record', 'settings')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="Record id for record events"
    )

    # Groups the events of one user action
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one form submission)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="One-line summary shown in the audit sheet"
    )

    # Amounts are stored as strings to keep Decimal precision
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Dates, amounts and recompute counts"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="False for maintenance and error events"
    )

    def to_log_dict(self) -> dict:
        """Flatten for structlog keyword arguments."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        One row of the audit worksheet, in AUDIT_COLUMNS order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            str(self.entity_id) if self.entity_id else "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Constructors for each ledger event, so descriptions and severities stay consistent.

    Usage:
        event = AuditEventBuilder.record_added(record_id, day, earnings, remaining, 0)
        event = AuditEventBuilder.anchor_created(record_id, day, amount, 3)
    """

    @staticmethod
    def record_added(
        record_id: UUID,
        day: str,
        total_earnings: str,
        remaining: str,
        cascaded: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_ADDED,
            entity_type="record",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Record added for {day}: earned {total_earnings}",
            details={
                "date": day,
                "total_earnings": total_earnings,
                "remaining": remaining,
                "records_recomputed": cascaded,
            },
            is_user_action=True,
        )

    @staticmethod
    def record_updated(
        record_id: UUID,
        fields: list[str],
        remaining: str,
        cascaded: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            entity_type="record",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Record updated ({', '.join(fields) or 'no fields'})",
            details={
                "fields": fields,
                "remaining": remaining,
                "records_recomputed": cascaded,
            },
            is_user_action=True,
        )

    @staticmethod
    def record_deleted(
        record_id: UUID,
        day: str,
        was_anchor: bool,
        cascaded: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            severity=AuditSeverity.WARNING if was_anchor else AuditSeverity.INFO,
            entity_type="record",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=(
                f"Initial advance record for {day} deleted"
                if was_anchor
                else f"Record for {day} deleted"
            ),
            details={
                "date": day,
                "was_initial_advance": was_anchor,
                "records_recomputed": cascaded,
            },
            is_user_action=True,
        )

    @staticmethod
    def anchor_created(
        record_id: UUID,
        day: str,
        amount: str,
        cascaded: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ANCHOR_CREATED,
            entity_type="record",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Initial advance of {amount} set on {day}",
            details={
                "date": day,
                "amount": amount,
                "records_recomputed": cascaded,
            },
            is_user_action=True,
        )

    @staticmethod
    def settings_updated(
        changes: dict[str, Any],
        cascaded: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_UPDATED,
            entity_type="settings",
            correlation_id=correlation_id,
            description=f"Settings updated ({', '.join(changes) or 'no changes'})",
            details={
                "changes": changes,
                "records_recomputed": cascaded,
            },
            is_user_action=True,
        )

    @staticmethod
    def chain_recalculated(
        record_count: int,
        cascaded: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CHAIN_RECALCULATED,
            severity=AuditSeverity.WARNING if cascaded else AuditSeverity.INFO,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Full recalculation: {cascaded} of {record_count} records changed",
            details={
                "record_count": record_count,
                "records_recomputed": cascaded,
            },
        )

    @staticmethod
    def ledger_cleared(
        record_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_CLEARED,
            severity=AuditSeverity.WARNING,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"All data cleared ({record_count} records)",
            details={
                "record_count": record_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={
                "operation": operation,
            },
            correlation_id=correlation_id,
        )
