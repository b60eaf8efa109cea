"""
Data Models Package

This package contains all Pydantic models used in the Earnings Ledger.
All data flowing through the ledger must conform to these schemas.
"""

from earnings_ledger.models.record import (
    DailyRecord,
    EarningSettings,
    LedgerSummary,
    RecordDraft,
    RecordPatch,
)
from earnings_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Record models
    "DailyRecord",
    "EarningSettings",
    "LedgerSummary",
    "RecordDraft",
    "RecordPatch",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
