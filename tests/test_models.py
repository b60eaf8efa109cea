"""
Tests for Earnings Ledger models

Test strategy:
1. Unit tests for individual components (models, arithmetic, chain)
2. Store tests against in-memory and fake Sheets backends
3. No real API calls in tests
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from earnings_ledger.models.record import (
    DailyRecord,
    EarningSettings,
    RecordDraft,
    RecordPatch,
)
from earnings_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestRecordModels:
    """Tests for record-related Pydantic models."""

    def test_settings_defaults(self):
        """Test EarningSettings defaults match the entry form."""
        settings = EarningSettings()
        assert settings.base_pay == Decimal("200")
        assert settings.per_booking == Decimal("50")
        assert settings.advance_balance == 0

    def test_settings_reject_negative(self):
        with pytest.raises(ValidationError):
            EarningSettings(advance_balance=Decimal("-1"))

    def test_draft_parses_iso_date(self):
        """Test RecordDraft accepts YYYY-MM-DD strings."""
        draft = RecordDraft(date="2024-02-01", total_earnings="100")
        assert draft.date == date(2024, 2, 1)
        assert draft.total_earnings == Decimal("100")

    def test_draft_rejects_negative_earnings(self):
        with pytest.raises(ValidationError):
            RecordDraft(date="2024-02-01", total_earnings=Decimal("-5"))

    def test_draft_for_day(self):
        """Test the entry-form draft: inquiry pay is the base pay."""
        settings = EarningSettings(base_pay=Decimal("200"), per_booking=Decimal("50"))
        draft = RecordDraft.for_day(date(2024, 3, 4), 3, settings, notes="busy")
        assert draft.inquiry_pay == Decimal("200")
        assert draft.booking_pay == Decimal("150")
        assert draft.total_earnings == Decimal("350")
        assert draft.base_pay == Decimal("200")
        assert draft.advance_used == 0
        assert draft.notes == "busy"

    def test_record_from_draft_gets_identity(self):
        record = DailyRecord.from_draft(RecordDraft(date="2024-02-01"))
        assert record.id is not None
        assert record.created_at.tzinfo is not None
        assert record.remaining == 0
        assert record.is_initial_advance is False

    def test_initial_advance_record(self):
        """Test the anchor carries the amount as its remaining balance."""
        anchor = DailyRecord.initial_advance(Decimal("1000"), date(2024, 1, 1))
        assert anchor.is_initial_advance is True
        assert anchor.remaining == Decimal("1000")
        assert anchor.total_earnings == 0
        assert anchor.notes == "Initial Advance Amount"
        assert anchor.action == "Initial Advance"

    def test_initial_advance_cannot_carry_earnings(self):
        with pytest.raises(ValidationError, match="cannot have non-zero total_earnings"):
            DailyRecord(
                date=date(2024, 1, 1),
                total_earnings=Decimal("10"),
                is_initial_advance=True,
            )

    def test_remaining_may_be_negative(self):
        record = DailyRecord(date=date(2024, 1, 1), remaining=Decimal("-250"))
        assert record.remaining == Decimal("-250")


class TestRecordPatch:
    """Tests for RecordPatch."""

    def test_changes_only_lists_set_fields(self):
        patch = RecordPatch(total_earnings=Decimal("300"), notes="fixed")
        assert patch.changes() == {"total_earnings": Decimal("300"), "notes": "fixed"}

    def test_remaining_is_not_patchable(self):
        with pytest.raises(ValidationError):
            RecordPatch(remaining=Decimal("5"))

    def test_anchor_flag_is_not_patchable(self):
        with pytest.raises(ValidationError):
            RecordPatch(is_initial_advance=True)

    def test_apply_keeps_identity(self):
        record = DailyRecord(date=date(2024, 1, 2), total_earnings=Decimal("200"))
        patched = RecordPatch(date=date(2024, 1, 5)).apply_to(record)
        assert patched.id == record.id
        assert patched.created_at == record.created_at
        assert patched.date == date(2024, 1, 5)
        assert patched.total_earnings == Decimal("200")
        assert record.date == date(2024, 1, 2)

    def test_apply_to_anchor_validates(self):
        anchor = DailyRecord.initial_advance(Decimal("1000"), date(2024, 1, 1))
        with pytest.raises(ValidationError):
            RecordPatch(bookings=Decimal("2")).apply_to(anchor)

    def test_explicit_none_rejected(self):
        with pytest.raises(ValidationError, match="not set to None"):
            RecordPatch(date=None)
        with pytest.raises(ValidationError):
            RecordPatch(total_earnings=None)
        assert RecordPatch().changes() == {}

    def test_negative_initial_advance_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            DailyRecord.initial_advance(Decimal("-0.01"), date(2024, 1, 1))


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.RECORD_ADDED,
            description="Record added",
        )
        assert event.event_type == AuditEventType.RECORD_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.SETTINGS_UPDATED,
            description="Settings updated",
            details={"changes": {"base_pay": "250"}},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "settings_updated"
        assert log_dict["details"]["changes"]["base_pay"] == "250"

    def test_audit_event_to_sheets_row(self):
        """Test conversion to sheets row."""
        event = AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            description="Record deleted",
            is_user_action=True,
        )
        row = event.to_sheets_row()
        assert len(row) == 11  # Expected number of columns
        assert row[2] == "record_deleted"
        assert row[10] == "True"

    def test_builder_record_added(self):
        record_id = uuid4()
        correlation_id = uuid4()

        event = AuditEventBuilder.record_added(
            record_id=record_id,
            day="2024-01-02",
            total_earnings="200",
            remaining="800",
            cascaded=2,
            correlation_id=correlation_id,
        )

        assert event.event_type == AuditEventType.RECORD_ADDED
        assert event.entity_id == record_id
        assert event.correlation_id == correlation_id
        assert event.details["records_recomputed"] == 2
        assert event.is_user_action is True

    def test_builder_anchor_deletion_is_a_warning(self):
        event = AuditEventBuilder.record_deleted(
            record_id=uuid4(),
            day="2024-01-01",
            was_anchor=True,
            cascaded=5,
        )
        assert event.severity == AuditSeverity.WARNING
        assert "Initial advance" in event.description

    def test_every_event_type_has_a_builder(self):
        """Each event the ledger can emit is built in one place."""
        for event_type in AuditEventType:
            assert callable(getattr(AuditEventBuilder, event_type.value, None)), event_type


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
