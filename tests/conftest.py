"""
Shared fixtures for ledger tests.

No real Google API calls: the Sheets backend is exercised against
an in-process fake worksheet.
"""

from datetime import date
from decimal import Decimal

import pytest

from earnings_ledger.audit import AuditLogger
from earnings_ledger.ledger import LedgerStore
from earnings_ledger.models.record import EarningSettings, RecordDraft
from earnings_ledger.services.storage import (
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
)


def draft(day: str, earned, advance_used=0, **extra) -> RecordDraft:
    """Shorthand for a draft with only the fields the balance math reads."""
    return RecordDraft(
        date=date.fromisoformat(day),
        total_earnings=Decimal(str(earned)),
        advance_used=Decimal(str(advance_used)),
        **extra,
    )


@pytest.fixture
def make_draft():
    return draft


@pytest.fixture
def settings() -> EarningSettings:
    return EarningSettings(
        base_pay=Decimal("200"),
        per_booking=Decimal("50"),
        advance_balance=Decimal("0"),
    )


@pytest.fixture
def storage(settings) -> InMemoryLedgerStorage:
    return InMemoryLedgerStorage(default_settings=settings)


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def store(storage, audit_storage) -> LedgerStore:
    return LedgerStore(
        storage,
        audit_logger=AuditLogger(audit_storage),
        today=lambda: date(2024, 1, 1),
    )


class FakeWorksheet:
    """Just enough of gspread.Worksheet for the Sheets backends."""

    def __init__(self, rows=None, row_count: int = 1000):
        self.values = [list(r) for r in rows or []]
        self.row_count = row_count
        self.update_calls = 0

    def get_all_values(self):
        return [list(r) for r in self.values]

    def update(self, values=None, range_name=None):
        assert range_name == "A1"
        self.update_calls += 1
        for index, row in enumerate(values):
            if index < len(self.values):
                self.values[index] = list(row)
            else:
                self.values.append(list(row))

    def add_rows(self, rows: int):
        self.row_count += rows

    def append_row(self, row, value_input_option=None):
        self.values.append(list(row))


class FakeSheetsClient:
    """Stands in for GoogleSheetsClient; one fake worksheet per sheet."""

    def __init__(self):
        from earnings_ledger.services.storage.google_sheets import (
            AUDIT_COLUMNS,
            RECORD_COLUMNS,
            SETTINGS_COLUMNS,
        )
        self.records = FakeWorksheet([RECORD_COLUMNS])
        self.settings = FakeWorksheet([SETTINGS_COLUMNS], row_count=20)
        self.audit = FakeWorksheet([AUDIT_COLUMNS])

    def get_records_sheet(self):
        return self.records

    def get_settings_sheet(self):
        return self.settings

    def get_audit_sheet(self):
        return self.audit


@pytest.fixture
def sheets_client() -> FakeSheetsClient:
    return FakeSheetsClient()
