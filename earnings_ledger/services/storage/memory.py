"""
In-Memory Storage

Process-local backends for tests and throwaway sessions.
Reads and writes copy the data so callers can never alias stored state.
"""

from typing import Optional

from earnings_ledger.models.audit import AuditEvent
from earnings_ledger.models.record import DailyRecord, EarningSettings
from earnings_ledger.services.storage.interface import (
    AuditStorageInterface,
    LedgerStorageInterface,
)


class InMemoryLedgerStorage(LedgerStorageInterface):
    """Ledger storage held in a Python list."""

    def __init__(
        self,
        records: Optional[list[DailyRecord]] = None,
        settings: Optional[EarningSettings] = None,
        default_settings: Optional[EarningSettings] = None,
    ):
        self._default_settings = default_settings or EarningSettings()
        self._records = [r.model_copy(deep=True) for r in records or []]
        self._settings = settings.model_copy() if settings else None
        self.write_count = 0

    async def read_all(self) -> list[DailyRecord]:
        return [r.model_copy(deep=True) for r in self._records]

    async def write_all(self, records: list[DailyRecord]) -> None:
        self._records = [r.model_copy(deep=True) for r in records]
        self.write_count += 1

    async def read_settings(self) -> EarningSettings:
        return (self._settings or self._default_settings).model_copy()

    async def write_settings(self, settings: EarningSettings) -> None:
        self._settings = settings.model_copy()
        self.write_count += 1

    async def write_ledger(
        self,
        records: list[DailyRecord],
        settings: EarningSettings,
    ) -> None:
        self._records = [r.model_copy(deep=True) for r in records]
        self._settings = settings.model_copy()
        self.write_count += 1

    async def clear(self) -> None:
        self._records = []
        self._settings = None
        self.write_count += 1


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit list."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = sorted(self.events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
