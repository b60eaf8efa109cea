"""
Abstract Storage Interface

DESIGN DECISION: The ledger talks to storage through whole-set reads
and writes only. This allows us to:
1. Swap the local JSON file for Google Sheets (or a database) by config
2. Use in-memory storage for testing
3. Keep every ledger mutation a single atomic write

The interface is intentionally tiny. All ordering and balance logic
lives in the ledger store, not in the backends.
"""

from abc import ABC, abstractmethod

from earnings_ledger.models.audit import AuditEvent
from earnings_ledger.models.record import DailyRecord, EarningSettings


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger persistence.

    Any storage implementation (local file, Google Sheets, etc.)
    must implement these methods. Each call must be atomic from
    the ledger's point of view.
    """

    @abstractmethod
    async def read_all(self) -> list[DailyRecord]:
        """
        Read every stored record, in stored order.

        Raises:
            BackendError: If the read fails or stored data is unreadable
        """
        pass

    @abstractmethod
    async def write_all(self, records: list[DailyRecord]) -> None:
        """
        Replace the stored record set with `records`, preserving their order.

        Raises:
            BackendError: If the write fails
        """
        pass

    @abstractmethod
    async def read_settings(self) -> EarningSettings:
        """
        Read the saved settings, or the defaults if none were saved.

        Raises:
            BackendError: If the read fails
        """
        pass

    @abstractmethod
    async def write_settings(self, settings: EarningSettings) -> None:
        """
        Save settings.

        Raises:
            BackendError: If the write fails
        """
        pass

    async def write_ledger(
        self,
        records: list[DailyRecord],
        settings: EarningSettings,
    ) -> None:
        """
        Save records and settings together.

        Backends that can write both in one operation should override this;
        the default writes records first, then settings.
        """
        await self.write_all(records)
        await self.write_settings(settings)

    @abstractmethod
    async def clear(self) -> None:
        """Remove all records and saved settings."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class BackendError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(BackendError):
    """Could not connect to storage backend."""
    pass


class CorruptDataError(BackendError):
    """Stored data exists but cannot be parsed."""
    pass
