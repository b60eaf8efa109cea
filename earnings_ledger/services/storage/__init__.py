"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
The backend is picked from configuration by `create_storage_backend` and
handed to the ledger store; nothing reads a global backend mode.
"""

from typing import Optional

from earnings_ledger.config import LedgerConfig, get_settings
from earnings_ledger.models.record import EarningSettings
from earnings_ledger.services.storage.interface import (
    AuditStorageInterface,
    BackendError,
    ConnectionError,
    CorruptDataError,
    LedgerStorageInterface,
)
from earnings_ledger.services.storage.local_file import LocalFileLedgerStorage
from earnings_ledger.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
)
from earnings_ledger.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
)


def default_settings_from(config: LedgerConfig) -> EarningSettings:
    """Settings a fresh ledger starts with."""
    return EarningSettings(
        base_pay=config.default_base_pay,
        per_booking=config.default_per_booking,
        advance_balance=config.default_advance_balance,
    )


def create_storage_backend(
    config: Optional[LedgerConfig] = None,
    sheets_client: Optional[GoogleSheetsClient] = None,
) -> LedgerStorageInterface:
    """
    Build the ledger storage backend named by configuration.

    Args:
        config: Ledger configuration; loaded from the environment if omitted
        sheets_client: Shared client for the Google Sheets backend

    Raises:
        ValueError: If the configured backend is unknown
    """
    config = config or get_settings().ledger
    defaults = default_settings_from(config)

    if config.backend == "local":
        return LocalFileLedgerStorage(config.data_path, default_settings=defaults)
    if config.backend == "memory":
        return InMemoryLedgerStorage(default_settings=defaults)
    if config.backend == "google_sheets":
        return GoogleSheetsLedgerStorage(
            sheets_client or GoogleSheetsClient(),
            default_settings=defaults,
        )
    raise ValueError(f"Unknown storage backend: {config.backend}")


__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerStorageInterface",
    # Exceptions
    "BackendError",
    "ConnectionError",
    "CorruptDataError",
    # Implementations
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStorage",
    "InMemoryAuditStorage",
    "InMemoryLedgerStorage",
    "LocalFileLedgerStorage",
    # Factory
    "create_storage_backend",
    "default_settings_from",
]
