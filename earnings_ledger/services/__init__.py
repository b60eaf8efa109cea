"""Services package."""

from earnings_ledger.services.storage import (
    AuditStorageInterface,
    BackendError,
    ConnectionError,
    CorruptDataError,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    LedgerStorageInterface,
    LocalFileLedgerStorage,
    create_storage_backend,
)

__all__ = [
    "AuditStorageInterface",
    "BackendError",
    "ConnectionError",
    "CorruptDataError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStorage",
    "InMemoryAuditStorage",
    "InMemoryLedgerStorage",
    "LedgerStorageInterface",
    "LocalFileLedgerStorage",
    "create_storage_backend",
]
