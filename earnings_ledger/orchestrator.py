"""
Application Wiring for Earnings Ledger

Builds the ledger store the rest of the application talks to:
storage backend from configuration, audit logger, and the store itself.

DESIGN DECISION: The backend is chosen once, here, and passed into the
store as an object. Tests and tools can build two stores over two
different backends side by side.
"""

from typing import Optional

import structlog

from earnings_ledger.audit import AuditLogger, configure_logging
from earnings_ledger.config import get_settings
from earnings_ledger.ledger import LedgerStore
from earnings_ledger.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    LedgerStorageInterface,
    create_storage_backend,
)


logger = structlog.get_logger(__name__)


def create_app_components(
    backend: Optional[LedgerStorageInterface] = None,
) -> tuple[LedgerStore, AuditLogger]:
    """
    Factory function to create all application components.

    Args:
        backend: Storage to use instead of the configured one
                (e.g. in-memory storage for testing).

    Returns:
        (ledger_store, audit_logger)
    """
    settings = get_settings()
    ledger_config = settings.ledger
    configure_logging(settings.app.log_level)

    sheets_client = None
    audit_logger = AuditLogger()  # Local-only logging

    if backend is None and ledger_config.backend == "google_sheets":
        try:
            sheets_client = GoogleSheetsClient()
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except Exception as e:
            # Sheets audit not configured - continue with local logging;
            # the ledger backend below reports its own configuration errors.
            logger.warning("audit_storage_unavailable", error=str(e))

    storage = backend or create_storage_backend(ledger_config, sheets_client)

    store = LedgerStore(
        storage,
        audit_logger=audit_logger,
        cascade_on_insert=ledger_config.cascade_on_insert,
    )
    logger.info(
        "ledger_ready",
        backend=type(storage).__name__,
        cascade_on_insert=ledger_config.cascade_on_insert,
    )
    return store, audit_logger
