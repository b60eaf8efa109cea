"""Configuration package."""

from earnings_ledger.config.settings import (
    AppSettings,
    GoogleSheetsSettings,
    LedgerConfig,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GoogleSheetsSettings",
    "LedgerConfig",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
