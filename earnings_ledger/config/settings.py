"""
Configuration Management for Earnings Ledger

Every knob is read from the environment (or .env) through pydantic-settings.

DESIGN DECISION: The storage backend is chosen here, once, and handed to
the ledger store at construction. Nothing else in the package reads a
global "backend mode".
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerConfig(BaseSettings):
    """Ledger engine and local storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: Literal["local", "google_sheets", "memory"] = Field(
        default="local",
        description="Which storage backend holds the records"
    )
    data_file: str = Field(
        default="ledger_data.json",
        description="Path of the JSON file used by the local backend"
    )

    # Fallback settings used until the user saves their own
    default_base_pay: Decimal = Field(
        default=Decimal("200"),
        ge=0,
        description="Fixed daily inquiry pay"
    )
    default_per_booking: Decimal = Field(
        default=Decimal("50"),
        ge=0,
        description="Commission per booking"
    )
    default_advance_balance: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Starting balance when no initial advance record exists"
    )

    # When False, adding a record or creating the initial advance
    # does not recompute later records (legacy behaviour).
    cascade_on_insert: bool = Field(
        default=True,
        description="Recompute later records after inserts and anchor creation"
    )

    @property
    def data_path(self) -> Path:
        return Path(self.data_file).expanduser()


class GoogleSheetsSettings(BaseSettings):
    """Spreadsheet and tab names for the google_sheets backend."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    records_sheet_name: str = Field(
        default="Records",
        description="Name of the sheet for daily records"
    )
    settings_sheet_name: str = Field(
        default="Settings",
        description="Name of the sheet for earning settings"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Missing credentials only warn here; connecting raises later."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class AppSettings(BaseSettings):
    """
    Application-wide settings (local log level).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    log_level: str = Field(
        default="INFO",
        description="Minimum level for local structured logs"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Entry point for every settings group.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sheets settings are required only when that backend is selected

    @property
    def ledger(self) -> LedgerConfig:
        return LedgerConfig()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Loaded once per process.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Startup check of every settings group the chosen backend needs.

    Returns a dict of {setting_name: is_valid}.
    Google Sheets is only checked when it is the selected backend.
    """
    results = {}

    settings = get_settings()

    try:
        ledger = settings.ledger
        results["ledger"] = True
    except Exception as e:
        ledger = None
        results["ledger"] = False
        results["ledger_error"] = str(e)

    if ledger is not None and ledger.backend == "google_sheets":
        try:
            _ = settings.google_sheets
            results["google_sheets"] = True
        except Exception as e:
            results["google_sheets"] = False
            results["google_sheets_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
