"""
Google Sheets Ledger Backend

DESIGN DECISION: Google Sheets is offered as a remote backend because:
1. Non-technical users can view their records directly in Sheets
2. No database setup required
3. The sheet doubles as a backup and a printable history

TRADEOFFS:
- Not suitable for high-volume data (we're fine for one person's days)
- No transactions: records and settings live on separate sheets, so
  write_ledger is two writes here, records first and rolled back
  if the settings write fails
- Every read fetches the whole sheet; the store filters in Python

Record writes replace the whole sheet body in a single `update` call,
padding with blank rows when the ledger shrank, so a failed write
never leaves half a chain behind.
"""

import json
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from earnings_ledger.config import GoogleSheetsSettings, get_settings
from earnings_ledger.models.audit import AuditEvent, AuditEventType, AuditSeverity
from earnings_ledger.models.record import DailyRecord, EarningSettings
from earnings_ledger.services.storage.interface import (
    AuditStorageInterface,
    BackendError,
    ConnectionError,
    CorruptDataError,
    LedgerStorageInterface,
)


logger = structlog.get_logger(__name__)


# Column mappings for Records sheet
RECORD_COLUMNS = [
    "id",
    "date",
    "base_pay",
    "bookings",
    "booking_pay",
    "inquiry_pay",
    "total_earnings",
    "advance_used",
    "remaining",
    "notes",
    "action",
    "is_initial_advance",
    "created_at",
]

# Settings sheet is key/value rows
SETTINGS_COLUMNS = ["key", "value"]

# Audit tab columns, matching AuditEvent.to_sheets_row
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]

_api_retry = retry(
    retry=retry_if_exception_type(gspread.exceptions.APIError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)


class GoogleSheetsClient:
    """
    Lazily authorised gspread handle shared by the ledger and audit backends.

    Worksheets are created with a header row on first use.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @property
    def settings(self) -> GoogleSheetsSettings:
        return self._settings

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """Authorise with the service account, once."""
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError as e:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                ) from e
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}") from e

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """The spreadsheet named by GOOGLE_SHEETS_SPREADSHEET_ID."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound as e:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                ) from e
        return self._spreadsheet

    def get_worksheet(self, title: str, columns: list[str], rows: int = 1000) -> gspread.Worksheet:
        """Get or create a worksheet with a header row."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_records_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.records_sheet_name, RECORD_COLUMNS)

    def get_settings_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.settings_sheet_name, SETTINGS_COLUMNS, rows=20)

    def get_audit_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(
            self._settings.audit_sheet_name,
            AUDIT_COLUMNS,
            rows=5000,  # append-only, grows fastest
        )


def _padded(rows: list[list], previous_row_count: int, width: int) -> list[list]:
    """Blank out rows left over from a longer previous write."""
    blank = [""] * width
    return rows + [blank] * max(previous_row_count - len(rows), 0)


class GoogleSheetsLedgerStorage(LedgerStorageInterface):
    """
    Google Sheets implementation of ledger storage.

    Records are stored one per row in chain order.
    Settings are key/value rows on their own sheet.
    """

    def __init__(
        self,
        client: Optional[GoogleSheetsClient] = None,
        default_settings: Optional[EarningSettings] = None,
    ):
        self._client = client or GoogleSheetsClient()
        self._default_settings = default_settings or EarningSettings()

    def _record_to_row(self, record: DailyRecord) -> list:
        """Convert a DailyRecord to a spreadsheet row."""
        return [
            str(record.id),
            record.date.isoformat(),
            str(record.base_pay),
            str(record.bookings),
            str(record.booking_pay),
            str(record.inquiry_pay),
            str(record.total_earnings),
            str(record.advance_used),
            str(record.remaining),
            record.notes,
            record.action,
            str(record.is_initial_advance),
            record.created_at.isoformat(),
        ]

    def _row_to_record(self, row: list) -> DailyRecord:
        """Convert a spreadsheet row to a DailyRecord."""
        # Rows written by older versions may be short
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return DailyRecord(
            id=UUID(safe_get(0)),
            date=date.fromisoformat(safe_get(1)),
            base_pay=Decimal(safe_get(2, "0")),
            bookings=Decimal(safe_get(3, "0")),
            booking_pay=Decimal(safe_get(4, "0")),
            inquiry_pay=Decimal(safe_get(5, "0")),
            total_earnings=Decimal(safe_get(6, "0")),
            advance_used=Decimal(safe_get(7, "0")),
            remaining=Decimal(safe_get(8, "0")),
            notes=safe_get(9),
            action=safe_get(10),
            is_initial_advance=safe_get(11).lower() == "true",
            created_at=datetime.fromisoformat(safe_get(12)),
        )

    @_api_retry
    def _fetch_rows(self, sheet: gspread.Worksheet) -> list[list]:
        """All non-header rows that carry data."""
        return [row for row in sheet.get_all_values()[1:] if row and row[0]]

    @_api_retry
    def _replace_rows(self, sheet: gspread.Worksheet, columns: list[str], rows: list[list]) -> None:
        previous = len(sheet.get_all_values())
        body = _padded([columns] + rows, previous, len(columns))
        if len(body) > sheet.row_count:
            sheet.add_rows(len(body) - sheet.row_count)
        sheet.update(values=body, range_name="A1")

    async def read_all(self) -> list[DailyRecord]:
        try:
            rows = self._fetch_rows(self._client.get_records_sheet())
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(f"Failed to read records: {e}") from e

        try:
            return [self._row_to_record(row) for row in rows]
        except (ValueError, InvalidOperation) as e:
            raise CorruptDataError(f"Malformed record row: {e}") from e

    async def write_all(self, records: list[DailyRecord]) -> None:
        try:
            self._replace_rows(
                self._client.get_records_sheet(),
                RECORD_COLUMNS,
                [self._record_to_row(r) for r in records],
            )
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(f"Failed to write records: {e}") from e

    async def read_settings(self) -> EarningSettings:
        try:
            rows = self._fetch_rows(self._client.get_settings_sheet())
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(f"Failed to read settings: {e}") from e

        values = {row[0]: row[1] for row in rows if len(row) > 1}
        if not values:
            return self._default_settings.model_copy()
        try:
            return EarningSettings.model_validate(values)
        except ValueError as e:
            raise CorruptDataError(f"Malformed settings sheet: {e}") from e

    async def write_settings(self, settings: EarningSettings) -> None:
        rows = [[key, str(value)] for key, value in settings.model_dump().items()]
        try:
            self._replace_rows(self._client.get_settings_sheet(), SETTINGS_COLUMNS, rows)
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(f"Failed to write settings: {e}") from e

    async def write_ledger(
        self,
        records: list[DailyRecord],
        settings: EarningSettings,
    ) -> None:
        """
        Records first, then settings.

        The two tabs cannot be written together, so if the settings write
        fails the previous records are put back before the error is raised.
        """
        try:
            sheet = self._client.get_records_sheet()
            previous = self._fetch_rows(sheet)
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(f"Failed to read records: {e}") from e

        await self.write_all(records)
        try:
            await self.write_settings(settings)
        except BackendError as e:
            try:
                self._replace_rows(sheet, RECORD_COLUMNS, previous)
            except Exception as restore_error:
                logger.error(
                    "records_restore_failed",
                    error=str(restore_error),
                    settings_error=str(e),
                )
            raise

    async def clear(self) -> None:
        try:
            self._replace_rows(self._client.get_records_sheet(), RECORD_COLUMNS, [])
            self._replace_rows(self._client.get_settings_sheet(), SETTINGS_COLUMNS, [])
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(f"Failed to clear ledger sheets: {e}") from e


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Audit events as rows of the audit tab.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Inverse of AuditEvent.to_sheets_row."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            entity_type=safe_get(4) or None,
            entity_id=UUID(safe_get(5)) if safe_get(5) else None,
            correlation_id=UUID(safe_get(6)) if safe_get(6) else None,
            description=safe_get(7),
            details=json.loads(safe_get(8)) if safe_get(8) else {},
            error_message=safe_get(9) or None,
            is_user_action=safe_get(10).lower() == "true",
        )

    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            self._append_row(event.to_sheets_row())
            return True
        except Exception as e:
            # Audit logging should not break the main flow
            logger.warning(
                "audit_sheet_append_failed",
                error=str(e),
                event_id=str(event.event_id),
            )
            return False

    @_api_retry
    def _append_row(self, row: list) -> None:
        sheet = self._client.get_audit_sheet()
        sheet.append_row(row, value_input_option="RAW")

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get recent events."""
        try:
            sheet = self._client.get_audit_sheet()
            all_rows = sheet.get_all_values()[1:]
        except Exception as e:
            raise BackendError(f"Failed to get audit events: {e}") from e

        events = []
        for row in all_rows:
            if row and row[0]:
                try:
                    events.append(self._row_to_event(row))
                except ValueError:
                    logger.warning("audit_row_skipped", event_id=row[0])

        # Sort newest first
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
