"""
Core Data Models for Earnings Ledger

These models define the strict schemas for all data flowing through the
ledger. They are designed to:
1. Enforce non-negative money inputs at the boundary
2. Keep the derived `remaining` field out of caller hands
3. Be serializable for storage and logging

DESIGN DECISION: There is one record type. The initial advance ("anchor")
is an ordinary DailyRecord with `is_initial_advance=True`, not a subclass.
Code that treats it differently branches on that flag.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# Models below have a field named `date`, which shadows the type in class bodies.
DateType = date


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Fields that carry money or counts into the balance math.
EARNING_FIELDS = (
    "base_pay",
    "bookings",
    "booking_pay",
    "inquiry_pay",
    "total_earnings",
    "advance_used",
)

INITIAL_ADVANCE_NOTES = "Initial Advance Amount"
INITIAL_ADVANCE_ACTION = "Initial Advance"


# =============================================================================
# SETTINGS
# =============================================================================

class EarningSettings(BaseModel):
    """
    User-editable pay settings.

    `advance_balance` is only consulted when no initial advance record exists.
    """
    base_pay: Decimal = Field(
        default=Decimal("200"),
        ge=0,
        description="Fixed per-day inquiry pay"
    )
    per_booking: Decimal = Field(
        default=Decimal("50"),
        ge=0,
        description="Commission per booking"
    )
    advance_balance: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Fallback starting balance"
    )


# =============================================================================
# RECORD MODELS
# =============================================================================

class RecordDraft(BaseModel):
    """
    A new daily record as supplied by the caller.

    Has no id, timestamp or remaining balance; the store assigns those.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    date: DateType
    base_pay: Decimal = Field(default=Decimal("0"), ge=0)
    bookings: Decimal = Field(default=Decimal("0"), ge=0)
    booking_pay: Decimal = Field(default=Decimal("0"), ge=0)
    inquiry_pay: Decimal = Field(default=Decimal("0"), ge=0)
    total_earnings: Decimal = Field(default=Decimal("0"), ge=0)
    advance_used: Decimal = Field(default=Decimal("0"), ge=0)
    notes: str = Field(default="", max_length=1000)
    action: str = Field(default="", max_length=200)

    @classmethod
    def for_day(
        cls,
        day: DateType,
        bookings: Decimal | int,
        settings: EarningSettings,
        notes: str = "",
        action: str = "",
    ) -> "RecordDraft":
        """
        Build a draft the way the daily entry form does.

        Inquiry pay is the settings base pay, restated on the record.
        """
        from earnings_ledger.ledger.arithmetic import daily_earnings

        inquiry_pay, booking_pay, total = daily_earnings(
            bookings, settings.base_pay, settings.per_booking
        )
        return cls(
            date=day,
            base_pay=settings.base_pay,
            bookings=Decimal(bookings),
            booking_pay=booking_pay,
            inquiry_pay=inquiry_pay,
            total_earnings=total,
            notes=notes,
            action=action,
        )


class DailyRecord(BaseModel):
    """
    One tracked day, or the single initial advance record.

    CRITICAL: `remaining` is derived by the ledger store.
    Never set it from user input.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    # Identity
    id: UUID = Field(
        default_factory=uuid4,
        description="Unique record ID"
    )
    created_at: datetime = Field(
        default_factory=_utcnow,
        description="When the record was created (display/audit only)"
    )

    date: DateType = Field(
        ...,
        description="Calendar day; the ordering key"
    )

    # Earning inputs
    base_pay: Decimal = Field(default=Decimal("0"), ge=0)
    bookings: Decimal = Field(default=Decimal("0"), ge=0)
    booking_pay: Decimal = Field(default=Decimal("0"), ge=0)
    inquiry_pay: Decimal = Field(default=Decimal("0"), ge=0)
    total_earnings: Decimal = Field(default=Decimal("0"), ge=0)
    advance_used: Decimal = Field(default=Decimal("0"), ge=0)

    # Derived
    remaining: Decimal = Field(
        default=Decimal("0"),
        description="Running balance after this record"
    )

    notes: str = Field(default="", max_length=1000)
    action: str = Field(default="", max_length=200)

    is_initial_advance: bool = Field(
        default=False,
        description="Marks the single anchor record"
    )

    @model_validator(mode='after')
    def validate_initial_advance(self) -> 'DailyRecord':
        """The initial advance is a starting balance, not an earning day."""
        if self.is_initial_advance:
            if self.remaining < 0:
                raise ValueError(
                    f"Initial advance amount cannot be negative: {self.remaining}"
                )
            for name in EARNING_FIELDS:
                if getattr(self, name) != 0:
                    raise ValueError(
                        f"Initial advance record cannot have non-zero {name}"
                    )
        return self

    @classmethod
    def from_draft(cls, draft: RecordDraft) -> "DailyRecord":
        return cls(**draft.model_dump())

    @classmethod
    def initial_advance(cls, amount: Decimal, day: DateType) -> "DailyRecord":
        """Create the anchor record; its remaining is the advance amount itself."""
        return cls(
            date=day,
            remaining=amount,
            notes=INITIAL_ADVANCE_NOTES,
            action=INITIAL_ADVANCE_ACTION,
            is_initial_advance=True,
        )


class RecordPatch(BaseModel):
    """
    Partial update to a record.

    Identity, timestamps, the anchor flag and the derived balance
    are not patchable; passing them is a validation error.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    date: Optional[DateType] = None
    base_pay: Optional[Decimal] = Field(default=None, ge=0)
    bookings: Optional[Decimal] = Field(default=None, ge=0)
    booking_pay: Optional[Decimal] = Field(default=None, ge=0)
    inquiry_pay: Optional[Decimal] = Field(default=None, ge=0)
    total_earnings: Optional[Decimal] = Field(default=None, ge=0)
    advance_used: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = Field(default=None, max_length=1000)
    action: Optional[str] = Field(default=None, max_length=200)

    @field_validator('*')
    @classmethod
    def reject_explicit_none(cls, v):
        """None means "unset"; omit the field instead of passing it."""
        if v is None:
            raise ValueError("may be omitted but not set to None")
        return v

    def changes(self) -> dict:
        """Only the fields the caller actually set."""
        return self.model_dump(exclude_unset=True)

    def apply_to(self, record: DailyRecord) -> DailyRecord:
        """Return a validated copy of `record` with this patch merged in."""
        merged = record.model_dump()
        merged.update(self.changes())
        return DailyRecord.model_validate(merged)


# =============================================================================
# REPORTING
# =============================================================================

class LedgerSummary(BaseModel):
    """Totals over a date range of non-anchor records."""

    date_from: Optional[DateType] = None
    date_to: Optional[DateType] = None
    record_count: int = Field(ge=0)
    total_earnings: Decimal = Decimal("0")
    total_bookings: Decimal = Decimal("0")
    current_remaining: Optional[Decimal] = Field(
        default=None,
        description="Remaining balance of the latest record in the range"
    )
