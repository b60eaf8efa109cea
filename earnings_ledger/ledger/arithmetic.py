"""
Ledger Arithmetic

Pure earning and balance calculations. No I/O, no state, no errors
beyond clamping negative booking counts to zero.

All functions accept ints, floats or Decimals and return Decimals.
Floats are converted through their string form so 0.1 stays 0.1.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

Number = Union[Decimal, int, float]

DEFAULT_PER_BOOKING = Decimal("50")
DEFAULT_CURRENCY_SYMBOL = "₱"

_CENT = Decimal("0.01")
_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def booking_pay(bookings: Number, per_booking_rate: Number = DEFAULT_PER_BOOKING) -> Decimal:
    """
    Commission for the day's bookings.

    Negative booking counts pay nothing. Fractional counts are not rounded.
    """
    bookings = to_decimal(bookings)
    if bookings < 0:
        return Decimal("0")
    return bookings * to_decimal(per_booking_rate)


def total_earnings(base_pay: Number, booking_pay: Number, inquiry_pay: Number = 0) -> Decimal:
    """Sum of the day's pay components. Inputs are not clamped."""
    return to_decimal(base_pay) + to_decimal(booking_pay) + to_decimal(inquiry_pay)


def balance_delta(
    previous_remaining: Number,
    advance_used_today: Number,
    total_earned_today: Number,
) -> Decimal:
    """
    Apply one day to the running balance.

    With no advance drawn, the day's earnings pay down the balance:
        previous - earned
    When an advance was drawn (legacy entries), both terms apply:
        previous - advance + earned
    """
    previous = to_decimal(previous_remaining)
    advance = to_decimal(advance_used_today)
    earned = to_decimal(total_earned_today)

    if advance == 0:
        return previous - earned
    return previous - advance + earned


def daily_earnings(
    bookings: Number,
    base_pay: Number,
    per_booking_rate: Number = DEFAULT_PER_BOOKING,
) -> tuple[Decimal, Decimal, Decimal]:
    """
    Pay breakdown for one day of the simplified flow.

    Every day earns one inquiry at the base pay plus the booking commission.

    Returns:
        (inquiry_pay, booking_pay, total)
    """
    inquiry = to_decimal(base_pay)
    bookings_total = booking_pay(bookings, per_booking_rate)
    return inquiry, bookings_total, total_earnings(0, bookings_total, inquiry)


def format_currency(amount: Number, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """Format for display, e.g. ``-₱1,000.50``. Always two decimal places."""
    value = to_decimal(amount).quantize(_CENT, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def parse_currency(text: str, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> Decimal:
    """
    Parse a formatted amount back to a Decimal.

    `symbol` is removed first, so symbols containing a dot ("Rs.") are
    not mistaken for a decimal point. Other symbols, separators and
    whitespace are ignored. Anything that is still not a number parses
    as zero.
    """
    text = text or ""
    if symbol:
        text = text.replace(symbol, "")
    cleaned = _NON_NUMERIC.sub("", text)
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return Decimal("0")
    if not value.is_finite():
        return Decimal("0")
    return value
