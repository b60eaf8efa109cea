"""
Ledger Package

Arithmetic, chain recomputation and the stateful ledger store.
"""

from earnings_ledger.ledger.arithmetic import (
    balance_delta,
    booking_pay,
    daily_earnings,
    format_currency,
    parse_currency,
    total_earnings,
)
from earnings_ledger.ledger.chain import (
    cascade,
    chronological,
    find_anchor,
    inconsistent_records,
    recompute_chain,
    starting_balance,
)
from earnings_ledger.ledger.store import (
    AnchorExistsError,
    LedgerError,
    LedgerStore,
    NotFoundError,
)

__all__ = [
    # Arithmetic
    "balance_delta",
    "booking_pay",
    "daily_earnings",
    "format_currency",
    "parse_currency",
    "total_earnings",
    # Chain
    "cascade",
    "chronological",
    "find_anchor",
    "inconsistent_records",
    "recompute_chain",
    "starting_balance",
    # Store
    "AnchorExistsError",
    "LedgerError",
    "LedgerStore",
    "NotFoundError",
]
