"""
Balance Chain

Ordering and recomputation rules shared by the ledger store and by
consistency checks. Everything here works on plain lists of records
and never touches storage.

CHAIN ORDER: date ascending; records on the same date keep their
stored (insertion) order.

STARTING BALANCE for a non-anchor record at chain position i:
1. An anchor exists and the record is dated on/before it -> anchor.remaining
2. Otherwise the element at position i-1 (anchor or record) -> its remaining
3. Otherwise (first in chain, no anchor) -> settings.advance_balance
"""

from bisect import bisect_left, bisect_right
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from earnings_ledger.ledger.arithmetic import balance_delta
from earnings_ledger.models.record import DailyRecord, EarningSettings


def chronological(records: Iterable[DailyRecord]) -> list[DailyRecord]:
    """Stable ascending sort by date."""
    return sorted(records, key=lambda r: r.date)


def find_anchor(records: Iterable[DailyRecord]) -> Optional[DailyRecord]:
    return next((r for r in records if r.is_initial_advance), None)


def first_index_on_or_after(chain: list[DailyRecord], day: date) -> int:
    """Position of the first record dated `day` or later in a chronological chain."""
    return bisect_left(chain, day, key=lambda r: r.date)


def insertion_index(chain: list[DailyRecord], day: date) -> int:
    """Where a new record dated `day` goes: after every record already on that day."""
    return bisect_right(chain, day, key=lambda r: r.date)


def starting_balance(
    chain: list[DailyRecord],
    index: int,
    settings: EarningSettings,
    anchor: Optional[DailyRecord] = None,
) -> Decimal:
    """Balance the record at `index` starts from."""
    record = chain[index]
    if anchor is None:
        anchor = find_anchor(chain)

    if anchor is not None and record.date <= anchor.date:
        return anchor.remaining
    if index > 0:
        return chain[index - 1].remaining
    return settings.advance_balance


def cascade(
    chain: list[DailyRecord],
    start: int,
    settings: EarningSettings,
) -> int:
    """
    Recompute `remaining` from `start` to the end of the chain, in place.

    Changed records are replaced by updated copies, never mutated, so
    objects handed out earlier keep their old values. The anchor is skipped.

    Returns:
        Number of records whose remaining balance changed
    """
    anchor = find_anchor(chain)
    changed = 0

    for index in range(max(start, 0), len(chain)):
        record = chain[index]
        if record.is_initial_advance:
            continue

        previous = starting_balance(chain, index, settings, anchor)
        remaining = balance_delta(previous, record.advance_used, record.total_earnings)
        if remaining != record.remaining:
            chain[index] = record.model_copy(update={"remaining": remaining})
            changed += 1

    return changed


def recompute_chain(
    records: Iterable[DailyRecord],
    settings: EarningSettings,
) -> list[DailyRecord]:
    """From-scratch pass over every record. Returns a new chronological list."""
    chain = chronological(records)
    cascade(chain, 0, settings)
    return chain


def inconsistent_records(
    records: Iterable[DailyRecord],
    settings: EarningSettings,
) -> list[DailyRecord]:
    """Stored records whose remaining differs from a from-scratch recompute."""
    records = list(records)
    expected = {r.id: r.remaining for r in recompute_chain(records, settings)}
    return [r for r in records if expected[r.id] != r.remaining]
