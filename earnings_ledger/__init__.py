"""
Earnings Ledger - Source Package

The balance-keeping core of a personal daily-earnings tracker.
Records one entry per working day and maintains a running
"remaining" advance balance across them.

DESIGN PRINCIPLES:
1. Remaining balances are derived, never typed in
2. Every mutation leaves the whole chain consistent
3. All-or-nothing writes (one write per operation)
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Earnings Ledger Team"
