from __future__ import annotations
"""
stakerewards.ledger
===================

Accounting core of the pool:

- accumulator: pure reward-per-unit / earned math
- accounts:    keyed account ledger with transactional undo
- checkpoint:  the pre-hook every mutating operation runs first
- period:      funding-period arithmetic and state machine
"""

from .accounts import AccountLedger, LedgerError
from .accumulator import earned, last_applicable_time, reward_per_unit
from .checkpoint import checkpoint

__all__ = [
    "AccountLedger",
    "LedgerError",
    "earned",
    "last_applicable_time",
    "reward_per_unit",
    "checkpoint",
]
