from __future__ import annotations

"""
Checkpoint protocol.

Must run at the top of every mutating pool operation, before that operation
reads or changes any balance, rate or period field:

  1. reward_per_unit_stored <- reward_per_unit()
  2. last_update_time       <- last_applicable_time()
  3. for the acting account (if any):
       owed_reward          <- earned(account)
       reward_per_unit_paid <- reward_per_unit_stored

Funding and period edits pass ``account=None`` (global-only checkpoint).
"""

import logging
from typing import Optional

from ..pooltypes.account import AccountId
from ..pooltypes.state import GlobalRewardState
from .accounts import AccountLedger
from .accumulator import earned, last_applicable_time, reward_per_unit

log = logging.getLogger(__name__)


def checkpoint(
    state: GlobalRewardState,
    ledger: AccountLedger,
    now: int,
    account: Optional[AccountId] = None,
) -> int:
    """Synchronize the accumulator (and `account`'s row). Returns the new stored value."""
    stored = reward_per_unit(state, ledger.total_staked, now)
    state.reward_per_unit_stored = stored
    state.last_update_time = last_applicable_time(state, now)
    if account is not None:
        entry = ledger.entry(account)
        entry.owed_reward = earned(entry, stored)
        entry.reward_per_unit_paid = stored
        log.debug("checkpoint account=%s rpu=%s owed=%s", account, stored, entry.owed_reward)
    return stored


__all__ = ["checkpoint"]
