from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping

AccountId = str


@dataclass
class AccountEntry:
    """
    Per-account ledger row.

    Fields:
      - balance: staked amount (>= 0).
      - stake_timestamp: time of the first deposit since the balance was last 0;
        0 means the account is not currently locked.
      - reward_per_unit_paid: accumulator value (1e18-scaled) at the account's
        last checkpoint.
      - owed_reward: reward accrued but not yet paid out.
    """
    balance: int = 0
    stake_timestamp: int = 0
    reward_per_unit_paid: int = 0
    owed_reward: int = 0

    def copy(self) -> "AccountEntry":
        return AccountEntry(**asdict(self))

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "AccountEntry":
        return AccountEntry(
            balance=int(d.get("balance", 0)),
            stake_timestamp=int(d.get("stake_timestamp", 0)),
            reward_per_unit_paid=int(d.get("reward_per_unit_paid", 0)),
            owed_reward=int(d.get("owed_reward", 0)),
        )


__all__ = ["AccountId", "AccountEntry"]
