from __future__ import annotations
"""
Global reward state and reward-period phases.

`GlobalRewardState` is mutated only by the checkpoint protocol and the period
helpers in ``stakerewards.ledger``; everything else treats it as read-only.
"""


from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any, Dict, Mapping

# 180 days in seconds.
DEFAULT_REWARDS_DURATION: int = 180 * 24 * 3600


class PeriodPhase(str, Enum):
    IDLE = "idle"          # never funded (period_finish == 0)
    FUNDED = "funded"      # now < period_finish
    EXPIRED = "expired"    # now >= period_finish


@dataclass
class GlobalRewardState:
    reward_per_unit_stored: int = 0   # 1e18-scaled, never decreases
    last_update_time: int = 0         # <= min(now, period_finish)
    reward_rate: int = 0              # reward units per second
    period_finish: int = 0            # 0 before the first funding
    rewards_duration: int = DEFAULT_REWARDS_DURATION
    minimum_stake_time: int = 0       # 0 disables the lock

    def copy(self) -> "GlobalRewardState":
        return replace(self)

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "GlobalRewardState":
        return GlobalRewardState(
            reward_per_unit_stored=int(d.get("reward_per_unit_stored", 0)),
            last_update_time=int(d.get("last_update_time", 0)),
            reward_rate=int(d.get("reward_rate", 0)),
            period_finish=int(d.get("period_finish", 0)),
            rewards_duration=int(d.get("rewards_duration", DEFAULT_REWARDS_DURATION)),
            minimum_stake_time=int(d.get("minimum_stake_time", 0)),
        )


__all__ = ["DEFAULT_REWARDS_DURATION", "PeriodPhase", "GlobalRewardState"]
