from __future__ import annotations
"""
Typed records shared across the pool: ledger rows, global reward state,
period phases and the event payloads.
"""

from .account import AccountEntry, AccountId
from .events import (
    EventType,
    MinimumStakeTimeUpdated,
    PeriodFinishUpdated,
    PoolEvent,
    Recovered,
    RewardAdded,
    RewardPaid,
    RewardsDistributionUpdated,
    RewardsDurationUpdated,
    Staked,
    Withdrawn,
    deserialize_event,
    serialize_event,
)
from .state import DEFAULT_REWARDS_DURATION, GlobalRewardState, PeriodPhase

__all__ = [
    "AccountEntry",
    "AccountId",
    "GlobalRewardState",
    "PeriodPhase",
    "DEFAULT_REWARDS_DURATION",
    "EventType",
    "PoolEvent",
    "RewardAdded",
    "Staked",
    "Withdrawn",
    "RewardPaid",
    "RewardsDurationUpdated",
    "MinimumStakeTimeUpdated",
    "PeriodFinishUpdated",
    "RewardsDistributionUpdated",
    "Recovered",
    "serialize_event",
    "deserialize_event",
]
