from __future__ import annotations
"""
Pool event types.

Every successful mutating operation appends one or more events to the pool's
append-only log. Events are frozen dataclasses with JSON-serializable fields:

  - RewardAdded:                 the funding authority topped up / started a period.
  - Staked:                      an account deposited stake.
  - Withdrawn:                   an account took stake back out.
  - RewardPaid:                  owed reward was transferred to an account.
  - RewardsDurationUpdated:      the owner changed the period length.
  - MinimumStakeTimeUpdated:     the owner changed the lock time.
  - PeriodFinishUpdated:         the owner moved the current period's end.
  - RewardsDistributionUpdated:  the funding authority was re-pointed.
  - Recovered:                   the owner pulled an unrelated asset out.

`seq` is a per-pool sequence number (starting at 1); `ts` is the clock reading
of the operation that emitted the event.
"""


from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Dict, Mapping, Type, Union


class EventType(str, Enum):
    REWARD_ADDED = "RewardAdded"
    STAKED = "Staked"
    WITHDRAWN = "Withdrawn"
    REWARD_PAID = "RewardPaid"
    REWARDS_DURATION_UPDATED = "RewardsDurationUpdated"
    MINIMUM_STAKE_TIME_UPDATED = "MinimumStakeTimeUpdated"
    PERIOD_FINISH_UPDATED = "PeriodFinishUpdated"
    REWARDS_DISTRIBUTION_UPDATED = "RewardsDistributionUpdated"
    RECOVERED = "Recovered"


@dataclass(frozen=True)
class _Event:
    seq: int
    ts: int

    etype = None  # type: EventType  # set on subclasses

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["etype"] = self.etype.value
        return d

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]):
        kwargs = {}
        for f in fields(cls):
            # ints stay ints, identities stay strings
            kwargs[f.name] = int(d[f.name]) if f.type in ("int", int) else str(d[f.name])
        return cls(**kwargs)


@dataclass(frozen=True)
class RewardAdded(_Event):
    reward: int
    etype = EventType.REWARD_ADDED


@dataclass(frozen=True)
class Staked(_Event):
    account: str
    amount: int
    etype = EventType.STAKED


@dataclass(frozen=True)
class Withdrawn(_Event):
    account: str
    amount: int
    etype = EventType.WITHDRAWN


@dataclass(frozen=True)
class RewardPaid(_Event):
    account: str
    reward: int
    etype = EventType.REWARD_PAID


@dataclass(frozen=True)
class RewardsDurationUpdated(_Event):
    new_duration: int
    etype = EventType.REWARDS_DURATION_UPDATED


@dataclass(frozen=True)
class MinimumStakeTimeUpdated(_Event):
    new_value: int
    etype = EventType.MINIMUM_STAKE_TIME_UPDATED


@dataclass(frozen=True)
class PeriodFinishUpdated(_Event):
    new_finish: int
    etype = EventType.PERIOD_FINISH_UPDATED


@dataclass(frozen=True)
class RewardsDistributionUpdated(_Event):
    new_distribution: str
    etype = EventType.REWARDS_DISTRIBUTION_UPDATED


@dataclass(frozen=True)
class Recovered(_Event):
    token: str
    amount: int
    etype = EventType.RECOVERED


# Union of all events
PoolEvent = Union[
    RewardAdded,
    Staked,
    Withdrawn,
    RewardPaid,
    RewardsDurationUpdated,
    MinimumStakeTimeUpdated,
    PeriodFinishUpdated,
    RewardsDistributionUpdated,
    Recovered,
]

_BY_TYPE: Dict[EventType, Type[_Event]] = {
    cls.etype: cls
    for cls in (
        RewardAdded,
        Staked,
        Withdrawn,
        RewardPaid,
        RewardsDurationUpdated,
        MinimumStakeTimeUpdated,
        PeriodFinishUpdated,
        RewardsDistributionUpdated,
        Recovered,
    )
}


# ────────────────────────────────────────────────────────────────────────────────
# Generic (de)serialization
# ────────────────────────────────────────────────────────────────────────────────

def serialize_event(ev: PoolEvent) -> Dict[str, Any]:
    """Serialize any pool event to a JSON-serializable dict."""
    return ev.to_dict()


def deserialize_event(d: Mapping[str, Any]) -> PoolEvent:
    """Instantiate a concrete event from a dict with an 'etype' discriminator."""
    etype = EventType(d["etype"])
    cls = _BY_TYPE.get(etype)
    if cls is None:  # pragma: no cover - every EventType is mapped
        raise ValueError(f"Unknown event etype: {etype!r}")
    return cls.from_dict(d)  # type: ignore[return-value]


__all__ = [
    "EventType",
    "RewardAdded",
    "Staked",
    "Withdrawn",
    "RewardPaid",
    "RewardsDurationUpdated",
    "MinimumStakeTimeUpdated",
    "PeriodFinishUpdated",
    "RewardsDistributionUpdated",
    "Recovered",
    "PoolEvent",
    "serialize_event",
    "deserialize_event",
]
