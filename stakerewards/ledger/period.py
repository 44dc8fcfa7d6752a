from __future__ import annotations

"""
Reward-period arithmetic.

State machine
-------------
    IDLE (period_finish == 0)
      └─ fund ──► FUNDED (now < period_finish)
                    └─ time ──► EXPIRED (now >= period_finish)
                                  └─ fund ──► FUNDED (leftover rolled in)

A mid-period funding call folds the not-yet-emitted part of the current
period into the new rate:

    leftover  = (period_finish - now) * reward_rate
    new_rate  = (reward + leftover) // rewards_duration

so nothing already promised is discarded. The solvency bound

    new_rate <= reward_balance // rewards_duration

caps total emission by the reward funds actually held and keeps
``elapsed * rate * SCALE`` inside the u256 envelope.

These helpers validate and mutate a `GlobalRewardState` in place; the caller
runs the global checkpoint first.
"""

from ..errors import InsolventFunding, InvalidArgument, InvalidOrdering, PeriodInProgress
from ..fixedpoint import checked_add, checked_div, checked_mul
from ..pooltypes.state import GlobalRewardState, PeriodPhase


def phase(state: GlobalRewardState, now: int) -> PeriodPhase:
    if state.period_finish == 0:
        return PeriodPhase.IDLE
    if now < state.period_finish:
        return PeriodPhase.FUNDED
    return PeriodPhase.EXPIRED


def leftover(state: GlobalRewardState, now: int) -> int:
    """Reward still to be emitted at the current rate (0 outside a funded period)."""
    if now >= state.period_finish:
        return 0
    return checked_mul(state.period_finish - now, state.reward_rate)


def next_reward_rate(state: GlobalRewardState, reward: int, now: int) -> int:
    """Rate a funding call of `reward` at `now` would set."""
    if reward < 0:
        raise InvalidArgument("reward must be non-negative", details={"reward": reward})
    return checked_div(checked_add(reward, leftover(state, now)), state.rewards_duration)


def check_solvency(reward_rate: int, rewards_duration: int, reward_balance: int) -> None:
    max_rate = checked_div(reward_balance, rewards_duration)
    if reward_rate > max_rate:
        raise InsolventFunding(
            reward_rate=reward_rate, max_rate=max_rate, reward_balance=reward_balance
        )


def apply_funding(state: GlobalRewardState, reward_rate: int, now: int) -> None:
    state.reward_rate = reward_rate
    state.last_update_time = now
    state.period_finish = checked_add(now, state.rewards_duration)


def apply_period_finish(state: GlobalRewardState, timestamp: int) -> None:
    """Move the end of the current period; the rate is left untouched."""
    if timestamp <= state.last_update_time:
        raise InvalidOrdering(
            "period finish must be after the last update",
            details={"timestamp": timestamp, "last_update_time": state.last_update_time},
        )
    state.period_finish = timestamp


def apply_rewards_duration(state: GlobalRewardState, duration: int, now: int) -> None:
    if now <= state.period_finish:
        raise PeriodInProgress(
            "previous rewards period must be complete before changing the duration",
            details={"now": now, "period_finish": state.period_finish},
        )
    if duration <= 0:
        raise InvalidArgument("rewards duration must be positive", details={"duration": duration})
    state.rewards_duration = duration


def reward_for_duration(state: GlobalRewardState) -> int:
    return checked_mul(state.reward_rate, state.rewards_duration)


def time_until_period_finish(state: GlobalRewardState, now: int) -> int:
    return max(0, state.period_finish - now)


__all__ = [
    "phase",
    "leftover",
    "next_reward_rate",
    "check_solvency",
    "apply_funding",
    "apply_period_finish",
    "apply_rewards_duration",
    "reward_for_duration",
    "time_until_period_finish",
]
