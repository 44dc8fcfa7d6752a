from __future__ import annotations

"""
Reward-per-staked-unit accumulator.

The pool emits ``reward_rate`` reward units per second while a period is
active. Instead of crediting every account each second, it tracks the running
integral

    R(t) = Σ  rate * dt * SCALE / total_staked

over time. An account that held ``b`` units between two checkpoints earned
``b * (R(t1) - R(t0)) / SCALE``. While ``total_staked == 0`` the integral does
not advance, so emission during an empty pool is never distributed later.

Every function here is pure: inputs in, integers out.
"""

from ..fixedpoint import SCALE, checked_add, checked_mul, checked_sub, mul_div_down
from ..pooltypes.account import AccountEntry
from ..pooltypes.state import GlobalRewardState


def last_applicable_time(state: GlobalRewardState, now: int) -> int:
    """min(now, period_finish)."""
    return min(now, state.period_finish)


def reward_per_unit(state: GlobalRewardState, total_staked: int, now: int) -> int:
    """Current accumulator value (1e18-scaled), without writing it back."""
    if total_staked == 0:
        return state.reward_per_unit_stored
    # A clock reading behind the last update applies no time.
    elapsed = max(0, last_applicable_time(state, now) - state.last_update_time)
    increment = mul_div_down(checked_mul(elapsed, state.reward_rate), SCALE, total_staked)
    return checked_add(state.reward_per_unit_stored, increment)


def earned(entry: AccountEntry, reward_per_unit_now: int) -> int:
    """Reward owed to `entry` if it were checkpointed at `reward_per_unit_now`."""
    delta = checked_sub(reward_per_unit_now, entry.reward_per_unit_paid)
    return checked_add(mul_div_down(entry.balance, delta, SCALE), entry.owed_reward)


__all__ = ["last_applicable_time", "reward_per_unit", "earned"]
