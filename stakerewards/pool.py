from __future__ import annotations

"""
Staking-rewards pool
--------------------

Distributes a funded amount of reward token to stakers of a deposit token,
pro rata to stake size and duration, over a renewable funding period.

Every mutating operation follows the same shape:

  1) read the clock once
  2) take the pool lock and the re-entrancy latch
  3) open a transaction (ledger undo log, state copy, event mark, custody)
  4) run the checkpoint protocol (global, plus the acting account if any)
  5) validate, mutate, call the asset-transfer collaborator, emit events
  6) commit - or, on any exception, roll everything back and re-raise

Gates (owner / funding authority / paused) and custody are collaborators the
pool queries; it never stores who the owner is or moves tokens itself.

Typical flow
~~~~~~~~~~~~
    pool.stake("alice", 100)
    pool.notify_reward_amount("distributor", 100_000)
    ...
    pool.get_reward("alice")
    pool.exit("alice")
"""

import logging
from contextlib import contextmanager
from threading import RLock
from typing import Any, Dict, Iterator, List, Optional, Protocol, Tuple, runtime_checkable

from . import metrics
from .adapters.assets import AssetTransfer, Transactional
from .adapters.clock import Clock
from .config import PoolConfig
from .control.access import OWNER_ROLE, REWARDS_DISTRIBUTION_ROLE, Authority
from .control.guard import ReentrancyGuard
from .control.pausable import PauseGate, require_not_paused
from .errors import (
    ForbiddenAsset,
    InvalidArgument,
    LockedFunds,
    ReentrancyDetected,
    StakeRewardsError,
    Unauthorized,
)
from .fixedpoint import FixedPoint
from .ledger import period
from .ledger.accounts import AccountLedger
from .ledger.accumulator import earned, last_applicable_time, reward_per_unit
from .ledger.checkpoint import checkpoint
from .pooltypes.account import AccountEntry, AccountId
from .pooltypes.events import (
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
from .pooltypes.state import GlobalRewardState, PeriodPhase

log = logging.getLogger(__name__)

_GUARD_SCOPE = "pool"


@runtime_checkable
class RoleAdmin(Protocol):
    """Authorities that let the owner re-point a role (e.g. `AccessControl`)."""

    def set_role_member(self, caller: str, role: str, account: str) -> None:
        ...


class StakingRewardsPool:
    """
    Reward-accrual orchestrator.

    Collaborators are passed in explicitly; the pool owns only its
    `GlobalRewardState`, its `AccountLedger` and its event log.
    """

    def __init__(
        self,
        *,
        clock: Clock,
        assets: AssetTransfer,
        authority: Authority,
        pause_gate: PauseGate,
        config: Optional[PoolConfig] = None,
    ) -> None:
        self.config = config or PoolConfig()
        self.config.validate()
        self._clock = clock
        self._assets = assets
        self._authority = authority
        self._pause_gate = pause_gate
        self._state = GlobalRewardState(
            rewards_duration=self.config.rewards_duration,
            minimum_stake_time=self.config.minimum_stake_time,
        )
        self._ledger = AccountLedger()
        self._events: List[PoolEvent] = []
        self._seq = 0
        self._guard = ReentrancyGuard()
        self._lock = RLock()

    @property
    def staking_token(self) -> str:
        return self.config.staking_token

    @property
    def rewards_token(self) -> str:
        return self.config.rewards_token

    # ------------------------------------------------------------------ #
    # Transaction plumbing
    # ------------------------------------------------------------------ #

    @contextmanager
    def _operation(self, kind: str) -> Iterator[None]:
        with metrics.time_operation(kind), self._lock:
            if self._guard.is_entered(_GUARD_SCOPE):
                metrics.record_rejection(kind, ReentrancyDetected.code)
                log.debug("%s rejected: reentrant call", kind)
                raise ReentrancyDetected("reentrant call", details={"scope": _GUARD_SCOPE})
            with self._guard.held(_GUARD_SCOPE):
                saved_state = self._state.copy()
                saved_events = len(self._events)
                saved_seq = self._seq
                custody = self._assets if isinstance(self._assets, Transactional) else None
                self._ledger.begin()
                if custody is not None:
                    custody.begin()
                try:
                    yield
                except Exception as e:
                    self._ledger.rollback()
                    if custody is not None:
                        custody.rollback()
                    self._state = saved_state
                    del self._events[saved_events:]
                    self._seq = saved_seq
                    code = e.code if isinstance(e, StakeRewardsError) else type(e).__name__
                    metrics.record_rejection(kind, code)
                    if isinstance(e, StakeRewardsError):
                        log.debug("%s rejected: %s", kind, e)
                    else:
                        log.warning("%s rolled back after unexpected error: %r", kind, e)
                    raise
                self._ledger.commit()
                if custody is not None:
                    custody.commit()
                metrics.record_operation(kind)
                metrics.observe_state(self._ledger.total_staked, self._state.reward_rate)

    @contextmanager
    def _view(self) -> Iterator[None]:
        # other threads wait for the running operation; the same thread is refused
        with self._lock:
            if self._guard.is_entered(_GUARD_SCOPE):
                raise ReentrancyDetected("view called during a pool operation")
            yield

    def _emit(self, event_cls, now: int, **fields: Any) -> PoolEvent:
        self._seq += 1
        ev = event_cls(seq=self._seq, ts=now, **fields)
        self._events.append(ev)
        return ev

    def _require_role(self, caller: str, role: str) -> None:
        if not self._authority.is_authorized(caller, role):
            if role == OWNER_ROLE:
                msg = "only the owner may perform this action"
            else:
                msg = "caller is not the rewards distribution authority"
            raise Unauthorized(caller=caller, role=role, message=msg)

    def _require_unlocked(self, account: AccountId, now: int) -> None:
        unlocks_at = self._unlock_time(account)
        if unlocks_at is not None and now < unlocks_at:
            raise LockedFunds(account=account, unlocks_at=unlocks_at, now=now)

    def _unlock_time(self, account: AccountId) -> Optional[int]:
        """Timestamp the account's stake unlocks at; None when no lock applies."""
        mst = self._state.minimum_stake_time
        stamp = self._ledger.peek(account).stake_timestamp
        if mst <= 0 or stamp == 0:
            return None
        return stamp + mst

    # ------------------------------------------------------------------ #
    # Account operations
    # ------------------------------------------------------------------ #

    def stake(self, caller: AccountId, amount: int) -> int:
        """Deposit `amount` of the staking token. Returns the new balance."""
        now = self._clock.now()
        with self._operation("stake"):
            require_not_paused(self._pause_gate)
            checkpoint(self._state, self._ledger, now, caller)
            entry = self._ledger.deposit(caller, amount, now=now)
            self._assets.transfer_in(self.staking_token, caller, amount)
            self._emit(Staked, now, account=caller, amount=amount)
            log.info("staked account=%s amount=%s balance=%s", caller, amount, entry.balance)
            return entry.balance

    def withdraw(self, caller: AccountId, amount: int) -> int:
        """Withdraw `amount` of stake. Returns the remaining balance."""
        now = self._clock.now()
        with self._operation("withdraw"):
            return self._withdraw(caller, amount, now)

    def get_reward(self, caller: AccountId) -> int:
        """Pay out everything the caller has earned. Returns the amount paid."""
        now = self._clock.now()
        with self._operation("get_reward"):
            return self._get_reward(caller, now)

    def exit(self, caller: AccountId) -> Tuple[int, int]:
        """Withdraw the full balance, then claim. Returns (withdrawn, reward)."""
        now = self._clock.now()
        with self._operation("exit"):
            amount = self._ledger.balance_of(caller)
            self._withdraw(caller, amount, now)
            reward = self._get_reward(caller, now)
            return amount, reward

    def _withdraw(self, caller: AccountId, amount: int, now: int) -> int:
        checkpoint(self._state, self._ledger, now, caller)
        if amount <= 0:
            raise InvalidArgument("cannot withdraw 0", details={"amount": amount})
        self._require_unlocked(caller, now)
        entry = self._ledger.withdraw(caller, amount)
        self._assets.transfer_out(self.staking_token, caller, amount)
        self._emit(Withdrawn, now, account=caller, amount=amount)
        log.info("withdrawn account=%s amount=%s balance=%s", caller, amount, entry.balance)
        return entry.balance

    def _get_reward(self, caller: AccountId, now: int) -> int:
        checkpoint(self._state, self._ledger, now, caller)
        self._require_unlocked(caller, now)
        # owed is zeroed before the transfer runs
        reward = self._ledger.take_owed(caller)
        if reward > 0:
            self._assets.transfer_out(self.rewards_token, caller, reward)
            self._emit(RewardPaid, now, account=caller, reward=reward)
            metrics.record_reward_paid(reward)
            log.info("reward paid account=%s reward=%s", caller, reward)
        return reward

    # ------------------------------------------------------------------ #
    # Funding & administration
    # ------------------------------------------------------------------ #

    def notify_reward_amount(self, caller: str, reward: int) -> int:
        """
        Start or extend a reward period with `reward` more reward units.

        The reward must already sit in custody; the resulting rate is checked
        against the custody balance. Returns the new reward rate.
        """
        now = self._clock.now()
        with self._operation("notify_reward_amount"):
            self._require_role(caller, REWARDS_DISTRIBUTION_ROLE)
            checkpoint(self._state, self._ledger, now)
            rate = period.next_reward_rate(self._state, reward, now)
            period.check_solvency(
                rate, self._state.rewards_duration, self._assets.balance_of(self.rewards_token)
            )
            period.apply_funding(self._state, rate, now)
            self._emit(RewardAdded, now, reward=reward)
            metrics.record_funding(reward)
            log.info(
                "reward added reward=%s rate=%s period_finish=%s",
                reward, rate, self._state.period_finish,
            )
            return rate

    def update_period_finish(self, caller: str, timestamp: int) -> None:
        now = self._clock.now()
        with self._operation("update_period_finish"):
            self._require_role(caller, OWNER_ROLE)
            checkpoint(self._state, self._ledger, now)
            period.apply_period_finish(self._state, timestamp)
            self._emit(PeriodFinishUpdated, now, new_finish=timestamp)
            log.info("period finish updated to %s", timestamp)

    def set_rewards_duration(self, caller: str, duration: int) -> None:
        now = self._clock.now()
        with self._operation("set_rewards_duration"):
            self._require_role(caller, OWNER_ROLE)
            period.apply_rewards_duration(self._state, duration, now)
            self._emit(RewardsDurationUpdated, now, new_duration=duration)
            log.info("rewards duration updated to %s", duration)

    def set_minimum_stake_time(self, caller: str, value: int) -> None:
        now = self._clock.now()
        with self._operation("set_minimum_stake_time"):
            self._require_role(caller, OWNER_ROLE)
            if value < 0:
                raise InvalidArgument("minimum stake time must be non-negative", details={"value": value})
            self._state.minimum_stake_time = value
            self._emit(MinimumStakeTimeUpdated, now, new_value=value)
            log.info("minimum stake time updated to %s", value)

    def set_rewards_distribution(self, caller: str, account: str) -> None:
        now = self._clock.now()
        with self._operation("set_rewards_distribution"):
            self._require_role(caller, OWNER_ROLE)
            if not account:
                raise InvalidArgument("rewards distribution must be a non-empty identity")
            if not isinstance(self._authority, RoleAdmin):
                raise InvalidArgument("authority does not support changing role members")
            self._authority.set_role_member(caller, REWARDS_DISTRIBUTION_ROLE, account)
            self._emit(RewardsDistributionUpdated, now, new_distribution=account)
            log.info("rewards distribution set to %s", account)

    def recover_asset(self, caller: str, token: str, amount: int) -> None:
        """Send an unrelated asset held by the pool to the owner."""
        now = self._clock.now()
        with self._operation("recover_asset"):
            self._require_role(caller, OWNER_ROLE)
            if token == self.staking_token:
                raise ForbiddenAsset("cannot withdraw the staking token", details={"token": token})
            if amount <= 0:
                raise InvalidArgument("cannot recover 0", details={"amount": amount})
            self._assets.transfer_out(token, caller, amount)
            self._emit(Recovered, now, token=token, amount=amount)
            log.info("recovered token=%s amount=%s to=%s", token, amount, caller)

    # ------------------------------------------------------------------ #
    # Views
    # ------------------------------------------------------------------ #

    def total_staked(self) -> int:
        with self._view():
            return self._ledger.total_staked

    def balance_of(self, account: AccountId) -> int:
        with self._view():
            return self._ledger.balance_of(account)

    def last_time_reward_applicable(self) -> int:
        with self._view():
            return last_applicable_time(self._state, self._clock.now())

    def reward_per_unit(self) -> int:
        """Current accumulator value in 1e18 units."""
        with self._view():
            return reward_per_unit(self._state, self._ledger.total_staked, self._clock.now())

    def reward_per_unit_fp(self) -> FixedPoint:
        return FixedPoint(self.reward_per_unit())

    def earned(self, account: AccountId) -> int:
        with self._view():
            rpu = reward_per_unit(self._state, self._ledger.total_staked, self._clock.now())
            return earned(self._ledger.peek(account), rpu)

    def reward_for_duration(self) -> int:
        with self._view():
            return period.reward_for_duration(self._state)

    def time_until_period_finish(self) -> int:
        with self._view():
            return period.time_until_period_finish(self._state, self._clock.now())

    def time_until_unlock(self, account: AccountId) -> int:
        with self._view():
            unlocks_at = self._unlock_time(account)
            if unlocks_at is None:
                return 0
            return max(0, unlocks_at - self._clock.now())

    def period_phase(self) -> PeriodPhase:
        with self._view():
            return period.phase(self._state, self._clock.now())

    def accounts(self) -> List[AccountId]:
        """Every account identity the ledger has a row for."""
        with self._view():
            return [a for a, _ in self._ledger.accounts()]

    def account(self, account: AccountId) -> AccountEntry:
        with self._view():
            return self._ledger.peek(account)

    def state(self) -> GlobalRewardState:
        with self._view():
            return self._state.copy()

    def events(self) -> Tuple[PoolEvent, ...]:
        with self._lock:
            return tuple(self._events)

    def assert_invariants(self) -> None:
        """Verify ledger conservation/lock invariants and the timestamp bound."""
        self._ledger.assert_consistent()
        now = self._clock.now()
        if self._state.last_update_time > min(now, self._state.period_finish):
            raise AssertionError(
                f"last_update_time={self._state.last_update_time} beyond "
                f"min(now={now}, period_finish={self._state.period_finish})"
            )

    # ------------------------------------------------------------------ #
    # Snapshots
    # ------------------------------------------------------------------ #

    def dump(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "config": self.config.to_dict(),
                "state": self._state.to_dict(),
                "ledger": self._ledger.dump(),
                "events": [serialize_event(e) for e in self._events],
            }

    @classmethod
    def load(
        cls,
        data: Dict[str, Any],
        *,
        clock: Clock,
        assets: AssetTransfer,
        authority: Authority,
        pause_gate: PauseGate,
    ) -> "StakingRewardsPool":
        cfg = PoolConfig(**data.get("config", {}))
        pool = cls(clock=clock, assets=assets, authority=authority, pause_gate=pause_gate, config=cfg)
        pool._state = GlobalRewardState.from_dict(data.get("state", {}))
        pool._ledger = AccountLedger.load(data.get("ledger", {}))
        pool._events = [deserialize_event(d) for d in data.get("events", [])]
        pool._seq = pool._events[-1].seq if pool._events else 0
        return pool


__all__ = ["StakingRewardsPool", "RoleAdmin"]
