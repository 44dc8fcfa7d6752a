from __future__ import annotations

from typing import Callable

import pytest

from stakerewards.adapters.assets import InMemoryVault
from stakerewards.adapters.clock import ManualClock
from stakerewards.config import PoolConfig
from stakerewards.control.access import AccessControl
from stakerewards.control.pausable import PauseSwitch
from stakerewards.pool import StakingRewardsPool

from . import DISTRIBUTOR, DURATION, OWNER, REWARD, STAKE, T0


@pytest.fixture(autouse=True)
def _clear_stakerewards_env(monkeypatch):
    # Keep host environment from leaking into config-driven code paths.
    import os
    for k in list(os.environ):
        if k.startswith("STAKEREWARDS_"):
            monkeypatch.delenv(k, raising=False)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(T0)


@pytest.fixture
def vault() -> InMemoryVault:
    return InMemoryVault()


@pytest.fixture
def access() -> AccessControl:
    return AccessControl(OWNER, rewards_distribution=DISTRIBUTOR)


@pytest.fixture
def pause(access, clock) -> PauseSwitch:
    return PauseSwitch(access, now=clock.now)


@pytest.fixture
def make_pool(clock, vault, access, pause) -> Callable[..., StakingRewardsPool]:
    """Factory: build a pool over the shared collaborators with config overrides."""

    def _make(**overrides) -> StakingRewardsPool:
        params = dict(staking_token=STAKE, rewards_token=REWARD, rewards_duration=DURATION)
        params.update(overrides)
        return StakingRewardsPool(
            clock=clock,
            assets=vault,
            authority=access,
            pause_gate=pause,
            config=PoolConfig(**params),
        )

    return _make


@pytest.fixture
def pool(make_pool) -> StakingRewardsPool:
    return make_pool()


@pytest.fixture
def stake(pool, vault) -> Callable[[str, int], int]:
    """Mint `amount` of the staking token to `account`, then stake it."""

    def _stake(account: str, amount: int) -> int:
        vault.mint(pool.staking_token, account, amount)
        return pool.stake(account, amount)

    return _stake


@pytest.fixture
def fund(pool, vault) -> Callable[[int], int]:
    """Move `amount` of reward into custody, then notify it. Returns the new rate."""

    def _fund(amount: int) -> int:
        vault.mint(pool.rewards_token, DISTRIBUTOR, amount)
        vault.transfer_in(pool.rewards_token, DISTRIBUTOR, amount)
        return pool.notify_reward_amount(DISTRIBUTOR, amount)

    return _fund
