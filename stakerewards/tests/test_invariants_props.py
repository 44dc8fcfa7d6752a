"""
Property tests: random operation sequences keep the ledger conserved, never
pay out more reward than was funded, and leave every failed call without
side effects.
"""
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from stakerewards.adapters.assets import InMemoryVault
from stakerewards.adapters.clock import ManualClock
from stakerewards.config import PoolConfig
from stakerewards.control.access import AccessControl
from stakerewards.control.pausable import PauseSwitch
from stakerewards.errors import StakeRewardsError
from stakerewards.pool import StakingRewardsPool

from . import DISTRIBUTOR, OWNER, REWARD, STAKE, T0

ACCOUNTS = ("alice", "bob", "carol")

_ops = st.one_of(
    st.tuples(st.just("advance"), st.integers(0, 80)),
    st.tuples(st.just("stake"), st.sampled_from(ACCOUNTS), st.integers(0, 1_000)),
    st.tuples(st.just("withdraw"), st.sampled_from(ACCOUNTS), st.integers(0, 1_000)),
    st.tuples(st.just("get_reward"), st.sampled_from(ACCOUNTS)),
    st.tuples(st.just("exit"), st.sampled_from(ACCOUNTS)),
    st.tuples(st.just("fund"), st.integers(0, 50_000)),
    st.tuples(st.just("notify_unfunded"), st.integers(1, 50_000)),
)


def _build():
    clock = ManualClock(T0)
    vault = InMemoryVault()
    access = AccessControl(OWNER, rewards_distribution=DISTRIBUTOR)
    pool = StakingRewardsPool(
        clock=clock,
        assets=vault,
        authority=access,
        pause_gate=PauseSwitch(access),
        config=PoolConfig(staking_token=STAKE, rewards_token=REWARD, rewards_duration=60, minimum_stake_time=5),
    )
    for a in ACCOUNTS:
        vault.mint(STAKE, a, 10_000)
    return clock, vault, pool


def _apply(clock, vault, pool, op):
    kind = op[0]
    if kind == "advance":
        clock.advance(op[1])
    elif kind == "stake":
        pool.stake(op[1], op[2])
    elif kind == "withdraw":
        pool.withdraw(op[1], op[2])
    elif kind == "get_reward":
        pool.get_reward(op[1])
    elif kind == "exit":
        pool.exit(op[1])
    elif kind == "fund":
        vault.mint(REWARD, DISTRIBUTOR, op[1])
        vault.transfer_in(REWARD, DISTRIBUTOR, op[1])
        pool.notify_reward_amount(DISTRIBUTOR, op[1])
    elif kind == "notify_unfunded":
        pool.notify_reward_amount(DISTRIBUTOR, op[1])


# the autouse env scrubber is function-scoped and safe to share across examples
_SETTINGS = settings(suppress_health_check=[HealthCheck.function_scoped_fixture])


@_SETTINGS
@given(st.lists(_ops, min_size=1, max_size=40))
def test_random_sequences_preserve_invariants(ops):
    clock, vault, pool = _build()
    funded_into_custody = 0
    for op in ops:
        before = pool.dump()
        stored_before = pool.state().reward_per_unit_stored
        custody_before = (vault.balance_of(STAKE), vault.balance_of(REWARD))
        if op[0] == "fund":
            funded_into_custody += op[1]
        try:
            _apply(clock, vault, pool, op)
        except StakeRewardsError:
            assert pool.dump() == before
            if op[0] != "fund":
                assert (vault.balance_of(STAKE), vault.balance_of(REWARD)) == custody_before
        pool.assert_invariants()

        # the accumulator never moves backwards and nobody is owed a negative amount
        assert pool.state().reward_per_unit_stored >= stored_before
        assert all(pool.earned(a) >= 0 for a in ACCOUNTS)

        # stake custody mirrors the ledger
        assert vault.balance_of(STAKE) == pool.total_staked()
        # rewards paid out never exceed what went into custody
        paid = sum(vault.holder_balance(REWARD, a) for a in ACCOUNTS)
        assert paid + vault.balance_of(REWARD) == funded_into_custody


@_SETTINGS
@given(
    st.integers(1, 10**6),
    st.integers(1, 10**6),
    st.integers(1, 10**9),
    st.integers(0, 200),
)
def test_two_stakers_never_earn_more_than_emitted(a_amt, b_amt, reward, elapsed):
    clock, vault, pool = _build()
    vault.mint(STAKE, "alice", a_amt)
    vault.mint(STAKE, "bob", b_amt)
    pool.stake("alice", a_amt)
    pool.stake("bob", b_amt)
    vault.mint(REWARD, DISTRIBUTOR, reward)
    vault.transfer_in(REWARD, DISTRIBUTOR, reward)
    rate = pool.notify_reward_amount(DISTRIBUTOR, reward)
    clock.advance(elapsed)
    emitted = rate * min(elapsed, 60)
    total = pool.earned("alice") + pool.earned("bob")
    assert total <= emitted
    # truncation loses at most one unit per staker
    assert emitted - total <= 2
