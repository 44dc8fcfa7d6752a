import pytest

from stakerewards.errors import InsufficientBalance, InvalidArgument
from stakerewards.ledger.accounts import AccountLedger, LedgerError


def test_deposit_sets_timestamp_once_and_tracks_total():
    led = AccountLedger()
    led.deposit("alice", 10, now=100)
    led.deposit("alice", 5, now=150)
    led.deposit("bob", 7, now=160)
    assert led.balance_of("alice") == 15
    assert led.peek("alice").stake_timestamp == 100
    assert led.total_staked == 22
    assert len(led) == 2 and "bob" in led
    led.assert_consistent()


def test_withdraw_to_zero_clears_timestamp():
    led = AccountLedger()
    led.deposit("alice", 10, now=100)
    led.withdraw("alice", 4)
    assert led.peek("alice").stake_timestamp == 100
    led.withdraw("alice", 6)
    row = led.peek("alice")
    assert row.balance == 0 and row.stake_timestamp == 0
    assert led.total_staked == 0
    led.assert_consistent()


def test_rejects_bad_amounts():
    led = AccountLedger()
    with pytest.raises(InvalidArgument):
        led.deposit("alice", 0, now=100)
    with pytest.raises(InvalidArgument):
        led.deposit("alice", 1, now=0)
    led.deposit("alice", 3, now=100)
    with pytest.raises(InvalidArgument):
        led.withdraw("alice", 0)
    with pytest.raises(InsufficientBalance) as ei:
        led.withdraw("alice", 4)
    assert ei.value.details == {"account": "alice", "requested": 4, "available": 3}


def test_peek_does_not_create_rows():
    led = AccountLedger()
    assert led.peek("ghost").balance == 0
    assert "ghost" not in led


def test_take_owed_zeroes():
    led = AccountLedger()
    led.entry("alice").owed_reward = 42
    assert led.take_owed("alice") == 42
    assert led.take_owed("alice") == 0


def test_rollback_restores_rows_and_total():
    led = AccountLedger()
    led.deposit("alice", 10, now=100)

    led.begin()
    assert led.in_transaction
    led.deposit("alice", 5, now=200)
    led.deposit("carol", 9, now=200)
    led.withdraw("alice", 15)
    led.rollback()

    assert not led.in_transaction
    assert led.balance_of("alice") == 10
    assert led.peek("alice").stake_timestamp == 100
    assert "carol" not in led
    assert led.total_staked == 10
    led.assert_consistent()


def test_commit_keeps_changes_and_nested_begin_fails():
    led = AccountLedger()
    led.begin()
    with pytest.raises(LedgerError):
        led.begin()
    led.deposit("alice", 10, now=100)
    led.commit()
    led.rollback()  # no open transaction; nothing to undo
    assert led.balance_of("alice") == 10


def test_dump_load_roundtrip_and_consistency_check():
    led = AccountLedger()
    led.deposit("alice", 10, now=100)
    led.entry("alice").owed_reward = 3
    snap = led.dump()
    again = AccountLedger.load(snap)
    assert again.dump() == snap

    snap["total_staked"] = 11
    with pytest.raises(LedgerError):
        AccountLedger.load(snap)

    broken = led.dump()
    broken["accounts"]["alice"]["stake_timestamp"] = 0
    with pytest.raises(LedgerError):
        AccountLedger.load(broken)
