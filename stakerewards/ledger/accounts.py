from __future__ import annotations

"""
Account ledger - per-account stake rows and the aggregate total
---------------------------------------------------------------

This module keeps the *internal*, deterministic stake ledger:
  • one `AccountEntry` per account identity (created on first touch, never deleted)
  • `total_staked`, kept equal to the sum of all balances

It is storage-agnostic and uses plain dicts. Persistence is delegated to the
caller, which can snapshot `AccountLedger.dump()` and restore via
`AccountLedger.load()`.

Amounts are integer base units (no floats). Every mutation checks:
  • amount > 0
  • sufficient balance before debits
  • stake_timestamp == 0  <=>  balance == 0

Transactions
~~~~~~~~~~~~
`begin()` starts an undo log; every entry touched afterwards is copied once
before its first change. `rollback()` restores those copies and the total;
`commit()` drops the log. The pool wraps each public operation in one
transaction so a failure anywhere (including the asset-transfer collaborator)
leaves the ledger exactly as it was.
"""

from typing import Dict, Iterator, Optional, Tuple

from ..errors import InsufficientBalance, InvalidArgument, StakeRewardsError
from ..fixedpoint import checked_add, checked_sub
from ..pooltypes.account import AccountEntry, AccountId


class LedgerError(StakeRewardsError):
    """Internal consistency failure of the account ledger."""
    code = "STAKE_LEDGER_ERROR"


class AccountLedger:
    """Keyed map of account rows plus the aggregate staked total."""

    def __init__(self) -> None:
        self._entries: Dict[AccountId, AccountEntry] = {}
        self._total_staked: int = 0
        # undo log: account -> original row (None if the row did not exist)
        self._undo: Optional[Dict[AccountId, Optional[AccountEntry]]] = None
        self._undo_total: int = 0

    # --- introspection ---

    @property
    def total_staked(self) -> int:
        return self._total_staked

    def balance_of(self, account: AccountId) -> int:
        entry = self._entries.get(account)
        return entry.balance if entry is not None else 0

    def peek(self, account: AccountId) -> AccountEntry:
        """Row for `account` without creating it (a zero row if unknown)."""
        entry = self._entries.get(account)
        return entry.copy() if entry is not None else AccountEntry()

    def entry(self, account: AccountId) -> AccountEntry:
        """Mutable row for `account`, created on first touch."""
        self._remember(account)
        entry = self._entries.get(account)
        if entry is None:
            entry = AccountEntry()
            self._entries[account] = entry
        return entry

    def accounts(self) -> Iterator[Tuple[AccountId, AccountEntry]]:
        for k in sorted(self._entries):
            yield k, self._entries[k].copy()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, account: object) -> bool:
        return account in self._entries

    # --- mutations ---

    def deposit(self, account: AccountId, amount: int, *, now: int) -> AccountEntry:
        """Add stake; starts the lock clock only if the account was not locked."""
        if amount <= 0:
            raise InvalidArgument("cannot stake 0", details={"amount": amount})
        if now <= 0:
            # 0 is reserved for "not locked"
            raise InvalidArgument("stake timestamp must be positive", details={"now": now})
        entry = self.entry(account)
        self._total_staked = checked_add(self._total_staked, amount)
        entry.balance = checked_add(entry.balance, amount)
        if entry.stake_timestamp == 0:
            entry.stake_timestamp = now
        return entry

    def withdraw(self, account: AccountId, amount: int) -> AccountEntry:
        """Remove stake; clears the lock timestamp once the balance reaches zero."""
        if amount <= 0:
            raise InvalidArgument("cannot withdraw 0", details={"amount": amount})
        entry = self.entry(account)
        if amount > entry.balance:
            raise InsufficientBalance(account=account, requested=amount, available=entry.balance)
        self._total_staked = checked_sub(self._total_staked, amount)
        entry.balance -= amount
        if entry.balance == 0:
            entry.stake_timestamp = 0
        return entry

    def take_owed(self, account: AccountId) -> int:
        """Zero the account's owed reward and return what it was."""
        entry = self.entry(account)
        owed = entry.owed_reward
        entry.owed_reward = 0
        return owed

    # --- transactions ---

    def begin(self) -> None:
        if self._undo is not None:
            raise LedgerError("ledger transaction already open")
        self._undo = {}
        self._undo_total = self._total_staked

    def commit(self) -> None:
        self._undo = None

    def rollback(self) -> None:
        if self._undo is None:
            return
        for account, original in self._undo.items():
            if original is None:
                self._entries.pop(account, None)
            else:
                self._entries[account] = original
        self._total_staked = self._undo_total
        self._undo = None

    @property
    def in_transaction(self) -> bool:
        return self._undo is not None

    def _remember(self, account: AccountId) -> None:
        if self._undo is None or account in self._undo:
            return
        existing = self._entries.get(account)
        self._undo[account] = existing.copy() if existing is not None else None

    # --- load/save ---

    def dump(self) -> Dict:
        return {
            "total_staked": self._total_staked,
            "accounts": {k: v.to_dict() for k, v in sorted(self._entries.items())},
        }

    @classmethod
    def load(cls, data: Dict) -> "AccountLedger":
        led = cls()
        for k, v in data.get("accounts", {}).items():
            led._entries[str(k)] = AccountEntry.from_dict(v)
        led._total_staked = int(data.get("total_staked", 0))
        led.assert_consistent()
        return led

    # --- utilities ---

    def assert_consistent(self) -> None:
        """Verify the conservation and lock invariants across all accounts."""
        total = 0
        for account, entry in self._entries.items():
            if entry.balance < 0 or entry.owed_reward < 0:
                raise LedgerError(f"negative amounts for {account}: {entry.to_dict()}")
            if (entry.stake_timestamp == 0) != (entry.balance == 0):
                raise LedgerError(
                    f"lock invariant violated for {account}: "
                    f"balance={entry.balance} stake_timestamp={entry.stake_timestamp}"
                )
            total += entry.balance
        if total != self._total_staked:
            raise LedgerError(
                f"conservation violated: total_staked={self._total_staked} != sum(balances)={total}"
            )


__all__ = ["AccountLedger", "LedgerError"]
