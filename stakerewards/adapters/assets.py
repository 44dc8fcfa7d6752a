from __future__ import annotations

"""
stakerewards.adapters.assets
============================

Asset-transfer seam between the pool and whatever actually custodies tokens.

The pool calls three primitives and implements none of them:

- ``transfer_in(token, from_account, amount)`` - pull `amount` of `token` from
  `from_account` into pool custody;
- ``transfer_out(token, to_account, amount)`` - push `amount` of `token` out of
  custody to `to_account`;
- ``balance_of(token)`` - amount of `token` currently held by the pool.

A transfer that cannot complete must raise; the pool then rolls back the whole
operation. Custodians that can undo their own transfers also implement
`Transactional` (``begin`` / ``commit`` / ``rollback``); the pool drives it so an
operation that fails after a transfer leaves custody untouched as well.

`InMemoryVault` keeps plain per-token, per-holder integer balances and is what
the CLI simulator and the test-suite use.
"""

import logging
from typing import Dict, Optional, Protocol, Tuple, runtime_checkable

from ..errors import InvalidArgument, TransferFailed

log = logging.getLogger(__name__)


@runtime_checkable
class AssetTransfer(Protocol):
    def transfer_in(self, token: str, from_account: str, amount: int) -> None:
        ...

    def transfer_out(self, token: str, to_account: str, amount: int) -> None:
        ...

    def balance_of(self, token: str) -> int:
        ...


@runtime_checkable
class Transactional(Protocol):
    def begin(self) -> None:
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...


class InMemoryVault:
    """Holder balances plus a custody balance per token."""

    def __init__(self) -> None:
        self._holders: Dict[str, Dict[str, int]] = {}
        self._custody: Dict[str, int] = {}
        self._saved: Optional[Tuple[Dict[str, Dict[str, int]], Dict[str, int]]] = None

    # --- queries ---

    def balance_of(self, token: str) -> int:
        return self._custody.get(token, 0)

    def holder_balance(self, token: str, account: str) -> int:
        return self._holders.get(token, {}).get(account, 0)

    # --- setup ---

    def mint(self, token: str, account: str, amount: int) -> int:
        """Credit `account` with freshly created `token` (outside custody)."""
        if amount < 0:
            raise InvalidArgument("mint amount must be non-negative", details={"amount": amount})
        book = self._holders.setdefault(token, {})
        book[account] = book.get(account, 0) + amount
        return book[account]

    # --- Transactional ---

    def begin(self) -> None:
        self._saved = ({t: dict(b) for t, b in self._holders.items()}, dict(self._custody))

    def commit(self) -> None:
        self._saved = None

    def rollback(self) -> None:
        if self._saved is None:
            return
        self._holders, self._custody = self._saved
        self._saved = None

    # --- AssetTransfer ---

    def transfer_in(self, token: str, from_account: str, amount: int) -> None:
        book = self._holders.setdefault(token, {})
        have = book.get(from_account, 0)
        if amount < 0 or have < amount:
            raise TransferFailed(
                "insufficient holder balance",
                token=token,
                account=from_account,
                amount=amount,
                details={"available": have},
            )
        book[from_account] = have - amount
        self._custody[token] = self._custody.get(token, 0) + amount
        log.debug("transfer_in token=%s from=%s amount=%s", token, from_account, amount)

    def transfer_out(self, token: str, to_account: str, amount: int) -> None:
        held = self._custody.get(token, 0)
        if amount < 0 or held < amount:
            raise TransferFailed(
                "insufficient custody balance",
                token=token,
                account=to_account,
                amount=amount,
                details={"held": held},
            )
        self._custody[token] = held - amount
        book = self._holders.setdefault(token, {})
        book[to_account] = book.get(to_account, 0) + amount
        log.debug("transfer_out token=%s to=%s amount=%s", token, to_account, amount)


__all__ = ["AssetTransfer", "Transactional", "InMemoryVault"]
