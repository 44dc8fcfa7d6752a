from __future__ import annotations
# stakerewards/errors.py
"""
Error types for the staking-rewards pool. Every rejection the pool can raise
has its own class with a short, stable ``code`` so callers, logs and metrics
can tell them apart without parsing messages.

All errors are raised synchronously *before* any state is committed; the pool
rolls back its ledger and event log on every failure path.

Exports:
- StakeRewardsError (base)
- InvalidArgument, InsufficientBalance, LockedFunds
- InsolventFunding, InvalidOrdering, PeriodInProgress
- ForbiddenAsset, Unauthorized, ReentrancyDetected, Paused
- ArithmeticOverflow, ArithmeticUnderflow, DivisionByZero
- TransferFailed
"""


from typing import Any, Dict, Mapping, Optional
import json


class StakeRewardsError(Exception):
    """Base class for pool domain errors."""

    code: str = "STAKE_ERROR"

    def __init__(self, message: str = "", *, details: Optional[Mapping[str, Any]] = None) -> None:
        self.message = message or self.__class__.__name__
        self.details = dict(details or {})
        super().__init__(self.__str__())

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.details:
            # Keep this compact and stable for logs
            packed = json.dumps(self.details, sort_keys=True, separators=(",", ":"), default=str)
            return f"{self.code}: {self.message} [{packed}]"
        return f"{self.code}: {self.message}"


class InvalidArgument(StakeRewardsError):
    """An amount, duration or other argument is outside its allowed domain."""
    code = "STAKE_INVALID_ARGUMENT"


class InsufficientBalance(StakeRewardsError):
    """Withdrawal larger than the account's staked balance."""
    code = "STAKE_INSUFFICIENT_BALANCE"

    def __init__(
        self,
        *,
        account: str,
        requested: int,
        available: int,
        message: str = "insufficient staked balance",
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        d.update({"account": account, "requested": int(requested), "available": int(available)})
        super().__init__(message, details=d)


class LockedFunds(StakeRewardsError):
    """The account's minimum stake time has not elapsed yet."""
    code = "STAKE_LOCKED"

    def __init__(
        self,
        *,
        account: str,
        unlocks_at: int,
        now: int,
        message: str = "stake is still time-locked",
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        d.update({"account": account, "unlocks_at": int(unlocks_at), "now": int(now)})
        super().__init__(message, details=d)


class InsolventFunding(StakeRewardsError):
    """A funding call would set a reward rate the held reward balance cannot cover."""
    code = "STAKE_INSOLVENT_FUNDING"

    def __init__(
        self,
        *,
        reward_rate: int,
        max_rate: int,
        reward_balance: int,
        message: str = "provided reward too high",
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        d.update(
            {
                "reward_rate": int(reward_rate),
                "max_rate": int(max_rate),
                "reward_balance": int(reward_balance),
            }
        )
        super().__init__(message, details=d)


class InvalidOrdering(StakeRewardsError):
    """A timestamp argument does not come after the last accounting update."""
    code = "STAKE_INVALID_ORDERING"


class PeriodInProgress(StakeRewardsError):
    """The operation is only allowed once the current reward period has ended."""
    code = "STAKE_PERIOD_IN_PROGRESS"


class ForbiddenAsset(StakeRewardsError):
    """Recovery of the staking token itself was requested."""
    code = "STAKE_FORBIDDEN_ASSET"


class Unauthorized(StakeRewardsError):
    """Caller lacks the capability (owner / funding authority) the call requires."""
    code = "STAKE_UNAUTHORIZED"

    def __init__(
        self,
        *,
        caller: str,
        role: str,
        message: str = "caller is not authorized",
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        d.update({"caller": caller, "role": role})
        super().__init__(message, details=d)


class ReentrancyDetected(StakeRewardsError):
    """A guarded operation was entered again before the outer call finished."""
    code = "STAKE_REENTRANT"


class Paused(StakeRewardsError):
    """The pool is paused; the operation is not accepted."""
    code = "STAKE_PAUSED"


class ArithmeticOverflow(StakeRewardsError):
    """A checked integer operation left the [0, U256_MAX] envelope."""
    code = "STAKE_OVERFLOW"


class ArithmeticUnderflow(ArithmeticOverflow):
    """Checked subtraction went below zero."""
    code = "STAKE_UNDERFLOW"


class DivisionByZero(ArithmeticOverflow):
    code = "STAKE_DIV_BY_ZERO"


class TransferFailed(StakeRewardsError):
    """The asset-transfer collaborator could not move the requested amount."""
    code = "STAKE_TRANSFER_FAILED"

    def __init__(
        self,
        message: str = "asset transfer failed",
        *,
        token: Optional[str] = None,
        account: Optional[str] = None,
        amount: Optional[int] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if token is not None:
            d.setdefault("token", token)
        if account is not None:
            d.setdefault("account", account)
        if amount is not None:
            d.setdefault("amount", int(amount))
        super().__init__(message, details=d)


__all__ = [
    "StakeRewardsError",
    "InvalidArgument",
    "InsufficientBalance",
    "LockedFunds",
    "InsolventFunding",
    "InvalidOrdering",
    "PeriodInProgress",
    "ForbiddenAsset",
    "Unauthorized",
    "ReentrancyDetected",
    "Paused",
    "ArithmeticOverflow",
    "ArithmeticUnderflow",
    "DivisionByZero",
    "TransferFailed",
]
