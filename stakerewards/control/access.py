# -*- coding: utf-8 -*-
"""
stakerewards.control.access
===========================

Capability checks the pool queries before privileged operations.

The pool never stores who the owner or the funding authority is; it only asks
an :class:`Authority` whether ``caller`` holds a role. :class:`AccessControl`
is the in-process implementation used by the CLI and tests:

- a single **owner**, with two-step transfer (``nominate_owner`` then
  ``accept_ownership`` by the nominee) so ownership cannot be handed to a
  mistyped identity;
- **role membership** sets (``grant_role`` / ``revoke_role``), administered by
  the owner;
- the owner implicitly satisfies ``OWNER_ROLE`` only; it does *not* become a
  funding authority unless granted ``REWARDS_DISTRIBUTION_ROLE``.

Idempotent operations: granting an existing role or revoking a missing one is
a no-op.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional, Protocol, Set, runtime_checkable

from ..errors import InvalidArgument, Unauthorized

log = logging.getLogger(__name__)

__all__ = [
    "OWNER_ROLE",
    "REWARDS_DISTRIBUTION_ROLE",
    "Authority",
    "AccessControl",
]

# ---- Constants --------------------------------------------------------------

OWNER_ROLE: str = "owner"
REWARDS_DISTRIBUTION_ROLE: str = "rewards_distribution"


@runtime_checkable
class Authority(Protocol):
    """Capability check consumed by the pool."""

    def is_authorized(self, caller: str, role: str) -> bool:
        """Return True if `caller` currently holds `role`."""


class AccessControl:
    """Owner + role table satisfying :class:`Authority`."""

    def __init__(self, owner: str, *, rewards_distribution: Optional[str] = None) -> None:
        if not owner:
            raise InvalidArgument("owner must be a non-empty identity")
        self._owner: Optional[str] = owner
        self._nominated: Optional[str] = None
        self._roles: Dict[str, Set[str]] = {}
        if rewards_distribution:
            self._roles[REWARDS_DISTRIBUTION_ROLE] = {rewards_distribution}

    # --- queries ---

    @property
    def owner(self) -> Optional[str]:
        return self._owner

    @property
    def nominated_owner(self) -> Optional[str]:
        return self._nominated

    def has_role(self, role: str, account: str) -> bool:
        return account in self._roles.get(role, set())

    def members(self, role: str) -> Set[str]:
        return set(self._roles.get(role, set()))

    def is_authorized(self, caller: str, role: str) -> bool:
        if role == OWNER_ROLE:
            return self._owner is not None and caller == self._owner
        return self.has_role(role, caller)

    def require_owner(self, caller: str) -> None:
        if not self.is_authorized(caller, OWNER_ROLE):
            raise Unauthorized(caller=caller, role=OWNER_ROLE, message="only the owner may perform this action")

    # --- ownership ---

    def nominate_owner(self, caller: str, nominee: str) -> None:
        self.require_owner(caller)
        self._nominated = nominee or None
        log.info("owner nominated: %s", nominee)

    def accept_ownership(self, caller: str) -> None:
        if self._nominated is None or caller != self._nominated:
            raise Unauthorized(
                caller=caller,
                role=OWNER_ROLE,
                message="you must be nominated before you can accept ownership",
            )
        previous = self._owner
        self._owner = caller
        self._nominated = None
        log.info("ownership transferred: %s -> %s", previous, caller)

    # --- roles ---

    def grant_role(self, caller: str, role: str, account: str) -> None:
        self.require_owner(caller)
        if role == OWNER_ROLE:
            raise InvalidArgument("ownership moves via nominate_owner/accept_ownership")
        members = self._roles.setdefault(role, set())
        if account not in members:
            members.add(account)
            log.info("role granted: %s -> %s", role, account)

    def revoke_role(self, caller: str, role: str, account: str) -> None:
        self.require_owner(caller)
        members = self._roles.get(role)
        if members and account in members:
            members.discard(account)
            log.info("role revoked: %s -> %s", role, account)

    def set_role_member(self, caller: str, role: str, account: str) -> None:
        """Replace every holder of `role` with the single `account`."""
        self.require_owner(caller)
        if role == OWNER_ROLE:
            raise InvalidArgument("ownership moves via nominate_owner/accept_ownership")
        self._roles[role] = {account}
        log.info("role set: %s -> %s", role, account)
