# -*- coding: utf-8 -*-
"""
stakerewards.control
====================

Gates the pool consults but does not own:

1) **Access** - `Authority.is_authorized(caller, role)`; `AccessControl`
   implements owner + role membership with two-step ownership transfer.
2) **Pausable** - `PauseGate.is_paused()`; `PauseSwitch` is the owner-toggled
   implementation.
3) **Reentrancy Guard** - `ReentrancyGuard`, a scoped latch held for the full
   duration of every mutating pool call.
"""
from __future__ import annotations

from .access import OWNER_ROLE, REWARDS_DISTRIBUTION_ROLE, AccessControl, Authority
from .guard import ReentrancyGuard
from .pausable import PauseGate, PauseSwitch, require_not_paused

__all__ = [
    "OWNER_ROLE",
    "REWARDS_DISTRIBUTION_ROLE",
    "Authority",
    "AccessControl",
    "PauseGate",
    "PauseSwitch",
    "require_not_paused",
    "ReentrancyGuard",
]
