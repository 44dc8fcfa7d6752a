# -*- coding: utf-8 -*-
"""
stakerewards.control.pausable
=============================

Global pause switch for the pool.

- The paused flag is a single boolean outside the pool's own state; the pool
  only queries :meth:`PauseGate.is_paused` on ``stake``.
- Changing pause state requires the owner (queried through an
  :class:`~stakerewards.control.access.Authority`).
- ``last_pause_time`` records the clock reading of the most recent
  transition into the paused state.
- Idempotent: pausing a paused switch (or unpausing an unpaused one) changes
  nothing.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol, runtime_checkable

from ..errors import Paused, Unauthorized
from .access import OWNER_ROLE, Authority

log = logging.getLogger(__name__)

__all__ = ["PauseGate", "PauseSwitch", "require_not_paused"]


@runtime_checkable
class PauseGate(Protocol):
    def is_paused(self) -> bool:
        """Return True while mutations gated on pause must be refused."""


def require_not_paused(gate: PauseGate) -> None:
    """Raise `Paused` if the gate is closed."""
    if gate.is_paused():
        raise Paused("this action cannot be performed while the pool is paused")


class PauseSwitch:
    """Owner-controlled pause flag satisfying :class:`PauseGate`."""

    def __init__(self, authority: Authority, *, now: Optional[Callable[[], int]] = None) -> None:
        self._authority = authority
        self._now = now
        self._paused = False
        self.last_pause_time: int = 0

    def is_paused(self) -> bool:
        return self._paused

    def set_paused(self, caller: str, flag: bool) -> None:
        if not self._authority.is_authorized(caller, OWNER_ROLE):
            raise Unauthorized(caller=caller, role=OWNER_ROLE, message="only the owner may pause")
        if flag == self._paused:
            return
        self._paused = flag
        if flag and self._now is not None:
            self.last_pause_time = self._now()
        log.info("pause state changed: paused=%s by %s", flag, caller)

    def pause(self, caller: str) -> None:
        self.set_paused(caller, True)

    def unpause(self, caller: str) -> None:
        self.set_paused(caller, False)
