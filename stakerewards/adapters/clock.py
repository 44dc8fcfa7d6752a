from __future__ import annotations

"""
stakerewards.adapters.clock
===========================

Time source injected into the pool. The pool reads it exactly once at the
start of every operation and uses that reading for all comparisons in the
call.

- `SystemClock` - wall clock, integer UNIX seconds (UTC).
- `ManualClock` - deterministic clock for tests, simulations and the CLI.
"""

from datetime import datetime, timezone
from typing import Protocol, runtime_checkable

# A fixed, non-zero epoch: timestamp 0 means "not locked" in the ledger.
DEFAULT_MANUAL_START: int = 1_700_000_000


@runtime_checkable
class Clock(Protocol):
    def now(self) -> int:
        """Current timestamp in integer seconds (monotonic non-decreasing)."""


class SystemClock:
    def now(self) -> int:
        return int(datetime.now(timezone.utc).timestamp())


class ManualClock:
    def __init__(self, start: int = DEFAULT_MANUAL_START) -> None:
        if start < 0:
            raise ValueError("clock start must be non-negative")
        self._t = int(start)

    def now(self) -> int:
        return self._t

    def set(self, t: int) -> int:
        if t < self._t:
            raise ValueError(f"clock cannot move backwards ({t} < {self._t})")
        self._t = int(t)
        return self._t

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("cannot advance by a negative amount")
        self._t += int(seconds)
        return self._t


__all__ = ["Clock", "SystemClock", "ManualClock", "DEFAULT_MANUAL_START"]
