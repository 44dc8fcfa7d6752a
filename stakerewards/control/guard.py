# -*- coding: utf-8 -*-
"""
stakerewards.control.guard
==========================

Non-reentrancy latch keyed by a *scope* tag.

Typical pattern::

    with guard.held():
        # critical section; any nested guard.held() on the same scope raises
        ...

The latch is released on every exit path, including exceptions. Entering a
scope that is already held raises
:class:`~stakerewards.errors.ReentrancyDetected`.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Set

from ..errors import ReentrancyDetected

__all__ = ["ReentrancyGuard"]


class ReentrancyGuard:
    def __init__(self) -> None:
        self._entered: Set[str] = set()

    def is_entered(self, scope: str = "default") -> bool:
        return scope in self._entered

    def enter(self, scope: str = "default") -> None:
        if scope in self._entered:
            raise ReentrancyDetected("reentrant call", details={"scope": scope})
        self._entered.add(scope)

    def exit(self, scope: str = "default") -> None:
        """Idempotent."""
        self._entered.discard(scope)

    @contextmanager
    def held(self, scope: str = "default") -> Iterator[None]:
        self.enter(scope)
        try:
            yield
        finally:
            self.exit(scope)
