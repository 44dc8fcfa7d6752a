from __future__ import annotations
"""
stakerewards - time-weighted staking rewards accounting.

Distributes a funded pool of reward tokens to stakers of a deposit token in
proportion to stake size and duration, over renewable funding periods, using
integer fixed-point arithmetic only.

Public surface (lazily loaded):
- config, errors, metrics, fixedpoint
- pool (StakingRewardsPool), ledger, pooltypes
- control (access / pause / re-entrancy gates), adapters (clock, custody)
- cli
"""


from typing import List

from .version import __version__

__all__: List[str] = [
    "__version__",
    # lazily importable subpackages/modules
    "config",
    "errors",
    "metrics",
    "fixedpoint",
    "pool",
    "ledger",
    "pooltypes",
    "control",
    "adapters",
    "cli",
]

# --- Lazy module loader (PEP 562) -------------------------------------------------
import importlib


_lazy_modules = set(__all__) - {"__version__"}


def __getattr__(name: str):
    if name in _lazy_modules:
        return importlib.import_module(f".{name}", __name__)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    return sorted(set(globals().keys()) | _lazy_modules)


def get_version() -> str:
    """Return the package version string."""
    return __version__
