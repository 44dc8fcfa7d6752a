from __future__ import annotations
"""
Collaborator adapters: the clock and the asset-transfer primitive.
"""

from .assets import AssetTransfer, InMemoryVault, Transactional
from .clock import Clock, ManualClock, SystemClock

__all__ = [
    "AssetTransfer",
    "Transactional",
    "InMemoryVault",
    "Clock",
    "ManualClock",
    "SystemClock",
]
