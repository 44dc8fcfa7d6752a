from __future__ import annotations
"""
stakerewards.config - configuration for a staking-rewards pool

Covers:
- Token identities (the staked deposit token and the distributed reward token)
- Reward period length (seconds) used to turn a funded amount into a rate
- Minimum stake time (seconds) before withdrawals/claims are allowed
- Optional owner and funding-authority identities for the in-process gates

Environment overrides (all optional; sensible defaults provided):

  STAKEREWARDS_STAKING_TOKEN=STAKE
  STAKEREWARDS_REWARDS_TOKEN=REWARD
  STAKEREWARDS_REWARDS_DURATION=15552000        # 180 days
  STAKEREWARDS_MINIMUM_STAKE_TIME=0
  STAKEREWARDS_OWNER=owner
  STAKEREWARDS_REWARDS_DISTRIBUTION=distributor

You can also load from a JSON or YAML file via
`STAKEREWARDS_CONFIG_FILE=/path/to/config.(json|yaml|yml)`.
File values override defaults; environment overrides the file.
"""


from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional
import json
import os
from pathlib import Path

import yaml

from .pooltypes.state import DEFAULT_REWARDS_DURATION


# -------------------------- Data classes --------------------------


@dataclass
class PoolConfig:
    """Top-level configuration container."""
    staking_token: str = "STAKE"
    rewards_token: str = "REWARD"
    rewards_duration: int = DEFAULT_REWARDS_DURATION   # 180 days
    minimum_stake_time: int = 0                        # 0 disables the lock
    owner: Optional[str] = None
    rewards_distribution: Optional[str] = None

    def validate(self) -> None:
        if not self.staking_token or not self.rewards_token:
            raise ValueError("Token identities must be non-empty.")
        if self.rewards_duration <= 0:
            raise ValueError(f"rewards_duration must be positive seconds (got {self.rewards_duration}).")
        if self.minimum_stake_time < 0:
            raise ValueError(f"minimum_stake_time must be non-negative (got {self.minimum_stake_time}).")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# -------------------------- Loaders --------------------------


def _getenv_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return int(str(v).replace("_", ""))
    except ValueError as e:
        raise ValueError(f"Invalid int for {name}: {v!r}") from e


def _getenv_str(name: str, default: Optional[str]) -> Optional[str]:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    return v


def from_env(base: Optional[PoolConfig] = None, prefix: str = "STAKEREWARDS_") -> PoolConfig:
    """
    Build a PoolConfig from environment variables, optionally layering on top of `base`.
    """
    cfg = base or PoolConfig()
    new_cfg = PoolConfig(
        staking_token=_getenv_str(f"{prefix}STAKING_TOKEN", cfg.staking_token) or cfg.staking_token,
        rewards_token=_getenv_str(f"{prefix}REWARDS_TOKEN", cfg.rewards_token) or cfg.rewards_token,
        rewards_duration=_getenv_int(f"{prefix}REWARDS_DURATION", cfg.rewards_duration),
        minimum_stake_time=_getenv_int(f"{prefix}MINIMUM_STAKE_TIME", cfg.minimum_stake_time),
        owner=_getenv_str(f"{prefix}OWNER", cfg.owner),
        rewards_distribution=_getenv_str(f"{prefix}REWARDS_DISTRIBUTION", cfg.rewards_distribution),
    )
    new_cfg.validate()
    return new_cfg


def from_file(path: str | os.PathLike[str]) -> PoolConfig:
    """
    Load configuration from a JSON or YAML file.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(p)

    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text or "{}")

    defaults = PoolConfig()
    cfg = PoolConfig(
        staking_token=str(data.get("staking_token", defaults.staking_token)),
        rewards_token=str(data.get("rewards_token", defaults.rewards_token)),
        rewards_duration=int(data.get("rewards_duration", defaults.rewards_duration)),
        minimum_stake_time=int(data.get("minimum_stake_time", defaults.minimum_stake_time)),
        owner=data.get("owner", defaults.owner),
        rewards_distribution=data.get("rewards_distribution", defaults.rewards_distribution),
    )
    cfg.validate()
    return cfg


def load() -> PoolConfig:
    """
    Load configuration using the following precedence:
      1) File at $STAKEREWARDS_CONFIG_FILE (JSON/YAML)
      2) Environment variables (STAKEREWARDS_*), applied on top of defaults or file values
    """
    file_path = os.getenv("STAKEREWARDS_CONFIG_FILE")
    base = from_file(file_path) if file_path else PoolConfig()
    return from_env(base=base)


# -------------------------- Utilities --------------------------


def pretty(cfg: Optional[PoolConfig] = None) -> str:
    """Return a human-readable JSON string of the current config."""
    obj = (cfg or load()).to_dict()
    return json.dumps(obj, indent=2, sort_keys=True)


__all__ = [
    "PoolConfig",
    "from_env",
    "from_file",
    "load",
    "pretty",
]
