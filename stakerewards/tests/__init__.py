from __future__ import annotations
"""
stakerewards test suite package.

Shared constants for the pool tests, plus the Hypothesis profiles used by the
property tests. Select a profile with HYPOTHESIS_PROFILE=dev|ci|fast; on CI
(CI env var truthy) "ci" is picked automatically.
"""

import os

from hypothesis import HealthCheck, settings

# Canonical deterministic seed for tests that need pseudo-randomness.
TEST_SEED: int = 0x57A4E5

# Identities and parameters shared by the pool fixtures.
OWNER = "owner"
DISTRIBUTOR = "distributor"
STAKE = "STAKE"
REWARD = "REWARD"
DURATION = 100
T0 = 1_700_000_000

settings.register_profile(
    "dev",
    settings(max_examples=100, deadline=None, suppress_health_check=(HealthCheck.too_slow,)),
)
settings.register_profile(
    "ci",
    settings(
        max_examples=200,
        deadline=None,
        derandomize=True,
        suppress_health_check=(HealthCheck.too_slow, HealthCheck.filter_too_much),
    ),
)
settings.register_profile("fast", settings(max_examples=25, deadline=None))


def _env_truthy(name: str) -> bool:
    return (os.getenv(name) or "").lower() not in ("", "0", "false", "no", "off")


settings.load_profile(os.getenv("HYPOTHESIS_PROFILE") or ("ci" if _env_truthy("CI") else "dev"))


def reseed_random() -> None:
    """Reseed Python's random module with TEST_SEED."""
    import random
    random.seed(TEST_SEED)


__all__ = ["TEST_SEED", "reseed_random", "OWNER", "DISTRIBUTOR", "STAKE", "REWARD", "DURATION", "T0"]
