from __future__ import annotations

"""
Prometheus metrics for the staking-rewards pool.

We expose counters, gauges and a histogram covering:
- operations: successful mutating calls by kind (stake / withdraw / ...)
- rejections: failed calls by kind and error code
- reward flow: reward funded via notify and reward paid out to accounts
- state snapshots: total staked and the current reward rate
- latency: wall time spent inside a pool operation

Metric amounts are raw integer base units converted to float; they are for
dashboards only and never feed back into accounting.
"""


import time
from contextlib import contextmanager
from typing import Iterator, Optional

from prometheus_client import (CONTENT_TYPE_LATEST, CollectorRegistry, Counter,
                               Gauge, Histogram, generate_latest)

# Use a dedicated registry so embedding apps can choose to merge or expose it directly.
REGISTRY = CollectorRegistry()

# ────────────────────────────────────────────────────────────────────────────────
# Label conventions
#   kind: "stake" | "withdraw" | "get_reward" | "exit" | "notify_reward_amount" | ...
#   code: StakeRewardsError.code, e.g. "STAKE_LOCKED"
# ────────────────────────────────────────────────────────────────────────────────

OPERATIONS = Counter(
    "stakerewards_operations_total",
    "Successful pool operations by kind.",
    labelnames=("kind",),
    registry=REGISTRY,
)

REJECTIONS = Counter(
    "stakerewards_rejections_total",
    "Rejected pool operations by kind and error code.",
    labelnames=("kind", "code"),
    registry=REGISTRY,
)

REWARD_FUNDED = Counter(
    "stakerewards_reward_funded_units_total",
    "Reward units passed to notify_reward_amount.",
    registry=REGISTRY,
)

REWARD_PAID = Counter(
    "stakerewards_reward_paid_units_total",
    "Reward units transferred out to accounts.",
    registry=REGISTRY,
)

TOTAL_STAKED = Gauge(
    "stakerewards_total_staked_units",
    "Current total staked amount.",
    registry=REGISTRY,
)

REWARD_RATE = Gauge(
    "stakerewards_reward_rate_units_per_second",
    "Current reward emission rate.",
    registry=REGISTRY,
)

_LATENCY_BUCKETS = (
    0.0001,
    0.0005,
    0.001,
    0.005,
    0.01,
    0.05,
    0.1,
    0.5,
    1.0,
)

OPERATION_SECONDS = Histogram(
    "stakerewards_operation_seconds",
    "Time spent inside a pool operation, by kind.",
    labelnames=("kind",),
    buckets=_LATENCY_BUCKETS,
    registry=REGISTRY,
)

# ────────────────────────────────────────────────────────────────────────────────
# Recording helpers
# ────────────────────────────────────────────────────────────────────────────────


def record_operation(kind: str) -> None:
    OPERATIONS.labels(kind=kind).inc()


def record_rejection(kind: str, code: str) -> None:
    REJECTIONS.labels(kind=kind, code=code).inc()


def record_funding(reward: int) -> None:
    if reward > 0:
        REWARD_FUNDED.inc(float(reward))


def record_reward_paid(reward: int) -> None:
    if reward > 0:
        REWARD_PAID.inc(float(reward))


def observe_state(total_staked: int, reward_rate: int) -> None:
    """Refresh the snapshot gauges after a committed operation."""
    TOTAL_STAKED.set(float(total_staked))
    REWARD_RATE.set(float(reward_rate))


@contextmanager
def time_operation(kind: str) -> Iterator[None]:
    """Context manager to observe pool operation latency for a given kind."""
    start = time.perf_counter()
    try:
        yield
    finally:
        OPERATION_SECONDS.labels(kind=kind).observe(time.perf_counter() - start)


# ────────────────────────────────────────────────────────────────────────────────
# Exposition
# ────────────────────────────────────────────────────────────────────────────────


def render(registry: Optional[CollectorRegistry] = None) -> bytes:
    """Prometheus text exposition of the pool registry."""
    return generate_latest(registry or REGISTRY)


def make_prometheus_asgi_app(registry: Optional[CollectorRegistry] = None):
    """
    Return a minimal ASGI app that serves Prometheus metrics at '/'.
    No external web framework required.
    """
    reg = registry or REGISTRY

    async def app(scope, receive, send):  # type: ignore[override]
        if scope["type"] != "http" or (scope.get("path") or "/") != "/":
            await send({"type": "http.response.start", "status": 404, "headers": []})
            await send({"type": "http.response.body", "body": b"Not Found"})
            return
        payload = generate_latest(reg)
        headers = [
            (b"content-type", CONTENT_TYPE_LATEST.encode("ascii")),
            (b"cache-control", b"no-cache, no-store, must-revalidate"),
        ]
        await send({"type": "http.response.start", "status": 200, "headers": headers})
        await send({"type": "http.response.body", "body": payload})

    return app


__all__ = [
    "REGISTRY",
    "OPERATIONS",
    "REJECTIONS",
    "REWARD_FUNDED",
    "REWARD_PAID",
    "TOTAL_STAKED",
    "REWARD_RATE",
    "OPERATION_SECONDS",
    "record_operation",
    "record_rejection",
    "record_funding",
    "record_reward_paid",
    "observe_state",
    "time_operation",
    "render",
    "make_prometheus_asgi_app",
]
