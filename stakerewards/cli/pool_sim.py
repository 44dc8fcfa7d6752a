from __future__ import annotations

"""
stakerewards.cli.pool_sim
-------------------------

Run scripted scenarios against an in-memory staking-rewards pool with a
manual clock, and inspect the resolved configuration.

A scenario is a JSON file:

    {
      "config": {"rewards_duration": 100},          # optional PoolConfig fields
      "start": 1700000000,                          # optional clock start
      "steps": [
        {"op": "mint", "token": "STAKE", "account": "alice", "amount": 100},
        {"op": "stake", "account": "alice", "amount": 100},
        {"op": "fund", "caller": "distributor", "amount": 100},
        {"op": "advance", "seconds": 50},
        {"op": "views", "accounts": ["alice"]},
        {"op": "get_reward", "account": "alice"}
      ]
    }

Step ops: advance, mint, stake, withdraw, get_reward, exit, fund (transfer
reward in, then notify), notify, set_duration, set_min_stake_time,
update_period_finish, recover, pause, unpause, views.

Examples
--------
# Human-readable event log and final views
python -m stakerewards.cli.pool_sim simulate scenario.json

# JSON output and a snapshot of the final pool
python -m stakerewards.cli.pool_sim simulate scenario.json --json --snapshot out.json

# Show the configuration resolved from file + environment
python -m stakerewards.cli.pool_sim config
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import typer

from .. import config as config_mod
from .. import metrics
from ..adapters.assets import InMemoryVault
from ..adapters.clock import DEFAULT_MANUAL_START, ManualClock
from ..config import PoolConfig
from ..control.access import AccessControl
from ..control.pausable import PauseSwitch
from ..errors import StakeRewardsError
from ..pool import StakingRewardsPool
from ..pooltypes.events import serialize_event

app = typer.Typer(
    name="pool-sim",
    add_completion=False,
    no_args_is_help=True,
    help="Simulate staking-rewards pool scenarios and inspect configuration.",
)

DEFAULT_OWNER = "owner"
DEFAULT_DISTRIBUTOR = "distributor"


# -------------------- harness --------------------

class Harness:
    """Pool plus the in-memory collaborators a scenario drives."""

    def __init__(self, cfg: PoolConfig, start: int = DEFAULT_MANUAL_START) -> None:
        owner = cfg.owner or DEFAULT_OWNER
        distributor = cfg.rewards_distribution or DEFAULT_DISTRIBUTOR
        self.clock = ManualClock(start)
        self.vault = InMemoryVault()
        self.access = AccessControl(owner, rewards_distribution=distributor)
        self.pause = PauseSwitch(self.access, now=self.clock.now)
        self.pool = StakingRewardsPool(
            clock=self.clock,
            assets=self.vault,
            authority=self.access,
            pause_gate=self.pause,
            config=cfg,
        )
        self.owner = owner
        self.distributor = distributor

    def views(self, accounts: List[str]) -> Dict[str, Any]:
        p = self.pool
        st = p.state()
        return {
            "now": self.clock.now(),
            "phase": p.period_phase().value,
            "total_staked": p.total_staked(),
            "reward_rate": st.reward_rate,
            "period_finish": st.period_finish,
            "reward_per_unit": p.reward_per_unit_fp().to_decimal_str(),
            "reward_for_duration": p.reward_for_duration(),
            "time_until_period_finish": p.time_until_period_finish(),
            "reward_custody": self.vault.balance_of(p.rewards_token),
            "accounts": {
                a: {
                    "balance": p.balance_of(a),
                    "earned": p.earned(a),
                    "time_until_unlock": p.time_until_unlock(a),
                    "wallet_stake": self.vault.holder_balance(p.staking_token, a),
                    "wallet_reward": self.vault.holder_balance(p.rewards_token, a),
                }
                for a in accounts
            },
        }


def _fund(h: Harness, step: Dict[str, Any]) -> Any:
    caller = step.get("caller", h.distributor)
    amount = int(step["amount"])
    h.vault.mint(h.pool.rewards_token, caller, amount)
    h.vault.transfer_in(h.pool.rewards_token, caller, amount)
    return h.pool.notify_reward_amount(caller, amount)


_STEPS: Dict[str, Callable[[Harness, Dict[str, Any]], Any]] = {
    "advance": lambda h, s: h.clock.advance(int(s["seconds"])),
    "mint": lambda h, s: h.vault.mint(s.get("token", h.pool.staking_token), s["account"], int(s["amount"])),
    "stake": lambda h, s: h.pool.stake(s["account"], int(s["amount"])),
    "withdraw": lambda h, s: h.pool.withdraw(s["account"], int(s["amount"])),
    "get_reward": lambda h, s: h.pool.get_reward(s["account"]),
    "exit": lambda h, s: list(h.pool.exit(s["account"])),
    "fund": _fund,
    "notify": lambda h, s: h.pool.notify_reward_amount(s.get("caller", h.distributor), int(s["amount"])),
    "set_duration": lambda h, s: h.pool.set_rewards_duration(s.get("caller", h.owner), int(s["duration"])),
    "set_min_stake_time": lambda h, s: h.pool.set_minimum_stake_time(s.get("caller", h.owner), int(s["value"])),
    "update_period_finish": lambda h, s: h.pool.update_period_finish(s.get("caller", h.owner), int(s["timestamp"])),
    "recover": lambda h, s: h.pool.recover_asset(s.get("caller", h.owner), s["token"], int(s["amount"])),
    "pause": lambda h, s: h.pause.pause(s.get("caller", h.owner)),
    "unpause": lambda h, s: h.pause.unpause(s.get("caller", h.owner)),
    "views": lambda h, s: h.views(list(s.get("accounts", []))),
}


def run_scenario(data: Dict[str, Any], *, keep_going: bool = False) -> Dict[str, Any]:
    """
    Execute a scenario dict. Returns {"results": [...], "errors": [...], "harness": Harness}.
    With keep_going=False the first failing step stops the run.
    """
    cfg = config_mod.from_env(base=PoolConfig(**data.get("config", {})))
    h = Harness(cfg, start=int(data.get("start", DEFAULT_MANUAL_START)))
    results: List[Dict[str, Any]] = []
    errors: List[Dict[str, Any]] = []
    for idx, step in enumerate(data.get("steps", [])):
        op = step.get("op")
        fn = _STEPS.get(op)
        if fn is None:
            raise typer.BadParameter(f"step {idx}: unknown op {op!r}")
        try:
            out = fn(h, step)
        except StakeRewardsError as e:
            errors.append({"step": idx, "op": op, "now": h.clock.now(), **e.to_dict()})
            if not keep_going:
                break
            continue
        results.append({"step": idx, "op": op, "now": h.clock.now(), "result": out})
    return {"results": results, "errors": errors, "harness": h}


# -------------------- commands --------------------

@app.command("simulate")
def simulate(
    script: Path = typer.Argument(..., exists=True, dir_okay=False, help="Scenario JSON file."),
    as_json: bool = typer.Option(False, "--json", help="Emit machine-readable JSON."),
    snapshot: Optional[Path] = typer.Option(None, "--snapshot", help="Write pool.dump() here."),
    keep_going: bool = typer.Option(False, "--keep-going", help="Continue after a failing step."),
    show_metrics: bool = typer.Option(False, "--metrics", help="Print Prometheus metrics at the end."),
) -> None:
    """Run a scenario file against a fresh in-memory pool."""
    data = json.loads(script.read_text(encoding="utf-8"))
    out = run_scenario(data, keep_going=keep_going)
    h: Harness = out["harness"]
    accounts = h.pool.accounts()
    final = h.views(accounts)
    events = [serialize_event(e) for e in h.pool.events()]

    if snapshot is not None:
        snapshot.write_text(json.dumps(h.pool.dump(), indent=2, sort_keys=True), encoding="utf-8")

    if as_json:
        typer.echo(json.dumps(
            {"results": out["results"], "errors": out["errors"], "events": events, "final": final},
            indent=2,
            sort_keys=True,
        ))
    else:
        for ev in events:
            fields = ", ".join(f"{k}={v}" for k, v in ev.items() if k not in ("etype", "seq", "ts"))
            typer.echo(f"#{ev['seq']:<4} t={ev['ts']:<12} {ev['etype']:<28} {fields}")
        for err in out["errors"]:
            typer.echo(f"step {err['step']} ({err['op']}) failed: {err['code']}: {err['message']}", err=True)
        typer.echo(json.dumps(final, indent=2, sort_keys=True))
    if show_metrics:
        typer.echo(metrics.render().decode("utf-8"))

    if out["errors"] and not keep_going:
        raise typer.Exit(code=1)


@app.command("config")
def show_config() -> None:
    """Print the configuration resolved from $STAKEREWARDS_CONFIG_FILE and env."""
    typer.echo(config_mod.pretty())


def main() -> None:  # pragma: no cover - console entry
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
