"""Simulation runner - Replay scenarios of engine operations deterministically.

Key Features:
- Builds tokens, funded accounts, a manual clock and a geyser from config
- Replays lock / add_tokens / stake / unstake / advance / update actions
- Records a GeyserState after every action and checks custody reconciliation
- Rejected actions are recorded as failures and the run continues
- Random scenarios are generated from a seeded numpy Generator
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from ..config.schema import GeyserConfig
from ..custody.clock import ManualClock
from ..custody.token import Token, TransferError
from ..engine.accounting import GeyserState
from ..engine.events import Event
from ..engine.fixed_point import mul_div
from ..engine.geyser import TokenGeyser
from ..errors import GeyserError

logger = logging.getLogger(__name__)

ACTION_KINDS = ("lock", "add_tokens", "stake", "unstake", "advance", "update")
UNLIMITED_ALLOWANCE = 2**256 - 1
FRACTION_DENOMINATOR = 10_000  # unstake fractions resolve to basis points


@dataclass
class Action:
    """One step of a scenario.

    Amounts are base token units. An unstake may give `fraction` of the
    account's current stake instead of an absolute amount.
    """
    kind: str
    account: Optional[str] = None
    amount: int = 0
    duration_sec: int = 0
    seconds: int = 0
    fraction: Optional[float] = None

    def __post_init__(self):
        if self.kind not in ACTION_KINDS:
            raise ValueError(f"Unknown action kind: {self.kind}")


@dataclass
class Scenario:
    """Named sequence of actions."""
    name: str
    actions: List[Action] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Scenario':
        return cls(
            name=data.get("name", "scenario"),
            actions=[Action(**a) for a in data.get("actions", [])],
        )


@dataclass
class SimulationResult:
    """Complete simulation result."""
    config: GeyserConfig
    scenario: Scenario
    states: List[GeyserState]
    events: List[Event]
    claims: Dict[str, int]
    final_metrics: Dict[str, Any]
    failures: List[str] = field(default_factory=list)
    conservation_errors: List[str] = field(default_factory=list)


class SimulationRunner:
    """Replay scenarios against a freshly built geyser."""

    def __init__(self, config: GeyserConfig):
        """
        Initialize simulation runner.

        Args:
            config: Engine and simulation configuration
        """
        self.config = config
        sim = config.simulation

        self.clock = ManualClock(start=sim.start_timestamp_sec)
        self.staking_token = Token(f"{sim.staking_symbol} Token", sim.staking_symbol, sim.decimals)
        if sim.single_token:
            self.distribution_token = self.staking_token
        else:
            self.distribution_token = Token(
                f"{sim.distribution_symbol} Token", sim.distribution_symbol, sim.decimals
            )

        self.geyser = TokenGeyser(
            self.staking_token,
            self.distribution_token,
            owner=sim.owner,
            config=config,
            clock=self.clock,
        )

        for funding in sim.accounts:
            if funding.staking_balance:
                self.staking_token.mint(funding.account, funding.staking_balance)
            if funding.distribution_balance:
                self.distribution_token.mint(funding.account, funding.distribution_balance)
            self.staking_token.approve(funding.account, self.geyser.address, UNLIMITED_ALLOWANCE)
            self.distribution_token.approve(funding.account, self.geyser.address, UNLIMITED_ALLOWANCE)

    def run(self, scenario: Scenario) -> SimulationResult:
        """
        Run a scenario to completion.

        Args:
            scenario: Actions to replay

        Returns:
            Simulation result
        """
        states = [self.geyser.state()]
        claims: Dict[str, int] = {}
        failures: List[str] = []
        conservation_errors: List[str] = []

        for step, action in enumerate(scenario.actions):
            try:
                reward = self._apply(action)
            except (GeyserError, TransferError) as e:
                failures.append(f"step {step} ({action.kind}): {e}")
                logger.debug(
                    "Action rejected",
                    extra={"event": "simulation.reject", "step": step, "kind": action.kind, "reason": str(e)},
                )
                continue

            if reward is not None:
                claims[action.account] = claims.get(action.account, 0) + reward

            state = self.geyser.state()
            states.append(state)
            is_valid, error_msg = state.validate_conservation(strict=True)
            if not is_valid:
                conservation_errors.append(error_msg)

        final_state = states[-1]
        final_metrics = {
            'final_locked': final_state.total_locked,
            'final_unlocked': final_state.total_unlocked,
            'final_staked': final_state.total_staked,
            'total_claimed': sum(claims.values()),
            'num_actions': len(scenario.actions),
            'num_failures': len(failures),
            'unlock_schedules': final_state.unlock_schedule_count,
            'config_hash': self.config.compute_hash(),
        }

        logger.info(
            "Simulation finished",
            extra={"event": "simulation.done", "scenario": scenario.name, **final_metrics},
        )

        return SimulationResult(
            config=self.config,
            scenario=scenario,
            states=states,
            events=list(self.geyser.events.events),
            claims=claims,
            final_metrics=final_metrics,
            failures=failures,
            conservation_errors=conservation_errors,
        )

    def _apply(self, action: Action) -> Optional[int]:
        owner = self.config.simulation.owner
        if action.kind == "advance":
            self.clock.advance(action.seconds)
        elif action.kind == "update":
            self.geyser.update_accounting(action.account)
        elif action.kind == "lock":
            self.geyser.lock_tokens(action.account or owner, action.amount, action.duration_sec)
        elif action.kind == "add_tokens":
            self.geyser.add_tokens(action.account or owner, action.amount)
        elif action.kind == "stake":
            self.geyser.stake(action.account, action.amount)
        elif action.kind == "unstake":
            amount = action.amount
            if action.fraction is not None:
                amount = mul_div(
                    self.geyser.total_staked_for(action.account),
                    int(action.fraction * FRACTION_DENOMINATOR),
                    FRACTION_DENOMINATOR,
                )
            return self.geyser.unstake(action.account, amount).reward
        return None


def generate_random_scenario(
    config: GeyserConfig,
    seed: Optional[int] = None,
    steps: Optional[int] = None,
) -> Scenario:
    """
    Build a reproducible random scenario.

    The owner locks part of its balance up front; afterwards every funded
    account stakes, unstakes, waits and triggers accounting at random.

    Args:
        config: Configuration providing accounts, decimals and limits
        seed: Random seed (defaults to config value)
        steps: Number of random actions (defaults to config value)

    Returns:
        Scenario
    """
    sim = config.simulation
    seed = sim.random_seed if seed is None else seed
    steps = sim.random_steps if steps is None else steps
    rng = np.random.default_rng(seed)
    unit = 10**sim.decimals

    stakers = [a.account for a in sim.accounts if a.account != sim.owner and a.staking_balance > 0]
    if not stakers:
        raise ValueError("Random scenarios need at least one funded non-owner account")

    actions = [
        Action(kind="lock", amount=1000 * unit, duration_sec=int(rng.integers(30, 366)) * 86400),
    ]
    kinds = ["stake", "unstake", "advance", "update", "lock", "add_tokens"]
    weights = np.array([0.3, 0.2, 0.3, 0.1, 0.05, 0.05])

    for _ in range(steps):
        kind = str(rng.choice(kinds, p=weights))
        account = str(rng.choice(stakers))
        if kind == "stake":
            actions.append(Action(kind="stake", account=account, amount=int(rng.integers(1, 500)) * unit))
        elif kind == "unstake":
            actions.append(Action(kind="unstake", account=account, fraction=float(rng.uniform(0.05, 1.0))))
        elif kind == "advance":
            actions.append(Action(kind="advance", seconds=int(rng.integers(0, sim.max_advance_sec + 1))))
        elif kind == "update":
            actions.append(Action(kind="update", account=account))
        elif kind == "lock":
            actions.append(Action(
                kind="lock",
                amount=int(rng.integers(10, 500)) * unit,
                duration_sec=int(rng.integers(1, 366)) * 86400,
            ))
        else:
            actions.append(Action(kind="add_tokens", amount=int(rng.integers(1, 200)) * unit))

    return Scenario(name=f"random-{seed}", actions=actions)
