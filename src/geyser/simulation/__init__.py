"""Scenario replay for the geyser engine."""

from .runner import (
    Action,
    Scenario,
    SimulationResult,
    SimulationRunner,
    generate_random_scenario,
)

__all__ = [
    "Action",
    "Scenario",
    "SimulationResult",
    "SimulationRunner",
    "generate_random_scenario",
]
