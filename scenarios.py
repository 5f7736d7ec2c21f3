#!/usr/bin/env python3
"""
🎯 Order Load Test Scenarios
============================
Named presets for the synthetic order load test, from a two-order smoke run
to the peak-hour profile.

Each preset fixes how many orders are submitted, by how many virtual workers,
inside which time window, and how the same run is fanned out by the remote
distributed-test orchestrator (task count, concurrency, ramp-up, hold-for).

Usage:
    python scenarios.py          # print the scenario table
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple, Union

from rich.console import Console
from rich.table import Table

from errors import ConfigurationError

logger = logging.getLogger(__name__)
console = Console()

# Seconds reserved per iteration for request latency
NETWORK_SLACK_SECONDS = 5


class Scenario(Enum):
    """Available load test scenarios."""
    QUICK = "quick"
    NORMAL = "normal"
    PEAK = "peak"

    @classmethod
    def parse(cls, name: Union[str, "Scenario"]) -> "Scenario":
        """Resolve a scenario name, raising ConfigurationError if unknown."""
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            available = ", ".join(s.value for s in cls)
            raise ConfigurationError(
                f"Unknown scenario: {name}. Available: {available}"
            ) from None


@dataclass(frozen=True)
class ScenarioSpec:
    """Execution parameters for one scenario. Durations are in seconds."""
    iterations: int
    virtual_workers: int
    max_duration: int
    remote_task_count: int
    remote_concurrency: int
    remote_ramp_up: int
    remote_hold_for: int

    def __post_init__(self):
        for name in ("iterations", "virtual_workers", "remote_task_count", "remote_concurrency"):
            if getattr(self, name) < 1:
                raise ConfigurationError(f"{name} must be >= 1, got {getattr(self, name)}")
        for name in ("max_duration", "remote_ramp_up", "remote_hold_for"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.remote_concurrency != self.virtual_workers:
            raise ConfigurationError(
                f"remote_concurrency ({self.remote_concurrency}) must equal "
                f"virtual_workers ({self.virtual_workers})"
            )

    @property
    def iterations_per_worker(self) -> float:
        return self.iterations / self.virtual_workers

    @property
    def inter_iteration_sleep(self) -> int:
        """
        Pause between a worker's iterations.

        sleep = floor(max_duration / (iterations / workers)) - 5, never negative.
        Spreads each worker's share of orders across the whole window.
        """
        per_iteration = math.floor(self.max_duration / self.iterations_per_worker)
        return max(0, per_iteration - NETWORK_SLACK_SECONDS)


# =============================================================================
# SCENARIO REGISTRY
# =============================================================================

SCENARIOS: Dict[Scenario, ScenarioSpec] = {
    # Smoke test: 2 orders in 5 minutes
    Scenario.QUICK: ScenarioSpec(
        iterations=2,
        virtual_workers=1,
        max_duration=5 * 60,
        remote_task_count=1,
        remote_concurrency=1,
        remote_ramp_up=10,
        remote_hold_for=300,
    ),
    # Normal daily load: 500 orders over 1 hour
    Scenario.NORMAL: ScenarioSpec(
        iterations=500,
        virtual_workers=5,
        max_duration=60 * 60,
        remote_task_count=1,
        remote_concurrency=5,
        remote_ramp_up=60,
        remote_hold_for=3600,
    ),
    # Peak hour: 1000 orders over 30 minutes
    Scenario.PEAK: ScenarioSpec(
        iterations=1000,
        virtual_workers=10,
        max_duration=30 * 60,
        remote_task_count=1,
        remote_concurrency=10,
        remote_ramp_up=30,
        remote_hold_for=1800,
    ),
}

_unmapped = [s.value for s in Scenario if s not in SCENARIOS]
if _unmapped:
    raise ConfigurationError(f"Scenarios without parameters: {', '.join(_unmapped)}")

DEFAULT_SCENARIO = Scenario.NORMAL


def lookup(name: Union[str, Scenario]) -> ScenarioSpec:
    """Strict lookup used by the local runner. Unknown names raise ConfigurationError."""
    return SCENARIOS[Scenario.parse(name)]


def lookup_with_fallback(name: Union[str, Scenario]) -> Tuple[Scenario, ScenarioSpec]:
    """
    Lookup used by the remote trigger.
    Unknown names log a warning and resolve to the normal scenario.
    """
    try:
        scenario = Scenario.parse(name)
    except ConfigurationError:
        logger.warning("Unknown scenario %r, falling back to %s", name, DEFAULT_SCENARIO.value)
        scenario = DEFAULT_SCENARIO
    return scenario, SCENARIOS[scenario]


def format_duration(seconds: int) -> str:
    """Render seconds the way k6 options spell durations (1h, 5m, 45s)."""
    if seconds and seconds % 3600 == 0:
        return f"{seconds // 3600}h"
    if seconds and seconds % 60 == 0:
        return f"{seconds // 60}m"
    return f"{seconds}s"


def print_scenarios():
    """Print all available scenarios."""
    table = Table(title="🎯 Order Load Test Scenarios")
    table.add_column("Scenario", style="cyan")
    table.add_column("Orders", justify="right")
    table.add_column("Workers", justify="right")
    table.add_column("Max Duration", justify="right")
    table.add_column("Sleep", justify="right")
    table.add_column("Tasks", justify="right", style="magenta")
    table.add_column("Concurrency", justify="right", style="magenta")
    table.add_column("Ramp Up", justify="right", style="magenta")
    table.add_column("Hold For", justify="right", style="magenta")

    for scenario, spec in SCENARIOS.items():
        table.add_row(
            scenario.value,
            f"{spec.iterations:,}",
            str(spec.virtual_workers),
            format_duration(spec.max_duration),
            f"{spec.inter_iteration_sleep}s",
            str(spec.remote_task_count),
            str(spec.remote_concurrency),
            f"{spec.remote_ramp_up}s",
            f"{spec.remote_hold_for}s",
        )

    console.print(table)


if __name__ == "__main__":
    print_scenarios()
