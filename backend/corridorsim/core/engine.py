"""Main simulation engine.

A session runs one simulated day over a fixed window (06:00 for 16 hours by
default). Each tick:
    1. Agent stepper advances every agent one minute (records flow)
    2. Metrics are recomputed from agent state
At the end of the window a baseline demand snapshot is taken once;
corridor proposals can be generated from flow at any point.
"""

import logging
from typing import Callable, Optional

import numpy as np

from corridorsim.agents.schedules import create_agents
from corridorsim.agents.stepper import prepare_stops, step_simulation
from corridorsim.analysis.metrics import SimulationMetrics, calculate_metrics
from corridorsim.analysis.proposals import (
    BaselineSnapshot,
    ProposalSnapshot,
    build_baseline,
    evaluate_proposal,
)
from corridorsim.core.config import RouteSynthesisConfig, SimulationConfig
from corridorsim.core.context import SimulationContext
from corridorsim.core.state import Agent, CityData
from corridorsim.flow.synthesis import BusRoute, generate_routes_from_flow

logger = logging.getLogger(__name__)

# Default snapshot interval (every 60 ticks = hourly)
DEFAULT_SNAPSHOT_INTERVAL: int = 60


class SimulationSession:
    """Owns one simulation: agents, clock, context, routes and analysis."""

    def __init__(self, city: CityData, config: Optional[SimulationConfig] = None):
        self.city = city
        self.config = config if config is not None else SimulationConfig()
        self.context = SimulationContext(region=self.config.region)
        self.stops = prepare_stops(city.stops, self.config.region)
        self.agents: list[Agent] = []
        self.current_minute: int = 0
        self.is_running: bool = False
        self.metrics: SimulationMetrics = SimulationMetrics()
        self.generated_routes: list[BusRoute] = []
        self.baseline: Optional[BaselineSnapshot] = None
        self.proposal: Optional[ProposalSnapshot] = None

    @property
    def finished(self) -> bool:
        return self.is_running and self.current_minute >= self.config.end_minute

    @property
    def ticks_done(self) -> int:
        if not self.is_running:
            return 0
        return self.current_minute - self.config.start_minute

    def start(self) -> None:
        """Create the population and start the clock at the window start."""
        rng = np.random.default_rng(self.config.random_seed)
        self.context.reset()
        self.agents = create_agents(
            self.config.agent_count,
            self.city.pois,
            self.city.home_sampler,
            rng,
            region=self.config.region,
        )
        self.current_minute = self.config.start_minute
        self.is_running = True
        self.metrics = SimulationMetrics()
        self.generated_routes = []
        self.baseline = None
        self.proposal = None
        logger.info(
            "Session started: %d agents, %d stops, minutes %d-%d",
            len(self.agents),
            len(self.stops),
            self.config.start_minute,
            self.config.end_minute,
        )

    def tick(self) -> bool:
        """Advance one minute. Returns False once the window is exhausted."""
        if not self.is_running:
            return False
        if self.finished:
            if self.baseline is None:
                self.baseline = build_baseline(self.current_minute, self.context.flow, self.metrics)
                logger.info(
                    "Baseline recorded: %d edges, %d traversals, peak hour %d",
                    self.baseline.edges,
                    self.baseline.total_traversals,
                    self.baseline.peak_hour,
                )
            return False

        step_simulation(self.agents, self.current_minute, self.stops, self.context)
        self.metrics = calculate_metrics(self.agents)
        self.current_minute += 1
        return True

    def run(
        self,
        minutes: Optional[int] = None,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> int:
        """Tick up to *minutes* times (default: to the end). Returns ticks run."""
        total = self.config.duration_minutes
        remaining = total - self.ticks_done
        n = remaining if minutes is None else min(minutes, remaining)
        ran = 0
        for _ in range(max(0, n)):
            if not self.tick():
                break
            ran += 1
            if progress_callback is not None:
                progress_callback(self.ticks_done, total)
        if self.finished:
            self.tick()  # records the baseline
        return ran

    def generate_routes(self, config: Optional[RouteSynthesisConfig] = None) -> list[BusRoute]:
        config = config if config is not None else self.config.synthesis
        self.generated_routes = generate_routes_from_flow(self.stops, self.context.flow, config)
        self.proposal = evaluate_proposal(self.current_minute, self.generated_routes, self.context.flow)
        return self.generated_routes

    def clear_routes(self) -> None:
        self.generated_routes = []
        self.proposal = None

    def reset(self) -> None:
        """Drop agents, flow and routes; the session can be started again."""
        self.context.reset()
        self.agents = []
        self.current_minute = 0
        self.is_running = False
        self.metrics = SimulationMetrics()
        self.generated_routes = []
        self.baseline = None
        self.proposal = None

    def snapshot(self) -> dict:
        """Capture current state as a dict for history."""
        summary = self.context.flow.summary()
        return {
            "minute": self.current_minute,
            "metrics": self.metrics.to_dict(),
            "flow": {
                "edges": summary.edges_count,
                "total_traversals": summary.total_traversals,
                "peak_hour": summary.peak_hour,
            },
        }


def run_simulation(
    city: CityData,
    config: Optional[SimulationConfig] = None,
    snapshot_interval: int = DEFAULT_SNAPSHOT_INTERVAL,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> tuple[SimulationSession, list[dict]]:
    """Run a full simulated day and return the session plus snapshots.

    Parameters
    ----------
    city : CityData
        Points of interest, stops and home sampler.
    config : SimulationConfig, optional
        Simulation configuration. Uses defaults if not provided.
    snapshot_interval : int
        Save a snapshot every N ticks (values below 1 are treated as 1).
    progress_callback : callable, optional
        Called with (ticks_done, total_ticks) for progress reporting.

    Returns
    -------
    tuple[SimulationSession, list[dict]]
        The finished session and its snapshots.
    """
    snapshot_interval = max(1, int(snapshot_interval))
    session = SimulationSession(city, config)
    session.start()

    snapshots: list[dict] = [session.snapshot()]
    total = session.config.duration_minutes

    while session.tick():
        step = session.ticks_done
        if step % snapshot_interval == 0 or step == total:
            snapshots.append(session.snapshot())
        if progress_callback is not None:
            progress_callback(step, total)

    return session, snapshots
