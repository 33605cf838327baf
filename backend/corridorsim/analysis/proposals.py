"""Baseline and corridor-proposal evaluation against recorded flow."""

from dataclasses import asdict, dataclass

from corridorsim.analysis.metrics import SimulationMetrics
from corridorsim.core.state import Coordinate
from corridorsim.flow.recorder import FlowRecorder
from corridorsim.flow.synthesis import BusRoute
from corridorsim.network.geometry import equirectangular_km


@dataclass
class BaselineSnapshot:
    """Demand picture at the end of the simulated window."""

    minute: int
    edges: int
    total_traversals: int
    peak_hour: int
    total_co2: float
    total_distance_km: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ProposalSnapshot:
    """How much recorded demand a set of corridors would carry."""

    minute: int
    routes_count: int
    route_km: float
    demand_captured_pct: float
    demand_captured_traversals: int
    efficiency: float  # captured traversals per route-km

    def to_dict(self) -> dict:
        return asdict(self)


def route_length_km(geometry) -> float:
    points: list[Coordinate] = list(geometry)
    return sum(equirectangular_km(a, b) for a, b in zip(points, points[1:]))


def demand_captured(routes: list[BusRoute], flow: FlowRecorder) -> tuple[int, int]:
    """Return (captured traversals, total traversals).

    A route captures the flow of every consecutive stop pair it serves in
    its own direction of travel.
    """
    total = flow.summary().total_traversals
    captured = 0
    for route in routes:
        for a, b in zip(route.stop_ids, route.stop_ids[1:]):
            captured += flow.count(a, b)
    return min(captured, total), total


def build_baseline(minute: int, flow: FlowRecorder, metrics: SimulationMetrics) -> BaselineSnapshot:
    summary = flow.summary()
    return BaselineSnapshot(
        minute=minute,
        edges=summary.edges_count,
        total_traversals=summary.total_traversals,
        peak_hour=summary.peak_hour,
        total_co2=metrics.total_co2,
        total_distance_km=metrics.total_distance,
    )


def evaluate_proposal(minute: int, routes: list[BusRoute], flow: FlowRecorder) -> ProposalSnapshot:
    captured, total = demand_captured(routes, flow)
    route_km = sum(route_length_km(r.geometry) for r in routes)
    pct = captured / total * 100.0 if total > 0 else 0.0
    efficiency = captured / route_km if route_km > 0 else 0.0
    return ProposalSnapshot(
        minute=minute,
        routes_count=len(routes),
        route_km=round(route_km, 2),
        demand_captured_pct=round(pct, 1),
        demand_captured_traversals=captured,
        efficiency=round(efficiency, 1),
    )
