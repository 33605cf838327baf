"""Greedy corridor synthesis from recorded flow.

Seeds on the busiest unused edge, then grows the chain forward along the
busiest unused outgoing edge of the tail and backward along the busiest
unused incoming edge of the head. Stop sequences are deterministic for a
given flow state and configuration; route ids are not.
"""

import logging
import uuid
from dataclasses import dataclass, replace
from typing import Optional

from corridorsim.core.config import RouteSynthesisConfig
from corridorsim.core.state import BusStop, Coordinate
from corridorsim.flow.recorder import FlowEdge, FlowRecorder

logger = logging.getLogger(__name__)

ROUTE_PALETTE = [
    "hsl(280, 70%, 60%)",
    "hsl(50, 90%, 55%)",
    "hsl(190, 80%, 55%)",
    "hsl(320, 70%, 55%)",
    "hsl(150, 70%, 50%)",
    "hsl(30, 90%, 55%)",
]

DEFAULT_FREQUENCY_MIN = 10


@dataclass(frozen=True)
class BusRoute:
    """A proposed corridor."""

    id: str
    name: str
    stop_ids: tuple[str, ...]
    geometry: tuple[Coordinate, ...]
    color: str
    frequency: int = DEFAULT_FREQUENCY_MIN

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "stop_ids": list(self.stop_ids),
            "geometry": [list(p) for p in self.geometry],
            "color": self.color,
            "frequency": self.frequency,
        }


def pick_color(i: int) -> str:
    return ROUTE_PALETTE[i % len(ROUTE_PALETTE)]


def _best_unused(candidates: list[FlowEdge], used: set) -> Optional[FlowEdge]:
    for edge in candidates:
        if edge.key not in used:
            return edge
    return None


def generate_routes_from_flow(
    stops: list[BusStop],
    flow: FlowRecorder,
    config: Optional[RouteSynthesisConfig] = None,
) -> list[BusRoute]:
    """Chain high-traffic flow edges into at most ``max_routes`` corridors."""
    config = replace(config).clamp() if config is not None else RouteSynthesisConfig()

    stop_by_id = {s.id: s for s in stops}

    edges = [
        e for e in flow.edges()
        if e.count >= config.min_count and e.from_stop in stop_by_id and e.to_stop in stop_by_id
    ]
    edges.sort(key=lambda e: e.count, reverse=True)
    edges = edges[: config.top_edges]

    if not edges:
        logger.info("No flow edges with count >= %d; nothing to synthesize", config.min_count)
        return []

    outgoing: dict[str, list[FlowEdge]] = {}
    incoming: dict[str, list[FlowEdge]] = {}
    for e in edges:
        outgoing.setdefault(e.from_stop, []).append(e)
        incoming.setdefault(e.to_stop, []).append(e)
    for adjacency in (outgoing, incoming):
        for candidates in adjacency.values():
            candidates.sort(key=lambda e: e.count, reverse=True)

    used: set[tuple[str, str]] = set()
    routes: list[BusRoute] = []
    batch = uuid.uuid4().hex[:12]
    max_stops = config.max_stops_per_route

    for seed in edges:
        if len(routes) >= config.max_routes:
            break
        if seed.key in used:
            continue

        forward = [seed.from_stop, seed.to_stop]
        used.add(seed.key)

        while len(forward) < max_stops:
            nxt = _best_unused(outgoing.get(forward[-1], []), used)
            if nxt is None:
                break
            used.add(nxt.key)
            if nxt.to_stop in forward:
                break
            forward.append(nxt.to_stop)

        backward: list[str] = []
        while len(backward) + len(forward) < max_stops:
            head = backward[0] if backward else forward[0]
            prv = _best_unused(incoming.get(head, []), used)
            if prv is None:
                break
            used.add(prv.key)
            if prv.from_stop in backward or prv.from_stop in forward:
                break
            backward.insert(0, prv.from_stop)

        stop_ids = backward + forward
        geometry = [stop_by_id[sid].location for sid in stop_ids if sid in stop_by_id]
        if len(stop_ids) < 3 or len(geometry) != len(stop_ids):
            continue

        n = len(routes)
        routes.append(BusRoute(
            id=f"flow_route_{batch}_{n}",
            name=f"Proposed Corridor {n + 1}",
            stop_ids=tuple(stop_ids),
            geometry=tuple(geometry),
            color=pick_color(n),
        ))

    logger.info("Synthesized %d corridor(s) from %d candidate edges", len(routes), len(edges))
    return routes
