"""Transit graph construction and cached shortest-path resolution.

Stops are joined to their k nearest neighbours by great-circle distance,
symmetrically, giving an undirected weighted graph. Shortest paths are
computed with Dijkstra and memoized per (from, to) pair for as long as the
stop set keeps the same signature.
"""

import heapq
import logging
from typing import Optional

import numpy as np

from corridorsim.core.config import KNN_NEIGHBOURS
from corridorsim.core.state import BusStop, Coordinate
from corridorsim.network.geometry import haversine_km_many

logger = logging.getLogger(__name__)

# stop id -> [(neighbour id, km)]
TransitGraph = dict[str, list[tuple[str, float]]]


def _add_edge(graph: TransitGraph, a: str, b: str, dist: float) -> None:
    edges = graph.get(a)
    if edges is None:
        return
    if any(to == b for to, _ in edges):
        return
    edges.append((b, dist))


def build_transit_graph(stops: list[BusStop], k: int = KNN_NEIGHBOURS) -> TransitGraph:
    """Connect every stop to its *k* nearest neighbours, in both directions."""
    graph: TransitGraph = {s.id: [] for s in stops}
    if len(stops) < 2:
        return graph

    coords = np.array([s.location for s in stops], dtype=float)
    for i, stop in enumerate(stops):
        dists = haversine_km_many(stop.location, coords)
        dists[i] = np.inf
        # stable sort keeps input order among equidistant neighbours
        order = np.argsort(dists, kind="stable")
        for j in order[:k]:
            d = float(dists[j])
            if not np.isfinite(d):
                continue
            other = stops[int(j)].id
            _add_edge(graph, stop.id, other, d)
            _add_edge(graph, other, stop.id, d)
    return graph


def stop_signature(stops: list[BusStop]) -> tuple:
    """Cheap identity for a stop set: count plus a sample of ids."""
    n = len(stops)
    if n == 0:
        return (0,)
    return (n, stops[0].id, stops[min(10, n - 1)].id, stops[-1].id)


def shortest_path(graph: TransitGraph, origin: str, dest: str) -> Optional[list[str]]:
    """Dijkstra over *graph*; returns the stop sequence or None if unreachable."""
    if origin not in graph or dest not in graph:
        return None
    if origin == dest:
        return [origin]

    dist: dict[str, float] = {origin: 0.0}
    prev: dict[str, str] = {}
    visited: set[str] = set()
    heap: list[tuple[float, str]] = [(0.0, origin)]

    while heap:
        d, u = heapq.heappop(heap)
        if u in visited:
            continue
        visited.add(u)
        if u == dest:
            break
        for v, w in graph[u]:
            alt = d + w
            if alt < dist.get(v, float("inf")):
                dist[v] = alt
                prev[v] = u
                heapq.heappush(heap, (alt, v))

    if dest not in prev:
        return None

    path = [dest]
    while path[-1] != origin:
        path.append(prev[path[-1]])
    path.reverse()
    return path


def path_length_km(graph: TransitGraph, path: list[str]) -> float:
    total = 0.0
    for a, b in zip(path, path[1:]):
        total += next(w for to, w in graph[a] if to == b)
    return total


class TransitNetwork:
    """Graph plus memoized paths, valid for one stop-set signature."""

    def __init__(self, k: int = KNN_NEIGHBOURS):
        self.k = k
        self.signature: Optional[tuple] = None
        self.graph: TransitGraph = {}
        self.stops: list[BusStop] = []
        self.stops_by_id: dict[str, BusStop] = {}
        self._coords: np.ndarray = np.empty((0, 2))
        self._paths: dict[tuple[str, str], Optional[list[str]]] = {}
        self.rebuilds: int = 0

    def ensure(self, stops: list[BusStop]) -> TransitGraph:
        """Rebuild the graph and drop cached paths if the stop set changed."""
        sig = stop_signature(stops)
        if sig == self.signature:
            return self.graph

        self.signature = sig
        self.stops = list(stops)
        self.stops_by_id = {s.id: s for s in stops}
        self._coords = np.array([s.location for s in stops], dtype=float).reshape(-1, 2)
        self.graph = build_transit_graph(self.stops, self.k)
        self._paths = {}
        self.rebuilds += 1
        logger.info(
            "Built transit graph: %d stops, %d directed edges (k=%d)",
            len(self.graph),
            sum(len(e) for e in self.graph.values()),
            self.k,
        )
        return self.graph

    def path(self, origin: str, dest: str) -> Optional[list[str]]:
        """Memoized shortest path; None means no path, never an error."""
        key = (origin, dest)
        if key in self._paths:
            return self._paths[key]
        result = shortest_path(self.graph, origin, dest)
        self._paths[key] = result
        return result

    def nearest_stop(self, loc: Coordinate) -> Optional[BusStop]:
        if not self.stops:
            return None
        dists = haversine_km_many(loc, self._coords)
        return self.stops[int(np.argmin(dists))]

    @property
    def cached_paths(self) -> int:
        return len(self._paths)

    def clear(self) -> None:
        self.signature = None
        self.graph = {}
        self.stops = []
        self.stops_by_id = {}
        self._coords = np.empty((0, 2))
        self._paths = {}
