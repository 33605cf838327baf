"""Directed stop-to-stop traversal accumulator."""

from dataclasses import dataclass, field

import pandas as pd

from corridorsim.core.config import MINUTES_PER_DAY

HOURS_PER_DAY = 24


@dataclass
class FlowEdge:
    """Cumulative traversals of one directed stop pair."""

    from_stop: str
    to_stop: str
    count: int = 0
    hourly: list[int] = field(default_factory=lambda: [0] * HOURS_PER_DAY)

    @property
    def key(self) -> tuple[str, str]:
        return (self.from_stop, self.to_stop)

    def copy(self) -> "FlowEdge":
        return FlowEdge(self.from_stop, self.to_stop, self.count, list(self.hourly))

    def to_dict(self) -> dict:
        return {
            "from_stop": self.from_stop,
            "to_stop": self.to_stop,
            "count": self.count,
            "hourly": list(self.hourly),
        }


@dataclass
class FlowSummary:
    edges_count: int
    total_traversals: int
    hourly: list[int]
    peak_hour: int


def hour_of(minute: int) -> int:
    return (minute % MINUTES_PER_DAY) // 60


class FlowRecorder:
    """Increment-only edge counter; only :meth:`clear` resets it."""

    def __init__(self):
        self._edges: dict[tuple[str, str], FlowEdge] = {}

    def __len__(self) -> int:
        return len(self._edges)

    def record(self, from_stop: str, to_stop: str, minute: int) -> None:
        key = (from_stop, to_stop)
        edge = self._edges.get(key)
        if edge is None:
            edge = FlowEdge(from_stop, to_stop)
            self._edges[key] = edge
        edge.count += 1
        edge.hourly[hour_of(minute)] += 1

    def edges(self) -> list[FlowEdge]:
        """Snapshot copies in first-recorded order."""
        return [e.copy() for e in self._edges.values()]

    def count(self, from_stop: str, to_stop: str) -> int:
        edge = self._edges.get((from_stop, to_stop))
        return edge.count if edge else 0

    def clear(self) -> None:
        self._edges.clear()

    def summary(self) -> FlowSummary:
        hourly = [0] * HOURS_PER_DAY
        total = 0
        for edge in self._edges.values():
            total += edge.count
            for h, v in enumerate(edge.hourly):
                hourly[h] += v
        # earliest hour wins ties
        peak = max(range(HOURS_PER_DAY), key=lambda h: (hourly[h], -h))
        return FlowSummary(
            edges_count=len(self._edges),
            total_traversals=total,
            hourly=hourly,
            peak_hour=peak,
        )

    def to_frame(self) -> pd.DataFrame:
        """One row per edge with per-hour columns h00..h23."""
        hour_cols = [f"h{h:02d}" for h in range(HOURS_PER_DAY)]
        records = []
        for edge in self._edges.values():
            row = {"from_stop": edge.from_stop, "to_stop": edge.to_stop, "count": edge.count}
            row.update(zip(hour_cols, edge.hourly))
            records.append(row)
        if not records:
            return pd.DataFrame(columns=["from_stop", "to_stop", "count"] + hour_cols)
        return pd.DataFrame(records)
