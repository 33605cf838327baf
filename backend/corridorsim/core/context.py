"""Per-simulation mutable state shared by the core operations."""

from typing import Optional

from corridorsim.core.config import KNN_NEIGHBOURS, RegionBounds
from corridorsim.flow.recorder import FlowEdge, FlowRecorder
from corridorsim.network.graph import TransitNetwork


class SimulationContext:
    """Owns the transit graph, its path cache and the flow accumulator.

    One context per independent simulation; nothing here is process-wide.
    """

    def __init__(self, region: Optional[RegionBounds] = None, k: int = KNN_NEIGHBOURS):
        self.region: RegionBounds = region if region is not None else RegionBounds()
        self.network: TransitNetwork = TransitNetwork(k=k)
        self.flow: FlowRecorder = FlowRecorder()

    def reset(self) -> None:
        self.network.clear()
        self.flow.clear()


def get_flow_edges(context: SimulationContext) -> list[FlowEdge]:
    """Snapshot of every recorded flow edge."""
    return context.flow.edges()


def clear_flow(context: SimulationContext) -> None:
    context.flow.clear()
