"""Population-level metrics derived from current agent state."""

from dataclasses import asdict, dataclass

from corridorsim.core.state import Agent, AgentState


@dataclass
class SimulationMetrics:
    total_agents: int = 0
    active_agents: int = 0
    walking_agents: int = 0
    waiting_agents: int = 0
    riding_agents: int = 0
    arrived_agents: int = 0
    average_travel_time: float = 0.0  # minutes
    average_wait_time: float = 0.0  # minutes
    total_co2: float = 0.0  # kg
    co2_per_capita: float = 0.0  # kg
    total_distance: float = 0.0  # km
    average_age: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


WALKING_STATES = (AgentState.WALKING_TO_STOP, AgentState.WALKING_TO_DEST)


def calculate_metrics(agents: list[Agent]) -> SimulationMetrics:
    """Pure aggregate over *agents*; safe to call at any tick."""
    n = len(agents)
    if n == 0:
        return SimulationMetrics()

    total_co2 = sum(a.carbon_emitted for a in agents)
    total_dist = sum(a.distance_traveled for a in agents)

    riding = sum(1 for a in agents if a.state == AgentState.RIDING)
    walking = sum(1 for a in agents if a.state in WALKING_STATES)
    waiting = sum(1 for a in agents if a.state == AgentState.WAITING)
    arrived = sum(1 for a in agents if a.state == AgentState.AT_DESTINATION)

    return SimulationMetrics(
        total_agents=n,
        active_agents=n - arrived,
        walking_agents=walking,
        waiting_agents=waiting,
        riding_agents=riding,
        arrived_agents=arrived,
        average_travel_time=round(sum(a.total_time_spent for a in agents) / n, 2),
        average_wait_time=round(sum(a.waiting_time for a in agents) / n, 2),
        total_co2=round(total_co2, 2),
        co2_per_capita=round(total_co2 / n, 3),
        total_distance=round(total_dist, 2),
        average_age=round(sum(a.age for a in agents) / n, 2),
    )
