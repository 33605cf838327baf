"""Simulation state data structures."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

# (lat, lon)
Coordinate = tuple[float, float]


class AgentState(str, Enum):
    """Presentation state of an agent, as reported to metrics and clients."""

    AT_HOME = "at_home"
    WALKING_TO_STOP = "walking_to_stop"
    WAITING = "waiting"
    RIDING = "riding"
    WALKING_TO_DEST = "walking_to_dest"
    AT_DESTINATION = "at_destination"


class TravelMode(str, Enum):
    """Internal movement mode driving the per-minute state machine."""

    IDLE = "idle"
    TRANSIT = "transit"
    WALK_FINAL = "walk_final"
    WALK_DIRECT = "walk_direct"


POI_CATEGORIES = (
    "education",
    "employment",
    "retail",
    "healthcare",
    "social",
    "leisure",
    "religious",
    "transport",
)


@dataclass(frozen=True)
class BusStop:
    """A transit boarding/alighting point."""

    id: str
    name: str
    location: Coordinate


@dataclass(frozen=True)
class PointOfInterest:
    """A trip destination supplied by the city data provider."""

    id: str
    name: str
    location: Coordinate
    category: str


@dataclass(frozen=True)
class Trip:
    """One scheduled journey: leave at *depart*, stay *dwell* minutes."""

    depart: int  # minute of day
    destination: Coordinate
    dwell: int
    purpose: str = ""
    label: str = ""


def age_group_for(age: int) -> str:
    if age < 18:
        return "child"
    if age < 65:
        return "adult"
    return "senior"


@dataclass
class Agent:
    """A simulated person and everything the stepper tracks about them."""

    id: str
    home_location: Coordinate
    current_location: Coordinate
    age: int
    age_group: str = ""
    target_location: Optional[Coordinate] = None
    nearest_stop_id: Optional[str] = None
    destination_stop_id: Optional[str] = None
    state: AgentState = AgentState.AT_HOME
    schedule: list[Trip] = field(default_factory=list)

    # State machine
    mode: TravelMode = TravelMode.IDLE
    trip_index: int = 0
    dwell_left: int = 0
    path: Optional[list[str]] = None
    path_index: int = 0
    recorded_hop: int = -1  # path index whose hop start was last recorded

    # Accumulators (minutes, km, kg CO2)
    walking_time: int = 0
    riding_time: int = 0
    waiting_time: int = 0
    total_time_spent: int = 0
    distance_traveled: float = 0.0
    carbon_emitted: float = 0.0

    def __post_init__(self):
        if not self.age_group:
            self.age_group = age_group_for(self.age)

    @property
    def current_trip(self) -> Optional[Trip]:
        if self.trip_index < len(self.schedule):
            return self.schedule[self.trip_index]
        return None

    def to_dict(self) -> dict:
        """Flat, JSON-friendly view used by snapshots and the API."""
        return {
            "id": self.id,
            "age": self.age,
            "age_group": self.age_group,
            "state": self.state.value,
            "mode": self.mode.value,
            "home_location": list(self.home_location),
            "current_location": list(self.current_location),
            "target_location": list(self.target_location) if self.target_location else None,
            "nearest_stop_id": self.nearest_stop_id,
            "destination_stop_id": self.destination_stop_id,
            "trip_index": self.trip_index,
            "trips_planned": len(self.schedule),
            "dwell_left": self.dwell_left,
            "walking_time": self.walking_time,
            "riding_time": self.riding_time,
            "waiting_time": self.waiting_time,
            "total_time_spent": self.total_time_spent,
            "distance_traveled": round(self.distance_traveled, 4),
            "carbon_emitted": round(self.carbon_emitted, 4),
        }


@dataclass
class CityData:
    """What the city data provider hands the engine.

    ``home_sampler`` takes the simulation's numpy Generator and returns a
    home coordinate.
    """

    pois: list[PointOfInterest]
    stops: list[BusStop]
    home_sampler: Callable
