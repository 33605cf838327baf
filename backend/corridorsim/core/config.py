"""Region, movement constants and simulation parameters."""

from dataclasses import dataclass, field


# Modeled region: Aston ward, Birmingham (south, west, north, east)
DEFAULT_BBOX = (52.488, -1.915, 52.525, -1.845)

# Simulation constants
MINUTES_PER_DAY = 24 * 60
DEFAULT_START_MINUTE = 6 * 60
DEFAULT_DURATION_MINUTES = 16 * 60
DEFAULT_AGENT_COUNT = 800

# Movement (km per simulated minute)
WALK_KM_PER_MIN = 5.0 / 60.0
TRANSIT_KM_PER_MIN = 25.0 / 60.0

# Emission factors, g CO2 per km (planning proxy)
CARBON_FACTORS = {
    "car_per_km": 171.0,
    "bus_base_per_km": 822.0,
}

# Transit graph
KNN_NEIGHBOURS = 14

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class RegionBounds:
    """Axis-aligned lat/lon bounding box every core coordinate is clamped to."""

    south: float = DEFAULT_BBOX[0]
    west: float = DEFAULT_BBOX[1]
    north: float = DEFAULT_BBOX[2]
    east: float = DEFAULT_BBOX[3]

    @property
    def center(self) -> tuple[float, float]:
        return ((self.south + self.north) / 2.0, (self.west + self.east) / 2.0)

    def validate(self) -> list[str]:
        """Return list of validation errors, empty if valid."""
        errors = []
        if not self.south < self.north:
            errors.append(f"south must be < north, got {self.south} >= {self.north}")
        if not self.west < self.east:
            errors.append(f"west must be < east, got {self.west} >= {self.east}")
        return errors


@dataclass
class RouteSynthesisConfig:
    """Parameters for chaining high-flow edges into proposed corridors."""

    top_edges: int = 120
    min_count: int = 8
    max_routes: int = 8
    max_stops_per_route: int = 18

    def validate(self) -> list[str]:
        """Return list of validation errors, empty if valid."""
        errors = []
        if self.top_edges < 1:
            errors.append(f"top_edges must be >= 1, got {self.top_edges}")
        if self.min_count < 1:
            errors.append(f"min_count must be >= 1, got {self.min_count}")
        if self.max_routes < 1:
            errors.append(f"max_routes must be >= 1, got {self.max_routes}")
        if self.max_stops_per_route < 3:
            errors.append(f"max_stops_per_route must be >= 3, got {self.max_stops_per_route}")
        return errors

    def clamp(self) -> "RouteSynthesisConfig":
        """Clamp all values to valid ranges."""
        self.top_edges = max(1, int(self.top_edges))
        self.min_count = max(1, int(self.min_count))
        self.max_routes = max(1, int(self.max_routes))
        self.max_stops_per_route = max(3, int(self.max_stops_per_route))
        return self


@dataclass
class SimulationConfig:
    """Full simulation configuration."""

    agent_count: int = DEFAULT_AGENT_COUNT
    random_seed: int = 1337
    start_minute: int = DEFAULT_START_MINUTE
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    region: RegionBounds = field(default_factory=RegionBounds)
    synthesis: RouteSynthesisConfig = field(default_factory=RouteSynthesisConfig)

    @property
    def end_minute(self) -> int:
        return self.start_minute + self.duration_minutes

    def validate(self) -> list[str]:
        """Return list of validation errors, empty if valid."""
        errors = []
        if self.agent_count < 0:
            errors.append(f"agent_count must be >= 0, got {self.agent_count}")
        if not 0 <= self.start_minute < MINUTES_PER_DAY:
            errors.append(f"start_minute must be 0-1439, got {self.start_minute}")
        if not 0 < self.duration_minutes <= MINUTES_PER_DAY:
            errors.append(f"duration_minutes must be 1-1440, got {self.duration_minutes}")
        errors.extend(self.region.validate())
        errors.extend(self.synthesis.validate())
        return errors

    def clamp(self) -> "SimulationConfig":
        """Clamp all values to valid ranges."""
        self.agent_count = max(0, int(self.agent_count))
        self.start_minute = max(0, min(MINUTES_PER_DAY - 1, int(self.start_minute)))
        self.duration_minutes = max(1, min(MINUTES_PER_DAY, int(self.duration_minutes)))
        self.synthesis.clamp()
        return self
