"""Daily schedule generation for agents.

Each age band has a small table of trip policies: probability of making the
trip, a base departure minute with asymmetric jitter, a dwell range and the
point-of-interest categories that can serve it. Every band ends with a
return-home trip. All draws come from one seeded numpy Generator.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from corridorsim.core.config import MINUTES_PER_DAY, RegionBounds
from corridorsim.core.state import Agent, Coordinate, PointOfInterest, Trip
from corridorsim.network.geometry import clamp_to_region

logger = logging.getLogger(__name__)

HomeSampler = Callable[[np.random.Generator], Coordinate]

HOME = "home"

# Share of working-age adults given a fixed workplace
ADULT_PRIMARY_EMPLOYMENT_PROB: float = 0.75

MIN_AGE: int = 5
MAX_AGE: int = 84


@dataclass(frozen=True)
class TripPolicy:
    """One potential trip in a band's day."""

    purpose: str
    categories: tuple[str, ...]
    probability: float
    base_minute: int
    jitter_low: int
    jitter_high: int
    dwell_min: int
    dwell_max: int
    uses_primary: bool = False


@dataclass(frozen=True)
class AgeBand:
    name: str
    max_age: Optional[int]  # exclusive upper bound; None = open-ended
    policies: tuple[TripPolicy, ...]
    primary_category: Optional[str] = None
    primary_probability: float = 0.0


SOCIAL = ("social", "leisure", "religious")

AGE_BANDS: tuple[AgeBand, ...] = (
    AgeBand(
        name="child",
        max_age=18,
        primary_category="education",
        primary_probability=1.0,
        policies=(
            TripPolicy("education", ("education",), 1.0, 8 * 60, -25, 25, 300, 420, uses_primary=True),
            TripPolicy("shopping", ("retail",), 0.35, 16 * 60, -30, 40, 20, 60),
            TripPolicy(HOME, (), 1.0, 17 * 60, -10, 60, 600, 900),
        ),
    ),
    AgeBand(
        name="adult",
        max_age=65,
        primary_category="employment",
        primary_probability=ADULT_PRIMARY_EMPLOYMENT_PROB,
        policies=(
            TripPolicy("work", ("employment",), 1.0, 7 * 60, -45, 60, 360, 540, uses_primary=True),
            TripPolicy("shopping", ("retail",), 0.55, 18 * 60, -15, 75, 20, 70),
            TripPolicy("social", SOCIAL, 0.35, 19 * 60, 0, 120, 45, 150),
            TripPolicy(HOME, (), 1.0, 20 * 60, 0, 180, 600, 900),
        ),
    ),
    AgeBand(
        name="senior",
        max_age=None,
        policies=(
            TripPolicy("healthcare", ("healthcare",), 0.65, 10 * 60, -30, 90, 30, 120),
            TripPolicy("social", SOCIAL, 0.55, 13 * 60, -10, 140, 40, 160),
            TripPolicy("shopping", ("retail",), 0.40, 16 * 60, -20, 120, 15, 70),
            TripPolicy(HOME, (), 1.0, 18 * 60, 0, 180, 700, 1000),
        ),
    ),
)


def band_for_age(age: int) -> AgeBand:
    for band in AGE_BANDS:
        if band.max_age is None or age < band.max_age:
            return band
    return AGE_BANDS[-1]


def _rand_int(rng: np.random.Generator, low: int, high: int) -> int:
    """Uniform integer in [low, high], both inclusive."""
    return int(rng.integers(low, high + 1))


def _pick_one(rng: np.random.Generator, items: list):
    if not items:
        return None
    return items[int(rng.integers(0, len(items)))]


def _pick_poi(
    rng: np.random.Generator,
    pois: list[PointOfInterest],
    categories: tuple[str, ...],
) -> Optional[PointOfInterest]:
    return _pick_one(rng, [p for p in pois if p.category in categories])


def make_daily_schedule(
    agent: Agent,
    pois: list[PointOfInterest],
    rng: np.random.Generator,
    primary: Optional[PointOfInterest] = None,
    region: Optional[RegionBounds] = None,
) -> list[Trip]:
    """Build the agent's ordered trips for one day."""
    region = region if region is not None else RegionBounds()
    band = band_for_age(agent.age)
    trips: list[Trip] = []

    for policy in band.policies:
        if policy.probability < 1.0 and rng.random() >= policy.probability:
            continue

        if policy.purpose == HOME:
            destination = agent.home_location
            label = "Home"
        else:
            poi = primary if (policy.uses_primary and primary is not None) else _pick_poi(
                rng, pois, policy.categories
            )
            if poi is None:
                continue
            destination = clamp_to_region(poi.location, region)
            label = poi.name

        depart = policy.base_minute + _rand_int(rng, policy.jitter_low, policy.jitter_high)
        dwell = _rand_int(rng, policy.dwell_min, policy.dwell_max)
        trips.append(Trip(
            depart=max(0, min(MINUTES_PER_DAY - 1, depart)),
            destination=destination,
            dwell=dwell,
            purpose=policy.purpose,
            label=label,
        ))

    trips.sort(key=lambda t: t.depart)
    return trips


def _pick_primary(
    rng: np.random.Generator,
    band: AgeBand,
    pois: list[PointOfInterest],
) -> Optional[PointOfInterest]:
    if band.primary_category is None:
        return None
    if band.primary_probability < 1.0 and rng.random() >= band.primary_probability:
        return None
    return _pick_one(rng, [p for p in pois if p.category == band.primary_category])


def create_agents(
    count: int,
    pois: list[PointOfInterest],
    home_sampler: HomeSampler,
    rng: np.random.Generator,
    region: Optional[RegionBounds] = None,
) -> list[Agent]:
    """Generate *count* agents, each with a home and a daily schedule.

    Parameters
    ----------
    count : int
        Number of agents.
    pois : list[PointOfInterest]
        Candidate trip destinations.
    home_sampler : callable
        Draws a home coordinate from the supplied generator.
    rng : np.random.Generator
        Seeded generator; every stochastic choice is drawn from it.
    region : RegionBounds, optional
        Region homes and destinations are clamped to.

    Returns
    -------
    list[Agent]
    """
    region = region if region is not None else RegionBounds()
    agents: list[Agent] = []

    for i in range(count):
        home = clamp_to_region(home_sampler(rng), region)
        age = _rand_int(rng, MIN_AGE, MAX_AGE)

        agent = Agent(
            id=f"agent_{i}",
            home_location=home,
            current_location=home,
            age=age,
        )
        band = band_for_age(age)
        primary = _pick_primary(rng, band, pois)
        agent.schedule = make_daily_schedule(agent, pois, rng, primary=primary, region=region)
        agents.append(agent)

    logger.info(
        "Created %d agents with %d scheduled trips",
        len(agents),
        sum(len(a.schedule) for a in agents),
    )
    return agents
