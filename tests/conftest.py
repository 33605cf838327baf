"""Shared fixtures: tiny stop networks and cities inside the default region."""

import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from corridorsim.core.state import BusStop, CityData, PointOfInterest  # noqa: E402

# One kilometre of latitude, in degrees
KM_LAT = 1.0 / 111.19492664455873

BASE_LAT = 52.490
BASE_LON = -1.880


def collinear_stops(n: int = 3, spacing_km: float = 1.0) -> list[BusStop]:
    """Stops due north of each other, *spacing_km* apart."""
    names = "ABCDEFGH"
    return [
        BusStop(id=names[i], name=f"Stop {names[i]}", location=(BASE_LAT + i * spacing_km * KM_LAT, BASE_LON))
        for i in range(n)
    ]


@pytest.fixture
def line_stops() -> list[BusStop]:
    return collinear_stops(3)


@pytest.fixture
def split_stops() -> list[BusStop]:
    """Two pairs of stops far apart; with k=1 the pairs are disconnected."""
    return [
        BusStop("W1", "West 1", (52.4900, -1.9100)),
        BusStop("W2", "West 2", (52.4905, -1.9095)),
        BusStop("E1", "East 1", (52.5200, -1.8500)),
        BusStop("E2", "East 2", (52.5205, -1.8495)),
    ]


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def small_city() -> CityData:
    """A 4x4 grid of stops with a handful of destinations."""
    stops = [
        BusStop(f"G{i}{j}", f"Grid {i}{j}", (52.492 + i * 0.009, -1.905 + j * 0.015))
        for i in range(4)
        for j in range(4)
    ]
    pois = [
        PointOfInterest("E1", "School", (52.5100, -1.8900), "education"),
        PointOfInterest("J1", "Works", (52.4950, -1.8600), "employment"),
        PointOfInterest("J2", "Depot", (52.5180, -1.8550), "employment"),
        PointOfInterest("R1", "Market", (52.5000, -1.9000), "retail"),
        PointOfInterest("H1", "Clinic", (52.5050, -1.8700), "healthcare"),
        PointOfInterest("S1", "Hall", (52.5150, -1.9000), "social"),
    ]

    def home_sampler(g: np.random.Generator):
        return (52.490 + g.random() * 0.030, -1.910 + g.random() * 0.060)

    return CityData(pois=pois, stops=stops, home_sampler=home_sampler)
