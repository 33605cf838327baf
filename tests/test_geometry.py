import math

import numpy as np
import pytest

from corridorsim.core.config import RegionBounds
from corridorsim.network.geometry import (
    clamp_to_region,
    haversine_km,
    haversine_km_many,
    in_region,
    is_valid_location,
    move_toward,
)

from conftest import BASE_LAT, BASE_LON, KM_LAT


def test_haversine_one_degree_latitude():
    assert haversine_km((52.0, -1.9), (53.0, -1.9)) == pytest.approx(111.195, abs=0.01)


def test_haversine_many_matches_scalar():
    origin = (52.50, -1.88)
    points = np.array([[52.51, -1.87], [52.49, -1.90], [52.50, -1.88]])
    expected = [haversine_km(origin, tuple(p)) for p in points]
    assert haversine_km_many(origin, points) == pytest.approx(expected)


def test_move_snaps_to_target_within_step():
    start = (BASE_LAT, BASE_LON)
    target = (BASE_LAT + 0.05 * KM_LAT, BASE_LON)
    m = move_toward(start, target, 0.1)
    assert m.arrived
    assert m.location == target
    assert m.moved_km == pytest.approx(0.05, rel=1e-6)
    assert haversine_km(m.location, target) == 0.0


def test_move_partial_step_reduces_distance_by_step():
    start = (BASE_LAT, BASE_LON)
    target = (BASE_LAT + 1.3 * KM_LAT, BASE_LON + 0.01)
    before = haversine_km(start, target)
    step = 25.0 / 60.0
    m = move_toward(start, target, step)
    assert not m.arrived
    assert m.moved_km == step
    assert haversine_km(m.location, target) == pytest.approx(before - step, abs=1e-3)


def test_move_never_overshoots_over_many_steps():
    loc = (BASE_LAT, BASE_LON)
    target = (BASE_LAT + 0.7 * KM_LAT, BASE_LON + 0.004)
    total = 0.0
    for _ in range(20):
        m = move_toward(loc, target, 5.0 / 60.0)
        loc = m.location
        total += m.moved_km
        assert haversine_km(loc, target) <= haversine_km((BASE_LAT, BASE_LON), target)
        if m.arrived:
            break
    assert loc == target
    assert total == pytest.approx(haversine_km((BASE_LAT, BASE_LON), target), abs=1e-3)


def test_move_to_same_point_arrives_without_distance():
    m = move_toward((BASE_LAT, BASE_LON), (BASE_LAT, BASE_LON), 1.0)
    assert m.arrived
    assert m.moved_km == 0.0


def test_clamp_to_region_bounds():
    region = RegionBounds()
    assert clamp_to_region((60.0, 10.0), region) == (region.north, region.east)
    assert clamp_to_region((0.0, -10.0), region) == (region.south, region.west)
    inside = (52.50, -1.88)
    assert clamp_to_region(inside, region) == inside


def test_clamp_handles_non_finite():
    region = RegionBounds()
    lat, lon = clamp_to_region((math.nan, math.inf), region)
    assert lat == region.center[0]
    assert lon == region.east
    assert in_region((lat, lon), region)


def test_is_valid_location():
    assert is_valid_location((52.5, -1.9))
    assert not is_valid_location((math.nan, -1.9))
    assert not is_valid_location((52.5,))
    assert not is_valid_location(None)
