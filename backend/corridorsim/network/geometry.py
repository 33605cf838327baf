"""Geodesic helpers: haversine distance, region clamping and movement."""

import math
from typing import NamedTuple

import numpy as np

from corridorsim.core.config import EARTH_RADIUS_KM, RegionBounds
from corridorsim.core.state import Coordinate


DEFAULT_REGION = RegionBounds()


class Movement(NamedTuple):
    """Result of one movement step."""

    location: Coordinate
    arrived: bool
    moved_km: float


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in kilometres between two (lat, lon) points."""
    d_lat = math.radians(b[0] - a[0])
    d_lon = math.radians(b[1] - a[1])
    lat1 = math.radians(a[0])
    lat2 = math.radians(b[0])

    x = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(x), math.sqrt(1 - x))


def haversine_km_many(origin: Coordinate, points: np.ndarray) -> np.ndarray:
    """Vectorized haversine from *origin* to every row of an (N, 2) array."""
    lat1 = np.radians(origin[0])
    lat2 = np.radians(points[:, 0])
    d_lat = lat2 - lat1
    d_lon = np.radians(points[:, 1] - origin[1])

    x = np.sin(d_lat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(d_lon / 2) ** 2
    x = np.clip(x, 0.0, 1.0)
    return 2 * EARTH_RADIUS_KM * np.arctan2(np.sqrt(x), np.sqrt(1 - x))


def equirectangular_km(a: Coordinate, b: Coordinate) -> float:
    """Flat-earth approximation, adequate for short polyline segments."""
    x = math.radians(b[1] - a[1]) * math.cos(math.radians((a[0] + b[0]) / 2))
    y = math.radians(b[0] - a[0])
    return math.sqrt(x * x + y * y) * EARTH_RADIUS_KM


def is_valid_location(loc) -> bool:
    try:
        return len(loc) == 2 and math.isfinite(loc[0]) and math.isfinite(loc[1])
    except TypeError:
        return False


def in_region(p: Coordinate, region: RegionBounds = DEFAULT_REGION) -> bool:
    lat, lon = p
    return region.south <= lat <= region.north and region.west <= lon <= region.east


def clamp_to_region(p: Coordinate, region: RegionBounds = DEFAULT_REGION) -> Coordinate:
    """Clamp a coordinate into the region; NaN components snap to the centre."""
    lat, lon = float(p[0]), float(p[1])
    c_lat, c_lon = region.center
    if math.isnan(lat):
        lat = c_lat
    if math.isnan(lon):
        lon = c_lon
    return (
        min(region.north, max(region.south, lat)),
        min(region.east, max(region.west, lon)),
    )


def move_toward(current: Coordinate, target: Coordinate, step_km: float) -> Movement:
    """Advance linearly from *current* toward *target* by at most *step_km*.

    Never overshoots: when the remaining distance fits in the step the
    result snaps exactly onto the target and reports the true distance.
    """
    d = haversine_km(current, target)
    if not math.isfinite(d) or d <= 0:
        return Movement((target[0], target[1]), True, 0.0)
    if d <= step_km:
        return Movement((target[0], target[1]), True, d)

    t = step_km / d
    return Movement(
        (
            current[0] + (target[0] - current[0]) * t,
            current[1] + (target[1] - current[1]) * t,
        ),
        False,
        step_km,
    )
