"""Load city reference data (stops, points of interest, residential hubs).

Expected files in the data directory:
  - stops.csv             stop_id, name, lat, lon
  - pois.csv              poi_id, name, category, lat, lon
  - residential_hubs.csv  lat, lon            (optional)
"""

import logging
import os
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd

from corridorsim.core.config import RegionBounds
from corridorsim.core.state import POI_CATEGORIES, BusStop, CityData, Coordinate, PointOfInterest
from corridorsim.network.geometry import clamp_to_region

logger = logging.getLogger(__name__)

SAMPLE_DIR = Path(__file__).resolve().parents[1] / "data" / "sample"
DATA_DIR = Path(os.environ.get("CORRIDORSIM_DATA_DIR") or SAMPLE_DIR)

# Spread of homes around a residential hub, in degrees
HUB_JITTER_DEG = 0.004


class ResidentialSampler:
    """Seeded home-location sampler.

    Picks a residential hub and adds Gaussian jitter; falls back to a
    uniform draw over the region when no hubs are known.
    """

    def __init__(self, hubs: list[Coordinate], region: Optional[RegionBounds] = None):
        self.hubs = list(hubs)
        self.region = region if region is not None else RegionBounds()

    def __call__(self, rng: np.random.Generator) -> Coordinate:
        r = self.region
        if not self.hubs:
            return (
                float(r.south + rng.random() * (r.north - r.south)),
                float(r.west + rng.random() * (r.east - r.west)),
            )
        lat, lon = self.hubs[int(rng.integers(0, len(self.hubs)))]
        return clamp_to_region(
            (lat + rng.normal(0.0, HUB_JITTER_DEG), lon + rng.normal(0.0, HUB_JITTER_DEG)),
            r,
        )


def _read_csv(path: Path, required: list[str]) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"City data file not found at {path}")
    df = pd.read_csv(path)
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"{path.name} is missing columns: {', '.join(missing)}")

    df["lat"] = pd.to_numeric(df["lat"], errors="coerce")
    df["lon"] = pd.to_numeric(df["lon"], errors="coerce")
    valid = np.isfinite(df["lat"]) & np.isfinite(df["lon"])
    dropped = int((~valid).sum())
    if dropped:
        logger.warning("Dropped %d row(s) with invalid coordinates from %s", dropped, path.name)
    return df[valid].reset_index(drop=True)


def load_stops(path: Path) -> list[BusStop]:
    df = _read_csv(path, ["stop_id", "name", "lat", "lon"])
    df["stop_id"] = df["stop_id"].astype(str)
    stops = [
        BusStop(id=row.stop_id, name=str(row.name), location=(float(row.lat), float(row.lon)))
        for row in df.itertuples(index=False)
    ]
    logger.info("Loaded %d stops from %s", len(stops), path)
    return stops


def load_pois(path: Path) -> list[PointOfInterest]:
    df = _read_csv(path, ["poi_id", "name", "category", "lat", "lon"])
    df["category"] = df["category"].astype(str).str.strip().str.lower()
    known = df["category"].isin(POI_CATEGORIES)
    if (~known).any():
        logger.warning(
            "Dropped %d POI(s) with unknown categories: %s",
            int((~known).sum()),
            sorted(df.loc[~known, "category"].unique()),
        )
    df = df[known]
    pois = [
        PointOfInterest(
            id=str(row.poi_id),
            name=str(row.name),
            location=(float(row.lat), float(row.lon)),
            category=row.category,
        )
        for row in df.itertuples(index=False)
    ]
    logger.info("Loaded %d points of interest from %s", len(pois), path)
    return pois


def load_residential_hubs(path: Path) -> list[Coordinate]:
    if not path.exists():
        logger.info("No residential hubs at %s; homes will be sampled uniformly", path)
        return []
    df = _read_csv(path, ["lat", "lon"])
    return [(float(lat), float(lon)) for lat, lon in zip(df["lat"], df["lon"])]


def load_city(data_dir: Optional[Path] = None, region: Optional[RegionBounds] = None) -> CityData:
    """Load stops, POIs and a home sampler from *data_dir*.

    Returns:
        CityData ready to hand to a simulation session.
    """
    data_dir = Path(data_dir) if data_dir is not None else DATA_DIR
    region = region if region is not None else RegionBounds()

    stops = load_stops(data_dir / "stops.csv")
    pois = load_pois(data_dir / "pois.csv")
    hubs = load_residential_hubs(data_dir / "residential_hubs.csv")

    return CityData(
        pois=pois,
        stops=stops,
        home_sampler=ResidentialSampler(hubs, region),
    )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    city = load_city()
    logger.info("City: %d stops, %d POIs", len(city.stops), len(city.pois))
