from __future__ import annotations

import random
from typing import Callable, List, Optional, Sequence, Tuple

from ship_route.config import Settings, settings
from ship_route.core.models import (
    BoundingBox,
    EnvironmentalReading,
    HazardLabel,
    HazardMarker,
    HazardType,
    Waypoint,
)

ALL_CLEAR = "No hazards detected. All clear!"

# Threshold rules, evaluated independently. Inequalities are strict.
HAZARD_RULES: List[Tuple[HazardLabel, Callable[[EnvironmentalReading], bool]]] = [
    (HazardLabel.HIGH_TEMPERATURE, lambda r: r.temperature > 30.0),
    (HazardLabel.LOW_PRESSURE, lambda r: r.pressure < 1000.0),
    (HazardLabel.STRONG_WINDS, lambda r: r.wind_speed > 30.0),
    (HazardLabel.HIGH_WAVES, lambda r: r.wave_height > 3.0),
]

HAZARD_ICONS = {
    HazardType.STORM: "⛈️",
    HazardType.ROUGH_SEAS: "🌊",
    HazardType.FLOATING_DEBRIS: "🪵",
    HazardType.STRONG_CURRENT: "🌪️",
}


def _uniform(rng: random.Random, bounds: Tuple[float, float]) -> float:
    lo, hi = bounds
    return lo + rng.random() * (hi - lo)


def sample_environment(
    position: Optional[Waypoint],
    rng: Optional[random.Random] = None,
    cfg: Optional[Settings] = None,
) -> EnvironmentalReading:
    """
    Synthetic conditions at *position*.

    Each value is drawn independently and uniformly from its configured
    half-open range. The position is recorded on the reading but does not
    shape the distribution; this stands in for a real weather model.
    """
    rng = rng or random.Random()
    cfg = cfg or settings
    return EnvironmentalReading(
        temperature=_uniform(rng, cfg.temperature_range_c),
        pressure=_uniform(rng, cfg.pressure_range_hpa),
        wind_speed=_uniform(rng, cfg.wind_speed_range_kmh),
        wave_height=_uniform(rng, cfg.wave_height_range_m),
        position=position,
    )


def classify_hazards(reading: EnvironmentalReading) -> List[HazardLabel]:
    """Labels whose threshold the reading crosses, in rule order. Empty means all clear."""
    return [label for label, rule in HAZARD_RULES if rule(reading)]


def place_simulated_hazards(
    count: int,
    bounds: BoundingBox,
    rng: Optional[random.Random] = None,
    radius_m: Optional[float] = None,
) -> List[HazardMarker]:
    """*count* markers at uniform positions inside *bounds*, each with a uniform hazard type."""
    rng = rng or random.Random()
    radius = settings.simulated_hazard_radius_m if radius_m is None else radius_m
    types = list(HazardType)
    out: List[HazardMarker] = []
    for _ in range(max(0, count)):
        lat = _uniform(rng, (bounds.min_lat, bounds.max_lat))
        lon = _uniform(rng, (bounds.min_lon, bounds.max_lon))
        out.append(
            HazardMarker(
                kind="simulated",
                position=Waypoint(lat=lat, lon=lon),
                radius_m=radius,
                hazard_type=types[rng.randrange(len(types))],
            )
        )
    return out


def alert_messages(labels: Sequence[HazardLabel]) -> List[str]:
    if not labels:
        return [ALL_CLEAR]
    return [f"{HazardLabel(label).value} detected at current position." for label in labels]


def placement_alerts(markers: Sequence[HazardMarker]) -> List[str]:
    return [f"{m.title} detected nearby. Route adjusted." for m in markers]
