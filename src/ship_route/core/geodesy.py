"""Great-circle distance along a route and constant-speed ETA."""
from __future__ import annotations

from datetime import datetime, timedelta
from math import atan2, cos, radians, sin, sqrt
from typing import Iterable, Optional, Sequence, Tuple, Union

from ship_route.config import settings
from ship_route.core.models import VoyageSummary, Waypoint
from ship_route.errors import ArrivalOutOfRange, ConfigurationError

PointLike = Union[Waypoint, Sequence[float]]


# ---------------------------------------------------------------------------
# Geo helpers
# ---------------------------------------------------------------------------

def _latlon(p: PointLike) -> Tuple[float, float]:
    if isinstance(p, Waypoint):
        return p.lat, p.lon
    return float(p[0]), float(p[1])


def haversine_km(
    lat1: float, lon1: float, lat2: float, lon2: float, radius_km: Optional[float] = None
) -> float:
    """Great-circle distance in kilometres between two points in degrees."""
    R = settings.earth_radius_km if radius_km is None else radius_km
    lat1r, lon1r, lat2r, lon2r = map(radians, [lat1, lon1, lat2, lon2])
    dlat = lat2r - lat1r
    dlon = lon2r - lon1r
    a = sin(dlat / 2) ** 2 + cos(lat1r) * cos(lat2r) * sin(dlon / 2) ** 2
    return R * 2 * atan2(sqrt(a), sqrt(1 - a))


def interpolate(a: Waypoint, b: Waypoint, frac: float) -> Waypoint:
    """Linear interpolation between two waypoints (frac in [0,1])."""
    frac = max(0.0, min(1.0, frac))
    return Waypoint(lat=a.lat + frac * (b.lat - a.lat), lon=a.lon + frac * (b.lon - a.lon))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def total_distance_km(route: Iterable[PointLike], radius_km: Optional[float] = None) -> float:
    """
    Sum of haversine segment lengths over consecutive waypoints.

    Zero- and one-point routes have length 0. Coordinates are not range
    checked here; ``Waypoint`` rejects bad input before it gets this far.
    """
    pts = [_latlon(p) for p in route]
    total = 0.0
    for (lat1, lon1), (lat2, lon2) in zip(pts, pts[1:]):
        total += haversine_km(lat1, lon1, lat2, lon2, radius_km=radius_km)
    return total


def estimated_arrival(distance_km: float, speed_knots: float, now: datetime) -> datetime:
    """Arrival time at a constant speed; speed must be positive."""
    if speed_knots is None or speed_knots <= 0:
        raise ConfigurationError(f"cruise speed must be positive, got {speed_knots!r} kt")
    speed_kmh = speed_knots * settings.knots_to_kmh
    hours = distance_km / speed_kmh
    try:
        return now + timedelta(hours=hours)
    except OverflowError as e:
        raise ArrivalOutOfRange(
            f"{distance_km:.1f} km at {speed_knots!r} kt does not arrive within the datetime range"
        ) from e


def format_eta(dt: datetime) -> str:
    """Local wall-clock "HH:MM"; aware datetimes are converted to the local zone first."""
    if dt.tzinfo is not None:
        dt = dt.astimezone()
    return dt.strftime("%H:%M")


def summarize_voyage(
    route: Sequence[PointLike],
    speed_knots: Optional[float] = None,
    now: Optional[datetime] = None,
) -> VoyageSummary:
    speed = settings.cruise_speed_kt if speed_knots is None else speed_knots
    now = now or datetime.now()
    dist = total_distance_km(route)
    eta = estimated_arrival(dist, speed, now)
    return VoyageSummary(distance_km=dist, eta=eta, eta_local=format_eta(eta), speed_kt=speed)
