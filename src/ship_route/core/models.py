from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ship_route.errors import InvalidCoordinates


class Waypoint(BaseModel):
    """A latitude/longitude pair in decimal degrees. Immutable."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90.0, le=90.0, allow_inf_nan=False)
    lon: float = Field(..., ge=-180.0, le=180.0, allow_inf_nan=False)

    @classmethod
    def from_pair(cls, pair: Sequence[Any]) -> "Waypoint":
        """Build from ``[lat, lon]``; anything else raises InvalidCoordinates."""
        if isinstance(pair, (str, bytes)) or len(pair) != 2:
            raise InvalidCoordinates(f"expected [lat, lon], got {pair!r}")
        try:
            lat, lon = float(pair[0]), float(pair[1])
        except (TypeError, ValueError) as e:
            raise InvalidCoordinates(f"non-numeric coordinate in {pair!r}") from e
        if math.isnan(lat) or math.isnan(lon):
            raise InvalidCoordinates(f"NaN coordinate in {pair!r}")
        try:
            return cls(lat=lat, lon=lon)
        except ValidationError as e:
            raise InvalidCoordinates(f"coordinate out of range: {pair!r}") from e

    @classmethod
    def parse(cls, text: str) -> "Waypoint":
        """Parse the ``"19.0760, 72.8777"`` form typed into the start/end inputs."""
        parts = [p.strip() for p in str(text).split(",")]
        if len(parts) != 2 or not all(parts):
            raise InvalidCoordinates(f"expected 'lat, lon', got {text!r}")
        return cls.from_pair(parts)

    def as_pair(self) -> Tuple[float, float]:
        return (self.lat, self.lon)

    def __str__(self) -> str:
        return f"{self.lat:.4f}, {self.lon:.4f}"


class HazardLabel(str, Enum):
    HIGH_TEMPERATURE = "High Temperature"
    LOW_PRESSURE = "Low Pressure"
    STRONG_WINDS = "Strong Winds"
    HIGH_WAVES = "High Waves"


class HazardType(str, Enum):
    STORM = "Storm"
    ROUGH_SEAS = "Rough Seas"
    FLOATING_DEBRIS = "Floating Debris"
    STRONG_CURRENT = "Strong Current"


class EnvironmentalReading(BaseModel):
    temperature: float  # °C
    pressure: float     # hPa
    wind_speed: float   # km/h
    wave_height: float  # m

    position: Optional[Waypoint] = None


class BoundingBox(BaseModel):
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    @classmethod
    def from_ranges(cls, lat_range: Tuple[float, float], lon_range: Tuple[float, float]) -> "BoundingBox":
        return cls(min_lat=lat_range[0], max_lat=lat_range[1], min_lon=lon_range[0], max_lon=lon_range[1])


class HazardMarker(BaseModel):
    # "simulated" markers are seeded by the user; "dynamic" ones are dropped by ticks
    kind: Literal["simulated", "dynamic"]
    position: Waypoint
    radius_m: float
    hazard_type: Optional[HazardType] = None
    labels: List[HazardLabel] = []

    @property
    def title(self) -> str:
        if self.hazard_type is not None:
            return self.hazard_type.value
        return "Dynamic Hazard"


class RouteRequest(BaseModel):
    start: Waypoint
    end: Waypoint
    ship_type: str = "cargo"
    hazard_sensitivity: str = "high"
    avoid_hazards: bool = False

    def to_wire(self) -> Dict[str, Any]:
        """JSON body for the route service; ``avoid_hazards`` only when set."""
        body: Dict[str, Any] = {
            "start": list(self.start.as_pair()),
            "end": list(self.end.as_pair()),
            "ship_type": self.ship_type,
            "hazard_sensitivity": self.hazard_sensitivity,
        }
        if self.avoid_hazards:
            body["avoid_hazards"] = True
        return body


class VoyageSummary(BaseModel):
    distance_km: float
    eta: datetime
    eta_local: str  # "HH:MM"
    speed_kt: float


class SessionStatus(BaseModel):
    route_status: str
    start: Waypoint
    current_pos: Waypoint
    destination: Waypoint
    ship_type: str
    hazard_sensitivity: str
    distance_km: Optional[float] = None
    eta_local: Optional[str] = None
    speed_kt: float = 0.0
    hazards_count: int = 0
    alerts: List[str] = []
    route_points: List[Waypoint] = []
    hazards: List[HazardMarker] = []
    ship_pos: Optional[Waypoint] = None
    stepper_state: str = "idle"
    tick_index: int = 0
    generation: int = 0
