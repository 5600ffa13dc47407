"""Centralized settings for the ship-route backend."""
from __future__ import annotations

from typing import Tuple

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "SHIP_ROUTE_"}

    # Voyage
    cruise_speed_kt: float = 10.0
    earth_radius_km: float = 6371.0
    knots_to_kmh: float = 1.852

    # Environmental sampling ranges, [lo, hi)
    temperature_range_c: Tuple[float, float] = (20.0, 35.0)
    pressure_range_hpa: Tuple[float, float] = (990.0, 1020.0)
    wind_speed_range_kmh: Tuple[float, float] = (0.0, 50.0)
    wave_height_range_m: Tuple[float, float] = (0.0, 5.0)

    # Simulated hazard placement box (Bay of Bengal / Arabian Sea demo area)
    hazard_lat_range: Tuple[float, float] = (10.0, 20.0)
    hazard_lon_range: Tuple[float, float] = (75.0, 85.0)
    simulated_hazard_count: int = 3
    simulated_hazard_radius_m: float = 50000.0
    dynamic_hazard_radius_m: float = 20000.0

    # Animation
    tick_interval_s: float = 1.0

    # Route service
    route_provider: str = "backend"   # "backend" | "direct"
    route_service_url: str = "http://localhost:5000/calculate_route"
    route_service_timeout_s: int = 25
    route_service_tries: int = 1      # no automatic retry
    direct_route_points: int = 50

    # Reset defaults: Mumbai -> Kolkata
    default_start: Tuple[float, float] = (19.0760, 72.8777)
    default_end: Tuple[float, float] = (22.5726, 88.3639)
    default_ship_type: str = "cargo"
    default_hazard_sensitivity: str = "high"

    # Map view
    map_center: Tuple[float, float] = (15.0, 80.0)
    map_zoom: int = 5

    @field_validator("cruise_speed_kt")
    @classmethod
    def _positive_speed(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("cruise_speed_kt must be positive")
        return v

    @field_validator("tick_interval_s")
    @classmethod
    def _positive_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("tick_interval_s must be positive")
        return v


settings = Settings()
