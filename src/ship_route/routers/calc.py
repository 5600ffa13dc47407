"""Stateless calculators: route length/ETA and hazard classification."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from ship_route.config import settings
from ship_route.core.geodesy import summarize_voyage
from ship_route.core.hazards import alert_messages, classify_hazards
from ship_route.core.models import EnvironmentalReading, HazardLabel, VoyageSummary, Waypoint

router = APIRouter(prefix="/calc", tags=["calc"])


class DistanceIn(BaseModel):
    route_points: List[List[float]] = Field(..., min_length=1)
    speed_kt: Optional[float] = Field(default=None, gt=0)
    now: Optional[datetime] = None


class HazardsOut(BaseModel):
    labels: List[HazardLabel]
    alerts: List[str]


@router.post("/distance", response_model=VoyageSummary)
def distance(body: DistanceIn):
    route = [Waypoint.from_pair(p) for p in body.route_points]
    speed = body.speed_kt if body.speed_kt is not None else settings.cruise_speed_kt
    return summarize_voyage(route, speed, body.now)


@router.post("/hazards", response_model=HazardsOut)
def hazards(reading: EnvironmentalReading):
    labels = classify_hazards(reading)
    return HazardsOut(labels=labels, alerts=alert_messages(labels))
