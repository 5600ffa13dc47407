# path: ship-route/src/ship_route/contracts/voyage_contract.py

from __future__ import annotations
from dataclasses import dataclass
from typing import List

from ship_route.core.models import EnvironmentalReading, HazardLabel, Waypoint


@dataclass(frozen=True)
class TickEvent:
    index: int
    position: Waypoint
    reading: EnvironmentalReading
    labels: List[HazardLabel]
    is_final: bool = False  # True on the tick that reaches the last waypoint


@dataclass(frozen=True)
class RouteReply:
    generation: int
    points: List[Waypoint]
    avoid_hazards: bool = False
