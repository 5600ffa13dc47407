from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from ship_route.core.models import RouteRequest, Waypoint


class RouteProvider(ABC):
    """Turn a start/end request into an ordered list of waypoints."""

    name: str = "base"

    @abstractmethod
    def get_route(self, request: RouteRequest) -> List[Waypoint]:
        raise NotImplementedError
