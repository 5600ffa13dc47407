from __future__ import annotations

from typing import List, Optional

from ship_route.config import settings
from ship_route.core.geodesy import interpolate
from ship_route.core.models import RouteRequest, Waypoint
from ship_route.providers.base import RouteProvider


class DirectRouteProvider(RouteProvider):
    """
    Offline stand-in for the route service: evenly spaced points on the
    straight lat/lon line from start to end. Ignores land and hazards, so
    ``avoid_hazards`` has no effect.
    """

    name = "direct"

    def __init__(self, n_points: Optional[int] = None):
        self.n_points = max(2, n_points or settings.direct_route_points)

    def get_route(self, request: RouteRequest) -> List[Waypoint]:
        if request.start == request.end:
            return [request.start]
        nseg = self.n_points - 1
        inner = [interpolate(request.start, request.end, i / nseg) for i in range(1, nseg)]
        return [request.start, *inner, request.end]
