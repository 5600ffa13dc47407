from __future__ import annotations

import logging
from typing import Any, List, Optional

import requests

from ship_route.config import settings
from ship_route.core.models import RouteRequest, Waypoint
from ship_route.errors import InvalidCoordinates, RouteUnavailable
from ship_route.providers.base import RouteProvider
from ship_route.providers.http import HTTPClient

log = logging.getLogger(__name__)


class BackendRouteProvider(RouteProvider):
    """
    Route-computation service client.

    POST {start, end, ship_type, hazard_sensitivity, avoid_hazards?}
      -> {route_points: [[lat, lon], ...]}

    The service is treated as an oracle: one attempt, and anything other than
    a non-empty list of valid points is a RouteUnavailable.
    """

    name = "backend"

    def __init__(self, url: Optional[str] = None, http: Optional[HTTPClient] = None):
        self.url = url or settings.route_service_url
        self.http = http or HTTPClient(
            user_agent="ship-route/0.1",
            timeout_s=settings.route_service_timeout_s,
            tries=settings.route_service_tries,
        )

    def get_route(self, request: RouteRequest) -> List[Waypoint]:
        body = request.to_wire()
        log.info("Requesting route %s -> %s (avoid_hazards=%s)", request.start, request.end, request.avoid_hazards)
        try:
            data = self.http.post_json(self.url, body)
        except requests.RequestException as e:
            log.warning("Route service request failed: %s", e)
            raise RouteUnavailable(f"route service request failed: {e}") from e
        except ValueError as e:
            raise RouteUnavailable("route service returned a non-JSON body") from e

        return _parse_route_points(data)


def _parse_route_points(data: Any) -> List[Waypoint]:
    if not isinstance(data, dict) or "route_points" not in data:
        raise RouteUnavailable("route service response has no route_points")
    raw = data["route_points"]
    if not isinstance(raw, list) or not raw:
        raise RouteUnavailable("route service returned an empty route")
    try:
        return [Waypoint.from_pair(p) for p in raw]
    except (InvalidCoordinates, TypeError) as e:
        raise RouteUnavailable(f"route service returned a malformed point: {e}") from e
