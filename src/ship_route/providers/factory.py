from __future__ import annotations

from typing import Optional

from ship_route.config import settings
from ship_route.providers.base import RouteProvider


def build_provider(name: Optional[str] = None) -> RouteProvider:
    """
    Build a route provider from its name:
      "backend" -> HTTP route-computation service
      "direct"  -> straight-line demo route, no network
    """
    token = (name or settings.route_provider).strip().lower()

    # Local imports to avoid circular imports
    from ship_route.providers.backend import BackendRouteProvider
    from ship_route.providers.direct import DirectRouteProvider

    if token == "backend":
        return BackendRouteProvider()
    if token == "direct":
        return DirectRouteProvider()
    raise ValueError(f"Unknown route provider: '{token}' (supported: backend, direct)")
