"""Exceptions raised by the ship-route core; the API layer maps them to HTTP codes."""
from __future__ import annotations


class ShipRouteError(Exception):
    """Base class for all ship-route errors."""


class ConfigurationError(ShipRouteError):
    """A configured constant is unusable (e.g. a non-positive cruise speed)."""


class InvalidCoordinates(ShipRouteError, ValueError):
    """Latitude/longitude text or values that cannot be used as a waypoint."""


class RouteUnavailable(ShipRouteError):
    """The route service failed or answered with something we cannot use."""


class NoActiveRoute(ShipRouteError):
    """An action needs a calculated route and there is none."""


class StaleRouteResponse(ShipRouteError):
    """A route response arrived for a request that has since been superseded."""

    def __init__(self, generation: int, current: int):
        super().__init__(f"route response for generation {generation} discarded (current is {current})")
        self.generation = generation
        self.current = current


class ArrivalOutOfRange(ShipRouteError, ValueError):
    """The arrival time for a distance/speed pair is beyond what a datetime can hold."""
