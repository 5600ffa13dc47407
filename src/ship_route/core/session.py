"""Navigation session: the single owner of route, hazard and animation state.

Every mutation happens under one lock, so request handlers and the ticker
thread never interleave. Route requests are tagged with a generation
number. A response that comes back after a newer request, or after a reset,
is discarded rather than applied.
"""
from __future__ import annotations

import logging
import random
import threading
from datetime import datetime
from typing import Callable, List, Optional

from ship_route.config import Settings, settings
from ship_route.contracts.voyage_contract import RouteReply, TickEvent
from ship_route.core.geodesy import summarize_voyage
from ship_route.core.hazards import (
    ALL_CLEAR,
    alert_messages,
    place_simulated_hazards,
    placement_alerts,
    sample_environment,
)
from ship_route.core.models import (
    BoundingBox,
    EnvironmentalReading,
    HazardMarker,
    RouteRequest,
    SessionStatus,
    VoyageSummary,
    Waypoint,
)
from ship_route.core.stepper import AnimationStepper, Ticker
from ship_route.errors import NoActiveRoute, StaleRouteResponse
from ship_route.providers.base import RouteProvider

log = logging.getLogger(__name__)

STATUS_NOT_CALCULATED = "Not Calculated"
STATUS_ACTIVE = "Active (Ocean Route)"
STATUS_AVOIDING = "Hazard Avoidance Active"
STATUS_ARRIVED = "Arrived"


class NavigationSession:
    def __init__(
        self,
        provider: Optional[RouteProvider] = None,
        cfg: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.cfg = cfg or settings
        if provider is None:
            from ship_route.providers.factory import build_provider

            provider = build_provider(self.cfg.route_provider)
        self.provider = provider
        self.rng = rng or random.Random()
        self.clock = clock or datetime.now

        self._lock = threading.RLock()
        self._ticker: Optional[Ticker] = None
        self._tick_listeners: List[Callable[[TickEvent], None]] = []
        self._arrival_listeners: List[Callable[[Waypoint], None]] = []

        self.generation = 0
        self.stepper = AnimationStepper(
            sampler=self._sample,
            on_tick=self._on_tick,
            on_arrival=self._on_arrival,
        )
        self._apply_defaults()

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------

    def _apply_defaults(self) -> None:
        self.start = Waypoint.from_pair(self.cfg.default_start)
        self.end = Waypoint.from_pair(self.cfg.default_end)
        self.ship_type = self.cfg.default_ship_type
        self.hazard_sensitivity = self.cfg.default_hazard_sensitivity

        self.route: List[Waypoint] = []
        self.hazards: List[HazardMarker] = []
        self.summary: Optional[VoyageSummary] = None
        self.route_status = STATUS_NOT_CALCULATED
        self.current_pos = self.start
        self.ship_pos: Optional[Waypoint] = None
        self.speed_kt = 0.0
        self.hazards_count = 0
        self.alerts = [ALL_CLEAR]

    def _sample(self, position: Waypoint) -> EnvironmentalReading:
        return sample_environment(position, rng=self.rng, cfg=self.cfg)

    def _next_generation(self) -> int:
        self.generation += 1
        return self.generation

    def _request_route(self, request: RouteRequest, generation: int) -> RouteReply:
        # Runs outside the lock: the provider may block on the network.
        points = self.provider.get_route(request)
        return RouteReply(generation=generation, points=points, avoid_hazards=request.avoid_hazards)

    def _check_fresh(self, reply: RouteReply) -> None:
        if reply.generation != self.generation:
            log.info("Discarding stale route response (gen %d, current %d)", reply.generation, self.generation)
            raise StaleRouteResponse(reply.generation, self.generation)

    def _cancel_timer(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

    def _notify(self, listeners: List[Callable], arg) -> None:
        for fn in list(listeners):
            try:
                fn(arg)
            except Exception:
                log.exception("Session listener %r failed", fn)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def calculate_route(
        self,
        start: Optional[Waypoint] = None,
        end: Optional[Waypoint] = None,
        ship_type: Optional[str] = None,
        hazard_sensitivity: Optional[str] = None,
    ) -> SessionStatus:
        with self._lock:
            self.start = start or self.start
            self.end = end or self.end
            self.ship_type = ship_type or self.ship_type
            self.hazard_sensitivity = hazard_sensitivity or self.hazard_sensitivity
            request = RouteRequest(
                start=self.start,
                end=self.end,
                ship_type=self.ship_type,
                hazard_sensitivity=self.hazard_sensitivity,
            )
            gen = self._next_generation()

        reply = self._request_route(request, gen)

        with self._lock:
            self._check_fresh(reply)
            # A new route replaces whatever the ship was following
            self._cancel_timer()
            self.stepper.cancel()
            self.ship_pos = None

            self.route = reply.points
            self.summary = summarize_voyage(self.route, self.cfg.cruise_speed_kt, self.clock())
            self.route_status = STATUS_ACTIVE
            self.current_pos = self.start
            self.speed_kt = self.cfg.cruise_speed_kt
            log.info(
                "Route ready: %d points, %.1f km, ETA %s",
                len(self.route), self.summary.distance_km, self.summary.eta_local,
            )
            return self.status()

    def simulate_hazards(self) -> SessionStatus:
        with self._lock:
            bounds = BoundingBox.from_ranges(self.cfg.hazard_lat_range, self.cfg.hazard_lon_range)
            self.hazards = place_simulated_hazards(
                self.cfg.simulated_hazard_count,
                bounds,
                rng=self.rng,
                radius_m=self.cfg.simulated_hazard_radius_m,
            )
            self.alerts = placement_alerts(self.hazards)
            self.hazards_count = len(self.hazards)
            self.route_status = STATUS_AVOIDING
            log.info("Placed %d simulated hazard(s)", len(self.hazards))

            if not self.route:
                return self.status()

            request = RouteRequest(
                start=self.start,
                end=self.end,
                ship_type=self.ship_type,
                hazard_sensitivity=self.hazard_sensitivity,
                avoid_hazards=True,
            )
            gen = self._next_generation()

        reply = self._request_route(request, gen)

        with self._lock:
            self._check_fresh(reply)
            self.route = reply.points
            self.summary = summarize_voyage(self.route, self.cfg.cruise_speed_kt, self.clock())
            return self.status()

    def start_simulation(self, run_timer: bool = True) -> SessionStatus:
        with self._lock:
            if not self.route:
                raise NoActiveRoute("Calculate a route first!")

            self._cancel_timer()
            self.stepper.cancel()

            self.hazards = []
            self.alerts = [ALL_CLEAR]
            self.hazards_count = 0
            self.ship_pos = self.route[0]
            self.current_pos = self.route[0]
            if self.route_status == STATUS_ARRIVED:
                self.route_status = STATUS_ACTIVE
            self.speed_kt = self.cfg.cruise_speed_kt

            self.stepper.start(self.route)
            if self.stepper.running and run_timer:
                ticker = Ticker(self.cfg.tick_interval_s, lambda: self._timer_tick(ticker))
                self._ticker = ticker
                ticker.start()
            return self.status()

    def _timer_tick(self, ticker: Ticker) -> bool:
        with self._lock:
            # A cancelled or replaced timer must not advance the current run
            if ticker is not self._ticker:
                return False
            running = self.tick()
            if not running:
                self._ticker = None
            return running

    def tick(self) -> bool:
        """One stepper tick. Returns True while the ship is still under way."""
        with self._lock:
            self.stepper.tick()
            return self.stepper.running

    def stop_simulation(self) -> SessionStatus:
        with self._lock:
            self._cancel_timer()
            self.stepper.cancel()
            return self.status()

    def reset(self) -> SessionStatus:
        with self._lock:
            self._cancel_timer()
            self.stepper.cancel()
            # In-flight route responses now belong to a stale generation
            self._next_generation()
            self._apply_defaults()
            log.info("Session reset")
            return self.status()

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until the animation timer stops (used by the CLI)."""
        ticker = self._ticker
        if ticker is not None:
            ticker.join(timeout)

    def add_listener(
        self,
        on_tick: Optional[Callable[[TickEvent], None]] = None,
        on_arrival: Optional[Callable[[Waypoint], None]] = None,
    ) -> None:
        with self._lock:
            if on_tick is not None:
                self._tick_listeners.append(on_tick)
            if on_arrival is not None:
                self._arrival_listeners.append(on_arrival)

    # ------------------------------------------------------------------
    # Stepper callbacks (called with the lock held)
    # ------------------------------------------------------------------

    def _on_tick(self, event: TickEvent) -> None:
        self.ship_pos = event.position
        self.current_pos = event.position
        self.speed_kt = self.cfg.cruise_speed_kt
        self.alerts = alert_messages(event.labels)
        self.hazards_count = len(event.labels)
        if event.labels:
            self.hazards.append(
                HazardMarker(
                    kind="dynamic",
                    position=event.position,
                    radius_m=self.cfg.dynamic_hazard_radius_m,
                    labels=list(event.labels),
                )
            )
        self._notify(self._tick_listeners, event)

    def _on_arrival(self, position: Waypoint) -> None:
        self.ship_pos = position
        self.current_pos = position
        self.speed_kt = 0.0
        self.route_status = STATUS_ARRIVED
        self.alerts = [ALL_CLEAR]
        self.hazards_count = 0
        self._notify(self._arrival_listeners, position)

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def status(self) -> SessionStatus:
        with self._lock:
            return SessionStatus(
                route_status=self.route_status,
                start=self.start,
                current_pos=self.current_pos,
                destination=self.end,
                ship_type=self.ship_type,
                hazard_sensitivity=self.hazard_sensitivity,
                distance_km=round(self.summary.distance_km, 1) if self.summary else None,
                eta_local=self.summary.eta_local if self.summary else None,
                speed_kt=self.speed_kt,
                hazards_count=self.hazards_count,
                alerts=list(self.alerts),
                route_points=list(self.route),
                hazards=list(self.hazards),
                ship_pos=self.ship_pos,
                stepper_state=self.stepper.state.value,
                tick_index=self.stepper.index,
                generation=self.generation,
            )
