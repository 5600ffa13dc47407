"""Ship animation: a two-state stepper and the single repeating timer that drives it.

The stepper is Idle until ``start(route)`` and Running until the index
reaches the last waypoint or ``cancel()`` is called. Each ``tick()`` moves
exactly one waypoint and samples/classifies conditions at the new position.

The ``Ticker`` owns one daemon thread. It waits one interval, calls the step
function synchronously, and repeats, so ticks never overlap.
"""
from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, List, Optional, Sequence

from ship_route.contracts.voyage_contract import TickEvent
from ship_route.core.hazards import classify_hazards, sample_environment
from ship_route.core.models import EnvironmentalReading, HazardLabel, Waypoint
from ship_route.errors import NoActiveRoute

log = logging.getLogger(__name__)

Sampler = Callable[[Waypoint], EnvironmentalReading]
Classifier = Callable[[EnvironmentalReading], List[HazardLabel]]


class StepperState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class AnimationStepper:
    def __init__(
        self,
        sampler: Optional[Sampler] = None,
        classifier: Optional[Classifier] = None,
        on_tick: Optional[Callable[[TickEvent], None]] = None,
        on_arrival: Optional[Callable[[Waypoint], None]] = None,
    ):
        self.sampler = sampler or sample_environment
        self.classifier = classifier or classify_hazards
        self.on_tick = on_tick
        self.on_arrival = on_arrival

        self.state = StepperState.IDLE
        self.index = 0
        self._route: List[Waypoint] = []

    @property
    def running(self) -> bool:
        return self.state is StepperState.RUNNING

    @property
    def position(self) -> Optional[Waypoint]:
        if not self._route:
            return None
        return self._route[self.index]

    def start(self, route: Sequence[Waypoint]) -> None:
        if not route:
            raise NoActiveRoute("Calculate a route first!")
        self._route = list(route)
        self.index = 0
        self.state = StepperState.RUNNING
        log.info("Stepper started (%d waypoints)", len(self._route))
        if len(self._route) == 1:
            self._arrive()

    def tick(self) -> Optional[TickEvent]:
        """Advance one waypoint. Returns None (and emits nothing) when Idle."""
        if self.state is not StepperState.RUNNING:
            return None

        self.index += 1
        pos = self._route[self.index]
        reading = self.sampler(pos)
        labels = self.classifier(reading)
        is_final = self.index >= len(self._route) - 1

        event = TickEvent(index=self.index, position=pos, reading=reading, labels=labels, is_final=is_final)
        if labels:
            log.debug("Tick %d at %s: %s", self.index, pos, ", ".join(l.value for l in labels))
        if self.on_tick is not None:
            self.on_tick(event)

        if is_final:
            self._arrive()
        return event

    def cancel(self) -> None:
        if self.state is StepperState.RUNNING:
            log.info("Stepper cancelled at index %d", self.index)
        self.state = StepperState.IDLE

    def _arrive(self) -> None:
        self.state = StepperState.IDLE
        log.info("Arrived after %d tick(s)", self.index)
        if self.on_arrival is not None:
            self.on_arrival(self._route[self.index])


class Ticker:
    """Single repeating timer: calls *step* every *interval_s* until it returns False."""

    def __init__(self, interval_s: float, step: Callable[[], bool], name: str = "ship-ticker"):
        self.interval_s = interval_s
        self.step = step
        self.name = name
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.alive:
            raise RuntimeError("ticker already running")
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, daemon=True, name=self.name)
        self._thread.start()

    def _run(self) -> None:
        while not self._stop.wait(self.interval_s):
            try:
                keep_going = self.step()
            except Exception as exc:
                log.exception("Tick failed: %s", exc)
                keep_going = False
            if not keep_going:
                break

    def cancel(self) -> None:
        self._stop.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
