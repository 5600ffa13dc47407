import random
import time
from typing import List

import pytest

from ship_route.config import Settings
from ship_route.core.hazards import ALL_CLEAR
from ship_route.core.models import EnvironmentalReading, RouteRequest, Waypoint
from ship_route.core.session import NavigationSession
from ship_route.errors import NoActiveRoute, RouteUnavailable, StaleRouteResponse
from ship_route.providers.base import RouteProvider
from ship_route.providers.direct import DirectRouteProvider

from conftest import FIXED_NOW

MUMBAI = Waypoint(lat=19.0760, lon=72.8777)
CHENNAI = Waypoint(lat=13.0, lon=80.5)


class RecordingProvider(RouteProvider):
    name = "recording"

    def __init__(self, points: List[Waypoint]):
        self.points = points
        self.requests: List[RouteRequest] = []
        self.hook = None

    def get_route(self, request):
        self.requests.append(request)
        if self.hook is not None:
            self.hook()
        return list(self.points)


class FailingProvider(RouteProvider):
    name = "failing"

    def get_route(self, request):
        raise RouteUnavailable("service down")


def hot(pos):
    return EnvironmentalReading(temperature=33, pressure=1010, wind_speed=5, wave_height=1, position=pos)


def test_initial_status(session):
    st = session.status()
    assert st.route_status == "Not Calculated"
    assert st.current_pos == MUMBAI
    assert st.destination == Waypoint(lat=22.5726, lon=88.3639)
    assert st.distance_km is None
    assert st.eta_local is None
    assert st.alerts == [ALL_CLEAR]
    assert st.stepper_state == "idle"


def test_calculate_route(session):
    st = session.calculate_route(MUMBAI, CHENNAI, "tanker", "low")
    assert st.route_status == "Active (Ocean Route)"
    assert len(st.route_points) == 5
    assert st.route_points[0] == MUMBAI
    assert st.route_points[-1] == CHENNAI
    assert st.distance_km > 0
    assert st.eta_local is not None
    assert st.speed_kt == 10.0
    assert st.ship_type == "tanker"
    assert st.hazard_sensitivity == "low"
    assert st.generation == 1


def test_route_unavailable_leaves_state_untouched():
    s = NavigationSession(provider=FailingProvider(), cfg=Settings())
    with pytest.raises(RouteUnavailable):
        s.calculate_route(MUMBAI, CHENNAI)
    st = s.status()
    assert st.route_points == []
    assert st.route_status == "Not Calculated"


def test_start_without_route_is_rejected_without_mutation(session):
    before = session.status()
    with pytest.raises(NoActiveRoute):
        session.start_simulation()
    assert session.status() == before


def test_animation_runs_to_arrival(session):
    session.calculate_route(MUMBAI, CHENNAI)
    session.simulate_hazards()
    st = session.start_simulation(run_timer=False)
    assert st.stepper_state == "running"
    assert st.ship_pos == MUMBAI
    assert st.hazards == []

    results = [session.tick() for _ in range(4)]
    assert results == [True, True, True, False]

    st = session.status()
    assert st.route_status == "Arrived"
    assert st.speed_kt == 0.0
    assert st.alerts == [ALL_CLEAR]
    assert st.hazards_count == 0
    assert st.ship_pos == CHENNAI
    assert st.stepper_state == "idle"


def test_ticks_drop_dynamic_hazards(session):
    session.calculate_route(MUMBAI, CHENNAI)
    session.start_simulation(run_timer=False)
    session.stepper.sampler = hot

    session.tick()
    st = session.status()
    assert st.hazards_count == 1
    assert st.alerts == ["High Temperature detected at current position."]
    assert len(st.hazards) == 1
    assert st.hazards[0].kind == "dynamic"
    assert st.hazards[0].position == st.ship_pos
    assert st.hazards[0].radius_m == 20000


def test_reset_mid_animation_cancels_ticks(session):
    ticks = []
    arrivals = []
    session.add_listener(on_tick=ticks.append, on_arrival=arrivals.append)
    session.calculate_route(MUMBAI, CHENNAI)
    session.start_simulation(run_timer=False)
    session.tick()
    assert len(ticks) == 1

    st = session.reset()
    assert st.route_status == "Not Calculated"
    assert st.route_points == []
    for _ in range(3):
        assert session.tick() is False
    assert len(ticks) == 1
    assert arrivals == []


def test_stop_simulation_keeps_route(session):
    session.calculate_route(MUMBAI, CHENNAI)
    session.start_simulation(run_timer=False)
    session.tick()
    st = session.stop_simulation()
    assert st.stepper_state == "idle"
    assert len(st.route_points) == 5
    assert session.tick() is False


def test_timer_drives_animation():
    s = NavigationSession(
        provider=DirectRouteProvider(n_points=4),
        cfg=Settings(tick_interval_s=0.01),
        rng=random.Random(5),
    )
    arrivals = []
    s.add_listener(on_arrival=arrivals.append)
    s.calculate_route(MUMBAI, CHENNAI)
    s.start_simulation()
    s.wait(timeout=5)
    assert arrivals == [CHENNAI]
    assert s.status().route_status == "Arrived"


def test_simulate_hazards_without_route(session):
    st = session.simulate_hazards()
    assert st.route_status == "Hazard Avoidance Active"
    assert st.hazards_count == 3
    assert len(st.hazards) == 3
    assert all(a.endswith("detected nearby. Route adjusted.") for a in st.alerts)
    for h in st.hazards:
        assert 10 <= h.position.lat < 20
        assert 75 <= h.position.lon < 85


def test_simulate_hazards_reroutes_with_avoidance():
    detour = [MUMBAI, Waypoint(lat=8.0, lon=76.0), CHENNAI]
    provider = RecordingProvider([MUMBAI, CHENNAI])
    s = NavigationSession(provider=provider, cfg=Settings(), rng=random.Random(2), clock=lambda: FIXED_NOW)
    first = s.calculate_route(MUMBAI, CHENNAI)
    provider.points = detour

    st = s.simulate_hazards()
    assert [r.avoid_hazards for r in provider.requests] == [False, True]
    assert st.route_points == detour
    assert st.distance_km > first.distance_km
    assert st.route_status == "Hazard Avoidance Active"


def test_response_after_reset_is_discarded():
    provider = RecordingProvider([MUMBAI, CHENNAI])
    s = NavigationSession(provider=provider, cfg=Settings())
    provider.hook = s.reset

    with pytest.raises(StaleRouteResponse):
        s.calculate_route(MUMBAI, CHENNAI)
    st = s.status()
    assert st.route_points == []
    assert st.route_status == "Not Calculated"


def test_superseded_request_is_discarded():
    provider = RecordingProvider([MUMBAI, CHENNAI])
    s = NavigationSession(provider=provider, cfg=Settings())

    def newer_request():
        provider.hook = None
        s.calculate_route(CHENNAI, MUMBAI)

    provider.hook = newer_request
    with pytest.raises(StaleRouteResponse) as exc:
        s.calculate_route(MUMBAI, CHENNAI)
    assert exc.value.generation == 1
    assert exc.value.current == 2
    # the newer request's result stands
    assert s.status().generation == 2
    assert s.status().route_points == [MUMBAI, CHENNAI]
    assert s.status().start == CHENNAI


def live_session(**listeners):
    s = NavigationSession(
        provider=DirectRouteProvider(n_points=200),
        cfg=Settings(tick_interval_s=0.005),
        rng=random.Random(3),
    )
    s.add_listener(**listeners)
    s.calculate_route(MUMBAI, CHENNAI)
    return s


def test_reset_cancels_running_timer():
    ticks, arrivals = [], []
    s = live_session(on_tick=ticks.append, on_arrival=arrivals.append)
    s.start_simulation()
    time.sleep(0.05)
    s.reset()
    n = len(ticks)
    time.sleep(0.1)
    assert n > 0
    assert len(ticks) == n
    assert arrivals == []
    st = s.status()
    assert st.stepper_state == "idle"
    assert st.route_points == []


def test_stop_cancels_running_timer():
    ticks = []
    s = live_session(on_tick=ticks.append)
    s.start_simulation()
    time.sleep(0.05)
    s.stop_simulation()
    n = len(ticks)
    time.sleep(0.1)
    assert len(ticks) == n
    assert s.status().stepper_state == "idle"

