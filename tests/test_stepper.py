import threading
import time

import pytest

from ship_route.core.models import EnvironmentalReading, HazardLabel, Waypoint
from ship_route.core.stepper import AnimationStepper, StepperState, Ticker
from ship_route.errors import NoActiveRoute


def route(n):
    return [Waypoint(lat=10 + i, lon=80 + i) for i in range(n)]


def calm(pos):
    return EnvironmentalReading(temperature=25, pressure=1010, wind_speed=5, wave_height=1, position=pos)


def stormy(pos):
    return EnvironmentalReading(temperature=25, pressure=995, wind_speed=45, wave_height=4, position=pos)


class Recorder:
    def __init__(self):
        self.ticks = []
        self.arrivals = []

    def stepper(self, sampler=calm):
        return AnimationStepper(sampler=sampler, on_tick=self.ticks.append, on_arrival=self.arrivals.append)


def test_idle_after_length_minus_one_ticks():
    rec = Recorder()
    st = rec.stepper()
    st.start(route(5))
    assert st.state is StepperState.RUNNING

    for _ in range(4):
        assert st.tick() is not None
    assert st.state is StepperState.IDLE
    assert [e.index for e in rec.ticks] == [1, 2, 3, 4]
    assert rec.ticks[-1].is_final
    assert rec.arrivals == [Waypoint(lat=14, lon=84)]

    assert st.tick() is None
    assert len(rec.ticks) == 4
    assert len(rec.arrivals) == 1


def test_each_tick_samples_the_new_position():
    seen = []

    def sampler(pos):
        seen.append(pos)
        return calm(pos)

    st = AnimationStepper(sampler=sampler)
    pts = route(3)
    st.start(pts)
    st.tick()
    st.tick()
    assert seen == pts[1:]


def test_tick_classifies_reading():
    rec = Recorder()
    st = rec.stepper(sampler=stormy)
    st.start(route(2))
    ev = st.tick()
    assert ev.labels == [HazardLabel.LOW_PRESSURE, HazardLabel.STRONG_WINDS, HazardLabel.HIGH_WAVES]


def test_single_point_route_arrives_immediately():
    rec = Recorder()
    st = rec.stepper()
    st.start(route(1))
    assert st.state is StepperState.IDLE
    assert rec.arrivals == [Waypoint(lat=10, lon=80)]
    assert st.tick() is None


def test_start_without_route_is_rejected():
    st = AnimationStepper(sampler=calm)
    with pytest.raises(NoActiveRoute):
        st.start([])
    assert st.state is StepperState.IDLE
    assert st.position is None


def test_cancel_stops_callbacks():
    rec = Recorder()
    st = rec.stepper()
    st.start(route(10))
    st.tick()
    st.cancel()
    for _ in range(5):
        assert st.tick() is None
    assert len(rec.ticks) == 1
    assert rec.arrivals == []


def test_restart_resets_index():
    st = AnimationStepper(sampler=calm)
    st.start(route(4))
    st.tick()
    st.tick()
    st.start(route(4))
    assert st.index == 0
    assert st.position == Waypoint(lat=10, lon=80)


def test_ticker_runs_until_step_returns_false():
    calls = []

    def step():
        calls.append(threading.current_thread().name)
        return len(calls) < 3

    t = Ticker(0.01, step)
    t.start()
    t.join(timeout=5)
    assert len(calls) == 3
    assert not t.alive
    assert set(calls) == {"ship-ticker"}


def test_ticker_cancel_stops_further_steps():
    calls = []
    t = Ticker(0.01, lambda: calls.append(1) or True)
    t.start()
    time.sleep(0.05)
    t.cancel()
    t.join(timeout=5)
    n = len(calls)
    time.sleep(0.1)
    assert not t.alive
    assert n > 0
    assert len(calls) == n


def test_ticker_stops_when_step_raises():
    def boom():
        raise RuntimeError("bad tick")

    t = Ticker(0.01, boom)
    t.start()
    t.join(timeout=5)
    assert not t.alive
