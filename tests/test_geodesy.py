import time
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from ship_route.config import Settings
from ship_route.core.geodesy import (
    estimated_arrival,
    format_eta,
    haversine_km,
    summarize_voyage,
    total_distance_km,
)
from ship_route.core.models import Waypoint
from ship_route.errors import ArrivalOutOfRange, ConfigurationError, InvalidCoordinates

T = datetime(2026, 1, 22, 8, 0)

ROUTE = [
    Waypoint(lat=19.0760, lon=72.8777),
    Waypoint(lat=15.0, lon=73.5),
    Waypoint(lat=8.0, lon=77.0),
    Waypoint(lat=13.0, lon=80.5),
    Waypoint(lat=22.5726, lon=88.3639),
]


@pytest.mark.parametrize("p", [(0, 0), (19.076, 72.8777), (-89.9, 179.9), (45.5, -120.25)])
def test_single_waypoint_route_has_zero_length(p):
    assert total_distance_km([Waypoint.from_pair(p)]) == 0.0


def test_empty_route_has_zero_length():
    assert total_distance_km([]) == 0.0


def test_one_degree_of_longitude_at_equator():
    assert total_distance_km([[0, 0], [0, 1]]) == pytest.approx(111.19, abs=0.01)


def test_distance_symmetric_under_reversal():
    forward = total_distance_km(ROUTE)
    backward = total_distance_km(list(reversed(ROUTE)))
    assert forward == pytest.approx(backward, rel=1e-12)


def test_distance_is_sum_of_segments():
    expected = sum(
        haversine_km(a.lat, a.lon, b.lat, b.lon) for a, b in zip(ROUTE, ROUTE[1:])
    )
    assert total_distance_km(ROUTE) == pytest.approx(expected)


def test_custom_radius_scales_distance():
    d = total_distance_km([[0, 0], [0, 1]], radius_km=1.0)
    assert d == pytest.approx(0.0174533, rel=1e-5)


def test_eta_at_ten_knots():
    eta = estimated_arrival(185.2, 10, T)
    assert (eta - T).total_seconds() == pytest.approx(10 * 3600)


def test_eta_zero_distance_is_now():
    assert estimated_arrival(0.0, 10, T) == T


@pytest.mark.parametrize("speed", [0, -5])
def test_eta_rejects_non_positive_speed(speed):
    with pytest.raises(ConfigurationError):
        estimated_arrival(100.0, speed, T)


def test_format_eta_is_hour_minute():
    assert format_eta(datetime(2026, 1, 22, 7, 5)) == "07:05"


@pytest.fixture
def kolkata_tz(monkeypatch):
    monkeypatch.setenv("TZ", "IST-5:30")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_format_eta_converts_aware_times_to_local(kolkata_tz):
    assert format_eta(datetime(2026, 1, 22, 8, 0, tzinfo=timezone.utc)) == "13:30"


def test_eta_beyond_datetime_range():
    with pytest.raises(ArrivalOutOfRange):
        estimated_arrival(111.19, 1e-9, T)


def test_summarize_single_point_route():
    s = summarize_voyage([Waypoint(lat=10, lon=80)], 10, T)
    assert s.distance_km == 0.0
    assert s.eta == T
    assert s.eta_local == "08:00"
    assert s.speed_kt == 10


def test_summarize_uses_configured_speed():
    s = summarize_voyage([[0, 0], [0, 1]], now=T)
    assert s.speed_kt == 10.0
    assert (s.eta - T).total_seconds() == pytest.approx(s.distance_km / 18.52 * 3600)


def test_zero_cruise_speed_is_a_config_error():
    with pytest.raises(ValidationError):
        Settings(cruise_speed_kt=0)


def test_parse_waypoint_text():
    wp = Waypoint.parse("19.0760, 72.8777")
    assert wp.as_pair() == (19.0760, 72.8777)
    assert str(wp) == "19.0760, 72.8777"


@pytest.mark.parametrize("text", ["abc", "19.0", "1, 2, 3", "nan, 72", "inf, 0", "91, 0", "0, 181", ", 5"])
def test_parse_waypoint_rejects_bad_input(text):
    with pytest.raises(InvalidCoordinates):
        Waypoint.parse(text)


def test_waypoint_is_immutable():
    wp = Waypoint(lat=1, lon=2)
    with pytest.raises(ValidationError):
        wp.lat = 5
