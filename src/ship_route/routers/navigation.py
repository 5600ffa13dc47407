"""Map actions: calculate route, simulate hazards, animate the ship, reset."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from ship_route.core.models import SessionStatus, Waypoint
from ship_route.core.session import NavigationSession
from ship_route.tools.make_map import render_map_html

router = APIRouter(tags=["navigation"])


def get_session(request: Request) -> NavigationSession:
    return request.app.state.session


class RouteIn(BaseModel):
    start: List[float] = Field(..., description="[lat, lon]")
    end: List[float] = Field(..., description="[lat, lon]")
    ship_type: Optional[str] = None
    hazard_sensitivity: Optional[str] = None


@router.get("/status", response_model=SessionStatus)
def status(session: NavigationSession = Depends(get_session)):
    return session.status()


@router.post("/route", response_model=SessionStatus)
def calculate_route(body: RouteIn, session: NavigationSession = Depends(get_session)):
    return session.calculate_route(
        start=Waypoint.from_pair(body.start),
        end=Waypoint.from_pair(body.end),
        ship_type=body.ship_type,
        hazard_sensitivity=body.hazard_sensitivity,
    )


@router.post("/hazards/simulate", response_model=SessionStatus)
def simulate_hazards(session: NavigationSession = Depends(get_session)):
    return session.simulate_hazards()


@router.post("/simulation/start", response_model=SessionStatus)
def start_simulation(session: NavigationSession = Depends(get_session)):
    return session.start_simulation()


@router.post("/simulation/stop", response_model=SessionStatus)
def stop_simulation(session: NavigationSession = Depends(get_session)):
    return session.stop_simulation()


@router.post("/reset", response_model=SessionStatus)
def reset(session: NavigationSession = Depends(get_session)):
    return session.reset()


@router.get("/map", response_class=HTMLResponse)
def map_page(session: NavigationSession = Depends(get_session)):
    return HTMLResponse(render_map_html(session.status(), session.cfg))
