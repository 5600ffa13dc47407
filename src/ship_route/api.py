"""FastAPI REST backend for the ship-route map."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ship_route.core.session import NavigationSession
from ship_route.errors import (
    ArrivalOutOfRange,
    ConfigurationError,
    InvalidCoordinates,
    NoActiveRoute,
    RouteUnavailable,
    ShipRouteError,
    StaleRouteResponse,
)
from ship_route.routers import calc, navigation

log = logging.getLogger(__name__)

_STATUS_CODES = {
    InvalidCoordinates: 422,
    ArrivalOutOfRange: 422,
    RouteUnavailable: 502,
    NoActiveRoute: 409,
    StaleRouteResponse: 409,
    ConfigurationError: 500,
}


def _status_code_for(exc: ShipRouteError) -> int:
    for cls, code in _STATUS_CODES.items():
        if isinstance(exc, cls):
            return code
    return 500


def create_app(session: Optional[NavigationSession] = None) -> FastAPI:
    app = FastAPI(title="Ship Route", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # One session per app; handlers reach it through request.app.state
    app.state.session = session or NavigationSession()

    # ---------------------------------------------------------------------------
    # Include routers
    # ---------------------------------------------------------------------------
    app.include_router(navigation.router)
    app.include_router(calc.router)

    @app.exception_handler(ShipRouteError)
    async def _ship_route_error(request: Request, exc: ShipRouteError):
        code = _status_code_for(exc)
        if code >= 500:
            log.warning("%s on %s: %s", type(exc).__name__, request.url.path, exc)
        return JSONResponse(status_code=code, content={"detail": str(exc), "error": type(exc).__name__})

    @app.get("/health")
    def health():
        return {"status": "ok", "provider": app.state.session.provider.name}

    return app


app = create_app()
