from __future__ import annotations

import argparse
import logging
import random
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ship_route.config import settings
from ship_route.contracts.voyage_contract import TickEvent
from ship_route.core.models import SessionStatus, Waypoint
from ship_route.core.session import NavigationSession
from ship_route.errors import ShipRouteError
from ship_route.providers.factory import build_provider
from ship_route.tools.make_map import write_map

log = logging.getLogger(__name__)


def _positive_float(text: str) -> float:
    v = float(text)
    if v <= 0:
        raise argparse.ArgumentTypeError("must be positive")
    return v


def _default_pair(pair) -> str:
    return f"{pair[0]}, {pair[1]}"


def _add_route_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--start", default=_default_pair(settings.default_start), help='e.g. "19.0760, 72.8777"')
    p.add_argument("--end", default=_default_pair(settings.default_end), help='e.g. "22.5726, 88.3639"')
    p.add_argument("--ship-type", default=settings.default_ship_type)
    p.add_argument("--sensitivity", default=settings.default_hazard_sensitivity)
    p.add_argument("--provider", default=settings.route_provider, choices=["backend", "direct"])


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="ship-route")
    ap.add_argument("--debug", action="store_true")
    sub = ap.add_subparsers(dest="command", required=True)

    p_route = sub.add_parser("route", help="Calculate a route and print distance/ETA")
    _add_route_args(p_route)

    p_sim = sub.add_parser("simulate", help="Animate the ship along the route")
    _add_route_args(p_sim)
    p_sim.add_argument("--hazards", action="store_true", help="Place simulated hazards and re-route first")
    p_sim.add_argument("--interval", type=_positive_float, default=settings.tick_interval_s, help="Seconds per tick")
    p_sim.add_argument("--seed", type=int, default=None)

    p_map = sub.add_parser("map", help="Write the Leaflet map for a calculated route")
    _add_route_args(p_map)
    p_map.add_argument("--hazards", action="store_true")
    p_map.add_argument("--out", default="trips/last_route_map.html")

    return ap


def _summary_table(status: SessionStatus) -> Table:
    table = Table(title=f"Ship Route — {status.route_status}")
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("Start", str(status.start))
    table.add_row("Destination", str(status.destination))
    table.add_row("Ship type", status.ship_type)
    table.add_row("Sensitivity", status.hazard_sensitivity)
    table.add_row("Waypoints", str(len(status.route_points)))
    table.add_row("Distance", f"{status.distance_km:.1f} km" if status.distance_km is not None else "-")
    table.add_row("ETA", status.eta_local or "-")
    table.add_row("Speed", f"{status.speed_kt:g} knots")
    table.add_row("Hazards", str(status.hazards_count))
    return table


def _alerts(console: Console, alerts: List[str]) -> None:
    for a in alerts:
        console.print(f"⚠️  {a}")


def _run_simulation(session: NavigationSession, console: Console) -> None:
    def on_tick(ev: TickEvent) -> None:
        r = ev.reading
        labels = ", ".join(l.value for l in ev.labels) or "clear"
        style = "yellow" if ev.labels else "green"
        console.print(
            f"#{ev.index:>3} {ev.position}  "
            f"T={r.temperature:4.1f}°C  P={r.pressure:6.1f} hPa  "
            f"W={r.wind_speed:4.1f} km/h  H={r.wave_height:3.1f} m  "
            f"[{style}]{labels}[/{style}]"
        )

    def on_arrival(pos: Waypoint) -> None:
        console.print(f"[bold green]Arrived[/bold green] at {pos}")

    session.add_listener(on_tick=on_tick, on_arrival=on_arrival)
    session.start_simulation()
    try:
        session.wait()
    except KeyboardInterrupt:
        session.stop_simulation()
        console.print("[red]Simulation cancelled[/red]")


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s [ship-route] %(levelname)s %(message)s",
    )

    console = Console()
    cfg = settings
    if getattr(args, "interval", None) is not None:
        cfg = settings.model_copy(update={"tick_interval_s": args.interval})

    rng = None
    if getattr(args, "seed", None) is not None:
        rng = random.Random(args.seed)

    try:
        session = NavigationSession(provider=build_provider(args.provider), cfg=cfg, rng=rng)
        status = session.calculate_route(
            start=Waypoint.parse(args.start),
            end=Waypoint.parse(args.end),
            ship_type=args.ship_type,
            hazard_sensitivity=args.sensitivity,
        )
        if getattr(args, "hazards", False):
            status = session.simulate_hazards()
            _alerts(console, status.alerts)

        console.print(_summary_table(status))

        if args.command == "simulate":
            _run_simulation(session, console)
            console.print(_summary_table(session.status()))
        elif args.command == "map":
            out_path = write_map(session.status(), Path(args.out), cfg)
            console.print(f"Saved: {out_path.resolve()}")
    except ShipRouteError as e:
        log.debug("command failed", exc_info=True)
        console.print(f"[bold red]{type(e).__name__}:[/bold red] {escape(str(e))}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
