from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from ship_route.config import Settings, settings
from ship_route.core.hazards import HAZARD_ICONS
from ship_route.core.models import SessionStatus
from ship_route.core.session import NavigationSession
from ship_route.errors import ShipRouteError


# Ocean-side coastline of India; the southern leg stays well west of Sri Lanka
COASTLINES = [
    [[23.0, 68.0], [22.0, 69.0], [21.0, 72.0], [19.0, 72.8], [15.0, 74.0], [12.0, 75.0], [10.0, 76.0], [8.0, 77.0]],
    [[8.0, 77.0], [6.5, 76.0], [6.0, 75.0]],
    [[10.0, 79.8], [12.0, 80.0], [13.0, 80.2], [15.0, 80.0], [17.0, 82.0], [20.0, 85.0], [21.0, 87.0], [22.5, 88.3]],
]

HAZARD_COLOR = "#ff7e5f"
ROUTE_COLOR = "#4ecdc4"
COAST_COLOR = "#3388ff"


def _hazard_features(status: SessionStatus) -> list:
    out = []
    for h in status.hazards:
        if h.kind == "dynamic":
            body = ", ".join(label.value for label in h.labels)
        else:
            body = "Avoid this area"
        out.append(
            {
                "center": [h.position.lat, h.position.lon],
                "radius": h.radius_m,
                "title": h.title,
                "body": body,
                "icon": HAZARD_ICONS.get(h.hazard_type, "⚠️") if h.hazard_type else "⚠️",
            }
        )
    return out


def render_map_html(status: SessionStatus, cfg: Optional[Settings] = None) -> str:
    """Standalone Leaflet page for the current session snapshot."""
    cfg = cfg or settings
    route = [[p.lat, p.lon] for p in status.route_points]
    hazards = _hazard_features(status)
    ship = [status.ship_pos.lat, status.ship_pos.lon] if status.ship_pos else None
    start = [status.start.lat, status.start.lon]
    end = [status.destination.lat, status.destination.lon]
    panel = {
        "Status": status.route_status,
        "Current": str(status.current_pos),
        "Destination": str(status.destination),
        "Distance": f"{status.distance_km:.1f} km" if status.distance_km is not None else "-",
        "ETA": status.eta_local or "-",
        "Speed": f"{status.speed_kt:g} knots",
        "Hazards": str(status.hazards_count),
    }

    html = f"""<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <title>Ship Route – Ocean Map</title>
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <link rel="stylesheet" href="https://unpkg.com/leaflet@1.9.4/dist/leaflet.css" />
  <style>
    body {{ margin: 0; font-family: system-ui, -apple-system, Segoe UI, Roboto, sans-serif; }}
    #map {{ height: 100vh; width: 100vw; }}
    #panel {{ position: absolute; top: 10px; right: 10px; z-index: 1000; background: #fff;
              padding: 8px 12px; border-radius: 6px; font-size: 13px; box-shadow: 0 1px 4px rgba(0,0,0,.3); }}
    .ship-icon {{ font-size: 24px; }}
  </style>
</head>
<body>
<div id="map"></div>
<div id="panel"></div>
<script src="https://unpkg.com/leaflet@1.9.4/dist/leaflet.js"></script>
<script>
  const coastlines = {json.dumps(COASTLINES)};
  const route = {json.dumps(route)};
  const hazards = {json.dumps(hazards)};
  const ship = {json.dumps(ship)};
  const start = {json.dumps(start)};
  const end = {json.dumps(end)};
  const panel = {json.dumps(panel)};
  const alerts = {json.dumps(status.alerts)};

  const map = L.map('map').setView({json.dumps(list(cfg.map_center))}, {cfg.map_zoom});

  L.tileLayer('https://{{s}}.tile.openstreetmap.org/{{z}}/{{x}}/{{y}}.png', {{
    maxZoom: 18,
    attribution: '&copy; OpenStreetMap contributors'
  }}).addTo(map);

  coastlines.forEach((coast) => {{
    L.polyline(coast, {{ color: '{COAST_COLOR}', weight: 6, opacity: 0.7 }}).addTo(map).bindPopup('<b>Ocean Coastline</b>');
  }});

  L.marker(start).addTo(map).bindPopup('Start Point');
  L.marker(end).addTo(map).bindPopup('Destination');

  if (route.length) {{
    const line = L.polyline(route, {{ color: '{ROUTE_COLOR}', weight: 4, opacity: 0.7, dashArray: '5, 10' }}).addTo(map);
    map.fitBounds(line.getBounds());
  }}

  hazards.forEach((h) => {{
    L.circle(h.center, {{ color: '{HAZARD_COLOR}', fillColor: '{HAZARD_COLOR}', fillOpacity: 0.3, radius: h.radius }})
      .addTo(map).bindPopup(`${{h.icon}} <b>${{h.title}}</b><br>${{h.body}}`);
  }});

  if (ship) {{
    L.marker(ship, {{ icon: L.divIcon({{ className: 'ship-icon', html: '🚢', iconSize: [30, 30] }}) }}).addTo(map);
  }}

  const rows = Object.entries(panel).map(([k, v]) => `<b>${{k}}:</b> ${{v}}`);
  rows.push('<hr>' + alerts.map((a) => `⚠️ ${{a}}`).join('<br>'));
  document.getElementById('panel').innerHTML = rows.join('<br>');
</script>
</body>
</html>
"""
    return html


def write_map(status: SessionStatus, out_path: Path, cfg: Optional[Settings] = None) -> Path:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(render_map_html(status, cfg), encoding="utf-8")
    return out_path


def main() -> None:
    """Calculate the default voyage with the configured provider and write its map."""
    session = NavigationSession()
    try:
        session.calculate_route()
    except ShipRouteError as e:
        raise SystemExit(f"Could not calculate route: {e}")

    out_path = write_map(session.status(), Path("trips") / "last_route_map.html")
    print(f"Wrote: {out_path.resolve()}")


if __name__ == "__main__":
    main()
