"""
status_page.py

Render a small self-refreshing status page listing every probe and its
latest temperature.
"""

import time
from datetime import datetime, timezone
from html import escape

from tempmon.store import MetricsSnapshot

REFRESH_SECONDS = 15

# (upper bound, colour); <22 blue, 22-38 green, 38-42 yellow, >=42 red
COLOUR_BANDS = (
    (22.0, "#88c0d0"),
    (38.0, "#a3be8c"),
    (42.0, "#ebcb8b"),
)
HOT_COLOUR = "#bf616a"

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1, viewport-fit=cover">
    <meta http-equiv="refresh" content="{refresh}">
    <meta name="apple-mobile-web-app-capable" content="yes">
    <meta name="apple-mobile-web-app-title" content="TempMon">
    <title>Temperature Monitor</title>
    <style>
        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Ubuntu, sans-serif;
            max-width: 800px;
            margin: 40px auto;
            padding: 20px;
            background: #3b4252;
            color: #eceff4;
        }}
        .container {{
            background: #2e3440;
            border-radius: 8px;
            box-shadow: 0 2px 8px rgba(0,0,0,0.3);
            padding: 30px;
        }}
        h1 {{ margin-top: 0; border-bottom: 3px solid #88c0d0; padding-bottom: 10px; }}
        table {{ width: 100%; border-collapse: collapse; margin-top: 20px; }}
        th {{ text-align: left; padding: 15px; background: #434c5e; font-weight: 600; }}
        td {{ color: #d8dee9; padding: 15px; border-bottom: 1px solid #4c566a; }}
        .age {{ font-size: 0.8em; color: #a0a8b7; }}
        .footer {{ margin-top: 30px; padding-top: 20px; border-top: 1px solid #4c566a; font-size: 0.9em; }}
        .footer a {{ color: #88c0d0; text-decoration: none; }}
    </style>
</head>
<body>
    <div class="container">
        <h1>Temperature Monitor</h1>
        <table>
            <thead>
                <tr><th>Probe</th><th style="text-align: right;">Temperature</th></tr>
            </thead>
            <tbody>
{rows}
            </tbody>
        </table>
        <div class="footer">
            Last updated: {updated} UTC (auto-refresh every {refresh}s)<br>
            <a href="/metrics">Prometheus Metrics</a> | <a href="/health">Health Check</a>
        </div>
    </div>
</body>
</html>
"""


def colour_for(celsius: float) -> str:
    for upper, colour in COLOUR_BANDS:
        if celsius < upper:
            return colour
    return HOT_COLOUR


def _format_age(seconds: float) -> str:
    seconds = max(0, int(seconds))
    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    return f"{seconds // 3600}h ago"


def render_temperature_page(snapshot: MetricsSnapshot, now: float | None = None) -> str:
    """
    Build the HTML status page for a snapshot.

    Probes are sorted by label. A probe that has never produced a reading is
    shown as "No reading"; otherwise the last reading is shown with its age,
    even if later reads failed.
    """
    if now is None:
        now = time.time()

    labels = sorted(set(snapshot.probes) | set(snapshot.readings))
    rows = []
    for label in labels:
        reading = snapshot.readings.get(label)
        if reading is None:
            cell = "<span style='color: #d08770; font-style: italic;'>No reading</span>"
        else:
            cell = (
                f"<span style='color: {colour_for(reading.value)}; font-size: 2em; font-weight: bold;'>"
                f"{reading.value:.2f}&deg;C</span><br>"
                f"<span class='age'>{_format_age(now - reading.timestamp)}</span>"
            )
        rows.append(
            f"                <tr><td>{escape(label)}</td>"
            f"<td style='text-align: right;'>{cell}</td></tr>"
        )

    updated = datetime.fromtimestamp(now, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
    return PAGE_TEMPLATE.format(refresh=REFRESH_SECONDS, rows="\n".join(rows), updated=updated)
