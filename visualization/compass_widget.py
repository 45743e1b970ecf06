"""
Compass Widget: SVG readout of the weather snapshot driving the plumes.

Rendered via st.components.v1.html(); display-only.  The ring is tinted
with the stability class color and the needle points where odour travels.
"""

import math
from typing import Optional

from config import CALM_WIND_THRESHOLD_MPS
from data.weather import WeatherSnapshot
from models.stability import compass_point, get_stability_profile, dispersion_outlook


def _ticks_svg(cx: float, cy: float, r: float) -> str:
    ticks = []
    for deg in range(0, 360, 15):
        rad = math.radians(deg)
        is_cardinal = deg % 90 == 0
        inner = r - (11 if is_cardinal else 5)
        x1 = cx + inner * math.sin(rad)
        y1 = cy - inner * math.cos(rad)
        x2 = cx + r * math.sin(rad)
        y2 = cy - r * math.cos(rad)
        color = "#ffffff" if is_cardinal else "rgba(255,255,255,0.35)"
        ticks.append(
            f'<line x1="{x1:.1f}" y1="{y1:.1f}" x2="{x2:.1f}" y2="{y2:.1f}" '
            f'stroke="{color}" stroke-width="{2 if is_cardinal else 1}"/>'
        )
    for label, deg in (("N", 0), ("E", 90), ("S", 180), ("W", 270)):
        rad = math.radians(deg)
        lx = cx + (r - 21) * math.sin(rad)
        ly = cy - (r - 21) * math.cos(rad)
        ticks.append(
            f'<text x="{lx:.1f}" y="{ly:.1f}" text-anchor="middle" '
            f'dominant-baseline="central" fill="#ffffff" font-size="12" '
            f'font-weight="bold" font-family="sans-serif">{label}</text>'
        )
    return "".join(ticks)


def _needle_svg(cx: float, cy: float, r: float, toward_deg: float, color: str) -> str:
    rad = math.radians(toward_deg)
    tip_r = r - 30
    tip_x = cx + tip_r * math.sin(rad)
    tip_y = cy - tip_r * math.cos(rad)
    tail_x = cx - 12 * math.sin(rad)
    tail_y = cy + 12 * math.cos(rad)

    # Arrowhead: base 16 px behind the tip, wings 10 px either side
    base_x = tip_x - 16 * math.sin(rad)
    base_y = tip_y + 16 * math.cos(rad)
    w1x, w1y = base_x + 10 * math.cos(rad), base_y + 10 * math.sin(rad)
    w2x, w2y = base_x - 10 * math.cos(rad), base_y - 10 * math.sin(rad)
    return (
        f'<line x1="{tail_x:.1f}" y1="{tail_y:.1f}" x2="{tip_x:.1f}" y2="{tip_y:.1f}" '
        f'stroke="{color}" stroke-width="3" stroke-linecap="round"/>'
        f'<polygon points="{tip_x:.1f},{tip_y:.1f} {w1x:.1f},{w1y:.1f} {w2x:.1f},{w2y:.1f}" '
        f'fill="{color}"/>'
    )


def compass_html(snapshot: Optional[WeatherSnapshot], size: int = 180) -> str:
    """
    Return an HTML string containing an SVG compass for a weather snapshot.

    The needle points in the direction odour travels (bearing FROM + 180).
    Calm air draws a pulsing ring instead of a needle; a missing or
    incomplete snapshot draws an empty dial with a "no data" caption.

    Args:
        snapshot: Snapshot on screen (live or playback), or None.
        size: Pixel width/height of the compass.

    Returns:
        HTML string with embedded SVG.
    """
    cx = cy = size / 2
    r = size / 2 - 14

    if snapshot is None or not snapshot.is_usable:
        ring = "rgba(255,255,255,0.3)"
        body = (
            f'<text x="{cx}" y="{cy}" text-anchor="middle" dominant-baseline="central" '
            f'fill="rgba(255,255,255,0.6)" font-size="11" font-family="sans-serif">'
            f'No weather data</text>'
        )
        caption = "Plumes hidden"
    else:
        profile = get_stability_profile(snapshot.stability_class)
        ring = profile.rgba(0.9)
        _, outlook = dispersion_outlook(profile.code)
        if snapshot.wind_speed < CALM_WIND_THRESHOLD_MPS:
            body = (
                f'<circle cx="{cx}" cy="{cy}" r="{r / 2:.1f}" fill="{profile.rgba(0.3)}" '
                f'stroke="{ring}" stroke-dasharray="4 3"/>'
            )
            caption = f"Calm | Class {profile.code}"
        else:
            toward = (snapshot.wind_bearing_from + 180.0) % 360.0
            body = _needle_svg(cx, cy, r, toward, "deepskyblue")
            caption = (
                f"From {compass_point(snapshot.wind_bearing_from)} "
                f"{snapshot.wind_speed:.1f} m/s | Class {profile.code}"
            )
        body += f'<title>{profile.label}: {outlook}</title>'

    svg = (
        f'<svg width="{size}" height="{size + 18}" xmlns="http://www.w3.org/2000/svg">'
        f'<rect width="{size}" height="{size + 18}" rx="8" fill="#0e1117"/>'
        f'<circle cx="{cx}" cy="{cy}" r="{r:.1f}" fill="none" stroke="{ring}" stroke-width="3"/>'
        f'{_ticks_svg(cx, cy, r)}'
        f'{body}'
        f'<text x="{cx}" y="{size + 10}" text-anchor="middle" '
        f'fill="rgba(255,255,255,0.6)" font-size="10" font-family="sans-serif">'
        f'{caption}</text>'
        f'</svg>'
    )
    return f'<div style="display:flex;justify-content:center;">{svg}</div>'
