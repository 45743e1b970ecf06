"""
Visualization module for the Odour Plume Playback system.

Provides Plotly-based figures for the Streamlit interface.  The site-map
figure works in render units with the y axis pointing down, matching the
image it is drawn over.
"""

from typing import List, Optional

import plotly.graph_objects as go

from data.incidents import Incident, SiteMap
from data.weather import WeatherSnapshotSeries
from models.plume_geometry import CalmDispersion
from models.stability import compass_point, stability_legend
from visualization.overlay import IncidentOverlay, marker_color


def _add_plume(fig: go.Figure, overlay: IncidentOverlay) -> None:
    plume = overlay.plume
    if isinstance(plume, CalmDispersion):
        cx, cy = plume.center
        fig.add_shape(
            type="circle",
            x0=cx - plume.radius, y0=cy - plume.radius,
            x1=cx + plume.radius, y1=cy + plume.radius,
            line=dict(color=plume.stability.rgba(0.6), width=1, dash="dot"),
            fillcolor=plume.fill_color,
            layer="below",
        )
        return

    fig.add_trace(
        go.Scatter(
            x=plume.polygon[:, 0],
            y=plume.polygon[:, 1],
            mode="lines",
            fill="toself",
            fillcolor=plume.fill_color,
            line=dict(color=plume.stability.rgba(0.6), width=1),
            opacity=min(1.0, plume.opacity * 2),
            name=f"Plume {overlay.incident_id}",
            showlegend=False,
            hovertemplate=(
                f"Incident {overlay.incident_id}<br>"
                f"Toward {plume.direction_deg:.0f}° "
                f"({compass_point(plume.direction_deg)})<br>"
                f"Class {plume.stability.code} - {plume.stability.label}"
                "<extra></extra>"
            ),
        )
    )


def _add_markers(
    fig: go.Figure,
    markers: List[Incident],
    container_width: float,
    container_height: float,
    site_map: Optional[SiteMap] = None,
) -> None:
    placed = [(m, m.map_position(site_map)) for m in markers]
    placed = [(m, pos) for m, pos in placed if pos is not None]
    if not placed:
        return
    fig.add_trace(
        go.Scatter(
            x=[pos[0] * container_width / 100.0 for _, pos in placed],
            y=[pos[1] * container_height / 100.0 for _, pos in placed],
            mode="markers",
            marker=dict(
                size=12,
                color=[marker_color(m) for m, _ in placed],
                line=dict(width=2, color="white"),
            ),
            text=[
                f"{m.incident_id}<br>Status: {m.status}<br>Intensity: {m.intensity or '-'}"
                for m, _ in placed
            ],
            hoverinfo="text",
            name="Incidents",
        )
    )


def create_site_map_figure(
    overlays: List[IncidentOverlay],
    markers: List[Incident],
    container_width: float,
    container_height: Optional[float] = None,
    site_map: Optional[SiteMap] = None,
    title: Optional[str] = None,
) -> go.Figure:
    """
    Draw plume overlays and incident markers over a site-map image.

    Args:
        overlays: Output of IncidentOverlayRenderer.render().
        markers: Incidents to pin (see visible_markers()).
        container_width: Render-surface width, same units as the overlays.
        container_height: Render-surface height (defaults to width).
        site_map: Site map; its image is drawn underneath and its bounds
            place lat/lng markers.
        title: Optional figure title.

    Returns:
        Plotly Figure.
    """
    height = container_height if container_height is not None else container_width
    fig = go.Figure()

    image_url = site_map.image_url if site_map is not None else None
    if image_url:
        fig.add_layout_image(
            dict(
                source=image_url,
                xref="x", yref="y",
                x=0, y=0,
                sizex=container_width, sizey=height,
                xanchor="left", yanchor="top",
                sizing="stretch",
                layer="below",
            )
        )

    for overlay in overlays:
        _add_plume(fig, overlay)

    _add_markers(fig, markers, container_width, height, site_map)

    if not overlays:
        fig.add_annotation(
            x=container_width / 2, y=height * 0.05,
            text="No plumes under current conditions",
            showarrow=False,
            font=dict(size=11, color="rgba(255,255,255,0.7)"),
        )

    fig.update_layout(
        title=title,
        height=max(300, int(height)),
        template="plotly_dark",
        showlegend=False,
        margin=dict(l=10, r=10, t=40 if title else 10, b=10),
    )
    fig.update_xaxes(range=[0, container_width], visible=False)
    # Screen convention: y grows downward over the image
    fig.update_yaxes(
        range=[height, 0], visible=False, scaleanchor="x", scaleratio=1,
    )
    return fig


def create_weather_timeline(
    series: WeatherSnapshotSeries,
    cursor_index: Optional[int] = None,
) -> go.Figure:
    """Wind speed history with stability-colored points and the playback cursor."""
    if len(series) == 0:
        fig = go.Figure()
        fig.add_annotation(text="No historical weather data available", showarrow=False)
        fig.update_layout(template="plotly_dark", height=220)
        return fig

    colors = {code: color for code, _, color in stability_legend()}
    times = [s.captured_at for s in series]
    speeds = [s.wind_speed for s in series]

    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=times,
            y=speeds,
            mode="lines+markers",
            line=dict(color="rgba(255,255,255,0.4)", width=1),
            marker=dict(
                size=7,
                color=[colors.get(s.stability_class or "", "grey") for s in series],
            ),
            customdata=[
                [s.wind_bearing_from, s.stability_class or "-"] for s in series
            ],
            hovertemplate=(
                "%{x}<br>%{y:.1f} m/s from %{customdata[0]:.0f}°"
                "<br>Class %{customdata[1]}<extra></extra>"
            ),
            name="Wind speed",
        )
    )

    if cursor_index is not None and 0 <= cursor_index < len(series):
        current = series[cursor_index]
        fig.add_vline(x=current.captured_at, line=dict(color="deepskyblue", width=2))

    fig.update_layout(
        template="plotly_dark",
        height=220,
        yaxis_title="Wind (m/s)",
        margin=dict(l=50, r=20, t=20, b=30),
        showlegend=False,
    )
    return fig
