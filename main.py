"""
Odour Plume Playback: Streamlit Interface.

Run with:  streamlit run main.py
"""

import sys
import os
import logging
import time

# Ensure the project root is on the Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import streamlit as st
import streamlit.components.v1 as components

from data.mock_data import get_demo_incidents, get_demo_site_map
from data.incidents import InMemoryIncidentStore
from data.weather import StubObservationStore
from models.stability import compass_point, dispersion_outlook, get_stability_profile, stability_legend
from playback.controller import PlaybackController
from playback.site_view import HISTORICAL, SiteMapViewState
from visualization.overlay import IncidentOverlayRenderer
from visualization.plots import create_site_map_figure, create_weather_timeline
from visualization.compass_widget import compass_html
from config import (
    DEFAULT_RENDER_SCALE,
    HISTORY_LOOKBACK_HOURS,
    PLAYBACK_SPEEDS,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# ── Page Config ──────────────────────────────────────────────────────────────

st.set_page_config(
    page_title="Odour Plume Playback",
    page_icon="💨",
    layout="wide",
)

st.title("Odour Incident Map")
st.markdown(
    "Shows where reported odours plausibly travelled under the current or "
    "historical wind. Plumes are a visual guide, not a dispersion model."
)

# ── Data ─────────────────────────────────────────────────────────────────────


@st.cache_resource
def get_stores():
    return StubObservationStore(), InMemoryIncidentStore(get_demo_incidents())


observation_store, incident_store = get_stores()
site_map = get_demo_site_map()

# ── Sidebar Controls ─────────────────────────────────────────────────────────

st.sidebar.header("Map")

container_width = st.sidebar.select_slider(
    "Map width (px)",
    options=[400, 600, 800, 1000],
    value=int(DEFAULT_RENDER_SCALE),
)

mode_label = st.sidebar.radio("Weather", ["Live", "Historical playback"])
history_hours = st.sidebar.slider(
    "History window (hours)",
    min_value=6,
    max_value=HISTORY_LOOKBACK_HOURS,
    value=HISTORY_LOOKBACK_HOURS,
    step=6,
    disabled=mode_label == "Live",
)

# ── View State ───────────────────────────────────────────────────────────────

if "site_view" not in st.session_state:
    st.session_state.site_view = SiteMapViewState(
        renderer=IncidentOverlayRenderer(container_width),
        controller=PlaybackController(),
        site_map=site_map,
    )
    st.session_state.last_tick_at = None

view: SiteMapViewState = st.session_state.site_view
controller = view.controller
view.renderer.resize(container_width)

view.update_live(observation_store.get_latest_snapshot(site_map.site_id))
if mode_label == "Live":
    view.switch_to_live()
else:
    view.switch_to_historical()
    view.load_history(
        observation_store.get_snapshot_series(site_map.site_id, hours=history_hours)
    )

incidents = incident_store.get_incidents(site_map.site_map_id)

# ── Playback Controls ────────────────────────────────────────────────────────

if view.mode == HISTORICAL:
    st.sidebar.header("Playback")
    if not controller.has_data:
        st.sidebar.info("No historical weather data available")
    else:
        c_back, c_play, c_fwd = st.sidebar.columns(3)
        if c_back.button("⏮", disabled=controller.cursor_index == 0):
            controller.step_back()
        if c_play.button("⏸" if controller.is_playing else "▶"):
            controller.toggle()
            st.session_state.last_tick_at = time.monotonic()
        if c_fwd.button("⏭", disabled=controller.at_newest):
            controller.step_forward()

        speed = st.sidebar.selectbox(
            "Speed",
            PLAYBACK_SPEEDS,
            index=PLAYBACK_SPEEDS.index(controller.speed_multiplier),
            format_func=lambda s: f"{s:g}x",
        )
        if speed != controller.speed_multiplier:
            controller.set_speed(speed)

        if len(controller.series) > 1:
            position = st.sidebar.slider(
                "Snapshot (oldest → newest)",
                min_value=0,
                max_value=len(controller.series) - 1,
                value=controller.cursor_index,
            )
            if position != controller.cursor_index:
                controller.seek(position)


def _advance_playback() -> None:
    """Advance the cursor when a full playback interval has elapsed."""
    now = time.monotonic()
    last = st.session_state.last_tick_at
    if last is None or (now - last) * 1000.0 >= controller.interval_ms * 0.9:
        if last is not None:
            controller.tick()
        st.session_state.last_tick_at = now


run_every = None
if view.mode == HISTORICAL and controller.is_playing:
    run_every = controller.interval_ms / 1000.0

# ── Map Panel ────────────────────────────────────────────────────────────────


@st.fragment(run_every=run_every)
def map_panel():
    if view.mode == HISTORICAL and controller.is_playing:
        _advance_playback()

    snapshot = view.current_snapshot
    overlays = view.overlays(incidents)
    markers = view.markers(incidents)

    col_map, col_info = st.columns([3, 1])

    with col_map:
        if snapshot is not None:
            stamp = snapshot.captured_at.strftime("%b %d, %H:%M")
            title = f"{'Playback' if view.mode == HISTORICAL else 'Live'}: {stamp}"
        else:
            title = "No weather data"
        fig = create_site_map_figure(
            overlays=overlays,
            markers=markers,
            container_width=view.renderer.container_width,
            container_height=view.renderer.container_height,
            site_map=site_map,
            title=title,
        )
        st.plotly_chart(fig, use_container_width=True)

        if view.mode == HISTORICAL:
            st.plotly_chart(
                create_weather_timeline(controller.series, controller.cursor_index),
                use_container_width=True,
            )

    with col_info:
        components.html(compass_html(snapshot), height=210)
        if snapshot is not None and snapshot.is_usable:
            profile = get_stability_profile(snapshot.stability_class)
            _, outlook = dispersion_outlook(profile.code)
            st.metric(
                "Wind",
                f"{snapshot.wind_speed:.1f} m/s",
                delta=f"from {compass_point(snapshot.wind_bearing_from)}",
                delta_color="off",
            )
            st.metric("Stability", f"{profile.code} - {profile.label}")
            if snapshot.temperature is not None:
                st.metric("Temperature", f"{snapshot.temperature:.1f} °C")
            st.caption(outlook)
        st.caption(f"Plumes shown: {len(overlays)} of {len(incidents)} incidents")


map_panel()

# ── Legend ───────────────────────────────────────────────────────────────────

with st.expander("Stability classes"):
    for code, label, color in stability_legend():
        st.markdown(
            f"<span style='color:{color}'>●</span> **{code}** {label}",
            unsafe_allow_html=True,
        )

with st.expander("About the plume overlay"):
    st.markdown(
        """
        **Direction**: plumes point where the wind blows *toward*, the
        reciprocal of the reported wind direction.

        **Length**: grows with wind speed (15 % of map width plus 5 % per
        m/s) and is capped at 60 % of the map width.

        **Width**: widens downwind at a rate set by the Pasquill-Gifford
        stability class. Unstable air (A) spreads odour wide; stable air (F)
        keeps it in a narrow band that persists further.

        **Calm air**: below 0.5 m/s no direction is meaningful and a radial
        indicator is drawn instead.

        Only *open* and *investigating* incidents get a plume. Resolved and
        closed incidents stay on the map as green markers for 7 days.
        """
    )
