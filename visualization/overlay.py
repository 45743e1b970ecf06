"""
Incident overlay rendering.

Turns the incident list and the weather snapshot on screen into the set of
plume overlays to draw.  Only open / investigating incidents get a plume;
resolved and closed ones are dropped before any geometry is computed.
Without a usable snapshot nothing is produced at all.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Tuple

from config import RECENT_INCIDENT_DAYS, MARKER_COLORS, STRONG_INTENSITY
from data.incidents import Incident, SiteMap
from data.weather import WeatherSnapshot
from models.plume_geometry import PlumeResult, compute_plume

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class IncidentOverlay:
    """One rendered plume (or calm indicator) for an incident."""

    incident_id: str
    position: Tuple[float, float]   # render units
    plume: PlumeResult


def active_incidents(incidents: Iterable[Incident]) -> List[Incident]:
    """Incidents that participate in plume rendering."""
    return [i for i in incidents if i.is_active]


def _as_utc(moment: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _reported_by(incident: Incident, moment: datetime) -> bool:
    """False for incidents reported after ``moment``; undated ones always count."""
    if incident.occurred_at is None:
        return True
    return _as_utc(incident.occurred_at) <= _as_utc(moment)


class IncidentOverlayRenderer:
    """
    Computes plume overlays for a map container of a given size.

    Args:
        container_width: Width of the render surface; also the render scale
            that keeps plume length proportionate.
        container_height: Height of the render surface (defaults to width).
    """

    def __init__(self, container_width: float, container_height: Optional[float] = None):
        self.container_width = float(container_width)
        self.container_height = float(
            container_height if container_height is not None else container_width
        )

    def resize(self, container_width: float, container_height: Optional[float] = None) -> None:
        self.container_width = float(container_width)
        self.container_height = float(
            container_height if container_height is not None else container_width
        )

    def to_render_units(self, position_pct: Tuple[float, float]) -> Tuple[float, float]:
        x_pct, y_pct = position_pct
        return (
            x_pct * self.container_width / 100.0,
            y_pct * self.container_height / 100.0,
        )

    def render(
        self,
        incidents: Iterable[Incident],
        snapshot: Optional[WeatherSnapshot],
        site_map: Optional[SiteMap] = None,
        live: bool = False,
    ) -> List[IncidentOverlay]:
        """
        Compute the overlay set for the given snapshot.

        Args:
            incidents: Incidents on the current site map, any status.
            snapshot: Live or playback snapshot (None when unavailable).
            site_map: Used to place incidents recorded by lat/lng.
            live: The snapshot is the current weather.  Otherwise incidents
                reported after ``snapshot.captured_at`` are left out.

        Returns:
            One IncidentOverlay per placeable active incident, or an empty
            list when the snapshot lacks wind speed, bearing or stability.
        """
        if snapshot is None or not snapshot.is_usable:
            return []

        overlays = []
        for incident in active_incidents(incidents):
            if not live and not _reported_by(incident, snapshot.captured_at):
                continue
            position_pct = incident.map_position(site_map)
            if position_pct is None:
                log.debug("Incident %s has no map position; skipped", incident.incident_id)
                continue
            position = self.to_render_units(position_pct)
            plume = compute_plume(
                source_position=position,
                wind_bearing_from=snapshot.wind_bearing_from,
                wind_speed=snapshot.wind_speed,
                stability_class=snapshot.stability_class,
                intensity=incident.intensity,
                render_scale=self.container_width,
            )
            overlays.append(IncidentOverlay(incident.incident_id, position, plume))
        return overlays


# ── Incident markers ────────────────────────────────────────────────────────

def visible_markers(
    incidents: Iterable[Incident],
    now: Optional[datetime] = None,
    recent_days: int = RECENT_INCIDENT_DAYS,
) -> List[Incident]:
    """
    Incidents to pin on the map: active ones plus anything recent.

    Resolved / closed incidents stay visible as markers for ``recent_days``
    but never get a plume.  Incidents reported after ``now`` are hidden, so
    during playback ``now`` is the snapshot time.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    now = _as_utc(now)
    cutoff = now - timedelta(days=recent_days)
    visible = []
    for incident in incidents:
        if not _reported_by(incident, now):
            continue
        if incident.is_active:
            visible.append(incident)
            continue
        if incident.occurred_at is None:
            continue
        if _as_utc(incident.occurred_at) >= cutoff:
            visible.append(incident)
    return visible


def marker_color(incident: Incident) -> str:
    if not incident.is_active:
        return MARKER_COLORS["closed"]
    if incident.intensity is not None and incident.intensity >= STRONG_INTENSITY:
        return MARKER_COLORS["strong"]
    if incident.intensity is not None and incident.intensity >= 3:
        return MARKER_COLORS["moderate"]
    return MARKER_COLORS["weak"]
