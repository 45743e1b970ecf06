"""
State of the odour site-map view: which weather snapshot drives the plumes.

In live mode the most recent observation is shown; in historical mode the
snapshot under the playback cursor is, and incidents reported after that
snapshot are hidden.  Leaving historical mode always pauses playback.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from data.incidents import Incident, SiteMap
from data.weather import WeatherSnapshot, WeatherSnapshotSeries
from playback.controller import PlaybackController
from visualization.overlay import IncidentOverlay, IncidentOverlayRenderer, visible_markers

log = logging.getLogger(__name__)

LIVE = "live"
HISTORICAL = "historical"
VIEW_MODES = (LIVE, HISTORICAL)


class SiteMapViewState:
    """
    Glue between the weather feeds, the playback controller and the renderer.

    Args:
        renderer: Overlay renderer sized to the current map container.
        controller: Playback controller (a paused, empty one by default).
        site_map: Site map used to place lat/lng incidents.
    """

    def __init__(
        self,
        renderer: IncidentOverlayRenderer,
        controller: Optional[PlaybackController] = None,
        site_map: Optional[SiteMap] = None,
    ):
        self.renderer = renderer
        self.controller = controller if controller is not None else PlaybackController()
        self.site_map = site_map
        self.mode = LIVE
        self.live_snapshot: Optional[WeatherSnapshot] = None

    def set_mode(self, mode: str) -> None:
        if mode not in VIEW_MODES:
            raise ValueError(f"Unknown view mode '{mode}'. Use one of {VIEW_MODES}.")
        if mode == LIVE:
            self.controller.pause()
        if mode != self.mode:
            log.debug("Site map view switched to %s mode", mode)
        self.mode = mode

    def switch_to_live(self) -> None:
        self.set_mode(LIVE)

    def switch_to_historical(self) -> None:
        self.set_mode(HISTORICAL)

    def update_live(self, snapshot: Optional[WeatherSnapshot]) -> None:
        self.live_snapshot = snapshot

    def load_history(self, series: Optional[WeatherSnapshotSeries]) -> None:
        self.controller.set_series(series)

    @property
    def current_snapshot(self) -> Optional[WeatherSnapshot]:
        if self.mode == HISTORICAL:
            return self.controller.current_snapshot
        return self.live_snapshot

    def overlays(self, incidents: Iterable[Incident]) -> List[IncidentOverlay]:
        """Plume overlays for the incidents under the current snapshot."""
        return self.renderer.render(
            incidents, self.current_snapshot, self.site_map, live=self.mode == LIVE
        )

    def markers(
        self, incidents: Iterable[Incident], now: Optional[datetime] = None
    ) -> List[Incident]:
        """Incident markers as of the wall clock, or the snapshot time in playback."""
        snapshot = self.current_snapshot
        if self.mode == HISTORICAL and snapshot is not None:
            now = snapshot.captured_at
        return visible_markers(incidents, now=now)

    def close(self) -> None:
        self.controller.close()
