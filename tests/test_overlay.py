"""Tests for incident overlay rendering and markers."""

from datetime import timedelta

import numpy as np
import pytest

from conftest import BASE_TIME, make_snapshot
from data.incidents import GeoBounds, Incident, SiteMap
from data.weather import WeatherSnapshot
from models.plume_geometry import CalmDispersion, PlumeGeometry
from visualization.overlay import (
    IncidentOverlayRenderer,
    active_incidents,
    marker_color,
    visible_markers,
)


@pytest.fixture
def renderer():
    return IncidentOverlayRenderer(800)


class TestRenderer:
    def test_only_active_incidents_rendered(self, renderer, mixed_incidents, live_snapshot):
        overlays = renderer.render(mixed_incidents, live_snapshot)
        assert [o.incident_id for o in overlays] == ["open-1", "inv-1"]

    def test_no_snapshot_renders_nothing(self, renderer, mixed_incidents):
        assert renderer.render(mixed_incidents, None) == []

    @pytest.mark.parametrize("field", ["wind_speed", "wind_bearing_from", "stability_class"])
    def test_incomplete_snapshot_renders_nothing(self, renderer, mixed_incidents, field):
        fields = dict(
            captured_at=BASE_TIME, wind_speed=5.0, wind_bearing_from=0.0, stability_class="D"
        )
        fields[field] = None
        assert renderer.render(mixed_incidents, WeatherSnapshot(**fields)) == []

    def test_end_to_end_plume(self, renderer, mixed_incidents, live_snapshot):
        overlay = renderer.render(mixed_incidents, live_snapshot)[0]
        plume = overlay.plume
        assert overlay.position == (400.0, 400.0)
        assert isinstance(plume, PlumeGeometry)
        assert plume.direction_deg == pytest.approx(180.0)
        assert plume.length == pytest.approx(320.0)
        assert plume.polygon[:, 1].max() == pytest.approx(720.0)
        assert plume.polygon[:, 1].min() == pytest.approx(400.0)
        assert plume.opacity == pytest.approx(0.43)

    def test_calm_snapshot_gives_radial_overlays(self, renderer, mixed_incidents):
        overlays = renderer.render(mixed_incidents, make_snapshot(speed=0.2))
        assert len(overlays) == 2
        assert all(isinstance(o.plume, CalmDispersion) for o in overlays)

    def test_unplaceable_incident_skipped(self, renderer, live_snapshot):
        incidents = [
            Incident("no-pos", "open", intensity=3),
            Incident("gps", "open", intensity=3, lat=5.0, lng=15.0),
        ]
        assert renderer.render(incidents, live_snapshot) == []

    def test_malformed_store_rows_do_not_break_render(self, renderer, live_snapshot):
        incidents = [
            Incident.from_record({"id": "bad", "status": "open", "intensity": "high",
                                  "position_x": "n/a", "position_y": 10}),
            Incident.from_record({"id": "ok", "status": "open", "intensity": "4.0",
                                  "position_x": 50, "position_y": 50}),
        ]
        overlays = renderer.render(incidents, live_snapshot)
        assert [o.incident_id for o in overlays] == ["ok"]
        assert overlays[0].plume.opacity == pytest.approx(0.43)

    def test_lat_lng_placed_through_bounds(self, renderer, live_snapshot):
        site_map = SiteMap("m", "s", "Plant", bounds=GeoBounds(10.0, 0.0, 20.0, 10.0))
        incidents = [Incident("gps", "open", intensity=3, lat=5.0, lng=15.0)]
        overlay = renderer.render(incidents, live_snapshot, site_map)[0]
        assert overlay.position == pytest.approx((400.0, 400.0))

    def test_resize_rescales_plume(self, renderer, mixed_incidents, live_snapshot):
        before = renderer.render(mixed_incidents, live_snapshot)[0].plume.length
        renderer.resize(400)
        after = renderer.render(mixed_incidents, live_snapshot)[0]
        assert after.position == (200.0, 200.0)
        assert after.plume.length == pytest.approx(before / 2)

    def test_non_square_container(self, live_snapshot, mixed_incidents):
        renderer = IncidentOverlayRenderer(800, 600)
        overlay = renderer.render(mixed_incidents, live_snapshot)[0]
        assert overlay.position == (400.0, 300.0)
        assert overlay.plume.length == pytest.approx(320.0)

    def test_snapshot_change_moves_plumes(self, renderer, mixed_incidents):
        north = renderer.render(mixed_incidents, make_snapshot(bearing=0.0))[0].plume
        west = renderer.render(mixed_incidents, make_snapshot(bearing=270.0))[0].plume
        assert not np.allclose(north.polygon, west.polygon)
        assert west.direction_deg == pytest.approx(90.0)


class TestPlaybackTime:
    def test_incident_reported_after_snapshot_has_no_plume(self, renderer):
        incidents = [Incident("late", "open", intensity=3, x=50.0, y=50.0,
                              occurred_at=BASE_TIME - timedelta(hours=1))]
        old_weather = make_snapshot(hours_ago=40)
        assert renderer.render(incidents, old_weather) == []

    def test_incident_reported_before_snapshot_kept(self, renderer):
        incidents = [Incident("early", "open", intensity=3, x=50.0, y=50.0,
                              occurred_at=BASE_TIME - timedelta(hours=41))]
        overlays = renderer.render(incidents, make_snapshot(hours_ago=40))
        assert [o.incident_id for o in overlays] == ["early"]

    def test_live_snapshot_ignores_report_time(self, renderer):
        incidents = [Incident("fresh", "open", intensity=3, x=50.0, y=50.0,
                              occurred_at=BASE_TIME + timedelta(minutes=20))]
        assert len(renderer.render(incidents, make_snapshot(), live=True)) == 1

    def test_markers_hide_incidents_reported_later(self):
        incidents = [
            Incident("past", "open", occurred_at=BASE_TIME - timedelta(hours=50)),
            Incident("future", "open", occurred_at=BASE_TIME - timedelta(hours=1)),
        ]
        visible = visible_markers(incidents, now=BASE_TIME - timedelta(hours=40))
        assert [i.incident_id for i in visible] == ["past"]

    def test_marker_window_measured_from_playback_time(self):
        closed = Incident("c", "closed", occurred_at=BASE_TIME - timedelta(days=10))
        assert visible_markers([closed], now=BASE_TIME) == []
        assert visible_markers([closed], now=BASE_TIME - timedelta(days=5)) == [closed]


class TestActiveIncidents:
    def test_filters_statuses(self, mixed_incidents):
        assert [i.status for i in active_incidents(mixed_incidents)] == ["open", "investigating"]


class TestMarkers:
    def test_recent_closed_kept_old_dropped(self, mixed_incidents):
        visible = visible_markers(mixed_incidents, now=BASE_TIME)
        assert [i.incident_id for i in visible] == ["open-1", "inv-1", "res-1"]

    def test_closed_without_date_dropped(self):
        incidents = [Incident("c", "closed")]
        assert visible_markers(incidents, now=BASE_TIME) == []

    def test_naive_timestamps_treated_as_utc(self):
        naive = (BASE_TIME - timedelta(days=1)).replace(tzinfo=None)
        incidents = [Incident("r", "resolved", occurred_at=naive)]
        assert len(visible_markers(incidents, now=BASE_TIME)) == 1

    def test_custom_window(self, mixed_incidents):
        visible = visible_markers(mixed_incidents, now=BASE_TIME, recent_days=60)
        assert len(visible) == 4

    @pytest.mark.parametrize("status,intensity,color", [
        ("resolved", 5, "#22c55e"),
        ("closed", None, "#22c55e"),
        ("open", 5, "#ef4444"),
        ("open", 4, "#ef4444"),
        ("investigating", 3, "#eab308"),
        ("open", 2, "#f97316"),
        ("open", None, "#f97316"),
    ])
    def test_marker_color(self, status, intensity, color):
        assert marker_color(Incident("i", status, intensity=intensity)) == color
