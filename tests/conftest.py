"""Shared fixtures for the Odour Plume Playback test suite."""

import sys
import os
from datetime import datetime, timedelta, timezone

import pytest

# Ensure project root is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from data.incidents import Incident
from data.weather import WeatherSnapshot, WeatherSnapshotSeries
from playback.timer import TickHandle, TickScheduler


BASE_TIME = datetime(2026, 1, 17, 12, 0, tzinfo=timezone.utc)


class FakeHandle(TickHandle):
    def __init__(self, interval_ms, callback):
        self.interval_ms = interval_ms
        self.callback = callback
        self.running = True

    def stop(self):
        self.running = False

    def is_running(self):
        return self.running


class FakeScheduler(TickScheduler):
    """Records armed timers; tests fire them by hand."""

    def __init__(self):
        self.handles = []

    def start(self, interval_ms, callback):
        handle = FakeHandle(interval_ms, callback)
        self.handles.append(handle)
        return handle

    @property
    def active(self):
        running = [h for h in self.handles if h.running]
        return running[-1] if running else None

    def fire(self, times=1):
        """Fire the active timer ``times`` times."""
        for _ in range(times):
            self.active.callback()


def make_snapshot(hours_ago=0, speed=5.0, bearing=0.0, stability="D", temperature=15.0):
    return WeatherSnapshot(
        captured_at=BASE_TIME - timedelta(hours=hours_ago),
        wind_speed=speed,
        wind_bearing_from=bearing,
        stability_class=stability,
        temperature=temperature,
        site_id="site-1",
    )


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def series5():
    """Five hourly snapshots, handed over newest-first like the store does."""
    newest_first = [make_snapshot(hours_ago=h, bearing=10.0 * h) for h in range(5)]
    return WeatherSnapshotSeries(newest_first)


@pytest.fixture
def live_snapshot():
    """Wind 5 m/s from due north, neutral stability."""
    return make_snapshot(speed=5.0, bearing=0.0, stability="D")


@pytest.fixture
def mixed_incidents():
    """One incident in each status, all on the same site map."""
    return [
        Incident("open-1", "open", intensity=4, x=50.0, y=50.0, site_map_id="map-1"),
        Incident("inv-1", "investigating", intensity=2, x=20.0, y=30.0, site_map_id="map-1"),
        Incident("res-1", "resolved", intensity=5, x=70.0, y=70.0, site_map_id="map-1",
                 occurred_at=BASE_TIME - timedelta(days=2)),
        Incident("clo-1", "closed", intensity=3, x=10.0, y=90.0, site_map_id="map-1",
                 occurred_at=BASE_TIME - timedelta(days=30)),
    ]
