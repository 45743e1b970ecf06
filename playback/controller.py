"""
Historical weather playback.

The controller owns a cursor into the chronological (oldest to newest) view
of a WeatherSnapshotSeries, a play/pause flag and a speed multiplier.
While playing, a periodic timer advances the cursor one snapshot per tick
and loops back to the oldest snapshot after the newest.

Every arm of the timer is tagged with a generation number.  Pausing,
changing speed, replacing the series or closing the controller bumps the
generation and stops the handle, so a tick that was already queued can
never move the cursor afterwards.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from config import PLAYBACK_TICK_MS, PLAYBACK_SPEEDS, DEFAULT_PLAYBACK_SPEED
from data.weather import WeatherSnapshot, WeatherSnapshotSeries
from playback.timer import TickHandle, TickScheduler

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlaybackState:
    """Read-only view of the controller state."""

    cursor_index: int
    is_playing: bool
    speed_multiplier: float
    length: int


class PlaybackController:
    """
    Play/pause/seek state machine over a weather snapshot series.

    Args:
        series: Snapshots to play back (may be empty).
        scheduler: Arms the auto-advance timer.  When None, the host is
            expected to call ``tick()`` on its own cadence (``interval_ms``).
        tick_ms: Advance cadence at 1x speed, in milliseconds.
        auto_stop: Pause on reaching the newest snapshot instead of looping.
    """

    def __init__(
        self,
        series: Optional[WeatherSnapshotSeries] = None,
        scheduler: Optional[TickScheduler] = None,
        tick_ms: float = PLAYBACK_TICK_MS,
        auto_stop: bool = False,
    ):
        self._series = series if series is not None else WeatherSnapshotSeries()
        self._scheduler = scheduler
        self.tick_ms = tick_ms
        self.auto_stop = auto_stop

        self._cursor = max(0, len(self._series) - 1)
        self._playing = False
        self._speed = DEFAULT_PLAYBACK_SPEED
        self._timer: Optional[TickHandle] = None
        self._generation = 0

    # -- read access -------------------------------------------------------

    @property
    def series(self) -> WeatherSnapshotSeries:
        return self._series

    @property
    def cursor_index(self) -> int:
        return self._cursor

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def speed_multiplier(self) -> float:
        return self._speed

    @property
    def interval_ms(self) -> float:
        """Wall-clock time between advances at the current speed."""
        return self.tick_ms / self._speed

    @property
    def has_data(self) -> bool:
        return len(self._series) > 0

    @property
    def at_newest(self) -> bool:
        return self._cursor >= len(self._series) - 1

    @property
    def current_snapshot(self) -> Optional[WeatherSnapshot]:
        if not self.has_data:
            return None
        return self._series[self._cursor]

    @property
    def state(self) -> PlaybackState:
        return PlaybackState(
            cursor_index=self._cursor,
            is_playing=self._playing,
            speed_multiplier=self._speed,
            length=len(self._series),
        )

    # -- timer management --------------------------------------------------

    def _cancel_timer(self) -> None:
        self._generation += 1
        if self._timer is not None:
            self._timer.stop()
            self._timer = None

    def _arm_timer(self) -> None:
        self._cancel_timer()
        if self._scheduler is None:
            return
        generation = self._generation
        self._timer = self._scheduler.start(
            self.interval_ms, lambda: self._on_timer(generation)
        )

    def _on_timer(self, generation: int) -> None:
        if generation != self._generation:
            log.debug("Ignoring stale playback tick (generation %d)", generation)
            return
        self.tick()

    # -- transport ---------------------------------------------------------

    def play(self) -> None:
        """Start auto-advance.  No-op on an empty series or when already playing."""
        if self._playing:
            return
        if not self.has_data:
            log.debug("Play requested with no weather history")
            return
        if self.auto_stop and self.at_newest:
            self._cursor = 0
        self._playing = True
        self._arm_timer()
        log.debug("Playback started at cursor %d", self._cursor)

    def pause(self) -> None:
        was_playing = self._playing
        self._playing = False
        self._cancel_timer()
        if was_playing:
            log.debug("Playback paused at cursor %d", self._cursor)

    def toggle(self) -> None:
        if self._playing:
            self.pause()
        else:
            self.play()

    def tick(self) -> None:
        """Advance one snapshot (loop semantics).  Ignored while paused."""
        if not self._playing or not self.has_data:
            return
        if self.at_newest and self.auto_stop:
            self.pause()
            return
        self._cursor = (self._cursor + 1) % len(self._series)
        if self.auto_stop and self.at_newest:
            self.pause()

    def set_speed(self, multiplier: float) -> None:
        """Change the playback speed; the timer is re-armed while playing.

        Raises:
            ValueError: If the multiplier is not one of PLAYBACK_SPEEDS.
        """
        multiplier = float(multiplier)
        if multiplier not in PLAYBACK_SPEEDS:
            raise ValueError(
                f"Unsupported playback speed {multiplier}. Use one of {PLAYBACK_SPEEDS}."
            )
        self._speed = multiplier
        if self._playing:
            self._arm_timer()

    # -- manual navigation -------------------------------------------------

    def seek(self, index: int) -> None:
        """Move the cursor, clamped to the series bounds.  Allowed while playing.

        Non-numeric, NaN or infinite positions are ignored.
        """
        if not self.has_data:
            return
        try:
            position = float(index)
        except (TypeError, ValueError):
            position = math.nan
        if not math.isfinite(position):
            log.debug("Ignoring seek to %r", index)
            return
        self._cursor = min(max(int(position), 0), len(self._series) - 1)

    def step_forward(self) -> None:
        """One snapshot newer; no-op at the newest snapshot."""
        if self.has_data and not self.at_newest:
            self._cursor += 1

    def step_back(self) -> None:
        """One snapshot older; no-op at the oldest snapshot."""
        if self.has_data and self._cursor > 0:
            self._cursor -= 1

    def seek_latest(self) -> None:
        self.seek(len(self._series) - 1)

    # -- lifecycle ---------------------------------------------------------

    def set_series(self, series: Optional[WeatherSnapshotSeries]) -> None:
        """
        Replace the snapshot series.

        A change in length means new observations arrived: the cursor moves
        to the newest snapshot and playback pauses.  A same-length refresh
        keeps the cursor.
        """
        series = series if series is not None else WeatherSnapshotSeries()
        length_changed = len(series) != len(self._series)
        self._series = series
        if length_changed:
            self.pause()
            self._cursor = max(0, len(series) - 1)
            log.info("Weather history changed to %d snapshots; playback reset", len(series))
        elif self.has_data:
            self._cursor = min(self._cursor, len(series) - 1)

    def close(self) -> None:
        """Cancel any armed timer.  Call when the map view is torn down."""
        self.pause()
