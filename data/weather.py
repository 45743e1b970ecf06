"""
Weather snapshots and the observation-store abstraction.

Snapshots are captured by an external pipeline and handed to the map view
as a WeatherSnapshotSeries.  The series is stored oldest-first; the store's
newest-first order is only reproduced at the access boundary through
``latest_first``.

The StubObservationStore returns a deterministic synthetic history for
development and testing.
"""

import json
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Iterator, List, Optional, Tuple

from config import HISTORY_LOOKBACK_HOURS, STUB_STATION_ID
from models.stability import STABILITY_CLASSES

log = logging.getLogger(__name__)


def parse_timestamp(value) -> datetime:
    """Parse an ISO-8601 timestamp (a trailing 'Z' is accepted)."""
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _optional_float(value) -> Optional[float]:
    if value is None:
        return None
    return float(value)


@dataclass(frozen=True)
class WeatherSnapshot:
    """A single weather observation for a site.

    Any of the wind fields may be missing when the upstream API returned
    nothing; such a snapshot stays in the series but cannot drive a plume.
    """

    captured_at: datetime
    wind_speed: Optional[float]           # m/s
    wind_bearing_from: Optional[float]    # Meteorological degrees (0-360)
    stability_class: Optional[str]        # Pasquill-Gifford class A-F
    temperature: Optional[float] = None   # degrees C
    site_id: Optional[str] = None

    @property
    def is_usable(self) -> bool:
        """True when speed, bearing and stability are all present."""
        if self.wind_speed is None or self.wind_bearing_from is None:
            return False
        if not self.stability_class:
            return False
        return math.isfinite(self.wind_speed) and math.isfinite(self.wind_bearing_from)

    @classmethod
    def from_record(cls, record: dict) -> "WeatherSnapshot":
        """Build a snapshot from an observation-store row."""
        stability = record.get("stability_class")
        if stability is not None:
            stability = str(stability).strip().upper() or None
        return cls(
            captured_at=parse_timestamp(record["recorded_at"]),
            wind_speed=_optional_float(record.get("wind_speed_mps")),
            wind_bearing_from=_optional_float(record.get("wind_direction_deg")),
            stability_class=stability,
            temperature=_optional_float(record.get("temperature_c")),
            site_id=record.get("site_id"),
        )

    def to_record(self) -> dict:
        return {
            "recorded_at": self.captured_at.isoformat(),
            "wind_speed_mps": self.wind_speed,
            "wind_direction_deg": self.wind_bearing_from,
            "stability_class": self.stability_class,
            "temperature_c": self.temperature,
            "site_id": self.site_id,
        }


class WeatherSnapshotSeries:
    """
    Time-ordered, immutable collection of weather snapshots.

    Indexing (``series[i]``) and iteration use the chronological view
    (index 0 = oldest).  ``latest_first`` gives the store order, where index
    0 is always the most recent observation.
    """

    def __init__(self, snapshots: Iterable[WeatherSnapshot] = ()):
        self._snapshots: Tuple[WeatherSnapshot, ...] = tuple(
            sorted(snapshots, key=lambda s: s.captured_at)
        )

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "WeatherSnapshotSeries":
        return cls(WeatherSnapshot.from_record(r) for r in records)

    def __len__(self) -> int:
        return len(self._snapshots)

    def __getitem__(self, index: int) -> WeatherSnapshot:
        return self._snapshots[index]

    def __iter__(self) -> Iterator[WeatherSnapshot]:
        return iter(self._snapshots)

    def __bool__(self) -> bool:
        return bool(self._snapshots)

    def __repr__(self) -> str:
        return f"WeatherSnapshotSeries(n={len(self)})"

    @property
    def chronological(self) -> Tuple[WeatherSnapshot, ...]:
        return self._snapshots

    @property
    def latest_first(self) -> Tuple[WeatherSnapshot, ...]:
        return self._snapshots[::-1]

    @property
    def latest(self) -> Optional[WeatherSnapshot]:
        return self._snapshots[-1] if self._snapshots else None

    @property
    def oldest(self) -> Optional[WeatherSnapshot]:
        return self._snapshots[0] if self._snapshots else None

    def within_hours(
        self, hours: float, now: Optional[datetime] = None
    ) -> "WeatherSnapshotSeries":
        """Return the snapshots captured in the last ``hours`` before ``now``.

        ``now`` defaults to the newest snapshot's capture time.
        """
        if not self._snapshots:
            return self
        if now is None:
            now = self._snapshots[-1].captured_at
        cutoff = now - timedelta(hours=hours)
        return WeatherSnapshotSeries(
            s for s in self._snapshots if cutoff <= s.captured_at <= now
        )


class ObservationStore(ABC):
    """Abstract source of weather snapshots for a site."""

    @abstractmethod
    def get_snapshot_series(
        self, site_id: str, hours: int = HISTORY_LOOKBACK_HOURS
    ) -> WeatherSnapshotSeries:
        """Return the snapshots of the last ``hours`` for a site.

        Args:
            site_id: Site identifier.
            hours: Look-back window in hours.
        """
        ...

    @abstractmethod
    def get_latest_snapshot(self, site_id: str) -> Optional[WeatherSnapshot]:
        """Return the most recent snapshot for a site, or None."""
        ...


class StubObservationStore(ObservationStore):
    """Deterministic synthetic history: hourly snapshots with veering wind.

    Wind speed follows a daily cycle and the bearing veers by a fixed step
    per hour.  Stability follows speed and time of day: light night winds
    are stable, strong winds are neutral, light day winds are unstable.

    Args:
        now: Capture time of the most recent snapshot (default: current UTC hour).
        base_speed: Mean wind speed (m/s).
        base_direction: Bearing of the most recent snapshot (degrees FROM).
        veer_deg_per_hour: Bearing change per hour going back in time.
        station_id: Identifier reported as the snapshot site.
    """

    def __init__(
        self,
        now: Optional[datetime] = None,
        base_speed: float = 3.0,
        base_direction: float = 270.0,
        veer_deg_per_hour: float = 7.5,
        station_id: str = STUB_STATION_ID,
    ):
        if now is None:
            now = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)
        self.now = now
        self.base_speed = base_speed
        self.base_direction = base_direction
        self.veer_deg_per_hour = veer_deg_per_hour
        self.station_id = station_id

    def _snapshot_at(self, hours_ago: int, site_id: str) -> WeatherSnapshot:
        captured_at = self.now - timedelta(hours=hours_ago)
        phase = 2.0 * math.pi * captured_at.hour / 24.0
        speed = max(0.0, self.base_speed * (1.0 - 0.9 * math.cos(phase)))
        direction = (self.base_direction - self.veer_deg_per_hour * hours_ago) % 360.0
        daytime = 7 <= captured_at.hour < 19
        if speed >= 5.0:
            stability = "D"
        elif daytime:
            stability = STABILITY_CLASSES[min(2, int(speed // 2))]
        else:
            stability = "F" if speed < 2.0 else "E"
        return WeatherSnapshot(
            captured_at=captured_at,
            wind_speed=round(speed, 2),
            wind_bearing_from=round(direction, 1),
            stability_class=stability,
            temperature=round(12.0 - 4.0 * math.cos(phase), 1),
            site_id=site_id,
        )

    def get_snapshot_series(
        self, site_id: str, hours: int = HISTORY_LOOKBACK_HOURS
    ) -> WeatherSnapshotSeries:
        return WeatherSnapshotSeries(
            self._snapshot_at(h, site_id) for h in range(hours)
        )

    def get_latest_snapshot(self, site_id: str) -> Optional[WeatherSnapshot]:
        return self._snapshot_at(0, site_id)


class FileObservationStore(ObservationStore):
    """Load snapshots from a JSON file of observation-store rows.

    The file holds an array of objects with at least ``recorded_at`` and
    ``site_id``; wind fields may be null.

    Args:
        path: Path to the JSON file.

    Raises:
        ValueError: If the file is not a JSON array or rows miss required keys.
        FileNotFoundError: If the file does not exist.
    """

    _REQUIRED_KEYS = {"recorded_at", "site_id"}

    def __init__(self, path: str):
        self._snapshots = self._load(path)
        log.info("Loaded %d weather snapshots from %s", len(self._snapshots), path)

    @classmethod
    def _load(cls, path: str) -> List[WeatherSnapshot]:
        with open(path) as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"Weather file must contain a JSON array: {path}")
        for i, row in enumerate(data):
            missing = cls._REQUIRED_KEYS - set(row.keys())
            if missing:
                raise ValueError(
                    f"Weather row #{i} missing required keys {missing} in {path}"
                )
        return [WeatherSnapshot.from_record(row) for row in data]

    def _for_site(self, site_id: str) -> WeatherSnapshotSeries:
        return WeatherSnapshotSeries(s for s in self._snapshots if s.site_id == site_id)

    def get_snapshot_series(
        self, site_id: str, hours: int = HISTORY_LOOKBACK_HOURS
    ) -> WeatherSnapshotSeries:
        return self._for_site(site_id).within_hours(hours)

    def get_latest_snapshot(self, site_id: str) -> Optional[WeatherSnapshot]:
        return self._for_site(site_id).latest
