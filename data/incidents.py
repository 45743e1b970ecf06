"""
Odour incidents, site maps and the incident-store abstraction.

Incidents are owned by the external incident store.  Positions are recorded
either as percentages on the site-map image or as lat/lng; the latter is
placed on the image through the site map's geographic bounds.
"""

import json
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from config import ACTIVE_INCIDENT_STATUSES, INCIDENT_STATUSES
from data.weather import parse_timestamp

log = logging.getLogger(__name__)


def _finite_or_none(value) -> Optional[float]:
    """Value as float, or None when missing, non-numeric or non-finite."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def _intensity_or_none(value) -> Optional[int]:
    value = _finite_or_none(value)
    return int(round(value)) if value is not None else None


@dataclass(frozen=True)
class GeoBounds:
    """Geographic extent of a site-map image (degrees)."""

    north: float
    south: float
    east: float
    west: float

    def __post_init__(self):
        if self.north <= self.south:
            raise ValueError("GeoBounds north must be greater than south")
        if self.east <= self.west:
            raise ValueError("GeoBounds east must be greater than west")

    def to_map_percent(self, lat: float, lng: float) -> Tuple[float, float]:
        """Map a coordinate onto the image as (x%, y%), y growing south."""
        x = (lng - self.west) / (self.east - self.west) * 100.0
        y = (self.north - lat) / (self.north - self.south) * 100.0
        return x, y

    def contains(self, lat: float, lng: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lng <= self.east


@dataclass(frozen=True)
class SiteMap:
    """A site-map image that incidents are pinned to."""

    site_map_id: str
    site_id: str
    name: str
    image_url: Optional[str] = None
    bounds: Optional[GeoBounds] = None

    @classmethod
    def from_record(cls, record: dict) -> "SiteMap":
        bounds = None
        keys = ("geo_bounds_north", "geo_bounds_south", "geo_bounds_east", "geo_bounds_west")
        if all(record.get(k) is not None for k in keys):
            bounds = GeoBounds(*(float(record[k]) for k in keys))
        return cls(
            site_map_id=record["id"],
            site_id=record["site_id"],
            name=record.get("name", ""),
            image_url=record.get("image_url"),
            bounds=bounds,
        )


@dataclass(frozen=True)
class Incident:
    """A reported odour event.

    Args:
        incident_id: Store identifier.
        status: One of open, investigating, resolved, closed.
        intensity: Reported intensity 1-5 (None when not given).
        x, y: Position as percentage of the site-map image (0-100).
        lat, lng: Absolute position, used when x/y are missing.
        site_map_id: Site map the incident was pinned on.
        occurred_at: Time of the odour event.
        description: Free-text notes.
    """

    incident_id: str
    status: str
    intensity: Optional[int] = None
    x: Optional[float] = None
    y: Optional[float] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    site_map_id: Optional[str] = None
    occurred_at: Optional[datetime] = None
    description: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_INCIDENT_STATUSES

    def map_position(self, site_map: Optional[SiteMap] = None) -> Optional[Tuple[float, float]]:
        """Percentage position on the site map, or None if it cannot be placed."""
        x, y = _finite_or_none(self.x), _finite_or_none(self.y)
        if x is not None and y is not None:
            return x, y
        lat, lng = _finite_or_none(self.lat), _finite_or_none(self.lng)
        if lat is None or lng is None:
            return None
        if site_map is None or site_map.bounds is None:
            return None
        return site_map.bounds.to_map_percent(lat, lng)

    @classmethod
    def from_record(cls, record: dict) -> "Incident":
        occurred = record.get("occurred_at") or record.get("incident_at")
        return cls(
            incident_id=str(record["id"]),
            status=str(record.get("status", "open")).lower(),
            intensity=_intensity_or_none(record.get("intensity")),
            x=_finite_or_none(record.get("position_x")),
            y=_finite_or_none(record.get("position_y")),
            lat=_finite_or_none(record.get("lat")),
            lng=_finite_or_none(record.get("lng")),
            site_map_id=record.get("site_map_id"),
            occurred_at=parse_timestamp(occurred) if occurred else None,
            description=record.get("description"),
        )


def filter_incidents(
    incidents: Iterable[Incident],
    site_map_id: Optional[str] = None,
    statuses: Optional[Sequence[str]] = None,
) -> List[Incident]:
    """Select incidents pinned on a site map and/or in the given statuses."""
    selected = []
    for incident in incidents:
        if site_map_id is not None and incident.site_map_id != site_map_id:
            continue
        if statuses is not None and incident.status not in statuses:
            continue
        selected.append(incident)
    return selected


class IncidentStore(ABC):
    """Abstract source of odour incidents."""

    @abstractmethod
    def get_incidents(
        self, site_map_id: str, statuses: Optional[Sequence[str]] = None
    ) -> List[Incident]:
        """Return incidents pinned on a site map.

        Args:
            site_map_id: Site map identifier.
            statuses: Optional whitelist of statuses.
        """
        ...


class InMemoryIncidentStore(IncidentStore):
    """Holds incidents in a list; used by the demo page and tests."""

    def __init__(self, incidents: Iterable[Incident] = ()):
        self._incidents = list(incidents)

    def add(self, incident: Incident) -> None:
        if incident.status not in INCIDENT_STATUSES:
            raise ValueError(f"Invalid incident status: {incident.status}")
        self._incidents.append(incident)

    def get_incidents(
        self, site_map_id: str, statuses: Optional[Sequence[str]] = None
    ) -> List[Incident]:
        return filter_incidents(self._incidents, site_map_id, statuses)


class FileIncidentStore(InMemoryIncidentStore):
    """Load incidents from a JSON array of incident-store rows.

    Raises:
        ValueError: If the file is not a JSON array or rows miss an id/status.
        FileNotFoundError: If the file does not exist.
    """

    _REQUIRED_KEYS = {"id", "status"}

    def __init__(self, path: str):
        with open(path) as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"Incidents file must contain a JSON array: {path}")
        for i, row in enumerate(data):
            missing = self._REQUIRED_KEYS - set(row.keys())
            if missing:
                raise ValueError(
                    f"Incident #{i} missing required keys {missing} in {path}"
                )
        super().__init__(Incident.from_record(row) for row in data)
        log.info("Loaded %d incidents from %s", len(data), path)
