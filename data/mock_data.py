"""
Mock Data for the Odour Plume Playback system.

Provides a synthetic treatment-plant site map and a handful of odour
incidents.  Designed to be swapped out for the real incident store later.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from config import DEFAULT_SITE_ID, DEFAULT_SITE_MAP_ID
from data.incidents import GeoBounds, Incident, SiteMap


def get_demo_site_map() -> SiteMap:
    """
    Return the demo site map.

    The bounds cover roughly 500 m x 500 m around a fictional plant so that
    incidents recorded by GPS can be placed on the image.
    """
    return SiteMap(
        site_map_id=DEFAULT_SITE_MAP_ID,
        site_id=DEFAULT_SITE_ID,
        name="Main Treatment Works",
        image_url=None,
        bounds=GeoBounds(north=-36.8460, south=-36.8505, east=174.7680, west=174.7624),
    )


def get_demo_incidents(now: Optional[datetime] = None) -> List[Incident]:
    """
    Return a mix of incidents in every status.

    Returns:
        List of Incident; two are active, one was resolved recently, one was
        closed long ago and one was recorded by lat/lng only.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    return [
        Incident(
            incident_id="INC-101",
            status="open",
            intensity=4,
            x=42.0,
            y=38.0,
            site_map_id=DEFAULT_SITE_MAP_ID,
            occurred_at=now - timedelta(hours=3),
            description="Strong sulfide smell near inlet works",
        ),
        Incident(
            incident_id="INC-102",
            status="investigating",
            intensity=2,
            x=68.0,
            y=61.0,
            site_map_id=DEFAULT_SITE_MAP_ID,
            occurred_at=now - timedelta(hours=20),
            description="Faint septic odour at sludge thickener",
        ),
        Incident(
            incident_id="INC-103",
            status="open",
            intensity=3,
            lat=-36.8490,
            lng=174.7640,
            site_map_id=DEFAULT_SITE_MAP_ID,
            occurred_at=now - timedelta(hours=1),
            description="Reported by neighbour via phone",
        ),
        Incident(
            incident_id="INC-090",
            status="resolved",
            intensity=5,
            x=25.0,
            y=72.0,
            site_map_id=DEFAULT_SITE_MAP_ID,
            occurred_at=now - timedelta(days=2),
            description="Digester relief valve, repaired",
        ),
        Incident(
            incident_id="INC-051",
            status="closed",
            intensity=3,
            x=80.0,
            y=20.0,
            site_map_id=DEFAULT_SITE_MAP_ID,
            occurred_at=now - timedelta(days=30),
        ),
    ]
