"""
Pasquill-Gifford stability lookup for the odour plume overlay.

A closed, immutable table keyed by the six class tags A-F.  Every lookup is
total: lower-case tags are normalized and anything unrecognized resolves to
the neutral class D.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from config import STABILITY_PROFILES, DEFAULT_STABILITY_CLASS, STABILITY_BASE_ALPHA

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StabilityProfile:
    """Display and spread parameters for one stability class.

    Args:
        code: Class tag, one of A-F.
        spread_rate: Lateral growth coefficient (half-width per unit distance).
        color: RGB triple used for plume fills.
        label: Human-readable description of the class.
    """

    code: str
    spread_rate: float
    color: Tuple[int, int, int]
    label: str

    def rgba(self, alpha: float = STABILITY_BASE_ALPHA) -> str:
        """CSS/plotly color string for this class at the given alpha."""
        r, g, b = self.color
        return f"rgba({r}, {g}, {b}, {alpha:g})"

    @property
    def display_color(self) -> str:
        return self.rgba()


STABILITY_TABLE: Mapping[str, StabilityProfile] = MappingProxyType({
    code: StabilityProfile(
        code=code,
        spread_rate=params["spread_rate"],
        color=tuple(params["color"]),
        label=params["label"],
    )
    for code, params in STABILITY_PROFILES.items()
})

STABILITY_CLASSES: Tuple[str, ...] = tuple(STABILITY_TABLE)

_COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)


def normalize_stability_class(stability_class: Optional[str]) -> str:
    """Return a valid class tag, falling back to the neutral class."""
    if isinstance(stability_class, str):
        code = stability_class.strip().upper()
        if code in STABILITY_TABLE:
            return code
    log.debug(
        "Unknown stability class %r, using %s", stability_class, DEFAULT_STABILITY_CLASS
    )
    return DEFAULT_STABILITY_CLASS


def get_stability_profile(stability_class: Optional[str]) -> StabilityProfile:
    """Look up the profile for a class tag (never raises)."""
    return STABILITY_TABLE[normalize_stability_class(stability_class)]


def compass_point(bearing_deg: float) -> str:
    """Name of the 16-point compass sector containing a bearing."""
    index = int(round((bearing_deg % 360.0) / 22.5)) % 16
    return _COMPASS_POINTS[index]


def dispersion_outlook(stability_class: Optional[str]) -> Tuple[str, str]:
    """
    Summarize how readily odour disperses under a stability class.

    Returns:
        (rating, description) where rating is 'good', 'moderate' or 'poor'.
    """
    code = normalize_stability_class(stability_class)
    if code <= "C":
        return "good", "Good dispersion conditions"
    if code >= "E":
        return "poor", "Poor dispersion - odour may linger"
    return "moderate", "Moderate dispersion conditions"


def stability_legend(alpha: float = 0.7) -> List[Tuple[str, str, str]]:
    """Ordered (code, label, color) entries for a map legend."""
    return [(p.code, p.label, p.rgba(alpha)) for p in STABILITY_TABLE.values()]
