"""
Plume geometry for the odour incident overlay.

Turns a wind vector and stability class into a plume outline around an
incident, in render-surface units.  This is a visual approximation of
relative odour travel, not a dispersion model: the shape widens linearly
downwind at the stability class spread rate and its length grows with wind
speed up to a fixed fraction of the render scale.

Convention:
  - Wind bearing uses METEOROLOGICAL convention (direction wind comes FROM).
  - The plume travels toward the reciprocal bearing (FROM 0 = toward 180).
  - Output coordinates follow the screen: x grows right (east), y grows
    down (south), bearings clockwise from up (north).

The computation is total.  Missing or out-of-range inputs are clamped to
defaults instead of raising, since the result is only ever drawn.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from config import (
    CALM_WIND_THRESHOLD_MPS,
    BASE_PLUME_LENGTH_PCT,
    PLUME_LENGTH_PER_MPS_PCT,
    MAX_PLUME_LENGTH_FRACTION,
    PLUME_SAMPLE_STEPS,
    PLUME_WIDTH_FACTOR,
    DEFAULT_RENDER_SCALE,
    MIN_INTENSITY,
    MAX_INTENSITY,
    DEFAULT_INTENSITY,
    BASE_OPACITY,
    OPACITY_PER_INTENSITY,
    STRONG_INTENSITY,
    CALM_RADIUS_BASE,
    CALM_RADIUS_PER_INTENSITY,
)
from models.stability import StabilityProfile, get_stability_profile


@dataclass(frozen=True, eq=False)
class PlumeGeometry:
    """Oriented plume outline for one incident.

    Args:
        polygon: (N, 2) closed ring in render units, rotated and translated
            onto the source.  The first and last vertex are the source.
        outline: The same ring in the local frame (x downwind, y crosswind)
            before rotation.
        direction_deg: Bearing the plume travels toward (0-360).
        length: Downwind length in render units.
        opacity: Fill opacity derived from intensity.
        fill_color: rgba fill string derived from stability and intensity.
        stability: Profile used for the spread rate and color.
    """

    polygon: np.ndarray
    outline: np.ndarray
    direction_deg: float
    length: float
    opacity: float
    fill_color: str
    stability: StabilityProfile

    @property
    def source(self) -> Tuple[float, float]:
        return float(self.polygon[0, 0]), float(self.polygon[0, 1])


@dataclass(frozen=True)
class CalmDispersion:
    """Symmetric radial indicator drawn when the air is too calm for a direction."""

    center: Tuple[float, float]
    radius: float
    opacity: float
    fill_color: str
    stability: StabilityProfile


PlumeResult = Union[PlumeGeometry, CalmDispersion]


# ── Input clamping ──────────────────────────────────────────────────────────

def _finite_or(value, default: float) -> float:
    """Return value as float, or default when missing / NaN / inf / not numeric."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(value):
        return default
    return value


def clamp_wind_speed(wind_speed) -> float:
    """Missing, NaN or negative speeds become calm (0 m/s).

    +inf is kept: plume_length_fraction caps it at the longest plume.
    """
    try:
        value = float(wind_speed)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value):
        return 0.0
    return max(0.0, value)


def clamp_intensity(intensity) -> int:
    """Intensity on the 1-5 ordinal scale; anything else becomes the mid value."""
    value = _finite_or(intensity, float(DEFAULT_INTENSITY))
    value = int(round(value))
    if value < MIN_INTENSITY or value > MAX_INTENSITY:
        return DEFAULT_INTENSITY
    return value


def _clamp_render_scale(render_scale) -> float:
    value = _finite_or(render_scale, DEFAULT_RENDER_SCALE)
    return value if value > 0 else DEFAULT_RENDER_SCALE


def _clamp_source(source_position) -> Tuple[float, float]:
    if source_position is None:
        return 0.0, 0.0
    try:
        x, y = source_position
    except (TypeError, ValueError):
        return 0.0, 0.0
    return _finite_or(x, 0.0), _finite_or(y, 0.0)


# ── Geometry helpers ────────────────────────────────────────────────────────

def travel_bearing(wind_bearing_from) -> float:
    """Reciprocal of a meteorological FROM bearing, wrapped into [0, 360)."""
    return (_finite_or(wind_bearing_from, 0.0) + 180.0) % 360.0


def plume_length_fraction(wind_speed) -> float:
    """Plume length as a fraction of the render scale (monotonic, capped)."""
    speed = clamp_wind_speed(wind_speed)
    pct = BASE_PLUME_LENGTH_PCT + PLUME_LENGTH_PER_MPS_PCT * speed
    return min(MAX_PLUME_LENGTH_FRACTION, pct / 100.0)


def intensity_opacity(intensity) -> float:
    return BASE_OPACITY + (clamp_intensity(intensity) / MAX_INTENSITY) * OPACITY_PER_INTENSITY


def plume_outline(
    spread_rate: float,
    length: float,
    steps: int = PLUME_SAMPLE_STEPS,
) -> np.ndarray:
    """
    Build the unrotated plume ring in the local frame.

    The top edge (negative crosswind) is emitted outbound from the source,
    then the bottom edge inbound, so the ring starts and ends on the source.

    Args:
        spread_rate: Stability class lateral growth coefficient.
        length: Downwind length in render units.
        steps: Number of downwind sample intervals.

    Returns:
        (2 * (steps + 1), 2) array of [downwind, crosswind] vertices.
    """
    x = np.linspace(0.0, length, steps + 1)
    half_width = spread_rate * x * PLUME_WIDTH_FACTOR

    top = np.column_stack([x, -half_width])
    bottom = np.column_stack([x[::-1], half_width[::-1]])
    return np.vstack([top, bottom])


def rotate_to_bearing(
    outline: np.ndarray,
    bearing_deg: float,
    origin: Tuple[float, float],
) -> np.ndarray:
    """
    Rotate a local-frame outline onto a bearing and translate it to origin.

    Downwind unit vector on screen is (sin b, -cos b); the crosswind axis is
    (cos b, sin b), i.e. 90 degrees clockwise from downwind.
    """
    rad = np.radians(bearing_deg)
    downwind = np.array([np.sin(rad), -np.cos(rad)])
    crosswind = np.array([np.cos(rad), np.sin(rad)])

    along = outline[:, 0:1] * downwind
    across = outline[:, 1:2] * crosswind
    return along + across + np.asarray(origin, dtype=float)


def fill_color_for(stability: StabilityProfile, intensity: int, opacity: float) -> str:
    if intensity >= STRONG_INTENSITY:
        return stability.rgba(opacity)
    return stability.display_color


# ── Public API ──────────────────────────────────────────────────────────────

def compute_plume(
    source_position: Optional[Sequence[float]],
    wind_bearing_from: Optional[float],
    wind_speed: Optional[float],
    stability_class: Optional[str],
    intensity: Optional[float] = DEFAULT_INTENSITY,
    render_scale: Optional[float] = DEFAULT_RENDER_SCALE,
) -> PlumeResult:
    """
    Compute the plume overlay for one incident.

    Args:
        source_position: (x, y) of the incident in render units.
        wind_bearing_from: Meteorological wind direction (degrees, 0=N, 90=E).
        wind_speed: Wind speed in m/s.
        stability_class: Pasquill-Gifford class A-F.
        intensity: Reported intensity 1-5; affects opacity and color only.
        render_scale: Current container width in render units.

    Returns:
        PlumeGeometry for directional wind, CalmDispersion when the wind
        speed is below the calm threshold.
    """
    source = _clamp_source(source_position)
    speed = clamp_wind_speed(wind_speed)
    level = clamp_intensity(intensity)
    scale = _clamp_render_scale(render_scale)
    stability = get_stability_profile(stability_class)
    opacity = intensity_opacity(level)

    if speed < CALM_WIND_THRESHOLD_MPS:
        return CalmDispersion(
            center=source,
            radius=CALM_RADIUS_BASE + CALM_RADIUS_PER_INTENSITY * level,
            opacity=opacity,
            fill_color=stability.display_color,
            stability=stability,
        )

    direction = travel_bearing(wind_bearing_from)
    length = plume_length_fraction(speed) * scale
    outline = plume_outline(stability.spread_rate, length)
    polygon = rotate_to_bearing(outline, direction, source)

    return PlumeGeometry(
        polygon=polygon,
        outline=outline,
        direction_deg=direction,
        length=length,
        opacity=opacity,
        fill_color=fill_color_for(stability, level, opacity),
        stability=stability,
    )
