"""
Global configuration and constants for the Odour Plume Playback system.
"""

# --- Pasquill-Gifford Stability Profiles ---
# Lateral spread rate (dimensionless growth of half-width per unit downwind
# distance), display color (RGB) and operator-facing label per class.
# Spread rates must stay strictly decreasing from A to F.
STABILITY_PROFILES = {
    "A": {"spread_rate": 0.22, "color": (239, 68, 68), "label": "Very Unstable"},
    "B": {"spread_rate": 0.16, "color": (249, 115, 22), "label": "Unstable"},
    "C": {"spread_rate": 0.11, "color": (234, 179, 8), "label": "Slightly Unstable"},
    "D": {"spread_rate": 0.08, "color": (156, 163, 175), "label": "Neutral"},
    "E": {"spread_rate": 0.06, "color": (59, 130, 246), "label": "Slightly Stable"},
    "F": {"spread_rate": 0.04, "color": (99, 102, 241), "label": "Stable"},
}
DEFAULT_STABILITY_CLASS = "D"  # Neutral, used for unknown classifications
STABILITY_BASE_ALPHA = 0.3     # Alpha of the plain stability fill color

# --- Plume Geometry ---
CALM_WIND_THRESHOLD_MPS = 0.5     # Below this no directional plume is drawn
BASE_PLUME_LENGTH_PCT = 15.0      # Plume length at 0 m/s, % of render scale
PLUME_LENGTH_PER_MPS_PCT = 5.0    # Additional length per m/s, % of render scale
MAX_PLUME_LENGTH_FRACTION = 0.60  # Hard cap on plume length (fraction of render scale)
PLUME_SAMPLE_STEPS = 20           # Downwind samples per plume edge (>= 16)
PLUME_WIDTH_FACTOR = 2.5          # Half-width = spread_rate * distance * factor
DEFAULT_RENDER_SCALE = 800.0      # Container width (px) when none is supplied

# --- Intensity / Opacity ---
MIN_INTENSITY = 1
MAX_INTENSITY = 5
DEFAULT_INTENSITY = 3             # Mid-scale value for missing / invalid intensity
BASE_OPACITY = 0.15               # Opacity at intensity 0
OPACITY_PER_INTENSITY = 0.35      # Added opacity at full intensity
STRONG_INTENSITY = 4              # At or above this the fill alpha follows opacity

# --- Calm-Air Indicator ---
CALM_RADIUS_BASE = 20.0           # Radius (px) of the radial indicator at intensity 0
CALM_RADIUS_PER_INTENSITY = 5.0   # Extra radius (px) per intensity step

# --- Playback ---
PLAYBACK_TICK_MS = 1500.0              # Auto-advance cadence at 1x
PLAYBACK_SPEEDS = (0.5, 1.0, 2.0, 4.0)
DEFAULT_PLAYBACK_SPEED = 1.0
HISTORY_LOOKBACK_HOURS = 48            # Weather history window requested by the map view

# --- Incidents ---
ACTIVE_INCIDENT_STATUSES = ("open", "investigating")
INCIDENT_STATUSES = ("open", "investigating", "resolved", "closed")
RECENT_INCIDENT_DAYS = 7          # Closed incidents stay visible as markers this long

# Marker colors keyed by severity bucket
MARKER_COLORS = {
    "closed": "#22c55e",    # resolved / closed
    "strong": "#ef4444",    # intensity >= 4
    "moderate": "#eab308",  # intensity >= 3
    "weak": "#f97316",      # everything else
}

# --- Demo Site ---
DEFAULT_SITE_ID = "demo-site"
DEFAULT_SITE_MAP_ID = "demo-map"
STUB_STATION_ID = "STUB-001"
