"""Shared tier thresholds, palettes and map viewport settings."""

from __future__ import annotations

from typing import Dict, Tuple

GOOD_THRESHOLD = 70.0
MODERATE_THRESHOLD = 40.0
SCORE_MIN = 0.0
SCORE_MAX = 100.0

TIER_LABELS = ("Good", "Moderate", "Critical")

# label -> (css class name, legend color)
STATUS_STYLES: Dict[str, Tuple[str, str]] = {
    "Good": ("good", "#10b981"),
    "Moderate": ("moderate", "#fbbf24"),
    "Critical": ("critical", "#f87171"),
}

# Four stops per tier, lightest first.
MARKER_PALETTES: Dict[str, Tuple[str, str, str, str]] = {
    "Good": ("#10b981", "#059669", "#047857", "#065f46"),
    "Moderate": ("#fbbf24", "#f59e0b", "#d97706", "#b45309"),
    "Critical": ("#ef4444", "#dc2626", "#991b1b", "#7f1d1d"),
}

# (tier, normalized band floor, band width) for marker gradients, highest first.
MARKER_BANDS: Tuple[Tuple[str, float, float], ...] = (
    ("Good", 0.7, 0.3),
    ("Moderate", 0.4, 0.3),
    ("Critical", 0.0, 0.4),
)

STATUS_MESSAGES: Dict[str, str] = {
    "Good": "This location has excellent ecological health",
    "Moderate": "This location needs environmental monitoring",
    "Critical": "This location requires immediate attention",
}

LEGEND_RANGES: Dict[str, str] = {
    "Good": "70+",
    "Moderate": "40-69",
    "Critical": "< 40",
}

DEFAULT_CENTER: Tuple[float, float] = (20.5937, 78.9629)
MAP_BOUNDS: Tuple[Tuple[float, float], Tuple[float, float]] = ((6.5, 68.0), (37.5, 97.5))
INITIAL_ZOOM = 5
MIN_ZOOM = 4
MAX_ZOOM = 9
SELECTION_ZOOM = 8
FLY_DURATION_SECONDS = 1.5
