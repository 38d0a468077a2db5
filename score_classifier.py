"""Score -> status tier, marker color and advisory text."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple, Union

from location_records import LocationRecord
from scoring_config import (
    GOOD_THRESHOLD,
    MARKER_BANDS,
    MARKER_PALETTES,
    MODERATE_THRESHOLD,
    SCORE_MAX,
    SCORE_MIN,
    STATUS_MESSAGES,
    STATUS_STYLES,
)

STOPS_PER_TIER = 4


@dataclass(frozen=True)
class ScoreStatus:
    label: str
    class_name: str
    color: str


def score_tier(score: float) -> str:
    if score >= GOOD_THRESHOLD:
        return "Good"
    if score >= MODERATE_THRESHOLD:
        return "Moderate"
    return "Critical"


def classify_score(score: float) -> ScoreStatus:
    label = score_tier(score)
    class_name, color = STATUS_STYLES[label]
    return ScoreStatus(label=label, class_name=class_name, color=color)


def marker_stop_index(score: float) -> Tuple[str, int]:
    """Return the palette tier and the discrete stop index for a score.

    The score is clamped to [0, 100] first, so out-of-range scores land on the
    outermost stops of the Good or Critical palettes.
    """
    if math.isnan(score):
        score = SCORE_MIN
    clamped = max(SCORE_MIN, min(SCORE_MAX, score))
    normalized = clamped / SCORE_MAX

    for tier, floor, width in MARKER_BANDS:
        if normalized >= floor:
            break
    intensity = (normalized - floor) / width

    index = int(math.floor(intensity * (STOPS_PER_TIER - 1)))
    return tier, max(0, min(STOPS_PER_TIER - 1, index))


def marker_color(score: float) -> str:
    tier, index = marker_stop_index(score)
    return MARKER_PALETTES[tier][index]


def status_breakdown_text(subject: Union[LocationRecord, float]) -> str:
    score = subject.score if isinstance(subject, LocationRecord) else float(subject)
    return STATUS_MESSAGES[score_tier(score)]
