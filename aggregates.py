"""Dataset-level summaries used for the initial viewport and legend."""

from __future__ import annotations

from typing import Dict, Sequence, Tuple

from location_records import LocationRecord
from score_classifier import score_tier
from scoring_config import DEFAULT_CENTER, TIER_LABELS


def centroid(records: Sequence[LocationRecord]) -> Tuple[float, float]:
    if not records:
        return DEFAULT_CENTER
    lat = sum(record.lat for record in records) / len(records)
    lon = sum(record.lon for record in records) / len(records)
    return lat, lon


def tier_counts(records: Sequence[LocationRecord]) -> Dict[str, int]:
    counts = {label: 0 for label in TIER_LABELS}
    for record in records:
        counts[score_tier(record.score)] += 1
    return counts
