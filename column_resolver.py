"""Heuristic column-role resolution for loosely labeled air-quality tables.

Each role is matched against the dataset's column names with an ordered list
of pattern groups. Within a group the first column (in table order) matching
any of the group's patterns wins; later groups are only consulted when an
earlier group found nothing, which is how ``name`` prefers a station column
over city or district columns.

Roles are resolved independently, so ``score`` and ``aqi`` can point at the
same physical column when the table has no better score column.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import Dict, List, Optional, Sequence, Tuple

from dataset_errors import SchemaError

REQUIRED_ROLES: Tuple[str, ...] = ("latitude", "longitude", "score")
POLLUTANT_ROLES: Tuple[str, ...] = ("pm25", "pm10", "aqi", "no2", "o3", "so2")


def _patterns(*expressions: str) -> Tuple[re.Pattern[str], ...]:
    return tuple(re.compile(expression, re.IGNORECASE) for expression in expressions)


ROLE_PATTERNS: Tuple[Tuple[str, Tuple[Tuple[re.Pattern[str], ...], ...]], ...] = (
    ("latitude", (_patterns(r"lat", r"latitude"),)),
    ("longitude", (_patterns(r"lon", r"lng", r"long", r"longitude"),)),
    ("score", (_patterns(r"score", r"sustain", r"index", r"aqi"),)),
    (
        "name",
        (
            _patterns(r"station"),
            _patterns(r"city", r"location", r"region", r"district"),
        ),
    ),
    ("pm25", (_patterns(r"pm2\.5|pm25|pm2_5"),)),
    ("pm10", (_patterns(r"pm10|pm_10"),)),
    ("aqi", (_patterns(r"^aqi$|air.*quality.*index"),)),
    ("no2", (_patterns(r"no2|nitrogen"),)),
    ("o3", (_patterns(r"o3|ozone"),)),
    ("so2", (_patterns(r"so2|sulfur"),)),
)


@dataclass(frozen=True)
class ColumnRoles:
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    score: Optional[str] = None
    name: Optional[str] = None
    pm25: Optional[str] = None
    pm10: Optional[str] = None
    aqi: Optional[str] = None
    no2: Optional[str] = None
    o3: Optional[str] = None
    so2: Optional[str] = None

    def as_dict(self) -> Dict[str, Optional[str]]:
        return {item.name: getattr(self, item.name) for item in fields(self)}

    def pollutant_columns(self) -> Dict[str, str]:
        """Resolved pollutant roles only, keyed by role."""
        resolved = {role: getattr(self, role) for role in POLLUTANT_ROLES}
        return {role: column for role, column in resolved.items() if column is not None}

    def missing_required(self) -> List[str]:
        return [role for role in REQUIRED_ROLES if getattr(self, role) is None]


def find_column(
    columns: Sequence[str],
    patterns: Sequence[re.Pattern[str]],
) -> Optional[str]:
    for column in columns:
        if any(pattern.search(column) for pattern in patterns):
            return column
    return None


def resolve_columns(columns: Sequence[str]) -> ColumnRoles:
    """Map every semantic role to a column name.

    Raises SchemaError when latitude, longitude or score cannot be resolved.
    """
    names = [str(column) for column in columns]
    resolved: Dict[str, Optional[str]] = {}
    for role, groups in ROLE_PATTERNS:
        match = None
        for group in groups:
            match = find_column(names, group)
            if match is not None:
                break
        resolved[role] = match

    roles = ColumnRoles(**resolved)
    missing = roles.missing_required()
    if missing:
        raise SchemaError(missing_roles=tuple(missing))
    return roles
