"""Typed location records and the row normalizer that produces them."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from column_resolver import POLLUTANT_ROLES, ColumnRoles
from dataset_errors import EmptyDatasetError

POLLUTANT_LABELS: Dict[str, Tuple[str, str]] = {
    "pm25": ("PM2.5", "µg/m³"),
    "pm10": ("PM10", "µg/m³"),
    "aqi": ("AQI", ""),
    "no2": ("NO₂", "ppb"),
    "o3": ("O₃", "ppb"),
    "so2": ("SO₂", "ppb"),
}


@dataclass(frozen=True)
class LocationRecord:
    name: str
    lat: float
    lon: float
    score: float
    pm25: Optional[float] = None
    pm10: Optional[float] = None
    aqi: Optional[float] = None
    no2: Optional[float] = None
    o3: Optional[float] = None
    so2: Optional[float] = None

    @property
    def key(self) -> Tuple[str, float, float]:
        return self.name, self.lat, self.lon

    def same_location(self, other: Optional["LocationRecord"]) -> bool:
        return other is not None and self.key == other.key

    def pollutant_readings(self) -> List[Tuple[str, float, str]]:
        """(label, value, unit) for every pollutant reading present."""
        readings = []
        for role in POLLUTANT_ROLES:
            value = getattr(self, role)
            if value is not None:
                label, unit = POLLUTANT_LABELS[role]
                readings.append((label, value, unit))
        return readings

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def to_float(value: object) -> float:
    """Best-effort numeric coercion; unparseable or absent values become NaN."""
    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return math.nan
    try:
        return float(text)
    except ValueError:
        return math.nan


def _optional_reading(value: object) -> Optional[float]:
    # Zero, negative and unparseable readings are all reported as absent.
    number = to_float(value)
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def _display_name(value: object, position: int) -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return f"Location {position}"
    text = str(value).strip()
    return text or f"Location {position}"


def normalize_row(
    row: Mapping[str, object],
    roles: ColumnRoles,
    position: int,
) -> Optional[LocationRecord]:
    lat = to_float(row.get(roles.latitude))
    lon = to_float(row.get(roles.longitude))
    score = to_float(row.get(roles.score))
    if not (math.isfinite(lat) and math.isfinite(lon) and math.isfinite(score)):
        return None

    if roles.name is not None:
        name = _display_name(row.get(roles.name), position)
    else:
        name = f"Location {position}"

    readings = {
        role: _optional_reading(row.get(column))
        for role, column in roles.pollutant_columns().items()
    }
    return LocationRecord(name=name, lat=lat, lon=lon, score=score, **readings)


def normalize_rows(
    rows: Iterable[Mapping[str, object]],
    roles: ColumnRoles,
) -> List[LocationRecord]:
    """Convert raw rows into records, silently dropping invalid rows.

    Placeholder names use the 1-based position of the row in the input,
    counting rows that were dropped.
    """
    records: List[LocationRecord] = []
    for index, row in enumerate(rows):
        record = normalize_row(row, roles, position=index + 1)
        if record is not None:
            records.append(record)

    if not records:
        raise EmptyDatasetError()
    return records
