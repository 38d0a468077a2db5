"""Selected location, search text and the viewport commands they produce.

Marker clicks and search-result clicks both go through ``select`` so the map
reacts the same way regardless of where the selection came from. Re-selecting
the location that is already selected does not issue another fly-to.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from location_records import LocationRecord
from location_search import filter_records, search_results
from scoring_config import FLY_DURATION_SECONDS, SELECTION_ZOOM


@dataclass(frozen=True)
class FlyTo:
    lat: float
    lon: float
    zoom: int = SELECTION_ZOOM
    duration: float = FLY_DURATION_SECONDS


@dataclass
class SelectionState:
    records: Tuple[LocationRecord, ...] = ()
    selected: Optional[LocationRecord] = None
    search_query: str = ""
    pending_fly_to: Optional[FlyTo] = None
    fly_to_count: int = field(default=0, repr=False)

    @property
    def filtered(self) -> List[LocationRecord]:
        return filter_records(self.records, self.search_query)

    @property
    def search_matches(self) -> List[LocationRecord]:
        return search_results(self.records, self.search_query)

    def is_selected(self, record: LocationRecord) -> bool:
        return record.same_location(self.selected)


def new_state(records: Sequence[LocationRecord]) -> SelectionState:
    return SelectionState(records=tuple(records))


def select(state: SelectionState, record: LocationRecord) -> bool:
    """Select ``record``; return True when a new fly-to was issued."""
    if record.same_location(state.selected):
        return False
    state.selected = record
    # A newer command replaces one that has not been rendered yet.
    state.pending_fly_to = FlyTo(lat=record.lat, lon=record.lon)
    state.fly_to_count += 1
    return True


def select_from_search(state: SelectionState, record: LocationRecord) -> bool:
    issued = select(state, record)
    state.search_query = ""
    return issued


def clear(state: SelectionState) -> None:
    state.selected = None
    state.pending_fly_to = None


def set_search(state: SelectionState, query: str) -> None:
    state.search_query = query


def take_viewport_command(state: SelectionState) -> Optional[FlyTo]:
    command = state.pending_fly_to
    state.pending_fly_to = None
    return command


def find_by_coordinates(
    records: Sequence[LocationRecord],
    lat: float,
    lon: float,
    tolerance: float = 1e-6,
    name_hint: str = "",
) -> Optional[LocationRecord]:
    """Locate the record under a clicked marker.

    Records sharing the clicked coordinates are told apart by ``name_hint``,
    the clicked marker's tooltip text, which starts with the record name.
    Without a usable hint the first record at the point wins.
    """
    candidates = [
        record
        for record in records
        if math.isclose(record.lat, lat, abs_tol=tolerance)
        and math.isclose(record.lon, lon, abs_tol=tolerance)
    ]
    if not candidates:
        return None
    hint = name_hint.strip()
    named = [record for record in candidates if hint and hint.startswith(record.name)]
    if named:
        return max(named, key=lambda record: len(record.name))
    return candidates[0]
