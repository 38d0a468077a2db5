from __future__ import annotations

import os
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd
import streamlit as st
import streamlit.runtime as st_runtime
from streamlit_folium import st_folium

from aggregates import centroid, tier_counts
from dataset_loader import DEFAULT_DATASET_PATH, LoadResult, load_dataset
from location_records import LocationRecord
from score_classifier import classify_score, status_breakdown_text
from scoring_config import INITIAL_ZOOM
from selection_state import (
    SelectionState,
    clear,
    find_by_coordinates,
    new_state,
    select,
    select_from_search,
    set_search,
    take_viewport_command,
)
from sustainability_map import build_sustainability_map

DATASET_ENV_VAR = "SUSTAINABILITY_DATASET"
MAP_HEIGHT = 620
STATUS_ICONS = {"Good": "✓", "Moderate": "⚠", "Critical": "✕"}

DEFAULT_UI_STATE = {
    "search_query": "",
    "last_marker_click": None,
    "map_generation": 0,
}


def _initialize_ui_state() -> None:
    for key, value in DEFAULT_UI_STATE.items():
        st.session_state.setdefault(key, value)


def _streamlit_runtime_exists() -> bool:
    try:
        return bool(st_runtime.exists())
    except Exception:
        return False


def _cache_data_passthrough(*_args, **_kwargs):
    def decorator(func):
        return func

    return decorator


def _safe_cache_data(*args, **kwargs):
    if _streamlit_runtime_exists():
        return st.cache_data(*args, **kwargs)
    return _cache_data_passthrough(*args, **kwargs)


@_safe_cache_data(show_spinner=False)
def load_cached_dataset(source: str) -> LoadResult:
    return load_dataset(source)


def dataset_source() -> str:
    return os.environ.get(DATASET_ENV_VAR, str(DEFAULT_DATASET_PATH))


def _search_label(record: LocationRecord) -> str:
    return f"{record.name} — Score: {record.score:.1f}"


def _detail_rows(record: LocationRecord) -> List[Tuple[str, str]]:
    status = classify_score(record.score)
    rows = [
        ("Sustainability Score", f"{record.score:.1f}"),
        ("Status", status.label),
        ("Coordinates", f"{record.lat:.2f}°, {record.lon:.2f}°"),
    ]
    for label, value, unit in record.pollutant_readings():
        rows.append((label, f"{value:.1f} {unit}".strip()))
    return rows


def _records_frame(records: Sequence[LocationRecord]) -> pd.DataFrame:
    rows = []
    for record in records:
        row = record.to_dict()
        row["status"] = classify_score(record.score).label
        rows.append(row)
    return pd.DataFrame(rows)


def handle_marker_click(
    state: SelectionState,
    clicked: Optional[Mapping[str, float]],
    last_click: Optional[Tuple[float, float]],
    tooltip: str = "",
) -> Optional[Tuple[float, float]]:
    """Select the location under a marker click.

    The map component keeps reporting its most recent click on every rerun.
    A report matching ``last_click`` is only skipped while the location at
    that point is still the selection; after a close or a search pick the
    same marker selects again. Returns the click coordinates to remember for
    the next run.
    """
    if not clicked:
        return last_click
    point = (float(clicked["lat"]), float(clicked["lng"]))
    record = find_by_coordinates(state.records, point[0], point[1], name_hint=tooltip or "")
    if record is None:
        return point
    if point == last_click and record.same_location(state.selected):
        return last_click
    select(state, record)
    return point


def _selection_state(records: Sequence[LocationRecord]) -> SelectionState:
    state = st.session_state.get("selection")
    if not isinstance(state, SelectionState) or state.records != tuple(records):
        state = new_state(records)
        st.session_state["selection"] = state
        st.session_state["map_view"] = (centroid(records), INITIAL_ZOOM)
    return state


def _reset_marker_click() -> None:
    # A fresh map key drops the click the old component keeps reporting.
    st.session_state["last_marker_click"] = None
    st.session_state["map_generation"] = st.session_state.get("map_generation", 0) + 1


def _on_search_pick(record: LocationRecord) -> None:
    select_from_search(st.session_state["selection"], record)
    st.session_state["search_query"] = ""
    _reset_marker_click()


def _on_clear_selection() -> None:
    clear(st.session_state["selection"])
    _reset_marker_click()


def _on_clear_search() -> None:
    st.session_state["search_query"] = ""


def _render_search(state: SelectionState) -> None:
    search_col, clear_col = st.columns([5, 1])
    with search_col:
        query = st.text_input(
            "Search location",
            placeholder="Search location by city name...",
            key="search_query",
            label_visibility="collapsed",
        )
    with clear_col:
        st.button("✕", on_click=_on_clear_search, disabled=not query, help="Clear search")
    set_search(state, query)

    if not query:
        return
    matches = state.search_matches
    if not matches:
        st.caption("No locations found")
        return
    for index, record in enumerate(matches):
        st.button(
            _search_label(record),
            key=f"search_pick_{index}",
            on_click=_on_search_pick,
            args=(record,),
            use_container_width=True,
        )


def _render_legend(counts: Dict[str, int]) -> None:
    col1, col2, col3 = st.columns(3)
    col1.metric("Good (70+)", f"{counts['Good']:,}")
    col2.metric("Moderate (40-69)", f"{counts['Moderate']:,}")
    col3.metric("Critical (< 40)", f"{counts['Critical']:,}")


def _render_details(state: SelectionState) -> None:
    record = state.selected
    if record is None:
        st.subheader("Select a Location")
        st.write(
            "Click on any marker on the map to view its sustainability analytics and details."
        )
        return

    title_col, close_col = st.columns([4, 1])
    with title_col:
        st.subheader(record.name)
    with close_col:
        st.button("✕", key="close_details", on_click=_on_clear_selection, help="Close")

    rows = _detail_rows(record)
    for label, value in rows[:3]:
        st.markdown(f"**{label}:** {value}")

    st.markdown("#### Air Quality Metrics")
    if len(rows) == 3:
        st.caption("No air quality metrics reported for this location.")
    for label, value in rows[3:]:
        st.markdown(f"**{label}:** {value}")

    st.markdown("#### Status Breakdown")
    label = classify_score(record.score).label
    message = f"{STATUS_ICONS[label]} {status_breakdown_text(record)}"
    if label == "Good":
        st.success(message)
    elif label == "Moderate":
        st.warning(message)
    else:
        st.error(message)


def _render_map(state: SelectionState) -> None:
    view_center, view_zoom = st.session_state["map_view"]
    command = take_viewport_command(state)
    eco_map = build_sustainability_map(
        records=state.filtered,
        selected=state.selected,
        center=view_center,
        zoom=view_zoom,
        fly_to=command,
        legend_records=state.records,
    )
    if command is not None:
        st.session_state["map_view"] = ((command.lat, command.lon), command.zoom)

    map_state = st_folium(
        eco_map,
        key=f"sustainability_map_{st.session_state.get('map_generation', 0)}",
        height=MAP_HEIGHT,
        use_container_width=True,
        returned_objects=["last_object_clicked", "last_object_clicked_tooltip"],
    )
    map_state = map_state or {}
    last_click = st.session_state.get("last_marker_click")
    st.session_state["last_marker_click"] = handle_marker_click(
        state,
        map_state.get("last_object_clicked"),
        last_click,
        tooltip=map_state.get("last_object_clicked_tooltip") or "",
    )
    if state.pending_fly_to is not None:
        st.rerun()


def app() -> None:
    st.set_page_config(
        page_title="Ecological Map",
        page_icon=":earth_asia:",
        layout="wide",
    )

    st.title("Ecological Map")
    st.caption(
        "India's sustainability landscape. Each marker represents a location's "
        "ecological health status."
    )
    _initialize_ui_state()

    source = dataset_source()
    with st.spinner("Loading dataset..."):
        loaded = load_cached_dataset(source)

    if not loaded.ok:
        st.error(loaded.error)

    state = _selection_state(loaded.records)
    map_col, info_col = st.columns([2, 1])

    with map_col:
        _render_search(state)
        _render_map(state)
        _render_legend(tier_counts(state.records))

    with info_col:
        _render_details(state)

    if state.records:
        filtered = state.filtered
        st.download_button(
            label="Download Filtered Locations CSV",
            data=_records_frame(filtered).to_csv(index=False).encode("utf-8"),
            file_name="sustainability_locations.csv",
            mime="text/csv",
        )


if __name__ == "__main__":
    if not _streamlit_runtime_exists():
        raise SystemExit("Run this UI with: python3 -m streamlit run app.py")
    app()
