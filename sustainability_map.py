"""Folium rendering of scored locations.

Markers are colored with the discrete tier palettes, the selected marker is
drawn larger, and a pending fly-to command is emitted as a one-shot script so
the viewport animates to the newly selected location.
"""

from __future__ import annotations

import html
from typing import Dict, Optional, Sequence, Tuple

try:
    import folium
    from branca.element import MacroElement, Template
    from folium import plugins
except ImportError as exc:
    raise SystemExit(
        "Folium dependencies are missing. Run: pip3 install -e ."
    ) from exc

from aggregates import centroid, tier_counts
from location_records import LocationRecord
from score_classifier import classify_score, marker_color
from scoring_config import (
    INITIAL_ZOOM,
    LEGEND_RANGES,
    MAP_BOUNDS,
    MAX_ZOOM,
    MIN_ZOOM,
    STATUS_STYLES,
    TIER_LABELS,
)
from selection_state import FlyTo

SELECTED_MARKER_STYLE = {"radius": 12, "weight": 3, "fill_opacity": 0.9}
MARKER_STYLE = {"radius": 8, "weight": 2, "fill_opacity": 0.6}


def _location_popup(record: LocationRecord) -> str:
    status = classify_score(record.score)
    metric_lines = "".join(
        f"<b>{html.escape(label)}:</b> {value:.1f}{' ' + unit if unit else ''}<br>"
        for label, value, unit in record.pollutant_readings()
    )
    if not metric_lines:
        metric_lines = "<i>No air quality metrics reported</i><br>"
    return f"""
    <div style="min-width:220px;font-family:Arial,sans-serif;">
      <h4 style="margin:0 0 8px 0;">{html.escape(record.name)}</h4>
      <div style="font-size:13px;line-height:1.35;">
        <b>Sustainability Score:</b> {record.score:.1f}/100<br>
        <b>Status:</b> <span style="color:{status.color};">{status.label}</span><br>
        <b>Coordinates:</b> {record.lat:.2f}&deg;, {record.lon:.2f}&deg;<br><hr style="margin:8px 0;">
        {metric_lines}
      </div>
    </div>
    """


def _location_tooltip(record: LocationRecord) -> str:
    status = classify_score(record.score)
    return (
        f"<strong>{html.escape(record.name)}</strong><br>"
        f"Score: {record.score:.1f} / 100<br>"
        f"Status: {status.label}<br>"
        "<small>Click for details</small>"
    )


def _add_script(map_object: folium.Map, script: str) -> None:
    template = Template(
        f"""
        {{% macro script(this, kwargs) %}}
        {script}
        {{% endmacro %}}
        """
    )
    macro = MacroElement()
    macro._template = template
    map_object.add_child(macro)


def _add_zoom_control(map_object: folium.Map) -> None:
    _add_script(
        map_object,
        f"L.control.zoom({{position: 'bottomright'}}).addTo({map_object.get_name()});",
    )


def _add_fly_to(map_object: folium.Map, command: FlyTo) -> None:
    _add_script(
        map_object,
        (
            f"{map_object.get_name()}.flyTo("
            f"[{command.lat}, {command.lon}], {command.zoom}, "
            f"{{duration: {command.duration}}});"
        ),
    )


def _add_legend(map_object: folium.Map, counts: Dict[str, int]) -> None:
    items = "".join(
        (
            f'<li><span class="legend-dot" style="background:{STATUS_STYLES[label][1]};"></span>'
            f"<span>{label} ({html.escape(LEGEND_RANGES[label])})</span>"
            f"<strong>{counts.get(label, 0):,}</strong></li>"
        )
        for label in TIER_LABELS
    )
    total = sum(counts.values())

    template = Template(
        f"""
        {{% macro html(this, kwargs) %}}
        <style>
          #eco-legend {{
            position: fixed;
            bottom: 18px;
            left: 18px;
            z-index: 9999;
            width: 240px;
            background: rgba(255, 255, 255, 0.96);
            border-radius: 10px;
            border: 1px solid #d6dde8;
            box-shadow: 0 8px 20px rgba(10, 25, 47, 0.15);
            padding: 12px;
            font-family: Arial, sans-serif;
          }}
          #eco-legend h3 {{
            margin: 0 0 6px 0;
            font-size: 15px;
            color: #0f172a;
          }}
          #eco-legend p {{
            margin: 0 0 6px 0;
            font-size: 12px;
            color: #334155;
          }}
          #eco-legend ul {{
            list-style: none;
            margin: 0;
            padding: 0;
          }}
          #eco-legend li {{
            display: flex;
            justify-content: space-between;
            align-items: center;
            font-size: 13px;
            padding: 3px 0;
            color: #1f2937;
          }}
          #eco-legend .legend-dot {{
            display: inline-block;
            width: 10px;
            height: 10px;
            border-radius: 50%;
            margin-right: 6px;
          }}
        </style>
        <div id="eco-legend">
          <h3>Ecological Map</h3>
          <p>Locations: {total:,}</p>
          <ul>{items}</ul>
        </div>
        {{% endmacro %}}
        """
    )

    macro = MacroElement()
    macro._template = template
    map_object.get_root().add_child(macro)


def build_sustainability_map(
    records: Sequence[LocationRecord],
    selected: Optional[LocationRecord] = None,
    center: Optional[Tuple[float, float]] = None,
    zoom: int = INITIAL_ZOOM,
    fly_to: Optional[FlyTo] = None,
    legend_records: Optional[Sequence[LocationRecord]] = None,
) -> folium.Map:
    """Render ``records`` as circle markers.

    ``legend_records`` feeds the tier counts in the legend and defaults to the
    rendered records; pass the full dataset to keep the counts stable while a
    search filter is active.
    """
    if center is None:
        center = centroid(legend_records if legend_records is not None else records)
    (min_lat, min_lon), (max_lat, max_lon) = MAP_BOUNDS

    eco_map = folium.Map(
        location=list(center),
        zoom_start=zoom,
        min_zoom=MIN_ZOOM,
        max_zoom=MAX_ZOOM,
        max_bounds=True,
        min_lat=min_lat,
        max_lat=max_lat,
        min_lon=min_lon,
        max_lon=max_lon,
        zoom_control=False,
        control_scale=True,
        tiles="OpenStreetMap",
    )
    _add_zoom_control(eco_map)
    plugins.Fullscreen(
        position="topright",
        title="Full screen",
        title_cancel="Exit full screen",
        force_separate_button=True,
    ).add_to(eco_map)

    layer = folium.FeatureGroup(name="Sustainability Scores", show=True)
    for record in records:
        color = marker_color(record.score)
        style = SELECTED_MARKER_STYLE if record.same_location(selected) else MARKER_STYLE
        folium.CircleMarker(
            location=[record.lat, record.lon],
            radius=style["radius"],
            color=color,
            weight=style["weight"],
            fill=True,
            fill_color=color,
            fill_opacity=style["fill_opacity"],
            popup=folium.Popup(_location_popup(record), max_width=320),
            tooltip=folium.Tooltip(_location_tooltip(record), direction="top"),
        ).add_to(layer)
    layer.add_to(eco_map)

    _add_legend(eco_map, tier_counts(legend_records if legend_records is not None else records))
    if fly_to is not None:
        _add_fly_to(eco_map, fly_to)

    return eco_map
