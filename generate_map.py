"""Generate the static sustainability map HTML in one run."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from aggregates import centroid, tier_counts
from dataset_loader import DEFAULT_DATASET_PATH, LoadResult, load_dataset
from location_search import filter_records
from scoring_config import INITIAL_ZOOM, MAX_ZOOM, MIN_ZOOM
from selection_state import FlyTo, new_state, select, set_search, take_viewport_command
from sustainability_map import build_sustainability_map


@dataclass(frozen=True)
class MapBuildResult:
    map_obj: object
    loaded: LoadResult
    rendered_count: int
    counts: Dict[str, int]


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Render the air-quality sustainability map to a static HTML file."
    )
    parser.add_argument(
        "--dataset",
        default=str(DEFAULT_DATASET_PATH),
        help="Workbook path or http(s) URL of the air-quality dataset.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("output"),
        help="Directory where the output HTML file will be written.",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="sustainability_map.html",
        help="Output HTML filename (inside output-dir).",
    )
    parser.add_argument(
        "--zoom",
        type=int,
        default=INITIAL_ZOOM,
        help="Initial zoom level.",
    )
    parser.add_argument(
        "--search",
        default="",
        help="Only render locations whose name contains this text.",
    )
    parser.add_argument(
        "--select",
        default="",
        help="Highlight and fly to the first location whose name contains this text.",
    )
    return parser.parse_args(argv)


def _validate_args(args: argparse.Namespace) -> None:
    if args.zoom < MIN_ZOOM or args.zoom > MAX_ZOOM:
        raise SystemExit(f"--zoom must be between {MIN_ZOOM} and {MAX_ZOOM}.")


def build_map(
    dataset: str,
    zoom: int,
    search: str = "",
    select_query: str = "",
) -> MapBuildResult:
    loaded = load_dataset(dataset)
    if not loaded.ok:
        raise SystemExit(loaded.error)

    state = new_state(loaded.records)
    set_search(state, search)
    fly_to: Optional[FlyTo] = None
    if select_query:
        matches = filter_records(loaded.records, select_query)
        if not matches:
            raise SystemExit(f"No location matches --select {select_query!r}.")
        select(state, matches[0])
        fly_to = take_viewport_command(state)

    rendered = state.filtered
    map_obj = build_sustainability_map(
        records=rendered,
        selected=state.selected,
        center=centroid(loaded.records),
        zoom=zoom,
        fly_to=fly_to,
        legend_records=loaded.records,
    )
    return MapBuildResult(
        map_obj=map_obj,
        loaded=loaded,
        rendered_count=len(rendered),
        counts=tier_counts(loaded.records),
    )


def _print_summary(result: MapBuildResult, output_path: Path) -> None:
    print("Generated map:")
    print(f"- Sustainability map: {output_path.resolve()} | source={result.loaded.source}")
    print("\nCounts:")
    print(f"- Locations loaded: {len(result.loaded.records)}")
    print(f"- Locations rendered: {result.rendered_count}")
    for label, count in result.counts.items():
        print(f"- {label}: {count}")
    print(f"\n- Generated at: {datetime.now().isoformat(timespec='seconds')}")


def main(argv: Optional[list] = None) -> int:
    args = parse_args(argv)
    _validate_args(args)

    args.output_dir.mkdir(parents=True, exist_ok=True)

    result = build_map(
        dataset=args.dataset,
        zoom=args.zoom,
        search=args.search,
        select_query=args.select,
    )

    output_path = args.output_dir / args.output
    result.map_obj.save(str(output_path))
    _print_summary(result, output_path=output_path)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
