#!/usr/bin/env python3
"""
Render View Script

Loads a partitioned DemandRank dataset, applies weights, viewport and
filters, and reports the frame that would be handed to the map overlay.

All defaults read from config.json ("data", "map", "filters", "rendering").

Input:
    - Partition files (data.chunk_pattern), partition URLs (data.url_pattern)
      or one monolithic GeoJSON collection

Output:
    - Frame summary to console
    - Optional CSV / GeoJSON export of the filtered records
    - Optional shareable view-state token

Usage:
    python scripts/render_view.py
    python scripts/render_view.py --bounds -73.0 41.4 -72.5 41.8 --zoom 12
    python scripts/render_view.py --weight crash=0.4 --weight bus=0.0 --preset top_demand
    python scripts/render_view.py --token <token> --csv out.csv
"""

import argparse
import asyncio
import sys
from pathlib import Path

import numpy as np

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from demand_core import DemandError, config, get_logger
from demand_core.types import BoundingBox, FilterCriteria, ViewportState
from chunks import CollectionSource, DirectoryPartitionSource, HttpPartitionSource
from coordinator import DemandMapCoordinator
from exporting import decode_view_state, encode_view_state, write_csv, write_geojson
from filtering import PresetRegistry
from rendering import RenderBudgeter, legend
from scoring import FactorRegistry, WeightVector

logger = get_logger("render_view")


def parse_weight(text: str):
    name, sep, value = text.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected name=value, got {text!r}")
    try:
        return name.strip(), float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"weight for {name!r} is not a number")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render View - DemandRank working set for one map view"
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--chunks",
        default=config.get("data.chunk_pattern"),
        help=f"Partition file pattern (default: {config.get('data.chunk_pattern')})"
    )
    source.add_argument("--url", help="Partition URL pattern containing {chunk}")
    source.add_argument("--collection", help="Single GeoJSON FeatureCollection file")

    parser.add_argument(
        "--weight",
        action="append",
        type=parse_weight,
        default=[],
        metavar="NAME=VALUE",
        help=f"Factor weight override; factors: {', '.join(FactorRegistry().names)}"
    )
    parser.add_argument("--bounds", nargs=4, type=float, metavar=("WEST", "SOUTH", "EAST", "NORTH"))
    parser.add_argument("--zoom", type=float, default=config.get("map.zoom"))
    parser.add_argument("--min-score", type=float, default=config.get("filters.min_score"))
    parser.add_argument("--max-score", type=float, default=config.get("filters.max_score"))
    parser.add_argument("--pedestrian-feasible", action="store_true")
    parser.add_argument("--urban", action="store_true")
    parser.add_argument("--sidewalks", action="store_true", help="Split existing sidewalks into their own layer")
    parser.add_argument("--preset", choices=PresetRegistry().names)
    parser.add_argument("--token", help="Restore weights, filters and view from a share token")
    parser.add_argument("--seed", type=int, default=config.get("rendering.seed"))
    parser.add_argument("--csv", help="Write the filtered records as CSV")
    parser.add_argument("--geojson", help="Write the filtered records as GeoJSON")
    parser.add_argument("--print-token", action="store_true", help="Print a share token for this view")
    return parser


def make_source(args):
    if args.url:
        return HttpPartitionSource(args.url)
    if args.collection:
        return CollectionSource.from_file(args.collection)
    return DirectoryPartitionSource(args.chunks)


async def run(args) -> int:
    coordinator = DemandMapCoordinator(
        budgeter=RenderBudgeter(rng=np.random.default_rng(args.seed)),
    )
    report = await coordinator.load(make_source(args))
    logger.info(
        f"Loaded {len(report.loaded)} partitions, {len(report.failed)} failed, "
        f"{report.dropped_records} records dropped without position"
    )

    if args.token:
        frame = coordinator.apply_view_state(decode_view_state(args.token))
    else:
        weights = WeightVector.default()
        for name, value in args.weight:
            weights = weights.with_weight(name, value)
        coordinator.set_weights(weights)

        if args.bounds:
            west, south, east, north = args.bounds
            coordinator.set_viewport(ViewportState(
                bounds=BoundingBox(north=north, south=south, east=east, west=west),
                zoom=args.zoom,
            ))

        criteria = FilterCriteria(
            pedestrian_feasible_only=args.pedestrian_feasible,
            urban_only=args.urban,
            show_sidewalks=args.sidewalks,
            preset=args.preset,
        ).with_min_score(args.min_score).with_max_score(args.max_score)
        frame = coordinator.set_criteria(criteria)

    weights = coordinator.state.weights
    print("\n" + "=" * 60)
    print("RENDER FRAME")
    print("=" * 60)
    print(f"Total weight: {weights.total:.0%}{'' if weights.is_balanced() else '  (not 100%)'}")
    print(f"Zoom: {frame.viewport.zoom:g}  budget: {frame.budget}")
    print(f"Active chunks: {len(frame.active_chunks)}")
    print(f"Filtered records: {frame.filtered_count}")
    print(f"Rendered records: {frame.rendered_count}")
    for layer in frame.layers:
        print(f"  {layer.layer_id}: {len(layer)}")
    print("Legend:")
    for score_range, label, color in legend():
        print(f"  {score_range:>7}  {label:<12} {color}")
    print("=" * 60)

    if args.csv:
        write_csv(frame.filtered, args.csv)
    if args.geojson:
        write_geojson(frame.filtered, args.geojson)
    if args.print_token:
        print(encode_view_state(coordinator.view_state()))
    return 0


def main():
    args = build_parser().parse_args()
    config.validate()

    logger.info("=" * 60)
    logger.info("DEMANDRANK RENDER VIEW")
    logger.info("=" * 60)

    try:
        sys.exit(asyncio.run(run(args)))
    except DemandError as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
