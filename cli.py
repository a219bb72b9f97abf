#!/usr/bin/env python
"""
Command-line interface for the OpenDataMap boundary engine

Usage:
    python cli.py boundary 1903516 --output ward.json
    python cli.py outline Q1858
    python cli.py outline 1903516
    python cli.py member way 123456789
"""

import os
import sys
import json
import argparse

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from loguru import logger
from opendatamap.config import PipelineConfig, load_config_from_env, validate_config
from opendatamap.boundary import BoundaryAssembler, OutlineResolver
from opendatamap.boundary.outline import outline_geometry_types


def setup_logging(verbose: bool = False):
    """Configure logging"""
    logger.remove()
    level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=level
    )


def _load_config(args):
    config = load_config_from_env(PipelineConfig())
    if getattr(args, "tolerance", None) is not None:
        config.stitching.endpoint_tolerance_deg = args.tolerance
    validate_config(config)
    return config


def _emit(payload: dict, output_path: str = None):
    """Write JSON to a file, or stdout when no path is given"""
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if output_path:
        output_dir = os.path.dirname(output_path)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text)
        logger.info(f"✓ Saved: {output_path}")
    else:
        print(text)


def cmd_boundary(args):
    """Resolve a boundary relation into polygon + stats"""
    setup_logging(args.verbose)
    try:
        config = _load_config(args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    assembler = BoundaryAssembler(config=config, resolve_names=not args.no_names)
    result = assembler.resolve_boundary(args.relation_id, name=args.name)

    logger.info(f"Status: {result.status}")
    counts = result.members.counts
    logger.info(
        f"  Members: {counts.outer_ways} outer, {counts.inner_ways} inner, "
        f"{counts.nodes} nodes, {counts.sub_areas} sub-areas"
    )
    if result.feature:
        logger.info(f"  Area: {result.stats.calculated_area:.2f} km²")
        logger.info(f"  Population: {result.stats.population if result.stats.population is not None else 'No data'}")
        logger.info(f"  Density: {result.feature.properties['density']}")

    _emit(result.model_dump(), args.output)
    return 0 if result.feature else 1


def cmd_outline(args):
    """Resolve an outline from a Wikidata QID or an OSM relation ID"""
    setup_logging(args.verbose)
    try:
        config = _load_config(args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    resolver = OutlineResolver(config=config)
    if args.identifier.isdigit():
        result = resolver.fetch_outline_by_relation_id(int(args.identifier))
    else:
        result = resolver.fetch_outline_by_identifier(args.identifier)

    logger.info(f"Source: {result.source}")
    if result.geojson:
        logger.info(f"  Geometry: {', '.join(outline_geometry_types(result))}")

    _emit(result.model_dump(), args.output)
    return 0 if result.geojson else 1


def cmd_member(args):
    """Resolve a single relation member for highlighting"""
    setup_logging(args.verbose)
    try:
        config = _load_config(args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    assembler = BoundaryAssembler(config=config)
    outline = assembler.resolve_member(args.type, args.ref)
    if outline is None:
        logger.error(f"Could not resolve {args.type} {args.ref}")
        return 1

    logger.info(f"{outline.name}: {len(outline.coordinates)} points")
    _emit(outline.model_dump(), args.output)
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="OpenDataMap boundary engine",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Boundary command
    boundary_parser = subparsers.add_parser("boundary", help="Resolve a boundary relation")
    boundary_parser.add_argument("relation_id", type=int, help="OSM relation ID")
    boundary_parser.add_argument("--name", help="Display name for the feature")
    boundary_parser.add_argument("--no-names", action="store_true", help="Skip sub-area name lookup")
    boundary_parser.add_argument("--tolerance", type=float, help="Endpoint match tolerance in degrees")
    boundary_parser.add_argument("--output", "-o", help="Output JSON file path")
    boundary_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    boundary_parser.set_defaults(func=cmd_boundary)

    # Outline command
    outline_parser = subparsers.add_parser("outline", help="Resolve an outline by QID or relation ID")
    outline_parser.add_argument("identifier", help="Wikidata QID (Q123) or OSM relation ID")
    outline_parser.add_argument("--output", "-o", help="Output JSON file path")
    outline_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    outline_parser.set_defaults(func=cmd_outline)

    # Member command
    member_parser = subparsers.add_parser("member", help="Resolve one relation member")
    member_parser.add_argument("type", choices=["node", "way", "relation"], help="Member type")
    member_parser.add_argument("ref", type=int, help="Member OSM ID")
    member_parser.add_argument("--output", "-o", help="Output JSON file path")
    member_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    member_parser.set_defaults(func=cmd_member)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
