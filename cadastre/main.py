"""
Command line entry point: load a parcel file and report its adjacency graph.

Usage:
    cadastre-graph data/parcels.csv
    cadastre-graph data/parcels.csv --workers 4 --top 5
    python -m cadastre.main data/parcels.csv --config config/cadastre.yaml
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from cadastre.acquisition import ParcelFileLoader
from cadastre.config import load_config
from cadastre.exceptions import CadastreError
from cadastre.processing import AdjacencyConfig, AdjacencyGraphBuilder

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build the physical adjacency graph of a parcel file."
    )
    parser.add_argument("path", type=Path, help="Delimited parcel file")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML config file (default: config/cadastre.yaml if present)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads for the pairwise scan",
    )
    parser.add_argument(
        "--no-prefilter",
        action="store_true",
        help="Evaluate every pair without the bounding-box pre-filter",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=10,
        help="Number of most connected parcels to list",
    )
    parser.add_argument(
        "--describe",
        action="store_true",
        help="Print every parcel with its neighbours",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Load parcels, build the graph and print a summary."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    print("\n" + "=" * 60)
    print("PARCEL ADJACENCY GRAPH")
    print("=" * 60)

    logger.debug("Arguments: %s", vars(args))
    start_time = datetime.now()

    try:
        config = load_config(args.config)

        overrides = {}
        if args.workers is not None:
            overrides["max_workers"] = args.workers
        if args.no_prefilter:
            overrides["use_bbox_prefilter"] = False
        if overrides:
            adjacency_config = AdjacencyConfig.model_validate(
                {**config.adjacency.model_dump(), **overrides}
            )
        else:
            adjacency_config = config.adjacency

        # Step 1: Load parcels
        print("\n[1] Loading Parcels")
        print("-" * 40)
        result = ParcelFileLoader(config.loader).load(args.path)
        print(f"  Source: {args.path}")
        print(f"  Parcels loaded: {len(result.parcels):,}")
        print(f"  Rows skipped: {result.skipped_count:,}")
        for skipped in result.skipped[:5]:
            print(f"    line {skipped.line_number}: {skipped.reason}")
        if result.skipped_count > 5:
            print(f"    ... and {result.skipped_count - 5} more")

        # Step 2: Build graph
        print("\n[2] Building Adjacency Graph")
        print("-" * 40)
        graph = AdjacencyGraphBuilder(adjacency_config).build(result.parcels)
        print(f"  Vertices: {graph.vertex_count():,}")
        print(f"  Edges: {graph.edge_count():,}")

        isolated = sum(1 for p in graph.parcels if not graph.neighbors(p))
        print(f"  Parcels without neighbours: {isolated:,}")

        # Step 3: Most connected parcels
        if args.top > 0:
            print(f"\n[3] Top {args.top} Connected Parcels")
            print("-" * 40)
            ranked = sorted(
                graph.parcels, key=lambda p: len(graph.neighbors(p)), reverse=True
            )
            for parcel in ranked[: args.top]:
                print(f"  {parcel.id}: {len(graph.neighbors(parcel))} neighbours")

        if args.describe:
            print("\n" + graph.describe())

    except ValidationError as e:
        print(f"\nInvalid option: {e}")
        return 2
    except CadastreError as e:
        print(f"\nError: {e}")
        return 1

    elapsed = (datetime.now() - start_time).total_seconds()
    print("\n" + "=" * 60)
    print(f"Complete in {elapsed:.1f}s")
    print("=" * 60 + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
