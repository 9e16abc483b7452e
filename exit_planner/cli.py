from __future__ import annotations

import argparse
import json
import sys
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

from .data_loader import load_exit_points
from .data_models import ActiveHikeContext, Location, RouteDifficulty, SynthesisPolicy
from .reference_store import ReferenceStore
from .server import synthesis_to_dict
from .synthesis import synthesize


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Validate a saved model response against the exit point catalogue."
    )
    parser.add_argument("response", help="File holding the raw model response, or '-' for stdin.")
    parser.add_argument(
        "--difficulty",
        choices=[difficulty.value for difficulty in RouteDifficulty],
        default=RouteDifficulty.MODERATE.value,
    )
    parser.add_argument("--exit-points", type=Path, default=None, help="Exit point catalogue JSON.")
    parser.add_argument("--elapsed-hours", type=float, default=0.0)
    parser.add_argument("--position", nargs=2, type=float, default=(0.0, 0.0), metavar=("LAT", "LON"))
    parser.add_argument("--arrival-offset-minutes", type=float, default=120.0)
    return parser.parse_args(argv)


def _read_response(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def run_pipeline(args: argparse.Namespace) -> Dict[str, Any]:
    store = ReferenceStore(load_exit_points(args.exit_points))
    context = ActiveHikeContext(
        route_difficulty=RouteDifficulty(args.difficulty),
        elapsed_hours=args.elapsed_hours,
        current_location=Location(latitude=args.position[0], longitude=args.position[1]),
    )
    policy = SynthesisPolicy(arrival_offset=timedelta(minutes=args.arrival_offset_minutes))
    result = synthesize(_read_response(args.response), store, context, policy=policy)
    return synthesis_to_dict(result)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    results = run_pipeline(args)
    print(json.dumps(results, indent=2))
    return 0 if results["ok"] else 1


if __name__ == "__main__":
    sys.exit(main())
