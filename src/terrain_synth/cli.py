"""
Command line summary of continuous terrain for world snapshots.

Usage:
    terrain-synth world.json [more.json ...] --cell-size 100 --workers 4
"""

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from tqdm import tqdm

from .compatibility import SnapshotValidator
from .config import SynthesisConfig
from .engine import TerrainSynthesizer, grid_positions, grid_projection
from .models import TerrainOverrides, TerrainSynthesisResult


logger = logging.getLogger("terrain_synth.cli")


def load_snapshot(path: Path) -> Dict[str, Any]:
    """
    Read a snapshot file.

    Accepts either a bare list of location records or an object with
    ``locations`` and optional ``overrides`` (location id -> overrides).
    """

    with open(path) as f:
        data = json.load(f)

    if isinstance(data, list):
        return {"locations": data, "overrides": {}}
    return {"locations": data.get("locations", []), "overrides": data.get("overrides", {})}


def synthesize_snapshot(
    snapshot: Dict[str, Any],
    synthesizer: TerrainSynthesizer,
    validator: SnapshotValidator
) -> TerrainSynthesisResult:
    locations = validator.parse_locations(snapshot["locations"])
    overrides = {
        location_id: TerrainOverrides.model_validate(values)
        for location_id, values in snapshot["overrides"].items()
    }
    return synthesizer.synthesize(
        locations,
        grid_positions(locations),
        grid_projection(synthesizer.config.terrain_size),
        overrides=overrides
    )


def first_problem(exc: ValidationError) -> str:
    problem = exc.errors()[0]
    field = ".".join(str(part) for part in problem["loc"])
    return f"{field}: {problem['msg']}" if field else problem["msg"]


def format_summary(name: str, result: TerrainSynthesisResult) -> List[str]:
    lines = [f"{name}:"]
    for key, value in result.summary().items():
        lines.append(f"  {key:<18} {value}")
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for terrain synthesis summaries."""

    parser = argparse.ArgumentParser(description="Summarize continuous terrain for world snapshots")
    parser.add_argument("snapshots", nargs="+", type=Path, help="Snapshot JSON files")
    parser.add_argument("--cell-size", type=float, default=100.0, help="Screen size of one grid cell")
    parser.add_argument("--workers", type=int, default=1, help="Threads per synthesis run")
    parser.add_argument("--validate-only", action="store_true", help="Only validate the snapshots")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        config = SynthesisConfig(terrain_size=args.cell_size, workers=args.workers)
    except ValidationError as exc:
        parser.error(f"invalid settings: {first_problem(exc)}")

    synthesizer = TerrainSynthesizer(config)
    validator = SnapshotValidator(require_grid=True)

    invalid = 0
    reports = []

    for path in tqdm(args.snapshots, desc="Synthesizing terrain", disable=len(args.snapshots) < 2):
        snapshot = load_snapshot(path)

        is_valid, errors = validator.validate_snapshot(snapshot["locations"])
        if not is_valid:
            invalid += 1
            for error in errors:
                logger.warning("%s: %s", path.name, error)

        if args.validate_only:
            status = "ok" if is_valid else f"{len(errors)} problems"
            reports.append([f"{path.name}: {status}"])
            continue

        try:
            result = synthesize_snapshot(snapshot, synthesizer, validator)
        except ValidationError as exc:
            parser.error(f"{path.name}: invalid overrides: {first_problem(exc)}")
        reports.append(format_summary(path.name, result))

    for lines in reports:
        print("\n".join(lines))

    if args.validate_only and invalid:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
