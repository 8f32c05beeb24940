"""Offline analysis of exported runs - zones, time in zone and running power."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from physio_engine.config import get_settings
from physio_engine.database import session_scope
from physio_engine.logging_config import configure_logging
from physio_engine.models.schemas import ActivityRecord, PhysiologyProfile
from physio_engine.services.power_estimator import estimate_power_for_runs, filter_reliable_estimates
from physio_engine.services.profile_repository import SqlProfileRepository
from physio_engine.services.training_zones import calculate_training_zones
from physio_engine.services.zone_distribution import analyze_zone_distribution


logger = logging.getLogger("scripts.analyze_runs")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Analyse a JSON export of runs against a stored profile",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Zones and distribution for the last four weeks of runs
  python scripts/analyze_runs.py runs.json --user athlete-1

  # Without a stored profile, supplying age and weight directly
  python scripts/analyze_runs.py runs.json --age 35 --weight 68 --weeks 8
        """
    )
    parser.add_argument("runs_file", type=Path, help="JSON file holding a list of Strava-style activities")
    parser.add_argument("--user", type=str, help="Load the stored profile for this user id")
    parser.add_argument("--age", type=float, help="Age to use when no profile is stored")
    parser.add_argument("--weight", type=float, help="Body weight in kg to use when no profile is stored")
    parser.add_argument("--weeks", type=int, default=4, help="Weeks covered by the runs file (default: 4)")
    parser.add_argument("--verbose", action="store_true", help="Show detailed output")
    return parser.parse_args()


def load_runs(path: Path) -> list[ActivityRecord]:
    with path.open("r", encoding="utf-8") as fh:
        payload = json.load(fh)
    if isinstance(payload, dict):
        payload = payload.get("runs", [])
    return [ActivityRecord.model_validate(item) for item in payload]


def load_profile(args: argparse.Namespace) -> PhysiologyProfile:
    profile = None
    if args.user:
        with session_scope() as db:
            profile = SqlProfileRepository(db).fetch(args.user)
        if profile is None:
            logger.warning("No stored profile for %s - using command line values", args.user)

    if profile is None:
        profile = PhysiologyProfile.blank(args.user or "cli")
    updates = {}
    if args.age is not None:
        updates["age"] = args.age
    if args.weight is not None:
        updates["body_weight"] = args.weight
    return profile.model_copy(update=updates)


def main() -> None:
    args = parse_args()
    configure_logging("DEBUG" if args.verbose else None)
    thresholds = get_settings().thresholds

    runs = load_runs(args.runs_file)
    profile = load_profile(args)
    logger.info("Loaded %d run(s) from %s", len(runs), args.runs_file)

    zones = calculate_training_zones(runs, profile, thresholds=thresholds)
    distribution = analyze_zone_distribution(runs, zones, thresholds, weeks=args.weeks)
    power = filter_reliable_estimates(estimate_power_for_runs(runs, profile.body_weight, thresholds))

    report = {
        "zones": zones.model_dump(mode="json"),
        "distribution": distribution.model_dump(mode="json"),
        "reliable_power_estimates": [estimate.model_dump(mode="json") for estimate in power],
    }
    print(json.dumps(report, indent=2))

    for line in distribution.recommendations:
        logger.info("%s", line)


if __name__ == "__main__":
    main()
