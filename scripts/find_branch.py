#!/usr/bin/env python3
"""
Run the swap-branch selection against local fleet CSVs.

  python scripts/find_branch.py --data-dir data --polyline '_p~iF~ps|U_ulLnnqC' --date 2024-06-01
"""

from __future__ import annotations

import argparse
import json
import os
import sys

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from evswap.io_fleet import FleetDataError, load_fleet_snapshot  # noqa: E402
from evswap.plan.config import load_planner_config  # noqa: E402
from evswap.plan.solve import select_branch  # noqa: E402
from evswap.runtime import configure_logging  # noqa: E402
from evswap.timeparse import to_local_date, today_local  # noqa: E402


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Find the best EV swap branch along an encoded route")
    parser.add_argument("--data-dir", default=os.getenv("FLEET_DATA_DIR", "data"), help="Directory holding the fleet CSVs")
    parser.add_argument("--polyline", required=True, help="Encoded route polyline (precision 1e-5)")
    parser.add_argument("--date", default=None, help="Travel date, e.g. 2024-06-01 (default: today)")
    parser.add_argument("--lateral-threshold-m", type=float, default=None, help="Max distance from route in metres")
    parser.add_argument("--range-threshold-km", type=float, default=None, help="Minimum EV range in km (strict)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logger = configure_logging("find_branch")

    cfg = load_planner_config().with_overrides(
        lateral_threshold_m=args.lateral_threshold_m,
        range_threshold_km=args.range_threshold_km,
    )
    if args.date:
        target = to_local_date(args.date, cfg.tz)
        if target is None:
            logger.error("Unparseable --date %r", args.date)
            return 2
    else:
        target = today_local(cfg.tz)

    try:
        fleet = load_fleet_snapshot(args.data_dir)
    except FleetDataError as e:
        logger.error("%s", e)
        return 1

    outcome = select_branch(args.polyline, target, fleet, cfg)
    print(json.dumps(outcome.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
