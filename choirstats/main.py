"""
ChoirStats - Main Entry Point

Command line access to window statistics and the monthly rollup store.
Results are printed to stdout as JSON; logs go to stderr and the log file.
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Sequence

from choirstats.aggregators.window_aggregator import events_from_dicts
from choirstats.cache.redis_store import InMemoryDocumentStore, RedisDocumentStore
from choirstats.cache.rollup_composer import StatisticsRollup
from choirstats.calculators.region_classifier import RegionClassifier
from choirstats.exceptions import StatisticsError
from choirstats.models.events import ConcertEvent
from choirstats.models.periods import parse_month_key
from choirstats.service import StatisticsService
from choirstats.utils.config import Config
from choirstats.utils.logging_config import setup_logging


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        Parsed argument namespace
    """
    parser = argparse.ArgumentParser(
        description="ChoirStats - Concert Statistics & Monthly Rollups",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Window counts for the current month from an exported concert list
  python -m choirstats.main --windows concerts.json

  # Window counts relative to a chosen month
  python -m choirstats.main --windows concerts.json --ref 2025-01

  # Recompute and store one month
  python -m choirstats.main --save-month 2025-06 --events concerts.json

  # Quarter and year rollups from stored months
  python -m choirstats.main --quarter 2 --year 2025
  python -m choirstats.main --yearly 2025
        """
    )

    mode_group = parser.add_mutually_exclusive_group(required=True)
    mode_group.add_argument(
        "--windows",
        metavar="EVENTS_JSON",
        help="Compute month/quarter/last-4-months counts from a JSON list of concerts"
    )
    mode_group.add_argument(
        "--save-month",
        metavar="YYYY-MM",
        help="Build and store the aggregate for a month (requires --events)"
    )
    mode_group.add_argument(
        "--month",
        metavar="YYYY-MM",
        help="Show the stored aggregate for a month"
    )
    mode_group.add_argument(
        "--quarter",
        type=int,
        choices=[1, 2, 3, 4],
        help="Show the rollup for a quarter (requires --year)"
    )
    mode_group.add_argument(
        "--yearly",
        type=int,
        metavar="YEAR",
        help="Show the rollup for a year, including its quarters"
    )
    mode_group.add_argument(
        "--list-years",
        action="store_true",
        help="List years with stored statistics"
    )
    mode_group.add_argument(
        "--list-months",
        type=int,
        metavar="YEAR",
        help="List stored months of a year"
    )

    parser.add_argument(
        "--year",
        type=int,
        help="Year for --quarter"
    )
    parser.add_argument(
        "--events",
        metavar="EVENTS_JSON",
        help="JSON list of concerts for --save-month"
    )
    parser.add_argument(
        "--ref",
        metavar="YYYY-MM",
        help="Reference month for --windows (default: current month)"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args(argv)

    if args.quarter is not None and args.year is None:
        parser.error("--quarter requires --year")
    if args.save_month and not args.events:
        parser.error("--save-month requires --events")
    return args


def load_events(path: str) -> List[ConcertEvent]:
    """
    Load concerts from a JSON file.

    Accepts a list of concert objects or an object with a 'concerts' list.
    """
    with open(Path(path), encoding="utf-8") as handle:
        data = json.load(handle)
    if isinstance(data, dict):
        data = data.get("concerts", [])
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of concerts")
    return events_from_dicts(item for item in data if isinstance(item, dict))


def print_json(data: Any) -> None:
    """Write a result to stdout."""
    json.dump(data, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


async def run_store_command(args: argparse.Namespace, config: Config) -> bool:
    """
    Run a command that needs the statistics store.

    Returns:
        True if the command succeeded
    """
    logger = logging.getLogger(__name__)
    store = RedisDocumentStore(config.redis.url, key_prefix=config.redis.key_prefix)
    rollup = StatisticsRollup(store)

    try:
        await store.ping()

        if args.save_month:
            year, month = parse_month_key(args.save_month)
            classifier = RegionClassifier(home_region=config.statistics.home_region)
            service = StatisticsService(rollup, classifier, config.statistics.refresh_interval_seconds)
            aggregate = service.aggregator.build_monthly_aggregate(load_events(args.events), year, month)
            saved = await rollup.save_month(args.save_month, aggregate)
            print_json(saved.to_dict())

        elif args.month:
            aggregate = await rollup.get_month(args.month)
            if aggregate is None:
                logger.info(f"[INFO] No statistics stored for {args.month}")
            print_json(aggregate.to_dict() if aggregate else None)

        elif args.quarter is not None:
            print_json((await rollup.get_quarter(args.quarter, args.year)).to_dict())

        elif args.list_years:
            print_json(await rollup.list_available_years())

        elif args.list_months is not None:
            months = await rollup.list_available_months(args.list_months)
            print_json([{"key": key, "data": aggregate.to_dict()} for key, aggregate in months])

        elif args.yearly is not None:
            print_json((await rollup.get_year(args.yearly)).to_dict())

        return True
    finally:
        await store.close()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point for ChoirStats.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    args = parse_arguments(argv)

    try:
        config = Config()
    except ValueError as error:
        print(f"[ERROR] Failed to load configuration: {error}", file=sys.stderr)
        return 1

    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_logging(level=log_level, log_dir=config.log_dir)
    logger = logging.getLogger(__name__)
    logger.debug(f"ChoirStats starting at {datetime.now(timezone.utc).isoformat()}")

    try:
        if args.windows:
            classifier = RegionClassifier(home_region=config.statistics.home_region)
            reference = date.today()
            if args.ref:
                year, month = parse_month_key(args.ref)
                reference = date(year, month, 1)
            service = StatisticsService(StatisticsRollup(InMemoryDocumentStore()), classifier)
            print_json(service.current_windows(load_events(args.windows), today=reference))
            success = True
        else:
            success = asyncio.run(run_store_command(args, config))

    except KeyboardInterrupt:
        logger.warning("[WARN] Operation interrupted by user")
        return 130

    except (StatisticsError, ValueError, OSError) as error:
        logger.error(f"[ERROR] Operation failed: {error}", exc_info=args.verbose)
        return 1

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
