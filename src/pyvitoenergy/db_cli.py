#!/usr/bin/env python3
"""
Command-line interface for database management.
"""
import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from .aggregator import RangeQuery, RangeScope, window_summary
from .config import settings
from .daily import records_to_frame, summarize_records
from .data_collector import DataCollector
from .database import DatabaseService
from .engine import derive_series
from .errors import VitoEnergyError
from .import_telemetry import import_telemetry
from .samples import TIMESTAMP_FORMAT
from .subsystems import SUBSYSTEMS

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
    stream=sys.stdout,
)
logger = logging.getLogger("VitoEnergy")


def _parse_time(value: str) -> datetime:
    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected 'DD.MM.YYYY HH:MM', got {value!r}") from None


def _open_existing(db_path):
    db_path = db_path or settings.database_path
    if not Path(db_path).exists():
        logger.error(f"Database file not found: {db_path}")
        return None
    return DatabaseService(db_path)


def show_info(db: DatabaseService) -> None:
    time_range = db.get_time_range()
    date_range = f"from {time_range[0]} to {time_range[1]}" if time_range else "N/A"
    summary = summarize_records(db.get_daily_records())

    print(f"Database: {db.db_path}")
    print(f"Heating data records: {db.count_samples()}")
    print(f"Daily energy records: {db.count_daily_records()}")
    print(f"Date range: {date_range}")
    print(f"Total energy: {summary.total_energy_kwh:.2f} kWh")
    print(f"  solar {summary.solar_energy_kwh:.2f} kWh ({summary.solar_percent:.1f}%)")
    print(f"  gas (hot water) {summary.gas_energy_kwh:.2f} kWh ({summary.gas_percent:.1f}%)")
    print(
        f"  gas (house heating) {summary.house_heating_energy_kwh:.2f} kWh "
        f"({summary.house_heating_percent:.1f}%)"
    )


def show_stats(db: DatabaseService, start=None, end=None) -> None:
    load_from = start.date() if start else None
    load_to = end.date() if end else None
    if load_from and load_to and load_from > load_to:
        load_from, load_to = load_to, load_from
    derived = derive_series(db.load_samples(start_date=load_from, end_date=load_to))

    if start or end:
        window = RangeQuery.between(start, end, scope=RangeScope.MARKED)
    else:
        window = RangeQuery.full()
    summary = window_summary(derived, window)

    if summary.start_time is None:
        print("No data in the selected window")
        return

    print(f"Window: {summary.start_time} - {summary.end_time} ({summary.duration})")
    print(f"Samples: {summary.sample_count}")
    for subsystem in SUBSYSTEMS:
        stats = summary.stats[subsystem.name]
        print(
            f"{subsystem.label:<22} {stats.energy_kwh:8.3f} kWh  "
            f"active {stats.active_sample_count:5d}/{stats.total_sample_count} "
            f"({stats.active_percent:.1f}%)"
        )


def main():
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(description="VitoEnergy Database Management CLI")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Import command
    import_parser = subparsers.add_parser("import", help="Import a telemetry export")
    import_parser.add_argument("csv", help="Path to the telemetry export")
    import_parser.add_argument(
        "--db", help="Path to SQLite database (default: from settings)", default=None
    )
    import_parser.add_argument(
        "--strict", action="store_true", help="Fail on unparsable numeric fields"
    )

    # Info command
    info_parser = subparsers.add_parser("info", help="Show database information")
    info_parser.add_argument(
        "--db", help="Path to SQLite database (default: from settings)", default=None
    )

    # Recompute command
    recompute_parser = subparsers.add_parser(
        "recompute", help="Recompute the daily energy records of every date"
    )
    recompute_parser.add_argument(
        "--db", help="Path to SQLite database (default: from settings)", default=None
    )

    # Export command
    export_parser = subparsers.add_parser("export", help="Export daily energy records to CSV")
    export_parser.add_argument("--output", help="Path to output CSV file", required=True)
    export_parser.add_argument(
        "--db", help="Path to SQLite database (default: from settings)", default=None
    )

    # Stats command
    stats_parser = subparsers.add_parser("stats", help="Energy statistics for a time window")
    stats_parser.add_argument(
        "--start", type=_parse_time, help="Window start 'DD.MM.YYYY HH:MM'", default=None
    )
    stats_parser.add_argument(
        "--end", type=_parse_time, help="Window end 'DD.MM.YYYY HH:MM'", default=None
    )
    stats_parser.add_argument(
        "--db", help="Path to SQLite database (default: from settings)", default=None
    )

    args = parser.parse_args()

    if args.command == "import":
        ok = import_telemetry(args.csv, args.db, strict=args.strict or None)
        return 0 if ok else 1

    if args.command not in ("info", "recompute", "export", "stats"):
        parser.print_help()
        return 0

    db = _open_existing(args.db)
    if db is None:
        return 1

    try:
        if args.command == "info":
            show_info(db)

        elif args.command == "recompute":
            records = DataCollector(db).recompute_all()
            logger.info(f"Recomputed {len(records)} daily energy records")

        elif args.command == "export":
            logger.info(f"Exporting daily energy records from {db.db_path} to {args.output}")
            df = records_to_frame(db.get_daily_records())
            df.to_csv(args.output, index=False)
            logger.info(f"Exported {len(df)} records to {args.output}")

        elif args.command == "stats":
            show_stats(db, args.start, args.end)

    except VitoEnergyError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
