#!/usr/bin/env python3
"""
Import script for telemetry exports into the SQLite database.
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import settings
from .data_collector import DataCollector
from .database import DatabaseService
from .errors import VitoEnergyError

logger = logging.getLogger("VitoEnergy")


def import_telemetry(
    csv_path: str, db_path: Optional[str] = None, strict: Optional[bool] = None
) -> bool:
    """Import one telemetry export and update the daily energy records.

    Args:
        csv_path: Path to the semicolon separated export.
        db_path: Path to SQLite database. If None, uses settings.database_path.
        strict: Fail on unparsable numeric fields instead of using 0.

    Returns:
        True when the import succeeded.
    """
    db_path = db_path or settings.database_path

    if not Path(csv_path).exists():
        logger.error(f"Telemetry file not found: {csv_path}")
        return False

    logger.info(f"Starting import from {csv_path} to {db_path}")
    collector = DataCollector(DatabaseService(db_path))

    try:
        result = collector.import_file(csv_path, strict=strict)
    except VitoEnergyError as e:
        logger.error(f"Import failed: {e}")
        return False

    logger.info(
        f"Import completed. Parsed {result.parsed} rows, "
        f"{result.duplicates} duplicates, {result.dropped_rows} malformed rows."
    )
    if result.parsed == 0:
        logger.warning("No data rows found. Is this a 'Date;Time of day;' export?")
    return True


def main():
    """Main function for CLI usage."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
        stream=sys.stdout,
    )
    parser = argparse.ArgumentParser(description="Import a telemetry export into SQLite")
    parser.add_argument("csv", help="Path to the telemetry export")
    parser.add_argument(
        "--db", help="Path to SQLite database (default: from settings)", default=None
    )
    parser.add_argument(
        "--strict", action="store_true", help="Fail on unparsable numeric fields"
    )

    args = parser.parse_args()

    ok = import_telemetry(args.csv, args.db, strict=args.strict or None)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
