import logging
import shutil
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional

from .config import settings
from .daily import DailyEnergyRecord, daily_aggregate
from .database import DatabaseService
from .samples import IngestResult, ingest

logger = logging.getLogger("VitoEnergy")

PROCESSED_DIR = "processed"


class DataCollector:
    """Imports telemetry exports and keeps the daily energy table current."""

    def __init__(self, database: Optional[DatabaseService] = None):
        self.database = database or DatabaseService()

    def import_text(self, text: str, strict: Optional[bool] = None) -> IngestResult:
        """Parse an export, store new samples and recompute every date in the batch."""
        result = ingest(text, strict=strict)
        inserted = self.database.save_samples(result.samples)
        logger.info(
            f"Parsed {result.parsed} rows, stored {inserted} new samples "
            f"({result.dropped_rows} malformed rows dropped)"
        )
        # unconditional, so a retry repairs records a failed run never wrote
        self.recompute_dates(sorted({s.date for s in result.samples}))
        return result

    def import_file(self, path: str, strict: Optional[bool] = None) -> IngestResult:
        logger.info(f"Importing telemetry file {path}")
        text = Path(path).read_text(encoding="utf-8", errors="replace")
        return self.import_text(text, strict=strict)

    def import_directory(self, directory: Optional[str] = None) -> int:
        """Import every *.csv export in a directory and move it to processed/.

        Returns:
            Number of files imported.
        """
        inbox = Path(directory or settings.import_directory)
        if not inbox.is_dir():
            logger.warning(f"Import directory not found: {inbox}")
            return 0

        done = inbox / PROCESSED_DIR
        imported = 0
        for path in sorted(inbox.glob("*.csv")):
            self.import_file(str(path))
            done.mkdir(exist_ok=True)
            shutil.move(str(path), str(done / path.name))
            imported += 1
        return imported

    def recompute_dates(self, dates: Iterable[date]) -> List[DailyEnergyRecord]:
        """Recompute and upsert the daily record of each date, one date at a time."""
        records = []
        for day in dates:
            samples = self.database.load_samples(start_date=day, end_date=day)
            record = daily_aggregate(samples, day=day)
            self.database.save_daily_records([record])
            logger.info(
                f"{day}: solar {record.solar_energy_kwh:.2f} kWh, gas {record.gas_energy_kwh:.2f} kWh, "
                f"house heating {record.house_heating_energy_kwh:.2f} kWh"
            )
            records.append(record)
        return records

    def recompute_all(self) -> List[DailyEnergyRecord]:
        return self.recompute_dates(self.database.get_dates())
