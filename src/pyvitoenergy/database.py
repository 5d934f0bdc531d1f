"""
Database service for VitoEnergy.
Provides connection management and data access functions.
"""

import logging
from dataclasses import asdict, fields
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import create_engine, func, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .config import settings
from .daily import RECORD_FIELDS, DailyEnergyRecord
from .errors import PersistenceError
from .models import Base, DailyEnergy, HeatingData
from .samples import HeatingSample

logger = logging.getLogger("VitoEnergy")

SAMPLE_FIELDS = [f.name for f in fields(HeatingSample)]
BATCH_SIZE = 500


def _sample_to_row(sample: HeatingSample) -> dict:
    row = asdict(sample)
    row["date"] = sample.date
    return row


def _row_to_sample(row: HeatingData) -> HeatingSample:
    return HeatingSample(**{name: getattr(row, name) for name in SAMPLE_FIELDS})


def _row_to_record(row: DailyEnergy) -> DailyEnergyRecord:
    return DailyEnergyRecord(**{name: getattr(row, name) for name in RECORD_FIELDS})


class DatabaseService:
    """Provides database operations for the application."""

    def __init__(self, db_path: Optional[str] = None):
        """Initialize the database service.

        Args:
            db_path: Optional path to the SQLite database file.
                    If not provided, uses the path from settings.
        """
        self.db_path = db_path or settings.database_path
        self._engine: Optional[Engine] = None
        self._session_factory = None

        # Ensure the database directory exists
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    @property
    def engine(self) -> Engine:
        """Get the SQLAlchemy engine."""
        if self._engine is None:
            try:
                self._engine = create_engine(f"sqlite:///{self.db_path}", echo=False)
                Base.metadata.create_all(self._engine)
            except SQLAlchemyError as e:
                self._engine = None
                logger.error(f"Failed to open database {self.db_path}: {e}")
                raise PersistenceError(f"Cannot open database {self.db_path}") from e
            self._session_factory = sessionmaker(bind=self._engine)
        return self._engine

    def get_session(self) -> Session:
        """Get a new database session."""
        if self._session_factory is None:
            _ = self.engine  # Initialize engine and session factory
        return self._session_factory()

    def save_samples(self, samples: Iterable[HeatingSample]) -> int:
        """Insert samples, ignoring timestamps that are already stored.

        Args:
            samples: Parsed heating samples.

        Returns:
            Number of newly inserted rows.
        """
        rows = [_sample_to_row(s) for s in samples]
        if not rows:
            return 0

        try:
            before = self.count_samples()
            with self.get_session() as session:
                for i in range(0, len(rows), BATCH_SIZE):
                    stmt = insert(HeatingData.__table__).on_conflict_do_nothing(
                        index_elements=["timestamp"]
                    )
                    session.execute(stmt, rows[i : i + BATCH_SIZE])
                session.commit()
            inserted = self.count_samples() - before
        except SQLAlchemyError as e:
            logger.error(f"Failed to save heating data: {e}")
            raise PersistenceError("Failed to save heating data") from e

        logger.debug(f"Inserted {inserted} samples, {len(rows) - inserted} already stored")
        return inserted

    def load_samples(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> List[HeatingSample]:
        """Load samples ordered by timestamp, optionally limited to a date range (inclusive)."""
        try:
            with self.get_session() as session:
                stmt = select(HeatingData)
                if start_date is not None:
                    stmt = stmt.where(HeatingData.date >= start_date)
                if end_date is not None:
                    stmt = stmt.where(HeatingData.date <= end_date)
                result = session.execute(stmt.order_by(HeatingData.timestamp)).scalars().all()
                return [_row_to_sample(row) for row in result]
        except SQLAlchemyError as e:
            logger.error(f"Failed to load heating data: {e}")
            raise PersistenceError("Failed to load heating data") from e

    def load_samples_since(self, since: datetime) -> List[HeatingSample]:
        try:
            with self.get_session() as session:
                stmt = (
                    select(HeatingData)
                    .where(HeatingData.timestamp >= since)
                    .order_by(HeatingData.timestamp)
                )
                return [_row_to_sample(row) for row in session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Failed to load heating data: {e}")
            raise PersistenceError("Failed to load heating data") from e

    def save_daily_records(self, records: Iterable[DailyEnergyRecord]) -> int:
        """Insert or replace daily records keyed by date.

        Returns:
            Number of records written.
        """
        rows = [r.as_dict() for r in records]
        if not rows:
            return 0

        try:
            with self.get_session() as session:
                for row in rows:
                    stmt = insert(DailyEnergy).values(**row)
                    stmt = stmt.on_conflict_do_update(
                        index_elements=["date"],
                        set_={**{k: v for k, v in row.items() if k != "date"}, "updated_at": func.now()},
                    )
                    session.execute(stmt)
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to save daily energy records: {e}")
            raise PersistenceError("Failed to save daily energy records") from e

        logger.debug(f"Saved {len(rows)} daily energy records")
        return len(rows)

    def get_daily_records(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> List[DailyEnergyRecord]:
        try:
            with self.get_session() as session:
                stmt = select(DailyEnergy)
                if start_date is not None:
                    stmt = stmt.where(DailyEnergy.date >= start_date)
                if end_date is not None:
                    stmt = stmt.where(DailyEnergy.date <= end_date)
                result = session.execute(stmt.order_by(DailyEnergy.date)).scalars().all()
                return [_row_to_record(row) for row in result]
        except SQLAlchemyError as e:
            logger.error(f"Failed to load daily energy records: {e}")
            raise PersistenceError("Failed to load daily energy records") from e

    def get_dates(self) -> List[date]:
        """Distinct dates that have raw samples."""
        try:
            with self.get_session() as session:
                stmt = select(HeatingData.date).distinct().order_by(HeatingData.date)
                return list(session.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Failed to list dates: {e}")
            raise PersistenceError("Failed to list dates") from e

    def count_samples(self) -> int:
        try:
            with self.get_session() as session:
                return session.scalar(select(func.count()).select_from(HeatingData)) or 0
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to count heating data") from e

    def count_daily_records(self) -> int:
        try:
            with self.get_session() as session:
                return session.scalar(select(func.count()).select_from(DailyEnergy)) or 0
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to count daily energy records") from e

    def get_time_range(self) -> Optional[Tuple[datetime, datetime]]:
        """First and last sample timestamp, None for an empty database."""
        try:
            with self.get_session() as session:
                first, last = session.execute(
                    select(func.min(HeatingData.timestamp), func.max(HeatingData.timestamp))
                ).one()
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to read time range") from e
        if first is None:
            return None
        return first, last
