"""
PyVitoEnergy - Energy accounting for solar/gas heating telemetry
"""

from .aggregator import RangeQuery, RangeStats, WindowSummary, range_stats, window_summary
from .config import settings
from .daily import DailyEnergyRecord, daily_aggregate
from .data_collector import DataCollector
from .database import DatabaseService
from .engine import DerivedSeries, EnergyEngine, derive_series
from .errors import PersistenceError, TelemetryParseError, VitoEnergyError
from .samples import HeatingSample, ingest

__version__ = "0.1.0"
__all__ = [
    "settings",
    "ingest",
    "derive_series",
    "range_stats",
    "window_summary",
    "daily_aggregate",
    "HeatingSample",
    "DerivedSeries",
    "EnergyEngine",
    "RangeQuery",
    "RangeStats",
    "WindowSummary",
    "DailyEnergyRecord",
    "DataCollector",
    "DatabaseService",
    "VitoEnergyError",
    "TelemetryParseError",
    "PersistenceError",
]
