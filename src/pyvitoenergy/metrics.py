"""
Headline figures for the dashboard cards.
"""

from dataclasses import dataclass
from typing import Sequence

import pandas as pd

from .classifier import is_gas_active, is_solar_active
from .samples import HeatingSample

MINUTES_PER_HOUR = 60.0


@dataclass(frozen=True)
class SystemMetrics:
    total_burner_starts: int = 0
    avg_collector_temp: float = 0.0
    max_outside_temp: float = 0.0
    max_dhw_temp: float = 0.0
    avg_water_pressure: float = 0.0
    solar_active_hours: float = 0.0
    gas_active_hours: float = 0.0


def _mean_of_positive(values: pd.Series) -> float:
    positive = values[values > 0]
    return float(positive.mean()) if len(positive) else 0.0


def system_metrics(samples: Sequence[HeatingSample]) -> SystemMetrics:
    """Summary figures over a sample series.

    Collector temperature and water pressure are averaged over positive
    readings only, since 0 stands for a missing value in the export.
    """
    if not samples:
        return SystemMetrics()

    df = pd.DataFrame(
        {
            "burner_starts": [s.burner_starts for s in samples],
            "collector_temp": [s.collector_temp for s in samples],
            "outside_temp": [s.outside_temp for s in samples],
            "dhw_temp_top": [s.dhw_temp_top for s in samples],
            "water_pressure": [s.water_pressure for s in samples],
        }
    )
    solar_minutes = sum(1 for s in samples if is_solar_active(s))
    gas_minutes = sum(1 for s in samples if is_gas_active(s))

    return SystemMetrics(
        total_burner_starts=int(df["burner_starts"].max() - df["burner_starts"].min()),
        avg_collector_temp=_mean_of_positive(df["collector_temp"]),
        max_outside_temp=float(df["outside_temp"].max()),
        max_dhw_temp=float(df["dhw_temp_top"].max()),
        avg_water_pressure=_mean_of_positive(df["water_pressure"]),
        solar_active_hours=solar_minutes / MINUTES_PER_HOUR,
        gas_active_hours=gas_minutes / MINUTES_PER_HOUR,
    )
