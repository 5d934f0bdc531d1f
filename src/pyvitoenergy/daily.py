"""
Daily energy records.

One DailyEnergyRecord summarises the samples of one calendar date. Records
are computed from the same derived series and range statistics as the
dashboard, so a day's totals match the full-range legend for that day.
"""

import logging
from collections import OrderedDict
from dataclasses import asdict, dataclass, fields
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd

from .aggregator import window_summary
from .engine import derive_series
from .integrator import IntegrationMode
from .power import PlantParameters
from .samples import HeatingSample, merge_samples
from .subsystems import GAS, HOUSE_HEATING, SOLAR

logger = logging.getLogger("VitoEnergy")


@dataclass(frozen=True)
class DailyEnergyRecord:
    date: date
    solar_energy_kwh: float = 0.0
    gas_energy_kwh: float = 0.0
    house_heating_energy_kwh: float = 0.0
    total_energy_kwh: float = 0.0
    solar_active_minutes: int = 0
    gas_active_minutes: int = 0
    house_heating_active_minutes: int = 0
    avg_collector_temp: float = 0.0
    max_collector_temp: float = 0.0
    avg_dhw_temp: float = 0.0
    max_dhw_temp: float = 0.0
    avg_outside_temp: float = 0.0
    min_outside_temp: float = 0.0
    max_outside_temp: float = 0.0
    avg_flow_temp: float = 0.0
    max_flow_temp: float = 0.0
    avg_return_temp: float = 0.0
    avg_water_pressure: float = 0.0
    avg_boiler_modulation: float = 0.0
    burner_starts: int = 0
    data_points_count: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


RECORD_FIELDS = [f.name for f in fields(DailyEnergyRecord)]


@dataclass(frozen=True)
class EnergySummary:
    total_days: int = 0
    solar_energy_kwh: float = 0.0
    gas_energy_kwh: float = 0.0
    house_heating_energy_kwh: float = 0.0
    total_energy_kwh: float = 0.0
    avg_daily_energy_kwh: float = 0.0
    solar_percent: float = 0.0
    gas_percent: float = 0.0
    house_heating_percent: float = 0.0


def daily_aggregate(
    samples: Sequence[HeatingSample],
    day: Optional[date] = None,
    params: Optional[PlantParameters] = None,
    mode: Union[IntegrationMode, str, None] = None,
) -> DailyEnergyRecord:
    """Compute the record of one calendar date.

    Args:
        samples: Samples of a single date, in any order.
        day: The date; required when samples is empty.
        params: Plant constants, defaults from settings.
        mode: Integration mode, defaults from settings.

    Returns:
        DailyEnergyRecord for the date, all zero when there are no samples.

    Raises:
        ValueError: If the samples span several dates or do not match `day`.
    """
    dates = {s.date for s in samples}
    if len(dates) > 1:
        raise ValueError(f"Samples span {len(dates)} dates, expected one")
    if dates:
        sample_day = dates.pop()
        if day is not None and day != sample_day:
            raise ValueError(f"Samples are from {sample_day}, not {day}")
        day = sample_day
    if day is None:
        raise ValueError("A date is required to aggregate an empty sample list")
    if not samples:
        return DailyEnergyRecord(date=day)

    ordered, _, _ = merge_samples((), samples)
    derived = derive_series(ordered, params=params, mode=mode)
    summary = window_summary(derived)

    df = pd.DataFrame(
        {
            "collector_temp": [s.collector_temp for s in ordered],
            "dhw_temp_top": [s.dhw_temp_top for s in ordered],
            "outside_temp": [s.outside_temp for s in ordered],
            "flow_temp": [s.flow_temp for s in ordered],
            "return_temp": [s.return_temp for s in ordered],
            "water_pressure": [s.water_pressure for s in ordered],
            "modulation": [s.modulation_percent for s in ordered],
            "burner_starts": [s.burner_starts for s in ordered],
        }
    )
    heating_modulation = df.loc[derived.active(HOUSE_HEATING).to_numpy(), "modulation"]

    solar = summary.stats[SOLAR]
    gas = summary.stats[GAS]
    house = summary.stats[HOUSE_HEATING]
    return DailyEnergyRecord(
        date=day,
        solar_energy_kwh=solar.energy_kwh,
        gas_energy_kwh=gas.energy_kwh,
        house_heating_energy_kwh=house.energy_kwh,
        total_energy_kwh=summary.total_energy_kwh,
        solar_active_minutes=solar.active_sample_count,
        gas_active_minutes=gas.active_sample_count,
        house_heating_active_minutes=house.active_sample_count,
        avg_collector_temp=float(df["collector_temp"].mean()),
        max_collector_temp=float(df["collector_temp"].max()),
        avg_dhw_temp=float(df["dhw_temp_top"].mean()),
        max_dhw_temp=float(df["dhw_temp_top"].max()),
        avg_outside_temp=float(df["outside_temp"].mean()),
        min_outside_temp=float(df["outside_temp"].min()),
        max_outside_temp=float(df["outside_temp"].max()),
        avg_flow_temp=float(df["flow_temp"].mean()),
        max_flow_temp=float(df["flow_temp"].max()),
        avg_return_temp=float(df["return_temp"].mean()),
        avg_water_pressure=float(df["water_pressure"].mean()),
        avg_boiler_modulation=float(heating_modulation.mean()) if len(heating_modulation) else 0.0,
        burner_starts=int(df["burner_starts"].max() - df["burner_starts"].min()),
        data_points_count=len(ordered),
    )


def group_by_date(samples: Iterable[HeatingSample]) -> "OrderedDict[date, List[HeatingSample]]":
    """Split samples into calendar dates, in date order."""
    groups: Dict[date, List[HeatingSample]] = {}
    for sample in samples:
        groups.setdefault(sample.date, []).append(sample)
    return OrderedDict(sorted(groups.items()))


def daily_aggregates(
    samples: Iterable[HeatingSample],
    params: Optional[PlantParameters] = None,
    mode: Union[IntegrationMode, str, None] = None,
) -> List[DailyEnergyRecord]:
    records = []
    for day, day_samples in group_by_date(samples).items():
        records.append(daily_aggregate(day_samples, day=day, params=params, mode=mode))
    return records


def records_to_frame(records: Iterable[DailyEnergyRecord]) -> pd.DataFrame:
    rows = [r.as_dict() for r in records]
    if not rows:
        return pd.DataFrame(columns=RECORD_FIELDS)
    return pd.DataFrame(rows, columns=RECORD_FIELDS)


def summarize_records(records: Iterable[DailyEnergyRecord]) -> EnergySummary:
    """Totals and shares over a set of daily records."""
    records = list(records)
    if not records:
        return EnergySummary()

    solar = sum(r.solar_energy_kwh for r in records)
    gas = sum(r.gas_energy_kwh for r in records)
    house = sum(r.house_heating_energy_kwh for r in records)
    total = solar + gas + house

    def share(value: float) -> float:
        return value / total * 100.0 if total > 0 else 0.0

    return EnergySummary(
        total_days=len(records),
        solar_energy_kwh=solar,
        gas_energy_kwh=gas,
        house_heating_energy_kwh=house,
        total_energy_kwh=total,
        avg_daily_energy_kwh=total / len(records),
        solar_percent=share(solar),
        gas_percent=share(gas),
        house_heating_percent=share(house),
    )


def monthly_totals(records: Iterable[DailyEnergyRecord]) -> pd.DataFrame:
    """Energy per calendar month with the number of recorded days."""
    df = records_to_frame(records)
    columns = [
        "month",
        "solar_energy_kwh",
        "gas_energy_kwh",
        "house_heating_energy_kwh",
        "total_energy_kwh",
        "days",
    ]
    if df.empty:
        return pd.DataFrame(columns=columns)

    df["month"] = pd.to_datetime(df["date"]).dt.strftime("%Y-%m")
    monthly = (
        df.groupby("month")
        .agg(
            solar_energy_kwh=("solar_energy_kwh", "sum"),
            gas_energy_kwh=("gas_energy_kwh", "sum"),
            house_heating_energy_kwh=("house_heating_energy_kwh", "sum"),
            total_energy_kwh=("total_energy_kwh", "sum"),
            days=("date", "count"),
        )
        .reset_index()
        .sort_values("month")
        .reset_index(drop=True)
    )
    return monthly[columns]
