"""
Cumulative energy integration.

cumulative[i] = cumulative[i-1] + power[i] * dt[i]

In FIXED_INTERVAL mode dt is the nominal sample interval for every sample,
which is how existing daily totals were calibrated: gaps in the export count
as fully sampled minutes. ELAPSED_TIME mode uses the real time since the
previous sample instead (the first sample keeps the nominal interval).
"""

import logging
from enum import Enum
from typing import Optional, Union

import pandas as pd

from .config import settings

logger = logging.getLogger("VitoEnergy")

MINUTES_PER_HOUR = 60.0


class IntegrationMode(str, Enum):
    FIXED_INTERVAL = "fixed"
    ELAPSED_TIME = "elapsed"


def resolve_mode(mode: Union[IntegrationMode, str, None] = None) -> IntegrationMode:
    if mode is None:
        mode = settings.integration_mode
    return IntegrationMode(mode)


def interval_hours(
    timestamps: pd.Series,
    mode: Union[IntegrationMode, str, None] = None,
    nominal_interval_minutes: Optional[float] = None,
) -> pd.Series:
    """Integration step in hours for every sample."""
    mode = resolve_mode(mode)
    if nominal_interval_minutes is None:
        nominal_interval_minutes = settings.nominal_interval_minutes
    nominal = nominal_interval_minutes / MINUTES_PER_HOUR

    if mode is IntegrationMode.FIXED_INTERVAL:
        return pd.Series(nominal, index=timestamps.index, dtype="float64")

    elapsed = pd.to_datetime(timestamps).diff().dt.total_seconds() / 3600.0
    return elapsed.fillna(nominal).clip(lower=0.0).astype("float64")


def integrate(
    power_kw: pd.Series,
    timestamps: pd.Series,
    mode: Union[IntegrationMode, str, None] = None,
    nominal_interval_minutes: Optional[float] = None,
) -> pd.Series:
    """Integrate a power series (kW) into cumulative energy (kWh).

    The result is index-aligned with power_kw and never decreases.
    """
    if len(power_kw) != len(timestamps):
        raise ValueError(
            f"power and timestamps differ in length ({len(power_kw)} != {len(timestamps)})"
        )
    dt = interval_hours(timestamps, mode, nominal_interval_minutes)
    increments = power_kw.clip(lower=0.0).to_numpy() * dt.to_numpy()
    return pd.Series(increments, index=power_kw.index, dtype="float64").cumsum()
