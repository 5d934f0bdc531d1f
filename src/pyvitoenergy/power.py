"""
Instantaneous power model.

Solar power is estimated from the collector loop temperature difference
(collector B6 minus return sensor B31) at a fixed flow rate. Gas power is
the burner capacity scaled by the modulation reading. All values are kW.
"""

import math
from dataclasses import dataclass
from typing import Optional

from .classifier import is_gas_active, is_house_heating_active, is_solar_active
from .config import settings
from .samples import HeatingSample

SECONDS_PER_MINUTE = 60.0


@dataclass(frozen=True)
class PlantParameters:
    """Physical constants of the plant.

    Attributes:
        solar_flow_rate_lpm: Collector loop flow rate in L/min (1 kg/L assumed).
        specific_heat_kj_per_kg_k: Specific heat of the loop medium.
        burner_capacity_kw: Rated burner capacity shared by DHW and house heating.
    """

    solar_flow_rate_lpm: float = 5.5
    specific_heat_kj_per_kg_k: float = 4.18
    burner_capacity_kw: float = 10.0

    @classmethod
    def from_settings(cls) -> "PlantParameters":
        return cls(
            solar_flow_rate_lpm=settings.solar_flow_rate_lpm,
            specific_heat_kj_per_kg_k=settings.specific_heat_kj_per_kg_k,
            burner_capacity_kw=settings.burner_capacity_kw,
        )


def solar_thermal_power_kw(temp_diff_k: float, params: PlantParameters) -> float:
    """Heat carried by the collector loop, 0 for a non-positive temperature difference."""
    if temp_diff_k <= 0:
        return 0.0
    return (
        params.solar_flow_rate_lpm * params.specific_heat_kj_per_kg_k * temp_diff_k
    ) / SECONDS_PER_MINUTE


def burner_power_kw(modulation_percent: Optional[float], params: PlantParameters) -> float:
    if (
        modulation_percent is None
        or not math.isfinite(modulation_percent)
        or modulation_percent <= 0
    ):
        return 0.0
    return params.burner_capacity_kw * modulation_percent / 100.0


def solar_power_kw(sample: HeatingSample, params: PlantParameters) -> float:
    if not is_solar_active(sample):
        return 0.0
    return solar_thermal_power_kw(sample.collector_temp - sample.sensor_temp, params)


def gas_power_kw(sample: HeatingSample, params: PlantParameters) -> float:
    if not is_gas_active(sample):
        return 0.0
    return burner_power_kw(sample.boiler_modulation, params)


def house_heating_power_kw(sample: HeatingSample, params: PlantParameters) -> float:
    if not is_house_heating_active(sample):
        return 0.0
    return burner_power_kw(sample.boiler_modulation, params)
