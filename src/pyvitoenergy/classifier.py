"""
Activity rules for the three plant subsystems.
"""

from dataclasses import dataclass

from .samples import HeatingSample

SOLAR_CHARGING_TOKEN = "Charging"
BURNER_OPERATION_TOKEN = "operation"


def is_solar_active(sample: HeatingSample) -> bool:
    """Solar loop is active while the controller reports charging or the collector pump runs."""
    return SOLAR_CHARGING_TOKEN in sample.solar_status or sample.collector_pump_on


def is_gas_active(sample: HeatingSample) -> bool:
    """The burner heats domestic hot water while the DHW pump runs."""
    return sample.dhw_pump_on


def is_house_heating_active(sample: HeatingSample) -> bool:
    """The burner heats the house when it fires and the DHW pump is off."""
    return (
        BURNER_OPERATION_TOKEN in sample.burner_state
        and sample.modulation_percent > 0
        and not sample.dhw_pump_on
    )


@dataclass(frozen=True)
class ActivityFlags:
    solar: bool
    gas: bool
    house_heating: bool


def classify(sample: HeatingSample) -> ActivityFlags:
    return ActivityFlags(
        solar=is_solar_active(sample),
        gas=is_gas_active(sample),
        house_heating=is_house_heating_active(sample),
    )
