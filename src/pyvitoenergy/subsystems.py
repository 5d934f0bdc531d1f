"""
Subsystem definitions.

Every consumer of activity and power figures (derived series, daily records,
dashboard) iterates SUBSYSTEMS instead of re-implementing the rules.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from .classifier import is_gas_active, is_house_heating_active, is_solar_active
from .power import PlantParameters, gas_power_kw, house_heating_power_kw, solar_power_kw
from .samples import HeatingSample

SOLAR = "solar"
GAS = "gas"
HOUSE_HEATING = "house_heating"


@dataclass(frozen=True)
class SubsystemDefinition:
    name: str
    label: str
    is_active: Callable[[HeatingSample], bool]
    power_kw: Callable[[HeatingSample, PlantParameters], float]

    @property
    def active_column(self) -> str:
        return f"{self.name}_active"

    @property
    def power_column(self) -> str:
        return f"{self.name}_power_kw"

    @property
    def energy_column(self) -> str:
        return f"{self.name}_energy_kwh"

    @property
    def active_count_column(self) -> str:
        return f"{self.name}_active_count"


SUBSYSTEMS: Tuple[SubsystemDefinition, ...] = (
    SubsystemDefinition(SOLAR, "Solar", is_solar_active, solar_power_kw),
    SubsystemDefinition(GAS, "Gas (hot water)", is_gas_active, gas_power_kw),
    SubsystemDefinition(
        HOUSE_HEATING, "Gas (house heating)", is_house_heating_active, house_heating_power_kw
    ),
)

SUBSYSTEMS_BY_NAME: Dict[str, SubsystemDefinition] = {s.name: s for s in SUBSYSTEMS}


def get_subsystem(name: str) -> SubsystemDefinition:
    try:
        return SUBSYSTEMS_BY_NAME[name]
    except KeyError:
        raise ValueError(
            f"Unknown subsystem {name!r}, expected one of {', '.join(SUBSYSTEMS_BY_NAME)}"
        ) from None
