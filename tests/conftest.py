"""
Shared test fixtures for VitoEnergy tests.

Provides factories for telemetry export rows, complete export texts and
HeatingSample objects, plus a throwaway SQLite database per test.
"""

from collections.abc import Callable
from datetime import datetime, timedelta

import pytest

from pyvitoenergy.database import DatabaseService
from pyvitoenergy.samples import HeatingSample

BASE_TIME = datetime(2025, 8, 25, 12, 0)

HEADER = (
    "Date;Time of day;Collector temperature B6;Outside temperature;"
    "DHW temperature top B3;DHW temperature bottom B3.1;Flow temperature;"
    "Flow temperature setpoint;Burner starts;Boiler modulation;Fan control;"
    "Collector pump;Boiler pump;Burner state;Solar status;Water pressure;"
    "DHW pump;Fan speed;Return temperature;Boiler pump speed;Sensor temperature B31"
)

PREAMBLE = "Vitotronic 200\nExport created 25.08.2025\n\n"

_ROW_DEFAULTS = {
    "collector_temp": "20.0",
    "outside_temp": "15.0",
    "dhw_top": "45.0",
    "dhw_bottom": "40.0",
    "flow_temp": "30.0",
    "flow_setpoint": "35.0",
    "burner_starts": "1000",
    "modulation": "----",
    "fan_control": "0",
    "collector_pump": "Off",
    "boiler_pump": "Off",
    "burner_state": "Standby",
    "solar_status": "Standby",
    "water_pressure": "1.8",
    "dhw_pump": "Off",
    "fan_speed": "0",
    "return_temp": "28.0",
    "boiler_pump_speed": "0",
    "sensor_temp": "40.0",
}


def make_row(when: datetime, **fields: object) -> str:
    """Build one export row; keyword arguments override the default fields."""
    values = {**_ROW_DEFAULTS, **{k: str(v) for k, v in fields.items()}}
    return ";".join(
        [when.strftime("%d.%m.%Y"), when.strftime("%H:%M")] + [values[k] for k in _ROW_DEFAULTS]
    )


def make_export(rows: list[str]) -> str:
    return PREAMBLE + HEADER + "\n" + "\n".join(rows) + "\n"


def minute(i: int) -> datetime:
    return BASE_TIME + timedelta(minutes=i)


@pytest.fixture()
def row_factory() -> Callable[..., str]:
    return make_row


@pytest.fixture()
def export_factory() -> Callable[[list[str]], str]:
    return make_export


@pytest.fixture()
def sample_factory() -> Callable[..., HeatingSample]:
    """Return a factory building a HeatingSample at BASE_TIME + i minutes."""

    def _make(i: int = 0, **overrides: object) -> HeatingSample:
        return HeatingSample(timestamp=minute(i), **overrides)

    return _make


@pytest.fixture()
def db(tmp_path) -> DatabaseService:
    return DatabaseService(str(tmp_path / "heating_energy.db"))
