"""
Tests for the subsystem activity rules.
"""

import itertools

import pytest

from pyvitoenergy.classifier import (
    classify,
    is_gas_active,
    is_house_heating_active,
    is_solar_active,
)


class TestSolarRule:
    def test_charging_status_is_active(self, sample_factory) -> None:
        assert is_solar_active(sample_factory(solar_status="Charging"))

    def test_charging_token_inside_longer_status(self, sample_factory) -> None:
        assert is_solar_active(sample_factory(solar_status="Solar Charging DHW"))

    def test_collector_pump_is_active(self, sample_factory) -> None:
        assert is_solar_active(sample_factory(collector_pump_on=True, solar_status="Standby"))

    def test_idle(self, sample_factory) -> None:
        assert not is_solar_active(sample_factory(solar_status="Standby"))


class TestBurnerRules:
    def test_dhw_pump_means_gas(self, sample_factory) -> None:
        sample = sample_factory(dhw_pump_on=True, burner_state="Burner in operation", boiler_modulation=40.0)

        assert is_gas_active(sample)
        assert not is_house_heating_active(sample)

    def test_house_heating(self, sample_factory) -> None:
        sample = sample_factory(burner_state="Burner in operation", boiler_modulation=40.0)

        assert is_house_heating_active(sample)
        assert not is_gas_active(sample)

    @pytest.mark.parametrize("modulation", [None, 0.0])
    def test_house_heating_needs_modulation(self, sample_factory, modulation) -> None:
        sample = sample_factory(burner_state="Burner in operation", boiler_modulation=modulation)

        assert not is_house_heating_active(sample)

    def test_house_heating_needs_operation_state(self, sample_factory) -> None:
        sample = sample_factory(burner_state="Standby", boiler_modulation=40.0)

        assert not is_house_heating_active(sample)


class TestClassify:
    def test_gas_and_house_heating_are_exclusive(self, sample_factory) -> None:
        combos = itertools.product(
            (True, False), ("Burner in operation", "Standby", ""), (None, 0.0, 35.0)
        )

        for i, (dhw, state, modulation) in enumerate(combos):
            sample = sample_factory(
                i, dhw_pump_on=dhw, burner_state=state, boiler_modulation=modulation
            )
            flags = classify(sample)
            assert not (flags.gas and flags.house_heating)

    def test_solar_is_independent_of_burner(self, sample_factory) -> None:
        flags = classify(
            sample_factory(
                solar_status="Charging",
                dhw_pump_on=True,
                burner_state="Burner in operation",
                boiler_modulation=30.0,
            )
        )

        assert flags.solar
        assert flags.gas
        assert not flags.house_heating
