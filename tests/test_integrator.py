"""
Tests for cumulative energy integration.
"""

import pandas as pd
import pytest

from pyvitoenergy.integrator import IntegrationMode, integrate, interval_hours, resolve_mode


def _times(*minutes: int) -> pd.Series:
    return pd.Series(pd.to_datetime("2025-08-25 12:00") + pd.to_timedelta(list(minutes), unit="m"))


class TestIntegrate:
    def test_fixed_interval_cumulative(self) -> None:
        power = pd.Series([3.831667, 5.7475, 7.663333])

        energy = integrate(power, _times(0, 1, 2), IntegrationMode.FIXED_INTERVAL, 1.0)

        assert list(energy) == pytest.approx([0.063861, 0.159653, 0.287375], abs=1e-5)

    def test_cumulative_never_decreases(self) -> None:
        power = pd.Series([0.0, 2.0, -1.0, 0.0, 5.0, 0.0])

        energy = integrate(power, _times(0, 1, 2, 3, 4, 5), "fixed", 1.0)

        assert energy.is_monotonic_increasing
        assert energy.iloc[2] == energy.iloc[1]

    def test_fixed_interval_ignores_gaps(self) -> None:
        power = pd.Series([6.0, 6.0, 6.0])

        energy = integrate(power, _times(0, 1, 11), IntegrationMode.FIXED_INTERVAL, 1.0)

        assert list(energy) == pytest.approx([0.1, 0.2, 0.3])

    def test_elapsed_time_counts_gaps(self) -> None:
        power = pd.Series([6.0, 6.0, 6.0])

        energy = integrate(power, _times(0, 1, 11), IntegrationMode.ELAPSED_TIME, 1.0)

        assert list(energy) == pytest.approx([0.1, 0.2, 1.2])

    def test_result_keeps_power_index(self) -> None:
        power = pd.Series([1.0, 1.0], index=[10, 11])
        times = pd.Series(_times(0, 1).to_numpy(), index=[10, 11])

        energy = integrate(power, times, "fixed", 1.0)

        assert list(energy.index) == [10, 11]

    def test_length_mismatch_raises(self) -> None:
        with pytest.raises(ValueError):
            integrate(pd.Series([1.0, 2.0]), _times(0), "fixed", 1.0)


class TestIntervals:
    def test_first_elapsed_interval_is_nominal(self) -> None:
        dt = interval_hours(_times(0, 5), IntegrationMode.ELAPSED_TIME, 1.0)

        assert list(dt) == pytest.approx([1 / 60, 5 / 60])

    def test_nominal_interval_setting(self) -> None:
        dt = interval_hours(_times(0, 1), IntegrationMode.FIXED_INTERVAL, 2.0)

        assert list(dt) == pytest.approx([2 / 60, 2 / 60])

    def test_resolve_mode_from_string(self) -> None:
        assert resolve_mode("elapsed") is IntegrationMode.ELAPSED_TIME

    def test_unknown_mode_raises(self) -> None:
        with pytest.raises(ValueError):
            resolve_mode("trapezoid")
