"""
Tests for daily energy records, summaries and monthly totals.
"""

from datetime import date, timedelta

import pytest

from pyvitoenergy.daily import (
    DailyEnergyRecord,
    daily_aggregate,
    daily_aggregates,
    group_by_date,
    monthly_totals,
    records_to_frame,
    summarize_records,
)
from pyvitoenergy.power import PlantParameters

DAY = date(2025, 8, 25)


@pytest.fixture()
def day_samples(sample_factory):
    samples = []
    for i in range(10):
        fields = {"outside_temp": float(i), "burner_starts": 1000 if i < 6 else 1002}
        if i < 4:
            fields.update(collector_temp=50.0, sensor_temp=40.0, solar_status="Charging")
        elif i < 6:
            fields.update(dhw_pump_on=True, burner_state="Burner in operation", boiler_modulation=45.0)
        elif i < 9:
            fields.update(burner_state="Burner in operation", boiler_modulation=[60.0, 40.0, 20.0][i - 6])
        samples.append(sample_factory(i, **fields))
    return samples


class TestDailyAggregate:
    def test_energy_and_minutes(self, day_samples) -> None:
        record = daily_aggregate(day_samples, params=PlantParameters(), mode="fixed")

        assert record.date == DAY
        assert record.solar_energy_kwh == pytest.approx(4 * 3.831667 / 60, abs=1e-6)
        assert record.gas_energy_kwh == pytest.approx(2 * 4.5 / 60)
        assert record.house_heating_energy_kwh == pytest.approx(12.0 / 60)
        assert record.total_energy_kwh == pytest.approx(
            record.solar_energy_kwh + record.gas_energy_kwh + record.house_heating_energy_kwh
        )
        assert record.solar_active_minutes == 4
        assert record.gas_active_minutes == 2
        assert record.house_heating_active_minutes == 3
        assert record.data_points_count == 10

    def test_temperatures_and_counters(self, day_samples) -> None:
        record = daily_aggregate(day_samples, params=PlantParameters(), mode="fixed")

        assert record.avg_outside_temp == pytest.approx(4.5)
        assert record.min_outside_temp == 0.0
        assert record.max_outside_temp == 9.0
        assert record.max_collector_temp == 50.0
        assert record.avg_boiler_modulation == pytest.approx(40.0)
        assert record.burner_starts == 2

    def test_input_order_does_not_matter(self, day_samples) -> None:
        forward = daily_aggregate(day_samples, params=PlantParameters(), mode="fixed")
        backward = daily_aggregate(list(reversed(day_samples)), params=PlantParameters(), mode="fixed")

        assert forward == backward

    def test_several_dates_raise(self, sample_factory) -> None:
        samples = [sample_factory(0), sample_factory(24 * 60)]

        with pytest.raises(ValueError):
            daily_aggregate(samples)

    def test_wrong_day_raises(self, day_samples) -> None:
        with pytest.raises(ValueError):
            daily_aggregate(day_samples, day=DAY + timedelta(days=1))

    def test_empty_day_is_all_zero(self) -> None:
        record = daily_aggregate([], day=DAY)

        assert record == DailyEnergyRecord(date=DAY)

    def test_empty_without_day_raises(self) -> None:
        with pytest.raises(ValueError):
            daily_aggregate([])


class TestGrouping:
    def test_group_by_date_is_ordered(self, sample_factory) -> None:
        samples = [sample_factory(24 * 60 + 1), sample_factory(0), sample_factory(24 * 60)]

        groups = group_by_date(samples)

        assert list(groups) == [DAY, DAY + timedelta(days=1)]
        assert len(groups[DAY + timedelta(days=1)]) == 2

    def test_daily_aggregates_one_record_per_date(self, sample_factory) -> None:
        samples = [sample_factory(i * 24 * 60) for i in range(3)]

        records = daily_aggregates(samples, PlantParameters(), "fixed")

        assert [r.date for r in records] == [DAY + timedelta(days=i) for i in range(3)]
        assert all(r.data_points_count == 1 for r in records)


class TestSummaries:
    @pytest.fixture()
    def records(self):
        return [
            DailyEnergyRecord(date=date(2025, 8, 30), solar_energy_kwh=3.0, gas_energy_kwh=1.0, total_energy_kwh=4.0),
            DailyEnergyRecord(date=date(2025, 8, 31), solar_energy_kwh=1.0, house_heating_energy_kwh=2.0, total_energy_kwh=3.0),
            DailyEnergyRecord(date=date(2025, 9, 1), gas_energy_kwh=1.0, total_energy_kwh=1.0),
        ]

    def test_summarize_records(self, records) -> None:
        summary = summarize_records(records)

        assert summary.total_days == 3
        assert summary.total_energy_kwh == pytest.approx(8.0)
        assert summary.avg_daily_energy_kwh == pytest.approx(8.0 / 3)
        assert summary.solar_percent == pytest.approx(50.0)
        assert summary.gas_percent == pytest.approx(25.0)
        assert summary.house_heating_percent == pytest.approx(25.0)

    def test_summarize_nothing(self) -> None:
        summary = summarize_records([])

        assert summary.total_days == 0
        assert summary.solar_percent == 0.0

    def test_monthly_totals(self, records) -> None:
        monthly = monthly_totals(records)

        assert list(monthly["month"]) == ["2025-08", "2025-09"]
        assert list(monthly["days"]) == [2, 1]
        assert list(monthly["total_energy_kwh"]) == pytest.approx([7.0, 1.0])
        assert list(monthly["solar_energy_kwh"]) == pytest.approx([4.0, 0.0])

    def test_monthly_totals_empty(self) -> None:
        assert monthly_totals([]).empty

    def test_records_to_frame(self, records) -> None:
        frame = records_to_frame(records)

        assert len(frame) == 3
        assert frame.columns[0] == "date"
        assert records_to_frame([]).empty
