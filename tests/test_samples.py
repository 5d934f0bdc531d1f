"""
Tests for telemetry parsing and merging.

Covers the row validity rules, lenient and strict numeric parsing, the
modulation and pump tokens, and the merge/dedup behaviour of ingest().
"""

from datetime import datetime, timedelta

import pytest

from pyvitoenergy.errors import TelemetryParseError
from pyvitoenergy.samples import (
    HeatingSample,
    ingest,
    merge_samples,
    parse_modulation,
    parse_number,
    parse_switch,
    parse_telemetry,
)

_T0 = datetime(2025, 8, 25, 12, 0)


def _times(n: int, start: datetime = _T0) -> list[datetime]:
    return [start + timedelta(minutes=i) for i in range(n)]


class TestTokenParsing:
    def test_modulation_percent_token(self) -> None:
        assert parse_modulation(" 45.0% ") == 45.0
        assert parse_modulation("100%") == 100.0

    def test_modulation_placeholder_is_none(self) -> None:
        assert parse_modulation("----") is None
        assert parse_modulation("") is None
        assert parse_modulation(None) is None

    def test_modulation_garbage_is_none(self) -> None:
        assert parse_modulation("n/a") is None

    @pytest.mark.parametrize("token", ["nan%", "inf%", "-inf%", "NaN", "1e3%", "45.0%%x"])
    def test_modulation_non_decimal_is_none(self, token) -> None:
        assert parse_modulation(token) is None

    def test_switch_tokens(self) -> None:
        assert parse_switch("On") is True
        assert parse_switch(" on ") is True
        assert parse_switch("Off") is False
        assert parse_switch("") is False

    def test_number_uses_leading_digits(self) -> None:
        assert parse_number("12.5") == 12.5
        assert parse_number(" -3.0 ") == -3.0
        assert parse_number("1.8 bar") == 1.8
        assert parse_number("1042", int) == 1042
        assert parse_number("abc") is None
        assert parse_number("") is None


class TestParseTelemetry:
    def test_parses_rows_after_header(self, row_factory, export_factory) -> None:
        text = export_factory([row_factory(t) for t in _times(3)])

        result = parse_telemetry(text)

        assert len(result.samples) == 3
        assert result.dropped_rows == 0
        assert result.samples[0].timestamp == _T0
        assert result.samples[0].collector_temp == 20.0
        assert result.samples[0].sensor_temp == 40.0
        assert result.samples[0].burner_starts == 1000
        assert result.samples[0].boiler_modulation is None

    def test_no_header_yields_nothing(self, row_factory) -> None:
        text = "\n".join(row_factory(t) for t in _times(3))

        assert parse_telemetry(text).samples == []

    def test_rows_before_header_are_ignored(self, row_factory, export_factory) -> None:
        text = row_factory(_T0 - timedelta(minutes=5)) + "\n" + export_factory([row_factory(_T0)])

        result = parse_telemetry(text)

        assert [s.timestamp for s in result.samples] == [_T0]

    def test_short_and_undated_rows_are_dropped(self, row_factory, export_factory) -> None:
        rows = [
            row_factory(_T0),
            "25.08.2025;12:01;20.0;15.0",
            "garbage;12:02;" + ";" * 25,
            row_factory(_T0 + timedelta(minutes=3)),
        ]

        result = parse_telemetry(export_factory(rows))

        assert len(result.samples) == 2
        assert result.dropped_rows == 2

    def test_invalid_calendar_date_is_dropped(self, row_factory, export_factory) -> None:
        bad = row_factory(_T0).replace("25.08.2025", "31.02.2025", 1)

        result = parse_telemetry(export_factory([bad, row_factory(_T0)]))

        assert len(result.samples) == 1
        assert result.dropped_rows == 1

    def test_unparsable_numeric_field_becomes_zero(self, row_factory, export_factory) -> None:
        text = export_factory([row_factory(_T0, collector_temp="--", burner_starts="x")])

        result = parse_telemetry(text, strict=False)

        assert result.samples[0].collector_temp == 0.0
        assert result.samples[0].burner_starts == 0
        assert result.coerced_fields == 2

    def test_strict_mode_raises(self, row_factory, export_factory) -> None:
        text = export_factory([row_factory(_T0, collector_temp="--")])

        with pytest.raises(TelemetryParseError) as exc_info:
            parse_telemetry(text, strict=True)
        assert exc_info.value.field == "collector_temp"

    def test_status_fields(self, row_factory, export_factory) -> None:
        text = export_factory(
            [
                row_factory(
                    _T0,
                    modulation=" 45.0% ",
                    collector_pump="On",
                    dhw_pump="On",
                    burner_state="Burner in operation",
                    solar_status="Charging",
                )
            ]
        )

        sample = parse_telemetry(text).samples[0]

        assert sample.boiler_modulation == 45.0
        assert sample.collector_pump_on is True
        assert sample.dhw_pump_on is True
        assert sample.boiler_pump_on is False
        assert sample.burner_state == "Burner in operation"
        assert sample.solar_status == "Charging"

    def test_time_with_seconds_is_truncated(self, row_factory, export_factory) -> None:
        row = row_factory(_T0).replace(";12:00;", ";12:00:30;", 1)

        sample = parse_telemetry(export_factory([row])).samples[0]

        assert sample.timestamp == _T0


class TestMergeSamples:
    def test_existing_sample_wins(self) -> None:
        old = HeatingSample(timestamp=_T0, collector_temp=50.0)
        new = HeatingSample(timestamp=_T0, collector_temp=99.0)

        merged, added, duplicates = merge_samples([old], [new])

        assert merged == (old,)
        assert added == 0
        assert duplicates == 1

    def test_duplicates_inside_batch_are_dropped(self) -> None:
        first = HeatingSample(timestamp=_T0, collector_temp=1.0)
        second = HeatingSample(timestamp=_T0, collector_temp=2.0)

        merged, added, duplicates = merge_samples([], [first, second])

        assert merged == (first,)
        assert added == 1
        assert duplicates == 1

    def test_result_is_sorted(self) -> None:
        samples = [HeatingSample(timestamp=t) for t in reversed(_times(5))]

        merged, _, _ = merge_samples([], samples)

        assert [s.timestamp for s in merged] == _times(5)

    def test_sorting_is_chronological_across_months(self) -> None:
        # day-first strings would sort 01.09 before 31.08
        late = HeatingSample(timestamp=datetime(2025, 9, 1, 0, 0))
        early = HeatingSample(timestamp=datetime(2025, 8, 31, 23, 59))

        merged, _, _ = merge_samples([], [late, early])

        assert merged == (early, late)


class TestIngest:
    def test_ingest_twice_is_idempotent(self, row_factory, export_factory) -> None:
        text = export_factory([row_factory(t) for t in _times(20)])

        once = ingest(text)
        twice = ingest(text, existing=once.samples)

        assert twice.samples == once.samples
        assert twice.added == 0
        assert twice.duplicates == 20

    def test_reingest_with_new_rows(self, row_factory, export_factory) -> None:
        first_times = _times(100)
        first = ingest(export_factory([row_factory(t) for t in first_times]))

        new_times = _times(10, start=first_times[-1] + timedelta(minutes=1))
        second = ingest(
            export_factory([row_factory(t) for t in first_times + new_times]),
            existing=first.samples,
        )

        timestamps = [s.timestamp for s in second.samples]
        assert len(second.samples) == 110
        assert timestamps == sorted(timestamps)
        assert len(set(timestamps)) == 110
        assert second.added == 10
        assert second.duplicates == 100

    def test_new_dates_lists_only_new_days(self, row_factory, export_factory) -> None:
        first = ingest(export_factory([row_factory(_T0)]))
        next_day = _T0 + timedelta(days=1)

        second = ingest(
            export_factory([row_factory(_T0), row_factory(next_day)]), existing=first.samples
        )

        assert second.new_dates == (next_day.date(),)

    def test_empty_batch_is_noop(self, row_factory, export_factory) -> None:
        first = ingest(export_factory([row_factory(_T0)]))

        result = ingest("", existing=first.samples)

        assert result.samples == first.samples
        assert result.added == 0
        assert result.parsed == 0
