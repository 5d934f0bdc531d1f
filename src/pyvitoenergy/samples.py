"""
Telemetry ingestion for VitoEnergy.

Parses the semicolon separated minute export of the heating controller into
HeatingSample objects and merges new batches into the existing history.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple

from .config import settings
from .errors import TelemetryParseError

logger = logging.getLogger("VitoEnergy")

HEADER_TOKEN = "Date;Time of day;"
DELIMITER = ";"
MIN_FIELD_COUNT = 21
MODULATION_PLACEHOLDER = "----"
TIMESTAMP_FORMAT = "%d.%m.%Y %H:%M"

_DATE_PATTERN = re.compile(r"^\d{2}\.\d{2}\.\d{4}")
_NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)")

# (column index, attribute name, type) of every numeric column in the export
NUMERIC_COLUMNS = (
    (2, "collector_temp", float),
    (3, "outside_temp", float),
    (4, "dhw_temp_top", float),
    (5, "dhw_temp_bottom", float),
    (6, "flow_temp", float),
    (7, "flow_temp_setpoint", float),
    (8, "burner_starts", int),
    (10, "fan_control", float),
    (15, "water_pressure", float),
    (17, "fan_speed", int),
    (18, "return_temp", float),
    (19, "boiler_pump_speed", int),
    (20, "sensor_temp", float),
)


@dataclass(frozen=True)
class HeatingSample:
    """One minute of plant telemetry."""

    timestamp: datetime
    collector_temp: float = 0.0
    outside_temp: float = 0.0
    dhw_temp_top: float = 0.0
    dhw_temp_bottom: float = 0.0
    flow_temp: float = 0.0
    flow_temp_setpoint: float = 0.0
    burner_starts: int = 0
    boiler_modulation: Optional[float] = None
    fan_control: float = 0.0
    collector_pump_on: bool = False
    boiler_pump_on: bool = False
    burner_state: str = ""
    solar_status: str = ""
    water_pressure: float = 0.0
    dhw_pump_on: bool = False
    fan_speed: int = 0
    return_temp: float = 0.0
    boiler_pump_speed: int = 0
    sensor_temp: float = 0.0

    @property
    def date(self) -> date:
        return self.timestamp.date()

    @property
    def modulation_percent(self) -> float:
        """Burner modulation in percent, 0 when there is no reading."""
        return self.boiler_modulation if self.boiler_modulation is not None else 0.0


@dataclass(frozen=True)
class ParseResult:
    samples: List[HeatingSample]
    dropped_rows: int = 0
    coerced_fields: int = 0


@dataclass(frozen=True)
class IngestResult:
    """Outcome of merging one telemetry batch into the existing series."""

    samples: Tuple[HeatingSample, ...]
    parsed: int = 0
    added: int = 0
    duplicates: int = 0
    dropped_rows: int = 0
    coerced_fields: int = 0
    new_dates: Tuple[date, ...] = field(default_factory=tuple)


def parse_number(token: str, kind=float) -> Optional[float]:
    """Parse the leading number of a token, None if there is none."""
    match = _NUMBER_PATTERN.match(token.strip())
    if not match:
        return None
    value = float(match.group(0))
    return int(value) if kind is int else value


def parse_modulation(token: Optional[str]) -> Optional[float]:
    """Convert a modulation token like ' 45.0% ' to 45.0.

    The controller writes '----' when the burner reports no modulation; that
    placeholder and any other token that is not a plain decimal number
    (including "nan", "inf" and exponents) map to None.
    """
    if token is None:
        return None
    text = token.strip()
    if not text or text == MODULATION_PLACEHOLDER:
        return None
    number = text.rstrip("%").strip()
    if not _NUMBER_PATTERN.fullmatch(number):
        return None
    return float(number)


def parse_switch(token: str) -> bool:
    """Pumps are reported as 'On' / 'Off'."""
    return token.strip().lower() == "on"


def parse_timestamp(date_text: str, time_text: str) -> datetime:
    return datetime.strptime(f"{date_text.strip()} {time_text.strip()[:5]}", TIMESTAMP_FORMAT)


def _parse_row(values: List[str], line_number: int, strict: bool) -> Tuple[HeatingSample, int]:
    numbers = {}
    coerced = 0
    for index, name, kind in NUMERIC_COLUMNS:
        value = parse_number(values[index], kind)
        if value is None:
            if strict:
                raise TelemetryParseError(
                    f"Line {line_number}: cannot parse {name} from {values[index]!r}",
                    line_number=line_number,
                    field=name,
                )
            logger.debug(f"Line {line_number}: {name}={values[index]!r} is not a number, using 0")
            coerced += 1
            value = kind(0)
        numbers[name] = value

    sample = HeatingSample(
        timestamp=parse_timestamp(values[0], values[1]),
        boiler_modulation=parse_modulation(values[9]),
        collector_pump_on=parse_switch(values[11]),
        boiler_pump_on=parse_switch(values[12]),
        burner_state=values[13].strip(),
        solar_status=values[14].strip(),
        dhw_pump_on=parse_switch(values[16]),
        **numbers,
    )
    return sample, coerced


def parse_telemetry(text: str, strict: Optional[bool] = None) -> ParseResult:
    """Parse a telemetry export.

    Only rows after the 'Date;Time of day;' header line are considered. A row
    needs at least 21 fields and must start with a DD.MM.YYYY date, anything
    else is dropped. Numeric fields that cannot be parsed become 0 unless
    strict parsing is enabled, in which case TelemetryParseError is raised.

    Args:
        text: Raw export text.
        strict: Override settings.strict_parsing.

    Returns:
        ParseResult with the samples in file order and the drop/coerce counts.
    """
    strict = settings.strict_parsing if strict is None else strict
    lines = text.splitlines()

    start = None
    for i, line in enumerate(lines):
        if HEADER_TOKEN in line:
            start = i + 1
            break

    if start is None:
        logger.warning("No 'Date;Time of day;' header found, nothing to import")
        return ParseResult(samples=[])

    samples = []
    dropped = 0
    coerced = 0
    for line_number, line in enumerate(lines[start:], start=start + 1):
        if not line.strip():
            continue
        values = line.split(DELIMITER)
        if len(values) < MIN_FIELD_COUNT or not _DATE_PATTERN.match(values[0].strip()):
            logger.debug(f"Dropping malformed line {line_number}")
            dropped += 1
            continue
        try:
            sample, row_coerced = _parse_row(values, line_number, strict)
        except ValueError as e:
            # invalid calendar date or time of day
            logger.debug(f"Dropping line {line_number}: {e}")
            dropped += 1
            continue
        samples.append(sample)
        coerced += row_coerced

    if dropped:
        logger.warning(f"Dropped {dropped} malformed rows")
    if coerced:
        logger.warning(f"Coerced {coerced} unparsable numeric fields to 0")

    return ParseResult(samples=samples, dropped_rows=dropped, coerced_fields=coerced)


def merge_samples(
    existing: Iterable[HeatingSample], new: Iterable[HeatingSample]
) -> Tuple[Tuple[HeatingSample, ...], int, int]:
    """Merge a batch into the existing samples.

    The first sample seen for a timestamp wins, so existing samples are never
    replaced and duplicates inside the batch are discarded as well.

    Returns:
        Tuple of (merged samples sorted by time, added count, duplicate count)
    """
    by_time = {}
    for sample in existing:
        by_time.setdefault(sample.timestamp, sample)
    before = len(by_time)

    duplicates = 0
    for sample in new:
        if sample.timestamp in by_time:
            duplicates += 1
            continue
        by_time[sample.timestamp] = sample

    merged = tuple(sorted(by_time.values(), key=lambda s: s.timestamp))
    return merged, len(merged) - before, duplicates


def ingest(
    raw_text: str,
    existing: Iterable[HeatingSample] = (),
    strict: Optional[bool] = None,
) -> IngestResult:
    """Parse a raw export and merge it into the existing series."""
    parsed = parse_telemetry(raw_text, strict=strict)
    existing = tuple(existing)
    known = {s.timestamp for s in existing}
    merged, added, duplicates = merge_samples(existing, parsed.samples)

    new_dates = sorted({s.date for s in parsed.samples if s.timestamp not in known})
    if added == 0:
        logger.info(f"No new data points in batch ({duplicates} duplicates)")
    else:
        logger.info(f"Merged {added} new data points ({duplicates} duplicates skipped)")

    return IngestResult(
        samples=merged,
        parsed=len(parsed.samples),
        added=added,
        duplicates=duplicates,
        dropped_rows=parsed.dropped_rows,
        coerced_fields=parsed.coerced_fields,
        new_dates=tuple(new_dates),
    )
