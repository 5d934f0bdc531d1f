"""
Telemetry-to-energy derivation.

derive_series() runs every sample through the subsystem table (activity rule
and power formula) and integrates the power columns into cumulative energy.
EnergyEngine keeps the current samples together with their derived series
and replaces both at once whenever a batch is ingested.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .integrator import IntegrationMode, integrate, resolve_mode
from .power import PlantParameters
from .samples import HeatingSample, IngestResult, ingest, merge_samples
from .subsystems import SUBSYSTEMS, SubsystemDefinition, get_subsystem

logger = logging.getLogger("VitoEnergy")


def _empty_frame() -> pd.DataFrame:
    columns = {"time": pd.Series(dtype="datetime64[ns]")}
    for subsystem in SUBSYSTEMS:
        columns[subsystem.active_column] = pd.Series(dtype=bool)
        columns[subsystem.power_column] = pd.Series(dtype="float64")
        columns[subsystem.energy_column] = pd.Series(dtype="float64")
        columns[subsystem.active_count_column] = pd.Series(dtype="int64")
    return pd.DataFrame(columns)


@dataclass(frozen=True)
class DerivedSeries:
    """Full-resolution derived values, one row per sample.

    Columns: time, and for every subsystem <name>_active, <name>_power_kw,
    <name>_energy_kwh (cumulative) and <name>_active_count (running count of
    active samples). The frame must be treated as read-only.
    """

    frame: pd.DataFrame
    mode: IntegrationMode = IntegrationMode.FIXED_INTERVAL

    def __len__(self) -> int:
        return len(self.frame)

    @property
    def empty(self) -> bool:
        return self.frame.empty

    @property
    def times(self) -> pd.Series:
        return self.frame["time"]

    def active(self, subsystem: Union[str, SubsystemDefinition]) -> pd.Series:
        return self.frame[_definition(subsystem).active_column]

    def power(self, subsystem: Union[str, SubsystemDefinition]) -> pd.Series:
        return self.frame[_definition(subsystem).power_column]

    def cumulative_energy(self, subsystem: Union[str, SubsystemDefinition]) -> pd.Series:
        return self.frame[_definition(subsystem).energy_column]

    def active_counts(self, subsystem: Union[str, SubsystemDefinition]) -> pd.Series:
        return self.frame[_definition(subsystem).active_count_column]

    def nearest_index(self, when: datetime) -> int:
        """Index of the sample closest in time to `when` (binary search).

        Ties resolve to the earlier sample. Raises ValueError on an empty series.
        """
        if self.empty:
            raise ValueError("Cannot resolve a time in an empty series")
        times = self.frame["time"].to_numpy()
        target = np.datetime64(pd.Timestamp(when).to_datetime64())
        pos = int(np.searchsorted(times, target, side="left"))
        if pos <= 0:
            return 0
        if pos >= len(times):
            return len(times) - 1
        before = target - times[pos - 1]
        after = times[pos] - target
        return pos - 1 if before <= after else pos


def _definition(subsystem: Union[str, SubsystemDefinition]) -> SubsystemDefinition:
    if isinstance(subsystem, SubsystemDefinition):
        return subsystem
    return get_subsystem(subsystem)


def derive_series(
    samples: Sequence[HeatingSample],
    params: Optional[PlantParameters] = None,
    mode: Union[IntegrationMode, str, None] = None,
    nominal_interval_minutes: Optional[float] = None,
) -> DerivedSeries:
    """Classify, model power and integrate energy for a sorted sample series."""
    params = params or PlantParameters.from_settings()
    mode = resolve_mode(mode)

    if not samples:
        return DerivedSeries(frame=_empty_frame(), mode=mode)

    frame = pd.DataFrame({"time": pd.to_datetime([s.timestamp for s in samples])})
    for subsystem in SUBSYSTEMS:
        active = [subsystem.is_active(s) for s in samples]
        power = [subsystem.power_kw(s, params) for s in samples]
        frame[subsystem.active_column] = pd.Series(active, dtype=bool)
        frame[subsystem.power_column] = pd.Series(power, dtype="float64")
        frame[subsystem.energy_column] = integrate(
            frame[subsystem.power_column], frame["time"], mode, nominal_interval_minutes
        )
        frame[subsystem.active_count_column] = (
            frame[subsystem.active_column].astype("int64").cumsum()
        )

    return DerivedSeries(frame=frame, mode=mode)


@dataclass(frozen=True)
class EngineSnapshot:
    samples: Tuple[HeatingSample, ...] = ()
    derived: DerivedSeries = field(default_factory=lambda: DerivedSeries(frame=_empty_frame()))


class EnergyEngine:
    """Holds the current sample history and its derived series.

    Readers call `snapshot` once and work on that object; ingestion builds a
    complete new snapshot and swaps it in, so a reader never sees a series
    that is only partly recomputed.
    """

    def __init__(
        self,
        samples: Iterable[HeatingSample] = (),
        params: Optional[PlantParameters] = None,
        mode: Union[IntegrationMode, str, None] = None,
    ):
        self.params = params or PlantParameters.from_settings()
        self.mode = resolve_mode(mode)
        self._lock = threading.Lock()
        ordered, _, _ = merge_samples((), samples)
        self._snapshot = self._build(ordered)

    def _build(self, samples: Tuple[HeatingSample, ...]) -> EngineSnapshot:
        return EngineSnapshot(samples=samples, derived=derive_series(samples, self.params, self.mode))

    @property
    def snapshot(self) -> EngineSnapshot:
        return self._snapshot

    def ingest(self, raw_text: str, strict: Optional[bool] = None) -> IngestResult:
        """Merge a raw export into the history and republish the derived series."""
        with self._lock:
            result = ingest(raw_text, self._snapshot.samples, strict=strict)
            if result.added:
                self._snapshot = self._build(result.samples)
                logger.info(f"Derived series rebuilt with {len(result.samples)} samples")
            return result

    def add_samples(self, samples: Iterable[HeatingSample]) -> int:
        """Merge already parsed samples, e.g. loaded from the database."""
        with self._lock:
            merged, added, _ = merge_samples(self._snapshot.samples, samples)
            if added:
                self._snapshot = self._build(merged)
            return added
