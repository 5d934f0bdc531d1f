"""
Range statistics over a derived series.

A window is a contiguous inclusive span of sample indices. Energy for a
window is the difference of two cumulative values and the active sample
count the difference of two running counts, so any window costs O(1) once
the series has been derived.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd

from .engine import DerivedSeries
from .subsystems import SUBSYSTEMS, SubsystemDefinition, get_subsystem

logger = logging.getLogger("VitoEnergy")


class RangeScope(str, Enum):
    FULL = "full"
    ZOOM = "zoom"
    MARKED = "marked"


@dataclass(frozen=True)
class RangeQuery:
    """A window given either by sample indices or by two instants.

    The two ends may be given in any order. Instants are resolved to the
    nearest sample. Indices are clamped to the series; a window lying
    entirely before or after it is empty.
    """

    scope: RangeScope = RangeScope.FULL
    start_index: Optional[int] = None
    end_index: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @classmethod
    def full(cls) -> "RangeQuery":
        return cls(scope=RangeScope.FULL)

    @classmethod
    def indices(cls, a: int, b: int, scope: RangeScope = RangeScope.ZOOM) -> "RangeQuery":
        return cls(scope=scope, start_index=a, end_index=b)

    @classmethod
    def marked(cls, a: int, b: int) -> "RangeQuery":
        return cls.indices(a, b, scope=RangeScope.MARKED)

    @classmethod
    def between(
        cls, a: datetime, b: datetime, scope: RangeScope = RangeScope.ZOOM
    ) -> "RangeQuery":
        return cls(scope=scope, start_time=a, end_time=b)

    def resolve(self, derived: DerivedSeries) -> Optional[Tuple[int, int]]:
        """Return the (start, end) indices of the window, None when it holds no samples."""
        n = len(derived)
        if n == 0:
            return None

        if self.start_time is not None or self.end_time is not None:
            start = derived.nearest_index(self.start_time) if self.start_time is not None else 0
            end = derived.nearest_index(self.end_time) if self.end_time is not None else n - 1
        else:
            start = self.start_index if self.start_index is not None else 0
            end = self.end_index if self.end_index is not None else n - 1

        if start > end:
            start, end = end, start
        if end < 0 or start > n - 1:
            return None
        start = min(max(start, 0), n - 1)
        end = min(max(end, 0), n - 1)
        return start, end


@dataclass(frozen=True)
class RangeStats:
    energy_kwh: float = 0.0
    active_sample_count: int = 0
    total_sample_count: int = 0
    active_percent: float = 0.0


@dataclass(frozen=True)
class WindowSummary:
    """Statistics of every subsystem over one window."""

    scope: RangeScope
    start_index: Optional[int] = None
    end_index: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    stats: Dict[str, RangeStats] = field(default_factory=dict)

    @property
    def duration(self) -> timedelta:
        if self.start_time is None or self.end_time is None:
            return timedelta(0)
        return self.end_time - self.start_time

    @property
    def sample_count(self) -> int:
        if self.start_index is None or self.end_index is None:
            return 0
        return self.end_index - self.start_index + 1

    @property
    def total_energy_kwh(self) -> float:
        return sum(s.energy_kwh for s in self.stats.values())


@dataclass(frozen=True)
class ActivityInterval:
    """A maximal run of consecutive active samples."""

    subsystem: str
    start_index: int
    end_index: int
    start_time: datetime
    end_time: datetime

    @property
    def sample_count(self) -> int:
        return self.end_index - self.start_index + 1

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time


def _definition(subsystem: Union[str, SubsystemDefinition]) -> SubsystemDefinition:
    if isinstance(subsystem, SubsystemDefinition):
        return subsystem
    return get_subsystem(subsystem)


def _stats_for_span(
    derived: DerivedSeries, subsystem: SubsystemDefinition, start: int, end: int
) -> RangeStats:
    cumulative = derived.cumulative_energy(subsystem)
    counts = derived.active_counts(subsystem)

    energy = float(cumulative.iat[end]) - (float(cumulative.iat[start - 1]) if start > 0 else 0.0)
    active = int(counts.iat[end]) - (int(counts.iat[start - 1]) if start > 0 else 0)
    total = end - start + 1
    return RangeStats(
        energy_kwh=energy,
        active_sample_count=active,
        total_sample_count=total,
        active_percent=active / total * 100.0 if total else 0.0,
    )


def range_stats(
    derived: DerivedSeries,
    window: Optional[RangeQuery],
    subsystem: Union[str, SubsystemDefinition],
) -> RangeStats:
    """Energy and activity of one subsystem over a window.

    Args:
        derived: Full-resolution derived series.
        window: Window to evaluate, the full series when None.
        subsystem: Subsystem name or definition.

    Returns:
        RangeStats, all zero for an empty series.
    """
    definition = _definition(subsystem)
    span = (window or RangeQuery.full()).resolve(derived)
    if span is None:
        return RangeStats()
    return _stats_for_span(derived, definition, *span)


def window_summary(derived: DerivedSeries, window: Optional[RangeQuery] = None) -> WindowSummary:
    """RangeStats for every subsystem plus the window bounds."""
    window = window or RangeQuery.full()
    span = window.resolve(derived)
    if span is None:
        return WindowSummary(scope=window.scope, stats={s.name: RangeStats() for s in SUBSYSTEMS})

    start, end = span
    times = derived.times
    return WindowSummary(
        scope=window.scope,
        start_index=start,
        end_index=end,
        start_time=pd.Timestamp(times.iat[start]).to_pydatetime(),
        end_time=pd.Timestamp(times.iat[end]).to_pydatetime(),
        stats={s.name: _stats_for_span(derived, s, start, end) for s in SUBSYSTEMS},
    )


def activity_intervals(
    derived: DerivedSeries,
    subsystem: Union[str, SubsystemDefinition],
    window: Optional[RangeQuery] = None,
) -> List[ActivityInterval]:
    """Contiguous active runs of a subsystem, optionally clipped to a window."""
    definition = _definition(subsystem)
    span = (window or RangeQuery.full()).resolve(derived)
    if span is None:
        return []

    start, end = span
    active = derived.active(definition).iloc[start : end + 1]
    times = derived.times.iloc[start : end + 1]
    runs = pd.DataFrame({"active": active, "run_id": active.ne(active.shift()).cumsum()})

    intervals = []
    for _, group in runs[runs["active"]].groupby("run_id"):
        first, last = int(group.index[0]), int(group.index[-1])
        intervals.append(
            ActivityInterval(
                subsystem=definition.name,
                start_index=first,
                end_index=last,
                start_time=pd.Timestamp(times.loc[first]).to_pydatetime(),
                end_time=pd.Timestamp(times.loc[last]).to_pydatetime(),
            )
        )
    return intervals
