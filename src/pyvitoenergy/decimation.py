"""
Display decimation.

A DecimatedView keeps every Nth row of a derived series for drawing. It only
stores positions into the full-resolution series; totals, legends and marked
periods are always computed on the full series it points to.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from .config import settings
from .engine import DerivedSeries


@dataclass(frozen=True)
class DecimatedView:
    source: DerivedSeries
    positions: np.ndarray
    factor: int = 1

    def __len__(self) -> int:
        return len(self.positions)

    @property
    def frame(self) -> pd.DataFrame:
        """Rows of the source series kept for display (a copy)."""
        return self.source.frame.iloc[self.positions]

    def to_full_index(self, position: int) -> int:
        """Map a row of the decimated view back to its full-resolution index."""
        if not 0 <= position < len(self.positions):
            raise IndexError(f"Position {position} outside decimated view of {len(self)} rows")
        return int(self.positions[position])


def decimate(derived: DerivedSeries, factor: Optional[int] = None) -> DecimatedView:
    """Keep every `factor`-th sample (0, N, 2N, ...) for display."""
    factor = settings.decimation_factor if factor is None else factor
    factor = max(int(factor), 1)
    positions = np.arange(0, len(derived), factor, dtype=np.int64)
    return DecimatedView(source=derived, positions=positions, factor=factor)
