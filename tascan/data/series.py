"""
Chronological OHLC price series.

Every indicator in the engine works on oldest-first data. PriceSeries is the
only place where an external most-recent-first payload is turned around, and
the only place where a most-recent-first view is produced for display.
"""
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd


PRICE_COLUMNS = ('Close', 'High', 'Low')


@dataclass(frozen=True, eq=False)
class PriceSeries:
    """
    Ordered daily bars with Close/High/Low columns, oldest first.

    Use from_arrays() or from_frame() rather than the constructor so the
    ordering and length invariants are checked.
    """
    frame: pd.DataFrame

    @classmethod
    def from_arrays(
        cls,
        closes: Sequence[float],
        highs: Optional[Sequence[float]] = None,
        lows: Optional[Sequence[float]] = None,
        most_recent_first: bool = False,
        index: Optional[Sequence] = None,
    ) -> "PriceSeries":
        """
        Build a series from parallel arrays.

        Args:
            closes: Close prices
            highs: High prices (default: closes)
            lows: Low prices (default: closes)
            most_recent_first: True when the arrays start with the newest bar
            index: Optional labels (e.g. dates) in the same order as the arrays

        Raises:
            ValueError: If the arrays have different lengths
        """
        closes = np.asarray(closes, dtype=float)
        highs = closes if highs is None else np.asarray(highs, dtype=float)
        lows = closes if lows is None else np.asarray(lows, dtype=float)
        if not (len(closes) == len(highs) == len(lows)):
            raise ValueError(
                f"closes, highs and lows must have equal length, "
                f"got {len(closes)}, {len(highs)}, {len(lows)}"
            )
        if index is not None and len(index) != len(closes):
            raise ValueError(f"index length {len(index)} does not match {len(closes)} bars")

        frame = pd.DataFrame(
            {'Close': closes, 'High': highs, 'Low': lows},
            index=pd.Index(index) if index is not None else None,
        )
        if most_recent_first:
            frame = frame.iloc[::-1]
            if index is None:
                frame = frame.reset_index(drop=True)
        return cls(frame)

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "PriceSeries":
        """
        Build a series from a DataFrame with Close (and optionally High/Low) columns.

        A DatetimeIndex is sorted ascending; any other index is taken as
        already chronological. Rows with a missing Close are dropped.
        """
        if 'Close' not in df.columns:
            raise ValueError(f"DataFrame needs a 'Close' column, got {list(df.columns)}")
        frame = df.copy()
        if isinstance(frame.index, pd.DatetimeIndex):
            frame = frame.sort_index()
        frame = frame.dropna(subset=['Close'])
        for col in ('High', 'Low'):
            if col not in frame.columns:
                frame[col] = frame['Close']
            frame[col] = frame[col].fillna(frame['Close'])
        return cls(frame[list(PRICE_COLUMNS)].astype(float))

    def __len__(self) -> int:
        return len(self.frame)

    @property
    def closes(self) -> pd.Series:
        return self.frame['Close']

    @property
    def highs(self) -> pd.Series:
        return self.frame['High']

    @property
    def lows(self) -> pd.Series:
        return self.frame['Low']

    @property
    def latest_close(self) -> Optional[float]:
        if self.frame.empty:
            return None
        return float(self.frame['Close'].iloc[-1])

    def tail(self, n: int) -> "PriceSeries":
        """Most recent n bars, still oldest first."""
        if n <= 0:
            return PriceSeries(self.frame.iloc[:0])
        return PriceSeries(self.frame.iloc[-n:])

    def most_recent_first(self) -> pd.DataFrame:
        """Reversed copy of the bars for display (newest row first)."""
        return self.frame.iloc[::-1].copy()
