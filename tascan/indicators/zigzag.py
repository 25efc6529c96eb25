"""
ZigZag pivot detection and trend channels.

The ZigZag filter keeps only turning points that are separated by at least
a percentage move, scanning closes chronologically:

- a HIGH is confirmed once the running max since the last pivot has risen
  threshold_pct above the last pivot price and the last pivot was a LOW
  (or there is none yet); LOW is symmetric,
- both running trackers restart from the new pivot,
- while the leg keeps going, the last pivot moves to each new extreme,
- the final bar closes the sequence as a terminal pivot.

On threshold-starved data (fewer than three pivots) the detector falls back
to plain three-point local extrema, and finally to the first and last bars,
so there is always something to draw. ZigZagResult.used_fallback reports
when the threshold was not what produced the pivots.

Least-squares lines through the HIGH pivots and through the LOW pivots form
a trend channel.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import pandas as pd

from .technical import SeriesLike, _as_series
from ..shared.defaults import ZIGZAG_THRESHOLD_PCT, ZIGZAG_FALLBACK_MAX_POINTS
from ..shared.types import PivotKind, PivotPoint


logger = logging.getLogger(__name__)


@dataclass
class TrendLine:
    """price = slope * index + intercept, fitted through one kind of pivot."""
    kind: PivotKind
    slope: float
    intercept: float
    approximated: bool = False  # Parallel copy of the opposite side's line

    def value_at(self, index: float) -> float:
        return self.slope * index + self.intercept


@dataclass
class TrendChannel:
    """Upper line through HIGH pivots, lower line through LOW pivots."""
    upper: Optional[TrendLine]
    lower: Optional[TrendLine]


@dataclass
class ZigZagResult:
    """Pivots ordered by index with alternating kinds, plus their channel."""
    pivots: List[PivotPoint] = field(default_factory=list)
    channel: Optional[TrendChannel] = None
    used_fallback: bool = False

    @property
    def highs(self) -> List[PivotPoint]:
        return [p for p in self.pivots if p.kind == PivotKind.HIGH]

    @property
    def lows(self) -> List[PivotPoint]:
        return [p for p in self.pivots if p.kind == PivotKind.LOW]


def _pivot(closes: pd.Series, index: int, kind: PivotKind) -> PivotPoint:
    return PivotPoint(
        index=index,
        price=float(closes.iloc[index]),
        kind=kind,
        timestamp=closes.index[index],
    )


def _pct_move(from_price: float, to_price: float) -> float:
    if from_price == 0:
        return 0.0
    return (to_price - from_price) / abs(from_price) * 100


def zigzag_pivots(closes: SeriesLike, threshold_pct: float = ZIGZAG_THRESHOLD_PCT) -> List[PivotPoint]:
    """
    Percentage-threshold pivots plus the terminal bar.

    Args:
        closes: Close prices, oldest first
        threshold_pct: Minimum move between pivots in percent (5.0 = 5%)

    Returns:
        Pivots ordered by index, alternating HIGH/LOW
    """
    closes = _as_series(closes)
    values = closes.to_numpy()
    if len(values) == 0:
        return []

    pivots: List[PivotPoint] = []
    last_kind: Optional[PivotKind] = None
    ref_price = values[0]
    max_price, max_idx = values[0], 0
    min_price, min_idx = values[0], 0

    for i in range(1, len(values)):
        price = values[i]

        # A confirmed pivot follows its leg until the leg turns
        if last_kind == PivotKind.HIGH and price > pivots[-1].price:
            pivots[-1] = _pivot(closes, i, PivotKind.HIGH)
            ref_price = price
            max_price, max_idx = price, i
            min_price, min_idx = price, i
            continue
        if last_kind == PivotKind.LOW and price < pivots[-1].price:
            pivots[-1] = _pivot(closes, i, PivotKind.LOW)
            ref_price = price
            max_price, max_idx = price, i
            min_price, min_idx = price, i
            continue

        if price > max_price:
            max_price, max_idx = price, i
        if price < min_price:
            min_price, min_idx = price, i

        if last_kind != PivotKind.HIGH and _pct_move(ref_price, max_price) >= threshold_pct:
            pivots.append(_pivot(closes, max_idx, PivotKind.HIGH))
            last_kind = PivotKind.HIGH
            ref_price = max_price
            min_price, min_idx = max_price, max_idx
        elif last_kind != PivotKind.LOW and -_pct_move(ref_price, min_price) >= threshold_pct:
            pivots.append(_pivot(closes, min_idx, PivotKind.LOW))
            last_kind = PivotKind.LOW
            ref_price = min_price
            max_price, max_idx = min_price, min_idx

    last_idx = len(values) - 1
    if pivots and pivots[-1].index == last_idx:
        return pivots

    prev_price = pivots[-1].price if pivots else values[0]
    if not pivots and values[-1] == prev_price:
        return pivots

    kind = PivotKind.HIGH if values[-1] > prev_price else PivotKind.LOW
    terminal = _pivot(closes, last_idx, kind)
    if pivots and pivots[-1].kind == kind:
        # Close equal to a LOW pivot: the terminal bar takes its place
        pivots[-1] = terminal
    else:
        pivots.append(terminal)
    return pivots


def local_extrema_pivots(
    closes: SeriesLike,
    max_points: int = ZIGZAG_FALLBACK_MAX_POINTS,
) -> List[PivotPoint]:
    """
    Strict three-point extrema (greater/less than both neighbours).

    Adjacent extrema of the same kind keep the more extreme one so kinds
    alternate. Only the most recent max_points are returned.
    """
    closes = _as_series(closes)
    values = closes.to_numpy()
    points: List[PivotPoint] = []

    for i in range(1, len(values) - 1):
        if values[i] > values[i - 1] and values[i] > values[i + 1]:
            kind = PivotKind.HIGH
        elif values[i] < values[i - 1] and values[i] < values[i + 1]:
            kind = PivotKind.LOW
        else:
            continue

        if points and points[-1].kind == kind:
            more_extreme = (
                values[i] > points[-1].price if kind == PivotKind.HIGH
                else values[i] < points[-1].price
            )
            if more_extreme:
                points[-1] = _pivot(closes, i, kind)
            continue
        points.append(_pivot(closes, i, kind))

    return points[-max_points:] if max_points > 0 else []


def _endpoint_pivots(closes: pd.Series) -> List[PivotPoint]:
    last = len(closes) - 1
    if closes.iloc[last] >= closes.iloc[0]:
        return [_pivot(closes, 0, PivotKind.LOW), _pivot(closes, last, PivotKind.HIGH)]
    return [_pivot(closes, 0, PivotKind.HIGH), _pivot(closes, last, PivotKind.LOW)]


def fit_trend_line(pivots: List[PivotPoint], kind: PivotKind) -> Optional[TrendLine]:
    """Least-squares line through pivots (x = index, y = price). Needs 2+ distinct indices."""
    if len({p.index for p in pivots}) < 2:
        return None
    x = np.array([p.index for p in pivots], dtype=float)
    y = np.array([p.price for p in pivots], dtype=float)
    slope, intercept = np.polyfit(x, y, 1)
    return TrendLine(kind=kind, slope=float(slope), intercept=float(intercept))


def _parallel_line(base: TrendLine, pivots: List[PivotPoint], kind: PivotKind) -> Optional[TrendLine]:
    if not pivots:
        return None
    offset = float(np.mean([p.price - base.value_at(p.index) for p in pivots]))
    return TrendLine(kind=kind, slope=base.slope, intercept=base.intercept + offset, approximated=True)


def trend_channel(pivots: List[PivotPoint]) -> Optional[TrendChannel]:
    """
    Fit separate lines through HIGH and LOW pivots.

    When only one side has enough points, the other side is drawn parallel
    to it, shifted by the mean deviation of its own pivots from the fitted
    line. Returns None when neither side can be fitted.
    """
    highs = [p for p in pivots if p.kind == PivotKind.HIGH]
    lows = [p for p in pivots if p.kind == PivotKind.LOW]

    upper = fit_trend_line(highs, PivotKind.HIGH)
    lower = fit_trend_line(lows, PivotKind.LOW)
    if upper is None and lower is None:
        return None
    if upper is None:
        upper = _parallel_line(lower, highs, PivotKind.HIGH)
    elif lower is None:
        lower = _parallel_line(upper, lows, PivotKind.LOW)
    return TrendChannel(upper=upper, lower=lower)


class ZigZagDetector:
    """Detects ZigZag pivots and fits a trend channel through them."""

    def __init__(
        self,
        threshold_pct: float = ZIGZAG_THRESHOLD_PCT,
        fallback_max_points: int = ZIGZAG_FALLBACK_MAX_POINTS,
    ):
        """
        Initialize the detector.

        Args:
            threshold_pct: Minimum percentage move between pivots (must be > 0)
            fallback_max_points: Cap on pivots from the local-extrema fallback
        """
        if threshold_pct <= 0:
            raise ValueError(f"threshold_pct must be > 0, got {threshold_pct}")
        self.threshold_pct = threshold_pct
        self.fallback_max_points = fallback_max_points

    def detect(self, closes: SeriesLike) -> Optional[ZigZagResult]:
        """
        Detect pivots in a close series.

        Returns:
            ZigZagResult, or None when fewer than 2 closes are given
        """
        closes = _as_series(closes)
        if len(closes) < 2:
            return None

        pivots = zigzag_pivots(closes, self.threshold_pct)
        used_fallback = False
        if len(pivots) < 3:
            logger.debug(
                f"ZigZag found {len(pivots)} pivots at {self.threshold_pct}%, "
                f"falling back to local extrema"
            )
            used_fallback = True
            pivots = local_extrema_pivots(closes, self.fallback_max_points)
            if not pivots:
                pivots = _endpoint_pivots(closes)

        return ZigZagResult(pivots=pivots, channel=trend_channel(pivots), used_fallback=used_fallback)
