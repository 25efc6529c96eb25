"""
QQE (Quantitative Qualitative Estimation) fast/slow line pair.

The fast line (QQEF) is RSI smoothed by an EMA. The absolute bar-to-bar
change of QQEF is Wilder-smoothed twice and scaled by a fixed factor to give
bands around the fast line (QUP above, QDN below). The slow line (QQES)
ratchets toward the bands:

- it steps down to QUP only when QUP drops below it,
- it steps up to QDN only when QDN rises above it,
- otherwise it holds, unless the fast line crosses its previous value, in
  which case it jumps to the band on the far side of the cross.

Buy/sell signals are the crossings of the fast line over the slow line.
"""
from dataclasses import dataclass, field
from typing import List, Optional

import pandas as pd

from .technical import SeriesLike, _as_series, ema, rsi, wilder_smooth
from ..shared.defaults import QQE_RSI_PERIOD, QQE_SMOOTHING, QQE_FACTOR
from ..shared.types import Signal, SignalType


@dataclass
class QQEResult:
    """QQE lines, all sharing one index, plus fast/slow crossover signals."""
    fast: pd.Series
    slow: pd.Series
    upper: pd.Series
    lower: pd.Series
    signals: List[Signal] = field(default_factory=list)


def qqe_slow_step(
    prev_slow: float,
    fast: float,
    prev_fast: float,
    upper: float,
    lower: float,
) -> float:
    """
    One chronological step of the QQE slow line.

    Args:
        prev_slow: Slow line value on the previous bar
        fast: Fast line value on this bar
        prev_fast: Fast line value on the previous bar
        upper: Upper band (QUP) on this bar
        lower: Lower band (QDN) on this bar

    Returns:
        Slow line value on this bar
    """
    if upper < prev_slow:
        return upper
    if fast > prev_slow and prev_fast < prev_slow:
        return lower
    if lower > prev_slow:
        return lower
    if fast < prev_slow and prev_fast > prev_slow:
        return upper
    return prev_slow


def detect_crossovers(fast: pd.Series, slow: pd.Series, offset: int = 0) -> List[Signal]:
    """
    Find every bar where fast crosses slow.

    BUY when fast goes from at-or-below slow to above it, SELL when it goes
    from at-or-above to below. Both series must share the same length and
    ordering. Signal positions are shifted by offset, so callers can report
    positions in the original price series.
    """
    if len(fast) != len(slow):
        raise ValueError(f"fast and slow must have equal length, got {len(fast)} and {len(slow)}")

    f = fast.to_numpy()
    s = slow.to_numpy()
    signals = []
    for i in range(1, len(f)):
        if f[i - 1] <= s[i - 1] and f[i] > s[i]:
            signal_type = SignalType.BUY
        elif f[i - 1] >= s[i - 1] and f[i] < s[i]:
            signal_type = SignalType.SELL
        else:
            continue
        signals.append(Signal(
            position=offset + i,
            signal_type=signal_type,
            value=float(f[i]),
            timestamp=fast.index[i],
        ))
    return signals


def min_qqe_length(rsi_period: int = QQE_RSI_PERIOD, smoothing: int = QQE_SMOOTHING) -> int:
    """Fewest prices calculate_qqe() accepts."""
    return rsi_period + smoothing + 3


def calculate_qqe(
    prices: SeriesLike,
    rsi_period: int = QQE_RSI_PERIOD,
    smoothing: int = QQE_SMOOTHING,
    factor: float = QQE_FACTOR,
) -> Optional[QQEResult]:
    """
    Compute the QQE fast/slow lines, bands and crossover signals.

    Returns None with fewer than rsi_period + smoothing + 3 prices.
    """
    prices = _as_series(prices)
    if len(prices) < min_qqe_length(rsi_period, smoothing):
        return None

    fast_all = ema(rsi(prices, rsi_period), smoothing)
    change = fast_all.diff().abs().iloc[1:]
    band_width = wilder_smooth(wilder_smooth(change, rsi_period), rsi_period) * factor

    fast = fast_all.iloc[1:].rename('qqe_fast')
    upper = pd.Series(fast.to_numpy() + band_width.to_numpy(), index=fast.index, name='qqe_upper')
    lower = pd.Series(fast.to_numpy() - band_width.to_numpy(), index=fast.index, name='qqe_lower')

    slow_values = []
    prev_slow = 0.0
    prev_fast = float(fast_all.iloc[0])
    for f, up, dn in zip(fast.to_numpy(), upper.to_numpy(), lower.to_numpy()):
        prev_slow = qqe_slow_step(prev_slow, f, prev_fast, up, dn)
        slow_values.append(prev_slow)
        prev_fast = f
    slow = pd.Series(slow_values, index=fast.index, name='qqe_slow')

    signals = detect_crossovers(fast, slow, offset=len(prices) - len(fast))
    return QQEResult(fast=fast, slow=slow, upper=upper, lower=lower, signals=signals)
