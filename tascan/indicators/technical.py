"""
Technical indicators for signal scoring.

Provides SMA, EMA, RSI, MACD, the stochastic oscillator and a smoothed-RSI
QQE approximation. All inputs and outputs are chronological (oldest first).
An indicator's output is indexed by the suffix of the input index it covers,
so output length is input length minus the indicator's warm-up. Inputs that
are too short return None rather than a partial or mis-sized series.
"""
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..data.series import PriceSeries
from ..shared.defaults import (
    SMA_SHORT_PERIOD, SMA_LONG_PERIOD,
    RSI_PERIOD, RSI_LOSS_EPSILON,
    MACD_FAST, MACD_SLOW, MACD_SIGNAL,
    STOCH_K_PERIOD, STOCH_D_PERIOD, STOCH_FLAT_VALUE,
    QQE_APPROX_SMOOTHING,
)


SeriesLike = Union[pd.Series, Sequence[float], np.ndarray]


def _as_series(values: SeriesLike) -> pd.Series:
    if isinstance(values, pd.Series):
        return values.astype(float)
    return pd.Series(np.asarray(values, dtype=float))


def _check_period(name: str, value: int) -> None:
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")


def _align_tail(a: pd.Series, b: pd.Series):
    """Right-align two series on their common most recent length."""
    n = min(len(a), len(b))
    if n == 0:
        return a.iloc[:0], b.iloc[:0]
    return a.iloc[len(a) - n:], b.iloc[len(b) - n:]


@dataclass
class MACDResult:
    """MACD line, signal line and histogram, each right-aligned to the input."""
    line: pd.Series
    signal: pd.Series
    histogram: pd.Series

    @property
    def partial(self) -> bool:
        """True when only the MACD line could be computed."""
        return self.signal.empty


@dataclass
class StochasticResult:
    """%K and %D lines."""
    k: pd.Series
    d: pd.Series


def sma(prices: SeriesLike, window: int) -> Optional[pd.Series]:
    """
    Simple Moving Average.

    Returns len(prices) - window + 1 values, or None if there are fewer
    than window prices.
    """
    _check_period("window", window)
    prices = _as_series(prices)
    if len(prices) < window:
        return None
    return prices.rolling(window).mean().iloc[window - 1:].rename('sma')


def ema(prices: SeriesLike, period: int) -> Optional[pd.Series]:
    """
    Exponential Moving Average seeded with the SMA of the first period values.

    ema[i] = price[i] * k + ema[i-1] * (1 - k), k = 2 / (period + 1)

    The seed is not emitted, so the result has len(prices) - period values
    starting at prices[period]. None if there are fewer than period prices.
    """
    _check_period("period", period)
    prices = _as_series(prices)
    if len(prices) < period:
        return None

    values = prices.to_numpy()
    k = 2.0 / (period + 1)
    prev = values[:period].mean()
    out = np.empty(len(values) - period)
    for i, value in enumerate(values[period:]):
        prev = value * k + prev * (1 - k)
        out[i] = prev
    return pd.Series(out, index=prices.index[period:], name='ema')


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    rs = avg_gain / max(avg_loss, RSI_LOSS_EPSILON)
    return 100.0 - (100.0 / (1.0 + rs))


def rsi(prices: SeriesLike, period: int = RSI_PERIOD) -> Optional[pd.Series]:
    """
    Relative Strength Index with Wilder smoothing.

    The first value uses simple means of the first period gains/losses and
    lines up with prices[period]; later values use
    avg = (avg * (period - 1) + x) / period. Average loss is floored at
    RSI_LOSS_EPSILON so RS stays finite.

    Returns len(prices) - period values, or None with fewer than period + 1 prices.
    """
    _check_period("period", period)
    prices = _as_series(prices)
    if len(prices) < period + 1:
        return None

    deltas = np.diff(prices.to_numpy())
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    avg_gain = gains[:period].mean()
    avg_loss = losses[:period].mean()
    out = [_rsi_value(avg_gain, avg_loss)]
    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        out.append(_rsi_value(avg_gain, avg_loss))

    return pd.Series(out, index=prices.index[period:], name='rsi')


def wilder_smooth(values: SeriesLike, period: int) -> Optional[pd.Series]:
    """Wilder's running average (alpha = 1/period) seeded with the first value."""
    _check_period("period", period)
    values = _as_series(values)
    if values.empty:
        return None
    return values.ewm(alpha=1.0 / period, adjust=False).mean().rename('wilder')


def macd(
    prices: SeriesLike,
    fast: int = MACD_FAST,
    slow: int = MACD_SLOW,
    signal: int = MACD_SIGNAL,
) -> Optional[MACDResult]:
    """
    Calculate MACD (Moving Average Convergence Divergence).

    line = EMA(fast) - EMA(slow) on their overlapping most recent bars,
    signal = EMA(line, signal), histogram = line - signal on their overlap.

    Returns None with fewer than slow + signal prices. If the signal EMA
    cannot be computed the line is returned alone (result.partial is True).
    """
    prices = _as_series(prices)
    if len(prices) < slow + signal:
        return None

    ema_fast = ema(prices, fast)
    ema_slow = ema(prices, slow)
    if ema_fast is None or ema_slow is None:
        return None

    fast_aligned, slow_aligned = _align_tail(ema_fast, ema_slow)
    line = pd.Series(
        fast_aligned.to_numpy() - slow_aligned.to_numpy(),
        index=slow_aligned.index,
        name='macd',
    )

    signal_line = ema(line, signal)
    if signal_line is None or signal_line.empty:
        empty = pd.Series(dtype=float)
        return MACDResult(line=line, signal=empty.rename('signal'), histogram=empty.rename('histogram'))

    line_aligned, signal_aligned = _align_tail(line, signal_line)
    histogram = pd.Series(
        line_aligned.to_numpy() - signal_aligned.to_numpy(),
        index=signal_aligned.index,
        name='histogram',
    )
    return MACDResult(line=line_aligned, signal=signal_aligned.rename('signal'), histogram=histogram)


def stochastic(
    highs: SeriesLike,
    lows: SeriesLike,
    closes: SeriesLike,
    k_period: int = STOCH_K_PERIOD,
    d_period: int = STOCH_D_PERIOD,
) -> Optional[StochasticResult]:
    """
    Calculate the stochastic oscillator.

    %K = (close - lowest low) / (highest high - lowest low) * 100 over each
    k_period window ending at close, or exactly 50 when the window is flat.
    %D = SMA(%K, d_period).

    Returns None when fewer than k_period + d_period bars are available.
    """
    _check_period("k_period", k_period)
    _check_period("d_period", d_period)
    highs, lows, closes = _as_series(highs), _as_series(lows), _as_series(closes)
    if not (len(highs) == len(lows) == len(closes)):
        raise ValueError(
            f"highs, lows and closes must have equal length, "
            f"got {len(highs)}, {len(lows)}, {len(closes)}"
        )
    if len(closes) < k_period + d_period:
        return None

    highest = highs.rolling(k_period).max().to_numpy()[k_period - 1:]
    lowest = lows.rolling(k_period).min().to_numpy()[k_period - 1:]
    close = closes.to_numpy()[k_period - 1:]

    spread = highest - lowest
    flat = spread == 0
    k_values = np.where(
        flat,
        STOCH_FLAT_VALUE,
        (close - lowest) / np.where(flat, 1.0, spread) * 100,
    )
    k_line = pd.Series(k_values, index=closes.index[k_period - 1:], name='k')
    d_line = sma(k_line, d_period)
    return StochasticResult(k=k_line, d=d_line.rename('d'))


def qqe_approx(prices: SeriesLike, rsi_period: int = RSI_PERIOD) -> Optional[pd.Series]:
    """
    Rough QQE proxy: RSI smoothed with a short EMA.

    Only used as a trend hint for scoring; see indicators.qqe for the full
    fast/slow line pair.
    """
    rsi_values = rsi(prices, rsi_period)
    if rsi_values is None or len(rsi_values) < QQE_APPROX_SMOOTHING:
        return None
    return ema(rsi_values, QQE_APPROX_SMOOTHING).rename('qqe_approx')


@dataclass
class IndicatorSnapshot:
    """All indicator series needed to score one symbol. None = unavailable."""
    sma_short: Optional[pd.Series] = None
    sma_long: Optional[pd.Series] = None
    rsi: Optional[pd.Series] = None
    macd: Optional[MACDResult] = None
    stochastic: Optional[StochasticResult] = None
    qqe_approx: Optional[pd.Series] = None


class TechnicalIndicators:
    """Calculates the scoring indicators for a price series."""

    def __init__(
        self,
        sma_short_period: int = SMA_SHORT_PERIOD,
        sma_long_period: int = SMA_LONG_PERIOD,
        rsi_period: int = RSI_PERIOD,
        macd_fast: int = MACD_FAST,
        macd_slow: int = MACD_SLOW,
        macd_signal: int = MACD_SIGNAL,
        stoch_k_period: int = STOCH_K_PERIOD,
        stoch_d_period: int = STOCH_D_PERIOD,
    ):
        """
        Initialize indicator calculator.

        Args:
            sma_short_period: Short SMA window (default: SMA_SHORT_PERIOD)
            sma_long_period: Long SMA window (default: SMA_LONG_PERIOD)
            rsi_period: RSI period, also used by the QQE approximation
            macd_fast: MACD fast EMA period
            macd_slow: MACD slow EMA period
            macd_signal: MACD signal EMA period
            stoch_k_period: Stochastic %K window
            stoch_d_period: Stochastic %D smoothing window
        """
        if sma_short_period >= sma_long_period:
            raise ValueError(
                f"SMA short period ({sma_short_period}) must be less than long period ({sma_long_period})"
            )
        if macd_fast >= macd_slow:
            raise ValueError(f"MACD fast ({macd_fast}) must be less than slow ({macd_slow})")
        self.sma_short_period = sma_short_period
        self.sma_long_period = sma_long_period
        self.rsi_period = rsi_period
        self.macd_fast = macd_fast
        self.macd_slow = macd_slow
        self.macd_signal = macd_signal
        self.stoch_k_period = stoch_k_period
        self.stoch_d_period = stoch_d_period

    def calculate(self, series: PriceSeries) -> IndicatorSnapshot:
        """Compute every scoring indicator for a chronological series."""
        closes = series.closes
        return IndicatorSnapshot(
            sma_short=sma(closes, self.sma_short_period),
            sma_long=sma(closes, self.sma_long_period),
            rsi=rsi(closes, self.rsi_period),
            macd=macd(closes, self.macd_fast, self.macd_slow, self.macd_signal),
            stochastic=stochastic(
                series.highs, series.lows, closes,
                self.stoch_k_period, self.stoch_d_period,
            ),
            qqe_approx=qqe_approx(closes, self.rsi_period),
        )
