"""
Indicator calculation module.

Provides all indicators used by the scanner:
- Series primitives (SMA, EMA, RSI, Wilder smoothing)
- Derived indicators (MACD, Stochastic, QQE approximation)
- Full QQE fast/slow lines with crossover signals
- ZigZag pivot detection with trend channels

Every function takes chronological input and returns None when the input
is too short.
"""
from .technical import (
    sma,
    ema,
    rsi,
    wilder_smooth,
    macd,
    stochastic,
    qqe_approx,
    MACDResult,
    StochasticResult,
    IndicatorSnapshot,
    TechnicalIndicators,
)
from .qqe import QQEResult, calculate_qqe, qqe_slow_step, detect_crossovers, min_qqe_length
from .zigzag import (
    ZigZagDetector,
    ZigZagResult,
    TrendLine,
    TrendChannel,
    zigzag_pivots,
    local_extrema_pivots,
    fit_trend_line,
    trend_channel,
)

__all__ = [
    'sma',
    'ema',
    'rsi',
    'wilder_smooth',
    'macd',
    'stochastic',
    'qqe_approx',
    'MACDResult',
    'StochasticResult',
    'IndicatorSnapshot',
    'TechnicalIndicators',
    'QQEResult',
    'calculate_qqe',
    'qqe_slow_step',
    'detect_crossovers',
    'min_qqe_length',
    'ZigZagDetector',
    'ZigZagResult',
    'TrendLine',
    'TrendChannel',
    'zigzag_pivots',
    'local_extrema_pivots',
    'fit_trend_line',
    'trend_channel',
]
