"""
Shared types and defaults for the scanning engine.

This module provides:
- SignalType, PivotKind and ScanStatus enums
- Signal and PivotPoint records
- Centralized default values for all indicator parameters
"""
from .types import SignalType, PivotKind, ScanStatus, Signal, PivotPoint
from .defaults import (
    SMA_SHORT_PERIOD, SMA_LONG_PERIOD,
    RSI_PERIOD, RSI_OVERSOLD, RSI_FAVORABLE_MAX,
    MACD_FAST, MACD_SLOW, MACD_SIGNAL,
    STOCH_K_PERIOD, STOCH_D_PERIOD,
    QQE_RSI_PERIOD, QQE_SMOOTHING, QQE_FACTOR,
    ZIGZAG_THRESHOLD_PCT,
    MIN_SCAN_BARS, SCAN_DELAY_SECONDS, MAX_SCAN_COUNT,
)

__all__ = [
    'SignalType', 'PivotKind', 'ScanStatus', 'Signal', 'PivotPoint',
    'SMA_SHORT_PERIOD', 'SMA_LONG_PERIOD',
    'RSI_PERIOD', 'RSI_OVERSOLD', 'RSI_FAVORABLE_MAX',
    'MACD_FAST', 'MACD_SLOW', 'MACD_SIGNAL',
    'STOCH_K_PERIOD', 'STOCH_D_PERIOD',
    'QQE_RSI_PERIOD', 'QQE_SMOOTHING', 'QQE_FACTOR',
    'ZIGZAG_THRESHOLD_PCT',
    'MIN_SCAN_BARS', 'SCAN_DELAY_SECONDS', 'MAX_SCAN_COUNT',
]
