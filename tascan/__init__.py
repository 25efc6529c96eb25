"""
Technical-analysis scanning engine.

Provides unified interfaces for:
- Price history (chronological OHLC series, pluggable providers)
- Indicator calculations (SMA, EMA, RSI, MACD, Stochastic, QQE)
- ZigZag pivot detection and trend channels
- Weighted signal scoring and multi-symbol scans
"""
