"""
Centralized default values for indicator and scan parameters.

This is the SINGLE SOURCE OF TRUTH for all parameter defaults.
All modules should import from here to ensure consistency.
"""

# Moving averages used by the SMA crossover component
SMA_SHORT_PERIOD = 10
SMA_LONG_PERIOD = 50

# RSI (Relative Strength Index) defaults
RSI_PERIOD = 14
RSI_OVERSOLD = 30  # Below: full RSI component
RSI_FAVORABLE_MAX = 45  # Oversold..this: partial RSI component
RSI_LOSS_EPSILON = 1e-6  # Floor for average loss, keeps RS finite

# MACD (Moving Average Convergence Divergence) defaults
MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9

# Stochastic oscillator defaults
STOCH_K_PERIOD = 14
STOCH_D_PERIOD = 3
STOCH_OVERSOLD = 20
STOCH_FLAT_VALUE = 50.0  # %K when highest high == lowest low

# QQE approximation (scoring proxy)
QQE_APPROX_SMOOTHING = 3
QQE_APPROX_CEILING = 55  # Rising smoothed RSI must stay below this

# Full QQE line pair
QQE_RSI_PERIOD = 14
QQE_SMOOTHING = 5
QQE_FACTOR = 4.236

# Component caps and scores
COMPONENT_CAP = 2.0
SMA_BULLISH_SCORE = 1.0
RSI_OVERSOLD_SCORE = 1.0
RSI_FAVORABLE_SCORE = 0.6
MACD_CROSS_SCORE = 1.0
MACD_HIST_RISING_SCORE = 0.5
STOCH_OVERSOLD_SCORE = 1.0
STOCH_CROSS_SCORE = 0.6
QQE_RISING_SCORE = 0.8

# ZigZag pivot detection
ZIGZAG_THRESHOLD_PCT = 5.0
ZIGZAG_FALLBACK_MAX_POINTS = 12

# Scan workflow
MIN_SCAN_BARS = 50  # Symbols with fewer bars are reported as insufficient data
SCAN_DELAY_SECONDS = 1.2  # Pause after each fetch to respect free API limits
MAX_SCAN_COUNT = 5
DEFAULT_EXCHANGE = "NASDAQ"

# Reason strings
REASON_SEPARATOR = " · "
REASON_NO_SIGNAL = "no clear signal"
REASON_INSUFFICIENT_DATA = "insufficient data"
REASON_ERROR_FETCHING = "error fetching"
