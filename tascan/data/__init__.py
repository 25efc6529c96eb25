"""
Price history for the scanning engine.

Provides:
- PriceSeries: chronological Close/High/Low bars
- Providers for Yahoo Finance, Alpha Vantage, Finnhub and local CSV files
"""
from .series import PriceSeries
from .providers import (
    PriceHistoryProvider,
    ProviderError,
    YahooFinanceProvider,
    AlphaVantageProvider,
    FinnhubProvider,
    CsvPriceProvider,
    FallbackProvider,
    create_provider,
    normalize_symbol,
    strip_exchange,
)

__all__ = [
    'PriceSeries',
    'PriceHistoryProvider',
    'ProviderError',
    'YahooFinanceProvider',
    'AlphaVantageProvider',
    'FinnhubProvider',
    'CsvPriceProvider',
    'FallbackProvider',
    'create_provider',
    'normalize_symbol',
    'strip_exchange',
]
