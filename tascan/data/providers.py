"""
Price-history providers.

A provider turns a symbol into a chronological PriceSeries or raises
ProviderError. Payloads that arrive newest first (Alpha Vantage) are
reordered here so nothing downstream has to care.
"""
import json
import logging
import time
import urllib.parse
import urllib.request
import warnings
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence, Union

import pandas as pd
import yfinance as yf

from .series import PriceSeries
from ..shared.defaults import DEFAULT_EXCHANGE

# Suppress yfinance's pandas deprecation warnings
warnings.filterwarnings('ignore', message='.*Timestamp.utcnow.*')

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; tascan/1.0)"
REQUEST_TIMEOUT = 30

ALPHAVANTAGE_URL = "https://www.alphavantage.co/query"
FINNHUB_URL = "https://finnhub.io/api/v1/stock/candle"


class ProviderError(RuntimeError):
    """Raised when price history cannot be fetched or is malformed."""
    pass


def normalize_symbol(symbol: str, default_exchange: str = DEFAULT_EXCHANGE) -> str:
    """Prefix a bare symbol with an exchange ("AAPL" -> "NASDAQ:AAPL")."""
    if not symbol:
        return symbol
    symbol = symbol.strip().upper()
    if ':' in symbol:
        return symbol
    return f"{default_exchange}:{symbol}"


def strip_exchange(symbol: str) -> str:
    """Drop an exchange prefix ("NASDAQ:AAPL" -> "AAPL")."""
    return symbol.split(':', 1)[-1].strip().upper()


def _get_json(url: str, params: dict) -> dict:
    query = urllib.parse.urlencode(params)
    req = urllib.request.Request(f"{url}?{query}", headers={"User-Agent": USER_AGENT})
    with urllib.request.urlopen(req, timeout=REQUEST_TIMEOUT) as resp:
        return json.loads(resp.read().decode())


class PriceHistoryProvider(ABC):
    """Source of daily OHLC history."""

    name = "base"

    @abstractmethod
    def fetch_daily(self, symbol: str) -> PriceSeries:
        """
        Fetch daily bars for a symbol.

        Args:
            symbol: Ticker, with or without an exchange prefix

        Returns:
            PriceSeries ordered oldest first

        Raises:
            ProviderError: If data is unavailable or malformed
        """
        pass


class YahooFinanceProvider(PriceHistoryProvider):
    """Daily history from Yahoo Finance via yfinance."""

    name = "yahoo"

    def __init__(self, period: str = "1y"):
        self.period = period

    def fetch_daily(self, symbol: str) -> PriceSeries:
        ticker = strip_exchange(symbol)
        try:
            df = yf.download(ticker, period=self.period, interval="1d", progress=False)
        except Exception as e:
            raise ProviderError(f"Yahoo download failed for {ticker}: {type(e).__name__}: {e}") from e

        if df is None or df.empty:
            raise ProviderError(f"No Yahoo data for {ticker}")

        # Flatten multi-level columns if present
        if isinstance(df.columns, pd.MultiIndex):
            df.columns = df.columns.get_level_values(0)

        return PriceSeries.from_frame(df)


class AlphaVantageProvider(PriceHistoryProvider):
    """Daily adjusted history from Alpha Vantage (compact: last ~100 bars)."""

    name = "alphavantage"

    def __init__(self, api_key: str, outputsize: str = "compact"):
        if not api_key:
            raise ValueError("Alpha Vantage requires an API key")
        self.api_key = api_key
        self.outputsize = outputsize

    def fetch_daily(self, symbol: str) -> PriceSeries:
        ticker = strip_exchange(symbol)
        try:
            payload = _get_json(ALPHAVANTAGE_URL, {
                "function": "TIME_SERIES_DAILY_ADJUSTED",
                "symbol": ticker,
                "outputsize": self.outputsize,
                "apikey": self.api_key,
            })
        except Exception as e:
            raise ProviderError(f"Alpha Vantage request failed for {ticker}: {type(e).__name__}: {e}") from e
        return self.parse_payload(ticker, payload)

    @staticmethod
    def parse_payload(ticker: str, payload: dict) -> PriceSeries:
        """Convert a 'Time Series (Daily)' payload into a chronological series."""
        series = payload.get('Time Series (Daily)') if isinstance(payload, dict) else None
        if not series:
            note = payload.get('Note') or payload.get('Error Message') if isinstance(payload, dict) else None
            raise ProviderError(f"No Alpha Vantage series for {ticker}" + (f": {note}" if note else ""))

        # Newest first, as the web API is usually read
        dates = sorted(series.keys(), reverse=True)
        try:
            closes = [float(series[d]['4. close']) for d in dates]
            highs = [float(series[d]['2. high']) for d in dates]
            lows = [float(series[d]['3. low']) for d in dates]
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(f"Malformed Alpha Vantage bar for {ticker}: {e}") from e

        return PriceSeries.from_arrays(
            closes, highs, lows,
            most_recent_first=True,
            index=pd.to_datetime(dates),
        )


class FinnhubProvider(PriceHistoryProvider):
    """Daily candles from Finnhub for the last lookback_days."""

    name = "finnhub"

    def __init__(self, api_key: str, lookback_days: int = 365):
        if not api_key:
            raise ValueError("Finnhub requires an API key")
        self.api_key = api_key
        self.lookback_days = lookback_days

    def fetch_daily(self, symbol: str) -> PriceSeries:
        ticker = strip_exchange(symbol)
        to_ts = int(time.time())
        from_ts = to_ts - self.lookback_days * 24 * 60 * 60
        try:
            payload = _get_json(FINNHUB_URL, {
                "symbol": ticker,
                "resolution": "D",
                "from": from_ts,
                "to": to_ts,
                "token": self.api_key,
            })
        except Exception as e:
            raise ProviderError(f"Finnhub request failed for {ticker}: {type(e).__name__}: {e}") from e
        return self.parse_payload(ticker, payload)

    @staticmethod
    def parse_payload(ticker: str, payload: dict) -> PriceSeries:
        """Convert Finnhub c/h/l/t arrays (oldest first) into a series."""
        if not isinstance(payload, dict) or payload.get('s') != 'ok' or not payload.get('c'):
            status = payload.get('s') if isinstance(payload, dict) else None
            raise ProviderError(f"No Finnhub candles for {ticker} (status={status})")
        timestamps = payload.get('t')
        index = pd.to_datetime(timestamps, unit='s') if timestamps else None
        try:
            return PriceSeries.from_arrays(payload['c'], payload.get('h'), payload.get('l'), index=index)
        except ValueError as e:
            raise ProviderError(f"Malformed Finnhub candles for {ticker}: {e}") from e


class CsvPriceProvider(PriceHistoryProvider):
    """
    Loads <SYMBOL>.csv files from a directory.

    Files use a Date index column and OHLC columns as written by
    DataFrame.to_csv() on a yfinance download.
    """

    name = "csv"

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)

    def path_for(self, symbol: str) -> Path:
        return self.data_dir / f"{strip_exchange(symbol)}.csv"

    def fetch_daily(self, symbol: str) -> PriceSeries:
        path = self.path_for(symbol)
        if not path.exists():
            raise ProviderError(f"Data file not found: {path}")
        try:
            df = pd.read_csv(path, index_col=0, parse_dates=True)
            return PriceSeries.from_frame(df)
        except ValueError as e:
            raise ProviderError(f"Malformed data file {path}: {e}") from e


class FallbackProvider(PriceHistoryProvider):
    """
    Tries providers in order and returns the first series one of them serves.

    A provider that raises ProviderError or returns an empty series hands the
    symbol to the next one. ProviderError is raised only when every provider
    has failed, with each failure listed in the message.
    """

    name = "fallback"

    def __init__(self, providers: Sequence[PriceHistoryProvider]):
        if not providers:
            raise ValueError("FallbackProvider needs at least one provider")
        self.providers = list(providers)

    def fetch_daily(self, symbol: str) -> PriceSeries:
        failures = []
        for provider in self.providers:
            try:
                series = provider.fetch_daily(symbol)
            except ProviderError as e:
                logger.info(f"{symbol}: {provider.name} failed, trying next provider ({e})")
                failures.append(f"{provider.name}: {e}")
                continue
            if len(series) == 0:
                logger.info(f"{symbol}: {provider.name} returned no bars, trying next provider")
                failures.append(f"{provider.name}: no bars")
                continue
            return series
        raise ProviderError(f"All providers failed for {symbol}: " + "; ".join(failures))


def create_provider(
    name: str,
    api_key: Optional[str] = None,
    data_dir: Optional[Union[str, Path]] = None,
) -> PriceHistoryProvider:
    """Build a provider by name: yahoo, alphavantage, finnhub or csv."""
    if name == "yahoo":
        return YahooFinanceProvider()
    if name == "alphavantage":
        return AlphaVantageProvider(api_key or "")
    if name == "finnhub":
        return FinnhubProvider(api_key or "")
    if name == "csv":
        return CsvPriceProvider(data_dir or "data")
    raise ValueError(f"Unknown provider '{name}'. Available: yahoo, alphavantage, finnhub, csv")
