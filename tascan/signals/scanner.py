"""
Multi-symbol scan.

Fetches each symbol's daily history, scores it and ranks the results.
Symbols are processed strictly one after another with a fixed pause after
each fetch so free-tier API rate limits are respected. A failure on one
symbol is recorded as that symbol's result and never stops the scan.
Results are only returned once every symbol has been processed.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from .config import WeightConfig
from .scoring import ComponentScores, score_components, weighted_score
from ..data.providers import PriceHistoryProvider, ProviderError
from ..data.series import PriceSeries
from ..indicators.technical import TechnicalIndicators
from ..shared.defaults import (
    MIN_SCAN_BARS, SCAN_DELAY_SECONDS, MAX_SCAN_COUNT,
    REASON_INSUFFICIENT_DATA, REASON_ERROR_FETCHING,
)
from ..shared.types import ScanStatus


logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


@dataclass(frozen=True)
class ScoredSymbol:
    """Scan result for one symbol."""
    symbol: str
    status: ScanStatus
    score: float
    reason: str
    components: ComponentScores = field(default_factory=ComponentScores)

    @property
    def has_data(self) -> bool:
        return self.status == ScanStatus.OK


def rank_results(results: Iterable[ScoredSymbol]) -> List[ScoredSymbol]:
    """Sort by descending score. Ties keep their scan order."""
    return sorted(results, key=lambda r: r.score, reverse=True)


class SignalScanner:
    """Scores and ranks symbols from a price-history provider."""

    def __init__(
        self,
        provider: PriceHistoryProvider,
        weights: Optional[WeightConfig] = None,
        indicators: Optional[TechnicalIndicators] = None,
        delay_seconds: float = SCAN_DELAY_SECONDS,
        min_bars: int = MIN_SCAN_BARS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the scanner.

        Args:
            provider: Source of daily price history
            weights: Component weights (default: all 1.0)
            indicators: Indicator calculator (default periods when None)
            delay_seconds: Pause after each symbol's fetch
            min_bars: Fewest bars a symbol needs to be scored
            sleep: Sleep function, replaceable in tests
        """
        self.provider = provider
        self.weights = weights or WeightConfig()
        self.indicators = indicators or TechnicalIndicators()
        self.delay_seconds = delay_seconds
        self.min_bars = min_bars
        self.sleep = sleep

    def score_series(self, symbol: str, series: PriceSeries) -> ScoredSymbol:
        """Score an already-fetched series."""
        if len(series) < self.min_bars:
            logger.info(f"{symbol}: only {len(series)} bars (need {self.min_bars})")
            return ScoredSymbol(
                symbol=symbol,
                status=ScanStatus.INSUFFICIENT_DATA,
                score=0.0,
                reason=REASON_INSUFFICIENT_DATA,
            )

        breakdown = score_components(self.indicators.calculate(series))
        return ScoredSymbol(
            symbol=symbol,
            status=ScanStatus.OK,
            score=weighted_score(breakdown.components, self.weights),
            reason=breakdown.reason,
            components=breakdown.components,
        )

    def scan_symbol(self, symbol: str) -> ScoredSymbol:
        """Fetch and score one symbol; failures become an ERROR result."""
        try:
            series = self.provider.fetch_daily(symbol)
            return self.score_series(symbol, series)
        except ProviderError as e:
            logger.warning(f"{symbol}: {e}")
        except Exception as e:
            logger.error(f"Error analyzing {symbol}: {type(e).__name__}: {e}")
        return ScoredSymbol(
            symbol=symbol,
            status=ScanStatus.ERROR,
            score=0.0,
            reason=REASON_ERROR_FETCHING,
        )

    def scan(
        self,
        symbols: Iterable[str],
        max_count: Optional[int] = MAX_SCAN_COUNT,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[ScoredSymbol]:
        """
        Scan symbols sequentially and rank them.

        Args:
            symbols: Symbols to scan, in order
            max_count: Only the first max_count symbols are scanned (None = all)
            on_progress: Called with (position, total, symbol) before each fetch

        Returns:
            ScoredSymbol list sorted by descending score
        """
        symbols = list(symbols)
        if max_count is not None:
            symbols = symbols[:max_count]

        results = []
        total = len(symbols)
        for i, symbol in enumerate(symbols, start=1):
            logger.info(f"Scanning {i}/{total}: {symbol}")
            if on_progress is not None:
                on_progress(i, total, symbol)
            results.append(self.scan_symbol(symbol))
            self.sleep(self.delay_seconds)

        ranked = rank_results(results)
        logger.info(f"Scan complete: {total} symbols, {sum(r.has_data for r in ranked)} scored")
        return ranked
