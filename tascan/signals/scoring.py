"""
Component scoring for one symbol.

Each indicator contributes a bounded component score computed from its most
recent values. Components are evaluated in a fixed order (SMA, RSI, MACD,
Stochastic, QQE) and every triggered condition adds its description to the
reason text. An indicator that could not be computed scores None ("no
opinion"), which is kept apart from 0.0 ("computed, nothing triggered").
"""
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Tuple

import pandas as pd

from .config import WeightConfig, INDICATOR_KEYS
from ..indicators.technical import IndicatorSnapshot, MACDResult, StochasticResult, _align_tail
from ..shared.defaults import (
    SMA_SHORT_PERIOD, SMA_LONG_PERIOD,
    RSI_OVERSOLD, RSI_FAVORABLE_MAX,
    STOCH_OVERSOLD, QQE_APPROX_CEILING,
    COMPONENT_CAP,
    SMA_BULLISH_SCORE, RSI_OVERSOLD_SCORE, RSI_FAVORABLE_SCORE,
    MACD_CROSS_SCORE, MACD_HIST_RISING_SCORE,
    STOCH_OVERSOLD_SCORE, STOCH_CROSS_SCORE, QQE_RISING_SCORE,
    REASON_SEPARATOR, REASON_NO_SIGNAL,
)


ComponentResult = Tuple[Optional[float], List[str]]


@dataclass(frozen=True)
class ComponentScores:
    """Per-indicator component scores. None = indicator unavailable."""
    sma: Optional[float] = None
    rsi: Optional[float] = None
    macd: Optional[float] = None
    stoch: Optional[float] = None
    qqe: Optional[float] = None

    def to_dict(self) -> Dict[str, Optional[float]]:
        return asdict(self)


@dataclass(frozen=True)
class ScoreBreakdown:
    """Component scores plus the descriptions of every triggered condition."""
    components: ComponentScores
    reasons: Tuple[str, ...] = ()

    @property
    def reason(self) -> str:
        return REASON_SEPARATOR.join(self.reasons) if self.reasons else REASON_NO_SIGNAL


def _available(series: Optional[pd.Series], min_len: int = 1) -> bool:
    return series is not None and len(series) >= min_len


def score_sma(short: Optional[pd.Series], long: Optional[pd.Series]) -> ComponentResult:
    """Short SMA above long SMA on the latest bar."""
    if not (_available(short) and _available(long)):
        return None, []
    if short.iloc[-1] > long.iloc[-1]:
        return SMA_BULLISH_SCORE, [f"SMA bullish ({SMA_SHORT_PERIOD}>{SMA_LONG_PERIOD})"]
    return 0.0, []


def score_rsi(rsi: Optional[pd.Series]) -> ComponentResult:
    """Oversold RSI scores fully, the favorable band partially."""
    if not _available(rsi):
        return None, []
    value = rsi.iloc[-1]
    if value < RSI_OVERSOLD:
        return RSI_OVERSOLD_SCORE, ["RSI oversold"]
    if value <= RSI_FAVORABLE_MAX:
        return RSI_FAVORABLE_SCORE, [f"RSI favorable ({RSI_OVERSOLD}-{RSI_FAVORABLE_MAX})"]
    return 0.0, []


def score_macd(result: Optional[MACDResult]) -> ComponentResult:
    """MACD above signal and a rising histogram, capped."""
    if result is None or result.line.empty:
        return None, []
    score = 0.0
    reasons = []
    if not result.signal.empty and result.line.iloc[-1] > result.signal.iloc[-1]:
        score += MACD_CROSS_SCORE
        reasons.append("MACD bullish cross")
    hist = result.histogram
    if len(hist) > 1 and hist.iloc[-1] > hist.iloc[-2]:
        score += MACD_HIST_RISING_SCORE
        reasons.append("MACD histogram rising")
    return min(COMPONENT_CAP, score), reasons


def score_stochastic(result: Optional[StochasticResult]) -> ComponentResult:
    """Oversold %K and a fresh %K-over-%D cross, capped."""
    if result is None or result.k.empty or result.d.empty:
        return None, []
    score = 0.0
    reasons = []
    k, d = _align_tail(result.k, result.d)
    if k.iloc[-1] < STOCH_OVERSOLD:
        score += STOCH_OVERSOLD_SCORE
        reasons.append("Stochastic oversold")
    if len(k) > 1 and k.iloc[-1] > d.iloc[-1] and k.iloc[-2] <= d.iloc[-2]:
        score += STOCH_CROSS_SCORE
        reasons.append("Stochastic K crossed up D")
    return min(COMPONENT_CAP, score), reasons


def score_qqe(smoothed: Optional[pd.Series]) -> ComponentResult:
    """Smoothed RSI rising while still below the ceiling."""
    if not _available(smoothed, 2):
        return None, []
    if smoothed.iloc[-1] > smoothed.iloc[-2] and smoothed.iloc[-1] < QQE_APPROX_CEILING:
        return QQE_RISING_SCORE, [f"QQE approx rising (below {QQE_APPROX_CEILING})"]
    return 0.0, []


def score_components(snapshot: IndicatorSnapshot) -> ScoreBreakdown:
    """Evaluate every component in order and collect triggered reasons."""
    evaluated = [
        ('sma', score_sma(snapshot.sma_short, snapshot.sma_long)),
        ('rsi', score_rsi(snapshot.rsi)),
        ('macd', score_macd(snapshot.macd)),
        ('stoch', score_stochastic(snapshot.stochastic)),
        ('qqe', score_qqe(snapshot.qqe_approx)),
    ]
    scores = {}
    reasons: List[str] = []
    for key, (score, triggered) in evaluated:
        scores[key] = score
        reasons.extend(triggered)
    return ScoreBreakdown(components=ComponentScores(**scores), reasons=tuple(reasons))


def weighted_score(components: ComponentScores, weights: WeightConfig) -> float:
    """Dot product of component scores and weights; unavailable components add nothing."""
    total = 0.0
    for key in INDICATOR_KEYS:
        score = getattr(components, key)
        if score is not None:
            total += score * getattr(weights, key)
    return total
