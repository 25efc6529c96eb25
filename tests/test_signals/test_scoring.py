"""
Tests for component scoring and weighted totals.
"""
import pytest
import pandas as pd
import numpy as np

from tascan.data.series import PriceSeries
from tascan.indicators.technical import (
    IndicatorSnapshot,
    MACDResult,
    StochasticResult,
    TechnicalIndicators,
)
from tascan.shared.defaults import COMPONENT_CAP
from tascan.signals import scoring
from tascan.signals.config import WeightConfig
from tascan.signals.scoring import (
    ComponentScores,
    score_components,
    score_sma,
    score_rsi,
    score_macd,
    score_stochastic,
    score_qqe,
    weighted_score,
)


def _s(*values):
    return pd.Series([float(v) for v in values])


@pytest.fixture
def bullish_snapshot():
    """Every component triggers at least one condition."""
    return IndicatorSnapshot(
        sma_short=_s(11),
        sma_long=_s(10),
        rsi=_s(25),
        macd=MACDResult(line=_s(1, 2), signal=_s(0.5, 1), histogram=_s(0.5, 1)),
        stochastic=StochasticResult(k=_s(10, 15), d=_s(12, 14)),
        qqe_approx=_s(40, 45),
    )


class TestSMAComponent:

    def test_bullish(self):
        assert score_sma(_s(11), _s(10)) == (1.0, ["SMA bullish (10>50)"])

    def test_not_bullish(self):
        assert score_sma(_s(10), _s(10)) == (0.0, [])

    def test_unavailable(self):
        assert score_sma(None, _s(10)) == (None, [])


class TestRSIComponent:

    @pytest.mark.parametrize("value, expected", [
        (25, 1.0),
        (30, 0.6),
        (40, 0.6),
        (45, 0.6),
        (45.1, 0.0),
        (70, 0.0),
    ])
    def test_bands(self, value, expected):
        score, _ = score_rsi(_s(50, value))
        assert score == expected

    def test_reasons(self):
        assert score_rsi(_s(20))[1] == ["RSI oversold"]
        assert score_rsi(_s(35))[1] == ["RSI favorable (30-45)"]

    def test_unavailable(self):
        assert score_rsi(None) == (None, [])


class TestMACDComponent:

    def test_capped_at_component_cap(self, monkeypatch):
        monkeypatch.setattr(scoring, "MACD_HIST_RISING_SCORE", 1.5)
        result = MACDResult(line=_s(1, 2), signal=_s(0.5, 1), histogram=_s(0.5, 1))
        score, _ = score_macd(result)
        assert score == COMPONENT_CAP

    def test_cross_and_rising_histogram(self):
        result = MACDResult(line=_s(1, 2), signal=_s(0.5, 1), histogram=_s(0.5, 1))
        assert score_macd(result) == (1.5, ["MACD bullish cross", "MACD histogram rising"])

    def test_below_signal_falling_histogram(self):
        result = MACDResult(line=_s(2, 1), signal=_s(1, 1.5), histogram=_s(1, -0.5))
        assert score_macd(result) == (0.0, [])

    def test_partial_result_scores_zero(self):
        empty = pd.Series(dtype=float)
        result = MACDResult(line=_s(1, 2, 3), signal=empty, histogram=empty)
        assert score_macd(result) == (0.0, [])

    def test_unavailable(self):
        assert score_macd(None) == (None, [])


class TestStochasticComponent:

    def test_oversold_and_cross(self):
        result = StochasticResult(k=_s(10, 15), d=_s(12, 14))
        score, reasons = score_stochastic(result)
        assert score == pytest.approx(1.6)
        assert reasons == ["Stochastic oversold", "Stochastic K crossed up D"]

    def test_cross_needs_previous_bar_below(self):
        result = StochasticResult(k=_s(60, 70), d=_s(50, 65))
        assert score_stochastic(result) == (0.0, [])

    def test_aligns_k_and_d_on_latest_bars(self):
        # %D is shorter than %K; comparison uses the last two bars of each
        result = StochasticResult(k=_s(90, 50, 60), d=_s(55, 58))
        score, reasons = score_stochastic(result)
        assert score == pytest.approx(0.6)
        assert reasons == ["Stochastic K crossed up D"]

    def test_capped_at_component_cap(self, monkeypatch):
        # Default increments top out at 1.6; raise one so the sum exceeds the cap
        monkeypatch.setattr(scoring, "STOCH_CROSS_SCORE", 1.5)
        result = StochasticResult(k=_s(5, 10), d=_s(8, 9))
        score, reasons = score_stochastic(result)
        assert score == COMPONENT_CAP == 2.0
        assert len(reasons) == 2

    def test_unavailable(self):
        assert score_stochastic(None) == (None, [])


class TestQQEComponent:

    def test_rising_below_ceiling(self):
        assert score_qqe(_s(40, 45)) == (0.8, ["QQE approx rising (below 55)"])

    def test_rising_above_ceiling(self):
        assert score_qqe(_s(50, 56)) == (0.0, [])

    def test_falling(self):
        assert score_qqe(_s(45, 40)) == (0.0, [])

    def test_too_short(self):
        assert score_qqe(_s(45)) == (None, [])


class TestScoreComponents:

    def test_reason_order(self, bullish_snapshot):
        breakdown = score_components(bullish_snapshot)
        assert breakdown.reason == " · ".join([
            "SMA bullish (10>50)",
            "RSI oversold",
            "MACD bullish cross",
            "MACD histogram rising",
            "Stochastic oversold",
            "Stochastic K crossed up D",
            "QQE approx rising (below 55)",
        ])
        assert breakdown.components == ComponentScores(sma=1.0, rsi=1.0, macd=1.5, stoch=pytest.approx(1.6), qqe=0.8)

    def test_no_signal(self):
        snapshot = IndicatorSnapshot(sma_short=_s(9), sma_long=_s(10), rsi=_s(60))
        breakdown = score_components(snapshot)
        assert breakdown.reason == "no clear signal"
        assert breakdown.components.sma == 0.0
        assert breakdown.components.rsi == 0.0
        assert breakdown.components.macd is None

    def test_empty_snapshot_is_no_opinion(self):
        breakdown = score_components(IndicatorSnapshot())
        assert all(v is None for v in breakdown.components.to_dict().values())

    def test_uptrend_sma_component(self):
        """Closes 100..150: SMA(10) above SMA(50) on the latest bar."""
        series = PriceSeries.from_arrays(np.arange(100, 151, dtype=float))
        breakdown = score_components(TechnicalIndicators().calculate(series))
        assert breakdown.components.sma == 1.0
        assert breakdown.reasons[0] == "SMA bullish (10>50)"


class TestWeightedScore:

    def test_dot_product(self):
        components = ComponentScores(sma=1.0, rsi=0.6, macd=1.5, stoch=0.0, qqe=0.8)
        weights = WeightConfig(sma=2.0, rsi=1.0, macd=0.5, stoch=3.0, qqe=1.0)
        assert weighted_score(components, weights) == pytest.approx(2.0 + 0.6 + 0.75 + 0.0 + 0.8)

    def test_zero_component_weight_is_irrelevant(self):
        components = ComponentScores(sma=1.0, rsi=0.6, macd=1.5, stoch=0.0, qqe=0.8)
        base = weighted_score(components, WeightConfig())
        for stoch_weight in (0.0, 0.5, 10.0):
            assert weighted_score(components, WeightConfig(stoch=stoch_weight)) == base

    def test_unavailable_components_add_nothing(self):
        components = ComponentScores(sma=1.0)
        assert weighted_score(components, WeightConfig(sma=1.5, rsi=9.0)) == 1.5

    def test_all_unavailable(self):
        assert weighted_score(ComponentScores(), WeightConfig()) == 0.0
