"""
Tests for the full QQE fast/slow line pair and crossover detection.
"""
import pytest
import pandas as pd
import numpy as np

from tascan.indicators.qqe import (
    QQEResult,
    calculate_qqe,
    qqe_slow_step,
    detect_crossovers,
    min_qqe_length,
)
from tascan.indicators.technical import ema, rsi
from tascan.shared.types import SignalType


@pytest.fixture
def oscillating_prices():
    """Trending sine wave, enough swings for several crossovers."""
    dates = pd.date_range('2021-01-01', periods=250, freq='B')
    t = np.arange(250)
    return pd.Series(100 + 10 * np.sin(t * 0.15) + 0.05 * t, index=dates)


class TestSlowStep:
    """Test the slow-line ratchet rule."""

    def test_holds_when_bands_contain_previous_value(self):
        # QUP above, QDN below, fast stays above without crossing
        assert qqe_slow_step(prev_slow=50.0, fast=55.0, prev_fast=54.0, upper=60.0, lower=45.0) == 50.0

    def test_holds_across_span(self):
        slow = 50.0
        fast_values = [55.0, 56.0, 54.0, 57.0, 55.5]
        prev_fast = 54.0
        for fast in fast_values:
            slow = qqe_slow_step(slow, fast, prev_fast, upper=fast + 8, lower=49.0)
            prev_fast = fast
            assert slow == 50.0

    def test_moves_down_to_upper_band(self):
        assert qqe_slow_step(prev_slow=50.0, fast=40.0, prev_fast=41.0, upper=48.0, lower=32.0) == 48.0

    def test_moves_up_to_lower_band(self):
        assert qqe_slow_step(prev_slow=50.0, fast=60.0, prev_fast=59.0, upper=68.0, lower=52.0) == 52.0

    def test_bullish_cross_jumps_to_lower_band(self):
        assert qqe_slow_step(prev_slow=50.0, fast=55.0, prev_fast=45.0, upper=60.0, lower=40.0) == 40.0

    def test_bearish_cross_jumps_to_upper_band(self):
        assert qqe_slow_step(prev_slow=50.0, fast=45.0, prev_fast=55.0, upper=60.0, lower=40.0) == 60.0

    def test_upper_band_takes_precedence(self):
        # QUP below the slow line wins even when fast crosses up
        assert qqe_slow_step(prev_slow=50.0, fast=52.0, prev_fast=48.0, upper=49.0, lower=45.0) == 49.0


class TestDetectCrossovers:
    """Test crossover signal detection."""

    def test_buy_and_sell(self):
        fast = pd.Series([1.0, 2.0, 3.0, 2.0, 1.0])
        slow = pd.Series([2.0] * 5)
        signals = detect_crossovers(fast, slow)
        assert [(s.position, s.signal_type) for s in signals] == [
            (2, SignalType.BUY),
            (4, SignalType.SELL),
        ]
        assert signals[0].value == 3.0

    def test_touching_is_not_a_cross(self):
        fast = pd.Series([1.0, 2.0, 2.0])
        slow = pd.Series([2.0, 2.0, 2.0])
        assert detect_crossovers(fast, slow) == []

    def test_offset_and_timestamp(self):
        index = pd.date_range('2022-01-03', periods=3, freq='D')
        fast = pd.Series([1.0, 3.0, 4.0], index=index)
        slow = pd.Series([2.0, 2.0, 2.0], index=index)
        signals = detect_crossovers(fast, slow, offset=10)
        assert len(signals) == 1
        assert signals[0].position == 11
        assert signals[0].timestamp == index[1]

    def test_unequal_lengths(self):
        with pytest.raises(ValueError):
            detect_crossovers(pd.Series([1.0, 2.0]), pd.Series([1.0]))


class TestCalculateQQE:
    """Test full QQE computation."""

    def test_insufficient_data(self):
        n = min_qqe_length(14, 5)
        assert n == 22
        assert calculate_qqe(np.linspace(100, 110, n - 1)) is None
        assert calculate_qqe(np.linspace(100, 110, n)) is not None

    def test_lines_share_index(self, oscillating_prices):
        result = calculate_qqe(oscillating_prices)
        assert isinstance(result, QQEResult)
        expected_len = len(oscillating_prices) - 14 - 5 - 1
        for line in (result.fast, result.slow, result.upper, result.lower):
            assert len(line) == expected_len
            assert line.index.equals(result.fast.index)
        assert result.fast.index[-1] == oscillating_prices.index[-1]

    def test_bands_surround_fast_line(self, oscillating_prices):
        result = calculate_qqe(oscillating_prices)
        assert (result.upper >= result.fast).all()
        assert (result.lower <= result.fast).all()

    def test_slow_line_follows_ratchet(self, oscillating_prices):
        result = calculate_qqe(oscillating_prices)
        fast = result.fast.to_numpy()
        slow = result.slow.to_numpy()
        upper = result.upper.to_numpy()
        lower = result.lower.to_numpy()
        for i in range(1, len(slow)):
            assert slow[i] == qqe_slow_step(slow[i - 1], fast[i], fast[i - 1], upper[i], lower[i])

    def test_slow_line_holds_inside_bands(self, oscillating_prices):
        result = calculate_qqe(oscillating_prices)
        fast = result.fast.to_numpy()
        slow = result.slow.to_numpy()
        upper = result.upper.to_numpy()
        lower = result.lower.to_numpy()
        for i in range(1, len(slow)):
            crossed = (fast[i] > slow[i - 1] > fast[i - 1]) or (fast[i] < slow[i - 1] < fast[i - 1])
            if upper[i] >= slow[i - 1] >= lower[i] and not crossed:
                assert slow[i] == slow[i - 1]

    def test_signals_match_crossovers(self, oscillating_prices):
        result = calculate_qqe(oscillating_prices)
        assert result.signals, "oscillating input should produce crossovers"
        offset = len(oscillating_prices) - len(result.fast)
        assert result.signals == detect_crossovers(result.fast, result.slow, offset=offset)
        for signal in result.signals:
            assert oscillating_prices.index[signal.position] == signal.timestamp

    def test_signals_alternate(self, oscillating_prices):
        kinds = [s.signal_type for s in calculate_qqe(oscillating_prices).signals]
        assert all(a != b for a, b in zip(kinds, kinds[1:]))


class TestQQEValues:
    """Pin the fast line and band width to their definitions."""

    @pytest.fixture
    def short_prices(self):
        return pd.Series([
            100, 101, 103, 102, 104, 107, 106, 105, 108, 110, 109, 111, 114,
            113, 112, 115, 117, 116, 118, 121, 119, 120, 123, 122, 124, 126,
        ], dtype=float)

    @staticmethod
    def _wilder(values, period=14):
        out = [values[0]]
        for v in values[1:]:
            out.append(out[-1] + (v - out[-1]) / period)
        return np.array(out)

    def test_fast_line_is_ema5_of_rsi14(self, short_prices):
        result = calculate_qqe(short_prices)
        expected = ema(rsi(short_prices, 14), 5).iloc[1:]
        assert len(result.fast) == 26 - 14 - 5 - 1
        np.testing.assert_allclose(result.fast.to_numpy(), expected.to_numpy())
        assert result.fast.index.equals(expected.index)

    def test_band_width_is_double_smoothed_change(self, short_prices):
        result = calculate_qqe(short_prices)
        fast_all = ema(rsi(short_prices, 14), 5).to_numpy()
        change = np.abs(np.diff(fast_all))
        expected = self._wilder(self._wilder(change)) * 4.236
        np.testing.assert_allclose((result.upper - result.fast).to_numpy(), expected)
        np.testing.assert_allclose((result.fast - result.lower).to_numpy(), expected)

    def test_first_band_is_seeded_with_first_change(self, short_prices):
        result = calculate_qqe(short_prices)
        fast_all = ema(rsi(short_prices, 14), 5)
        first_change = abs(fast_all.iloc[1] - fast_all.iloc[0])
        assert result.upper.iloc[0] - result.fast.iloc[0] == pytest.approx(first_change * 4.236)

    def test_factor_scales_band(self, short_prices):
        wide = calculate_qqe(short_prices)
        narrow = calculate_qqe(short_prices, factor=1.0)
        np.testing.assert_allclose(
            (wide.upper - wide.fast).to_numpy(),
            (narrow.upper - narrow.fast).to_numpy() * 4.236,
        )
