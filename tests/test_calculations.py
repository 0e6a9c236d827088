"""
Test suite for the indicator calculations.

Covers insufficient-data handling, neutral values on flat windows,
band ordering and the concrete reference scenarios.
"""

import math

import numpy as np
import pytest

from scalpbot.services.indicators.calculations import (
    RSI_NEUTRAL,
    STOCH_NEUTRAL,
    atr,
    bollinger_bands,
    ema,
    get_last_valid,
    macd,
    rsi,
    sma,
    stoch_rsi,
    to_optional_list,
    true_range,
)

RSI_SCENARIO = [10, 12, 11, 13, 15, 14, 16, 18, 17, 19, 20, 19, 21, 23, 22]


def random_walk(length: int = 120, seed: int = 7) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return 100.0 + np.cumsum(rng.normal(0, 1, length))


def defined(arr: np.ndarray) -> np.ndarray:
    return arr[~np.isnan(arr)]


# ==================== MOVING AVERAGE TESTS ====================


class TestSMA:
    """Test simple moving average."""

    def test_sma_reference_values(self):
        """MA([1,2,3,4,5], 3) is [nan, nan, 2, 3, 4]."""
        result = sma([1, 2, 3, 4, 5], 3)

        assert len(result) == 5
        assert math.isnan(result[0]) and math.isnan(result[1])
        assert list(result[2:]) == [2.0, 3.0, 4.0]

    def test_sma_period_longer_than_series_is_all_nan(self):
        """Output keeps the input length when the period cannot be filled."""
        result = sma([1, 2, 3], 5)

        assert len(result) == 3
        assert np.isnan(result).all()

    def test_sma_last_n_returns_trailing_window(self):
        assert list(sma([1, 2, 3, 4, 5], 3, last_n=2)) == [3.0, 4.0]

    def test_sma_rejects_invalid_parameters(self):
        with pytest.raises(ValueError):
            sma([1, 2, 3], 0)
        with pytest.raises(ValueError):
            sma([1, 2, 3], 2, last_n=0)


# ==================== EMA TESTS ====================


class TestEMA:
    """Test exponential moving average seeded on the first price."""

    def test_ema_seeded_on_first_price(self):
        """ema[0] is the first price, then the 2/(n+1) recurrence."""
        assert list(ema([10, 20], 3)) == [10.0, 15.0]

    def test_ema_is_idempotent_and_does_not_mutate_input(self):
        prices = random_walk(50)
        original = prices.copy()

        first = ema(prices, 9)
        second = ema(prices, 9)

        np.testing.assert_array_equal(first, second)
        np.testing.assert_array_equal(prices, original)

    def test_ema_skips_leading_nan(self):
        result = ema([np.nan, 10, 20], 3)

        assert math.isnan(result[0])
        assert list(result[1:]) == [10.0, 15.0]


# ==================== RSI TESTS ====================


class TestRSI:
    """Test Wilder RSI."""

    def test_rsi_reference_scenario(self):
        """15 prices, period 14: a single value at the last index."""
        result = rsi(RSI_SCENARIO, 14)

        assert len(result) == 15
        assert np.isnan(result[:14]).all()
        # avg gain 17/14, avg loss 5/14 -> RS 3.4
        assert result[14] == pytest.approx(850 / 11, abs=1e-9)

    def test_rsi_insufficient_data_is_all_nan(self):
        result = rsi(RSI_SCENARIO[:14], 14)

        assert len(result) == 14
        assert np.isnan(result).all()

    def test_rsi_constant_series_is_neutral(self):
        values = defined(rsi([100.0] * 30, 14))

        assert len(values) == 16
        assert (values == RSI_NEUTRAL).all()

    def test_rsi_only_gains_is_100(self):
        values = defined(rsi(np.arange(1, 31, dtype=float), 14))

        assert (values == 100.0).all()

    def test_rsi_is_bounded(self):
        for seed in range(5):
            values = defined(rsi(random_walk(200, seed), 14))
            assert ((values >= 0) & (values <= 100)).all()

    def test_rsi_last_n(self):
        full = rsi(random_walk(60), 14)

        np.testing.assert_array_equal(rsi(random_walk(60), 14, last_n=3), full[-3:])


# ==================== STOCHASTIC RSI TESTS ====================


class TestStochRSI:
    """Test Stochastic RSI (%K / %D on a 0-100 scale)."""

    def test_stoch_rsi_constant_series_is_neutral(self):
        result = stoch_rsi([100.0] * 40, 14, 3, 3)

        k = defined(result.k)
        d = defined(result.d)
        assert len(k) > 0 and len(d) > 0
        assert (k == STOCH_NEUTRAL).all()
        assert (d == STOCH_NEUTRAL).all()

    def test_stoch_rsi_first_defined_indices(self):
        """%K and %D are both defined from index 2p-1."""
        result = stoch_rsi(random_walk(60), 14, 3, 3)

        assert np.isnan(result.k[:27]).all() and not math.isnan(result.k[27])
        assert np.isnan(result.d[:27]).all() and not math.isnan(result.d[27])

    def test_stoch_rsi_defined_at_exactly_two_periods(self):
        result = stoch_rsi(random_walk(28), 14, 3, 3)

        assert not math.isnan(result.k[-1])
        assert not math.isnan(result.d[-1])

    def test_stoch_rsi_flat_prices_at_two_periods_is_neutral(self):
        result = stoch_rsi([100.0] * 28, 14, 3, 3)

        assert result.k[-1] == STOCH_NEUTRAL
        assert result.d[-1] == STOCH_NEUTRAL

    def test_stoch_rsi_k_is_raw_stochastic_of_rsi(self):
        """%K is the unsmoothed position of RSI inside its last 14 values."""
        prices = random_walk(60)
        rsi_window = rsi(prices, 14)[-14:]
        lowest, highest = rsi_window.min(), rsi_window.max()

        result = stoch_rsi(prices, 14, 3, 3)

        expected = 100 * (rsi_window[-1] - lowest) / (highest - lowest)
        assert result.k[-1] == pytest.approx(expected)

    def test_stoch_rsi_d_is_mean_of_last_k_values(self):
        result = stoch_rsi(random_walk(60), 14, 3, 3)

        assert result.d[-1] == pytest.approx(np.mean(result.k[-3:]))

    def test_stoch_rsi_insufficient_data(self):
        result = stoch_rsi(random_walk(27), 14, 3, 3)

        assert len(result.k) == 27 and len(result.d) == 27
        assert np.isnan(result.k).all() and np.isnan(result.d).all()

    def test_stoch_rsi_is_bounded(self):
        result = stoch_rsi(random_walk(150), 14, 3, 3)

        for series in (defined(result.k), defined(result.d)):
            assert ((series >= 0) & (series <= 100)).all()

    def test_stoch_rsi_rejects_invalid_smoothing(self):
        with pytest.raises(ValueError):
            stoch_rsi(random_walk(40), 14, 0, 3)


# ==================== BOLLINGER BANDS TESTS ====================


class TestBollingerBands:
    """Test Bollinger Bands."""

    def test_constant_series_collapses_bands(self):
        bands = bollinger_bands([100.0] * 25, 20, 2.0)

        idx = ~np.isnan(bands.middle)
        np.testing.assert_array_equal(bands.upper[idx], bands.middle[idx])
        np.testing.assert_array_equal(bands.lower[idx], bands.middle[idx])
        assert (bands.bandwidth[idx] == 0).all()
        assert (bands.percent_b[idx] == 0.5).all()

    def test_band_ordering(self):
        bands = bollinger_bands(random_walk(100), 20, 2.0)

        idx = ~np.isnan(bands.middle)
        assert (bands.upper[idx] >= bands.middle[idx]).all()
        assert (bands.middle[idx] >= bands.lower[idx]).all()

    def test_short_series_is_all_nan(self):
        bands = bollinger_bands([1.0, 2.0, 3.0, 4.0, 5.0], 20)

        assert len(bands.middle) == 5
        assert np.isnan(bands.middle).all()
        assert bands.latest() is None

    def test_population_standard_deviation(self):
        """Band half-width is multiplier * population std."""
        bands = bollinger_bands([1.0, 2.0, 3.0, 4.0], 4, 2.0)

        assert bands.middle[-1] == pytest.approx(2.5)
        assert bands.upper[-1] - bands.middle[-1] == pytest.approx(2 * np.sqrt(1.25))

    def test_latest_is_last_defined_band(self):
        bands = bollinger_bands(random_walk(40), 20)
        latest = bands.latest()

        assert latest == bands.at(len(bands.middle) - 1)
        assert latest.upper >= latest.middle >= latest.lower


# ==================== MACD TESTS ====================


class TestMACD:
    """Test MACD line, signal and histogram."""

    def test_constant_series_has_zero_histogram(self):
        result = macd([100.0] * 40, 12, 26, 9)

        histogram = defined(result.histogram)
        assert len(histogram) > 0
        np.testing.assert_allclose(histogram, 0.0, atol=1e-9)

    def test_histogram_identity(self):
        """histogram[t] == macd[t] - signal[t - offset] wherever defined."""
        result = macd(random_walk(80), 12, 26, 9)

        assert result.offset == 8
        for t in np.flatnonzero(~np.isnan(result.histogram)):
            expected = result.macd_line[t] - result.signal_line[t - result.offset]
            assert result.histogram[t] == pytest.approx(expected, abs=1e-12)

    def test_compact_histogram_identity(self):
        """On the compact series: hist[i] == macd[i + offset] - signal[i]."""
        result = macd(random_walk(80), 12, 26, 9)

        macd_line = defined(result.macd_line)
        signal_line = defined(result.signal_line)
        histogram = defined(result.histogram)
        for i in range(len(histogram)):
            assert histogram[i] == pytest.approx(
                macd_line[i + result.offset] - signal_line[i], abs=1e-12
            )

    def test_macd_line_starts_at_slow_period(self):
        result = macd(random_walk(60), 12, 26, 9)

        assert np.isnan(result.macd_line[:25]).all()
        assert not math.isnan(result.macd_line[25])
        assert not math.isnan(result.histogram[33])

    def test_histogram_defined_at_exactly_slow_plus_signal(self):
        result = macd(random_walk(35), 12, 26, 9)

        assert not math.isnan(result.histogram[-1])
        assert result.histogram[-1] == pytest.approx(
            result.macd_line[-1] - result.signal_line[-1 - result.offset]
        )

    def test_insufficient_data(self):
        result = macd(random_walk(34), 12, 26, 9)

        assert len(result.histogram) == 34
        assert np.isnan(result.macd_line).all()
        assert np.isnan(result.histogram).all()

    def test_last_n(self):
        full = macd(random_walk(60), 12, 26, 9)
        tail = macd(random_walk(60), 12, 26, 9, last_n=3)

        np.testing.assert_array_equal(tail.histogram, full.histogram[-3:])
        np.testing.assert_array_equal(tail.signal_line, full.signal_line[-3:])


# ==================== ATR TESTS ====================


class TestATR:
    """Test true range and ATR."""

    def test_constant_candles(self):
        """high=10, low=9, close=9.5 repeated 15 times -> ATR 1.0."""
        assert atr([10.0] * 15, [9.0] * 15, [9.5] * 15, 14) == pytest.approx(1.0)

    def test_uses_oldest_candles(self):
        """Candles after the first period + 1 do not change the value."""
        highs = [10.0] * 15 + [50.0]
        lows = [9.0] * 15 + [1.0]
        closes = [9.5] * 15 + [20.0]

        assert atr(highs, lows, closes, 14) == pytest.approx(1.0)

    def test_insufficient_candles_is_nan(self):
        assert math.isnan(atr([10.0] * 14, [9.0] * 14, [9.5] * 14, 14))

    def test_true_range_uses_previous_close(self):
        tr = true_range([10.0, 12.0], [9.0, 11.0], [9.5, 11.5])

        assert math.isnan(tr[0])
        assert tr[1] == pytest.approx(2.5)


# ==================== UTILITY TESTS ====================


class TestUtilities:
    def test_to_optional_list_maps_nan_to_none(self):
        assert to_optional_list(np.array([np.nan, 1.5])) == [None, 1.5]

    def test_get_last_valid(self):
        assert get_last_valid(np.array([1.0, 2.0, np.nan])) == 2.0
        assert get_last_valid(np.array([np.nan])) is None
