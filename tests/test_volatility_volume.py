"""
Unit tests for volatility (Bollinger Bands, ATR) and volume (OBV, VWAP) indicators
"""

import math

import numpy as np
import pytest

from indicator_engine.services.base import ValidationError
from indicator_engine.services.indicators.calculations import (
    atr,
    bollinger_bands,
    obv,
    true_range,
    vwap,
)
from tests.factories import random_walk


@pytest.mark.unit
class TestBollingerBands:
    """Test Bollinger Bands"""

    def test_bollinger_known_values(self):
        """Population standard deviation of [1..5] is sqrt(2)"""
        result = bollinger_bands([1, 2, 3, 4, 5], period=5, multiplier=2.0)

        assert np.isnan(result.upper[:4]).all()
        assert result.middle[4] == pytest.approx(3.0)
        assert result.upper[4] == pytest.approx(3 + 2 * math.sqrt(2))
        assert result.lower[4] == pytest.approx(3 - 2 * math.sqrt(2))
        assert result.bandwidth[4] == pytest.approx(4 * math.sqrt(2) / 3)
        assert result.percent_b[4] == pytest.approx((2 + 2 * math.sqrt(2)) / (4 * math.sqrt(2)))

    def test_bollinger_band_ordering(self):
        closes = random_walk(100, seed=9)

        result = bollinger_bands(closes, 20, 2.0)
        defined = ~np.isnan(result.middle)

        assert (result.upper[defined] >= result.middle[defined]).all()
        assert (result.middle[defined] >= result.lower[defined]).all()

    def test_bollinger_flat_series(self):
        """Collapsed bands: zero width, %B centred"""
        result = bollinger_bands([10.0] * 25, 20, 2.0)

        np.testing.assert_array_equal(result.upper[19:], 10.0)
        np.testing.assert_array_equal(result.lower[19:], 10.0)
        np.testing.assert_array_equal(result.bandwidth[19:], 0.0)
        np.testing.assert_array_equal(result.percent_b[19:], 0.5)

    def test_bollinger_warmup_percent_b_is_nan(self):
        result = bollinger_bands(random_walk(30), 20, 2.0)

        assert np.isnan(result.percent_b[:19]).all()


@pytest.mark.unit
class TestATR:
    """Test Average True Range"""

    def test_true_range_uses_previous_close(self):
        highs = np.array([11.0, 12.0, 9.0])
        lows = np.array([9.0, 11.5, 8.0])
        closes = np.array([10.0, 12.0, 8.5])

        tr = true_range(highs, lows, closes)

        # bar 1: gap up from 10 -> 12 - 10; bar 2: gap down from 12 -> 12 - 8
        np.testing.assert_allclose(tr, [2.0, 2.0, 4.0])

    def test_atr_constant_range(self):
        closes = np.full(30, 100.0)

        result = atr(closes + 1, closes - 1, closes, 14)

        assert np.isnan(result[:14]).all()
        np.testing.assert_allclose(result[14:], 2.0)

    def test_atr_is_positive(self):
        closes = random_walk(80, seed=2)

        result = atr(closes + 0.5, closes - 0.5, closes, 14)

        assert (result[14:] > 0).all()

    def test_atr_short_series(self):
        result = atr([2.0, 3.0], [1.0, 2.0], [1.5, 2.5], 14)

        assert np.isnan(result).all()


@pytest.mark.unit
class TestOBV:
    """Test On-Balance Volume"""

    def test_obv_known_values(self):
        closes = [10, 11, 11, 10, 12]
        volumes = [100, 200, 300, 400, 500]

        np.testing.assert_array_equal(obv(closes, volumes), [0, 200, 200, -200, 300])

    def test_obv_monotone_with_rising_closes(self):
        """Every up close adds volume"""
        closes = [100 + i * 0.5 for i in range(20)]

        result = obv(closes, [1000.0] * 20)

        assert (np.diff(result) > 0).all()

    def test_obv_starts_at_zero(self):
        assert obv([5.0], [1000.0])[0] == 0.0

    def test_obv_rejects_mismatched_lengths(self):
        with pytest.raises(ValidationError):
            obv([1.0, 2.0], [1.0])


@pytest.mark.unit
class TestVWAP:
    """Test Volume Weighted Average Price"""

    def test_vwap_cumulative(self):
        highs = [11.0, 13.0, 15.0]
        lows = [9.0, 11.0, 13.0]
        closes = [10.0, 12.0, 14.0]
        volumes = [100.0, 300.0, 0.0]

        result = vwap(highs, lows, closes, volumes)

        # typical prices 10, 12, 14
        np.testing.assert_allclose(result, [10.0, 11.5, 11.5])

    def test_vwap_zero_volume_uses_typical_price(self):
        result = vwap([12.0, 15.0], [9.0, 12.0], [10.5, 12.0], [0.0, 0.0])

        np.testing.assert_allclose(result, [10.5, 13.0])

    def test_vwap_rolling_window(self):
        closes = np.array([10.0, 20.0, 30.0, 40.0])
        volumes = np.array([1.0, 1.0, 1.0, 3.0])

        result = vwap(closes, closes, closes, volumes, period=2)

        assert np.isnan(result[0])
        np.testing.assert_allclose(result[1:], [15.0, 25.0, 37.5])

    def test_vwap_rolling_matches_cumulative_when_window_covers_series(self):
        closes = random_walk(10, seed=4)
        volumes = np.linspace(100, 1000, 10)

        rolling = vwap(closes + 1, closes - 1, closes, volumes, period=10)
        cumulative = vwap(closes + 1, closes - 1, closes, volumes)

        assert rolling[-1] == pytest.approx(cumulative[-1])

    def test_vwap_rejects_negative_period(self):
        with pytest.raises(ValidationError):
            vwap([1.0], [1.0], [1.0], [1.0], period=-1)
