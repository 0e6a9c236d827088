"""
Test suite for schema validation.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from scalpbot.schemas.indicators import IndicatorParams
from scalpbot.schemas.market import OHLCV
from scalpbot.schemas.trade import SignalAction, TradingSignal


class TestOHLCV:
    """Test candle parsing."""

    def test_kline_rows_are_sorted_oldest_first(self):
        """Exchange rows arrive newest-first as strings."""
        rows = [
            ["1714557720000", "0.2350", "0.2355", "0.2344", "0.2352", "900", "211.6"],
            ["1714557660000", "0.2345", "0.2352", "0.2341", "0.2350", "1200", "281.9"],
        ]

        candles = OHLCV.from_kline_rows(rows)

        assert [c.close for c in candles] == [0.2350, 0.2352]
        assert candles[0].timestamp == datetime(2024, 5, 1, 10, 1, tzinfo=timezone.utc)
        assert candles[1].volume == 900.0

    def test_high_below_low_is_rejected(self):
        with pytest.raises(ValidationError):
            OHLCV(
                timestamp=datetime(2025, 5, 1, tzinfo=timezone.utc),
                open=1.0,
                high=0.9,
                low=1.1,
                close=1.0,
                volume=0,
            )


class TestIndicatorParams:
    def test_fast_must_be_below_slow(self):
        with pytest.raises(ValidationError):
            IndicatorParams(macd_fast=26, macd_slow=12)

    def test_defaults(self):
        params = IndicatorParams()

        assert (params.rsi_period, params.bb_period, params.window) == (14, 20, 3)


class TestTradingSignal:
    def test_wait_needs_no_levels(self):
        signal = TradingSignal(action="wait", reason="sideways")

        assert signal.action == SignalAction.WAIT
        assert signal.is_entry is False

    def test_non_positive_take_profit_is_rejected(self):
        with pytest.raises(ValidationError):
            TradingSignal(action="enter_long", reason="x", take_profit_levels=[1.0, 0.0])
