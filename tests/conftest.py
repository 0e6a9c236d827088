"""
Pytest configuration and shared fixtures.

Provides candle builders and snapshot fixtures for the services.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from scalpbot.schemas.indicators import (
    BollingerBandData,
    MACDData,
    MarketSnapshot,
    StochRSIData,
    TimeframeIndicators,
)
from scalpbot.schemas.market import OHLCV

START = datetime(2025, 5, 1, 10, 0, tzinfo=timezone.utc)


def make_candles(
    closes: list[float],
    minutes: int = 1,
    volume: float = 100.0,
    spread: float = 0.001,
) -> list[OHLCV]:
    """Oldest-first candles with a fixed relative high/low spread around each close."""
    candles = []
    previous = closes[0]
    for i, close in enumerate(closes):
        candles.append(
            OHLCV(
                timestamp=START + timedelta(minutes=i * minutes),
                open=previous,
                high=max(previous, close) * (1 + spread),
                low=min(previous, close) * (1 - spread),
                close=close,
                volume=volume,
            )
        )
        previous = close
    return candles


def make_timeframe(
    rsi: list[float],
    ema: list[float],
    middle: float,
    histogram: list[float],
    bandwidth: list[float],
    current_price: float = 100.0,
    volume: float = 150.0,
    avg_volume_20: Optional[float] = 100.0,
) -> TimeframeIndicators:
    """Hand-built indicator window for rule tests."""
    return TimeframeIndicators(
        ma=[middle] * 3,
        rsi=rsi,
        stoch_rsi=StochRSIData(k=[50.0] * 3, d=[50.0] * 3),
        bollinger=[BollingerBandData(middle=middle, upper=middle * 1.01, lower=middle * 0.99)] * 3,
        bollinger_bandwidth=bandwidth,
        bollinger_percent_b=[0.5] * 3,
        macd=MACDData(value=[0.0] * 3, signal=[0.0] * 3, histogram=histogram),
        ema=ema,
        current_price=current_price,
        volume=volume,
        avg_volume_20=avg_volume_20,
    )


def make_snapshot(
    fast: TimeframeIndicators,
    slow: TimeframeIndicators,
    fast_closes: Optional[list[float]] = None,
    atr: Optional[float] = 0.5,
) -> MarketSnapshot:
    return MarketSnapshot(
        symbol="BTCUSDT",
        time=START,
        candles={
            "1m": make_candles(fast_closes or [99.0, 99.5, 100.0]),
            "5m": make_candles([98.0, 99.0, 100.0], minutes=5),
        },
        indicators={"1m": fast, "5m": slow},
        atr=atr,
    )


@pytest.fixture
def bullish_snapshot() -> MarketSnapshot:
    """Every long condition holds on 1m and 5m."""
    fast = make_timeframe(
        rsi=[52.0, 55.0, 58.0],
        ema=[99.5, 99.6, 99.7],
        middle=99.8,
        histogram=[0.0, 0.01, 0.02],
        bandwidth=[0.010, 0.010, 0.010],
        volume=10.0,
        avg_volume_20=None,
    )
    slow = make_timeframe(
        rsi=[56.0, 57.0, 60.0],
        ema=[99.0, 99.2, 99.4],
        middle=99.5,
        histogram=[0.01, 0.02, 0.03],
        bandwidth=[0.010, 0.011, 0.013],
    )
    return make_snapshot(fast, slow)


@pytest.fixture
def bearish_snapshot() -> MarketSnapshot:
    """Every short condition holds on 1m and 5m."""
    fast = make_timeframe(
        rsi=[48.0, 45.0, 42.0],
        ema=[100.5, 100.4, 100.3],
        middle=100.2,
        histogram=[0.0, -0.01, -0.02],
        bandwidth=[0.010, 0.010, 0.010],
        volume=10.0,
        avg_volume_20=None,
    )
    slow = make_timeframe(
        rsi=[44.0, 42.0, 40.0],
        ema=[101.0, 100.8, 100.6],
        middle=100.5,
        histogram=[-0.01, -0.02, -0.03],
        bandwidth=[0.010, 0.011, 0.013],
    )
    return make_snapshot(fast, slow, fast_closes=[101.0, 100.5, 100.0])
