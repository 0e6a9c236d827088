"""
Indicator Engine Service

CONTRACT:
    Input:  SnapshotRequest (OHLCV candles per timeframe)
    Output: MarketSnapshot

RESPONSIBILITIES:
    - Moving averages (SMA, first-price-seeded EMA)
    - Momentum (Wilder RSI, Stochastic RSI, MACD)
    - Volatility (Bollinger Bands, ATR)
    - Trailing-window snapshot per timeframe for the signal layer

PURE PYTHON - No LLM involvement.
Uses NumPy for calculations.
All math is deterministic and reproducible.
"""

from scalpbot.services.indicators.interface import IndicatorServiceInterface
from scalpbot.services.indicators.service import IndicatorService, get_indicator_service

__all__ = [
    "IndicatorServiceInterface",
    "IndicatorService",
    "get_indicator_service",
]
