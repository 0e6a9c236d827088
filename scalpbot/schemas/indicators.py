"""
CONTRACT 2: Indicator Engine

Input: SnapshotRequest (candles per timeframe)
Output: MarketSnapshot

This module performs ALL mathematical calculations.
Pure Python/NumPy - NO LLM involvement.

Series fields hold the trailing indicator window, oldest first.
Undefined values (not enough history) are null.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from scalpbot.schemas.market import OHLCV, PositionInfo


# =============================================================================
# PARAMETERS
# =============================================================================


class IndicatorParams(BaseModel):
    """Indicator periods and the trailing window returned per series."""

    ma_period: int = Field(default=20, ge=1)
    ema_period: int = Field(default=20, ge=1)
    rsi_period: int = Field(default=14, ge=1)
    stoch_k_period: int = Field(default=3, ge=1)
    stoch_d_period: int = Field(default=3, ge=1)
    bb_period: int = Field(default=20, ge=1)
    bb_multiplier: float = Field(default=2.0, gt=0)
    macd_fast: int = Field(default=12, ge=1)
    macd_slow: int = Field(default=26, ge=1)
    macd_signal: int = Field(default=9, ge=1)
    atr_period: int = Field(default=14, ge=1)
    window: int = Field(default=3, ge=1, description="Trailing values kept per series")

    @model_validator(mode="after")
    def _check_macd(self) -> "IndicatorParams":
        if self.macd_fast >= self.macd_slow:
            raise ValueError("macd_fast must be smaller than macd_slow")
        return self

    @classmethod
    def from_settings(cls, settings) -> "IndicatorParams":
        return cls(
            ma_period=settings.ma_period,
            ema_period=settings.ema_period,
            rsi_period=settings.rsi_period,
            stoch_k_period=settings.stoch_k_period,
            stoch_d_period=settings.stoch_d_period,
            bb_period=settings.bb_period,
            bb_multiplier=settings.bb_multiplier,
            macd_fast=settings.macd_fast,
            macd_slow=settings.macd_slow,
            macd_signal=settings.macd_signal,
            atr_period=settings.atr_period,
            window=settings.indicator_window,
        )


# =============================================================================
# OUTPUT: Indicator Components
# =============================================================================


class StochRSIData(BaseModel):
    """Stochastic RSI values (0-100)."""

    k: list[Optional[float]]
    d: list[Optional[float]]


class BollingerBandData(BaseModel):
    """Bollinger band at one candle."""

    middle: Optional[float] = None
    upper: Optional[float] = None
    lower: Optional[float] = None


class MACDData(BaseModel):
    """MACD indicator values."""

    value: list[Optional[float]]
    signal: list[Optional[float]]
    histogram: list[Optional[float]]


class TimeframeIndicators(BaseModel):
    """Indicators computed on one timeframe's closes."""

    ma: list[Optional[float]]
    rsi: list[Optional[float]]
    stoch_rsi: StochRSIData
    bollinger: list[BollingerBandData]
    bollinger_bandwidth: list[Optional[float]]
    bollinger_percent_b: list[Optional[float]] = Field(
        ...,
        description="Close position inside the band, 0 = lower, 1 = upper",
    )
    macd: MACDData
    ema: list[Optional[float]]
    current_price: float = Field(..., gt=0)
    volume: float = Field(..., ge=0)
    avg_volume_20: Optional[float] = Field(
        default=None,
        description="Mean volume of the last 20 candles",
    )


# =============================================================================
# OUTPUT: MarketSnapshot (Complete Response)
# =============================================================================


class MarketSnapshot(BaseModel):
    """
    Indicator snapshot for a symbol.
    Returned by: Indicator Service
    Consumed by: Signal Service (LLM prompt / rule-based fallback)
    """

    symbol: str
    time: datetime
    candles: dict[str, list[OHLCV]]
    indicators: dict[str, TimeframeIndicators]
    atr: Optional[float] = Field(
        default=None,
        ge=0,
        description="ATR of the configured ATR timeframe, null if not enough candles",
    )
    position: Optional[PositionInfo] = None

    class Config:
        json_schema_extra = {
            "example": {
                "symbol": "MOVEUSDT",
                "time": "2025-05-01T10:05:00Z",
                "candles": {"1m": [], "5m": []},
                "indicators": {
                    "1m": {
                        "ma": [0.2341, 0.2343, 0.2344],
                        "rsi": [54.2, 56.8, 58.1],
                        "stoch_rsi": {"k": [61.0, 70.2, 78.4], "d": [55.3, 63.1, 69.9]},
                        "bollinger": [
                            {"middle": 0.2341, "upper": 0.2362, "lower": 0.2320},
                        ],
                        "bollinger_bandwidth": [0.0179],
                        "bollinger_percent_b": [0.71],
                        "macd": {
                            "value": [0.0001, 0.0002, 0.0002],
                            "signal": [0.0001, 0.0001, 0.0001],
                            "histogram": [0.00005, 0.00007, 0.0001],
                        },
                        "ema": [0.2340, 0.2342, 0.2344],
                        "current_price": 0.2350,
                        "volume": 120345.0,
                        "avg_volume_20": 98000.0,
                    }
                },
                "atr": 0.0021,
                "position": None,
            }
        }
