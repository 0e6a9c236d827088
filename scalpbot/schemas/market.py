"""
CONTRACT 1: Market Data

Input to the Indicator Engine: OHLCV candles per timeframe plus the
current position, already fetched by the caller.

Candles are always handled oldest-first. Exchange kline payloads arrive
newest-first and are reordered on conversion.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Sequence
from pydantic import BaseModel, Field, model_validator


# =============================================================================
# ENUMS
# =============================================================================


class Timeframe(str, Enum):
    M1 = "1m"
    M5 = "5m"
    M15 = "15m"
    M30 = "30m"
    H1 = "1h"
    H4 = "4h"
    D1 = "1d"


class PositionSide(str, Enum):
    LONG = "long"
    SHORT = "short"


# =============================================================================
# CANDLES
# =============================================================================


class OHLCV(BaseModel):
    """Single candlestick data point."""

    timestamp: datetime
    open: float = Field(..., gt=0)
    high: float = Field(..., gt=0)
    low: float = Field(..., gt=0)
    close: float = Field(..., gt=0)
    volume: float = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_range(self) -> "OHLCV":
        if self.high < self.low:
            raise ValueError(f"high {self.high} is below low {self.low}")
        return self

    @staticmethod
    def sort_candles(candles: Sequence["OHLCV"]) -> list["OHLCV"]:
        """Return candles ordered oldest-first."""
        return sorted(candles, key=lambda c: c.timestamp)

    @classmethod
    def from_kline_rows(cls, rows: Sequence[Sequence[Any]]) -> list["OHLCV"]:
        """
        Convert exchange kline rows into candles.

        Rows look like [start_ms, open, high, low, close, volume, turnover]
        with numeric strings, newest first. Extra columns are ignored.
        """
        candles = [
            cls(
                timestamp=int(row[0]),
                open=float(row[1]),
                high=float(row[2]),
                low=float(row[3]),
                close=float(row[4]),
                volume=float(row[5]),
            )
            for row in rows
        ]
        return cls.sort_candles(candles)


# =============================================================================
# POSITION
# =============================================================================


class PositionInfo(BaseModel):
    """Open position passed through to the signal layer as context."""

    side: PositionSide
    entry_price: float = Field(..., gt=0)
    size_usd: float = Field(..., ge=0)
    size_coin: float = Field(..., ge=0)
    stop_loss: Optional[float] = None
    trailing_stop: Optional[float] = None


# =============================================================================
# INPUT: SnapshotRequest
# =============================================================================


class SnapshotRequest(BaseModel):
    """
    Request for a market snapshot.
    Sent by: API / polling loop
    Received by: Indicator Service
    """

    symbol: str = Field(..., min_length=1, description="e.g. 'BTCUSDT'")
    candles: dict[Timeframe, list[OHLCV]] = Field(
        ...,
        min_length=1,
        description="Candles per timeframe, any order",
    )
    position: Optional[PositionInfo] = None

    class Config:
        json_schema_extra = {
            "example": {
                "symbol": "MOVEUSDT",
                "candles": {
                    "1m": [
                        {
                            "timestamp": "2025-05-01T10:00:00Z",
                            "open": 0.2345,
                            "high": 0.2352,
                            "low": 0.2341,
                            "close": 0.2350,
                            "volume": 120345.0,
                        }
                    ]
                },
                "position": None,
            }
        }
