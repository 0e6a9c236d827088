"""
Indicator API Endpoints

Endpoints for technical indicator calculations on caller-supplied candles.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from scalpbot.schemas.market import OHLCV, SnapshotRequest
from scalpbot.schemas.indicators import IndicatorParams, MarketSnapshot, TimeframeIndicators
from scalpbot.services.base import ValidationError
from scalpbot.services.indicators import get_indicator_service

logger = logging.getLogger(__name__)

router = APIRouter()


class TimeframeRequest(BaseModel):
    """Request body for a single-timeframe calculation."""

    candles: list[OHLCV] = Field(..., min_length=1, description="Candles, any order")
    params: Optional[IndicatorParams] = Field(
        default=None,
        description="Indicator periods (defaults from settings)",
    )


@router.post("/snapshot", response_model=MarketSnapshot)
async def build_snapshot(request: SnapshotRequest):
    """
    Build the indicator snapshot for a symbol.

    Returns for every timeframe:
    - MA, EMA, RSI, Stochastic RSI (trailing window)
    - Bollinger Bands and band width
    - MACD line, signal and histogram
    - Current price, volume and 20-candle average volume

    plus the ATR of the configured ATR timeframe.
    """
    indicator_service = get_indicator_service()
    try:
        return await indicator_service.execute(request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)


@router.post("/timeframe", response_model=TimeframeIndicators)
async def calculate_timeframe(request: TimeframeRequest):
    """Calculate indicators on one timeframe's candles."""
    indicator_service = get_indicator_service()
    candles = OHLCV.sort_candles(request.candles)
    try:
        return indicator_service.calculate_timeframe(candles, request.params)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
