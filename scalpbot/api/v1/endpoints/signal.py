"""
Signal API Endpoints

Snapshot -> LLM (or rule-based) trading decision.
"""

import logging

from fastapi import APIRouter, HTTPException

from scalpbot.schemas.market import SnapshotRequest
from scalpbot.schemas.trade import OpinionResponse, TradingSignal
from scalpbot.services.base import ExternalAPIError, LLMResponseError, ValidationError
from scalpbot.services.indicators import get_indicator_service
from scalpbot.services.llm import get_signal_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=TradingSignal)
async def generate_signal(request: SnapshotRequest):
    """
    Generate a trading signal for a symbol.

    Pipeline:
    1. Calculate indicators on the supplied candles
    2. Ask the LLM for enter_long / enter_short / wait
    3. Fill missing exit levels from the ATR

    Falls back to the rule-based classifier when the LLM is unavailable.
    """
    try:
        snapshot = await get_indicator_service().execute(request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    return await get_signal_service().execute(snapshot)


@router.post("/opinion", response_model=OpinionResponse)
async def get_opinion(request: SnapshotRequest):
    """Free-text chart analysis of the snapshot."""
    try:
        snapshot = await get_indicator_service().execute(request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    try:
        opinion = await get_signal_service().get_opinion(snapshot)
    except (ExternalAPIError, LLMResponseError) as e:
        logger.error(f"Opinion failed for {request.symbol}: {e}")
        raise HTTPException(status_code=503, detail=e.message)

    return OpinionResponse(symbol=request.symbol, opinion=opinion)
