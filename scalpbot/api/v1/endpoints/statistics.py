"""
Statistics API Endpoints

Win/loss summary of closed positions.
"""

from fastapi import APIRouter

from scalpbot.schemas.statistics import ClosedPnlRecord, StatisticsSummary
from scalpbot.services.statistics import get_statistics_service

router = APIRouter()


@router.post("/summary", response_model=StatisticsSummary)
async def summarize(records: list[ClosedPnlRecord]):
    """
    Summarize closed positions per symbol.

    pnl > 0 counts as a win; zero and negative pnl count as losses.
    """
    return await get_statistics_service().execute(records)
