"""
API v1 Router

All API endpoints of the bot.
"""

from fastapi import APIRouter

from scalpbot.api.v1.endpoints import indicators, signal, statistics

router = APIRouter()

# Include all endpoint routers
router.include_router(indicators.router, prefix="/indicators", tags=["Indicators"])
router.include_router(signal.router, prefix="/signal", tags=["Signal"])
router.include_router(statistics.router, prefix="/statistics", tags=["Statistics"])
