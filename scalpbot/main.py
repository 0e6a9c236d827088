"""
Scalpbot - FastAPI Application

Main entry point for the signal API.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from scalpbot.core.config import settings
from scalpbot.api.v1 import router as api_v1_router

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging() -> None:
    logging.basicConfig(level=settings.log_level.upper(), format=_LOG_FORMAT)
    # SDK request logs are noisy at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    from scalpbot.services.llm import get_llm_client
    provider = get_llm_client().get_active_provider()
    if provider:
        logger.info(f"LLM provider: {provider.value}")
    else:
        logger.warning("No LLM provider - signals come from the rule-based fallback")

    yield

    logger.info("Shutting down...")


configure_logging()

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Scalpbot Crypto Scalping Signal API

    ## Architecture
    - **Indicator Engine**: MA, EMA, RSI, Stochastic RSI, Bollinger Bands, MACD, ATR (pure NumPy)
    - **Signal Layer**: LLM decision via tool calling, rule-based fallback
    - **Risk Levels**: Deterministic ATR-based stop loss / take profit / trailing stop
    - **Statistics**: Win/loss summary of closed positions

    ## Core Principles
    - LLM decides, never calculates
    - Candles are supplied by the caller; no exchange access here
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Include API routes
app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Scalpbot API",
        "docs": "/docs",
        "health": "/health",
    }
