"""
Closed position statistics contracts.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class ClosedPnlRecord(BaseModel):
    """One closed position as reported by the exchange."""

    symbol: str = Field(..., min_length=1)
    closed_pnl: float
    closed_at: Optional[datetime] = None


class SymbolTradeStats(BaseModel):
    """Win/loss aggregation for one symbol."""

    symbol: str
    total_trades: int = Field(..., ge=0)
    winning_trades: int = Field(..., ge=0)
    losing_trades: int = Field(..., ge=0)
    total_profit: float = Field(..., ge=0)
    total_loss: float = Field(..., le=0)
    win_rate: float = Field(..., ge=0, le=100, description="Winning trades in %")
    net_pnl: float


class StatisticsSummary(BaseModel):
    """Per-symbol stats plus the overall line."""

    symbols: dict[str, SymbolTradeStats]
    overall: SymbolTradeStats
