"""
Scalpbot Schema Contracts

This module defines all JSON contracts between system components.
These are the authoritative interfaces - all modules must conform to these schemas.
"""

from scalpbot.schemas.market import (
    OHLCV,
    PositionInfo,
    PositionSide,
    SnapshotRequest,
    Timeframe,
)
from scalpbot.schemas.indicators import (
    BollingerBandData,
    IndicatorParams,
    MACDData,
    MarketSnapshot,
    StochRSIData,
    TimeframeIndicators,
)
from scalpbot.schemas.trade import (
    OpinionResponse,
    SignalAction,
    SignalSource,
    TradingSignal,
)
from scalpbot.schemas.risk import (
    ExitLevels,
    RiskConfig,
)
from scalpbot.schemas.statistics import (
    ClosedPnlRecord,
    StatisticsSummary,
    SymbolTradeStats,
)

__all__ = [
    # Market
    "OHLCV",
    "PositionInfo",
    "PositionSide",
    "SnapshotRequest",
    "Timeframe",
    # Indicators
    "BollingerBandData",
    "IndicatorParams",
    "MACDData",
    "MarketSnapshot",
    "StochRSIData",
    "TimeframeIndicators",
    # Trade
    "OpinionResponse",
    "SignalAction",
    "SignalSource",
    "TradingSignal",
    # Risk
    "ExitLevels",
    "RiskConfig",
    # Statistics
    "ClosedPnlRecord",
    "StatisticsSummary",
    "SymbolTradeStats",
]
