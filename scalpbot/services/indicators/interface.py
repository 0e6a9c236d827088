"""
Indicator Engine Service Interface

Defines the contract for the indicator calculation layer.
"""

from abc import abstractmethod
from typing import Optional, Sequence

from scalpbot.services.base import BaseService
from scalpbot.schemas.market import OHLCV, PositionInfo, SnapshotRequest, Timeframe
from scalpbot.schemas.indicators import IndicatorParams, MarketSnapshot, TimeframeIndicators


class IndicatorServiceInterface(BaseService[SnapshotRequest, MarketSnapshot]):
    """
    Indicator Engine Service Contract.

    INPUT: SnapshotRequest
        - symbol
        - candles: OHLCV candles per timeframe
        - position: optional open position (passed through)

    OUTPUT: MarketSnapshot
        - indicators: trailing indicator window per timeframe
        - atr: ATR of the configured timeframe
    """

    @property
    def name(self) -> str:
        return "IndicatorService"

    @abstractmethod
    async def execute(self, input_data: SnapshotRequest) -> MarketSnapshot:
        """Build the snapshot for one symbol."""
        pass

    @abstractmethod
    def calculate_timeframe(
        self,
        candles: Sequence[OHLCV],
        params: Optional[IndicatorParams] = None,
    ) -> TimeframeIndicators:
        """
        Calculate indicators for one timeframe.

        Args:
            candles: Oldest-first candles
            params: Periods and window (defaults from settings)
        """
        pass

    @abstractmethod
    def build_snapshot(
        self,
        symbol: str,
        candles_by_timeframe: dict[Timeframe, list[OHLCV]],
        position: Optional[PositionInfo] = None,
    ) -> MarketSnapshot:
        pass

    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        return True
