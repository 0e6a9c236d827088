"""
Signal Service Interface

Defines the contract for the LLM decision layer.
"""

from abc import abstractmethod

from scalpbot.services.base import BaseService
from scalpbot.schemas.indicators import MarketSnapshot
from scalpbot.schemas.trade import TradingSignal


class SignalServiceInterface(BaseService[MarketSnapshot, TradingSignal]):
    """
    Signal Service Contract.

    INPUT: MarketSnapshot
        - candles and indicators for 1m and 5m
        - atr: ATR of the 5m candles
        - position: current open position, if any

    OUTPUT: TradingSignal
        - action: enter_long / enter_short / wait
        - reason: why
        - stop_loss, take_profit_levels, trailing_stop on entries

    RULES:
        - NEVER do math in the LLM - all numbers are from the snapshot
        - Exit levels the LLM leaves out are computed deterministically
        - LLM failure falls back to the rule-based classifier
    """

    @property
    def name(self) -> str:
        return "SignalService"

    @abstractmethod
    async def execute(self, input_data: MarketSnapshot) -> TradingSignal:
        """Classify the snapshot into a trading signal."""
        pass

    @abstractmethod
    async def get_opinion(self, snapshot: MarketSnapshot) -> str:
        """Free-text market commentary for the snapshot."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check LLM API connectivity."""
        pass
