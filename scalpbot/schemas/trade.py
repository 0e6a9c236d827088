"""
CONTRACT 3: Signal Layer

Input: MarketSnapshot
Output: TradingSignal

The LLM (or the rule-based fallback) classifies the snapshot into an
action. Price levels are validated here; they are computed by the risk
levels module whenever the LLM leaves them out.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator


# =============================================================================
# ENUMS
# =============================================================================


class SignalAction(str, Enum):
    ENTER_LONG = "enter_long"
    ENTER_SHORT = "enter_short"
    WAIT = "wait"


class SignalSource(str, Enum):
    LLM = "llm"
    RULES = "rules"  # Deterministic fallback


# =============================================================================
# OUTPUT: TradingSignal
# =============================================================================


class TradingSignal(BaseModel):
    """
    Trading decision for the current snapshot.
    Returned by: Signal Service
    Consumed by: order placement (outside this package)
    """

    action: SignalAction
    reason: str = Field(..., min_length=1)
    stop_loss: Optional[float] = Field(default=None, gt=0)
    take_profit_levels: Optional[list[float]] = Field(
        default=None,
        description="TP1, TP2 (TP1 partially closes the position)",
    )
    trailing_stop: Optional[float] = Field(
        default=None,
        gt=0,
        description="Trailing stop distance, activated at TP1",
    )
    source: SignalSource = SignalSource.LLM

    @field_validator("take_profit_levels")
    @classmethod
    def levels_must_be_positive(cls, v):
        if v is not None and any(level <= 0 for level in v):
            raise ValueError("take profit levels must be > 0")
        return v

    @property
    def is_entry(self) -> bool:
        return self.action != SignalAction.WAIT

    class Config:
        json_schema_extra = {
            "example": {
                "action": "enter_long",
                "reason": "1m RSI rising above 50, 5m MACD histogram expanding",
                "stop_loss": 0.2318,
                "take_profit_levels": [0.2417, 0.2465],
                "trailing_stop": 0.0019,
                "source": "llm",
            }
        }


class OpinionResponse(BaseModel):
    """Free-text market commentary."""

    symbol: str
    opinion: str
