"""
CONTRACT 4: Risk Levels

Input: entry price + ATR + side + RiskConfig
Output: ExitLevels

DETERMINISTIC stop-loss / take-profit arithmetic.
Pure Python logic - NO LLM involvement.
"""

from pydantic import BaseModel, Field, field_validator

from scalpbot.schemas.market import PositionSide


class RiskConfig(BaseModel):
    """
    ATR-based exit rules.
    Defaults mirror the rules given to the LLM in the signal prompt.
    """

    atr_stop_threshold: float = Field(
        default=0.003,
        gt=0,
        description="ATR at or above this uses the fixed-ratio stop",
    )
    stop_loss_ratio: float = Field(
        default=0.985,
        gt=0,
        lt=1,
        description="Long stop = entry * ratio (short: entry * (2 - ratio))",
    )
    stop_atr_multiplier: float = Field(default=2.0, gt=0)
    take_profit_atr_multipliers: list[float] = Field(default=[3.2, 5.5], min_length=1)
    trailing_atr_multiplier: float = Field(default=0.9, gt=0)
    tp1_close_ratio: float = Field(
        default=0.6,
        gt=0,
        le=1,
        description="Share of the position closed at TP1",
    )
    max_stop_loss_change: float = Field(
        default=0.025,
        gt=0,
        description="Stop loss kept within this fraction of the current price",
    )
    max_take_profit_changes: list[float] = Field(
        default=[0.05, 0.1],
        min_length=1,
        description="Cap on each TP's distance from the current price; the last cap covers extra levels",
    )

    @field_validator("take_profit_atr_multipliers", "max_take_profit_changes")
    @classmethod
    def multipliers_must_be_positive(cls, v):
        if any(m <= 0 for m in v):
            raise ValueError("take profit multipliers and caps must be > 0")
        return v

    @classmethod
    def from_settings(cls, settings) -> "RiskConfig":
        return cls(
            atr_stop_threshold=settings.atr_stop_threshold,
            stop_loss_ratio=settings.stop_loss_ratio,
            stop_atr_multiplier=settings.stop_atr_multiplier,
            take_profit_atr_multipliers=settings.take_profit_atr_multipliers,
            trailing_atr_multiplier=settings.trailing_atr_multiplier,
            tp1_close_ratio=settings.tp1_close_ratio,
            max_stop_loss_change=settings.max_stop_loss_change,
            max_take_profit_changes=settings.max_take_profit_changes,
        )


class ExitLevels(BaseModel):
    """Stop loss, take profits and trailing distance for one entry."""

    side: PositionSide
    entry_price: float = Field(..., gt=0)
    stop_loss: float
    take_profit_levels: list[float]
    trailing_stop: float = Field(..., ge=0)
    tp1_close_ratio: float
