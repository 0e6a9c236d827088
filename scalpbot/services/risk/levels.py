"""
Exit Level Calculations

ATR-based stop loss, take profits and trailing stop for a fresh entry,
plus the clamp that keeps order prices near the market.
PURE PYTHON - No LLM involvement.
"""

from typing import Optional

from scalpbot.schemas.market import PositionSide
from scalpbot.schemas.risk import ExitLevels, RiskConfig


def compute_exit_levels(
    entry_price: float,
    atr: float,
    side: PositionSide,
    config: Optional[RiskConfig] = None,
) -> ExitLevels:
    """
    Derive exit levels from the entry price and ATR.

    Stop loss:
        ATR >= threshold -> fixed ratio of entry (1.5% by default)
        ATR <  threshold -> entry -/+ stop_atr_multiplier * ATR
    Take profits: entry +/- multiplier * ATR for each configured multiplier.
    Short entries mirror every level around the entry price.
    """
    if entry_price <= 0:
        raise ValueError(f"entry_price must be > 0, got {entry_price}")
    if atr < 0:
        raise ValueError(f"atr must be >= 0, got {atr}")

    config = config or RiskConfig()
    direction = 1 if side == PositionSide.LONG else -1

    if atr >= config.atr_stop_threshold:
        distance = entry_price * (1 - config.stop_loss_ratio)
    else:
        distance = config.stop_atr_multiplier * atr
    stop_loss = entry_price - direction * distance

    take_profits = [
        entry_price + direction * multiplier * atr
        for multiplier in config.take_profit_atr_multipliers
    ]

    return ExitLevels(
        side=side,
        entry_price=entry_price,
        stop_loss=stop_loss,
        take_profit_levels=take_profits,
        trailing_stop=config.trailing_atr_multiplier * atr,
        tp1_close_ratio=config.tp1_close_ratio,
    )


def restrict_price(
    price: float,
    current_price: float,
    order_side: str,
    max_change: float,
) -> float:
    """
    Clamp an order price to within max_change of the current price.

    order_side is the exchange side of the order ("Buy" / "Sell"):
    sell prices are capped above, buy prices are floored below.
    """
    if order_side == "Sell" and price > current_price * (1 + max_change):
        return current_price * (1 + max_change)
    if order_side == "Buy" and price < current_price * (1 - max_change):
        return current_price * (1 - max_change)
    return price


def restrict_exit_prices(
    stop_loss: Optional[float],
    take_profit_levels: Optional[list[float]],
    current_price: float,
    side: PositionSide,
    config: Optional[RiskConfig] = None,
) -> tuple[Optional[float], Optional[list[float]]]:
    """
    Keep proposed exit prices near the market before they become orders.

    The stop loss sits on the entry order's side, take profits on the
    closing side. TP caps go per level, the last cap covering extra levels.
    """
    config = config or RiskConfig()
    entry_side, closing_side = ("Buy", "Sell") if side == PositionSide.LONG else ("Sell", "Buy")

    if stop_loss is not None:
        stop_loss = restrict_price(stop_loss, current_price, entry_side, config.max_stop_loss_change)

    if take_profit_levels is not None:
        caps = config.max_take_profit_changes
        take_profit_levels = [
            restrict_price(level, current_price, closing_side, caps[min(i, len(caps) - 1)])
            for i, level in enumerate(take_profit_levels)
        ]

    return stop_loss, take_profit_levels
