"""
Risk Levels

CONTRACT:
    Input:  entry price + ATR + side + RiskConfig
    Output: ExitLevels

RESPONSIBILITIES:
    - ATR-based stop loss (fixed ratio on volatile symbols)
    - Take profit ladder and trailing stop distance
    - Clamp order prices to a maximum distance from market

PURE PYTHON - No LLM involvement.
The LLM may propose levels; missing ones are always filled from here.
"""

from scalpbot.services.risk.levels import compute_exit_levels, restrict_exit_prices, restrict_price

__all__ = [
    "compute_exit_levels",
    "restrict_exit_prices",
    "restrict_price",
]
