"""
LLM Prompt Templates

Structured prompts for the trading signal and the market opinion.

CRITICAL RULES (enforced in all prompts):
- LLM does NO indicator math - all indicators come from the snapshot
- Output is a single JSON object (or a trading_signal tool call)
- Never claim certainty
"""

import json
import re
from typing import Optional

# =============================================================================
# TRADING SIGNAL PROMPTS
# =============================================================================

SIGNAL_SYSTEM_PROMPT_TEMPLATE = """You are a short-term crypto futures trading decision engine.

The user sends JSON with 1m and 5m candles, indicators (RSI, Stochastic RSI,
Bollinger Bands, MACD, EMA({ema_period})), the current price, the ATR and the open position.
Decide whether this is a long entry, a short entry or a wait.

OUTPUT FORMAT:
Respond with the trading_signal tool, or with exactly this JSON object:
{{
  "action": "enter_long" | "enter_short" | "wait",
  "reason": "concise explanation of the decision",
  "stop_loss": number (required on entry),
  "take_profit_levels": number[] (required on entry),
  "trailing_stop": number (recommended on entry)
}}

ENTRY CONDITIONS (long; mirror every condition for short):
1. On 1m:
   - RSI >= 50 and rising over the last 3 values
   - close above the EMA
   - close broke above the Bollinger middle band or sits near the upper band
2. On 5m:
   - MACD histogram positive and rising over the last 2 values
   - RSI > 55
   - Bollinger band width at or above its average and expanding
   - volume at or above the 20-candle average
Enter only when ALL conditions hold.

SIDEWAYS FILTER - answer "wait" when:
- the 5m Bollinger band width is below its average, or
- the last 3 1m candles are ranging at the same price.

STOP LOSS:
- ATR >= {atr_stop_threshold}: stop_loss = entry_price x {stop_loss_ratio}
- ATR <  {atr_stop_threshold}: stop_loss = entry_price - ({stop_atr_multiplier} x ATR)

TAKE PROFIT:
{take_profit_rules}
- Mirror the levels for short entries.

TRAILING STOP:
- {tp1_close_percent}% of the position is closed at TP1, then a trailing stop
  of {trailing_atr_multiplier} x ATR covers the rest.

Never output any text besides the JSON."""

OPINION_SYSTEM_PROMPT = """You are a crypto chart analyst.
Using the market data provided, describe the current market state, the trend and
potential trading opportunities from a technical analysis point of view.
Focus on price action, support/resistance and the indicators (MA, RSI,
Stochastic RSI, Bollinger Bands, MACD). Be detailed and never promise outcomes."""

TRADING_SIGNAL_TOOL = {
    "type": "function",
    "function": {
        "name": "trading_signal",
        "description": (
            "Decide long / short / wait from the 1m and 5m candles and indicators; "
            "on entry, propose stop loss, take profit levels and trailing stop."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "action": {
                    "type": "string",
                    "description": "Trading action",
                    "enum": ["enter_long", "enter_short", "wait"],
                },
                "reason": {
                    "type": "string",
                    "description": "Why this action was chosen",
                },
                "stop_loss": {
                    "type": "number",
                    "description": "Stop loss price (entries only)",
                },
                "take_profit_levels": {
                    "type": "array",
                    "items": {"type": "number"},
                    "description": "Take profit prices (entries only)",
                },
                "trailing_stop": {
                    "type": "number",
                    "description": "Trailing stop distance (entries only)",
                },
            },
            "required": ["action", "reason"],
        },
    },
}

_OPENING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_CLOSING_FENCE = re.compile(r"\s*```$")


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def format_signal_system_prompt(risk_config: dict, ema_period: int) -> str:
    """Fill the signal rules with the configured exit parameters."""
    multipliers = risk_config.get("take_profit_atr_multipliers", [3.2, 5.5])
    take_profit_rules = "\n".join(
        f"- TP{i} = entry_price + ({m} x ATR)" for i, m in enumerate(multipliers, start=1)
    )
    return SIGNAL_SYSTEM_PROMPT_TEMPLATE.format(
        ema_period=ema_period,
        atr_stop_threshold=risk_config.get("atr_stop_threshold", 0.003),
        stop_loss_ratio=risk_config.get("stop_loss_ratio", 0.985),
        stop_atr_multiplier=risk_config.get("stop_atr_multiplier", 2.0),
        take_profit_rules=take_profit_rules,
        tp1_close_percent=round(risk_config.get("tp1_close_ratio", 0.6) * 100),
        trailing_atr_multiplier=risk_config.get("trailing_atr_multiplier", 0.9),
    )


def format_snapshot_prompt(snapshot: dict, max_candles: Optional[int] = None) -> str:
    """
    Serialize the snapshot as the user prompt.

    max_candles keeps only the most recent candles of each timeframe.
    """
    payload = dict(snapshot)
    if max_candles is not None:
        payload["candles"] = {
            timeframe: candles[-max_candles:]
            for timeframe, candles in snapshot.get("candles", {}).items()
        }
    return json.dumps(payload, default=str, ensure_ascii=False)


def strip_code_fence(content: str) -> str:
    """Remove a ```json ... ``` markdown fence around a reply, on one line or several."""
    content = _OPENING_FENCE.sub("", content.strip())
    content = _CLOSING_FENCE.sub("", content)
    return content.strip()
