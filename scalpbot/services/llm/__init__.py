"""
LLM Signal Service

CONTRACT:
    Input:  MarketSnapshot
    Output: TradingSignal (enter_long / enter_short / wait)

RESPONSIBILITIES:
    - Ask the LLM for a decision via the trading_signal tool
    - Parse tool-call arguments or JSON content
    - Fill exit levels the LLM omits from the ATR
    - Free-text market opinion

LLM USAGE:
    - Signal: structured tool call (GPT-4o / Claude)
    - Opinion: plain text

CRITICAL RULES:
    - LLM does NO math - all numbers come from the Indicator Engine
    - LLM interprets and decides, never calculates

FALLBACK BEHAVIOR:
    - If the LLM is unavailable or replies with garbage, the signal comes
      from the rule-based classifier
    - System remains functional without LLM API keys
"""

from scalpbot.services.llm.interface import SignalServiceInterface
from scalpbot.services.llm.client import (
    LLMClient,
    LLMConfig,
    LLMProvider,
    LLMResponse,
    ModelTier,
    get_llm_client,
)
from scalpbot.services.llm.signal import SignalService, get_signal_service, parse_signal_response

__all__ = [
    # Interfaces
    "SignalServiceInterface",
    # Client
    "LLMClient",
    "LLMConfig",
    "LLMProvider",
    "LLMResponse",
    "ModelTier",
    "get_llm_client",
    # Services
    "SignalService",
    "get_signal_service",
    "parse_signal_response",
]
