"""
Signal Service Implementation

Asks the LLM for an enter_long / enter_short / wait decision on the snapshot.

CRITICAL: LLM does NO math. Exit levels it omits are computed by the
risk levels module from the snapshot ATR.
"""

import json
import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from scalpbot.core.config import settings
from scalpbot.schemas.indicators import MarketSnapshot, TimeframeIndicators
from scalpbot.schemas.market import PositionSide
from scalpbot.schemas.risk import RiskConfig
from scalpbot.schemas.trade import SignalAction, SignalSource, TradingSignal
from scalpbot.services.base import ExternalAPIError, LLMResponseError
from scalpbot.services.llm.client import LLMClient, LLMResponse, ModelTier, get_llm_client
from scalpbot.services.llm.interface import SignalServiceInterface
from scalpbot.services.llm.prompts import (
    OPINION_SYSTEM_PROMPT,
    TRADING_SIGNAL_TOOL,
    format_signal_system_prompt,
    format_snapshot_prompt,
    strip_code_fence,
)
from scalpbot.services.risk.levels import compute_exit_levels, restrict_exit_prices

logger = logging.getLogger(__name__)

FAST_TIMEFRAME = "1m"
SLOW_TIMEFRAME = "5m"


def _latest(values: list) -> Optional[float]:
    return values[-1] if values else None


def _complete(values: list) -> bool:
    return bool(values) and all(v is not None for v in values)


def _rising(values: list) -> bool:
    return _complete(values) and len(values) >= 2 and all(
        a < b for a, b in zip(values, values[1:])
    )


def _falling(values: list) -> bool:
    return _complete(values) and len(values) >= 2 and all(
        a > b for a, b in zip(values, values[1:])
    )


def parse_signal_response(response: LLMResponse) -> TradingSignal:
    """
    Build a TradingSignal from an LLM reply.

    Tool-call arguments win; otherwise the message content must hold the
    JSON object, optionally wrapped in a markdown code block.

    Raises:
        LLMResponseError: empty reply, invalid JSON or invalid fields
    """
    if response.tool_arguments is not None:
        data = response.tool_arguments
    else:
        content = strip_code_fence(response.content or "")
        if not content:
            raise LLMResponseError("SignalService", "LLM returned an empty reply")
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse LLM response: {e}")
            logger.error(f"Response content: {response.content[:500]}")
            raise LLMResponseError("SignalService", "LLM returned invalid JSON")

    if not isinstance(data, dict):
        raise LLMResponseError("SignalService", "LLM reply is not a JSON object")

    try:
        return TradingSignal(**{**data, "source": SignalSource.LLM})
    except PydanticValidationError as e:
        raise LLMResponseError(
            "SignalService",
            "LLM reply has invalid signal fields",
            {"errors": e.errors(include_url=False)},
        )


class SignalService(SignalServiceInterface):
    """
    Signal Service using an LLM with tool calling.

    Falls back to deterministic rules if the LLM is unavailable or its
    reply cannot be used.
    """

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        risk_config: Optional[RiskConfig] = None,
        sideways_tolerance: Optional[float] = None,
        prompt_candles: Optional[int] = None,
    ):
        self._llm_client = llm_client
        self.risk_config = risk_config or RiskConfig.from_settings(settings)
        self.sideways_tolerance = (
            sideways_tolerance if sideways_tolerance is not None else settings.sideways_tolerance
        )
        self.prompt_candles = prompt_candles or settings.llm_prompt_candles

    @property
    def llm_client(self) -> LLMClient:
        """Lazy initialization of LLM client."""
        if self._llm_client is None:
            self._llm_client = get_llm_client()
        return self._llm_client

    async def execute(self, input_data: MarketSnapshot) -> TradingSignal:
        """
        Generate a trading signal for the snapshot.

        Falls back to rule-based classification if the LLM fails.
        """
        if not self.llm_client.is_configured:
            logger.info(f"No LLM configured, using rules for {input_data.symbol}")
            return self._rule_based_signal(input_data)

        try:
            signal = await self._llm_signal(input_data)
        except Exception as e:
            logger.warning(f"LLM signal failed: {e}, falling back to rules")
            return self._rule_based_signal(input_data)

        logger.info(f"{input_data.symbol} signal: {signal.action.value} ({signal.source.value})")
        return signal

    async def _llm_signal(self, snapshot: MarketSnapshot) -> TradingSignal:
        system_prompt = format_signal_system_prompt(
            self.risk_config.model_dump(), settings.ema_period
        )
        user_prompt = format_snapshot_prompt(
            snapshot.model_dump(mode="json"), max_candles=self.prompt_candles
        )

        response = await self.llm_client.generate(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            model_tier=ModelTier.SIGNAL,
            tools=[TRADING_SIGNAL_TOOL],
        )

        signal = parse_signal_response(response)
        return self._fill_exit_levels(signal, snapshot)

    def _fill_exit_levels(self, signal: TradingSignal, snapshot: MarketSnapshot) -> TradingSignal:
        """
        Complete an entry signal's missing exit levels from the ATR, then
        clamp stop loss and take profits to their distance caps.
        """
        if not signal.is_entry:
            return signal

        entry_price = self._entry_price(snapshot)
        if entry_price is None:
            return signal

        side = PositionSide.LONG if signal.action == SignalAction.ENTER_LONG else PositionSide.SHORT
        update = {}
        if None in (signal.stop_loss, signal.take_profit_levels, signal.trailing_stop):
            if snapshot.atr:
                levels = compute_exit_levels(entry_price, snapshot.atr, side, self.risk_config)
                if signal.stop_loss is None:
                    update["stop_loss"] = levels.stop_loss
                if signal.take_profit_levels is None:
                    update["take_profit_levels"] = levels.take_profit_levels
                if signal.trailing_stop is None:
                    update["trailing_stop"] = levels.trailing_stop
            else:
                logger.warning(f"Cannot compute exit levels for {snapshot.symbol}: no ATR")

        stop_loss, take_profits = restrict_exit_prices(
            update.get("stop_loss", signal.stop_loss),
            update.get("take_profit_levels", signal.take_profit_levels),
            entry_price,
            side,
            self.risk_config,
        )
        update["stop_loss"] = stop_loss
        update["take_profit_levels"] = take_profits
        return signal.model_copy(update=update)

    @staticmethod
    def _entry_price(snapshot: MarketSnapshot) -> Optional[float]:
        for timeframe in (FAST_TIMEFRAME, SLOW_TIMEFRAME):
            if timeframe in snapshot.indicators:
                return snapshot.indicators[timeframe].current_price
        return None

    # =========================================================================
    # RULE-BASED FALLBACK
    # =========================================================================

    def _rule_based_signal(self, snapshot: MarketSnapshot) -> TradingSignal:
        """
        Deterministic version of the rules given to the LLM.

        Enters only when every 1m and 5m condition agrees; anything
        missing or sideways means wait.
        """
        fast = snapshot.indicators.get(FAST_TIMEFRAME)
        slow = snapshot.indicators.get(SLOW_TIMEFRAME)
        if fast is None or slow is None:
            return self._wait(f"Need {FAST_TIMEFRAME} and {SLOW_TIMEFRAME} indicators")

        if self._is_sideways(snapshot, slow):
            return self._wait("Sideways market: narrow 5m bands or flat 1m closes")

        if self._fast_conditions(fast, PositionSide.LONG) and self._slow_conditions(slow, PositionSide.LONG):
            side = PositionSide.LONG
        elif self._fast_conditions(fast, PositionSide.SHORT) and self._slow_conditions(slow, PositionSide.SHORT):
            side = PositionSide.SHORT
        else:
            return self._wait("Entry conditions not aligned on 1m and 5m")

        if not snapshot.atr:
            return self._wait("ATR unavailable, cannot place stop loss")

        levels = compute_exit_levels(fast.current_price, snapshot.atr, side, self.risk_config)
        stop_loss, take_profits = restrict_exit_prices(
            levels.stop_loss, levels.take_profit_levels, fast.current_price, side, self.risk_config
        )
        direction = "Bullish" if side == PositionSide.LONG else "Bearish"
        return TradingSignal(
            action=SignalAction.ENTER_LONG if side == PositionSide.LONG else SignalAction.ENTER_SHORT,
            reason=(
                f"{direction} 1m momentum (RSI {fast.rsi[-1]:.1f}, price vs EMA and BB middle) "
                f"confirmed by 5m MACD histogram, RSI {slow.rsi[-1]:.1f} and volume"
            ),
            stop_loss=stop_loss,
            take_profit_levels=take_profits,
            trailing_stop=levels.trailing_stop,
            source=SignalSource.RULES,
        )

    def _is_sideways(self, snapshot: MarketSnapshot, slow: TimeframeIndicators) -> bool:
        bandwidth = [b for b in slow.bollinger_bandwidth if b is not None]
        if bandwidth and bandwidth[-1] < sum(bandwidth) / len(bandwidth):
            return True

        closes = [c.close for c in snapshot.candles.get(FAST_TIMEFRAME, [])[-3:]]
        if len(closes) == 3:
            spread = (max(closes) - min(closes)) / closes[-1]
            if spread <= self.sideways_tolerance:
                return True
        return False

    @staticmethod
    def _fast_conditions(fast: TimeframeIndicators, side: PositionSide) -> bool:
        price = fast.current_price
        rsi = _latest(fast.rsi)
        ema = _latest(fast.ema)
        middle = fast.bollinger[-1].middle if fast.bollinger else None
        if rsi is None or ema is None or middle is None:
            return False

        if side == PositionSide.LONG:
            return rsi >= 50 and _rising(fast.rsi) and price > ema and price >= middle
        return rsi <= 50 and _falling(fast.rsi) and price < ema and price <= middle

    @staticmethod
    def _slow_conditions(slow: TimeframeIndicators, side: PositionSide) -> bool:
        histogram = slow.macd.histogram[-2:]
        rsi = _latest(slow.rsi)
        bandwidth = slow.bollinger_bandwidth
        if not _complete(histogram) or len(histogram) < 2 or rsi is None:
            return False
        if not _complete(bandwidth) or len(bandwidth) < 2:
            return False
        if slow.avg_volume_20 is None or slow.volume < slow.avg_volume_20:
            return False

        bands_expanding = (
            bandwidth[-1] >= sum(bandwidth) / len(bandwidth) and bandwidth[-1] > bandwidth[-2]
        )
        if side == PositionSide.LONG:
            return histogram[-1] > 0 and histogram[-1] > histogram[-2] and rsi > 55 and bands_expanding
        return histogram[-1] < 0 and histogram[-1] < histogram[-2] and rsi < 45 and bands_expanding

    @staticmethod
    def _wait(reason: str) -> TradingSignal:
        return TradingSignal(action=SignalAction.WAIT, reason=reason, source=SignalSource.RULES)

    # =========================================================================
    # OPINION
    # =========================================================================

    async def get_opinion(self, snapshot: MarketSnapshot) -> str:
        """
        Free-text chart analysis from the opinion model.

        Raises:
            ExternalAPIError: no provider configured or the call failed
            LLMResponseError: the provider returned no text
        """
        if not self.llm_client.is_configured:
            raise ExternalAPIError(self.name, "No LLM providers configured")

        user_prompt = format_snapshot_prompt(
            snapshot.model_dump(mode="json"), max_candles=self.prompt_candles
        )
        try:
            response = await self.llm_client.generate(
                system_prompt=OPINION_SYSTEM_PROMPT,
                user_prompt=user_prompt,
                model_tier=ModelTier.OPINION,
            )
        except Exception as e:
            raise ExternalAPIError(self.name, f"Opinion request failed: {e}")

        opinion = (response.content or "").strip()
        if not opinion:
            raise LLMResponseError(self.name, "LLM returned an empty opinion")
        return opinion

    async def health_check(self) -> bool:
        """Check LLM API connectivity."""
        try:
            return await self.llm_client.health_check()
        except Exception:
            return False


# Singleton instance
_service_instance: Optional[SignalService] = None


def get_signal_service() -> SignalService:
    """Get or create signal service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = SignalService()
    return _service_instance
