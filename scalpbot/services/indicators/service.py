"""
Indicator Engine Service Implementation

Builds per-timeframe indicator snapshots from OHLCV candles.
NO LLM INVOLVEMENT - Pure Python/NumPy calculations.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Optional, Sequence

import numpy as np

from scalpbot.core.config import settings
from scalpbot.schemas.market import OHLCV, PositionInfo, SnapshotRequest, Timeframe
from scalpbot.schemas.indicators import (
    BollingerBandData,
    IndicatorParams,
    MACDData,
    MarketSnapshot,
    StochRSIData,
    TimeframeIndicators,
)
from scalpbot.services.base import ValidationError
from scalpbot.services.indicators.interface import IndicatorServiceInterface
from scalpbot.services.indicators.calculations import (
    atr,
    bollinger_bands,
    ema,
    macd,
    rsi,
    sma,
    stoch_rsi,
    to_optional_list,
)

logger = logging.getLogger(__name__)

VOLUME_AVERAGE_PERIOD = 20


def _ohlcv_to_arrays(candles: Sequence[OHLCV]) -> tuple:
    """Convert OHLCV list to numpy arrays."""
    highs = np.array([c.high for c in candles])
    lows = np.array([c.low for c in candles])
    closes = np.array([c.close for c in candles])
    volumes = np.array([c.volume for c in candles])
    return highs, lows, closes, volumes


def _optional(value: float) -> Optional[float]:
    return None if math.isnan(value) else float(value)


class IndicatorService(IndicatorServiceInterface):
    """
    Indicator Engine Service.

    Every call recomputes from the candles it is given; nothing is cached.
    """

    def __init__(self, params: Optional[IndicatorParams] = None, atr_timeframe: Optional[str] = None):
        self.params = params or IndicatorParams.from_settings(settings)
        self.atr_timeframe = Timeframe(atr_timeframe or settings.atr_timeframe)

    async def validate_input(self, input_data: SnapshotRequest) -> SnapshotRequest:
        """Reject empty timeframes and reorder candles oldest-first."""
        for timeframe, candles in input_data.candles.items():
            if not candles:
                raise ValidationError(
                    self.name,
                    f"No candles for {input_data.symbol} {timeframe.value}",
                    {"symbol": input_data.symbol, "timeframe": timeframe.value},
                )
        return input_data.model_copy(
            update={
                "candles": {
                    timeframe: OHLCV.sort_candles(candles)
                    for timeframe, candles in input_data.candles.items()
                }
            }
        )

    async def execute(self, input_data: SnapshotRequest) -> MarketSnapshot:
        """Build the snapshot for one symbol."""
        request = await self.validate_input(input_data)
        return self.build_snapshot(request.symbol, request.candles, request.position)

    def build_snapshot(
        self,
        symbol: str,
        candles_by_timeframe: dict[Timeframe, list[OHLCV]],
        position: Optional[PositionInfo] = None,
    ) -> MarketSnapshot:
        """Calculate every timeframe and the ATR of the ATR timeframe."""
        indicators = {}
        for timeframe, candles in candles_by_timeframe.items():
            indicators[timeframe.value] = self.calculate_timeframe(candles)

        atr_value = None
        atr_candles = candles_by_timeframe.get(self.atr_timeframe)
        if atr_candles:
            highs, lows, closes, _ = _ohlcv_to_arrays(atr_candles)
            atr_value = _optional(atr(highs, lows, closes, self.params.atr_period))
        if atr_value is None:
            logger.warning(
                f"ATR unavailable for {symbol}: need {self.params.atr_period + 1} "
                f"{self.atr_timeframe.value} candles"
            )

        return MarketSnapshot(
            symbol=symbol,
            time=datetime.now(timezone.utc),
            candles={tf.value: candles for tf, candles in candles_by_timeframe.items()},
            indicators=indicators,
            atr=atr_value,
            position=position,
        )

    def calculate_timeframe(
        self,
        candles: Sequence[OHLCV],
        params: Optional[IndicatorParams] = None,
    ) -> TimeframeIndicators:
        """Calculate all indicators on one timeframe's closes."""
        if not candles:
            raise ValidationError(self.name, "No candles to calculate indicators on")

        p = params or self.params
        window = p.window
        _, _, closes, volumes = _ohlcv_to_arrays(candles)

        stoch = stoch_rsi(closes, p.rsi_period, p.stoch_k_period, p.stoch_d_period, last_n=window)
        bands = bollinger_bands(closes, p.bb_period, p.bb_multiplier, last_n=window)
        macd_result = macd(closes, p.macd_fast, p.macd_slow, p.macd_signal, last_n=window)

        bollinger = [
            BollingerBandData(
                middle=_optional(bands.middle[i]),
                upper=_optional(bands.upper[i]),
                lower=_optional(bands.lower[i]),
            )
            for i in range(len(bands.middle))
        ]

        avg_volume = (
            float(np.mean(volumes[-VOLUME_AVERAGE_PERIOD:]))
            if len(volumes) >= VOLUME_AVERAGE_PERIOD
            else None
        )

        return TimeframeIndicators(
            ma=to_optional_list(sma(closes, p.ma_period, last_n=window)),
            rsi=to_optional_list(rsi(closes, p.rsi_period, last_n=window)),
            stoch_rsi=StochRSIData(k=to_optional_list(stoch.k), d=to_optional_list(stoch.d)),
            bollinger=bollinger,
            bollinger_bandwidth=to_optional_list(bands.bandwidth),
            bollinger_percent_b=to_optional_list(bands.percent_b),
            macd=MACDData(
                value=to_optional_list(macd_result.macd_line),
                signal=to_optional_list(macd_result.signal_line),
                histogram=to_optional_list(macd_result.histogram),
            ),
            ema=to_optional_list(ema(closes, p.ema_period, last_n=window)),
            current_price=float(closes[-1]),
            volume=float(volumes[-1]),
            avg_volume_20=avg_volume,
        )


# Singleton instance
_service_instance: Optional[IndicatorService] = None


def get_indicator_service() -> IndicatorService:
    """Get or create indicator service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = IndicatorService()
    return _service_instance
