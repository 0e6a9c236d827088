"""
Technical Indicator Calculations

Pure NumPy implementations of the indicators fed to the signal layer.
NO LLM INVOLVEMENT - All math is deterministic.

Conventions:
    - Input series are oldest-first and never modified.
    - Undefined slots (not enough history yet) are np.nan.
    - Output length equals input length; pass last_n to get only
      the trailing window.
    - Not enough data is a normal result (all np.nan), never an exception.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

ArrayLike = Union[np.ndarray, Sequence[float]]

# Neutral value for stochastic windows with no range (0-100 scale)
STOCH_NEUTRAL = 50.0
# RSI of a window with neither gains nor losses
RSI_NEUTRAL = 50.0


@dataclass(frozen=True)
class BollingerBand:
    """Bollinger band values at a single index."""

    middle: float
    upper: float
    lower: float


@dataclass(frozen=True)
class BollingerBands:
    """Aligned Bollinger band series."""

    upper: np.ndarray
    middle: np.ndarray
    lower: np.ndarray
    bandwidth: np.ndarray
    percent_b: np.ndarray

    def at(self, index: int) -> BollingerBand:
        return BollingerBand(
            middle=float(self.middle[index]),
            upper=float(self.upper[index]),
            lower=float(self.lower[index]),
        )

    def latest(self) -> Optional[BollingerBand]:
        """Band at the last defined index, None if no index is defined."""
        defined = np.flatnonzero(~np.isnan(self.middle))
        if len(defined) == 0:
            return None
        return self.at(int(defined[-1]))


@dataclass(frozen=True)
class MACDResult:
    """
    MACD series aligned to the price index.

    histogram[t] = macd_line[t] - signal_line[t - offset], where
    offset = signal_period - 1.
    """

    macd_line: np.ndarray
    signal_line: np.ndarray
    histogram: np.ndarray
    offset: int


@dataclass(frozen=True)
class StochRSIResult:
    """Stochastic RSI %K and %D series."""

    k: np.ndarray
    d: np.ndarray


# =============================================================================
# HELPERS
# =============================================================================


def _as_array(data: ArrayLike) -> np.ndarray:
    return np.array(data, dtype=float)


def _check_period(period: int, label: str = "period") -> None:
    if period < 1:
        raise ValueError(f"{label} must be >= 1, got {period}")


def _tail(arr: np.ndarray, last_n: Optional[int]) -> np.ndarray:
    """Trailing window of arr, or arr itself when last_n is None."""
    if last_n is None:
        return arr
    if last_n < 1:
        raise ValueError(f"last_n must be >= 1, got {last_n}")
    return arr[-last_n:]


def _first_valid_index(arr: np.ndarray) -> Optional[int]:
    valid = np.flatnonzero(~np.isnan(arr))
    return int(valid[0]) if len(valid) > 0 else None


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def sma(data: ArrayLike, period: int, last_n: Optional[int] = None) -> np.ndarray:
    """Simple Moving Average."""
    _check_period(period)
    data = _as_array(data)
    result = np.full(len(data), np.nan)

    if len(data) < period:
        return _tail(result, last_n)

    for i in range(period - 1, len(data)):
        result[i] = np.mean(data[i - period + 1 : i + 1])
    return _tail(result, last_n)


def ema(data: ArrayLike, period: int, last_n: Optional[int] = None) -> np.ndarray:
    """
    Exponential Moving Average seeded on the first value.

    ema[0] = data[0], no SMA warm-up. Leading NaNs are carried through
    and the recurrence starts at the first defined value.
    """
    _check_period(period)
    data = _as_array(data)
    result = np.full(len(data), np.nan)

    start = _first_valid_index(data)
    if start is None:
        return _tail(result, last_n)

    multiplier = 2 / (period + 1)
    result[start] = data[start]
    for i in range(start + 1, len(data)):
        result[i] = data[i] * multiplier + result[i - 1] * (1 - multiplier)

    return _tail(result, last_n)


# =============================================================================
# MOMENTUM INDICATORS
# =============================================================================


def rsi(closes: ArrayLike, period: int = 14, last_n: Optional[int] = None) -> np.ndarray:
    """
    Relative Strength Index (Wilder smoothing).

    The first defined value sits at index `period` and uses the plain
    average of the first `period` deltas.
    """
    _check_period(period)
    closes = _as_array(closes)
    result = np.full(len(closes), np.nan)

    if len(closes) < period + 1:
        return _tail(result, last_n)

    deltas = np.diff(closes)
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    avg_gain = np.sum(gains[:period]) / period
    avg_loss = np.sum(losses[:period]) / period
    result[period] = _rsi_value(avg_gain, avg_loss)

    for i in range(period, len(deltas)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        result[i + 1] = _rsi_value(avg_gain, avg_loss)

    return _tail(result, last_n)


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return RSI_NEUTRAL if avg_gain == 0 else 100.0
    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


def stoch_rsi(
    closes: ArrayLike,
    period: int = 14,
    k_period: int = 3,
    d_period: int = 3,
    last_n: Optional[int] = None,
) -> StochRSIResult:
    """
    Stochastic RSI on a 0-100 scale.

    %K is the raw stochastic of each RSI value within its trailing
    `period` RSI values, unsmoothed; `k_period` is accepted for the
    conventional signature and validated, but does not smooth %K.
    %D is the SMA of %K over `d_period`. Until `d_period` %K values
    exist, %D averages the ones available, so both series are defined
    from index 2*period - 1.
    """
    _check_period(period)
    _check_period(k_period, "k_period")
    _check_period(d_period, "d_period")
    closes = _as_array(closes)

    if len(closes) < period * 2:
        empty = np.full(len(closes), np.nan)
        return StochRSIResult(k=_tail(empty, last_n), d=_tail(empty.copy(), last_n))

    rsi_values = rsi(closes, period)
    k = np.full(len(closes), np.nan)

    # First RSI is at index `period`, so a full window ends at 2*period - 1
    start = 2 * period - 1
    for i in range(start, len(closes)):
        window = rsi_values[i - period + 1 : i + 1]
        lowest = np.min(window)
        highest = np.max(window)
        if highest == lowest:
            k[i] = STOCH_NEUTRAL
        else:
            k[i] = ((rsi_values[i] - lowest) / (highest - lowest)) * 100

    d = np.full(len(closes), np.nan)
    for i in range(start, len(closes)):
        d[i] = np.mean(k[max(start, i - d_period + 1) : i + 1])

    return StochRSIResult(k=_tail(k, last_n), d=_tail(d, last_n))


def macd(
    closes: ArrayLike,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
    last_n: Optional[int] = None,
) -> MACDResult:
    """
    MACD (Moving Average Convergence Divergence).

    The MACD line starts at index slow_period - 1 and the signal line is
    an EMA of it seeded on that first value. The histogram pairs the MACD
    line with the signal line `signal_period - 1` bars earlier.
    """
    _check_period(fast_period, "fast_period")
    _check_period(slow_period, "slow_period")
    _check_period(signal_period, "signal_period")
    closes = _as_array(closes)
    offset = signal_period - 1

    if len(closes) < slow_period + signal_period:
        empty = np.full(len(closes), np.nan)
        return MACDResult(
            macd_line=_tail(empty, last_n),
            signal_line=_tail(empty.copy(), last_n),
            histogram=_tail(empty.copy(), last_n),
            offset=offset,
        )

    fast_ema = ema(closes, fast_period)
    slow_ema = ema(closes, slow_period)

    macd_line = np.full(len(closes), np.nan)
    macd_line[slow_period - 1 :] = fast_ema[slow_period - 1 :] - slow_ema[slow_period - 1 :]

    signal_line = ema(macd_line, signal_period)

    histogram = np.full(len(closes), np.nan)
    start = slow_period - 1 + offset
    histogram[start:] = macd_line[start:] - signal_line[start - offset : len(closes) - offset]

    return MACDResult(
        macd_line=_tail(macd_line, last_n),
        signal_line=_tail(signal_line, last_n),
        histogram=_tail(histogram, last_n),
        offset=offset,
    )


# =============================================================================
# VOLATILITY INDICATORS
# =============================================================================


def bollinger_bands(
    closes: ArrayLike,
    period: int = 20,
    multiplier: float = 2.0,
    last_n: Optional[int] = None,
) -> BollingerBands:
    """
    Bollinger Bands with population standard deviation.

    bandwidth is (upper - lower) / middle; percent_b is the close's position
    inside the band and 0.5 when the band is flat.
    """
    _check_period(period)
    closes = _as_array(closes)
    middle = sma(closes, period)

    std = np.full(len(closes), np.nan)
    for i in range(period - 1, len(closes)):
        std[i] = np.std(closes[i - period + 1 : i + 1])

    upper = middle + (multiplier * std)
    lower = middle - (multiplier * std)

    with np.errstate(divide="ignore", invalid="ignore"):
        bandwidth = (upper - lower) / middle
        percent_b = (closes - lower) / (upper - lower)
    percent_b[(upper == lower) & ~np.isnan(middle)] = 0.5

    return BollingerBands(
        upper=_tail(upper, last_n),
        middle=_tail(middle, last_n),
        lower=_tail(lower, last_n),
        bandwidth=_tail(bandwidth, last_n),
        percent_b=_tail(percent_b, last_n),
    )


def true_range(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike) -> np.ndarray:
    """True Range per candle; index 0 has no previous close and is NaN."""
    highs = _as_array(highs)
    lows = _as_array(lows)
    closes = _as_array(closes)

    tr = np.full(len(closes), np.nan)
    for i in range(1, len(closes)):
        tr[i] = max(
            highs[i] - lows[i],
            abs(highs[i] - closes[i - 1]),
            abs(lows[i] - closes[i - 1]),
        )
    return tr


def atr(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, period: int = 14) -> float:
    """
    Average True Range over the oldest `period` candle pairs.

    Simple mean of TR_1..TR_period, no Wilder smoothing. Returns NaN when
    fewer than period + 1 candles are given.
    """
    _check_period(period)
    closes = _as_array(closes)
    if len(closes) < period + 1:
        return float("nan")

    tr = true_range(highs, lows, closes)
    return float(np.mean(tr[1 : period + 1]))


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_last_valid(arr: np.ndarray) -> Optional[float]:
    """Get last non-NaN value from array."""
    valid = arr[~np.isnan(arr)]
    return float(valid[-1]) if len(valid) > 0 else None


def to_optional_list(arr: np.ndarray) -> list[Optional[float]]:
    """Convert to a JSON-safe list with NaN mapped to None."""
    return [None if np.isnan(v) else float(v) for v in arr]
