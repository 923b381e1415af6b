"""
Technical Indicator Calculations

Pure NumPy implementations of technical indicators.
Every series function returns an array of the same length as its input;
positions whose lookback window is not yet filled hold NaN.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from indicator_engine.schemas.indicators import (
    Crossover,
    CrossoverType,
    TrendDirection,
    TrendStrength,
)
from indicator_engine.schemas.market import Bar
from indicator_engine.services.base import ValidationError

ArrayLike = Union[np.ndarray, Sequence[float]]

SERVICE_NAME = "IndicatorEngine"


@dataclass(frozen=True)
class OHLCVData:
    """OHLCV data arrays for calculations."""

    timestamps: np.ndarray
    opens: np.ndarray
    highs: np.ndarray
    lows: np.ndarray
    closes: np.ndarray
    volumes: np.ndarray

    def __len__(self) -> int:
        return len(self.closes)

    @classmethod
    def from_bars(cls, bars: Sequence[Bar]) -> "OHLCVData":
        """Convert a bar list to column arrays."""
        if not bars:
            raise ValidationError(SERVICE_NAME, "Empty bar series")
        return cls(
            timestamps=np.array([b.time for b in bars], dtype=np.int64),
            opens=np.array([b.open for b in bars], dtype=float),
            highs=np.array([b.high for b in bars], dtype=float),
            lows=np.array([b.low for b in bars], dtype=float),
            closes=np.array([b.close for b in bars], dtype=float),
            volumes=np.array([b.volume for b in bars], dtype=float),
        )

    @classmethod
    def from_arrays(
        cls,
        highs: ArrayLike,
        lows: ArrayLike,
        closes: ArrayLike,
        volumes: Optional[ArrayLike] = None,
        timestamps: Optional[ArrayLike] = None,
        opens: Optional[ArrayLike] = None,
    ) -> "OHLCVData":
        """Build from raw columns; missing opens/volumes/timestamps are filled in."""
        closes = _as_array(closes)
        n = len(closes)
        if n == 0:
            raise ValidationError(SERVICE_NAME, "Empty bar series")
        columns = {
            "highs": _as_array(highs),
            "lows": _as_array(lows),
            "closes": closes,
            "opens": _as_array(opens) if opens is not None else closes.copy(),
            "volumes": _as_array(volumes) if volumes is not None else np.zeros(n),
        }
        check_same_length(*columns.values())
        if timestamps is None:
            stamps = np.arange(n, dtype=np.int64)
        else:
            stamps = np.asarray(timestamps, dtype=np.int64)
            check_same_length(stamps, closes)
        return cls(timestamps=stamps, **columns)


# =============================================================================
# VALIDATION HELPERS
# =============================================================================


def _as_array(data: ArrayLike) -> np.ndarray:
    return np.asarray(data, dtype=float)


def check_period(period: int, name: str = "period") -> None:
    if period < 1:
        raise ValidationError(SERVICE_NAME, f"{name} must be >= 1, got {period}")


def check_same_length(*arrays: np.ndarray) -> None:
    lengths = {len(a) for a in arrays}
    if len(lengths) > 1:
        raise ValidationError(
            SERVICE_NAME,
            "Input arrays have different lengths",
            details={"lengths": sorted(lengths)},
        )


def check_not_empty(data: np.ndarray) -> None:
    if len(data) == 0:
        raise ValidationError(SERVICE_NAME, "Empty input series")


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def sma(data: ArrayLike, period: int) -> np.ndarray:
    """Simple Moving Average."""
    check_period(period)
    data = _as_array(data)
    check_not_empty(data)
    result = np.full(len(data), np.nan)
    if len(data) < period:
        return result

    for i in range(period - 1, len(data)):
        result[i] = np.mean(data[i - period + 1 : i + 1])
    return result


def ema(data: ArrayLike, period: int) -> np.ndarray:
    """
    Exponential Moving Average.

    Seeded at index period-1 with the plain mean of the first `period`
    values, so ema[period-1] == sma[period-1].
    """
    check_period(period)
    data = _as_array(data)
    check_not_empty(data)
    result = np.full(len(data), np.nan)
    if len(data) < period:
        return result

    multiplier = 2 / (period + 1)

    # Start with SMA
    result[period - 1] = np.mean(data[:period])

    for i in range(period, len(data)):
        result[i] = data[i] * multiplier + result[i - 1] * (1 - multiplier)

    return result


# =============================================================================
# MOMENTUM INDICATORS
# =============================================================================


def _rsi_value(avg_gain: float, avg_loss: float, neutral: float) -> float:
    if avg_loss == 0:
        # Flat window has no direction; pure gains saturate.
        return neutral if avg_gain == 0 else 100.0
    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


def rsi(closes: ArrayLike, period: int = 14, fallback: float = 50.0) -> np.ndarray:
    """
    Relative Strength Index (Wilder).

    Series no longer than `period` return a constant `fallback` series.
    A window with neither gains nor losses also yields `fallback`.
    """
    check_period(period)
    closes = _as_array(closes)
    check_not_empty(closes)
    if len(closes) <= period:
        return np.full(len(closes), fallback)

    deltas = np.diff(closes)
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    # First average is a plain mean
    avg_gain = np.mean(gains[:period])
    avg_loss = np.mean(losses[:period])

    result = np.full(len(closes), np.nan)
    result[period] = _rsi_value(avg_gain, avg_loss, fallback)

    # Wilder smoothing
    for i in range(period, len(deltas)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        result[i + 1] = _rsi_value(avg_gain, avg_loss, fallback)

    return result


@dataclass(frozen=True)
class MACDResult:
    macd: np.ndarray
    signal: np.ndarray
    histogram: np.ndarray


def macd(
    closes: ArrayLike,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> MACDResult:
    """
    MACD (Moving Average Convergence Divergence).

    The signal line is the EMA of the MACD line starting at slow_period-1,
    so it becomes defined at slow_period + signal_period - 2.
    """
    for name, value in (
        ("fast_period", fast_period),
        ("slow_period", slow_period),
        ("signal_period", signal_period),
    ):
        check_period(value, name)
    if fast_period >= slow_period:
        raise ValidationError(
            SERVICE_NAME,
            f"fast_period ({fast_period}) must be below slow_period ({slow_period})",
        )

    closes = _as_array(closes)
    check_not_empty(closes)
    fast_ema = ema(closes, fast_period)
    slow_ema = ema(closes, slow_period)

    macd_line = np.full(len(closes), np.nan)
    macd_line[slow_period - 1 :] = fast_ema[slow_period - 1 :] - slow_ema[slow_period - 1 :]

    signal_line = np.full(len(closes), np.nan)
    if len(closes) >= slow_period:
        signal_line[slow_period - 1 :] = ema(macd_line[slow_period - 1 :], signal_period)

    histogram = macd_line - signal_line

    return MACDResult(macd=macd_line, signal=signal_line, histogram=histogram)


@dataclass(frozen=True)
class StochasticResult:
    k: np.ndarray
    d: np.ndarray


def _highest(values: np.ndarray, period: int) -> np.ndarray:
    result = np.full(len(values), np.nan)
    for i in range(period - 1, len(values)):
        result[i] = np.max(values[i - period + 1 : i + 1])
    return result


def _lowest(values: np.ndarray, period: int) -> np.ndarray:
    result = np.full(len(values), np.nan)
    for i in range(period - 1, len(values)):
        result[i] = np.min(values[i - period + 1 : i + 1])
    return result


def stochastic(
    highs: ArrayLike,
    lows: ArrayLike,
    closes: ArrayLike,
    k_period: int = 14,
    d_period: int = 3,
    flat_value: float = 50.0,
) -> StochasticResult:
    """
    Stochastic Oscillator.

    %K over a zero-range window is `flat_value`; %D is the SMA of %K.
    """
    check_period(k_period, "k_period")
    check_period(d_period, "d_period")
    highs, lows, closes = _as_array(highs), _as_array(lows), _as_array(closes)
    check_same_length(highs, lows, closes)
    check_not_empty(closes)

    k = np.full(len(closes), np.nan)
    if len(closes) < k_period:
        return StochasticResult(k=k, d=np.full(len(closes), np.nan))

    highest_high = _highest(highs, k_period)
    lowest_low = _lowest(lows, k_period)

    for i in range(k_period - 1, len(closes)):
        price_range = highest_high[i] - lowest_low[i]
        if price_range == 0:
            k[i] = flat_value
        else:
            k[i] = ((closes[i] - lowest_low[i]) / price_range) * 100

    d = sma(k, d_period)

    return StochasticResult(k=k, d=d)


# =============================================================================
# VOLATILITY INDICATORS
# =============================================================================


def true_range(highs: np.ndarray, lows: np.ndarray, closes: np.ndarray) -> np.ndarray:
    """True Range; index 0 has no previous close and is high - low."""
    tr = np.zeros(len(closes))
    if len(closes) == 0:
        return tr
    tr[0] = highs[0] - lows[0]
    for i in range(1, len(closes)):
        tr[i] = max(
            highs[i] - lows[i],
            abs(highs[i] - closes[i - 1]),
            abs(lows[i] - closes[i - 1]),
        )
    return tr


def atr(
    highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, period: int = 14
) -> np.ndarray:
    """Average True Range (Wilder), first defined at index `period`."""
    check_period(period)
    highs, lows, closes = _as_array(highs), _as_array(lows), _as_array(closes)
    check_same_length(highs, lows, closes)
    check_not_empty(closes)

    result = np.full(len(closes), np.nan)
    if len(closes) <= period:
        return result

    tr = true_range(highs, lows, closes)
    result[period] = np.mean(tr[1 : period + 1])
    for i in range(period + 1, len(closes)):
        result[i] = (result[i - 1] * (period - 1) + tr[i]) / period

    return result


@dataclass(frozen=True)
class BollingerResult:
    upper: np.ndarray
    middle: np.ndarray
    lower: np.ndarray
    bandwidth: np.ndarray
    percent_b: np.ndarray


def bollinger_bands(
    closes: ArrayLike, period: int = 20, multiplier: float = 2.0
) -> BollingerResult:
    """
    Bollinger Bands with population standard deviation.

    When the bands collapse (zero deviation) %B is 0.5.
    """
    check_period(period)
    closes = _as_array(closes)
    middle = sma(closes, period)

    std = np.full(len(closes), np.nan)
    for i in range(period - 1, len(closes)):
        std[i] = np.std(closes[i - period + 1 : i + 1])

    upper = middle + (multiplier * std)
    lower = middle - (multiplier * std)
    width = upper - lower

    with np.errstate(divide="ignore", invalid="ignore"):
        bandwidth = width / middle
        percent_b = (closes - lower) / width
    percent_b[width == 0] = 0.5

    return BollingerResult(
        upper=upper, middle=middle, lower=lower, bandwidth=bandwidth, percent_b=percent_b
    )


# =============================================================================
# VOLUME INDICATORS
# =============================================================================


def vwap(
    highs: ArrayLike,
    lows: ArrayLike,
    closes: ArrayLike,
    volumes: ArrayLike,
    period: int = 0,
) -> np.ndarray:
    """
    Volume Weighted Average Price.

    period == 0: cumulative from the first bar.
    period > 0: rolling window, NaN until the window is full.
    Where the accumulated volume is zero the typical price is returned.
    """
    if period < 0:
        raise ValidationError(SERVICE_NAME, f"period must be >= 0, got {period}")
    highs, lows, closes, volumes = (
        _as_array(highs),
        _as_array(lows),
        _as_array(closes),
        _as_array(volumes),
    )
    check_same_length(highs, lows, closes, volumes)
    check_not_empty(closes)

    typical_price = (highs + lows + closes) / 3
    tpv = typical_price * volumes

    if period == 0:
        cumulative_tpv = np.cumsum(tpv)
        cumulative_volume = np.cumsum(volumes)
        with np.errstate(divide="ignore", invalid="ignore"):
            result = cumulative_tpv / cumulative_volume
        no_volume = cumulative_volume == 0
        result[no_volume] = typical_price[no_volume]
        return result

    result = np.full(len(closes), np.nan)
    if len(closes) < period:
        return result

    window_tpv = np.sum(tpv[:period])
    window_volume = np.sum(volumes[:period])
    for i in range(period - 1, len(closes)):
        if i >= period:
            # Add newest, drop oldest
            window_tpv += tpv[i] - tpv[i - period]
            window_volume += volumes[i] - volumes[i - period]
        result[i] = window_tpv / window_volume if window_volume > 0 else typical_price[i]

    return result


def obv(closes: ArrayLike, volumes: ArrayLike) -> np.ndarray:
    """On-Balance Volume, starting at 0."""
    closes, volumes = _as_array(closes), _as_array(volumes)
    check_same_length(closes, volumes)
    check_not_empty(closes)

    result = np.zeros(len(closes))
    for i in range(1, len(closes)):
        if closes[i] > closes[i - 1]:
            result[i] = result[i - 1] + volumes[i]
        elif closes[i] < closes[i - 1]:
            result[i] = result[i - 1] - volumes[i]
        else:
            result[i] = result[i - 1]

    return result


# =============================================================================
# TREND INDICATORS
# =============================================================================


@dataclass(frozen=True)
class ADXResult:
    adx: np.ndarray
    plus_di: np.ndarray
    minus_di: np.ndarray


def _ratio(numerator: float, denominator: float) -> float:
    return 100 * numerator / denominator if denominator != 0 else 0.0


def adx(
    highs: ArrayLike,
    lows: ArrayLike,
    closes: ArrayLike,
    period: int = 14,
    fallback: float = 25.0,
) -> ADXResult:
    """
    Average Directional Index with +DI / -DI.

    Smoothed TR and DM are seeded with sums over bars 1..period and updated
    with Wilder's s - s/period + x. The seed +DI/-DI/DX land at index
    period+1 and each later update one index further. ADX is NaN until
    `period` DX values exist (index 2*period), where it is their plain mean,
    then Wilder-smoothed. Series of at most period+1 bars return a constant
    `fallback`.
    """
    check_period(period)
    highs, lows, closes = _as_array(highs), _as_array(lows), _as_array(closes)
    check_same_length(highs, lows, closes)
    check_not_empty(closes)

    n = len(closes)
    if n <= period + 1:
        return ADXResult(
            adx=np.full(n, fallback),
            plus_di=np.full(n, fallback),
            minus_di=np.full(n, fallback),
        )

    tr = true_range(highs, lows, closes)
    plus_dm = np.zeros(n)
    minus_dm = np.zeros(n)

    for i in range(1, n):
        up_move = highs[i] - highs[i - 1]
        down_move = lows[i - 1] - lows[i]

        if up_move > down_move and up_move > 0:
            plus_dm[i] = up_move
        if down_move > up_move and down_move > 0:
            minus_dm[i] = down_move

    smoothed_tr = np.sum(tr[1 : period + 1])
    smoothed_plus_dm = np.sum(plus_dm[1 : period + 1])
    smoothed_minus_dm = np.sum(minus_dm[1 : period + 1])

    adx_result = np.full(n, np.nan)
    plus_di = np.full(n, np.nan)
    minus_di = np.full(n, np.nan)
    dx_values = np.full(n, np.nan)

    # DI from bars 1..i is written at index i + 1
    for i in range(period, n - 1):
        if i > period:
            smoothed_tr = smoothed_tr - smoothed_tr / period + tr[i]
            smoothed_plus_dm = smoothed_plus_dm - smoothed_plus_dm / period + plus_dm[i]
            smoothed_minus_dm = smoothed_minus_dm - smoothed_minus_dm / period + minus_dm[i]

        plus = _ratio(smoothed_plus_dm, smoothed_tr)
        minus = _ratio(smoothed_minus_dm, smoothed_tr)

        plus_di[i + 1] = plus
        minus_di[i + 1] = minus
        dx_values[i + 1] = _ratio(abs(plus - minus), plus + minus)

    # ADX seed: plain mean of the first `period` DX values
    seed_index = 2 * period
    if seed_index < n:
        adx_result[seed_index] = np.mean(dx_values[period + 1 : seed_index + 1])
        for i in range(seed_index + 1, n):
            adx_result[i] = (adx_result[i - 1] * (period - 1) + dx_values[i]) / period

    return ADXResult(adx=adx_result, plus_di=plus_di, minus_di=minus_di)


@dataclass(frozen=True)
class IchimokuResult:
    tenkan_sen: np.ndarray
    kijun_sen: np.ndarray
    senkou_span_a: np.ndarray
    senkou_span_b: np.ndarray
    chikou_span: np.ndarray


def _midpoint(highs: np.ndarray, lows: np.ndarray, period: int) -> np.ndarray:
    return (_highest(highs, period) + _lowest(lows, period)) / 2


def ichimoku(
    highs: ArrayLike,
    lows: ArrayLike,
    closes: ArrayLike,
    tenkan_period: int = 9,
    kijun_period: int = 26,
    senkou_b_period: int = 52,
    displacement: int = 26,
) -> IchimokuResult:
    """
    Ichimoku Cloud components.

    Spans are returned unshifted, aligned to the bar they are computed on;
    the Chikou span is close[i - displacement].
    """
    check_period(tenkan_period, "tenkan_period")
    check_period(kijun_period, "kijun_period")
    check_period(senkou_b_period, "senkou_b_period")
    if displacement < 0:
        raise ValidationError(SERVICE_NAME, f"displacement must be >= 0, got {displacement}")
    highs, lows, closes = _as_array(highs), _as_array(lows), _as_array(closes)
    check_same_length(highs, lows, closes)
    check_not_empty(closes)

    tenkan = _midpoint(highs, lows, tenkan_period)
    kijun = _midpoint(highs, lows, kijun_period)
    senkou_a = (tenkan + kijun) / 2
    senkou_b = _midpoint(highs, lows, senkou_b_period)

    chikou = np.full(len(closes), np.nan)
    if displacement < len(closes):
        chikou[displacement:] = closes[: len(closes) - displacement]

    return IchimokuResult(
        tenkan_sen=tenkan,
        kijun_sen=kijun,
        senkou_span_a=senkou_a,
        senkou_span_b=senkou_b,
        chikou_span=chikou,
    )


def classify_trend_strength(adx_value: float) -> TrendStrength:
    """Bucket an ADX reading."""
    if adx_value < 20:
        return TrendStrength.NO_TREND
    elif adx_value < 25:
        return TrendStrength.WEAK
    elif adx_value < 30:
        return TrendStrength.MODERATE
    elif adx_value < 50:
        return TrendStrength.STRONG
    return TrendStrength.VERY_STRONG


def trend_direction(plus_di: Optional[float], minus_di: Optional[float]) -> TrendDirection:
    if plus_di is None or minus_di is None or plus_di == minus_di:
        return TrendDirection.SIDEWAYS
    return TrendDirection.BULLISH if plus_di > minus_di else TrendDirection.BEARISH


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_last_valid(arr: np.ndarray) -> Optional[float]:
    """Get last non-NaN value from array."""
    valid = arr[~np.isnan(arr)]
    return float(valid[-1]) if len(valid) > 0 else None


def is_local_min(values: np.ndarray, i: int, window: int = 2) -> bool:
    """values[i] strictly below `window` neighbours on each side."""
    if i - window < 0 or i + window >= len(values):
        return False
    for offset in range(1, window + 1):
        if not (values[i] < values[i - offset] and values[i] < values[i + offset]):
            return False
    return True


def is_local_max(values: np.ndarray, i: int, window: int = 2) -> bool:
    """values[i] strictly above `window` neighbours on each side."""
    if i - window < 0 or i + window >= len(values):
        return False
    for offset in range(1, window + 1):
        if not (values[i] > values[i - offset] and values[i] > values[i + offset]):
            return False
    return True


def macd_crossovers(
    timestamps: ArrayLike, macd_line: np.ndarray, signal_line: np.ndarray
) -> list[Crossover]:
    """Bars where the MACD line crosses its signal line."""
    check_same_length(np.asarray(timestamps), macd_line, signal_line)
    diff = macd_line - signal_line
    crossovers = []

    for i in range(1, len(diff)):
        prev, curr = diff[i - 1], diff[i]
        if np.isnan(prev) or np.isnan(curr):
            continue
        if prev <= 0 < curr:
            crossovers.append(Crossover(time=int(timestamps[i]), type=CrossoverType.BULLISH))
        elif prev >= 0 > curr:
            crossovers.append(Crossover(time=int(timestamps[i]), type=CrossoverType.BEARISH))

    return crossovers
