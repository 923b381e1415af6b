"""
Indicator Engine Contracts

Input:  list[Bar] + per-indicator parameter models
Output: numpy series (see services.indicators.calculations) and the
        structured events defined here (divergences, patterns, crossovers).

All parameter models carry the conventional defaults; the engine substitutes
values from Settings when the caller passes no parameters.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

from indicator_engine.core.config import Settings
from indicator_engine.schemas.market import Bar


# =============================================================================
# ENUMS
# =============================================================================


class DivergenceType(str, Enum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"


class CrossoverType(str, Enum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"


class PatternType(str, Enum):
    DOUBLE_TOP = "Double Top"
    DOUBLE_BOTTOM = "Double Bottom"
    HEAD_AND_SHOULDERS = "Head and Shoulders"


class TrendDirection(str, Enum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    SIDEWAYS = "SIDEWAYS"


class TrendStrength(str, Enum):
    NO_TREND = "NO_TREND"
    WEAK = "WEAK"
    MODERATE = "MODERATE"
    STRONG = "STRONG"
    VERY_STRONG = "VERY_STRONG"


class RSIZone(str, Enum):
    OVERBOUGHT = "OVERBOUGHT"
    OVERSOLD = "OVERSOLD"
    NEUTRAL = "NEUTRAL"


# =============================================================================
# INPUT: Parameter models
# =============================================================================


class _Params(BaseModel):
    model_config = ConfigDict(frozen=True)


class MovingAverageParams(_Params):
    period: int = Field(..., ge=1)


class RSIParams(_Params):
    period: int = Field(default=14, ge=1)


class ADXParams(_Params):
    period: int = Field(default=14, ge=1)


class ATRParams(_Params):
    period: int = Field(default=14, ge=1)


class MACDParams(_Params):
    fast_period: int = Field(default=12, ge=1)
    slow_period: int = Field(default=26, ge=1)
    signal_period: int = Field(default=9, ge=1)

    @model_validator(mode="after")
    def _fast_below_slow(self) -> "MACDParams":
        if self.fast_period >= self.slow_period:
            raise ValueError(
                f"fast_period ({self.fast_period}) must be below slow_period ({self.slow_period})"
            )
        return self


class BollingerParams(_Params):
    period: int = Field(default=20, ge=1)
    multiplier: float = Field(default=2.0, ge=0)


class StochasticParams(_Params):
    k_period: int = Field(default=14, ge=1)
    d_period: int = Field(default=3, ge=1)


class VWAPParams(_Params):
    period: int = Field(default=0, ge=0, description="0 = cumulative, >0 = rolling window")


class IchimokuParams(_Params):
    tenkan_period: int = Field(default=9, ge=1)
    kijun_period: int = Field(default=26, ge=1)
    senkou_b_period: int = Field(default=52, ge=1)
    displacement: int = Field(default=26, ge=0)


class PatternConfig(_Params):
    """Thresholds for the chart-pattern heuristics."""

    tolerance: float = Field(default=0.03, ge=0, description="Max relative gap between matching extrema")
    double_lookback: int = Field(default=30, ge=1)
    head_shoulders_lookback: int = Field(default=40, ge=1)
    min_offset: int = Field(default=5, ge=1, description="Most recent bars excluded from the extrema scan")
    min_separation: int = Field(default=5, ge=1)
    extremum_window: int = Field(default=2, ge=1)
    double_significance: float = Field(default=80.0, ge=0, le=100)
    head_shoulders_significance: float = Field(default=85.0, ge=0, le=100)

    @classmethod
    def from_settings(cls, settings: Settings) -> "PatternConfig":
        return cls(
            tolerance=settings.pattern_tolerance,
            double_lookback=settings.double_pattern_lookback,
            head_shoulders_lookback=settings.head_shoulders_lookback,
            min_offset=settings.pattern_min_offset,
            min_separation=settings.pattern_min_separation,
            extremum_window=settings.extremum_window,
            double_significance=settings.double_pattern_significance,
            head_shoulders_significance=settings.head_shoulders_significance,
        )


class IndicatorRequest(BaseModel):
    """
    Request for a full indicator snapshot.

    Any parameter left as None falls back to the engine's Settings.
    """

    bars: list[Bar] = Field(..., min_length=1)
    sma_periods: list[int] = Field(default=[20, 50, 100, 200])
    ema_periods: list[int] = Field(default=[9, 20, 50, 100, 200])
    rsi: Optional[RSIParams] = None
    adx: Optional[ADXParams] = None
    atr: Optional[ATRParams] = None
    macd: Optional[MACDParams] = None
    bollinger: Optional[BollingerParams] = None
    stochastic: Optional[StochasticParams] = None
    vwap: Optional[VWAPParams] = None
    ichimoku: Optional[IchimokuParams] = None
    patterns: Optional[PatternConfig] = None
    detect_patterns: bool = True


# =============================================================================
# OUTPUT: Events
# =============================================================================


class DivergenceEvent(BaseModel):
    """Price/oscillator disagreement at the second of two extrema."""

    model_config = ConfigDict(frozen=True)

    type: DivergenceType
    time: int
    price: float
    indicator_value: float


class DivergenceResult(BaseModel):
    bullish: list[DivergenceEvent] = Field(default_factory=list)
    bearish: list[DivergenceEvent] = Field(default_factory=list)


class PatternMatch(BaseModel):
    """Confirmed chart formation."""

    model_config = ConfigDict(frozen=True)

    type: PatternType
    start_index: int = Field(..., ge=0)
    end_index: int = Field(..., ge=0)
    significance: float = Field(..., ge=0, le=100)


class Crossover(BaseModel):
    """MACD line crossing its signal line."""

    model_config = ConfigDict(frozen=True)

    time: int
    type: CrossoverType


class LatestValues(BaseModel):
    """Last defined value of each headline indicator."""

    close: float
    rsi: Optional[float] = Field(default=None, ge=0, le=100)
    rsi_zone: RSIZone = RSIZone.NEUTRAL
    adx: Optional[float] = Field(default=None, ge=0, le=100)
    plus_di: Optional[float] = None
    minus_di: Optional[float] = None
    trend_strength: Optional[TrendStrength] = None
    trend_direction: TrendDirection = TrendDirection.SIDEWAYS
    macd_line: Optional[float] = None
    macd_signal: Optional[float] = None
    macd_histogram: Optional[float] = None
    bollinger_upper: Optional[float] = None
    bollinger_middle: Optional[float] = None
    bollinger_lower: Optional[float] = None
    bollinger_bandwidth: Optional[float] = None
    bollinger_percent_b: Optional[float] = None
    stochastic_k: Optional[float] = None
    stochastic_d: Optional[float] = None
    atr: Optional[float] = None
    obv: float = 0.0
    vwap: Optional[float] = None
