"""
Indicator Engine Schema Contracts

Input bars, parameter models and structured outputs shared by all services.
"""

from indicator_engine.schemas.market import Bar
from indicator_engine.schemas.indicators import (
    ADXParams,
    ATRParams,
    BollingerParams,
    Crossover,
    CrossoverType,
    DivergenceEvent,
    DivergenceResult,
    DivergenceType,
    IchimokuParams,
    IndicatorRequest,
    LatestValues,
    MACDParams,
    MovingAverageParams,
    PatternConfig,
    PatternMatch,
    PatternType,
    RSIParams,
    RSIZone,
    StochasticParams,
    TrendDirection,
    TrendStrength,
    VWAPParams,
)

__all__ = [
    "Bar",
    "ADXParams",
    "ATRParams",
    "BollingerParams",
    "Crossover",
    "CrossoverType",
    "DivergenceEvent",
    "DivergenceResult",
    "DivergenceType",
    "IchimokuParams",
    "IndicatorRequest",
    "LatestValues",
    "MACDParams",
    "MovingAverageParams",
    "PatternConfig",
    "PatternMatch",
    "PatternType",
    "RSIParams",
    "RSIZone",
    "StochasticParams",
    "TrendDirection",
    "TrendStrength",
    "VWAPParams",
]
