"""
Indicator Engine

Stateless technical-indicator computations over OHLCV bar series.
"""

from indicator_engine.core.config import Settings, get_settings
from indicator_engine.schemas import (
    ADXParams,
    ATRParams,
    Bar,
    BollingerParams,
    DivergenceEvent,
    DivergenceResult,
    DivergenceType,
    IchimokuParams,
    IndicatorRequest,
    MACDParams,
    MovingAverageParams,
    PatternConfig,
    PatternMatch,
    PatternType,
    RSIParams,
    StochasticParams,
    VWAPParams,
)
from indicator_engine.services.base import ServiceError, ValidationError
from indicator_engine.services.indicators import IndicatorEngine, IndicatorSnapshot
from indicator_engine.services.indicators.calculations import OHLCVData

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "get_settings",
    "ADXParams",
    "ATRParams",
    "Bar",
    "BollingerParams",
    "DivergenceEvent",
    "DivergenceResult",
    "DivergenceType",
    "IchimokuParams",
    "IndicatorRequest",
    "MACDParams",
    "MovingAverageParams",
    "PatternConfig",
    "PatternMatch",
    "PatternType",
    "RSIParams",
    "StochasticParams",
    "VWAPParams",
    "ServiceError",
    "ValidationError",
    "IndicatorEngine",
    "IndicatorSnapshot",
    "OHLCVData",
]
