"""
Indicator Engine Service

CONTRACT:
    Input:  list[Bar] (or IndicatorRequest for a full snapshot)
    Output: aligned NumPy series, DivergenceResult, list[PatternMatch]

RESPONSIBILITIES:
    - Moving averages (SMA, EMA)
    - Momentum (RSI, MACD, Stochastic) and RSI divergences
    - Trend (ADX/DMI, Ichimoku)
    - Volatility (ATR, Bollinger Bands)
    - Volume (OBV, VWAP)

Pure NumPy, synchronous and stateless.
"""

from indicator_engine.services.indicators.interface import (
    IndicatorServiceInterface,
    IndicatorSnapshot,
)
from indicator_engine.services.indicators.service import IndicatorEngine

__all__ = [
    "IndicatorServiceInterface",
    "IndicatorSnapshot",
    "IndicatorEngine",
]
