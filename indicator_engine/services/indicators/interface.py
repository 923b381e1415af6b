"""
Indicator Engine Service Interface

Defines the contract for the indicator calculation layer.
"""

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Sequence, Union

import numpy as np

from indicator_engine.services.base import BaseService
from indicator_engine.schemas.indicators import (
    Crossover,
    DivergenceResult,
    IndicatorRequest,
    LatestValues,
    PatternMatch,
)
from indicator_engine.schemas.market import Bar
from indicator_engine.services.indicators.calculations import (
    ADXResult,
    BollingerResult,
    IchimokuResult,
    MACDResult,
    OHLCVData,
    StochasticResult,
)

BarsInput = Union[Sequence[Bar], OHLCVData]


@dataclass(frozen=True)
class IndicatorSnapshot:
    """
    Every indicator series for one bar series, plus a latest-value summary.

    All arrays have the same length as the input bars.
    """

    timestamps: np.ndarray
    sma: dict[int, np.ndarray]
    ema: dict[int, np.ndarray]
    rsi: np.ndarray
    divergences: DivergenceResult
    adx: ADXResult
    atr: np.ndarray
    macd: MACDResult
    macd_crossovers: list[Crossover]
    bollinger: BollingerResult
    stochastic: StochasticResult
    obv: np.ndarray
    vwap: np.ndarray
    ichimoku: IchimokuResult
    latest: LatestValues
    patterns: list[PatternMatch] = field(default_factory=list)


class IndicatorServiceInterface(BaseService[IndicatorRequest, IndicatorSnapshot]):
    """
    Indicator Engine Service Contract.

    INPUT: IndicatorRequest
        - bars: OHLCV bars ordered by time
        - optional parameter overrides per indicator

    OUTPUT: IndicatorSnapshot
        - one aligned series per indicator, divergence and pattern events
    """

    @property
    def name(self) -> str:
        return "IndicatorEngine"

    @abstractmethod
    def execute(self, input_data: IndicatorRequest) -> IndicatorSnapshot:
        """Calculate every indicator for the requested bars."""
        pass

    @abstractmethod
    def rsi(self, bars: BarsInput, params=None) -> np.ndarray:
        pass

    @abstractmethod
    def adx(self, bars: BarsInput, params=None) -> ADXResult:
        pass

    @abstractmethod
    def macd(self, bars: BarsInput, params=None) -> MACDResult:
        pass
