"""
Indicator Engine Service Implementation

Calculates technical indicators from OHLCV bars.
The engine holds configuration only; every call is a pure function of its
bars and parameters, so one instance can be shared between threads.
"""

import functools
import logging
from typing import Optional, Union

import numpy as np

from indicator_engine.core.config import Settings, get_settings
from indicator_engine.core.logging import configure_logging
from indicator_engine.schemas.indicators import (
    ADXParams,
    ATRParams,
    BollingerParams,
    DivergenceResult,
    IchimokuParams,
    IndicatorRequest,
    LatestValues,
    MACDParams,
    MovingAverageParams,
    PatternConfig,
    PatternMatch,
    RSIParams,
    RSIZone,
    StochasticParams,
    VWAPParams,
)
from indicator_engine.services.base import ValidationError
from indicator_engine.services.indicators.calculations import (
    ADXResult,
    BollingerResult,
    IchimokuResult,
    MACDResult,
    OHLCVData,
    StochasticResult,
    adx,
    atr,
    bollinger_bands,
    classify_trend_strength,
    ema,
    get_last_valid,
    ichimoku,
    macd,
    macd_crossovers,
    obv,
    rsi,
    sma,
    stochastic,
    trend_direction,
    vwap,
)
from indicator_engine.services.indicators.divergence import find_divergences
from indicator_engine.services.indicators.interface import (
    BarsInput,
    IndicatorServiceInterface,
    IndicatorSnapshot,
)
from indicator_engine.services.patterns.detection import detect_patterns

logger = logging.getLogger(__name__)


def _period(period: Union[int, MovingAverageParams]) -> int:
    return period.period if isinstance(period, MovingAverageParams) else period


def _log_rejection(method):
    """Log a ValidationError once at WARNING before it reaches the caller."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except ValidationError as e:
            if not e.logged:
                logger.warning(f"{self.name}.{method.__name__} rejected input: {e}")
                e.logged = True
            raise

    return wrapper


class IndicatorEngine(IndicatorServiceInterface):
    """
    Indicator Engine Service.

    Every method accepts a list of Bar or a prepared OHLCVData and returns
    series aligned to the input (NaN where the lookback is not yet filled).
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        configure_logging(self.settings.log_level)

    @property
    def name(self) -> str:
        return "IndicatorEngine"

    # -------------------------------------------------------------------------
    # Input handling
    # -------------------------------------------------------------------------

    def _to_data(self, bars: BarsInput) -> OHLCVData:
        if isinstance(bars, OHLCVData):
            return bars
        return OHLCVData.from_bars(bars)

    def validate_input(self, input_data: IndicatorRequest) -> IndicatorRequest:
        if not input_data.bars:
            raise ValidationError(self.name, "Empty bar series")
        return input_data

    # -------------------------------------------------------------------------
    # Moving averages
    # -------------------------------------------------------------------------

    @_log_rejection
    def sma(
        self, bars: BarsInput, period: Union[int, MovingAverageParams]
    ) -> np.ndarray:
        return sma(self._to_data(bars).closes, _period(period))

    @_log_rejection
    def ema(
        self, bars: BarsInput, period: Union[int, MovingAverageParams]
    ) -> np.ndarray:
        period = _period(period)
        data = self._to_data(bars)
        if len(data) < period * 4:
            logger.debug(
                f"EMA({period}): Only {len(data)} bars, "
                f"recommend {period * 4} for convergence"
            )
        return ema(data.closes, period)

    # -------------------------------------------------------------------------
    # Momentum
    # -------------------------------------------------------------------------

    @_log_rejection
    def rsi(self, bars: BarsInput, params: Optional[RSIParams] = None) -> np.ndarray:
        params = params or RSIParams(period=self.settings.rsi_period)
        data = self._to_data(bars)
        if len(data) <= params.period:
            logger.debug(
                f"RSI({params.period}): {len(data)} bars, returning neutral fallback"
            )
        return rsi(data.closes, params.period, fallback=self.settings.rsi_fallback)

    @_log_rejection
    def rsi_divergences(
        self,
        bars: BarsInput,
        params: Optional[RSIParams] = None,
        rsi_values: Optional[np.ndarray] = None,
    ) -> DivergenceResult:
        """Bullish/bearish divergences between price extrema and RSI."""
        data = self._to_data(bars)
        if rsi_values is None:
            rsi_values = self.rsi(data, params)
        return find_divergences(data, rsi_values, window=self.settings.extremum_window)

    @_log_rejection
    def macd(self, bars: BarsInput, params: Optional[MACDParams] = None) -> MACDResult:
        params = params or MACDParams(
            fast_period=self.settings.macd_fast_period,
            slow_period=self.settings.macd_slow_period,
            signal_period=self.settings.macd_signal_period,
        )
        return macd(
            self._to_data(bars).closes,
            params.fast_period,
            params.slow_period,
            params.signal_period,
        )

    @_log_rejection
    def stochastic(
        self, bars: BarsInput, params: Optional[StochasticParams] = None
    ) -> StochasticResult:
        params = params or StochasticParams(
            k_period=self.settings.stochastic_k_period,
            d_period=self.settings.stochastic_d_period,
        )
        data = self._to_data(bars)
        return stochastic(
            data.highs,
            data.lows,
            data.closes,
            params.k_period,
            params.d_period,
            flat_value=self.settings.stochastic_flat_value,
        )

    # -------------------------------------------------------------------------
    # Trend
    # -------------------------------------------------------------------------

    @_log_rejection
    def adx(self, bars: BarsInput, params: Optional[ADXParams] = None) -> ADXResult:
        params = params or ADXParams(period=self.settings.adx_period)
        data = self._to_data(bars)
        if len(data) <= params.period + 1:
            logger.debug(
                f"ADX({params.period}): {len(data)} bars, returning flat fallback"
            )
        return adx(
            data.highs,
            data.lows,
            data.closes,
            params.period,
            fallback=self.settings.adx_fallback,
        )

    @_log_rejection
    def ichimoku(
        self, bars: BarsInput, params: Optional[IchimokuParams] = None
    ) -> IchimokuResult:
        params = params or IchimokuParams(
            tenkan_period=self.settings.ichimoku_tenkan_period,
            kijun_period=self.settings.ichimoku_kijun_period,
            senkou_b_period=self.settings.ichimoku_senkou_b_period,
            displacement=self.settings.ichimoku_displacement,
        )
        data = self._to_data(bars)
        return ichimoku(
            data.highs,
            data.lows,
            data.closes,
            params.tenkan_period,
            params.kijun_period,
            params.senkou_b_period,
            params.displacement,
        )

    # -------------------------------------------------------------------------
    # Volatility
    # -------------------------------------------------------------------------

    @_log_rejection
    def atr(self, bars: BarsInput, params: Optional[ATRParams] = None) -> np.ndarray:
        params = params or ATRParams(period=self.settings.atr_period)
        data = self._to_data(bars)
        return atr(data.highs, data.lows, data.closes, params.period)

    @_log_rejection
    def bollinger_bands(
        self, bars: BarsInput, params: Optional[BollingerParams] = None
    ) -> BollingerResult:
        params = params or BollingerParams(
            period=self.settings.bollinger_period,
            multiplier=self.settings.bollinger_multiplier,
        )
        return bollinger_bands(self._to_data(bars).closes, params.period, params.multiplier)

    # -------------------------------------------------------------------------
    # Volume
    # -------------------------------------------------------------------------

    @_log_rejection
    def obv(self, bars: BarsInput) -> np.ndarray:
        data = self._to_data(bars)
        return obv(data.closes, data.volumes)

    @_log_rejection
    def vwap(self, bars: BarsInput, params: Optional[VWAPParams] = None) -> np.ndarray:
        params = params or VWAPParams(period=self.settings.vwap_period)
        data = self._to_data(bars)
        return vwap(data.highs, data.lows, data.closes, data.volumes, params.period)

    # -------------------------------------------------------------------------
    # Patterns
    # -------------------------------------------------------------------------

    @_log_rejection
    def patterns(
        self, bars: BarsInput, config: Optional[PatternConfig] = None
    ) -> list[PatternMatch]:
        config = config or PatternConfig.from_settings(self.settings)
        return detect_patterns(self._to_data(bars), config)

    # -------------------------------------------------------------------------
    # Full snapshot
    # -------------------------------------------------------------------------

    @_log_rejection
    def execute(self, input_data: IndicatorRequest) -> IndicatorSnapshot:
        """Calculate every indicator for the requested bars."""
        request = self.validate_input(input_data)
        data = self._to_data(request.bars)

        rsi_values = self.rsi(data, request.rsi)
        adx_result = self.adx(data, request.adx)
        macd_result = self.macd(data, request.macd)
        bollinger = self.bollinger_bands(data, request.bollinger)
        stoch = self.stochastic(data, request.stochastic)
        atr_values = self.atr(data, request.atr)
        obv_values = self.obv(data)
        vwap_values = self.vwap(data, request.vwap)

        patterns = []
        if request.detect_patterns:
            patterns = self.patterns(data, request.patterns)

        latest = self._summarize(
            data, rsi_values, adx_result, macd_result, bollinger, stoch,
            atr_values, obv_values, vwap_values,
        )

        logger.debug(
            f"{self.name}: computed snapshot for {len(data)} bars, "
            f"{len(patterns)} patterns"
        )

        return IndicatorSnapshot(
            timestamps=data.timestamps,
            sma={p: self.sma(data, p) for p in request.sma_periods},
            ema={p: self.ema(data, p) for p in request.ema_periods},
            rsi=rsi_values,
            divergences=self.rsi_divergences(data, rsi_values=rsi_values),
            adx=adx_result,
            atr=atr_values,
            macd=macd_result,
            macd_crossovers=macd_crossovers(
                data.timestamps, macd_result.macd, macd_result.signal
            ),
            bollinger=bollinger,
            stochastic=stoch,
            obv=obv_values,
            vwap=vwap_values,
            ichimoku=self.ichimoku(data, request.ichimoku),
            latest=latest,
            patterns=patterns,
        )

    def _rsi_zone(self, rsi_value: Optional[float]) -> RSIZone:
        if rsi_value is None:
            return RSIZone.NEUTRAL
        if rsi_value >= self.settings.rsi_overbought:
            return RSIZone.OVERBOUGHT
        if rsi_value <= self.settings.rsi_oversold:
            return RSIZone.OVERSOLD
        return RSIZone.NEUTRAL

    def _summarize(
        self,
        data: OHLCVData,
        rsi_values: np.ndarray,
        adx_result: ADXResult,
        macd_result: MACDResult,
        bollinger: BollingerResult,
        stoch: StochasticResult,
        atr_values: np.ndarray,
        obv_values: np.ndarray,
        vwap_values: np.ndarray,
    ) -> LatestValues:
        """Last defined value of each headline indicator."""
        rsi_val = get_last_valid(rsi_values)
        adx_val = get_last_valid(adx_result.adx)
        plus_di = get_last_valid(adx_result.plus_di)
        minus_di = get_last_valid(adx_result.minus_di)

        return LatestValues(
            close=float(data.closes[-1]),
            rsi=rsi_val,
            rsi_zone=self._rsi_zone(rsi_val),
            adx=adx_val,
            plus_di=plus_di,
            minus_di=minus_di,
            trend_strength=classify_trend_strength(adx_val) if adx_val is not None else None,
            trend_direction=trend_direction(plus_di, minus_di),
            macd_line=get_last_valid(macd_result.macd),
            macd_signal=get_last_valid(macd_result.signal),
            macd_histogram=get_last_valid(macd_result.histogram),
            bollinger_upper=get_last_valid(bollinger.upper),
            bollinger_middle=get_last_valid(bollinger.middle),
            bollinger_lower=get_last_valid(bollinger.lower),
            bollinger_bandwidth=get_last_valid(bollinger.bandwidth),
            bollinger_percent_b=get_last_valid(bollinger.percent_b),
            stochastic_k=get_last_valid(stoch.k),
            stochastic_d=get_last_valid(stoch.d),
            atr=get_last_valid(atr_values),
            obv=float(obv_values[-1]),
            vwap=get_last_valid(vwap_values),
        )
