"""
Divergence Detection

Compares successive price extrema with the oscillator value at the same bars.

- Bullish: price makes a lower low while the oscillator makes a higher low.
- Bearish: price makes a higher high while the oscillator makes a lower high.
"""

import numpy as np

from indicator_engine.schemas.indicators import (
    DivergenceEvent,
    DivergenceResult,
    DivergenceType,
)
from indicator_engine.services.indicators.calculations import (
    OHLCVData,
    check_same_length,
    is_local_max,
    is_local_min,
)


def find_price_extrema(data: OHLCVData, window: int = 2) -> tuple[list[int], list[int]]:
    """
    Locate local price extrema.

    Returns: (minima indices on lows, maxima indices on highs), ascending.
    """
    minima = []
    maxima = []
    for i in range(len(data)):
        if is_local_min(data.lows, i, window):
            minima.append(i)
        if is_local_max(data.highs, i, window):
            maxima.append(i)
    return minima, maxima


def _both_valid(indicator: np.ndarray, first: int, second: int) -> bool:
    return not (np.isnan(indicator[first]) or np.isnan(indicator[second]))


def find_divergences(
    data: OHLCVData, indicator: np.ndarray, window: int = 2
) -> DivergenceResult:
    """
    Detect divergences between price and an aligned oscillator series.

    Only adjacent extrema pairs are compared; each divergence is reported at
    the second extremum of the pair.
    """
    indicator = np.asarray(indicator, dtype=float)
    check_same_length(data.closes, indicator)

    minima, maxima = find_price_extrema(data, window)
    bullish = []
    bearish = []

    for first, second in zip(minima, minima[1:]):
        if (
            data.lows[second] < data.lows[first]
            and indicator[second] > indicator[first]
            and _both_valid(indicator, first, second)
        ):
            bullish.append(
                DivergenceEvent(
                    type=DivergenceType.BULLISH,
                    time=int(data.timestamps[second]),
                    price=float(data.lows[second]),
                    indicator_value=float(indicator[second]),
                )
            )

    for first, second in zip(maxima, maxima[1:]):
        if (
            data.highs[second] > data.highs[first]
            and indicator[second] < indicator[first]
            and _both_valid(indicator, first, second)
        ):
            bearish.append(
                DivergenceEvent(
                    type=DivergenceType.BEARISH,
                    time=int(data.timestamps[second]),
                    price=float(data.highs[second]),
                    indicator_value=float(indicator[second]),
                )
            )

    return DivergenceResult(bullish=bullish, bearish=bearish)
