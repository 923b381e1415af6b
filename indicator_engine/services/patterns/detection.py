"""
Chart Pattern Detection

Heuristic detection of reversal formations:
- Double Top / Double Bottom (two similar extrema, neckline break)
- Head and Shoulders (three maxima, middle highest, neckline break)

Scores are fixed significance constants from PatternConfig, not statistics.
"""

import logging
from typing import Callable, Optional

import numpy as np

from indicator_engine.schemas.indicators import PatternConfig, PatternMatch, PatternType
from indicator_engine.services.indicators.calculations import (
    OHLCVData,
    is_local_max,
    is_local_min,
)

logger = logging.getLogger(__name__)

ExtremumCheck = Callable[[np.ndarray, int, int], bool]


def _recent_extrema(
    values: np.ndarray,
    i: int,
    lookback: int,
    config: PatternConfig,
    check: ExtremumCheck,
) -> list[int]:
    """
    Extrema in the lookback window ending at bar i, oldest first.

    The newest `min_offset` bars are skipped so every candidate has its full
    neighbourhood before bar i.
    """
    start = max(i - lookback + 1, 0)
    stop = i - config.min_offset
    return [
        idx
        for idx in range(start, stop + 1)
        if check(values, idx, config.extremum_window)
    ]


def _relative_gap(first: float, second: float) -> Optional[float]:
    if first == 0:
        return None
    return abs(first - second) / abs(first)


# =============================================================================
# DOUBLE TOP / DOUBLE BOTTOM
# =============================================================================


def _detect_double(
    data: OHLCVData, config: PatternConfig, pattern_type: PatternType
) -> list[PatternMatch]:
    is_top = pattern_type == PatternType.DOUBLE_TOP
    values = data.highs if is_top else data.lows
    check = is_local_max if is_top else is_local_min

    matches = []
    seen_starts = set()

    for i in range(config.double_lookback, len(data)):
        extrema = _recent_extrema(values, i, config.double_lookback, config, check)
        if len(extrema) < 2:
            continue

        for first, second in zip(extrema, extrema[1:]):
            if second - first < config.min_separation:
                continue

            gap = _relative_gap(values[first], values[second])
            if gap is None or gap > config.tolerance:
                continue

            # Neckline: deepest trough between the peaks (or highest peak between troughs)
            if is_top:
                neckline = np.min(data.lows[first:second])
                confirmed = data.closes[i] < neckline
            else:
                neckline = np.max(data.highs[first:second])
                confirmed = data.closes[i] > neckline

            if not confirmed or first in seen_starts:
                continue

            seen_starts.add(first)
            matches.append(
                PatternMatch(
                    type=pattern_type,
                    start_index=first,
                    end_index=i,
                    significance=config.double_significance,
                )
            )
            break

    return matches


def detect_double_top(data: OHLCVData, config: PatternConfig) -> list[PatternMatch]:
    """Two similar highs followed by a close below the intervening low."""
    return _detect_double(data, config, PatternType.DOUBLE_TOP)


def detect_double_bottom(data: OHLCVData, config: PatternConfig) -> list[PatternMatch]:
    """Two similar lows followed by a close above the intervening high."""
    return _detect_double(data, config, PatternType.DOUBLE_BOTTOM)


# =============================================================================
# HEAD AND SHOULDERS
# =============================================================================


def detect_head_and_shoulders(
    data: OHLCVData, config: PatternConfig
) -> list[PatternMatch]:
    """
    Three successive highs, the middle one above both shoulders.

    Shoulders must be within tolerance of each other; confirmation is a close
    below the neckline (mean of the two troughs between the highs).
    """
    matches = []
    seen_starts = set()

    for i in range(config.head_shoulders_lookback, len(data)):
        maxima = _recent_extrema(
            data.highs, i, config.head_shoulders_lookback, config, is_local_max
        )
        if len(maxima) < 3:
            continue

        for left, head, right in zip(maxima, maxima[1:], maxima[2:]):
            head_high = data.highs[head]
            if head_high <= data.highs[left] or head_high <= data.highs[right]:
                continue

            gap = _relative_gap(data.highs[left], data.highs[right])
            if gap is None or gap > config.tolerance:
                continue

            left_trough = np.min(data.lows[left:head])
            right_trough = np.min(data.lows[head:right])
            neckline = (left_trough + right_trough) / 2

            if data.closes[i] >= neckline or left in seen_starts:
                continue

            seen_starts.add(left)
            matches.append(
                PatternMatch(
                    type=PatternType.HEAD_AND_SHOULDERS,
                    start_index=left,
                    end_index=i,
                    significance=config.head_shoulders_significance,
                )
            )
            break

    return matches


# =============================================================================
# ALL PATTERNS
# =============================================================================


def detect_patterns(data: OHLCVData, config: Optional[PatternConfig] = None) -> list[PatternMatch]:
    """
    Run every detector.

    Each formation (type, start bar) is reported once, at its first
    confirming bar; later bars that still break the neckline add nothing.
    Returns matches ordered by confirmation bar, then start bar.
    """
    config = config or PatternConfig()

    matches = (
        detect_double_top(data, config)
        + detect_double_bottom(data, config)
        + detect_head_and_shoulders(data, config)
    )
    matches.sort(key=lambda m: (m.end_index, m.start_index))

    logger.debug(f"Pattern scan over {len(data)} bars found {len(matches)} matches")
    return matches
