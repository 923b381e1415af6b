"""
Bar factories shared by the test modules
"""

import numpy as np

from indicator_engine.schemas.market import Bar


def create_test_bar(close: float, index: int, spread: float = 1.0, volume: float = 1000.0) -> Bar:
    """Create a bar around a close price, one day apart"""
    return Bar(
        time=1_700_000_000 + index * 86_400,
        open=close,
        high=close + spread,
        low=close - spread,
        close=close,
        volume=volume,
    )


def create_test_bars(closes, spread: float = 1.0, volume: float = 1000.0) -> list[Bar]:
    return [create_test_bar(float(c), i, spread, volume) for i, c in enumerate(closes)]


def piecewise_closes(knots_x, knots_y, length: int) -> np.ndarray:
    """Piecewise-linear close series through the given knots"""
    return np.interp(np.arange(length), knots_x, knots_y)


def random_walk(length: int, seed: int = 42, start: float = 100.0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return start + np.cumsum(rng.normal(0, 1, length))
