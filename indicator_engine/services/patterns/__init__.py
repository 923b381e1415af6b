"""
Chart Pattern Service

Detects double tops/bottoms and head-and-shoulders formations in OHLCV data.
"""

from indicator_engine.services.patterns.detection import (
    detect_double_bottom,
    detect_double_top,
    detect_head_and_shoulders,
    detect_patterns,
)

__all__ = [
    "detect_double_bottom",
    "detect_double_top",
    "detect_head_and_shoulders",
    "detect_patterns",
]
