"""
Market Data Contracts

Input: list[Bar] (ordered ascending by time)

Bars arrive from the caller's data layer already sorted; the engine does not
re-order, gap-fill or check monotonicity.
"""

from pydantic import BaseModel, ConfigDict, Field


class Bar(BaseModel):
    """Single OHLCV candlestick."""

    model_config = ConfigDict(frozen=True)

    time: int = Field(..., description="Bar timestamp (epoch seconds)")
    open: float
    high: float
    low: float
    close: float
    volume: float = Field(default=0.0, ge=0)
