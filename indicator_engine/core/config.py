"""
Engine Configuration

Default indicator parameters, fallback constants and pattern thresholds.
All settings can be overridden from environment variables (prefix INDICATOR_)
or a local .env file.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Indicator engine settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="INDICATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Indicator Engine"
    app_version: str = "0.1.0"
    log_level: str = "WARNING"

    # Default periods
    rsi_period: int = 14
    adx_period: int = 14
    atr_period: int = 14
    macd_fast_period: int = 12
    macd_slow_period: int = 26
    macd_signal_period: int = 9
    bollinger_period: int = 20
    bollinger_multiplier: float = 2.0
    stochastic_k_period: int = 14
    stochastic_d_period: int = 3
    vwap_period: int = 0  # 0 = cumulative over the whole series

    # Ichimoku
    ichimoku_tenkan_period: int = 9
    ichimoku_kijun_period: int = 26
    ichimoku_senkou_b_period: int = 52
    ichimoku_displacement: int = 26

    # RSI zones
    rsi_overbought: float = 70.0
    rsi_oversold: float = 30.0

    # Fallbacks for short or flat series (chart stability, not statistics)
    rsi_fallback: float = 50.0
    adx_fallback: float = 25.0
    stochastic_flat_value: float = 50.0

    # Divergence
    extremum_window: int = 2  # bars on each side of a local extremum

    # Pattern detection
    pattern_tolerance: float = 0.03
    double_pattern_lookback: int = 30
    head_shoulders_lookback: int = 40
    pattern_min_offset: int = 5
    pattern_min_separation: int = 5
    double_pattern_significance: float = 80.0
    head_shoulders_significance: float = 85.0


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
