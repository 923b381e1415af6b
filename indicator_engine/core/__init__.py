from indicator_engine.core.config import Settings, get_settings
from indicator_engine.core.logging import configure_logging

__all__ = ["Settings", "get_settings", "configure_logging"]
