from riskify.core.config import Settings, get_settings, settings
from riskify.core.logging import RenderLogger, get_logger

__all__ = [
    "RenderLogger",
    "Settings",
    "get_logger",
    "get_settings",
    "settings",
]
