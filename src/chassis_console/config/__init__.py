"""Configuration package for the chassis console."""

from .loader import load_config
from .models import (
    ChannelConfig,
    Config,
    ConsoleConfig,
    LoggingConfig,
    PollingConfig,
    SerialLinkConfig,
)

__all__ = [
    "ChannelConfig",
    "Config",
    "ConsoleConfig",
    "LoggingConfig",
    "PollingConfig",
    "SerialLinkConfig",
    "load_config",
]
