"""Serial console and protocol engine for a two-wheeled robot chassis."""

from __future__ import annotations

from .config import Config, load_config

__version__ = "0.1.0"

__all__ = ["Config", "load_config", "__version__"]
