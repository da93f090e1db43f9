"""Logging setup: rotating file plus optional console, with per-component floors."""

from __future__ import annotations

import logging
import logging.handlers
from typing import Dict, List, Optional

from chassis_console.config.models import LoggingConfig

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(config: LoggingConfig, level_override: Optional[str] = None) -> None:
    """Route the console's loggers to the configured file and terminal.

    ``level_override`` (the ``--log-level`` flag) replaces the root level only;
    ``component_levels`` still apply, so frame-by-frame decoder output stays
    out of a DEBUG session unless the config lowers it explicitly.
    """

    root_level = _level(level_override or config.level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    log_path = config.resolved_path()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handlers: List[logging.Handler] = [
        logging.handlers.RotatingFileHandler(
            filename=log_path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    ]
    if config.console:
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.captureWarnings(True)
    logging.basicConfig(level=root_level, handlers=handlers, force=True)
    _apply_component_levels(config.component_levels)


def _apply_component_levels(levels: Dict[str, str]) -> None:
    for name, level_name in levels.items():
        logging.getLogger(name).setLevel(_level(level_name))


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level '{name}'")
    return level
