"""Command line entry point for the chassis console."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence, TextIO

from chassis_console.app.controller import HELP_TEXT, ConsoleController
from chassis_console.config import Config, load_config
from chassis_console.infra import configure_logging, install_exception_hook

logger = logging.getLogger("app.main")

DEFAULT_CONFIG_PATH = Path("config/app.yaml")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serial console for a two-wheeled robot chassis.")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Path to a YAML/JSON config file (default: {DEFAULT_CONFIG_PATH} if present).",
    )
    parser.add_argument("--port", type=str, default=None, help="Serial port to open on startup.")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level.",
    )
    return parser.parse_args(argv)


def resolve_config(path: Optional[Path], port: Optional[str]) -> Config:
    """Load the config file (explicit, default or none) and apply the port override."""
    if path is not None:
        config = load_config(path)
    elif DEFAULT_CONFIG_PATH.exists():
        config = load_config(DEFAULT_CONFIG_PATH)
    else:
        config = Config()
    if port:
        config = replace(config, serial=replace(config.serial, port=port))
    return config


def run_shell(controller: ConsoleController, stream: TextIO = sys.stdin) -> None:
    print(HELP_TEXT)
    if controller.open():
        print("opened")
    for line in stream:
        if not controller.execute(line):
            break


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        config = resolve_config(args.config, args.port)
    except Exception as exc:
        print(f"Cannot read configuration: {exc}", file=sys.stderr)
        return 1

    try:
        configure_logging(config.logging, level_override=args.log_level)
    except ValueError as exc:
        print(f"Invalid logging configuration: {exc}", file=sys.stderr)
        return 1
    install_exception_hook()
    logger.info("Chassis console starting (port=%s)", config.serial.port)

    controller = ConsoleController(config)
    try:
        run_shell(controller)
    except KeyboardInterrupt:
        logger.info("Interrupted by user (Ctrl+C).")
    finally:
        controller.shutdown()
        logger.info("Shutdown complete.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
