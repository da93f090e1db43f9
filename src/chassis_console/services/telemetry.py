"""Dispatch of decoded controller telemetry and the bounded response log."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable, Deque, List, Optional

from chassis_console.infra.exceptions import TransportError
from chassis_console.serial_io.channel import CommandChannel
from chassis_console.serial_io.codec import Command
from chassis_console.serial_io.protocol import (
    BatteryReport,
    CommandId,
    EncoderReading,
    build_reset,
    parse_battery,
    parse_encoder,
)

logger = logging.getLogger("services.telemetry")

CHECKSUM_FAILURE_TEXT = "received but check failed"


class ResponseLog:
    """Thread-safe list of the most recent response lines."""

    def __init__(self, capacity: int = 20) -> None:
        if capacity < 1:
            raise ValueError("Response log capacity must be positive")
        self._lines: Deque[str] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._lines.maxlen or 0

    def append(self, text: str) -> None:
        with self._lock:
            self._lines.append(text)

    def lines(self) -> List[str]:
        with self._lock:
            return list(self._lines)

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)


class TelemetryDispatcher:
    """Routes decoded commands by id and records every response in the log."""

    def __init__(
        self,
        channel: CommandChannel,
        log: ResponseLog,
        on_encoder: Optional[Callable[[EncoderReading], None]] = None,
        on_battery: Optional[Callable[[BatteryReport], None]] = None,
    ) -> None:
        self._channel = channel
        self._log = log
        self._on_encoder = on_encoder
        self._on_battery = on_battery
        self._handlers = {
            CommandId.VELOCITY: self._handle_encoder,
            CommandId.BATTERY: self._handle_battery,
            CommandId.TIMEOUT: self._handle_timeout,
        }

    def handle_command(self, command: Command) -> None:
        handler = self._handlers.get(command.id)
        if handler is not None:
            try:
                handler(command)
            except ValueError as exc:
                logger.warning("Malformed telemetry %s: %s", command.describe(), exc)
        self._log.append(command.describe())

    def handle_checksum_failure(self, raw: bytes) -> None:
        logger.debug("Checksum failure on %s", raw.hex(" "))
        self._log.append(CHECKSUM_FAILURE_TEXT)

    def _handle_encoder(self, command: Command) -> None:
        reading = parse_encoder(command)
        logger.debug("Encoder left=%d right=%d", reading.left, reading.right)
        if self._on_encoder:
            self._on_encoder(reading)

    def _handle_battery(self, command: Command) -> None:
        report = parse_battery(command)
        logger.debug("Battery level %d", report.level)
        if self._on_battery:
            self._on_battery(report)

    def _handle_timeout(self, command: Command) -> None:
        logger.warning("Controller reported a command timeout; sending reset.")
        try:
            self._channel.send(build_reset())
        except TransportError as exc:
            logger.error("Reset after timeout failed: %s", exc)
