"""Console controller wiring transport, protocol engine and polling loops."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Optional, Tuple

from chassis_console.config.models import Config
from chassis_console.infra.exceptions import TransportError
from chassis_console.serial_io.channel import CommandChannel
from chassis_console.serial_io.link import ChassisLink
from chassis_console.serial_io.protocol import BatteryReport, EncoderReading, build_clear_encoder
from chassis_console.serial_io.transport import SerialTransport, Transport
from chassis_console.services.supervisor import PollingSupervisor
from chassis_console.services.telemetry import ResponseLog, TelemetryDispatcher

logger = logging.getLogger("app.controller")

DIRECTIONS: Dict[str, Tuple[int, int]] = {
    "forward": (1, 1),
    "backward": (-1, -1),
    "left": (-1, 1),
    "right": (1, -1),
    "stop": (0, 0),
}

KEY_ALIASES: Dict[str, str] = {
    "w": "forward",
    "s": "backward",
    "a": "left",
    "d": "right",
    "x": "stop",
}

HELP_TEXT = """\
open [PORT]        open the serial port (defaults to the configured one)
close              close the serial port
w/a/s/d/x          drive forward/left/backward/right or stop
forward|backward|left|right|stop
speed N            select speed level N
clear              clear the wheel encoders
encoder | battery  show the latest telemetry
log | clear-log    show or clear the response log
help | quit"""


class ConsoleController:
    """Text stand-in for the operator GUI."""

    def __init__(
        self,
        config: Optional[Config] = None,
        transport: Optional[Transport] = None,
        output: Callable[[str], None] = print,
    ) -> None:
        self._config = config or Config()
        self._transport = transport if transport is not None else SerialTransport(self._config.serial)
        self._output = output
        self._state_lock = threading.Lock()
        self._encoder: Optional[EncoderReading] = None
        self._battery: Optional[BatteryReport] = None

        self.response_log = ResponseLog(self._config.console.response_log_size)
        self.channel = CommandChannel(self._transport, send_spacing_s=self._config.channel.send_spacing_s)
        self.supervisor = PollingSupervisor(self.channel, self._config.polling)
        self.dispatcher = TelemetryDispatcher(
            self.channel,
            self.response_log,
            on_encoder=self._on_encoder,
            on_battery=self._on_battery,
        )
        self.link = ChassisLink(
            self._transport,
            on_command=self.dispatcher.handle_command,
            on_checksum_failure=self.dispatcher.handle_checksum_failure,
            idle_delay_s=self._config.serial.reconnect_delay_ms / 1000.0,
        )

    @property
    def is_open(self) -> bool:
        return self._transport.is_open

    @property
    def encoder(self) -> Optional[EncoderReading]:
        return self._encoder

    @property
    def battery(self) -> Optional[BatteryReport]:
        return self._battery

    # Operator actions ----------------------------------------------------------

    def open(self, port: Optional[str] = None) -> bool:
        """Open the port and start the reader, battery poll and a stop stream."""
        if self._transport.is_open:
            return True
        opener = getattr(self._transport, "open", None)
        if opener is None or not opener(port):
            return False
        self.link.start()
        self.supervisor.start_battery_poll()
        self.supervisor.set_velocity(0, 0)
        return True

    def close(self) -> None:
        """Close the port; the polling loops notice and retire."""
        closer = getattr(self._transport, "close", None)
        if closer is not None:
            closer()

    def drive(self, direction: str) -> bool:
        if direction not in DIRECTIONS:
            raise ValueError(f"Unknown direction '{direction}'. Valid: {list(DIRECTIONS)}")
        if not self._transport.is_open:
            return False
        self.supervisor.set_velocity(*DIRECTIONS[direction])
        return True

    def set_speed_level(self, level: int) -> None:
        self.supervisor.speed_level = level

    def clear_encoder(self) -> bool:
        try:
            sent = self.channel.send(build_clear_encoder())
        except TransportError as exc:
            logger.error("Clear encoder failed: %s", exc)
            return False
        with self._state_lock:
            self._encoder = EncoderReading(left=0, right=0)
        return sent

    def shutdown(self) -> None:
        self.close()
        self.supervisor.shutdown()
        self.link.stop()

    # Text shell -----------------------------------------------------------------

    def execute(self, line: str) -> bool:
        """Run one shell command; returns ``False`` once the operator quits."""
        parts = line.strip().split()
        if not parts:
            return True
        verb, args = parts[0].lower(), parts[1:]
        verb = KEY_ALIASES.get(verb, verb)

        if verb in ("quit", "exit"):
            return False
        if verb == "help":
            self._output(HELP_TEXT)
        elif verb == "open":
            opened = self.open(args[0] if args else None)
            self._output("opened" if opened else "open failed")
        elif verb == "close":
            self.close()
            self._output("closed")
        elif verb in DIRECTIONS:
            if not self.drive(verb):
                self._output("port is closed")
        elif verb == "speed":
            self._execute_speed(args)
        elif verb == "clear":
            self.clear_encoder()
            self._output("encoder: (0, 0)")
        elif verb == "encoder":
            reading = self._encoder
            self._output(f"left: {reading.left} | right: {reading.right}" if reading else "encoder: n/a")
        elif verb == "battery":
            self._output(f"battery: {self._battery.level}" if self._battery else "battery: n/a")
        elif verb == "log":
            for text in self.response_log.lines():
                self._output(text)
        elif verb == "clear-log":
            self.response_log.clear()
        else:
            self._output(f"unknown command '{verb}' (try 'help')")
        return True

    def _execute_speed(self, args: list) -> None:
        if len(args) != 1:
            self._output(f"speed level is {self.supervisor.speed_level}")
            return
        try:
            self.set_speed_level(int(args[0]))
        except ValueError as exc:
            self._output(str(exc))
            return
        self._output(f"speed level {self.supervisor.speed_level} (x{self.supervisor.speed_multiplier})")

    def _on_encoder(self, reading: EncoderReading) -> None:
        with self._state_lock:
            self._encoder = reading

    def _on_battery(self, report: BatteryReport) -> None:
        with self._state_lock:
            self._battery = report
