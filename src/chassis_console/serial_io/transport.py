"""Physical transport used by the channel and the inbound reader."""

from __future__ import annotations

import logging
import threading
from typing import Optional, Protocol

try:
    import serial
    from serial import SerialException
except ImportError as exc:  # pragma: no cover - dependency guard
    raise ImportError("pyserial is required. Install with `pip install pyserial`.") from exc

from chassis_console.config.models import SerialLinkConfig
from chassis_console.infra.exceptions import PortClosedError, TransportError

logger = logging.getLogger("serial.transport")


class Transport(Protocol):
    """What the protocol core needs from a byte transport."""

    @property
    def is_open(self) -> bool: ...

    def read_available(self) -> bytes: ...

    def write(self, data: bytes) -> None:
        """Raise ``PortClosedError`` if the port is closed, ``TransportError`` on other failures."""


class SerialTransport:
    """pyserial-backed transport. Open failures are reported, not raised."""

    def __init__(self, config: SerialLinkConfig) -> None:
        self._config = config
        self._serial: Optional[serial.Serial] = None
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        port = self._serial
        return bool(port is not None and port.is_open)

    @property
    def port(self) -> Optional[str]:
        return self._serial.port if self._serial is not None else None

    def open(self, port: Optional[str] = None) -> bool:
        """Open ``port`` (or the configured one); returns whether it is now open."""
        target = port or self._config.port
        if not target:
            logger.warning("No serial port configured.")
            return False
        with self._lock:
            if self._serial is not None and self._serial.is_open:
                return True
            try:
                self._serial = serial.serial_for_url(
                    target,
                    baudrate=self._config.baudrate,
                    bytesize=self._config.bytesize,
                    parity=self._config.parity,
                    stopbits=self._config.stopbits,
                    timeout=self._config.timeout,
                )
            except (SerialException, OSError, ValueError) as exc:
                logger.warning("Cannot open serial port %s (%s)", target, exc)
                self._serial = None
                return False
        logger.info("Opened serial port %s at %d baud", target, self._config.baudrate)
        return True

    def close(self) -> None:
        with self._lock:
            port, self._serial = self._serial, None
        if port is not None and port.is_open:
            logger.info("Closing serial port %s", port.port)
            port.close()

    def _discard(self, port: serial.Serial) -> None:
        """Close ``port`` after an I/O error, unless a newer session replaced it."""
        with self._lock:
            if self._serial is not port:
                logger.debug("Ignoring error from superseded port %s", port.port)
                return
            self._serial = None
        if port.is_open:
            port.close()

    def read_available(self) -> bytes:
        """Return whatever is buffered, waiting up to the read timeout for one byte."""
        port = self._serial
        if port is None or not port.is_open:
            return b""
        try:
            waiting = port.in_waiting
            return port.read(min(waiting, self._config.read_chunk_size) if waiting else 1)
        except (SerialException, OSError) as exc:
            if self._serial is port:
                logger.error("Serial read failed on %s: %s", port.port, exc)
            self._discard(port)
            return b""

    def write(self, data: bytes) -> None:
        port = self._serial
        if port is None or not port.is_open:
            raise PortClosedError("Serial port is not open")
        try:
            port.write(data)
            port.flush()
        except (SerialException, OSError) as exc:
            if self._serial is not port or not port.is_open:
                raise PortClosedError("Serial port closed during write") from exc
            logger.error("Serial write failed on %s: %s", port.port, exc)
            self._discard(port)
            raise TransportError(str(exc)) from exc
