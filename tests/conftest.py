"""Shared fixtures: an in-memory transport standing in for the serial port."""

from __future__ import annotations

import queue
import threading
import time
from typing import Callable, List, Optional

import pytest

from chassis_console.config import ChannelConfig, Config, ConsoleConfig, PollingConfig, SerialLinkConfig
from chassis_console.infra.exceptions import PortClosedError, TransportError
from chassis_console.serial_io.codec import Command, CommandReady
from chassis_console.serial_io.decoder import FrameDecoder


class FakeTransport:
    """Records writes and replays queued inbound chunks."""

    def __init__(self, is_open: bool = True, byte_delay_s: float = 0.0) -> None:
        self._open = is_open
        self._byte_delay_s = byte_delay_s
        self._inbound: "queue.Queue[bytes]" = queue.Queue()
        self._lock = threading.Lock()
        self.writes: List[bytes] = []
        self.wire = bytearray()
        self.fail_writes = False
        self.open_calls: List[Optional[str]] = []

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self, port: Optional[str] = None) -> bool:
        self.open_calls.append(port)
        self._open = True
        return True

    def close(self) -> None:
        self._open = False

    def push(self, data: bytes) -> None:
        self._inbound.put(bytes(data))

    def read_available(self) -> bytes:
        try:
            return self._inbound.get(timeout=0.01)
        except queue.Empty:
            return b""

    def write(self, data: bytes) -> None:
        if not self._open:
            raise PortClosedError("fake port is closed")
        if self.fail_writes:
            raise TransportError("simulated write failure")
        if self._byte_delay_s:
            # Byte-wise writes make interleaving visible if callers are not serialized.
            for byte in data:
                self.wire.append(byte)
                time.sleep(self._byte_delay_s)
        else:
            self.wire.extend(data)
        with self._lock:
            self.writes.append(bytes(data))

    def sent_commands(self) -> List[Command]:
        """Decode everything written so far."""
        with self._lock:
            stream = b"".join(self.writes)
        return [o.command for o in FrameDecoder().feed_bytes(stream) if isinstance(o, CommandReady)]


def wait_until(predicate: Callable[[], bool], timeout_s: float = 2.0, interval_s: float = 0.005) -> bool:
    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval_s)
    return predicate()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def fast_config() -> Config:
    return Config(
        serial=SerialLinkConfig(port="loop://", reconnect_delay_ms=10),
        channel=ChannelConfig(send_spacing_ms=0),
        polling=PollingConfig(battery_interval_ms=20, velocity_interval_ms=10),
        console=ConsoleConfig(response_log_size=5),
    )
