"""Serialized outbound command channel."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Sequence

from chassis_console.infra.exceptions import PortClosedError, TransportError

from .codec import FrameCodec
from .transport import Transport

logger = logging.getLogger("serial.channel")

DEFAULT_SEND_SPACING_S = 0.02


class CommandChannel:
    """Frames and writes commands, one caller at a time.

    The lock covers encode, write and the post-write spacing delay, so frames
    from concurrent callers never interleave and nobody can jump ahead while
    the controller digests the previous frame. Issue order across callers is
    not preserved.
    """

    def __init__(
        self,
        transport: Transport,
        send_spacing_s: float = DEFAULT_SEND_SPACING_S,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._transport = transport
        self._send_spacing_s = max(0.0, send_spacing_s)
        self._sleep = sleep
        self._lock = threading.Lock()
        self._sequence = 0

    @property
    def sequence(self) -> int:
        """Sequence number the next frame will carry."""
        return self._sequence

    @property
    def is_open(self) -> bool:
        return self._transport.is_open

    def send(self, payload: Sequence[int]) -> bool:
        """Send one frame; returns ``False`` without side effects when the transport is closed.

        Raises:
            TransportError: If the transport fails the write.
        """
        with self._lock:
            if not self._transport.is_open:
                logger.debug("Transport closed; dropping %d-byte payload", len(payload))
                return False
            frame = FrameCodec.encode(payload, self._sequence)
            try:
                self._transport.write(frame)
            except PortClosedError:
                # Closed after the check above; same as a send on a closed transport.
                logger.debug("Transport closed before write; dropping frame %s", frame.hex(" "))
                return False
            except TransportError:
                logger.error("Write failed for frame %s", frame.hex(" "))
                raise
            self._sequence = (self._sequence + 1) & 0xFF
            logger.debug("Sent %d bytes -> %s", len(frame), frame.hex(" "))
            if self._send_spacing_s:
                self._sleep(self._send_spacing_s)
            return True
