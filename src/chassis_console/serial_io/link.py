"""Inbound byte delivery: pumps transport bytes through the frame decoder."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, List, Optional

from .codec import ChecksumMismatch, Command, CommandReady, DecodeOutcome
from .decoder import FrameDecoder
from .transport import Transport

logger = logging.getLogger("serial.link")

DEFAULT_IDLE_DELAY_S = 0.2


class ChassisLink:
    """Owns the decoder of one serial channel and dispatches what it yields."""

    def __init__(
        self,
        transport: Transport,
        on_command: Optional[Callable[[Command], None]] = None,
        on_checksum_failure: Optional[Callable[[bytes], None]] = None,
        idle_delay_s: float = DEFAULT_IDLE_DELAY_S,
        name: str = "chassis",
    ) -> None:
        self._name = name
        self._transport = transport
        self._decoder = FrameDecoder()
        self._on_command = on_command
        self._on_checksum_failure = on_checksum_failure
        self._idle_delay_s = idle_delay_s
        self._reader_thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def decoder(self) -> FrameDecoder:
        return self._decoder

    @property
    def is_running(self) -> bool:
        return bool(self._reader_thread and self._reader_thread.is_alive())

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self._reader_thread = threading.Thread(target=self._reader_loop, name=f"{self._name}-reader", daemon=True)
        self._reader_thread.start()
        logger.info("%s: reader thread started.", self._name)

    def stop(self) -> None:
        self._stop_event.set()
        if self._reader_thread:
            self._reader_thread.join(timeout=2.0)
        self._reader_thread = None
        logger.info("%s: reader stopped.", self._name)

    def deliver(self, data: Iterable[int]) -> List[DecodeOutcome]:
        """Decode a chunk of inbound bytes and dispatch the outcomes in order."""
        outcomes = self._decoder.feed_bytes(data)
        for outcome in outcomes:
            self._dispatch(outcome)
        return outcomes

    def _reader_loop(self) -> None:
        while not self._stop_event.is_set():
            if not self._transport.is_open:
                # Keep the partial frame out of the next session.
                self._decoder.reset()
                self._stop_event.wait(self._idle_delay_s)
                continue
            data = self._transport.read_available()
            if data:
                self.deliver(data)
        logger.debug("%s: reader loop exiting.", self._name)

    def _dispatch(self, outcome: DecodeOutcome) -> None:
        try:
            if isinstance(outcome, CommandReady):
                if self._on_command:
                    self._on_command(outcome.command)
            elif isinstance(outcome, ChecksumMismatch):
                if self._on_checksum_failure:
                    self._on_checksum_failure(outcome.raw)
        except Exception:
            logger.exception("%s: outcome callback failed.", self._name)
