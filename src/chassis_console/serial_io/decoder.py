"""Incremental frame decoder for the inbound byte stream."""

from __future__ import annotations

import enum
import logging
import threading
from typing import Iterable, List

from .codec import (
    FRAME_OVERHEAD,
    INCOMPLETE,
    MAGIC,
    VALID_LENGTHS,
    ChecksumMismatch,
    Command,
    CommandReady,
    DecodeOutcome,
    compute_checksum,
)

logger = logging.getLogger("serial.decoder")


class DecodeState(enum.Enum):
    """Position of the decoder within a frame."""

    SEEK_FIRST_MAGIC = "seek_first_magic"
    SEEK_SECOND_MAGIC = "seek_second_magic"
    READ_LENGTH = "read_length"
    FILL = "fill"


class FrameDecoder:
    """Resumable single-pass parser; consumes one byte at a time, no lookahead.

    Bytes may arrive in any chunking, the decoder keeps its progress between
    calls. Anomalies never raise: an unexpected length byte silently restarts
    the magic search, a bad checksum is reported as ``ChecksumMismatch`` and
    the decoder restarts as well.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = DecodeState.SEEK_FIRST_MAGIC
        self._buffer = bytearray()
        self._cursor = 0

    @property
    def state(self) -> DecodeState:
        return self._state

    def reset(self) -> None:
        """Drop any partial frame and seek the first magic byte again."""
        with self._lock:
            self._reset()

    def feed(self, byte: int) -> DecodeOutcome:
        """Consume a single byte and report what, if anything, it completed."""
        with self._lock:
            return self._step(byte & 0xFF)

    def feed_bytes(self, data: Iterable[int]) -> List[DecodeOutcome]:
        """Consume a burst of bytes, returning completed outcomes in byte order."""
        outcomes: List[DecodeOutcome] = []
        with self._lock:
            for byte in data:
                outcome = self._step(byte & 0xFF)
                if outcome is not INCOMPLETE:
                    outcomes.append(outcome)
        return outcomes

    def _step(self, byte: int) -> DecodeOutcome:
        state = self._state
        if state is DecodeState.SEEK_FIRST_MAGIC:
            if byte == MAGIC[0]:
                self._state = DecodeState.SEEK_SECOND_MAGIC
            return INCOMPLETE

        if state is DecodeState.SEEK_SECOND_MAGIC:
            # A non-magic byte is dropped here, not rescanned as a first magic.
            self._state = DecodeState.READ_LENGTH if byte == MAGIC[1] else DecodeState.SEEK_FIRST_MAGIC
            return INCOMPLETE

        if state is DecodeState.READ_LENGTH:
            if byte not in VALID_LENGTHS:
                logger.debug("Unexpected length byte 0x%02X; resynchronising.", byte)
                self._reset()
                return INCOMPLETE
            self._buffer = bytearray(byte + FRAME_OVERHEAD)
            self._buffer[0:3] = (MAGIC[0], MAGIC[1], byte)
            self._cursor = 3
            self._state = DecodeState.FILL
            return INCOMPLETE

        buffer = self._buffer
        buffer[self._cursor] = byte
        self._cursor += 1
        if self._cursor < len(buffer):
            return INCOMPLETE

        raw = bytes(buffer)
        self._reset()
        if compute_checksum(raw[:-1]) != raw[-1]:
            logger.warning("Checksum mismatch on frame %s", raw.hex(" "))
            return ChecksumMismatch(raw=raw)
        command = Command(id=raw[4], seq=raw[3], payload=raw[5:-1])
        logger.debug("Decoded %s", command.describe())
        return CommandReady(command=command)

    def _reset(self) -> None:
        self._state = DecodeState.SEEK_FIRST_MAGIC
        self._buffer = bytearray()
        self._cursor = 0
