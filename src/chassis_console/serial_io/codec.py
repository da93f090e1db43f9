"""Frame encoding and decode outcomes for the chassis serial protocol.

Wire layout::

    0x55 0xAA LEN SEQ ID PAYLOAD[LEN-1] CHECKSUM

``LEN`` counts ``ID`` plus the payload, ``CHECKSUM`` is the XOR of every
preceding byte (magic included) and the whole frame is ``LEN + 5`` bytes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import reduce
from typing import Sequence, Union

MAGIC = b"\x55\xaa"
VALID_LENGTHS = frozenset({2, 9})
FRAME_OVERHEAD = 5  # magic(2) + LEN + SEQ + CHECKSUM


def compute_checksum(data: Sequence[int]) -> int:
    """XOR-reduce a byte sequence."""
    return reduce(lambda acc, byte: acc ^ (byte & 0xFF), data, 0)


@dataclass(frozen=True)
class Command:
    """A protocol message: discriminator, sender sequence and payload."""

    id: int
    seq: int
    payload: bytes = b""

    def describe(self) -> str:
        """Render the command the way the response log shows it."""
        payload_hex = " ".join(format(b, "x") for b in self.payload)
        return f"Id: {self.id}, Seq: {self.seq}, Payload: {payload_hex}"


@dataclass(frozen=True)
class Incomplete:
    """More bytes are needed before anything can be reported."""


INCOMPLETE = Incomplete()


@dataclass(frozen=True)
class CommandReady:
    """A complete frame passed its checksum."""

    command: Command


@dataclass(frozen=True)
class ChecksumMismatch:
    """A complete frame failed its checksum.

    ``raw`` is the entire frame buffer, magic and length included. ``command``
    mirrors it with the sentinel id/seq of zero so log consumers can treat both
    outcomes uniformly.
    """

    raw: bytes
    command: Command = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "command", Command(id=0, seq=0, payload=self.raw))


DecodeOutcome = Union[Incomplete, CommandReady, ChecksumMismatch]


class FrameCodec:
    """Builds outbound frames. Stateless; the caller supplies the sequence."""

    MAGIC = MAGIC

    @classmethod
    def encode(cls, payload: Sequence[int], seq: int) -> bytes:
        """Frame ``payload`` with header, sequence and trailing checksum."""
        payload_bytes = bytes(byte & 0xFF for byte in payload)
        if len(payload_bytes) >= 256:
            raise ValueError(f"Payload must be shorter than 256 bytes, got {len(payload_bytes)}")
        frame = bytearray(cls.MAGIC)
        frame.append(len(payload_bytes))
        frame.append(seq & 0xFF)
        frame.extend(payload_bytes)
        frame.append(compute_checksum(frame))
        return bytes(frame)
