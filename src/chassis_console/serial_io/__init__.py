"""Serial protocol engine for the chassis controller."""

from .channel import CommandChannel
from .codec import (
    INCOMPLETE,
    ChecksumMismatch,
    Command,
    CommandReady,
    DecodeOutcome,
    FrameCodec,
    Incomplete,
    compute_checksum,
)
from .decoder import DecodeState, FrameDecoder
from .link import ChassisLink
from .protocol import (
    BatteryReport,
    CommandId,
    EncoderReading,
    build_battery_query,
    build_clear_encoder,
    build_reset,
    build_velocity_payload,
    parse_battery,
    parse_encoder,
)
from .transport import SerialTransport, Transport

__all__ = [
    "BatteryReport",
    "ChassisLink",
    "ChecksumMismatch",
    "Command",
    "CommandChannel",
    "CommandId",
    "CommandReady",
    "DecodeOutcome",
    "DecodeState",
    "EncoderReading",
    "FrameCodec",
    "FrameDecoder",
    "INCOMPLETE",
    "Incomplete",
    "SerialTransport",
    "Transport",
    "build_battery_query",
    "build_clear_encoder",
    "build_reset",
    "build_velocity_payload",
    "compute_checksum",
    "parse_battery",
    "parse_encoder",
]
