"""Command builders and telemetry parsers for the chassis controller."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass

from .codec import Command

INT16_MIN = -0x8000
INT16_MAX = 0x7FFF


class CommandId(enum.IntEnum):
    """Command and telemetry discriminators understood by the controller."""

    VELOCITY = 0x01
    BATTERY = 0x02
    RESET = 0x05
    CLEAR_ENCODER = 0x06
    TIMEOUT = 0xFF


@dataclass(frozen=True)
class EncoderReading:
    """Wheel encoder counts reported by the controller."""

    left: int
    right: int


@dataclass(frozen=True)
class BatteryReport:
    """Battery level reported by the controller."""

    level: int


def clamp_int16(value: int) -> int:
    return max(INT16_MIN, min(INT16_MAX, int(value)))


def build_velocity_payload(left: int, right: int) -> bytes:
    """Velocity command: id, left and right as signed big-endian words, 4 reserved bytes."""
    return bytes([CommandId.VELOCITY]) + struct.pack(">hh", clamp_int16(left), clamp_int16(right)) + bytes(4)


def build_battery_query() -> bytes:
    return bytes([CommandId.BATTERY, 0])


def build_reset() -> bytes:
    """Acknowledge a controller timeout so it resets its watchdog state."""
    return bytes([CommandId.RESET, 0])


def build_clear_encoder() -> bytes:
    return bytes([CommandId.CLEAR_ENCODER, 0])


def parse_encoder(command: Command) -> EncoderReading:
    """Decode an encoder report (two unsigned big-endian words)."""
    if command.id != CommandId.VELOCITY:
        raise ValueError(f"Command id {command.id} does not carry encoder counts.")
    if len(command.payload) < 4:
        raise ValueError(f"Encoder payload too short: {len(command.payload)} bytes")
    left, right = struct.unpack_from(">HH", command.payload)
    return EncoderReading(left=left, right=right)


def parse_battery(command: Command) -> BatteryReport:
    if command.id != CommandId.BATTERY:
        raise ValueError(f"Command id {command.id} does not carry a battery report.")
    if not command.payload:
        raise ValueError("Battery payload is empty")
    return BatteryReport(level=command.payload[0])
