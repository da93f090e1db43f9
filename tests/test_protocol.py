"""Tests for command builders and telemetry parsers."""

import pytest

from chassis_console.serial_io.codec import Command
from chassis_console.serial_io.protocol import (
    BatteryReport,
    CommandId,
    EncoderReading,
    build_battery_query,
    build_clear_encoder,
    build_reset,
    build_velocity_payload,
    clamp_int16,
    parse_battery,
    parse_encoder,
)


def test_velocity_payload_layout():
    assert build_velocity_payload(5, 7) == bytes([1, 0, 5, 0, 7, 0, 0, 0, 0])


def test_velocity_payload_encodes_negative_values_big_endian():
    assert build_velocity_payload(-8, -256) == bytes([1, 0xFF, 0xF8, 0xFF, 0x00, 0, 0, 0, 0])


def test_velocity_payload_clamps_out_of_range_values():
    assert build_velocity_payload(40000, -40000)[1:5] == bytes([0x7F, 0xFF, 0x80, 0x00])


@pytest.mark.parametrize(
    "value, expected",
    [(0, 0), (32767, 32767), (32768, 32767), (-32768, -32768), (-32769, -32768)],
)
def test_clamp_int16(value, expected):
    assert clamp_int16(value) == expected


def test_two_byte_commands():
    assert build_battery_query() == bytes([CommandId.BATTERY, 0])
    assert build_reset() == bytes([5, 0])
    assert build_clear_encoder() == bytes([6, 0])


def test_parse_encoder_reads_unsigned_words():
    command = Command(id=1, seq=0, payload=bytes([0x01, 0x02, 0xFF, 0xFE, 0, 0, 0, 0]))
    assert parse_encoder(command) == EncoderReading(left=0x0102, right=0xFFFE)


def test_parse_encoder_rejects_short_payload():
    with pytest.raises(ValueError):
        parse_encoder(Command(id=1, seq=0, payload=bytes([0, 1])))


def test_parse_encoder_rejects_other_ids():
    with pytest.raises(ValueError):
        parse_encoder(Command(id=2, seq=0, payload=bytes(8)))


def test_parse_battery():
    assert parse_battery(Command(id=2, seq=9, payload=bytes([87]))) == BatteryReport(level=87)


def test_parse_battery_rejects_empty_payload():
    with pytest.raises(ValueError):
        parse_battery(Command(id=2, seq=0, payload=b""))
