"""Tests for frame encoding, checksum and decode outcome types."""

import pytest

from chassis_console.serial_io.codec import (
    INCOMPLETE,
    ChecksumMismatch,
    Command,
    FrameCodec,
    Incomplete,
    compute_checksum,
)


def test_checksum_of_empty_sequence_is_zero():
    assert compute_checksum(b"") == 0


def test_checksum_is_xor_of_all_bytes():
    assert compute_checksum([0x55, 0xAA]) == 0xFF
    assert compute_checksum([0x55, 0xAA, 0x09, 0x03]) == 0xF5


def test_encode_velocity_example_is_byte_exact():
    """The 9-byte velocity payload frames to exactly 14 bytes."""
    frame = FrameCodec.encode([1, 0, 5, 0, 7, 0, 0, 0, 0], seq=3)
    body = bytes([0x55, 0xAA, 0x09, 0x03, 0x01, 0x00, 0x05, 0x00, 0x07, 0x00, 0x00, 0x00, 0x00])
    assert len(frame) == 14
    assert frame[:-1] == body
    assert frame[-1] == compute_checksum(body)
    assert frame[-1] == 0xF6


def test_encode_battery_query():
    assert FrameCodec.encode([2, 0], seq=0) == bytes([0x55, 0xAA, 0x02, 0x00, 0x02, 0x00, 0xFF])


def test_encode_length_field_counts_payload():
    frame = FrameCodec.encode(bytes(range(9)), seq=0)
    assert frame[2] == 9
    assert len(frame) == frame[2] + 5


def test_encode_masks_sequence_to_one_byte():
    assert FrameCodec.encode([2, 0], seq=256)[3] == 0
    assert FrameCodec.encode([2, 0], seq=511)[3] == 0xFF


def test_encode_rejects_oversized_payload():
    with pytest.raises(ValueError):
        FrameCodec.encode(bytes(256), seq=0)


def test_encode_accepts_largest_payload():
    frame = FrameCodec.encode(bytes(255), seq=1)
    assert frame[2] == 255
    assert len(frame) == 255 + 5


def test_command_describe_uses_lowercase_hex():
    command = Command(id=1, seq=3, payload=bytes([0x00, 0x05, 0xAB]))
    assert command.describe() == "Id: 1, Seq: 3, Payload: 0 5 ab"


def test_checksum_mismatch_carries_sentinel_command():
    raw = bytes([0x55, 0xAA, 0x02, 0x07, 0x02, 0x00, 0x00])
    outcome = ChecksumMismatch(raw=raw)
    assert outcome.command == Command(id=0, seq=0, payload=raw)


def test_incomplete_instances_compare_equal():
    assert Incomplete() == INCOMPLETE
