"""Tests for telemetry dispatch and the response log."""

import pytest

from chassis_console.serial_io.channel import CommandChannel
from chassis_console.serial_io.codec import Command
from chassis_console.serial_io.protocol import BatteryReport, EncoderReading, build_reset
from chassis_console.services.telemetry import CHECKSUM_FAILURE_TEXT, ResponseLog, TelemetryDispatcher


@pytest.fixture
def received():
    return {"encoder": [], "battery": []}


@pytest.fixture
def dispatcher(transport, received):
    return TelemetryDispatcher(
        CommandChannel(transport, send_spacing_s=0),
        ResponseLog(capacity=20),
        on_encoder=received["encoder"].append,
        on_battery=received["battery"].append,
    )


def test_response_log_keeps_newest_entries():
    log = ResponseLog(capacity=3)
    for i in range(5):
        log.append(str(i))
    assert log.lines() == ["2", "3", "4"]
    assert len(log) == 3
    assert log.capacity == 3


def test_response_log_clear():
    log = ResponseLog()
    log.append("x")
    log.clear()
    assert log.lines() == []


def test_response_log_rejects_zero_capacity():
    with pytest.raises(ValueError):
        ResponseLog(capacity=0)


def test_encoder_report_updates_reading(dispatcher, received):
    command = Command(id=1, seq=4, payload=bytes([0, 10, 0, 20, 0, 0, 0, 0]))
    dispatcher.handle_command(command)
    assert received["encoder"] == [EncoderReading(left=10, right=20)]
    assert dispatcher._log.lines() == ["Id: 1, Seq: 4, Payload: 0 a 0 14 0 0 0 0"]


def test_battery_report_updates_level(dispatcher, received):
    dispatcher.handle_command(Command(id=2, seq=1, payload=bytes([87])))
    assert received["battery"] == [BatteryReport(level=87)]


def test_timeout_report_sends_reset(dispatcher, transport):
    dispatcher.handle_command(Command(id=0xFF, seq=0, payload=bytes([0])))
    (sent,) = transport.sent_commands()
    assert bytes([sent.id]) + sent.payload == build_reset()


def test_timeout_reset_failure_is_logged_not_raised(dispatcher, transport):
    transport.fail_writes = True
    dispatcher.handle_command(Command(id=0xFF, seq=0, payload=bytes([0])))
    assert len(dispatcher._log) == 1


def test_unknown_command_is_only_logged(dispatcher, received, transport):
    dispatcher.handle_command(Command(id=0x42, seq=7, payload=b"\x01"))
    assert received == {"encoder": [], "battery": []}
    assert transport.writes == []
    assert dispatcher._log.lines() == ["Id: 66, Seq: 7, Payload: 1"]


def test_malformed_telemetry_is_still_logged(dispatcher, received):
    dispatcher.handle_command(Command(id=1, seq=0, payload=b"\x00"))
    assert received["encoder"] == []
    assert len(dispatcher._log) == 1


def test_checksum_failure_appends_fixed_text(dispatcher):
    dispatcher.handle_checksum_failure(bytes([0x55, 0xAA, 0x02, 0, 2, 0, 0]))
    assert dispatcher._log.lines() == [CHECKSUM_FAILURE_TEXT]
