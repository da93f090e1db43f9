"""Service layer running on top of the serial protocol engine."""

from .supervisor import PollingSupervisor
from .telemetry import CHECKSUM_FAILURE_TEXT, ResponseLog, TelemetryDispatcher

__all__ = [
    "CHECKSUM_FAILURE_TEXT",
    "PollingSupervisor",
    "ResponseLog",
    "TelemetryDispatcher",
]
