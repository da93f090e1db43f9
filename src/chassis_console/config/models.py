"""Dataclass definitions for console configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Literal, Optional


@dataclass(frozen=True)
class SerialLinkConfig:
    """Serial port parameters for the chassis controller."""

    port: Optional[str] = None
    baudrate: int = 115200
    bytesize: int = 8
    parity: Literal["N", "E", "O", "M", "S"] = "N"
    stopbits: float = 1
    timeout: float = 0.05
    reconnect_delay_ms: int = 200
    read_chunk_size: int = 64


@dataclass(frozen=True)
class ChannelConfig:
    """Outbound write discipline."""

    send_spacing_ms: int = 20

    @property
    def send_spacing_s(self) -> float:
        return self.send_spacing_ms / 1000.0


@dataclass(frozen=True)
class PollingConfig:
    """Intervals and speed scaling used by the polling loops."""

    battery_interval_ms: int = 1000
    velocity_interval_ms: int = 100
    speed_step: int = 8
    speed_levels: int = 4
    speed_level: int = 1

    def __post_init__(self) -> None:
        if self.speed_levels < 1:
            raise ValueError("speed_levels must be at least 1")
        if not 1 <= self.speed_level <= self.speed_levels:
            raise ValueError(f"speed_level must be within 1..{self.speed_levels}, got {self.speed_level}")


@dataclass(frozen=True)
class ConsoleConfig:
    """Console shell settings."""

    response_log_size: int = 20


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    filepath: Path = Path("logs/chassis_console.log")
    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 5
    console: bool = True
    # Per-logger floors; the decoder logs every frame at DEBUG.
    component_levels: Dict[str, str] = field(default_factory=lambda: {"serial.decoder": "INFO"})

    def resolved_path(self) -> Path:
        path = self.filepath if isinstance(self.filepath, Path) else Path(self.filepath)
        return path.expanduser().resolve()


@dataclass(frozen=True)
class Config:
    """Root configuration object."""

    serial: SerialLinkConfig = field(default_factory=SerialLinkConfig)
    channel: ChannelConfig = field(default_factory=ChannelConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    console: ConsoleConfig = field(default_factory=ConsoleConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
