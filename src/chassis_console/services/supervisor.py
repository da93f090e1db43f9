"""Battery polling and velocity streaming over a shared command channel."""

from __future__ import annotations

import logging
import threading
from typing import List, Optional, Tuple

from chassis_console.config.models import PollingConfig
from chassis_console.infra.exceptions import TransportError
from chassis_console.serial_io.channel import CommandChannel
from chassis_console.serial_io.protocol import build_battery_query, build_velocity_payload, clamp_int16

logger = logging.getLogger("services.supervisor")


class PollingSupervisor:
    """Runs at most one battery poll and one live velocity loop per channel.

    Velocity loops are retired cooperatively: each loop captures the
    generation token it was started under and stops as soon as the token moves
    on. A superseded loop may still finish the one send it had already passed
    its check for.
    """

    def __init__(self, channel: CommandChannel, config: PollingConfig | None = None) -> None:
        self._channel = channel
        self._config = config or PollingConfig()
        self._generation = 0
        self._generation_lock = threading.Lock()
        self._speed_level = self._config.speed_level
        self._target: Tuple[int, int] = (0, 0)
        self._battery_thread: Optional[threading.Thread] = None
        self._battery_lock = threading.Lock()
        self._velocity_threads: List[threading.Thread] = []
        self._shutdown = threading.Event()

    # Properties ---------------------------------------------------------------

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def speed_level(self) -> int:
        return self._speed_level

    @speed_level.setter
    def speed_level(self, level: int) -> None:
        if not 1 <= level <= self._config.speed_levels:
            raise ValueError(f"Speed level must be within 1..{self._config.speed_levels}, got {level}")
        self._speed_level = level
        logger.info("Speed level set to %d (x%d)", level, self.speed_multiplier)

    @property
    def speed_multiplier(self) -> int:
        return self._config.speed_step * self._speed_level

    @property
    def target(self) -> Tuple[int, int]:
        """Scaled wheel targets of the newest velocity loop."""
        return self._target

    @property
    def battery_poll_active(self) -> bool:
        return bool(self._battery_thread and self._battery_thread.is_alive())

    # Battery poll -------------------------------------------------------------

    def start_battery_poll(self) -> bool:
        """Start the battery poll unless one is already running."""
        with self._battery_lock:
            if self.battery_poll_active:
                return False
            self._shutdown.clear()
            interval_s = self._config.battery_interval_ms / 1000.0
            self._battery_thread = threading.Thread(
                target=self._battery_loop,
                args=(interval_s,),
                name="BatteryPoll",
                daemon=True,
            )
            self._battery_thread.start()
        return True

    def _battery_loop(self, interval_s: float) -> None:
        logger.info("Battery poll started (interval %.3fs)", interval_s)
        while self._channel.is_open and not self._shutdown.is_set():
            if self._shutdown.wait(interval_s):
                break
            self._send(build_battery_query(), "battery query")
        logger.info("Battery poll stopped.")

    # Velocity loop ------------------------------------------------------------

    def set_velocity(self, left: int, right: int) -> int:
        """Supersede the current velocity loop; returns the new generation."""
        multiplier = self.speed_multiplier
        scaled = (clamp_int16(left * multiplier), clamp_int16(right * multiplier))
        with self._generation_lock:
            self._generation += 1
            generation = self._generation
            self._target = scaled
        self._shutdown.clear()

        payload = build_velocity_payload(*scaled)
        interval_s = self._config.velocity_interval_ms / 1000.0
        thread = threading.Thread(
            target=self._velocity_loop,
            args=(generation, payload, interval_s),
            name=f"Velocity-{generation}",
            daemon=True,
        )
        self._velocity_threads = [t for t in self._velocity_threads if t.is_alive()]
        self._velocity_threads.append(thread)
        thread.start()
        logger.info("Velocity target left=%d right=%d (generation %d)", scaled[0], scaled[1], generation)
        return generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation and self._channel.is_open and not self._shutdown.is_set()

    def _velocity_loop(self, generation: int, payload: bytes, interval_s: float) -> None:
        while self._is_current(generation):
            if self._shutdown.wait(interval_s):
                break
            if not self._is_current(generation):
                break
            self._send(payload, "velocity")
        logger.debug("Velocity loop for generation %d retired.", generation)

    # Lifecycle ----------------------------------------------------------------

    def shutdown(self, timeout_s: float = 2.0) -> None:
        """Stop every loop and wait for the threads to exit."""
        with self._generation_lock:
            self._generation += 1
        self._shutdown.set()
        threads = list(self._velocity_threads)
        if self._battery_thread:
            threads.append(self._battery_thread)
        for thread in threads:
            thread.join(timeout=timeout_s)
        self._velocity_threads = []
        self._battery_thread = None

    def _send(self, payload: bytes, label: str) -> None:
        try:
            self._channel.send(payload)
        except TransportError as exc:
            logger.error("Failed to send %s: %s", label, exc)
