"""Error types and global exception handling for the console."""

from __future__ import annotations

import logging
import sys
import threading
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger("app.exceptions")


class ChassisConsoleError(Exception):
    """Base class for errors raised by the console."""


class TransportError(ChassisConsoleError):
    """Raised when the physical transport fails an I/O operation."""


class PortClosedError(TransportError):
    """Raised when a write finds the port already closed."""


def install_exception_hook() -> "_ExceptionHook":
    """Install exception handlers for the main thread and background threads."""

    hook = _ExceptionHook()
    hook.install()
    return hook


@dataclass
class _ExceptionHook:
    _original_excepthook: Optional[callable] = None
    _original_thread_excepthook: Optional[callable] = None

    def install(self) -> None:
        self._original_excepthook = sys.excepthook
        sys.excepthook = self._handle_exception

        if hasattr(threading, "excepthook"):
            self._original_thread_excepthook = threading.excepthook
            threading.excepthook = self._handle_thread_exception  # type: ignore[assignment]

    def uninstall(self) -> None:
        if self._original_excepthook:
            sys.excepthook = self._original_excepthook
        if self._original_thread_excepthook:
            threading.excepthook = self._original_thread_excepthook  # type: ignore[assignment]

    def _handle_exception(self, exc_type, exc_value, exc_traceback) -> None:
        logger.critical(
            "Unhandled exception: %s",
            exc_value,
            exc_info=(exc_type, exc_value, exc_traceback),
        )
        if self._original_excepthook:
            self._original_excepthook(exc_type, exc_value, exc_traceback)

    def _handle_thread_exception(self, args: "threading.ExceptHookArgs") -> None:  # pragma: no cover
        logger.critical(
            "Unhandled thread exception in %s: %s",
            args.thread.name if args.thread else "<unknown>",
            args.exc_value,
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
        )
        if self._original_thread_excepthook:
            self._original_thread_excepthook(args)
