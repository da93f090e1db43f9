"""Infrastructure helpers such as logging and exception handling."""

from .exceptions import ChassisConsoleError, PortClosedError, TransportError, install_exception_hook
from .logging import configure_logging

__all__ = ["ChassisConsoleError", "PortClosedError", "TransportError", "configure_logging", "install_exception_hook"]
