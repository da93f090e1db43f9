"""Console application layer."""

from .controller import DIRECTIONS, ConsoleController

__all__ = ["ConsoleController", "DIRECTIONS"]
