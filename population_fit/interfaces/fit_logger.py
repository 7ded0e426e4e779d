"""Progress sink used by the fitting engine."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod


class FitLogger(ABC):
    """Receives printf-style progress messages from a fit."""

    @abstractmethod
    def info(self, message: str, *args) -> None:
        """Report a model-order step or final result."""

    @abstractmethod
    def debug(self, message: str, *args) -> None:
        """Report an individual optimizer attempt."""


class NullFitLogger(FitLogger):
    """Discards all messages."""

    def info(self, message: str, *args) -> None:
        pass

    def debug(self, message: str, *args) -> None:
        pass


class LoggerFitLogger(FitLogger):
    """Forwards messages to a standard library logger.

    Arguments are passed through unformatted so that the logging framework only
    builds the message when the level is enabled.
    """

    def __init__(self, logger: logging.Logger, **extra) -> None:
        self.logger = logger
        self.extra = extra

    def info(self, message: str, *args) -> None:
        self.logger.info(message, *args, extra=self.extra or None)

    def debug(self, message: str, *args) -> None:
        self.logger.debug(message, *args, extra=self.extra or None)


__all__ = ["FitLogger", "LoggerFitLogger", "NullFitLogger"]
