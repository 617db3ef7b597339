"""Configure logging for pavesim.

The module exposes the shared :data:`logger` used by the simulation driver and
the optimizer, and the :class:`LogConfig` helper that attaches console/file
handlers to it. Logging is disabled until a :class:`LogConfig` is created with
``enabled=True``.

Logging levels
==============
* ``logging.DEBUG`` = 10 -- one line per dispatched event, dropped grid points
* ``logging.INFO`` = 20 -- run start/finish, optimizer sweep summary
* ``logging.WARNING`` = 30
* ``logging.ERROR`` = 40
* ``logging.CRITICAL`` = 50
"""
from __future__ import annotations
import logging
import colorlog

LOGGER_NAME = "pavesim"


class LogConfig:
    """
    Console and file logging settings for the ``pavesim`` logger.

    Creating an instance replaces the handlers installed by any previous
    instance, so the most recent configuration always wins.
    """
    _last_instance = None

    class _LoggingEnabledFilter(logging.Filter):
        def __init__(self, log_instance: LogConfig):
            super().__init__()
            self.log_instance = log_instance

        def filter(self, record):
            return self.log_instance.enabled

    def __init__(self, enabled=False, console_level=logging.INFO, file_level=logging.DEBUG,
                 file_path='pavesim.log'):

        self.enabled = enabled
        """Whether records reach the handlers at all."""

        self._logger = logging.getLogger(LOGGER_NAME)
        self._clear_existing_handlers()

        self._console_level = console_level
        self._file_level = file_level
        self._file_path = file_path

        self._console_handler = logging.StreamHandler()

        # the log file is only opened for an enabled configuration with a path
        self._file_handler = None
        if self.enabled and self._file_path:
            self._file_handler = logging.FileHandler(self._file_path)

        self._configure_logger()
        LogConfig._last_instance = self

    def _clear_existing_handlers(self) -> None:
        """Detach handlers left by an earlier configuration."""
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

    @property
    def logger(self) -> logging.Logger:
        """The configured ``pavesim`` logger."""
        return self._logger

    @property
    def console_level(self) -> int:
        return self._console_level

    @console_level.setter
    def console_level(self, value) -> None:
        """Change the console threshold, e.g. ``logging.DEBUG`` to trace events."""
        self._console_level = value
        self._console_handler.setLevel(value)

    @property
    def file_level(self) -> int:
        return self._file_level

    @file_level.setter
    def file_level(self, value) -> None:
        self._file_level = value
        if self._file_handler:
            self._file_handler.setLevel(value)

    @property
    def file_path(self) -> str | None:
        return self._file_path

    def _configure_logger(self):
        self.logger.setLevel(logging.DEBUG)

        filt = self._LoggingEnabledFilter(self)

        console_handler = self._console_handler
        console_handler.setLevel(self.console_level)
        console_handler.addFilter(filt)
        formatter = colorlog.ColoredFormatter(
            '%(log_color)s%(levelname)s:%(name)s:%(message)s',
            log_colors={
                'DEBUG': 'cyan',
                'INFO': 'white',
                'WARNING': 'yellow',
                'ERROR': 'red',
                'CRITICAL': 'bold_red'
            }
        )
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if self._file_handler:
            file_handler = self._file_handler
            file_handler.setLevel(self.file_level)
            file_handler.setFormatter(logging.Formatter('%(asctime)s:%(levelname)s:%(message)s'))
            file_handler.addFilter(filt)
            self.logger.addHandler(file_handler)

    @classmethod
    def last_instance(cls) -> LogConfig:
        """Return the latest :class:`LogConfig` or create a disabled default."""
        if cls._last_instance is None:
            return LogConfig(enabled=False)
        return cls._last_instance


def log_config() -> LogConfig:
    """Return the current :class:`LogConfig` instance."""
    return LogConfig.last_instance()


logger = logging.getLogger(LOGGER_NAME)
