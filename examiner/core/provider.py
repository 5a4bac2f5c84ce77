import datetime
import inspect
import logging.config
import typing as t

from .logging import TRACE, TraceLogLevelLogger

# the clock sessions and reviews are stamped with; tests substitute a fixed one
TimestampProvider = t.Callable[..., datetime.datetime]


class LoggingProvider(object):
    """Configures logging once from the `logging` settings section

    TRACE (5) is registered below DEBUG before the configuration is applied,
    so `config/logging.yaml` may name it as a level.
    """

    def __init__(self, config: dict[str, t.Any], debug: bool):
        logging.setLoggerClass(TraceLogLevelLogger)
        logging.addLevelName(TRACE, "TRACE")
        logging.config.dictConfig(config)
        self.capture_warnings(debug)

    @staticmethod
    def get_logger(name: str | None = None) -> TraceLogLevelLogger:
        """The named logger, or the calling module's"""
        if name is None:
            name = inspect.stack()[1].frame.f_globals["__name__"]
        return t.cast(TraceLogLevelLogger, logging.getLogger(name))

    @staticmethod
    def capture_warnings(capture: bool):
        logging.captureWarnings(capture)
