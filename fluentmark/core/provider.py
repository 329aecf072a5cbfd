import datetime
import inspect
import logging.config
import typing as t

from .logging import install_trace_level, TraceLogLevelLogger

TimestampProvider = t.Callable[..., datetime.datetime]


class LoggingProvider(object):
    """Applies the ``logging`` settings section and hands out loggers."""

    def __init__(self, config: dict[str, t.Any], debug: bool):
        install_trace_level()
        logging.config.dictConfig(config)
        # surface warnings.warn() through logging when debugging
        logging.captureWarnings(debug)

    def get_logger(self, name: str | None = None) -> TraceLogLevelLogger:
        """Return the named logger, or the logger of the calling module."""
        if name is None:
            caller = inspect.currentframe()
            name = caller.f_back.f_globals["__name__"] if caller and caller.f_back else "fluentmark"
        return t.cast(TraceLogLevelLogger, logging.getLogger(name))
