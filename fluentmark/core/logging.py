import logging
import typing as t

TRACE = 5


class TraceLogLevelLogger(logging.Logger):
    def trace(self, message: str, *args: t.Any, **kwargs: t.Any):
        if self.isEnabledFor(TRACE):
            self._log(TRACE, message, args, **kwargs)


def install_trace_level() -> None:
    """Register TRACE (5) below DEBUG and make loggers created from now on able to emit it.

    Module-level loggers created at import time predate this; they log at
    TRACE with ``logger.log(TRACE, ...)``.
    """
    logging.setLoggerClass(TraceLogLevelLogger)
    logging.addLevelName(TRACE, "TRACE")
