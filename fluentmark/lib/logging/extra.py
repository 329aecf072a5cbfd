import inspect
import logging
import typing as t

import colorlog
import pygments
from pygments.formatters import Terminal256Formatter
from pygments.lexers.data import JsonLexer  # pyright: ignore [reportMissingTypeStubs]

from fluentmark.lib import json
from fluentmark.lib.json import JSONValue

# attributes every LogRecord carries; anything else arrived through ``extra=``
ReservedKeys = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)


class ExtraJSONEncoder(json.JSONEncoder):
    def default(self, o: t.Any) -> JSONValue:
        try:
            return super().default(o)
        except TypeError:
            return repr(o)


class ExtraFormatter(logging.Formatter):
    """Wraps a ``base`` formatter and appends the record's ``extra=`` fields as JSON.

    The JSON is highlighted with pygments when the emitting handler writes to a
    terminal and ``no_color`` is unset.
    """

    def __init__(
        self,
        base: type[logging.Formatter],
        fmt: str | None = None,
        datefmt: str | None = None,
        indent: bool = False,
        no_color: bool = False,
        pyg_style: str = "monokai",
        style: t.Literal["%", "{", "$"] = "%",
        **kwargs: t.Any,
    ):
        super().__init__(fmt, datefmt=datefmt, style=style)
        options = {k: v for k, v in kwargs.items() if v is not None}
        if issubclass(base, colorlog.ColoredFormatter):
            options["no_color"] = no_color
        self.base = base(fmt, datefmt=datefmt, style=style, **options)
        self.indent = indent
        self.no_color = no_color
        self.pyg_style = pyg_style

    def format(self, record: logging.LogRecord) -> str:
        message = self.base.format(record)

        d = record.__dict__
        extra = {k: d[k] for k in sorted(d.keys() - ReservedKeys)}
        if not extra:
            return message

        js = json.dumps(extra, cls=ExtraJSONEncoder, sort_keys=True, indent=(4 if self.indent else None))
        if self._colorize():
            hl = pygments.highlight  # pyright: ignore [reportUnknownMemberType, reportUnknownVariableType]
            js = hl(js, JsonLexer(), Terminal256Formatter(style=self.pyg_style), None)
        return message + " " + js.strip()

    def _colorize(self) -> bool:
        if self.no_color:
            return False

        # the emitting handler is only known at format time: Handler.format calls us
        frame = inspect.currentframe()
        caller = frame.f_back.f_back if frame is not None and frame.f_back is not None else None
        handler = caller.f_locals.get("self") if caller is not None else None
        stream = getattr(handler, "stream", None)
        isatty = getattr(stream, "isatty", None)
        return bool(isatty is not None and isatty())

    def __getattr__(self, name: str) -> t.Any:
        if name == "base":
            raise AttributeError(name)
        return getattr(self.base, name)
