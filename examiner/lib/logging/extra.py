import inspect
import json
import logging
import string
import textwrap
import typing as t

import pygments
from pygments.formatters import Terminal256Formatter
from pygments.lexers.data import JsonLexer  # pyright: ignore [reportMissingTypeStubs]
from pygments.style import Style

from .json import JSONEncoder
from .style import LogStyle

# attributes every LogRecord carries; anything else arrived through `extra=`
ReservedKeys = frozenset(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {
    "asctime",
    "color_message",
    "message",
    "taskName",
}


class ExtraFormatter(logging.Formatter):
    """
    Delegate to `base` for the log line, then append the record's `extra`
    fields as JSON, highlighted when the handler writes to a terminal
    """

    def __init__(
        self,
        base: type[logging.Formatter],
        format: str | None,
        datefmt: str | None = None,
        indent: bool = True,
        pyg_style: t.Type[Style] = LogStyle,
        style: t.Literal["%", "{", "$"] = "%",
        validate: bool = True,
        *,
        defaults: t.Any = None,
        **kwargs: t.Any,
    ):
        self.base = base(format, datefmt=datefmt, style=style, validate=validate, defaults=defaults, **kwargs)
        self.pyg_style = pyg_style
        self.handler: logging.Handler | None = None
        self.indent = indent

    def format(self, record: logging.LogRecord) -> str:
        if "color_message" in record.__dict__:
            record.msg = record.__dict__.pop("color_message")

        msg = record.getMessage()
        if "\n" in msg:
            # hang continuation lines under the first
            formatted = self.base.format(record)
            idx = formatted.find(msg)
            indent = " " * len([c for c in formatted[:idx] if c in string.printable])
            line, *lines = msg.splitlines()
            body = textwrap.indent("\n".join(lines), prefix=indent)
            record.msg = record.message = f"{line}\n{body}"
            record.args = None
        message = self.base.format(record)

        extra = {k: v for k, v in record.__dict__.items() if k not in ReservedKeys}
        if not extra:
            return message

        if self.handler is None:
            # Handler.format is our caller; dictConfig gives us no other way to reach it
            frame = inspect.currentframe()
            caller = frame.f_back if frame is not None else None
            if caller is not None and isinstance(caller.f_locals.get("self"), logging.Handler):
                self.handler = caller.f_locals["self"]

        js = json.dumps(extra, sort_keys=True, indent=(4 if self.indent else None), cls=JSONEncoder)
        stream = getattr(self.handler, "stream", None)
        do_color = not getattr(self.base, "no_color", False) and stream is not None and stream.isatty()
        if do_color:
            hl = pygments.highlight  # pyright: ignore [reportUnknownMemberType, reportUnknownVariableType]
            ps = hl(js, JsonLexer(), Terminal256Formatter(style=self.pyg_style), None)
        else:
            ps = js
        return message + " " + ps.strip()

    def __getattr__(self, name: str) -> t.Any:
        return getattr(self.base, name)
