"""Process-wide structured logger with console, JSON-file and error sinks."""

from __future__ import annotations

import itertools
import json
import logging
import os
import sys
import traceback
from datetime import datetime
from pathlib import PurePath
from typing import Any, Callable, Mapping, TextIO

LOG_LEVEL_DEBUG = "debug"
LOG_LEVEL_INFO = "info"
LOG_LEVEL_WARN = "warn"
LOG_LEVEL_ERROR = "error"

LOG_TEST_WRITER_NAME = "log_test_writer"
LOG_TEST_TIME = "2006-01-02T15:04:05Z"

FATAL = logging.CRITICAL

log_test_writer: TextIO | None = None
"""Stream used when :func:`init` is given :data:`LOG_TEST_WRITER_NAME`."""

panic_on_invalid_chars = os.environ.get("LOG_PANIC_ON_INVALIDCHARS") == "true"
"""Raise on log lines holding U+FFFD; read by :func:`init`."""


class InvalidCharsError(RuntimeError):
    """A log line contained the Unicode replacement character."""


_LEVELS = {
    LOG_LEVEL_DEBUG: logging.DEBUG,
    LOG_LEVEL_INFO: logging.INFO,
    LOG_LEVEL_WARN: logging.WARNING,
    LOG_LEVEL_ERROR: logging.ERROR,
}
_LEVEL_NAMES = {value: name for name, value in _LEVELS.items()}
_JSON_LEVELS = {**_LEVEL_NAMES, FATAL: "fatal"}
_SHORT = {
    logging.DEBUG: "DBG",
    logging.INFO: "INF",
    logging.WARNING: "WRN",
    logging.ERROR: "ERR",
    FATAL: "FTL",
}
_COLORS = {
    logging.DEBUG: "33",
    logging.INFO: "32",
    logging.WARNING: "31",
    logging.ERROR: "1;31",
    FATAL: "1;31",
}

_logger = logging.getLogger("zvote")
_logger.propagate = False
_open_files: list[TextIO] = []


def _text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    return str(value)


def _caller(record: logging.LogRecord) -> str | None:
    if not getattr(record, "zcaller", True):
        return None
    path = PurePath(record.pathname)
    return f"{path.parent.name}/{path.name}:{record.lineno}"


def _fields(record: logging.LogRecord) -> dict[str, Any]:
    return getattr(record, "zfields", None) or {}


class _ConsoleFormatter(logging.Formatter):
    def __init__(self, color: bool, fixed_time: str | None) -> None:
        super().__init__()
        self._color = color
        self._fixed_time = fixed_time

    def format(self, record: logging.LogRecord) -> str:
        stamp = self._fixed_time or datetime.fromtimestamp(record.created).astimezone().isoformat()
        level = _SHORT.get(record.levelno, "???")
        if self._color:
            level = f"\x1b[{_COLORS.get(record.levelno, '0')}m{level}\x1b[0m"
        parts = [stamp, level]
        caller = _caller(record)
        if caller:
            parts.append(f"{caller} >")
        parts.append(record.getMessage())
        parts.extend(f"{key}={_text(value)}" for key, value in sorted(_fields(record).items()))
        return " ".join(parts)


class _JSONFormatter(logging.Formatter):
    def __init__(self, fixed_time: str | None) -> None:
        super().__init__()
        self._fixed_time = fixed_time

    def format(self, record: logging.LogRecord) -> str:
        doc: dict[str, Any] = {
            "level": _JSON_LEVELS.get(record.levelno, record.levelname.lower()),
            "time": self._fixed_time or int(record.created * 1000),
        }
        caller = _caller(record)
        if caller:
            doc["caller"] = caller
        doc.update(_fields(record))
        doc["message"] = record.getMessage()
        return json.dumps(doc, default=_text)


class _StreamHandler(logging.Handler):
    def __init__(self, stream: Callable[[], TextIO], level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            stream = self._stream()
            stream.write(self.format(record) + "\n")
            stream.flush()
        except Exception:
            self.handleError(record)


class _InvalidCharChecker(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        line = self.format(record)
        if "\ufffd" in line:
            raise InvalidCharsError(f"log line with invalid chars: {line!r}")


def _isatty(stream: TextIO) -> bool:
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


def _open_log_file(path: str) -> TextIO:
    try:
        fd = os.open(path, os.O_CREAT | os.O_APPEND | os.O_WRONLY, 0o600)
    except OSError as err:
        raise RuntimeError(f"cannot create log output: {err}") from err
    return os.fdopen(fd, "a", encoding="utf-8")


def init(level: str, output: str, error_output: TextIO | None = None) -> None:
    """Configure the global logger.

    ``output`` is ``"stdout"``, ``"stderr"``, :data:`LOG_TEST_WRITER_NAME` or a
    file path; paths ending in ``.json`` get JSON lines while the console
    output goes to stdout. ``error_output`` receives warnings and above.
    """
    if level not in _LEVELS:
        raise ValueError(f"invalid log level: {level!r}")
    fixed_time = LOG_TEST_TIME if output == LOG_TEST_WRITER_NAME else None
    handlers: list[logging.Handler] = []
    new_files: list[TextIO] = []

    if output == "stdout":
        console: Callable[[], TextIO] = lambda: sys.stdout
    elif output == "stderr":
        console = lambda: sys.stderr
    elif output == LOG_TEST_WRITER_NAME:
        writer = log_test_writer
        if writer is None:
            raise ValueError("log test writer is not set")
        console = lambda: writer
    else:
        log_file = _open_log_file(output)
        new_files.append(log_file)
        console = lambda: log_file
        if output.endswith(".json"):
            json_handler = _StreamHandler(lambda: log_file)
            json_handler.setFormatter(_JSONFormatter(fixed_time))
            handlers.append(json_handler)
            console = lambda: sys.stdout

    console_handler = _StreamHandler(console)
    console_handler.setFormatter(_ConsoleFormatter(_isatty(console()), fixed_time))
    handlers.append(console_handler)

    if error_output is not None:
        error_handler = _StreamHandler(lambda: error_output, logging.WARNING)
        error_handler.setFormatter(_ConsoleFormatter(False, fixed_time))
        handlers.append(error_handler)

    if panic_on_invalid_chars:
        checker = _InvalidCharChecker()
        checker.setFormatter(_ConsoleFormatter(False, fixed_time))
        handlers.append(checker)

    for old in list(_logger.handlers):
        _logger.removeHandler(old)
    for old_file in _open_files:
        old_file.close()
    _open_files[:] = new_files
    for handler in handlers:
        _logger.addHandler(handler)
    _logger.setLevel(_LEVELS[level])

    _log(logging.INFO, f"logger construction succeeded at level {level} with output {output}")


def logger() -> logging.Logger:
    """Return the underlying global logger."""
    return _logger


def level() -> str:
    """Return the current log level name."""
    name = _LEVEL_NAMES.get(_logger.level)
    if name is None:
        raise ValueError(f"invalid log level: {_logger.level!r}")
    return name


def _log(levelno: int, message: str, fields: Mapping[str, Any] | None = None, *, caller: bool = True) -> None:
    if not _logger.isEnabledFor(levelno):
        return
    _logger.log(
        levelno,
        message,
        stacklevel=3,
        extra={"zfields": dict(fields or {}), "zcaller": caller},
    )


def _sprint(args: tuple[Any, ...]) -> str:
    """Concatenate operands, spacing those where neither side is a string."""
    parts: list[str] = []
    previous_is_str = True
    for position, arg in enumerate(args):
        is_str = isinstance(arg, str)
        if position and not is_str and not previous_is_str:
            parts.append(" ")
        parts.append(str(arg))
        previous_is_str = is_str
    return "".join(parts)


def _format_arg(arg: Any) -> Any:
    if isinstance(arg, (bytes, bytearray)):
        return bytes(arg).decode("utf-8", errors="replace")
    return arg


def _sprintf(template: str, args: tuple[Any, ...]) -> str:
    values = tuple(_format_arg(arg) for arg in args)
    try:
        return template % values
    except (TypeError, ValueError):
        return " ".join([template, *map(str, values)])


def _pairs(keyvalues: tuple[Any, ...]) -> dict[str, Any]:
    items = iter(keyvalues)
    return {str(key): value for key, value in itertools.zip_longest(items, items)}


def _stack() -> str:
    return "".join(traceback.format_stack()[:-2])


def debug(*args: Any) -> None:
    """Log the operands at debug level."""
    _log(logging.DEBUG, _sprint(args))


def info(*args: Any) -> None:
    """Log the operands at info level."""
    _log(logging.INFO, _sprint(args))


def monitor(msg: str, args: Mapping[str, Any]) -> None:
    """Log ``msg`` at info level with ``args`` as fields and no caller."""
    _log(logging.INFO, msg, args, caller=False)


def warn(*args: Any) -> None:
    """Log the operands at warn level."""
    _log(logging.WARNING, _sprint(args))


def error(*args: Any) -> None:
    """Log the operands at error level."""
    _log(logging.ERROR, _sprint(args))


def fatal(*args: Any) -> None:
    """Log the operands with a stack trace, then exit with status 1."""
    _log(FATAL, _sprint(args) + "\n" + _stack())
    raise SystemExit(1)


def debugf(template: str, *args: Any) -> None:
    """Log a %-formatted message at debug level."""
    _log(logging.DEBUG, _sprintf(template, args))


def infof(template: str, *args: Any) -> None:
    """Log a %-formatted message at info level."""
    _log(logging.INFO, _sprintf(template, args))


def warnf(template: str, *args: Any) -> None:
    """Log a %-formatted message at warn level."""
    _log(logging.WARNING, _sprintf(template, args))


def errorf(template: str, *args: Any) -> None:
    """Log a %-formatted message at error level."""
    _log(logging.ERROR, _sprintf(template, args))


def fatalf(template: str, *args: Any) -> None:
    """Log a %-formatted message with a stack trace, then exit with status 1."""
    _log(FATAL, _sprintf(template, args) + "\n" + _stack())
    raise SystemExit(1)


def debugw(msg: str, *args: Any) -> None:
    """Log ``msg`` at debug level with alternating key/value fields."""
    _log(logging.DEBUG, msg, _pairs(args))


def infow(msg: str, *args: Any) -> None:
    """Log ``msg`` at info level with alternating key/value fields."""
    _log(logging.INFO, msg, _pairs(args))


def warnw(msg: str, *args: Any) -> None:
    """Log ``msg`` at warn level with alternating key/value fields."""
    _log(logging.WARNING, msg, _pairs(args))


def errorw(err: BaseException | None, msg: str) -> None:
    """Log ``msg`` at error level with the error attached as a field."""
    _log(logging.ERROR, msg, {} if err is None else {"error": str(err)})


class GooseLogger:
    """Migration-tool logger that reports everything at debug level."""

    def fatal(self, *args: Any) -> None:
        _log(FATAL, _sprint(args) + "\n" + _stack())
        raise SystemExit(1)

    def fatalf(self, format: str, *args: Any) -> None:
        _log(FATAL, _sprintf(format, args) + "\n" + _stack())
        raise SystemExit(1)

    def print(self, *args: Any) -> None:
        _log(logging.DEBUG, _sprint(args))

    def println(self, *args: Any) -> None:
        _log(logging.DEBUG, _sprint(args))

    def printf(self, format: str, *args: Any) -> None:
        _log(logging.DEBUG, _sprintf(format, args))


def goose_logger() -> GooseLogger:
    """Return a migration-tool compatible logger."""
    return GooseLogger()


init(os.environ.get("LOG_LEVEL") or LOG_LEVEL_ERROR, "stderr", None)