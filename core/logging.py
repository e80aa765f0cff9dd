# PATH: core/logging.py
"""
Structured logging for the Odos connector.

Contextual fields are passed only via extra={"context": {...}}.
An "error_code" key in the context is lifted to a top-level "code"
field in JSON output so failed quotes and swaps can be filtered on it.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union

# Third-party loggers that chatter at INFO on every request
QUIET_LOGGERS = ("httpx", "httpcore", "web3", "urllib3")


def _record_context(record: logging.LogRecord) -> Dict[str, Any]:
    context = getattr(record, "context", None)
    return context if isinstance(context, dict) else {}


def _json_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bytes):
        return "0x" + value.hex()
    return str(value)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, timestamped from the record itself."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = _record_context(record)
        if "error_code" in context:
            entry["code"] = context["error_code"]
        if context:
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=_json_value)


class ConsoleFormatter(logging.Formatter):
    """Single-line console output with a bounded context suffix."""

    max_context_keys = 4

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)

        context = _record_context(record)
        if not context:
            return line

        shown = list(context.items())[:self.max_context_keys]
        suffix = " ".join(f"{key}={value}" for key, value in shown)
        hidden = len(context) - len(shown)
        if hidden:
            suffix += f" +{hidden}"

        # Keep the traceback (appended by super) below the context
        head, sep, trace = line.partition("\n")
        return f"{head} [{suffix}]{sep}{trace}"


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    json_format: bool = False,
) -> None:
    """
    Route connector logs to stderr and optionally a JSON log file.

    Args:
        level: Logging level (int or name such as "DEBUG")
        log_file: Optional file path; always written as JSON lines
        json_format: Emit JSON on stderr instead of console lines
    """
    stderr = logging.StreamHandler(sys.stderr)
    stderr.setFormatter(StructuredFormatter() if json_format else ConsoleFormatter())
    handlers: list = [stderr]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(StructuredFormatter())
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_error(
    logger: logging.Logger,
    error_code: str,
    message: str,
    **extra: Any,
) -> None:
    """Log an error tagged with its gateway error code."""
    logger.error(
        f"[{error_code}] {message}",
        extra={"context": {"error_code": error_code, **extra}},
    )
