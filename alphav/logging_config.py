import json
import logging
import os
import re
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_APIKEY_QUERY_RE = re.compile(r"(apikey=)([^&\s]+)", re.IGNORECASE)

_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Loggers of the HTTP stacks; they are chatty at DEBUG and echo request URLs.
_TRANSPORT_LOGGERS = ("httpx", "httpcore", "aiohttp")


class JsonFormatter(logging.Formatter):
    """
    Formatter that outputs one JSON object per record.

    ``record.context`` (set by :func:`log_event`) is merged into the object.
    The message and any traceback are passed through :func:`redact`, so an
    ``apikey=`` query parameter echoed by a third-party logger is masked too.
    """
    def format(self, record: logging.LogRecord) -> str:
        log_record: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": redact(record.getMessage()),
            "module": record.module,
            "funcName": record.funcName,
            "line": record.lineno,
            "logger": record.name,
        }

        context = getattr(record, "context", None)
        if isinstance(context, dict):
            log_record.update(context)

        if record.exc_info:
            log_record["exception"] = redact(self.formatException(record.exc_info))

        return json.dumps(log_record, default=str)


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> logging.Logger:
    """
    Opt-in handler setup for applications using the client.

    ``level`` and ``fmt`` override the environment:
    ENV: LOG_FORMAT (JSON | TEXT) - Defaults to TEXT
    ENV: LOG_LEVEL (DEBUG | INFO | WARNING | ERROR) - Defaults to INFO

    Only the first call installs a handler on the root logger; later calls
    return it unchanged.
    """
    logger = logging.getLogger()

    # idempotent configuration
    if logger.handlers:
        return logger

    log_format = (fmt or os.environ.get("LOG_FORMAT", "TEXT")).upper()
    log_level_str = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()

    resolved = getattr(logging, log_level_str, logging.INFO)
    logger.setLevel(resolved)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(resolved)
    if log_format == "JSON":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)

    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))

    return logger


def redact(text: str, api_key: Optional[str] = None) -> str:
    out = text
    if api_key:
        out = out.replace(api_key, "[REDACTED]")
    return _APIKEY_QUERY_RE.sub(r"\1[REDACTED]", out)


def log_event(
    logger: logging.Logger,
    level: int,
    message: str,
    *,
    api_key: Optional[str] = None,
    **context: Any,
) -> None:
    """Log ``message`` with ``context`` attached as ``record.context``.

    String values are scrubbed of the API key before they reach a handler.
    """
    if not logger.isEnabledFor(level):
        return

    def sanitize(value: Any) -> Any:
        if value is None or isinstance(value, (bool, int, float)):
            return value
        if isinstance(value, str):
            return redact(value, api_key)
        if isinstance(value, (list, tuple)):
            return [sanitize(v) for v in value]
        if isinstance(value, dict):
            return {k: sanitize(v) for k, v in value.items() if str(k).lower() != "apikey"}
        return redact(str(value), api_key)

    safe_context = {k: sanitize(v) for k, v in context.items() if v is not None}
    logger.log(level, message, extra={"context": safe_context})
