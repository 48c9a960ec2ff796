"""Tagged, single-line log output for every Veronica package.

A line reads ``<utc time> | <level> | <tag> | <message> | <json data>``.
The FinMind token never reaches the output: JSON fields with secret-looking
names and ``token=`` query parameters are masked.

Usage:
    from veronica.common.logging import get_logger
    logger = get_logger("DECISION")
    logger.info("Stocks selected", extra={"data": {"date": "2021-06-01", "count": 3}})
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import UTC, datetime

MODULE_TAGS = {
    "STORAGE",
    "INDICATOR",
    "STRATEGY",
    "DECISION",
    "BACKTEST",
    "CRAWLER",
    "INGEST",
    "SYSTEM",
    "TEST",
}

_SECRET_FIELD = re.compile(
    r'"([^"]*(?:secret|password|token|private|pem|credential)[^"]*)":\s*"([^"]*)"',
    re.IGNORECASE,
)
_SECRET_PARAM = re.compile(r"(token=)[^&\s\"]+", re.IGNORECASE)

_REDACTED = "[REDACTED]"


def _redact_secrets(text: str) -> str:
    text = _SECRET_FIELD.sub(rf'"\1": "{_REDACTED}"', text)
    return _SECRET_PARAM.sub(rf"\1{_REDACTED}", text)


def _render_data(data: object) -> str:
    try:
        return _redact_secrets(json.dumps(data, default=str))
    except (TypeError, ValueError):
        return str(data)


class StructuredFormatter(logging.Formatter):
    """Render a record as pipe-separated fields, structured data last."""

    def format(self, record: logging.LogRecord) -> str:
        fields = [
            datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ"),
            record.levelname,
            getattr(record, "module_tag", "SYSTEM"),
            _redact_secrets(record.getMessage()),
        ]
        data = getattr(record, "data", None)
        if data is not None:
            fields.append(_render_data(data))
        return " | ".join(fields)


class ModuleTagLogger(logging.LoggerAdapter):
    """Stamps every record with the adapter's module tag."""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        extra = kwargs.setdefault("extra", {})
        extra["module_tag"] = self.extra.get("module_tag", "SYSTEM")
        return msg, kwargs


_loggers: dict[str, ModuleTagLogger] = {}


def get_logger(module_tag: str) -> ModuleTagLogger:
    """Return the logger for `module_tag`, creating it on first use.

    Each tag owns a ``veronica.<tag>`` logger writing to stdout; it does not
    propagate to the root logger.
    """
    adapter = _loggers.get(module_tag)
    if adapter is not None:
        return adapter

    logger = logging.getLogger(f"veronica.{module_tag.lower()}")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

    adapter = ModuleTagLogger(logger, {"module_tag": module_tag})
    _loggers[module_tag] = adapter
    return adapter


def configure_logging(level: str) -> None:
    """Apply a log level (e.g. "INFO") to every tagged logger.

    Raises:
        ValueError: If the level name is unknown to the logging module.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        msg = f"Unknown log level: {level}"
        raise ValueError(msg)

    for tag in MODULE_TAGS:
        get_logger(tag).logger.setLevel(numeric)
