"""Structured logging for billing runs.

Events go to stderr (and optionally a file) either as one ``key=value``
line each, for Splunk indexing, or as one JSON object per line. The report
month leads every key=value line that carries one so a run can be grepped
by month.
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

from .config import Config, LoggingConfig

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

# Above CRITICAL, so nothing is emitted
SILENT = logging.CRITICAL + 1

LEADING_KEYS = ("month",)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_value(value: Any) -> str:
    """Render one value for a key=value line.

    Lists are joined with commas. Empty values and values containing
    whitespace, quotes or ``=`` are double-quoted.
    """
    if isinstance(value, (list, tuple, set)):
        value = ",".join(str(v) for v in value)
    text = str(value)
    if not text or any(c.isspace() or c in '"=' for c in text):
        escaped = text.replace('"', '\\"')
        return f'"{escaped}"'
    return text


def render_key_value(logger: Any, method_name: str, event_dict: dict[str, Any]) -> str:
    """Render an event as ``<timestamp> <LEVEL> <event> key=value ...``."""
    level = str(event_dict.pop("level", method_name)).upper()
    event = event_dict.pop("event", "")

    fields = {k: v for k, v in event_dict.items() if not k.startswith("_")}
    keys = [k for k in LEADING_KEYS if k in fields]
    keys += sorted(k for k in fields if k not in LEADING_KEYS)

    line = f"{utc_timestamp()} {level:5} {event}"
    pairs = " ".join(f"{k}={format_value(fields[k])}" for k in keys)
    return f"{line} {pairs}" if pairs else line


def add_json_fields(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Stamp a JSON event with an ISO timestamp and an upper-case level."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    event_dict["level"] = str(event_dict.get("level", method_name)).upper()
    return event_dict


def build_processors(fmt: str) -> list[Any]:
    """Processor chain for the ``splunk`` or ``json`` output format."""
    processors: list[Any] = [structlog.stdlib.add_log_level, structlog.stdlib.add_logger_name]
    if fmt == "json":
        # ReportMonth and dates serialize as their string form
        processors += [add_json_fields, structlog.processors.JSONRenderer(default=str)]
    else:
        processors.append(render_key_value)
    return processors


def build_handlers(settings: LoggingConfig) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.file:
        settings.file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.file))
    return handlers


def configure_logging(config: Config) -> None:
    """Route structlog events through stdlib logging per ``config.logging``.

    Safe to call more than once; each call replaces the root handlers.
    """
    settings = config.logging
    level = LEVELS.get(settings.level, logging.INFO) if settings.enabled else SILENT

    logging.basicConfig(
        format="%(message)s",
        level=level,
        handlers=build_handlers(settings),
        force=True,
    )

    structlog.configure(
        processors=build_processors(settings.format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None, **context: Any) -> structlog.stdlib.BoundLogger:
    """Get a logger, optionally pre-bound with context fields.

    The logger is resolved lazily, so module-level loggers pick up
    whatever ``configure_logging`` sets later.
    """
    return structlog.get_logger(name, **context)
