"""Logging setup for file-filter runs.

Console output is human-readable by default or one JSON object per line with
``--log-format json``. A log file, when configured, always receives JSON.

Runner messages carry run context (processor, pipeline stage, record counts)
as ``extra`` fields. ``RunLogAdapter`` attaches the processor name to every
message of one run; both formatters render whichever context fields a record
carries.
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, MutableMapping, Optional, Tuple

LOG_FORMATS = ("human", "json", "simple")

# Order in which run context is rendered
CONTEXT_FIELDS = (
    "processor",
    "stage",
    "line_number",
    "total_records",
    "success_records",
    "reject_records",
    "processing_time_ms",
)

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
_LOG_FILE_BACKUPS = 5


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Run context fields present on a log record, in ``CONTEXT_FIELDS`` order."""
    return {name: getattr(record, name) for name in CONTEXT_FIELDS if hasattr(record, name)}


class JSONFormatter(logging.Formatter):
    """One JSON object per record; run context is nested under ``context``."""

    def __init__(self, include_source: bool = False):
        super().__init__()
        self.include_source = include_source

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            "timestamp": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = record_context(record)
        if context:
            payload["context"] = context
        if self.include_source:
            payload["source"] = f"{record.module}.{record.funcName}:{record.lineno}"
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class HumanReadableFormatter(logging.Formatter):
    """``[LEVEL] time - logger - message {k=v ...}`` with optional ANSI colors."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = False):
        super().__init__(fmt="[%(levelname)s] %(asctime)s - %(name)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if context:
            line += " {" + " ".join(f"{key}={value}" for key, value in context.items()) + "}"
        if self.use_colors and record.levelname in self.COLORS:
            return f"{self.COLORS[record.levelname]}{line}{self.RESET}"
        return line


class RunLogAdapter(logging.LoggerAdapter):
    """Adds the run's processor name to every message, merged with per-call ``extra``."""

    def __init__(self, logger: logging.Logger, processor: str):
        super().__init__(logger, {"processor": processor})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


@dataclass
class LogSettings:
    """Resolved logging options; CLI flags win over ``FILTER_LOG_*`` variables."""

    level: int = logging.INFO
    format_type: str = "human"
    log_file: Optional[Path] = None

    @classmethod
    def from_env(
        cls,
        level: Optional[int] = None,
        format_type: Optional[str] = None,
        log_file: Optional[Path] = None,
    ) -> "LogSettings":
        if level is None:
            name = os.environ.get("FILTER_LOG_LEVEL") or os.environ.get("LOG_LEVEL") or "INFO"
            level = _LEVELS.get(name.upper(), logging.INFO)
        if format_type is None:
            format_type = os.environ.get("FILTER_LOG_FORMAT", "human").lower()
        if format_type not in LOG_FORMATS:
            format_type = "human"
        if log_file is None and os.environ.get("FILTER_LOG_FILE"):
            log_file = Path(os.environ["FILTER_LOG_FILE"])
        return cls(level=level, format_type=format_type, log_file=log_file)

    def console_formatter(self, use_colors: bool = False) -> logging.Formatter:
        if self.format_type == "json":
            return JSONFormatter()
        if self.format_type == "simple":
            return logging.Formatter("%(levelname)s: %(message)s")
        return HumanReadableFormatter(use_colors=use_colors)


def setup_logging(
    level: Optional[int] = None,
    format_type: Optional[str] = None,
    log_file: Optional[Path] = None,
    use_colors: bool = False,
) -> LogSettings:
    """Replace the root logger's handlers with a console handler (and a rotating JSON file).

    Returns the settings actually applied after environment defaults.
    """
    settings = LogSettings.from_env(level, format_type, log_file)

    root = logging.getLogger()
    root.setLevel(settings.level)
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(settings.level)
    console.setFormatter(settings.console_formatter(use_colors))
    root.addHandler(console)

    if settings.log_file:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            settings.log_file,
            maxBytes=_LOG_FILE_MAX_BYTES,
            backupCount=_LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
        file_handler.setLevel(settings.level)
        file_handler.setFormatter(JSONFormatter(include_source=True))
        root.addHandler(file_handler)

    return settings
