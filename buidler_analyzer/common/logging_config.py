"""
Logging setup for the analyzer service.

Environment variables:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL
- LOG_FORMAT: text or json
- LOG_FILE: optional log file path (always written as JSON)

Errors logged through BaseError.log() carry `kind`, `http_status` and a
`context` dict (upstream url, status_code, cause). Both formatters surface
those fields so upstream faults can be searched without the response body,
which never includes them.
"""
import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

SERVICE_NAME = "buidler-analyzer"

# Fields BaseError.log() attaches through `extra`
ERROR_FIELDS = ("kind", "http_status")
CONTEXT_FIELD = "context"

_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """User supplied `extra` fields, with `context` flattened to top level."""
    fields: Dict[str, Any] = {}
    for key, value in record.__dict__.items():
        if key in _RECORD_ATTRS:
            continue
        if key == CONTEXT_FIELD and isinstance(value, dict):
            for ctx_key, ctx_value in value.items():
                if ctx_value is not None:
                    fields.setdefault(ctx_key, ctx_value)
            continue
        fields[key] = value
    return fields


class JsonFormatter(logging.Formatter):
    """One JSON object per line; upstream error context at top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in _extra_fields(record).items():
            entry.setdefault(key, value)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Coloured single-line output; errors get a `[kind status url]` suffix."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True):
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")
        self.use_color = use_color

    def _error_suffix(self, record: logging.LogRecord) -> str:
        kind = getattr(record, "kind", None)
        if kind is None:
            return ""
        context = getattr(record, CONTEXT_FIELD, None) or {}
        parts = [str(kind)]
        if context.get("status_code") is not None:
            parts.append(f"status={context['status_code']}")
        if context.get("url"):
            parts.append(f"url={context['url']}")
        return f" [{' '.join(parts)}]"

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:8}"
        if self.use_color:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"

        line = (
            f"{self.formatTime(record, self.datefmt)} | {level} | "
            f"{record.name} | {record.getMessage()}{self._error_suffix(record)}"
        )
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def get_formatter(format_type: str) -> logging.Formatter:
    if format_type.lower() == "json":
        return JsonFormatter()
    return TextFormatter(use_color=sys.stdout.isatty())


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_format: Optional[str] = None
) -> None:
    """
    Configure the root logger for the service and uvicorn.

    Parameters take precedence over environment variables.
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_file = log_file or os.getenv("LOG_FILE")
    log_format = log_format or os.getenv("LOG_FORMAT", "text")

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(get_formatter(log_format))
    handlers: List[logging.Handler] = [console]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(JsonFormatter())
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        handlers=handlers,
        force=True
    )

    # uvicorn installs its own handlers; route its records through ours
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = []
        uvicorn_logger.propagate = True

    for name in ("urllib3", "httpx"):
        logging.getLogger(name).setLevel(logging.WARNING)
