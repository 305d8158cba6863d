"""Structured logging configuration for TeamBuilder.

Team assignment logs carry the company, user and team they concern. Pass them
with ``extra=log_context(...)``: JSON output gets them as top-level keys,
console output appends them in brackets.
"""

import json
import logging
import sys
from datetime import UTC, datetime

CONTEXT_FIELDS = ("company_id", "user_id", "team_number", "request_id")

# Level per third-party logger; None means "INFO in development, WARNING elsewhere"
_QUIET_LOGGERS: dict[str, int | None] = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": None,
    "sqlalchemy.pool": logging.WARNING,
    "asyncpg": logging.WARNING,
    "aiosqlite": logging.WARNING,
    "alembic": logging.INFO,
}


def log_context(**fields) -> dict:
    """Build an ``extra`` dict from the known context fields, skipping empty ones."""
    unknown = set(fields) - set(CONTEXT_FIELDS)
    if unknown:
        raise ValueError(f"Unknown log context fields: {sorted(unknown)}")
    return {
        key: value if isinstance(value, int) else str(value)
        for key, value in fields.items()
        if value is not None
    }


def _context_of(record: logging.LogRecord) -> dict:
    return {key: getattr(record, key) for key in CONTEXT_FIELDS if hasattr(record, key)}


class JSONFormatter(logging.Formatter):
    """JSON log formatter for production environments."""

    def __init__(self, app_env: str = "production"):
        super().__init__()
        self.app_env = app_env

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "env": self.app_env,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        log_entry.update(_context_of(record))

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable lines, with any team context appended."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)-8s [%(name)s] %(message)s", datefmt="%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context_of(record)
        if context:
            line += " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]"
        return line


def setup_logging(app_env: str = "development", log_level: str = "INFO") -> None:
    """Configure root logger based on environment."""
    root = logging.getLogger()
    root.setLevel(log_level)

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    if app_env == "production":
        handler.setFormatter(JSONFormatter(app_env))
    else:
        handler.setFormatter(ConsoleFormatter())
    root.addHandler(handler)

    verbose = logging.INFO if app_env == "development" else logging.WARNING
    for name, level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(verbose if level is None else level)
