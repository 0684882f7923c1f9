"""
Process logging for the blog API.

Every record is stamped with the id of the request being served (``-``
outside a request). Application records go to the console and to
``logging.file_name``; the one-line-per-request access log goes to
``logging.access_file_name`` and does not propagate to the root logger.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from logging.config import dictConfig
from typing import Any

from .config import Settings

ACCESS_LOGGER_NAME = "blog_api.access"
ACCESS_FORMAT = "%(asctime)s | %(message)s [%(request_id)s]"
NO_REQUEST_ID = "-"

request_id_var: ContextVar[str] = ContextVar("request_id", default=NO_REQUEST_ID)

_configured = False


class RequestIdFilter(logging.Filter):
    """Stamp records with the current request id unless one was passed via ``extra``."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()
        return True


def resolve_log_level(level_name: str) -> int:
    numeric_level = logging.getLevelName(level_name.upper())
    if isinstance(numeric_level, int):
        return numeric_level
    raise ValueError(f"Unsupported log level: {level_name}")


def _rotating_file(settings: Settings, file_name: str, formatter: str) -> dict[str, Any]:
    log_settings = settings.logging
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": formatter,
        "filters": ["request_id"],
        "filename": str(log_settings.directory / file_name),
        "encoding": "utf-8",
        "maxBytes": log_settings.max_bytes,
        "backupCount": log_settings.backup_count,
    }


def build_logging_config(settings: Settings) -> dict[str, Any]:
    """Return the ``dictConfig`` payload for application and access logs."""
    log_settings = settings.logging
    level = resolve_log_level(log_settings.level)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"request_id": {"()": RequestIdFilter}},
        "formatters": {
            "app": {"format": log_settings.format},
            "access": {"format": ACCESS_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "app",
                "filters": ["request_id"],
            },
            "file": _rotating_file(settings, log_settings.file_name, "app"),
            "access_file": _rotating_file(settings, log_settings.access_file_name, "access"),
        },
        "loggers": {
            ACCESS_LOGGER_NAME: {
                "level": logging.INFO,
                "handlers": ["access_file"],
                "propagate": False,
            },
            # SQL echo is controlled by the engine, not by the root level.
            "sqlalchemy.engine": {
                "level": logging.INFO if settings.database.echo else logging.WARNING,
            },
        },
        "root": {"level": level, "handlers": ["console", "file"]},
    }


def setup_logging(settings: Settings) -> None:
    """Apply :func:`build_logging_config` once per process."""
    global _configured

    if _configured:
        return

    settings.logging.directory.mkdir(parents=True, exist_ok=True)
    dictConfig(build_logging_config(settings))
    _configured = True


__all__ = [
    "ACCESS_LOGGER_NAME",
    "RequestIdFilter",
    "build_logging_config",
    "request_id_var",
    "resolve_log_level",
    "setup_logging",
]
