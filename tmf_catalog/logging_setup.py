"""Central logging configuration for the catalog service.

Installs a single stdout handler on the root logger so every module logger
(``logging.getLogger(__name__)``) emits without per-module setup. The level is
taken from ``LOG_LEVEL`` and uvicorn loggers are routed through the same
handler.
"""
from __future__ import annotations
import logging
import os
from logging.config import dictConfig


def _build_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            "uvicorn": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": "WARNING", "handlers": ["console"], "propagate": False},
            "sqlalchemy.engine": {"level": "WARNING"},
        },
    }


def configure_logging(level: str | None = None) -> None:
    """Configure application-wide logging once.

    Returns early when the root logger already has handlers (reloaders,
    pytest's capture plugin) to avoid duplicate output.
    """
    root = logging.getLogger()
    if root.handlers:
        return
    resolved = (level or os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    if resolved not in logging.getLevelNamesMapping():
        resolved = "INFO"
    dictConfig(_build_config(resolved))


__all__ = ["configure_logging"]
