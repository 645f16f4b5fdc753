"""
Logging setup for the billing API. Call setup_logging() once at startup.
"""

import logging.config
import os

from pythonjsonlogger import jsonlogger


def build_logging_config(level: str = "INFO", fmt: str = "standard") -> dict:
    if fmt not in ("standard", "json"):
        fmt = "standard"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            },
            "json": {
                "()": jsonlogger.JsonFormatter,
                "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": fmt,
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "isp_billing": {
                "handlers": ["console"],
                "level": level.upper(),
                "propagate": False,
            },
            "uvicorn.access": {"level": "WARNING"},
        },
    }


def setup_logging() -> None:
    level = os.getenv("LOG_LEVEL", "INFO")
    fmt = os.getenv("LOG_FORMAT", "standard").lower()
    logging.config.dictConfig(build_logging_config(level, fmt))
