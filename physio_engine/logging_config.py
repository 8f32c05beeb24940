"""Process-wide logging setup for the API, scripts and tests."""
from __future__ import annotations

from logging.config import dictConfig
from pathlib import Path

from pydantic import ValidationError

from physio_engine.config import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_FILENAME = "physio_engine.log"

# Chatty at INFO; only raised to the root level when debugging.
_QUIET_LOGGERS = ("sqlalchemy.engine", "alembic.runtime.migration", "httpx", "uvicorn.access")

_configured = False


def _handler(handler_class: str, level: str, **options) -> dict:
    return {"class": handler_class, "formatter": "standard", "level": level, **options}


def build_logging_config(log_dir: Path, level: str) -> dict:
    """dictConfig payload writing to stderr and ``<log_dir>/physio_engine.log``."""

    library_level = level if level == "DEBUG" else "WARNING"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"standard": {"format": LOG_FORMAT}},
        "handlers": {
            "console": _handler("logging.StreamHandler", level),
            "file": _handler(
                "logging.handlers.RotatingFileHandler",
                level,
                filename=str(log_dir / LOG_FILENAME),
                maxBytes=5 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            ),
        },
        "loggers": {name: {"level": library_level} for name in _QUIET_LOGGERS},
        "root": {"level": level, "handlers": ["console", "file"]},
    }


def configure_logging(level: str | None = None) -> None:
    """Apply the logging config once; ``level`` overrides ``LOG_LEVEL``."""

    global _configured
    if _configured:
        return

    try:
        settings = get_settings()
        log_dir, configured_level = settings.log_dir, settings.log_level
    except ValidationError:
        # Invalid environment: keep logging to the default location so the error is visible.
        log_dir, configured_level = Path("logs"), "INFO"
    log_dir.mkdir(parents=True, exist_ok=True)

    dictConfig(build_logging_config(log_dir, (level or configured_level).upper()))
    _configured = True
