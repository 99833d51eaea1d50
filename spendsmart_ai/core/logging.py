import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from spendsmart_ai.core.config import Settings, get_settings

PACKAGE_LOGGER = "spendsmart_ai"

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per record, tagged with the service name."""

    def __init__(self, service: Optional[str] = None):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if self.service:
            payload["service"] = self.service

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        # Structured context passed as logger.info(..., extra={"extra_fields": {...}})
        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            payload.update(extra_fields)

        return json.dumps(payload, default=str)


def setup_logging(config: Optional[Settings] = None) -> logging.Logger:
    """Attach a single stdout handler to the package logger; module loggers propagate into it."""
    config = config or get_settings()
    level = getattr(logging, config.LOG_LEVEL.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if config.LOG_FORMAT == "json":
        handler.setFormatter(JSONFormatter(service=config.PROJECT_NAME))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.propagate = False

    logger.debug(f"Logging configured for {config.PROJECT_NAME} {config.VERSION} at {config.LOG_LEVEL}")
    return logger
