"""
Structured logging for the quality engine.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Optional
from bill_quality.config import get_config


config = get_config()


class StructuredFormatter(logging.Formatter):
    """Formats log records as structured JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "extra"):
            log_obj.update(record.extra)

        return json.dumps(log_obj, default=str)


def setup_logging(name: str = __name__) -> logging.Logger:
    """Setup and return a configured logger."""
    logger = logging.getLogger(name)
    level = getattr(logging, config.LOG_LEVEL.upper())
    logger.setLevel(level)

    # Modules call this at import time; attach handlers only once
    if logger.handlers:
        return logger

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(config.LOG_FORMAT))
    logger.addHandler(console_handler)

    # File handler with structured JSON
    if config.LOG_FILE:
        file_handler = logging.FileHandler(config.LOG_FILE)
        file_handler.setLevel(level)
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    return logger


def log_stage_action(
    logger: logging.Logger,
    stage_name: str,
    action: str,
    details: Optional[dict] = None,
) -> None:
    """Log a pipeline stage transition with context."""
    extra = {
        "stage": stage_name,
        "action": action,
    }
    if details:
        extra.update(details)

    logger.info(
        f"[{stage_name}] {action}",
        extra={"extra": extra}
    )


def log_quality_issue(
    logger: logging.Logger,
    dimension: str,
    message: str,
    raw_value: float,
) -> None:
    """Log a metric that classified as poor."""
    extra = {
        "type": "quality_issue",
        "dimension": dimension,
        "explanation": message,
        "raw_value": raw_value,
    }
    logger.warning(
        f"Quality issue detected: {dimension} ({message})",
        extra={"extra": extra}
    )
