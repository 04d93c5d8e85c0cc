"""Logging configuration for amort-calc.

Log output goes to stderr so the schedule tables the CLI prints on stdout
stay clean. Records may carry schedule context passed through ``extra=``
(see ``CONTEXT_FIELDS``); the JSON formatter lifts it into the payload.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

PROJECT_LOGGERS = ("amort_calc", "amort_calc_web")
QUIET_LOGGERS = ("werkzeug", "reportlab", "PIL")

# attributes set by amort_calc via ``extra=``
CONTEXT_FIELDS = ("export_format", "rows", "nominal_periods")


def setup_logging(level: str = "INFO", format_type: str = "standard") -> None:
    """Configure the root logger and the amort-calc loggers.

    Parameters
    ----------
    level : str
        Log level name; unknown names fall back to INFO.
    format_type : str
        ``"standard"`` for pipe-separated text, ``"json"`` for one JSON
        object per line.
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(log_level)

    for name in PROJECT_LOGGERS:
        logging.getLogger(name).setLevel(log_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


class JsonFormatter(logging.Formatter):
    """One JSON object per record, including any schedule context."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
