"""Structured logging setup shared by the API and the scripts."""

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

ROOT_LOGGER = "warranty_tracker"


class ServiceJsonFormatter(JsonFormatter):
    """JSON formatter that always carries timestamp, level and logger name."""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)
        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name


def configure_logging(level: str = "INFO", format_type: str = "json") -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if format_type == "json":
        handler.setFormatter(
            ServiceJsonFormatter(
                fmt="%(timestamp)s %(level)s %(logger)s %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    logger.addHandler(handler)
    logger.propagate = False
    return logger
