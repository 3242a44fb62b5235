"""
Logging configuration with JSON formatter for structured logging.

Every record carries the restaurant it was written for (id and timezone) and,
while an availability request is being answered, the requested date and
party size.
"""
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator
from pythonjsonlogger import jsonlogger
from core.settings import settings


_request_context: ContextVar[Dict[str, Any]] = ContextVar("availability_request", default={})


@contextmanager
def request_log_context(**fields: Any) -> Iterator[Dict[str, Any]]:
    """
    Attach request fields to every record logged inside the block.

    Example:
        with request_log_context(request_date="2030-01-07", party_size=4):
            logger.info("Resolving hours")
    """
    merged = {**_request_context.get(), **fields}
    token = _request_context.set(merged)
    try:
        yield merged
    finally:
        _request_context.reset(token)


class RequestContextFilter(logging.Filter):
    """Copy the active request fields onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _request_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with restaurant fields."""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any]
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = self.formatTime(record, self.datefmt)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['function'] = record.funcName
        log_record['line'] = record.lineno

        log_record['app_name'] = settings.app_name
        log_record['environment'] = settings.app_env
        log_record['restaurant_timezone'] = settings.restaurant_timezone
        if settings.restaurant_id:
            log_record['restaurant_id'] = settings.restaurant_id

        if record.exc_info:
            log_record['exc_info'] = self.formatException(record.exc_info)


def build_formatter(use_json: bool) -> logging.Formatter:
    """JSON for staging/production, one readable line per record otherwise."""
    if use_json:
        return CustomJsonFormatter(
            fmt='%(timestamp)s %(level)s %(name)s %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    return logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def setup_logging() -> None:
    """
    Configure application logging.

    Structured JSON logging for staging/production, human-readable
    logging for development.
    """
    use_json = settings.app_env in ["production", "staging"]

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(build_formatter(use_json))
    console_handler.addFilter(RequestContextFilter())
    root_logger.addHandler(console_handler)

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    if settings.is_development and settings.db_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    logging.info(
        "Logging configured",
        extra={
            "log_level": settings.log_level,
            "environment": settings.app_env,
            "restaurant_timezone": settings.restaurant_timezone,
            "json_logging": use_json
        }
    )
