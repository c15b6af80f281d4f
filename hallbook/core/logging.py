"""
Logging Configuration and Utilities

Structured logging for the booking service: stdlib logging with a JSON
formatter, structlog processors carrying the request context, and a small
adapter used by every module through get_logger().
"""

import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import structlog
from pythonjsonlogger import jsonlogger

from hallbook.config.settings import settings

# Context variables for request tracking
request_id: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
profile_id: ContextVar[Optional[str]] = ContextVar('profile_id', default=None)


class RequestContextProcessor:
    """Add request context to structlog event dicts"""

    def __call__(self, logger, method_name, event_dict):
        req_id = request_id.get()
        if req_id:
            event_dict['request_id'] = req_id

        pid = profile_id.get()
        if pid:
            event_dict['profile_id'] = pid

        event_dict['timestamp'] = datetime.now(timezone.utc).isoformat()
        event_dict['service'] = 'hallbook'
        event_dict['environment'] = settings.ENVIRONMENT
        return event_dict


class RequestContextFilter(logging.Filter):
    """Copy the request context onto stdlib log records"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id.get()
        record.profile_id = profile_id.get()
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter for structured logging"""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['module'] = record.module
        log_record['function'] = record.funcName
        log_record['line'] = record.lineno

        if record.exc_info:
            log_record['exception'] = self.formatException(record.exc_info)


class LoggingConfig:
    """Centralized logging configuration"""

    _configured = False

    @staticmethod
    def configure_structured_logging() -> None:
        """Configure structured logging with structlog"""
        processors = [
            RequestContextProcessor(),
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
        ]

        if settings.LOG_FORMAT == "json":
            processors.append(structlog.processors.JSONRenderer())
        else:
            processors.append(structlog.processors.KeyValueRenderer())

        structlog.configure(
            processors=processors,
            wrapper_class=structlog.stdlib.BoundLogger,
            logger_factory=structlog.stdlib.LoggerFactory(),
            context_class=dict,
            cache_logger_on_first_use=True,
        )

    @staticmethod
    def configure_standard_logging() -> None:
        """Configure standard Python logging"""
        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.addFilter(RequestContextFilter())

        if settings.LOG_FORMAT == "json":
            formatter = CustomJsonFormatter('%(asctime)s %(name)s %(levelname)s %(message)s')
        else:
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )

        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        LoggingConfig._configure_library_loggers()

    @staticmethod
    def _configure_library_loggers() -> None:
        """Reduce noise from external libraries"""
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
        logging.getLogger("sqlalchemy.engine").setLevel(
            logging.INFO if settings.DB_ECHO else logging.WARNING
        )
        logging.getLogger("pymongo").setLevel(logging.WARNING)

    @classmethod
    def configure(cls) -> None:
        if cls._configured:
            return
        cls.configure_standard_logging()
        cls.configure_structured_logging()
        cls._configured = True


class LoggerAdapter:
    """Enhanced logger adapter with context management"""

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self._context: Dict[str, Any] = {}

    def add_context(self, **kwargs) -> "LoggerAdapter":
        """Add context to all log messages"""
        self._context.update(kwargs)
        return self

    def _log(self, level: int, message: str, *args, **kwargs) -> None:
        extra = dict(kwargs.get('extra') or {})
        extra.update(self._context)
        kwargs['extra'] = extra
        self.logger.log(level, message, *args, **kwargs)

    def debug(self, message: str, *args, **kwargs) -> None:
        self._log(logging.DEBUG, message, *args, **kwargs)

    def info(self, message: str, *args, **kwargs) -> None:
        self._log(logging.INFO, message, *args, **kwargs)

    def warning(self, message: str, *args, **kwargs) -> None:
        self._log(logging.WARNING, message, *args, **kwargs)

    def error(self, message: str, *args, **kwargs) -> None:
        self._log(logging.ERROR, message, *args, **kwargs)

    def exception(self, message: str, *args, **kwargs) -> None:
        kwargs.setdefault('exc_info', True)
        self._log(logging.ERROR, message, *args, **kwargs)

    def critical(self, message: str, *args, **kwargs) -> None:
        self._log(logging.CRITICAL, message, *args, **kwargs)


def get_logger(name: Optional[str] = None) -> LoggerAdapter:
    """
    Get configured logger instance.

    Args:
        name: Logger name (defaults to the hallbook root logger)

    Returns:
        Enhanced logger adapter
    """
    return LoggerAdapter(logging.getLogger(name or 'hallbook'))


def get_struct_logger(name: Optional[str] = None):
    """structlog logger bound to the stdlib logger of the same name"""
    return structlog.get_logger(name or 'hallbook')


__all__ = [
    'request_id',
    'profile_id',
    'LoggingConfig',
    'LoggerAdapter',
    'get_logger',
    'get_struct_logger',
]
