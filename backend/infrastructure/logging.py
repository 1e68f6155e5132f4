"""
Structured logging configuration.
Outputs JSON logs for production, human-readable for development.

Every record emitted while a request is being served carries that request's
id (see config.api.middleware.RequestIdMiddleware).
"""
from contextvars import ContextVar
from typing import Any, Dict, Optional
import json
import logging
import sys

_request_id: ContextVar[Optional[str]] = ContextVar('request_id', default=None)

_RESERVED = frozenset((
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'exc_info', 'exc_text', 'thread', 'threadName',
    'taskName', 'message', 'request_id',
))


def bind_request_id(request_id: Optional[str]):
    """Bind request id to the current context. Returns a reset token."""
    return _request_id.set(request_id)


def reset_request_id(token) -> None:
    _request_id.reset(token)


def current_request_id() -> Optional[str]:
    return _request_id.get()


class RequestContextFilter(logging.Filter):
    """Attach the bound request id to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, 'request_id'):
            record.request_id = _request_id.get()
        return True


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value for key, value in record.__dict__.items()
        if key not in _RESERVED and not key.startswith('_')
    }


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        if getattr(record, 'request_id', None):
            log_data['request_id'] = record.request_id

        log_data.update(_extra_fields(record))

        return json.dumps(log_data, ensure_ascii=False, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Human-readable formatter for development."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, '')

        parts = [
            f"{color}{record.levelname:8}{self.RESET}",
            f"[{record.name}]",
            record.getMessage()
        ]

        request_id = getattr(record, 'request_id', None)
        if request_id:
            parts.insert(1, f"<{request_id}>")

        extra_fields = [f"{key}={value}" for key, value in _extra_fields(record).items()]
        if extra_fields:
            parts.append(f"({', '.join(extra_fields)})")

        message = ' '.join(parts)
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


def configure_logging(is_production: bool = False, level: str = 'INFO'):
    """
    Configure logging for the application.

    Args:
        is_production: Use JSON formatter if True, otherwise colored output
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())

    if is_production:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(DevelopmentFormatter())

    root_logger.addHandler(handler)

    logging.getLogger('pika').setLevel(logging.WARNING)
    logging.getLogger('redis').setLevel(logging.WARNING)
