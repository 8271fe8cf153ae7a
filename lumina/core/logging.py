"""
Structured logging configuration.

JSON lines for production, readable text for development. Records may
carry a ``run_id`` identifying one analysis run.
"""
import sys
import logging
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from lumina.core.config import get_settings

_STANDARD_ATTRS = frozenset((
    'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
    'levelno', 'lineno', 'module', 'msecs', 'pathname', 'process',
    'processName', 'relativeCreated', 'stack_info', 'thread', 'threadName',
    'exc_info', 'exc_text', 'message', 'run_id', 'taskName',
))


class JSONFormatter(logging.Formatter):
    """
    Structured JSON log formatter.

    Outputs timestamp, level, message, module, run_id and any extra fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "run_id": getattr(record, 'run_id', 'system'),
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith('_'):
                log_data[key] = value

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Readable text formatter for development."""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s - %(name)s - %(levelname)s - [%(run_id)s] - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, 'run_id'):
            record.run_id = 'system'
        return super().format(record)


def configure_logging(log_format: Optional[str] = None, log_level: Optional[str] = None) -> None:
    """
    Configure the ``lumina`` logger.

    Defaults come from settings (LUMINA_LOG_FORMAT / LUMINA_LOG_LEVEL).
    Only the package logger is touched so host applications keep their own
    root configuration.
    """
    settings = get_settings()
    log_format = (log_format or settings.log_format).lower()
    log_level = (log_level or settings.log_level).upper()

    package_logger = logging.getLogger('lumina')
    package_logger.setLevel(getattr(logging, log_level, logging.INFO))

    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    if log_format == 'json':
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(TextFormatter())

    package_logger.addHandler(handler)
    package_logger.propagate = False

    if log_format == 'json':
        package_logger.info("Structured JSON logging enabled")


def run_logger(name: str, run_id: str) -> logging.LoggerAdapter:
    """Logger adapter stamping every record with ``run_id``."""
    return logging.LoggerAdapter(logging.getLogger(name), {'run_id': run_id})
