"""
Main logger for HTTP Dispatch.
"""

import logging
import weakref
from typing import Optional, Any

from .config import LoggingConfig, LogLevel
from .filters import CorrelationIdFilter, ExtraFieldsFilter
from .handlers import build_handlers
from ...utils.sanitizer import mask_sensitive_data

DEFAULT_LOGGER_NAME = "http_dispatch"

# Handlers, созданные DispatchLogger; в close() чужим логгером не восстанавливаются
_OWNED_HANDLERS = weakref.WeakSet()


class DispatchLogger:
    """
    Structured logger used by the dispatcher, router and transports.

    Keyword arguments passed to the log methods become extra fields on the
    record. Sensitive fields (passwords, tokens, Authorization headers) are
    masked before they reach any handler.

    Without a config the logger is passive: it attaches no handlers and
    leaves level and propagation alone, so records flow into whatever the
    application configured for ``logging.getLogger("http_dispatch")``.
    With a config it owns its handlers (console and/or rotating file).

    Example:
        >>> config = LoggingConfig.create(level="DEBUG", format="json")
        >>> with DispatchLogger(config) as logger:
        ...     logger.info("Request dispatched", method="GET", url="https://api.com")
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: str = DEFAULT_LOGGER_NAME):
        self.config = config
        self.name = name
        self._closed = False
        self._handlers = []
        self._logger = logging.getLogger(name)

        if config is None:
            return

        previous = [h for h in self._logger.handlers if h not in _OWNED_HANDLERS]
        self._saved_state = (self._logger.level, self._logger.propagate, previous)

        level = self._get_level(config.level)
        self._logger.setLevel(level)
        self._logger.propagate = False  # Don't propagate to root logger

        # Прежние handlers (NullHandler пакета и т.п.) вернутся в close()
        self._logger.handlers.clear()

        filters = []
        if config.enable_correlation_id:
            filters.append(CorrelationIdFilter())
        if config.extra_fields:
            filters.append(ExtraFieldsFilter(config.extra_fields))

        for handler in build_handlers(config, filters):
            _OWNED_HANDLERS.add(handler)
            self._handlers.append(handler)
            self._logger.addHandler(handler)

    @property
    def owns_handlers(self) -> bool:
        return self.config is not None

    def _get_level(self, level: LogLevel) -> int:
        return getattr(logging, level.value)

    def _log(self, level: int, message: str, fields: dict, exc_info: bool = False) -> None:
        if not self._logger.isEnabledFor(level):
            return
        if self.config is None or self.config.mask_sensitive:
            fields = mask_sensitive_data(fields)
        self._logger.log(level, message, extra=fields, exc_info=exc_info)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """
        Log info message.

        Example:
            >>> logger.info("Request completed", status=200, duration_ms=150)
        """
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log error with traceback; call from an exception handler."""
        self._log(logging.ERROR, message, kwargs, exc_info=True)

    def close(self) -> None:
        """
        Flush and close owned handlers, restore level, propagation and the
        handlers that were attached before.
        Idempotent.

        A passive logger has no handlers of its own and closing it is a no-op.
        """
        if self._closed:
            return
        self._closed = True

        if not self.owns_handlers:
            return

        for handler in self._handlers:
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)

        # Вернуть логгер в пассивное состояние
        level, propagate, handlers = self._saved_state
        self._logger.setLevel(level)
        self._logger.propagate = propagate
        for handler in handlers:
            self._logger.addHandler(handler)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


# Global logger instance (singleton pattern)
_default_logger: Optional[DispatchLogger] = None


def get_logger(config: Optional[LoggingConfig] = None) -> DispatchLogger:
    """
    Get global logger instance.

    Creates new logger if not exists, or returns existing one. ``config`` is
    only used on the first call.
    """
    global _default_logger

    if _default_logger is None:
        _default_logger = DispatchLogger(config)

    return _default_logger


def configure_logging(config: LoggingConfig) -> DispatchLogger:
    """Replace the global logger with a newly configured one."""
    global _default_logger
    if _default_logger is not None:
        _default_logger.close()
    _default_logger = DispatchLogger(config)
    return _default_logger
