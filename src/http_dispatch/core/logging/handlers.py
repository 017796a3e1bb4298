"""
Log handlers: console stream and rotating file.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional, Sequence

from .config import LoggingConfig
from .formatters import get_formatter

_STREAMS = {"stdout": lambda: sys.stdout, "stderr": lambda: sys.stderr}


def _attach(handler: logging.Handler, level: int, formatter: logging.Formatter,
            filters: Sequence[logging.Filter]) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    for f in filters:
        handler.addFilter(f)
    return handler


def create_console_handler(
    level: int,
    formatter: logging.Formatter,
    filters: Sequence[logging.Filter] = (),
    stream: str = "stdout",
) -> logging.StreamHandler:
    """
    Console handler on stdout or stderr.

    Example:
        >>> handler = create_console_handler(logging.INFO, TextFormatter(), stream="stderr")
    """
    return _attach(logging.StreamHandler(_STREAMS[stream]()), level, formatter, filters)


def create_file_handler(
    file_path: str,
    level: int,
    formatter: logging.Formatter,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    filters: Sequence[logging.Filter] = (),
) -> RotatingFileHandler:
    """Rotating file handler; missing parent directories are created."""
    Path(file_path).parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=file_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )
    return _attach(handler, level, formatter, filters)


def build_handlers(
    config: LoggingConfig,
    filters: Sequence[logging.Filter] = (),
    formatter: Optional[logging.Formatter] = None,
) -> List[logging.Handler]:
    """Handlers, описанные LoggingConfig (console и/или file)."""
    level = getattr(logging, config.level.value)
    formatter = formatter or get_formatter(config.format.value)

    handlers: List[logging.Handler] = []
    if config.enable_console:
        handlers.append(create_console_handler(level, formatter, filters, config.console_stream))
    if config.enable_file:
        handlers.append(create_file_handler(
            config.file_path,
            level,
            formatter,
            max_bytes=config.max_bytes,
            backup_count=config.backup_count,
            filters=filters,
        ))
    return handlers
