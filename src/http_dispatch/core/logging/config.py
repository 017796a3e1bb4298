"""
Logging configuration for HTTP Dispatch.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any, Union


class LogLevel(str, Enum):
    """Log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""
    JSON = "json"
    TEXT = "text"
    COLORED = "colored"


CONSOLE_STREAMS = ("stdout", "stderr")


@dataclass(frozen=True)
class LoggingConfig:
    """
    Configuration for dispatcher logging.

    Передаётся в DispatchConfig(logging=...). Без него диспетчер пишет в
    logging.getLogger("http_dispatch") и ничего не настраивает сам.

    Attributes:
        level: Минимальный уровень записей
        format: json (для сборщиков логов), text или colored (для терминала)
        enable_console: Писать в консоль
        console_stream: "stdout" или "stderr"
        enable_file: Писать в файл с ротацией
        file_path: Путь к файлу (обязателен при enable_file=True)
        max_bytes: Размер файла до ротации
        backup_count: Сколько старых файлов хранить
        enable_correlation_id: Помечать записи request id текущего dispatch()
        mask_sensitive: Маскировать пароли, токены и Authorization в полях
        extra_fields: Поля, добавляемые к каждой записи (service, env, ...)

    Example:
        >>> config = LoggingConfig.create(level="DEBUG", format="json")
        >>> config = LoggingConfig.create(
        ...     enable_console=False,
        ...     enable_file=True,
        ...     file_path="/var/log/dispatch.log",
        ...     extra_fields={"service": "checkout"},
        ... )
    """

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.TEXT
    enable_console: bool = True
    console_stream: str = "stdout"
    enable_file: bool = False
    file_path: Optional[str] = None
    max_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    enable_correlation_id: bool = True
    mask_sensitive: bool = True
    extra_fields: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.enable_file and not self.file_path:
            raise ValueError("file_path is required when enable_file=True")
        if self.console_stream not in CONSOLE_STREAMS:
            raise ValueError(f"console_stream must be one of {', '.join(CONSOLE_STREAMS)}")
        if self.max_bytes <= 0:
            raise ValueError("max_bytes must be positive")
        if self.backup_count < 0:
            raise ValueError("backup_count must be non-negative")

    @property
    def has_output(self) -> bool:
        """True если включён хотя бы один handler."""
        return self.enable_console or self.enable_file

    @classmethod
    def create(
        cls,
        level: Union[str, LogLevel] = "INFO",
        format: Union[str, LogFormat] = "text",
        extra_fields: Optional[Dict[str, Any]] = None,
        **options: Any
    ) -> "LoggingConfig":
        """
        Create LoggingConfig from plain values (level/format as strings).

        Остальные параметры (enable_console, enable_file, file_path, ...)
        передаются как есть.

        Raises:
            ValueError: неизвестный level или format
        """
        return cls(
            level=LogLevel(str(getattr(level, "value", level)).upper()),
            format=LogFormat(str(getattr(format, "value", format)).lower()),
            extra_fields=dict(extra_fields or {}),
            **options
        )
