"""
Система конфигурации для HTTP Dispatch.

Все конфиги immutable (frozen dataclasses) для потокобезопасности.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple, Dict, Union, TYPE_CHECKING, Mapping
from types import MappingProxyType

if TYPE_CHECKING:
    from .logging import LoggingConfig

TRANSPORT_KINDS = ("auto", "async", "thread")

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TIMEOUT CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class TimeoutConfig:
    """
    Конфигурация таймаутов транспорта.

    Сам конвейер таймаутов не реализует: транспорт применяет их и
    сообщает о срабатывании через событие error.

    Args:
        connect: Таймаут подключения (сек)
        read: Таймаут чтения данных (сек)
        total: Общий лимит времени запроса (опционально)

    Examples:
        >>> TimeoutConfig(connect=5, read=30)
        >>> TimeoutConfig(connect=3, read=60, total=90)
    """
    connect: float = 5
    read: float = 30
    total: Optional[float] = None

    def __post_init__(self):
        """Валидация."""
        if self.connect <= 0:
            raise ValueError("connect timeout must be positive")
        if self.read <= 0:
            raise ValueError("read timeout must be positive")
        if self.total is not None and self.total <= 0:
            raise ValueError("total timeout must be positive")

    def as_tuple(self) -> Tuple[float, float]:
        """Вернуть как (connect, read) для requests."""
        return (self.connect, self.read)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# SECURITY CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class SecurityConfig:
    """
    Конфигурация безопасности.

    Args:
        max_response_size: Максимальный размер ответа (байты)
        verify_ssl: Проверять SSL сертификаты
        allow_redirects: Разрешать редиректы

    Examples:
        >>> SecurityConfig(max_response_size=50*1024*1024)  # 50MB
        >>> SecurityConfig(verify_ssl=False)  # Для тестов
    """
    max_response_size: int = 100 * 1024 * 1024  # 100MB
    verify_ssl: bool = True
    allow_redirects: bool = True

    def __post_init__(self):
        """Валидация."""
        if self.max_response_size <= 0:
            raise ValueError("max_response_size must be positive")

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MAIN CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class DispatchConfig:
    """
    Главная конфигурация RequestDispatcher.

    Args:
        default_headers: Заголовки, добавляемые к каждому запросу
            (заголовок из опций с тем же именем имеет приоритет)
        timeout: Конфигурация таймаутов транспорта
        security: Конфигурация безопасности
        transport: Какой транспорт создавать ("auto", "async", "thread")
        enforce_https: Переписывать http:// на https:// (если в опциях
            не указан force_insecure)
        logging: Конфигурация логирования (None - пассивный логгер, записи
            уходят в logging.getLogger("http_dispatch"))

    Examples:
        >>> config = DispatchConfig(transport="thread")
        >>> config = DispatchConfig.create(timeout=60, verify_ssl=False)
    """
    default_headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    transport: str = "auto"
    enforce_https: bool = True
    logging: Optional['LoggingConfig'] = None

    def __post_init__(self):
        """Freeze mutable dicts and validate transport kind."""
        if isinstance(self.default_headers, dict):
            object.__setattr__(self, 'default_headers', MappingProxyType(dict(self.default_headers)))

        if self.transport not in TRANSPORT_KINDS:
            raise ValueError(
                f"transport must be one of {', '.join(TRANSPORT_KINDS)}, got {self.transport!r}"
            )

    @classmethod
    def create(
        cls,
        timeout: Union[float, Tuple[float, float], TimeoutConfig] = 30,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
        verify_ssl: bool = True,
        allow_redirects: bool = True,
        headers: Optional[Dict[str, str]] = None,
        transport: str = "auto",
        enforce_https: bool = True,
        logging: Optional['LoggingConfig'] = None,
    ) -> 'DispatchConfig':
        """
        Удобный конструктор конфигурации.

        Args:
            timeout: Таймаут (число, (connect, read) или TimeoutConfig)
            connect_timeout: Таймаут подключения (переопределяет timeout)
            read_timeout: Таймаут чтения (переопределяет timeout)
            verify_ssl: Проверять SSL
            allow_redirects: Следовать редиректам
            headers: Заголовки по умолчанию
            transport: "auto", "async" или "thread"
            enforce_https: Переписывать http:// на https://
            logging: Конфигурация логирования

        Returns:
            DispatchConfig instance

        Examples:
            >>> config = DispatchConfig.create(timeout=60)
            >>> config = DispatchConfig.create(timeout=(5, 60), transport="async")
        """
        return cls(
            default_headers=headers or {},
            timeout=_build_timeout(timeout, connect_timeout, read_timeout),
            security=SecurityConfig(verify_ssl=verify_ssl, allow_redirects=allow_redirects),
            transport=transport,
            enforce_https=enforce_https,
            logging=logging,
        )

    def with_timeout(self, timeout: Union[float, Tuple[float, float], TimeoutConfig]) -> 'DispatchConfig':
        """
        Создать новый конфиг с изменённым timeout.

        Example:
            >>> new_config = config.with_timeout(60)
        """
        return DispatchConfig(
            default_headers=self.default_headers,
            timeout=_build_timeout(timeout),
            security=self.security,
            transport=self.transport,
            enforce_https=self.enforce_https,
            logging=self.logging,
        )

    def with_headers(self, headers: Dict[str, str]) -> 'DispatchConfig':
        """
        Создать новый конфиг с дополнительными заголовками по умолчанию.

        Example:
            >>> new_config = config.with_headers({"X-Requested-With": "XMLHttpRequest"})
        """
        merged = dict(self.default_headers)
        merged.update(headers)

        return DispatchConfig(
            default_headers=merged,  # __post_init__ will freeze it
            timeout=self.timeout,
            security=self.security,
            transport=self.transport,
            enforce_https=self.enforce_https,
            logging=self.logging,
        )

def _build_timeout(
    timeout: Union[float, Tuple[float, float], TimeoutConfig],
    connect_timeout: Optional[float] = None,
    read_timeout: Optional[float] = None,
) -> TimeoutConfig:
    if isinstance(timeout, TimeoutConfig):
        return timeout
    if connect_timeout is not None or read_timeout is not None:
        return TimeoutConfig(connect=connect_timeout or 5, read=read_timeout or 30)
    if isinstance(timeout, tuple):
        return TimeoutConfig(connect=timeout[0], read=timeout[1])
    return TimeoutConfig(connect=5, read=timeout)
