"""
Иерархия исключений HTTP Dispatch.

Классификация:
- ValidationError / EncodingError (fatal=True) - ошибки построения запроса,
  выбрасываются синхронно до любого I/O
- NetworkError (retryable=True) - ошибки транспорта, доставляются
  только через on_failure / on_abort (retry не выполняется)
"""

from typing import Any, Optional

import requests

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class DispatchError(Exception):
    """Базовое исключение HTTP Dispatch."""

    retryable: bool = False
    fatal: bool = False

    def __init__(self, message: str, **kwargs):
        self.message = message
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ОШИБКИ ВАЛИДАЦИИ (fatal=True)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ValidationError(DispatchError):
    """
    Невалидное описание запроса.

    Args:
        message: Сообщение об ошибке
        field: Имя опции, которая не прошла проверку
    """
    fatal = True

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        msg = message
        if field:
            msg += f" (field: {field})"
        super().__init__(msg)

class MissingFieldError(ValidationError):
    """Обязательное поле (on_success, url, method) отсутствует."""

    def __init__(self, field: str, message: str = ""):
        super().__init__(message or "Required option is missing", field)

class TypeMismatchError(ValidationError):
    """
    Значение опции имеет неверный тип.

    Args:
        field: Имя опции
        expected: Ожидаемый тип (строкой, для сообщения)
        actual: Фактическое значение
    """

    def __init__(self, field: str, expected: str, actual: Any = None):
        self.expected = expected
        self.actual_type = type(actual).__name__
        super().__init__(
            f"Invalid data type provided: expected {expected}, got {self.actual_type}",
            field,
        )

class UnsupportedMethodError(ValidationError):
    """HTTP метод не входит в GET, POST, PUT, DELETE, HEAD, OPTIONS."""

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"HTTP method {method!r} is not allowed", "method")

class InvalidCredentialsError(ValidationError):
    """username / password должны быть непустыми строками (оба сразу)."""

    def __init__(self, message: str = "Username and password must both be non-empty strings"):
        super().__init__(message, "credentials")

class InvalidHeaderError(ValidationError):
    """
    Невалидный заголовок.

    Каждый заголовок обязан иметь непустые name и value.
    """

    def __init__(self, message: str = "A header must contain a non-empty 'name' and 'value'",
                 index: Optional[int] = None):
        self.index = index
        if index is not None:
            message += f" (header #{index})"
        super().__init__(message, "headers")

class DuplicateHeaderError(InvalidHeaderError):
    """Имя заголовка повторяется (сравнение без учёта регистра)."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Duplicate header name {name!r}")

class InvalidCallbackError(ValidationError):
    """Callback передан, но не является callable."""

    def __init__(self, slot: str):
        self.slot = slot
        super().__init__("Invalid function provided", slot)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ОШИБКИ КОДИРОВАНИЯ (fatal=True)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class EncodingError(DispatchError):
    """Тело запроса не может быть закодировано."""
    fatal = True

class UnsupportedEncodingError(EncodingError):
    """
    Стратегия объявлена, но не реализована (MULTIPART, BINARY, BASE64).

    Args:
        strategy: Выбранная стратегия кодирования
    """

    def __init__(self, strategy: str):
        self.strategy = strategy
        super().__init__(f"Encoding strategy {strategy!r} is not supported")

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ТРАНСПОРТ (retryable=True, но retry не выполняется)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class NetworkError(DispatchError):
    """Сетевая ошибка."""
    retryable = True

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        full_message = f"{message}"
        if url:
            full_message += f" (url: {url})"
        super().__init__(full_message)

class TimeoutError(NetworkError):
    """
    Таймаут запроса.

    Args:
        message: Сообщение об ошибке
        url: URL запроса
        timeout_type: Тип таймаута ('connect', 'read', 'total')
    """

    def __init__(self, message: str, url: str, timeout_type: Optional[str] = None):
        self.timeout_type = timeout_type
        msg = message
        if timeout_type:
            msg += f" ({timeout_type} timeout)"
        super().__init__(msg, url)

class ConnectionError(NetworkError):
    """
    Ошибка подключения.

    Примеры:
    - Connection refused
    - Connection reset
    - Network unreachable
    """
    pass

class ProxyError(NetworkError):
    """Ошибка прокси."""
    pass

class ResponseTooLargeError(NetworkError):
    """Ответ больше SecurityConfig.max_response_size."""
    retryable = False

    def __init__(self, size: int, max_size: int, url: str):
        self.size = size
        self.max_size = max_size
        super().__init__(f"Response too large: {size} bytes (max: {max_size})", url)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# СПЕЦИАЛЬНЫЕ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TransportStateError(DispatchError):
    """Нарушен порядок вызовов транспорта (send до open, повторный open)."""
    fatal = True

class ConfigurationError(DispatchError):
    """Ошибка конфигурации."""
    fatal = True

class AmbiguousBodyWarning(UserWarning):
    """Переданы и data, и form: отправляется data."""

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# УТИЛИТЫ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def classify_requests_exception(exc: Exception, url: str) -> DispatchError:
    """
    Конвертировать requests.exceptions в наши исключения.

    Args:
        exc: Исключение из requests
        url: URL запроса

    Returns:
        Наше исключение с правильной классификацией

    Examples:
        >>> exc = requests.exceptions.Timeout()
        >>> our_exc = classify_requests_exception(exc, "https://example.com")
        >>> assert isinstance(our_exc, TimeoutError)
    """
    if isinstance(exc, requests.exceptions.ConnectTimeout):
        return TimeoutError("Request timeout", url, timeout_type="connect")

    elif isinstance(exc, requests.exceptions.Timeout):
        return TimeoutError("Request timeout", url, timeout_type="read")

    elif isinstance(exc, requests.exceptions.ProxyError):
        return ProxyError("Proxy error", url)

    elif isinstance(exc, requests.exceptions.ConnectionError):
        return ConnectionError("Connection error", url)

    elif isinstance(exc, requests.exceptions.RequestException):
        return NetworkError(str(exc) or exc.__class__.__name__, url)

    else:
        # Неизвестная ошибка - оборачиваем
        return DispatchError(str(exc))

def classify_httpx_exception(exc: Exception, url: str) -> DispatchError:
    """
    Конвертировать httpx исключения в наши исключения.

    Args:
        exc: Исключение из httpx
        url: URL запроса

    Returns:
        Наше исключение с правильной классификацией
    """
    import httpx

    if isinstance(exc, httpx.ConnectTimeout):
        return TimeoutError("Request timeout", url, timeout_type="connect")

    elif isinstance(exc, httpx.TimeoutException):
        return TimeoutError("Request timeout", url, timeout_type="read")

    elif isinstance(exc, httpx.ProxyError):
        return ProxyError("Proxy error", url)

    elif isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError)):
        return ConnectionError("Connection error", url)

    elif isinstance(exc, httpx.HTTPError):
        return NetworkError(str(exc) or exc.__class__.__name__, url)

    else:
        return DispatchError(str(exc))
