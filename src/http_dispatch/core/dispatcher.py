# src/http_dispatch/core/dispatcher.py
"""
Диспетчер: validate -> negotiate -> encode -> assemble -> send -> route.
"""

import asyncio
import uuid
from typing import Any, Callable, Optional

from .assembler import assemble
from .config import DispatchConfig
from .encoder import encode
from .logging import DispatchLogger
from .logging.filters import clear_correlation_id, set_correlation_id
from .models import RequestDescriptor
from .negotiator import effective_content_type, negotiate
from .router import LifecycleRouter
from .validator import validate
from ..utils.sanitizer import mask_headers

TransportFactory = Callable[[DispatchConfig, DispatchLogger], Any]


class RequestDispatcher:
    """
    Строит и отправляет запросы по декларативному описанию.

    Каждый вызов dispatch() независим: свои опции, заголовки, тело,
    транспорт и роутер. Общего изменяемого состояния между запросами нет.

    Args:
        config: DispatchConfig (по умолчанию DispatchConfig())
        transport_factory: Callable(config, logger) -> Transport. Если не
            задан, транспорт выбирается по config.transport.

    Example:
        >>> with RequestDispatcher() as dispatcher:
        ...     handle = dispatcher.dispatch({
        ...         "method": "get",
        ...         "url": "http://api.example.com/items",
        ...         "on_success": print,
        ...     })
        ...     handle.wait(5)
    """

    def __init__(
        self,
        config: Optional[DispatchConfig] = None,
        transport_factory: Optional[TransportFactory] = None,
    ):
        self._config = config or DispatchConfig()
        self._transport_factory = transport_factory
        self._logger = DispatchLogger(self._config.logging)

    @property
    def config(self) -> DispatchConfig:
        return self._config

    @property
    def logger(self) -> DispatchLogger:
        return self._logger

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        """Закрыть логгер (файловые handlers)."""
        self._logger.close()

    # ==================== Построение запроса ====================

    def _build(self, options: Any) -> tuple:
        validated = validate(options)
        strategy = negotiate(validated.headers, validated.consumes, validated.encoding)

        encoded = None
        if validated.form is not None:
            encoded = encode(
                strategy,
                validated.form,
                effective_content_type(validated.headers, validated.consumes),
            )

        descriptor = assemble(
            validated,
            strategy,
            encoded,
            default_headers=self._config.default_headers,
            enforce_https=self._config.enforce_https,
            logger=self._logger,
        )

        self._logger.debug(
            "Request prepared",
            method=descriptor.method,
            url=descriptor.url,
            strategy=strategy.value,
            headers=mask_headers(descriptor.headers),
            body_length=_body_length(descriptor.body),
        )
        return validated, descriptor

    def prepare(self, options: Any) -> RequestDescriptor:
        """
        Провалидировать и собрать запрос без сетевого I/O.

        Raises:
            ValidationError: невалидные опции
            UnsupportedEncodingError: форма требует MULTIPART/BINARY/BASE64
        """
        return self._build(options)[1]

    # ==================== Отправка ====================

    def _create_transport(self):
        if self._transport_factory is not None:
            return self._transport_factory(self._config, self._logger)

        from ..transport import AsyncTransport, ThreadTransport

        kind = self._config.transport
        if kind == "auto":
            kind = "async" if _loop_running() else "thread"

        if kind == "async":
            return AsyncTransport(config=self._config, logger=self._logger)
        return ThreadTransport(config=self._config, logger=self._logger)

    def dispatch(
        self,
        options: Any,
        transport: Any = None,
        on_done: Optional[Callable[[], Any]] = None,
    ):
        """
        Отправить запрос асинхронно.

        Все ошибки построения запроса выбрасываются здесь, до открытия
        транспорта. Ошибки сети приходят только в on_failure / on_abort.

        Args:
            options: dict или RequestOptions
            transport: Готовый (не открытый) транспорт; по умолчанию
                создаётся новый
            on_done: Вызывается без аргументов после on_finished

        Returns:
            Транспорт отправленного запроса (abort(), wait(), status, ...)
        """
        validated, descriptor = self._build(options)
        router = LifecycleRouter(validated.callbacks, logger=self._logger)

        if transport is None:
            transport = self._create_transport()

        request_id = uuid.uuid4().hex[:12]
        tag_logs = self._config.logging is not None and self._config.logging.enable_correlation_id
        if tag_logs:
            set_correlation_id(request_id)
        try:
            transport.open(
                descriptor.method,
                descriptor.url,
                True,
                descriptor.username,
                descriptor.password,
            )
            for header in descriptor.headers:
                transport.set_header(header.name, header.value)

            router.bind(transport)
            if on_done is not None:
                transport.add_listener("loadend", lambda _transport: on_done())

            self._logger.info(
                "Request dispatched",
                request_id=request_id,
                method=descriptor.method,
                url=descriptor.url,
                transport=transport.__class__.__name__,
            )
            transport.send(descriptor.body)
        finally:
            if tag_logs:
                clear_correlation_id()

        return transport


def _loop_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


def _body_length(body: Any) -> Optional[int]:
    if body is None:
        return None
    if isinstance(body, (str, bytes, bytearray)):
        return len(body)
    return None


def prepare(options: Any, config: Optional[DispatchConfig] = None) -> RequestDescriptor:
    """Собрать RequestDescriptor без отправки (новый диспетчер на вызов)."""
    dispatcher = RequestDispatcher(config)
    try:
        return dispatcher.prepare(options)
    finally:
        dispatcher.close()


def dispatch(options: Any, transport: Any = None, config: Optional[DispatchConfig] = None):
    """
    Отправить запрос с конфигурацией по умолчанию.

    Example:
        >>> handle = dispatch({
        ...     "method": "POST",
        ...     "url": "https://api.example.com/items",
        ...     "headers": [{"name": "Content-Type", "value": "application/json"}],
        ...     "form": [("name", "widget"), ("qty", "2")],
        ...     "on_success": lambda data: print(data["id"]),
        ...     "on_failure": lambda t: print("failed:", t.error),
        ... })

    Логгер диспетчера закрывается после loadend: handlers из
    config.logging живут ровно один запрос.
    """
    dispatcher = RequestDispatcher(config)
    try:
        return dispatcher.dispatch(options, transport=transport, on_done=dispatcher.close)
    except Exception:
        dispatcher.close()
        raise
