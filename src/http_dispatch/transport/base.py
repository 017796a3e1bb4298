# src/http_dispatch/transport/base.py
"""
Базовый транспорт: объект запроса с open / set_header / send / abort и
событиями жизненного цикла.

Порядок событий для одного запроса:

    start -> progress* -> (load | error | abort) -> loadend

Конкретный транспорт (httpx, requests) реализует только _start() и
_cancel(); состояние, подписки и гарантия "один терминальный исход,
затем loadend" живут здесь.
"""

import re
import threading
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..core.config import DispatchConfig
from ..core.exceptions import DispatchError, TransportStateError
from ..core.logging import DispatchLogger
from ..core.models import ProgressEvent

EVENTS = ("start", "progress", "load", "loadend", "error", "abort")

_CHARSET = re.compile(r"charset=[\"']?([\w.:-]+)", re.IGNORECASE)


class ReadyState(IntEnum):
    """Состояние объекта запроса (как у XMLHttpRequest.readyState)."""
    UNSENT = 0
    OPENED = 1
    HEADERS_RECEIVED = 2
    LOADING = 3
    DONE = 4


def decode_body(content: bytes, content_type: Optional[str]) -> str:
    """
    Декодировать тело ответа в текст.

    Кодировка берётся из charset в Content-Type, иначе UTF-8.
    """
    encoding = "utf-8"
    if content_type:
        match = _CHARSET.search(content_type)
        if match:
            encoding = match.group(1)
    try:
        return content.decode(encoding, errors="replace")
    except LookupError:
        return content.decode("utf-8", errors="replace")


def coerce_body(body: Any) -> Optional[bytes]:
    """
    Привести payload к bytes для отправки.

    str кодируется в UTF-8; прочие объекты приводятся через str(), как это
    делает браузерный транспорт.
    """
    if body is None:
        return None
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)
    if not isinstance(body, str):
        body = str(body)
    return body.encode("utf-8")


class Transport(ABC):
    """
    Асинхронный объект HTTP запроса.

    Attributes:
        ready_state: Текущее состояние (ReadyState)
        status: HTTP статус ответа (0 до получения заголовков и при ошибке)
        response_text: Тело ответа как текст (после load)
        response_headers: Заголовки ответа
        error: Исключение транспорта (после error)

    Example:
        >>> transport = ThreadTransport()
        >>> transport.open("GET", "https://api.example.com/items")
        >>> transport.add_listener("load", lambda t: print(t.status))
        >>> transport.send()
    """

    def __init__(self, config: Optional[DispatchConfig] = None, logger: Optional[DispatchLogger] = None):
        self._config = config or DispatchConfig()
        self._logger = logger or DispatchLogger()
        self._listeners: Dict[str, List[Callable[[Any], Any]]] = {event: [] for event in EVENTS}
        self._lock = threading.Lock()
        self._done_event = threading.Event()

        self.method: Optional[str] = None
        self.url: Optional[str] = None
        self.username: Optional[str] = None
        self._password: Optional[str] = None
        self._headers: List[Tuple[str, str]] = []

        self.ready_state = ReadyState.UNSENT
        self.status = 0
        self.response_text = ""
        self.response_headers: Dict[str, str] = {}
        self.error: Optional[Exception] = None

        self._sent = False
        self._aborted = False
        self._terminal: Optional[str] = None

    # ==================== Публичный API ====================

    def open(
        self,
        method: str,
        url: str,
        async_: bool = True,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None:
        """
        Инициализировать запрос.

        Raises:
            TransportStateError: транспорт уже открыт, или запрошен
                синхронный режим
        """
        if self.ready_state != ReadyState.UNSENT or self._sent:
            raise TransportStateError("Transport is already open")
        if not async_:
            raise TransportStateError("Synchronous requests are not supported")

        self.method = method
        self.url = url
        self.username = username
        self._password = password
        self.ready_state = ReadyState.OPENED

    def set_header(self, name: str, value: str) -> None:
        """Добавить заголовок запроса. Только между open() и send()."""
        if self.ready_state != ReadyState.OPENED or self._sent:
            raise TransportStateError("Headers can only be set after open() and before send()")
        self._headers.append((name, value))

    @property
    def request_headers(self) -> Tuple[Tuple[str, str], ...]:
        return tuple(self._headers)

    def add_listener(self, event: str, callback: Callable[[Any], Any]) -> None:
        """
        Подписаться на событие.

        Raises:
            ValueError: неизвестное имя события
        """
        if event not in self._listeners:
            raise ValueError(f"Unknown transport event {event!r}, expected one of {', '.join(EVENTS)}")
        self._listeners[event].append(callback)

    def send(self, body: Any = None) -> None:
        """
        Начать передачу. Возвращает управление сразу, не дожидаясь ответа.

        Raises:
            TransportStateError: send() до open(), повторный send() или
                send() после abort()
        """
        if self.ready_state != ReadyState.OPENED or self._sent:
            raise TransportStateError("send() requires an opened, unsent transport")
        if self._aborted:
            raise TransportStateError("Transport was aborted")

        self._sent = True
        self._start(coerce_body(body))

    def abort(self) -> None:
        """
        Отменить запрос.

        До send() просто помечает транспорт отменённым (без событий). Во время
        передачи приводит к событиям abort и loadend. После завершения
        ничего не делает.
        """
        if self._terminal is not None:
            return
        self._aborted = True
        if self._sent:
            self._cancel()
        else:
            self.ready_state = ReadyState.UNSENT

    @property
    def done(self) -> bool:
        """True после события loadend."""
        return self._done_event.is_set()

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def outcome(self) -> Optional[str]:
        """'load', 'error' или 'abort' после завершения."""
        return self._terminal

    # ==================== Для реализаций ====================

    @abstractmethod
    def _start(self, body: Optional[bytes]) -> None:
        """Запустить передачу в фоне (task, thread)."""

    @abstractmethod
    def _cancel(self) -> None:
        """Прервать текущую передачу; реализация затем вызывает _finish_abort()."""

    @property
    def _auth(self) -> Optional[Tuple[str, str]]:
        if self.username is None:
            return None
        return (self.username, self._password or "")

    def _emit(self, event: str, payload: Any) -> None:
        for listener in list(self._listeners[event]):
            try:
                listener(payload)
            except Exception:
                self._logger.exception(
                    "Transport listener failed", event=event, url=self.url
                )

    def _begin(self) -> None:
        self._emit("start", self)

    def _received_headers(self, status: int, headers: Dict[str, str]) -> None:
        self.status = status
        self.response_headers = dict(headers)
        self.ready_state = ReadyState.HEADERS_RECEIVED

    def _progress(self, loaded: int, total: Optional[int]) -> None:
        self.ready_state = ReadyState.LOADING
        self._emit("progress", ProgressEvent(loaded=loaded, total=total))

    def _claim_terminal(self, outcome: str) -> bool:
        with self._lock:
            if self._terminal is not None:
                return False
            self._terminal = outcome
            return True

    def _finish(self, outcome: str) -> None:
        self.ready_state = ReadyState.DONE
        try:
            self._emit(outcome, self)
            self._emit("loadend", self)
        finally:
            self._done_event.set()

    def _finish_load(self, text: str) -> None:
        if not self._claim_terminal("load"):
            return
        self.response_text = text
        self._finish("load")

    def _finish_error(self, error: Exception) -> None:
        if not self._claim_terminal("error"):
            return
        if not isinstance(error, DispatchError):
            error = DispatchError(str(error) or error.__class__.__name__)
        self.error = error
        self.status = 0
        self._finish("error")

    def _finish_abort(self) -> None:
        if not self._claim_terminal("abort"):
            return
        self._aborted = True
        self.status = 0
        self._finish("abort")

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(method={self.method!r}, url={self.url!r}, "
            f"state={self.ready_state.name}, status={self.status})"
        )
