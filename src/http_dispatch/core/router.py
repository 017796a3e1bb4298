"""
Маршрутизация событий транспорта в callbacks вызывающего.

| событие   | callback                       | аргумент                     |
|-----------|--------------------------------|------------------------------|
| start     | on_start                       | транспорт                    |
| progress  | on_loading                     | ProgressEvent                |
| load      | on_success                     | JSON ответа или сырой текст  |
| error     | on_failure                     | транспорт (transport.error)  |
| abort     | on_abort, иначе on_failure     | транспорт                    |
| loadend   | on_finished                    | транспорт                    |
"""

import json
import threading
from typing import TYPE_CHECKING, Any, Callable, Optional

from .exceptions import InvalidCallbackError
from .logging import DispatchLogger
from .models import LifecycleCallbacks

if TYPE_CHECKING:
    from ..transport.base import Transport


def parse_response(text: str) -> Any:
    """
    Разобрать ответ как JSON; при неудаче вернуть исходный текст.

    Example:
        >>> parse_response('{"id": 1}')
        {'id': 1}
        >>> parse_response("plain text")
        'plain text'
    """
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return text


class LifecycleRouter:
    """
    Привязывает LifecycleCallbacks к событиям одного транспорта.

    Гарантии:
        - on_success не более одного раза и только по load
        - on_failure / on_abort не более одного раза и никогда вместе
          с on_success
        - on_finished ровно один раз и последним
        - исключение из callback логируется и не прерывает цикл
          (on_finished всё равно будет вызван)

    Raises:
        InvalidCallbackError: callback передан, но не callable
            (проверяется при создании, до отправки запроса)
    """

    def __init__(self, callbacks: LifecycleCallbacks, logger: Optional[DispatchLogger] = None):
        for slot in LifecycleCallbacks.slot_names():
            value = getattr(callbacks, slot)
            if slot == "on_success" and value is None:
                raise InvalidCallbackError(slot)
            if value is not None and not callable(value):
                raise InvalidCallbackError(slot)

        self._callbacks = callbacks
        self._logger = logger or DispatchLogger()
        self._lock = threading.Lock()
        self._outcome: Optional[str] = None
        self._finished = False
        self._transport: Optional['Transport'] = None

    @property
    def outcome(self) -> Optional[str]:
        """'success', 'failure' или 'abort' после терминального события."""
        return self._outcome

    def bind(self, transport: 'Transport') -> 'Transport':
        """Подписаться на события транспорта. Один роутер - один транспорт."""
        if self._transport is not None:
            raise RuntimeError("LifecycleRouter is already bound to a transport")
        self._transport = transport

        callbacks = self._callbacks
        if callbacks.on_start is not None:
            transport.add_listener("start", self._on_start)
        if callbacks.on_loading is not None:
            transport.add_listener("progress", self._on_progress)
        transport.add_listener("load", self._on_load)
        transport.add_listener("error", self._on_error)
        transport.add_listener("abort", self._on_abort)
        transport.add_listener("loadend", self._on_loadend)
        return transport

    # ==================== Обработчики событий ====================

    def _claim(self, outcome: str) -> bool:
        with self._lock:
            if self._outcome is not None or self._finished:
                return False
            self._outcome = outcome
            return True

    def _invoke(self, slot: str, callback: Callable[[Any], Any], argument: Any) -> None:
        try:
            callback(argument)
        except Exception:
            self._logger.exception(
                "Request callback raised",
                callback=slot,
                url=getattr(self._transport, "url", None),
            )

    def _on_start(self, transport: 'Transport') -> None:
        self._invoke("on_start", self._callbacks.on_start, transport)

    def _on_progress(self, event) -> None:
        if self._outcome is None:
            self._invoke("on_loading", self._callbacks.on_loading, event)

    def _on_load(self, transport: 'Transport') -> None:
        if not self._claim("success"):
            return
        self._logger.debug("Request completed", url=transport.url, status=transport.status)
        self._invoke("on_success", self._callbacks.on_success, parse_response(transport.response_text))

    def _on_error(self, transport: 'Transport') -> None:
        if not self._claim("failure"):
            return
        self._logger.info(
            "Request failed",
            url=transport.url,
            error=str(transport.error) if transport.error else None,
        )
        if self._callbacks.on_failure is not None:
            self._invoke("on_failure", self._callbacks.on_failure, transport)

    def _on_abort(self, transport: 'Transport') -> None:
        if not self._claim("abort"):
            return
        self._logger.info("Request aborted", url=transport.url)
        if self._callbacks.on_abort is not None:
            self._invoke("on_abort", self._callbacks.on_abort, transport)
        elif self._callbacks.on_failure is not None:
            self._invoke("on_failure", self._callbacks.on_failure, transport)

    def _on_loadend(self, transport: 'Transport') -> None:
        with self._lock:
            if self._finished:
                return
            self._finished = True
        if self._callbacks.on_finished is not None:
            self._invoke("on_finished", self._callbacks.on_finished, transport)
