# src/http_dispatch/transport/thread_transport.py
"""
Транспорт на базе requests, работающий в фоновом потоке.

Вызывающий поток не блокируется: send() запускает daemon-поток и сразу
возвращает управление. События вызываются из этого потока.
"""

import threading
import time
from typing import Optional

import requests
from requests.exceptions import RequestException

from ..core.config import DispatchConfig
from ..core.exceptions import (
    DispatchError,
    ResponseTooLargeError,
    TimeoutError,
    TransportStateError,
    classify_requests_exception,
)
from ..core.logging import DispatchLogger
from .base import Transport, decode_body

CHUNK_SIZE = 8192


class _Aborted(Exception):
    """Внутренний сигнал: abort() запрошен во время чтения."""


class ThreadTransport(Transport):
    """
    Транспорт для синхронного кода.

    Args:
        session: Готовая requests.Session (не закрывается транспортом).
            Если не передана, создаётся на время запроса.
        config: DispatchConfig (таймауты, SSL, редиректы, лимит размера)
        logger: Логгер

    Note:
        abort() проверяется между чанками ответа; установку соединения
        прервать нельзя, в этом случае abort срабатывает сразу после
        получения заголовков.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        config: Optional[DispatchConfig] = None,
        logger: Optional[DispatchLogger] = None,
    ):
        super().__init__(config=config, logger=logger)
        self._session = session
        self._thread: Optional[threading.Thread] = None
        self._abort_requested = threading.Event()

    def _start(self, body: Optional[bytes]) -> None:
        self._thread = threading.Thread(
            target=self._run,
            args=(body,),
            name=f"http-dispatch-{self.method}",
            daemon=True,
        )
        self._thread.start()

    def _cancel(self) -> None:
        self._abort_requested.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Дождаться loadend.

        Returns:
            True если запрос завершён, False если истёк timeout
        """
        if self._thread is None:
            raise TransportStateError("Transport was not sent")
        return self._done_event.wait(timeout)

    def _check_abort(self) -> None:
        if self._abort_requested.is_set():
            raise _Aborted()

    def _run(self, body: Optional[bytes]) -> None:
        owns_session = self._session is None
        session = self._session or requests.Session()

        try:
            self._begin()
            self._check_abort()
            text = self._transfer(session, body)
        except _Aborted:
            self._finish_abort()
        except RequestException as exc:
            self._finish_error(classify_requests_exception(exc, self.url))
        except DispatchError as exc:
            self._finish_error(exc)
        except Exception as exc:
            self._logger.exception("Unexpected transport failure", url=self.url)
            self._finish_error(exc)
        else:
            self._finish_load(text)
        finally:
            if owns_session:
                session.close()

    def _transfer(self, session: requests.Session, body: Optional[bytes]) -> str:
        config = self._config
        max_size = config.security.max_response_size
        deadline = time.monotonic() + config.timeout.total if config.timeout.total else None

        with session.request(
            self.method,
            self.url,
            headers=dict(self._headers),
            data=body,
            auth=self._auth,
            timeout=config.timeout.as_tuple(),
            verify=config.security.verify_ssl,
            allow_redirects=config.security.allow_redirects,
            stream=True,
        ) as response:
            self._received_headers(response.status_code, dict(response.headers))
            self._check_abort()

            content_length = response.headers.get("Content-Length")
            expected = int(content_length) if content_length and content_length.isdigit() else None
            if expected is not None and expected > max_size:
                raise ResponseTooLargeError(expected, max_size, self.url)

            chunks = []
            loaded = 0
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                self._check_abort()
                if deadline is not None and time.monotonic() > deadline:
                    raise TimeoutError("Request timeout", self.url, timeout_type="total")
                if not chunk:
                    continue
                loaded += len(chunk)
                if loaded > max_size:
                    raise ResponseTooLargeError(loaded, max_size, self.url)
                chunks.append(chunk)
                self._progress(loaded, expected)

            self._check_abort()
            return decode_body(b"".join(chunks), response.headers.get("Content-Type"))
