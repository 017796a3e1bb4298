# src/http_dispatch/transport/async_transport.py
"""
Асинхронный транспорт на базе httpx.

send() планирует задачу на текущем event loop и сразу возвращает
управление; события приходят из этой задачи.
"""

import asyncio
from typing import Optional

try:
    import httpx
except ImportError:
    raise ImportError(
        "httpx is required for AsyncTransport. "
        "Install with: pip install http-dispatch"
    )

from ..core.config import DispatchConfig
from ..core.exceptions import (
    DispatchError,
    ResponseTooLargeError,
    TimeoutError,
    TransportStateError,
    classify_httpx_exception,
)
from ..core.logging import DispatchLogger
from .base import Transport, decode_body


class AsyncTransport(Transport):
    """
    Транспорт для asyncio приложений.

    Args:
        client: Готовый httpx.AsyncClient (не закрывается транспортом).
            Если не передан, создаётся на время запроса.
        config: DispatchConfig (таймауты, SSL, редиректы, лимит размера)
        logger: Логгер

    Example:
        >>> transport = AsyncTransport()
        >>> transport.open("GET", "https://api.example.com/items")
        >>> transport.add_listener("load", lambda t: print(t.response_text))
        >>> transport.send()
        >>> await transport.wait()
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        config: Optional[DispatchConfig] = None,
        logger: Optional[DispatchLogger] = None,
    ):
        super().__init__(config=config, logger=logger)
        self._client = client
        self._task: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def _create_client(self) -> httpx.AsyncClient:
        timeout = self._config.timeout
        return httpx.AsyncClient(
            timeout=httpx.Timeout(timeout.read, connect=timeout.connect),
            verify=self._config.security.verify_ssl,
            follow_redirects=self._config.security.allow_redirects,
        )

    def _start(self, body: Optional[bytes]) -> None:
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError:
            raise TransportStateError(
                "AsyncTransport.send() must be called from a running event loop; "
                "use ThreadTransport in synchronous code"
            ) from None

        self._task = self._loop.create_task(self._run(body))
        self._task.add_done_callback(self._on_task_done)

    def _cancel(self) -> None:
        if self._task is None or self._loop is None:
            return
        if _running_loop() is self._loop:
            self._task.cancel()
        else:
            self._loop.call_soon_threadsafe(self._task.cancel)

    def _on_task_done(self, task: asyncio.Task) -> None:
        # Задача отменена до первого шага: _run не выполнялся вовсе
        if task.cancelled():
            self._finish_abort()

    async def wait(self) -> None:
        """Дождаться loadend."""
        if self._task is None:
            raise TransportStateError("Transport was not sent")
        try:
            await asyncio.shield(self._task)
        except asyncio.CancelledError:
            if not self._task.cancelled():
                raise

    async def _run(self, body: Optional[bytes]) -> None:
        owns_client = self._client is None
        client = self._client or self._create_client()
        total = self._config.timeout.total

        try:
            self._begin()
            if total is not None:
                text = await asyncio.wait_for(self._transfer(client, body), total)
            else:
                text = await self._transfer(client, body)
        except asyncio.CancelledError:
            requested = self._aborted
            self._finish_abort()
            if not requested:
                raise
        except asyncio.TimeoutError:
            self._finish_error(TimeoutError("Request timeout", self.url, timeout_type="total"))
        except httpx.HTTPError as exc:
            self._finish_error(classify_httpx_exception(exc, self.url))
        except DispatchError as exc:
            self._finish_error(exc)
        except Exception as exc:
            # httpx.InvalidURL и прочее вне иерархии HTTPError
            self._logger.exception("Unexpected transport failure", url=self.url)
            self._finish_error(exc)
        else:
            self._finish_load(text)
        finally:
            if owns_client:
                await client.aclose()

    async def _transfer(self, client: httpx.AsyncClient, body: Optional[bytes]) -> str:
        max_size = self._config.security.max_response_size

        async with client.stream(
            self.method,
            self.url,
            headers=list(self._headers),
            content=body,
            auth=self._auth,
        ) as response:
            self._received_headers(response.status_code, dict(response.headers))

            content_length = response.headers.get("content-length")
            expected = int(content_length) if content_length and content_length.isdigit() else None
            if expected is not None and expected > max_size:
                raise ResponseTooLargeError(expected, max_size, self.url)

            chunks = []
            loaded = 0
            async for chunk in response.aiter_bytes():
                loaded += len(chunk)
                if loaded > max_size:
                    raise ResponseTooLargeError(loaded, max_size, self.url)
                chunks.append(chunk)
                self._progress(loaded, expected)

            return decode_body(b"".join(chunks), response.headers.get("content-type"))


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None
