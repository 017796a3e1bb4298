"""
Tests for ThreadTransport using responses mocks.
"""

import json

import pytest
import requests
import responses

from src.http_dispatch.core.config import DispatchConfig, SecurityConfig
from src.http_dispatch.core.exceptions import (
    ConnectionError,
    ResponseTooLargeError,
    TimeoutError,
    TransportStateError,
)
from src.http_dispatch.core.models import ProgressEvent
from src.http_dispatch.transport import EVENTS, ReadyState, ThreadTransport

URL = "https://api.example.com/items"


def record_events(transport):
    events = []
    for event in EVENTS:
        transport.add_listener(event, lambda payload, event=event: events.append((event, payload)))
    return events


def run(transport, method="GET", body=None, **open_kwargs):
    transport.open(method, URL, True, **open_kwargs)
    transport.send(body)
    assert transport.wait(5) is True
    return transport


class TestLifecycle:
    """Порядок событий и состояние после завершения."""

    def test_successful_request(self, mock_responses):
        mock_responses.add(responses.GET, URL, json={"id": 1}, status=200)
        transport = ThreadTransport()
        events = record_events(transport)

        run(transport)

        names = [name for name, _ in events]
        assert names[0] == "start"
        assert names[-2:] == ["load", "loadend"]
        assert set(names[1:-2]) <= {"progress"}
        assert transport.status == 200
        assert json.loads(transport.response_text) == {"id": 1}
        assert transport.ready_state == ReadyState.DONE
        assert transport.outcome == "load"
        assert transport.done is True

    def test_progress_events(self, mock_responses):
        mock_responses.add(responses.GET, URL, body=b"x" * 20000)
        transport = ThreadTransport()
        progress = []
        transport.add_listener("progress", progress.append)

        run(transport)

        assert len(progress) >= 2
        assert all(isinstance(event, ProgressEvent) for event in progress)
        assert progress[-1].loaded == 20000

    def test_http_error_status_is_load(self, mock_responses):
        mock_responses.add(responses.GET, URL, json={"error": "missing"}, status=404)
        transport = run(ThreadTransport())
        assert transport.outcome == "load"
        assert transport.status == 404

    def test_charset_from_content_type(self, mock_responses):
        mock_responses.add(
            responses.GET, URL,
            body="привет".encode("cp1251"),
            content_type="text/plain; charset=windows-1251",
        )
        assert run(ThreadTransport()).response_text == "привет"


class TestRequest:
    """Что уходит на сервер."""

    def test_headers_body_and_auth(self, mock_responses):
        mock_responses.add(responses.POST, URL, body="ok")
        transport = ThreadTransport()
        transport.open("POST", URL, True, "alice", "s3cret")
        transport.set_header("X-Content-Type-Options", "nosniff")
        transport.set_header("Content-Type", "application/json")
        transport.send('{"a":"1"}')
        assert transport.wait(5)

        request = mock_responses.calls[0].request
        assert request.headers["X-Content-Type-Options"] == "nosniff"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["Authorization"].startswith("Basic ")
        assert request.body == b'{"a":"1"}'

    def test_external_session_not_closed(self, mock_responses):
        mock_responses.add(responses.GET, URL, body="ok")
        session = requests.Session()
        session.headers["X-Session"] = "1"

        run(ThreadTransport(session=session))

        assert mock_responses.calls[0].request.headers["X-Session"] == "1"
        session.close()


class TestErrors:
    """Ошибки транспорта приходят событием error."""

    def test_connection_error(self, mock_responses):
        mock_responses.add(responses.GET, URL, body=requests.exceptions.ConnectionError("refused"))
        transport = ThreadTransport()
        events = record_events(transport)

        run(transport)

        assert [name for name, _ in events][-2:] == ["error", "loadend"]
        assert isinstance(transport.error, ConnectionError)
        assert transport.status == 0

    def test_timeout(self, mock_responses):
        mock_responses.add(responses.GET, URL, body=requests.exceptions.ReadTimeout())
        transport = run(ThreadTransport())
        assert isinstance(transport.error, TimeoutError)
        assert transport.error.timeout_type == "read"

    def test_response_too_large(self, mock_responses):
        mock_responses.add(responses.GET, URL, body=b"x" * 100)
        config = DispatchConfig(security=SecurityConfig(max_response_size=10))
        transport = run(ThreadTransport(config=config))
        assert isinstance(transport.error, ResponseTooLargeError)
        assert transport.outcome == "error"

    def test_listener_exception_does_not_stop_lifecycle(self, mock_responses):
        mock_responses.add(responses.GET, URL, body="ok")
        transport = ThreadTransport()

        def broken(_):
            raise RuntimeError("listener bug")

        transport.add_listener("load", broken)
        finished = []
        transport.add_listener("loadend", finished.append)

        run(transport)
        assert finished == [transport]


class TestAbort:
    """abort()."""

    def test_abort_during_transfer(self, mock_responses):
        mock_responses.add(responses.GET, URL, body=b"x" * 40000)
        transport = ThreadTransport()
        events = record_events(transport)
        transport.add_listener("progress", lambda _: transport.abort())

        run(transport)

        names = [name for name, _ in events]
        assert names[-2:] == ["abort", "loadend"]
        assert "load" not in names
        assert transport.aborted is True
        assert transport.status == 0

    def test_abort_before_send(self):
        transport = ThreadTransport()
        events = record_events(transport)
        transport.open("GET", URL)
        transport.abort()

        assert events == []
        assert transport.ready_state == ReadyState.UNSENT
        with pytest.raises(TransportStateError):
            transport.send()

    def test_abort_after_completion_is_noop(self, mock_responses):
        mock_responses.add(responses.GET, URL, body="ok")
        transport = run(ThreadTransport())
        transport.abort()
        assert transport.outcome == "load"
        assert transport.aborted is False


class TestStateErrors:
    """Нарушение порядка вызовов."""

    def test_send_before_open(self):
        with pytest.raises(TransportStateError):
            ThreadTransport().send()

    def test_open_twice(self):
        transport = ThreadTransport()
        transport.open("GET", URL)
        with pytest.raises(TransportStateError):
            transport.open("GET", URL)

    def test_synchronous_mode_rejected(self):
        with pytest.raises(TransportStateError):
            ThreadTransport().open("GET", URL, False)

    def test_set_header_before_open(self):
        with pytest.raises(TransportStateError):
            ThreadTransport().set_header("A", "1")

    def test_wait_before_send(self):
        with pytest.raises(TransportStateError):
            ThreadTransport().wait(0.1)

    def test_unknown_event(self):
        with pytest.raises(ValueError, match="Unknown transport event"):
            ThreadTransport().add_listener("readystatechange", print)
