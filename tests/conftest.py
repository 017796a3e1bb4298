"""
Pytest configuration and fixtures for http-dispatch tests.
"""

import threading

import pytest
import responses as responses_lib

from src.http_dispatch.core.config import DispatchConfig
from src.http_dispatch.core.dispatcher import RequestDispatcher
from src.http_dispatch.core.logging.config import LoggingConfig
from src.http_dispatch.transport.base import Transport


class CallbackRecorder:
    """
    Набор callbacks, записывающих порядок и аргументы вызовов.

    Example:
        def test_something(recorder):
            options = {"method": "GET", "url": "...", **recorder.options()}
    """

    SLOTS = ("on_success", "on_failure", "on_abort", "on_start", "on_loading", "on_finished")

    def __init__(self):
        self.calls = []
        self.finished = threading.Event()

    def _make(self, slot):
        def callback(argument):
            self.calls.append((slot, argument))
            if slot == "on_finished":
                self.finished.set()
        return callback

    def options(self, *slots):
        """Callbacks для указанных слотов (по умолчанию все)."""
        return {slot: self._make(slot) for slot in (slots or self.SLOTS)}

    @property
    def names(self):
        return [slot for slot, _ in self.calls]

    def argument(self, slot):
        for name, argument in self.calls:
            if name == slot:
                return argument
        raise AssertionError(f"{slot} was not called")


class FakeTransport(Transport):
    """
    Транспорт без сети: события эмитятся тестом вручную.

    send() только запоминает тело; тест затем вызывает emit_* методы.
    """

    def __init__(self, config=None, logger=None):
        super().__init__(config=config, logger=logger)
        self.sent_body = None
        self.cancelled = False

    def _start(self, body):
        self.sent_body = body

    def _cancel(self):
        self.cancelled = True
        self._finish_abort()

    def emit_start(self):
        self._begin()

    def emit_progress(self, loaded, total=None):
        self._progress(loaded, total)

    def emit_load(self, text, status=200):
        self._received_headers(status, {"Content-Type": "application/json"})
        self._finish_load(text)

    def emit_error(self, error):
        self._finish_error(error)

    def emit_raw(self, event):
        """Эмитировать событие в обход защиты от повторов (плохой транспорт)."""
        self._emit(event, self)


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return "https://api.example.com"


@pytest.fixture
def mock_responses():
    """Mock HTTP responses using responses library."""
    with responses_lib.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def recorder():
    """Записывающие callbacks."""
    return CallbackRecorder()


@pytest.fixture
def fake_transport():
    """Транспорт, события которого эмитит сам тест."""
    return FakeTransport()


@pytest.fixture
def dispatcher():
    """Диспетчер с конфигурацией по умолчанию."""
    dispatcher = RequestDispatcher(DispatchConfig())
    yield dispatcher
    dispatcher.close()


@pytest.fixture
def logging_config():
    """
    LoggingConfig fixture for testing.

    Example:
        def test_with_logging(logging_config):
            config = DispatchConfig.create(logging=logging_config)
            dispatcher = RequestDispatcher(config)
    """
    return LoggingConfig.create(
        level="DEBUG",
        enable_console=True,
        enable_file=False
    )


@pytest.fixture
def logging_config_with_file(tmp_path):
    """
    LoggingConfig fixture with file logging enabled.

    Uses temporary directory for log files to avoid cleanup issues.
    """
    log_file = tmp_path / "test.log"
    return LoggingConfig.create(
        level="DEBUG",
        enable_console=False,
        enable_file=True,
        file_path=str(log_file)
    )
