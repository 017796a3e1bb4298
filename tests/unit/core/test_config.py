"""Тесты для системы конфигурации."""

import pytest

from src.http_dispatch.core.config import DispatchConfig, SecurityConfig, TimeoutConfig
from src.http_dispatch.core.logging.config import LoggingConfig

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TimeoutConfig
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def test_timeout_config_defaults():
    """Тест дефолтных значений."""
    config = TimeoutConfig()
    assert config.connect == 5
    assert config.read == 30
    assert config.total is None

def test_timeout_config_as_tuple():
    """Тест метода as_tuple."""
    assert TimeoutConfig(connect=3, read=45).as_tuple() == (3, 45)

@pytest.mark.parametrize("kwargs, message", [
    ({"connect": -1}, "connect timeout must be positive"),
    ({"read": 0}, "read timeout must be positive"),
    ({"total": -5}, "total timeout must be positive"),
])
def test_timeout_config_validation(kwargs, message):
    """Тест валидации таймаутов."""
    with pytest.raises(ValueError, match=message):
        TimeoutConfig(**kwargs)

def test_timeout_config_immutable():
    """Тест immutability."""
    config = TimeoutConfig()
    with pytest.raises(Exception):  # frozen dataclass
        config.connect = 10

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# SecurityConfig
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def test_security_config_defaults():
    """Тест дефолтных значений."""
    config = SecurityConfig()
    assert config.max_response_size == 100 * 1024 * 1024
    assert config.verify_ssl is True
    assert config.allow_redirects is True

def test_security_config_validation():
    """Тест валидации размера ответа."""
    with pytest.raises(ValueError, match="max_response_size must be positive"):
        SecurityConfig(max_response_size=0)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# DispatchConfig
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def test_dispatch_config_defaults():
    """Тест дефолтных значений."""
    config = DispatchConfig()
    assert dict(config.default_headers) == {}
    assert config.transport == "auto"
    assert config.enforce_https is True
    assert config.logging is None

def test_dispatch_config_invalid_transport():
    """Неизвестный тип транспорта."""
    with pytest.raises(ValueError, match="transport must be one of"):
        DispatchConfig(transport="curl")

def test_dispatch_config_headers_frozen():
    """Заголовки по умолчанию нельзя изменить после создания."""
    headers = {"User-Agent": "dispatch"}
    config = DispatchConfig(default_headers=headers)
    headers["User-Agent"] = "changed"

    assert config.default_headers["User-Agent"] == "dispatch"
    with pytest.raises(TypeError):
        config.default_headers["X-New"] = "1"

@pytest.mark.parametrize("timeout, expected", [
    (60, (5, 60)),
    ((3, 45), (3, 45)),
    (TimeoutConfig(connect=1, read=2), (1, 2)),
])
def test_dispatch_config_create_timeout(timeout, expected):
    """create() принимает число, кортеж или TimeoutConfig."""
    assert DispatchConfig.create(timeout=timeout).timeout.as_tuple() == expected

def test_dispatch_config_create_separate_timeouts():
    config = DispatchConfig.create(connect_timeout=2, read_timeout=9)
    assert config.timeout.as_tuple() == (2, 9)

def test_dispatch_config_create_full():
    """create() со всеми параметрами."""
    logging_config = LoggingConfig.create(enable_console=False)
    config = DispatchConfig.create(
        verify_ssl=False,
        allow_redirects=False,
        headers={"Accept": "application/json"},
        transport="thread",
        enforce_https=False,
        logging=logging_config,
    )
    assert config.security.verify_ssl is False
    assert config.security.allow_redirects is False
    assert config.default_headers["Accept"] == "application/json"
    assert config.transport == "thread"
    assert config.enforce_https is False
    assert config.logging is logging_config

def test_dispatch_config_with_timeout():
    """with_timeout возвращает новый конфиг."""
    config = DispatchConfig.create(headers={"A": "1"}, transport="thread")
    new_config = config.with_timeout(90)

    assert new_config.timeout.read == 90
    assert config.timeout.read == 30
    assert new_config.default_headers["A"] == "1"
    assert new_config.transport == "thread"

def test_dispatch_config_with_headers():
    """with_headers объединяет заголовки."""
    config = DispatchConfig.create(headers={"A": "1"})
    new_config = config.with_headers({"B": "2"})

    assert dict(new_config.default_headers) == {"A": "1", "B": "2"}
    assert dict(config.default_headers) == {"A": "1"}
