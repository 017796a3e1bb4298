"""Тесты выбора стратегии кодирования."""

import pytest

from src.http_dispatch.core.models import EncodingStrategy, Header
from src.http_dispatch.core.negotiator import (
    classify_content_type,
    effective_content_type,
    negotiate,
)


class TestClassifyContentType:
    """Content-Type -> стратегия."""

    @pytest.mark.parametrize("content_type, expected", [
        ("application/json", EncodingStrategy.JSON),
        ("APPLICATION/JSON; charset=utf-8", EncodingStrategy.JSON),
        ("application/x-www-form-urlencoded", EncodingStrategy.URLENCODED),
        ("text/html", EncodingStrategy.HTML),
        ("multipart/form-data; boundary=x", EncodingStrategy.MULTIPART),
        ("text/plain", EncodingStrategy.PLAIN),
        ("application/xml", EncodingStrategy.PLAIN),
        (None, EncodingStrategy.PLAIN),
        ("", EncodingStrategy.PLAIN),
    ])
    def test_classify(self, content_type, expected):
        assert classify_content_type(content_type) == expected

    def test_json_has_precedence(self):
        """Первый совпавший токен в порядке json, urlencoded, html, multipart, plain."""
        assert classify_content_type("text/html+json") == EncodingStrategy.JSON
        assert classify_content_type("multipart/html") == EncodingStrategy.HTML

    def test_binary_never_inferred(self):
        assert classify_content_type("application/octet-stream") == EncodingStrategy.PLAIN


class TestNegotiate:
    """negotiate()."""

    def test_header_used(self):
        headers = (Header("content-type", "application/json"),)
        assert negotiate(headers) == EncodingStrategy.JSON

    def test_consumes_wins_over_header(self):
        headers = (Header("Content-Type", "application/json"),)
        assert negotiate(headers, consumes="text/html") == EncodingStrategy.HTML

    def test_explicit_wins(self):
        headers = (Header("Content-Type", "application/json"),)
        assert negotiate(headers, "text/html", EncodingStrategy.BASE64) == EncodingStrategy.BASE64

    def test_default_plain(self):
        assert negotiate(()) == EncodingStrategy.PLAIN

    def test_effective_content_type(self):
        headers = (Header("Accept", "*/*"), Header("Content-Type", "text/plain"))
        assert effective_content_type(headers) == "text/plain"
        assert effective_content_type(headers, "application/json") == "application/json"
        assert effective_content_type(()) is None
