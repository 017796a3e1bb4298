"""
Кодирование полей формы в тело запроса.

Поддерживаемые стратегии:
- PLAIN: name=value подряд, без разделителя между парами
- JSON: {"name": "value", ...}, при повторе имени побеждает последнее
- URLENCODED: ?name=value&name2=value2 (percent-encoding как у encodeURIComponent)
- HTML: исходная разметка формы без изменений

MULTIPART, BINARY и BASE64 объявлены, но не реализованы: их выбор
приводит к UnsupportedEncodingError, а не к пустому телу.

Невалидные поля (пустое name или value) пропускаются и никогда не
приводят к ошибке.
"""

import json
import logging
from typing import Iterator, Optional
from urllib.parse import quote

from .exceptions import UnsupportedEncodingError
from .models import EncodedBody, EncodingStrategy, Form, FormField

logger = logging.getLogger(__name__)

# Символы, которые encodeURIComponent оставляет как есть
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_uri_component(value: str) -> str:
    """
    Percent-encoding, совместимый с JavaScript encodeURIComponent.

    Example:
        >>> encode_uri_component("a b&c")
        'a%20b%26c'
    """
    return quote(value, safe=_URI_COMPONENT_SAFE)


def _valid_fields(form: Optional[Form]) -> Iterator[FormField]:
    if form is None:
        return
    for f in form.fields:
        if f.is_valid:
            yield f
        else:
            logger.debug("Skipping form field with empty name or value: %r", f.name)


def _encode_plain(form: Optional[Form]) -> str:
    return "".join(f"{f.name}={f.value}" for f in _valid_fields(form))


def _encode_json(form: Optional[Form]) -> str:
    payload = {}
    for f in _valid_fields(form):
        payload[str(f.name)] = str(f.value)
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def _encode_urlencoded(form: Optional[Form]) -> str:
    pairs = [
        encode_uri_component(str(f.name)) + "=" + encode_uri_component(str(f.value))
        for f in _valid_fields(form)
    ]
    if not pairs:
        return ""
    # "?" входит в тело: так его ожидают существующие backend'ы
    return "?" + "&".join(pairs)


def _encode_html(form: Optional[Form]) -> str:
    return form.markup if form is not None else ""


_ENCODERS = {
    EncodingStrategy.PLAIN: _encode_plain,
    EncodingStrategy.JSON: _encode_json,
    EncodingStrategy.URLENCODED: _encode_urlencoded,
    EncodingStrategy.HTML: _encode_html,
}


def encode(
    strategy: EncodingStrategy,
    form: Optional[Form],
    content_type: Optional[str] = None,
) -> EncodedBody:
    """
    Сериализовать форму выбранной стратегией.

    Args:
        strategy: Результат negotiate()
        form: Источник полей
        content_type: Действующий Content-Type из опций (если задан)

    Returns:
        EncodedBody с телом и итоговым Content-Type

    Raises:
        UnsupportedEncodingError: MULTIPART, BINARY, BASE64
    """
    encoder = _ENCODERS.get(strategy)
    if encoder is None:
        raise UnsupportedEncodingError(strategy.value)

    return EncodedBody(
        body=encoder(form),
        content_type=content_type or strategy.default_content_type,
    )
