"""
Выбор стратегии кодирования тела по Content-Type.
"""

from typing import Iterable, Optional

from .models import CONTENT_TYPE_HEADER, EncodingStrategy, Header

# Порядок важен: первый найденный токен определяет стратегию
_CONTENT_TYPE_TOKENS = (
    ("json", EncodingStrategy.JSON),
    ("x-www-form-urlencoded", EncodingStrategy.URLENCODED),
    ("html", EncodingStrategy.HTML),
    ("multipart", EncodingStrategy.MULTIPART),
    ("plain", EncodingStrategy.PLAIN),
)


def _contains(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()


def effective_content_type(headers: Iterable[Header], consumes: Optional[str] = None) -> Optional[str]:
    """
    Действующий Content-Type: consumes, иначе заголовок из опций, иначе None.
    """
    if consumes:
        return consumes
    for header in headers:
        if header.name.lower() == CONTENT_TYPE_HEADER.lower():
            return header.value
    return None


def classify_content_type(content_type: Optional[str]) -> EncodingStrategy:
    """
    Определить стратегию по значению Content-Type.

    BINARY и BASE64 никогда не выводятся автоматически.

    Example:
        >>> classify_content_type("application/json; charset=utf-8")
        <EncodingStrategy.JSON: 'json'>
        >>> classify_content_type(None)
        <EncodingStrategy.PLAIN: 'plain'>
    """
    if not content_type:
        return EncodingStrategy.PLAIN
    for token, strategy in _CONTENT_TYPE_TOKENS:
        if _contains(content_type, token):
            return strategy
    return EncodingStrategy.PLAIN


def negotiate(
    headers: Iterable[Header],
    consumes: Optional[str] = None,
    explicit: Optional[EncodingStrategy] = None,
) -> EncodingStrategy:
    """
    Выбрать стратегию кодирования.

    Args:
        headers: Заголовки из опций
        consumes: Явный Content-Type (побеждает заголовок из headers)
        explicit: Явно заданная стратегия (единственный способ выбрать
            BINARY или BASE64)

    Returns:
        EncodingStrategy
    """
    if explicit is not None:
        return explicit
    return classify_content_type(effective_content_type(headers, consumes))
