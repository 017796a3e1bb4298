"""
Сборка готового к отправке запроса из проверенных опций.
"""

import re
import warnings
from typing import TYPE_CHECKING, Dict, Mapping, Optional

from .encoder import encode
from .exceptions import AmbiguousBodyWarning
from .models import (
    BODYLESS_METHODS,
    CONTENT_TYPE_HEADER,
    NOSNIFF_HEADER,
    NOSNIFF_VALUE,
    EncodedBody,
    EncodingStrategy,
    Header,
    RequestDescriptor,
    ValidatedOptions,
)
from .negotiator import effective_content_type

if TYPE_CHECKING:
    from .logging import DispatchLogger

AMBIGUOUS_BODY_ADVISORY = "Data and form supplied, selecting data by default"

_INSECURE_SCHEME = re.compile(r"^http://", re.IGNORECASE)


def upgrade_url(url: str, force_insecure: bool = False) -> str:
    """
    Переписать http:// на https://, если не запрошено обратное.

    Это чистое преобразование строки, а не редирект.

    Example:
        >>> upgrade_url("http://example.com/a")
        'https://example.com/a'
        >>> upgrade_url("http://example.com/a", force_insecure=True)
        'http://example.com/a'
    """
    if force_insecure:
        return url
    return _INSECURE_SCHEME.sub("https://", url, count=1)


class _HeaderSet:
    """Упорядоченный набор заголовков с уникальными (без учёта регистра) именами."""

    def __init__(self):
        self._items: Dict[str, Header] = {}

    def set(self, name: str, value: str) -> None:
        # Замена сохраняет исходную позицию заголовка
        self._items[name.lower()] = Header(name, value)

    def has(self, name: str) -> bool:
        return name.lower() in self._items

    def as_tuple(self):
        return tuple(self._items.values())


def assemble(
    validated: ValidatedOptions,
    strategy: EncodingStrategy,
    encoded: Optional[EncodedBody] = None,
    *,
    default_headers: Optional[Mapping[str, str]] = None,
    enforce_https: bool = True,
    logger: Optional['DispatchLogger'] = None,
) -> RequestDescriptor:
    """
    Собрать RequestDescriptor.

    Args:
        validated: Результат validate()
        strategy: Результат negotiate()
        encoded: Результат encode() для формы (если None и форма будет
            отправлена, кодируется здесь)
        default_headers: Заголовки из DispatchConfig
        enforce_https: Выключает апгрейд http -> https для всех запросов
        logger: Логгер диспетчера

    Returns:
        RequestDescriptor

    Warns:
        AmbiguousBodyWarning: переданы и data, и form
    """
    force_insecure = validated.force_insecure or not enforce_https
    url = upgrade_url(validated.url, force_insecure)
    if validated.force_insecure and logger:
        logger.info("Insecure connection forced", url=url)

    headers = _HeaderSet()
    headers.set(NOSNIFF_HEADER, NOSNIFF_VALUE)
    for name, value in (default_headers or {}).items():
        headers.set(name, value)
    for header in validated.headers:
        headers.set(header.name, header.value)

    advisories = []
    body = None
    form_used = False

    if validated.has_data and validated.form is not None:
        warnings.warn(AMBIGUOUS_BODY_ADVISORY, AmbiguousBodyWarning, stacklevel=3)
        if logger:
            logger.warning(AMBIGUOUS_BODY_ADVISORY, method=validated.method, url=url)
        advisories.append(AMBIGUOUS_BODY_ADVISORY)
        body = validated.data
    elif validated.form is not None:
        if encoded is None:
            encoded = encode(
                strategy,
                validated.form,
                effective_content_type(validated.headers, validated.consumes),
            )
        body = encoded.body
        form_used = True
    elif validated.has_data:
        body = validated.data

    if validated.method in BODYLESS_METHODS:
        if body is not None and logger:
            logger.debug("Dropping request body for bodyless method", method=validated.method)
        body = None
        form_used = False

    if validated.consumes:
        headers.set(CONTENT_TYPE_HEADER, validated.consumes)
    elif form_used and not headers.has(CONTENT_TYPE_HEADER):
        headers.set(CONTENT_TYPE_HEADER, encoded.content_type)

    credentials = validated.credentials

    return RequestDescriptor(
        method=validated.method,
        url=url,
        headers=headers.as_tuple(),
        body=body,
        username=credentials.username if credentials else None,
        password=credentials.password if credentials else None,
        advisories=tuple(advisories),
    )
