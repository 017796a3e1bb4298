"""
Валидация опций запроса.

validate() проверяет наличие и типы обязательных полей и корректность
необязательных, и возвращает ValidatedOptions. Ошибка выбрасывается сразу,
частично применённых опций не бывает. Входной объект не изменяется.
"""

import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any, Optional, Tuple

from .exceptions import (
    DuplicateHeaderError,
    InvalidCallbackError,
    InvalidCredentialsError,
    InvalidHeaderError,
    MissingFieldError,
    TypeMismatchError,
    UnsupportedMethodError,
)
from .models import (
    ALLOWED_METHODS,
    Credentials,
    EncodingStrategy,
    Form,
    FormField,
    Header,
    LifecycleCallbacks,
    RequestOptions,
    ValidatedOptions,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (("on_success", "callable"), ("url", "str"), ("method", "str"))

KNOWN_KEYS = frozenset(LifecycleCallbacks.slot_names()) | {
    "method", "url", "headers", "credentials", "data", "form",
    "force_insecure", "consumes", "encoding",
}

_WHITESPACE = re.compile(r"\s+")


def normalize_method(method: str) -> str:
    """
    Привести HTTP метод к каноническому виду.

    Верхний регистр, все пробельные символы удалены. Идемпотентна.

    Example:
        >>> normalize_method(" get ")
        'GET'
    """
    return _WHITESPACE.sub("", method.upper())


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def validate(options: Any) -> ValidatedOptions:
    """
    Проверить описание запроса.

    Args:
        options: dict или RequestOptions

    Returns:
        ValidatedOptions

    Raises:
        MissingFieldError: нет on_success, url или method
        TypeMismatchError: неверный тип опции
        UnsupportedMethodError: метод вне GET/POST/PUT/DELETE/HEAD/OPTIONS
        InvalidCredentialsError: невалидные username/password
        InvalidHeaderError: заголовок без name/value
        DuplicateHeaderError: повтор имени заголовка
        InvalidCallbackError: необязательный callback не callable
    """
    if isinstance(options, RequestOptions):
        options = options.to_dict()

    if options is None:
        raise MissingFieldError("options", "You must provide options containing at least on_success, method and url")
    if not isinstance(options, Mapping):
        raise TypeMismatchError("options", "mapping", options)

    # Сначала наличие всех трёх, потом типы
    for name, _ in REQUIRED_FIELDS:
        if options.get(name) is None:
            raise MissingFieldError(name)

    for name, expected in REQUIRED_FIELDS:
        value = options[name]
        if expected == "callable" and not callable(value):
            raise TypeMismatchError(name, expected, value)
        if expected == "str" and not isinstance(value, str):
            raise TypeMismatchError(name, expected, value)

    url = options["url"]
    if not url.strip():
        raise MissingFieldError("url", "URL must be a non-empty string")

    method = normalize_method(options["method"])
    if method not in ALLOWED_METHODS:
        raise UnsupportedMethodError(method)

    unknown = set(options) - KNOWN_KEYS
    if unknown:
        logger.debug("Ignoring unknown request options: %s", ", ".join(sorted(unknown)))

    force_insecure = options.get("force_insecure", False)
    if force_insecure is None:
        force_insecure = False
    if not isinstance(force_insecure, bool):
        raise TypeMismatchError("force_insecure", "bool", force_insecure)

    consumes = options.get("consumes")
    if consumes is not None and not _non_empty_str(consumes):
        raise TypeMismatchError("consumes", "non-empty str", consumes)

    return ValidatedOptions(
        method=method,
        url=url,
        callbacks=_validate_callbacks(options),
        headers=_validate_headers(options.get("headers")),
        credentials=_validate_credentials(options.get("credentials")),
        data=options.get("data"),
        has_data="data" in options,
        form=_validate_form(options.get("form")),
        force_insecure=force_insecure,
        consumes=consumes,
        encoding=_validate_encoding(options.get("encoding")),
    )


def _validate_callbacks(options: Mapping) -> LifecycleCallbacks:
    slots = {}
    for slot in LifecycleCallbacks.slot_names():
        value = options.get(slot)
        if value is None:
            continue
        if not callable(value):
            raise InvalidCallbackError(slot)
        slots[slot] = value
    return LifecycleCallbacks(**slots)


def _validate_headers(headers: Any) -> Tuple[Header, ...]:
    if headers is None:
        return ()

    # Одиночный заголовок вместо списка
    if isinstance(headers, (Header, Mapping)):
        headers = [headers]
    elif isinstance(headers, (str, bytes)) or not isinstance(headers, Sequence):
        raise InvalidHeaderError("You must provide a single header, or a sequence of headers")

    result = []
    seen = set()
    for index, item in enumerate(headers):
        if isinstance(item, Header):
            name, value = item.name, item.value
        elif isinstance(item, Mapping):
            name, value = item.get("name"), item.get("value")
        else:
            raise InvalidHeaderError(index=index)

        if not _non_empty_str(name) or not _non_empty_str(value):
            raise InvalidHeaderError(index=index)

        key = name.lower()
        if key in seen:
            raise DuplicateHeaderError(name)
        seen.add(key)
        result.append(Header(name, value))

    return tuple(result)


def _validate_credentials(credentials: Any) -> Optional[Credentials]:
    if credentials is None:
        return None

    if isinstance(credentials, Credentials):
        username, password = credentials.username, credentials.password
    elif isinstance(credentials, Mapping):
        username, password = credentials.get("username"), credentials.get("password")
    else:
        raise InvalidCredentialsError("Credentials must be a Credentials instance or a mapping")

    if not _non_empty_str(username):
        raise InvalidCredentialsError("You've provided an invalid username")
    if not _non_empty_str(password):
        raise InvalidCredentialsError("You've provided an invalid password")

    return Credentials(username, password)


def _validate_form(form: Any) -> Optional[Form]:
    if form is None:
        return None
    if isinstance(form, Form):
        return form
    if isinstance(form, (str, bytes, Mapping)) or not isinstance(form, Sequence):
        raise TypeMismatchError("form", "Form or sequence of fields", form)

    fields = []
    for item in form:
        if isinstance(item, FormField):
            fields.append(item)
        elif isinstance(item, Mapping):
            fields.append(FormField(item.get("name"), item.get("value")))
        elif isinstance(item, Sequence) and not isinstance(item, (str, bytes)) and len(item) == 2:
            fields.append(FormField(item[0], item[1]))
        else:
            raise TypeMismatchError("form", "Form or sequence of fields", form)
    return Form(fields=tuple(fields))


def _validate_encoding(encoding: Any) -> Optional[EncodingStrategy]:
    if encoding is None:
        return None
    if isinstance(encoding, EncodingStrategy):
        return encoding
    if isinstance(encoding, str):
        try:
            return EncodingStrategy(encoding.strip().lower())
        except ValueError:
            pass
    raise TypeMismatchError(
        "encoding", "one of " + ", ".join(s.value for s in EncodingStrategy), encoding
    )
