"""
Модели данных конвейера: заголовки, формы, callbacks, дескриптор запроса.

Все модели immutable (frozen dataclasses); коллекции хранятся как tuple,
так что после валидации ничего не меняется.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Union

ALLOWED_METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "HEAD", "OPTIONS"})

# Методы, для которых тело никогда не отправляется
BODYLESS_METHODS = frozenset({"GET", "HEAD"})

NOSNIFF_HEADER = "X-Content-Type-Options"
NOSNIFF_VALUE = "nosniff"
CONTENT_TYPE_HEADER = "Content-Type"

Callback = Callable[..., Any]


class EncodingStrategy(str, Enum):
    """Способ сериализации полей формы в тело запроса."""
    PLAIN = "plain"
    HTML = "html"
    JSON = "json"
    URLENCODED = "urlencoded"
    MULTIPART = "multipart"
    BINARY = "binary"
    BASE64 = "base64"

    @property
    def default_content_type(self) -> str:
        """Content-Type, который ставится, если вызывающий его не задал."""
        return _DEFAULT_CONTENT_TYPES[self]

    @property
    def supported(self) -> bool:
        return self not in (EncodingStrategy.MULTIPART, EncodingStrategy.BINARY, EncodingStrategy.BASE64)


_DEFAULT_CONTENT_TYPES = {
    EncodingStrategy.PLAIN: "text/plain;charset=UTF-8",
    EncodingStrategy.HTML: "text/html",
    EncodingStrategy.JSON: "application/json",
    EncodingStrategy.URLENCODED: "application/x-www-form-urlencoded",
    EncodingStrategy.MULTIPART: "multipart/form-data",
    EncodingStrategy.BINARY: "application/octet-stream",
    EncodingStrategy.BASE64: "application/octet-stream",
}


@dataclass(frozen=True)
class Header:
    """HTTP заголовок (name, value)."""
    name: str
    value: str


@dataclass(frozen=True)
class Credentials:
    """Basic auth учётные данные для transport.open()."""
    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class FormField:
    """
    Поле формы.

    Поля с пустым name или value допустимы в модели, но пропускаются
    при кодировании.
    """
    name: Optional[str]
    value: Optional[str]

    @property
    def is_valid(self) -> bool:
        return bool(self.name) and bool(self.value)


@dataclass(frozen=True)
class Form:
    """
    Структурированный источник тела (форма).

    Args:
        fields: Поля в порядке документа
        markup: Исходная разметка формы (используется стратегией HTML)

    Example:
        >>> form = Form.from_pairs([("q", "python"), ("page", "2")])
        >>> form = Form(fields=(FormField("q", "python"),), markup="<input name='q'>")
    """
    fields: Tuple[FormField, ...] = ()
    markup: str = ""

    def __post_init__(self):
        if not isinstance(self.fields, tuple):
            object.__setattr__(self, 'fields', tuple(self.fields))

    @classmethod
    def from_pairs(cls, pairs, markup: str = "") -> 'Form':
        """Построить форму из (name, value) пар или mapping'ов {"name", "value"}."""
        return cls(fields=tuple(_coerce_field(p) for p in pairs), markup=markup)


def _coerce_field(item: Any) -> FormField:
    if isinstance(item, FormField):
        return item
    if isinstance(item, dict):
        return FormField(item.get("name"), item.get("value"))
    name, value = item
    return FormField(name, value)


@dataclass(frozen=True)
class LifecycleCallbacks:
    """Набор callbacks запроса; обязателен только on_success."""
    on_success: Callback
    on_failure: Optional[Callback] = None
    on_abort: Optional[Callback] = None
    on_start: Optional[Callback] = None
    on_loading: Optional[Callback] = None
    on_finished: Optional[Callback] = None

    @classmethod
    def slot_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))


@dataclass(frozen=True)
class RequestOptions:
    """
    Типизированная форма опций запроса.

    dispatch() принимает либо этот объект, либо обычный dict с теми же
    ключами. Незаданные (None) поля считаются отсутствующими, кроме data:
    передайте has_data=True, чтобы отправить data=None явно.

    Example:
        >>> options = RequestOptions(
        ...     method="post",
        ...     url="https://api.example.com/items",
        ...     on_success=print,
        ...     headers=[Header("Content-Type", "application/json")],
        ...     form=Form.from_pairs([("name", "widget")]),
        ... )
    """
    method: Optional[str] = None
    url: Optional[str] = None
    on_success: Optional[Callback] = None
    on_failure: Optional[Callback] = None
    on_abort: Optional[Callback] = None
    on_start: Optional[Callback] = None
    on_loading: Optional[Callback] = None
    on_finished: Optional[Callback] = None
    headers: Any = None
    credentials: Any = None
    data: Any = None
    form: Any = None
    force_insecure: Optional[bool] = None
    consumes: Optional[str] = None
    encoding: Optional[Union[EncodingStrategy, str]] = None
    has_data: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Mapping, где отсутствующие опции просто не указаны."""
        result = {}
        for f in fields(self):
            if f.name == "has_data":
                continue
            value = getattr(self, f.name)
            if value is not None or (f.name == "data" and self.has_data):
                result[f.name] = value
        return result


@dataclass(frozen=True)
class ValidatedOptions:
    """Результат OptionValidator: нормализованные, неизменяемые опции."""
    method: str
    url: str
    callbacks: LifecycleCallbacks
    headers: Tuple[Header, ...] = ()
    credentials: Optional[Credentials] = None
    data: Any = None
    has_data: bool = False
    form: Optional[Form] = None
    force_insecure: bool = False
    consumes: Optional[str] = None
    encoding: Optional[EncodingStrategy] = None


@dataclass(frozen=True)
class EncodedBody:
    """Сериализованное тело и итоговый Content-Type."""
    body: Union[str, bytes]
    content_type: str


@dataclass(frozen=True)
class RequestDescriptor:
    """
    Готовый к отправке запрос.

    Attributes:
        method: Нормализованный HTTP метод
        url: URL после http -> https апгрейда
        headers: Заголовки в порядке установки на транспорт
        body: Тело (None - отправлять без тела)
        username: Basic auth username (или None)
        password: Basic auth password (или None)
        advisories: Некритичные предупреждения построения запроса
    """
    method: str
    url: str
    headers: Tuple[Header, ...] = ()
    body: Any = None
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    advisories: Tuple[str, ...] = ()

    def header(self, name: str) -> Optional[str]:
        """Значение заголовка по имени (без учёта регистра)."""
        lowered = name.lower()
        for h in self.headers:
            if h.name.lower() == lowered:
                return h.value
        return None


@dataclass(frozen=True)
class ProgressEvent:
    """Событие progress: сколько байт получено и сколько ожидается."""
    loaded: int
    total: Optional[int] = None

    @property
    def length_computable(self) -> bool:
        return self.total is not None
