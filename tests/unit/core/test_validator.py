"""Тесты для валидации опций запроса."""

import copy

import pytest

from src.http_dispatch.core.exceptions import (
    DuplicateHeaderError,
    InvalidCallbackError,
    InvalidCredentialsError,
    InvalidHeaderError,
    MissingFieldError,
    TypeMismatchError,
    UnsupportedMethodError,
    ValidationError,
)
from src.http_dispatch.core.models import (
    Credentials,
    EncodingStrategy,
    Form,
    FormField,
    Header,
    RequestOptions,
)
from src.http_dispatch.core.validator import normalize_method, validate


def noop(_):
    pass


def make_options(**overrides):
    options = {"method": "GET", "url": "https://api.example.com/items", "on_success": noop}
    options.update(overrides)
    return options


class TestNormalizeMethod:
    """Нормализация HTTP метода."""

    @pytest.mark.parametrize("raw, expected", [
        ("get", "GET"),
        (" post ", "POST"),
        ("P U T", "PUT"),
        ("\tdelete\n", "DELETE"),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_method(raw) == expected

    def test_idempotent(self):
        assert normalize_method(normalize_method(" opTions ")) == "OPTIONS"


class TestRequiredFields:
    """Обязательные поля: on_success, url, method."""

    def test_none_options(self):
        with pytest.raises(MissingFieldError) as exc_info:
            validate(None)
        assert exc_info.value.field == "options"

    def test_non_mapping_options(self):
        with pytest.raises(TypeMismatchError):
            validate(["GET", "https://example.com"])

    def test_missing_on_success_checked_first(self):
        """on_success проверяется раньше url и method."""
        with pytest.raises(MissingFieldError) as exc_info:
            validate({})
        assert exc_info.value.field == "on_success"

    def test_missing_url(self):
        options = make_options()
        del options["url"]
        with pytest.raises(MissingFieldError) as exc_info:
            validate(options)
        assert exc_info.value.field == "url"
        assert "(field: url)" in str(exc_info.value)

    def test_missing_method(self):
        options = make_options()
        del options["method"]
        with pytest.raises(MissingFieldError) as exc_info:
            validate(options)
        assert exc_info.value.field == "method"

    @pytest.mark.parametrize("options, missing", [
        ({"on_success": 1}, "url"),
        ({"on_success": noop, "url": 42}, "method"),
        ({"url": "https://a.com", "method": 7}, "on_success"),
    ])
    def test_presence_checked_before_types(self, options, missing):
        """Отсутствующее поле важнее неверного типа у присутствующего."""
        with pytest.raises(MissingFieldError) as exc_info:
            validate(options)
        assert exc_info.value.field == missing

    def test_none_counts_as_missing(self):
        with pytest.raises(MissingFieldError):
            validate(make_options(url=None))

    def test_empty_url(self):
        with pytest.raises(MissingFieldError) as exc_info:
            validate(make_options(url="   "))
        assert exc_info.value.field == "url"

    def test_on_success_not_callable(self):
        with pytest.raises(TypeMismatchError) as exc_info:
            validate(make_options(on_success="print"))
        assert exc_info.value.field == "on_success"
        assert exc_info.value.actual_type == "str"

    def test_url_not_string(self):
        with pytest.raises(TypeMismatchError) as exc_info:
            validate(make_options(url=42))
        assert exc_info.value.expected == "str"

    def test_method_not_string(self):
        with pytest.raises(TypeMismatchError):
            validate(make_options(method=["GET"]))

    def test_unsupported_method(self):
        with pytest.raises(UnsupportedMethodError) as exc_info:
            validate(make_options(method="patch"))
        assert exc_info.value.method == "PATCH"

    def test_validation_errors_are_fatal(self):
        with pytest.raises(ValidationError) as exc_info:
            validate({})
        assert exc_info.value.fatal is True
        assert exc_info.value.retryable is False


class TestValidResult:
    """Успешная валидация."""

    def test_minimal(self):
        validated = validate(make_options(method=" get "))
        assert validated.method == "GET"
        assert validated.url == "https://api.example.com/items"
        assert validated.callbacks.on_success is noop
        assert validated.headers == ()
        assert validated.form is None
        assert validated.has_data is False
        assert validated.force_insecure is False

    def test_input_not_mutated(self):
        options = make_options(
            headers=[{"name": "Accept", "value": "application/json"}],
            form=[("a", "1")],
        )
        snapshot = copy.deepcopy({k: v for k, v in options.items() if k != "on_success"})
        validate(options)
        assert {k: v for k, v in options.items() if k != "on_success"} == snapshot

    def test_request_options_object(self):
        validated = validate(RequestOptions(method="post", url="https://a.com", on_success=noop))
        assert validated.method == "POST"

    def test_request_options_explicit_none_data(self):
        validated = validate(RequestOptions(method="post", url="https://a.com",
                                            on_success=noop, has_data=True))
        assert validated.has_data is True
        assert validated.data is None

    def test_data_key_presence(self):
        validated = validate(make_options(method="POST", data=""))
        assert validated.has_data is True
        assert validated.data == ""

    def test_unknown_keys_ignored(self):
        validated = validate(make_options(retries=3))
        assert validated.method == "GET"


class TestCallbacks:
    """Необязательные callbacks."""

    def test_optional_callbacks_collected(self):
        validated = validate(make_options(on_failure=noop, on_finished=noop))
        assert validated.callbacks.on_failure is noop
        assert validated.callbacks.on_finished is noop
        assert validated.callbacks.on_abort is None

    def test_non_callable_optional_callback(self):
        with pytest.raises(InvalidCallbackError) as exc_info:
            validate(make_options(on_abort=123))
        assert exc_info.value.slot == "on_abort"


class TestHeaders:
    """Заголовки."""

    def test_single_mapping_header(self):
        validated = validate(make_options(headers={"name": "Accept", "value": "text/html"}))
        assert validated.headers == (Header("Accept", "text/html"),)

    def test_header_objects(self):
        validated = validate(make_options(headers=[Header("A", "1"), Header("B", "2")]))
        assert [h.name for h in validated.headers] == ["A", "B"]

    def test_missing_value(self):
        with pytest.raises(InvalidHeaderError) as exc_info:
            validate(make_options(headers=[{"name": "A", "value": "1"}, {"name": "B"}]))
        assert exc_info.value.index == 1

    def test_empty_name(self):
        with pytest.raises(InvalidHeaderError):
            validate(make_options(headers=[{"name": "", "value": "1"}]))

    def test_invalid_item_type(self):
        with pytest.raises(InvalidHeaderError):
            validate(make_options(headers=[("Accept", "text/html")]))

    def test_string_headers_rejected(self):
        with pytest.raises(InvalidHeaderError):
            validate(make_options(headers="Accept: text/html"))

    def test_duplicate_case_insensitive(self):
        with pytest.raises(DuplicateHeaderError) as exc_info:
            validate(make_options(headers=[
                {"name": "Content-Type", "value": "application/json"},
                {"name": "content-type", "value": "text/plain"},
            ]))
        assert exc_info.value.name == "content-type"
        assert isinstance(exc_info.value, InvalidHeaderError)


class TestCredentials:
    """Учётные данные."""

    def test_mapping(self):
        validated = validate(make_options(credentials={"username": "alice", "password": "s3cret"}))
        assert validated.credentials == Credentials("alice", "s3cret")

    def test_credentials_object(self):
        validated = validate(make_options(credentials=Credentials("alice", "s3cret")))
        assert validated.credentials.username == "alice"

    def test_missing_password(self):
        with pytest.raises(InvalidCredentialsError, match="invalid password"):
            validate(make_options(credentials={"username": "alice"}))

    def test_empty_username(self):
        with pytest.raises(InvalidCredentialsError, match="invalid username"):
            validate(make_options(credentials={"username": "", "password": "x"}))

    def test_wrong_type(self):
        with pytest.raises(InvalidCredentialsError):
            validate(make_options(credentials=("alice", "s3cret")))

    def test_repr_hides_password(self):
        assert "s3cret" not in repr(Credentials("alice", "s3cret"))


class TestOptionalFields:
    """force_insecure, consumes, form, encoding."""

    def test_force_insecure_must_be_bool(self):
        with pytest.raises(TypeMismatchError) as exc_info:
            validate(make_options(force_insecure="yes"))
        assert exc_info.value.field == "force_insecure"

    def test_consumes_must_be_non_empty(self):
        with pytest.raises(TypeMismatchError):
            validate(make_options(consumes=""))

    def test_form_pairs(self):
        validated = validate(make_options(form=[("a", "1"), {"name": "b", "value": "2"}]))
        assert validated.form.fields == (FormField("a", "1"), FormField("b", "2"))

    def test_form_object_passthrough(self):
        form = Form.from_pairs([("a", "1")], markup="<form></form>")
        assert validate(make_options(form=form)).form is form

    def test_form_mapping_rejected(self):
        with pytest.raises(TypeMismatchError):
            validate(make_options(form={"a": "1"}))

    def test_form_bad_item(self):
        with pytest.raises(TypeMismatchError):
            validate(make_options(form=["a=1"]))

    @pytest.mark.parametrize("value, expected", [
        ("json", EncodingStrategy.JSON),
        (" BASE64 ", EncodingStrategy.BASE64),
        (EncodingStrategy.BINARY, EncodingStrategy.BINARY),
    ])
    def test_encoding(self, value, expected):
        assert validate(make_options(encoding=value)).encoding == expected

    def test_unknown_encoding(self):
        with pytest.raises(TypeMismatchError) as exc_info:
            validate(make_options(encoding="xml"))
        assert exc_info.value.field == "encoding"
