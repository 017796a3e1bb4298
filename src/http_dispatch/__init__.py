"""HTTP Dispatch - declarative asynchronous HTTP request dispatcher."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .core.dispatcher import RequestDispatcher, dispatch, prepare
from .core.config import DispatchConfig, TimeoutConfig, SecurityConfig
from .core.models import (
    EncodingStrategy,
    Header,
    Credentials,
    FormField,
    Form,
    LifecycleCallbacks,
    RequestOptions,
    RequestDescriptor,
    ProgressEvent,
)
from .core.exceptions import (
    DispatchError,
    ValidationError,
    MissingFieldError,
    TypeMismatchError,
    UnsupportedMethodError,
    InvalidCredentialsError,
    InvalidHeaderError,
    DuplicateHeaderError,
    InvalidCallbackError,
    EncodingError,
    UnsupportedEncodingError,
    NetworkError,
    TimeoutError,
    ConnectionError,
    ProxyError,
    ResponseTooLargeError,
    TransportStateError,
    ConfigurationError,
    AmbiguousBodyWarning,
)
from .core.logging import LoggingConfig
from .core.env_config import load_from_env
from .transport import Transport, ThreadTransport, AsyncTransport, ReadyState

# NullHandler предотвращает "No handler found"; настройка логирования -
# через LoggingConfig или logging.getLogger('http_dispatch')
logging.getLogger('http_dispatch').addHandler(logging.NullHandler())

try:
    __version__ = version("http-dispatch")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__all__ = [
    # Core
    "RequestDispatcher",
    "dispatch",
    "prepare",

    # Config
    "DispatchConfig",
    "TimeoutConfig",
    "SecurityConfig",
    "LoggingConfig",
    "load_from_env",

    # Models
    "EncodingStrategy",
    "Header",
    "Credentials",
    "FormField",
    "Form",
    "LifecycleCallbacks",
    "RequestOptions",
    "RequestDescriptor",
    "ProgressEvent",

    # Transports
    "Transport",
    "ThreadTransport",
    "AsyncTransport",
    "ReadyState",

    # Exceptions
    "DispatchError",
    "ValidationError",
    "MissingFieldError",
    "TypeMismatchError",
    "UnsupportedMethodError",
    "InvalidCredentialsError",
    "InvalidHeaderError",
    "DuplicateHeaderError",
    "InvalidCallbackError",
    "EncodingError",
    "UnsupportedEncodingError",
    "NetworkError",
    "TimeoutError",
    "ConnectionError",
    "ProxyError",
    "ResponseTooLargeError",
    "TransportStateError",
    "ConfigurationError",
    "AmbiguousBodyWarning",
]
