"""Transports: the objects that actually perform the HTTP exchange."""

from .base import EVENTS, ReadyState, Transport
from .thread_transport import ThreadTransport
from .async_transport import AsyncTransport

__all__ = [
    "EVENTS",
    "ReadyState",
    "Transport",
    "ThreadTransport",
    "AsyncTransport",
]
