"""
Environment configuration for HTTP Dispatch.

Example:
    >>> from http_dispatch.core.env_config import load_from_env
    >>> config = load_from_env()
    >>> config = load_from_env(profile="production", transport="thread")
"""

from .loader import load_from_env
from .validator import DispatchSettings
from .profiles import ProfileType, get_env_file_path

__all__ = [
    "load_from_env",
    "DispatchSettings",
    "ProfileType",
    "get_env_file_path",
]
