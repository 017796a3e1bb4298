"""
Load DispatchConfig from environment variables and .env files.
"""

from typing import Optional

from pydantic import ValidationError as SettingsValidationError

from ..config import DispatchConfig, SecurityConfig, TimeoutConfig
from ..exceptions import ConfigurationError
from ..logging.config import LoggingConfig, LogFormat, LogLevel
from .profiles import ProfileType, get_env_file_path
from .validator import DispatchSettings


def load_from_env(
    profile: Optional[ProfileType] = None,
    env_file: Optional[str] = None,
    **overrides
) -> DispatchConfig:
    """
    Load DispatchConfig from environment variables.

    Priority (highest to lowest):
    1. **overrides - explicit parameters (same names as DispatchSettings fields)
    2. Environment variables (HTTP_DISPATCH_*)
    3. .env file (profile-specific or default)
    4. Defaults

    Raises:
        ConfigurationError: Невалидные значения в окружении, .env или overrides

    Example:
        >>> config = load_from_env(profile="production")
        >>> config = load_from_env(transport="thread", timeout_read=60)
    """
    if env_file is None:
        env_file = get_env_file_path(profile)

    try:
        settings = DispatchSettings(_env_file=env_file)
    except SettingsValidationError as e:
        raise ConfigurationError(f"Invalid environment configuration: {e}") from e

    try:
        return _build_config(settings, overrides)
    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _build_config(settings: DispatchSettings, overrides: dict) -> DispatchConfig:
    def pick(name):
        return overrides.get(name, getattr(settings, name))

    timeout = TimeoutConfig(
        connect=pick('timeout_connect'),
        read=pick('timeout_read'),
        total=pick('timeout_total'),
    )

    security = SecurityConfig(
        verify_ssl=pick('security_verify_ssl'),
        allow_redirects=pick('security_allow_redirects'),
        max_response_size=pick('security_max_response_size'),
    )

    logging_config = None
    if pick('log_enable_console') or pick('log_enable_file'):
        logging_config = LoggingConfig(
            level=LogLevel(str(pick('log_level')).upper()),
            format=LogFormat(str(pick('log_format')).lower()),
            enable_console=pick('log_enable_console'),
            console_stream=pick('log_console_stream'),
            enable_file=pick('log_enable_file'),
            file_path=pick('log_file_path'),
            max_bytes=pick('log_max_bytes'),
            backup_count=pick('log_backup_count'),
            enable_correlation_id=pick('log_enable_correlation_id'),
        )

    return DispatchConfig(
        timeout=timeout,
        security=security,
        transport=pick('transport'),
        enforce_https=pick('enforce_https'),
        logging=logging_config,
    )
