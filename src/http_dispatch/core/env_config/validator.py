"""
Pydantic settings for environment configuration.
"""

from typing import Optional, Literal
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DispatchSettings(BaseSettings):
    """
    Dispatcher configuration from environment variables.

    Reads from:
    1. Environment variables (HTTP_DISPATCH_*)
    2. .env file
    3. Defaults

    Example .env file:
        HTTP_DISPATCH_TRANSPORT=thread
        HTTP_DISPATCH_TIMEOUT_CONNECT=5.0
        HTTP_DISPATCH_TIMEOUT_READ=10.0
        HTTP_DISPATCH_ENFORCE_HTTPS=true
        HTTP_DISPATCH_LOG_LEVEL=INFO
    """

    model_config = SettingsConfigDict(
        env_prefix='HTTP_DISPATCH_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    transport: Literal["auto", "async", "thread"] = Field(default="auto")
    enforce_https: bool = Field(default=True)

    # Timeouts
    timeout_connect: float = Field(default=5.0, gt=0)
    timeout_read: float = Field(default=30.0, gt=0)
    timeout_total: Optional[float] = Field(default=None, gt=0)

    # Security
    security_verify_ssl: bool = Field(default=True)
    security_allow_redirects: bool = Field(default=True)
    security_max_response_size: int = Field(default=100 * 1024 * 1024, gt=0)

    # Logging (disabled unless console or file output is switched on)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["json", "text", "colored"] = Field(default="text")
    log_enable_console: bool = Field(default=False)
    log_console_stream: Literal["stdout", "stderr"] = Field(default="stdout")
    log_enable_file: bool = Field(default=False)
    log_file_path: Optional[str] = None
    log_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    log_backup_count: int = Field(default=5, ge=0)
    log_enable_correlation_id: bool = Field(default=True)

    @model_validator(mode='after')
    def validate_file_path(self) -> 'DispatchSettings':
        """log_file_path is required when log_enable_file=True."""
        if self.log_enable_file and not self.log_file_path:
            raise ValueError("log_file_path is required when log_enable_file=True")
        return self

    @property
    def logging_enabled(self) -> bool:
        return self.log_enable_console or self.log_enable_file
