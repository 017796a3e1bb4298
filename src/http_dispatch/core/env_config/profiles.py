"""
Profile (.env file) selection.
"""

import os
from typing import Optional, Literal

ProfileType = Literal["development", "staging", "production"]

PROFILE_ENV_VAR = "HTTP_DISPATCH_ENV"


def get_env_file_path(profile: Optional[str] = None) -> str:
    """
    Get .env file path for profile.

    Example:
        >>> get_env_file_path("production")
        '.env.production'
        >>> get_env_file_path(None)  # HTTP_DISPATCH_ENV not set
        '.env'
    """
    if profile is None:
        profile = os.getenv(PROFILE_ENV_VAR)

    if not profile:
        return ".env"

    return f".env.{profile}"
