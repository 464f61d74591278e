"""
pkg_jwt.config

- JWTSettings: application values and raw generator configuration.
- settings_from_env: convenience loader for env-driven hosts.
"""

from __future__ import annotations

from .env import settings_from_env
from .settings import JWTSettings

__all__ = [
    "JWTSettings",
    "settings_from_env",
]
