from __future__ import annotations

from typing import Optional

from .deps import FastAPIJWT
from .security import bearer_scheme, extract_bearer_token
from ..common.jwt_factory import create_jwt_manager, create_jwt_manager_from_env
from ...config.settings import JWTSettings


def create_fastapi_jwt(
    *,
    generator: str,
    settings: Optional[JWTSettings] = None,
    cookie_name: str = "access_token",
) -> FastAPIJWT:
    """
    High-level helper for FastAPI apps:

    - Builds a GeneratorManager from `settings` (or the environment)
    - Wraps it in FastAPIJWT, exposing dependencies like:

        fastapi_jwt.get_token
        fastapi_jwt.get_optional_token
        fastapi_jwt.get_subject
    """
    manager = create_jwt_manager(settings) if settings is not None else create_jwt_manager_from_env()
    return FastAPIJWT(manager=manager, generator=generator, cookie_name=cookie_name)


__all__ = ["FastAPIJWT", "bearer_scheme", "create_fastapi_jwt", "extract_bearer_token"]
