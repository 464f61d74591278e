from __future__ import annotations

from typing import Optional

from ...adapters.events.dispatcher import ListenerDispatcher
from ...adapters.pyjwt.codec import PyJWTTokenCodec
from ...application.claim_registry import ClaimRegistry
from ...application.generator import Clock, utc_now
from ...application.manager import GeneratorManager
from ...config.env import settings_from_env
from ...config.settings import JWTSettings
from ...domain.ports import EventDispatcher


def create_jwt_manager(
        settings: JWTSettings,
        *,
        dispatcher: Optional[EventDispatcher] = None,
        claims: Optional[ClaimRegistry] = None,
        clock: Clock = utc_now,
) -> GeneratorManager:
    """
    High-level factory: JWTSettings -> GeneratorManager.

    - signs / verifies with the PyJWT codec
    - uses a ListenerDispatcher unless a dispatcher is given
    - builds the default claim registry from the settings' app values
    """
    return GeneratorManager(
        settings,
        codec=PyJWTTokenCodec(),
        claims=claims,
        dispatcher=dispatcher if dispatcher is not None else ListenerDispatcher(),
        clock=clock,
    )


def create_jwt_manager_from_env(
        *,
        dispatcher: Optional[EventDispatcher] = None,
) -> GeneratorManager:
    """Same as create_jwt_manager, with settings read by settings_from_env()."""
    return create_jwt_manager(settings_from_env(), dispatcher=dispatcher)
