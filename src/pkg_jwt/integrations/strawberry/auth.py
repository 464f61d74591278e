from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Type

from graphql import GraphQLError
from starlette.requests import Request
from strawberry.permission import BasePermission
from strawberry.types import Info

from ...application.manager import GeneratorManager
from ...config.settings import JWTSettings
from ...domain.entities import Token
from ...domain.exceptions import TokenExpiredError, TokenParsingError
from ..common.jwt_factory import create_jwt_manager, create_jwt_manager_from_env


# --------------------------------------------------------------------- #
# Context type used by Strawberry
# --------------------------------------------------------------------- #

@dataclass(slots=True)
class StrawberryJWTContext:
    """
    Default context type for Strawberry GraphQL.

    `token` is the parsed and validated JWT, or None for anonymous requests.
    """
    request: Request
    token: Optional[Token] = None
    extra: Any = None

    @property
    def subject(self) -> Optional[str]:
        return self.token.subject if self.token is not None else None


def _extract_token_from_request(request: Request, cookie_name: str) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header.removeprefix("Bearer ").strip()
        if token:
            return token

    return request.cookies.get(cookie_name) or None


# --------------------------------------------------------------------- #
# Main integration: StrawberryJWT
# --------------------------------------------------------------------- #

@dataclass(slots=True)
class StrawberryJWT:
    """
    Strawberry GraphQL integration for pkg_jwt.

    Responsibilities:
      - provide a `context_getter` for Strawberry's GraphQLRouter
      - provide a permission class for fields/mutations that need a token

    Token extraction:
      - checks Authorization: Bearer <token>
      - falls back to `cookie_name` (default: "access_token")
    """

    manager: GeneratorManager
    generator: str
    cookie_name: str = "access_token"

    def make_context_getter(
        self,
        *,
        optional: bool = True,
        extra_factory: Optional[Callable[[Request, Optional[Token]], Any]] = None,
    ):
        """
        Build an async function compatible with:

            strawberry.fastapi.GraphQLRouter(context_getter=...)

        Args:
            optional:
                - True:   missing or invalid tokens become `token=None`
                - False:  they become GraphQL errors
            extra_factory:
                - Optional callable: (request, token | None) -> Any,
                  stored on context.extra

        Returns:
            async function(request: Request) -> StrawberryJWTContext
        """

        def _anonymous(request: Request, message: str) -> StrawberryJWTContext:
            if not optional:
                raise GraphQLError(message)
            extra = extra_factory(request, None) if extra_factory else None
            return StrawberryJWTContext(request=request, token=None, extra=extra)

        async def _context_getter(request: Request) -> StrawberryJWTContext:
            raw = _extract_token_from_request(request, self.cookie_name)
            if not raw:
                return _anonymous(request, "Not authenticated")

            try:
                token = self.manager.get(self.generator).parse(raw)
            except TokenExpiredError:
                return _anonymous(request, "Token expired")
            except TokenParsingError as exc:
                return _anonymous(request, str(exc))

            extra = extra_factory(request, token) if extra_factory else None
            return StrawberryJWTContext(request=request, token=token, extra=extra)

        return _context_getter

    def require_token(self) -> Type[BasePermission]:
        """
        Permission: the context must carry a validated token.

        Example:

            RequireToken = strawberry_jwt.require_token()

            @strawberry.field(permission_classes=[RequireToken])
            def me(self, info: Info) -> str:
                return info.context.subject
        """

        class _RequireToken(BasePermission):
            message = "Authentication required"

            def has_permission(self, source: Any, info: Info, **kwargs: Any) -> bool:
                ctx: StrawberryJWTContext = info.context
                return ctx.token is not None

        return _RequireToken


def create_strawberry_jwt(
    *,
    generator: str,
    settings: Optional[JWTSettings] = None,
    cookie_name: str = "access_token",
) -> StrawberryJWT:
    """
    Convenience helper:

        strawberry_jwt = create_strawberry_jwt(generator="api")

    Builds the GeneratorManager from `settings`, or from the environment
    when none are given.
    """
    manager = create_jwt_manager(settings) if settings is not None else create_jwt_manager_from_env()
    return StrawberryJWT(manager=manager, generator=generator, cookie_name=cookie_name)
