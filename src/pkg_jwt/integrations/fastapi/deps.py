from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials

from .security import DEFAULT_COOKIE_NAME, bearer_scheme, extract_bearer_token
from ...application.manager import GeneratorManager
from ...domain.entities import Token
from ...domain.exceptions import TokenExpiredError, TokenParsingError
from ...domain.ports import Generator


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@dataclass(slots=True)
class FastAPIJWT:
    """
    FastAPI integration for pkg_jwt.

    Validates the request's bearer token with one named generator of a
    GeneratorManager. Configuration errors are not caught here; they are
    server faults, not client ones.
    """

    manager: GeneratorManager
    generator: str
    cookie_name: str = DEFAULT_COOKIE_NAME

    def _generator(self) -> Generator:
        return self.manager.get(self.generator)

    # ------------------------------------------------------------------ #
    # Dependencies
    # ------------------------------------------------------------------ #

    async def get_token(
            self,
            request: Request,
            credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    ) -> Token:
        """Dependency: require a valid token."""
        raw = extract_bearer_token(request, credentials, self.cookie_name)
        if raw is None:
            raise _unauthorized("Not authenticated")

        try:
            return self._generator().parse(raw)
        except TokenExpiredError as exc:
            raise _unauthorized("Token expired") from exc
        except TokenParsingError as exc:
            raise _unauthorized(str(exc)) from exc

    async def get_optional_token(
            self,
            request: Request,
            credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    ) -> Token | None:
        """Dependency: token if present and valid, otherwise None."""
        raw = extract_bearer_token(request, credentials, self.cookie_name)
        if raw is None:
            return None

        try:
            return self._generator().parse(raw)
        except TokenParsingError:
            return None

    async def get_subject(
            self,
            request: Request,
            credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    ) -> str:
        """Dependency: require a valid token and return its subject."""
        token = await self.get_token(request, credentials)
        if not token.subject:
            raise _unauthorized("Token has no subject")
        return token.subject


"""

from fastapi import Depends, FastAPI
from pkg_jwt.integrations.fastapi import create_fastapi_jwt

fastapi_jwt = create_fastapi_jwt(generator="api")

app = FastAPI()

@app.get("/me")
async def me(subject: str = Depends(fastapi_jwt.get_subject)):
    return {"user": subject}

"""
