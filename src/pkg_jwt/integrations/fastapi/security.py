from __future__ import annotations

from typing import Optional

from fastapi import Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

# Expose this so apps can plug it into dependencies if they want OpenAPI security
bearer_scheme = HTTPBearer(auto_error=False)

DEFAULT_COOKIE_NAME = "access_token"


def extract_bearer_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = None,
    cookie_name: str = DEFAULT_COOKIE_NAME,
) -> Optional[str]:
    """
    Find the JWT sent with a request:

      1. HTTP Bearer credentials (when the bearer_scheme dependency ran)
      2. Raw "Authorization: Bearer <token>" header
      3. The `cookie_name` cookie

    Returns None when no token is present.
    """
    if credentials is not None:
        token = (credentials.credentials or "").strip()
        if token:
            return token

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header.removeprefix("Bearer ").strip()
        if token:
            return token

    return request.cookies.get(cookie_name) or None
