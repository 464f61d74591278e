from .auth import (
    StrawberryJWT,
    StrawberryJWTContext,
    create_strawberry_jwt,
)

__all__ = [
    "StrawberryJWT",
    "StrawberryJWTContext",
    "create_strawberry_jwt",
]
