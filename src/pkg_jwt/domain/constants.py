from enum import Enum

from .exceptions import UnknownAlgorithmError


class Algorithm(str, Enum):
    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"
    BLAKE2B = "BLAKE2B"
    ES256 = "ES256"
    ES384 = "ES384"
    ES512 = "ES512"
    RS256 = "RS256"
    RS384 = "RS384"
    RS512 = "RS512"
    EdDSA = "EdDSA"

    @property
    def is_symmetric(self) -> bool:
        return self in _SYMMETRIC

    @classmethod
    def from_value(cls, value: "str | Algorithm") -> "Algorithm":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError as exc:
            raise UnknownAlgorithmError(f"Unknown JWT algorithm: {value!r}") from exc


_SYMMETRIC = frozenset({Algorithm.HS256, Algorithm.HS384, Algorithm.HS512, Algorithm.BLAKE2B})


class RegisteredClaim(str, Enum):
    SUBJECT = "sub"
    ISSUER = "iss"
    AUDIENCE = "aud"
    EXPIRATION_TIME = "exp"
    NOT_BEFORE = "nbf"
    ISSUED_AT = "iat"
    ID = "jti"

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in _REGISTERED_NAMES


_REGISTERED_NAMES = frozenset(c.value for c in RegisteredClaim)

# Set by the generator itself; contributors may not override them.
RESTRICTED_CLAIMS = frozenset(
    {
        RegisteredClaim.SUBJECT.value,
        RegisteredClaim.ISSUED_AT.value,
        RegisteredClaim.EXPIRATION_TIME.value,
    }
)

DEFAULT_EXPIRY_SECONDS = 3600
DEFAULT_DRIVER = "default"
