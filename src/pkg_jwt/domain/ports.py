from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Protocol, runtime_checkable

from .constants import Algorithm
from .entities import Token


# --- Claim contract -------------------------------------------------------------


@runtime_checkable
class JWTClaim(Protocol):
    """
    A claim contributor: produces the name and value of one claim.

    `name()` is either a registered claim name (iss, aud, nbf, jti) or any
    custom name. `value()` may depend on context injected through the
    optional capabilities below, so it is only read after injection.
    """

    def name(self) -> str:
        ...

    def value(self) -> Any:
        ...


@runtime_checkable
class GeneratorNameAware(Protocol):
    """Claim capability: receives the owning generator's name."""

    def set_generator_name(self, name: str) -> None:
        ...


@runtime_checkable
class IssuedAtAware(Protocol):
    """Claim capability: receives the issuance instant of the token."""

    def set_issued_at(self, issued_at: datetime) -> None:
        ...


# --- Generators -------------------------------------------------------------------


@runtime_checkable
class Generator(Protocol):
    """
    A configured token issuer / validator.

    Implementations are produced by the GeneratorManager, either the
    built-in DefaultGenerator or a registered driver.
    """

    def name(self) -> str:
        ...

    def generate(self, subject: Any) -> Token:
        """
        Issue a signed token for the subject.

        Raises:
          - InvalidSubjectError
          - ClaimCompositionError subclasses for bad contributor values
        """
        ...

    def parse(self, token: str, validate: bool = True) -> Token:
        """
        Decode a token string and, unless `validate` is False, verify it.

        Raises:
          - InvalidTokenError
          - TokenValidationError subclasses
        """
        ...


# --- Collaborators ------------------------------------------------------------------


class TokenCodec(Protocol):
    """
    Port for the signer / verifier.

    Implementations live in the adapters layer (e.g. the PyJWT codec).
    """

    def prepare_key(self, algorithm: Algorithm, raw_key: bytes) -> Any:
        """Turn raw key bytes into the key object used to sign or verify."""
        ...

    def encode(self, claims: Mapping[str, Any], algorithm: Algorithm, key: Any) -> str:
        """Sign the claims and return the compact token string."""
        ...

    def decode(self, token: str) -> Token:
        """Split and decode a token without checking the signature."""
        ...

    def verify(self, token: str, algorithm: Algorithm, key: Any) -> None:
        """Check the signature; raises InvalidSignatureError on mismatch."""
        ...


class EventDispatcher(Protocol):
    """Port for notifying listeners about token generation."""

    def dispatch(self, event: object) -> None:
        ...
