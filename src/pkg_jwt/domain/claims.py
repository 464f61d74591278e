"""
Built-in claim contributors.

Each contributor produces exactly one claim. Literal contributors are
frozen value objects; the context-aware ones receive the generator name or
the issuance instant from the generator before `value()` is read.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional, Sequence, Tuple
from uuid import uuid4

from .constants import RegisteredClaim
from .exceptions import InvalidClaimError, UninitializedClaimError
from .value_objects import parse_duration


# --- Issuer -----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AsIssuer:
    """Fixed issuer. A `None` issuer is rejected at generation and ignored at validation."""
    issuer: Optional[str]

    def name(self) -> str:
        return RegisteredClaim.ISSUER.value

    def value(self) -> Optional[str]:
        return self.issuer


@dataclass(frozen=True, slots=True)
class AppNameAsIssuer:
    app_name: str

    def name(self) -> str:
        return RegisteredClaim.ISSUER.value

    def value(self) -> str:
        return self.app_name


@dataclass(frozen=True, slots=True)
class AppUrlAsIssuer:
    app_url: str

    def name(self) -> str:
        return RegisteredClaim.ISSUER.value

    def value(self) -> str:
        return self.app_url


class GeneratorNameAsIssuer:
    """Uses the name of the generator issuing the token as `iss`."""

    def __init__(self) -> None:
        self._generator_name: Optional[str] = None

    def name(self) -> str:
        return RegisteredClaim.ISSUER.value

    def value(self) -> str:
        if self._generator_name is None:
            raise UninitializedClaimError(
                "Generator name was never provided to GeneratorNameAsIssuer",
                claim=self.name(),
            )
        return self._generator_name

    def set_generator_name(self, name: str) -> None:
        self._generator_name = name


# --- Audience ---------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class InAudience:
    """Adds one audience. `None` means no audience restriction."""
    audience: Optional[str]

    def name(self) -> str:
        return RegisteredClaim.AUDIENCE.value

    def value(self) -> Optional[str]:
        return self.audience


@dataclass(frozen=True, slots=True)
class AsAudience:
    """Adds several audiences at once; `None` entries mean no restriction."""
    audience: Tuple[Optional[str], ...] = ()

    def __init__(self, audience: Sequence[Optional[str]] | str) -> None:
        if isinstance(audience, str):
            audience = (audience,)
        object.__setattr__(self, "audience", tuple(audience))

    def name(self) -> str:
        return RegisteredClaim.AUDIENCE.value

    def value(self) -> list[Optional[str]]:
        return list(self.audience)


@dataclass(frozen=True, slots=True)
class AppNameInAudience:
    app_name: str

    def name(self) -> str:
        return RegisteredClaim.AUDIENCE.value

    def value(self) -> str:
        return self.app_name


class GeneratorNameInAudience:
    """Adds the name of the issuing generator to `aud`."""

    def __init__(self) -> None:
        self._generator_name: Optional[str] = None

    def name(self) -> str:
        return RegisteredClaim.AUDIENCE.value

    def value(self) -> str:
        if self._generator_name is None:
            raise UninitializedClaimError(
                "Generator name was never provided to GeneratorNameInAudience",
                claim=self.name(),
            )
        return self._generator_name

    def set_generator_name(self, name: str) -> None:
        self._generator_name = name


# --- Time window ------------------------------------------------------------


class NotWithin:
    """
    Token cannot be used within `interval` of being issued:
    nbf = issued_at + interval.
    """

    def __init__(self, interval: Any) -> None:
        self.interval: timedelta = parse_duration(interval)
        self._issued_at: Optional[datetime] = None

    def name(self) -> str:
        return RegisteredClaim.NOT_BEFORE.value

    def value(self) -> datetime:
        if self._issued_at is None:
            raise UninitializedClaimError(
                "Issued-at time was never provided to NotWithin",
                claim=self.name(),
            )
        try:
            return self._issued_at + self.interval
        except OverflowError as exc:
            raise InvalidClaimError(
                f"Not-before interval {self.interval} is out of range",
                claim=self.name(),
            ) from exc

    def set_issued_at(self, issued_at: datetime) -> None:
        self._issued_at = issued_at


# --- Identifier / custom ----------------------------------------------------


class UniqueId:
    """Random `jti`, fresh for every token."""

    def __init__(self) -> None:
        self._id = uuid4().hex

    def name(self) -> str:
        return RegisteredClaim.ID.value

    def value(self) -> str:
        return self._id


@dataclass(frozen=True, slots=True)
class WithClaim:
    """A literal claim, usually a custom (non-registered) one."""
    claim_name: str
    claim_value: Any

    def name(self) -> str:
        return self.claim_name

    def value(self) -> Any:
        return self.claim_value
