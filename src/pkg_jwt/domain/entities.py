from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional, Tuple

from .constants import Algorithm, RegisteredClaim, DEFAULT_DRIVER
from .value_objects import ClaimSpec, KeyMaterial


def to_numeric_date(value: datetime) -> int:
    """Seconds since the epoch, as stored in exp / nbf / iat."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def from_numeric_date(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Invalid NumericDate: {value!r}")
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise ValueError(f"NumericDate out of range: {value!r}") from exc


@dataclass(frozen=True, slots=True)
class GeneratorConfig:
    """
    Fully resolved configuration of one generator.

    Built once by the manager and never modified afterwards.
    """
    name: str
    algorithm: Algorithm
    keys: KeyMaterial
    expiry: Optional[timedelta] = None
    claims: Tuple[ClaimSpec, ...] = ()
    driver: str = DEFAULT_DRIVER
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Token:
    """
    A decoded compact JWS token.

    `raw` is the exact string that was signed or parsed; the signature is
    kept as opaque bytes and only ever handed back to the verifier.
    """
    raw: str
    header: Mapping[str, Any]
    claims: Mapping[str, Any]
    signature: bytes = b""

    def __post_init__(self) -> None:
        # Fail early on registered claims of the wrong type.
        for name in (
            RegisteredClaim.EXPIRATION_TIME,
            RegisteredClaim.NOT_BEFORE,
            RegisteredClaim.ISSUED_AT,
        ):
            from_numeric_date(self.claims.get(name.value))

        aud = self.claims.get(RegisteredClaim.AUDIENCE.value)
        if aud is not None and not isinstance(aud, str):
            if not isinstance(aud, list) or not all(isinstance(a, str) for a in aud):
                raise ValueError(f"Invalid audience claim: {aud!r}")

        for name in (RegisteredClaim.SUBJECT, RegisteredClaim.ISSUER, RegisteredClaim.ID):
            value = self.claims.get(name.value)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"Invalid {name.value} claim: {value!r}")

    def __str__(self) -> str:
        return self.raw

    # --- Registered claim accessors ---------------------------------------

    def get(self, name: str, default: Any = None) -> Any:
        return self.claims.get(name, default)

    def has(self, name: str) -> bool:
        return name in self.claims

    @property
    def algorithm(self) -> Optional[str]:
        return self.header.get("alg")

    @property
    def subject(self) -> Optional[str]:
        return self.claims.get(RegisteredClaim.SUBJECT.value)

    @property
    def issuer(self) -> Optional[str]:
        return self.claims.get(RegisteredClaim.ISSUER.value)

    @property
    def id(self) -> Optional[str]:
        return self.claims.get(RegisteredClaim.ID.value)

    @property
    def audience(self) -> Tuple[str, ...]:
        aud = self.claims.get(RegisteredClaim.AUDIENCE.value)
        if aud is None:
            return ()
        if isinstance(aud, str):
            return (aud,)
        return tuple(aud)

    @property
    def issued_at(self) -> Optional[datetime]:
        return from_numeric_date(self.claims.get(RegisteredClaim.ISSUED_AT.value))

    @property
    def expires_at(self) -> Optional[datetime]:
        return from_numeric_date(self.claims.get(RegisteredClaim.EXPIRATION_TIME.value))

    @property
    def not_before(self) -> Optional[datetime]:
        return from_numeric_date(self.claims.get(RegisteredClaim.NOT_BEFORE.value))

    # --- Predicates used during validation --------------------------------

    def is_expired(self, now: datetime) -> bool:
        expires_at = self.expires_at
        return expires_at is not None and now >= expires_at

    def has_been_issued_before(self, now: datetime) -> bool:
        issued_at = self.issued_at
        return issued_at is None or now >= issued_at

    def is_minimum_time_before(self, now: datetime) -> bool:
        not_before = self.not_before
        return not_before is not None and now < not_before

    def has_been_issued_by(self, *issuers: str) -> bool:
        return self.issuer in issuers

    def is_permitted_for(self, audience: str) -> bool:
        return audience in self.audience
