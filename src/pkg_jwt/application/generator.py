from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Iterator, List, Optional, Tuple

import structlog

from ..domain.constants import RESTRICTED_CLAIMS, RegisteredClaim
from ..domain.entities import GeneratorConfig, Token, from_numeric_date, to_numeric_date
from ..domain.events import TokenGenerated, TokenGenerating
from ..domain.exceptions import (
    ClaimCompositionError,
    InvalidAudienceClaimError,
    InvalidAudienceError,
    InvalidClaimError,
    InvalidIssuerError,
    InvalidSubjectError,
    InvalidTokenError,
    RestrictedClaimError,
    TokenExpiredError,
    TokenNotYetValidError,
    TokenParsingError,
    TokenValidationError,
)
from ..domain.ports import (
    EventDispatcher,
    Generator,
    GeneratorNameAware,
    IssuedAtAware,
    JWTClaim,
    TokenCodec,
)
from .claim_registry import ClaimRegistry

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_text(value: Any) -> Optional[str]:
    """
    Convert str, int or objects with their own __str__ to text.
    Returns None for anything else.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (str, int)):
        return str(value)
    if value is not None and type(value).__str__ is not object.__str__:
        return str(value)
    return None


class DefaultGenerator(Generator):
    """
    Token issuer / validator bound to one GeneratorConfig.

    - generate(): subject -> claims pipeline -> signed Token
    - parse():    token string -> decoded Token, validated against the same
                  claim configuration used for issuance.

    Claim contributors are instantiated per call, so injected state
    (generator name, issued-at) never leaks between tokens.
    """

    def __init__(
        self,
        config: GeneratorConfig,
        *,
        codec: TokenCodec,
        claims: ClaimRegistry,
        dispatcher: Optional[EventDispatcher] = None,
        clock: Clock = utc_now,
    ) -> None:
        self._config = config
        self._codec = codec
        self._claims = claims
        self._dispatcher = dispatcher
        self._clock = clock

    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    # ------------------------------------------------------------------ #
    # Generation
    # ------------------------------------------------------------------ #

    def generate(self, subject: Any) -> Token:
        """
        Generate a new signed token for the subject.

        Raises:
            InvalidSubjectError
            InvalidAudienceClaimError
            RestrictedClaimError
            InvalidClaimError
            UninitializedClaimError
            UnresolvableClaimError
        """
        try:
            return self._generate(subject)
        except ClaimCompositionError as exc:
            exc.generator = exc.generator or self.name()
            raise

    def _generate(self, subject: Any) -> Token:
        subject = self._normalize_subject(subject)

        self._fire(TokenGenerating(generator=self.name(), subject=subject))

        issued_at = self._now().replace(microsecond=0)
        payload: dict[str, Any] = {
            RegisteredClaim.SUBJECT.value: subject,
            RegisteredClaim.ISSUED_AT.value: to_numeric_date(issued_at),
        }

        if self._config.expiry is not None:
            expires_at = issued_at + self._config.expiry
            payload[RegisteredClaim.EXPIRATION_TIME.value] = to_numeric_date(expires_at)

        audience: List[str] = []

        for claim in self._collect_claims():
            # Some claims need values only known at this point.
            self._inject(claim, issued_at=issued_at)

            claim_name = claim.name()

            # Audience accumulates across contributors instead of overwriting.
            if claim_name == RegisteredClaim.AUDIENCE.value:
                self._merge_audience(audience, claim)
                continue

            if not RegisteredClaim.is_registered(claim_name):
                payload[claim_name] = self._custom_value(claim.value())
                continue

            self._set_registered_claim(payload, claim_name, claim)

        if audience:
            payload[RegisteredClaim.AUDIENCE.value] = audience[0] if len(audience) == 1 else audience

        try:
            raw = self._codec.encode(payload, self._config.algorithm, self._config.keys.signing_key)
        except (TypeError, ValueError) as exc:
            raise InvalidClaimError(f"The JWT claims cannot be encoded: {exc}") from exc

        token = self._codec.decode(raw)

        logger.info(
            "jwt_token_generated",
            generator=self.name(),
            algorithm=self._config.algorithm.value,
            subject=subject,
            expires_at=payload.get(RegisteredClaim.EXPIRATION_TIME.value),
        )

        self._fire(TokenGenerated(generator=self.name(), token=token))

        return token

    @staticmethod
    def _normalize_subject(subject: Any) -> str:
        text = _as_text(subject)
        if not text:
            raise InvalidSubjectError(
                "The JWT subject must be a non-empty string.",
                claim=RegisteredClaim.SUBJECT.value,
            )
        return text

    @staticmethod
    def _merge_audience(audience: List[str], claim: JWTClaim) -> None:
        value = claim.value()
        entries = value if isinstance(value, (list, tuple)) else [value]

        for entry in entries:
            # None means "no restriction", so there is nothing to add.
            if entry is None:
                continue

            text = _as_text(entry)
            if not text:
                raise InvalidAudienceClaimError(
                    "The JWT audience must be a non-empty string, a list of non-empty "
                    "strings, or be castable to a non-empty string.",
                    claim=RegisteredClaim.AUDIENCE.value,
                )
            if text not in audience:
                audience.append(text)

    @staticmethod
    def _set_registered_claim(payload: dict[str, Any], claim_name: str, claim: JWTClaim) -> None:
        if claim_name in RESTRICTED_CLAIMS:
            raise RestrictedClaimError(f'The JWT claim "{claim_name}" is restricted.', claim=claim_name)

        value = claim.value()

        if claim_name == RegisteredClaim.NOT_BEFORE.value:
            payload[claim_name] = _not_before_value(value)
            return

        text = _as_text(value)
        if not text:
            raise InvalidClaimError(
                f'The claim "{claim_name}" must be a non-empty string, or be castable '
                f"to a non-empty string.",
                claim=claim_name,
            )
        payload[claim_name] = text

    @staticmethod
    def _custom_value(value: Any) -> Any:
        if isinstance(value, datetime):
            return to_numeric_date(value)
        return value

    # ------------------------------------------------------------------ #
    # Parsing
    # ------------------------------------------------------------------ #

    def parse(self, token: str, validate: bool = True) -> Token:
        """
        Decode a token string; with `validate` also verify the signature,
        the time window, the issuer and the audience.

        Raises:
            InvalidTokenError
            InvalidSignatureError
            TokenExpiredError
            TokenNotYetValidError
            InvalidIssuerError
            InvalidAudienceError
        """
        try:
            return self._parse(token, validate)
        except TokenParsingError as exc:
            exc.generator = exc.generator or self.name()
            raise

    def _parse(self, token: str, validate: bool) -> Token:
        if not isinstance(token, str) or not token:
            raise InvalidTokenError("The JWT token must be a non-empty string.")

        parsed = self._codec.decode(token)

        if validate:
            try:
                self._check_token_validity(parsed)
            except TokenValidationError as exc:
                logger.debug(
                    "jwt_token_rejected",
                    generator=self.name(),
                    reason=type(exc).__name__,
                )
                raise

        return parsed

    def _check_token_validity(self, token: Token) -> None:
        self._codec.verify(token.raw, self._config.algorithm, self._config.keys.verification_key)

        now = self._now()

        if token.is_expired(now):
            raise TokenExpiredError("The JWT token provided has expired.")

        if not token.has_been_issued_before(now) or token.is_minimum_time_before(now):
            raise TokenNotYetValidError("The JWT token is not yet valid.")

        expected_issuer, expected_audience = self._expected_claims()

        if expected_issuer is not None and not token.has_been_issued_by(expected_issuer):
            raise InvalidIssuerError(expected_issuer, token.issuer)

        # A None entry lifts the audience restriction entirely.
        if expected_audience and None not in expected_audience:
            if not any(token.is_permitted_for(aud) for aud in expected_audience):
                raise InvalidAudienceError(expected_audience, token.audience)

    def _expected_claims(self) -> Tuple[Optional[str], List[Optional[str]]]:
        issuer: Optional[str] = None
        audience: List[Optional[str]] = []

        for claim in self._collect_claims():
            claim_name = claim.name()
            if claim_name not in (RegisteredClaim.ISSUER.value, RegisteredClaim.AUDIENCE.value):
                continue

            # Only the generator name matters here; issued-at is per token.
            self._inject(claim, issued_at=None)
            value = claim.value()

            if claim_name == RegisteredClaim.ISSUER.value:
                issuer = _as_text(value) or issuer
                continue

            entries = value if isinstance(value, (list, tuple)) else [value]
            for entry in entries:
                audience.append(None if entry is None else _as_text(entry))

        return issuer, audience

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _collect_claims(self) -> Iterator[JWTClaim]:
        for spec in self._config.claims:
            yield self._claims.make(spec)

    def _inject(self, claim: JWTClaim, *, issued_at: Optional[datetime]) -> None:
        if isinstance(claim, GeneratorNameAware):
            claim.set_generator_name(self.name())

        if issued_at is not None and isinstance(claim, IssuedAtAware):
            claim.set_issued_at(issued_at)

    def _now(self) -> datetime:
        now = self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now

    def _fire(self, event: object) -> None:
        if self._dispatcher is None:
            return
        try:
            self._dispatcher.dispatch(event)
        except Exception:  # noqa: BLE001
            # Notifications are best effort; issuance must not fail here.
            logger.exception(
                "jwt_event_dispatch_failed",
                generator=self.name(),
                event_type=type(event).__name__,
            )


def _not_before_value(value: Any) -> int:
    if isinstance(value, datetime):
        return to_numeric_date(value)

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            from_numeric_date(value)
        except ValueError as exc:
            raise InvalidClaimError(
                f'The claim "nbf" is out of range: {value!r}',
                claim=RegisteredClaim.NOT_BEFORE.value,
            ) from exc
        return int(value)

    if isinstance(value, str) and value:
        try:
            return to_numeric_date(datetime.fromisoformat(value))
        except ValueError as exc:
            raise InvalidClaimError(
                f'The claim "nbf" is not a valid date: {value!r}',
                claim=RegisteredClaim.NOT_BEFORE.value,
            ) from exc

    raise InvalidClaimError(
        f'The claim "nbf" must be a date, got {value!r}',
        claim=RegisteredClaim.NOT_BEFORE.value,
    )
