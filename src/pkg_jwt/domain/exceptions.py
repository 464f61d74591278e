from typing import Any, Iterable, Optional


class JWTError(Exception):
    """Base class for every error raised by pkg_jwt."""
    pass


# --- Configuration (raised while resolving a generator) -------------------


class ConfigurationError(JWTError):
    """Raised when a generator configuration cannot be resolved."""

    def __init__(self, message: str, generator: Optional[str] = None) -> None:
        super().__init__(message)
        self.generator = generator


class UnknownGeneratorError(ConfigurationError):
    """Raised when no configuration exists for a generator name."""
    pass


class UnknownAlgorithmError(ConfigurationError):
    """Raised when an algorithm identifier is not supported."""
    pass


class InvalidKeyError(ConfigurationError):
    """Raised when key material is missing, malformed or of the wrong shape."""
    pass


class InvalidExpiryError(ConfigurationError):
    """Raised when the expiry is neither seconds nor a duration expression."""
    pass


class InvalidClaimSpecError(ConfigurationError):
    """Raised when a configured claim entry has an unusable shape."""
    pass


class UnsupportedDriverError(ConfigurationError):
    """Raised when a generator driver is not registered."""
    pass


class InvalidDriverResultError(ConfigurationError):
    """Raised when a driver factory does not return a Generator."""
    pass


# --- Claim composition (raised while generating) ---------------------------


class ClaimCompositionError(JWTError):
    """Raised when the claims of a token cannot be assembled."""

    def __init__(
        self,
        message: str,
        claim: Optional[str] = None,
        generator: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.claim = claim
        self.generator = generator


class InvalidSubjectError(ClaimCompositionError):
    """Raised when the subject is empty or cannot be converted to a string."""
    pass


class InvalidAudienceClaimError(ClaimCompositionError):
    """Raised when an audience contributor produces an unusable value."""
    pass


class RestrictedClaimError(ClaimCompositionError):
    """Raised when a contributor tries to set sub, iat or exp."""
    pass


class InvalidClaimError(ClaimCompositionError):
    """Raised when a registered claim value is empty or of the wrong type."""
    pass


class UninitializedClaimError(ClaimCompositionError):
    """Raised when a claim value is read before its context was injected."""
    pass


class UnresolvableClaimError(ClaimCompositionError):
    """Raised when a claim tag is unknown or its contributor cannot be built."""
    pass


# --- Parsing ----------------------------------------------------------------


class TokenParsingError(JWTError):
    """Raised when a token string cannot be accepted."""

    def __init__(self, message: str, generator: Optional[str] = None) -> None:
        super().__init__(message)
        self.generator = generator


class InvalidTokenError(TokenParsingError):
    """Raised when token is empty, malformed or cannot be decoded."""
    pass


class TokenValidationError(TokenParsingError):
    """Raised when a well-formed token fails validation."""
    pass


class InvalidSignatureError(TokenValidationError):
    """Raised when the token signature does not verify."""
    pass


class TokenExpiredError(TokenValidationError):
    """Raised when token has expired."""
    pass


class TokenNotYetValidError(TokenValidationError):
    """Raised when token was issued in the future or is used before nbf."""
    pass


class InvalidIssuerError(TokenValidationError):
    """Raised when the token issuer differs from the configured one."""

    def __init__(self, expected: str, actual: Any) -> None:
        super().__init__(f'The JWT token was not issued by "{expected}".')
        self.expected = expected
        self.actual = actual


class InvalidAudienceError(TokenValidationError):
    """Raised when the token is not permitted for any configured audience."""

    def __init__(self, expected: Iterable[str], actual: Iterable[str] = ()) -> None:
        self.expected = tuple(expected)
        self.actual = tuple(actual)
        if len(self.expected) == 1:
            message = f'The JWT token was not intended for the audience "{self.expected[0]}".'
        else:
            joined = '", "'.join(self.expected)
            message = f'The JWT token was not intended for the audiences "{joined}".'
        super().__init__(message)
