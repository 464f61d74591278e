"""
pkg_jwt

Named JWT generators: each one issues signed tokens for a subject with a
configured algorithm, key, expiry and set of claim contributors, and
validates tokens against that same configuration. Can be integrated with
FastAPI and Strawberry.
"""

__version__ = "0.1.0"

from .domain.constants import Algorithm, RegisteredClaim
from .domain.entities import GeneratorConfig, Token
from .domain.events import TokenGenerated, TokenGenerating
from .domain.exceptions import (
    JWTError,
    ConfigurationError,
    UnknownGeneratorError,
    UnknownAlgorithmError,
    InvalidKeyError,
    InvalidExpiryError,
    InvalidClaimSpecError,
    UnsupportedDriverError,
    InvalidDriverResultError,
    ClaimCompositionError,
    InvalidSubjectError,
    InvalidAudienceClaimError,
    RestrictedClaimError,
    InvalidClaimError,
    UninitializedClaimError,
    UnresolvableClaimError,
    TokenParsingError,
    InvalidTokenError,
    TokenValidationError,
    InvalidSignatureError,
    TokenExpiredError,
    TokenNotYetValidError,
    InvalidIssuerError,
    InvalidAudienceError,
)
from .domain.ports import (
    EventDispatcher,
    Generator,
    GeneratorNameAware,
    IssuedAtAware,
    JWTClaim,
    TokenCodec,
)
from .domain.value_objects import ClaimSpec, KeyMaterial

from .application.claim_registry import ClaimRegistry, default_claim_registry
from .application.generator import DefaultGenerator
from .application.manager import GeneratorManager

from .config import JWTSettings, settings_from_env

# PyJWT-backed adapters
from .adapters.pyjwt.codec import PyJWTTokenCodec
from .adapters.events.dispatcher import ListenerDispatcher, NullDispatcher

from .integrations.common.jwt_factory import create_jwt_manager, create_jwt_manager_from_env

__all__ = [
    "__version__",
    # domain core
    "Algorithm",
    "RegisteredClaim",
    "GeneratorConfig",
    "Token",
    "TokenGenerating",
    "TokenGenerated",
    "ClaimSpec",
    "KeyMaterial",
    "JWTClaim",
    "GeneratorNameAware",
    "IssuedAtAware",
    "Generator",
    "TokenCodec",
    "EventDispatcher",
    # exceptions
    "JWTError",
    "ConfigurationError",
    "UnknownGeneratorError",
    "UnknownAlgorithmError",
    "InvalidKeyError",
    "InvalidExpiryError",
    "InvalidClaimSpecError",
    "UnsupportedDriverError",
    "InvalidDriverResultError",
    "ClaimCompositionError",
    "InvalidSubjectError",
    "InvalidAudienceClaimError",
    "RestrictedClaimError",
    "InvalidClaimError",
    "UninitializedClaimError",
    "UnresolvableClaimError",
    "TokenParsingError",
    "InvalidTokenError",
    "TokenValidationError",
    "InvalidSignatureError",
    "TokenExpiredError",
    "TokenNotYetValidError",
    "InvalidIssuerError",
    "InvalidAudienceError",
    # application
    "ClaimRegistry",
    "default_claim_registry",
    "DefaultGenerator",
    "GeneratorManager",
    # config
    "JWTSettings",
    "settings_from_env",
    # adapters
    "PyJWTTokenCodec",
    "ListenerDispatcher",
    "NullDispatcher",
    # wiring
    "create_jwt_manager",
    "create_jwt_manager_from_env",
]
