import json
from typing import Any, Dict, Mapping, Optional

from cryptography.exceptions import UnsupportedAlgorithm
from jwt import PyJWS
from jwt.algorithms import Algorithm as JWTAlgorithm
from jwt.exceptions import (
    InvalidAlgorithmError,
    InvalidKeyError as JWTInvalidKeyError,
    InvalidSignatureError as JWTInvalidSignatureError,
    PyJWTError,
)

from ...domain.constants import Algorithm
from ...domain.entities import Token
from ...domain.exceptions import (
    InvalidKeyError,
    InvalidSignatureError,
    InvalidTokenError,
    UnknownAlgorithmError,
)
from ...domain.ports import TokenCodec
from .signers import default_signers


class PyJWTTokenCodec(TokenCodec):
    """
    Adapter implementing the TokenCodec port with PyJWT's JWS layer.

    Infrastructure layer:
    - Knows about the compact header.payload.signature serialization.
    - Knows which PyJWT signer handles which Algorithm.

    Registered-claim semantics (exp, nbf, iss, aud) are left to the
    generator; this class only signs, splits and verifies.
    """

    def __init__(self, signers: Optional[Mapping[Algorithm, JWTAlgorithm]] = None) -> None:
        self._signers: Dict[Algorithm, JWTAlgorithm] = dict(signers or default_signers())

        # Start from an empty whitelist so only our registry is accepted.
        self._jws = PyJWS(algorithms=[])
        for algorithm, signer in self._signers.items():
            self._jws.register_algorithm(algorithm.value, signer)

    # ------------------------------------------------------------------ #
    # Port implementation
    # ------------------------------------------------------------------ #

    def prepare_key(self, algorithm: Algorithm, raw_key: bytes) -> Any:
        signer = self._signer(algorithm)
        try:
            return signer.prepare_key(raw_key)
        except (JWTInvalidKeyError, UnsupportedAlgorithm, ValueError, TypeError) as exc:
            raise InvalidKeyError(f"Invalid key for {algorithm.value}: {exc}") from exc

    def encode(self, claims: Mapping[str, Any], algorithm: Algorithm, key: Any) -> str:
        self._signer(algorithm)
        payload = json.dumps(claims, separators=(",", ":")).encode("utf-8")
        return self._jws.encode(payload, key, algorithm=algorithm.value)

    def decode(self, token: str) -> Token:
        """
        Decode without verifying the signature.

        Raises:
            InvalidTokenError
        """
        try:
            parts = self._jws.decode_complete(token, options={"verify_signature": False})
        except PyJWTError as exc:
            raise InvalidTokenError(f"Invalid token: {exc}") from exc

        try:
            claims = json.loads(parts["payload"])
        except ValueError as exc:
            raise InvalidTokenError("Invalid token: payload is not valid JSON") from exc

        if not isinstance(claims, dict):
            raise InvalidTokenError("Invalid token: payload must be a JSON object")

        try:
            return Token(
                raw=token,
                header=parts["header"],
                claims=claims,
                signature=parts["signature"],
            )
        except ValueError as exc:
            raise InvalidTokenError(f"Invalid token: {exc}") from exc

    def verify(self, token: str, algorithm: Algorithm, key: Any) -> None:
        """
        Raises:
            InvalidSignatureError
            InvalidTokenError
        """
        try:
            self._jws.decode_complete(token, key=key, algorithms=[algorithm.value])
        except JWTInvalidSignatureError as exc:
            raise InvalidSignatureError("Token signature verification failed") from exc
        except InvalidAlgorithmError as exc:
            raise InvalidSignatureError(
                f"Token was not signed with {algorithm.value}"
            ) from exc
        except PyJWTError as exc:
            raise InvalidTokenError(f"Invalid token: {exc}") from exc

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _signer(self, algorithm: Algorithm) -> JWTAlgorithm:
        try:
            return self._signers[algorithm]
        except KeyError:
            raise UnknownAlgorithmError(f"No signer registered for {algorithm.value}") from None
