"""
Algorithm registry: maps every supported Algorithm to the PyJWT signer that
implements it.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Callable, Dict

from jwt.algorithms import (
    Algorithm as JWTAlgorithm,
    ECAlgorithm,
    HMACAlgorithm,
    OKPAlgorithm,
    RSAAlgorithm,
)
from jwt.exceptions import InvalidKeyError as JWTInvalidKeyError

from ...domain.constants import Algorithm
from ...domain.exceptions import UnknownAlgorithmError


class Blake2bAlgorithm(HMACAlgorithm):
    """
    Keyed BLAKE2b MAC with a 256-bit digest.

    Not part of the JWA registry, so PyJWT has no built-in handler for it.
    The key must be between 256 and 512 bits.
    """

    DIGEST_SIZE = 32
    MIN_KEY_SIZE = 32
    MAX_KEY_SIZE = hashlib.blake2b.MAX_KEY_SIZE

    def __init__(self) -> None:
        super().__init__(hashlib.blake2b)

    def prepare_key(self, key: str | bytes) -> bytes:
        key_bytes = super().prepare_key(key)
        if not self.MIN_KEY_SIZE <= len(key_bytes) <= self.MAX_KEY_SIZE:
            raise JWTInvalidKeyError(
                f"BLAKE2B keys must be between {self.MIN_KEY_SIZE} and "
                f"{self.MAX_KEY_SIZE} bytes, got {len(key_bytes)}"
            )
        return key_bytes

    def sign(self, msg: bytes, key: bytes) -> bytes:
        return hashlib.blake2b(msg, key=key, digest_size=self.DIGEST_SIZE).digest()

    def verify(self, msg: bytes, key: bytes, sig: bytes) -> bool:
        return hmac.compare_digest(sig, self.sign(msg, key))


_FACTORIES: Dict[Algorithm, Callable[[], JWTAlgorithm]] = {
    Algorithm.HS256: lambda: HMACAlgorithm(HMACAlgorithm.SHA256),
    Algorithm.HS384: lambda: HMACAlgorithm(HMACAlgorithm.SHA384),
    Algorithm.HS512: lambda: HMACAlgorithm(HMACAlgorithm.SHA512),
    Algorithm.BLAKE2B: Blake2bAlgorithm,
    Algorithm.ES256: lambda: ECAlgorithm(ECAlgorithm.SHA256),
    Algorithm.ES384: lambda: ECAlgorithm(ECAlgorithm.SHA384),
    Algorithm.ES512: lambda: ECAlgorithm(ECAlgorithm.SHA512),
    Algorithm.RS256: lambda: RSAAlgorithm(RSAAlgorithm.SHA256),
    Algorithm.RS384: lambda: RSAAlgorithm(RSAAlgorithm.SHA384),
    Algorithm.RS512: lambda: RSAAlgorithm(RSAAlgorithm.SHA512),
    Algorithm.EdDSA: OKPAlgorithm,
}


def get_signer(algorithm: Algorithm | str) -> JWTAlgorithm:
    """
    PyJWT signer for an algorithm identifier.

    Raises:
        UnknownAlgorithmError
    """
    algorithm = Algorithm.from_value(algorithm)
    try:
        factory = _FACTORIES[algorithm]
    except KeyError:
        raise UnknownAlgorithmError(f"No signer available for {algorithm.value}") from None
    return factory()


def default_signers() -> Dict[Algorithm, JWTAlgorithm]:
    return {algorithm: get_signer(algorithm) for algorithm in Algorithm}
