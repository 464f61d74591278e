# tests/conftest.py
from datetime import datetime, timedelta, timezone

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from pkg_jwt import JWTSettings, create_jwt_manager
from pkg_jwt.adapters.events.dispatcher import ListenerDispatcher

# 64 bytes: long enough for HS512 and within the BLAKE2B key range.
HMAC_KEY = "k" * 64
APP_KEY = "a" * 64


def _pem_pair(private_key):
    signing = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    verification = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return {"signing": signing, "verification": verification}


@pytest.fixture(scope="session")
def rsa_pair():
    return _pem_pair(rsa.generate_private_key(public_exponent=65537, key_size=2048))


@pytest.fixture(scope="session")
def other_rsa_pair():
    return _pem_pair(rsa.generate_private_key(public_exponent=65537, key_size=2048))


@pytest.fixture(scope="session")
def ec_pairs():
    return {
        "ES256": _pem_pair(ec.generate_private_key(ec.SECP256R1())),
        "ES384": _pem_pair(ec.generate_private_key(ec.SECP384R1())),
        "ES512": _pem_pair(ec.generate_private_key(ec.SECP521R1())),
    }


@pytest.fixture(scope="session")
def ed25519_pair():
    return _pem_pair(ed25519.Ed25519PrivateKey.generate())


@pytest.fixture(scope="session")
def key_for(rsa_pair, ec_pairs, ed25519_pair):
    """Algorithm name -> configured key (secret string or key pair)."""

    def _key_for(algorithm: str):
        if algorithm in ("HS256", "HS384", "HS512", "BLAKE2B"):
            return HMAC_KEY
        if algorithm.startswith("RS"):
            return rsa_pair
        if algorithm.startswith("ES"):
            return ec_pairs[algorithm]
        return ed25519_pair

    return _key_for


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 5, 1, 12, 0, 0, 500000, tzinfo=timezone.utc))


@pytest.fixture
def dispatcher():
    return ListenerDispatcher()


@pytest.fixture
def make_manager(dispatcher):
    """Build a manager over the given generator configurations."""

    def _make(generators, *, app_name="acme", app_url="https://acme.test", app_key=APP_KEY, **kwargs):
        settings = JWTSettings(
            app_key=app_key,
            app_name=app_name,
            app_url=app_url,
            generators=generators,
        )
        kwargs.setdefault("dispatcher", dispatcher)
        return create_jwt_manager(settings, **kwargs)

    return _make
