# tests/test_domain.py
import base64
from datetime import datetime, timedelta, timezone

import pytest

from pkg_jwt.domain.claims import (
    AsAudience,
    AsIssuer,
    GeneratorNameAsIssuer,
    GeneratorNameInAudience,
    NotWithin,
    UniqueId,
    WithClaim,
)
from pkg_jwt.domain.constants import RESTRICTED_CLAIMS, Algorithm, RegisteredClaim
from pkg_jwt.domain.entities import Token, from_numeric_date, to_numeric_date
from pkg_jwt.domain.exceptions import (
    InvalidAudienceError,
    InvalidClaimSpecError,
    InvalidIssuerError,
    InvalidKeyError,
    UninitializedClaimError,
    UnknownAlgorithmError,
)
from pkg_jwt.domain.ports import GeneratorNameAware, IssuedAtAware, JWTClaim
from pkg_jwt.domain.value_objects import ClaimSpec, KeyMaterial, load_key, parse_duration


ISSUED = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_algorithm_lookup():
    assert Algorithm.from_value("RS256") is Algorithm.RS256
    assert Algorithm.from_value(Algorithm.EdDSA) is Algorithm.EdDSA
    assert Algorithm.HS512.is_symmetric
    assert Algorithm.BLAKE2B.is_symmetric
    assert not Algorithm.ES256.is_symmetric

    with pytest.raises(UnknownAlgorithmError):
        Algorithm.from_value("none")

    with pytest.raises(UnknownAlgorithmError):
        Algorithm.from_value("hs256")


def test_registered_claims():
    assert RegisteredClaim.is_registered("iss")
    assert RegisteredClaim.is_registered("nbf")
    assert not RegisteredClaim.is_registered("role")

    assert RESTRICTED_CLAIMS == {"sub", "iat", "exp"}


@pytest.mark.parametrize(
    "value, expected",
    [
        (3600, timedelta(hours=1)),
        ("3600", timedelta(hours=1)),
        ("PT1H", timedelta(hours=1)),
        ("P1DT12H", timedelta(days=1, hours=12)),
        ("pt30m", timedelta(minutes=30)),
        ("1 hour", timedelta(hours=1)),
        ("2 days 4 hours", timedelta(days=2, hours=4)),
        ("+30 minutes", timedelta(minutes=30)),
        (timedelta(seconds=5), timedelta(seconds=5)),
    ],
)
def test_parse_duration(value, expected):
    assert parse_duration(value) == expected


@pytest.mark.parametrize(
    "value",
    ["soon", "1 fortnight", "P", "", -1, True, None, 1.5, 10**20, str(10**20), "P9999999999D"],
)
def test_parse_duration_rejects(value):
    with pytest.raises(ValueError):
        parse_duration(value)


def test_claim_spec_from_config():
    assert ClaimSpec.from_config("unique_id") == ClaimSpec("unique_id")
    assert ClaimSpec.from_config(["not_within", "1 hour"]) == ClaimSpec("not_within", ("1 hour",))
    assert ClaimSpec.from_config(
        {"claim": "as_audience", "params": [["a", "b"]]}
    ) == ClaimSpec("as_audience", (["a", "b"],))

    spec = ClaimSpec("with_claim", ("role", "admin"))
    assert ClaimSpec.from_config(spec) is spec


@pytest.mark.parametrize(
    "entry",
    [42, [], [""], ["  "], {"params": []}, {"claim": "x", "params": "y"}, None],
)
def test_claim_spec_rejects(entry):
    with pytest.raises(InvalidClaimSpecError):
        ClaimSpec.from_config(entry)


def test_load_key(tmp_path):
    assert load_key("secret") == b"secret"
    assert load_key("base64:" + base64.b64encode(b"\x00\x01binary").decode()) == b"\x00\x01binary"

    path = tmp_path / "key.pem"
    path.write_bytes(b"-----BEGIN PUBLIC KEY-----\n")
    assert load_key(f"file:{path}") == b"-----BEGIN PUBLIC KEY-----\n"


@pytest.mark.parametrize("source", ["", "base64:not base64!", "base64:", None])
def test_load_key_rejects(source):
    with pytest.raises(InvalidKeyError):
        load_key(source)


def test_load_key_missing_file(tmp_path):
    with pytest.raises(InvalidKeyError):
        load_key(f"file:{tmp_path / 'missing.pem'}")


def test_key_material_hides_secrets():
    keys = KeyMaterial.symmetric(b"top-secret")
    assert keys.signing_key is keys.verification_key
    assert "top-secret" not in repr(keys)


def test_numeric_dates():
    assert to_numeric_date(ISSUED) == 1714564800
    assert to_numeric_date(ISSUED.replace(tzinfo=None)) == 1714564800
    assert from_numeric_date(1714564800) == ISSUED
    assert from_numeric_date(None) is None

    with pytest.raises(ValueError):
        from_numeric_date("1714564800")

    for value in (1e20, 10**20, float("inf"), float("nan")):
        with pytest.raises(ValueError):
            from_numeric_date(value)


def test_token_accessors():
    token = Token(
        raw="a.b.c",
        header={"alg": "HS256", "typ": "JWT"},
        claims={
            "sub": "42",
            "iss": "acme",
            "aud": "users",
            "jti": "abc",
            "iat": 1714564800,
            "exp": 1714568400,
            "role": "admin",
        },
    )

    assert str(token) == "a.b.c"
    assert token.algorithm == "HS256"
    assert token.subject == "42"
    assert token.issuer == "acme"
    assert token.id == "abc"
    assert token.audience == ("users",)
    assert token.issued_at == ISSUED
    assert token.expires_at == ISSUED + timedelta(hours=1)
    assert token.not_before is None
    assert token.get("role") == "admin"
    assert token.get("missing", "x") == "x"
    assert token.has("role")
    assert not token.has("nbf")


def test_token_predicates():
    token = Token(
        raw="a.b.c",
        header={"alg": "HS256"},
        claims={
            "sub": "42",
            "iss": "acme",
            "aud": ["users", "admin"],
            "iat": 1714564800,
            "nbf": 1714564860,
            "exp": 1714568400,
        },
    )

    assert not token.is_expired(ISSUED)
    assert token.is_expired(ISSUED + timedelta(hours=1))
    assert token.has_been_issued_before(ISSUED)
    assert not token.has_been_issued_before(ISSUED - timedelta(seconds=1))
    assert token.is_minimum_time_before(ISSUED)
    assert not token.is_minimum_time_before(ISSUED + timedelta(minutes=1))
    assert token.has_been_issued_by("other", "acme")
    assert not token.has_been_issued_by("acme2")
    assert token.is_permitted_for("admin")
    assert not token.is_permitted_for("guests")


@pytest.mark.parametrize(
    "claims",
    [
        {"exp": "tomorrow"},
        {"iat": True},
        {"aud": 5},
        {"aud": ["ok", 5]},
        {"sub": 42},
        {"iss": ["acme"]},
    ],
)
def test_token_rejects_bad_registered_claims(claims):
    with pytest.raises(ValueError):
        Token(raw="a.b.c", header={}, claims=claims)


def test_literal_claims():
    assert AsIssuer("acme").name() == "iss"
    assert AsIssuer("acme").value() == "acme"
    assert AsAudience("users").value() == ["users"]
    assert AsAudience(["users", None]).value() == ["users", None]
    assert WithClaim("role", {"level": 3}).value() == {"level": 3}

    for claim in (AsIssuer("acme"), AsAudience([]), WithClaim("x", 1), UniqueId()):
        assert isinstance(claim, JWTClaim)


def test_generator_name_claims():
    for claim_type in (GeneratorNameAsIssuer, GeneratorNameInAudience):
        claim = claim_type()
        assert isinstance(claim, GeneratorNameAware)

        with pytest.raises(UninitializedClaimError):
            claim.value()

        claim.set_generator_name("api")
        assert claim.value() == "api"


def test_not_within():
    claim = NotWithin("1 hour")
    assert claim.name() == "nbf"
    assert isinstance(claim, IssuedAtAware)

    with pytest.raises(UninitializedClaimError):
        claim.value()

    claim.set_issued_at(ISSUED)
    assert claim.value() == ISSUED + timedelta(hours=1)

    with pytest.raises(ValueError):
        NotWithin("whenever")


def test_unique_id_is_fresh():
    first, second = UniqueId(), UniqueId()
    assert first.name() == "jti"
    assert first.value() == first.value()
    assert first.value() != second.value()


def test_validation_error_messages():
    err = InvalidIssuerError("acme", "acme2")
    assert err.expected == "acme"
    assert err.actual == "acme2"
    assert "acme" in str(err)

    single = InvalidAudienceError(["users"], ("guests",))
    assert str(single) == 'The JWT token was not intended for the audience "users".'
    assert single.actual == ("guests",)

    many = InvalidAudienceError(["users", "admin"])
    assert str(many) == 'The JWT token was not intended for the audiences "users", "admin".'
