# tests/test_config.py
import json

import pytest

from pkg_jwt import JWTSettings, create_jwt_manager_from_env, settings_from_env

ENV_VARS = ("APP_KEY", "APP_NAME", "APP_URL", "JWT_CONFIG_FILE")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    def _write(data):
        path = tmp_path / "jwt.json"
        path.write_text(json.dumps(data) if not isinstance(data, str) else data)
        return str(path)

    return _write


def test_settings_from_mapping():
    settings = JWTSettings.from_mapping(
        {
            "app_name": "acme",
            "generators": {"web": {"expiry": 60}, "api": {}},
        }
    )

    assert settings.app_name == "acme"
    assert settings.app_key is None
    assert settings.generator_names == ["api", "web"]
    assert settings.generator_config("web") == {"expiry": 60}
    assert settings.generator_config("missing") is None


def test_settings_from_mapping_rejects_bad_generators():
    with pytest.raises(ValueError):
        JWTSettings.from_mapping({"generators": ["api"]})


def test_missing_env_raises():
    with pytest.raises(RuntimeError) as exc_info:
        settings_from_env()

    assert "APP_KEY" in str(exc_info.value)
    assert "JWT_CONFIG_FILE" in str(exc_info.value)


def test_app_key_only(monkeypatch):
    monkeypatch.setenv("APP_KEY", "a" * 64)
    monkeypatch.setenv("APP_NAME", "acme")

    settings = settings_from_env()

    assert settings.app_key == "a" * 64
    assert settings.app_name == "acme"
    assert settings.app_url is None
    assert settings.generators == {}


def test_env_overrides_file(monkeypatch, config_file):
    path = config_file(
        {
            "app_key": "f" * 64,
            "app_name": "from-file",
            "app_url": "https://file.test",
            "generators": {"api": {"claims": ["app_name_as_issuer"]}},
        }
    )
    monkeypatch.setenv("JWT_CONFIG_FILE", path)
    monkeypatch.setenv("APP_NAME", "from-env")

    settings = settings_from_env()

    assert settings.app_key == "f" * 64
    assert settings.app_name == "from-env"
    assert settings.app_url == "https://file.test"
    assert settings.generator_config("api") == {"claims": ["app_name_as_issuer"]}


@pytest.mark.parametrize("content", ["{not json", "[1, 2]", '{"generators": "api"}'])
def test_bad_config_file(content, monkeypatch, config_file):
    monkeypatch.setenv("JWT_CONFIG_FILE", config_file(content))

    with pytest.raises(RuntimeError):
        settings_from_env()


def test_missing_config_file(monkeypatch, tmp_path):
    monkeypatch.setenv("JWT_CONFIG_FILE", str(tmp_path / "missing.json"))

    with pytest.raises(RuntimeError):
        settings_from_env()


def test_manager_from_env(monkeypatch, config_file):
    monkeypatch.setenv("APP_KEY", "a" * 64)
    monkeypatch.setenv("APP_NAME", "acme")
    monkeypatch.setenv(
        "JWT_CONFIG_FILE",
        config_file({"generators": {"api": {"claims": ["app_name_as_issuer"]}}}),
    )

    generator = create_jwt_manager_from_env().get("api")
    token = generator.generate("user-1")

    assert token.issuer == "acme"
    assert generator.parse(str(token)).subject == "user-1"
