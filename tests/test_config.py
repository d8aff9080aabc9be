# tests/test_config.py
import pytest

from octa_api.config import Settings, _parse_keys


def test_parse_keys_keeps_order():
    keys = _parse_keys("v2:second, v1:first")
    assert list(keys) == ["v2", "v1"]
    assert keys["v1"] == "first"


def test_parse_keys_rejects_bad_entries():
    with pytest.raises(ValueError):
        _parse_keys("just-a-secret")


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("JWT_KEYS", "k2:bbbb,k1:aaaa")
    monkeypatch.setenv("STORE_BACKEND", "Mongo")
    monkeypatch.setenv("REQUIRE_AUTH", "false")
    monkeypatch.setenv("PORT", "9090")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    settings = Settings.from_env(env_path=str(tmp_path / "missing.env"))
    assert settings.jwt_keys == {"k2": "bbbb", "k1": "aaaa"}
    assert settings.store_backend == "mongo"
    assert settings.require_auth is False
    assert settings.port == 9090
    assert settings.cors_origins == ["http://a.test", "http://b.test"]


def test_single_secret_fallback(monkeypatch, tmp_path):
    monkeypatch.delenv("JWT_KEYS", raising=False)
    monkeypatch.delenv("REQUIRE_AUTH", raising=False)
    monkeypatch.setenv("JWT_SECRET", "only-one")
    settings = Settings.from_env(env_path=str(tmp_path / "missing.env"))
    assert settings.jwt_keys == {"default": "only-one"}
    assert settings.require_auth is True
