import importlib

import pytest


def _reload_config():
    import config as _config
    return importlib.reload(_config)


@pytest.fixture(autouse=True)
def _restore_config(monkeypatch):
    yield
    monkeypatch.undo()
    _reload_config()


@pytest.mark.unit
def test_defaults_match_catalog_contract(monkeypatch):
    for name in (
        "SPOTIFY_TOKEN_URL", "SPOTIFY_SEARCH_URL", "SPOTIFY_HTTP_TIMEOUT_SECONDS",
        "SPOTIFY_TOKEN_SAFETY_MARGIN_SECONDS", "SPOTIFY_SEARCH_LIMIT", "API_ROUTE_PREFIX",
        "CORS_MAX_AGE_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)

    cfg = _reload_config().Config

    assert cfg.SPOTIFY_TOKEN_URL == "https://accounts.spotify.com/api/token"
    assert cfg.SPOTIFY_SEARCH_URL == "https://api.spotify.com/v1/search"
    assert cfg.SPOTIFY_HTTP_TIMEOUT_SECONDS == 10.0
    assert cfg.SPOTIFY_TOKEN_SAFETY_MARGIN_SECONDS == 300
    assert cfg.SPOTIFY_SEARCH_LIMIT == 10
    assert cfg.API_ROUTE_PREFIX == ""
    assert cfg.CORS_MAX_AGE_SECONDS == 600


@pytest.mark.unit
def test_env_overrides_are_parsed_and_clamped(monkeypatch):
    monkeypatch.setenv("SPOTIFY_HTTP_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("SPOTIFY_SEARCH_LIMIT", "500")
    monkeypatch.setenv("SPOTIFY_TOKEN_SAFETY_MARGIN_SECONDS", "not-a-number")
    monkeypatch.setenv("API_ROUTE_PREFIX", "make-server-20b8aa27/")
    monkeypatch.setenv("ENABLE_CONSOLE_LOGS", "yes")

    cfg = _reload_config().Config

    assert cfg.SPOTIFY_HTTP_TIMEOUT_SECONDS == 2.5
    assert cfg.SPOTIFY_SEARCH_LIMIT == 50
    assert cfg.SPOTIFY_TOKEN_SAFETY_MARGIN_SECONDS == 300
    assert cfg.API_ROUTE_PREFIX == "/make-server-20b8aa27"
    assert cfg.ENABLE_CONSOLE_LOGS is True


@pytest.mark.unit
def test_spotify_credentials_prefer_current_names(monkeypatch):
    import config as _config

    monkeypatch.setenv("SPOTIPY_CLIENT_ID", "old-id")
    assert _config.get_spotify_credentials() == ("test-client-id", "test-client-secret")

    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "")
    assert _config.get_spotify_credentials() == ("old-id", "test-client-secret")

    monkeypatch.delenv("SPOTIPY_CLIENT_ID")
    assert _config.get_spotify_credentials() == (None, "test-client-secret")
