import os
import sys

import pytest

# Ensure project root is on sys.path so 'app', 'config', and 'src' import correctly
_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from tests.support import stubs as test_stubs


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Give every test the same Spotify credentials and no legacy fallbacks."""
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "test-client-id")
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "test-client-secret")
    monkeypatch.delenv("SPOTIPY_CLIENT_ID", raising=False)
    monkeypatch.delenv("SPOTIPY_CLIENT_SECRET", raising=False)
    monkeypatch.delenv("OTEL_EXPORTER_OTLP_ENDPOINT", raising=False)
    yield


@pytest.fixture
def clock():
    return test_stubs.FakeClock()


@pytest.fixture
def spotify_session():
    """A fake HTTP session shared by the credential manager and the resolver."""
    return test_stubs.FakeSession(post=[test_stubs.token_response()])


@pytest.fixture
def credential_manager(spotify_session, clock):
    from src.domain.catalog import CredentialManager

    return CredentialManager(session=spotify_session, clock=clock, safety_margin=300, timeout=10)


@pytest.fixture
def resolver(credential_manager, spotify_session):
    from src.domain.catalog import TrackResolver

    return TrackResolver(credential_manager, session=spotify_session, limit=10, timeout=10)


@pytest.fixture
def app(resolver):
    import app as app_module

    application = app_module.create_app(track_resolver=resolver)
    application.config.update(TESTING=True)
    yield application


@pytest.fixture
def client(app):
    return app.test_client()
