import threading

import pytest
import requests

from src.domain.catalog import (
    ConfigurationError,
    Credential,
    CredentialManager,
    UpstreamAuthError,
    UpstreamTimeout,
)
from tests.support.stubs import FakeClock, FakeResponse, FakeSession, token_response


@pytest.mark.unit
def test_first_call_exchanges_client_credentials(credential_manager, spotify_session, clock):
    credential = credential_manager.get_token()

    assert credential.token == "tok-1"
    assert credential.expires_at == clock.now + 3600 - 300
    assert len(spotify_session.post_calls) == 1
    call = spotify_session.post_calls[0]
    assert call["url"] == "https://accounts.spotify.com/api/token"
    assert call["auth"] == ("test-client-id", "test-client-secret")
    assert call["data"] == {"grant_type": "client_credentials"}
    assert call["timeout"] == 10


@pytest.mark.unit
def test_cached_token_is_reused_within_validity_window(credential_manager, spotify_session, clock):
    first = credential_manager.get_token()
    clock.advance(3600 - 301)
    second = credential_manager.get_token()

    assert second is first
    assert len(spotify_session.post_calls) == 1


@pytest.mark.unit
def test_token_is_refreshed_once_margin_adjusted_expiry_passes(clock):
    session = FakeSession(post=[token_response("tok-1"), token_response("tok-2")])
    manager = CredentialManager(session=session, clock=clock, safety_margin=300)

    assert manager.get_token().token == "tok-1"
    clock.advance(3600 - 300)
    assert manager.get_token().token == "tok-2"
    assert manager.get_token().token == "tok-2"
    assert len(session.post_calls) == 2


@pytest.mark.unit
@pytest.mark.parametrize("missing", ["SPOTIFY_CLIENT_ID", "SPOTIFY_CLIENT_SECRET"])
def test_missing_secret_fails_without_network(monkeypatch, missing, clock):
    monkeypatch.delenv(missing, raising=False)
    session = FakeSession()
    manager = CredentialManager(session=session, clock=clock)

    with pytest.raises(ConfigurationError):
        manager.get_token()
    assert session.post_calls == []
    assert manager.is_configured() is False


@pytest.mark.unit
def test_config_is_looked_up_on_every_call(monkeypatch, clock):
    monkeypatch.delenv("SPOTIFY_CLIENT_ID")
    session = FakeSession(post=[token_response()])
    manager = CredentialManager(session=session, clock=clock)

    with pytest.raises(ConfigurationError):
        manager.get_token()

    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "late-id")
    assert manager.get_token().token == "tok-1"
    assert session.post_calls[0]["auth"] == ("late-id", "test-client-secret")


@pytest.mark.unit
def test_legacy_spotipy_variables_are_accepted(monkeypatch, clock):
    monkeypatch.delenv("SPOTIFY_CLIENT_ID")
    monkeypatch.delenv("SPOTIFY_CLIENT_SECRET")
    monkeypatch.setenv("SPOTIPY_CLIENT_ID", "legacy-id")
    monkeypatch.setenv("SPOTIPY_CLIENT_SECRET", "legacy-secret")
    session = FakeSession(post=[token_response()])

    CredentialManager(session=session, clock=clock).get_token()

    assert session.post_calls[0]["auth"] == ("legacy-id", "legacy-secret")


@pytest.mark.unit
def test_explicit_secrets_take_precedence_over_environment(clock):
    session = FakeSession(post=[token_response()])
    manager = CredentialManager("explicit-id", "explicit-secret", session=session, clock=clock)

    manager.get_token()

    assert session.post_calls[0]["auth"] == ("explicit-id", "explicit-secret")


@pytest.mark.unit
def test_rejected_exchange_is_not_cached(clock):
    session = FakeSession(post=[FakeResponse(401, {"error": "invalid_client"}), token_response("tok-ok")])
    manager = CredentialManager(session=session, clock=clock)

    with pytest.raises(UpstreamAuthError) as excinfo:
        manager.get_token()
    assert excinfo.value.status == 401

    assert manager.get_token().token == "tok-ok"
    assert len(session.post_calls) == 2


@pytest.mark.unit
def test_malformed_token_payload_raises_auth_error(clock):
    session = FakeSession(post=[FakeResponse(200, {"token_type": "Bearer"})])
    manager = CredentialManager(session=session, clock=clock)

    with pytest.raises(UpstreamAuthError):
        manager.get_token()


@pytest.mark.unit
def test_transport_errors_are_classified(clock):
    timeout_session = FakeSession(post=[requests.Timeout("slow")])
    with pytest.raises(UpstreamTimeout):
        CredentialManager(session=timeout_session, clock=clock).get_token()

    broken_session = FakeSession(post=[requests.ConnectionError("down")])
    with pytest.raises(UpstreamAuthError):
        CredentialManager(session=broken_session, clock=clock).get_token()


@pytest.mark.unit
def test_invalidate_forces_a_new_exchange(credential_manager, spotify_session):
    credential_manager.get_token()
    credential_manager.invalidate()
    credential_manager.get_token()

    assert len(spotify_session.post_calls) == 2


@pytest.mark.unit
def test_credential_validity_is_strict():
    credential = Credential(token="t", expires_at=100.0)
    assert credential.is_valid(99.9)
    assert not credential.is_valid(100.0)


@pytest.mark.unit
def test_concurrent_callers_share_a_single_exchange():
    release = threading.Event()

    class _SlowSession(FakeSession):
        def post(self, url, **kwargs):
            release.wait(timeout=5)
            return super().post(url, **kwargs)

    session = _SlowSession(post=[token_response()])
    manager = CredentialManager(session=session, clock=FakeClock())
    tokens = []

    def _worker():
        tokens.append(manager.get_token().token)

    threads = [threading.Thread(target=_worker) for _ in range(4)]
    for t in threads:
        t.start()
    release.set()
    for t in threads:
        t.join(timeout=5)

    assert tokens == ["tok-1"] * 4
    assert len(session.post_calls) == 1


@pytest.mark.unit
def test_short_lived_token_is_still_valid_and_cached(clock):
    session = FakeSession(post=[token_response("short", expires_in=200)])
    manager = CredentialManager(session=session, clock=clock, safety_margin=300)

    credential = manager.get_token()
    assert credential.is_valid(clock.now)
    assert credential.expires_at == clock.now + 100

    manager.get_token()
    manager.get_token()
    assert len(session.post_calls) == 1


@pytest.mark.unit
@pytest.mark.parametrize(
    "payload",
    [
        {"access_token": None, "expires_in": 3600},
        {"access_token": "", "expires_in": 3600},
        {"access_token": 1234, "expires_in": 3600},
        {"access_token": "tok", "expires_in": 0},
        {"access_token": "tok", "expires_in": "soon"},
    ],
)
def test_unusable_token_payloads_are_auth_errors(clock, payload):
    session = FakeSession(post=[FakeResponse(200, payload)])
    manager = CredentialManager(session=session, clock=clock)

    with pytest.raises(UpstreamAuthError):
        manager.get_token()
    assert manager._credential is None
