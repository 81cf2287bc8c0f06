import threading

import pytest
import requests

from rightscale_client.auth import OAuthAuthenticator
from rightscale_client.auth.oauth import parse_token_response
from rightscale_client.exceptions import AuthenticationError, ProtocolError, TransportError

from conftest import CountingTransport, prepared

TOKEN_URL = "https://us-3.rightscale.com/api/oauth2"


def build_auth(clock):
    auth = OAuthAuthenticator("refresh-me", clock=clock)
    auth.set_host("us-3.rightscale.com")
    return auth


def test_sign_exchanges_refresh_token(requests_mock, clock):
    exchange = requests_mock.post(TOKEN_URL, json={"access_token": "at-1", "expires_in": 3600})
    auth = build_auth(clock)
    request = prepared()

    auth.sign(request)

    assert request.headers["Authorization"] == "Bearer at-1"
    assert exchange.last_request.json() == {
        "grant_type": "refresh_token",
        "refresh_token": "refresh-me",
    }
    assert exchange.last_request.headers["X-API-Version"] == "1.5"


def test_token_is_refreshed_at_half_life(requests_mock, clock):
    exchange = requests_mock.post(
        TOKEN_URL,
        [
            {"json": {"access_token": "at-1", "expires_in": 3600}},
            {"json": {"access_token": "at-2", "expires_in": 3600}},
        ],
    )
    auth = build_auth(clock)

    auth.sign(prepared())
    assert auth.refresh_at == clock.now + 1800

    clock.advance(1000)
    auth.sign(prepared())
    assert exchange.call_count == 1

    clock.advance(801)
    request = prepared()
    auth.sign(request)

    assert exchange.call_count == 2
    assert request.headers["Authorization"] == "Bearer at-2"


def test_string_lifetime_is_accepted(requests_mock, clock):
    requests_mock.post(TOKEN_URL, json={"access_token": "at-1", "expires_in": "7200"})
    auth = build_auth(clock)

    auth.sign(prepared())

    assert auth.refresh_at == clock.now + 3600


def test_rejected_exchange_is_authentication_error(requests_mock, clock):
    requests_mock.post(TOKEN_URL, status_code=400, text="invalid_grant")
    auth = build_auth(clock)

    with pytest.raises(AuthenticationError) as excinfo:
        auth.sign(prepared())

    assert excinfo.value.status_code == 400


def test_malformed_json_is_protocol_error(requests_mock, clock):
    requests_mock.post(TOKEN_URL, text="<html>")
    auth = build_auth(clock)

    with pytest.raises(ProtocolError, match="failed to load response JSON"):
        auth.sign(prepared())


def test_missing_access_token_leaves_state_unchanged(requests_mock, clock):
    requests_mock.post(TOKEN_URL, json={"expires_in": 3600})
    auth = build_auth(clock)
    deadline = auth.refresh_at

    with pytest.raises(ProtocolError):
        auth.sign(prepared())

    assert auth.access_token == ""
    assert auth.refresh_at == deadline


def test_failed_refresh_keeps_previous_token(requests_mock, clock):
    requests_mock.post(
        TOKEN_URL,
        [
            {"json": {"access_token": "at-1", "expires_in": 3600}},
            {"json": {"access_token": "at-2", "expires_in": "soon"}},
        ],
    )
    auth = build_auth(clock)
    auth.sign(prepared())
    deadline = auth.refresh_at
    clock.advance(1801)

    with pytest.raises(ProtocolError, match="token duration"):
        auth.sign(prepared())

    assert auth.access_token == "at-1"
    assert auth.refresh_at == deadline


def test_unreachable_token_endpoint_is_transport_error(requests_mock, clock):
    requests_mock.post(TOKEN_URL, exc=requests.exceptions.ReadTimeout("read timed out"))
    auth = build_auth(clock)

    with pytest.raises(TransportError):
        auth.sign(prepared())


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"access_token": 12, "expires_in": 10},
        {"access_token": "at", "expires_in": None},
        {"access_token": "at", "expires_in": True},
        {"access_token": "at", "expires_in": "nan"},
        {"access_token": "at", "expires_in": "1_000"},
        {"access_token": "at", "expires_in": " 3600 "},
        {"access_token": "at", "expires_in": "1e3"},
        {"access_token": "at", "expires_in": 10**400},
    ],
)
def test_parse_token_response_rejects_bad_payloads(payload):
    with pytest.raises(ProtocolError):
        parse_token_response(payload)


def test_can_authenticate_probes_sessions(requests_mock, clock):
    requests_mock.post(TOKEN_URL, json={"access_token": "at-1", "expires_in": 3600})
    probe = requests_mock.get("https://us-3.rightscale.com/api/sessions", json={})
    auth = build_auth(clock)

    auth.can_authenticate()

    assert probe.last_request.headers["Authorization"] == "Bearer at-1"


@pytest.mark.parametrize(("value", "ttl"), [("3600", 3600.0), ("1.5", 1.5), (".5", 0.5)])
def test_parse_token_response_accepts_decimal_seconds(value, ttl):
    assert parse_token_response({"access_token": "at", "expires_in": value}) == ("at", ttl)


class TokenTransport(CountingTransport):
    def send(self, request):
        response = super().send(request)
        response._content = b'{"access_token": "at-1", "expires_in": 3600}'
        return response


def test_concurrent_signers_share_one_exchange(clock):
    transport = TokenTransport(status_code=200)
    auth = OAuthAuthenticator("refresh-me", transport=transport, clock=clock)
    auth.set_host("us-3.rightscale.com")
    requests_seen = [prepared() for _ in range(8)]

    threads = [threading.Thread(target=auth.sign, args=(req,)) for req in requests_seen]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert transport.calls == 1
    assert all(req.headers["Authorization"] == "Bearer at-1" for req in requests_seen)
