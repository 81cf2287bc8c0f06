import pytest
import requests

from rightscale_client.auth import ProxySecretAuthenticator, TokenAuthenticator
from rightscale_client.dump import DumpFormat
from rightscale_client.exceptions import AuthenticationError, ConfigError

from conftest import prepared


def test_token_authenticator_sets_bearer_header():
    request = prepared()

    TokenAuthenticator("static-token").sign(request)

    assert request.headers["Authorization"] == "Bearer static-token"


def test_token_authenticator_is_a_requests_auth_hook(requests_mock):
    matcher = requests_mock.get("https://us-3.rightscale.com/api/clouds", json=[])

    requests.get("https://us-3.rightscale.com/api/clouds", auth=TokenAuthenticator("hooked"))

    assert matcher.last_request.headers["Authorization"] == "Bearer hooked"


def test_token_can_authenticate(requests_mock):
    probe = requests_mock.get("https://us-3.rightscale.com/api/sessions", json={})
    auth = TokenAuthenticator("static-token")
    auth.set_host("us-3.rightscale.com")

    auth.can_authenticate()

    assert probe.last_request.headers["Authorization"] == "Bearer static-token"


def test_can_authenticate_requires_host():
    with pytest.raises(ConfigError, match="missing host information"):
        TokenAuthenticator("static-token").can_authenticate()


def test_proxy_authenticator_sets_secret_header():
    request = prepared()

    ProxySecretAuthenticator("shh").sign(request)

    assert request.headers["X-RLL-Secret"] == "shh"


def test_proxy_from_secret_file_probes_instance_endpoint(requests_mock, tmp_path):
    path = tmp_path / "secret"
    path.write_text("RS_RLL_PORT=12345\nRS_RLL_SECRET=shh\n", encoding="utf-8")
    probe = requests_mock.get("http://localhost:12345/api/user_data", text="")

    auth = ProxySecretAuthenticator.from_secret_file(path)
    auth.can_authenticate()

    assert auth.host == "localhost:12345"
    assert probe.last_request.headers["X-RLL-Secret"] == "shh"


def test_proxy_can_authenticate_failure(requests_mock):
    requests_mock.get("http://localhost:12345/api/user_data", status_code=401, text="no")
    auth = ProxySecretAuthenticator("wrong")
    auth.set_host("localhost:12345")

    with pytest.raises(AuthenticationError):
        auth.can_authenticate()


def test_enable_dump_is_noop_without_dumping_transport():
    class PlainTransport:
        def send(self, request):  # pragma: no cover - never called
            raise AssertionError

    auth = TokenAuthenticator("t", transport=PlainTransport())

    auth.enable_dump(DumpFormat.JSON)


def test_enable_dump_sets_transport_format():
    auth = TokenAuthenticator("t")

    auth.enable_dump(DumpFormat.DEBUG)

    assert auth._transport.dump is DumpFormat.DEBUG
