import pytest

from rightscale_client.config import ClientConfig, load_proxy_secret, parse_proxy_secret
from rightscale_client.exceptions import ConfigError


def test_parse_proxy_secret():
    secret = parse_proxy_secret("RS_RLL_PORT=45678\nRS_RLL_SECRET=s3cr3t\n")

    assert secret.port == 45678
    assert secret.secret == "s3cr3t"
    assert secret.host == "localhost:45678"


def test_unknown_keys_and_blank_lines_are_ignored():
    secret = parse_proxy_secret("\nRS_RLL_OTHER=1\nRS_RLL_SECRET=abc\nRS_RLL_PORT=1\n")

    assert secret.port == 1


@pytest.mark.parametrize(
    "content",
    [
        "RS_RLL_PORT=1\nRS_RLL_SECRET=a=b\n",
        "RS_RLL_PORT 1\nRS_RLL_SECRET=abc\n",
    ],
)
def test_line_without_exactly_one_separator_is_rejected(content):
    with pytest.raises(ConfigError, match="Invalid RLL configuration line"):
        parse_proxy_secret(content)


def test_non_numeric_port_is_rejected():
    with pytest.raises(ConfigError, match="Invalid port value 'http'"):
        parse_proxy_secret("RS_RLL_PORT=http\nRS_RLL_SECRET=abc\n")


def test_non_ascii_digit_port_is_rejected():
    with pytest.raises(ConfigError, match="Invalid port value"):
        parse_proxy_secret("RS_RLL_PORT=\u00b2\nRS_RLL_SECRET=abc\n")


@pytest.mark.parametrize("content", ["RS_RLL_PORT=1\n", "RS_RLL_SECRET=abc\n"])
def test_missing_required_key_is_rejected(content):
    with pytest.raises(ConfigError, match="missing"):
        parse_proxy_secret(content)


def test_load_proxy_secret_from_file(tmp_path):
    path = tmp_path / "secret"
    path.write_text("RS_RLL_PORT=8081\nRS_RLL_SECRET=abc\n", encoding="utf-8")

    assert load_proxy_secret(path).host == "localhost:8081"


def test_load_proxy_secret_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Failed to load RLL config"):
        load_proxy_secret(tmp_path / "absent")


def test_client_config_headers():
    config = ClientConfig(host="us-3.rightscale.com", default_headers={"X-Extra": "1"})

    headers = config.resolved_headers()

    assert headers["X-Api-Version"] == "1.5"
    assert headers["X-Extra"] == "1"
