"""Command-line interface for checking RightScale credentials."""
from __future__ import annotations

import json
import logging
from typing import Any

import typer

try:  # pragma: no cover - exercised in runtime environments
    from rich import box
    from rich.console import Console
    from rich.table import Table
except ImportError as exc:  # pragma: no cover - optional dependency guard
    raise RuntimeError(
        "The CLI requires Rich for table rendering. Install the CLI extras via "
        "'pip install rightscale-client[cli]' to enable this command."
    ) from exc

from . import RightScaleClient
from .auth import (
    Authenticator,
    OAuthAuthenticator,
    ProxySecretAuthenticator,
    TokenAuthenticator,
    basic_authenticator,
    instance_authenticator,
    wrap_self_service,
)
from .config import DEFAULT_HOST, RLL_SECRET_PATH
from .dump import DumpFormat
from .exceptions import RequestError, RightScaleError

app = typer.Typer(help="RightScale API authentication CLI.", no_args_is_help=True)


def _build_authenticator(
    *,
    email: str | None,
    password: str | None,
    account: int,
    api_token: str | None,
    refresh_token: str | None,
    access_token: str | None,
    rl10: bool,
    secret_path: str,
    self_service: bool,
) -> tuple[Authenticator, str | None]:
    """Pick the authenticator matching the supplied credentials.

    Returns the authenticator and, for the RightLink proxy, the host it is
    bound to.
    """
    host: str | None = None
    auth: Authenticator
    if rl10:
        try:
            auth = ProxySecretAuthenticator.from_secret_file(secret_path)
        except RightScaleError as exc:
            raise typer.BadParameter(str(exc)) from exc
        host = auth.host
    elif refresh_token:
        auth = OAuthAuthenticator(refresh_token)
    elif access_token:
        auth = TokenAuthenticator(access_token)
    elif api_token:
        auth = instance_authenticator(api_token, account)
    elif email and password:
        auth = basic_authenticator(email, password, account)
    else:
        raise typer.BadParameter(
            "Missing authentication information, use '--email EMAIL --password PWD', "
            "'--refresh-token TOKEN', '--access-token TOKEN', '--api-token TOKEN' or '--rl10'."
        )
    if self_service:
        auth = wrap_self_service(auth, account)
    return auth, host


def _parse_dump(value: str | None) -> DumpFormat:
    try:
        dump = DumpFormat.parse(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    if dump.is_verbose:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
    return dump


def _build_client(
    *,
    host: str,
    email: str | None,
    password: str | None,
    account: int,
    api_token: str | None,
    refresh_token: str | None,
    access_token: str | None,
    rl10: bool,
    secret_path: str,
    self_service: bool,
    dump: str | None,
    verify_ssl: bool,
    api_version: str,
    check_auth: bool,
) -> RightScaleClient:
    auth, proxy_host = _build_authenticator(
        email=email,
        password=password,
        account=account,
        api_token=api_token,
        refresh_token=refresh_token,
        access_token=access_token,
        rl10=rl10,
        secret_path=secret_path,
        self_service=self_service,
    )
    return RightScaleClient(
        host=proxy_host or host,
        authenticator=auth,
        dump=_parse_dump(dump),
        verify_ssl=verify_ssl,
        api_version=api_version,
        unsecure=rl10,
        check_auth=check_auth,
    )


def _fail(message: str) -> None:
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


console = Console(force_terminal=False, color_system=None)


def _render_summary(client: RightScaleClient, account: int) -> None:
    table = Table(title="Authentication", box=box.SIMPLE, header_style="bold cyan")
    table.add_column("Host")
    table.add_column("Authenticator")
    table.add_column("Account", justify="right")
    table.add_column("Status")
    table.add_row(
        client.auth.host if client.auth else client.host,
        type(client.auth).__name__,
        str(account) if account else "-",
        "ok",
    )
    console.print(table)


def _shared_options() -> dict[str, Any]:  # pragma: no cover - helper indirection
    return {
        "host": typer.Option(
            DEFAULT_HOST, "--host", envvar="RIGHTSCALE_HOST", help="API host name."
        ),
        "email": typer.Option(
            None, "--email", "-e", envvar="RIGHTSCALE_EMAIL", help="Login email for session auth."
        ),
        "password": typer.Option(
            None,
            "--password",
            "-p",
            envvar="RIGHTSCALE_PASSWORD",
            help="Login password for session auth.",
            hide_input=True,
        ),
        "account": typer.Option(
            0, "--account", "-a", envvar="RIGHTSCALE_ACCOUNT", help="Account identifier."
        ),
        "api_token": typer.Option(
            None, "--api-token", envvar="RS_API_TOKEN", help="Instance-facing API token."
        ),
        "refresh_token": typer.Option(
            None, "--refresh-token", envvar="RIGHTSCALE_REFRESH_TOKEN", help="OAuth refresh token."
        ),
        "access_token": typer.Option(
            None, "--access-token", envvar="RIGHTSCALE_ACCESS_TOKEN", help="OAuth access token."
        ),
        "rl10": typer.Option(
            False, "--rl10", help="Proxy requests through the local RightLink 10 agent."
        ),
        "secret_path": typer.Option(
            RLL_SECRET_PATH, "--rl10-secret", help="Path to the RightLink 10 secret file."
        ),
        "self_service": typer.Option(
            False, "--self-service", help="Also create a Self-Service session."
        ),
        "dump": typer.Option(
            None, "--dump", help="Dump HTTP traffic to stderr ('debug' or 'json')."
        ),
        "verify_ssl": typer.Option(
            True,
            "--verify/--no-verify",
            envvar="RIGHTSCALE_VERIFY_SSL",
            help="Enable or disable TLS certificate verification.",
            show_default=True,
        ),
    }


_SHARED_OPTIONS = _shared_options()


@app.command("check")
def check(
    host: str = _SHARED_OPTIONS["host"],
    email: str | None = _SHARED_OPTIONS["email"],
    password: str | None = _SHARED_OPTIONS["password"],
    account: int = _SHARED_OPTIONS["account"],
    api_token: str | None = _SHARED_OPTIONS["api_token"],
    refresh_token: str | None = _SHARED_OPTIONS["refresh_token"],
    access_token: str | None = _SHARED_OPTIONS["access_token"],
    rl10: bool = _SHARED_OPTIONS["rl10"],
    secret_path: str = _SHARED_OPTIONS["secret_path"],
    self_service: bool = _SHARED_OPTIONS["self_service"],
    dump: str | None = _SHARED_OPTIONS["dump"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
) -> None:
    """Verify that the supplied credentials can sign requests."""

    try:
        client = _build_client(
            host=host,
            email=email,
            password=password,
            account=account,
            api_token=api_token,
            refresh_token=refresh_token,
            access_token=access_token,
            rl10=rl10,
            secret_path=secret_path,
            self_service=self_service,
            dump=dump,
            verify_ssl=verify_ssl,
            api_version="1.5",
            check_auth=True,
        )
    except RightScaleError as exc:
        _fail(f"Authentication check failed: {exc}")
        return
    with client:
        _render_summary(client, account)


@app.command("get")
def get(
    path: str = typer.Argument(..., help="API path, e.g. api/clouds."),
    host: str = _SHARED_OPTIONS["host"],
    email: str | None = _SHARED_OPTIONS["email"],
    password: str | None = _SHARED_OPTIONS["password"],
    account: int = _SHARED_OPTIONS["account"],
    api_token: str | None = _SHARED_OPTIONS["api_token"],
    refresh_token: str | None = _SHARED_OPTIONS["refresh_token"],
    access_token: str | None = _SHARED_OPTIONS["access_token"],
    rl10: bool = _SHARED_OPTIONS["rl10"],
    secret_path: str = _SHARED_OPTIONS["secret_path"],
    self_service: bool = _SHARED_OPTIONS["self_service"],
    dump: str | None = _SHARED_OPTIONS["dump"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    api_version: str = typer.Option("1.5", "--api-version", help="X-Api-Version header value."),
) -> None:
    """Issue a signed GET request and print the JSON response."""

    client = _build_client(
        host=host,
        email=email,
        password=password,
        account=account,
        api_token=api_token,
        refresh_token=refresh_token,
        access_token=access_token,
        rl10=rl10,
        secret_path=secret_path,
        self_service=self_service,
        dump=dump,
        verify_ssl=verify_ssl,
        api_version=api_version,
        check_auth=False,
    )
    with client:
        try:
            payload = client.request("GET", path)
        except RequestError as exc:
            message = f"Request failed (status {exc.status_code}): {exc}"
            _fail(message)
            return
        except RightScaleError as exc:
            _fail(f"Authentication failed: {exc}")
            return
    typer.echo(json.dumps(payload, indent=2))


if __name__ == "__main__":  # pragma: no cover
    app()
