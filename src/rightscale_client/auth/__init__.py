"""Authenticators for the RightScale APIs."""
from .base import Authenticator, RefreshingAuthenticator
from .builders import InstanceLoginBuilder, LoginRequestBuilder, PasswordLoginBuilder
from .chained import SelfServiceAuthenticator, self_service_host, wrap_self_service
from .oauth import OAuthAuthenticator
from .proxy import ProxySecretAuthenticator
from .session import CookieSessionAuthenticator, basic_authenticator, instance_authenticator
from .token import TokenAuthenticator

__all__ = [
    "Authenticator",
    "RefreshingAuthenticator",
    "LoginRequestBuilder",
    "PasswordLoginBuilder",
    "InstanceLoginBuilder",
    "CookieSessionAuthenticator",
    "basic_authenticator",
    "instance_authenticator",
    "OAuthAuthenticator",
    "TokenAuthenticator",
    "ProxySecretAuthenticator",
    "SelfServiceAuthenticator",
    "self_service_host",
    "wrap_self_service",
]
