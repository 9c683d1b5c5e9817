"""
Public facade for the e.Rede API client.

The most useful pieces are re-exported so integrators can
``from erede import ...`` without navigating the package.
"""

from .api import create_dispatcher, fetch_token, resolve_config
from .core import (
    GET,
    POST,
    PUT,
    AbstractService,
    AuthError,
    ClientConfig,
    ConfigError,
    Environment,
    EnvironmentKind,
    EredeError,
    ProtocolError,
    RequestDispatcher,
    Store,
    TokenManager,
    TransportError,
    build_settings,
    custom,
    for_production,
    for_sandbox,
    load_client_config,
    load_env_file,
    redact_body,
    resolve_environment,
)

__all__ = (
    "GET",
    "POST",
    "PUT",
    "AbstractService",
    "AuthError",
    "ClientConfig",
    "ConfigError",
    "Environment",
    "EnvironmentKind",
    "EredeError",
    "ProtocolError",
    "RequestDispatcher",
    "Store",
    "TokenManager",
    "TransportError",
    "build_settings",
    "create_dispatcher",
    "custom",
    "fetch_token",
    "for_production",
    "for_sandbox",
    "load_client_config",
    "load_env_file",
    "redact_body",
    "resolve_config",
    "resolve_environment",
)
