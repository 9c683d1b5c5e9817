"""
Core primitives that implement the authenticated request pipeline.
"""

from .config import (
    ClientConfig,
    ConfigError,
    build_settings,
    load_client_config,
    load_env_file,
)
from .diagnostics import Diagnostics, redact_body
from .dispatcher import GET, POST, PUT, RequestDispatcher
from .environment import (
    Environment,
    EnvironmentKind,
    custom,
    for_production,
    for_sandbox,
    resolve_environment,
)
from .errors import AuthError, EredeError, ProtocolError, TransportError
from .service import AbstractService
from .store import Store
from .token import SAFETY_MARGIN_SECONDS, TokenManager

__all__ = [
    "GET",
    "POST",
    "PUT",
    "SAFETY_MARGIN_SECONDS",
    "AbstractService",
    "AuthError",
    "ClientConfig",
    "ConfigError",
    "Diagnostics",
    "Environment",
    "EnvironmentKind",
    "EredeError",
    "ProtocolError",
    "RequestDispatcher",
    "Store",
    "TokenManager",
    "TransportError",
    "build_settings",
    "custom",
    "for_production",
    "for_sandbox",
    "load_client_config",
    "load_env_file",
    "redact_body",
    "resolve_environment",
]
