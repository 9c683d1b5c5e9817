"""
Public, high-level helpers for talking to the e.Rede API.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import requests

from .core.config import ClientConfig, ConfigError, load_client_config
from .core.diagnostics import DiagnosticsSink
from .core.dispatcher import RequestDispatcher
from .core.store import Store
from .core.token import TokenManager
from .core.transport import DEFAULT_TIMEOUT_SECONDS

__all__ = [
    "ClientConfig",
    "ConfigError",
    "create_dispatcher",
    "fetch_token",
    "resolve_config",
]


def resolve_config(
    *,
    config: Optional[ClientConfig] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    filiation: Optional[str] = None,
    token: Optional[str] = None,
    environment: Optional[str] = None,
    base_url: Optional[str] = None,
    oauth_token_url: Optional[str] = None,
    timeout_seconds: Optional[float | str] = None,
    platform: Optional[str] = None,
    platform_version: Optional[str] = None,
) -> ClientConfig:
    """
    Return ``config`` as-is, or assemble one from environment data.

    Mixing a pre-built config with individual parameters is rejected.
    """
    if config is not None:
        extras = (
            overrides,
            base,
            filiation,
            token,
            environment,
            base_url,
            oauth_token_url,
            timeout_seconds,
            platform,
            platform_version,
        )
        if any(item is not None and item != {} for item in extras):
            raise ValueError(
                "Provide either a pre-built ClientConfig or individual parameters, not both."
            )
        return config

    return load_client_config(
        env_file=env_file,
        overrides=overrides,
        base=base,
        filiation=filiation,
        token=token,
        environment=environment,
        base_url=base_url,
        oauth_token_url=oauth_token_url,
        timeout_seconds=timeout_seconds,
        platform=platform,
        platform_version=platform_version,
    )


def create_dispatcher(
    *,
    config: Optional[ClientConfig] = None,
    store: Optional[Store] = None,
    session: Optional[requests.Session] = None,
    logger: Optional[DiagnosticsSink] = None,
    **params: Any,
) -> RequestDispatcher:
    """
    Construct a :class:`RequestDispatcher` bound to a credential store.

    ``store`` lets several dispatchers share one token cache; otherwise a new
    store is built from the configuration.
    """
    cfg = resolve_config(config=config, **params)
    dispatcher = RequestDispatcher(
        store if store is not None else cfg.build_store(),
        session=session,
        logger=logger,
        timeout=cfg.timeout_seconds,
    )
    return dispatcher.platform(cfg.platform, cfg.platform_version)


def fetch_token(
    store: Store,
    *,
    session: Optional[requests.Session] = None,
    logger: Optional[DiagnosticsSink] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
) -> Optional[str]:
    """
    Return a valid bearer token for ``store``, exchanging credentials only
    when its cached token is unusable. The new token is cached on ``store``.
    """
    manager = TokenManager(session, timeout=timeout, logger=logger)
    return manager.ensure_token(store)
