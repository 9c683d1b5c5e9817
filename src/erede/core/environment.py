"""
API environments (production, sandbox, custom) and their endpoint resolution.

An :class:`Environment` is pure data: building one never touches the network.
Each :class:`EnvironmentKind` has exactly one token-endpoint resolver; the
sandbox token endpoint lives on a different host than the sandbox API.
"""

from __future__ import annotations

import enum
from typing import Any, Callable, Dict, Optional

__all__ = [
    "API_VERSION",
    "OAUTH_TOKEN_PRODUCTION",
    "OAUTH_TOKEN_SANDBOX",
    "PRODUCTION_URL",
    "SANDBOX_URL",
    "Environment",
    "EnvironmentKind",
    "custom",
    "for_production",
    "for_sandbox",
    "resolve_environment",
]

PRODUCTION_URL = "https://api.userede.com.br/erede"
SANDBOX_URL = "https://api.userede.com.br/desenvolvedores"
API_VERSION = "v1"

OAUTH_TOKEN_PRODUCTION = "https://api.userede.com.br/redelabs/oauth2/token"
OAUTH_TOKEN_SANDBOX = "https://rl7-sandbox-api.useredecloud.com.br/oauth2/token"


class EnvironmentKind(str, enum.Enum):
    PRODUCTION = "production"
    SANDBOX = "sandbox"
    CUSTOM = "custom"


def _production_token_url(base_url: str) -> str:
    return OAUTH_TOKEN_PRODUCTION


def _sandbox_token_url(base_url: str) -> str:
    return OAUTH_TOKEN_SANDBOX


def _custom_token_url(base_url: str) -> str:
    return base_url.rstrip("/") + "/oauth2/token"


_TOKEN_URL_RESOLVERS: Dict[EnvironmentKind, Callable[[str], str]] = {
    EnvironmentKind.PRODUCTION: _production_token_url,
    EnvironmentKind.SANDBOX: _sandbox_token_url,
    EnvironmentKind.CUSTOM: _custom_token_url,
}


class Environment:
    """
    A resolved API environment.

    ``kind``, ``base_url`` and ``version`` are fixed at construction; only the
    token endpoint and the consumer context may change afterwards.
    ``token_url`` is ``None`` for a public environment: no token exchange is
    attempted and requests go out without an ``Authorization`` header.
    """

    def __init__(
        self,
        kind: EnvironmentKind,
        base_url: str,
        token_url: Optional[str],
        version: str = API_VERSION,
        *,
        ip: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self._kind = kind
        self._base_url = base_url
        self._version = version
        self.token_url = token_url
        self.ip = ip
        self.session_id = session_id

    def __repr__(self) -> str:
        return (
            f"Environment(kind={self._kind.value!r}, base_url={self._base_url!r}, "
            f"token_url={self.token_url!r}, version={self._version!r})"
        )

    @property
    def kind(self) -> EnvironmentKind:
        return self._kind

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def version(self) -> str:
        return self._version

    @property
    def api_root(self) -> str:
        return f"{self._base_url.rstrip('/')}/{self._version}/"

    @property
    def is_public(self) -> bool:
        return self.token_url is None

    def endpoint(self, service: str) -> str:
        return self.api_root + service

    def set_token_url(self, token_url: Optional[str]) -> "Environment":
        self.token_url = token_url
        return self

    def set_ip(self, ip: str) -> "Environment":
        self.ip = ip
        return self

    def set_session_id(self, session_id: str) -> "Environment":
        self.session_id = session_id
        return self

    def consumer_payload(self) -> Dict[str, Any]:
        """Consumer context in the shape request bodies embed it."""
        return {"consumer": {"ip": self.ip, "sessionId": self.session_id}}


def _build(kind: EnvironmentKind, base_url: str, token_url: Optional[str] = None) -> Environment:
    resolved = token_url if token_url is not None else _TOKEN_URL_RESOLVERS[kind](base_url)
    return Environment(kind=kind, base_url=base_url, token_url=resolved)


def for_production() -> Environment:
    return _build(EnvironmentKind.PRODUCTION, PRODUCTION_URL)


def for_sandbox() -> Environment:
    return _build(EnvironmentKind.SANDBOX, SANDBOX_URL)


def custom(base_url: str, *, token_url: Optional[str] = None) -> Environment:
    """
    Environment rooted at ``base_url``.

    The token endpoint defaults to ``<base_url>/oauth2/token`` (trailing slash
    trimmed) unless ``token_url`` is given.
    """
    if not base_url or not base_url.strip():
        raise ValueError("Custom environments require a base URL")
    return _build(EnvironmentKind.CUSTOM, base_url.strip(), token_url)


def resolve_environment(
    name: str,
    *,
    base_url: Optional[str] = None,
    token_url: Optional[str] = None,
) -> Environment:
    """Map a configuration name onto an :class:`Environment`."""
    try:
        kind = EnvironmentKind(name.strip().lower())
    except ValueError as exc:
        raise ValueError(
            f"Unknown environment '{name}', expected one of: "
            + ", ".join(k.value for k in EnvironmentKind)
        ) from exc

    if kind is EnvironmentKind.CUSTOM:
        if base_url is None:
            raise ValueError("A base URL is required for the custom environment")
        return custom(base_url, token_url=token_url)

    environment = for_production() if kind is EnvironmentKind.PRODUCTION else for_sandbox()
    if token_url is not None:
        environment.set_token_url(token_url)
    return environment
