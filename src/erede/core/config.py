"""
Configuration objects and helpers for the e.Rede client.

Settings are layered the usual way: the process environment (or an explicit
``base`` mapping), then a ``.env`` file that never overrides existing keys,
then explicit overrides that always win.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional

from .environment import Environment, EnvironmentKind, resolve_environment
from .store import Store
from .transport import DEFAULT_TIMEOUT_SECONDS

__all__ = [
    "ClientConfig",
    "ConfigError",
    "build_settings",
    "load_client_config",
    "load_env_file",
]

_PARAMETER_TO_ENV_KEY = {
    "filiation": "EREDE_FILIATION",
    "token": "EREDE_TOKEN",
    "environment": "EREDE_ENVIRONMENT",
    "base_url": "EREDE_BASE_URL",
    "oauth_token_url": "EREDE_OAUTH_TOKEN_URL",
    "timeout_seconds": "EREDE_TIMEOUT_SECONDS",
    "platform": "EREDE_PLATFORM",
    "platform_version": "EREDE_PLATFORM_VERSION",
}


class ConfigError(Exception):
    """Raised when the supplied configuration is invalid."""


def _parse_env_file(path: Path) -> Dict[str, str]:
    values: Dict[str, str] = {}
    try:
        data = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return values

    for raw_line in data.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        values[key.strip()] = value.strip().strip("\"'")
    return values


def load_env_file(
    path: str = ".env",
    *,
    environ: Optional[MutableMapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Load variables from ``path`` into ``environ`` (default :data:`os.environ`).

    Existing keys are preserved. The merged mapping is returned.
    """
    target: MutableMapping[str, str] = environ if environ is not None else os.environ
    for key, value in _parse_env_file(Path(path)).items():
        target.setdefault(key, value)
    return dict(target)


def build_settings(
    *,
    env_file: Optional[str] = ".env",
    base: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Merge ``base`` (default :data:`os.environ`), ``env_file`` and ``overrides``.

    Set ``env_file`` to ``None`` to skip file loading entirely.
    """
    merged: Dict[str, str] = dict(os.environ if base is None else base)

    if env_file is not None:
        for key, value in _parse_env_file(Path(env_file)).items():
            merged.setdefault(key, value)

    if overrides:
        merged.update(overrides)

    return merged


def _required(values: Mapping[str, str], key: str) -> str:
    value = (values.get(key) or "").strip()
    if not value:
        raise ConfigError(f"{key} must be provided")
    return value


def _optional(values: Mapping[str, str], key: str) -> Optional[str]:
    value = (values.get(key) or "").strip()
    return value or None


def _collect_parameter_overrides(explicit: Mapping[str, Any]) -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    for key, value in explicit.items():
        if value is None:
            continue
        try:
            env_key = _PARAMETER_TO_ENV_KEY[key]
        except KeyError as exc:
            raise TypeError(f"Unknown client parameter '{key}'") from exc
        overrides[env_key] = str(value)
    return overrides


@dataclass(frozen=True)
class ClientConfig:
    filiation: str
    token: str
    environment: EnvironmentKind = EnvironmentKind.PRODUCTION
    base_url: Optional[str] = None
    oauth_token_url: Optional[str] = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    platform: Optional[str] = None
    platform_version: Optional[str] = None

    def __repr__(self) -> str:
        return (
            f"ClientConfig(filiation={self.filiation!r}, environment={self.environment.value!r}, "
            f"base_url={self.base_url!r}, timeout_seconds={self.timeout_seconds!r})"
        )

    def build_environment(self) -> Environment:
        return resolve_environment(
            self.environment.value,
            base_url=self.base_url,
            token_url=self.oauth_token_url,
        )

    def build_store(self) -> Store:
        """A fresh credential store; each one owns its own token cache."""
        return Store(self.filiation, self.token, self.build_environment())

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "ClientConfig":
        filiation = _required(values, "EREDE_FILIATION")
        token = _required(values, "EREDE_TOKEN")

        environment_raw = _optional(values, "EREDE_ENVIRONMENT") or EnvironmentKind.PRODUCTION.value
        try:
            environment = EnvironmentKind(environment_raw.lower())
        except ValueError as exc:
            raise ConfigError(
                f"EREDE_ENVIRONMENT must be one of production, sandbox, custom; got '{environment_raw}'"
            ) from exc

        base_url = _optional(values, "EREDE_BASE_URL")
        if environment is EnvironmentKind.CUSTOM and base_url is None:
            raise ConfigError("EREDE_BASE_URL must be provided for the custom environment")

        timeout_raw = _optional(values, "EREDE_TIMEOUT_SECONDS")
        try:
            timeout_seconds = float(timeout_raw) if timeout_raw is not None else DEFAULT_TIMEOUT_SECONDS
        except ValueError as exc:
            raise ConfigError(
                f"EREDE_TIMEOUT_SECONDS must be a number, got '{timeout_raw}'"
            ) from exc
        if timeout_seconds <= 0:
            raise ConfigError("EREDE_TIMEOUT_SECONDS must be greater than zero")

        return cls(
            filiation=filiation,
            token=token,
            environment=environment,
            base_url=base_url,
            oauth_token_url=_optional(values, "EREDE_OAUTH_TOKEN_URL"),
            timeout_seconds=timeout_seconds,
            platform=_optional(values, "EREDE_PLATFORM"),
            platform_version=_optional(values, "EREDE_PLATFORM_VERSION"),
        )

    @classmethod
    def from_env(
        cls,
        *,
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
    ) -> "ClientConfig":
        parameter_overrides = _collect_parameter_overrides(
            {
                "filiation": filiation,
                "token": token,
                "environment": environment,
                "base_url": base_url,
                "oauth_token_url": oauth_token_url,
                "timeout_seconds": timeout_seconds,
                "platform": platform,
                "platform_version": platform_version,
            }
        )
        merged_overrides = dict(overrides or {})
        merged_overrides.update(parameter_overrides)

        settings = build_settings(env_file=env_file, base=base, overrides=merged_overrides)
        return cls.from_mapping(settings)


def load_client_config(
    *,
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
    Convenience wrapper that mirrors :meth:`ClientConfig.from_env`.

    The configuration can be provided entirely through environment variables,
    a ``.env`` file, direct keyword arguments, or any combination of the three.
    """
    return ClientConfig.from_env(
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
