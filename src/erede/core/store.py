"""
Credential store: the merchant identity plus the cached bearer token.
"""

from __future__ import annotations

from typing import Optional

from .environment import Environment, for_production

__all__ = ["Store"]


class Store:
    """
    Long-lived API identity for one client session.

    The bearer token and its absolute expiry (epoch seconds) are always set and
    cleared together; only the token manager writes them.
    """

    def __init__(
        self,
        filiation: str,
        token: str,
        environment: Optional[Environment] = None,
    ) -> None:
        self.filiation = filiation
        self.token = token
        self.environment = environment if environment is not None else for_production()
        self._bearer_token: Optional[str] = None
        self._bearer_token_expires_at: Optional[int] = None

    def __repr__(self) -> str:
        return (
            f"Store(filiation={self.filiation!r}, environment={self.environment.kind.value!r}, "
            f"bearer_token_expires_at={self._bearer_token_expires_at!r})"
        )

    @property
    def bearer_token(self) -> Optional[str]:
        return self._bearer_token

    @property
    def bearer_token_expires_at(self) -> Optional[int]:
        return self._bearer_token_expires_at

    @property
    def has_bearer_token(self) -> bool:
        return self._bearer_token is not None

    def set_bearer_token(self, token: str, expires_at: int) -> "Store":
        self._bearer_token, self._bearer_token_expires_at = token, expires_at
        return self

    def clear_bearer_token(self) -> "Store":
        self._bearer_token, self._bearer_token_expires_at = None, None
        return self

    def set_environment(self, environment: Environment) -> "Store":
        self.environment = environment
        return self

    def set_filiation(self, filiation: str) -> "Store":
        self.filiation = filiation
        return self

    def set_token(self, token: str) -> "Store":
        self.token = token
        return self
