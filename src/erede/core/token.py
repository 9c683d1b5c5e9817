"""
OAuth2 client-credentials token acquisition and caching.
"""

from __future__ import annotations

import base64
import json
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional

import requests

from .diagnostics import Diagnostics, DiagnosticsSink
from .errors import AuthError, ProtocolError
from .store import Store
from .transport import DEFAULT_TIMEOUT_SECONDS, build_session, secure_session, transport_error

__all__ = [
    "SAFETY_MARGIN_SECONDS",
    "TokenManager",
    "basic_credentials",
]

SAFETY_MARGIN_SECONDS = 60


def basic_credentials(filiation: str, secret: str) -> str:
    raw = f"{filiation}:{secret}".encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def _expires_in(payload: Dict[str, Any]) -> int:
    value = payload.get("expires_in", 0)
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class TokenManager:
    """
    Hands out a bearer token for a :class:`Store`, exchanging credentials only
    when the cached token is absent or within the safety margin of expiry.

    Without ``lock`` two concurrent callers may both refresh; the last write
    wins. Pass a :class:`threading.Lock` for single-flight refreshes.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        clock: Callable[[], float] = time.time,
        timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
        logger: Optional[DiagnosticsSink] = None,
        lock: Optional[threading.Lock] = None,
    ) -> None:
        self.session = secure_session(session) if session is not None else build_session()
        self.clock = clock
        self.timeout = timeout
        self.diagnostics = Diagnostics(logger)
        self.lock = lock

    def _now(self) -> int:
        return int(self.clock())

    def cached_token(self, store: Store) -> Optional[str]:
        token = store.bearer_token
        expires_at = store.bearer_token_expires_at
        if token is not None and expires_at is not None and expires_at > self._now() + SAFETY_MARGIN_SECONDS:
            return token
        return None

    def ensure_token(self, store: Store) -> Optional[str]:
        """
        Return a usable bearer token, or ``None`` for a public environment.
        """
        if store.environment.is_public:
            return None

        token = self.cached_token(store)
        if token is not None:
            return token

        if self.lock is None:
            return self.request_token(store)

        with self.lock:
            token = self.cached_token(store)
            if token is not None:
                return token
            return self.request_token(store)

    def request_token(self, store: Store) -> str:
        """Perform the client-credentials exchange and cache the result."""
        token_url = store.environment.token_url
        if token_url is None:
            raise AuthError("Environment has no OAuth2 token endpoint")

        logging.info("Requesting OAuth2 token at %s", token_url)
        self.diagnostics.emit(f"Requesting OAuth2 token at {token_url}")

        headers = {
            "Accept": "application/json",
            "Content-Type": "application/x-www-form-urlencoded",
            "Authorization": "Basic " + basic_credentials(store.filiation, store.token),
        }
        try:
            response = self.session.post(
                token_url,
                data={"grant_type": "client_credentials"},
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise transport_error(exc, " on OAuth token request") from exc

        body = response.text
        if not isinstance(body, str):
            raise ProtocolError("Invalid OAuth token response")

        self.diagnostics.token_response(response.status_code, body)

        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise ProtocolError("Unable to parse OAuth token response") from exc
        if not isinstance(payload, dict):
            raise ProtocolError("Unable to parse OAuth token response")

        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or access_token == "":
            description = payload.get("error_description") or payload.get("error")
            message = description or "Unknown error obtaining access token"
            raise AuthError(
                f"OAuth token error: {message}",
                description=str(description) if description else None,
            )

        expires_at = self._now() + _expires_in(payload) - SAFETY_MARGIN_SECONDS
        store.set_bearer_token(access_token, expires_at)
        logging.info("OAuth2 token cached until %s", expires_at)
        return access_token
