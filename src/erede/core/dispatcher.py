"""
Authenticated request dispatch against the e.Rede API.
"""

from __future__ import annotations

import platform as _platform
from typing import Callable, List, Optional, Tuple, TypeVar

import requests

from .diagnostics import Diagnostics, DiagnosticsSink, transport_info
from .errors import ProtocolError
from .store import Store
from .token import TokenManager
from .transport import (
    DEFAULT_TIMEOUT_SECONDS,
    build_session,
    engine_version,
    secure_session,
    transport_error,
)

__all__ = [
    "GET",
    "POST",
    "PUT",
    "SDK_VERSION",
    "USER_AGENT",
    "RequestDispatcher",
    "ResponseParser",
]

GET = "GET"
POST = "POST"
PUT = "PUT"

SDK_VERSION = "0.1.0"
USER_AGENT = "erede-python/{version} (Python {python}; Store {filiation}; {system} {release}) {machine}"

T = TypeVar("T")
ResponseParser = Callable[[str, int], T]
Header = Tuple[str, str]


class RequestDispatcher:
    """
    Sends one request per call: builds headers, attaches the bearer token,
    fires the request and hands ``(body, status_code)`` to the parser.
    """

    def __init__(
        self,
        store: Store,
        *,
        session: Optional[requests.Session] = None,
        token_manager: Optional[TokenManager] = None,
        logger: Optional[DiagnosticsSink] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.store = store
        self.session = secure_session(session) if session is not None else build_session()
        self.token_manager = token_manager or TokenManager(
            self.session, timeout=timeout, logger=logger
        )
        self.diagnostics = Diagnostics(logger)
        self.timeout = timeout
        self._platform: Optional[str] = None
        self._platform_version: Optional[str] = None

    def platform(self, name: Optional[str], version: Optional[str]) -> "RequestDispatcher":
        """Advertise the integrating platform in the user agent."""
        self._platform = name
        self._platform_version = version
        return self

    def user_agent(self) -> str:
        user_agent = USER_AGENT.format(
            version=SDK_VERSION,
            python=_platform.python_version(),
            filiation=self.store.filiation,
            system=_platform.system(),
            release=_platform.release(),
            machine=_platform.machine(),
        )
        if self._platform and self._platform_version:
            user_agent += f" {self._platform}/{self._platform_version}"
        user_agent += f" {engine_version()}"
        while "  " in user_agent:
            user_agent = user_agent.replace("  ", " ")
        return user_agent.strip()

    def build_headers(self, token: Optional[str], body: str) -> List[Header]:
        headers: List[Header] = [
            ("User-Agent", self.user_agent()),
            ("Accept", "application/json"),
            ("Transaction-Response", "brand-return-opened"),
        ]
        if token is not None:
            headers.append(("Authorization", f"Bearer {token}"))
        if body != "":
            headers.append(("Content-Type", "application/json; charset=utf8"))
        else:
            headers.append(("Content-Length", "0"))
        return headers

    def send(
        self,
        service: str,
        body: str = "",
        method: str = GET,
        *,
        parser: ResponseParser[T],
    ) -> T:
        url = self.store.environment.endpoint(service)
        method = method.upper()

        token = self.token_manager.ensure_token(self.store)
        headers = self.build_headers(token, body)
        data = None if method == GET or body == "" else body.encode("utf-8")

        self.diagnostics.request(method, url, headers, body)

        try:
            response = self.session.request(
                method,
                url,
                data=data,
                headers=dict(headers),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise transport_error(exc) from exc

        content = response.text
        self.diagnostics.response(response.status_code, content)
        self.diagnostics.transport(transport_info(response))

        if not isinstance(content, str):
            raise ProtocolError("Error obtaining a response from the API")

        return parser(content, response.status_code)
