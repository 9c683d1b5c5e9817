"""
HTTP engine plumbing: TLS-hardened ``requests`` sessions and error mapping.
"""

from __future__ import annotations

import ssl
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter

from .errors import TransportError

__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "TLSAdapter",
    "build_session",
    "engine_version",
    "secure_session",
    "tls_details",
    "transport_error",
]

DEFAULT_TIMEOUT_SECONDS = 30


def _tls_context() -> ssl.SSLContext:
    context = ssl.create_default_context()
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    return context


def tls_details(raw: Any) -> Optional[Dict[str, Any]]:
    """Negotiated protocol and cipher of the socket behind a urllib3 response."""
    sock = getattr(getattr(raw, "connection", None), "sock", None)
    if not isinstance(sock, ssl.SSLSocket):
        return None
    cipher = sock.cipher()
    return {
        "version": sock.version(),
        "cipher": cipher[0] if cipher else None,
    }


class TLSAdapter(HTTPAdapter):
    """
    Adapter that refuses anything older than TLS 1.2 and verifies peers.
    Responses carry ``tls_info`` with the negotiated version and cipher.
    """

    def init_poolmanager(self, *args: Any, **kwargs: Any) -> None:
        kwargs["ssl_context"] = _tls_context()
        super().init_poolmanager(*args, **kwargs)

    def proxy_manager_for(self, *args: Any, **kwargs: Any) -> Any:
        kwargs["ssl_context"] = _tls_context()
        return super().proxy_manager_for(*args, **kwargs)

    def build_response(self, req: Any, resp: Any) -> requests.Response:
        # the connection is still attached here; it is released once the body is read
        response = super().build_response(req, resp)
        response.tls_info = tls_details(resp)
        return response


def secure_session(session: requests.Session) -> requests.Session:
    session.mount("https://", TLSAdapter())
    session.verify = True
    return session


def build_session() -> requests.Session:
    return secure_session(requests.Session())


def engine_version() -> str:
    """HTTP engine and SSL library identity, as advertised in the user agent."""
    return f"requests/{requests.__version__} {ssl.OPENSSL_VERSION}"


def _native_code(exc: BaseException) -> Optional[Any]:
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        errno = getattr(current, "errno", None)
        if errno:
            return errno
        for arg in getattr(current, "args", ()):
            if isinstance(arg, BaseException) and id(arg) not in seen:
                current = arg
                break
        else:
            current = current.__cause__ or current.__context__
    return None


def transport_error(exc: requests.RequestException, context: str = "") -> TransportError:
    """
    Wrap a connector failure. The native code is the underlying OS/SSL errno
    when one is reachable, else the ``requests`` exception class name.
    """
    code = _native_code(exc) or type(exc).__name__
    prefix = f"Transport error{context}"
    return TransportError(f"{prefix}[{code}]: {exc}", code=code)
