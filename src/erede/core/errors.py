"""
Exceptions raised by the authenticated request pipeline.

Every error here is terminal for the current call: nothing in the pipeline
retries or recovers them, they propagate unchanged to the caller of ``send``.
"""

from __future__ import annotations

from typing import Optional, Union

__all__ = [
    "AuthError",
    "EredeError",
    "ProtocolError",
    "TransportError",
]


class EredeError(Exception):
    """Base class for errors raised by the e.Rede client."""


class TransportError(EredeError):
    """
    The connector failed before a response was received (DNS, TLS, connect,
    timeout). ``code`` carries the native error code reported by the engine.
    """

    def __init__(self, message: str, code: Optional[Union[int, str]] = None) -> None:
        super().__init__(message)
        self.code = code


class ProtocolError(EredeError):
    """The transport succeeded but the body was absent or not parseable."""


class AuthError(EredeError):
    """The OAuth2 exchange completed without yielding a usable access token."""

    def __init__(self, message: str, description: Optional[str] = None) -> None:
        super().__init__(message)
        self.description = description
