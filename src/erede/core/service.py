"""
Base class for endpoint services built on the request dispatcher.
"""

from __future__ import annotations

import abc
from typing import Generic, Optional, TypeVar

import requests

from .diagnostics import DiagnosticsSink
from .dispatcher import GET, RequestDispatcher
from .store import Store

__all__ = ["AbstractService"]

T = TypeVar("T")


class AbstractService(abc.ABC, Generic[T]):
    """
    An endpoint supplies its service path, a parser for raw responses and an
    ``execute`` entry point; transport and authentication are inherited.
    """

    def __init__(
        self,
        store: Store,
        *,
        logger: Optional[DiagnosticsSink] = None,
        session: Optional[requests.Session] = None,
        dispatcher: Optional[RequestDispatcher] = None,
    ) -> None:
        self.store = store
        self.dispatcher = dispatcher or RequestDispatcher(store, session=session, logger=logger)

    def platform(self, name: Optional[str], version: Optional[str]) -> "AbstractService[T]":
        self.dispatcher.platform(name, version)
        return self

    @property
    @abc.abstractmethod
    def service(self) -> str:
        """Path segment appended to the environment's API root."""

    @abc.abstractmethod
    def parse_response(self, body: str, status_code: int) -> T:
        ...

    @abc.abstractmethod
    def execute(self) -> T:
        ...

    def send_request(self, body: str = "", method: str = GET) -> T:
        return self.dispatcher.send(self.service, body, method, parser=self.parse_response)
