from typing import Callable, Dict, Optional
from unittest.mock import MagicMock

import pytest
import requests
from pytest_mock import MockerFixture

from erede.core.environment import for_production
from erede.core.store import Store


class FakeClock:
    def __init__(self, now: float = 0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def build_response(
    body: str = "",
    status_code: int = 200,
    *,
    url: str = "https://api.userede.com.br/erede/v1/transactions",
    headers: Optional[Dict[str, str]] = None,
) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    response.url = url
    response.reason = "OK" if status_code < 400 else "Error"
    response.headers.update(headers or {"Content-Type": "application/json"})
    return response


@pytest.fixture
def make_response() -> Callable[..., requests.Response]:
    return build_response


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(1000)


@pytest.fixture
def session(mocker: MockerFixture) -> MagicMock:
    return mocker.MagicMock(spec=requests.Session)


@pytest.fixture
def logger(mocker: MockerFixture) -> MagicMock:
    return mocker.MagicMock()


@pytest.fixture
def store() -> Store:
    return Store("12345678", "shared-secret", for_production())


def logged_lines(logger: MagicMock) -> list:
    return [call.args[0] for call in logger.debug.call_args_list]
