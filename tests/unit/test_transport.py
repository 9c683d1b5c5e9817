import ssl
from unittest.mock import MagicMock

import pytest
import requests
from pytest_mock import MockerFixture
from requests.adapters import HTTPAdapter

from erede.core.errors import TransportError
from erede.core.transport import (
    TLSAdapter,
    build_session,
    engine_version,
    tls_details,
    transport_error,
)


class TestTLS:
    def test_adapter_requires_tls12_and_verification(self) -> None:
        context = TLSAdapter().poolmanager.connection_pool_kw["ssl_context"]

        assert context.minimum_version == ssl.TLSVersion.TLSv1_2
        assert context.verify_mode == ssl.CERT_REQUIRED
        assert context.check_hostname is True

    def test_build_session_mounts_adapter(self) -> None:
        session = build_session()

        assert isinstance(session.get_adapter("https://api.userede.com.br/erede"), TLSAdapter)
        assert session.verify is True


class TestTLSDetails:
    @pytest.fixture
    def raw(self, mocker: MockerFixture) -> MagicMock:
        sock = mocker.MagicMock(spec=ssl.SSLSocket)
        sock.version.return_value = "TLSv1.3"
        sock.cipher.return_value = ("TLS_AES_256_GCM_SHA384", "TLSv1.3", 256)
        raw = mocker.MagicMock()
        raw.connection.sock = sock
        return raw

    def test_reads_negotiated_session(self, raw: MagicMock) -> None:
        assert tls_details(raw) == {"version": "TLSv1.3", "cipher": "TLS_AES_256_GCM_SHA384"}

    def test_plain_or_released_connection(self, mocker: MockerFixture) -> None:
        raw = mocker.MagicMock()
        raw.connection = None

        assert tls_details(raw) is None
        assert tls_details(None) is None

    def test_adapter_attaches_details_to_response(self, raw: MagicMock, mocker: MockerFixture) -> None:
        mocker.patch.object(HTTPAdapter, "build_response", return_value=requests.Response())

        response = TLSAdapter().build_response(mocker.MagicMock(), raw)

        assert response.tls_info == {"version": "TLSv1.3", "cipher": "TLS_AES_256_GCM_SHA384"}


def test_engine_version() -> None:
    assert engine_version() == f"requests/{requests.__version__} {ssl.OPENSSL_VERSION}"


class TestTransportError:
    def test_falls_back_to_exception_name(self) -> None:
        error = transport_error(requests.Timeout("read timed out"))

        assert isinstance(error, TransportError)
        assert error.code == "Timeout"
        assert str(error) == "Transport error[Timeout]: read timed out"

    def test_uses_chained_errno(self) -> None:
        try:
            try:
                raise ConnectionRefusedError(111, "Connection refused")
            except ConnectionRefusedError as inner:
                raise requests.ConnectionError("connect failed") from inner
        except requests.ConnectionError as exc:
            error = transport_error(exc, " on OAuth token request")

        assert error.code == 111
        assert str(error).startswith("Transport error on OAuth token request[111]")
