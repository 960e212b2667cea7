"""Regression tests for the ATS HTTP transport."""

from __future__ import annotations

from unittest.mock import MagicMock, Mock

import httpx
import pytest

from ats_runner.adapters import AtsHttpTransport, AtsTransportError
import ats_runner.adapters.ats_transport as transport_module


def _build_client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_adapters_ats_transport_posts_xml_body_and_returns_text() -> None:
    """POST request body as application/xml and return response text.

    Returns:
        None: Assertions validate request shape and response passthrough.

    Raises:
        AssertionError: Raised when request or response handling is incorrect.
    """

    captured_requests: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        captured_requests.append(request)
        return httpx.Response(200, text="<JobID><![CDATA[J1]]></JobID>")

    transport = AtsHttpTransport(client=_build_client(_handler))
    response_body = transport.transport_post("https://ats.example.test/ws/RunJob", "<Envelope/>")

    assert response_body == "<JobID><![CDATA[J1]]></JobID>"
    assert len(captured_requests) == 1
    assert captured_requests[0].method == "POST"
    assert captured_requests[0].headers["Content-Type"] == "application/xml"
    assert captured_requests[0].content == b"<Envelope/>"


@pytest.mark.parametrize("status_code", [201, 302, 404, 500])
def test_adapters_ats_transport_non_200_status_raises_transport_error(status_code: int) -> None:
    """Treat every status other than 200 as a transport failure.

    Args:
        status_code: Upstream HTTP status code.

    Returns:
        None: Assertions validate status mapping.

    Raises:
        AssertionError: Raised when a non-200 status is accepted.
    """

    transport = AtsHttpTransport(client=_build_client(lambda request: httpx.Response(status_code, text="nope")))

    with pytest.raises(AtsTransportError, match=f"HTTP {status_code}"):
        transport.transport_post("https://ats.example.test/ws/RunJob", "<Envelope/>")


def test_adapters_ats_transport_connection_failure_raises_transport_error() -> None:
    """Map connection failures to AtsTransportError, which is also a ConnectionError."""

    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    transport = AtsHttpTransport(client=_build_client(_handler))

    with pytest.raises(ConnectionError, match="failed"):
        transport.transport_post("https://ats.example.test/ws/GetJobStatus", "<Envelope/>")


def test_adapters_ats_transport_timeout_raises_transport_error() -> None:
    """Map request timeouts to AtsTransportError."""

    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    transport = AtsHttpTransport(client=_build_client(_handler))

    with pytest.raises(AtsTransportError, match="timed out"):
        transport.transport_post("https://ats.example.test/ws/GetJobStatus", "<Envelope/>")


@pytest.mark.parametrize("with_injected_client", [True, False])
def test_adapters_ats_transport_invalid_url_raises_transport_error(with_injected_client: bool) -> None:
    """Map malformed endpoint URLs to AtsTransportError instead of leaking httpx.InvalidURL."""

    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="unreachable")

    transport = AtsHttpTransport(client=_build_client(_handler) if with_injected_client else None)

    with pytest.raises(AtsTransportError, match="is invalid") as error_info:
        transport.transport_post("http://ats.example/\x7f/ws/RunJob", "<x/>")

    assert isinstance(error_info.value.__cause__, httpx.InvalidURL)


def test_adapters_ats_transport_uses_scoped_client_per_request(monkeypatch: pytest.MonkeyPatch) -> None:
    """Open and close one client per call when no client is injected.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions verify scoped client lifecycle.

    Raises:
        AssertionError: Raised when clients are not scoped per request.
    """

    response = Mock()
    response.status_code = 200
    response.text = "ok"
    created_clients: list[MagicMock] = []

    def _fake_client_factory(*args: object, **kwargs: object) -> MagicMock:
        _ = args
        fake_client = MagicMock()
        fake_client.__enter__ = Mock(return_value=fake_client)
        fake_client.__exit__ = Mock(return_value=False)
        fake_client.post.return_value = response
        fake_client.timeout_seconds = kwargs.get("timeout")
        created_clients.append(fake_client)
        return fake_client

    monkeypatch.setattr(transport_module.httpx, "Client", _fake_client_factory)

    transport = AtsHttpTransport(request_timeout_seconds=12.5)
    transport.transport_post("https://ats.example.test/ws/RunJob", "<a/>")
    transport.transport_post("https://ats.example.test/ws/RunJob", "<b/>")

    assert len(created_clients) == 2
    assert all(client.__exit__.call_count == 1 for client in created_clients)
    assert created_clients[0].timeout_seconds == 12.5


def test_adapters_ats_transport_rejects_non_positive_timeout() -> None:
    """Reject invalid timeout configuration."""

    with pytest.raises(ValueError, match="request_timeout_seconds"):
        AtsHttpTransport(request_timeout_seconds=0)
