"""HTTP transport for posting ATS SOAP request bodies."""

from __future__ import annotations

import logging
from typing import Final

import httpx

from .ats_errors import AtsTransportError

logger = logging.getLogger(__name__)


class AtsHttpTransport:
    """POST request bodies to ATS endpoints and return raw response bodies.

    Each call opens and closes its own `httpx.Client` unless a client is
    injected, in which case that client is reused and owned by the caller.
    No retries happen at this layer.
    """

    _USER_AGENT: Final[str] = "ats-runner/1.0 (Python/httpx)"
    _CONTENT_TYPE: Final[str] = "application/xml"

    def __init__(
        self,
        request_timeout_seconds: float = 30.0,
        client: httpx.Client | None = None,
    ):
        """Initialize transport.

        Args:
            request_timeout_seconds: Per-request timeout in seconds.
            client: Optional shared client; when omitted a scoped client is used per call.

        Raises:
            ValueError: Raised when timeout is not positive.
        """

        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._request_timeout_seconds = request_timeout_seconds
        self._client = client

    def transport_post(self, url: str, body: str) -> str:
        """Send one POST request and return the response body text.

        Args:
            url: Absolute endpoint URL.
            body: Request body.

        Returns:
            str: Response body.

        Raises:
            AtsTransportError: Raised on invalid URL, connection failure, timeout, I/O error or non-200 status.
        """

        headers = {"Content-Type": self._CONTENT_TYPE, "User-Agent": self._USER_AGENT}
        logger.debug("ATS transport POST url=%s bytes=%d", url, len(body))
        try:
            if self._client is not None:
                response = self._client.post(url, content=body.encode("utf-8"), headers=headers)
            else:
                with httpx.Client(timeout=self._request_timeout_seconds) as scoped_client:
                    response = scoped_client.post(url, content=body.encode("utf-8"), headers=headers)
            status_code = response.status_code
            response_text = response.text
        except httpx.InvalidURL as error:
            raise AtsTransportError(f"ATS request URL {url!r} is invalid: {error}") from error
        except httpx.TimeoutException as error:
            raise AtsTransportError(f"ATS request to {url} timed out") from error
        except httpx.HTTPError as error:
            raise AtsTransportError(f"ATS request to {url} failed: {error}") from error
        except OSError as error:
            raise AtsTransportError(f"ATS request to {url} failed with I/O error: {error}") from error

        if status_code != 200:
            raise AtsTransportError(f"ATS upstream returned HTTP {status_code} for {url}")

        return response_text
