"""Single-request HTTP transport.

:class:`Rest` executes exactly one HTTP request and hands back a
:class:`RestResponse` with the status code, MIME type and raw body. It keeps
no state between calls apart from an optional injected ``httpx`` transport,
which tests use to simulate a server.
"""

from __future__ import annotations

import json
import logging
import ssl
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class RestException(Exception):
    """The HTTP request could not be performed."""

    pass


class RestTimeoutError(RestException):
    """The connection could not be opened or read within the configured timeout."""

    pass


@dataclass(frozen=True)
class RestResponse:
    """Status, MIME type and payload of one HTTP response."""

    status: int
    mime_type: str | None
    body: bytes = b""

    def text(self) -> str:
        """Decode the body as UTF-8, replacing undecodable bytes."""
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Parse the body as JSON.

        Raises:
            ValueError: If the body is not valid JSON
        """
        return json.loads(self.body)


def _mime_type(content_type: str | None) -> str | None:
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower()


class _BorrowedTransport(httpx.BaseTransport):
    """Hands requests to a caller-owned transport without ever closing it."""

    def __init__(self, transport: httpx.BaseTransport) -> None:
        self._transport = transport

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        return self._transport.handle_request(request)


class Rest:
    """Issue HTTP requests against the Vault REST API.

    Example:
        >>> rest = Rest()
        >>> response = rest.get(
        ...     "https://vault.example.com/v1/secret/data/app",
        ...     headers={"X-Vault-Token": "s.abc"},
        ...     read_timeout=5,
        ... )
        >>> response.status
        200
    """

    def __init__(self, transport: httpx.BaseTransport | None = None) -> None:
        """Initialize the transport wrapper.

        Args:
            transport: Optional ``httpx`` transport used instead of the network
                (e.g. ``httpx.MockTransport`` in tests). It stays open across
                calls and is closed by its owner, not by Rest.
        """
        self._transport = transport

    def get(self, url: str | None, **kwargs: Any) -> RestResponse:
        return self.execute("GET", url, **kwargs)

    def post(self, url: str | None, **kwargs: Any) -> RestResponse:
        return self.execute("POST", url, **kwargs)

    def put(self, url: str | None, **kwargs: Any) -> RestResponse:
        return self.execute("PUT", url, **kwargs)

    def delete(self, url: str | None, **kwargs: Any) -> RestResponse:
        return self.execute("DELETE", url, **kwargs)

    def execute(
        self,
        method: str,
        url: str | None,
        *,
        headers: Mapping[str, str | None] | None = None,
        parameters: Mapping[str, str] | None = None,
        body: bytes | None = None,
        connect_timeout: float | None = None,
        read_timeout: float | None = None,
        ssl_verify: bool = True,
        ssl_context: ssl.SSLContext | None = None,
    ) -> RestResponse:
        """Perform one HTTP request.

        Args:
            method: HTTP method (GET, POST, PUT or DELETE)
            url: Absolute URL; may already carry a query string
            headers: Header names and values; headers whose value is empty are skipped
            parameters: Query parameters, encoded in name order
            body: Raw request body
            connect_timeout: Seconds allowed to open the connection (None waits forever)
            read_timeout: Seconds allowed between received bytes (None waits forever)
            ssl_verify: When False, server certificates and hostnames are not
                checked at all. Unsafe; meant for development servers only.
            ssl_context: Trust (and optionally client identity) material used
                to validate the server when ``ssl_verify`` is True

        Returns:
            RestResponse holding the status, MIME type and full body. Non-2xx
            responses are returned, not raised.

        Raises:
            RestTimeoutError: If connecting or reading exceeded its timeout
            RestException: If no URL is set, the URL is invalid, or the
                request failed for any other I/O reason
        """
        if not url:
            raise RestException("No URL is set")

        request_headers = {name: value for name, value in (headers or {}).items() if value}
        if body is not None:
            request_headers.setdefault("Content-Type", "application/json; charset=utf-8")
            request_headers.setdefault("Accept-Charset", "UTF-8")
        params = sorted(parameters.items()) if parameters else None

        try:
            with self._client(connect_timeout, read_timeout, ssl_verify, ssl_context) as client:
                request = client.build_request(
                    method, url, headers=request_headers, params=params, content=body
                )
                response = client.send(request, stream=True)
                try:
                    try:
                        payload = response.read()
                    except httpx.HTTPError as e:
                        # Keep the status even when the body is lost
                        logger.debug("Unable to read response body from %s: %s", url, e)
                        payload = b""
                finally:
                    response.close()
        except httpx.TimeoutException as e:
            raise RestTimeoutError(f"Timed out requesting {url}: {e}") from e
        except httpx.InvalidURL as e:
            raise RestException(f"Invalid URL {url!r}: {e}") from e
        except httpx.HTTPError as e:
            raise RestException(f"Request to {url} failed: {e}") from e

        return RestResponse(
            status=response.status_code,
            mime_type=_mime_type(response.headers.get("content-type")),
            body=payload,
        )

    def _client(
        self,
        connect_timeout: float | None,
        read_timeout: float | None,
        ssl_verify: bool,
        ssl_context: ssl.SSLContext | None,
    ) -> httpx.Client:
        if not ssl_verify:
            verify: bool | ssl.SSLContext = False
        elif ssl_context is not None:
            verify = ssl_context
        else:
            verify = True

        # One client per request, so no connection state outlives a call
        transport = _BorrowedTransport(self._transport) if self._transport is not None else None
        return httpx.Client(
            transport=transport,
            verify=verify,
            timeout=httpx.Timeout(None, connect=connect_timeout, read=read_timeout),
            follow_redirects=False,
        )
