"""Tests for vaultkit.rest - the single-request transport."""

from __future__ import annotations

import ssl
from unittest.mock import MagicMock, patch

import httpx
import pytest

from vaultkit.rest import Rest, RestException, RestResponse, RestTimeoutError

URL = "http://vault.test:8200/v1/secret/app"


class BrokenStream(httpx.SyncByteStream):
    """Response body that fails while being read."""

    def __iter__(self):
        raise httpx.ReadError("connection reset by peer")
        yield b""  # pragma: no cover


def _rest(handler) -> Rest:
    return Rest(httpx.MockTransport(handler))


def _mock_client(mock_client_cls) -> MagicMock:
    client = mock_client_cls.return_value.__enter__.return_value
    response = MagicMock()
    response.status_code = 200
    response.headers = {"content-type": "application/json"}
    response.read.return_value = b"{}"
    client.send.return_value = response
    return client


class TestRestExecute:
    """Tests for Rest.execute()."""

    def test_returns_status_mime_type_and_body(self):
        rest = _rest(lambda request: httpx.Response(200, json={"data": {"k": "v"}}))

        response = rest.get(URL)

        assert response.status == 200
        assert response.mime_type == "application/json"
        assert response.json() == {"data": {"k": "v"}}

    def test_error_statuses_are_returned(self):
        rest = _rest(lambda request: httpx.Response(503, text="sealed"))

        response = rest.get(URL)

        assert response.status == 503
        assert response.text() == "sealed"

    def test_mime_type_drops_parameters(self):
        rest = _rest(
            lambda request: httpx.Response(
                200, content=b"{}", headers={"Content-Type": "Application/JSON; charset=utf-8"}
            )
        )

        assert rest.get(URL).mime_type == "application/json"

    def test_missing_content_type(self):
        rest = _rest(lambda request: httpx.Response(204))

        response = rest.delete(URL)

        assert response.mime_type is None
        assert response.body == b""

    def test_headers_with_empty_values_are_skipped(self):
        seen = {}

        def handler(request):
            seen.update(request.headers)
            return httpx.Response(204)

        _rest(handler).get(URL, headers={"X-Vault-Token": "s.abc", "X-Vault-Namespace": None, "X-Empty": ""})

        assert seen["x-vault-token"] == "s.abc"
        assert "x-vault-namespace" not in seen
        assert "x-empty" not in seen

    def test_body_sets_json_headers(self):
        seen = {}

        def handler(request):
            seen["headers"] = request.headers
            seen["body"] = request.content
            seen["method"] = request.method
            return httpx.Response(204)

        _rest(handler).post(URL, body=b'{"k": "v"}')

        assert seen["method"] == "POST"
        assert seen["body"] == b'{"k": "v"}'
        assert seen["headers"]["content-type"] == "application/json; charset=utf-8"
        assert seen["headers"]["accept-charset"] == "UTF-8"

    def test_query_parameters_are_sorted(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            return httpx.Response(200, json={})

        _rest(handler).get(URL, parameters={"version": "2", "list": "true", "b": "x"})

        assert seen["url"].endswith("?b=x&list=true&version=2")

    def test_query_string_in_url_is_kept(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={})

        _rest(handler).get(f"{URL}?list=true")

        assert seen["params"] == {"list": "true"}

    def test_unreadable_body_becomes_empty(self):
        """The status is kept when the body stream breaks."""
        rest = _rest(lambda request: httpx.Response(500, stream=BrokenStream()))

        response = rest.get(URL)

        assert response.status == 500
        assert response.body == b""

    def test_missing_url_raises(self):
        with pytest.raises(RestException, match="No URL is set"):
            Rest().get(None)
        with pytest.raises(RestException, match="No URL is set"):
            Rest().get("")

    def test_unsupported_url_raises(self):
        with pytest.raises(RestException):
            Rest().get("ftp://vault.test/v1/secret/app")

    def test_timeout_raises_timeout_error(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(RestTimeoutError):
            _rest(handler).get(URL)

    def test_connection_failure_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RestException) as exc_info:
            _rest(handler).get(URL)

        assert not isinstance(exc_info.value, RestTimeoutError)
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_injected_transport_stays_open_across_calls(self):
        closed = []

        class RecordingTransport(httpx.MockTransport):
            def close(self):
                closed.append(True)

        rest = Rest(RecordingTransport(lambda request: httpx.Response(200, json={})))

        assert rest.get(URL).status == 200
        assert rest.get(URL).status == 200
        assert closed == []


class TestRestClientSettings:
    """Tests for the TLS and timeout settings handed to httpx."""

    @patch("vaultkit.rest.httpx.Client")
    def test_disabled_verification_skips_certificate_checks(self, mock_client_cls):
        _mock_client(mock_client_cls)
        context = ssl.create_default_context()

        Rest().get(URL, ssl_verify=False, ssl_context=context)

        assert mock_client_cls.call_args.kwargs["verify"] is False

    @patch("vaultkit.rest.httpx.Client")
    def test_trust_material_is_used_when_verifying(self, mock_client_cls):
        _mock_client(mock_client_cls)
        context = ssl.create_default_context()

        Rest().get(URL, ssl_context=context)

        assert mock_client_cls.call_args.kwargs["verify"] is context

    @patch("vaultkit.rest.httpx.Client")
    def test_default_verification(self, mock_client_cls):
        _mock_client(mock_client_cls)

        Rest().get(URL)

        assert mock_client_cls.call_args.kwargs["verify"] is True

    @patch("vaultkit.rest.httpx.Client")
    def test_timeouts(self, mock_client_cls):
        _mock_client(mock_client_cls)

        Rest().get(URL, connect_timeout=2, read_timeout=5)

        timeout = mock_client_cls.call_args.kwargs["timeout"]
        assert timeout.connect == 2
        assert timeout.read == 5

    @patch("vaultkit.rest.httpx.Client")
    def test_redirects_are_not_followed(self, mock_client_cls):
        _mock_client(mock_client_cls)

        Rest().get(URL)

        assert mock_client_cls.call_args.kwargs["follow_redirects"] is False


class TestRestResponse:
    """Tests for RestResponse."""

    def test_text_replaces_invalid_utf8(self):
        response = RestResponse(status=200, mime_type="text/plain", body=b"ok\xff")
        assert response.text() == "ok\ufffd"

    def test_json_raises_on_invalid_body(self):
        with pytest.raises(ValueError):
            RestResponse(status=200, mime_type="application/json", body=b"not json").json()
