"""Response wrapping."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from vaultkit.api.base import OperationsBase
from vaultkit.paths import LogicalOperation
from vaultkit.response import (
    LogicalResponse,
    UnwrapResponse,
    WrapResponse,
    check_json_mime_type,
    check_status,
)
from vaultkit.rest import RestResponse


class Wrapping(OperationsBase):
    """Wrap data in single-use tokens and redeem them.

    Operations that take an optional ``wrapped_token`` treat the configured
    token as the wrapping token when none is given (the usual case when a
    wrapping token was handed to the application as its Vault token).
    Otherwise the wrapping token is sent in the request body and the
    configured token authenticates the call.
    """

    def _wrapping_call(self, path: str, wrapped_token: str | None) -> RestResponse:
        if wrapped_token is None:
            return self._send("POST", path)
        return self._send("POST", path, {"token": wrapped_token})

    def wrap(self, data: Mapping[str, Any], ttl_seconds: int) -> WrapResponse:
        """Wrap ``data`` in a wrapping token valid for ``ttl_seconds``."""
        headers = self._headers(**{"X-Vault-Wrap-TTL": str(ttl_seconds)})

        def attempt(retries: int) -> WrapResponse:
            rest_response = self._send("POST", "sys/wrapping/wrap", dict(data), headers=headers)
            check_status(rest_response, {200})
            check_json_mime_type(rest_response)
            return WrapResponse.from_rest_response(rest_response, retries)

        return self._retry(attempt)

    def unwrap(self, wrapped_token: str | None = None) -> UnwrapResponse:
        """Redeem a wrapping token. The token cannot be used again."""

        def attempt(retries: int) -> UnwrapResponse:
            rest_response = self._wrapping_call("sys/wrapping/unwrap", wrapped_token)
            check_status(rest_response, {200})
            check_json_mime_type(rest_response)
            return UnwrapResponse.from_rest_response(rest_response, retries)

        return self._retry(attempt)

    def rewrap(self, wrapped_token: str) -> WrapResponse:
        """Exchange a wrapping token for a new one with the same content."""

        def attempt(retries: int) -> WrapResponse:
            rest_response = self._wrapping_call("sys/wrapping/rewrap", wrapped_token)
            check_status(rest_response, {200})
            check_json_mime_type(rest_response)
            return WrapResponse.from_rest_response(rest_response, retries)

        return self._retry(attempt)

    def lookup_wrap(self, wrapped_token: str | None = None) -> LogicalResponse:
        """Read the properties (creation path, ttl) of a wrapping token without redeeming it."""

        def attempt(retries: int) -> LogicalResponse:
            rest_response = self._wrapping_call("sys/wrapping/lookup", wrapped_token)
            check_status(rest_response, {200})
            check_json_mime_type(rest_response)
            return LogicalResponse.from_rest_response(
                rest_response, retries, LogicalOperation.AUTHENTICATION
            )

        return self._retry(attempt)
