"""Sealing and unsealing."""

from __future__ import annotations

from vaultkit.api.base import OperationsBase
from vaultkit.response import SealResponse, check_json_mime_type, check_status


class Seal(OperationsBase):
    """Seal management (``sys/seal``, ``sys/unseal``, ``sys/seal-status``)."""

    def seal(self) -> SealResponse:
        """Seal the server. Requires a root or ``sudo`` token."""

        def attempt(retries: int) -> SealResponse:
            rest_response = self._send("PUT", "sys/seal")
            check_status(rest_response, {204})
            return SealResponse.from_rest_response(rest_response, retries)

        return self._retry(attempt)

    def unseal(self, key: str, reset: bool = False) -> SealResponse:
        """Submit one unseal key share.

        Args:
            key: Unseal key share
            reset: Discard previously submitted shares first
        """
        return self._seal_state("PUT", "sys/unseal", {"key": key, "reset": reset})

    def seal_status(self) -> SealResponse:
        return self._seal_state("GET", "sys/seal-status", None)

    def _seal_state(self, method: str, path: str, body: dict | None) -> SealResponse:
        def attempt(retries: int) -> SealResponse:
            rest_response = self._send(method, path, body)
            check_status(rest_response, {200})
            check_json_mime_type(rest_response)
            return SealResponse.from_rest_response(rest_response, retries)

        return self._retry(attempt)
