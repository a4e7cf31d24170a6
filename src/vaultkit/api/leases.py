"""Lease revocation and renewal."""

from __future__ import annotations

from vaultkit.api.base import OperationsBase
from vaultkit.response import VaultResponse, check_json_mime_type, check_status


class Leases(OperationsBase):
    """Operations on the leases of dynamic secrets (``sys/leases``)."""

    def _revoke(self, path: str) -> VaultResponse:
        def attempt(retries: int) -> VaultResponse:
            rest_response = self._send("PUT", path)
            check_status(rest_response, {204})
            return VaultResponse.from_rest_response(rest_response, retries)

        return self._retry(attempt)

    def revoke(self, lease_id: str) -> VaultResponse:
        """Revoke one lease immediately."""
        return self._revoke(f"sys/leases/revoke/{lease_id}")

    def revoke_prefix(self, prefix: str) -> VaultResponse:
        """Revoke every lease issued under ``prefix`` (e.g. ``aws/creds/deploy``)."""
        return self._revoke(f"sys/leases/revoke-prefix/{prefix}")

    def revoke_force(self, prefix: str) -> VaultResponse:
        """Revoke every lease under ``prefix``, ignoring backend revocation errors.

        Secrets may be left behind in the backing service. Only use this when
        ``revoke_prefix`` keeps failing.
        """
        return self._revoke(f"sys/leases/revoke-force/{prefix}")

    def renew(self, lease_id: str, increment: int | None = None) -> VaultResponse:
        """Renew a lease, optionally requesting ``increment`` more seconds."""
        body: dict[str, object] = {"lease_id": lease_id}
        if increment is not None:
            body["increment"] = increment

        def attempt(retries: int) -> VaultResponse:
            rest_response = self._send("PUT", "sys/leases/renew", body)
            check_status(rest_response, {200})
            check_json_mime_type(rest_response)
            return VaultResponse.from_rest_response(rest_response, retries)

        return self._retry(attempt)
