"""Server health checks."""

from __future__ import annotations

from collections.abc import Iterable

from vaultkit.api.base import OperationsBase
from vaultkit.response import HealthResponse, check_status

# 429 unsealed standby, 472 DR secondary, 473 performance standby,
# 501 not initialized, 503 sealed
HEALTH_STATUS_CODES = frozenset({200, 429, 472, 473, 501, 503})


class Debug(OperationsBase):
    """Diagnostics endpoints."""

    def health(
        self,
        standby_ok: bool | None = None,
        active_code: int | None = None,
        standby_code: int | None = None,
        sealed_code: int | None = None,
    ) -> HealthResponse:
        """Query ``sys/health``.

        The health endpoint reports state through its status code, so the
        documented codes (and any custom code passed here) are all returned
        as responses. Inspect ``response.status`` or the parsed flags.

        Args:
            standby_ok: Report a standby node as active (200)
            active_code: Status to return for an active node
            standby_code: Status to return for a standby node
            sealed_code: Status to return for a sealed node

        Raises:
            VaultError: For any other status, or a non-JSON body
        """
        parameters: dict[str, str] = {}
        if standby_ok is not None:
            parameters["standbyok"] = str(standby_ok).lower()
        if active_code is not None:
            parameters["activecode"] = str(active_code)
        if standby_code is not None:
            parameters["standbycode"] = str(standby_code)
        if sealed_code is not None:
            parameters["sealedcode"] = str(sealed_code)
        accepted = HEALTH_STATUS_CODES | _custom_codes(active_code, standby_code, sealed_code)

        def attempt(retries: int) -> HealthResponse:
            rest_response = self._send("GET", "sys/health", parameters=parameters or None)
            check_status(rest_response, accepted)
            return HealthResponse.from_rest_response(rest_response, retries)

        return self._retry(attempt)


def _custom_codes(*codes: int | None) -> frozenset[int]:
    return frozenset(code for code in codes if code is not None)
