"""Exception types raised by vaultkit."""

from __future__ import annotations


class VaultError(Exception):
    """Base exception for vault operations.

    Carries the HTTP status code of the response that caused the failure,
    or 0 when no response was received (e.g. a connection failure).
    """

    def __init__(self, message: str = "", http_status_code: int = 0) -> None:
        super().__init__(message)
        self.http_status_code = http_status_code


class ConfigurationError(VaultError, ValueError):
    """Invalid configuration or caller input.

    Raised before any request is sent and never retried.
    """

    pass
