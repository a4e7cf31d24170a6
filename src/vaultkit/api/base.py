"""Shared plumbing for the endpoint façades."""

from __future__ import annotations

import json
import ssl
import time
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from vaultkit.config import VaultConfig
from vaultkit.rest import Rest, RestResponse
from vaultkit.retry import retry

T = TypeVar("T")

API_VERSION = "v1"


class OperationsBase:
    """Base class of every endpoint façade.

    Holds the configuration, the transport and the retry sleep function, and
    knows how to turn an API path into one HTTP attempt. Subclasses compose
    these into operations:

        def seal_status(self) -> SealResponse:
            def attempt(retries: int) -> SealResponse:
                rest_response = self._send("GET", "sys/seal-status")
                check_status(rest_response, {200})
                return SealResponse.from_rest_response(rest_response, retries)

            return self._retry(attempt)
    """

    def __init__(
        self,
        config: VaultConfig,
        rest: Rest | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._config = config
        self._rest = rest or Rest()
        self._sleep = sleep
        self._ssl_context: ssl.SSLContext | None = None
        self._ssl_context_loaded = False

    @property
    def config(self) -> VaultConfig:
        return self._config

    @property
    def namespace(self) -> str | None:
        return self._config.namespace

    def with_namespace(self, namespace: str | None):
        """Return a copy of this façade bound to another namespace."""
        return type(self)(self._config.evolve(namespace=namespace), self._rest, self._sleep)

    def _retry(self, attempt: Callable[[int], T], *, max_retries: int | None = None) -> T:
        if max_retries is None:
            max_retries = self._config.max_retries
        return retry(attempt, max_retries, self._config.retry_interval_ms, sleep=self._sleep)

    def _url(self, path: str) -> str:
        return f"{self._config.address}/{API_VERSION}/{path.lstrip('/')}"

    def _headers(self, token: str | None = None, **extra: str | None) -> dict[str, str | None]:
        headers: dict[str, str | None] = {
            "X-Vault-Token": token if token is not None else self._config.token,
            "X-Vault-Namespace": self._config.namespace,
            "X-Vault-Request": "true",
        }
        headers.update(extra)
        return headers

    def _tls(self) -> ssl.SSLContext | None:
        # Built on first use so a bad certificate surfaces as a ConfigurationError
        if not self._ssl_context_loaded:
            self._ssl_context = self._config.ssl_config.ssl_context()
            self._ssl_context_loaded = True
        return self._ssl_context

    def _send(
        self,
        method: str,
        path: str,
        body: Mapping[str, Any] | None = None,
        *,
        parameters: Mapping[str, str] | None = None,
        headers: Mapping[str, str | None] | None = None,
    ) -> RestResponse:
        """Perform one HTTP attempt against ``/v1/<path>``."""
        encoded = None
        if body is not None:
            encoded = json.dumps(body, default=str).encode("utf-8")
        return self._rest.execute(
            method,
            self._url(path),
            headers=headers if headers is not None else self._headers(),
            parameters=parameters,
            body=encoded,
            connect_timeout=self._config.open_timeout,
            read_timeout=self._config.read_timeout,
            ssl_verify=self._config.ssl_config.verify,
            ssl_context=self._tls(),
        )
