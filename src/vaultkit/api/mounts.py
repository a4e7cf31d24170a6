"""Secrets engine mounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from vaultkit.api.base import OperationsBase
from vaultkit.response import MountResponse, check_json_mime_type, check_status


class MountType(Enum):
    """Secrets engine types that can be mounted."""

    AWS = "aws"
    CONSUL = "consul"
    CUBBYHOLE = "cubbyhole"
    DATABASE = "database"
    KEY_VALUE = "kv"
    KEY_VALUE_V2 = "kv-v2"
    IDENTITY = "identity"
    NOMAD = "nomad"
    PKI = "pki"
    RABBITMQ = "rabbitmq"
    SSH = "ssh"
    SYSTEM = "system"
    TOTP = "totp"
    TRANSIT = "transit"


@dataclass
class MountPayload:
    """Settings sent when enabling or tuning a mount.

    TTLs accept Vault duration strings (``"1h"``) or seconds.
    """

    default_lease_ttl: str | int | None = None
    max_lease_ttl: str | int | None = None
    description: str | None = None
    force_no_cache: bool | None = None
    plugin_name: str | None = None
    local: bool | None = None
    seal_wrap: bool | None = None
    audit_non_hmac_request_keys: list[str] = field(default_factory=list)
    audit_non_hmac_response_keys: list[str] = field(default_factory=list)
    options: dict[str, str] = field(default_factory=dict)

    def to_tune_json(self) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if self.default_lease_ttl is not None:
            body["default_lease_ttl"] = str(self.default_lease_ttl)
        if self.max_lease_ttl is not None:
            body["max_lease_ttl"] = str(self.max_lease_ttl)
        if self.description is not None:
            body["description"] = self.description
        if self.audit_non_hmac_request_keys:
            body["audit_non_hmac_request_keys"] = ",".join(self.audit_non_hmac_request_keys)
        if self.audit_non_hmac_response_keys:
            body["audit_non_hmac_response_keys"] = ",".join(self.audit_non_hmac_response_keys)
        if self.options:
            body["options"] = dict(self.options)
        return body

    def to_enable_json(self, mount_type: MountType) -> dict[str, Any]:
        config = self.to_tune_json()
        config.pop("description", None)
        config.pop("options", None)
        if self.force_no_cache is not None:
            config["force_no_cache"] = self.force_no_cache

        body: dict[str, Any] = {"type": mount_type.value}
        if self.description is not None:
            body["description"] = self.description
        if config:
            body["config"] = config
        for name in ("plugin_name", "local", "seal_wrap"):
            value = getattr(self, name)
            if value is not None:
                body[name] = value
        if self.options:
            body["options"] = dict(self.options)
        return body


class Mounts(OperationsBase):
    """Operations on ``sys/mounts``."""

    def list(self) -> MountResponse:
        """List every mounted secrets engine, keyed by mount path (``secret/``)."""

        def attempt(retries: int) -> MountResponse:
            rest_response = self._send("GET", "sys/mounts")
            check_status(rest_response, {200})
            check_json_mime_type(rest_response)
            return MountResponse.from_rest_response(rest_response, retries, is_list=True)

        return self._retry(attempt)

    def enable(
        self,
        path: str,
        mount_type: MountType,
        payload: MountPayload | None = None,
    ) -> MountResponse:
        """Mount a secrets engine of ``mount_type`` at ``path``."""
        body = (payload or MountPayload()).to_enable_json(mount_type)
        return self._no_content("POST", f"sys/mounts/{path}", body)

    def disable(self, path: str) -> MountResponse:
        """Unmount the engine at ``path``. All of its data is removed."""
        return self._no_content("DELETE", f"sys/mounts/{path}", None)

    def read(self, path: str) -> MountResponse:
        """Read the tuning of the mount at ``path``.

        A 404 is returned as a response whose ``mount`` is None.
        """

        def attempt(retries: int) -> MountResponse:
            rest_response = self._send("GET", f"sys/mounts/{path}/tune")
            check_status(rest_response, {200, 404})
            if rest_response.status == 200:
                check_json_mime_type(rest_response)
            return MountResponse.from_rest_response(rest_response, retries, path=path)

        return self._retry(attempt)

    def tune(self, path: str, payload: MountPayload) -> MountResponse:
        """Update the tuning of the mount at ``path``."""
        return self._no_content("POST", f"sys/mounts/{path}/tune", payload.to_tune_json())

    def _no_content(self, method: str, path: str, body: dict[str, Any] | None) -> MountResponse:
        def attempt(retries: int) -> MountResponse:
            rest_response = self._send(method, path, body)
            check_status(rest_response, {204})
            return MountResponse.from_rest_response(rest_response, retries)

        return self._retry(attempt)
