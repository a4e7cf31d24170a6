"""Response validation and typed response objects.

Endpoint operations validate each :class:`~vaultkit.rest.RestResponse`
against the statuses their endpoint accepts, then wrap it in one of the
typed responses below. Read and write operations accept 4xx statuses as
ordinary responses so callers can inspect error bodies without handling
an exception.
"""

from __future__ import annotations

import json
from collections.abc import Collection, Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

from vaultkit.errors import VaultError
from vaultkit.paths import LogicalOperation
from vaultkit.rest import RestResponse

JSON_MIME_TYPE = "application/json"


def parse_json_object(body: bytes) -> dict[str, Any]:
    """Parse ``body`` as a JSON object, returning an empty dict on any failure."""
    if not body:
        return {}
    try:
        parsed = json.loads(body)
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def status_error(rest_response: RestResponse) -> VaultError:
    """Build the error reported for an unexpected status."""
    return VaultError(
        f"Vault responded with HTTP status code: {rest_response.status}"
        f"\nResponse body: {rest_response.text()}",
        rest_response.status,
    )


def is_client_error(status: int) -> bool:
    return 400 <= status < 500


def check_status(
    rest_response: RestResponse,
    accepted: Collection[int],
    *,
    allow_client_errors: bool = False,
) -> None:
    """Raise unless the response status is acceptable.

    Args:
        rest_response: Response to check
        accepted: Statuses that count as success
        allow_client_errors: Also accept any 4xx status

    Raises:
        VaultError: Carrying the status and the response body
    """
    status = rest_response.status
    if status in accepted or (allow_client_errors and is_client_error(status)):
        return
    raise status_error(rest_response)


def check_json_mime_type(rest_response: RestResponse) -> None:
    """Raise unless the response declares a JSON body.

    Raises:
        VaultError: If the MIME type is not ``application/json``
    """
    if rest_response.mime_type != JSON_MIME_TYPE:
        raise VaultError(
            f"Vault responded with MIME type: {rest_response.mime_type}",
            rest_response.status,
        )


def validate_logical_response(rest_response: RestResponse, operation: LogicalOperation) -> None:
    """Apply the status rules of a logical secret operation.

    - reads and lists: 200 with a JSON body, or any 4xx
    - writes: 200 (JSON body if any) or 204, or any 4xx
    - deletes, version deletes, undeletes and destroys: 204 only

    Raises:
        VaultError: For any other status or a non-JSON 200 body
    """
    status = rest_response.status
    if operation in (
        LogicalOperation.READ_V1,
        LogicalOperation.READ_V2,
        LogicalOperation.LIST_V1,
        LogicalOperation.LIST_V2,
    ):
        check_status(rest_response, {200}, allow_client_errors=True)
        if status == 200:
            check_json_mime_type(rest_response)
    elif operation in (LogicalOperation.WRITE_V1, LogicalOperation.WRITE_V2):
        check_status(rest_response, {200, 204}, allow_client_errors=True)
        if status == 200 and rest_response.body:
            check_json_mime_type(rest_response)
    elif operation in (
        LogicalOperation.DELETE_V1,
        LogicalOperation.DELETE_V2,
        LogicalOperation.DESTROY,
        LogicalOperation.UNDELETE,
    ):
        check_status(rest_response, {204})
    else:
        check_status(rest_response, {200})
        check_json_mime_type(rest_response)


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]


@dataclass(frozen=True)
class VaultResponse:
    """Base response: raw response, retry count and lease metadata."""

    rest_response: RestResponse
    retries: int = 0
    payload: dict[str, Any] = field(default_factory=dict, repr=False)
    request_id: str | None = None
    lease_id: str | None = None
    renewable: bool | None = None
    lease_duration: int | None = None
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def from_rest_response(cls, rest_response: RestResponse, retries: int = 0):
        payload = parse_json_object(rest_response.body)
        return cls(
            rest_response=rest_response,
            retries=retries,
            payload=payload,
            **cls._common_fields(payload),
            **cls._parse(payload),
        )

    @staticmethod
    def _common_fields(payload: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "request_id": payload.get("request_id") or None,
            "lease_id": payload.get("lease_id") or None,
            "renewable": payload.get("renewable"),
            "lease_duration": payload.get("lease_duration"),
            "warnings": _as_str_list(payload.get("warnings")),
        }

    @classmethod
    def _parse(cls, payload: Mapping[str, Any]) -> dict[str, Any]:
        return {}

    @property
    def status(self) -> int:
        return self.rest_response.status

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def is_client_error(self) -> bool:
        return is_client_error(self.status)

    @property
    def errors(self) -> list[str]:
        """Error messages reported by Vault in a 4xx/5xx body."""
        return _as_str_list(self.payload.get("errors"))


@dataclass(frozen=True)
class DataMetadata:
    """Version metadata of a KV version 2 secret."""

    VERSION_KEY: ClassVar[str] = "version"

    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def version(self) -> int | None:
        value = self.metadata.get(self.VERSION_KEY)
        return int(value) if value is not None else None

    @property
    def created_time(self) -> str | None:
        return self.metadata.get("created_time")

    @property
    def deletion_time(self) -> str | None:
        return self.metadata.get("deletion_time") or None

    @property
    def destroyed(self) -> bool:
        return bool(self.metadata.get("destroyed", False))

    def is_empty(self) -> bool:
        return not self.metadata


@dataclass(frozen=True)
class LogicalResponse(VaultResponse):
    """Result of a logical secret operation.

    ``data`` maps each secret key to a string; non-string values are JSON
    encoded. ``data_object`` keeps the values as parsed. For list operations
    ``list_data`` holds the keys found under the path.
    """

    operation: LogicalOperation = LogicalOperation.READ_V1
    data: dict[str, str] = field(default_factory=dict)
    data_object: dict[str, Any] = field(default_factory=dict)
    list_data: list[str] = field(default_factory=list)
    data_metadata: DataMetadata = field(default_factory=DataMetadata)

    @classmethod
    def from_rest_response(
        cls,
        rest_response: RestResponse,
        retries: int = 0,
        operation: LogicalOperation = LogicalOperation.READ_V1,
    ) -> LogicalResponse:
        payload = parse_json_object(rest_response.body)
        envelope = payload
        if operation == LogicalOperation.READ_V2:
            envelope = _as_dict(payload.get("data"))
        data_object = _as_dict(envelope.get("data"))

        data = {
            name: value if isinstance(value, str) else json.dumps(value)
            for name, value in data_object.items()
            if value is not None
        }

        list_data: list[str] = []
        if operation.is_list and rest_response.status != 404:
            list_data = _as_str_list(data_object.get("keys"))

        if operation == LogicalOperation.READ_V2:
            data_metadata = DataMetadata(_as_dict(envelope.get("metadata")))
        elif operation == LogicalOperation.WRITE_V2:
            data_metadata = DataMetadata(data_object)
        else:
            data_metadata = DataMetadata()

        return cls(
            rest_response=rest_response,
            retries=retries,
            payload=payload,
            **cls._common_fields(payload),
            operation=operation,
            data=data,
            data_object=data_object,
            list_data=list_data,
            data_metadata=data_metadata,
        )

    def get(self, name: str, default: str | None = None) -> str | None:
        """Return one secret value by key."""
        return self.data.get(name, default)


@dataclass(frozen=True)
class AuthResponse(VaultResponse):
    """Response of a login or token-creation call (the ``auth`` block)."""

    auth_client_token: str | None = None
    token_accessor: str | None = None
    auth_policies: list[str] = field(default_factory=list)
    token_policies: list[str] = field(default_factory=list)
    auth_lease_duration: int = 0
    auth_renewable: bool = False
    entity_id: str | None = None
    token_type: str | None = None
    orphan: bool = False
    auth_metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def _parse(cls, payload: Mapping[str, Any]) -> dict[str, Any]:
        auth = _as_dict(payload.get("auth"))
        return {
            "auth_client_token": auth.get("client_token"),
            "token_accessor": auth.get("accessor"),
            "auth_policies": _as_str_list(auth.get("policies")),
            "token_policies": _as_str_list(auth.get("token_policies")),
            "auth_lease_duration": int(auth.get("lease_duration") or 0),
            "auth_renewable": bool(auth.get("renewable", False)),
            "entity_id": auth.get("entity_id") or None,
            "token_type": auth.get("token_type"),
            "orphan": bool(auth.get("orphan", False)),
            "auth_metadata": _as_dict(auth.get("metadata")),
        }

    @property
    def username(self) -> str | None:
        return self.auth_metadata.get("username")


@dataclass(frozen=True)
class UnwrapResponse(AuthResponse):
    """Response of unwrapping a wrapping token.

    Wrapped secrets come back in ``data``; wrapped tokens in the auth fields.
    """

    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def _parse(cls, payload: Mapping[str, Any]) -> dict[str, Any]:
        return {**super()._parse(payload), "data": _as_dict(payload.get("data"))}


@dataclass(frozen=True)
class LookupResponse(VaultResponse):
    """Properties of a token, from ``auth/token/lookup-self``."""

    accessor: str = ""
    creation_time: int = 0
    creation_ttl: int = 0
    display_name: str = ""
    entity_id: str = ""
    expire_time: str | None = None
    explicit_max_ttl: int = 0
    id: str = ""
    last_renewal_time: int | None = None
    num_uses: int = 0
    orphan: bool = True
    path: str = ""
    policies: list[str] = field(default_factory=list)
    token_renewable: bool = False
    ttl: int = 0
    token_type: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def _parse(cls, payload: Mapping[str, Any]) -> dict[str, Any]:
        data = _as_dict(payload.get("data"))
        return {
            "accessor": data.get("accessor", ""),
            "creation_time": int(data.get("creation_time") or 0),
            "creation_ttl": int(data.get("creation_ttl") or 0),
            "display_name": data.get("display_name", ""),
            "entity_id": data.get("entity_id", ""),
            "expire_time": data.get("expire_time"),
            "explicit_max_ttl": int(data.get("explicit_max_ttl") or 0),
            "id": data.get("id", ""),
            "last_renewal_time": data.get("last_renewal_time"),
            "num_uses": int(data.get("num_uses") or 0),
            "orphan": bool(data.get("orphan", True)),
            "path": data.get("path", ""),
            "policies": _as_str_list(data.get("policies")),
            "token_renewable": bool(data.get("renewable", False)),
            "ttl": int(data.get("ttl") or 0),
            "token_type": data.get("type"),
            "metadata": _as_dict(data.get("meta")),
        }

    @property
    def username(self) -> str | None:
        return self.metadata.get("username")


@dataclass(frozen=True)
class HealthResponse(VaultResponse):
    """Server health, from ``sys/health``."""

    initialized: bool | None = None
    sealed: bool | None = None
    standby: bool | None = None
    performance_standby: bool | None = None
    server_time_utc: int | None = None
    version: str | None = None
    cluster_name: str | None = None

    @classmethod
    def from_rest_response(cls, rest_response: RestResponse, retries: int = 0) -> HealthResponse:
        """Build the response, requiring a parseable JSON body when one is present.

        Raises:
            VaultError: If a non-empty body is not JSON
        """
        if rest_response.body:
            check_json_mime_type(rest_response)
            try:
                rest_response.json()
            except ValueError as e:
                raise VaultError(
                    f"Unable to parse JSON payload: {e}", rest_response.status
                ) from e
        return super().from_rest_response(rest_response, retries)

    @classmethod
    def _parse(cls, payload: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "initialized": payload.get("initialized"),
            "sealed": payload.get("sealed"),
            "standby": payload.get("standby"),
            "performance_standby": payload.get("performance_standby"),
            "server_time_utc": payload.get("server_time_utc"),
            "version": payload.get("version"),
            "cluster_name": payload.get("cluster_name"),
        }


@dataclass(frozen=True)
class SealResponse(VaultResponse):
    """Seal state, from ``sys/seal-status`` and ``sys/unseal``."""

    sealed: bool = False
    threshold: int = 0
    number_of_shares: int = 0
    progress: int = 0
    initialized: bool | None = None
    version: str | None = None

    @classmethod
    def _parse(cls, payload: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "sealed": bool(payload.get("sealed", False)),
            "threshold": int(payload.get("t") or 0),
            "number_of_shares": int(payload.get("n") or 0),
            "progress": int(payload.get("progress") or 0),
            "initialized": payload.get("initialized"),
            "version": payload.get("version"),
        }


@dataclass(frozen=True)
class WrapResponse(VaultResponse):
    """The ``wrap_info`` block of a wrapped response."""

    token: str | None = None
    accessor: str | None = None
    ttl: int = 0
    creation_time: str | None = None
    creation_path: str | None = None
    wrapped_accessor: str | None = None

    @classmethod
    def _parse(cls, payload: Mapping[str, Any]) -> dict[str, Any]:
        wrap_info = _as_dict(payload.get("wrap_info"))
        return {
            "token": wrap_info.get("token"),
            "accessor": wrap_info.get("accessor"),
            "ttl": int(wrap_info.get("ttl") or 0),
            "creation_time": wrap_info.get("creation_time"),
            "creation_path": wrap_info.get("creation_path"),
            "wrapped_accessor": wrap_info.get("wrapped_accessor") or None,
        }


@dataclass(frozen=True)
class Mount:
    """One secrets engine mount."""

    path: str
    type: str | None = None
    description: str | None = None
    default_lease_ttl: int | None = None
    max_lease_ttl: int | None = None
    force_no_cache: bool | None = None
    local: bool | None = None
    seal_wrap: bool | None = None
    options: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, path: str, data: Mapping[str, Any]) -> Mount:
        # sys/mounts nests ttls under "config"; sys/mounts/<path>/tune returns them flat
        config = _as_dict(data.get("config")) or data
        return cls(
            path=path,
            type=data.get("type"),
            description=data.get("description"),
            default_lease_ttl=config.get("default_lease_ttl"),
            max_lease_ttl=config.get("max_lease_ttl"),
            force_no_cache=config.get("force_no_cache"),
            local=data.get("local"),
            seal_wrap=data.get("seal_wrap"),
            options=_as_dict(data.get("options")),
        )

    @property
    def engine_version(self) -> str:
        """KV engine version recorded in the mount options ("1" when absent)."""
        return str(self.options.get("version") or "1")


@dataclass(frozen=True)
class MountResponse(VaultResponse):
    """Mount listing (``mounts``) or a single mount's tuning (``mount``)."""

    mounts: dict[str, Mount] = field(default_factory=dict)
    mount: Mount | None = None

    @classmethod
    def from_rest_response(
        cls,
        rest_response: RestResponse,
        retries: int = 0,
        *,
        is_list: bool = False,
        path: str = "",
    ) -> MountResponse:
        payload = parse_json_object(rest_response.body)
        body = _as_dict(payload.get("data")) or payload
        mounts: dict[str, Mount] = {}
        mount = None
        if is_list:
            mounts = {
                name: Mount.from_json(name, value)
                for name, value in body.items()
                if isinstance(value, dict)
            }
        elif body and rest_response.status == 200:
            mount = Mount.from_json(path, body)
        return cls(
            rest_response=rest_response,
            retries=retries,
            payload=payload,
            **cls._common_fields(payload),
            mounts=mounts,
            mount=mount,
        )
