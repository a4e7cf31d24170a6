"""Secret reads, writes, lists and deletes on KV (and KV-like) engines."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from vaultkit.api.base import OperationsBase
from vaultkit.errors import ConfigurationError, VaultError
from vaultkit.paths import (
    LogicalOperation,
    adjust_path_for_delete,
    adjust_path_for_list,
    adjust_path_for_read_or_write,
    adjust_path_for_version_delete,
    adjust_path_for_version_destroy,
    adjust_path_for_version_undelete,
    engine_version_for_path,
    path_segments,
    wrap_write_payload,
)
from vaultkit.response import (
    LogicalResponse,
    check_json_mime_type,
    check_status,
    validate_logical_response,
)


def _sorted_versions(versions: Iterable[int]) -> list[int]:
    checked = sorted(versions)
    if not checked:
        raise ConfigurationError("At least one secret version is required.")
    if checked[0] < 1:
        raise ConfigurationError("The document version must be 1 or greater.")
    return checked


class Logical(OperationsBase):
    """Operations on secrets stored at logical paths.

    The KV engine version of each path is resolved from the configuration
    (per-path map first, then the global version) and decides how the path
    is rewritten and how write bodies are shaped.

    Reads, lists and writes return 4xx responses instead of raising, so a
    missing secret is just ``response.status == 404``.

    Example:
        >>> logical = Vault(config).logical()
        >>> logical.write("secret/app", {"password": "s3cr3t"})
        >>> logical.read("secret/app").get("password")
        's3cr3t'
    """

    def engine_version_for_path(self, path: str) -> int:
        """Return the KV engine version (1 or 2) used for ``path``."""
        return engine_version_for_path(
            path,
            self._config.secrets_engine_path_map,
            self._config.global_engine_version,
        )

    def _operation(self, action: str, path: str) -> LogicalOperation:
        return LogicalOperation.for_version(action, self.engine_version_for_path(path))

    def read(
        self,
        path: str,
        version: int | None = None,
        should_retry: bool = True,
    ) -> LogicalResponse:
        """Read the secret at ``path``.

        Args:
            path: Secret path including the mount (e.g. ``secret/app``)
            version: Specific secret version to read (KV version 2 only)
            should_retry: When False, make a single attempt

        Returns:
            LogicalResponse; a 4xx status is returned, not raised

        Raises:
            ConfigurationError: If a version is requested on a version 1 path
            VaultError: If the request still fails after all retries
        """
        operation = self._operation("read", path)
        parameters = None
        if version is not None:
            if operation != LogicalOperation.READ_V2:
                raise ConfigurationError(
                    "Version reads are only supported in KV Engine version 2."
                )
            parameters = {"version": str(version)}
        wire_path = adjust_path_for_read_or_write(path, operation, self._config.prefix_path_depth)

        def attempt(retries: int) -> LogicalResponse:
            rest_response = self._send("GET", wire_path, parameters=parameters)
            validate_logical_response(rest_response, operation)
            return LogicalResponse.from_rest_response(rest_response, retries, operation)

        return self._retry(attempt, max_retries=None if should_retry else 0)

    def write(self, path: str, data: Mapping[str, Any] | None = None) -> LogicalResponse:
        """Write name/value pairs to ``path``.

        Values may be any JSON-serializable object; anything else is sent as
        its string form. Version 2 writes are wrapped in a ``data`` envelope.

        Returns:
            LogicalResponse; for version 2 ``data_metadata`` holds the new version
        """
        operation = self._operation("write", path)
        wire_path = adjust_path_for_read_or_write(path, operation, self._config.prefix_path_depth)
        body = wrap_write_payload(operation, data)

        def attempt(retries: int) -> LogicalResponse:
            rest_response = self._send("POST", wire_path, body)
            validate_logical_response(rest_response, operation)
            return LogicalResponse.from_rest_response(rest_response, retries, operation)

        return self._retry(attempt)

    def list(self, path: str) -> LogicalResponse:
        """List the keys directly under ``path``.

        Keys are in ``list_data``; a 404 (nothing stored there) leaves it empty.
        """
        operation = self._operation("list", path)
        wire_path = adjust_path_for_list(path, operation, self._config.prefix_path_depth)

        def attempt(retries: int) -> LogicalResponse:
            rest_response = self._send("GET", wire_path)
            validate_logical_response(rest_response, operation)
            return LogicalResponse.from_rest_response(rest_response, retries, operation)

        return self._retry(attempt)

    def delete(self, path: str) -> LogicalResponse:
        """Delete the secret at ``path``.

        On version 2 engines this removes the metadata and every version.
        """
        operation = self._operation("delete", path)
        wire_path = adjust_path_for_delete(path, operation, self._config.prefix_path_depth)

        def attempt(retries: int) -> LogicalResponse:
            rest_response = self._send("DELETE", wire_path)
            validate_logical_response(rest_response, operation)
            return LogicalResponse.from_rest_response(rest_response, retries, operation)

        return self._retry(attempt)

    def delete_versions(self, path: str, versions: Iterable[int]) -> LogicalResponse:
        """Soft delete specific versions of a version 2 secret.

        Raises:
            ConfigurationError: On a version 1 path or a version below 1
        """
        return self._version_operation(
            path,
            versions,
            adjust_path_for_version_delete,
            LogicalOperation.DELETE_V2,
            "Version deletes",
        )

    def undelete(self, path: str, versions: Iterable[int]) -> LogicalResponse:
        """Recover soft-deleted versions of a version 2 secret.

        Raises:
            ConfigurationError: On a version 1 path or a version below 1
        """
        return self._version_operation(
            path,
            versions,
            adjust_path_for_version_undelete,
            LogicalOperation.UNDELETE,
            "Undeletes",
        )

    def destroy(self, path: str, versions: Iterable[int]) -> LogicalResponse:
        """Permanently remove versions of a version 2 secret.

        Raises:
            ConfigurationError: On a version 1 path or a version below 1
        """
        return self._version_operation(
            path,
            versions,
            adjust_path_for_version_destroy,
            LogicalOperation.DESTROY,
            "Destroys",
        )

    def _version_operation(
        self,
        path,
        versions,
        adjust,
        operation: LogicalOperation,
        label: str,
    ) -> LogicalResponse:
        if self.engine_version_for_path(path) != 2:
            raise ConfigurationError(f"{label} are only supported in KV Engine version 2.")
        body = {"versions": _sorted_versions(versions)}
        wire_path = adjust(path, self._config.prefix_path_depth)

        def attempt(retries: int) -> LogicalResponse:
            rest_response = self._send("POST", wire_path, body)
            validate_logical_response(rest_response, operation)
            return LogicalResponse.from_rest_response(rest_response, retries, operation)

        return self._retry(attempt)

    def upgrade(self, kv_path: str) -> LogicalResponse:
        """Upgrade the KV engine mounted at ``kv_path`` to version 2.

        There is no way back to version 1.

        Raises:
            VaultError: If the path already resolves to version 2
        """
        if self.engine_version_for_path(kv_path) == 2:
            raise VaultError("This KV engine is already version 2.")
        mount = "/".join(path_segments(kv_path))
        body = {"options": {"version": 2}}

        def attempt(retries: int) -> LogicalResponse:
            rest_response = self._send("POST", f"sys/mounts/{mount}/tune", body)
            check_status(rest_response, {200, 204})
            if rest_response.body:
                check_json_mime_type(rest_response)
            return LogicalResponse.from_rest_response(
                rest_response, retries, LogicalOperation.MOUNT
            )

        return self._retry(attempt)
