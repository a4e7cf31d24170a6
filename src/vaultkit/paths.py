"""Secret path rewriting for KV engine versions 1 and 2.

Version 1 engines use the same path for every operation. Version 2 engines
expect a qualifier segment right after the mount (``data`` for reads and
writes, ``metadata`` for lists and deletes, ``delete``/``undelete``/``destroy``
for version operations), and wrap written secrets in a ``data`` envelope.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from vaultkit.errors import ConfigurationError

ENGINE_VERSIONS = (1, 2)


class LogicalOperation(Enum):
    """Logical operation tags, selecting path rules and response shapes."""

    AUTHENTICATION = "authentication"
    DELETE_V1 = "deleteV1"
    DELETE_V2 = "deleteV2"
    DESTROY = "destroy"
    LIST_V1 = "listV1"
    LIST_V2 = "listV2"
    READ_V1 = "readV1"
    READ_V2 = "readV2"
    WRITE_V1 = "writeV1"
    WRITE_V2 = "writeV2"
    UNDELETE = "unDelete"
    MOUNT = "mount"

    @classmethod
    def for_version(cls, action: str, engine_version: int) -> LogicalOperation:
        """Pick the operation tag for an action ("read", "write", "list", "delete").

        Raises:
            ConfigurationError: If the engine version is not 1 or 2
        """
        if engine_version not in ENGINE_VERSIONS:
            raise ConfigurationError(
                f"The engine version must be 1 or 2, got {engine_version!r}"
            )
        return cls[f"{action.upper()}_V{engine_version}"]

    @property
    def is_list(self) -> bool:
        return self in (LogicalOperation.LIST_V1, LogicalOperation.LIST_V2)


def path_segments(path: str) -> list[str]:
    """Split a secret path into its non-empty segments."""
    return [segment for segment in path.split("/") if segment]


def add_qualifier_to_path(path: str, qualifier: str, prefix_path_depth: int = 1) -> str:
    """Insert ``qualifier`` after the mount segments of ``path``.

    A trailing slash on ``path`` is kept, so ``secret/`` becomes
    ``secret/data/``. A path naming only the mount always ends in a slash
    (``secret`` becomes ``secret/data/``).

    Args:
        path: Logical secret path (e.g. ``secret/app/db``)
        qualifier: Segment to insert (e.g. ``data``)
        prefix_path_depth: Number of leading segments that form the mount

    Raises:
        ConfigurationError: If the path has no segments
    """
    segments = path_segments(path)
    if not segments:
        raise ConfigurationError(f"Cannot adjust an empty secret path: {path!r}")
    adjusted = "/".join(
        segments[:prefix_path_depth] + [qualifier] + segments[prefix_path_depth:]
    )
    if path.endswith("/") or len(segments) <= prefix_path_depth:
        adjusted += "/"
    return adjusted


def adjust_path_for_read_or_write(
    path: str, operation: LogicalOperation, prefix_path_depth: int = 1
) -> str:
    if operation in (LogicalOperation.READ_V2, LogicalOperation.WRITE_V2):
        return add_qualifier_to_path(path, "data", prefix_path_depth)
    return path


def adjust_path_for_list(
    path: str, operation: LogicalOperation, prefix_path_depth: int = 1
) -> str:
    """Return the list path, including the ``list=true`` query string."""
    if operation == LogicalOperation.LIST_V2:
        path = add_qualifier_to_path(path, "metadata", prefix_path_depth)
    return f"{path}?list=true"


def adjust_path_for_delete(
    path: str, operation: LogicalOperation, prefix_path_depth: int = 1
) -> str:
    if operation == LogicalOperation.DELETE_V2:
        return add_qualifier_to_path(path, "metadata", prefix_path_depth)
    return path


def adjust_path_for_version_delete(path: str, prefix_path_depth: int = 1) -> str:
    return add_qualifier_to_path(path, "delete", prefix_path_depth)


def adjust_path_for_version_undelete(path: str, prefix_path_depth: int = 1) -> str:
    return add_qualifier_to_path(path, "undelete", prefix_path_depth)


def adjust_path_for_version_destroy(path: str, prefix_path_depth: int = 1) -> str:
    return add_qualifier_to_path(path, "destroy", prefix_path_depth)


def wrap_write_payload(
    operation: LogicalOperation, data: Mapping[str, Any] | None
) -> dict[str, Any]:
    """Shape a write body for the engine version of ``operation``.

    Version 2 writes nest the name/value pairs under ``data``; version 1
    writes send them flat.
    """
    payload = dict(data or {})
    if operation == LogicalOperation.WRITE_V2:
        return {"data": payload}
    return payload


def unwrap_write_payload(
    operation: LogicalOperation, payload: Mapping[str, Any]
) -> dict[str, Any]:
    """Inverse of :func:`wrap_write_payload`."""
    if operation == LogicalOperation.WRITE_V2:
        return dict(payload.get("data") or {})
    return dict(payload)


def engine_version_for_path(
    path: str, path_map: Mapping[str, int], global_version: int
) -> int:
    """Resolve the KV engine version for ``path``.

    The per-path map is keyed by path with a trailing slash (``kv-v1/``).
    An exact match wins; otherwise the global version applies.
    """
    key = path if path.endswith("/") else f"{path}/"
    return path_map.get(key, global_version)
