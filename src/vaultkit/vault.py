"""Client entry point."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

import httpx

from vaultkit.api.auth import Auth
from vaultkit.api.debug import Debug
from vaultkit.api.leases import Leases
from vaultkit.api.logical import Logical
from vaultkit.api.mounts import Mounts
from vaultkit.api.seal import Seal
from vaultkit.api.wrapping import Wrapping
from vaultkit.config import VaultConfig
from vaultkit.errors import VaultError
from vaultkit.rest import Rest

logger = logging.getLogger(__name__)

KV_MOUNT_TYPES = frozenset({"kv", "generic"})


class Vault:
    """Factory for the endpoint façades, sharing one configuration.

    Example:
        >>> config = VaultConfig.build(address="https://vault.example.com:8200", token="s.abc")
        >>> vault = Vault(config)
        >>> vault.logical().read("secret/app").data
        {'password': 's3cr3t'}

    Args:
        config: Resolved configuration; never modified
        transport: Optional ``httpx`` transport replacing the network
        sleep: Sleep function used between retries
    """

    def __init__(
        self,
        config: VaultConfig,
        *,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._config = config
        self._rest = Rest(transport)
        self._sleep = sleep
        if config.namespace:
            logger.info(
                "The namespace %s has been bound to this Vault instance. "
                "Please keep this in mind when running operations.",
                config.namespace,
            )
        if not config.secrets_engine_path_map and "global_engine_version" not in config.model_fields_set:
            logger.info(
                "Constructing a Vault instance with no provided engine version, "
                "defaulting to version %d.",
                config.global_engine_version,
            )

    @classmethod
    def discover(
        cls,
        config: VaultConfig,
        global_fallback_version: int = 2,
        *,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> Vault:
        """Build a Vault whose engine version map is read from the server.

        An explicit map in ``config`` is kept as is. Otherwise ``sys/mounts``
        is listed (which needs a token allowed to read it) and every KV mount
        is mapped to its version.

        Raises:
            VaultError: If the mounts cannot be read
        """
        config = config.evolve(global_engine_version=global_fallback_version)
        if config.secrets_engine_path_map:
            return cls(config, transport=transport, sleep=sleep)

        logger.info("No secrets engine version map was supplied, attempting to generate one.")
        probe = cls(config, transport=transport, sleep=sleep)
        try:
            versions = probe.secret_engine_versions()
        except VaultError as e:
            raise VaultError(
                "An engine KV version map was not supplied, and unable to determine "
                f"KV engine version, due to exception: {e}. Do you have admin rights?",
                e.http_status_code,
            ) from e
        logger.info("Discovered KV engine versions: %s", versions)
        return cls(
            config.evolve(secrets_engine_path_map=versions), transport=transport, sleep=sleep
        )

    @property
    def config(self) -> VaultConfig:
        return self._config

    def secret_engine_versions(self) -> dict[str, str]:
        """Map each KV mount path (``secret/``) to its engine version ("1" or "2")."""
        mounts = self.mounts().list().mounts
        return {
            path: mount.engine_version
            for path, mount in mounts.items()
            if mount.type in KV_MOUNT_TYPES
        }

    def logical(self) -> Logical:
        return Logical(self._config, self._rest, self._sleep)

    def auth(self) -> Auth:
        return Auth(self._config, self._rest, self._sleep)

    def leases(self) -> Leases:
        return Leases(self._config, self._rest, self._sleep)

    def debug(self) -> Debug:
        return Debug(self._config, self._rest, self._sleep)

    def seal(self) -> Seal:
        return Seal(self._config, self._rest, self._sleep)

    def wrapping(self) -> Wrapping:
        return Wrapping(self._config, self._rest, self._sleep)

    def mounts(self) -> Mounts:
        return Mounts(self._config, self._rest, self._sleep)
