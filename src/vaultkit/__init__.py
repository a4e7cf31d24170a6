"""Client library for the HashiCorp Vault HTTP API.

vaultkit turns logical secret operations into Vault REST calls:
- KV version 1 and 2 path rewriting, per mount or globally
- Fixed-interval retries shared by every endpoint
- Typed responses; 4xx answers to reads and writes are returned, not raised
- Auth, leases, seal, wrapping and mount management
"""

import logging

__version__ = "0.1.0"

from vaultkit.api import (
    Auth,
    Debug,
    Leases,
    Logical,
    MountPayload,
    Mounts,
    MountType,
    Seal,
    TokenRequest,
    Wrapping,
)
from vaultkit.config import SslConfig, VaultConfig
from vaultkit.environment import VaultEnvironment
from vaultkit.errors import ConfigurationError, VaultError
from vaultkit.paths import LogicalOperation
from vaultkit.response import (
    AuthResponse,
    DataMetadata,
    HealthResponse,
    LogicalResponse,
    LookupResponse,
    Mount,
    MountResponse,
    SealResponse,
    UnwrapResponse,
    VaultResponse,
    WrapResponse,
)
from vaultkit.rest import Rest, RestException, RestResponse, RestTimeoutError
from vaultkit.vault import Vault

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "Auth",
    "AuthResponse",
    "ConfigurationError",
    "DataMetadata",
    "Debug",
    "HealthResponse",
    "Leases",
    "Logical",
    "LogicalOperation",
    "LogicalResponse",
    "LookupResponse",
    "Mount",
    "MountPayload",
    "MountResponse",
    "MountType",
    "Mounts",
    "Rest",
    "RestException",
    "RestResponse",
    "RestTimeoutError",
    "Seal",
    "SealResponse",
    "SslConfig",
    "TokenRequest",
    "UnwrapResponse",
    "Vault",
    "VaultConfig",
    "VaultEnvironment",
    "VaultError",
    "VaultResponse",
    "Wrapping",
    "WrapResponse",
]
