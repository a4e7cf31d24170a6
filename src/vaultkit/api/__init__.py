"""Endpoint façades built on the shared request execution core."""

from vaultkit.api.auth import Auth, TokenRequest
from vaultkit.api.base import OperationsBase
from vaultkit.api.debug import Debug
from vaultkit.api.leases import Leases
from vaultkit.api.logical import Logical
from vaultkit.api.mounts import MountPayload, Mounts, MountType
from vaultkit.api.seal import Seal
from vaultkit.api.wrapping import Wrapping

__all__ = [
    "Auth",
    "Debug",
    "Leases",
    "Logical",
    "MountPayload",
    "MountType",
    "Mounts",
    "OperationsBase",
    "Seal",
    "TokenRequest",
    "Wrapping",
]
