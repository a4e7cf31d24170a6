"""Token management and login against the common auth backends."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from vaultkit.api.base import OperationsBase
from vaultkit.response import AuthResponse, LookupResponse, VaultResponse, check_json_mime_type, check_status


@dataclass
class TokenRequest:
    """Options for ``auth/<mount>/create``. Unset options are not sent."""

    id: str | None = None
    policies: list[str] = field(default_factory=list)
    meta: dict[str, str] = field(default_factory=dict)
    no_parent: bool | None = None
    no_default_policy: bool | None = None
    ttl: str | None = None
    display_name: str | None = None
    num_uses: int | None = None
    renewable: bool | None = None
    type: str | None = None
    explicit_max_ttl: str | None = None
    period: str | None = None
    entity_alias: str | None = None
    role: str | None = None

    def to_json(self) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if self.id is not None:
            body["id"] = self.id
        if self.policies:
            body["policies"] = list(self.policies)
        if self.meta:
            body["meta"] = dict(self.meta)
        for name in (
            "no_parent",
            "no_default_policy",
            "ttl",
            "display_name",
            "num_uses",
            "renewable",
            "type",
            "explicit_max_ttl",
            "period",
            "entity_alias",
        ):
            value = getattr(self, name)
            if value is not None:
                body[name] = value
        return body


class Auth(OperationsBase):
    """Authentication backends and operations on the client token.

    Login calls are sent without the configured token; their result carries
    the new token in ``auth_client_token``. Feed it back through a new
    configuration to act as that identity.
    """

    def _auth_call(
        self,
        path: str,
        body: Mapping[str, Any] | None,
        *,
        method: str = "POST",
        authenticated: bool = True,
    ) -> AuthResponse:
        headers = self._headers() if authenticated else self._headers(token="")

        def attempt(retries: int) -> AuthResponse:
            rest_response = self._send(method, path, body, headers=headers)
            check_status(rest_response, {200})
            check_json_mime_type(rest_response)
            return AuthResponse.from_rest_response(rest_response, retries)

        return self._retry(attempt)

    def _login(self, path: str, body: Mapping[str, Any] | None) -> AuthResponse:
        return self._auth_call(path, body, authenticated=False)

    def create_token(self, request: TokenRequest, mount: str = "token") -> AuthResponse:
        """Create a child token (or a token for ``request.role``)."""
        path = f"auth/{mount}/create"
        if request.role:
            path = f"{path}/{request.role}"
        return self._auth_call(path, request.to_json())

    def login_by_userpass(self, username: str, password: str, mount: str = "userpass") -> AuthResponse:
        return self._login(f"auth/{mount}/login/{username}", {"password": password})

    def login_by_ldap(self, username: str, password: str, mount: str = "ldap") -> AuthResponse:
        return self._login(f"auth/{mount}/login/{username}", {"password": password})

    def login_by_approle(self, role_id: str, secret_id: str, mount: str = "approle") -> AuthResponse:
        return self._login(f"auth/{mount}/login", {"role_id": role_id, "secret_id": secret_id})

    def login_by_github(self, github_token: str, mount: str = "github") -> AuthResponse:
        return self._login(f"auth/{mount}/login", {"token": github_token})

    def login_by_jwt(self, provider: str, role: str, jwt: str) -> AuthResponse:
        """Log in through a JWT-style backend mounted at ``auth/<provider>``."""
        return self._login(f"auth/{provider}/login", {"role": role, "jwt": jwt})

    def login_by_gcp(self, role: str, jwt: str) -> AuthResponse:
        return self.login_by_jwt("gcp", role, jwt)

    def login_by_kubernetes(self, role: str, jwt: str) -> AuthResponse:
        """Log in with a service account token.

        Args:
            role: Kubernetes auth role
            jwt: Service account token, typically read from
                /var/run/secrets/kubernetes.io/serviceaccount/token
        """
        return self.login_by_jwt("kubernetes", role, jwt)

    def login_by_cert(self, mount: str = "cert") -> AuthResponse:
        """Log in with the TLS client certificate from the SSL configuration."""
        return self._login(f"auth/{mount}/login", None)

    def renew_self(self, increment: int | None = None, mount: str = "token") -> AuthResponse:
        """Renew the client token, optionally asking for ``increment`` seconds."""
        body = {"increment": increment} if increment is not None else None
        return self._auth_call(f"auth/{mount}/renew-self", body)

    def lookup_self(self, mount: str = "token") -> LookupResponse:
        """Return the properties of the client token."""

        def attempt(retries: int) -> LookupResponse:
            rest_response = self._send("GET", f"auth/{mount}/lookup-self")
            check_status(rest_response, {200})
            check_json_mime_type(rest_response)
            return LookupResponse.from_rest_response(rest_response, retries)

        return self._retry(attempt)

    def revoke_self(self, mount: str = "token") -> VaultResponse:
        """Revoke the client token and all of its children."""

        def attempt(retries: int) -> VaultResponse:
            rest_response = self._send("POST", f"auth/{mount}/revoke-self")
            check_status(rest_response, {204})
            return VaultResponse.from_rest_response(rest_response, retries)

        return self._retry(attempt)
