"""Tests for vaultkit.response - status rules and typed responses."""

from __future__ import annotations

import json

import pytest

from vaultkit.errors import VaultError
from vaultkit.paths import LogicalOperation
from vaultkit.response import (
    AuthResponse,
    HealthResponse,
    LogicalResponse,
    LookupResponse,
    MountResponse,
    SealResponse,
    UnwrapResponse,
    VaultResponse,
    WrapResponse,
    check_status,
    parse_json_object,
    validate_logical_response,
)
from vaultkit.rest import RestResponse

JSON = "application/json"


def _json_response(payload, status: int = 200) -> RestResponse:
    return RestResponse(status=status, mime_type=JSON, body=json.dumps(payload).encode())


class TestValidateLogicalResponse:
    """Tests for the per-operation status rules."""

    @pytest.mark.parametrize("status", [400, 403, 404, 429])
    def test_reads_accept_client_errors(self, status):
        validate_logical_response(_json_response({"errors": []}, status), LogicalOperation.READ_V2)

    @pytest.mark.parametrize("status", [301, 500, 503])
    def test_reads_reject_other_statuses(self, status):
        rest_response = RestResponse(status=status, mime_type="text/plain", body=b"upstream failure")

        with pytest.raises(VaultError) as exc_info:
            validate_logical_response(rest_response, LogicalOperation.READ_V1)

        assert exc_info.value.http_status_code == status
        assert f"HTTP status code: {status}" in str(exc_info.value)
        assert "upstream failure" in str(exc_info.value)

    def test_read_requires_json(self):
        rest_response = RestResponse(status=200, mime_type="text/html", body=b"<html/>")

        with pytest.raises(VaultError, match="MIME type: text/html"):
            validate_logical_response(rest_response, LogicalOperation.READ_V1)

    def test_writes_accept_200_and_204(self):
        validate_logical_response(_json_response({"data": {}}), LogicalOperation.WRITE_V2)
        validate_logical_response(RestResponse(204, None), LogicalOperation.WRITE_V1)

    def test_writes_accept_client_errors(self):
        validate_logical_response(_json_response({"errors": ["bad"]}, 400), LogicalOperation.WRITE_V1)

    def test_write_rejects_server_errors(self):
        with pytest.raises(VaultError):
            validate_logical_response(RestResponse(500, None), LogicalOperation.WRITE_V2)

    @pytest.mark.parametrize(
        "operation",
        [
            LogicalOperation.DELETE_V1,
            LogicalOperation.DELETE_V2,
            LogicalOperation.DESTROY,
            LogicalOperation.UNDELETE,
        ],
    )
    def test_deletes_only_accept_204(self, operation):
        validate_logical_response(RestResponse(204, None), operation)
        with pytest.raises(VaultError):
            validate_logical_response(_json_response({}), operation)
        with pytest.raises(VaultError):
            validate_logical_response(_json_response({}, 404), operation)

    def test_check_status(self):
        check_status(RestResponse(204, None), {200, 204})
        with pytest.raises(VaultError):
            check_status(RestResponse(403, None), {200})
        check_status(RestResponse(403, None), {200}, allow_client_errors=True)


class TestLogicalResponse:
    """Tests for LogicalResponse parsing."""

    def test_version_2_read(self):
        payload = {
            "request_id": "req-1",
            "data": {
                "data": {"user": "admin", "port": 5432, "tags": ["a", "b"], "missing": None},
                "metadata": {"version": 3, "created_time": "2024-01-01T00:00:00Z", "destroyed": False},
            },
        }

        response = LogicalResponse.from_rest_response(_json_response(payload), 2, LogicalOperation.READ_V2)

        assert response.retries == 2
        assert response.request_id == "req-1"
        assert response.data == {"user": "admin", "port": "5432", "tags": '["a", "b"]'}
        assert response.data_object["port"] == 5432
        assert response.data_metadata.version == 3
        assert response.data_metadata.created_time == "2024-01-01T00:00:00Z"
        assert not response.data_metadata.destroyed

    def test_version_1_read_with_lease(self):
        payload = {"lease_id": "", "renewable": False, "lease_duration": 2764800, "data": {"value": "mock"}}

        response = LogicalResponse.from_rest_response(_json_response(payload), 0, LogicalOperation.READ_V1)

        assert response.get("value") == "mock"
        assert response.get("nope", "default") == "default"
        assert response.lease_id is None
        assert response.lease_duration == 2764800
        assert response.data_metadata.is_empty()

    def test_list(self):
        payload = {"data": {"keys": ["app", "db/"]}}

        response = LogicalResponse.from_rest_response(_json_response(payload), 0, LogicalOperation.LIST_V2)

        assert response.list_data == ["app", "db/"]

    def test_list_not_found_is_empty(self):
        response = LogicalResponse.from_rest_response(
            _json_response({"errors": []}, 404), 0, LogicalOperation.LIST_V1
        )

        assert response.status == 404
        assert response.list_data == []
        assert response.is_client_error
        assert not response.ok

    def test_version_2_write_metadata(self):
        payload = {"data": {"version": 4, "created_time": "2024-01-02T00:00:00Z"}}

        response = LogicalResponse.from_rest_response(_json_response(payload), 0, LogicalOperation.WRITE_V2)

        assert response.data_metadata.version == 4

    def test_empty_body(self):
        response = LogicalResponse.from_rest_response(RestResponse(204, None), 0, LogicalOperation.DELETE_V2)

        assert response.ok
        assert response.data == {}
        assert response.payload == {}

    def test_error_messages(self):
        response = LogicalResponse.from_rest_response(
            _json_response({"errors": ["permission denied"]}, 403), 0, LogicalOperation.READ_V2
        )

        assert response.status == 403
        assert response.errors == ["permission denied"]
        assert response.data == {}


class TestAuthResponses:
    """Tests for auth, lookup and unwrap responses."""

    AUTH_PAYLOAD = {
        "auth": {
            "client_token": "s.new",
            "accessor": "acc-1",
            "policies": ["default", "dev"],
            "token_policies": ["default", "dev"],
            "metadata": {"username": "alice"},
            "lease_duration": 3600,
            "renewable": True,
            "entity_id": "ent-1",
            "token_type": "service",
            "orphan": True,
        }
    }

    def test_auth_response(self):
        response = AuthResponse.from_rest_response(_json_response(self.AUTH_PAYLOAD))

        assert response.auth_client_token == "s.new"
        assert response.token_accessor == "acc-1"
        assert response.auth_policies == ["default", "dev"]
        assert response.auth_lease_duration == 3600
        assert response.auth_renewable
        assert response.orphan
        assert response.username == "alice"

    def test_auth_response_without_auth_block(self):
        response = AuthResponse.from_rest_response(_json_response({"data": {}}))

        assert response.auth_client_token is None
        assert response.auth_policies == []
        assert response.auth_lease_duration == 0

    def test_unwrap_response(self):
        payload = {**self.AUTH_PAYLOAD, "data": {"secret": "value"}}

        response = UnwrapResponse.from_rest_response(_json_response(payload))

        assert response.data == {"secret": "value"}
        assert response.auth_client_token == "s.new"

    def test_lookup_response(self):
        payload = {
            "data": {
                "accessor": "acc-1",
                "creation_ttl": 2764800,
                "display_name": "token",
                "id": "s.abc",
                "meta": {"username": "bob"},
                "num_uses": 0,
                "orphan": False,
                "path": "auth/token/create",
                "policies": ["root"],
                "renewable": True,
                "ttl": 100,
                "type": "service",
            }
        }

        response = LookupResponse.from_rest_response(_json_response(payload))

        assert response.id == "s.abc"
        assert response.creation_ttl == 2764800
        assert response.policies == ["root"]
        assert response.token_renewable
        assert not response.orphan
        assert response.token_type == "service"
        assert response.username == "bob"


class TestSysResponses:
    """Tests for health, seal, wrap and mount responses."""

    def test_health_response(self):
        payload = {
            "initialized": True,
            "sealed": False,
            "standby": False,
            "performance_standby": False,
            "server_time_utc": 1700000000,
            "version": "1.15.0",
            "cluster_name": "vault-cluster",
        }

        response = HealthResponse.from_rest_response(_json_response(payload))

        assert response.initialized is True
        assert response.sealed is False
        assert response.version == "1.15.0"
        assert response.server_time_utc == 1700000000

    def test_health_without_body(self):
        response = HealthResponse.from_rest_response(RestResponse(503, None))

        assert response.status == 503
        assert response.sealed is None

    def test_health_rejects_non_json(self):
        with pytest.raises(VaultError, match="MIME type"):
            HealthResponse.from_rest_response(RestResponse(200, "text/plain", b"ok"))

    def test_health_rejects_unparseable_json(self):
        with pytest.raises(VaultError, match="Unable to parse JSON"):
            HealthResponse.from_rest_response(RestResponse(200, JSON, b"{not json"))

    def test_seal_response(self):
        payload = {"sealed": True, "t": 3, "n": 5, "progress": 1, "version": "1.15.0"}

        response = SealResponse.from_rest_response(_json_response(payload))

        assert response.sealed
        assert response.threshold == 3
        assert response.number_of_shares == 5
        assert response.progress == 1

    def test_wrap_response(self):
        payload = {
            "wrap_info": {
                "token": "hvs.wrapped",
                "accessor": "acc-w",
                "ttl": 60,
                "creation_time": "2024-01-01T00:00:00Z",
                "creation_path": "sys/wrapping/wrap",
            }
        }

        response = WrapResponse.from_rest_response(_json_response(payload))

        assert response.token == "hvs.wrapped"
        assert response.ttl == 60
        assert response.creation_path == "sys/wrapping/wrap"
        assert response.wrapped_accessor is None

    def test_mount_list(self):
        payload = {
            "data": {
                "secret/": {
                    "type": "kv",
                    "description": "key/value secret storage",
                    "options": {"version": "2"},
                    "config": {"default_lease_ttl": 0, "max_lease_ttl": 0, "force_no_cache": False},
                },
                "legacy/": {"type": "kv", "options": None, "config": {}},
                "sys/": {"type": "system", "config": {}},
            }
        }

        response = MountResponse.from_rest_response(_json_response(payload), is_list=True)

        assert set(response.mounts) == {"secret/", "legacy/", "sys/"}
        assert response.mounts["secret/"].engine_version == "2"
        assert response.mounts["legacy/"].engine_version == "1"
        assert response.mounts["secret/"].force_no_cache is False

    def test_mount_read(self):
        payload = {"data": {"default_lease_ttl": 3600, "max_lease_ttl": 7200, "description": "pki"}}

        response = MountResponse.from_rest_response(_json_response(payload), path="pki")

        assert response.mount.path == "pki"
        assert response.mount.default_lease_ttl == 3600
        assert response.mount.max_lease_ttl == 7200

    def test_mount_read_not_found(self):
        response = MountResponse.from_rest_response(
            _json_response({"errors": ["no mount"]}, 404), path="missing"
        )

        assert response.mount is None
        assert response.errors == ["no mount"]


class TestParseJsonObject:
    """Tests for parse_json_object()."""

    def test_invalid_bodies_become_empty(self):
        assert parse_json_object(b"") == {}
        assert parse_json_object(b"not json") == {}
        assert parse_json_object(b"[1, 2]") == {}

    def test_object(self):
        assert parse_json_object(b'{"a": 1}') == {"a": 1}

    def test_base_response_warnings(self):
        response = VaultResponse.from_rest_response(_json_response({"warnings": ["deprecated"]}), 1)

        assert response.warnings == ["deprecated"]
        assert response.retries == 1
