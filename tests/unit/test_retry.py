"""Tests for vaultkit.retry - the fixed-interval retry loop."""

from __future__ import annotations

import pytest

from vaultkit.errors import ConfigurationError, VaultError
from vaultkit.rest import RestException
from vaultkit.retry import retry


class TestRetry:
    """Tests for retry()."""

    def test_first_success_does_not_sleep(self):
        sleeps = []
        result = retry(lambda attempt: f"ok-{attempt}", 3, 100, sleep=sleeps.append)

        assert result == "ok-0"
        assert sleeps == []

    def test_succeeds_after_failures(self):
        """The successful attempt sees how many retries were used."""
        sleeps = []

        def operation(attempt):
            if attempt < 2:
                raise RestException("connection refused")
            return attempt

        assert retry(operation, 5, 250, sleep=sleeps.append) == 2
        assert sleeps == [0.25, 0.25]

    def test_attempts_max_retries_plus_one_times(self):
        attempts = []
        sleeps = []

        def operation(attempt):
            attempts.append(attempt)
            raise RestException("boom")

        with pytest.raises(VaultError):
            retry(operation, 3, 100, sleep=sleeps.append)

        assert attempts == [0, 1, 2, 3]
        assert sleeps == [0.1, 0.1, 0.1]

    def test_wraps_non_vault_errors_keeping_the_cause(self):
        cause = RestException("connection refused")

        def operation(attempt):
            raise cause

        with pytest.raises(VaultError) as exc_info:
            retry(operation, 0, 100, sleep=lambda _: None)

        assert exc_info.value.__cause__ is cause
        assert exc_info.value.http_status_code == 0
        assert "connection refused" in str(exc_info.value)

    def test_vault_errors_are_raised_unchanged(self):
        error = VaultError("Vault responded with HTTP status code: 500", 500)

        def operation(attempt):
            raise error

        with pytest.raises(VaultError) as exc_info:
            retry(operation, 1, 0, sleep=lambda _: None)

        assert exc_info.value is error
        assert exc_info.value.http_status_code == 500

    def test_status_errors_are_retried(self):
        """Errors carrying an HTTP status go through the full budget too."""
        attempts = []

        def operation(attempt):
            attempts.append(attempt)
            raise VaultError("bad request", 400)

        with pytest.raises(VaultError):
            retry(operation, 2, 0, sleep=lambda _: None)

        assert len(attempts) == 3

    def test_configuration_errors_are_not_retried(self):
        attempts = []
        sleeps = []

        def operation(attempt):
            attempts.append(attempt)
            raise ConfigurationError("versions must be 1 or greater")

        with pytest.raises(ConfigurationError):
            retry(operation, 5, 100, sleep=sleeps.append)

        assert attempts == [0]
        assert sleeps == []

    def test_zero_retries_makes_one_attempt(self):
        attempts = []

        def operation(attempt):
            attempts.append(attempt)
            raise RestException("down")

        with pytest.raises(VaultError):
            retry(operation, 0, 100, sleep=lambda _: None)

        assert attempts == [0]
