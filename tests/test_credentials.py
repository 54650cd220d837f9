"""Tests for credential providers, schema and connection resolution."""

from __future__ import annotations

from typing import Any

import pytest

from workflows_mysql.engine.context import NodeSettings
from workflows_mysql.engine.credentials import (
    EnvVarCredentialProvider,
    MySQLCredentials,
    StaticCredentialProvider,
    load_connection,
    resolve_connection,
)
from workflows_mysql.engine.credentials.provider import CredentialProvider
from workflows_mysql.engine.exceptions import ConfigurationError

# ============================================================================
# Provider Tests
# ============================================================================


class TestStaticCredentialProvider:
    """Tests for in-memory credentials."""

    async def test_returns_copy(self, credentials: dict[str, Any]) -> None:
        """Stored credentials are returned as a copy."""
        provider = StaticCredentialProvider({"mysqlDb": credentials})

        result = await provider.get_credentials("mysqlDb")

        assert result == credentials
        assert result is not credentials

    async def test_unknown_type(self) -> None:
        """An unknown credential type yields None."""
        assert await StaticCredentialProvider().get_credentials("mysqlDb") is None


class TestEnvVarCredentialProvider:
    """Tests for WORKFLOW_CREDENTIAL_* variables."""

    async def test_reads_fields(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Only the variables that are set are returned."""
        monkeypatch.setenv("WORKFLOW_CREDENTIAL_MYSQLDB_HOST", "db.internal")
        monkeypatch.setenv("WORKFLOW_CREDENTIAL_MYSQLDB_PORT", "3307")
        monkeypatch.setenv("WORKFLOW_CREDENTIAL_MYSQLDB_CONNECTIONTIMEOUT", "5000")
        provider = EnvVarCredentialProvider(MySQLCredentials.field_names())

        result = await provider.get_credentials("mysqlDb")

        assert result == {"host": "db.internal", "port": "3307", "connectionTimeout": "5000"}

    async def test_nothing_set(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """No variables set means no credentials."""
        for name in MySQLCredentials.field_names():
            monkeypatch.delenv(f"WORKFLOW_CREDENTIAL_MYSQLDB_{name.upper()}", raising=False)

        provider = EnvVarCredentialProvider(MySQLCredentials.field_names())

        assert await provider.get_credentials("mysqlDb") is None

    async def test_custom_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The variable prefix is configurable."""
        monkeypatch.setenv("APP_MYSQLDB_USER", "svc")

        provider = EnvVarCredentialProvider(["user"], prefix="APP_")

        assert await provider.get_credentials("mysqlDb") == {"user": "svc"}


# ============================================================================
# Schema Tests
# ============================================================================


class TestMySQLCredentials:
    """Tests for the mysqlDb credential schema."""

    def test_defaults(self) -> None:
        """Port, SSL and timeout have defaults."""
        parsed = MySQLCredentials.model_validate({"host": "h"})

        assert parsed.port == 3306
        assert parsed.ssl is False
        assert parsed.connection_timeout is None

    def test_form_strings_coerced(self) -> None:
        """Form strings are coerced to their field types."""
        parsed = MySQLCredentials.model_validate(
            {"port": "3307", "ssl": "true", "connectionTimeout": "2500", "password": "p"}
        )

        assert parsed.port == 3307
        assert parsed.ssl is True
        assert parsed.connection_timeout == 2500

    def test_empty_values_use_defaults(self) -> None:
        """Empty form values fall back to defaults."""
        parsed = MySQLCredentials.model_validate({"port": "", "ssl": None})

        assert parsed.port == 3306
        assert parsed.ssl is False

    def test_password_hidden(self) -> None:
        """The password never appears in repr."""
        parsed = MySQLCredentials.model_validate({"password": "s3cret"})

        assert "s3cret" not in repr(parsed)

    def test_missing_required(self) -> None:
        """Empty required fields are reported in form order."""
        parsed = MySQLCredentials.model_validate({"host": "h", "password": ""})

        assert parsed.missing_required() == ["database", "user", "password"]

    def test_field_names_use_aliases(self) -> None:
        """Field names are the host's camelCase names."""
        assert "connectionTimeout" in MySQLCredentials.field_names()


# ============================================================================
# Resolver Tests
# ============================================================================


class TestResolveConnection:
    """Tests for credentials to ConnectionConfig resolution."""

    def test_resolves(self, credentials: dict[str, Any]) -> None:
        """A complete credential resolves to a ConnectionConfig."""
        config = resolve_connection(credentials)

        assert config.host == "db.test"
        assert config.port == 3306
        assert config.database == "app"
        assert config.user == "app_user"
        assert config.password == "s3cret"
        assert config.connect_timeout_ms == 10000
        assert config.connect_timeout == 10.0
        assert config.pool_size == 10

    def test_accepts_parsed_credentials(self, credentials: dict[str, Any]) -> None:
        """An already validated MySQLCredentials resolves to plain strings."""
        config = resolve_connection(MySQLCredentials.model_validate(credentials))

        assert config.host == "db.test"
        assert config.user == "app_user"
        assert config.password == "s3cret"

    def test_password_not_in_repr(self, credentials: dict[str, Any]) -> None:
        """The resolved config hides the password."""
        assert "s3cret" not in repr(resolve_connection(credentials))

    @pytest.mark.parametrize("credentials", [None, {}])
    def test_absent(self, credentials: Any) -> None:
        """No credential at all is a configuration error."""
        with pytest.raises(ConfigurationError, match="MySQL credentials are required"):
            resolve_connection(credentials)

    @pytest.mark.parametrize("field", ["host", "database", "user", "password"])
    def test_missing_field(self, credentials: dict[str, Any], field: str) -> None:
        """Each missing required field is named in the error."""
        del credentials[field]

        with pytest.raises(ConfigurationError, match=f"missing: {field}"):
            resolve_connection(credentials)

    def test_invalid_port(self, credentials: dict[str, Any]) -> None:
        """A malformed port is a configuration error."""
        credentials["port"] = "not-a-port"

        with pytest.raises(ConfigurationError, match="Invalid MySQL credentials"):
            resolve_connection(credentials)

    def test_timeout_from_credentials(self, credentials: dict[str, Any]) -> None:
        """The credential's connectionTimeout is used."""
        credentials["connectionTimeout"] = 3000

        assert resolve_connection(credentials).connect_timeout_ms == 3000

    def test_settings_timeout_wins(self, credentials: dict[str, Any]) -> None:
        """A node-level timeout overrides the credential's."""
        credentials["connectionTimeout"] = 3000
        settings = NodeSettings(connectionTimeout=7000, pool_size=3)

        config = resolve_connection(credentials, settings)

        assert config.connect_timeout_ms == 7000
        assert config.pool_size == 3

    def test_settings_without_timeout_fall_through(self, credentials: dict[str, Any]) -> None:
        """Settings without a timeout leave the credential's in place."""
        credentials["connectionTimeout"] = 3000

        config = resolve_connection(credentials, NodeSettings())

        assert config.connect_timeout_ms == 3000


class FailingProvider(CredentialProvider):
    async def get_credentials(self, credential_type: str) -> dict[str, Any] | None:
        raise RuntimeError("vault unavailable")


class TestLoadConnection:
    """Tests for provider-backed resolution."""

    async def test_loads(self, credentials: dict[str, Any]) -> None:
        """Credentials are loaded through the provider."""
        config = await load_connection(StaticCredentialProvider({"mysqlDb": credentials}))

        assert config.address == "db.test:3306/app"

    async def test_provider_failure_wrapped(self) -> None:
        """Provider failures become ConfigurationError."""
        with pytest.raises(
            ConfigurationError, match="Failed to get credentials: vault unavailable"
        ):
            await load_connection(FailingProvider())
