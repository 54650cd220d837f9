"""Credential provider abstraction and implementations.

The host injects credentials into the node through a CredentialProvider.
Credentials are looked up by credential type (e.g. "mysqlDb") and returned
as a plain mapping of credential fields, or None when nothing is configured.

Providers:
    - CredentialProvider: Abstract base class defining the provider interface
    - StaticCredentialProvider: In-memory credentials supplied by the host
    - EnvVarCredentialProvider: Credentials from WORKFLOW_CREDENTIAL_* variables

Example:
    >>> provider = StaticCredentialProvider({"mysqlDb": {"host": "localhost", ...}})
    >>> credentials = await provider.get_credentials("mysqlDb")
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any


class CredentialProvider(ABC):
    """Abstract base class for credential providers.

    All methods are async to support both local and remote credential stores.
    """

    @abstractmethod
    async def get_credentials(self, credential_type: str) -> dict[str, Any] | None:
        """Retrieve credentials of the given type.

        Args:
            credential_type: Credential type name (e.g. "mysqlDb")

        Returns:
            Credential fields, or None if no credentials are configured

        Raises:
            Exception: Provider-specific retrieval failures
        """
        pass


class StaticCredentialProvider(CredentialProvider):
    """Credential provider backed by an in-memory mapping.

    Used by hosts that resolve credentials themselves before invoking the
    node, and in tests.

    Example:
        >>> provider = StaticCredentialProvider({
        ...     "mysqlDb": {"host": "db", "database": "app", "user": "u", "password": "p"}
        ... })
    """

    def __init__(self, credentials: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._credentials = {key: dict(value) for key, value in (credentials or {}).items()}

    async def get_credentials(self, credential_type: str) -> dict[str, Any] | None:
        credentials = self._credentials.get(credential_type)
        return dict(credentials) if credentials is not None else None


class EnvVarCredentialProvider(CredentialProvider):
    """Credential provider that reads from environment variables.

    Environment Variable Format:
        WORKFLOW_CREDENTIAL_{TYPE_UPPER}_{FIELD_UPPER} = value

    Examples:
        WORKFLOW_CREDENTIAL_MYSQLDB_HOST=db.internal
        WORKFLOW_CREDENTIAL_MYSQLDB_PORT=3306
        WORKFLOW_CREDENTIAL_MYSQLDB_PASSWORD=secret
        WORKFLOW_CREDENTIAL_MYSQLDB_CONNECTIONTIMEOUT=5000

    Field names are matched case-insensitively against the credential schema
    field names passed in ``fields``; values are returned as strings and
    coerced by the credential schema.

    Attributes:
        prefix: Environment variable prefix (default: "WORKFLOW_CREDENTIAL_")
    """

    def __init__(
        self,
        fields: list[str],
        prefix: str = "WORKFLOW_CREDENTIAL_",
    ) -> None:
        """Initialize the environment variable credential provider.

        Args:
            fields: Credential field names to look up (e.g. ["host", "port"])
            prefix: Environment variable prefix for credentials
        """
        self.fields = fields
        self.prefix = prefix

    def _get_env_var_name(self, credential_type: str, field_name: str) -> str:
        """Build the variable name (e.g. WORKFLOW_CREDENTIAL_MYSQLDB_HOST)."""
        return f"{self.prefix}{credential_type.upper()}_{field_name.upper()}"

    async def get_credentials(self, credential_type: str) -> dict[str, Any] | None:
        credentials = {}
        for field_name in self.fields:
            value = os.environ.get(self._get_env_var_name(credential_type, field_name))
            if value is not None:
                credentials[field_name] = value

        return credentials or None
