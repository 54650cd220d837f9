"""Credential handling for the MySQL node.

Core Components:
    - CredentialProvider: Abstract base class for credential sources
    - StaticCredentialProvider: In-memory credentials injected by the host
    - EnvVarCredentialProvider: Environment variable-based credentials
    - MySQLCredentials: The mysqlDb credential schema
    - resolve_connection / load_connection: Credentials to ConnectionConfig

Example:
    >>> provider = StaticCredentialProvider({"mysqlDb": {...}})
    >>> config = await load_connection(provider, settings)
"""

from .provider import CredentialProvider, EnvVarCredentialProvider, StaticCredentialProvider
from .resolver import load_connection, resolve_connection
from .schema import CREDENTIAL_TYPE, MySQLCredentials

__all__ = [
    # Providers
    "CredentialProvider",
    "StaticCredentialProvider",
    "EnvVarCredentialProvider",
    # Schema
    "CREDENTIAL_TYPE",
    "MySQLCredentials",
    # Resolution
    "resolve_connection",
    "load_connection",
]
