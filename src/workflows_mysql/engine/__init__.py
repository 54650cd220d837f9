"""MySQL workflow node core components.

Key Components:

- MySQLExecutor: Runs executeQuery/select/insert/update/delete over a batch
- NodeContext: Host contract (credentials, parameters, settings, logger)
- NodeSettings: Continue-on-fail, timeout override, pool size
- OperationRequest: Tagged union of per-operation parameter models
- list_tables: Table dropdown loader
- test_credentials: Credential test with classified failure messages
- NodeRegistry / create_default_registry: Executor lookup for hosts

Architecture:
- Executors are stateless; everything per-invocation lives in NodeContext
- Requests are validated per item before any statement is sent
- One connection pool per batch, always closed
- Exceptions for control flow (MySQLNodeError hierarchy)
"""

from .context import DictParameterProvider, Item, NodeContext, NodeSettings, ParameterProvider
from .credential_tester import CredentialTestResult, classify_connection_error, test_credentials
from .credentials import (
    CredentialProvider,
    EnvVarCredentialProvider,
    MySQLCredentials,
    StaticCredentialProvider,
    load_connection,
    resolve_connection,
)
from .exceptions import ConfigurationError, DriverError, MySQLNodeError, ValidationError
from .executor_base import (
    ExecutorCapabilities,
    ExecutorSecurityLevel,
    NodeExecutor,
    NodeRegistry,
    create_default_registry,
)
from .executors_mysql import MySQLExecutor
from .load_options import list_tables
from .operations import Operation, OperationRequest, build_request

__all__ = [
    # Executor
    "MySQLExecutor",
    "NodeExecutor",
    "NodeRegistry",
    "ExecutorCapabilities",
    "ExecutorSecurityLevel",
    "create_default_registry",
    # Host contract
    "Item",
    "NodeContext",
    "NodeSettings",
    "ParameterProvider",
    "DictParameterProvider",
    # Operations
    "Operation",
    "OperationRequest",
    "build_request",
    # Credentials
    "CredentialProvider",
    "StaticCredentialProvider",
    "EnvVarCredentialProvider",
    "MySQLCredentials",
    "resolve_connection",
    "load_connection",
    # Helpers
    "list_tables",
    "test_credentials",
    "classify_connection_error",
    "CredentialTestResult",
    # Exceptions
    "MySQLNodeError",
    "ConfigurationError",
    "ValidationError",
    "DriverError",
]
