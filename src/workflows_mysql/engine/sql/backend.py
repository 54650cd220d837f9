"""Database backend protocol and data classes for the MySQL node.

This module defines the interface the node expects from a database driver,
along with shared data structures for connection configuration and
statement results. The aiomysql implementation lives in mysql_backend.py;
tests substitute an in-memory fake implementing the same protocol.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

DEFAULT_PORT = 3306
DEFAULT_CONNECT_TIMEOUT_MS = 10000
DEFAULT_POOL_SIZE = 10


@dataclass(frozen=True)
class ConnectionConfig:
    """Resolved connection parameters for one invocation.

    Attributes:
        host: Database server host
        database: Database name
        user: Database user
        password: Database password
        port: Database server port
        ssl: Enable TLS (certificate verification disabled)
        connect_timeout_ms: Connection establishment timeout in milliseconds
        pool_size: Maximum concurrent pooled connections
    """

    host: str
    database: str
    user: str
    password: str = field(repr=False)
    port: int = DEFAULT_PORT
    ssl: bool = False
    connect_timeout_ms: int = DEFAULT_CONNECT_TIMEOUT_MS
    pool_size: int = DEFAULT_POOL_SIZE

    @property
    def connect_timeout(self) -> float:
        """Connect timeout in seconds, as the driver expects it."""
        return self.connect_timeout_ms / 1000

    @property
    def address(self) -> str:
        """host:port/database, for log and status messages."""
        return f"{self.host}:{self.port}/{self.database}"


@dataclass
class FieldInfo:
    """Column metadata for a row-returning statement."""

    name: str
    type: int | None = None
    table: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.type, "table": self.table}


@dataclass
class QueryResult:
    """Result of a single statement.

    Attributes:
        rows: Result rows as list of dicts (row-returning statements)
        fields: Column metadata (row-returning statements)
        returns_rows: Whether the statement produced a result set
        affected_rows: Rows affected (matched) by INSERT/UPDATE/DELETE
        insert_id: Auto-increment id generated by INSERT, or None
        changed_rows: Rows actually changed by UPDATE, or None
        warning_count: Server warnings raised by the statement
        info: Server info string (e.g. "Rows matched: 1  Changed: 1  Warnings: 0")
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    fields: list[FieldInfo] = field(default_factory=list)
    returns_rows: bool = False
    affected_rows: int = 0
    insert_id: int | None = None
    changed_rows: int | None = None
    warning_count: int = 0
    info: str = ""

    @property
    def row_count(self) -> int:
        """Number of rows returned."""
        return len(self.rows)


# Positional parameters, bound in order to ? placeholders
Params = list[Any] | tuple[Any, ...] | None


@runtime_checkable
class DatabaseBackend(Protocol):
    """Protocol defining what the node needs from a database driver.

    A backend is stateful: connect() acquires the underlying resource (a
    pool or a single connection), disconnect() releases it. disconnect()
    must be safe to call more than once and after a failed connect().
    """

    async def connect(self, config: ConnectionConfig) -> None:
        """Create the connection pool or open the connection.

        Raises:
            DriverError: If the driver fails to connect
        """
        ...

    async def disconnect(self) -> None:
        """Close the pool or connection."""
        ...

    async def execute(self, sql: str, params: Params = None) -> QueryResult:
        """Execute a statement with ? placeholders bound to params.

        Raises:
            ValidationError: If the placeholder count does not match params
            DriverError: If the driver rejects the statement
        """
        ...


class DatabaseBackendBase(ABC):
    """Abstract base class for database backends."""

    @abstractmethod
    async def connect(self, config: ConnectionConfig) -> None:
        """Acquire the driver resource."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the driver resource."""

    @abstractmethod
    async def execute(self, sql: str, params: Params = None) -> QueryResult:
        """Execute one statement."""
