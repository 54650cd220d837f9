"""SQL layer for the MySQL node.

This module provides the driver interface, statement construction and the
aiomysql-backed implementation used by the node.

Features:
    - Backend protocol so tests and hosts can substitute a driver
    - ? placeholders converted to the driver's paramstyle
    - Backtick-quoted identifiers, values always bound as parameters
    - Pooled and single-connection backends

Usage:
    from workflows_mysql.engine.sql import (
        ConnectionConfig,
        MySQLPoolBackend,
        QueryBuilder,
    )

    backend = MySQLPoolBackend()
    await backend.connect(ConnectionConfig(
        host="localhost",
        database="mydb",
        user="user",
        password="pass",
    ))
    sql, params = QueryBuilder("users").select(where="id = ?", where_params=["42"])
    result = await backend.execute(sql, params)
    await backend.disconnect()
"""

from .backend import (
    DEFAULT_CONNECT_TIMEOUT_MS,
    DEFAULT_POOL_SIZE,
    DEFAULT_PORT,
    ConnectionConfig,
    DatabaseBackend,
    DatabaseBackendBase,
    FieldInfo,
    Params,
    QueryResult,
)
from .mysql_backend import MySQLConnectionBackend, MySQLPoolBackend, wrap_driver_error
from .param_converter import ParamConverter, convert_sql
from .query_builder import QueryBuilder, quote_column_list, quote_identifier

__all__ = [
    # Core types
    "DEFAULT_CONNECT_TIMEOUT_MS",
    "DEFAULT_POOL_SIZE",
    "DEFAULT_PORT",
    "ConnectionConfig",
    "DatabaseBackend",
    "DatabaseBackendBase",
    "FieldInfo",
    "Params",
    "QueryResult",
    # Statement construction
    "ParamConverter",
    "convert_sql",
    "QueryBuilder",
    "quote_column_list",
    "quote_identifier",
    # Backends
    "MySQLPoolBackend",
    "MySQLConnectionBackend",
    "wrap_driver_error",
]
