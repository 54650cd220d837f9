"""MySQL/MariaDB backend implementation.

This module provides the MySQL backends for the node, using aiomysql for
native async operation.

Backends:
    - MySQLPoolBackend: Connection pool shared by all items of one batch
    - MySQLConnectionBackend: One short-lived connection (table lister,
      credential test)

Features:
    - DictCursor rows, column metadata (name, type code, table)
    - SSL/TLS without certificate verification when enabled
    - Affected rows count matched rows (CLIENT.FOUND_ROWS), changed rows
      parsed from the server info string
    - Driver failures wrapped in DriverError with a stable string code
"""

from __future__ import annotations

import asyncio
import errno
import logging
import re
import socket
import ssl
from typing import Any

import aiomysql
from pymysql.constants import CLIENT, CR, ER
from pymysql.err import MySQLError

from ..exceptions import DriverError
from .backend import ConnectionConfig, DatabaseBackendBase, FieldInfo, Params, QueryResult
from .param_converter import ParamConverter

logger = logging.getLogger(__name__)

# errno -> stable code, e.g. 1045 -> "ER_ACCESS_DENIED_ERROR", 2013 -> "CR_SERVER_LOST"
SERVER_ERROR_CODES: dict[int, str] = {}
for _name, _value in vars(ER).items():
    if _name.isupper() and isinstance(_value, int) and not _name.startswith("ERROR_"):
        SERVER_ERROR_CODES.setdefault(_value, f"ER_{_name}")

CLIENT_ERROR_CODES: dict[int, str] = {}
for _name, _value in vars(CR).items():
    if _name.startswith("CR_") and isinstance(_value, int) and "ERROR_FIRST" not in _name:
        CLIENT_ERROR_CODES.setdefault(_value, _name)

CONNECTION_LOST_ERRNOS = {CR.CR_SERVER_LOST, CR.CR_SERVER_GONE_ERROR}
CHANGED_ROWS_PATTERN = re.compile(r"Changed:\s*(\d+)")


def _cause_code(cause: BaseException | None) -> str | None:
    """Classify the OS-level cause of a failed connect."""
    if isinstance(cause, ConnectionRefusedError):
        return "ECONNREFUSED"
    if isinstance(cause, socket.gaierror):
        return "ENOTFOUND"
    if isinstance(cause, (TimeoutError, asyncio.TimeoutError)):
        return "ETIMEDOUT"
    if isinstance(cause, OSError) and cause.errno == errno.ETIMEDOUT:
        return "ETIMEDOUT"
    return None


def wrap_driver_error(exc: BaseException) -> DriverError:
    """Convert a driver or transport exception into a DriverError.

    Code mapping:
        - Server errors (1000-1999, 3000+): ER_<NAME> from pymysql.constants.ER
        - CR_SERVER_LOST / CR_SERVER_GONE_ERROR: PROTOCOL_CONNECTION_LOST
        - CR_CONN_HOST_ERROR: ECONNREFUSED, ENOTFOUND or ETIMEDOUT from the
          exception's cause, else CR_CONN_HOST_ERROR
        - Other client errors: CR_<NAME>
        - Bare OS errors and timeouts: classified the same way as connect causes

    Args:
        exc: Exception raised by aiomysql/PyMySQL or the event loop

    Returns:
        DriverError for the caller to raise ``from exc``
    """
    if isinstance(exc, DriverError):
        return exc

    if isinstance(exc, MySQLError):
        args = exc.args
        errnum = args[0] if args and isinstance(args[0], int) else None
        message = str(args[1]) if len(args) > 1 else str(exc)
        code: str | None = None

        if errnum in CONNECTION_LOST_ERRNOS:
            code = "PROTOCOL_CONNECTION_LOST"
        elif errnum == CR.CR_CONN_HOST_ERROR:
            code = _cause_code(exc.__cause__) or CLIENT_ERROR_CODES.get(errnum)
            if exc.__cause__ is not None:
                message = f"{message}: {exc.__cause__}"
        elif errnum is not None:
            code = SERVER_ERROR_CODES.get(errnum) or CLIENT_ERROR_CODES.get(errnum)

        return DriverError(message or type(exc).__name__, code=code, errno=errnum)

    code = _cause_code(exc)
    return DriverError(str(exc) or type(exc).__name__, code=code)


def _ssl_context(enabled: bool) -> ssl.SSLContext | None:
    """TLS context without certificate verification, or None."""
    if not enabled:
        return None
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def connection_kwargs(config: ConnectionConfig) -> dict[str, Any]:
    """aiomysql connect() arguments for a connection config."""
    return {
        "host": config.host,
        "port": config.port,
        "user": config.user,
        "password": config.password,
        "db": config.database,
        "ssl": _ssl_context(config.ssl),
        "connect_timeout": config.connect_timeout,
        "charset": "utf8mb4",
        "autocommit": True,
        "client_flag": CLIENT.FOUND_ROWS,
    }


async def _run_statement(conn: aiomysql.Connection, sql: str, params: Params) -> QueryResult:
    """Execute one statement on an open connection and shape the result."""
    converted_sql, converted_params = ParamConverter().convert(sql, params)

    async with conn.cursor(aiomysql.DictCursor) as cursor:
        await cursor.execute(converted_sql, converted_params)

        # aiomysql exposes field packets and the server info string only on the raw result
        raw = getattr(cursor, "_result", None)
        warning_count = getattr(raw, "warning_count", 0) or 0

        if cursor.description is not None:
            rows = list(await cursor.fetchall())
            raw_fields = getattr(raw, "fields", None) or []
            if raw_fields:
                fields = [
                    FieldInfo(
                        name=f.name,
                        type=f.type_code,
                        table=getattr(f, "table_name", None) or None,
                    )
                    for f in raw_fields
                ]
            else:
                fields = [FieldInfo(name=desc[0], type=desc[1]) for desc in cursor.description]

            return QueryResult(
                rows=rows,
                fields=fields,
                returns_rows=True,
                warning_count=warning_count,
            )

        info = getattr(raw, "message", b"") or b""
        if isinstance(info, bytes):
            info = info.decode("utf-8", errors="replace")
        match = CHANGED_ROWS_PATTERN.search(info)

        return QueryResult(
            returns_rows=False,
            affected_rows=max(cursor.rowcount, 0),
            insert_id=cursor.lastrowid,
            changed_rows=int(match.group(1)) if match else 0,
            warning_count=warning_count,
            info=info,
        )


class MySQLPoolBackend(DatabaseBackendBase):
    """MySQL backend using an aiomysql connection pool.

    The pool opens connections lazily (minsize=0), so an unreachable server
    surfaces as a per-statement DriverError rather than at pool creation.
    Callers waiting for a connection queue without limit.

    Example:
        backend = MySQLPoolBackend()
        await backend.connect(config)
        try:
            result = await backend.execute("SELECT * FROM users WHERE id = ?", ["42"])
        finally:
            await backend.disconnect()
    """

    def __init__(self) -> None:
        """Initialize pool backend."""
        self._pool: aiomysql.Pool | None = None

    async def connect(self, config: ConnectionConfig) -> None:
        """Create connection pool.

        Pool settings:
            - minsize: 0 (connect on first use)
            - maxsize: config.pool_size
            - connect_timeout: config.connect_timeout_ms / 1000

        Raises:
            DriverError: If pool creation fails
        """
        try:
            self._pool = await aiomysql.create_pool(
                minsize=0,
                maxsize=config.pool_size,
                **connection_kwargs(config),
            )
        except Exception as e:
            raise wrap_driver_error(e) from e

        logger.debug(f"Created MySQL pool for {config.address} (maxsize={config.pool_size})")

    async def disconnect(self) -> None:
        """Close connection pool, waiting for connections to be released."""
        if self._pool is None:
            return

        pool, self._pool = self._pool, None
        pool.close()
        await pool.wait_closed()
        logger.debug("Closed MySQL pool")

    async def execute(self, sql: str, params: Params = None) -> QueryResult:
        """Execute a statement on a pooled connection.

        Raises:
            ValidationError: Placeholder/parameter count mismatch
            DriverError: Driver failure (including failure to connect)
        """
        if self._pool is None:
            raise RuntimeError("Not connected to database. Call connect() first.")

        try:
            async with self._pool.acquire() as conn:
                return await _run_statement(conn, sql, params)
        except (MySQLError, OSError, asyncio.TimeoutError) as e:
            raise wrap_driver_error(e) from e


class MySQLConnectionBackend(DatabaseBackendBase):
    """MySQL backend holding a single aiomysql connection."""

    def __init__(self) -> None:
        self._conn: aiomysql.Connection | None = None

    async def connect(self, config: ConnectionConfig) -> None:
        """Open the connection.

        Raises:
            DriverError: If the connection cannot be established
        """
        try:
            self._conn = await aiomysql.connect(**connection_kwargs(config))
        except Exception as e:
            raise wrap_driver_error(e) from e

        logger.debug(f"Connected to MySQL: {config.address}")

    async def disconnect(self) -> None:
        """Close the connection. Safe to call when never connected."""
        if self._conn is None:
            return

        conn, self._conn = self._conn, None
        conn.close()
        logger.debug("Disconnected from MySQL")

    async def execute(self, sql: str, params: Params = None) -> QueryResult:
        """Execute a statement on the connection.

        Raises:
            ValidationError: Placeholder/parameter count mismatch
            DriverError: Driver failure
        """
        if self._conn is None:
            raise RuntimeError("Not connected to database. Call connect() first.")

        try:
            return await _run_statement(self._conn, sql, params)
        except (MySQLError, OSError, asyncio.TimeoutError) as e:
            raise wrap_driver_error(e) from e
