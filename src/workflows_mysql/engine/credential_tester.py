"""Credential test for the mysqlDb credential type.

The host calls test_credentials() when a user saves or checks MySQL
credentials. The test opens one connection, runs a liveness query and
reports the server version, or a human-readable reason for the failure.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel

from .credentials import resolve_connection
from .exceptions import ConfigurationError
from .sql import DEFAULT_PORT, DatabaseBackend, MySQLConnectionBackend

logger = logging.getLogger(__name__)

LIVENESS_QUERY = "SELECT NOW() AS `current_time`, VERSION() AS version"

REQUIRED_FIELDS = ("host", "database", "user", "password")


class CredentialTestResult(BaseModel):
    """Outcome of a credential test."""

    success: bool
    message: str


def classify_connection_error(
    code: str | None,
    message: str,
    host: str,
    port: int = DEFAULT_PORT,
    database: str = "",
) -> str:
    """Map a driver error code to a message for the credential form.

    Args:
        code: Stable driver code (e.g. "ER_ACCESS_DENIED_ERROR"), or None
        message: Driver error message, used for unclassified codes
        host: Server host the test connected to
        port: Server port
        database: Database name

    Returns:
        Human-readable failure message

    Example:
        >>> classify_connection_error("ER_BAD_DB_ERROR", "Unknown database", "db", database="app")
        'Database "app" does not exist.'
    """
    if code == "ECONNREFUSED":
        return f"Cannot connect to database server at {host}:{port}. Connection refused."
    elif code == "ENOTFOUND":
        return f"Cannot resolve host: {host}. Please check the hostname."
    elif code == "ETIMEDOUT":
        return (
            f"Connection timeout to {host}:{port}. "
            "Please check firewall and network settings."
        )
    elif code == "ER_ACCESS_DENIED_ERROR":
        return "Authentication failed. Invalid username or password."
    elif code == "ER_BAD_DB_ERROR":
        return f'Database "{database}" does not exist.'
    elif code == "ER_DBACCESS_DENIED_ERROR":
        return "Authorization failed. User does not have access to this database."
    elif code == "PROTOCOL_CONNECTION_LOST":
        return "Connection lost to MySQL server. Please check server status."
    elif code == "ER_CON_COUNT_ERROR":
        return "Too many connections to MySQL server. Try again later."
    elif code == "ER_HOST_IS_BLOCKED":
        return (
            "Host is blocked due to many connection errors. "
            "Contact your database administrator."
        )
    return f"Connection failed: {message}"


async def test_credentials(
    data: Mapping[str, Any],
    backend_factory: Callable[[], DatabaseBackend] | None = None,
) -> CredentialTestResult:
    """Test MySQL credentials by connecting and running a liveness query.

    The connection uses the credential's connectionTimeout (default 10000
    ms) and is released on every path, including when the liveness query
    fails after connecting.

    Args:
        data: Credential form fields (host, port, database, user, password,
            ssl, connectionTimeout)
        backend_factory: Callable returning an unconnected backend
            (default: MySQLConnectionBackend)

    Returns:
        CredentialTestResult with success flag and message
    """
    if any(not data.get(name) for name in REQUIRED_FIELDS):
        return CredentialTestResult(
            success=False, message="Host, database, user, and password are required"
        )

    try:
        config = resolve_connection(data)
    except ConfigurationError as e:
        return CredentialTestResult(success=False, message=e.message)

    backend = (backend_factory or MySQLConnectionBackend)()
    try:
        await backend.connect(config)
        result = await backend.execute(LIVENESS_QUERY)
    except Exception as e:
        logger.debug(f"Credential test failed for {config.address}: {e!r}")
        return CredentialTestResult(
            success=False,
            message=classify_connection_error(
                getattr(e, "code", None),
                getattr(e, "message", str(e)),
                host=config.host,
                port=config.port,
                database=config.database,
            ),
        )
    finally:
        try:
            await backend.disconnect()
        except Exception:
            logger.warning("Failed to close MySQL connection", exc_info=True)

    if result.rows:
        version = result.rows[0].get("version")
        return CredentialTestResult(
            success=True,
            message=f"Connected successfully to MySQL {version} at {config.address}",
        )

    return CredentialTestResult(success=True, message="Connection successful")


# Keep pytest from collecting this as a test when imported into test modules
test_credentials.__test__ = False  # type: ignore[attr-defined]


__all__ = [
    "CredentialTestResult",
    "LIVENESS_QUERY",
    "classify_connection_error",
    "test_credentials",
]
