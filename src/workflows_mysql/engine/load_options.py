"""Dropdown option loaders for the MySQL node.

Load options populate the host's parameter form. They never raise: when
credentials are missing or the database cannot be queried they return a
single synthetic entry describing the problem, which the form shows in
place of real options.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .context import NodeContext
from .credentials import resolve_connection
from .credentials.schema import CREDENTIAL_TYPE
from .exceptions import ConfigurationError
from .sql import DatabaseBackend, MySQLConnectionBackend

logger = logging.getLogger(__name__)

TABLES_QUERY = (
    "SELECT table_name FROM information_schema.tables "
    "WHERE table_schema = ? AND table_type = 'BASE TABLE' "
    "ORDER BY table_name"
)


def _option(name: str, description: str, value: str = "") -> dict[str, Any]:
    return {"name": name, "value": value, "description": description}


async def list_tables(
    context: NodeContext,
    backend_factory: Callable[[], DatabaseBackend] | None = None,
) -> list[dict[str, Any]]:
    """List the base tables of the configured database.

    Opens one short-lived connection (not a pool), which is closed on every
    path.

    Args:
        context: Host context (credentials and settings are used)
        backend_factory: Callable returning an unconnected backend
            (default: MySQLConnectionBackend)

    Returns:
        Options as {name, value, description}, ordered by table name, or a
        single synthetic entry on failure

    Example:
        >>> await list_tables(context)
        [{'name': 'orders', 'value': 'orders', 'description': 'Table: orders'}, ...]
    """
    try:
        credentials = await context.credentials.get_credentials(CREDENTIAL_TYPE)
        if not credentials or not credentials.get("host"):
            return [
                _option("No credentials selected", "Please select MySQL credentials first")
            ]
        config = resolve_connection(credentials, context.settings)
    except Exception as e:
        message = e.message if isinstance(e, ConfigurationError) else str(e)
        return [_option("Error: Credentials required", message)]

    backend = (backend_factory or MySQLConnectionBackend)()
    try:
        await backend.connect(config)
        result = await backend.execute(TABLES_QUERY, [config.database])
    except Exception as e:
        context.logger.error(f"Failed to load tables: {e}")
        return [_option("Error loading tables - check credentials", str(e))]
    finally:
        try:
            await backend.disconnect()
        except Exception:
            context.logger.warning("Failed to close MySQL connection", exc_info=True)

    options = []
    for row in result.rows:
        # MySQL 8 reports information_schema columns in upper case
        table = row.get("table_name") or row.get("TABLE_NAME")
        options.append(_option(table, f"Table: {table}", value=table))

    logger.debug(f"Loaded {len(options)} tables from {config.address}")
    return options


__all__ = ["TABLES_QUERY", "list_tables"]
