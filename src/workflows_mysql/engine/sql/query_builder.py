"""Query builder for the MySQL node's table operations.

This module generates parameterized SQL statements for select, insert,
update and delete from the node's declarative fields. Table and column
identifiers are backtick-quoted; values are always bound as ? parameters.

WHERE and ORDER BY are caller-supplied SQL fragments and are inserted
verbatim, the same way executeQuery runs caller-supplied SQL.

Example:
    builder = QueryBuilder("users")

    sql, params = builder.insert({"name": "Alice", "age": 30})
    # -> INSERT INTO `users` (`name`, `age`) VALUES (?, ?)
    # -> ["Alice", 30]

    sql, params = builder.select(where="status = ?", where_params=["active"], limit=10)
    # -> SELECT * FROM `users` WHERE status = ? LIMIT 10
    # -> ["active"]
"""

from __future__ import annotations

import json
import re
from typing import Any

from ..exceptions import ValidationError

# A bare identifier part: letters, digits, _, $ and non-ASCII (MySQL unquoted identifier rules)
IDENTIFIER_PART = re.compile(r"[A-Za-z0-9_$\u0080-\uffff]+")


def quote_identifier(name: str) -> str:
    """Quote a single identifier with backticks, doubling embedded backticks.

    Args:
        name: Table or column name

    Returns:
        Quoted identifier (e.g. users -> `users`, a`b -> `a``b`)

    Raises:
        ValidationError: If the name is empty
    """
    if not name:
        raise ValidationError("Identifier cannot be empty")
    return "`" + name.replace("`", "``") + "`"


def quote_column_list(columns: str) -> str:
    """Quote a comma-separated column list.

    Each entry is trimmed and may be *, a column name, or a dotted
    table.column / table.* reference. Empty input means *.

    Args:
        columns: Column list as entered by the user (e.g. "id, name, t.email")

    Returns:
        Quoted column list (e.g. "`id`, `name`, `t`.`email`")

    Raises:
        ValidationError: If an entry is not a plain (optionally dotted) identifier
    """
    if not columns.strip():
        return "*"

    quoted = []
    for entry in columns.split(","):
        column = entry.strip()
        if column == "*":
            quoted.append("*")
            continue

        *qualifiers, name = column.split(".")
        valid_name = name == "*" and qualifiers or IDENTIFIER_PART.fullmatch(name)
        if not valid_name or not all(IDENTIFIER_PART.fullmatch(part) for part in qualifiers):
            raise ValidationError(f"Invalid column reference: {column!r}")

        parts = [quote_identifier(part) for part in qualifiers]
        parts.append(name if name == "*" else quote_identifier(name))
        quoted.append(".".join(parts))

    return ", ".join(quoted)


def serialize_value(value: Any) -> Any:
    """Serialize a data value for binding.

    The driver cannot bind dicts or lists, so nested JSON values are bound
    as JSON text (suitable for JSON columns).
    """
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return value


class QueryBuilder:
    """Builds parameterized SQL statements for one table.

    Attributes:
        table: Unquoted table name
    """

    def __init__(self, table: str):
        """Initialize query builder.

        Args:
            table: Table name (quoted as a single identifier)

        Raises:
            ValidationError: If the table name is empty
        """
        self.table = table
        self._quoted_table = quote_identifier(table)

    def select(
        self,
        columns: str = "*",
        where: str | None = None,
        where_params: list[Any] | None = None,
        order_by: str | None = None,
        limit: int | None = None,
    ) -> tuple[str, list[Any]]:
        """Generate SELECT statement.

        Args:
            columns: Comma-separated column list or *
            where: WHERE clause without the WHERE keyword (optional)
            where_params: Parameters for the WHERE clause placeholders
            order_by: ORDER BY clause without the keywords (optional)
            limit: Maximum rows to return; None for all rows

        Returns:
            Tuple of (SQL statement, parameter list)
        """
        sql = f"SELECT {quote_column_list(columns)} FROM {self._quoted_table}"
        params: list[Any] = []

        if where:
            sql += f" WHERE {where}"
            params.extend(where_params or [])

        if order_by:
            sql += f" ORDER BY {order_by}"

        if limit is not None:
            sql += f" LIMIT {int(limit)}"

        return sql, params

    def insert(self, data: dict[str, Any]) -> tuple[str, list[Any]]:
        """Generate INSERT statement.

        Column order follows the key order of data.

        Args:
            data: Row data to insert

        Returns:
            Tuple of (SQL statement, parameter list)
        """
        col_list = ", ".join(quote_identifier(col) for col in data)
        val_list = ", ".join("?" for _ in data)
        params = [serialize_value(value) for value in data.values()]

        sql = f"INSERT INTO {self._quoted_table} ({col_list}) VALUES ({val_list})"
        return sql, params

    def update(
        self, data: dict[str, Any], where: str, where_params: list[Any] | None = None
    ) -> tuple[str, list[Any]]:
        """Generate UPDATE statement.

        SET parameters come first, followed by the WHERE parameters.

        Args:
            data: Column values to update
            where: WHERE clause without the WHERE keyword (required)
            where_params: Parameters for the WHERE clause placeholders

        Returns:
            Tuple of (SQL statement, parameter list)

        Raises:
            ValidationError: If where or data is empty
        """
        if not where:
            raise ValidationError(
                "WHERE clause is required for UPDATE operation to prevent accidental updates"
            )
        if not data:
            raise ValidationError("UPDATE requires at least one column in data")

        set_sql = ", ".join(f"{quote_identifier(col)} = ?" for col in data)
        params = [serialize_value(value) for value in data.values()]
        params.extend(where_params or [])

        sql = f"UPDATE {self._quoted_table} SET {set_sql} WHERE {where}"
        return sql, params

    def delete(self, where: str, where_params: list[Any] | None = None) -> tuple[str, list[Any]]:
        """Generate DELETE statement.

        Args:
            where: WHERE clause without the WHERE keyword (required)
            where_params: Parameters for the WHERE clause placeholders

        Returns:
            Tuple of (SQL statement, parameter list)

        Raises:
            ValidationError: If where is empty
        """
        if not where:
            raise ValidationError(
                "WHERE clause is required for DELETE operation to prevent accidental deletion"
            )

        sql = f"DELETE FROM {self._quoted_table} WHERE {where}"
        return sql, list(where_params or [])

    def fetch_by_id(self, return_fields: str, insert_id: Any) -> tuple[str, list[Any]]:
        """Generate the read-back SELECT for an inserted row."""
        sql = f"SELECT {quote_column_list(return_fields)} FROM {self._quoted_table} WHERE id = ?"
        return sql, [insert_id]

    def fetch_where(
        self, return_fields: str, where: str, where_params: list[Any] | None = None
    ) -> tuple[str, list[Any]]:
        """Generate the read-back SELECT for updated rows."""
        sql = f"SELECT {quote_column_list(return_fields)} FROM {self._quoted_table} WHERE {where}"
        return sql, list(where_params or [])
