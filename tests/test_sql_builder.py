"""Tests for statement construction and placeholder conversion."""

from __future__ import annotations

import pytest

from workflows_mysql.engine.exceptions import ValidationError
from workflows_mysql.engine.sql import (
    ParamConverter,
    QueryBuilder,
    convert_sql,
    quote_column_list,
    quote_identifier,
)

# ============================================================================
# Identifier Quoting Tests
# ============================================================================


class TestQuoting:
    """Tests for identifier and column list quoting."""

    def test_quote_identifier(self) -> None:
        """Identifiers are wrapped in backticks."""
        assert quote_identifier("users") == "`users`"

    def test_embedded_backtick_is_doubled(self) -> None:
        """Embedded backticks are doubled."""
        assert quote_identifier("we`ird") == "`we``ird`"

    def test_empty_identifier_rejected(self) -> None:
        """Empty identifiers are rejected."""
        with pytest.raises(ValidationError, match="empty"):
            quote_identifier("")

    def test_star_and_empty_list(self) -> None:
        """Star and blank column lists select everything."""
        assert quote_column_list("*") == "*"
        assert quote_column_list("  ") == "*"

    def test_column_list(self) -> None:
        """Column names are trimmed and quoted."""
        assert quote_column_list("id, name ,email") == "`id`, `name`, `email`"

    def test_dotted_references(self) -> None:
        """Dotted references quote each part."""
        assert quote_column_list("u.id, o.*") == "`u`.`id`, `o`.*"

    @pytest.mark.parametrize(
        "columns",
        ["id; DROP TABLE users", "COUNT(*)", "name AS n", "a,,b", "*.id"],
    )
    def test_invalid_columns_rejected(self, columns: str) -> None:
        """Expressions are rejected in column lists."""
        with pytest.raises(ValidationError, match="Invalid column reference"):
            quote_column_list(columns)


# ============================================================================
# QueryBuilder Tests
# ============================================================================


class TestQueryBuilder:
    """Tests for per-operation statement construction."""

    def test_select_all(self) -> None:
        """A bare select reads every column."""
        assert QueryBuilder("users").select() == ("SELECT * FROM `users`", [])

    def test_select_limit(self) -> None:
        """A limit is rendered literally."""
        sql, params = QueryBuilder("users").select(limit=50)
        assert sql == "SELECT * FROM `users` LIMIT 50"
        assert params == []

    def test_where_params_ignored_without_where(self) -> None:
        """whereParams without a WHERE clause are dropped."""
        sql, params = QueryBuilder("users").select(where="", where_params=["1"])
        assert sql == "SELECT * FROM `users`"
        assert params == []

    def test_insert_column_order(self) -> None:
        """Insert columns follow the data's key order."""
        sql, params = QueryBuilder("t").insert({"a": 1, "b": 2})
        assert sql == "INSERT INTO `t` (`a`, `b`) VALUES (?, ?)"
        assert params == [1, 2]

    def test_insert_serializes_nested_values(self) -> None:
        """Nested insert values are serialized as JSON."""
        _, params = QueryBuilder("t").insert({"meta": {"k": "v"}})
        assert params == ['{"k": "v"}']

    def test_update_param_order(self) -> None:
        """SET values come before WHERE values."""
        sql, params = QueryBuilder("t").update({"a": 1, "b": "x"}, "id = ?", ["9"])
        assert sql == "UPDATE `t` SET `a` = ?, `b` = ? WHERE id = ?"
        assert params == [1, "x", "9"]

    def test_update_requires_where(self) -> None:
        """update refuses to build without WHERE."""
        with pytest.raises(ValidationError, match="WHERE clause is required for UPDATE"):
            QueryBuilder("t").update({"a": 1}, "")

    def test_update_requires_data(self) -> None:
        """update refuses to build without data."""
        with pytest.raises(ValidationError, match="at least one column"):
            QueryBuilder("t").update({}, "id = 1")

    def test_delete(self) -> None:
        """delete builds with its WHERE parameters."""
        assert QueryBuilder("t").delete("id = ?", ["4"]) == ("DELETE FROM `t` WHERE id = ?", ["4"])

    def test_delete_requires_where(self) -> None:
        """delete refuses to build without WHERE."""
        with pytest.raises(ValidationError, match="WHERE clause is required for DELETE"):
            QueryBuilder("t").delete("")

    def test_fetch_statements(self) -> None:
        """Read-back statements select by id or by WHERE."""
        builder = QueryBuilder("t")
        assert builder.fetch_by_id("id, name", 3) == (
            "SELECT `id`, `name` FROM `t` WHERE id = ?",
            [3],
        )
        assert builder.fetch_where("*", "a = ?", ["x"]) == ("SELECT * FROM `t` WHERE a = ?", ["x"])

    def test_quoted_table(self) -> None:
        """The table name is quoted in every statement."""
        sql, _ = QueryBuilder("my`table").delete("1 = 1")
        assert sql == "DELETE FROM `my``table` WHERE 1 = 1"


# ============================================================================
# ParamConverter Tests
# ============================================================================


class TestParamConverter:
    """Tests for ? to %s conversion."""

    def test_qmark_to_format(self) -> None:
        """? placeholders become %s."""
        sql, params = ParamConverter().convert(
            "SELECT * FROM users WHERE id = ? AND status = ?", ["1", "active"]
        )
        assert sql == "SELECT * FROM users WHERE id = %s AND status = %s"
        assert params == ("1", "active")

    def test_no_params_passthrough(self) -> None:
        """Without params the driver skips % interpolation, so SQL is untouched."""
        sql = "SELECT * FROM users WHERE name LIKE 'a%'"
        assert ParamConverter().convert(sql, None) == (sql, None)
        assert ParamConverter().convert(sql, []) == (sql, None)

    def test_percent_doubled_when_binding(self) -> None:
        """Literal % is doubled when binding parameters."""
        sql, _ = convert_sql("SELECT * FROM t WHERE name LIKE 'a%' AND id = ? AND x % 2", ["1"])
        assert sql == "SELECT * FROM t WHERE name LIKE 'a%%' AND id = %s AND x %% 2"

    @pytest.mark.parametrize(
        "sql",
        [
            "SELECT '?' AS q, ? AS p",
            'SELECT "?" AS q, ? AS p',
            "SELECT `a?` , ? AS p",
            "SELECT ? AS p -- why?",
            "SELECT ? AS p # why?",
            "SELECT /* why? */ ? AS p",
            "SELECT 'it''s?' AS q, ? AS p",
            "SELECT 'a\\'?' AS q, ? AS p",
        ],
    )
    def test_qmark_in_literals_and_comments_ignored(self, sql: str) -> None:
        """? inside literals and comments is left alone."""
        assert ParamConverter().count_placeholders(sql) == 1
        converted, _ = ParamConverter().convert(sql, ["x"])
        assert converted.count("%s") == 1

    def test_count_mismatch(self) -> None:
        """Placeholder and parameter counts must match."""
        with pytest.raises(ValidationError, match="2 placeholder\\(s\\) but 1 parameter"):
            ParamConverter().convert("SELECT ?, ?", ["1"])

    def test_missing_params(self) -> None:
        """Placeholders without parameters fail."""
        with pytest.raises(ValidationError, match="1 placeholder\\(s\\) but 0"):
            ParamConverter().convert("SELECT ?", None)
