"""Placeholder conversion from ? to the driver's paramstyle.

Node statements use ? for positional parameters. aiomysql (via PyMySQL)
uses the "format" paramstyle: it interpolates escaped arguments with the
% operator, so ? must become %s and any literal % must be doubled whenever
arguments are bound.

A ? inside a quoted string literal, quoted identifier or comment is never
treated as a placeholder. A % inside them is still doubled, since the
driver applies % to the whole statement text.
"""

from __future__ import annotations

import re
from typing import Any

from ..exceptions import ValidationError

# Segments that are copied verbatim, followed by the two characters we rewrite.
# Alternation order matters: literals and comments must win over bare ? and %.
TOKEN_PATTERN = re.compile(
    r"""
    (?P<literal>
        '(?:[^'\\]|\\.|'')*'        # single-quoted string
      | "(?:[^"\\]|\\.|"")*"        # double-quoted string
      | `(?:[^`]|``)*`              # quoted identifier
      | --[ \t][^\n]*               # -- comment
      | \#[^\n]*                    # # comment
      | /\*.*?\*/                   # /* block comment */
    )
    | (?P<placeholder>\?)
    | (?P<percent>%)
    """,
    re.VERBOSE | re.DOTALL,
)


class ParamConverter:
    """Converts ? placeholders to %s for PyMySQL-style drivers.

    Example:
        converter = ParamConverter()
        sql, params = converter.convert(
            "SELECT * FROM users WHERE id = ? AND name LIKE 'a%'", ["42"]
        )
        # sql == "SELECT * FROM users WHERE id = %s AND name LIKE 'a%%'"
        # params == ("42",)
    """

    def count_placeholders(self, sql: str) -> int:
        """Count ? placeholders outside literals and comments."""
        return sum(1 for match in TOKEN_PATTERN.finditer(sql) if match.lastgroup == "placeholder")

    def convert(
        self, sql: str, params: list[Any] | tuple[Any, ...] | None
    ) -> tuple[str, tuple[Any, ...] | None]:
        """Convert SQL and parameters to the driver's format.

        Args:
            sql: Statement with ? placeholders
            params: Positional parameters, in placeholder order

        Returns:
            Tuple of (converted SQL, parameter tuple). The parameter tuple is
            None when there are no parameters, in which case the driver skips
            % interpolation and the SQL is returned unchanged.

        Raises:
            ValidationError: If the number of placeholders differs from the
                number of parameters
        """
        values = tuple(params) if params else ()
        expected = self.count_placeholders(sql)

        if expected != len(values):
            raise ValidationError(
                f"Statement has {expected} placeholder(s) but {len(values)} "
                f"parameter(s) were supplied"
            )

        if not values:
            return sql, None

        def replace(match: re.Match[str]) -> str:
            if match.lastgroup == "placeholder":
                return "%s"
            if match.lastgroup == "percent":
                return "%%"
            return match.group(0).replace("%", "%%")

        return TOKEN_PATTERN.sub(replace, sql), values


def convert_sql(
    sql: str, params: list[Any] | tuple[Any, ...] | None
) -> tuple[str, tuple[Any, ...] | None]:
    """Convenience function for ParamConverter().convert()."""
    return ParamConverter().convert(sql, params)
