"""Exceptions raised by the MySQL node.

Exception Hierarchy:
    MySQLNodeError (base)
    ├── ConfigurationError (missing credentials or credential fields)
    ├── ValidationError (bad node parameters, caught before any statement is sent)
    └── DriverError (wrapped client-library failure)

Every exception carries an optional ``code``. For DriverError this is the
stable machine-readable driver code (e.g. ``ER_ACCESS_DENIED_ERROR``), which is
what continue-on-fail error records expose as ``errorCode``.
"""

from __future__ import annotations


class MySQLNodeError(Exception):
    """Base exception for all MySQL node errors.

    Attributes:
        code: Machine-readable error code, or None
    """

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code
        super().__init__(message)


class ConfigurationError(MySQLNodeError):
    """Credentials are missing or incomplete.

    Non-retryable setup problem: always aborts the whole batch.
    """


class ValidationError(MySQLNodeError):
    """Node parameters are invalid.

    Raised for a missing WHERE clause on UPDATE/DELETE, malformed JSON data,
    unknown operations, invalid identifiers and placeholder/parameter count
    mismatches.
    """


class DriverError(MySQLNodeError):
    """Database driver failure.

    Wraps the exception raised by the client library, keeping its numeric
    error number and a stable string code.

    Attributes:
        code: Stable string code (ER_*, CR_*, ECONNREFUSED, ...)
        errno: Numeric MySQL error number, if the driver reported one
    """

    def __init__(self, message: str, code: str | None = None, errno: int | None = None) -> None:
        super().__init__(message, code)
        self.errno = errno

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return f"DriverError(code={self.code!r}, errno={self.errno!r}, message={self.message!r})"


__all__ = [
    "MySQLNodeError",
    "ConfigurationError",
    "ValidationError",
    "DriverError",
]
