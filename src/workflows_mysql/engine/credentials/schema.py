"""Credential schema for the mysqlDb credential type."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationInfo, field_validator

from ..sql.backend import DEFAULT_PORT

CREDENTIAL_TYPE = "mysqlDb"


class MySQLCredentials(BaseModel):
    """MySQL database credentials.

    Field names follow the host's credential form (camelCase aliases).
    host, database, user and password have no defaults: the resolver
    rejects credentials missing any of them.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    host: str | None = Field(default=None, description="MySQL server host")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="MySQL server port")
    database: str | None = Field(default=None, description="Database name")
    user: str | None = Field(default=None, description="Database user")
    password: SecretStr | None = Field(default=None, description="Database password")
    ssl: bool = Field(default=False, description="Use SSL connection")
    connection_timeout: int | None = Field(
        default=None,
        alias="connectionTimeout",
        ge=1,
        description="Connection timeout in milliseconds (default: 10000)",
    )

    @field_validator("port", "ssl", "connection_timeout", mode="before")
    @classmethod
    def _empty_as_default(cls, v: Any, info: ValidationInfo) -> Any:
        """Treat empty form values as unset."""
        if v is None or v == "":
            return cls.model_fields[info.field_name].default
        return v

    @classmethod
    def field_names(cls) -> list[str]:
        """Credential field names as the host stores them."""
        return [field.alias or name for name, field in cls.model_fields.items()]

    def missing_required(self) -> list[str]:
        """Names of required fields that are absent or empty."""
        missing = [name for name in ("host", "database", "user") if not getattr(self, name)]
        if self.password is None or not self.password.get_secret_value():
            missing.append("password")
        return missing
