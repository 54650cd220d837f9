"""Resolve connection parameters from injected credentials."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ConfigurationError
from ..sql.backend import DEFAULT_CONNECT_TIMEOUT_MS, DEFAULT_POOL_SIZE, ConnectionConfig
from .provider import CredentialProvider
from .schema import CREDENTIAL_TYPE, MySQLCredentials

if TYPE_CHECKING:
    from ..context import NodeSettings


def resolve_connection(
    credentials: Mapping[str, Any] | MySQLCredentials | None,
    settings: NodeSettings | None = None,
) -> ConnectionConfig:
    """Build connection parameters from credentials and node settings.

    Timeout precedence: explicit settings.connection_timeout, then the
    credential's connectionTimeout, then 10000 ms.

    Args:
        credentials: Credential fields (mapping or parsed model), or None
        settings: Per-invocation node settings (optional)

    Returns:
        Immutable ConnectionConfig

    Raises:
        ConfigurationError: If credentials are absent, invalid, or missing
            host, database, user or password
    """
    if not credentials:
        raise ConfigurationError(
            "MySQL credentials are required. "
            "Please select credentials in the Authentication field."
        )

    if isinstance(credentials, MySQLCredentials):
        parsed = credentials
    else:
        try:
            parsed = MySQLCredentials.model_validate(dict(credentials))
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid MySQL credentials: {e}") from e

    missing = parsed.missing_required()
    if missing:
        raise ConfigurationError(f"MySQL credentials are missing: {', '.join(missing)}")

    timeout = DEFAULT_CONNECT_TIMEOUT_MS
    if settings is not None and settings.connection_timeout is not None:
        timeout = settings.connection_timeout
    elif parsed.connection_timeout is not None:
        timeout = parsed.connection_timeout

    password = parsed.password.get_secret_value() if parsed.password is not None else ""

    return ConnectionConfig(
        host=parsed.host or "",
        port=parsed.port,
        database=parsed.database or "",
        user=parsed.user or "",
        password=password,
        ssl=parsed.ssl,
        connect_timeout_ms=timeout,
        pool_size=settings.pool_size if settings is not None else DEFAULT_POOL_SIZE,
    )


async def load_connection(
    provider: CredentialProvider,
    settings: NodeSettings | None = None,
    credential_type: str = CREDENTIAL_TYPE,
) -> ConnectionConfig:
    """Fetch credentials from a provider and resolve them.

    Raises:
        ConfigurationError: If retrieval fails or the credentials are incomplete
    """
    try:
        credentials = await provider.get_credentials(credential_type)
    except Exception as e:
        raise ConfigurationError(f"Failed to get credentials: {e}") from e

    return resolve_connection(credentials, settings)
