"""Host plugin contract for node execution.

The host drives the node through an explicit context object instead of
implicit callbacks. A NodeContext bundles what the node may ask the host
for during one invocation:

- credentials: CredentialProvider resolving the node's credential type
- parameters: ParameterProvider returning declared parameter values per item
- settings: NodeSettings (continue-on-fail, timeout override, pool size)
- logger: Logger for host-visible log lines

Items are plain dicts: the JSON payload of one workflow item.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..config import get_connection_timeout, get_continue_on_fail, get_pool_size
from .credentials.provider import CredentialProvider
from .sql.backend import DEFAULT_POOL_SIZE

# One workflow item (JSON payload)
Item = dict[str, Any]

# Sentinel for "parameter not provided"
MISSING: Any = object()


class NodeSettings(BaseModel):
    """Per-invocation node settings supplied by the host.

    Attributes:
        continue_on_fail: Turn per-item failures into error records
        connection_timeout: Connection timeout override in milliseconds;
            takes precedence over the credential's connectionTimeout
        pool_size: Maximum concurrent pooled connections
    """

    continue_on_fail: bool = Field(default=False, alias="continueOnFail")
    connection_timeout: int | None = Field(
        default=None, alias="connectionTimeout", ge=1000, le=600000
    )
    pool_size: int = Field(default=DEFAULT_POOL_SIZE, ge=1, le=100)

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @field_validator("connection_timeout", mode="before")
    @classmethod
    def _empty_timeout(cls, v: Any) -> Any:
        return None if v == "" else v

    @classmethod
    def from_env(cls, **overrides: Any) -> NodeSettings:
        """Build settings from environment variables.

        Environment Variables:
            WORKFLOWS_MYSQL_CONTINUE_ON_FAIL: "true"/"false" (default: false)
            WORKFLOWS_MYSQL_CONNECTION_TIMEOUT: Timeout override in ms,
                clamped to 1000-600000 (default: unset)
            WORKFLOWS_MYSQL_POOL_SIZE: Pool size, clamped to 1-100 (default: 10)

        Explicit overrides win over environment values. Unparseable
        environment values fall back to the defaults.

        Returns:
            NodeSettings instance
        """
        values: dict[str, Any] = {
            "continue_on_fail": get_continue_on_fail(),
            "connection_timeout": get_connection_timeout(),
            "pool_size": get_pool_size(),
        }
        values.update(overrides)
        return cls(**values)


class ParameterProvider(ABC):
    """Resolves declared node parameters for an item."""

    @abstractmethod
    def get_parameter(self, name: str, item_index: int, default: Any = MISSING) -> Any:
        """Return the value of parameter ``name`` for item ``item_index``.

        Args:
            name: Declared parameter name (e.g. "whereParams")
            item_index: Index of the item being processed
            default: Value to return when the parameter is not set

        Returns:
            Parameter value, or default (MISSING when no default was given)
        """
        pass


class DictParameterProvider(ParameterProvider):
    """Parameters from a mapping, optionally overridden per item.

    Example:
        >>> provider = DictParameterProvider(
        ...     {"operation": "select", "table": "users"},
        ...     per_item=[{"where": "id = ?", "whereParams": "1"}],
        ... )
        >>> provider.get_parameter("where", 0)
        'id = ?'
    """

    def __init__(
        self,
        values: Mapping[str, Any],
        per_item: list[Mapping[str, Any]] | None = None,
    ) -> None:
        self.values = dict(values)
        self.per_item = [dict(overrides) for overrides in (per_item or [])]

    def get_parameter(self, name: str, item_index: int, default: Any = MISSING) -> Any:
        if item_index < len(self.per_item) and name in self.per_item[item_index]:
            return self.per_item[item_index][name]
        return self.values.get(name, default)


@dataclass
class NodeContext:
    """Everything the node can ask the host for during one invocation."""

    credentials: CredentialProvider
    parameters: ParameterProvider
    settings: NodeSettings = field(default_factory=NodeSettings)
    logger: logging.Logger | logging.LoggerAdapter[logging.Logger] = field(
        default_factory=lambda: logging.getLogger("workflows_mysql.node")
    )


__all__ = [
    "Item",
    "MISSING",
    "NodeSettings",
    "ParameterProvider",
    "DictParameterProvider",
    "NodeContext",
]
