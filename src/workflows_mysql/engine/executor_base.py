"""Base node executor architecture.

A node executor implements one workflow node type. Executors are
stateless: a single instance serves every invocation, and everything an
invocation needs (credentials, parameters, settings, logger) arrives in a
NodeContext.

Key principles:
- Executors are stateless (singleton pattern)
- execute() maps a batch of items to a batch of output records
- Exceptions indicate batch failure
- Type safety through Pydantic models
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, PrivateAttr

from .context import Item, NodeContext


class ExecutorSecurityLevel(Enum):
    """Security level classification for executors.

    Used for security policy enforcement and audit purposes.
    """

    SAFE = "safe"  # No external access
    TRUSTED = "trusted"  # Network access to configured services
    PRIVILEGED = "privileged"  # Full system access


class ExecutorCapabilities(BaseModel):
    """Executor capability flags for security audit.

    Declares what resources an executor can access.
    """

    can_read_files: bool = False
    can_write_files: bool = False
    can_execute_commands: bool = False
    can_network: bool = False
    can_modify_state: bool = False


class NodeExecutor(ABC):
    """Base class for workflow node executors.

    Subclasses must:
    1. Set class attributes (type_name, identifier)
    2. Implement execute() and get_input_schema()
    3. Optionally override credential and security attributes

    Example:
        class EchoExecutor(NodeExecutor):
            type_name = "Echo"
            identifier = "echo"

            async def execute(self, items, context):
                return [dict(item) for item in items] or [{}]

            def get_input_schema(self):
                return {"type": "object"}
    """

    # Class attributes (must be set by subclasses)
    type_name: ClassVar[str]  # Display name (e.g., "MySQL")
    identifier: ClassVar[str]  # Registry key (e.g., "mysql")
    credential_type: ClassVar[str | None] = None  # Credential type the node requests

    # Security attributes (can be overridden by subclasses)
    security_level: ClassVar[ExecutorSecurityLevel] = ExecutorSecurityLevel.SAFE
    capabilities: ClassVar[ExecutorCapabilities] = ExecutorCapabilities()

    @abstractmethod
    async def execute(self, items: list[Item], context: NodeContext) -> list[Item]:
        """Process a batch of items.

        Args:
            items: Input items (JSON payloads), possibly empty
            context: Host context for this invocation

        Returns:
            One output record per input item, in input order

        Raises:
            Exception: Any exception aborts the batch
        """
        pass

    @abstractmethod
    def get_input_schema(self) -> dict[str, Any]:
        """Generate JSON Schema for the node's parameters."""
        pass

    def get_capabilities(self) -> dict[str, Any]:
        """Get executor capabilities for security audit.

        Returns:
            Dictionary with type, security_level, and capabilities
        """
        return {
            "type": self.type_name,
            "security_level": self.security_level.value,
            "capabilities": self.capabilities.model_dump(),
        }


class NodeRegistry(BaseModel):
    """
    Registry of node executors.

    Maps executor identifiers to executor instances.
    """

    model_config = {"arbitrary_types_allowed": True}

    _executors: dict[str, NodeExecutor] = PrivateAttr(default_factory=dict)

    def register(self, executor: NodeExecutor) -> None:
        """Register executor using executor.identifier as key."""
        if executor.identifier in self._executors:
            raise ValueError(f"Executor already registered: {executor.identifier}")
        self._executors[executor.identifier] = executor

    def get(self, identifier: str) -> NodeExecutor:
        """Get executor by identifier."""
        if identifier not in self._executors:
            available = list(self._executors.keys())
            raise ValueError(f"Unknown node type: {identifier}. Available: {available}")
        return self._executors[identifier]

    def list_types(self) -> list[str]:
        """List registered executor identifiers."""
        return list(self._executors.keys())

    def has(self, identifier: str) -> bool:
        """Check if executor identifier is registered."""
        return identifier in self._executors


def create_default_registry() -> NodeRegistry:
    """Create NodeRegistry with the built-in executors registered.

    Returns:
        NodeRegistry instance with all built-in executors registered

    Example:
        registry = create_default_registry()
        executor = registry.get("mysql")
        records = await executor.execute(items, context)
    """
    from .executors_mysql import MySQLExecutor

    registry = NodeRegistry()
    registry.register(MySQLExecutor())

    return registry


__all__ = [
    "ExecutorSecurityLevel",
    "ExecutorCapabilities",
    "NodeExecutor",
    "NodeRegistry",
    "create_default_registry",
]
