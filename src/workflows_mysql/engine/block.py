"""
Pydantic base models for node input/output validation.

This module provides type-safe I/O validation for the node's operations
using Pydantic v2.

Architecture:
- NodeInput: Strict input validation (extra='forbid'), camelCase aliases
  matching the host's parameter names
- NodeOutput: Operation fields merged into each output record, serialized
  with camelCase keys

Key Benefits:
- Type safety (Pydantic v2 validation)
- Clear I/O contracts for each operation
- Automatic JSON schema generation for the host's parameter form
"""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class NodeInput(BaseModel):
    """Base class for operation parameters using Pydantic v2.

    Parameters the host reports as None are treated as not provided, so
    field defaults apply.
    """

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_unset(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class NodeOutput(BaseModel):
    """Base class for the operation fields of an output record.

    Fields left as None are omitted from the record unless listed in
    ``keep_none``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    keep_none: ClassVar[frozenset[str]] = frozenset()

    def to_fields(self) -> dict[str, Any]:
        """Serialize to record fields (camelCase keys)."""
        data = self.model_dump(by_alias=True)
        return {
            key: value for key, value in data.items() if value is not None or key in self.keep_none
        }
