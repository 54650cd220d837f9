"""Operation requests for the MySQL node.

Each operation is a variant of a tagged union keyed by ``operation``. A
variant owns only the fields its operation uses, and is validated when it
is built, before any statement is sent:

- executeQuery: query, queryParams
- select: table, columns, where, whereParams, orderBy, returnAll, limit
- insert: table, data, returnFields
- update: table, data, where, whereParams, returnFields
- delete: table, where, whereParams

Requests are built fresh for every input item from the host's parameters.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import Field, TypeAdapter, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from .block import NodeInput
from .context import MISSING, ParameterProvider
from .exceptions import ValidationError
from .params import parse_json_data, split_params


class Operation(str, Enum):
    """Operations supported by the node."""

    EXECUTE_QUERY = "executeQuery"
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


def parse_operation(value: Any) -> Operation:
    """Parse the host's operation parameter.

    Raises:
        ValidationError: If the operation is not supported
    """
    try:
        return Operation(value)
    except ValueError:
        raise ValidationError(f"Unknown operation: {value}") from None


def _data_object(value: Any) -> dict[str, Any]:
    try:
        return parse_json_data(value)
    except ValidationError as e:
        raise ValueError(e.message) from e


def _default_star(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return "*"
    return value


# ============================================================================
# Operation Variants
# ============================================================================


class ExecuteQueryRequest(NodeInput):
    """Run caller-supplied SQL verbatim."""

    operation: Literal["executeQuery"] = "executeQuery"
    query: str = Field(min_length=1, description="SQL query to execute")
    query_params: str = Field(
        default="",
        description="Query parameters as comma-separated values (e.g., active,123,john)",
    )

    @property
    def params(self) -> list[str]:
        return split_params(self.query_params)


class TableRequest(NodeInput):
    """Fields shared by the table operations."""

    table: str = Field(min_length=1, description="Table name")


class SelectRequest(TableRequest):
    """Select rows from a table."""

    operation: Literal["select"] = "select"
    columns: str = Field(default="*", description="Columns to select (comma-separated or *)")
    where: str = Field(
        default="",
        description="WHERE clause without the WHERE keyword (e.g., id = ? AND status = ?)",
    )
    where_params: str = Field(
        default="", description="Parameters for WHERE clause as comma-separated values"
    )
    order_by: str = Field(
        default="", description="ORDER BY clause (e.g., created_at DESC, name ASC)"
    )
    return_all: bool = Field(default=True, description="Return all results or limit the rows")
    limit: int = Field(default=50, description="Maximum number of rows to return")

    @field_validator("columns", mode="before")
    @classmethod
    def _columns_default(cls, v: Any) -> Any:
        return _default_star(v)

    @model_validator(mode="after")
    def _check_limit(self) -> SelectRequest:
        # limit is only read when returnAll is off
        if not self.return_all and self.limit < 1:
            raise ValueError("limit must be at least 1")
        return self

    @property
    def params(self) -> list[str]:
        return split_params(self.where_params) if self.where else []

    @property
    def effective_limit(self) -> int | None:
        """LIMIT to apply, or None when returning all rows."""
        return None if self.return_all else self.limit


class InsertRequest(TableRequest):
    """Insert one row built from a JSON object."""

    operation: Literal["insert"] = "insert"
    data: dict[str, Any] = Field(
        default_factory=dict, description="Data to insert as JSON object"
    )
    return_fields: str = Field(
        default="*", description="Fields to return after insert (e.g., id,name or *)"
    )

    @field_validator("data", mode="before")
    @classmethod
    def _parse_data(cls, v: Any) -> dict[str, Any]:
        return _data_object(v)

    @field_validator("return_fields", mode="before")
    @classmethod
    def _return_fields_default(cls, v: Any) -> Any:
        return _default_star(v)


class UpdateRequest(TableRequest):
    """Update rows matching a required WHERE clause."""

    operation: Literal["update"] = "update"
    data: dict[str, Any] = Field(
        default_factory=dict, description="Data to update as JSON object"
    )
    where: str = Field(
        default="",
        description="WHERE clause without the WHERE keyword (required)",
    )
    where_params: str = Field(
        default="", description="Parameters for WHERE clause as comma-separated values"
    )
    return_fields: str = Field(
        default="*", description="Fields to return after update (e.g., id,name or *)"
    )

    @field_validator("data", mode="before")
    @classmethod
    def _parse_data(cls, v: Any) -> dict[str, Any]:
        return _data_object(v)

    @field_validator("return_fields", mode="before")
    @classmethod
    def _return_fields_default(cls, v: Any) -> Any:
        return _default_star(v)

    @model_validator(mode="after")
    def _require_where(self) -> UpdateRequest:
        if not self.where:
            raise ValueError(
                "WHERE clause is required for UPDATE operation to prevent accidental updates"
            )
        if not self.data:
            raise ValueError("UPDATE requires at least one column in data")
        return self

    @property
    def params(self) -> list[str]:
        return split_params(self.where_params)


class DeleteRequest(TableRequest):
    """Delete rows matching a required WHERE clause."""

    operation: Literal["delete"] = "delete"
    where: str = Field(
        default="",
        description="WHERE clause without the WHERE keyword (required)",
    )
    where_params: str = Field(
        default="", description="Parameters for WHERE clause as comma-separated values"
    )

    @model_validator(mode="after")
    def _require_where(self) -> DeleteRequest:
        if not self.where:
            raise ValueError(
                "WHERE clause is required for DELETE operation to prevent accidental deletion"
            )
        return self

    @property
    def params(self) -> list[str]:
        return split_params(self.where_params)


OperationRequest = Annotated[
    ExecuteQueryRequest | SelectRequest | InsertRequest | UpdateRequest | DeleteRequest,
    Field(discriminator="operation"),
]

OPERATION_REQUEST_ADAPTER: TypeAdapter[OperationRequest] = TypeAdapter(OperationRequest)

REQUEST_TYPES: dict[Operation, type[NodeInput]] = {
    Operation.EXECUTE_QUERY: ExecuteQueryRequest,
    Operation.SELECT: SelectRequest,
    Operation.INSERT: InsertRequest,
    Operation.UPDATE: UpdateRequest,
    Operation.DELETE: DeleteRequest,
}


def format_validation_error(error: PydanticValidationError) -> str:
    """Human-readable message for a pydantic validation error."""
    messages = []
    for detail in error.errors():
        message = detail["msg"].removeprefix("Value error, ")
        location = ".".join(str(part) for part in detail["loc"])
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages)


def build_request(
    operation: Operation, parameters: ParameterProvider, item_index: int
) -> NodeInput:
    """Build and validate the request for one item.

    Reads every field of the operation's variant from the parameter
    provider by its host name (e.g. "whereParams"); fields the host does
    not provide keep their defaults.

    Args:
        operation: Operation selected for the batch
        parameters: Host parameter provider
        item_index: Index of the item being processed

    Returns:
        Validated request (one of the OperationRequest variants)

    Raises:
        ValidationError: If a parameter is missing or invalid
    """
    request_type = REQUEST_TYPES[operation]
    values: dict[str, Any] = {"operation": operation.value}

    for name, field in request_type.model_fields.items():
        if name == "operation":
            continue
        key = field.alias or name
        value = parameters.get_parameter(key, item_index)
        if value is not MISSING:
            values[key] = value

    try:
        return request_type.model_validate(values)
    except PydanticValidationError as e:
        raise ValidationError(format_validation_error(e)) from e


__all__ = [
    "Operation",
    "parse_operation",
    "ExecuteQueryRequest",
    "SelectRequest",
    "InsertRequest",
    "UpdateRequest",
    "DeleteRequest",
    "OperationRequest",
    "OPERATION_REQUEST_ADAPTER",
    "REQUEST_TYPES",
    "build_request",
    "format_validation_error",
]
