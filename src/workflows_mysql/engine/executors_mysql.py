"""MySQL node executor.

Runs one operation (executeQuery, select, insert, update, delete) for every
item of a batch against a connection pool created for the batch.

Features:
- Parameterized statements only: values are always bound to ? placeholders
- Backtick-quoted table and column identifiers
- Read-back SELECT after insert/update (non-fatal on failure)
- Continue-on-fail: per-item failures become error records

Batch lifecycle:
1. Read the operation once (unknown operation aborts the batch)
2. Resolve credentials (ConfigurationError aborts the batch)
3. Create the pool
4. For each item: build request, run statement(s), shape output record
5. Close the pool, whatever happened
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, ClassVar

from pydantic import Field

from .block import NodeOutput
from .context import Item, NodeContext
from .credentials import load_connection
from .credentials.schema import CREDENTIAL_TYPE
from .executor_base import ExecutorCapabilities, ExecutorSecurityLevel, NodeExecutor
from .operations import (
    OPERATION_REQUEST_ADAPTER,
    DeleteRequest,
    ExecuteQueryRequest,
    InsertRequest,
    Operation,
    SelectRequest,
    UpdateRequest,
    build_request,
    parse_operation,
)
from .sql import DatabaseBackend, MySQLPoolBackend, QueryBuilder, QueryResult

logger = logging.getLogger(__name__)

BackendFactory = Callable[[], DatabaseBackend]


# ============================================================================
# Output Models
# ============================================================================


class ExecuteQueryOutput(NodeOutput):
    """Output fields for executeQuery.

    Row-returning statements carry rows and column metadata. Other
    statements carry a single header row with the server's counters.
    """

    rows: list[dict[str, Any]] = Field(default_factory=list)
    row_count: int = 0
    affected_rows: int | None = None
    insert_id: int | None = None
    fields: list[dict[str, Any]] | None = None


class SelectOutput(NodeOutput):
    """Output fields for select."""

    rows: list[dict[str, Any]] = Field(default_factory=list)
    row_count: int = 0


class InsertOutput(NodeOutput):
    """Output fields for insert.

    ``inserted`` holds insertId and affectedRows, merged with the row read
    back after the insert when that read succeeded.
    """

    inserted: dict[str, Any]
    row_count: int = 0


class UpdateOutput(NodeOutput):
    """Output fields for update."""

    updated: list[dict[str, Any]] = Field(default_factory=list)
    row_count: int = 0
    changed_rows: int = 0


class DeleteOutput(NodeOutput):
    """Output fields for delete."""

    deleted: bool = True
    row_count: int = 0


class ErrorOutput(NodeOutput):
    """Error record fields written in place of an operation output."""

    error: bool = True
    error_message: str
    error_code: str | None = None
    error_details: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> ErrorOutput:
        return cls(
            error_message=str(exc),
            error_code=getattr(exc, "code", None),
            error_details=f"{type(exc).__name__}: {exc}",
        )


def _query_header(result: QueryResult) -> dict[str, Any]:
    """Header row describing a statement that returned no result set."""
    return {
        "affectedRows": result.affected_rows,
        "insertId": result.insert_id,
        "changedRows": result.changed_rows or 0,
        "warningStatus": result.warning_count,
        "info": result.info,
    }


# ============================================================================
# MySQL Executor
# ============================================================================


class MySQLExecutor(NodeExecutor):
    """MySQL node executor.

    Items are processed sequentially, each statement awaited before the
    next item starts, so side effects and output records follow input
    order. One pool serves the whole batch and is always closed.

    Security:
    - Values are never interpolated into SQL
    - Table and column names are quoted; WHERE and ORDER BY fragments are
      caller-supplied SQL and run as written
    - Passwords are never logged
    """

    type_name: ClassVar[str] = "MySQL"
    identifier: ClassVar[str] = "mysql"
    credential_type: ClassVar[str | None] = CREDENTIAL_TYPE

    security_level: ClassVar[ExecutorSecurityLevel] = ExecutorSecurityLevel.TRUSTED
    capabilities: ClassVar[ExecutorCapabilities] = ExecutorCapabilities(
        can_network=True, can_modify_state=True
    )

    def __init__(self, backend_factory: BackendFactory | None = None) -> None:
        """Initialize executor.

        Args:
            backend_factory: Callable returning a fresh, unconnected backend
                (default: MySQLPoolBackend)
        """
        self._backend_factory: BackendFactory = backend_factory or MySQLPoolBackend

    def get_input_schema(self) -> dict[str, Any]:
        """JSON Schema of the operation union (host parameter names)."""
        return OPERATION_REQUEST_ADAPTER.json_schema(by_alias=True)

    async def execute(self, items: list[Item], context: NodeContext) -> list[Item]:
        """Run the configured operation for every item.

        Args:
            items: Input items; an empty batch is processed as one empty item
            context: Host context (credentials, parameters, settings, logger)

        Returns:
            One record per item: the item's fields followed by the
            operation's output fields (or error fields)

        Raises:
            ValidationError: Unknown operation, or an invalid item when
                continue-on-fail is disabled
            ConfigurationError: Missing or incomplete credentials
            DriverError: Database failure when continue-on-fail is disabled
        """
        settings = context.settings
        context.logger.info(f"[MySQL] continueOnFail setting: {settings.continue_on_fail}")

        operation = parse_operation(
            context.parameters.get_parameter("operation", 0, Operation.EXECUTE_QUERY.value)
        )
        config = await load_connection(context.credentials, settings, CREDENTIAL_TYPE)
        context.logger.info(
            f"Using MySQL credentials from authentication "
            f"(connectionTimeout={config.connect_timeout_ms}, "
            f"fromSettings={settings.connection_timeout is not None})"
        )

        batch = items or [{}]
        results: list[Item] = []
        backend = self._backend_factory()

        try:
            await backend.connect(config)

            for index, item in enumerate(batch):
                try:
                    request = build_request(operation, context.parameters, index)
                    output = await self._run(request, backend, context)
                except Exception as e:
                    if not settings.continue_on_fail:
                        raise
                    logger.debug(f"Item {index} failed: {e!r}")
                    output = ErrorOutput.from_exception(e)

                results.append({**item, **output.to_fields()})
        finally:
            await self._close(backend, context)

        return results

    async def _run(
        self, request: Any, backend: DatabaseBackend, context: NodeContext
    ) -> NodeOutput:
        """Dispatch one validated request to its handler."""
        if isinstance(request, ExecuteQueryRequest):
            return await self._execute_query(request, backend)
        elif isinstance(request, SelectRequest):
            return await self._select(request, backend)
        elif isinstance(request, InsertRequest):
            return await self._insert(request, backend, context)
        elif isinstance(request, UpdateRequest):
            return await self._update(request, backend, context)
        elif isinstance(request, DeleteRequest):
            return await self._delete(request, backend)
        else:
            raise TypeError(f"Unsupported request type: {type(request).__name__}")

    async def _execute_query(
        self, request: ExecuteQueryRequest, backend: DatabaseBackend
    ) -> ExecuteQueryOutput:
        result = await backend.execute(request.query, request.params)

        if result.returns_rows:
            return ExecuteQueryOutput(
                rows=result.rows,
                row_count=result.row_count,
                fields=[field.to_dict() for field in result.fields],
            )

        return ExecuteQueryOutput(
            rows=[_query_header(result)],
            row_count=1,
            affected_rows=result.affected_rows,
            insert_id=result.insert_id,
        )

    async def _select(self, request: SelectRequest, backend: DatabaseBackend) -> SelectOutput:
        sql, params = QueryBuilder(request.table).select(
            columns=request.columns,
            where=request.where,
            where_params=request.params,
            order_by=request.order_by,
            limit=request.effective_limit,
        )
        result = await backend.execute(sql, params)
        return SelectOutput(rows=result.rows, row_count=result.row_count)

    async def _insert(
        self, request: InsertRequest, backend: DatabaseBackend, context: NodeContext
    ) -> InsertOutput:
        builder = QueryBuilder(request.table)
        sql, params = builder.insert(request.data)
        result = await backend.execute(sql, params)

        inserted: dict[str, Any] = {
            "insertId": result.insert_id,
            "affectedRows": result.affected_rows,
        }

        if request.return_fields != "*" or result.insert_id:
            try:
                fetch_sql, fetch_params = builder.fetch_by_id(
                    request.return_fields, result.insert_id
                )
                fetched = await backend.execute(fetch_sql, fetch_params)
                if fetched.rows:
                    inserted.update(fetched.rows[0])
            except Exception as e:
                context.logger.warning(f"Could not fetch inserted row: {e}")

        return InsertOutput(inserted=inserted, row_count=result.affected_rows)

    async def _update(
        self, request: UpdateRequest, backend: DatabaseBackend, context: NodeContext
    ) -> UpdateOutput:
        builder = QueryBuilder(request.table)
        where_params = request.params
        sql, params = builder.update(request.data, request.where, where_params)
        result = await backend.execute(sql, params)

        updated: list[dict[str, Any]] = []
        if result.affected_rows > 0:
            try:
                fetch_sql, fetch_params = builder.fetch_where(
                    request.return_fields, request.where, where_params
                )
                updated = (await backend.execute(fetch_sql, fetch_params)).rows
            except Exception as e:
                context.logger.warning(f"Could not fetch updated rows: {e}")

        return UpdateOutput(
            updated=updated,
            row_count=result.affected_rows,
            changed_rows=result.changed_rows or 0,
        )

    async def _delete(self, request: DeleteRequest, backend: DatabaseBackend) -> DeleteOutput:
        sql, params = QueryBuilder(request.table).delete(request.where, request.params)
        result = await backend.execute(sql, params)
        return DeleteOutput(row_count=result.affected_rows)

    async def _close(self, backend: DatabaseBackend, context: NodeContext) -> None:
        """Close the pool without masking the batch's own outcome."""
        try:
            await backend.disconnect()
        except Exception:
            context.logger.warning("Failed to close MySQL connection pool", exc_info=True)


__all__ = [
    "BackendFactory",
    "MySQLExecutor",
    "ExecuteQueryOutput",
    "SelectOutput",
    "InsertOutput",
    "UpdateOutput",
    "DeleteOutput",
    "ErrorOutput",
]
