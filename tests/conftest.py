"""Shared test configuration for workflows-mysql tests.

Provides:
- FakeBackend: in-memory DatabaseBackend that records statements, returns
  scripted results and tracks connect/disconnect calls
- Credential, context and executor fixtures

No live database is required.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from typing import Any

import pytest

from workflows_mysql.engine.context import DictParameterProvider, NodeContext, NodeSettings
from workflows_mysql.engine.credentials import StaticCredentialProvider
from workflows_mysql.engine.executors_mysql import MySQLExecutor
from workflows_mysql.engine.sql import (
    ConnectionConfig,
    DatabaseBackendBase,
    ParamConverter,
    Params,
    QueryResult,
)

TEST_CREDENTIALS: dict[str, Any] = {
    "host": "db.test",
    "port": 3306,
    "database": "app",
    "user": "app_user",
    "password": "s3cret",
    "ssl": False,
}


class FakeBackend(DatabaseBackendBase):
    """Scripted backend for executor tests.

    Each execute() call pops the next scripted outcome: a QueryResult is
    returned, an exception is raised. With no script left an empty
    QueryResult is returned. Placeholder alignment is checked the same
    way the aiomysql backend checks it.
    """

    def __init__(self, results: list[QueryResult | BaseException] | None = None) -> None:
        self.results: list[QueryResult | BaseException] = list(results or [])
        self.statements: list[tuple[str, list[Any]]] = []
        self.config: ConnectionConfig | None = None
        self.connect_error: BaseException | None = None
        self.disconnect_error: BaseException | None = None
        self.connect_calls = 0
        self.disconnect_calls = 0

    async def connect(self, config: ConnectionConfig) -> None:
        self.connect_calls += 1
        self.config = config
        if self.connect_error is not None:
            raise self.connect_error

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        if self.disconnect_error is not None:
            raise self.disconnect_error

    async def execute(self, sql: str, params: Params = None) -> QueryResult:
        ParamConverter().convert(sql, params)
        self.statements.append((sql, list(params or [])))
        if not self.results:
            return QueryResult()
        outcome = self.results.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    @property
    def sql(self) -> list[str]:
        """Statements executed so far, without parameters."""
        return [statement for statement, _ in self.statements]

    @property
    def closed(self) -> bool:
        return self.disconnect_calls > 0


def rows_result(rows: list[dict[str, Any]]) -> QueryResult:
    """QueryResult for a row-returning statement."""
    return QueryResult(rows=rows, returns_rows=True)


def write_result(
    affected_rows: int = 1, insert_id: int | None = 0, changed_rows: int | None = None
) -> QueryResult:
    """QueryResult for an INSERT/UPDATE/DELETE statement."""
    return QueryResult(
        returns_rows=False,
        affected_rows=affected_rows,
        insert_id=insert_id,
        changed_rows=changed_rows,
    )


@pytest.fixture
def credentials() -> dict[str, Any]:
    """A complete mysqlDb credential."""
    return dict(TEST_CREDENTIALS)


@pytest.fixture
def backend() -> FakeBackend:
    """Fresh fake backend."""
    return FakeBackend()


@pytest.fixture
def executor(backend: FakeBackend) -> MySQLExecutor:
    """Executor wired to the fake backend."""
    return MySQLExecutor(backend_factory=lambda: backend)


@pytest.fixture
def make_context() -> Callable[..., NodeContext]:
    """Factory building a NodeContext from node parameters.

    Usage:
        context = make_context({"operation": "select", "table": "users"})
        context = make_context(params, per_item=[{...}], continue_on_fail=True)
        context = make_context(params, credentials=None)
    """

    def _make(
        parameters: Mapping[str, Any],
        per_item: list[Mapping[str, Any]] | None = None,
        credentials: Mapping[str, Any] | None | bool = True,
        **settings: Any,
    ) -> NodeContext:
        if credentials is True:
            stored: dict[str, Any] = {"mysqlDb": dict(TEST_CREDENTIALS)}
        elif credentials is None or credentials is False:
            stored = {}
        else:
            stored = {"mysqlDb": dict(credentials)}

        return NodeContext(
            credentials=StaticCredentialProvider(stored),
            parameters=DictParameterProvider(parameters, per_item=per_item),
            settings=NodeSettings(**settings),
            logger=logging.getLogger("workflows_mysql.test"),
        )

    return _make


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
    """Remove workflows-mysql environment variables for the test."""
    for name in (
        "WORKFLOWS_LOG_LEVEL",
        "WORKFLOWS_MYSQL_POOL_SIZE",
        "WORKFLOWS_MYSQL_CONNECTION_TIMEOUT",
        "WORKFLOWS_MYSQL_CONTINUE_ON_FAIL",
    ):
        monkeypatch.delenv(name, raising=False)
    yield monkeypatch
