"""Tests for multi-statement execution."""

from __future__ import annotations

import pytest

from sqli.domains.query.app.multi_statement import MultiStatementExecutor
from sqli.domains.query.domain.result import ExecuteResult, SelectResult
from sqli.shared.core.errors import QueryError
from tests.mocks import FakeAdapter, FakeClient


@pytest.fixture
def executor():
    return MultiStatementExecutor(FakeAdapter(), FakeClient("app"))


def test_last_select_wins(executor):
    result = executor.execute(["insert into t values (1)", "select * from t"])
    assert isinstance(result, SelectResult)
    assert result.columns == ("id", "name")


def test_affected_rows_are_summed(executor):
    assert executor.execute(["insert 1", "update 2", "delete 3"]) == ExecuteResult(rows_affected=3)


def test_stops_on_first_error():
    adapter = FakeAdapter()
    client = FakeClient("app")
    executor = MultiStatementExecutor(adapter, client)

    with pytest.raises(QueryError, match="Statement 2: syntax error"):
        executor.execute(["insert 1", "fail here", "insert 3"])
    assert client.executed == ["insert 1", "fail here"]


def test_single_statement_error_has_no_prefix(executor):
    with pytest.raises(QueryError) as exc_info:
        executor.execute(["fail"])
    assert str(exc_info.value) == "syntax error"


def test_run_returns_each_result(executor):
    results = executor.run(["select 1", "insert 2"])
    assert [r.statement for r in results] == ["select 1", "insert 2"]
    assert isinstance(results[1].result, ExecuteResult)
