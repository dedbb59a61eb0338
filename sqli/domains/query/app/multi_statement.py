"""Sequential execution of a batch of statements.

Statements run in order and execution stops on the first error. The batch
produces a single result: the last SELECT's rows if any statement returned
rows, otherwise the sum of affected rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqli.domains.query.domain.result import ExecuteResult, QueryResult, SelectResult
from sqli.shared.core.errors import QueryError, SqliError

if TYPE_CHECKING:
    from sqli.domains.connections.providers.adapters.base import DatabaseAdapter

logger = logging.getLogger(__name__)


@dataclass
class StatementResult:
    statement: str
    result: QueryResult


class MultiStatementExecutor:
    """Runs statements against one client.

    Usage:
        executor = MultiStatementExecutor(adapter, client)
        result = executor.execute(["INSERT INTO t VALUES (1)", "SELECT * FROM t"])
    """

    def __init__(self, adapter: DatabaseAdapter, client: Any) -> None:
        self._adapter = adapter
        self._client = client

    def run(self, statements: list[str]) -> list[StatementResult]:
        results: list[StatementResult] = []
        for index, statement in enumerate(statements):
            try:
                result = self._adapter.execute(self._client, statement)
            except SqliError:
                raise
            except Exception as e:
                logger.debug("Statement %d failed: %s", index + 1, e)
                if len(statements) > 1:
                    raise QueryError(f"Statement {index + 1}: {e}") from e
                raise QueryError(str(e)) from e
            results.append(StatementResult(statement, result))
        return results

    def execute(self, statements: list[str]) -> QueryResult:
        last_select: SelectResult | None = None
        affected = 0
        for item in self.run(statements):
            result = item.result
            if isinstance(result, SelectResult):
                last_select = result
            elif isinstance(result, ExecuteResult):
                affected += result.rows_affected
            else:
                raise TypeError(f"Unknown query result: {result!r}")
        if last_select is not None:
            return last_select
        return ExecuteResult(affected)
