"""Lifecycle of the asynchronous backend operation a tab may have in flight.

Work runs on a thread pool. The UI thread starts it with ``begin``, checks
it once per tick with the non-blocking ``poll`` (which applies a finished
result to the tab through the reducer for its kind) and may ``cancel`` it.
Cancellation is advisory: the record is dropped and a token is set, but the
worker is not interrupted. Its result is discarded when it arrives, and any
client it opened is closed.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Union

from sqli.domains.connections.app.client_cache import CachedClient, ClientRequest
from sqli.domains.query.domain.result import QueryResult, SelectResult
from sqli.domains.session.domain.tab import Focus, ViewState

if TYPE_CHECKING:
    from sqli.domains.session.domain.tab import Tab

logger = logging.getLogger(__name__)

CONNECTION_TIMEOUT = 30.0


class CancellationToken:
    """Set when the operation's result will be thrown away."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


# Operation contexts


@dataclass(frozen=True)
class ListDatabasesOp:
    connection_name: str
    # Re-listing from the sidebar keeps the current view
    refresh: bool = False


@dataclass(frozen=True)
class ConnectOp:
    connection_name: str
    database: str


@dataclass(frozen=True)
class LoadTablesOp:
    database: str
    refresh: bool = False


@dataclass(frozen=True)
class QueryOp:
    # Select the result grid once the result arrives
    focus_output: bool = False


OperationContext = Union[ListDatabasesOp, ConnectOp, LoadTablesOp, QueryOp]


@dataclass
class WorkResult:
    """What a worker hands back: a value plus the client it used."""

    value: Any
    request: ClientRequest
    client: Any

    @property
    def opened_client(self) -> bool:
        return not self.request.reuses_cached


@dataclass
class PendingOperation:
    context: OperationContext
    future: Future
    token: CancellationToken = field(default_factory=CancellationToken)
    started: float = field(default_factory=time.monotonic)
    timeout: float | None = None

    @property
    def kind(self) -> str:
        return type(self.context).__name__

    def timed_out(self, now: float) -> bool:
        return self.timeout is not None and now - self.started > self.timeout


Work = Callable[[CancellationToken], WorkResult]


def run_with_client(request: ClientRequest, fn: Callable[[Any], Any]) -> Callable[[CancellationToken], WorkResult]:
    """Wrap ``fn(client)`` so it obtains its client first and reports it back."""

    def work(token: CancellationToken) -> WorkResult:
        client = request.obtain()
        if token.cancelled:
            return WorkResult(None, request, client)
        return WorkResult(fn(client), request, client)

    return work


class OperationManager:
    """Starts, polls and cancels at most one operation per tab."""

    def __init__(self, max_workers: int = 4, clock: Callable[[], float] = time.monotonic) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="sqli-db")
        self._clock = clock
        self._shutdown = False

    def begin(
        self,
        tab: Tab,
        context: OperationContext,
        work: Work,
        status: str,
        timeout: float | None = None,
    ) -> bool:
        """Start ``work`` for ``tab``. Returns False (and does nothing) if one is already pending."""
        if tab.pending is not None or self._shutdown:
            return False
        token = CancellationToken()
        future = self._executor.submit(work, token)
        tab.pending = PendingOperation(
            context=context,
            future=future,
            token=token,
            started=self._clock(),
            timeout=timeout,
        )
        tab.loading = True
        tab.status = status
        logger.debug("Started %s on tab %r", tab.pending.kind, tab.name)
        return True

    def poll(self, tab: Tab) -> bool:
        """Apply the tab's finished operation, if any. Never blocks.

        Returns True if tab state changed.
        """
        pending = tab.pending
        if pending is None:
            return False

        if not pending.future.done():
            if pending.timed_out(self._clock()):
                tab.pending = None
                self._discard(pending)
                tab.loading = False
                tab.status = "Connection timed out"
                logger.info("%s timed out on tab %r", pending.kind, tab.name)
                return True
            return False

        tab.pending = None
        tab.loading = False
        try:
            outcome: WorkResult = pending.future.result()
        except Exception as e:
            logger.info("%s failed on tab %r: %s", pending.kind, tab.name, e)
            apply_failure(tab, pending.context, e)
            return True

        logger.debug("%s completed on tab %r", pending.kind, tab.name)
        apply_success(tab, pending.context, outcome, elapsed=self._clock() - pending.started)
        return True

    def cancel(self, tab: Tab) -> bool:
        """Drop the tab's pending operation. Returns False if there was none."""
        pending = tab.pending
        if pending is None:
            return False
        tab.pending = None
        self._discard(pending)
        tab.loading = False
        tab.pending_g = False
        tab.status = "Cancelled"
        if isinstance(pending.context, (ConnectOp, ListDatabasesOp)):
            tab.reset_to_connection_list()
        logger.info("Cancelled %s on tab %r", pending.kind, tab.name)
        return True

    def _discard(self, pending: PendingOperation) -> None:
        pending.token.cancel()
        if pending.future.cancel():
            return
        pending.future.add_done_callback(_close_discarded_client)

    def shutdown(self) -> None:
        self._shutdown = True
        self._executor.shutdown(wait=False, cancel_futures=True)


def _close_discarded_client(future: Future) -> None:
    if future.cancelled() or future.exception() is not None:
        return
    outcome = future.result()
    if isinstance(outcome, WorkResult) and outcome.opened_client and outcome.client is not None:
        try:
            outcome.request.adapter.disconnect(outcome.client)
        except Exception:
            logger.debug("Error closing discarded client", exc_info=True)


# Reducers


def _install_client(tab: Tab, outcome: WorkResult) -> None:
    request = outcome.request
    tab.active_connection = request.config
    tab.client_cache.replace(CachedClient(outcome.client, request.config.name, request.target, request.adapter))


def format_elapsed(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    return f"{seconds:.2f}s"


def query_status(result: QueryResult, elapsed: float, now: datetime | None = None) -> str:
    stamp = (now or datetime.now()).strftime("%H:%M:%S")
    if isinstance(result, SelectResult):
        return f"[{stamp}] {result.row_count} row(s) returned in {format_elapsed(elapsed)}"
    return f"[{stamp}] {result.rows_affected} row(s) affected in {format_elapsed(elapsed)}"


def apply_success(tab: Tab, context: OperationContext, outcome: WorkResult, elapsed: float = 0.0) -> None:
    if isinstance(context, ListDatabasesOp):
        _install_client(tab, outcome)
        databases: list[str] = outcome.value
        tab.databases = databases
        if context.refresh:
            tab.sidebar.set_databases(databases)
            if tab.current_database not in databases:
                tab.current_database = None
        else:
            tab.name = context.connection_name
            tab.view = ViewState.DATABASE_LIST
            tab.selected_database = 0
            if tab.current_database in databases:
                tab.selected_database = databases.index(tab.current_database)
        tab.status = None
    elif isinstance(context, ConnectOp):
        _install_client(tab, outcome)
        tables: list[str] = outcome.value
        database = context.database
        tab.current_database = database
        tab.name = f"{context.connection_name}/{database}" if database else context.connection_name
        if database not in tab.databases:
            tab.databases = tab.databases + [database]
        tab.sidebar.set_databases(tab.databases)
        tab.sidebar.set_tables(database, tables, refresh=True)
        tab.sidebar.expand(database)
        tab.sidebar.select_database(database)
        tab.column_cache.clear()
        tab.view = ViewState.DATABASE_VIEW
        tab.focus = Focus.QUERY
        tab.status = f"Connected to {database}" if database else "Connected"
    elif isinstance(context, LoadTablesOp):
        _install_client(tab, outcome)
        tab.sidebar.set_tables(context.database, outcome.value, refresh=context.refresh)
        tab.status = None
    elif isinstance(context, QueryOp):
        _install_client(tab, outcome)
        result: QueryResult = outcome.value
        tab.set_result(result)
        tab.status = query_status(result, elapsed)
        if context.focus_output:
            tab.focus = Focus.OUTPUT
    else:
        raise TypeError(f"Unknown operation context: {context!r}")


def apply_failure(tab: Tab, context: OperationContext, error: BaseException) -> None:
    if isinstance(context, ListDatabasesOp):
        prefix = "Failed to refresh" if context.refresh else "Connection failed"
        tab.status = f"{prefix}: {error}"
    elif isinstance(context, ConnectOp):
        tab.status = f"Connection failed: {error}"
    elif isinstance(context, LoadTablesOp):
        tab.status = f"Failed to load tables: {error}"
    elif isinstance(context, QueryOp):
        # The previous result stays on screen
        tab.status = f"Error: {error}"
    else:
        raise TypeError(f"Unknown operation context: {context!r}")

