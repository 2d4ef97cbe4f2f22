"""Connection handler - manages connections and lays them out for the drawer.

The handler is the drawer's window onto the backend: it keeps the list of
registered connections and the active one, runs queries through the
``BackendClient`` and contributes the connections section of the tree.

Backend calls are coroutines handed to the ``schedule`` callable (the app
runs them as Textual workers). Lazy children never block: the first
expansion shows a placeholder and starts a fetch; when the fetch lands the
handler notifies its change listeners, which refresh the drawer.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Set, Union

from ..config import ConnectionSpec
from ..log_manager import LogManager
from ..shell.layout import Action, Continuation, LayoutNode, LazyChildren
from .client import BackendClient
from .models import Connection, HistoryEntry, QueryResult, Schemas


Scheduler = Callable[[Awaitable[None]], Any]

HELPER_QUERIES: Dict[str, str] = {
    "Preview": "SELECT * FROM {schema}.{table} LIMIT 100",
    "Columns": (
        "SELECT column_name, data_type FROM information_schema.columns "
        "WHERE table_schema = '{schema}' AND table_name = '{table}'"
    ),
    "Count": "SELECT COUNT(*) FROM {schema}.{table}",
}

CONFIRM_ITEMS = ["Yes", "No"]


def _noop() -> None:
    pass


class ConnectionHandler:
    """Connection registry plus the connections section of the drawer.

    Args:
        client: Backend client used for every remote call
        schedule: Runs a coroutine on the host's event loop
        connections: Connections to register on startup
        log_manager: Receives results (``output``) and failures (``errors``)
    """

    def __init__(
        self,
        client: Optional[BackendClient],
        schedule: Optional[Scheduler],
        connections: Optional[List[Union[ConnectionSpec, Mapping[str, Any]]]] = None,
        log_manager: Optional[LogManager] = None,
    ):
        if client is None:
            raise ValueError("no backend client provided to ConnectionHandler")
        if schedule is None:
            raise ValueError("no scheduler provided to ConnectionHandler")

        self.client = client
        self._schedule = schedule
        self.log_manager = log_manager or LogManager()

        self.connections: Dict[int, Connection] = {}
        self.last_id = 0
        self.active_connection: Optional[int] = None
        self.page_index = 0

        # Per-connection structure cache, filled by background fetches
        self._schemas: Dict[int, Schemas] = {}
        self._history: Dict[int, List[HistoryEntry]] = {}
        self._errors: Dict[int, str] = {}
        self._loading: Set[int] = set()

        self._change_listeners: List[Callable[[], None]] = []
        self._result_listeners: List[Callable[[QueryResult], None]] = []

        for spec in connections or []:
            self.add_connection(spec)

    # --- Listeners --------------------------------------------------------

    def on_change(self, callback: Callable[[], None]) -> None:
        """Call ``callback`` whenever the layout this handler produces changes."""
        self._change_listeners.append(callback)

    def on_result(self, callback: Callable[[QueryResult], None]) -> None:
        self._result_listeners.append(callback)

    def _notify(self) -> None:
        for callback in list(self._change_listeners):
            callback()

    def _publish(self, result: QueryResult) -> None:
        self.log_manager.add("output", result.as_text())
        for callback in list(self._result_listeners):
            callback(result)

    # --- Connections ------------------------------------------------------

    def add_connection(self, spec: Union[ConnectionSpec, Mapping[str, Any]]) -> Optional[Connection]:
        """Register a connection.

        Returns:
            The new connection, or None if one with the same name exists

        Raises:
            ValueError: If ``url`` or ``type`` is missing
        """
        if not isinstance(spec, ConnectionSpec):
            spec = ConnectionSpec.model_validate(dict(spec))
        if not spec.url:
            raise ValueError("url needs to be set")
        if not spec.type:
            raise ValueError("connection type needs to be set")

        name = spec.name or "[empty name]"
        for existing in self.connections.values():
            if existing.name == name:
                return None

        self.last_id += 1
        connection = Connection(id=self.last_id, name=name, type=spec.type, url=spec.url)
        self.connections[connection.id] = connection
        if self.active_connection is None:
            self.active_connection = connection.id

        self._run(
            self.client.register_connection(str(connection.id), connection.url, connection.type),
            f"register connection {name!r}",
        )
        self._notify()
        return connection

    def remove_connection(self, conn_id: int) -> bool:
        if self.connections.pop(conn_id, None) is None:
            return False
        self.invalidate(conn_id)
        if self.active_connection == conn_id:
            self.active_connection = min(self.connections) if self.connections else None
        return True

    def set_active(self, conn_id: int) -> None:
        if conn_id not in self.connections:
            raise KeyError(f"unknown connection id: {conn_id}")
        self.active_connection = conn_id

    def list_connections(self) -> List[Connection]:
        return [self.connections[key] for key in sorted(self.connections)]

    def connection_details(self, conn_id: Optional[int] = None) -> Optional[Connection]:
        if conn_id is None:
            conn_id = self.active_connection
        if conn_id is None:
            return None
        return self.connections.get(conn_id)

    def current_connection(self) -> Optional[Connection]:
        return self.connection_details()

    def invalidate(self, conn_id: int) -> None:
        """Drop cached schemas and history so the next expansion refetches."""
        self._schemas.pop(conn_id, None)
        self._history.pop(conn_id, None)
        self._errors.pop(conn_id, None)

    # --- Queries ----------------------------------------------------------

    def _resolve(self, conn_id: Optional[int]) -> int:
        if conn_id is None:
            conn_id = self.active_connection
        if conn_id is None or conn_id not in self.connections:
            raise KeyError(f"unknown connection id: {conn_id}")
        return conn_id

    def execute(self, query: str, conn_id: Optional[int] = None, done: Optional[Continuation] = None) -> None:
        target = self._resolve(conn_id)

        async def work() -> None:
            result = await self.client.execute(str(target), query)
            self.page_index = 0
            self._publish(result)
            self._history[target] = await self.client.list_history(str(target))

        self._run(work(), f"execute on connection {target}", done)

    def history(self, history_id: str, conn_id: Optional[int] = None, done: Optional[Continuation] = None) -> None:
        target = self._resolve(conn_id)

        async def work() -> None:
            result = await self.client.history(str(target), history_id)
            self.page_index = 0
            self._publish(result)

        self._run(work(), f"history {history_id!r} on connection {target}", done)

    def page_next(self, conn_id: Optional[int] = None) -> None:
        self._page(self.page_index + 1, conn_id)

    def page_prev(self, conn_id: Optional[int] = None) -> None:
        self._page(max(self.page_index - 1, 0), conn_id)

    def _page(self, page: int, conn_id: Optional[int]) -> None:
        target = self._resolve(conn_id)

        async def work() -> None:
            result = await self.client.page(str(target), page)
            self.page_index = max(result.page, 0)
            self._publish(result)

        self._run(work(), f"page {page} on connection {target}")

    def _run(self, coro: Awaitable[None], what: str, done: Optional[Continuation] = None) -> None:
        async def runner() -> None:
            try:
                await coro
            except Exception as exc:
                self.log_manager.add("errors", f"{what} failed: {exc}")
            finally:
                if done is not None:
                    done()

        self._schedule(runner())

    # --- Layout -----------------------------------------------------------

    def active_ids(self) -> List[str]:
        if self.active_connection is None:
            return []
        return [self.node_id(self.active_connection)]

    @staticmethod
    def node_id(conn_id: int) -> str:
        return f"connection_{conn_id}"

    def layout(self) -> List[LayoutNode]:
        return [self._connection_node(conn) for conn in self.list_connections()]

    def _connection_node(self, conn: Connection) -> LayoutNode:
        conn_id = conn.id

        def activate(done: Continuation) -> None:
            self.set_active(conn_id)
            done()

        def reload(done: Continuation) -> None:
            self.invalidate(conn_id)
            done()

        def remove(done: Continuation, selection: Optional[str]) -> None:
            if selection == "Yes":
                self.remove_connection(conn_id)
            done()

        return LayoutNode(
            id=self.node_id(conn_id),
            name=conn.name,
            type="connection",
            pick_title=f"Remove connection {conn.name!r}?",
            pick_items=CONFIRM_ITEMS,
            action_1=Action(activate),
            action_2=Action(reload),
            action_3=Action(remove, wants_selection=True),
            children=LazyChildren(lambda: self._connection_children(conn_id)),
        )

    def _connection_children(self, conn_id: int) -> List[LayoutNode]:
        prefix = self.node_id(conn_id)

        if conn_id in self._errors:
            return [LayoutNode(id=f"{prefix}_error", name=f"error: {self._errors[conn_id]}")]
        if conn_id not in self._schemas:
            self._load_structure(conn_id)
            return [LayoutNode(id=f"{prefix}_loading", name="loading…")]

        children = [self._history_node(conn_id)]
        for schema, tables in sorted(self._schemas[conn_id].items()):
            children.append(
                LayoutNode(
                    id=f"{prefix}_schema_{schema}",
                    name=schema,
                    schema=schema,
                    children=[self._table_node(conn_id, schema, table) for table in sorted(tables)],
                )
            )
        return children

    def _history_node(self, conn_id: int) -> LayoutNode:
        prefix = self.node_id(conn_id)
        entries = []
        for entry in self._history.get(conn_id, []):

            def rerun(done: Continuation, history_id: str = entry.id) -> None:
                self.history(history_id, conn_id, done)

            entries.append(
                LayoutNode(
                    id=f"{prefix}_history_{entry.id}",
                    name=entry.query,
                    type="history",
                    action_1=Action(rerun),
                )
            )
        return LayoutNode(id=f"{prefix}_history", name="history", type="history", children=entries)

    def _table_node(self, conn_id: int, schema: str, table: str) -> LayoutNode:
        def helper(done: Continuation, selection: Optional[str]) -> None:
            template = HELPER_QUERIES.get(selection or "Preview", HELPER_QUERIES["Preview"])
            self.execute(template.format(schema=schema, table=table), conn_id, done)

        return LayoutNode(
            id=f"{self.node_id(conn_id)}_table_{schema}.{table}",
            name=table,
            type="table",
            schema=schema,
            pick_title="Select a query",
            pick_items=list(HELPER_QUERIES),
            action_1=Action(helper, wants_selection=True),
        )

    def _load_structure(self, conn_id: int) -> None:
        if conn_id in self._loading:
            return
        self._loading.add(conn_id)

        async def fetch() -> None:
            try:
                schemas = await self.client.schemas(str(conn_id))
                history = await self.client.list_history(str(conn_id))
            except Exception as exc:
                self._errors[conn_id] = str(exc)
                self.log_manager.add("errors", f"structure of connection {conn_id} failed: {exc}")
            else:
                self._schemas[conn_id] = schemas
                self._history[conn_id] = history
            finally:
                self._loading.discard(conn_id)
            self._notify()

        self._schedule(fetch())
