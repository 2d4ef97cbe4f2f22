"""Shared fakes for drawer tests."""

from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import pytest

from dbtree.backend.models import HistoryEntry, QueryResult


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeHost:
    """DrawerHost that records what the drawer asked of it."""

    def __init__(self) -> None:
        self.shown = 0
        self.hidden = 0
        self.redraws = 0
        self.last_lines: List[str] = []

    def show(self) -> bool:
        self.shown += 1
        return self.shown == 1

    def hide(self) -> None:
        self.hidden += 1

    def redraw(self, model, renderer) -> None:
        self.redraws += 1
        self.last_lines = [renderer.prepare(node, depth).plain for node, depth in model.visible()]


class FakePrompt:
    """Selection prompt that remembers the last request instead of showing it."""

    def __init__(self) -> None:
        self.calls: List[Tuple[List[str], Optional[str]]] = []
        self.on_choice: Optional[Callable[[str], None]] = None

    def open(self, items, on_choice, title=None) -> None:
        self.calls.append((list(items), title))
        self.on_choice = on_choice

    def choose(self, item: str) -> None:
        assert self.on_choice is not None, "prompt was never opened"
        callback, self.on_choice = self.on_choice, None
        callback(item)

    def dismiss(self) -> None:
        self.on_choice = None


class StaticProvider:
    """Layout provider returning a fixed (replaceable) forest."""

    def __init__(self, nodes=None, active=None) -> None:
        self.nodes = list(nodes or [])
        self.active = list(active or [])
        self.calls = 0

    def layout(self):
        self.calls += 1
        return list(self.nodes)

    def active_ids(self):
        return list(self.active)


class FakeBackendClient:
    """In-memory stand-in for ``BackendClient``."""

    def __init__(self) -> None:
        self.registered: List[Tuple[str, str, str]] = []
        self.executed: List[Tuple[str, str]] = []
        self.pages: List[Tuple[str, int]] = []
        self.schema_data: Dict[str, List[str]] = {"public": ["orders", "customers"]}
        self.history_data: List[HistoryEntry] = [HistoryEntry(id="h1", query="SELECT 1")]
        self.fail_schemas: Optional[Exception] = None

    async def register_connection(self, conn_id: str, url: str, conn_type: str) -> None:
        self.registered.append((conn_id, url, conn_type))

    async def schemas(self, conn_id: str):
        if self.fail_schemas is not None:
            raise self.fail_schemas
        return dict(self.schema_data)

    async def list_history(self, conn_id: str):
        return list(self.history_data)

    async def execute(self, conn_id: str, query: str) -> QueryResult:
        self.executed.append((conn_id, query))
        return QueryResult(columns=["n"], rows=[[1]], query=query)

    async def history(self, conn_id: str, history_id: str) -> QueryResult:
        return QueryResult(columns=["n"], rows=[[2]], query=f"history {history_id}")

    async def page(self, conn_id: str, page: int) -> QueryResult:
        self.pages.append((conn_id, page))
        return QueryResult(columns=["n"], rows=[[3]], page=page, total_pages=5)

    async def ping(self) -> Optional[str]:
        return "ok"


class Scheduled(list):
    """Collects coroutines handed to a scheduler; ``drain`` awaits them."""

    def __call__(self, coro: Awaitable[Any]) -> None:
        self.append(coro)

    async def drain(self) -> None:
        while self:
            await self.pop(0)

    def close_all(self) -> None:
        while self:
            self.pop(0).close()


@pytest.fixture
def fake_host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def fake_prompt() -> FakePrompt:
    return FakePrompt()


@pytest.fixture
def static_provider():
    return StaticProvider


@pytest.fixture
def fake_client() -> FakeBackendClient:
    return FakeBackendClient()


@pytest.fixture
def scheduled():
    pending = Scheduled()
    yield pending
    pending.close_all()
