"""Textual app hosting the database drawer.

Goals:
- Browse connections, schemas, tables and query history in a drawer that
  keeps its expansion state across refreshes
- Run helper queries and history entries against the backend without
  blocking the UI (backend calls run as workers)
- Keep scratchpad notes next to the connections
"""

from __future__ import annotations

import threading
from typing import Any, Awaitable, Optional

from textual.binding import Binding

from .backend.client import BackendClient
from .backend.handler import ConnectionHandler
from .backend.models import QueryResult
from .config import AppConfig
from .drawer import Drawer
from .log_manager import LogManager
from .notes import NotesProvider
from .shell.base_shell import DrawerShell
from .shell.navigation_tree import NavigationTree
from .shell.picker import PickerPrompt


class DrawerApp(DrawerShell):
    TITLE = "dbtree"

    BINDINGS = DrawerShell.BINDINGS + [
        Binding("ctrl+b", "toggle_drawer", "Drawer"),
        Binding("f5", "show_log('events')", "Events"),
        Binding("f6", "show_log('errors')", "Errors"),
        Binding("f7", "show_result", "Result"),
        Binding("ctrl+n", "page_next", "Next page"),
        Binding("ctrl+u", "page_prev", "Prev page"),
    ]

    def __init__(self, config: Optional[AppConfig] = None, client: Optional[BackendClient] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.config = config or AppConfig()
        self.log_manager = LogManager()
        self.client = client or BackendClient(self.config.backend_url)
        self.notes = NotesProvider()
        self.handler: Optional[ConnectionHandler] = None
        self.drawer: Optional[Drawer] = None

        # UI state
        self.active_view: str = "result"
        self.last_result: Optional[QueryResult] = None
        self._thread_id = threading.get_ident()
        self.log_manager.subscribe(self._on_log)

    # --- Shell hooks ------------------------------------------------------

    def get_brand_text(self) -> str:
        return "dbtree • Drawer"

    def get_hint_text(self) -> str:
        return "ctrl+b: Drawer • F5: Events • F6: Errors • F7: Result"

    def theme_switched(self, theme_name: str) -> None:
        if self.drawer is None:
            return
        if theme_name == "plain":
            self.drawer.renderer.candies = {}
        else:
            self.drawer.renderer.candies = self.config.drawer.effective_candies()
        self.drawer.redraw()

    def build_navigation(self, tree: NavigationTree) -> None:
        self._thread_id = threading.get_ident()
        self.handler = ConnectionHandler(
            self.client,
            self._schedule,
            connections=list(self.config.connections),
            log_manager=self.log_manager,
        )
        self.handler.on_result(self._on_result)

        self.drawer = Drawer(
            tree,
            [self.handler, self.notes],
            self.config.drawer,
            prompt=PickerPrompt(self),
            log_manager=self.log_manager,
        )
        self.handler.on_change(self.request_refresh)

        tree.set_key_handler(self._on_tree_key)
        tree.set_expansion_handler(self._on_tree_expansion)
        self.drawer.open()

    def on_unmount(self) -> None:
        if self.drawer is not None:
            self.drawer.teardown()

    # --- Drawer plumbing --------------------------------------------------

    def _schedule(self, coro: Awaitable[Any]) -> None:
        async def guarded() -> None:
            try:
                await coro
            except Exception as exc:
                self._report(f"background task failed: {exc}")

        self.run_worker(guarded(), group="backend", exit_on_error=False)

    def request_refresh(self) -> None:
        """Refresh the drawer; safe to call from another thread."""
        if threading.get_ident() != self._thread_id:
            self.call_from_thread(self.request_refresh)
            return
        if self.drawer is None:
            return
        try:
            self.drawer.refresh()
        except Exception as exc:
            self._report(f"refresh failed: {exc}")

    def _on_tree_key(self, key: str, node_id: Optional[str]) -> bool:
        if self.drawer is None:
            return False
        try:
            return self.drawer.handle_key(key, node_id)
        except Exception as exc:
            self._report(f"{key} on {node_id!r} failed: {exc}")
            return True

    def _on_tree_expansion(self, node_id: str, expanded: bool) -> None:
        if self.drawer is None:
            return
        try:
            if expanded:
                self.drawer.dispatcher.expand(node_id)
            else:
                self.drawer.dispatcher.collapse(node_id)
        except Exception as exc:
            self._report(f"expanding {node_id!r} failed: {exc}")
            # Put the widget back in line with the model.
            self.drawer.redraw()

    def _on_result(self, result: QueryResult) -> None:
        self.last_result = result
        self.active_view = "result"
        page = f"page {result.page + 1}/{max(result.total_pages, 1)}"
        self.update_status(f"Result  |  {result.query or '(query)'}  |  {page}")
        self.show_table(result.columns, result.rows)

    def _on_log(self, category: str) -> None:
        if self.active_view == f"log:{category}":
            self.show_detail(self.log_manager.text(category))

    def _report(self, message: str) -> None:
        self.log_manager.add("errors", message)
        self.update_status(f"Error  |  {message}")

    # --- Actions ----------------------------------------------------------

    def action_toggle_drawer(self) -> None:
        if self.drawer is None or self.nav_tree is None:
            return
        if self.nav_tree.display:
            self.drawer.close()
        else:
            self.drawer.open()
            self.nav_tree.focus()

    def action_show_log(self, category: str) -> None:
        self.active_view = f"log:{category}"
        self.update_status(f"Log  |  {category}")
        self.show_detail(self.log_manager.text(category))

    def action_show_result(self) -> None:
        if self.last_result is None:
            self.update_status("Result  |  (none)")
            self.show_detail("")
            return
        self._on_result(self.last_result)

    def action_page_next(self) -> None:
        if self.handler is None:
            return
        try:
            self.handler.page_next()
        except KeyError as exc:
            self._report(f"paging failed: {exc}")

    def action_page_prev(self) -> None:
        if self.handler is None:
            return
        try:
            self.handler.page_prev()
        except KeyError as exc:
            self._report(f"paging failed: {exc}")
