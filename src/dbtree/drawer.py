"""Drawer - composes layout providers into the navigation tree.

The drawer asks each provider for its forest on every refresh, glues the
sections together with separators (plus a generated help section), hands the
result to the tree model and asks the host surface to repaint.
"""

from __future__ import annotations

import itertools
from typing import Iterable, List, Optional, Protocol, Sequence, runtime_checkable

from .config import DrawerConfig
from .log_manager import LogManager
from .shell.actions import ActionDispatcher, SelectionPrompt
from .shell.layout import ExpandOncePolicy, LayoutNode, LayoutProvider
from .shell.renderer import LineRenderer
from .shell.tree_model import TreeModel


@runtime_checkable
class DrawerHost(Protocol):
    """Protocol for the surface the drawer is displayed on."""

    def show(self) -> bool:
        """Make the surface visible.

        Returns:
            True if the display buffer was created by this call
        """
        ...

    def hide(self) -> None:
        ...

    def redraw(self, model: TreeModel, renderer: LineRenderer) -> None:
        ...


class Drawer:
    """Orchestrates providers, the tree model and the action dispatcher.

    Args:
        host: Surface the tree is drawn on
        providers: Layout providers, in display order
        config: Key mappings, theme and help switch
        prompt: Selection prompt for actions that want a pick
        log_manager: Log buffer for debug/events output
        renderer: Line renderer; built from the config candies by default
    """

    HELP_ID = "__help_layout__"
    HELP_ACTION_PREFIX = "__help_action_"
    HELP_EXPAND_KEY = "help_expand_once_id"
    SEPARATOR_PREFIX = "__separator_layout__"

    def __init__(
        self,
        host: Optional[DrawerHost],
        providers: Optional[Sequence[LayoutProvider]],
        config: Optional[DrawerConfig] = None,
        prompt: Optional[SelectionPrompt] = None,
        log_manager: Optional[LogManager] = None,
        renderer: Optional[LineRenderer] = None,
    ):
        if host is None:
            raise ValueError("no host surface provided to Drawer")
        if not providers:
            raise ValueError("no layout providers provided to Drawer")
        for provider in providers:
            if not isinstance(provider, LayoutProvider):
                raise ValueError(f"not a layout provider: {provider!r}")

        self.host = host
        self.providers: List[LayoutProvider] = list(providers)
        self.config = config or DrawerConfig()
        self.log_manager = log_manager or LogManager()

        self.expand_policy = ExpandOncePolicy()
        self._separator_ids = itertools.count(1)

        self.model = TreeModel(self.expand_policy, debug_logger=self.log_manager.logger("debug"))
        self.renderer = renderer or LineRenderer(self.config.effective_candies())
        self.renderer.set_active_source(self.active_ids)
        self.dispatcher = ActionDispatcher(
            self.model,
            refresh=self.refresh,
            redraw=self.redraw,
            prompt=prompt,
            event_logger=self.log_manager.logger("events"),
        )
        self.keymap = self.dispatcher.keymap(self.config.bound_mappings())

        self._opened = False
        self._refreshing = False
        self._refresh_pending = False

    # --- Layout -----------------------------------------------------------

    def separator(self) -> LayoutNode:
        """Blank entry between provider sections, with a never-reused id."""
        return LayoutNode(id=f"{self.SEPARATOR_PREFIX}{next(self._separator_ids)}", name="")

    def layout_help(self) -> LayoutNode:
        help_children = [
            LayoutNode(
                id=f"{self.HELP_ACTION_PREFIX}{action}",
                name=f"{action} = {mapping.key} ({mapping.mode})",
            )
            for action, mapping in self.config.mappings.items()
        ]
        help_children.sort(key=lambda node: node.id)

        return LayoutNode(
            id=self.HELP_ID,
            name="help",
            type="help",
            default_expand=self.HELP_EXPAND_KEY,
            children=help_children,
        )

    def layout(self) -> List[LayoutNode]:
        """Assemble the full forest from every provider, in order."""
        layouts: List[LayoutNode] = []
        for index, provider in enumerate(self.providers):
            if index > 0:
                layouts.append(self.separator())
            layouts.extend(provider.layout())

        if not self.config.disable_help:
            layouts.append(self.separator())
            layouts.append(self.layout_help())
        return layouts

    def active_ids(self) -> Iterable[str]:
        ids: List[str] = []
        for provider in self.providers:
            getter = getattr(provider, "active_ids", None)
            if callable(getter):
                ids.extend(str(node_id) for node_id in getter() if node_id is not None)
        return ids

    # --- Lifecycle --------------------------------------------------------

    def refresh(self) -> None:
        """Rebuild the tree from the providers and repaint.

        A refresh requested while one is running (for example by an action
        continuation fired from inside a provider) runs once more after it.
        """
        if self._refreshing:
            self._refresh_pending = True
            return

        self._refreshing = True
        try:
            while True:
                self._refresh_pending = False
                self.model.reconcile(self.layout())
                self.log_manager.add("debug", f"Drawer: refreshed ({len(self.model)} nodes)")
                if not self._refresh_pending:
                    break
        finally:
            self._refreshing = False

        self.redraw()

    def redraw(self) -> None:
        if self._opened:
            self.host.redraw(self.model, self.renderer)

    def open(self) -> None:
        """Show the drawer; the first open builds the tree."""
        created = self.host.show()
        if created or not self._opened:
            self._opened = True
            self.refresh()
        else:
            self.redraw()

    def close(self) -> None:
        self.host.hide()

    @property
    def is_open(self) -> bool:
        return self._opened

    def teardown(self) -> None:
        """Forget one-shot flags and tree state; the next open starts fresh."""
        self.expand_policy.reset()
        self.model = TreeModel(self.expand_policy, debug_logger=self.log_manager.logger("debug"))
        self.dispatcher.model = self.model
        self._opened = False

    # --- Input ------------------------------------------------------------

    def handle_key(self, key: str, node_id: Optional[str]) -> bool:
        """Route a key press on ``node_id`` to its bound action.

        Returns:
            True if the key is bound
        """
        name = self.keymap.get(key)
        if name is None:
            return False
        self.dispatcher.dispatch(name, node_id)
        return True
