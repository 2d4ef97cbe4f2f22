"""ActionDispatcher - routes key presses to node-scoped actions.

Each node offers up to three action slots. An action that wants a selection
on a node that declares ``pick_items`` goes through the selection prompt
first; every action receives a continuation that refreshes the drawer once
the action's work is done, whenever that is.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Mapping, Optional, Protocol, runtime_checkable

from ..config import KeyMapping
from .layout import resolve_pick_items
from .tree_model import TreeModel


@runtime_checkable
class SelectionPrompt(Protocol):
    """Protocol for the picker collaborator.

    Exactly one of ``on_choice(item)`` or a silent dismissal happens.
    """

    def open(
        self,
        items: List[str],
        on_choice: Callable[[str], None],
        title: Optional[str] = None,
    ) -> None:
        ...


SLOTS = {"action_1": 1, "action_2": 2, "action_3": 3}


class ActionDispatcher:
    """Binds action names to tree operations and node actions.

    Args:
        model: The tree the node ids refer to
        refresh: Full drawer refresh; also the continuation handed to actions
        redraw: Repaint without rebuilding, called when expansion changes
        prompt: Selection prompt used for actions that want a pick
        event_logger: Optional callback for dispatched-action messages
    """

    def __init__(
        self,
        model: TreeModel,
        refresh: Callable[[], None],
        redraw: Callable[[], None],
        prompt: Optional[SelectionPrompt] = None,
        event_logger: Optional[Callable[[str], None]] = None,
    ):
        self.model = model
        self._refresh = refresh
        self._redraw = redraw
        self.prompt = prompt
        self._event_logger = event_logger or (lambda msg: None)

    # --- Tree operations --------------------------------------------------

    def refresh(self, node_id: Optional[str] = None) -> None:
        self._refresh()

    def expand(self, node_id: Optional[str]) -> bool:
        if node_id is None:
            return False
        changed = self.model.expand(node_id)
        if changed:
            self._redraw()
        return changed

    def collapse(self, node_id: Optional[str]) -> bool:
        if node_id is None:
            return False
        changed = self.model.collapse(node_id)
        if changed:
            self._redraw()
        return changed

    def toggle(self, node_id: Optional[str]) -> bool:
        node = self.model.get(node_id)
        if node is None:
            return False
        if node.expanded:
            return self.collapse(node.id)
        return self.expand(node.id)

    # --- Node actions -----------------------------------------------------

    def invoke(self, node_id: Optional[str], slot: int) -> bool:
        """Run the action in ``slot`` of ``node_id``.

        Returns:
            True if an action was started (or a prompt opened for it)
        """
        node = self.model.get(node_id)
        if node is None:
            return False
        action = node.action(slot)
        if action is None:
            return False

        def done() -> None:
            self._refresh()

        if action.wants_selection and node.pick_items is not None and self.prompt is not None:
            items = resolve_pick_items(node.pick_items) or []

            def on_choice(selection: str) -> None:
                self._event_logger(f"action_{slot} on {node.id!r} with {selection!r}")
                action.invoke_with_selection(done, selection)

            self.prompt.open(items, on_choice, node.pick_title)
            return True

        self._event_logger(f"action_{slot} on {node.id!r}")
        action.invoke_without_selection(done)
        return True

    # --- Key routing ------------------------------------------------------

    def commands(self) -> Dict[str, Callable[[Optional[str]], object]]:
        """Map every bindable action name to a callable taking a node id."""
        commands: Dict[str, Callable[[Optional[str]], object]] = {
            "refresh": self.refresh,
            "expand": self.expand,
            "collapse": self.collapse,
            "toggle": self.toggle,
        }
        for name, slot in SLOTS.items():
            commands[name] = lambda node_id, slot=slot: self.invoke(node_id, slot)
        return commands

    def keymap(self, mappings: Mapping[str, KeyMapping]) -> Dict[str, str]:
        """Build ``key -> action name`` for the mapped actions we can run.

        Unknown or unbound action names are not wired.
        """
        known = self.commands()
        return {m.key: name for name, m in mappings.items() if name in known and m.key}

    def dispatch(self, name: str, node_id: Optional[str]) -> object:
        command = self.commands().get(name)
        if command is None:
            return None
        return command(node_id)
