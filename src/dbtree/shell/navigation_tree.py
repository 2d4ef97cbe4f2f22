"""NavigationTree - Textual surface the drawer draws its tree on.

The widget owns no tree state of its own: every redraw rebuilds the Textual
nodes from the drawer's ``TreeModel``, restores the cursor by node id and
routes key presses back to the drawer.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from rich.style import Style
from rich.text import Text
from textual import events
from textual.widgets import Tree
from textual.widgets.tree import TreeNode

from .renderer import LineRenderer
from .tree_model import MaterializedNode, TreeModel


KeyHandler = Callable[[str, Optional[str]], bool]
ExpansionHandler = Callable[[str, bool], None]


class NavigationTree(Tree):
    """Drawer host surface built on Textual's ``Tree``.

    This widget encapsulates:
    - Rebuilding Textual nodes from the materialized model
    - Cursor restoration across rebuilds (by node id)
    - Key routing to the drawer's keymap
    - Mirroring user expand/collapse clicks into the model
    """

    def __init__(self, label: str = "Navigation", **kwargs):
        """Initialize the navigation tree.

        Args:
            label: Root label for the tree (hidden)
            **kwargs: Additional Tree widget arguments
        """
        super().__init__(label, **kwargs)
        self.show_root = False
        self.auto_expand = False

        # node id -> Textual node, rebuilt on every redraw
        self._node_index: Dict[str, TreeNode] = {}

        self._key_handler: Optional[KeyHandler] = None
        self._expansion_handler: Optional[ExpansionHandler] = None
        self._model: Optional[TreeModel] = None
        self._created = False

        # Diagnostics: track redraws to spot redundant refreshes
        self.rebuild_history: List[Dict[str, Any]] = []

    # --- Wiring -----------------------------------------------------------

    def set_key_handler(self, handler: Optional[KeyHandler]) -> None:
        """Register ``handler(key, node_id) -> bool``; True consumes the key."""
        self._key_handler = handler

    def set_expansion_handler(self, handler: Optional[ExpansionHandler]) -> None:
        """Register ``handler(node_id, expanded)`` for user-driven folding."""
        self._expansion_handler = handler

    # --- DrawerHost -------------------------------------------------------

    def show(self) -> bool:
        created = not self._created
        self._created = True
        self.display = True
        return created

    def hide(self) -> None:
        self.display = False

    def redraw(self, model: TreeModel, renderer: LineRenderer) -> None:
        """Rebuild the Textual nodes from ``model``."""
        cursor_id = self.cursor_id()
        self._model = model

        self.rebuild_history.append(
            {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "node_count": len(model),
            }
        )
        # Keep only last 20 redraw events
        if len(self.rebuild_history) > 20:
            self.rebuild_history = self.rebuild_history[-20:]

        self.root.remove_children()
        self._node_index = {}

        def add(parent: TreeNode, nodes: List[MaterializedNode]) -> None:
            for node in nodes:
                label = renderer.prepare(node, depth=1)
                data = {"id": node.id, "type": node.type}
                if node.is_expandable:
                    child = parent.add(label, data=data, expand=node.expanded, allow_expand=True)
                    add(child, model.children(node.id))
                else:
                    child = parent.add_leaf(label, data=data)
                self._node_index[node.id] = child

        add(self.root, model.roots())
        self.root.expand()

        if cursor_id is not None:
            self.call_after_refresh(self.select_id, cursor_id)

    # --- Queries ----------------------------------------------------------

    def cursor_id(self) -> Optional[str]:
        """Id of the model node under the cursor, if any."""
        node = self.cursor_node
        data = getattr(node, "data", None) or {}
        return data.get("id")

    def select_id(self, node_id: str) -> bool:
        node = self._node_index.get(node_id)
        if node is None:
            return False
        self.move_cursor(node)
        return True

    def node_for(self, node_id: str) -> Optional[TreeNode]:
        return self._node_index.get(node_id)

    # --- Rendering --------------------------------------------------------

    def render_label(self, node: TreeNode, base_style: Style, style: Style) -> Text:  # type: ignore[override]
        # The drawer's renderer already composed glyph, icon and name.
        label = node.label.copy()
        label.stylize(style)
        return label

    # --- Events -----------------------------------------------------------

    def on_key(self, event: events.Key) -> None:
        if self._key_handler is None:
            return
        if self._key_handler(event.key, self.cursor_id()):
            event.stop()
            event.prevent_default()

    def on_tree_node_expanded(self, event: Tree.NodeExpanded) -> None:  # type: ignore[override]
        self._mirror_expansion(event.node, True)

    def on_tree_node_collapsed(self, event: Tree.NodeCollapsed) -> None:  # type: ignore[override]
        self._mirror_expansion(event.node, False)

    def _mirror_expansion(self, node: TreeNode, expanded: bool) -> None:
        data = getattr(node, "data", None) or {}
        node_id = data.get("id")
        if node_id is None or self._expansion_handler is None or self._model is None:
            return
        current = self._model.get(node_id)
        # Redraws replay model state; only act on real divergence.
        if current is None or current.expanded == expanded:
            return
        self._expansion_handler(node_id, expanded)
