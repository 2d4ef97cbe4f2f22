"""Line composition for drawer nodes.

Turns a materialized node into a styled ``rich.text.Text`` line: indentation,
disclosure glyph, type icon and name. The theme ("candies") is keyed by node
type, with ``none``/``none_dir`` for untyped leaves/branches and
``node_expanded``/``node_closed`` for the glyph.
"""

from __future__ import annotations

from typing import Callable, Iterable, Mapping, Optional, Set

from rich.text import Text

from ..config import Candy
from .tree_model import MaterializedNode


DEFAULT_CLOSED = Candy(icon=">", icon_highlight="dim")
DEFAULT_EXPANDED = Candy(icon="v", icon_highlight="dim")


class LineRenderer:
    """Prepare display lines for the drawer.

    Args:
        candies: Theme keyed by node type
        indent_width: Spaces per depth level; 0 when the host draws guides
    """

    def __init__(self, candies: Optional[Mapping[str, Candy]] = None, indent_width: int = 2):
        self.candies: Mapping[str, Candy] = dict(candies or {})
        self.indent_width = indent_width
        self._active_ids: Set[str] = set()
        self._active_source: Optional[Callable[[], Iterable[str]]] = None

    def set_active_ids(self, ids: Iterable[str]) -> None:
        """Mark the node ids that represent the currently active resources."""
        self._active_ids = {str(node_id) for node_id in ids}

    def set_active_source(self, source: Optional[Callable[[], Iterable[str]]]) -> None:
        """Use a callable queried on every ``prepare`` for the active ids."""
        self._active_source = source

    def is_active(self, node_id: str) -> bool:
        if self._active_source is not None:
            return node_id in {str(i) for i in self._active_source()}
        return node_id in self._active_ids

    def glyph(self, node: MaterializedNode) -> Text:
        if not node.is_expandable:
            return Text("  ")
        if node.expanded:
            candy = self.candies.get("node_expanded") or DEFAULT_EXPANDED
        else:
            candy = self.candies.get("node_closed") or DEFAULT_CLOSED
        return Text(candy.icon + " ", style=candy.icon_highlight or "")

    def candy_for(self, node: MaterializedNode) -> Candy:
        if not node.type:
            key = "none_dir" if node.has_children else "none"
            return self.candies.get(key) or Candy()
        return self.candies.get(node.type) or Candy()

    def prepare(self, node: MaterializedNode, depth: int = 1, with_glyph: bool = True) -> Text:
        """Compose the display line for ``node`` at ``depth`` (roots are 1)."""
        line = Text(" " * (self.indent_width * max(depth - 1, 0)))
        if with_glyph:
            line.append_text(self.glyph(node))

        candy = self.candy_for(node)
        if candy.icon:
            line.append(f" {candy.icon} ", style=candy.icon_highlight or "")

        # Active resources borrow the icon highlight.
        if self.is_active(node.id):
            line.append(node.name, style=candy.icon_highlight or "bold")
        else:
            line.append(node.name, style=candy.text_highlight or "")
        return line
