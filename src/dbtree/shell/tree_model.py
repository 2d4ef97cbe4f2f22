"""TreeModel - materialized drawer tree with identity-preserving reconciliation.

Providers rebuild their whole forest on every refresh. The model matches the
incoming layout nodes against what it already holds by ``id`` so that the
user's expansion state (and lazily loaded subtrees) survive the rebuild.

All mutation happens on the host's event-loop thread; the model holds no
locks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Set, Tuple

from .layout import (
    Action,
    ExpandOncePolicy,
    LayoutNode,
    LazyChildren,
    PickItems,
)


@dataclass
class MaterializedNode:
    """The model's stateful copy of a ``LayoutNode``."""

    id: str
    name: str
    type: str = ""
    schema: Optional[str] = None
    database: Optional[str] = None
    pick_title: Optional[str] = None
    pick_items: PickItems = None
    action_1: Optional[Action] = None
    action_2: Optional[Action] = None
    action_3: Optional[Action] = None
    parent_id: Optional[str] = None
    getter: Optional[LazyChildren] = None
    expanded: bool = False
    child_ids: List[str] = field(default_factory=list)

    @classmethod
    def from_layout(
        cls,
        layout: LayoutNode,
        parent_id: Optional[str],
        expanded: bool,
    ) -> "MaterializedNode":
        getter = layout.children if isinstance(layout.children, LazyChildren) else None
        return cls(
            id=layout.id,
            name=layout.name,
            type=layout.type,
            schema=layout.schema,
            database=layout.database,
            pick_title=layout.pick_title,
            pick_items=layout.pick_items,
            action_1=layout.action_1,
            action_2=layout.action_2,
            action_3=layout.action_3,
            parent_id=parent_id,
            getter=getter,
            expanded=expanded,
        )

    @property
    def is_lazy(self) -> bool:
        return self.getter is not None

    @property
    def has_children(self) -> bool:
        return bool(self.child_ids)

    @property
    def is_expandable(self) -> bool:
        return self.has_children or self.is_lazy

    def action(self, slot: int) -> Optional[Action]:
        return {1: self.action_1, 2: self.action_2, 3: self.action_3}.get(slot)


class TreeModel:
    """Owns node storage, parent/child links and expansion flags.

    Args:
        expand_policy: One-shot auto-expand registry consulted for
            ``default_expand`` keys
        debug_logger: Optional callback for debug messages
    """

    def __init__(
        self,
        expand_policy: Optional[ExpandOncePolicy] = None,
        debug_logger: Optional[Callable[[str], None]] = None,
    ):
        self.expand_policy = expand_policy if expand_policy is not None else ExpandOncePolicy()
        self._debug_logger = debug_logger or (lambda msg: None)
        self._nodes: Dict[str, MaterializedNode] = {}
        self._root_ids: List[str] = []

    # --- Queries ----------------------------------------------------------

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, node_id: Optional[str]) -> Optional[MaterializedNode]:
        if node_id is None:
            return None
        return self._nodes.get(node_id)

    def root_ids(self) -> List[str]:
        return list(self._root_ids)

    def roots(self) -> List[MaterializedNode]:
        return [self._nodes[node_id] for node_id in self._root_ids]

    def children(self, node_id: Optional[str] = None) -> List[MaterializedNode]:
        """Return the children of ``node_id`` (or the roots when ``None``)."""
        if node_id is None:
            return self.roots()
        node = self._nodes.get(node_id)
        if node is None:
            return []
        return [self._nodes[child_id] for child_id in node.child_ids]

    def expanded_ids(self) -> Set[str]:
        return {node_id for node_id, node in self._nodes.items() if node.expanded}

    def visible(self) -> Iterator[Tuple[MaterializedNode, int]]:
        """Yield ``(node, depth)`` for every displayed node, depth starting at 1."""

        def walk(ids: Sequence[str], depth: int) -> Iterator[Tuple[MaterializedNode, int]]:
            for node_id in ids:
                node = self._nodes[node_id]
                yield node, depth
                if node.expanded:
                    yield from walk(node.child_ids, depth + 1)

        yield from walk(self._root_ids, 1)

    # --- Reconciliation ---------------------------------------------------

    def reconcile(self, forest: Sequence[LayoutNode], parent_id: Optional[str] = None) -> None:
        """Replace the children of ``parent_id`` (or the roots) with ``forest``.

        Nodes whose id already existed under that parent keep their expansion
        state; expanded lazy nodes have their provider called again. The new
        subtree is built completely before it is swapped in, so a failing
        provider leaves the tree untouched.
        """
        if parent_id is not None and parent_id not in self._nodes:
            return

        previous = self._descendants(parent_id)
        built: Dict[str, MaterializedNode] = {}
        top_ids: List[str] = []

        def siblings_of(node: MaterializedNode) -> List[str]:
            parent = built.get(node.parent_id) if node.parent_id is not None else None
            return parent.child_ids if parent is not None else top_ids

        def drop(node_id: str) -> None:
            node = built.pop(node_id)
            for child_id in node.child_ids:
                if child_id in built:
                    drop(child_id)

        def build(layouts: Sequence[LayoutNode], under: Optional[str], into: List[str]) -> None:
            for layout in layouts or []:
                old = previous.get(layout.id)
                expanded = False
                if old is not None and old.expanded:
                    expanded = True
                elif layout.default_expand and self.expand_policy.poke(layout.default_expand):
                    expanded = True

                if isinstance(layout.children, LazyChildren):
                    children = layout.children() if expanded else []
                    if expanded:
                        self._debug_logger(f"TreeModel: loaded lazy children of {layout.id!r}")
                else:
                    children = layout.children or []

                # Duplicate ids: the later node replaces the earlier one.
                if layout.id in built:
                    earlier = built[layout.id]
                    siblings = siblings_of(earlier)
                    if layout.id in siblings:
                        siblings.remove(layout.id)
                    drop(layout.id)

                node = MaterializedNode.from_layout(layout, under, expanded)
                built[layout.id] = node
                into.append(layout.id)
                build(children, layout.id, node.child_ids)

        build(forest, parent_id, top_ids)

        # Commit
        for node_id in previous:
            self._nodes.pop(node_id, None)
        for node_id in built:
            if node_id in self._nodes:
                self._detach(node_id)
        self._nodes.update(built)
        if parent_id is None:
            self._root_ids = top_ids
        else:
            self._nodes[parent_id].child_ids = top_ids

    def load(self, node_id: str) -> bool:
        """Call the lazy provider of ``node_id`` and reconcile its children.

        Returns:
            True if the node is lazy and its children were reloaded
        """
        node = self._nodes.get(node_id)
        if node is None or node.getter is None:
            return False
        self._debug_logger(f"TreeModel: loading lazy children of {node_id!r}")
        self.reconcile(node.getter(), node_id)
        return True

    # --- Expansion --------------------------------------------------------

    def expand(self, node_id: str) -> bool:
        """Expand a node and auto-descend through single-child chains.

        A lazy node that was collapsed has its provider called before it is
        shown. If a provider raises, every node this call expanded is folded
        again and the exception propagates.

        Returns:
            True if any visible state changed
        """
        node = self._nodes.get(node_id)
        if node is None:
            return False

        changed: List[MaterializedNode] = []
        try:
            self._expand_one(node, changed)
            current = node
            while current.expanded and len(current.child_ids) == 1:
                current = self._nodes[current.child_ids[0]]
                self._expand_one(current, changed)
        except Exception:
            for expanded in changed:
                expanded.expanded = False
            raise
        return bool(changed)

    def collapse(self, node_id: str) -> bool:
        """Fold a node. Collapsing a collapsed node is a no-op.

        Returns:
            True if the node was expanded before the call
        """
        node = self._nodes.get(node_id)
        if node is None or not node.expanded:
            return False
        node.expanded = False
        return True

    def toggle(self, node_id: str) -> bool:
        node = self._nodes.get(node_id)
        if node is None:
            return False
        if node.expanded:
            return self.collapse(node_id)
        return self.expand(node_id)

    # --- Internal helpers -------------------------------------------------

    def _expand_one(self, node: MaterializedNode, changed: List[MaterializedNode]) -> None:
        if node.expanded:
            return
        if node.getter is not None:
            self.load(node.id)
            node = self._nodes[node.id]
        elif not node.has_children:
            return
        node.expanded = True
        changed.append(node)

    def _descendants(self, parent_id: Optional[str]) -> Dict[str, MaterializedNode]:
        found: Dict[str, MaterializedNode] = {}
        stack = list(self._root_ids if parent_id is None else self._nodes[parent_id].child_ids)
        while stack:
            node = self._nodes.get(stack.pop())
            if node is None or node.id in found:
                continue
            found[node.id] = node
            stack.extend(node.child_ids)
        return found

    def _detach(self, node_id: str) -> None:
        """Unlink a node living elsewhere in the tree before its id is reused."""
        node = self._nodes[node_id]
        if node.parent_id is None:
            siblings = self._root_ids
        else:
            parent = self._nodes.get(node.parent_id)
            siblings = parent.child_ids if parent is not None else []
        if node_id in siblings:
            siblings.remove(node_id)
        for child_id in list(self._descendants(node_id)):
            self._nodes.pop(child_id, None)
        self._nodes.pop(node_id, None)
