"""dbtree shell - tree synchronization, action dispatch and the Textual host.

Core Components
---------------
- **LayoutNode / LazyChildren / Action**: declarative forest entries
- **ExpandOncePolicy**: one-shot auto-expand registry
- **TreeModel**: materialized tree, reconciled by node id
- **ActionDispatcher**: key -> node action routing with optional picking
- **LineRenderer**: themed display lines
- **NavigationTree / SelectionPrompt / DrawerShell**: Textual host pieces
"""

from .actions import ActionDispatcher, SelectionPrompt
from .base_shell import DrawerShell, NavigationProvider
from .detail_view import DetailView
from .layout import (
    Action,
    ExpandOncePolicy,
    LayoutNode,
    LayoutProvider,
    LazyChildren,
    resolve_pick_items,
)
from .navigation_tree import NavigationTree
from .picker import PickerPrompt, PickerScreen
from .renderer import LineRenderer
from .tree_model import MaterializedNode, TreeModel

__all__ = [
    "Action",
    "ActionDispatcher",
    "DetailView",
    "DrawerShell",
    "ExpandOncePolicy",
    "LayoutNode",
    "LayoutProvider",
    "LazyChildren",
    "LineRenderer",
    "MaterializedNode",
    "NavigationProvider",
    "NavigationTree",
    "PickerPrompt",
    "PickerScreen",
    "SelectionPrompt",
    "TreeModel",
    "resolve_pick_items",
]
