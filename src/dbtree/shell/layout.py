"""Declarative layout nodes handed to the drawer by layout providers.

A provider describes its part of the forest with ``LayoutNode`` objects on
every refresh. The tree model materializes them and keeps per-id state
(expansion) across refreshes, so providers never have to remember what the
user opened.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import (
    Callable,
    Dict,
    List,
    Optional,
    Protocol,
    Sequence,
    Union,
    runtime_checkable,
)


Continuation = Callable[[], None]
"""Callback an action calls once its (possibly async) work has completed."""


@runtime_checkable
class LayoutProvider(Protocol):
    """Protocol for anything that contributes a section to the drawer.

    ``layout()`` is called synchronously on every refresh and must return
    promptly. Expensive work belongs in lazy children.
    """

    def layout(self) -> List["LayoutNode"]:
        ...


@dataclass(frozen=True)
class LazyChildren:
    """Children produced on demand by a zero-argument provider."""

    load: Callable[[], Sequence["LayoutNode"]]

    def __call__(self) -> List["LayoutNode"]:
        return list(self.load() or [])


@dataclass(frozen=True)
class Action:
    """A node-scoped operation bound to one of the three action slots.

    Args:
        handler: ``handler(done)`` or, when ``wants_selection`` is set,
            ``handler(done, selection)``
        wants_selection: Whether the handler takes the picked item
    """

    handler: Callable[..., None]
    wants_selection: bool = False

    @classmethod
    def from_callable(cls, func: Callable[..., None]) -> "Action":
        """Bind a plain callable, resolving its selection capability once.

        A callable that declares a second positional parameter (or ``*args``)
        is treated as wanting the selection.
        """
        try:
            params = list(inspect.signature(func).parameters.values())
        except (TypeError, ValueError):
            return cls(func)

        positional = 0
        for param in params:
            if param.kind is inspect.Parameter.VAR_POSITIONAL:
                return cls(func, wants_selection=True)
            if param.kind in (
                inspect.Parameter.POSITIONAL_ONLY,
                inspect.Parameter.POSITIONAL_OR_KEYWORD,
            ):
                positional += 1
        return cls(func, wants_selection=positional > 1)

    def invoke_with_selection(self, done: Continuation, selection: Optional[str]) -> None:
        self.handler(done, selection)

    def invoke_without_selection(self, done: Continuation) -> None:
        if self.wants_selection:
            self.handler(done, None)
        else:
            self.handler(done)


ActionLike = Union[Action, Callable[..., None], None]
ChildrenLike = Union[Sequence["LayoutNode"], LazyChildren, Callable[[], Sequence["LayoutNode"]], None]
PickItems = Union[Sequence[str], Callable[[], Sequence[str]], None]


def _bind_action(value: object) -> Optional[Action]:
    if isinstance(value, Action):
        return value
    if callable(value):
        return Action.from_callable(value)
    # Non-callable slots are skipped.
    return None


@dataclass
class LayoutNode:
    """One entry of the forest a provider returns.

    ``children`` is either a static list or a ``LazyChildren`` provider; a
    bare callable is wrapped on construction. ``default_expand`` is the key
    of a one-shot auto-expand flag (see ``ExpandOncePolicy``).
    """

    id: str
    name: str
    type: str = ""
    schema: Optional[str] = None
    database: Optional[str] = None
    children: ChildrenLike = None
    pick_title: Optional[str] = None
    pick_items: PickItems = None
    action_1: ActionLike = None
    action_2: ActionLike = None
    action_3: ActionLike = None
    default_expand: Optional[str] = None

    def __post_init__(self) -> None:
        self.name = str(self.name).replace("\n", " ")
        self.type = self.type or ""

        if isinstance(self.children, LazyChildren):
            pass
        elif callable(self.children):
            self.children = LazyChildren(self.children)
        elif self.children is None:
            self.children = []
        else:
            self.children = list(self.children)

        self.action_1 = _bind_action(self.action_1)
        self.action_2 = _bind_action(self.action_2)
        self.action_3 = _bind_action(self.action_3)

    @property
    def is_lazy(self) -> bool:
        return isinstance(self.children, LazyChildren)

    def action(self, slot: int) -> Optional[Action]:
        """Return the action bound to slot 1, 2 or 3 (``None`` if unset)."""
        return {1: self.action_1, 2: self.action_2, 3: self.action_3}.get(slot)


def resolve_pick_items(items: PickItems) -> Optional[List[str]]:
    """Materialize pick items, calling the provider form if needed."""
    if items is None:
        return None
    if callable(items):
        items = items()
    return [str(item) for item in (items or [])]


@dataclass
class ExpandOncePolicy:
    """Registry of one-shot auto-expand flags keyed by string.

    ``poke(key)`` answers ``True`` the first time a key is seen and ``False``
    forever after, no matter how many refreshes query it.
    """

    consumed: Dict[str, bool] = field(default_factory=dict)

    def poke(self, key: str) -> bool:
        if self.consumed.get(key):
            return False
        self.consumed[key] = True
        return True

    def peek(self, key: str) -> bool:
        """Return whether ``poke(key)`` would still fire, without consuming it."""
        return not self.consumed.get(key, False)

    def reset(self) -> None:
        self.consumed.clear()
