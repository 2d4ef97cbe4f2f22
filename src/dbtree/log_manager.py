from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, List


CATEGORIES = ("events", "errors", "debug", "output")

Listener = Callable[[str], None]


@dataclass
class LogManager:
    """Line-buffered drawer log by category.

    Categories: events (dispatched actions), errors, debug (refreshes and
    lazy loads), output (query results). Listeners are told which category
    received lines so a view showing it can repaint.
    """

    max_lines: int = 2000
    buffers: Dict[str, Deque[str]] = field(default_factory=dict)
    listeners: List[Listener] = field(default_factory=list)

    def __post_init__(self) -> None:
        for name in CATEGORIES:
            self.buffers[name] = deque(maxlen=self.max_lines)

    def add(self, category: str, message: str) -> None:
        buf = self.buffers.setdefault(category, deque(maxlen=self.max_lines))
        buf.extend(message.splitlines() or [message])
        for listener in list(self.listeners):
            listener(category)

    def subscribe(self, listener: Listener) -> None:
        self.listeners.append(listener)

    def text(self, category: str) -> str:
        return "\n".join(self.buffers.get(category) or ())

    def lines(self, category: str) -> List[str]:
        return list(self.buffers.get(category) or [])

    def clear(self, category: str) -> None:
        if category in self.buffers:
            self.buffers[category].clear()

    def logger(self, category: str) -> Callable[[str], None]:
        """Return a one-argument callback writing to ``category``."""
        return lambda message: self.add(category, message)
