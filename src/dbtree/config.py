"""Configuration models for the drawer and the host app.

Everything is a pydantic model so a JSON config file validates on load and
the defaults live in one place.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field


BINDABLE_ACTIONS = (
    "refresh",
    "action_1",
    "action_2",
    "action_3",
    "expand",
    "collapse",
    "toggle",
)


class KeyMapping(BaseModel):
    """Key specification: a Textual key name plus an interaction mode."""

    key: str
    mode: str = "n"


class Candy(BaseModel):
    """Eye candy for one node type."""

    icon: str = ""
    icon_highlight: str = ""
    text_highlight: str = ""


def default_mappings() -> Dict[str, KeyMapping]:
    return {
        "refresh": KeyMapping(key="r"),
        "action_1": KeyMapping(key="enter"),
        "action_2": KeyMapping(key="w"),
        "action_3": KeyMapping(key="d"),
        "collapse": KeyMapping(key="c"),
        "expand": KeyMapping(key="e"),
        "toggle": KeyMapping(key="o"),
    }


def default_candies() -> Dict[str, Candy]:
    return {
        "history": Candy(icon="◷", icon_highlight="magenta"),
        "scratch": Candy(icon="✎", icon_highlight="yellow"),
        "database_switch": Candy(icon="⇄", icon_highlight="yellow"),
        "table": Candy(icon="▦", icon_highlight="cyan"),
        "connection": Candy(icon="⛁", icon_highlight="bold green"),
        "add": Candy(icon="+", icon_highlight="green", text_highlight="green"),
        "edit": Candy(icon="~", icon_highlight="yellow", text_highlight="yellow"),
        "remove": Candy(icon="-", icon_highlight="red", text_highlight="red"),
        "help": Candy(icon="?", icon_highlight="blue", text_highlight="dim"),
        "source": Candy(icon="◆", icon_highlight="magenta"),
        "none_dir": Candy(icon="▸", icon_highlight="dim"),
        "node_expanded": Candy(icon="▾", icon_highlight="dim"),
        "node_closed": Candy(icon="▸", icon_highlight="dim"),
    }


class DrawerConfig(BaseModel):
    """Drawer options: key mappings, theme and the help section switch."""

    mappings: Dict[str, KeyMapping] = Field(default_factory=default_mappings)
    candies: Dict[str, Candy] = Field(default_factory=default_candies)
    disable_candies: bool = False
    disable_help: bool = False

    def effective_candies(self) -> Dict[str, Candy]:
        if self.disable_candies:
            return {}
        return dict(self.candies)

    def bound_mappings(self) -> Dict[str, KeyMapping]:
        """Mappings for actions the drawer knows how to wire."""
        return {name: m for name, m in self.mappings.items() if name in BINDABLE_ACTIONS}


class ConnectionSpec(BaseModel):
    """A connection as configured by the user (before it gets an id)."""

    url: Optional[str] = None
    type: Optional[str] = None
    name: Optional[str] = None


class AppConfig(BaseModel):
    backend_url: str = "http://localhost:8766"
    drawer: DrawerConfig = Field(default_factory=DrawerConfig)
    connections: List[ConnectionSpec] = Field(default_factory=list)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "AppConfig":
        """Load a JSON config file; a missing path yields the defaults."""
        if path is None:
            return cls()
        config_path = Path(path).expanduser()
        if not config_path.exists():
            return cls()
        return cls.model_validate_json(config_path.read_text(encoding="utf-8"))
