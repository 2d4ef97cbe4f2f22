"""DrawerShell - the Textual application frame around the drawer.

Layout:
- Sidebar: brand, the navigation tree (the drawer surface), key hints
- Detail view: status line over a text or result-table body

Apps subclass ``DrawerShell`` and implement ``NavigationProvider`` to attach
a drawer to the sidebar tree once it is mounted.
"""

from typing import Any, Protocol, Sequence, runtime_checkable

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer, Header, Static

from .detail_view import DetailView
from .navigation_tree import NavigationTree


@runtime_checkable
class NavigationProvider(Protocol):
    """Protocol for apps that attach a drawer to the navigation tree."""

    def build_navigation(self, tree: NavigationTree) -> None:
        """Wire the drawer onto ``tree`` and open it.

        Args:
            tree: The mounted NavigationTree acting as drawer surface
        """
        ...


class DrawerShell(App):
    """Sidebar + detail frame with CSS-class themes on F1/F2/F3.

    ``plain`` is the low-decoration theme; subclasses react to theme changes
    in ``theme_switched`` (the drawer app drops its node icons there).
    """

    THEMES = ("night", "paper", "plain")
    DEFAULT_THEME = "night"

    DEFAULT_CSS = """
    #sidebar {
        width: 44;
        border-right: solid $primary;
    }
    #brand {
        padding: 0 1;
        text-style: bold;
    }
    #hint {
        padding: 0 1;
        color: $text-muted;
    }
    #nav-tree {
        height: 1fr;
    }
    #title {
        padding: 0 1;
        background: $boost;
    }
    #detail-table {
        height: 1fr;
    }
    .theme-paper #title {
        background: $primary-darken-2;
    }
    .theme-plain #sidebar {
        border-right: none;
    }
    """

    BINDINGS = [
        Binding(f"f{index}", f"switch_theme('{name}')", f"{name.title()} theme")
        for index, name in enumerate(THEMES, start=1)
    ] + [Binding("ctrl+q", "quit", "Quit")]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.active_theme = self.DEFAULT_THEME
        self.nav_tree: NavigationTree | None = None
        self.detail_view: DetailView | None = None
        self._navigation_built = False

    def compose(self) -> ComposeResult:
        yield Header(id="header")
        with Horizontal(id="body"):
            with Vertical(id="sidebar"):
                yield Static(self.get_brand_text(), id="brand")
                self.nav_tree = NavigationTree("Drawer", id="nav-tree")
                yield self.nav_tree
                yield Static(self.get_hint_text(), id="hint")
            self.detail_view = DetailView(initial_status=self.get_initial_status())
            yield self.detail_view
        yield Footer(id="footer")

    async def on_mount(self) -> None:
        self.add_class(f"theme-{self.active_theme}")

        # Build the drawer once.
        if self._navigation_built or self.nav_tree is None:
            return
        if isinstance(self, NavigationProvider):
            self._navigation_built = True
            self.build_navigation(self.nav_tree)
            self.nav_tree.focus()

    def get_brand_text(self) -> str:
        return "dbtree"

    def get_hint_text(self) -> str:
        return " • ".join(f"F{i}: {name.title()}" for i, name in enumerate(self.THEMES, start=1))

    def get_initial_status(self) -> str:
        return "Ready"

    def action_switch_theme(self, theme_name: str) -> None:
        """Swap the theme CSS class.

        Args:
            theme_name: One of ``THEMES``; anything else is ignored
        """
        if theme_name not in self.THEMES or theme_name == self.active_theme:
            return
        self.remove_class(f"theme-{self.active_theme}")
        self.active_theme = theme_name
        self.add_class(f"theme-{theme_name}")
        self.theme_switched(theme_name)

    def theme_switched(self, theme_name: str) -> None:
        pass

    def update_status(self, text: str) -> None:
        if self.detail_view:
            self.detail_view.update_status(text)

    def show_detail(self, text: str) -> None:
        if self.detail_view:
            self.detail_view.show_text(text)

    def show_table(self, columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
        if self.detail_view:
            self.detail_view.show_table(columns, rows)
