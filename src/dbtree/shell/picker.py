"""Selection prompt - a modal list the user picks one string from."""

from typing import Callable, List, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import OptionList, Static


class PickerScreen(ModalScreen[Optional[str]]):
    """Modal picker. Dismisses with the chosen item, or ``None`` on escape."""

    DEFAULT_CSS = """
    PickerScreen {
        align: center middle;
    }
    #picker {
        width: 50;
        height: auto;
        max-height: 20;
        border: round $accent;
        background: $panel;
    }
    #picker-title {
        padding: 0 1;
        text-style: bold;
    }
    """

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, items: List[str], title: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.items = list(items)
        self.picker_title = title or "Select"

    def compose(self) -> ComposeResult:
        with Vertical(id="picker"):
            yield Static(self.picker_title, id="picker-title")
            yield OptionList(*self.items, id="picker-options")

    def on_mount(self) -> None:
        self.query_one("#picker-options", OptionList).focus()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        self.dismiss(self.items[event.option_index])

    def action_cancel(self) -> None:
        self.dismiss(None)


class PickerPrompt:
    """Opens a ``PickerScreen`` on ``app`` and forwards the choice.

    Dismissal never calls ``on_choice``.
    """

    def __init__(self, app: App):
        self.app = app

    def open(
        self,
        items: List[str],
        on_choice: Callable[[str], None],
        title: Optional[str] = None,
    ) -> None:
        def _chosen(selection: Optional[str]) -> None:
            if selection is None:
                return
            on_choice(selection)

        self.app.push_screen(PickerScreen(items, title), _chosen)
