"""DetailView - the right-hand panel: status line over a text or table body.

Query results render as a ``DataTable``; logs and messages render as plain
text. Only one of the two bodies is displayed at a time.
"""

from typing import Any, Optional, Sequence

from textual.app import ComposeResult
from textual.containers import Vertical, VerticalScroll
from textual.widgets import DataTable, Static


class DetailView(Vertical):
    """Status line on top, text or result table below.

    Usage:
        detail = DetailView(initial_status="Ready")
        detail.update_status("Result  |  SELECT 1")
        detail.show_table(["n"], [[1]])
        detail.show_text(log_manager.text("errors"))
    """

    def __init__(self, initial_status: str = "Ready", **kwargs):
        kwargs.setdefault("id", "detail")
        super().__init__(**kwargs)
        self._initial_status = initial_status

        self.status_line: Optional[Static] = None
        self.text_scroll: Optional[VerticalScroll] = None
        self.body: Optional[Static] = None
        self.table: Optional[DataTable] = None
        self.shown_text = ""

    def compose(self) -> ComposeResult:
        self.status_line = Static(self._initial_status, id="title")
        yield self.status_line

        self.text_scroll = VerticalScroll(id="detail-scroll")
        with self.text_scroll:
            self.body = Static("", id="detail-body", markup=False)
            yield self.body

        self.table = DataTable(id="detail-table", zebra_stripes=True)
        self.table.display = False
        yield self.table

    def update_status(self, text: str) -> None:
        if self.status_line:
            self.status_line.update(text)

    def show_text(self, text: str) -> None:
        if self.body is None or self.text_scroll is None or self.table is None:
            return
        self.body.update(text)
        self.shown_text = text
        self.table.display = False
        self.text_scroll.display = True

    def show_table(self, columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
        if self.table is None or self.text_scroll is None:
            return
        self.table.clear(columns=True)
        self.table.add_columns(*(str(column) for column in columns))
        self.table.add_rows([[str(value) for value in row] for row in rows])
        self.text_scroll.display = False
        self.table.display = True
