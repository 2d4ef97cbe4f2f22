"""Scratchpad notes - the editor section of the drawer.

An in-memory note store that lays itself out as the ``scratchpads`` section.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Dict, List, Optional

from .shell.layout import Action, Continuation, LayoutNode


@dataclass
class Note:
    id: str
    name: str
    content: str = ""


class NotesProvider:
    """Scratchpad notes with create/duplicate/remove actions."""

    ROOT_ID = "scratchpads"
    ADD_ID = "scratchpads_add"
    EXPAND_KEY = "scratchpads_expand_once_id"

    def __init__(self) -> None:
        self.notes: Dict[str, Note] = {}
        self.current: Optional[str] = None
        self._ids = itertools.count(1)

    def create_note(self, name: str) -> Note:
        if any(note.name == name for note in self.notes.values()):
            raise ValueError(f"note {name!r} already exists")
        note = Note(id=f"scratch_{next(self._ids)}", name=name)
        self.notes[note.id] = note
        if self.current is None:
            self.current = note.id
        return note

    def remove_note(self, note_id: str) -> None:
        if note_id not in self.notes:
            raise KeyError(f"unknown note: {note_id}")
        del self.notes[note_id]
        if self.current == note_id:
            self.current = next(iter(self.notes), None)

    def set_current(self, note_id: str) -> None:
        if note_id not in self.notes:
            raise KeyError(f"unknown note: {note_id}")
        self.current = note_id

    def next_free_name(self, base: str = "note") -> str:
        taken = {note.name for note in self.notes.values()}
        for n in itertools.count(1):
            name = f"{base}-{n}"
            if name not in taken:
                return name
        raise AssertionError("unreachable")

    def active_ids(self) -> List[str]:
        return [self.current] if self.current else []

    # --- Layout -----------------------------------------------------------

    def layout(self) -> List[LayoutNode]:
        def add(done: Continuation) -> None:
            self.create_note(self.next_free_name())
            done()

        children = [LayoutNode(id=self.ADD_ID, name="new", type="add", action_1=Action(add))]
        children.extend(self._note_node(note) for note in self.notes.values())

        return [
            LayoutNode(
                id=self.ROOT_ID,
                name="scratchpads",
                default_expand=self.EXPAND_KEY,
                children=children,
            )
        ]

    def _note_node(self, note: Note) -> LayoutNode:
        note_id = note.id

        def activate(done: Continuation) -> None:
            self.set_current(note_id)
            done()

        def duplicate(done: Continuation) -> None:
            copy = self.create_note(self.next_free_name(f"{self.notes[note_id].name} copy"))
            copy.content = self.notes[note_id].content
            done()

        def remove(done: Continuation, selection: Optional[str]) -> None:
            if selection == "Yes":
                self.remove_note(note_id)
            done()

        return LayoutNode(
            id=note_id,
            name=note.name,
            type="scratch",
            pick_title=f"Remove note {note.name!r}?",
            pick_items=["Yes", "No"],
            action_1=Action(activate),
            action_2=Action(duplicate),
            action_3=Action(remove, wants_selection=True),
        )
