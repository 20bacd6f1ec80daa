"""
Local state of the plan creation form.

New items stay in memory with ``Pending`` ids until ``save`` issues a single
create call. A draft opened from a stored plan keeps ``Persisted`` ids and
saves through one update call instead.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..client import PlansAPIError, PlansClient
from ..identifiers import ItemId, Pending, Persisted, wire_id
from ..utils import text_length
from ..validation import NOTE_TEXT_MAX_LENGTH, TODO_TEXT_MAX_LENGTH

logger = logging.getLogger(__name__)

# The form caps the title input shorter than the server allows.
TITLE_INPUT_MAX_LENGTH = 100

EMPTY_DRAFT_MESSAGE = "Please add at least one todo or note"
CREATE_FAILED_MESSAGE = "Failed to create plan. Please try again."
SAVE_FAILED_MESSAGE = "Failed to update plan. Please try again."


def cap_input(text: str, limit: int) -> str:
    """Cap typed text at limit characters."""
    return text[:limit]


@dataclass
class DraftTodo:
    id: ItemId
    text: str
    completed: bool = False


@dataclass
class DraftNote:
    id: ItemId
    text: str


@dataclass
class PlanDraft:
    title: str = ""
    todo_text: str = ""
    note_text: str = ""
    todos: List[DraftTodo] = field(default_factory=list)
    notes: List[DraftNote] = field(default_factory=list)
    last_error: Optional[str] = None
    plan_id: Optional[str] = None

    @classmethod
    def from_plan(cls, plan: Dict[str, Any]) -> "PlanDraft":
        """Start a draft from a stored plan; its items keep their Persisted ids."""
        return cls(
            title=plan.get("title") or "",
            todos=[DraftTodo(Persisted(t["id"]), t["text"], bool(t["completed"])) for t in plan.get("todos", [])],
            notes=[DraftNote(Persisted(n["id"]), n["text"]) for n in plan.get("notes", [])],
            plan_id=plan["id"],
        )

    def set_title(self, value: str) -> None:
        self.title = cap_input(value, TITLE_INPUT_MAX_LENGTH)

    def set_todo_text(self, value: str) -> None:
        self.todo_text = cap_input(value, TODO_TEXT_MAX_LENGTH)

    def set_note_text(self, value: str) -> None:
        self.note_text = cap_input(value, NOTE_TEXT_MAX_LENGTH)

    def add_todo(self, text: Optional[str] = None) -> Optional[DraftTodo]:
        """
        Append a todo from text, or from the typed todo input when text is None.
        Blank or over-long text is ignored and None returned.
        """
        from_input = text is None
        trimmed = (self.todo_text if from_input else text).strip()
        if not trimmed or text_length(trimmed) > TODO_TEXT_MAX_LENGTH:
            return None
        todo = DraftTodo(id=Pending.new(), text=trimmed)
        self.todos.append(todo)
        if from_input:
            self.todo_text = ""
        return todo

    def add_note(self, text: Optional[str] = None) -> Optional[DraftNote]:
        from_input = text is None
        trimmed = (self.note_text if from_input else text).strip()
        if not trimmed or text_length(trimmed) > NOTE_TEXT_MAX_LENGTH:
            return None
        note = DraftNote(id=Pending.new(), text=trimmed)
        self.notes.append(note)
        if from_input:
            self.note_text = ""
        return note

    def remove_todo(self, item_id: ItemId) -> None:
        self.todos = [t for t in self.todos if t.id != item_id]

    def toggle_todo(self, item_id: ItemId) -> None:
        for todo in self.todos:
            if todo.id == item_id:
                todo.completed = not todo.completed

    def remove_note(self, item_id: ItemId) -> None:
        self.notes = [n for n in self.notes if n.id != item_id]

    @property
    def can_save(self) -> bool:
        return bool(self.todos or self.notes)

    def to_payload(self) -> Dict[str, Any]:
        """Request body; pending ids never leave the client, persisted ids are kept."""

        def _item(item_id: ItemId, body: Dict[str, Any]) -> Dict[str, Any]:
            store_id = wire_id(item_id)
            return body if store_id is None else {"id": store_id, **body}

        return {
            "title": self.title.strip() or None,
            "todos": [_item(t.id, {"text": t.text, "completed": t.completed}) for t in self.todos],
            "notes": [_item(n.id, {"text": n.text}) for n in self.notes],
        }

    def reset(self) -> None:
        self.title = ""
        self.todo_text = ""
        self.note_text = ""
        self.todos = []
        self.notes = []
        self.last_error = None
        self.plan_id = None

    def save(self, client: PlansClient) -> Optional[Dict[str, Any]]:
        """
        Send the draft with one API call (create, or update when editing a
        stored plan) and clear it.

        Returns the saved plan, or None when nothing was sent or the call
        failed; last_error then holds the message to show and the draft is
        left as it was.
        """
        if not self.can_save:
            self.last_error = EMPTY_DRAFT_MESSAGE
            return None
        try:
            if self.plan_id is None:
                saved = client.create_plan(self.to_payload())
            else:
                saved = client.update_plan(self.plan_id, self.to_payload())
        except PlansAPIError as exc:
            logger.warning("Saving plan failed: %s", exc.message)
            self.last_error = SAVE_FAILED_MESSAGE if self.plan_id else CREATE_FAILED_MESSAGE
            return None
        self.reset()
        return saved
