"""
Validation of candidate plan payloads.

``validate_plan`` is a pure function: it inspects an arbitrary decoded JSON
value and returns every rule violation it finds as a human-readable string.
``check_plan`` wraps it into a typed result carrying either the normalized
``PlanCreate`` or the error list, so callers never deal with exceptions.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from .schemas import NoteIn, PlanCreate, TodoIn
from .utils import text_length

TITLE_MAX_LENGTH = 200
TODO_TEXT_MAX_LENGTH = 150
NOTE_TEXT_MAX_LENGTH = 300


def _text_errors(item: Any, label: str, idx: int, max_length: int) -> List[str]:
    errors: List[str] = []
    text = item.get("text") if isinstance(item, dict) else None
    if not isinstance(text, str) or not text.strip():
        errors.append(f"{label} {idx} must have non-empty text")
    if isinstance(text, str) and text_length(text) > max_length:
        errors.append(f"{label} {idx} text must be max {max_length} characters")
    return errors


def _is_unset(value: Any) -> bool:
    # Falsy JSON scalars count as "no title"; empty arrays and objects do not.
    if value is None or value is False or value == "":
        return True
    return isinstance(value, (int, float)) and value == 0


# PUBLIC_INTERFACE
def validate_plan(payload: Any) -> List[str]:
    """
    Return the list of validation errors for a candidate plan (empty when valid).

    Rules are checked independently and all violations are collected:
    - title, if given, is a string of at most 200 characters
    - todos is a list; each todo has non-empty text of at most 150 characters
      and a boolean ``completed`` when present
    - notes is a list; each note has non-empty text of at most 300 characters
    - at least one todo or note is present
    """
    if not isinstance(payload, dict):
        return ["Plan must be an object"]

    errors: List[str] = []

    title = payload.get("title")
    if not _is_unset(title) and (not isinstance(title, str) or text_length(title) > TITLE_MAX_LENGTH):
        errors.append(f"Title must be a string with max {TITLE_MAX_LENGTH} characters")

    todos = payload.get("todos")
    if not isinstance(todos, list):
        errors.append("Todos must be an array")
    else:
        for idx, todo in enumerate(todos):
            errors.extend(_text_errors(todo, "Todo", idx, TODO_TEXT_MAX_LENGTH))
            if isinstance(todo, dict) and "completed" in todo and not isinstance(todo["completed"], bool):
                errors.append(f"Todo {idx} completed must be boolean")

    notes = payload.get("notes")
    if not isinstance(notes, list):
        errors.append("Notes must be an array")
    else:
        for idx, note in enumerate(notes):
            errors.extend(_text_errors(note, "Note", idx, NOTE_TEXT_MAX_LENGTH))

    if isinstance(todos, list) and isinstance(notes, list) and not todos and not notes:
        errors.append("Plan must have at least one todo or note")

    return errors


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of ``check_plan``: a normalized plan or the collected errors."""

    plan: Optional[PlanCreate] = None
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.plan is not None and not self.errors

    @property
    def message(self) -> str:
        return "; ".join(self.errors)


# PUBLIC_INTERFACE
def check_plan(payload: Any) -> ValidationResult:
    """
    Validate a candidate plan and, when valid, normalize it into a PlanCreate.

    Normalization keeps only ``text`` (and ``completed`` for todos, defaulting
    to False) from each item; an empty title becomes None.
    """
    errors = validate_plan(payload)
    if errors:
        return ValidationResult(errors=errors)

    plan = PlanCreate(
        title=None if _is_unset(payload.get("title")) else payload["title"],
        todos=[TodoIn(text=t["text"], completed=bool(t.get("completed", False))) for t in payload["todos"]],
        notes=[NoteIn(text=n["text"]) for n in payload["notes"]],
    )
    return ValidationResult(plan=plan)
