"""Pure rendering of plan cards and the plans grid."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from pydantic import TypeAdapter

PREVIEW_ITEMS = 2
EMPTY_STATE = "No plans yet\nClick the + button to create your first plan"

_datetime = TypeAdapter(datetime)


def format_date(value: Any) -> str:
    """Format a timestamp like 'Jan 25, 2025, 10:15 AM'."""
    dt = _datetime.validate_python(value)
    return f"{dt:%b} {dt.day}, {dt:%Y}, {dt:%I:%M %p}"


@dataclass(frozen=True)
class CardView:
    title: Optional[str]
    created: str
    todos: List[str]
    more_todos: int
    notes_preview: str
    more_notes: int


def card_view(plan: Dict[str, Any], todos: Optional[Sequence[Dict[str, Any]]] = None) -> CardView:
    """
    Build what a card shows: the first two todos, the first two notes joined
    with ', ', and how many of each are hidden.
    """
    todos = list(plan.get("todos", []) if todos is None else todos)
    notes = plan.get("notes", [])
    return CardView(
        title=plan.get("title") or None,
        created=format_date(plan["creationDate"]),
        todos=[f"[{'x' if t['completed'] else ' '}] {t['text']}" for t in todos[:PREVIEW_ITEMS]],
        more_todos=max(len(todos) - PREVIEW_ITEMS, 0),
        notes_preview=", ".join(n["text"] for n in notes[:PREVIEW_ITEMS]),
        more_notes=max(len(notes) - PREVIEW_ITEMS, 0),
    )


def render_card(plan: Dict[str, Any], todos: Optional[Sequence[Dict[str, Any]]] = None) -> str:
    view = card_view(plan, todos)
    lines: List[str] = []
    if view.title:
        lines.append(view.title)
    lines.append(view.created)
    if view.todos:
        lines.append("Todos")
        lines.extend(view.todos)
        if view.more_todos:
            lines.append(f"+{view.more_todos} more")
    if view.notes_preview:
        lines.append("Notes")
        lines.append(view.notes_preview)
        if view.more_notes:
            lines.append(f"+{view.more_notes} more")
    return "\n".join(lines)


def render_grid(plans: Sequence[Dict[str, Any]]) -> str:
    if not plans:
        return EMPTY_STATE
    return "\n\n".join(render_card(p) for p in plans)
