from __future__ import annotations

from datetime import datetime
from typing import List, Optional, TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A checkable task nested in a plan.

    Fields:
    - id: Identifier unique within the plan
    - text: Task text (1..150 chars after trimming, checked on create)
    - completed: Completion flag
    - created_at: Timestamp set when the item was inserted
    """

    id: str
    text: str
    completed: bool
    created_at: datetime


# PUBLIC_INTERFACE
class NoteEntity(TypedDict):
    """A free-text annotation nested in a plan (1..300 chars, checked on create)."""

    id: str
    text: str
    created_at: datetime


# PUBLIC_INTERFACE
class PlanEntity(TypedDict):
    """
    A plan document as held by the store.

    Fields:
    - id: Store-assigned identifier
    - title: Optional title (max 200 chars)
    - todos: Ordered todo items
    - notes: Ordered note items
    - creation_date: Set once on creation, never changed afterwards
    """

    id: str
    title: Optional[str]
    todos: List[TodoEntity]
    notes: List[NoteEntity]
    creation_date: datetime
