from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# PUBLIC_INTERFACE
class TodoIn(BaseModel):
    """
    Incoming todo item. Only the minimal shape is kept; any other field the
    client sends is discarded.
    """

    id: Optional[str] = Field(default=None, description="Id of an already stored todo, if any")
    text: str = Field(..., description="Task text")
    completed: Optional[bool] = Field(default=None, description="Completion flag; false when absent")


# PUBLIC_INTERFACE
class NoteIn(BaseModel):
    """Incoming note item."""

    id: Optional[str] = Field(default=None, description="Id of an already stored note, if any")
    text: str = Field(..., description="Note text")


# PUBLIC_INTERFACE
class PlanCreate(BaseModel):
    """
    Normalized payload for creating a plan.

    Built by the validation module once every rule has passed; the create
    handler never parses request bodies into this model directly.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Groceries",
                "todos": [{"text": "Milk", "completed": False}],
                "notes": [{"text": "Check the discount aisle"}],
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Optional title, max 200 characters")
    todos: List[TodoIn] = Field(default_factory=list)
    notes: List[NoteIn] = Field(default_factory=list)


# PUBLIC_INTERFACE
class PlanUpdate(BaseModel):
    """
    Schema for updating an existing plan.
    Every field is optional; a field present in the request replaces the stored
    one wholesale, absent fields are left untouched.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Groceries for the week",
                "todos": [{"id": "6650c0ffee0000000000abcd", "text": "Milk", "completed": True}],
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Replacement title")
    todos: Optional[List[TodoIn]] = Field(default=None, description="Replacement todo list")
    notes: Optional[List[NoteIn]] = Field(default=None, description="Replacement note list")


class _Out(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# PUBLIC_INTERFACE
class TodoOut(_Out):
    """Todo item as returned by the API."""

    id: str
    text: str
    completed: bool
    created_at: datetime = Field(..., alias="createdAt")


# PUBLIC_INTERFACE
class NoteOut(_Out):
    """Note item as returned by the API."""

    id: str
    text: str
    created_at: datetime = Field(..., alias="createdAt")


# PUBLIC_INTERFACE
class PlanOut(_Out):
    """
    Schema returned by the API for a plan.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "6650c0ffee0000000000abcd",
                "title": "Groceries",
                "todos": [
                    {
                        "id": "6650c0ffee0000000000abce",
                        "text": "Milk",
                        "completed": False,
                        "createdAt": "2025-01-25T10:15:30.123456Z",
                    }
                ],
                "notes": [],
                "creationDate": "2025-01-25T10:15:30.123456Z",
            }
        },
    )

    id: str = Field(..., description="Unique identifier of the plan")
    title: Optional[str] = Field(default=None, description="Optional title")
    todos: List[TodoOut] = Field(default_factory=list)
    notes: List[NoteOut] = Field(default_factory=list)
    creation_date: datetime = Field(..., alias="creationDate", description="Creation timestamp")


# PUBLIC_INTERFACE
class DeleteOut(BaseModel):
    """Confirmation returned after deleting a plan."""

    message: str = Field(default="Plan deleted")
    id: str


class MessageOut(BaseModel):
    """Error body used for every non-2xx response."""

    message: str
