"""
Optimistic completion toggle for the todos shown on a plan card.

Each todo moves through IDLE -> PENDING -> COMMITTED | ROLLED_BACK: the local
flag flips immediately, one full-plan update is sent, and the previous todos
are restored if that update fails.
"""
from __future__ import annotations

import copy
import enum
import logging
from typing import Any, Dict, List, Optional

from ..client import PlansAPIError, PlansClient

logger = logging.getLogger(__name__)

TOGGLE_FAILED_MESSAGE = "Failed to update todo status"


class ToggleState(str, enum.Enum):
    IDLE = "idle"
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class PlanCardState:
    """Client-side state of one plan card."""

    def __init__(self, plan: Dict[str, Any]) -> None:
        self.plan = plan
        self.todos: List[Dict[str, Any]] = copy.deepcopy(plan.get("todos", []))
        self.states: Dict[str, ToggleState] = {t["id"]: ToggleState.IDLE for t in self.todos}
        self.updating = False
        self.last_error: Optional[str] = None

    def state_of(self, todo_id: str) -> ToggleState:
        return self.states.get(todo_id, ToggleState.IDLE)

    def _update_body(self) -> Dict[str, Any]:
        return {
            "title": self.plan.get("title"),
            "todos": [{"id": t["id"], "text": t["text"], "completed": t["completed"]} for t in self.todos],
            "notes": [{"id": n["id"], "text": n["text"]} for n in self.plan.get("notes", [])],
        }

    def toggle_todo(self, client: PlansClient, todo_id: str) -> ToggleState:
        """
        Flip a todo's completed flag and persist the whole plan.

        Ignored while another toggle on this card is in flight.
        """
        if self.updating:
            return self.state_of(todo_id)
        if todo_id not in self.states:
            raise KeyError(todo_id)

        previous = copy.deepcopy(self.todos)
        self.todos = [
            {**t, "completed": not t["completed"]} if t["id"] == todo_id else t for t in self.todos
        ]
        self.states[todo_id] = ToggleState.PENDING
        self.updating = True
        self.last_error = None
        try:
            updated = client.update_plan(self.plan["id"], self._update_body())
        except PlansAPIError as exc:
            logger.warning("Toggling todo %s failed, reverting: %s", todo_id, exc.message)
            self.todos = previous
            self.states[todo_id] = ToggleState.ROLLED_BACK
            self.last_error = TOGGLE_FAILED_MESSAGE
        else:
            self.plan = updated
            self.todos = copy.deepcopy(updated.get("todos", []))
            self.states[todo_id] = ToggleState.COMMITTED
        finally:
            self.updating = False
        return self.states[todo_id]
