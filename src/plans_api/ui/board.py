from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..client import PlansAPIError, PlansClient
from .card import PlanCardState
from .draft import PlanDraft
from .grid import render_grid

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load plans. Please try again."
DELETE_FAILED_MESSAGE = "Failed to delete plan. Please try again."


class PlansBoard:
    """
    Page-level state: the loaded plans, one card state per plan and the error
    banner. Failed calls set ``error`` and leave the plans unchanged.
    """

    def __init__(self, client: PlansClient) -> None:
        self.client = client
        self.plans: List[Dict[str, Any]] = []
        self.cards: Dict[str, PlanCardState] = {}
        self.error: Optional[str] = None

    def load(self) -> bool:
        self.error = None
        try:
            plans = self.client.get_plans()
        except PlansAPIError as exc:
            logger.warning("Loading plans failed: %s", exc.message)
            self.error = LOAD_FAILED_MESSAGE
            return False
        self.plans = plans
        self.cards = {p["id"]: PlanCardState(p) for p in plans}
        return True

    def save(self, draft: PlanDraft) -> Optional[Dict[str, Any]]:
        """Save the draft; a new plan goes first, an edited one stays in place."""
        self.error = None
        saved = draft.save(self.client)
        if saved is None:
            self.error = draft.last_error
            return None
        if saved["id"] in self.cards:
            self.plans = [saved if p["id"] == saved["id"] else p for p in self.plans]
        else:
            self.plans = [saved, *self.plans]
        self.cards[saved["id"]] = PlanCardState(saved)
        return saved

    def delete(self, plan_id: str) -> bool:
        self.error = None
        try:
            self.client.delete_plan(plan_id)
        except PlansAPIError as exc:
            logger.warning("Deleting plan %s failed: %s", plan_id, exc.message)
            self.error = DELETE_FAILED_MESSAGE
            return False
        self.plans = [p for p in self.plans if p["id"] != plan_id]
        self.cards.pop(plan_id, None)
        return True

    def render(self) -> str:
        cards = [self.cards[p["id"]] for p in self.plans]
        return render_grid([{**card.plan, "todos": card.todos} for card in cards])
