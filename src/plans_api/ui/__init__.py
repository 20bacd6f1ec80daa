"""Client-side state for the plans UI: creation draft, card toggles, grid rendering."""

from .board import PlansBoard  # noqa: F401
from .card import PlanCardState, ToggleState  # noqa: F401
from .draft import PlanDraft  # noqa: F401
from .grid import render_card, render_grid  # noqa: F401
