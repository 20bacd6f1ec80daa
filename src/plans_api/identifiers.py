"""
Tagged identifiers for todo/note items.

Items built on the client before the first save carry a ``Pending`` id that
never leaves the process. Items returned by the API carry a ``Persisted`` id
assigned by the store. Store writes only ever see persisted ids; everything
else is treated as a new item.
"""
from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any, Collection, Optional, Union

from .utils import is_valid_object_id

_local_ids = itertools.count(1)


@dataclass(frozen=True)
class Pending:
    """Client-local temporary id."""

    local_id: int

    @classmethod
    def new(cls) -> "Pending":
        return cls(next(_local_ids))


@dataclass(frozen=True)
class Persisted:
    """Id assigned by the store."""

    store_id: str


ItemId = Union[Pending, Persisted]


# PUBLIC_INTERFACE
def resolve_item_id(raw: Any, known: Collection[str]) -> Optional[Persisted]:
    """
    Resolve a client-supplied item id against the ids already stored in a plan.

    Returns a Persisted id only when raw is a well-formed id that the plan
    already holds; any other value (missing, temporary, foreign) yields None.
    """
    if is_valid_object_id(raw) and raw in known:
        return Persisted(raw)
    return None


def wire_id(item_id: ItemId) -> Optional[str]:
    """Return the id to send over the wire, or None for pending items."""
    if isinstance(item_id, Persisted):
        return item_id.store_id
    return None
