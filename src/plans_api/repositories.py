from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from threading import RLock
from typing import Dict, List, Optional, Sequence

from .identifiers import resolve_item_id
from .models import NoteEntity, PlanEntity, TodoEntity
from .schemas import NoteIn, PlanCreate, PlanUpdate, TodoIn
from .settings import Settings
from .utils import new_object_id, utcnow

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the document store cannot complete an operation."""


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for plan storage backends."""

    @abstractmethod
    def create(self, data: PlanCreate) -> PlanEntity:
        """Create and return a new PlanEntity."""

    @abstractmethod
    def get(self, plan_id: str) -> Optional[PlanEntity]:
        """Return a PlanEntity by id, or None if not found."""

    @abstractmethod
    def update(self, plan_id: str, data: PlanUpdate) -> Optional[PlanEntity]:
        """Replace the provided fields of an existing plan. Return it, or None if not found."""

    @abstractmethod
    def delete(self, plan_id: str) -> bool:
        """Delete a plan by id. Return True if deleted, False if not found."""

    @abstractmethod
    def list(self) -> List[PlanEntity]:
        """Return every plan, newest creation_date first."""

    def close(self) -> None:
        """Release any resources held by the store."""


def _new_todo(item: TodoIn, now: datetime) -> TodoEntity:
    return {"id": new_object_id(), "text": item.text, "completed": bool(item.completed), "created_at": now}


def _new_note(item: NoteIn, now: datetime) -> NoteEntity:
    return {"id": new_object_id(), "text": item.text, "created_at": now}


def build_plan(data: PlanCreate, now: Optional[datetime] = None) -> PlanEntity:
    """Build a new plan document with fresh ids and timestamps."""
    now = now or utcnow()
    return {
        "id": new_object_id(),
        "title": data.title or None,
        "todos": [_new_todo(t, now) for t in data.todos],
        "notes": [_new_note(n, now) for n in data.notes],
        "creation_date": now,
    }


def _replace_todos(existing: Sequence[TodoEntity], incoming: List[TodoIn], now: datetime) -> List[TodoEntity]:
    by_id = {t["id"]: t for t in existing}
    seen: set = set()
    result: List[TodoEntity] = []
    for item in incoming:
        persisted = resolve_item_id(item.id, by_id.keys() - seen)
        if persisted is None:
            result.append(_new_todo(item, now))
            continue
        seen.add(persisted.store_id)
        result.append(
            {
                "id": persisted.store_id,
                "text": item.text,
                "completed": bool(item.completed),
                "created_at": by_id[persisted.store_id]["created_at"],
            }
        )
    return result


def _replace_notes(existing: Sequence[NoteEntity], incoming: List[NoteIn], now: datetime) -> List[NoteEntity]:
    by_id = {n["id"]: n for n in existing}
    seen: set = set()
    result: List[NoteEntity] = []
    for item in incoming:
        persisted = resolve_item_id(item.id, by_id.keys() - seen)
        if persisted is None:
            result.append(_new_note(item, now))
            continue
        seen.add(persisted.store_id)
        result.append(
            {
                "id": persisted.store_id,
                "text": item.text,
                "created_at": by_id[persisted.store_id]["created_at"],
            }
        )
    return result


def apply_update(existing: PlanEntity, data: PlanUpdate, now: Optional[datetime] = None) -> PlanEntity:
    """
    Return a copy of existing with every field present in data replaced.

    Items whose id matches one already stored keep that id and its created_at;
    all other items are inserted as new. creation_date is never touched.
    """
    now = now or utcnow()
    updated = copy.deepcopy(existing)
    provided = data.model_fields_set
    if "title" in provided:
        updated["title"] = data.title or None
    if "todos" in provided:
        updated["todos"] = _replace_todos(existing["todos"], data.todos or [], now)
    if "notes" in provided:
        updated["notes"] = _replace_notes(existing["notes"], data.notes or [], now)
    return updated


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[str, PlanEntity] = {}

    def create(self, data: PlanCreate) -> PlanEntity:
        entity = build_plan(data)
        with self._lock:
            self._items[entity["id"]] = entity
        return copy.deepcopy(entity)

    def get(self, plan_id: str) -> Optional[PlanEntity]:
        with self._lock:
            item = self._items.get(plan_id)
            return None if item is None else copy.deepcopy(item)

    def update(self, plan_id: str, data: PlanUpdate) -> Optional[PlanEntity]:
        with self._lock:
            existing = self._items.get(plan_id)
            if existing is None:
                return None
            updated = apply_update(existing, data)
            self._items[plan_id] = updated
            return copy.deepcopy(updated)

    def delete(self, plan_id: str) -> bool:
        with self._lock:
            return self._items.pop(plan_id, None) is not None

    def list(self) -> List[PlanEntity]:
        with self._lock:
            # Equal timestamps: latest insert first
            newest_first = reversed(list(self._items.values()))
            items = sorted(newest_first, key=lambda p: p["creation_date"], reverse=True)
            # Return copies to avoid external mutation
            return [copy.deepcopy(p) for p in items]


# PUBLIC_INTERFACE
def open_repository(settings: Settings) -> Repository:
    """
    Open the store configured in settings.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository backed by settings.sqlite_db_path

    Raises:
        StoreError if the configured store cannot be opened.
    """
    if settings.store_backend == "sqlite":
        from .db import SQLiteRepository

        logger.info("Opening sqlite document store at %s", settings.sqlite_db_path)
        return SQLiteRepository(settings.sqlite_db_path)
    logger.info("Using in-memory document store")
    return InMemoryRepository()
