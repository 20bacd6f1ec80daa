from __future__ import annotations

import json
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Generator, List, Optional

from .models import PlanEntity
from .repositories import Repository, StoreError, apply_update, build_plan
from .schemas import PlanCreate, PlanUpdate


@dataclass(frozen=True)
class _Cols:
    table: str = "plans"
    id: str = "id"
    creation_date: str = "creation_date"
    document: str = "document"


_COLS = _Cols()


def _to_document(entity: PlanEntity) -> str:
    doc: Dict[str, Any] = {
        "title": entity["title"],
        "todos": [{**t, "created_at": t["created_at"].isoformat()} for t in entity["todos"]],
        "notes": [{**n, "created_at": n["created_at"].isoformat()} for n in entity["notes"]],
    }
    return json.dumps(doc, ensure_ascii=False)


class SQLiteRepository(Repository):
    """
    Document store on SQLite: one row per plan, the plan body kept as a JSON
    document next to its id and indexed creation_date.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._closed = False
        try:
            os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
            self._init_db()
        except (OSError, sqlite3.Error) as exc:
            raise StoreError(f"Cannot open document store at {db_path}: {exc}") from exc

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        if self._closed:
            raise StoreError("Document store is closed")
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StoreError(str(exc)) from exc
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} TEXT PRIMARY KEY,
                    {_COLS.creation_date} TEXT NOT NULL,
                    {_COLS.document} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_creation_date "
                f"ON {_COLS.table}({_COLS.creation_date})"
            )

    def _row_to_entity(self, row: sqlite3.Row) -> PlanEntity:
        try:
            return self._decode(row)
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise StoreError(f"Corrupt document for plan {row[_COLS.id]}") from exc

    def _decode(self, row: sqlite3.Row) -> PlanEntity:
        doc = json.loads(row[_COLS.document])
        return {
            "id": str(row[_COLS.id]),
            "title": doc.get("title"),
            "todos": [
                {
                    "id": t["id"],
                    "text": t["text"],
                    "completed": bool(t["completed"]),
                    "created_at": datetime.fromisoformat(t["created_at"]),
                }
                for t in doc.get("todos", [])
            ],
            "notes": [
                {"id": n["id"], "text": n["text"], "created_at": datetime.fromisoformat(n["created_at"])}
                for n in doc.get("notes", [])
            ],
            "creation_date": datetime.fromisoformat(row[_COLS.creation_date]),
        }

    def _fetch(self, conn: sqlite3.Connection, plan_id: str) -> Optional[sqlite3.Row]:
        return conn.execute(f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (plan_id,)).fetchone()

    def create(self, data: PlanCreate) -> PlanEntity:
        entity = build_plan(data)
        with self._conn() as conn:
            conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.id}, {_COLS.creation_date}, {_COLS.document})
                VALUES (?, ?, ?)
                """,
                (entity["id"], entity["creation_date"].isoformat(), _to_document(entity)),
            )
        return entity

    def get(self, plan_id: str) -> Optional[PlanEntity]:
        with self._conn() as conn:
            row = self._fetch(conn, plan_id)
            return self._row_to_entity(row) if row else None

    def update(self, plan_id: str, data: PlanUpdate) -> Optional[PlanEntity]:
        with self._conn() as conn:
            row = self._fetch(conn, plan_id)
            if not row:
                return None
            updated = apply_update(self._row_to_entity(row), data)
            conn.execute(
                f"UPDATE {_COLS.table} SET {_COLS.document} = ? WHERE {_COLS.id} = ?",
                (_to_document(updated), plan_id),
            )
            return updated

    def delete(self, plan_id: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (plan_id,))
            return cur.rowcount > 0

    def list(self) -> List[PlanEntity]:
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM {_COLS.table} ORDER BY {_COLS.creation_date} DESC, rowid DESC"
            ).fetchall()
            return [self._row_to_entity(r) for r in rows]

    def close(self) -> None:
        self._closed = True
