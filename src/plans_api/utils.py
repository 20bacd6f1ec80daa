from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone
from typing import Any

_OBJECT_ID_RE = re.compile(r"^[0-9a-f]{24}$")


# PUBLIC_INTERFACE
def new_object_id() -> str:
    """
    Return a new store identifier: 24 lowercase hex characters.

    Plans and their nested todos/notes share the same identifier shape.
    """
    return uuid.uuid4().hex[:24]


# PUBLIC_INTERFACE
def is_valid_object_id(value: Any) -> bool:
    """Return True if value is a well-formed store identifier."""
    return isinstance(value, str) and bool(_OBJECT_ID_RE.match(value))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
def text_length(value: str) -> int:
    """Length of value in UTF-16 code units, the unit browsers use for text limits."""
    return len(value.encode("utf-16-le")) // 2
