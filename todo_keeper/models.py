"""Core data models for Todo Keeper."""
from __future__ import annotations

import re
import uuid
from dataclasses import dataclass

ITEM_ID_PATTERN = (
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"
)
ITEM_ID_RE = re.compile(ITEM_ID_PATTERN, re.IGNORECASE)


class InvalidItemId(ValueError):
    """Raised when a string cannot name a todo file."""


def new_item_id() -> str:
    return str(uuid.uuid4())


def is_item_id(value: str) -> bool:
    return ITEM_ID_RE.fullmatch(value) is not None


@dataclass(frozen=True)
class TodoItem:
    """A single todo entry; ``id`` doubles as the file name."""

    id: str
    content: str

    def as_line(self) -> str:
        return f"{self.id}: {self.content}"


__all__ = [
    "ITEM_ID_PATTERN",
    "ITEM_ID_RE",
    "InvalidItemId",
    "TodoItem",
    "is_item_id",
    "new_item_id",
]
