"""Reply texts sent back to the chat user."""
from __future__ import annotations

from .models import TodoItem

LIST_EMPTY = "The list is empty!"
LIST_DIRECTORY_ERROR = "Oh no... I couldn't look for todos..."
LIST_ITEM_ERROR = "Uh oh! Had trouble opening a todo..."
ADD_ERROR = "Oh no... I couldn't write the todo file..."

_MAX_MESSAGE_LENGTH = 1900


def item_line(item: TodoItem) -> str:
    return item.as_line()


def added(content: str) -> str:
    return f"OK! I added {content} to the todo list"


def removed(item_id: str) -> str:
    return f"OK! Removed {item_id}"


def not_found(item_id: str) -> str:
    return f"Couldn't find {item_id}"


def clamp_text(text: str) -> str:
    """Ensure Discord-compatible message length."""

    if len(text) <= _MAX_MESSAGE_LENGTH:
        return text
    return text[: _MAX_MESSAGE_LENGTH - 1].rstrip() + "…"


__all__ = [
    "ADD_ERROR",
    "LIST_DIRECTORY_ERROR",
    "LIST_EMPTY",
    "LIST_ITEM_ERROR",
    "added",
    "clamp_text",
    "item_line",
    "not_found",
    "removed",
]
