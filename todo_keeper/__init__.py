"""Todo Keeper: a chat bot that keeps a todo list as one file per item."""

__all__ = ["config", "models", "store", "commands"]
