"""Operator utilities for inspecting and editing the todo directory."""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .. import replies
from ..commands import TodoCommands
from ..config import get_settings
from ..models import is_item_id
from ..store import TodoStore


def _load_store(args: argparse.Namespace) -> TodoStore:
    settings = get_settings(args.settings)
    data_dir = args.data_dir or settings.data_dir
    store = TodoStore(data_dir, encoding=settings.encoding, io_workers=settings.io_workers)
    store.ensure_directory()
    return store


async def _collect(store: TodoStore) -> Dict[str, Any]:
    ids = await store.list_ids()
    items: List[Dict[str, str]] = []
    unreadable: List[str] = []
    for item_id in ids:
        try:
            item = await store.read(item_id)
        except OSError:
            unreadable.append(item_id)
            continue
        items.append({"id": item.id, "content": item.content})
    return {"directory": str(store.root), "items": items, "unreadable": unreadable}


def _run_command(store: TodoStore, method: str, *args: Any) -> List[str]:
    """Run a chat command against ``store`` and print its replies."""

    sent: List[str] = []

    async def _reply(text: str) -> None:
        sent.append(text)
        print(text)

    commands = TodoCommands(store)
    try:
        asyncio.run(getattr(commands, method)(_reply, *args))
    finally:
        store.close()
    return sent


def cmd_list(args: argparse.Namespace) -> int:
    store = _load_store(args)
    if not args.json:
        sent = _run_command(store, "show_list")
        failed = {replies.LIST_DIRECTORY_ERROR, replies.LIST_ITEM_ERROR}
        return 1 if failed.intersection(sent) else 0
    try:
        summary = asyncio.run(_collect(store))
    except OSError as exc:
        print(json.dumps({"error": str(exc)}, indent=2))
        return 1
    finally:
        store.close()
    print(json.dumps(summary, indent=2))
    return 0


def cmd_add(args: argparse.Namespace) -> int:
    sent = _run_command(_load_store(args), "add", " ".join(args.text))
    return 1 if replies.ADD_ERROR in sent else 0


def cmd_remove(args: argparse.Namespace) -> int:
    if not is_item_id(args.item_id):
        print(f"Not a todo id: {args.item_id}", file=sys.stderr)
        return 2
    sent = _run_command(_load_store(args), "remove", args.item_id)
    return 1 if replies.not_found(args.item_id) in sent else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect and edit the Todo Keeper directory.")
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Path to an alternate settings YAML file.",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Todo directory to operate on (default: value from settings).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="Show every todo item.")
    list_parser.add_argument("--json", action="store_true", help="Output JSON for automation.")
    list_parser.set_defaults(func=cmd_list)

    add_parser = subparsers.add_parser("add", help="Add a todo item.")
    add_parser.add_argument("text", nargs="+", help="Text of the todo item.")
    add_parser.set_defaults(func=cmd_add)

    remove_parser = subparsers.add_parser("remove", help="Remove a todo item by id.")
    remove_parser.add_argument("item_id", help="Id of the item to remove.")
    remove_parser.set_defaults(func=cmd_remove)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
