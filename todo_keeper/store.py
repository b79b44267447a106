"""Flat-file todo storage.

Every todo item lives in its own file inside a single directory. The file
name is the item id and the file body is the item text. There is no index:
whatever files exist in the directory are the list.

Blocking filesystem calls are pushed onto a small thread pool so the bot's
event loop keeps serving other messages while the disk works.
"""
from __future__ import annotations

import asyncio
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, List, Optional

from .models import InvalidItemId, TodoItem, is_item_id, new_item_id

logger = logging.getLogger(__name__)


class TodoStore:
    """Lists, reads, writes and deletes todo files in one directory."""

    def __init__(
        self,
        root: Path,
        *,
        encoding: str = "ascii",
        io_workers: int = 4,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        self._root = Path(root)
        self._encoding = encoding
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=io_workers, thread_name_prefix="todo-io"
        )

    @property
    def root(self) -> Path:
        return self._root

    def ensure_directory(self) -> None:
        """Create the storage directory if it is missing."""

        if self._root.exists():
            if not self._root.is_dir():
                logger.warning("Todo path %s exists but is not a directory", self._root)
            return
        logger.info("Creating todo directory %s", self._root)
        self._root.mkdir(parents=True, exist_ok=True)

    def path_for(self, item_id: str) -> Path:
        if not is_item_id(item_id):
            raise InvalidItemId(f"Not a todo id: {item_id!r}")
        return self._root / item_id

    async def list_ids(self) -> List[str]:
        """Return the names of every entry in the storage directory."""

        return await self._run(os.listdir, self._root)

    async def read(self, item_id: str) -> TodoItem:
        path = self._root / item_id
        data = await self._run(path.read_bytes)
        return TodoItem(id=item_id, content=data.decode(self._encoding, errors="replace"))

    async def add(self, content: str) -> TodoItem:
        """Write ``content`` to a fresh file and return the new item."""

        item = TodoItem(id=new_item_id(), content=content)
        payload = content.encode(self._encoding, errors="replace")
        await self._run(self._write_new, self.path_for(item.id), payload)
        logger.debug("Wrote todo %s (%d bytes)", item.id, len(payload))
        return item

    async def remove(self, item_id: str) -> None:
        path = self.path_for(item_id)
        await self._run(path.unlink)
        logger.debug("Removed todo %s", item_id)

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    @staticmethod
    def _write_new(path: Path, payload: bytes) -> None:
        # Exclusive create: a colliding id fails instead of clobbering an item.
        fh = open(path, "xb")
        try:
            with fh:
                fh.write(payload)
        except OSError:
            try:
                path.unlink()
            except FileNotFoundError:
                pass
            except OSError:
                logger.warning("Could not clean up partial todo file %s", path, exc_info=True)
            raise

    async def _run(self, func: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, func, *args)


__all__ = ["TodoStore"]
