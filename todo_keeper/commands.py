"""Chat command handlers and text routing for the todo list."""
from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, List, Optional

from . import replies
from .models import ITEM_ID_PATTERN
from .store import TodoStore
from .tracking import track_command

logger = logging.getLogger(__name__)

Reply = Callable[[str], Awaitable[None]]
Handler = Callable[[Reply, "re.Match[str]"], Awaitable[None]]

SHOW_PATTERN = r"show my todo list$"
ADD_PATTERN = r"add (.*) to my todo list$"
DONE_PATTERN = rf"({ITEM_ID_PATTERN}) is done$"


def strip_address(
    text: str,
    names: Iterable[str] = (),
    mention_ids: Iterable[int] = (),
) -> Optional[str]:
    """Return the command body if ``text`` is addressed to the bot.

    A message is addressed when it starts with a mention of the bot
    (``<@id>`` or ``<@!id>``) or with one of its names, optionally written
    as ``@name`` and followed by ``:`` or ``,``.
    """

    alternatives: List[str] = [rf"<@!?{int(mention)}>" for mention in mention_ids]
    alternatives.extend(rf"@?{re.escape(name)}" for name in names if name)
    if not alternatives:
        return None
    prefix = re.compile(rf"^\s*(?:{'|'.join(alternatives)})(?![\w-])[:,]?\s*", re.IGNORECASE)
    match = prefix.match(text)
    if match is None:
        return None
    return text[match.end():]


@dataclass(frozen=True)
class Route:
    regex: "re.Pattern[str]"
    handler: Handler


class CommandRouter:
    """Matches addressed text against registered patterns."""

    def __init__(self) -> None:
        self._routes: List[Route] = []

    @property
    def routes(self) -> List[Route]:
        return list(self._routes)

    def respond(self, pattern: str) -> Callable[[Handler], Handler]:
        regex = re.compile(rf"^\s*(?:{pattern})", re.IGNORECASE)

        def decorator(handler: Handler) -> Handler:
            self._routes.append(Route(regex=regex, handler=handler))
            return handler

        return decorator

    async def dispatch(self, text: str, reply: Reply) -> bool:
        for route in self._routes:
            match = route.regex.search(text)
            if match is None:
                continue
            await route.handler(reply, match)
            return True
        logger.debug("No todo command matched %r", text)
        return False


class TodoCommands:
    """The list, add and remove commands backed by a ``TodoStore``."""

    def __init__(self, store: TodoStore) -> None:
        self.store = store

    @track_command
    async def show_list(self, reply: Reply) -> None:
        try:
            item_ids = list(await self.store.list_ids())
        except OSError:
            logger.warning("Could not list %s", self.store.root, exc_info=True)
            await reply(replies.LIST_DIRECTORY_ERROR)
            return

        if not item_ids:
            await reply(replies.LIST_EMPTY)
            return

        # Each task owns its id and replies when its own read finishes.
        tasks = [
            asyncio.ensure_future(self._report_item(reply, item_id))
            for item_id in item_ids
        ]
        await asyncio.gather(*tasks)

    async def _report_item(self, reply: Reply, item_id: str) -> None:
        try:
            item = await self.store.read(item_id)
        except OSError:
            logger.warning("Could not read todo %s", item_id, exc_info=True)
            await reply(replies.LIST_ITEM_ERROR)
            return
        await reply(replies.item_line(item))

    @track_command
    async def add(self, reply: Reply, content: str) -> None:
        try:
            item = await self.store.add(content)
        except OSError:
            logger.warning("Could not write todo file in %s", self.store.root, exc_info=True)
            await reply(replies.ADD_ERROR)
            return
        logger.info("Added todo %s", item.id)
        await reply(replies.added(content))

    @track_command
    async def remove(self, reply: Reply, item_id: str) -> None:
        try:
            await self.store.remove(item_id)
        except OSError:
            logger.info("Could not remove todo %s", item_id, exc_info=True)
            await reply(replies.not_found(item_id))
            return
        await reply(replies.removed(item_id))

    def register(self, router: CommandRouter) -> CommandRouter:
        """Attach the todo patterns to ``router``."""

        @router.respond(SHOW_PATTERN)
        async def _show(reply: Reply, match: "re.Match[str]") -> None:
            await self.show_list(reply)

        @router.respond(ADD_PATTERN)
        async def _add(reply: Reply, match: "re.Match[str]") -> None:
            await self.add(reply, match.group(1))

        @router.respond(DONE_PATTERN)
        async def _done(reply: Reply, match: "re.Match[str]") -> None:
            await self.remove(reply, match.group(1))

        return router


def build_router(store: TodoStore) -> CommandRouter:
    return TodoCommands(store).register(CommandRouter())


__all__ = [
    "ADD_PATTERN",
    "CommandRouter",
    "DONE_PATTERN",
    "Reply",
    "Route",
    "SHOW_PATTERN",
    "TodoCommands",
    "build_router",
    "strip_address",
]
