"""Discord bot entry point for Todo Keeper."""
from __future__ import annotations

import atexit
import logging
import os
from typing import Optional

import discord
from discord.ext import commands

from .commands import Reply, build_router, strip_address
from .config import Settings, get_settings
from .replies import clamp_text
from .store import TodoStore

logger = logging.getLogger(__name__)


def make_reply(message: discord.Message) -> Reply:
    """Bind a reply coroutine to the message that issued a command."""

    async def _reply(text: str) -> None:
        try:
            await message.reply(clamp_text(text), mention_author=True)
        except discord.HTTPException:
            logger.exception("Failed to reply in channel %s", message.channel.id)

    return _reply


def addressed_text(
    message: discord.Message,
    *,
    bot_user_id: Optional[int],
    names: tuple[str, ...],
) -> Optional[str]:
    """Return the command body of ``message`` or ``None`` if not for us."""

    content = message.content or ""
    mention_ids = [bot_user_id] if bot_user_id is not None else []
    body = strip_address(content, names=names, mention_ids=mention_ids)
    if body is not None:
        return body
    if isinstance(message.channel, discord.DMChannel):
        return content
    return None


def build_bot(
    settings: Optional[Settings] = None,
    intents: Optional[discord.Intents] = None,
) -> commands.Bot:
    settings = settings or get_settings()
    intents = intents or discord.Intents.default()
    intents.message_content = True
    app_id_raw = os.environ.get("DISCORD_APP_ID")
    application_id: Optional[int] = None
    if app_id_raw:
        try:
            application_id = int(app_id_raw)
        except ValueError:
            logger.warning("Invalid DISCORD_APP_ID: %s", app_id_raw)
    bot = commands.Bot(command_prefix="!", intents=intents, application_id=application_id)

    store = TodoStore(
        settings.data_dir,
        encoding=settings.encoding,
        io_workers=settings.io_workers,
    )
    store.ensure_directory()
    router = build_router(store)
    setattr(bot, "todo_store", store)
    setattr(bot, "todo_router", router)

    def _shutdown_store() -> None:  # pragma: no cover - process shutdown hook
        store.close()

    atexit.register(_shutdown_store)

    @bot.event
    async def on_ready() -> None:
        logger.info("Todo Keeper connected as %s; storing todos in %s", bot.user, store.root)

    async def on_message(message: discord.Message) -> None:
        if message.author.bot:
            return
        bot_user_id = bot.user.id if bot.user is not None else None
        body = addressed_text(message, bot_user_id=bot_user_id, names=settings.bot_names)
        if body is None:
            return
        await router.dispatch(body, make_reply(message))

    bot.add_listener(on_message, "on_message")
    return bot


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    token = os.environ.get("DISCORD_TOKEN")
    if not token:
        raise RuntimeError("DISCORD_TOKEN environment variable must be set")
    bot = build_bot(get_settings())
    bot.run(token)


__all__ = ["addressed_text", "build_bot", "main", "make_reply"]
