"""Tests for the todo chat commands."""
from __future__ import annotations

import asyncio
import re

import pytest

from todo_keeper import replies
from todo_keeper.commands import TodoCommands, build_router
from todo_keeper.models import ITEM_ID_RE
from todo_keeper.store import TodoStore


class ReplyLog:
    """Collects replies the way a chat channel would receive them."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    async def __call__(self, text: str) -> None:
        self.messages.append(text)

    def clear(self) -> None:
        self.messages.clear()


@pytest.fixture
def store(tmp_path):
    todo_store = TodoStore(tmp_path / "todos")
    todo_store.ensure_directory()
    yield todo_store
    todo_store.close()


@pytest.fixture
def commands(store):
    return TodoCommands(store)


@pytest.fixture
def reply():
    return ReplyLog()


@pytest.mark.asyncio
async def test_empty_list(commands, reply):
    await commands.show_list(reply)
    assert reply.messages == [replies.LIST_EMPTY]


@pytest.mark.asyncio
async def test_add_then_list(commands, reply):
    await commands.add(reply, "buy milk")
    assert reply.messages == ["OK! I added buy milk to the todo list"]

    reply.clear()
    await commands.show_list(reply)
    assert len(reply.messages) == 1
    line = reply.messages[0]
    assert line.endswith(": buy milk")
    item_id = line.split(": ", 1)[0]
    assert ITEM_ID_RE.fullmatch(item_id)


@pytest.mark.asyncio
async def test_list_reports_every_item(commands, store, reply):
    await commands.add(reply, "one")
    await commands.add(reply, "two")
    await commands.add(reply, "three")

    reply.clear()
    await commands.show_list(reply)
    contents = sorted(line.split(": ", 1)[1] for line in reply.messages)
    assert contents == ["one", "three", "two"]
    ids = {line.split(": ", 1)[0] for line in reply.messages}
    assert ids == set(await store.list_ids())


@pytest.mark.asyncio
async def test_remove_added_item(commands, store, reply):
    await commands.add(reply, "file taxes")
    (item_id,) = await store.list_ids()

    reply.clear()
    await commands.remove(reply, item_id)
    assert reply.messages == [f"OK! Removed {item_id}"]

    reply.clear()
    await commands.show_list(reply)
    assert reply.messages == [replies.LIST_EMPTY]


@pytest.mark.asyncio
async def test_remove_unknown_item(commands, store, reply):
    await commands.add(reply, "keep me")
    before = sorted(await store.list_ids())
    missing = "12345678-1234-4234-8234-123456789abc"

    reply.clear()
    await commands.remove(reply, missing)
    assert reply.messages == [f"Couldn't find {missing}"]
    assert sorted(await store.list_ids()) == before


@pytest.mark.asyncio
async def test_directory_failure_reports_once(commands, store, reply):
    store.root.rmdir()

    await commands.show_list(reply)
    assert reply.messages == [replies.LIST_DIRECTORY_ERROR]


@pytest.mark.asyncio
async def test_unreadable_entry_does_not_abort_others(commands, store, reply):
    await commands.add(reply, "still here")
    (store.root / "broken").mkdir()

    reply.clear()
    await commands.show_list(reply)
    assert reply.messages.count(replies.LIST_ITEM_ERROR) == 1
    assert any(line.endswith(": still here") for line in reply.messages)
    assert len(reply.messages) == 2


@pytest.mark.asyncio
async def test_write_failure_reports_and_creates_nothing(commands, store, reply, monkeypatch):
    real_open = open

    class FullDisk:
        def __init__(self, path, mode):
            self._fh = real_open(path, mode)

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            self._fh.close()
            return False

        def write(self, data):
            raise OSError(28, "No space left on device")

    monkeypatch.setattr("todo_keeper.store.open", FullDisk, raising=False)

    await commands.add(reply, "never saved")
    assert reply.messages == [replies.ADD_ERROR]
    assert list(store.root.iterdir()) == []


@pytest.mark.asyncio
async def test_round_trip_restores_directory(commands, store, reply):
    await commands.add(reply, "existing")
    before = sorted(await store.list_ids())

    await commands.add(reply, "temporary")
    added = set(await store.list_ids()) - set(before)
    assert len(added) == 1
    (new_id,) = added

    reply.clear()
    await commands.show_list(reply)
    assert f"{new_id}: temporary" in reply.messages

    await commands.remove(reply, new_id)
    reply.clear()
    await commands.show_list(reply)
    assert sorted(await store.list_ids()) == before
    assert not any(line.startswith(new_id) for line in reply.messages)


@pytest.mark.asyncio
async def test_router_dispatches_chat_text(store, reply):
    router = build_router(store)

    assert await router.dispatch("add walk the dog to my todo list", reply)
    assert reply.messages == ["OK! I added walk the dog to the todo list"]
    (item_id,) = await store.list_ids()

    reply.clear()
    assert await router.dispatch("Show My Todo List", reply)
    assert reply.messages == [f"{item_id}: walk the dog"]

    reply.clear()
    assert await router.dispatch(f"{item_id} is done", reply)
    assert reply.messages == [f"OK! Removed {item_id}"]


@pytest.mark.asyncio
async def test_router_ignores_unmatched_text(store, reply):
    router = build_router(store)

    assert not await router.dispatch("show my todo list please", reply)
    assert not await router.dispatch("not-a-real-id is done", reply)
    assert not await router.dispatch("1234567812344234823412345678abcd is done", reply)
    assert reply.messages == []


@pytest.mark.asyncio
async def test_router_done_pattern_is_case_insensitive(store, reply):
    router = build_router(store)
    upper = "ABCDEF01-2345-4678-9ABC-DEF012345678"

    assert await router.dispatch(f"{upper} IS DONE", reply)
    assert reply.messages == [f"Couldn't find {upper}"]


def test_router_registers_three_routes(store):
    router = build_router(store)
    patterns = [route.regex.pattern for route in router.routes]
    assert len(patterns) == 3
    assert all(route.regex.flags & re.IGNORECASE for route in router.routes)


@pytest.mark.asyncio
async def test_list_replies_as_each_read_finishes(commands, store, monkeypatch):
    await commands.add(ReplyLog(), "slow")
    await commands.add(ReplyLog(), "fast")
    ids = {(await store.read(item_id)).content: item_id for item_id in await store.list_ids()}
    fast_line = f"{ids['fast']}: fast"
    fast_sent = asyncio.Event()
    real_read = store.read

    async def gated_read(item_id):
        if item_id == ids["slow"]:
            await fast_sent.wait()
        return await real_read(item_id)

    monkeypatch.setattr(store, "read", gated_read)

    sent: list[str] = []

    async def reply(text: str) -> None:
        sent.append(text)
        if text == fast_line:
            fast_sent.set()

    await asyncio.wait_for(commands.show_list(reply), timeout=5)
    assert sent == [fast_line, f"{ids['slow']}: slow"]


@pytest.mark.asyncio
async def test_file_at_storage_path_reports_directory_error(tmp_path, reply):
    target = tmp_path / "todos"
    target.write_text("oops", encoding="utf-8")
    store = TodoStore(target)
    try:
        store.ensure_directory()
        await TodoCommands(store).show_list(reply)
    finally:
        store.close()
    assert reply.messages == [replies.LIST_DIRECTORY_ERROR]
