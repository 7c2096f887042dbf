from __future__ import annotations

import asyncio

import pytest

from src.slugshare import messages
from src.slugshare.dependencies import build_context
from src.slugshare.lifecycle import BotRuntime, run_polling, start_bot, stop_bot
from tests.helpers.bot import make_config
from tests.helpers.database import database_url
from tests.mocks.telegram import RecordingTransport, callback_update, message_update


async def _wait_for(predicate, *, timeout: float = 2.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_poll(), timeout=timeout)


@pytest.mark.anyio("asyncio")
async def test_polling_dispatches_updates_and_advances_offset(tmp_path) -> None:
    transport = RecordingTransport(
        pending_batches=[
            [message_update("/help", update_id=5)],
            [message_update("/start testvideo1", update_id=6)],
        ]
    )
    config = make_config(environment="polling", database_url=database_url(tmp_path))
    runtime = await start_bot(build_context(config, transport=transport))
    try:
        await _wait_for(lambda: len(transport.calls("send_message")) == 2)
    finally:
        await stop_bot(runtime)

    assert transport.names()[0] == "delete_webhook"
    assert transport.requested_offsets[:3] == [None, 6, 7]
    texts = [call["text"] for call in transport.calls("send_message")]
    assert texts[0] == messages.HELP
    assert texts[1] == "📄 Id:2001"
    assert transport.closed is True
    assert runtime.polling_task is None


@pytest.mark.anyio("asyncio")
async def test_polling_recovers_after_failed_fetch(tmp_path) -> None:
    transport = RecordingTransport(
        fail_on={"get_updates"},
        pending_batches=[[callback_update(None, update_id=3)]],
    )
    config = make_config(database_url=database_url(tmp_path))
    context = build_context(config, transport=transport)
    shutdown = asyncio.Event()
    in_flight: set[asyncio.Task[None]] = set()

    task = asyncio.create_task(
        run_polling(
            client=transport,
            dispatcher=context.dispatcher,
            shutdown_event=shutdown,
            in_flight=in_flight,
            retry_delay_seconds=0.01,
        )
    )
    try:
        await _wait_for(lambda: 4 in transport.requested_offsets)
    finally:
        shutdown.set()
        await asyncio.wait_for(task, timeout=2.0)
        await context.engine.dispose()

    assert transport.requested_offsets[:3] == [None, None, 4]


@pytest.mark.anyio("asyncio")
async def test_slow_update_does_not_block_the_next_one(tmp_path) -> None:
    started = asyncio.Event()
    release = asyncio.Event()
    handled: list[int] = []

    class _Dispatcher:
        async def dispatch(self, update) -> None:
            if update.update_id == 1:
                started.set()
                await release.wait()
            handled.append(update.update_id)

    transport = RecordingTransport(
        pending_batches=[
            [message_update("/help", update_id=1)],
            [message_update("/help", update_id=2)],
        ]
    )
    shutdown = asyncio.Event()
    in_flight: set[asyncio.Task[None]] = set()
    task = asyncio.create_task(
        run_polling(
            client=transport,
            dispatcher=_Dispatcher(),
            shutdown_event=shutdown,
            in_flight=in_flight,
        )
    )
    try:
        await _wait_for(lambda: handled == [2])
        assert started.is_set()
    finally:
        release.set()
        shutdown.set()
        await asyncio.wait_for(task, timeout=2.0)
        await asyncio.gather(*in_flight)

    assert handled == [2, 1]


@pytest.mark.anyio("asyncio")
async def test_webhook_mode_registers_url_and_skips_polling(tmp_path) -> None:
    transport = RecordingTransport()
    config = make_config(
        environment="webhook",
        webhook_url="https://bot.example",
        database_url=database_url(tmp_path),
        seed_demo_file=False,
    )
    context = build_context(config, transport=transport)

    runtime = await start_bot(context)
    try:
        assert runtime.polling_task is None
        assert await context.files.count() == 0
    finally:
        await stop_bot(runtime)

    assert transport.names() == ["set_webhook"]
    assert transport.calls("set_webhook")[0]["url"] == f"https://bot.example/{config.bot_token}"
    assert transport.closed is True


class _BrokenFetchTransport(RecordingTransport):
    """Fails the first fetch with an error that is not a Bot API rejection."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.broken = True

    async def get_updates(self, *, offset=None, timeout=30):
        if self.broken:
            self.broken = False
            self.requested_offsets.append(offset)
            raise AttributeError("'list' object has no attribute 'get'")
        return await super().get_updates(offset=offset, timeout=timeout)


@pytest.mark.anyio("asyncio")
async def test_polling_survives_unexpected_fetch_error(tmp_path) -> None:
    transport = _BrokenFetchTransport(pending_batches=[[message_update("/help", update_id=8)]])
    config = make_config(database_url=database_url(tmp_path))
    context = build_context(config, transport=transport)
    shutdown = asyncio.Event()
    in_flight: set[asyncio.Task[None]] = set()

    task = asyncio.create_task(
        run_polling(
            client=transport,
            dispatcher=context.dispatcher,
            shutdown_event=shutdown,
            in_flight=in_flight,
            retry_delay_seconds=0.01,
        )
    )
    try:
        await _wait_for(lambda: transport.calls("send_message") != [])
        assert not task.done()
    finally:
        shutdown.set()
        await asyncio.wait_for(task, timeout=2.0)
        await asyncio.gather(*in_flight)
        await context.engine.dispose()

    assert transport.requested_offsets[:2] == [None, None]
    assert transport.calls("send_message")[0]["text"] == messages.HELP


@pytest.mark.anyio("asyncio")
async def test_stop_releases_resources_when_polling_task_crashed(tmp_path) -> None:
    transport = RecordingTransport()
    config = make_config(database_url=database_url(tmp_path))
    runtime = BotRuntime(context=build_context(config, transport=transport))

    async def _crash() -> None:
        raise AttributeError("boom")

    runtime.polling_task = asyncio.create_task(_crash())
    await asyncio.sleep(0)

    await stop_bot(runtime)

    assert transport.closed is True
    assert runtime.polling_task is None
