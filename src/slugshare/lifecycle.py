"""Startup and shutdown of the bot runtime (database, update source)."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import structlog

from .commands.commands_service import UpdateDispatcher
from .db.db_init import init_db
from .dependencies import BotContext
from .telegram.telegram_client import BotAPI

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class BotRuntime:
    """Background state owned by a running bot process."""

    context: BotContext
    shutdown_event: asyncio.Event = field(default_factory=asyncio.Event)
    polling_task: asyncio.Task[None] | None = None
    in_flight: set[asyncio.Task[None]] = field(default_factory=set)


def _masked_webhook(url: str, token: str) -> str:
    return url.replace(token, "***")


async def run_polling(
    *,
    client: BotAPI,
    dispatcher: UpdateDispatcher,
    shutdown_event: asyncio.Event,
    in_flight: set[asyncio.Task[None]],
    poll_timeout: int = 30,
    retry_delay_seconds: float = 5.0,
) -> None:
    """Fetch updates until ``shutdown_event`` is set, one task per update."""

    offset: int | None = None
    while not shutdown_event.is_set():
        try:
            batch = await client.get_updates(offset=offset, timeout=poll_timeout)
        except Exception:
            logger.exception("telegram.polling.failed")
            try:
                await asyncio.wait_for(shutdown_event.wait(), timeout=retry_delay_seconds)
            except asyncio.TimeoutError:
                pass
            continue

        offset = batch.next_offset
        for update in batch.updates:
            task = asyncio.create_task(
                dispatcher.dispatch(update),
                name=f"slugshare-update-{update.update_id}",
            )
            in_flight.add(task)
            task.add_done_callback(in_flight.discard)


async def start_bot(context: BotContext) -> BotRuntime:
    """Prepare storage and start receiving updates in the configured mode."""

    config = context.config
    seeded = await init_db(
        context.engine, context.session_factory, seed_demo=config.seed_demo_file
    )
    logger.info("db.ready", demo_seed=seeded.value if seeded else None)

    runtime = BotRuntime(context=context)
    if config.environment == "webhook":
        if config.webhook_url:
            webhook = f"{config.webhook_url.rstrip('/')}/{config.bot_token}"
            await context.transport.set_webhook(webhook)
            logger.info("telegram.webhook.set", url=_masked_webhook(webhook, config.bot_token))
        else:
            logger.warning("telegram.webhook.url_missing")
        return runtime

    await context.transport.delete_webhook()
    runtime.polling_task = asyncio.create_task(
        run_polling(
            client=context.transport,
            dispatcher=context.dispatcher,
            shutdown_event=runtime.shutdown_event,
            in_flight=runtime.in_flight,
            poll_timeout=config.polling_timeout_seconds,
        ),
        name="slugshare-polling",
    )
    logger.info("telegram.polling.started")
    return runtime


async def stop_bot(runtime: BotRuntime) -> None:
    """Stop polling, let in-flight updates finish and release resources."""

    runtime.shutdown_event.set()
    task = runtime.polling_task
    if task is not None:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("telegram.polling.crashed")
        runtime.polling_task = None
    try:
        if runtime.in_flight:
            await asyncio.gather(*runtime.in_flight, return_exceptions=True)
    finally:
        try:
            await runtime.context.transport.aclose()
        finally:
            await runtime.context.engine.dispose()
    logger.info("bot.stopped")


__all__ = ["BotRuntime", "run_polling", "start_bot", "stop_bot"]
