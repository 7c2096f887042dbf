from __future__ import annotations

import pytest

from src.slugshare import messages
from src.slugshare.exceptions import StoreError
from src.slugshare.files.files_models import MediaKind
from src.slugshare.telegram.telegram_schemas import TelegramUpdate
from tests.helpers.bot import ADMIN_ID, OTHER_USER_ID, build_dispatcher
from tests.helpers.database import files_database
from tests.mocks.telegram import RecordingTransport, callback_update, message_update


@pytest.mark.anyio("asyncio")
async def test_admin_registers_file_and_receives_share_link(tmp_path, transport) -> None:
    async with files_database(tmp_path) as session_factory:
        files, dispatcher = build_dispatcher(session_factory, transport)

        await dispatcher.dispatch(
            message_update('/add promo ABC123 video "New Year Promo"', user_id=ADMIN_ID)
        )
        stored = await files.lookup("promo")

    assert stored is not None
    assert (stored.media_handle, stored.media_kind, stored.caption) == (
        "ABC123",
        "video",
        "New Year Promo",
    )
    [reply] = transport.calls("send_message")
    assert reply["parse_mode"] == "HTML"
    assert "https://t.me/sorrybabubot?start=promo" in reply["text"]
    assert "<code>promo</code>" in reply["text"]


@pytest.mark.anyio("asyncio")
async def test_caption_is_html_escaped_in_confirmation(tmp_path, transport) -> None:
    async with files_database(tmp_path) as session_factory:
        _, dispatcher = build_dispatcher(session_factory, transport)
        await dispatcher.dispatch(
            message_update("/add tag H photo <b>bold</b> & more", user_id=ADMIN_ID)
        )

    [reply] = transport.calls("send_message")
    assert "Caption: &lt;b&gt;bold&lt;/b&gt; &amp; more" in reply["text"]


@pytest.mark.anyio("asyncio")
async def test_duplicate_slug_reports_conflict(tmp_path, transport) -> None:
    async with files_database(tmp_path) as session_factory:
        files, dispatcher = build_dispatcher(session_factory, transport)
        await files.register("promo", "ABC123", MediaKind.VIDEO, "New Year Promo")

        await dispatcher.dispatch(message_update("/add promo XYZ photo other", user_id=ADMIN_ID))
        stored = await files.lookup("promo")

    assert transport.calls("send_message")[-1]["text"] == messages.slug_exists("promo")
    assert stored is not None
    assert stored.media_handle == "ABC123"


@pytest.mark.anyio("asyncio")
@pytest.mark.parametrize("text", ["/add x y photo z", "/status"])
async def test_non_admin_is_denied_without_mutation(tmp_path, transport, text: str) -> None:
    async with files_database(tmp_path) as session_factory:
        files, dispatcher = build_dispatcher(session_factory, transport)
        before = await files.count()

        await dispatcher.dispatch(message_update(text, user_id=OTHER_USER_ID))

        assert await files.count() == before
        assert await files.lookup("x") is None

    assert transport.calls("send_message") == [
        {
            "chat_id": 5001,
            "text": messages.NOT_AUTHORIZED,
            "parse_mode": None,
            "reply_markup": None,
        }
    ]


@pytest.mark.anyio("asyncio")
async def test_status_reports_total_for_admin(tmp_path, transport) -> None:
    async with files_database(tmp_path) as session_factory:
        files, dispatcher = build_dispatcher(session_factory, transport, environment="webhook")
        await files.register("one", "H1", MediaKind.PHOTO, None)
        await files.register("two", "H2", MediaKind.DOCUMENT, "doc")

        await dispatcher.dispatch(message_update("/status", user_id=ADMIN_ID))

    [reply] = transport.calls("send_message")
    assert "Total files: <b>2</b>" in reply["text"]
    assert "Bot: <b>Active</b>" in reply["text"]
    assert "Environment: <b>webhook</b>" in reply["text"]
    assert reply["parse_mode"] == "HTML"


@pytest.mark.anyio("asyncio")
async def test_help_is_available_to_everyone(tmp_path, transport) -> None:
    async with files_database(tmp_path) as session_factory:
        _, dispatcher = build_dispatcher(session_factory, transport)
        await dispatcher.dispatch(message_update("/help", user_id=OTHER_USER_ID))

    assert transport.calls("send_message")[0]["text"] == messages.HELP


@pytest.mark.anyio("asyncio")
@pytest.mark.parametrize("text", ["hello", "/add promo ABC123", "/add a b audio c", "/nope"])
async def test_unrecognized_input_gets_no_reply(tmp_path, transport, text: str) -> None:
    async with files_database(tmp_path) as session_factory:
        files, dispatcher = build_dispatcher(session_factory, transport)
        await dispatcher.dispatch(message_update(text, user_id=ADMIN_ID))
        assert await files.count() == 0

    assert transport.events == []


class _FailingFiles:
    async def register(self, *args, **kwargs):
        raise StoreError("files: database operation failed")

    async def count(self) -> int:
        raise StoreError("files: database operation failed")

    async def lookup(self, slug: str):
        raise StoreError("files: database operation failed")


@pytest.mark.anyio("asyncio")
@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("/add a b photo c", messages.ERROR_ADDING_FILE),
        ("/status", messages.ERROR_RETRIEVING_STATUS),
        ("/start promo", messages.ERROR_RETRIEVING_FILE),
    ],
)
async def test_store_failure_becomes_generic_message(
    tmp_path, transport, text: str, expected: str
) -> None:
    async with files_database(tmp_path) as session_factory:
        _, dispatcher = build_dispatcher(session_factory, transport)
    failing = _FailingFiles()
    dispatcher.commands.files = failing
    dispatcher.delivery.files = failing

    await dispatcher.dispatch(message_update(text, user_id=ADMIN_ID))

    assert transport.calls("send_message")[-1]["text"] == expected


@pytest.mark.anyio("asyncio")
async def test_failure_while_reporting_does_not_escape_dispatch(tmp_path) -> None:
    transport = RecordingTransport(fail_on={"send_message"})
    async with files_database(tmp_path) as session_factory:
        _, dispatcher = build_dispatcher(session_factory, transport)

        await dispatcher.dispatch(message_update("/help"))
        await dispatcher.dispatch(message_update("/start unknown"))

    # first attempt plus the error report, for each update
    assert transport.names() == ["send_message"] * 4


@pytest.mark.anyio("asyncio")
async def test_callback_without_payload_is_answered_without_delivery(tmp_path, transport) -> None:
    async with files_database(tmp_path) as session_factory:
        _, dispatcher = build_dispatcher(session_factory, transport)
        await dispatcher.dispatch(callback_update(None, callback_id="cbq-7"))

    assert transport.events == [
        ("answer_callback_query", {"callback_query_id": "cbq-7", "text": None})
    ]


@pytest.mark.anyio("asyncio")
async def test_callback_without_originating_message_is_answered(tmp_path, transport) -> None:
    update = TelegramUpdate.model_validate(
        {
            "update_id": 3,
            "callback_query": {"id": "cbq-8", "from": {"id": 1001}, "data": "promo"},
        }
    )
    async with files_database(tmp_path) as session_factory:
        _, dispatcher = build_dispatcher(session_factory, transport)
        await dispatcher.dispatch(update)

    assert transport.events == [
        ("answer_callback_query", {"callback_query_id": "cbq-8", "text": None})
    ]


@pytest.mark.anyio("asyncio")
async def test_slug_outside_deep_link_alphabet_is_still_registered(tmp_path, transport) -> None:
    async with files_database(tmp_path) as session_factory:
        files, dispatcher = build_dispatcher(session_factory, transport)
        await dispatcher.dispatch(message_update("/add promo.2024 H1 photo x", user_id=ADMIN_ID))
        stored = await files.lookup("promo.2024")

    assert stored is not None
    assert "✅ File added successfully!" in transport.calls("send_message")[0]["text"]
