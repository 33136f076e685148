"""Live-update streams: events emitted and poller teardown on disconnect."""

import asyncio
import json

from edunexus.api.routes.sync import stream_messages, stream_settings
from edunexus.db.models import Message, SystemSettings
from edunexus.services.chat_service import ChatService, ai_lab_key


async def next_event(stream, timeout: float = 2.0) -> dict:
    return await asyncio.wait_for(anext(stream), timeout)


async def test_settings_stream_sends_changes_and_unsubscribes(store):
    response = await stream_settings(store)
    stream = response.body_iterator

    first = await next_event(stream)
    assert first["event"] == "settings"
    assert json.loads(first["data"])["enable_chat"] is True

    await store.settings.update(SystemSettings(enable_chat=False))
    changed = await next_event(stream)
    assert json.loads(changed["data"])["enable_chat"] is False

    await stream.aclose()
    assert store.feed._subscribers == {}


async def test_message_stream_sends_pages_in_display_order(store):
    founder = await store.accounts.read("founder_001")
    room = ai_lab_key(founder.id)
    await store.messages.create(Message(group_id=room, user_id=founder.id, content="later", timestamp=200))
    await store.messages.create(Message(group_id=room, user_id=founder.id, content="earlier", timestamp=100))

    response = await stream_messages("ai_lab", founder, store, ChatService(store))
    stream = response.body_iterator

    first = await next_event(stream)
    assert first["event"] == "messages"
    page = json.loads(first["data"])
    assert [m["content"] for m in page["messages"]] == ["earlier", "later"]
    assert page["next_cursor"] == max(m["seq"] for m in page["messages"])

    await store.messages.create(Message(group_id=room, user_id=founder.id, content="newest", timestamp=300))
    newer = json.loads((await next_event(stream))["data"])
    assert [m["content"] for m in newer["messages"]] == ["newest"]

    await stream.aclose()
    assert store.feed._subscribers == {}
