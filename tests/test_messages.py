"""Message storage: ordering, paging, attachments."""

from edunexus.access import display_order
from edunexus.db.models import Attachment, Message


def make_message(group_id: str, content: str, timestamp: int, **kwargs) -> Message:
    return Message(
        group_id=group_id,
        user_id="u_1",
        user_name="Ada",
        content=content,
        timestamp=timestamp,
        **kwargs,
    )


async def test_read_all_orders_by_timestamp(store):
    await store.messages.create(make_message("g_1", "third", 300))
    await store.messages.create(make_message("g_1", "first", 100))
    await store.messages.create(make_message("g_1", "second", 200))
    await store.messages.create(make_message("g_2", "elsewhere", 150))

    messages = await store.messages.read_all("g_1")

    assert [m.content for m in messages] == ["first", "second", "third"]


async def test_equal_timestamps_keep_insertion_order(store):
    for content in ["a", "b", "c", "d"]:
        await store.messages.create(make_message("g_1", content, 1000))

    messages = await store.messages.read_all("g_1")

    assert [m.content for m in messages] == ["a", "b", "c", "d"]
    assert [m.content for m in display_order(list(reversed(messages)))] == ["a", "b", "c", "d"]


async def test_unknown_group_reads_empty(store):
    assert await store.messages.read_all("g_missing") == []
    assert await store.messages.read_page("g_missing") == []


async def test_read_page_latest_then_cursor(store):
    for i in range(5):
        await store.messages.create(make_message("g_1", f"m{i}", 1000 + i))

    latest = await store.messages.read_page("g_1", limit=3)
    assert [m.content for m in latest] == ["m2", "m3", "m4"]

    await store.messages.create(make_message("g_1", "m5", 2000))
    await store.messages.create(make_message("g_1", "m6", 2001))

    newer = await store.messages.read_page("g_1", after=latest[-1].seq, limit=10)
    assert [m.content for m in newer] == ["m5", "m6"]

    assert await store.messages.read_page("g_1", after=newer[-1].seq) == []


async def test_recent_returns_display_order(store):
    await store.messages.create(make_message("g_1", "late", 500))
    await store.messages.create(make_message("g_1", "early", 100))
    await store.messages.create(make_message("g_1", "middle", 300))

    recent = await store.messages.recent("g_1", 2)

    assert [m.content for m in recent] == ["early", "middle"]


async def test_attachments_round_trip_and_delete_with_message(store):
    message = make_message(
        "g_1",
        "see attached",
        100,
        attachments=[
            Attachment(name="notes.txt", type="text/plain", size=5, data="aGVsbG8=", position=0),
            Attachment(name="more.txt", type="text/plain", size=5, data="d29ybGQ=", position=1),
        ],
    )
    stored = await store.messages.create(message)

    loaded = await store.messages.read(stored.id)
    assert [a.name for a in loaded.attachments] == ["notes.txt", "more.txt"]

    await store.messages.delete(stored.id)
    assert await store.messages.read(stored.id) is None
    assert await store.messages.read_all("g_1") == []


async def test_message_ids_are_unique(store):
    first = await store.messages.create(make_message("g_1", "one", 100))
    second = await store.messages.create(make_message("g_1", "two", 100))

    assert first.id != second.id
    assert first.seq < second.seq
