"""
Live-update streams (Server-Sent Events) backed by pollers.

Each open stream mounts one poller; the poller is stopped when the client
disconnects. Events:
- settings: the full settings record, sent when it differs from the last one
- messages: a MessagePage of messages stored since the last event
"""

import asyncio
import logging

from fastapi import APIRouter, HTTPException, status
from sse_starlette.sse import EventSourceResponse

from edunexus.access.messages import display_order
from edunexus.api.deps import ChatServiceDep, CurrentAccount, StoreDep
from edunexus.config import sanitize_error
from edunexus.db.models import Message, SystemSettings
from edunexus.schemas.messages import MessagePage, MessageRead
from edunexus.schemas.settings import SystemSettingsRead
from edunexus.services.polling import Poller, message_poller, settings_poller

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sync", tags=["sync"])


async def _stream(poller: Poller, queue: asyncio.Queue):
    """Relay queued events until the client goes away, then unmount the poller."""
    try:
        async with poller:
            while True:
                yield await queue.get()
    except Exception as e:
        logger.exception("Sync stream %s failed", poller.name)
        yield {"event": "error", "data": sanitize_error(e, generic_message="Sync failed.")}


@router.get("/settings")
async def stream_settings(store: StoreDep) -> EventSourceResponse:
    queue: asyncio.Queue = asyncio.Queue()
    last: dict = {}

    def deliver(current: SystemSettings) -> None:
        payload = SystemSettingsRead.model_validate(current).model_copy(
            update={"is_default": store.system_settings.is_default}
        )
        if payload.model_dump() == last:
            return
        last.clear()
        last.update(payload.model_dump())
        queue.put_nowait({"event": "settings", "data": payload.model_dump_json()})

    return EventSourceResponse(_stream(settings_poller(store, deliver), queue))


@router.get("/groups/{group_key}")
async def stream_messages(
    group_key: str,
    current_account: CurrentAccount,
    store: StoreDep,
    chat: ChatServiceDep,
    after: int | None = None,
) -> EventSourceResponse:
    """Stream new messages for a group (or ``ai_lab``), starting after ``after``."""
    room = await chat.resolve_room(current_account, group_key)
    if room is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")

    queue: asyncio.Queue = asyncio.Queue()

    def deliver(page: list[Message]) -> None:
        if not page:
            return
        event = MessagePage(
            messages=[MessageRead.model_validate(m) for m in display_order(page)],
            next_cursor=max(m.seq for m in page),
        )
        queue.put_nowait({"event": "messages", "data": event.model_dump_json()})

    return EventSourceResponse(_stream(message_poller(store, room.key, deliver, after=after), queue))
