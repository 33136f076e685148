"""
Message routes.

``group_key`` is a group id, or ``ai_lab`` for the caller's private tutor
room. Reads page by the store's insertion sequence: pass the previous
page's ``next_cursor`` as ``after`` to get only newer messages. Each page is
returned in display order.
"""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from edunexus.access.messages import display_order
from edunexus.api.deps import ChatServiceDep, CurrentAccount, StoreDep, SystemSettingsDep
from edunexus.config import get_settings
from edunexus.db.models import Account, Attachment
from edunexus.schemas.messages import MessageCreate, MessagePage, MessageRead
from edunexus.services.chat_service import ChatService, Room

router = APIRouter(prefix="/groups", tags=["messages"])
settings = get_settings()


async def _room_or_404(chat: ChatService, account: Account, group_key: str) -> Room:
    room = await chat.resolve_room(account, group_key)
    if room is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")
    return room


@router.get("/{group_key}/messages", response_model=MessagePage)
async def list_messages(
    group_key: str,
    current_account: CurrentAccount,
    store: StoreDep,
    chat: ChatServiceDep,
    after: int | None = None,
    limit: Annotated[int, Query(ge=1, le=settings.message_page_limit)] = 50,
) -> MessagePage:
    room = await _room_or_404(chat, current_account, group_key)
    page = await store.messages.read_page(room.key, after=after, limit=limit)
    return MessagePage(
        messages=[MessageRead.model_validate(m) for m in display_order(page)],
        next_cursor=max(m.seq for m in page) if page else after,
    )


@router.post(
    "/{group_key}/messages",
    response_model=list[MessageRead],
    status_code=status.HTTP_201_CREATED,
)
async def post_message(
    group_key: str,
    data: MessageCreate,
    current_account: CurrentAccount,
    system_settings: SystemSettingsDep,
    chat: ChatServiceDep,
) -> list[MessageRead]:
    """
    Post a message. Returns what was stored: the message, then the tutor's
    reply when the room and text call for one.
    """
    room = await _room_or_404(chat, current_account, group_key)

    attachment = None
    if data.attachment is not None:
        attachment = Attachment(
            name=data.attachment.name,
            type=data.attachment.type,
            size=data.attachment.size,
            data=data.attachment.data,
            position=0,
        )

    try:
        stored = await chat.send_message(
            current_account,
            room,
            data.content,
            system_settings,
            attachment=attachment,
            intent=data.intent,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return [MessageRead.model_validate(m) for m in stored]
