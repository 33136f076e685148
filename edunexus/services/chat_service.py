"""Chat flow: posting into rooms and letting the tutor answer."""

import logging
from dataclasses import dataclass

from edunexus.access import Store
from edunexus.config import get_settings
from edunexus.db.models import (
    AI_TEACHER_ID,
    AI_TEACHER_NAME,
    Account,
    Attachment,
    Group,
    Message,
    SystemSettings,
)
from edunexus.errors import FeatureDisabledError, MaintenanceModeError
from edunexus.services.documents import DocumentExtractor, document_extractor
from edunexus.services.tutor import AiIntent, TutorService, tutor_service

logger = logging.getLogger(__name__)
settings = get_settings()

# Path key of the caller's private tutor room
AI_LAB = "ai_lab"


def ai_lab_key(account_id: str) -> str:
    return f"{AI_LAB}:{account_id}"


@dataclass
class Room:
    """Where a message goes: a stored group, or the caller's AI lab."""

    key: str
    group: Group | None = None

    @property
    def is_ai_lab(self) -> bool:
        return self.group is None

    @property
    def is_ai_enabled(self) -> bool:
        return self.is_ai_lab or self.group.is_ai_enabled


class ChatService:
    """Posts messages and generates tutor replies."""

    def __init__(
        self,
        store: Store,
        tutor: TutorService = tutor_service,
        extractor: DocumentExtractor = document_extractor,
    ):
        self.store = store
        self.tutor = tutor
        self.extractor = extractor

    async def resolve_room(self, account: Account, group_key: str) -> Room | None:
        """
        Map a path key to a room the account may see.

        Returns None for unknown groups and PRIVATE groups the account is not
        a member of.
        """
        if group_key == AI_LAB:
            return Room(key=ai_lab_key(account.id))
        group = await self.store.groups.read(group_key)
        if group is None or not group.is_visible_to(account.id):
            return None
        return Room(key=group.id, group=group)

    async def send_message(
        self,
        account: Account,
        room: Room,
        content: str,
        system_settings: SystemSettings,
        attachment: Attachment | None = None,
        intent: AiIntent | None = None,
    ) -> list[Message]:
        """
        Store the account's message and, when the room calls for it, the
        tutor's reply.

        Returns the stored messages in order: the user message, then the AI
        reply if one was written.

        Raises:
            ValueError: nothing to send.
            MaintenanceModeError: maintenance is on and the account is not staff.
            FeatureDisabledError: chat or uploads are switched off.
            ExternalServiceError: the attachment could not be read.
        """
        text = content.strip() or (f"Generate {intent.value}" if intent else "")
        if not text and attachment is None:
            raise ValueError("Nothing to send")

        if system_settings.maintenance_mode and not account.is_staff:
            raise MaintenanceModeError("Maintenance protocols active.")
        if not room.is_ai_lab and not system_settings.enable_chat:
            raise FeatureDisabledError("Chat is disabled by system administration.")

        document_context = None
        if attachment is not None:
            if not system_settings.enable_file_uploads:
                raise FeatureDisabledError("Uploads disabled by admin.")
            if room.is_ai_enabled:
                document_context = await self.extractor.extract_document(
                    attachment.data, attachment.type
                )

        # Context the tutor sees: the conversation before this message
        history = await self.store.messages.recent(room.key, settings.llm_history_window)

        user_message = Message(
            group_id=room.key,
            user_id=account.id,
            user_name=account.full_name,
            content=text,
            is_ai=False,
            attachments=[attachment] if attachment is not None else [],
        )
        stored = [await self.store.messages.create(user_message)]

        wants_reply = room.is_ai_lab or (
            room.group.is_ai_enabled and ("@ai" in text.lower() or intent is not None)
        )
        if not wants_reply or not system_settings.enable_ai_teacher:
            return stored

        reply = await self.tutor.generate_reply(
            text,
            history,
            account,
            system_settings,
            document_context=document_context,
            intent=intent or AiIntent.TEACH,
        )
        ai_message = Message(
            group_id=room.key,
            user_id=AI_TEACHER_ID,
            user_name=AI_TEACHER_NAME,
            content=reply,
            is_ai=True,
            attachments=[],
        )
        stored.append(await self.store.messages.create(ai_message))
        logger.info("Tutor replied in %s", room.key)
        return stored
