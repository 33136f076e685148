"""Chat flow: room resolution, feature gates, tutor replies."""

import base64

import pytest

from edunexus.db.models import AI_TEACHER_ID, AI_TEACHER_NAME, Account, Attachment, Group
from edunexus.db.seed import default_settings
from edunexus.errors import FeatureDisabledError, MaintenanceModeError
from edunexus.services.chat_service import AI_LAB, ChatService, ai_lab_key
from edunexus.services.tutor import AiIntent


class FakeTutor:
    def __init__(self):
        self.calls = []

    async def generate_reply(self, prompt, history, account, system_settings, document_context=None, intent=AiIntent.TEACH):
        self.calls.append(
            {"prompt": prompt, "history": [m.content for m in history], "context": document_context, "intent": intent}
        )
        return f"Answer to: {prompt}"


class FakeExtractor:
    async def extract_document(self, data, mime_type):
        return base64.b64decode(data).decode()


@pytest.fixture
def tutor() -> FakeTutor:
    return FakeTutor()


@pytest.fixture
def chat(store, tutor) -> ChatService:
    return ChatService(store, tutor=tutor, extractor=FakeExtractor())


@pytest.fixture
def ada() -> Account:
    return Account(id="u_1", username="ada", full_name="Ada", role="STUDENT")


@pytest.fixture
async def study_group(store) -> Group:
    return await store.groups.create(
        Group(id="g_1", name="Physics", is_ai_enabled=True, created_by="u_1", members=["u_1"])
    )


def text_attachment(text: str) -> Attachment:
    data = base64.b64encode(text.encode()).decode()
    return Attachment(name="notes.txt", type="text/plain", size=len(text), data=data, position=0)


async def test_ai_lab_room_is_per_account(chat, ada):
    room = await chat.resolve_room(ada, AI_LAB)

    assert room.key == ai_lab_key("u_1") == "ai_lab:u_1"
    assert room.is_ai_lab


async def test_private_group_hidden_from_non_members(chat, store, ada):
    await store.groups.create(Group(id="g_p", name="Secret", type="PRIVATE", created_by="u_2", members=["u_2"]))

    assert await chat.resolve_room(ada, "g_p") is None
    assert await chat.resolve_room(ada, "g_missing") is None


async def test_ai_lab_always_gets_a_reply(chat, store, tutor, ada):
    room = await chat.resolve_room(ada, AI_LAB)

    stored = await chat.send_message(ada, room, "What is inertia?", default_settings())

    assert [m.is_ai for m in stored] == [False, True]
    reply = stored[1]
    assert reply.user_id == AI_TEACHER_ID
    assert reply.user_name == AI_TEACHER_NAME
    assert reply.content == "Answer to: What is inertia?"
    assert [m.content for m in await store.messages.read_all("ai_lab:u_1")] == [
        "What is inertia?",
        "Answer to: What is inertia?",
    ]


async def test_group_reply_needs_mention_or_intent(chat, tutor, ada, study_group):
    room = await chat.resolve_room(ada, "g_1")

    plain = await chat.send_message(ada, room, "hello everyone", default_settings())
    mention = await chat.send_message(ada, room, "@AI explain torque", default_settings())
    intent_only = await chat.send_message(ada, room, "", default_settings(), intent=AiIntent.QUIZ)

    assert len(plain) == 1
    assert len(mention) == 2
    assert intent_only[0].content == "Generate QUIZ"
    assert tutor.calls[-1]["intent"] == AiIntent.QUIZ


async def test_history_excludes_the_new_message(chat, tutor, ada, study_group):
    room = await chat.resolve_room(ada, "g_1")
    await chat.send_message(ada, room, "first", default_settings())

    await chat.send_message(ada, room, "@ai second", default_settings())

    assert tutor.calls[0]["history"] == ["first"]


async def test_no_reply_when_ai_teacher_disabled(chat, store, tutor, ada):
    settings = default_settings()
    settings.enable_ai_teacher = False
    room = await chat.resolve_room(ada, AI_LAB)

    stored = await chat.send_message(ada, room, "hi", settings)

    assert len(stored) == 1
    assert tutor.calls == []


async def test_maintenance_blocks_students(chat, store, ada):
    settings = default_settings()
    settings.maintenance_mode = True
    room = await chat.resolve_room(ada, AI_LAB)

    with pytest.raises(MaintenanceModeError):
        await chat.send_message(ada, room, "hi", settings)

    assert await store.messages.read_all(room.key) == []


async def test_chat_disabled_blocks_groups_but_not_ai_lab(chat, ada, study_group):
    settings = default_settings()
    settings.enable_chat = False

    with pytest.raises(FeatureDisabledError):
        await chat.send_message(ada, await chat.resolve_room(ada, "g_1"), "hi", settings)

    stored = await chat.send_message(ada, await chat.resolve_room(ada, AI_LAB), "hi", settings)
    assert len(stored) == 2


async def test_attachment_feeds_document_context(chat, store, tutor, ada):
    room = await chat.resolve_room(ada, AI_LAB)

    stored = await chat.send_message(
        ada, room, "summarize", default_settings(), attachment=text_attachment("F = ma")
    )

    assert tutor.calls[0]["context"] == "F = ma"
    loaded = await store.messages.read(stored[0].id)
    assert [a.name for a in loaded.attachments] == ["notes.txt"]


async def test_uploads_disabled(chat, ada):
    settings = default_settings()
    settings.enable_file_uploads = False
    room = await chat.resolve_room(ada, AI_LAB)

    with pytest.raises(FeatureDisabledError):
        await chat.send_message(ada, room, "see file", settings, attachment=text_attachment("x"))


async def test_empty_message_rejected(chat, ada):
    room = await chat.resolve_room(ada, AI_LAB)

    with pytest.raises(ValueError):
        await chat.send_message(ada, room, "   ", default_settings())
