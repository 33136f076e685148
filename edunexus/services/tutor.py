"""AI tutor: reply generation over the Anthropic Messages API."""

import logging
import re
from enum import Enum as PyEnum
from urllib.parse import urlparse

from anthropic import APIError, AsyncAnthropic

from edunexus.config import get_settings
from edunexus.db.models import Account, Message, SystemSettings

logger = logging.getLogger(__name__)
settings = get_settings()

_YOUTUBE_LINK = re.compile(r"(https?://)?(www\.)?(youtube\.com|youtu\.be)/[^\s]+")

MISSING_KEY_REPLY = "CRITICAL ERROR: AI Neural Link disconnected (Missing API Key)."
DISABLED_REPLY = "The AI Teacher module is currently disabled by system administration."
YOUTUBE_DISABLED_REPLY = (
    "YouTube analysis is currently disabled. Please upgrade your plan or contact admin."
)
SERVICE_ERROR_REPLY = "I encountered a neural network error. Please try again."
EMPTY_REPLY = "I'm processing complex data. Please clarify your request."


class AiIntent(str, PyEnum):
    TEACH = "TEACH"
    NOTES = "NOTES"
    QUIZ = "QUIZ"
    SUMMARY = "SUMMARY"
    YOUTUBE_ANALYSIS = "YOUTUBE_ANALYSIS"


_INTENT_TASKS = {
    AiIntent.NOTES: """
**TASK**: Generate comprehensive **Study Notes** for the provided topic or context.
**FORMAT**:
1. **Title** (H1)
2. **Executive Summary** (Italicized)
3. **Key Concepts** (Bulleted list with definitions)
4. **Deep Dive** (Structured paragraphs with H3 headers)
5. **Visual Description**: Describe a diagram that would explain the concept.
6. **Actionable Takeaways**.
""",
    AiIntent.QUIZ: """
**TASK**: Create a **Practice Quiz** (5 Questions).
**FORMAT**:
- Question (Multiple Choice or Short Answer)
- [Hidden Answer Key at the very bottom]
""",
    AiIntent.SUMMARY: """
**TASK**: Summarize the content concisely.
- Use bullet points.
- Highlight the 3 most important facts.
""",
}

_TEACHING_STYLE = """
**TEACHING STYLE**:
- Explain *why* and *how*.
- Use **bold** for key terms.
- Connect to real-world examples.
- If the user asks a question, answer it directly then expand.
"""


def has_youtube_link(text: str) -> bool:
    return bool(_YOUTUBE_LINK.search(text))


def build_system_prompt(
    account: Account,
    intent: AiIntent,
    document_context: str | None = None,
    youtube: bool = False,
) -> str:
    prompt = f"""You are **Prof. Nexus**, an expert AI Educator.
Student: {account.full_name} ({account.role}).

**YOUR GOAL**: Provide the highest quality educational assistance.
"""
    prompt += _INTENT_TASKS.get(intent, _TEACHING_STYLE)

    if document_context:
        context = document_context[: settings.document_context_max_chars]
        if len(document_context) > settings.document_context_max_chars:
            context += "\n\n[... content truncated ...]"
        prompt += (
            f'\n\n**ATTACHED DOCUMENT CONTENT**: """{context}"""\n'
            "Base your answer strictly on this content if relevant."
        )

    if youtube:
        prompt += (
            "\n\n**INSTRUCTION**: The user provided a YouTube link. Use your search tools to find "
            "the video context/transcript if possible, or infer from the title/metadata provided "
            "in the chat. Explain the video content."
        )
    return prompt


def history_to_messages(history: list[Message]) -> list[dict]:
    """
    Map the last few chat messages to API turns.

    AI messages become assistant turns, everything else user turns. Adjacent
    turns with the same role are merged, since the API expects alternation.
    """
    turns: list[dict] = []
    for message in history[-settings.llm_history_window:]:
        role = "assistant" if message.is_ai else "user"
        if turns and turns[-1]["role"] == role:
            turns[-1]["content"] += f"\n\n{message.content}"
        else:
            turns.append({"role": role, "content": message.content})
    # Conversations must open with a user turn
    while turns and turns[0]["role"] == "assistant":
        turns.pop(0)
    return turns


def _reply_text(response) -> tuple[str, list[str]]:
    """Concatenate text blocks and collect cited URLs in order."""
    parts: list[str] = []
    links: list[str] = []
    for block in response.content:
        if getattr(block, "type", None) != "text":
            continue
        parts.append(block.text)
        for citation in getattr(block, "citations", None) or []:
            url = getattr(citation, "url", None)
            if url and url not in links:
                links.append(url)
    return "".join(parts).strip(), links


class TutorService:
    """Generates tutor replies. All failures come back as reply text."""

    def __init__(self, api_key: str | None = None):
        key = api_key if api_key is not None else settings.anthropic_api_key
        self.client = AsyncAnthropic(api_key=key) if key else None

    async def generate_reply(
        self,
        prompt: str,
        history: list[Message],
        account: Account,
        system_settings: SystemSettings,
        document_context: str | None = None,
        intent: AiIntent = AiIntent.TEACH,
    ) -> str:
        """
        Answer ``prompt`` in the context of the recent chat.

        Soft failures (missing key, module disabled, YouTube analysis disabled,
        API error) return a user-visible message instead of raising.
        """
        if self.client is None:
            return MISSING_KEY_REPLY
        if not system_settings.enable_ai_teacher:
            return DISABLED_REPLY

        youtube = has_youtube_link(prompt) or intent == AiIntent.YOUTUBE_ANALYSIS
        if youtube and not system_settings.enable_youtube_analysis:
            return YOUTUBE_DISABLED_REPLY

        messages = history_to_messages(history) + [{"role": "user", "content": prompt}]
        if len(messages) > 1 and messages[-2]["role"] == "user":
            # Merge into the trailing user turn to keep alternation
            last = messages.pop()
            messages[-1]["content"] += f"\n\n{last['content']}"

        request = {
            "model": settings.llm_model,
            "max_tokens": settings.llm_max_tokens,
            "temperature": settings.llm_temperature,
            "system": build_system_prompt(account, intent, document_context, youtube),
            "messages": messages,
        }
        if youtube:
            request["tools"] = [{"type": "web_search_20250305", "name": "web_search", "max_uses": 3}]

        try:
            response = await self.client.messages.create(**request)
        except APIError:
            logger.exception("Tutor reply failed")
            return SERVICE_ERROR_REPLY

        text, links = _reply_text(response)
        if not text:
            text = EMPTY_REPLY
        if links:
            sources = "\n".join(f"- [{urlparse(link).hostname}]({link})" for link in links[:3])
            text += f"\n\n**Sources:**\n{sources}"
        return text


# Singleton instance
tutor_service = TutorService()
