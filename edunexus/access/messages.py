"""Message collection, indexed by group."""

from sqlalchemy.orm import selectinload

from edunexus.access.base import Repository
from edunexus.config import get_settings
from edunexus.db.models import Message
from edunexus.services.feed import group_topic

settings = get_settings()


def display_order(messages: list[Message]) -> list[Message]:
    """Stable sort on timestamp; equal timestamps keep insertion order."""
    return sorted(messages, key=lambda m: (m.timestamp, m.seq))


class MessageRepository(Repository[Message]):
    """
    Messages with their attachments.

    Attachments are written in the same transaction as their message and
    deleted with it.
    """

    model = Message
    immutable_fields = ("seq",)

    def _select(self):
        return super()._select().options(selectinload(Message.attachments))

    def _changed(self, record: Message) -> None:
        if self._feed is not None:
            self._feed.publish(group_topic(record.group_id))

    async def read_all(self, group_id: str) -> list[Message]:
        """Every message in the group, in display order. Unbounded."""
        async with self.transaction() as db:
            result = await db.execute(
                self._select()
                .where(Message.group_id == group_id)
                .order_by(Message.timestamp, Message.seq)
            )
            return list(result.scalars())

    async def read_page(
        self,
        group_id: str,
        *,
        after: int | None = None,
        limit: int = 50,
    ) -> list[Message]:
        """
        Bounded read in insertion order.

        With ``after`` (a ``seq`` cursor) returns up to ``limit`` messages
        stored after it. Without it, returns the latest ``limit`` messages.
        The cursor for the next call is the last message's ``seq``.
        ``limit`` is capped at the configured page limit.
        """
        limit = min(limit, settings.message_page_limit)
        stmt = self._select().where(Message.group_id == group_id)
        if after is None:
            stmt = stmt.order_by(Message.seq.desc()).limit(limit)
        else:
            stmt = stmt.where(Message.seq > after).order_by(Message.seq).limit(limit)

        async with self.transaction() as db:
            result = await db.execute(stmt)
            page = list(result.scalars())

        if after is None:
            page.reverse()
        return page

    async def recent(self, group_id: str, count: int) -> list[Message]:
        """The last ``count`` messages in display order."""
        return display_order(await self.read_page(group_id, limit=count))
