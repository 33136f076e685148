"""Support ticket collection."""

from edunexus.access.base import Repository
from edunexus.db.models import SupportTicket


class TicketRepository(Repository[SupportTicket]):
    model = SupportTicket

    async def read_all(self) -> list[SupportTicket]:
        """Every ticket, newest first."""
        tickets = await super().read_all()
        return sorted(tickets, key=lambda t: t.timestamp, reverse=True)

    async def read_for_account(self, account_id: str) -> list[SupportTicket]:
        async with self.transaction() as db:
            result = await db.execute(
                self._select()
                .where(SupportTicket.user_id == account_id)
                .order_by(SupportTicket.timestamp.desc())
            )
            return list(result.scalars())
