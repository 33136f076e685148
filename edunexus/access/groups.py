"""Group collection."""

from edunexus.access.base import Repository
from edunexus.db.models import Account, Group
from edunexus.services.feed import group_topic


class GroupRepository(Repository[Group]):
    model = Group

    def _changed(self, record: Group) -> None:
        if self._feed is not None:
            self._feed.publish(group_topic(record.id))

    async def read_visible(self, account: Account) -> list[Group]:
        """PUBLIC groups plus PRIVATE groups the account is a member of."""
        groups = await self.read_all()
        return [g for g in groups if g.is_visible_to(account.id)]

    async def read_by_invite_code(self, invite_code: str) -> Group | None:
        async with self.transaction() as db:
            result = await db.execute(self._select().where(Group.invite_code == invite_code))
            return result.scalars().first()
