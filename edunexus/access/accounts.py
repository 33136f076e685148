"""Account collection."""

from sqlalchemy import update

from edunexus.access.base import Repository
from edunexus.db.models import Account


class AccountRepository(Repository[Account]):
    """
    Accounts keyed by id, with ``username`` as unique secondary key.

    update() performs no role checks: any caller can write any role.
    """

    model = Account

    async def read_by_username(self, username: str) -> Account | None:
        async with self.transaction() as db:
            result = await db.execute(self._select().where(Account.username == username))
            return result.scalar_one_or_none()

    async def touch_login(self, account: Account, at: int) -> Account | None:
        """
        Record a successful login.

        Only touches a stored row, never inserts: returns None when the
        account was deleted after it was read.
        """
        async with self.transaction() as db:
            result = await db.execute(
                update(Account)
                .where(Account.id == account.id)
                .values(last_login=at, version=Account.version + 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                return None
            stored = await db.execute(self._select().where(Account.id == account.id))
            saved = stored.scalar_one()

        self._changed(saved)
        return saved
