"""The persistent store: engine, repositories and change feed in one handle."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from edunexus.access.accounts import AccountRepository
from edunexus.access.groups import GroupRepository
from edunexus.access.messages import MessageRepository
from edunexus.access.settings import SettingsRepository
from edunexus.access.tickets import TicketRepository
from edunexus.db.session import create_engine, create_session_factory, run_migrations
from edunexus.errors import StoreConnectionError
from edunexus.services.feed import ChangeFeed
from edunexus.services.settings_ref import SystemSettingsRef

logger = logging.getLogger(__name__)


class Store:
    """Process-wide access to every collection."""

    def __init__(self, engine: AsyncEngine, feed: ChangeFeed | None = None):
        self.engine = engine
        self.sessions = create_session_factory(engine)
        self.feed = feed or ChangeFeed()

        self.accounts = AccountRepository(self.sessions, self.feed)
        self.groups = GroupRepository(self.sessions, self.feed)
        self.messages = MessageRepository(self.sessions, self.feed)
        self.settings = SettingsRepository(self.sessions, self.feed)
        self.tickets = TicketRepository(self.sessions, self.feed)

        self.system_settings = SystemSettingsRef(self.settings)

    async def close(self) -> None:
        await self.engine.dispose()


async def open_store(database_url: str | None = None) -> Store:
    """
    Connect, upgrade the schema if its version is behind, and load settings.

    The first open of a fresh database creates the collections and seeds the
    default accounts and settings; later opens skip straight through.
    """
    engine = create_engine(database_url)
    try:
        await run_migrations(engine)
    except SQLAlchemyError as e:
        await engine.dispose()
        logger.exception("Could not open store at %s", engine.url)
        raise StoreConnectionError("Database connection failed") from e

    store = Store(engine)
    await store.system_settings.reload()
    return store
