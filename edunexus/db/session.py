"""Database engine, session factory and schema upgrades."""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import event
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from edunexus.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"


def create_engine(database_url: str | None = None) -> AsyncEngine:
    """Create the async engine; SQLite connections get foreign keys enabled."""
    url = database_url or settings.database_url
    engine = create_async_engine(
        url,
        echo=settings.debug,
        pool_pre_ping=True,
    )

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory; objects stay readable after their transaction commits."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def alembic_config(database_url: str | None = None) -> Config:
    """Alembic config pointing at the packaged migrations."""
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    url = database_url or settings.database_url_sync
    # ConfigParser interpolation
    config.set_main_option("sqlalchemy.url", url.replace("%", "%%"))
    return config


def _upgrade(connection: Connection, config: Config) -> None:
    config.attributes["connection"] = connection
    command.upgrade(config, "head")


async def run_migrations(engine: AsyncEngine) -> None:
    """
    Bring the schema to the latest revision.

    The alembic_version table is the schema version marker: table creation and
    seeding of default accounts/settings run once, on the first upgrade.
    """
    config = alembic_config(engine.url.render_as_string(hide_password=False))
    async with engine.begin() as connection:
        await connection.run_sync(_upgrade, config)
    logger.info("Schema at head revision")
