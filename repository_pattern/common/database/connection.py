import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from repository_pattern.common.config import DB_CONFIG


logger = logging.getLogger(__name__)


def build_database_url(config: dict | None = None) -> str:
    """Build the async connection URL from DB settings."""
    config = config or DB_CONFIG
    if config["driver"].startswith("sqlite"):
        return f"{config['driver']}:///{config['database']}"
    user = config["user"]
    password = config["password"]
    host = config["host"]
    port = config["port"]
    database = config["database"]
    return f"{config['driver']}://{user}:{password}@{host}:{port}/{database}"


class AsyncDatabaseEngine:
    """
    SQLAlchemy AsyncIO engine wrapper (singleton).

    Passing ``url`` on first construction overrides the configured database,
    which is how tests point the engine at SQLite.
    """

    _instance: Optional["AsyncDatabaseEngine"] = None
    engine: AsyncEngine | None = None
    session_factory: async_sessionmaker | None = None

    def __new__(cls, url: str | None = None):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, url: str | None = None):
        if self.engine is not None:
            return

        self.url = url or build_database_url()
        self.engine = create_async_engine(self.url, echo=DB_CONFIG["echo"], pool_pre_ping=True)
        self.session_factory = async_sessionmaker(
            bind=self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False, autocommit=False
        )
        logger.info(f"AsyncDatabaseEngine initialized: {self.engine.url.render_as_string(hide_password=True)}")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        async with db.get_session() as session:

        Commits on clean exit, rolls back and re-raises otherwise.
        """
        if self.session_factory is None:
            raise RuntimeError("Database SessionFactory is not initialized.")

        session: AsyncSession = self.session_factory()
        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.error(f"Session rollback due to exception: {e}")
            await session.rollback()
            raise
        finally:
            await session.close()

    async def dispose(self) -> None:
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None
            AsyncDatabaseEngine._instance = None
            logger.info("AsyncDatabaseEngine disposed.")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Session generator for framework dependency injection (e.g. FastAPI ``Depends``)."""
    db = AsyncDatabaseEngine()
    async with db.get_session() as session:
        yield session
