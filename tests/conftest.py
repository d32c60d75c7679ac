"""
pytest shared fixtures

Every test gets its own in-memory SQLite database (aiosqlite) with the test
tables created, so nothing leaks between tests.
"""

import logging
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from repository_pattern import Base
from repository_pattern.common.config import REPOSITORY_CONFIG
from tests.models import Article, ArticleRepository, ArticleService, PlainArticleRepository


logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ============================================================
# 1. Engine & session
# ============================================================
@pytest_asyncio.fixture
async def engine():
    """Function-scoped engine; StaticPool keeps the one in-memory database alive."""
    _engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest_asyncio.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with session_factory() as async_session:
        yield async_session


# ============================================================
# 2. Repositories & services
# ============================================================
@pytest.fixture
def article_repo(session: AsyncSession) -> ArticleRepository:
    return ArticleRepository(session)


@pytest.fixture
def plain_repo(session: AsyncSession) -> PlainArticleRepository:
    return PlainArticleRepository(session)


@pytest.fixture
def article_service(article_repo: ArticleRepository) -> ArticleService:
    return ArticleService(article_repo)


# ============================================================
# 3. Test data
# ============================================================
@pytest_asyncio.fixture
async def articles(session: AsyncSession) -> list[Article]:
    """Three articles: two drafts (alice, bob) and one published (alice)."""
    rows = [
        Article(title="First draft", status="draft", author="alice"),
        Article(title="Second draft", status="draft", author="bob"),
        Article(title="Published piece", status="published", author="alice"),
    ]
    session.add_all(rows)
    await session.flush()
    for row in rows:
        await session.refresh(row)
    return rows


@pytest.fixture
def repository_config(monkeypatch):
    """Patch REPOSITORY_CONFIG entries for one test."""

    def _patch(**values):
        for key, value in values.items():
            monkeypatch.setitem(REPOSITORY_CONFIG, key, value)

    return _patch
