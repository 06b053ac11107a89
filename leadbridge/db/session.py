"""Database engine, session factory and FastAPI dependencies."""

from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from leadbridge.config import settings
from leadbridge.db.migrations import apply_column_migrations
from leadbridge.db.models import Base

DATABASE_URL = settings.sqlalchemy_url

engine_kwargs: dict = {"echo": settings.log_level.upper() == "DEBUG"}
if DATABASE_URL.get_backend_name() == "postgresql":
    engine_kwargs.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
    )
    if settings.db_ssl:
        engine_kwargs["connect_args"] = {"ssl": "require"}

engine = create_async_engine(DATABASE_URL, **engine_kwargs)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def init_db():
    """Create tables and add any missing columns (safe to call on every startup)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await apply_column_migrations(conn)


async def dispose_db():
    await engine.dispose()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Dependency: the session factory, so callers scope sessions themselves."""
    return async_session


async def get_session() -> AsyncIterator[AsyncSession]:
    """Dependency: one session per request, closed afterwards."""
    async with async_session() as session:
        yield session
