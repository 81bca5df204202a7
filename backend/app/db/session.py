from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine
from sqlalchemy.pool import StaticPool
from app.core.config import settings


def build_engine(db_url: str = None) -> AsyncEngine:
    """
    Create the async engine. In-memory sqlite needs a single shared
    connection, otherwise every session sees an empty database.
    """
    db_url = db_url or settings.DATABASE_URL
    kwargs = {"echo": False, "future": True}
    if db_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in db_url or db_url.rstrip("/").endswith("sqlite+aiosqlite:"):
            kwargs["poolclass"] = StaticPool
    return create_async_engine(db_url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


async def init_models(engine: AsyncEngine):
    """
    Create tables for every registered model.
    """
    from app.db.base import Base
    from app.models.collection import StoredCollection  # noqa: F401  registers the table

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
