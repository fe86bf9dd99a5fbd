from typing import AsyncGenerator
from sqlalchemy import DateTime, event
from sqlalchemy.types import TypeDecorator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from app.core.config import DATABASE_URL, SQL_ECHO
from app.utils.timezone_utils import as_utc

Base = declarative_base()


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime stored as UTC.

    SQLite keeps only the wall-clock part of a value, so every datetime is
    shifted to UTC before it is written or compared; naive values are taken
    to be UTC already. Values read back are always aware UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return as_utc(value) if value is not None else None

    def process_result_value(self, value, dialect):
        return as_utc(value) if value is not None else None


def build_engine(url: str = DATABASE_URL, echo: bool = SQL_ECHO):
    """
    Create the async engine for the configured backend.
    Postgres gets a bounded pool; SQLite gets foreign key enforcement.
    """
    kwargs = {"echo": echo, "future": True}
    if url.startswith("postgresql"):
        kwargs.update(pool_size=5, max_overflow=10, pool_pre_ping=True)

    async_engine = create_async_engine(url, **kwargs)

    if url.startswith("sqlite"):
        @event.listens_for(async_engine.sync_engine, "connect")
        def enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return async_engine


def build_sessionmaker(bind) -> sessionmaker:
    return sessionmaker(
        bind=bind,
        class_=AsyncSession,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


engine = build_engine()
AsyncSessionLocal = build_sessionmaker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Async generator to provide a DB session.
    Use with `Depends(get_db)` in FastAPI routes.
    """
    async with AsyncSessionLocal() as session:
        yield session


import app.models  # noqa: E402,F401


async def init_models(bind=None):
    """
    Call this on startup to create all tables defined in your models.
    """
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
