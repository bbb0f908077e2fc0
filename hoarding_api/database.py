import os

from sqlalchemy import Column, String
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from hoarding_api.config import settings
from hoarding_api.utils.dates import utcnow_iso


def _get_database_url() -> str:
    url = settings.database_url
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def _is_sqlite() -> bool:
    return settings.database_url.startswith("sqlite")


def _ensure_sqlite_dir() -> None:
    # sqlite+aiosqlite:///./data/db.sqlite3 -> ./data
    path = settings.database_url.split(":///", 1)[-1]
    if path and path != ":memory:":
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)


_database_url = _get_database_url()

_engine_kwargs: dict = {"echo": False}
if _is_sqlite():
    _ensure_sqlite_dir()
    # One connection per session; nothing pooled across event loops.
    _engine_kwargs["poolclass"] = NullPool
else:
    _engine_kwargs.update(pool_size=5, max_overflow=10, pool_pre_ping=True)

engine = create_async_engine(_database_url, **_engine_kwargs)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


def _created_at_default(context) -> str:
    return context.get_current_parameters().get("created_at") or utcnow_iso()


class TimestampMixin:
    created_at = Column(String, nullable=False, default=utcnow_iso)
    # A fresh row starts with updated_at equal to created_at.
    updated_at = Column(String, nullable=False, default=_created_at_default, onupdate=utcnow_iso)


async def create_tables():
    async with engine.begin() as conn:
        from hoarding_api import models  # noqa: F401
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables():
    async with engine.begin() as conn:
        from hoarding_api import models  # noqa: F401
        await conn.run_sync(Base.metadata.drop_all)


async def get_db():
    async with async_session() as session:
        yield session
