# circularbuild/infrastructure/database.py
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Sequence

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class Database:
    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    ):
        self.engine = engine
        self.SessionLocal = session_factory or async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def connect(self) -> None:
        async with self.engine.begin() as conn:
            import circularbuild.infrastructure.models  # noqa: F401

            await conn.run_sync(Base.metadata.create_all)

    async def disconnect(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.SessionLocal() as session:
            yield session

    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.session() as session:
            yield session


def create_database(
    engine: AsyncEngine,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> Database:
    return Database(engine, session_factory)


def insert_or_ignore(session: AsyncSession, model, values: dict, conflict_columns: Sequence[str]):
    """Build an INSERT that skips rows colliding on ``conflict_columns``."""
    if session.get_bind().dialect.name == "postgresql":
        stmt = postgresql.insert(model)
    else:
        stmt = sqlite.insert(model)
    return stmt.values(**values).on_conflict_do_nothing(index_elements=list(conflict_columns))
