import asyncio
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, List, Optional, TypeVar
from uuid import uuid4

import structlog
from asyncpg import Connection
from dotenv import load_dotenv
from sqlalchemy import (
    JSON, Column, DateTime, Integer, String, UniqueConstraint,
    delete, func, select, text, update,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

load_dotenv()

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT = 5.0


@dataclass(frozen=True)
class Settings:
    database_url: str
    store_timeout: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"
    log_json: bool = True


def load_settings() -> Settings:
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        postgres_user = os.getenv("POSTGRES_USER")
        postgres_password = os.getenv("POSTGRES_PASSWORD")
        postgres_db = os.getenv("POSTGRES_DB_URL", "localhost:5432/padeldb")
        database_url = f"postgresql+asyncpg://{postgres_user}:{postgres_password}@{postgres_db}"
    return Settings(
        database_url=database_url,
        store_timeout=float(os.getenv("STORE_TIMEOUT", DEFAULT_TIMEOUT)),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_json=os.getenv("LOG_JSON", "true").lower() in ("1", "true", "yes"),
    )


class FixedConnection(Connection):
    def _get_unique_id(self, prefix: str) -> str:
        return f'__asyncpg_{prefix}_{uuid4()}__'


def create_store_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    connect_args = {}
    if database_url.startswith("postgresql+asyncpg"):
        # pgbouncer in transaction mode cannot share prepared statements
        connect_args = {
            "statement_cache_size": 0,
            "prepared_statement_cache_size": 0,
            "connection_class": FixedConnection,
        }
    return create_async_engine(database_url, echo=echo, future=True, connect_args=connect_args)


class Base(DeclarativeBase): pass

#ORM

class DocumentORM(Base):
    __tablename__ = "documents"
    __table_args__ = (UniqueConstraint("collection", "id", name="uq_documents_collection_id"),)

    seq        = Column(Integer, primary_key=True, autoincrement=True)  # natural insertion order
    collection = Column(String, nullable=False, index=True)
    id         = Column(String, nullable=False)
    body       = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class DocumentStore:
    """
    Process-wide document store client.

    Build it once at startup, hand it to the repositories, and release it
    with ``close()`` on shutdown. Every call made through it is bounded by
    ``timeout`` seconds and fails with ``TimeoutError`` past that bound.
    """

    def __init__(self, engine: AsyncEngine, timeout: float = DEFAULT_TIMEOUT):
        self.engine = engine
        self.timeout = timeout
        self._sessionmaker = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "DocumentStore":
        return cls(create_store_engine(settings.database_url), timeout=settings.store_timeout)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self._sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def run(self, call: Awaitable[T]) -> T:
        return await asyncio.wait_for(call, timeout=self.timeout)

    def collection(self, name: str) -> "Collection":
        return Collection(self, name)

    async def create_all(self) -> None:
        async def _create():
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        await self.run(_create())

    async def ping(self) -> None:
        async def _ping():
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

        await self.run(_ping())

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("document store disposed")


class Collection:
    """Documents of one kind, addressed by id or by top-level string fields."""

    def __init__(self, store: DocumentStore, name: str):
        self.store = store
        self.name = name

    def _where(self, id: Optional[str] = None, id_prefix: Optional[str] = None, **fields: Any) -> list:
        clauses = [DocumentORM.collection == self.name]
        if id is not None:
            clauses.append(DocumentORM.id == id)
        if id_prefix is not None:
            # literal and case sensitive, unlike LIKE on sqlite
            clauses.append(func.substr(DocumentORM.id, 1, len(id_prefix)) == id_prefix)
        for key, value in fields.items():
            clauses.append(DocumentORM.body[key].as_string() == value)
        return clauses

    async def find_one(self, id: Optional[str] = None, **fields: Any) -> Optional[dict]:
        """Return the first matching document, or None when nothing matches."""
        stmt = (
            select(DocumentORM.body)
            .where(*self._where(id=id, **fields))
            .order_by(DocumentORM.seq)
            .limit(1)
        )

        async def _find_one():
            async with self.store.session() as session:
                result = await session.execute(stmt)
                return result.scalar_one_or_none()

        return await self.store.run(_find_one())

    async def find(self, id_prefix: Optional[str] = None, **fields: Any) -> List[dict]:
        stmt = (
            select(DocumentORM.body)
            .where(*self._where(id_prefix=id_prefix, **fields))
            .order_by(DocumentORM.seq)
        )

        async def _find():
            async with self.store.session() as session:
                cursor = await session.stream_scalars(stmt)
                return [body async for body in cursor]

        return await self.store.run(_find())

    async def insert_one(self, id: str, document: dict) -> None:
        async def _insert():
            async with self.store.session() as session:
                session.add(DocumentORM(collection=self.name, id=id, body=document))

        await self.store.run(_insert())

    async def replace_one(self, id: str, document: dict) -> int:
        stmt = (
            update(DocumentORM)
            .where(*self._where(id=id))
            .values(body=document)
            .execution_options(synchronize_session=False)
        )

        async def _replace():
            async with self.store.session() as session:
                result = await session.execute(stmt)
                return result.rowcount

        return await self.store.run(_replace())

    async def delete_one(self, id: str) -> int:
        stmt = (
            delete(DocumentORM)
            .where(*self._where(id=id))
            .execution_options(synchronize_session=False)
        )

        async def _delete():
            async with self.store.session() as session:
                result = await session.execute(stmt)
                return result.rowcount

        return await self.store.run(_delete())
