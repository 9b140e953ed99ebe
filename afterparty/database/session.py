from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from afterparty.config.settings import settings
from afterparty.database.schema import SchemaManager


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    # Let SQLAlchemy emit BEGIN itself so DDL runs inside the transaction too
    dbapi_connection.isolation_level = None


def _begin_sqlite_transaction(connection):
    connection.exec_driver_sql("BEGIN")


class DatabaseSessionManager:
    """Manages database connections, sessions and the schema lifecycle."""

    def __init__(self):
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None
        self._schema: SchemaManager | None = None

    def init(self, database_url: str):
        """Initialize database engine and session maker."""
        if database_url.startswith("sqlite"):
            self._engine = create_async_engine(database_url, echo=settings.db_echo)
            event.listen(self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
            event.listen(self._engine.sync_engine, "begin", _begin_sqlite_transaction)
        else:
            self._engine = create_async_engine(
                database_url,
                echo=settings.db_echo,
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=True,
            )

        self._sessionmaker = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._schema = SchemaManager(self._engine)

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("DatabaseSessionManager is not initialized")
        return self._engine

    async def ensure_schema(self):
        """Create or migrate the schema; cheap once it has succeeded."""
        if self._schema is None:
            raise RuntimeError("DatabaseSessionManager is not initialized")
        await self._schema.ensure()

    async def close(self):
        """Close database connections."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        self._schema = None

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get a database session; one transaction per scope."""
        if self._sessionmaker is None:
            raise RuntimeError("DatabaseSessionManager is not initialized")

        async with self._sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise


# Global session manager instance
sessionmanager = DatabaseSessionManager()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session."""
    async with sessionmanager.session() as session:
        yield session
