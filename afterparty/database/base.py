from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# SQLite only autoincrements INTEGER PRIMARY KEY
BigIntPK = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    """Declarative base for all models."""


class TimestampMixin:
    """Adds created_at / updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )


def insert_ignoring_conflicts(dialect_name: str, model):
    """
    INSERT ... ON CONFLICT DO NOTHING for the given dialect.

    Rows that would violate any unique constraint are skipped by the
    database itself, so concurrent inserts of the same key never fail.
    """
    if dialect_name == "postgresql":
        return postgresql.insert(model).on_conflict_do_nothing()
    if dialect_name == "sqlite":
        return sqlite.insert(model).on_conflict_do_nothing()
    raise NotImplementedError(f"Unsupported database dialect: {dialect_name}")
