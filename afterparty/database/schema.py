"""Schema bootstrap: create, backfill and migrate legacy settlement data."""

import asyncio
import logging
from typing import Dict, Iterable, List, Set

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Connection,
    DateTime,
    case,
    cast,
    exists,
    false,
    func,
    insert,
    inspect,
    literal,
    literal_column,
    null,
    select,
    text,
    update,
)
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.schema import AddConstraint, CreateIndex

from afterparty.database.base import Base
from afterparty.database.models import BucketParticipant, Event, Participant, SettlementBucket
from afterparty.database.queries import (
    mirror_primary_statement,
    primary_bucket_value,
    sweep_orphans_statement,
    unlinked_participant_filter,
)
from afterparty.utils.constants import DEFAULT_BUCKET_TITLE

logger = logging.getLogger(__name__)

# Key for pg_advisory_xact_lock, shared by every process running the upgrade
SCHEMA_LOCK_KEY = 7_240_518


class SchemaManager:
    """
    Owns schema readiness for one engine.

    `ensure()` may be called any number of times. Concurrent callers in the
    same process wait on a lock; on PostgreSQL an advisory lock also
    serialises separate processes. A failed run leaves the manager not ready,
    so the next call retries from scratch.
    """

    def __init__(self, engine: AsyncEngine):
        self._engine = engine
        self._lock = asyncio.Lock()
        self._ready = False

    @property
    def is_ready(self) -> bool:
        return self._ready

    async def ensure(self) -> None:
        if self._ready:
            return

        async with self._lock:
            if self._ready:
                return

            async with self._engine.begin() as connection:
                if connection.dialect.name == "postgresql":
                    await connection.execute(
                        text("SELECT pg_advisory_xact_lock(:key)"),
                        {"key": SCHEMA_LOCK_KEY}
                    )
                await connection.run_sync(upgrade_schema)

            self._ready = True
            logger.info("Database schema is ready")


def upgrade_schema(connection: Connection) -> None:
    """Bring the schema and data to the bucket/link model. Runs in one transaction."""
    inspector = inspect(connection)
    existing_columns: Dict[str, Set[str]] = {
        table_name: {column["name"] for column in inspector.get_columns(table_name)}
        for table_name in inspector.get_table_names()
    }

    Base.metadata.create_all(connection, checkfirst=True)

    for table in Base.metadata.sorted_tables:
        if table.name not in existing_columns:
            continue
        for column in table.columns:
            if column.name not in existing_columns[table.name]:
                _add_column(connection, table, column)
        # The inspector cannot see expression indexes on SQLite
        for index in table.indexes:
            connection.execute(CreateIndex(index, if_not_exists=True))

    _carry_legacy_event_columns(connection, existing_columns.get("events", set()))
    _migrate_single_bucket_data(connection, existing_columns.get("participants", set()))
    connection.execute(mirror_primary_statement())

    for table in Base.metadata.sorted_tables:
        if table.name in existing_columns:
            _add_check_constraints(connection, table, inspector)


def _add_column(connection: Connection, table, column) -> None:
    preparer = connection.dialect.identifier_preparer
    column_type = column.type.compile(dialect=connection.dialect)

    connection.execute(text(
        f"ALTER TABLE {preparer.format_table(table)} "
        f"ADD COLUMN {preparer.format_column(column)} {column_type}"
    ))

    # Existing rows get the server default the column would have had
    if column.server_default is not None:
        default = column.server_default.arg
        if isinstance(default, str):
            default = literal_column("'{}'".format(default.replace("'", "''")))
        connection.execute(
            table.update().where(column.is_(None)).values({column.name: default})
        )

    logger.info("Added missing column %s.%s", table.name, column.name)


def missing_check_constraints(
        table,
        dialect_name: str,
        existing_names: Iterable[str]
) -> List[CheckConstraint]:
    """Named CHECK constraints a pre-existing table lacks. SQLite cannot add them in place."""
    if dialect_name == "sqlite":
        return []

    existing = set(existing_names)
    return [
        constraint for constraint in table.constraints
        if isinstance(constraint, CheckConstraint)
        and constraint.name
        and constraint.name not in existing
    ]


def _add_check_constraints(connection: Connection, table, inspector) -> None:
    if connection.dialect.name == "sqlite":
        return

    existing_names = [
        constraint["name"] for constraint in inspector.get_check_constraints(table.name)
    ]
    for constraint in missing_check_constraints(table, connection.dialect.name, existing_names):
        connection.execute(AddConstraint(constraint))
        logger.info("Added missing constraint %s on %s", constraint.name, table.name)


def _carry_legacy_event_columns(connection: Connection, event_columns: Set[str]) -> None:
    legacy = {
        "settlement_manager": Event.display_manager,
        "settlement_account": Event.display_account,
    }
    for legacy_name, target in legacy.items():
        if legacy_name not in event_columns:
            continue
        connection.execute(
            update(Event)
            .where(target.is_(None))
            .values({target.key: literal_column(legacy_name), "updated_at": Event.updated_at})
        )


def _migrate_single_bucket_data(connection: Connection, participant_columns: Set[str]) -> None:
    # (a) every event gets a default bucket seeded from its display fields
    bucketless_events = select(
        Event.id,
        literal(DEFAULT_BUCKET_TITLE),
        Event.display_manager,
        Event.display_account,
        literal(0),
    ).where(~exists().where(SettlementBucket.event_id == Event.id))

    created = connection.execute(
        insert(SettlementBucket).from_select(
            ["event_id", "title", "manager", "account", "sort_order"],
            bucketless_events
        )
    )

    # (b) unlinked participants join their event's earliest bucket
    earliest_bucket = primary_bucket_value(SettlementBucket.id, Participant.event_id)

    if "is_settled" in participant_columns:
        legacy_settled = literal_column("participants.is_settled", Boolean)
        settled = func.coalesce(legacy_settled, false())
        settled_at = case((legacy_settled, func.now()), else_=cast(null(), DateTime(timezone=True)))
    else:
        settled = false()
        settled_at = cast(null(), DateTime(timezone=True))

    unlinked = select(earliest_bucket, Participant.id, settled, settled_at).where(
        unlinked_participant_filter(),
        earliest_bucket.is_not(None)
    )
    linked = connection.execute(
        insert(BucketParticipant).from_select(
            ["bucket_id", "participant_id", "is_settled", "settled_at"],
            unlinked
        )
    )

    # (c) whatever is still unlinked is garbage
    swept = connection.execute(sweep_orphans_statement())

    if created.rowcount or linked.rowcount or swept.rowcount:
        logger.info(
            "Migrated settlement data: %s buckets created, %s participants linked, %s swept",
            created.rowcount, linked.rowcount, swept.rowcount
        )
