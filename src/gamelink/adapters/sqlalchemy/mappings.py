"""SQLAlchemy mapping metadata for the gamelink domain model."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    orm,
)
from sqlalchemy.orm import configure_mappers, relationship

from gamelink.domain.model import (
    AuditEntry,
    AuditKind,
    Candidate,
    CompletionRecord,
    ImportItem,
    ImportKind,
    ImportSession,
    ItemStatus,
    SessionStatus,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class CandidateListType(TypeDecorator[tuple[Candidate, ...]]):
    """Ranked candidate cache stored as a JSON array; ``NULL`` means "not looked up"."""

    impl = Text
    cache_ok = True

    def process_bind_param(
        self, value: tuple[Candidate, ...] | None, dialect: Dialect
    ) -> str | None:
        _ = dialect
        if value is None:
            return None
        payload = [
            {
                "catalog_id": candidate.catalog_id,
                "title": candidate.title,
                "detail": candidate.detail,
                "exact": candidate.exact,
            }
            for candidate in value
        ]
        return json.dumps(payload)

    def process_result_value(
        self, value: str | None, dialect: Dialect
    ) -> tuple[Candidate, ...] | None:
        _ = dialect
        if value is None:
            return None
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return None
        entries = cast(list[dict[str, Any]], loaded)
        return tuple(
            Candidate(
                catalog_id=int(entry["catalog_id"]),
                title=str(entry["title"]),
                detail=entry.get("detail"),
                exact=bool(entry.get("exact", False)),
            )
            for entry in entries
        )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Import sessions ---------------------------------------------------------------

import_session_table = Table(
    "import_session",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("kind", Enum(ImportKind, native_enum=False), nullable=False),
    Column("owner_id", String(64), nullable=False),
    Column("source_name", String(512), nullable=True),
    Column("status", Enum(SessionStatus, native_enum=False), nullable=False),
    Column("cursor", Integer, nullable=False, default=0),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    Column("version", Integer, nullable=False),
    Index("ix_import_session_owner_kind_status", "owner_id", "kind", "status"),
)

import_item_table = Table(
    "import_item",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "session_id",
        Integer,
        ForeignKey("import_session.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("position", Integer, nullable=False),
    Column("row_index", Integer, nullable=False),
    Column("title", String(512), nullable=False),
    Column("platform", String(255), nullable=True),
    Column("category", String(255), nullable=True),
    Column("time_text", String(64), nullable=True),
    Column("date_text", String(64), nullable=True),
    Column("catalog_hint", Integer, nullable=True),
    Column("details", JSON, nullable=False),
    Column("status", Enum(ItemStatus, native_enum=False), nullable=False),
    Column("resolved_catalog_id", Integer, nullable=True),
    Column("candidates", CandidateListType(), nullable=True),
    UniqueConstraint("session_id", "position"),
)

# Catalog (read by the engine, loaded by the CLI) ---------------------------------

catalog_game_table = Table(
    "catalog_game",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("title", String(512), nullable=False),
    Column("release_year", Integer, nullable=True),
    Column("platforms", JSON, nullable=False),
    Index("ix_catalog_game_title", "title"),
)

# Downstream records ------------------------------------------------------------

completion_record_table = Table(
    "completion_record",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("owner_id", String(64), nullable=False),
    Column("catalog_id", Integer, nullable=False),
    Column("completion_type", String(64), nullable=True),
    Column("completed_on", Date, nullable=True),
    Column("playtime_hours", Float, nullable=True),
    Column("import_session_id", Integer, nullable=True),
    Column("source_row", Integer, nullable=True),
    Column("recorded_at", UTCDateTime(), nullable=True),
    UniqueConstraint("owner_id", "catalog_id"),
)

audit_entry_table = Table(
    "audit_entry",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("kind", Enum(AuditKind, native_enum=False), nullable=False),
    Column("round_number", Integer, nullable=False),
    Column("game_index", Integer, nullable=False),
    Column("month_year", String(64), nullable=False),
    Column("title", String(512), nullable=False),
    Column("catalog_id", Integer, nullable=False),
    Column("thread_id", String(64), nullable=True),
    Column("reddit_url", String(512), nullable=True),
    UniqueConstraint("kind", "round_number", "game_index"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(ImportItem, import_item_table)

    mapper_registry.map_imperatively(
        ImportSession,
        import_session_table,
        properties={
            "items": relationship(
                ImportItem,
                order_by=import_item_table.c.position,
                cascade="all, delete-orphan",
                lazy="selectin",
            ),
        },
        # every UPDATE checks the version it loaded, so two writers cannot both win
        version_id_col=import_session_table.c.version,
    )

    mapper_registry.map_imperatively(CompletionRecord, completion_record_table)
    mapper_registry.map_imperatively(AuditEntry, audit_entry_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
