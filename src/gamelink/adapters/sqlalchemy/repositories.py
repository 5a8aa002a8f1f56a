"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import select

from gamelink.adapters.sqlalchemy.mappings import (
    audit_entry_table,
    completion_record_table,
    import_session_table,
)
from gamelink.domain.model import (
    OPEN_STATUSES,
    AuditEntry,
    AuditKind,
    CompletionRecord,
    ImportKind,
    ImportSession,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from sqlalchemy import Select
    from sqlalchemy.orm import Session


class SqlAlchemyImportSessionRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, import_session: ImportSession) -> None:
        self.session.add(import_session)

    def get(self, session_id: int) -> ImportSession | None:
        return self.session.get(ImportSession, session_id)

    def find_open(self, owner_id: str, kind: ImportKind) -> ImportSession | None:
        stmt = self._newest(owner_id, kind).where(
            import_session_table.c.status.in_(list(OPEN_STATUSES))
        )
        return self.session.execute(stmt).scalars().first()

    def find_latest(self, owner_id: str, kind: ImportKind) -> ImportSession | None:
        return self.session.execute(self._newest(owner_id, kind)).scalars().first()

    @staticmethod
    def _newest(owner_id: str, kind: ImportKind) -> Select[tuple[ImportSession]]:
        return (
            select(ImportSession)
            .where(import_session_table.c.owner_id == owner_id)
            .where(import_session_table.c.kind == kind)
            .order_by(import_session_table.c.id.desc())
            .limit(1)
        )

    def list_created_before(self, cutoff: datetime) -> Sequence[ImportSession]:
        stmt = (
            select(ImportSession)
            .where(import_session_table.c.created_at < cutoff)
            .order_by(import_session_table.c.id)
        )
        return self.session.execute(stmt).scalars().all()

    def delete(self, import_session: ImportSession) -> None:
        self.session.delete(import_session)


class SqlAlchemyCompletionRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, record: CompletionRecord) -> None:
        self.session.add(record)

    def find(self, owner_id: str, catalog_id: int) -> CompletionRecord | None:
        stmt = (
            select(CompletionRecord)
            .where(completion_record_table.c.owner_id == owner_id)
            .where(completion_record_table.c.catalog_id == catalog_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyAuditEntryRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entry: AuditEntry) -> None:
        self.session.add(entry)

    def find(self, kind: AuditKind, round_number: int, game_index: int) -> AuditEntry | None:
        stmt = (
            select(AuditEntry)
            .where(audit_entry_table.c.kind == kind)
            .where(audit_entry_table.c.round_number == round_number)
            .where(audit_entry_table.c.game_index == game_index)
        )
        return self.session.execute(stmt).scalar_one_or_none()


if TYPE_CHECKING:
    from gamelink.domain.ports import (
        AuditEntryRepository,
        CompletionRepository,
        ImportSessionRepository,
    )

    _session_stub = cast("Session", object())
    _sessions_repo: ImportSessionRepository = SqlAlchemyImportSessionRepository(_session_stub)
    _completions_repo: CompletionRepository = SqlAlchemyCompletionRepository(_session_stub)
    _audit_repo: AuditEntryRepository = SqlAlchemyAuditEntryRepository(_session_stub)
