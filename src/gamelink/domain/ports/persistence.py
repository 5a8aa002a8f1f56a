"""Persistence ports for import sessions and their downstream records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from gamelink.domain.model import (
        AuditEntry,
        AuditKind,
        CompletionRecord,
        ImportKind,
        ImportSession,
    )


@runtime_checkable
class ImportSessionRepository(Protocol):
    def add(self, session: ImportSession) -> None: ...

    def get(self, session_id: int) -> ImportSession | None: ...

    def find_open(self, owner_id: str, kind: ImportKind) -> ImportSession | None:
        """Return the newest active or paused session for the owner and kind."""
        ...

    def find_latest(self, owner_id: str, kind: ImportKind) -> ImportSession | None:
        """Return the newest session for the owner and kind, whatever its status."""
        ...

    def list_created_before(self, cutoff: datetime) -> Sequence[ImportSession]: ...

    def delete(self, session: ImportSession) -> None: ...


@runtime_checkable
class CompletionRepository(Protocol):
    def add(self, record: CompletionRecord) -> None: ...

    def find(self, owner_id: str, catalog_id: int) -> CompletionRecord | None: ...


@runtime_checkable
class AuditEntryRepository(Protocol):
    def add(self, entry: AuditEntry) -> None: ...

    def find(self, kind: AuditKind, round_number: int, game_index: int) -> AuditEntry | None: ...
