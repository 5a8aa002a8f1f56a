"""Import sessions and their items.

An :class:`ImportSession` is the durable record of one import run. All state needed to
continue the run lives on the session so any process can pick it up from the store.
Transitions are plain methods that validate the current status and raise
:class:`~gamelink.domain.errors.InvalidTransition` otherwise; persistence and
concurrency control are the unit of work's concern.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from gamelink.domain.errors import InvalidTransition, ReconciliationError
from gamelink.domain.model.enums import ImportKind, ItemStatus, SessionStatus

if TYPE_CHECKING:
    from datetime import datetime

    from gamelink.domain.model.catalog import Candidate


OPEN_STATUSES: frozenset[SessionStatus] = frozenset({SessionStatus.ACTIVE, SessionStatus.PAUSED})


@dataclass(eq=False, kw_only=True)
class ImportItem:
    """One parsed source row awaiting (or past) reconciliation."""

    position: int
    row_index: int
    title: str
    platform: str | None = None
    category: str | None = None
    time_text: str | None = None
    date_text: str | None = None
    catalog_hint: int | None = None
    details: dict[str, Any] = field(default_factory=dict[str, Any])

    status: ItemStatus = ItemStatus.PENDING
    resolved_catalog_id: int | None = None
    # None means "not looked up yet"; an empty tuple is a cached empty result
    candidates: tuple[Candidate, ...] | None = None

    @property
    def is_pending(self) -> bool:
        return self.status is ItemStatus.PENDING


@dataclass(eq=False, kw_only=True)
class ImportSession:
    kind: ImportKind
    owner_id: str
    created_at: datetime
    updated_at: datetime
    items: list[ImportItem] = field(default_factory=list[ImportItem])
    source_name: str | None = None
    cursor: int = 0
    status: SessionStatus = SessionStatus.ACTIVE

    id: int | None = None
    version: int | None = None  # maintained by the store

    @property
    def stored_id(self) -> int:
        if self.id is None:
            raise ReconciliationError("Import session has not been stored yet")
        return self.id

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    @property
    def is_active(self) -> bool:
        return self.status is SessionStatus.ACTIVE

    @property
    def current_item(self) -> ImportItem | None:
        if self.cursor >= len(self.items):
            return None
        return self.items[self.cursor]

    def counts(self) -> dict[ItemStatus, int]:
        counts = dict.fromkeys(ItemStatus, 0)
        for item in self.items:
            counts[item.status] += 1
        return counts

    def touch(self, now: datetime) -> None:
        self.updated_at = now

    # Lifecycle -----------------------------------------------------------------

    def pause(self, now: datetime) -> None:
        self._require(SessionStatus.ACTIVE, action="pause")
        self.status = SessionStatus.PAUSED
        self.touch(now)

    def resume(self, now: datetime) -> None:
        self._require(SessionStatus.PAUSED, action="resume")
        self.status = SessionStatus.ACTIVE
        self.touch(now)

    def cancel(self, now: datetime) -> None:
        self._require(SessionStatus.ACTIVE, SessionStatus.PAUSED, action="cancel")
        self.status = SessionStatus.CANCELED
        self.touch(now)

    # Item decisions --------------------------------------------------------------

    def resolve_current(self, catalog_id: int, now: datetime) -> ImportItem:
        item = self._pending_current(action="resolve")
        item.status = ItemStatus.RESOLVED
        item.resolved_catalog_id = catalog_id
        self._advance(now)
        return item

    def skip_current(self, now: datetime) -> ImportItem:
        item = self._pending_current(action="skip")
        item.status = ItemStatus.SKIPPED
        item.resolved_catalog_id = None
        self._advance(now)
        return item

    def cache_candidates(
        self,
        item: ImportItem,
        candidates: tuple[Candidate, ...],
        now: datetime,
    ) -> None:
        if not self.is_open:
            raise InvalidTransition(
                f"Import session #{self.id} is {self.status}; candidates cannot change"
            )
        item.candidates = candidates
        self.touch(now)

    def _pending_current(self, *, action: str) -> ImportItem:
        self._require(SessionStatus.ACTIVE, action=action)
        item = self.current_item
        if item is None or not item.is_pending:
            raise InvalidTransition(f"Import session #{self.id} has no pending item to {action}")
        return item

    def _advance(self, now: datetime) -> None:
        self.cursor += 1
        if self.cursor == len(self.items):
            self.status = SessionStatus.COMPLETED
        self.touch(now)

    def _require(self, *allowed: SessionStatus, action: str) -> None:
        if self.status not in allowed:
            raise InvalidTransition(
                f"Cannot {action} import session #{self.id} while it is {self.status}"
            )


def new_session(
    *,
    kind: ImportKind,
    owner_id: str,
    items: list[ImportItem],
    now: datetime,
    source_name: str | None = None,
) -> ImportSession:
    return ImportSession(
        kind=kind,
        owner_id=owner_id,
        items=items,
        source_name=source_name,
        created_at=now,
        updated_at=now,
    )
