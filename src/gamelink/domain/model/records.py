"""Downstream records written when an import item is resolved."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date, datetime

    from gamelink.domain.model.enums import AuditKind


@dataclass(eq=False, kw_only=True)
class CompletionRecord:
    """A game the owner has finished, keyed by (owner, catalog id)."""

    owner_id: str
    catalog_id: int
    completion_type: str | None = None
    completed_on: date | None = None
    playtime_hours: float | None = None

    import_session_id: int | None = None
    source_row: int | None = None
    recorded_at: datetime | None = None

    id: int | None = None


@dataclass(eq=False, kw_only=True)
class AuditEntry:
    """A historical nomination, keyed by (kind, round number, game index)."""

    kind: AuditKind
    round_number: int
    game_index: int
    month_year: str
    title: str
    catalog_id: int
    thread_id: str | None = None
    reddit_url: str | None = None

    id: int | None = None
