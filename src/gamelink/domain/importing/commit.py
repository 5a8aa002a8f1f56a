"""Exactly-once application of item outcomes.

The pipeline writes an item's new status, advances the session cursor and applies the
kind-specific downstream effect inside one unit of work. Effects run before the item
changes so a failing effect leaves nothing to undo in memory, and the unit of work
rolls back whatever the effect already flushed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from logging import getLogger
from typing import TYPE_CHECKING, Final

from gamelink.domain.clock import Clock, utcnow
from gamelink.domain.errors import (
    CommitConflict,
    DownstreamEffectError,
    NoActiveSession,
    StaleOrForeignDecision,
)
from gamelink.domain.model import (
    AuditEntry,
    AuditKind,
    CompletionRecord,
    ImportKind,
    ItemStatus,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from gamelink.domain.model import ImportItem, ImportSession
    from gamelink.domain.ports import ImportUnitOfWork

log = getLogger(__name__)

DEFAULT_COMPLETION_TYPE: Final[str] = "Main Story"
PLAYTIME_TOLERANCE_HOURS: Final[float] = 1.0


@dataclass(frozen=True, slots=True)
class ResolvedOutcome:
    catalog_id: int


@dataclass(frozen=True, slots=True)
class SkippedOutcome:
    pass


type CommitOutcome = ResolvedOutcome | SkippedOutcome

type DownstreamEffect = Callable[[ImportUnitOfWork, ImportSession, ImportItem, int, datetime], None]


def _same_outcome(item: ImportItem, outcome: CommitOutcome) -> bool:
    if isinstance(outcome, ResolvedOutcome):
        return (
            item.status is ItemStatus.RESOLVED and item.resolved_catalog_id == outcome.catalog_id
        )
    return item.status is ItemStatus.SKIPPED


def _describe(outcome: CommitOutcome) -> str:
    if isinstance(outcome, ResolvedOutcome):
        return f"catalog id {outcome.catalog_id}"
    return "skip"


# Downstream effects ------------------------------------------------------------------


def record_completion(
    uow: ImportUnitOfWork,
    session: ImportSession,
    item: ImportItem,
    catalog_id: int,
    now: datetime,
) -> None:
    """Create the owner's completion for ``catalog_id`` or refresh the one on file.

    An existing completion takes the imported type and date when they differ, and the
    imported playtime when none is known or it is off by at least an hour.
    """

    completion_type = item.details.get("completion_type")
    playtime = item.details.get("playtime_hours")
    completed_raw = item.details.get("completed_on")
    completed_on = date.fromisoformat(completed_raw) if completed_raw else None

    completions = uow.repositories.completions
    existing = completions.find(session.owner_id, catalog_id)
    if existing is None:
        completions.add(
            CompletionRecord(
                owner_id=session.owner_id,
                catalog_id=catalog_id,
                completion_type=completion_type or DEFAULT_COMPLETION_TYPE,
                completed_on=completed_on,
                playtime_hours=playtime,
                import_session_id=session.id,
                source_row=item.row_index,
                recorded_at=now,
            )
        )
        log.info("Recorded completion of %s for %s", catalog_id, session.owner_id)
        return

    updated: list[str] = []
    if completion_type and completion_type != existing.completion_type:
        existing.completion_type = completion_type
        updated.append("type")
    if playtime is not None and (
        existing.playtime_hours is None
        or abs(existing.playtime_hours - playtime) >= PLAYTIME_TOLERANCE_HOURS
    ):
        existing.playtime_hours = playtime
        updated.append("playtime")
    if completed_on is not None and completed_on != existing.completed_on:
        existing.completed_on = completed_on
        updated.append("date")
    if updated:
        existing.recorded_at = now
    log.info(
        "Completion of %s for %s already on file; updated: %s",
        catalog_id,
        session.owner_id,
        ", ".join(updated) or "nothing",
    )


def record_audit_entry(
    uow: ImportUnitOfWork,
    session: ImportSession,
    item: ImportItem,
    catalog_id: int,
    now: datetime,
) -> None:
    """Link the nomination slot to ``catalog_id``, filling in missing thread links.

    A slot already linked to another game is left alone and the commit fails.
    """

    _ = session, now
    details = item.details
    kind = AuditKind(details["kind"])
    round_number = int(details["round_number"])
    game_index = int(details["game_index"])

    entries = uow.repositories.audit_entries
    existing = entries.find(kind, round_number, game_index)
    if existing is None:
        entries.add(
            AuditEntry(
                kind=kind,
                round_number=round_number,
                game_index=game_index,
                month_year=details["month_year"],
                title=item.title,
                catalog_id=catalog_id,
                thread_id=details.get("thread_id"),
                reddit_url=details.get("reddit_url"),
            )
        )
        return

    if existing.catalog_id != catalog_id:
        raise DownstreamEffectError(
            f"{kind} round {round_number} game {game_index + 1} is already linked to "
            f"catalog id {existing.catalog_id}"
        )
    if existing.thread_id is None and details.get("thread_id"):
        existing.thread_id = details["thread_id"]
    if existing.reddit_url is None and details.get("reddit_url"):
        existing.reddit_url = details["reddit_url"]


DOWNSTREAM_EFFECTS: Final[dict[ImportKind, DownstreamEffect]] = {
    ImportKind.COMPLETIONATOR: record_completion,
    ImportKind.AUDIT: record_audit_entry,
}


# Pipeline ----------------------------------------------------------------------------


class DecisionCommitPipeline:
    def __init__(
        self,
        unit_of_work_factory: Callable[[], ImportUnitOfWork],
        *,
        clock: Clock = utcnow,
        effects: dict[ImportKind, DownstreamEffect] | None = None,
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self._clock = clock
        self._effects = DOWNSTREAM_EFFECTS if effects is None else effects

    def commit(self, session_id: int, item_index: int, outcome: CommitOutcome) -> bool:
        """Apply ``outcome`` to the item in its own unit of work.

        Returns ``False`` when the item already carries the same outcome.
        """

        with self._unit_of_work_factory() as uow:
            session = uow.repositories.sessions.get(session_id)
            if session is None:
                raise NoActiveSession(f"Import session #{session_id} does not exist")
            applied = self.apply(uow, session, item_index, outcome)
            if applied:
                uow.commit()
            return applied

    def apply(
        self,
        uow: ImportUnitOfWork,
        session: ImportSession,
        item_index: int,
        outcome: CommitOutcome,
    ) -> bool:
        """Apply ``outcome`` within the caller's unit of work; the caller commits."""

        if not 0 <= item_index < session.total:
            raise StaleOrForeignDecision(
                f"Import session #{session.id} has no item {item_index}"
            )
        item = session.items[item_index]
        if not item.is_pending:
            if _same_outcome(item, outcome):
                log.info(
                    "Row %s of session #%s already committed as %s",
                    item.row_index,
                    session.id,
                    _describe(outcome),
                )
                return False
            raise CommitConflict(
                f"Row {item.row_index} of session #{session.id} is already {item.status}; "
                f"refusing {_describe(outcome)}"
            )
        if not session.is_active:
            raise NoActiveSession(f"Import session #{session.id} is {session.status}")
        if item_index != session.cursor:
            raise StaleOrForeignDecision(
                f"Row {item.row_index} is not the current row of session #{session.id}"
            )

        now = self._clock()
        if isinstance(outcome, ResolvedOutcome):
            effect = self._effects.get(session.kind)
            if effect is not None:
                effect(uow, session, item, outcome.catalog_id, now)
            session.resolve_current(outcome.catalog_id, now)
        else:
            session.skip_current(now)
        log.info(
            "Committed row %s of session #%s as %s",
            item.row_index,
            session.id,
            _describe(outcome),
        )
        return True
