"""Operator-facing reconciliation workflow.

Every operation is a short unit of work: load the session from the store, validate the
caller and the session state, mutate, commit. Nothing is kept in memory between calls,
so consecutive operations of one import may run in different processes.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

from gamelink.domain.clock import Clock, utcnow
from gamelink.domain.errors import (
    EmptySource,
    InvalidDecision,
    NoActiveSession,
    ReconciliationError,
    SessionAlreadyOpen,
    StaleOrForeignDecision,
    UnknownCatalogId,
)
from gamelink.domain.importing.commit import (
    DecisionCommitPipeline,
    ResolvedOutcome,
    SkippedOutcome,
)
from gamelink.domain.importing.csv_rows import build_import_items
from gamelink.domain.importing.decisions import (
    AcceptTop,
    Cancel,
    ManualId,
    ManualRequery,
    Pause,
    SelectCandidate,
    Skip,
)
from gamelink.domain.importing.matcher import (
    CatalogMatcher,
    find_exact_match,
    unambiguous_top,
)
from gamelink.domain.importing.views import build_progress, build_prompt
from gamelink.domain.model import SessionStatus, new_session

if TYPE_CHECKING:
    from collections.abc import Callable

    from gamelink.domain.importing.commit import CommitOutcome
    from gamelink.domain.importing.decisions import Decision
    from gamelink.domain.importing.views import ImportProgress, PromptView
    from gamelink.domain.model import ImportItem, ImportKind, ImportSession
    from gamelink.domain.ports import CatalogService, ImportUnitOfWork

log = getLogger(__name__)

DEFAULT_CANDIDATE_LIMIT: Final[int] = 25


@dataclass(frozen=True, slots=True)
class StartResult:
    progress: ImportProgress
    auto_resolved: int
    prompt: PromptView | None


@dataclass(frozen=True, slots=True)
class DecisionResult:
    """Outcome of :meth:`ReconciliationWorkflow.decide`.

    ``prompt`` is the next item to show, ``None`` once nothing is pending.
    """

    progress: ImportProgress
    prompt: PromptView | None


class ReconciliationWorkflow:
    def __init__(
        self,
        *,
        unit_of_work_factory: Callable[[], ImportUnitOfWork],
        catalog: CatalogService,
        matcher: CatalogMatcher | None = None,
        pipeline: DecisionCommitPipeline | None = None,
        clock: Clock = utcnow,
        candidate_limit: int = DEFAULT_CANDIDATE_LIMIT,
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self._catalog = catalog
        self._matcher = matcher or CatalogMatcher(catalog)
        self._clock = clock
        self._pipeline = pipeline or DecisionCommitPipeline(unit_of_work_factory, clock=clock)
        self._candidate_limit = candidate_limit

    # Session lifecycle -----------------------------------------------------------

    def start(
        self,
        owner_id: str,
        kind: ImportKind,
        source_text: str,
        *,
        source_name: str | None = None,
        auto_resolve: bool = False,
    ) -> StartResult:
        """Parse ``source_text`` and open a new session at its first row.

        With ``auto_resolve`` the leading unambiguous rows are committed right away
        (see :meth:`fast_forward`).
        """

        items = build_import_items(kind, source_text)
        if not items:
            raise EmptySource(source_name)

        with self._unit_of_work_factory() as uow:
            sessions = uow.repositories.sessions
            existing = sessions.find_open(owner_id, kind)
            if existing is not None:
                raise SessionAlreadyOpen(existing.stored_id)
            session = new_session(
                kind=kind,
                owner_id=owner_id,
                items=items,
                now=self._clock(),
                source_name=source_name,
            )
            sessions.add(session)
            uow.commit()
            session_id = session.stored_id
        log.info(
            "Started %s import #%s for %s with %s rows", kind, session_id, owner_id, len(items)
        )

        auto_resolved = self.fast_forward(owner_id, session_id) if auto_resolve else 0
        with self._unit_of_work_factory() as uow:
            session = self._load_owned(uow, owner_id, session_id)
            prompt = self._prompt_for(session)
            uow.commit()
            return StartResult(
                progress=build_progress(session), auto_resolved=auto_resolved, prompt=prompt
            )

    def resume(self, owner_id: str, kind: ImportKind) -> PromptView | None:
        with self._unit_of_work_factory() as uow:
            session = self._find_open(uow, owner_id, kind)
            session.resume(self._clock())
            prompt = self._prompt_for(session)
            uow.commit()
        log.info("Resumed import #%s at row %s of %s", session.id, session.cursor, session.total)
        return prompt

    def status(
        self, owner_id: str, kind: ImportKind, *, session_id: int | None = None
    ) -> ImportProgress:
        """Report progress of ``session_id``, or of the newest session of ``kind``.

        Completed and canceled sessions are reported too, so committed rows stay visible.
        """

        with self._unit_of_work_factory() as uow:
            if session_id is not None:
                return build_progress(self._load_owned(uow, owner_id, session_id))
            session = uow.repositories.sessions.find_latest(owner_id, kind)
            if session is None:
                raise NoActiveSession(f"No {kind} import for {owner_id}")
            return build_progress(session)

    def pause(self, owner_id: str, kind: ImportKind) -> ImportProgress:
        with self._unit_of_work_factory() as uow:
            session = self._find_open(uow, owner_id, kind)
            session.pause(self._clock())
            uow.commit()
            log.info("Paused import #%s at row %s", session.id, session.cursor)
            return build_progress(session)

    def cancel(self, owner_id: str, kind: ImportKind) -> ImportProgress:
        with self._unit_of_work_factory() as uow:
            session = self._find_open(uow, owner_id, kind)
            session.cancel(self._clock())
            uow.commit()
            log.info("Canceled import #%s at row %s", session.id, session.cursor)
            return build_progress(session)

    # Prompting and decisions -----------------------------------------------------

    def prompt(self, owner_id: str, session_id: int) -> PromptView | None:
        """Return the prompt for the current row, looking up candidates on first use."""

        with self._unit_of_work_factory() as uow:
            session = self._load_owned(uow, owner_id, session_id)
            prompt = self._prompt_for(session)
            uow.commit()
            return prompt

    def decide(
        self,
        owner_id: str,
        session_id: int,
        item_index: int,
        decision: Decision,
    ) -> DecisionResult:
        """Apply an operator decision to the row at ``item_index``.

        Decisions for another owner's session or for a row that is no longer current
        raise :class:`StaleOrForeignDecision` without touching the session.
        """

        try:
            return self._decide(owner_id, session_id, item_index, decision)
        except StaleOrForeignDecision as exc:
            log.info("Ignoring decision %s for import #%s: %s", decision, session_id, exc)
            raise

    def _decide(
        self,
        owner_id: str,
        session_id: int,
        item_index: int,
        decision: Decision,
    ) -> DecisionResult:
        with self._unit_of_work_factory() as uow:
            session = self._load_owned(uow, owner_id, session_id)
            if isinstance(decision, Pause | Cancel):
                self._require_open(session)
                if isinstance(decision, Pause):
                    session.pause(self._clock())
                else:
                    session.cancel(self._clock())
                uow.commit()
                return DecisionResult(progress=build_progress(session), prompt=None)

            item = self._current_pending(session, item_index)
            if isinstance(decision, ManualRequery):
                candidates = self._matcher.find_candidates(decision.text)
                session.cache_candidates(item, candidates, self._clock())
                log.info(
                    "Re-queried row %s of import #%s with %r: %s candidates",
                    item.row_index,
                    session_id,
                    decision.text,
                    len(candidates),
                )
            else:
                self._ensure_candidates(session, item)
                outcome = self._outcome_for(session, item, decision)
                self._pipeline.apply(uow, session, item_index, outcome)

            prompt = self._prompt_for(session)
            uow.commit()
            return DecisionResult(progress=build_progress(session), prompt=prompt)

    def fast_forward(self, owner_id: str, session_id: int) -> int:
        """Commit consecutive rows from the cursor that need no operator input.

        A row qualifies when it names an existing catalog id itself or when exactly one
        catalog candidate matches its title exactly. Stops at the first other row.
        """

        resolved = 0
        while True:
            with self._unit_of_work_factory() as uow:
                session = self._load_owned(uow, owner_id, session_id)
                item = session.current_item
                if not session.is_active or item is None:
                    return resolved
                catalog_id = self._automatic_match(session, item)
                if catalog_id is None:
                    uow.commit()
                    return resolved
                try:
                    self._pipeline.apply(
                        uow, session, item.position, ResolvedOutcome(catalog_id)
                    )
                    uow.commit()
                except ReconciliationError as exc:
                    uow.rollback()
                    # the row stays pending for the operator
                    log.warning(
                        "Stopped auto-resolving import #%s at row %s: %s",
                        session_id,
                        item.row_index,
                        exc,
                    )
                    return resolved
            resolved += 1
            log.debug(
                "Auto-resolved row %s of import #%s to %s", item.row_index, session_id, catalog_id
            )

    # Helpers -------------------------------------------------------------------------

    def _find_open(
        self, uow: ImportUnitOfWork, owner_id: str, kind: ImportKind
    ) -> ImportSession:
        session = uow.repositories.sessions.find_open(owner_id, kind)
        if session is None:
            raise NoActiveSession(f"No open {kind} import for {owner_id}")
        return session

    def _load_owned(
        self, uow: ImportUnitOfWork, owner_id: str, session_id: int
    ) -> ImportSession:
        session = uow.repositories.sessions.get(session_id)
        if session is None or session.owner_id != owner_id:
            raise StaleOrForeignDecision(f"Import session #{session_id} is not yours")
        return session

    @staticmethod
    def _require_open(session: ImportSession) -> None:
        if not session.is_open:
            raise NoActiveSession(f"Import session #{session.id} is {session.status}")

    @staticmethod
    def _current_pending(session: ImportSession, item_index: int) -> ImportItem:
        if item_index < session.cursor or session.status is SessionStatus.COMPLETED:
            raise StaleOrForeignDecision(
                f"Row {item_index + 1} of import #{session.id} was already decided"
            )
        if session.status is not SessionStatus.ACTIVE:
            raise NoActiveSession(f"Import session #{session.id} is {session.status}")
        item = session.current_item
        if item is None or item_index != session.cursor or not item.is_pending:
            raise StaleOrForeignDecision(
                f"Row {item_index + 1} of import #{session.id} is no longer awaiting a decision"
            )
        return item

    def _outcome_for(
        self,
        session: ImportSession,
        item: ImportItem,
        decision: Decision,
    ) -> CommitOutcome:
        if isinstance(decision, Skip):
            return SkippedOutcome()
        if isinstance(decision, ManualId):
            game = self._catalog.get_by_id(decision.catalog_id)
            if game is None:
                raise UnknownCatalogId(decision.catalog_id)
            return ResolvedOutcome(game.id)

        candidates = item.candidates or ()
        if isinstance(decision, AcceptTop):
            if not candidates:
                raise InvalidDecision(
                    f"Row {item.row_index} has no candidates to accept; "
                    "enter a catalog id, search again or skip"
                )
            top = unambiguous_top(candidates)
            if top is None:
                raise InvalidDecision(
                    f"Row {item.row_index} matches {len(candidates)} catalog entries; "
                    "select one explicitly"
                )
            return ResolvedOutcome(top.catalog_id)
        if isinstance(decision, SelectCandidate):
            if all(candidate.catalog_id != decision.catalog_id for candidate in candidates):
                raise InvalidDecision(
                    f"Catalog id {decision.catalog_id} is not among the candidates for "
                    f"row {item.row_index} of import #{session.id}"
                )
            return ResolvedOutcome(decision.catalog_id)
        raise InvalidDecision(f"Unsupported decision {decision!r}")

    def _prompt_for(self, session: ImportSession) -> PromptView | None:
        item = session.current_item
        if not session.is_active or item is None:
            return None
        self._ensure_candidates(session, item)
        return build_prompt(session, item, limit=self._candidate_limit)

    def _ensure_candidates(self, session: ImportSession, item: ImportItem) -> None:
        if item.candidates is None:
            candidates = self._matcher.find_candidates(item.title)
            session.cache_candidates(item, candidates, self._clock())

    def _automatic_match(self, session: ImportSession, item: ImportItem) -> int | None:
        if item.catalog_hint is not None:
            game = self._catalog.get_by_id(item.catalog_hint)
            if game is not None:
                return game.id
            log.info(
                "Row %s names unknown catalog id %s; falling back to title search",
                item.row_index,
                item.catalog_hint,
            )
        self._ensure_candidates(session, item)
        exact = find_exact_match(item.title, item.candidates or ())
        return exact.catalog_id if exact is not None else None
