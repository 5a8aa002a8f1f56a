"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from gamelink.adapters.http_source import fetch_csv_text
from gamelink.adapters.sqlalchemy import (
    SqlAlchemyCatalog,
    SqlAlchemyImportUnitOfWork,
    parse_catalog_csv,
    startup,
)
from gamelink.adapters.sqlalchemy.unit_of_work import configured_engine
from gamelink.config import get_import_config
from gamelink.domain.clock import utcnow
from gamelink.domain.errors import NoActiveSession, StaleOrForeignDecision
from gamelink.domain.importing import ReconciliationWorkflow, purge_stale_sessions
from gamelink.ui.prompt import decode_action

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import timedelta
    from pathlib import Path

    from sqlalchemy.engine import Engine

    from gamelink.config import ImportConfig
    from gamelink.domain.importing import (
        Decision,
        DecisionResult,
        ImportProgress,
        PromptView,
        StartResult,
    )
    from gamelink.domain.model import ImportKind
    from gamelink.domain.ports import CatalogService, ImportUnitOfWork

type UnitOfWorkFactory = Callable[[], ImportUnitOfWork]

log = getLogger(__name__)


def _engine() -> Engine:
    engine = configured_engine()
    return engine if engine is not None else startup()


def build_workflow(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    catalog: CatalogService | None = None,
    config: ImportConfig | None = None,
) -> ReconciliationWorkflow:
    """Wire the workflow to the configured database unless collaborators are given."""

    engine = _engine()
    effective_config = config or get_import_config()
    return ReconciliationWorkflow(
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyImportUnitOfWork,
        catalog=catalog or SqlAlchemyCatalog(engine),
        candidate_limit=effective_config.candidate_limit,
    )


def read_source(*, path: Path | None = None, url: str | None = None) -> tuple[str, str]:
    """Return ``(text, source_name)`` for a local file or a URL."""

    if path is not None and url is None:
        return path.read_text(encoding="utf-8-sig"), path.name
    if url is not None and path is None:
        return fetch_csv_text(url), url
    raise ValueError("Provide exactly one of a file path or a URL")


def start_import(
    *,
    owner_id: str,
    kind: ImportKind,
    path: Path | None = None,
    url: str | None = None,
    auto_resolve: bool = False,
    workflow: ReconciliationWorkflow | None = None,
) -> StartResult:
    text, source_name = read_source(path=path, url=url)
    effective = workflow or build_workflow()
    result = effective.start(
        owner_id,
        kind,
        text,
        source_name=source_name,
        auto_resolve=auto_resolve,
    )
    log.info(
        "Import #%s ready: %s rows, %s resolved automatically",
        result.progress.session_id,
        result.progress.total,
        result.auto_resolved,
    )
    return result


def resume_import(*, owner_id: str, kind: ImportKind) -> PromptView | None:
    return build_workflow().resume(owner_id, kind)


def import_status(
    *, owner_id: str, kind: ImportKind, session_id: int | None = None
) -> ImportProgress:
    return build_workflow().status(owner_id, kind, session_id=session_id)


def pause_import(*, owner_id: str, kind: ImportKind) -> ImportProgress:
    return build_workflow().pause(owner_id, kind)


def cancel_import(*, owner_id: str, kind: ImportKind) -> ImportProgress:
    return build_workflow().cancel(owner_id, kind)


def show_prompt(*, owner_id: str, session_id: int) -> PromptView | None:
    return build_workflow().prompt(owner_id, session_id)


def decide(
    *,
    owner_id: str,
    session_id: int,
    item_index: int,
    decision: Decision,
) -> DecisionResult:
    return build_workflow().decide(owner_id, session_id, item_index, decision)


def handle_action(
    *,
    operator_id: str,
    action_id: str,
    value: str | None = None,
    workflow: ReconciliationWorkflow | None = None,
) -> DecisionResult | None:
    """Apply a transport action; expired, malformed or foreign actions are a no-op.

    Actions for a session that was paused, canceled or already finished count as expired.

    Returns ``None`` when the action was ignored.
    """

    try:
        ref, decision = decode_action(action_id, value)
    except ValueError as exc:
        log.info("Ignoring action %r: %s", action_id, exc)
        return None
    effective = workflow or build_workflow()
    try:
        return effective.decide(operator_id, ref.session_id, ref.item_index, decision)
    except StaleOrForeignDecision:
        return None
    except NoActiveSession as exc:
        log.info("Ignoring action %r: %s", action_id, exc)
        return None


def purge_imports(
    *,
    older_than: timedelta | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> int:
    _engine()
    retention = older_than if older_than is not None else get_import_config().retention
    removed = purge_stale_sessions(
        unit_of_work_factory or SqlAlchemyImportUnitOfWork,
        older_than=retention,
        now=utcnow(),
    )
    log.info("Purged %s import sessions older than %s", removed, retention)
    return removed


def load_catalog(*, path: Path) -> int:
    games = parse_catalog_csv(path.read_text(encoding="utf-8-sig"))
    return SqlAlchemyCatalog(_engine()).upsert(games)
