"""Render models handed to the presentation layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from gamelink.domain.importing.decisions import DecisionKind
from gamelink.domain.importing.matcher import unambiguous_top
from gamelink.domain.model import ImportKind, ItemStatus, SessionStatus

if TYPE_CHECKING:
    from collections.abc import Mapping

    from gamelink.domain.model import Candidate, ImportItem, ImportSession

_ALWAYS_AVAILABLE: tuple[DecisionKind, ...] = (
    DecisionKind.MANUAL,
    DecisionKind.QUERY,
    DecisionKind.SKIP,
    DecisionKind.PAUSE,
    DecisionKind.CANCEL,
)


@dataclass(frozen=True, slots=True, kw_only=True)
class PromptView:
    session_id: int
    kind: ImportKind
    owner_id: str
    item_index: int
    row_index: int
    total: int
    title: str
    header: tuple[tuple[str, str], ...]
    candidates: tuple[Candidate, ...]
    actions: tuple[DecisionKind, ...]


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportProgress:
    session_id: int
    kind: ImportKind
    owner_id: str
    status: SessionStatus
    cursor: int
    total: int
    counts: Mapping[ItemStatus, int]
    source_name: str | None = None


def _text(value: object) -> str:
    return "-" if value is None or value == "" else str(value)


def _header(kind: ImportKind, item: ImportItem) -> tuple[tuple[str, str], ...]:
    details = item.details
    if kind is ImportKind.AUDIT:
        game_index = details.get("game_index")
        return (
            ("Round", _text(details.get("round_number"))),
            ("Month/Year", _text(details.get("month_year"))),
            ("Game Index", _text(None if game_index is None else int(game_index) + 1)),
            ("Title", item.title),
            ("Thread", _text(details.get("thread_id"))),
            ("Reddit", _text(details.get("reddit_url"))),
        )
    return (
        ("Title", item.title),
        ("Platform", _text(item.platform)),
        ("Region", _text(details.get("region"))),
        ("Type", _text(item.category)),
        ("Time", _text(item.time_text)),
        ("Date", _text(item.date_text)),
    )


def build_prompt(session: ImportSession, item: ImportItem, *, limit: int) -> PromptView:
    """Describe ``item`` for the operator; only the first ``limit`` candidates are offered."""

    candidates = tuple(item.candidates or ())[:limit]
    actions = _ALWAYS_AVAILABLE
    if candidates:
        actions = (DecisionKind.SELECT, *actions)
    if unambiguous_top(tuple(item.candidates or ())) is not None:
        actions = (DecisionKind.ACCEPT, *actions)
    return PromptView(
        session_id=session.stored_id,
        kind=session.kind,
        owner_id=session.owner_id,
        item_index=item.position,
        row_index=item.row_index,
        total=session.total,
        title=item.title,
        header=_header(session.kind, item),
        candidates=candidates,
        actions=actions,
    )


def build_progress(session: ImportSession) -> ImportProgress:
    return ImportProgress(
        session_id=session.stored_id,
        kind=session.kind,
        owner_id=session.owner_id,
        status=session.status,
        cursor=session.cursor,
        total=session.total,
        counts=session.counts(),
        source_name=session.source_name,
    )
