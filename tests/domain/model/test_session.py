from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from gamelink.domain.errors import InvalidTransition, ReconciliationError
from gamelink.domain.model import (
    Candidate,
    ImportItem,
    ImportKind,
    ItemStatus,
    SessionStatus,
    new_session,
)

if TYPE_CHECKING:
    from gamelink.domain.model import ImportSession

T0 = datetime(2025, 1, 1, tzinfo=UTC)


def _session(count: int = 3) -> ImportSession:
    items = [ImportItem(position=i, row_index=i + 1, title=f"Game {i}") for i in range(count)]
    return new_session(kind=ImportKind.COMPLETIONATOR, owner_id="op", items=items, now=T0)


def test_new_session_starts_active_at_the_first_item() -> None:
    session = _session()

    assert session.status is SessionStatus.ACTIVE
    assert session.cursor == 0
    assert session.current_item is session.items[0]
    assert session.created_at == session.updated_at == T0
    assert session.counts() == {
        ItemStatus.PENDING: 3,
        ItemStatus.RESOLVED: 0,
        ItemStatus.SKIPPED: 0,
    }


def test_stored_id_requires_persistence() -> None:
    session = _session()

    with pytest.raises(ReconciliationError):
        _ = session.stored_id
    session.id = 5
    assert session.stored_id == 5


def test_resolve_and_skip_advance_until_completed() -> None:
    session = _session(2)
    later = T0 + timedelta(minutes=5)

    resolved = session.resolve_current(42, later)
    skipped = session.skip_current(later)

    assert resolved.status is ItemStatus.RESOLVED
    assert resolved.resolved_catalog_id == 42
    assert skipped.status is ItemStatus.SKIPPED
    assert skipped.resolved_catalog_id is None
    assert session.cursor == 2
    assert session.status is SessionStatus.COMPLETED
    assert session.current_item is None
    assert session.updated_at == later
    with pytest.raises(InvalidTransition):
        session.skip_current(later)


def test_pause_resume_cancel_transitions() -> None:
    session = _session()

    session.pause(T0)
    assert session.status is SessionStatus.PAUSED
    assert session.is_open
    with pytest.raises(InvalidTransition):
        session.pause(T0)
    with pytest.raises(InvalidTransition):
        session.resolve_current(1, T0)

    session.resume(T0)
    assert session.is_active
    with pytest.raises(InvalidTransition):
        session.resume(T0)

    session.cancel(T0)
    assert session.status is SessionStatus.CANCELED
    assert not session.is_open
    for transition in (session.pause, session.resume, session.cancel, session.skip_current):
        with pytest.raises(InvalidTransition):
            transition(T0)
    assert session.cursor == 0


def test_candidate_cache_only_changes_on_open_sessions() -> None:
    session = _session()
    item = session.items[0]
    candidates = (Candidate(catalog_id=1, title="Game 0", exact=True),)

    session.cache_candidates(item, candidates, T0)
    assert item.candidates == candidates

    session.cancel(T0)
    with pytest.raises(InvalidTransition):
        session.cache_candidates(item, (), T0)
    assert item.candidates == candidates
