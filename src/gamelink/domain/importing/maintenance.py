"""Explicit housekeeping for abandoned imports."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime, timedelta

    from gamelink.domain.ports import ImportUnitOfWork

log = getLogger(__name__)


def purge_stale_sessions(
    unit_of_work_factory: Callable[[], ImportUnitOfWork],
    *,
    older_than: timedelta,
    now: datetime,
) -> int:
    """Delete every session created before ``now - older_than``, whatever its status.

    Unlike cancelling, this removes the session and its rows from the store. Records
    already written by resolved rows are kept.
    """

    cutoff = now - older_than
    with unit_of_work_factory() as uow:
        sessions = uow.repositories.sessions
        stale = list(sessions.list_created_before(cutoff))
        for session in stale:
            log.info(
                "Purging %s import #%s of %s (created %s)",
                session.status,
                session.id,
                session.owner_id,
                session.created_at.isoformat(),
            )
            sessions.delete(session)
        uow.commit()
    return len(stale)
