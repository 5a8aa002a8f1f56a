"""CSV fixtures and a controllable clock for import tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from gamelink.domain.importing.csv_rows import build_import_items
from gamelink.domain.model import new_session

if TYPE_CHECKING:
    from collections.abc import Callable

    from gamelink.domain.model import ImportKind
    from gamelink.domain.ports import ImportUnitOfWork

COMPLETIONATOR_HEADER = "Name,Platform,Region,Type,Time,Date"
AUDIT_HEADER = "Kind,Round,Month Year,Title,Game Index,Thread ID,Reddit URL,GameDB ID"


def completionator_csv(*rows: str) -> str:
    return "\n".join((COMPLETIONATOR_HEADER, *rows)) + "\n"


def completionator_row(title: str, *, category: str = "Core Game", time: str = "") -> str:
    return f'"{title}",SNES,NA,{category},{time},1/2/2020'


def audit_csv(*rows: str) -> str:
    return "\n".join((AUDIT_HEADER, *rows)) + "\n"


@dataclass
class FakeClock:
    now: datetime
    step: timedelta = field(default=timedelta(seconds=1))

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


def store_session(
    unit_of_work_factory: Callable[[], ImportUnitOfWork],
    *,
    kind: ImportKind,
    text: str,
    owner_id: str = "operator-1",
    now: datetime,
) -> int:
    """Persist a fresh session for ``text`` and return its id."""

    with unit_of_work_factory() as uow:
        session = new_session(
            kind=kind,
            owner_id=owner_id,
            items=build_import_items(kind, text),
            now=now,
        )
        uow.repositories.sessions.add(session)
        uow.commit()
        return session.stored_id
