from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone
from typing import TYPE_CHECKING

from sqlalchemy import inspect, select
from sqlalchemy.dialects import sqlite

from gamelink.adapters.sqlalchemy.mappings import (
    CandidateListType,
    UTCDateTime,
    import_item_table,
    import_session_table,
)
from gamelink.domain.model import Candidate, ImportItem, ImportKind, new_session

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.orm import Session


def test_create_all_tables_creates_schema(sqlite_engine: Engine) -> None:
    tables = set(inspect(sqlite_engine).get_table_names())

    assert {
        "import_session",
        "import_item",
        "catalog_game",
        "completion_record",
        "audit_entry",
    } <= tables


def test_utc_datetime_normalises_offsets() -> None:
    column_type = UTCDateTime()
    local = datetime(2025, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
    dialect = sqlite.dialect()

    stored = column_type.process_bind_param(local, dialect)
    naive = column_type.process_result_value(datetime(2025, 1, 1, 12, 0), dialect)

    assert stored == datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
    assert naive is not None
    assert naive.tzinfo is UTC


def test_candidate_list_distinguishes_missing_from_empty() -> None:
    column_type = CandidateListType()
    dialect = sqlite.dialect()
    candidates = (Candidate(catalog_id=1, title="Tetris", exact=True),)

    assert column_type.process_bind_param(None, dialect) is None
    assert column_type.process_bind_param((), dialect) == "[]"
    encoded = column_type.process_bind_param(candidates, dialect)
    assert column_type.process_result_value(encoded, dialect) == candidates
    assert column_type.process_result_value("[]", dialect) == ()


def test_deleting_a_session_removes_its_items(sqlite_session: Session) -> None:
    session = new_session(
        kind=ImportKind.COMPLETIONATOR,
        owner_id="op",
        items=[ImportItem(position=0, row_index=1, title="Zelda")],
        now=datetime(2025, 1, 1, tzinfo=UTC),
    )
    sqlite_session.add(session)
    sqlite_session.commit()
    assert sqlite_session.execute(select(import_item_table.c.id)).all()

    sqlite_session.delete(session)
    sqlite_session.commit()

    assert sqlite_session.execute(select(import_item_table.c.id)).all() == []
    assert sqlite_session.execute(select(import_session_table.c.id)).all() == []
