from __future__ import annotations

import os
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from gamelink.adapters.sqlalchemy import create_all_tables, start_mappers
from gamelink.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyImportUnitOfWork,
    shutdown,
    startup,
)
from gamelink.domain.model import CatalogGame
from tests.helpers.catalog import InMemoryCatalog
from tests.helpers.imports import FakeClock

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from sqlalchemy.engine import Engine


@pytest.fixture
def sqlite_engine(tmp_path: Path) -> Iterator[Engine]:
    # file-backed so separate connections (and units of work) see each other's commits
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'gamelink.db'}", future=True)
    start_mappers()
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True, expire_on_commit=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyImportUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyImportUnitOfWork:
        return SqlAlchemyImportUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 3, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def catalog() -> InMemoryCatalog:
    return InMemoryCatalog(
        [
            CatalogGame(id=7, title="Final Fantasy VII", release_year=1997, platforms=("PS1",)),
            CatalogGame(id=21, title="Zelda II", release_year=1987),
            CatalogGame(id=22, title="Zelda III", release_year=1991),
            CatalogGame(id=30, title="Chrono Trigger", release_year=1995, platforms=("SNES",)),
            CatalogGame(id=41, title="Super Metroid", release_year=1994),
            CatalogGame(id=42, title="Metroid Prime", release_year=2002),
        ]
    )
