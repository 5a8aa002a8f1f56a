from __future__ import annotations

from typing import TYPE_CHECKING

from gamelink.adapters.sqlalchemy.catalog import SqlAlchemyCatalog, parse_catalog_csv
from gamelink.domain.importing import CatalogMatcher
from gamelink.domain.model import CatalogGame

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def _catalog(engine: Engine) -> SqlAlchemyCatalog:
    catalog = SqlAlchemyCatalog(engine)
    catalog.upsert(
        [
            CatalogGame(id=22, title="Zelda III", release_year=1991),
            CatalogGame(id=21, title="Zelda II", release_year=1987, platforms=("NES",)),
            CatalogGame(id=5, title="100% Orange Juice"),
            CatalogGame(id=6, title="Snake_Pass"),
            CatalogGame(id=7, title="Final Fantasy VII", release_year=1997),
        ]
    )
    return catalog


def test_search_is_case_insensitive_and_ordered(sqlite_engine: Engine) -> None:
    catalog = _catalog(sqlite_engine)

    results = catalog.search("  zELDA ")

    assert [game.id for game in results] == [21, 22]
    assert results[0].platforms == ("NES",)
    assert results[0].release_year == 1987
    assert catalog.search("") == []


def test_search_escapes_like_wildcards(sqlite_engine: Engine) -> None:
    catalog = _catalog(sqlite_engine)

    assert [game.id for game in catalog.search("100%")] == [5]
    assert [game.id for game in catalog.search("%")] == [5]
    assert [game.id for game in catalog.search("_")] == [6]


def test_get_by_id(sqlite_engine: Engine) -> None:
    catalog = _catalog(sqlite_engine)

    game = catalog.get_by_id(7)

    assert game == CatalogGame(id=7, title="Final Fantasy VII", release_year=1997)
    assert catalog.get_by_id(999) is None


def test_upsert_replaces_existing_entries(sqlite_engine: Engine) -> None:
    catalog = _catalog(sqlite_engine)

    written = catalog.upsert([CatalogGame(id=7, title="Final Fantasy VII Remake")])

    assert written == 1
    assert catalog.get_by_id(7) == CatalogGame(id=7, title="Final Fantasy VII Remake")


def test_matcher_over_the_sql_catalog(sqlite_engine: Engine) -> None:
    matcher = CatalogMatcher(_catalog(sqlite_engine))

    candidates = matcher.find_candidates("Final Fantasy VII (1997)")

    assert [(c.catalog_id, c.exact, c.detail) for c in candidates] == [(7, True, "1997")]


def test_parse_catalog_csv_drops_invalid_rows() -> None:
    text = (
        "ID,Title,Release_Year,Platforms\n"
        '30,"Chrono Trigger",1995,"SNES; DS|PS1"\n'
        "x,Broken,,\n"
        "31,,1990,\n"
        "41,Super Metroid,,\n"
    )

    games = parse_catalog_csv(text)

    assert games == [
        CatalogGame(
            id=30,
            title="Chrono Trigger",
            release_year=1995,
            platforms=("SNES", "DS", "PS1"),
        ),
        CatalogGame(id=41, title="Super Metroid"),
    ]
