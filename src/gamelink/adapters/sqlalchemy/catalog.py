"""Catalog service backed by the ``catalog_game`` table."""

from __future__ import annotations

import re
from logging import getLogger
from typing import TYPE_CHECKING, Any, cast

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from sqlalchemy import func, select

from gamelink.adapters.sqlalchemy.mappings import catalog_game_table
from gamelink.domain.importing.csv_rows import normalize_csv_header, split_csv_document
from gamelink.domain.model import CatalogGame

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from sqlalchemy.engine import Engine, RowMapping

log = getLogger(__name__)

_LIKE_SPECIALS = re.compile(r"([\\%_])")
_PLATFORM_SEPARATORS = re.compile(r"[;|]")


def _like_pattern(text: str) -> str:
    escaped = _LIKE_SPECIALS.sub(r"\\\1", text.lower())
    return f"%{escaped}%"


def _to_game(row: RowMapping) -> CatalogGame:
    platforms = cast(list[Any], row["platforms"] or [])
    return CatalogGame(
        id=row["id"],
        title=row["title"],
        release_year=row["release_year"],
        platforms=tuple(str(platform) for platform in platforms),
    )


class SqlAlchemyCatalog:
    """Case-insensitive substring search ordered by title, then id."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def search(self, text: str) -> Sequence[CatalogGame]:
        query = text.strip()
        if not query:
            return []
        title = catalog_game_table.c.title
        stmt = (
            select(catalog_game_table)
            .where(func.lower(title).like(_like_pattern(query), escape="\\"))
            .order_by(title, catalog_game_table.c.id)
        )
        with self._engine.connect() as connection:
            return [_to_game(row) for row in connection.execute(stmt).mappings()]

    def get_by_id(self, catalog_id: int) -> CatalogGame | None:
        stmt = select(catalog_game_table).where(catalog_game_table.c.id == catalog_id)
        with self._engine.connect() as connection:
            row = connection.execute(stmt).mappings().first()
        return _to_game(row) if row is not None else None

    def upsert(self, games: Iterable[CatalogGame]) -> int:
        """Insert or replace catalog entries by id; returns the number written."""

        written = 0
        with self._engine.begin() as connection:
            for game in games:
                values = {
                    "title": game.title,
                    "release_year": game.release_year,
                    "platforms": list(game.platforms),
                }
                exists = connection.execute(
                    select(catalog_game_table.c.id).where(catalog_game_table.c.id == game.id)
                ).first()
                if exists is None:
                    connection.execute(catalog_game_table.insert().values(id=game.id, **values))
                else:
                    connection.execute(
                        catalog_game_table.update()
                        .where(catalog_game_table.c.id == game.id)
                        .values(**values)
                    )
                written += 1
        log.info("Loaded %s catalog entries", written)
        return written


# Catalog CSV ---------------------------------------------------------------------


class CatalogRow(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, str_strip_whitespace=True)

    id: int = Field(gt=0)
    title: str = Field(min_length=1)
    release_year: int | None = None
    platforms: tuple[str, ...] = ()

    @field_validator("release_year", mode="before")
    @classmethod
    def _blank_year(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("platforms", mode="before")
    @classmethod
    def _split_platforms(cls, value: object) -> object:
        if isinstance(value, str):
            parts = (part.strip() for part in _PLATFORM_SEPARATORS.split(value))
            return tuple(part for part in parts if part)
        return value

    def to_game(self) -> CatalogGame:
        return CatalogGame(
            id=self.id,
            title=self.title,
            release_year=self.release_year,
            platforms=self.platforms,
        )


def parse_catalog_csv(text: str) -> list[CatalogGame]:
    """Parse an ``id,title,release_year,platforms`` export (platforms split on ``;`` or ``|``)."""

    header, rows = split_csv_document(text)
    names = [normalize_csv_header(value) for value in header]
    games: list[CatalogGame] = []
    for row_index, fields in rows:
        data = dict(zip(names, fields, strict=False))
        try:
            games.append(CatalogRow.model_validate(data).to_game())
        except ValidationError as exc:
            log.debug("Dropping catalog row %s: %s", row_index, exc.errors())
    return games


if TYPE_CHECKING:
    from gamelink.domain.ports import CatalogService

    _catalog_check: CatalogService = SqlAlchemyCatalog(cast("Engine", object()))
