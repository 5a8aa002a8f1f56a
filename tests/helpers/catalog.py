"""In-memory catalog used by workflow and matcher tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gamelink.domain.ports import CatalogService

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from gamelink.domain.model import CatalogGame


class InMemoryCatalog(CatalogService):
    """Case-insensitive substring search ordered by title then id, like the SQL adapter."""

    def __init__(self, games: Iterable[CatalogGame]) -> None:
        self.games: dict[int, CatalogGame] = {game.id: game for game in games}
        self.queries: list[str] = []

    def search(self, text: str) -> Sequence[CatalogGame]:
        self.queries.append(text)
        needle = text.strip().lower()
        if not needle:
            return []
        matches = [game for game in self.games.values() if needle in game.title.lower()]
        return sorted(matches, key=lambda game: (game.title, game.id))

    def get_by_id(self, catalog_id: int) -> CatalogGame | None:
        return self.games.get(catalog_id)
