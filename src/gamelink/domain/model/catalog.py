"""Read-only catalog value objects."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, kw_only=True)
class CatalogGame:
    id: int
    title: str
    release_year: int | None = None
    platforms: tuple[str, ...] = ()

    @property
    def detail(self) -> str | None:
        parts: list[str] = []
        if self.release_year is not None:
            parts.append(str(self.release_year))
        if self.platforms:
            parts.append(", ".join(self.platforms))
        return "; ".join(parts) or None


@dataclass(frozen=True, slots=True, kw_only=True)
class Candidate:
    """One catalog entry offered for an import item.

    ``exact`` marks candidates whose normalized title equals the item's normalized title.
    """

    catalog_id: int
    title: str
    detail: str | None = None
    exact: bool = False

    @classmethod
    def from_game(cls, game: CatalogGame, *, exact: bool = False) -> Candidate:
        return cls(catalog_id=game.id, title=game.title, detail=game.detail, exact=exact)

    @property
    def label(self) -> str:
        return f"{self.title} ({self.detail})" if self.detail else self.title
