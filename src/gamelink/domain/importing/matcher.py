"""Catalog candidate lookup for import items."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from gamelink.domain.importing.normalize import normalize_title, title_tokens
from gamelink.domain.model import Candidate

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from gamelink.domain.model import CatalogGame
    from gamelink.domain.ports import CatalogService

log = getLogger(__name__)


def rank_candidates(candidates: Iterable[Candidate]) -> tuple[Candidate, ...]:
    """Exact matches first (by catalog id), everything else in catalog order."""

    ordered = list(candidates)
    exact = sorted((c for c in ordered if c.exact), key=lambda c: c.catalog_id)
    rest = [c for c in ordered if not c.exact]
    return (*exact, *rest)


def find_exact_match(raw_title: str, candidates: Sequence[Candidate]) -> Candidate | None:
    """Return the only candidate whose normalized title equals ``raw_title``'s, if unique.

    Zero or several exact matches mean the operator has to decide.
    """

    key = normalize_title(raw_title)
    if not key:
        return None
    exact = [candidate for candidate in candidates if normalize_title(candidate.title) == key]
    if len(exact) != 1:
        return None
    return exact[0]


def unambiguous_top(candidates: Sequence[Candidate]) -> Candidate | None:
    """Return the candidate an operator may accept without choosing.

    That is the only candidate, or the leading one when it is the single exact match.
    """

    if len(candidates) == 1:
        return candidates[0]
    exact = [candidate for candidate in candidates if candidate.exact]
    if len(exact) == 1 and candidates[0] is exact[0]:
        return exact[0]
    return None


@dataclass(slots=True)
class CatalogMatcher:
    catalog: CatalogService

    def find_candidates(self, raw_title: str) -> tuple[Candidate, ...]:
        games = self._search(raw_title)
        key = normalize_title(raw_title)
        candidates = (
            Candidate.from_game(game, exact=bool(key) and normalize_title(game.title) == key)
            for game in games
        )
        return rank_candidates(candidates)

    def _search(self, raw_title: str) -> list[CatalogGame]:
        query = raw_title.strip()
        if not query:
            return []
        games = list(self.catalog.search(query))
        if games:
            return _unique(games)

        tokens = title_tokens(query)
        log.debug("No catalog results for %r, retrying with tokens %s", query, tokens)
        merged: list[CatalogGame] = []
        for token in tokens:
            merged.extend(self.catalog.search(token))
        return _unique(merged)


def _unique(games: Iterable[CatalogGame]) -> list[CatalogGame]:
    seen: set[int] = set()
    unique: list[CatalogGame] = []
    for game in games:
        if game.id in seen:
            continue
        seen.add(game.id)
        unique.append(game)
    return unique
