from __future__ import annotations

from gamelink.domain.importing.matcher import (
    CatalogMatcher,
    find_exact_match,
    rank_candidates,
    unambiguous_top,
)
from gamelink.domain.model import Candidate, CatalogGame
from tests.helpers.catalog import InMemoryCatalog


def _candidate(catalog_id: int, title: str, *, exact: bool = False) -> Candidate:
    return Candidate(catalog_id=catalog_id, title=title, exact=exact)


def test_raw_search_results_keep_catalog_order(catalog: InMemoryCatalog) -> None:
    candidates = CatalogMatcher(catalog).find_candidates("Zelda")

    assert [c.catalog_id for c in candidates] == [21, 22]
    assert not any(c.exact for c in candidates)
    assert catalog.queries == ["Zelda"]


def test_exact_match_sorts_first(catalog: InMemoryCatalog) -> None:
    candidates = CatalogMatcher(catalog).find_candidates("super metroid")

    assert [c.catalog_id for c in candidates] == [41]
    assert candidates[0].exact

    candidates = CatalogMatcher(catalog).find_candidates("Metroid")
    assert [c.title for c in candidates] == ["Metroid Prime", "Super Metroid"]


def test_token_fallback_recovers_titles_with_date_suffix(catalog: InMemoryCatalog) -> None:
    candidates = CatalogMatcher(catalog).find_candidates("Final Fantasy VII (1997)")

    assert [(c.catalog_id, c.exact) for c in candidates] == [(7, True)]
    assert catalog.queries == ["Final Fantasy VII (1997)", "Final", "Fantasy", "VII", "1997"]


def test_token_fallback_deduplicates_first_seen() -> None:
    catalog = InMemoryCatalog(
        [
            CatalogGame(id=5, title="Metroid: Zero Mission"),
            CatalogGame(id=3, title="Zero Escape"),
            CatalogGame(id=9, title="Metroid Fusion"),
        ]
    )

    candidates = CatalogMatcher(catalog).find_candidates("Metroid - Zero!")

    # "Metroid" yields 9 then 5 (title order), "Zero" adds 3 after the known 5
    assert [c.catalog_id for c in candidates] == [9, 5, 3]


def test_no_results_for_blank_title(catalog: InMemoryCatalog) -> None:
    assert CatalogMatcher(catalog).find_candidates("   ") == ()
    assert catalog.queries == []


def test_candidate_detail_and_label(catalog: InMemoryCatalog) -> None:
    (candidate,) = CatalogMatcher(catalog).find_candidates("Chrono Trigger")

    assert candidate.detail == "1995; SNES"
    assert candidate.label == "Chrono Trigger (1995; SNES)"


def test_rank_candidates_breaks_exact_ties_by_id() -> None:
    ranked = rank_candidates(
        [
            _candidate(8, "Tetris DX"),
            _candidate(12, "Tetris", exact=True),
            _candidate(4, "Tetris", exact=True),
            _candidate(2, "Tetris Attack"),
        ]
    )

    assert [c.catalog_id for c in ranked] == [4, 12, 8, 2]


def test_find_exact_match_requires_a_single_match() -> None:
    single = [_candidate(1, "Tetris"), _candidate(2, "Tetris DX")]
    double = [_candidate(1, "Tetris"), _candidate(3, "TETRIS!")]

    match = find_exact_match("Tetris (1989)", single)
    assert match is not None
    assert match.catalog_id == 1
    assert find_exact_match("Tetris", double) is None
    assert find_exact_match("Columns", single) is None
    assert find_exact_match("", single) is None


def test_unambiguous_top() -> None:
    only = [_candidate(1, "Tetris")]
    exact_first = [_candidate(1, "Tetris", exact=True), _candidate(2, "Tetris DX")]
    ambiguous = [_candidate(21, "Zelda II"), _candidate(22, "Zelda III")]
    two_exact = [_candidate(1, "Tetris", exact=True), _candidate(2, "Tetris", exact=True)]

    assert unambiguous_top(only) == only[0]
    assert unambiguous_top(exact_first) == exact_first[0]
    assert unambiguous_top(ambiguous) is None
    assert unambiguous_top(two_exact) is None
    assert unambiguous_top([]) is None
