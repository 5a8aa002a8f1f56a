from __future__ import annotations

import pytest

from gamelink.domain.importing.normalize import (
    normalize_title,
    strip_title_date_suffix,
    title_tokens,
)


@pytest.mark.parametrize(
    ("title", "expected"),
    [
        ("Chrono Trigger (1995/03)", "Chrono Trigger"),
        ("Chrono Trigger (1995/03/11)", "Chrono Trigger"),
        ("Final Fantasy VII (1997)", "Final Fantasy VII"),
        ("Final Fantasy VII (1997)  ", "Final Fantasy VII"),
        ("Blade Runner (Director's Cut)", "Blade Runner (Director's Cut)"),
        ("Doom (1993) Remaster", "Doom (1993) Remaster"),
    ],
)
def test_strip_title_date_suffix(title: str, expected: str) -> None:
    assert strip_title_date_suffix(title) == expected


def test_normalize_title_collapses_punctuation_runs() -> None:
    assert normalize_title("  The Legend of Zelda: A Link to the Past!! ") == (
        "the legend of zelda a link to the past"
    )


def test_normalize_title_strips_date_before_comparing() -> None:
    assert normalize_title("Chrono Trigger (1995/03)") == normalize_title("CHRONO-TRIGGER")


def test_normalize_title_of_punctuation_only_is_empty() -> None:
    assert normalize_title("?!") == ""


def test_title_tokens_drop_noise_and_duplicates() -> None:
    assert title_tokens("Mario & Luigi: Mario's Saga (2003) Mario") == [
        "Mario",
        "Luigi",
        "Mario's",
        "Saga",
        "2003",
    ]


def test_title_tokens_keep_hyphenated_words() -> None:
    assert title_tokens("Spider-Man 2 X-Men") == ["Spider-Man", "X-Men"]


def test_date_suffix_and_spacing_do_not_change_the_key() -> None:
    assert normalize_title("Chrono Trigger (1995)") == normalize_title("chrono   trigger")
