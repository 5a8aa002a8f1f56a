"""Deterministic title keys used for catalog matching."""

from __future__ import annotations

import re

_DATE_SUFFIX = re.compile(r"\s*\((\d{4})(?:[/-]\d{1,2}){0,2}\)\s*$")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_TOKEN_NOISE = re.compile(r"[^\w'-]|_")


def strip_title_date_suffix(title: str) -> str:
    """Drop a trailing ``(YYYY)``, ``(YYYY/MM)`` or ``(YYYY/MM/DD)`` from ``title``."""

    return _DATE_SUFFIX.sub("", title).strip()


def normalize_title(title: str) -> str:
    """Return the comparison key for ``title``.

    >>> normalize_title("Chrono Trigger (1995/03)")
    'chrono trigger'
    """

    lowered = strip_title_date_suffix(title).lower()
    return _NON_ALNUM.sub(" ", lowered).strip()


def title_tokens(title: str) -> list[str]:
    """Split ``title`` into de-duplicated search tokens (letters, digits, apostrophes, hyphens)."""

    seen: set[str] = set()
    tokens: list[str] = []
    for chunk in title.split():
        token = _TOKEN_NOISE.sub("", chunk)
        if len(token) <= 1 or token in seen:
            continue
        seen.add(token)
        tokens.append(token)
    return tokens
