"""CSV parsing for the supported import sources.

Parsing is best effort: a row that fails validation is dropped (and logged at DEBUG)
instead of aborting the import. Both source formats converge on :class:`ImportItem`.
"""

from __future__ import annotations

import re
from datetime import date
from logging import getLogger
from typing import TYPE_CHECKING, Final, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from gamelink.domain.model import AuditKind, ImportItem, ImportKind

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

log = getLogger(__name__)

_LINE_SPLIT = re.compile(r"\r?\n")
_PLAYTIME = re.compile(r"(\d+)h:(\d+)m:(\d+)s", re.IGNORECASE)

COMPLETIONATOR_COLUMNS: Final[int] = 6

_COMPLETION_TYPES: Final[dict[str, str]] = {
    "core game": "Main Story",
    "core game (+ a few extras)": "Main Story + Side Content",
    "core game (+ lots of extras)": "Main Story + Side Content",
    "completionated": "Completionist",
}

_MONTH_NAMES: Final[tuple[str, ...]] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
_MONTH_ABBREVIATIONS: Final[dict[str, str]] = {
    name[:3].lower(): name for name in _MONTH_NAMES
} | {"sept": "September"}

_AUDIT_HEADERS: Final[dict[str, tuple[str, ...]]] = {
    "kind": ("kind", "type"),
    "round": ("round", "round number"),
    "month_year": ("monthyear", "month year", "month/year"),
    "month": ("month",),
    "year": ("year",),
    "title": ("title", "game title", "name"),
    "game_index": ("game index", "gameindex", "index"),
    "thread": ("thread id", "threadid", "thread"),
    "reddit": ("reddit url", "redditurl", "reddit"),
    "catalog_id": (
        "gamedb id",
        "gamedb_id",
        "gamedb game id",
        "gamedb game_id",
        "gamedbgameid",
        "gamedbid",
    ),
}


# Low-level CSV -------------------------------------------------------------------


def parse_csv_line(line: str) -> list[str]:
    """Split one CSV line into raw fields.

    Double quotes toggle quoting, ``""`` inside quotes is a literal quote and commas
    inside quotes are data. Fields are returned untrimmed.
    """

    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    index = 0
    while index < len(line):
        char = line[index]
        if char == '"' and in_quotes and line[index + 1 : index + 2] == '"':
            current.append('"')
            index += 2
            continue
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        index += 1
    fields.append("".join(current))
    return fields


def split_csv_document(text: str) -> tuple[list[str], list[tuple[int, list[str]]]]:
    """Return the header fields and the ``(row_index, fields)`` pairs of ``text``.

    Blank lines are ignored; ``row_index`` is the 1-based position among data lines.
    """

    lines = [line for line in _LINE_SPLIT.split(text) if line.strip()]
    if not lines:
        return [], []
    header = parse_csv_line(lines[0])
    rows = [(index, parse_csv_line(line)) for index, line in enumerate(lines[1:], start=1)]
    return header, rows


def normalize_csv_header(value: str) -> str:
    return value.strip().lower()


# Field helpers -------------------------------------------------------------------


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def map_completion_type(value: str | None) -> str | None:
    if not value:
        return None
    return _COMPLETION_TYPES.get(value.strip().lower())


def parse_playtime_hours(value: str | None) -> float | None:
    """Parse ``"12h:30m:00s"`` into hours rounded to two decimals."""

    if not value:
        return None
    match = _PLAYTIME.search(value.strip())
    if match is None:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    return round(hours + minutes / 60, 2)


def parse_us_date(value: str | None) -> date | None:
    """Parse ``M/D/YYYY``; anything else (including impossible dates) yields ``None``."""

    if not value:
        return None
    parts = value.strip().split("/")
    if len(parts) != 3:  # noqa: PLR2004
        return None
    try:
        month, day, year = (int(part) for part in parts)
        return date(year, month, day)
    except ValueError:
        return None


def normalize_month_label(value: str) -> str | None:
    """Map ``"3"``, ``"mar"`` or ``"Sept."`` to the full month name.

    Unrecognised non-numeric labels are kept as written; out-of-range numbers are rejected.
    """

    cleaned = value.strip().lower().replace(".", "")
    if not cleaned:
        return None
    if cleaned.isdigit() and len(cleaned) <= 2:  # noqa: PLR2004
        number = int(cleaned)
        return _MONTH_NAMES[number - 1] if 1 <= number <= len(_MONTH_NAMES) else None
    return _MONTH_ABBREVIATIONS.get(cleaned, value.strip())


def normalize_audit_kind(value: str) -> AuditKind | None:
    cleaned = re.sub(r"[^a-z]", "", value.strip().lower())
    if not cleaned:
        return None
    if cleaned.startswith("nr"):
        return AuditKind.NR_GOTM
    if cleaned == "gotm":
        return AuditKind.GOTM
    return None


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


# Row models ----------------------------------------------------------------------


class SourceRowModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, str_strip_whitespace=True)

    row_index: int = Field(ge=1)
    title: str = Field(min_length=1)


class CompletionatorRow(SourceRowModel):
    """One line of a Completionator export (``Name,Platform,Region,Type,Time,Date``)."""

    source: Literal[ImportKind.COMPLETIONATOR] = ImportKind.COMPLETIONATOR
    platform: str | None = None
    region: str | None = None
    category: str | None = None
    time_text: str | None = None
    date_text: str | None = None

    _normalize_optional = field_validator(
        "platform", "region", "category", "time_text", "date_text", mode="before"
    )(_blank_to_none)

    @property
    def completion_type(self) -> str | None:
        return map_completion_type(self.category)

    @property
    def playtime_hours(self) -> float | None:
        return parse_playtime_hours(self.time_text)

    @property
    def completed_on(self) -> date | None:
        return parse_us_date(self.date_text)

    def to_item(self, position: int) -> ImportItem:
        completed_on = self.completed_on
        return ImportItem(
            position=position,
            row_index=self.row_index,
            title=self.title,
            platform=self.platform,
            category=self.category,
            time_text=self.time_text,
            date_text=self.date_text,
            details={
                "region": self.region,
                "completion_type": self.completion_type,
                "playtime_hours": self.playtime_hours,
                "completed_on": completed_on.isoformat() if completed_on else None,
            },
        )


class AuditRow(SourceRowModel):
    """One historical game-of-the-month nomination from the audit feed."""

    source: Literal[ImportKind.AUDIT] = ImportKind.AUDIT
    kind: AuditKind
    round_number: int = Field(gt=0)
    month_year: str = Field(min_length=1)
    game_index: int = Field(ge=0)
    thread_id: str | None = None
    reddit_url: str | None = None
    catalog_id: int | None = None

    _normalize_optional = field_validator("thread_id", "reddit_url", mode="before")(
        _blank_to_none
    )

    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, value: object) -> object:
        if isinstance(value, str):
            kind = normalize_audit_kind(value)
            if kind is None:
                raise ValueError(f"unknown audit kind {value!r}")
            return kind
        return value

    @field_validator("round_number", mode="before")
    @classmethod
    def _parse_round(cls, value: object) -> object:
        if isinstance(value, str):
            parsed = _parse_int(value)
            if parsed is None:
                raise ValueError(f"round number must be an integer, got {value!r}")
            return parsed
        return value

    @field_validator("catalog_id", mode="before")
    @classmethod
    def _parse_catalog_id(cls, value: object) -> object:
        if isinstance(value, str):
            parsed = _parse_int(value)
            return parsed if parsed is not None and parsed > 0 else None
        return value

    def to_item(self, position: int) -> ImportItem:
        return ImportItem(
            position=position,
            row_index=self.row_index,
            title=self.title,
            category=self.kind.value,
            date_text=self.month_year,
            catalog_hint=self.catalog_id,
            details={
                "kind": self.kind.value,
                "round_number": self.round_number,
                "month_year": self.month_year,
                "game_index": self.game_index,
                "thread_id": self.thread_id,
                "reddit_url": self.reddit_url,
            },
        )


type SourceRow = CompletionatorRow | AuditRow


# Document parsers ----------------------------------------------------------------


def _field(fields: Sequence[str], index: int) -> str | None:
    if index < 0 or index >= len(fields):
        return None
    return fields[index]


def parse_completionator_rows(text: str) -> list[CompletionatorRow]:
    _, rows = split_csv_document(text)
    parsed: list[CompletionatorRow] = []
    for row_index, fields in rows:
        if len(fields) < COMPLETIONATOR_COLUMNS:
            log.debug("Dropping completionator row %s: %s fields", row_index, len(fields))
            continue
        name, platform, region, category, time_text, date_text = fields[:COMPLETIONATOR_COLUMNS]
        try:
            parsed.append(
                CompletionatorRow(
                    row_index=row_index,
                    title=name,
                    platform=platform,
                    region=region,
                    category=category,
                    time_text=time_text,
                    date_text=date_text,
                )
            )
        except ValidationError as exc:
            log.debug("Dropping completionator row %s: %s", row_index, exc.errors())
    return parsed


def _column(fields: Sequence[str], columns: dict[str, int], key: str) -> str | None:
    return _field(fields, columns[key])


def _month_year(fields: Sequence[str], columns: dict[str, int]) -> str | None:
    if columns["month_year"] >= 0:
        return (_field(fields, columns["month_year"]) or "").strip() or None
    month = (_field(fields, columns["month"]) or "").strip()
    year = (_field(fields, columns["year"]) or "").strip()
    if not month or not year:
        return None
    label = normalize_month_label(month)
    return f"{label} {year}" if label else None


def parse_audit_rows(text: str) -> list[AuditRow]:
    """Parse the audit feed, locating columns by header name.

    Returns nothing when the kind, round or title column is missing, or when neither a
    combined month/year column nor separate month and year columns are present. Game
    indexes are 1-based in the file and 0-based here; rows without one continue the
    running count of their ``(kind, round)``.
    """

    header, rows = split_csv_document(text)
    names = [normalize_csv_header(value) for value in header]

    def locate(labels: tuple[str, ...]) -> int:
        return next((index for index, name in enumerate(names) if name in labels), -1)

    columns = {key: locate(labels) for key, labels in _AUDIT_HEADERS.items()}
    if min(columns["kind"], columns["round"], columns["title"]) < 0:
        log.info("Audit feed is missing a kind, round or title column")
        return []
    if columns["month_year"] < 0 and (columns["month"] < 0 or columns["year"] < 0):
        log.info("Audit feed has no month/year columns")
        return []

    counters: dict[tuple[AuditKind, int], int] = {}
    parsed: list[AuditRow] = []
    for row_index, fields in rows:
        try:
            row = AuditRow(
                row_index=row_index,
                kind=_column(fields, columns, "kind") or "",
                round_number=_column(fields, columns, "round") or "",
                title=_column(fields, columns, "title") or "",
                month_year=_month_year(fields, columns) or "",
                game_index=0,
                thread_id=_column(fields, columns, "thread"),
                reddit_url=_column(fields, columns, "reddit"),
                catalog_id=_column(fields, columns, "catalog_id"),
            )
        except ValidationError as exc:
            log.debug("Dropping audit row %s: %s", row_index, exc.errors())
            continue

        key = (row.kind, row.round_number)
        auto_index = counters.get(key, 0)
        explicit = _parse_int(_column(fields, columns, "game_index"))
        game_index = max(explicit - 1, 0) if explicit is not None and explicit >= 0 else auto_index
        counters[key] = max(auto_index, game_index) + 1
        parsed.append(row.model_copy(update={"game_index": game_index}))
    return parsed


_PARSERS: Final[dict[ImportKind, Callable[[str], Sequence[SourceRow]]]] = {
    ImportKind.COMPLETIONATOR: parse_completionator_rows,
    ImportKind.AUDIT: parse_audit_rows,
}


def parse_source_rows(kind: ImportKind, text: str) -> Sequence[SourceRow]:
    return _PARSERS[kind](text)


def build_import_items(kind: ImportKind, text: str) -> list[ImportItem]:
    """Parse ``text`` and return the session items in source order."""

    rows = parse_source_rows(kind, text)
    items = [row.to_item(position) for position, row in enumerate(rows)]
    log.debug("Parsed %s %s rows", len(items), kind)
    return items
