"""Operator decisions fed into the reconciliation workflow."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class DecisionKind(StrEnum):
    ACCEPT = "accept"
    SELECT = "select"
    MANUAL = "manual"
    QUERY = "query"
    SKIP = "skip"
    PAUSE = "pause"
    CANCEL = "cancel"


@dataclass(frozen=True, slots=True)
class AcceptTop:
    kind: DecisionKind = DecisionKind.ACCEPT


@dataclass(frozen=True, slots=True)
class SelectCandidate:
    catalog_id: int
    kind: DecisionKind = DecisionKind.SELECT


@dataclass(frozen=True, slots=True)
class ManualId:
    catalog_id: int
    kind: DecisionKind = DecisionKind.MANUAL


@dataclass(frozen=True, slots=True)
class ManualRequery:
    text: str
    kind: DecisionKind = DecisionKind.QUERY


@dataclass(frozen=True, slots=True)
class Skip:
    kind: DecisionKind = DecisionKind.SKIP


@dataclass(frozen=True, slots=True)
class Pause:
    kind: DecisionKind = DecisionKind.PAUSE


@dataclass(frozen=True, slots=True)
class Cancel:
    kind: DecisionKind = DecisionKind.CANCEL


type Decision = AcceptTop | SelectCandidate | ManualId | ManualRequery | Skip | Pause | Cancel
