"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ImportKind(StrEnum):
    COMPLETIONATOR = "completionator"
    AUDIT = "audit"


class SessionStatus(StrEnum):
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELED = "canceled"
    COMPLETED = "completed"


class ItemStatus(StrEnum):
    PENDING = "pending"
    RESOLVED = "resolved"
    SKIPPED = "skipped"


class AuditKind(StrEnum):
    """Which monthly nomination list an audit row belongs to."""

    GOTM = "gotm"
    NR_GOTM = "nr-gotm"
