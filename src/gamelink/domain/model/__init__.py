"""Domain model for import reconciliation."""

from __future__ import annotations

from .catalog import Candidate, CatalogGame
from .enums import AuditKind, ImportKind, ItemStatus, SessionStatus
from .records import AuditEntry, CompletionRecord
from .session import OPEN_STATUSES, ImportItem, ImportSession, new_session

__all__ = [
    "OPEN_STATUSES",
    "AuditEntry",
    "AuditKind",
    "Candidate",
    "CatalogGame",
    "CompletionRecord",
    "ImportItem",
    "ImportKind",
    "ImportSession",
    "ItemStatus",
    "SessionStatus",
    "new_session",
]
