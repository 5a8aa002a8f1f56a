"""Ports the reconciliation engine depends on."""

from __future__ import annotations

from .catalog import CatalogService
from .persistence import AuditEntryRepository, CompletionRepository, ImportSessionRepository
from .unit_of_work import ImportRepositories, ImportUnitOfWork, RepositoryCollection, UnitOfWork

__all__ = [
    "AuditEntryRepository",
    "CatalogService",
    "CompletionRepository",
    "ImportRepositories",
    "ImportSessionRepository",
    "ImportUnitOfWork",
    "RepositoryCollection",
    "UnitOfWork",
]
