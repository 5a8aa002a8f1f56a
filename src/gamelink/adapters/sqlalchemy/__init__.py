"""SQLAlchemy adapter package for gamelink."""

from __future__ import annotations

from .catalog import SqlAlchemyCatalog, parse_catalog_csv
from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyAuditEntryRepository,
    SqlAlchemyCompletionRepository,
    SqlAlchemyImportSessionRepository,
)
from .unit_of_work import SqlAlchemyImportUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyAuditEntryRepository",
    "SqlAlchemyCatalog",
    "SqlAlchemyCompletionRepository",
    "SqlAlchemyImportSessionRepository",
    "SqlAlchemyImportUnitOfWork",
    "create_all_tables",
    "mapper_registry",
    "parse_catalog_csv",
    "shutdown",
    "start_mappers",
    "startup",
]
