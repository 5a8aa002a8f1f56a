"""Catalog lookup port (read-only)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from gamelink.domain.model import CatalogGame


@runtime_checkable
class CatalogService(Protocol):
    """Authoritative game catalog.

    ``search`` returns games in the catalog's own relevance order.
    """

    def search(self, text: str) -> Sequence[CatalogGame]: ...

    def get_by_id(self, catalog_id: int) -> CatalogGame | None: ...
