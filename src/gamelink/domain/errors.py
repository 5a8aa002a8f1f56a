"""Errors raised by the import reconciliation engine.

Every error carries a message meant for the operator: callers surface ``str(exc)``
as-is so a rejected action explains itself.
"""

from __future__ import annotations


class ReconciliationError(RuntimeError):
    """Base class for all engine errors."""


class EmptySource(ReconciliationError):
    """Raised by ``start`` when the source yields no valid rows."""

    def __init__(self, source_name: str | None = None) -> None:
        label = f" in {source_name}" if source_name else ""
        super().__init__(f"No importable rows found{label}")
        self.source_name = source_name


class NoActiveSession(ReconciliationError):
    """Raised when the operator has no session in a state that accepts the action."""


class SessionAlreadyOpen(ReconciliationError):
    """Raised by ``start`` when the owner already has an open session of the same kind."""

    def __init__(self, session_id: int) -> None:
        super().__init__(
            f"Import session #{session_id} is still open; resume, pause or cancel it first"
        )
        self.session_id = session_id


class InvalidTransition(ReconciliationError):
    """Raised when a lifecycle action does not apply to the session's current status."""


class UnknownCatalogId(ReconciliationError):
    """Raised when a manually entered catalog id does not exist."""

    def __init__(self, catalog_id: int) -> None:
        super().__init__(f"Catalog id {catalog_id} was not found")
        self.catalog_id = catalog_id


class InvalidDecision(ReconciliationError):
    """Raised when a decision is not applicable to the current item."""


class StaleOrForeignDecision(ReconciliationError):
    """Raised for decisions that target another owner's session or an item already decided.

    These are expected under duplicated or delayed operator input and are rejected
    without changing any state.
    """


class ConcurrentModificationError(StaleOrForeignDecision):
    """Raised when another writer changed the session between load and commit."""


class CommitConflict(ReconciliationError):
    """Raised when an already decided item is committed again with a different outcome."""


class DownstreamEffectError(ReconciliationError):
    """Raised when the side effect of a resolution cannot be applied."""
