"""Import reconciliation engine."""

from __future__ import annotations

from .commit import DecisionCommitPipeline, ResolvedOutcome, SkippedOutcome
from .decisions import (
    AcceptTop,
    Cancel,
    Decision,
    DecisionKind,
    ManualId,
    ManualRequery,
    Pause,
    SelectCandidate,
    Skip,
)
from .maintenance import purge_stale_sessions
from .matcher import CatalogMatcher, find_exact_match, rank_candidates, unambiguous_top
from .normalize import normalize_title, strip_title_date_suffix
from .views import ImportProgress, PromptView
from .workflow import DecisionResult, ReconciliationWorkflow, StartResult

__all__ = [
    "AcceptTop",
    "Cancel",
    "CatalogMatcher",
    "Decision",
    "DecisionCommitPipeline",
    "DecisionKind",
    "DecisionResult",
    "ImportProgress",
    "ManualId",
    "ManualRequery",
    "Pause",
    "PromptView",
    "ReconciliationWorkflow",
    "ResolvedOutcome",
    "SelectCandidate",
    "Skip",
    "SkippedOutcome",
    "StartResult",
    "find_exact_match",
    "normalize_title",
    "purge_stale_sessions",
    "rank_candidates",
    "strip_title_date_suffix",
    "unambiguous_top",
]
