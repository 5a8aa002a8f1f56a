"""Text rendering of prompts and the action-id codec used by transports.

Action ids look like ``gamelink:<owner>:<session>:<item>:<action>``. Buttons carry the
whole decision in the id; select menus and text inputs pass their value separately.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from gamelink.domain.importing.decisions import (
    AcceptTop,
    Cancel,
    DecisionKind,
    ManualId,
    ManualRequery,
    Pause,
    SelectCandidate,
    Skip,
)

if TYPE_CHECKING:
    from gamelink.domain.importing.decisions import Decision
    from gamelink.domain.importing.views import ImportProgress, PromptView

ACTION_PREFIX: Final[str] = "gamelink"
_ACTION_PARTS: Final[int] = 5


@dataclass(frozen=True, slots=True)
class ActionRef:
    owner_id: str
    session_id: int
    item_index: int
    kind: DecisionKind


def encode_action_id(view: PromptView, kind: DecisionKind) -> str:
    return f"{ACTION_PREFIX}:{view.owner_id}:{view.session_id}:{view.item_index}:{kind}"


def parse_action_id(action_id: str) -> ActionRef:
    """Split an action id; raises ``ValueError`` for ids this codec did not produce."""

    parts = action_id.split(":")
    if len(parts) < _ACTION_PARTS or parts[0] != ACTION_PREFIX:
        raise ValueError(f"Not a gamelink action id: {action_id!r}")
    # owner ids may themselves contain colons
    owner_id = ":".join(parts[1:-3])
    session_raw, item_raw, kind_raw = parts[-3:]
    if not owner_id:
        raise ValueError(f"Action id without owner: {action_id!r}")
    return ActionRef(
        owner_id=owner_id,
        session_id=int(session_raw),
        item_index=int(item_raw),
        kind=DecisionKind(kind_raw),
    )


def _catalog_id(value: str | None, kind: DecisionKind) -> int:
    text = (value or "").strip().lstrip("#")
    if not text.isdigit():
        raise ValueError(f"{kind} needs a numeric catalog id, got {value!r}")
    return int(text)


def decision_for(kind: DecisionKind, value: str | None = None) -> Decision:
    """Build the decision for ``kind``; ``value`` carries the id or search text."""

    if kind is DecisionKind.ACCEPT:
        return AcceptTop()
    if kind is DecisionKind.SELECT:
        return SelectCandidate(_catalog_id(value, kind))
    if kind is DecisionKind.MANUAL:
        return ManualId(_catalog_id(value, kind))
    if kind is DecisionKind.QUERY:
        text = (value or "").strip()
        if not text:
            raise ValueError("query needs search text")
        return ManualRequery(text)
    if kind is DecisionKind.SKIP:
        return Skip()
    if kind is DecisionKind.PAUSE:
        return Pause()
    return Cancel()


def decode_action(action_id: str, value: str | None = None) -> tuple[ActionRef, Decision]:
    ref = parse_action_id(action_id)
    return ref, decision_for(ref.kind, value)


# Rendering -------------------------------------------------------------------------


def render_prompt(view: PromptView) -> str:
    lines = [
        f"Import #{view.session_id} ({view.kind}): item {view.item_index + 1} of {view.total}"
        f" (source row {view.row_index})",
    ]
    lines.extend(f"  {label}: {value}" for label, value in view.header)
    if view.candidates:
        lines.append("Candidates:")
        for number, candidate in enumerate(view.candidates, start=1):
            marker = "  [exact]" if candidate.exact else ""
            lines.append(f"  {number}. {candidate.label}  #{candidate.catalog_id}{marker}")
    else:
        lines.append("No catalog candidates; enter an id, search again or skip.")
    lines.append("Actions: " + ", ".join(str(kind) for kind in view.actions))
    return "\n".join(lines)


def render_progress(progress: ImportProgress) -> str:
    counts = ", ".join(f"{status}={count}" for status, count in progress.counts.items())
    source = f" from {progress.source_name}" if progress.source_name else ""
    return (
        f"Import #{progress.session_id} ({progress.kind}){source}: {progress.status}, "
        f"{progress.cursor}/{progress.total} done ({counts})"
    )
