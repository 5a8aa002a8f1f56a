from __future__ import annotations

from dataclasses import replace

import pytest

from gamelink.domain.importing import (
    AcceptTop,
    Cancel,
    DecisionKind,
    ImportProgress,
    ManualId,
    ManualRequery,
    PromptView,
    SelectCandidate,
    Skip,
)
from gamelink.domain.model import Candidate, ImportKind, ItemStatus, SessionStatus
from gamelink.ui.prompt import (
    ActionRef,
    decision_for,
    decode_action,
    encode_action_id,
    parse_action_id,
    render_progress,
    render_prompt,
)


_VIEW = PromptView(
    session_id=12,
    kind=ImportKind.COMPLETIONATOR,
    owner_id="discord:1234",
    item_index=3,
    row_index=5,
    total=9,
    title="Zelda",
    header=(("Title", "Zelda"), ("Platform", "NES")),
    candidates=(
        Candidate(catalog_id=21, title="Zelda II", detail="1987"),
        Candidate(catalog_id=22, title="Zelda III", exact=True),
    ),
    actions=(DecisionKind.SELECT, DecisionKind.SKIP),
)


def test_action_ids_round_trip_owner_with_colons() -> None:
    action_id = encode_action_id(_VIEW, DecisionKind.SELECT)

    assert action_id == "gamelink:discord:1234:12:3:select"
    assert parse_action_id(action_id) == ActionRef(
        owner_id="discord:1234", session_id=12, item_index=3, kind=DecisionKind.SELECT
    )


@pytest.mark.parametrize(
    "action_id",
    [
        "",
        "other:op:1:0:skip",
        "gamelink:op:1:skip",
        "gamelink::1:0:skip",
        "gamelink:op:x:0:skip",
        "gamelink:op:1:0:explode",
    ],
)
def test_parse_action_id_rejects_foreign_ids(action_id: str) -> None:
    with pytest.raises(ValueError):  # noqa: PT011
        parse_action_id(action_id)


def test_decision_for_each_kind() -> None:
    assert decision_for(DecisionKind.ACCEPT) == AcceptTop()
    assert decision_for(DecisionKind.SELECT, "22") == SelectCandidate(22)
    assert decision_for(DecisionKind.MANUAL, " #30 ") == ManualId(30)
    assert decision_for(DecisionKind.QUERY, " chrono ") == ManualRequery("chrono")
    assert decision_for(DecisionKind.SKIP) == Skip()
    assert decision_for(DecisionKind.CANCEL) == Cancel()


@pytest.mark.parametrize(
    ("kind", "value"),
    [
        (DecisionKind.SELECT, None),
        (DecisionKind.MANUAL, "abc"),
        (DecisionKind.QUERY, "   "),
    ],
)
def test_decision_for_rejects_missing_values(kind: DecisionKind, value: str | None) -> None:
    with pytest.raises(ValueError):  # noqa: PT011
        decision_for(kind, value)


def test_decode_action_uses_the_separate_value() -> None:
    ref, decision = decode_action("gamelink:op:4:0:manual", "41")

    assert ref.session_id == 4
    assert decision == ManualId(41)


def test_render_prompt_lists_candidates_and_actions() -> None:
    text = render_prompt(_VIEW)

    assert text.splitlines() == [
        "Import #12 (completionator): item 4 of 9 (source row 5)",
        "  Title: Zelda",
        "  Platform: NES",
        "Candidates:",
        "  1. Zelda II (1987)  #21",
        "  2. Zelda III  #22  [exact]",
        "Actions: select, skip",
    ]


def test_render_prompt_without_candidates() -> None:
    text = render_prompt(replace(_VIEW, candidates=(), actions=(DecisionKind.MANUAL,)))

    assert "No catalog candidates" in text
    assert text.endswith("Actions: manual")


def test_render_progress() -> None:
    progress = ImportProgress(
        session_id=12,
        kind=ImportKind.AUDIT,
        owner_id="op",
        status=SessionStatus.PAUSED,
        cursor=2,
        total=5,
        counts={ItemStatus.PENDING: 3, ItemStatus.RESOLVED: 1, ItemStatus.SKIPPED: 1},
        source_name="gotm.csv",
    )

    assert render_progress(progress) == (
        "Import #12 (audit) from gotm.csv: paused, 2/5 done (pending=3, resolved=1, skipped=1)"
    )
