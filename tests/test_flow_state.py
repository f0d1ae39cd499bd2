"""Tests for flow state derivation."""

from schemas.events import EventType, new_event
from schemas.flow_state import CompletionStatus, FlowStatus
from orchestrator.flow_state import (
    DECISION_ALIASES,
    derive_flow_state,
    extract_flow_id,
    match_decision_alias,
)

RUN = "run-1"
FLOW = "scaffold_abc12345"


def _started(flow_id: str = FLOW, **extra):
    payload = {"scaffold_id": flow_id, "user_prompt": "make a todo app", "target_directory": "/tmp/todo"}
    payload.update(extra)
    return new_event(EventType.STARTED, RUN, payload)


def _event(event_type: EventType, flow_id: str = FLOW, **payload):
    return new_event(event_type, RUN, {"scaffold_id": flow_id, **payload})


def _legacy(flow_id: str = FLOW, decision_type: str = "scaffold_approval", **payload):
    return new_event(
        EventType.DECISION_POINT_NEEDED,
        RUN,
        {"decision_type": decision_type, "context": {"scaffold_id": flow_id}, **payload},
    )


def test_no_started_event_returns_none():
    events = [_event(EventType.PROPOSAL_CREATED)]
    assert derive_flow_state(events) is None
    assert derive_flow_state([]) is None


def test_started_only():
    state = derive_flow_state([_started()])
    assert state is not None
    assert state.flow_id == FLOW
    assert state.run_id == RUN
    assert state.status == FlowStatus.STARTED
    assert state.user_prompt == "make a todo app"
    assert state.target_directory == "/tmp/todo"
    assert state.completion_status is None


def test_happy_path_to_ready():
    events = [
        _started(),
        _event(EventType.PROPOSAL_CREATED, design_pack_id="minimal-light"),
        _event(EventType.DECISION_REQUESTED, title="Create new project"),
        _event(EventType.COMPLETED, status="ready"),
    ]
    state = derive_flow_state(events)
    assert state.status == FlowStatus.COMPLETED
    assert state.completion_status == CompletionStatus.READY
    assert state.proposal["design_pack_id"] == "minimal-light"
    assert state.decision["title"] == "Create new project"
    assert state.is_terminal


def test_derivation_is_deterministic():
    events = [
        _started(),
        _event(EventType.PROPOSAL_CREATED),
        _event(EventType.DECISION_REQUESTED),
    ]
    assert derive_flow_state(events) == derive_flow_state(list(events))


def test_status_never_regresses_after_completion():
    events = [
        _started(),
        _event(EventType.PROPOSAL_CREATED),
        _event(EventType.DECISION_REQUESTED),
        _event(EventType.COMPLETED, status="cancelled"),
        _event(EventType.PROPOSAL_CREATED, design_pack_id="late"),
        _event(EventType.DECISION_REQUESTED),
    ]
    state = derive_flow_state(events)
    assert state.status == FlowStatus.COMPLETED
    assert state.completion_status == CompletionStatus.CANCELLED


def test_proposal_after_decision_keeps_awaiting_decision():
    events = [
        _started(),
        _event(EventType.DECISION_REQUESTED),
        _event(EventType.PROPOSAL_CREATED),
    ]
    assert derive_flow_state(events).status == FlowStatus.AWAITING_DECISION


def test_dedicated_decision_wins_over_later_legacy():
    events = [
        _started(),
        _event(EventType.DECISION_REQUESTED, title="dedicated"),
        _legacy(title="legacy"),
    ]
    state = derive_flow_state(events)
    assert state.status == FlowStatus.AWAITING_DECISION
    assert state.decision["title"] == "dedicated"
    assert state.decision_source == EventType.DECISION_REQUESTED


def test_dedicated_decision_wins_over_earlier_legacy():
    events = [
        _started(),
        _legacy(title="legacy"),
        _event(EventType.DECISION_REQUESTED, title="dedicated"),
    ]
    state = derive_flow_state(events)
    assert state.decision["title"] == "dedicated"
    assert state.decision_source == EventType.DECISION_REQUESTED


def test_legacy_decision_used_when_alone():
    state = derive_flow_state([_started(), _legacy(title="legacy")])
    assert state.status == FlowStatus.AWAITING_DECISION
    assert state.decision["title"] == "legacy"
    assert state.decision_source == EventType.DECISION_POINT_NEEDED


def test_legacy_decision_with_other_type_is_ignored():
    events = [_started(), _event(EventType.PROPOSAL_CREATED), _legacy(decision_type="deploy_approval")]
    state = derive_flow_state(events)
    assert state.status == FlowStatus.PROPOSAL_CREATED
    assert state.decision is None


def test_newest_dedicated_decision_wins_ties():
    events = [
        _started(),
        _event(EventType.DECISION_REQUESTED, design_pack_id="minimal-light"),
        _event(EventType.DECISION_REQUESTED, design_pack_id="neo-brutalist"),
    ]
    assert derive_flow_state(events).decision["design_pack_id"] == "neo-brutalist"


def test_other_flows_and_noise_are_ignored():
    events = [
        _started(),
        _started(flow_id="scaffold_other"),
        _event(EventType.COMPLETED, flow_id="scaffold_other", status="ready"),
        new_event(EventType.PROGRESS, RUN, {"stage": "init", "status": "started"}),
        _event(EventType.PROPOSAL_CREATED),
    ]
    state = derive_flow_state(events, FLOW)
    assert state.status == FlowStatus.PROPOSAL_CREATED

    other = derive_flow_state(events, "scaffold_other")
    assert other.status == FlowStatus.COMPLETED


def test_style_picker_flag():
    base = [_started(), _event(EventType.PROPOSAL_CREATED), _event(EventType.DECISION_REQUESTED)]

    opened = derive_flow_state([*base, _event(EventType.STYLE_SELECTION_REQUESTED)])
    assert opened.style_picker_active is True
    assert opened.status == FlowStatus.AWAITING_DECISION

    selected = derive_flow_state(
        [*base, _event(EventType.STYLE_SELECTION_REQUESTED), _event(EventType.STYLE_SELECTED)]
    )
    assert selected.style_picker_active is False

    completed = derive_flow_state(
        [*base, _event(EventType.STYLE_SELECTION_REQUESTED), _event(EventType.COMPLETED, status="ready")]
    )
    assert completed.style_picker_active is False


def test_extract_flow_id_prefers_top_level():
    event = new_event(
        EventType.DECISION_POINT_NEEDED,
        RUN,
        {"scaffold_id": "top", "context": {"scaffold_id": "nested"}},
    )
    assert extract_flow_id(event) == "top"


def test_extract_flow_id_from_context():
    assert extract_flow_id(_legacy(flow_id="nested")) == "nested"
    assert extract_flow_id(new_event(EventType.PROGRESS, RUN, {"context": "not-a-dict"})) is None


def test_alias_table_priorities():
    priorities = {a.event_type: a.priority for a in DECISION_ALIASES}
    assert priorities[EventType.DECISION_REQUESTED] > priorities[EventType.DECISION_POINT_NEEDED]
    assert match_decision_alias(_legacy()).event_type == EventType.DECISION_POINT_NEEDED
    assert match_decision_alias(_legacy(decision_type="other")) is None
    assert match_decision_alias(_event(EventType.PROPOSAL_CREATED)) is None
