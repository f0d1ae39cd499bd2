"""Tests for the guarded flow coordinator."""

import pytest

from orchestrator.errors import GuardViolation, StateDriftError
from orchestrator.event_log import EventBus, EventStore
from orchestrator.state_machine import FlowCoordinator
from schemas.events import EventType, new_event
from schemas.flow_state import CompletionStatus, FlowStatus, UserAction


def _types(bus: EventBus) -> list[EventType]:
    return [e.type for e in bus.events()]


def test_start_requests_decision(bus):
    coordinator = FlowCoordinator(bus)
    state = coordinator.start("run-1", "create a nextjs dashboard", "/tmp/dash")

    assert state.status == FlowStatus.AWAITING_DECISION
    assert state.flow_id.startswith("scaffold_")
    assert _types(bus) == [
        EventType.STARTED,
        EventType.PROPOSAL_CREATED,
        EventType.DECISION_REQUESTED,
    ]
    assert state.proposal["recipe_id"] == "nextjs_app_router"
    assert state.decision["decision_type"] == "scaffold_approval"
    actions = [o["action"] for o in state.decision["options"]]
    assert actions == ["proceed", "cancel", "change_style"]


def test_events_are_causally_linked(bus):
    FlowCoordinator(bus).start("run-1", "make a site")
    started, proposal, decision = bus.events()
    assert started.parent_event_id is None
    assert proposal.parent_event_id == started.id
    assert decision.parent_event_id == proposal.id
    assert {e.correlation_id for e in (started, proposal, decision)} == {"run-1"}


def test_proceed_completes_ready(bus):
    coordinator = FlowCoordinator(bus)
    coordinator.start("run-1", "create an app")
    state = coordinator.handle_user_action("proceed")

    assert state.status == FlowStatus.COMPLETED
    assert state.completion_status == CompletionStatus.READY
    completed = bus.events()[-1]
    assert completed.type == EventType.COMPLETED
    assert completed.payload["status"] == "ready"
    assert completed.payload["design_pack_id"] == state.proposal["design_pack_id"]


def test_cancel_completes_cancelled(bus):
    coordinator = FlowCoordinator(bus)
    coordinator.start("run-1", "create an app")
    state = coordinator.handle_user_action(UserAction.CANCEL)

    assert state.status == FlowStatus.COMPLETED
    assert state.completion_status == CompletionStatus.CANCELLED


def test_style_change_then_select(bus):
    coordinator = FlowCoordinator(bus)
    coordinator.start("run-1", "create an app", "/tmp/app")
    before = len(bus.events())

    opened = coordinator.handle_style_change()
    assert len(bus.events()) == before + 1
    assert opened.status == FlowStatus.AWAITING_DECISION
    assert opened.style_picker_active is True
    picker = bus.events()[-1]
    assert picker.type == EventType.STYLE_SELECTION_REQUESTED
    assert len(picker.payload["available_packs"]) == 6

    selected = coordinator.handle_style_select("neo-brutalist")
    assert selected.style_picker_active is False
    assert selected.status == FlowStatus.AWAITING_DECISION
    assert selected.proposal["design_pack_id"] == "neo-brutalist"
    assert selected.proposal["design_pack_overridden"] is True
    assert selected.decision["design_pack_id"] == "neo-brutalist"
    assert _types(bus)[-3:] == [
        EventType.STYLE_SELECTED,
        EventType.PROPOSAL_CREATED,
        EventType.DECISION_REQUESTED,
    ]

    done = coordinator.handle_user_action("proceed")
    assert done.completion_status == CompletionStatus.READY
    assert bus.events()[-1].payload["design_pack_id"] == "neo-brutalist"


def test_unknown_style_is_rejected_without_events(bus):
    coordinator = FlowCoordinator(bus)
    coordinator.start("run-1", "create an app")
    before = len(bus.events())

    with pytest.raises(ValueError, match="Unknown design pack"):
        coordinator.handle_style_select("no-such-pack")
    assert len(bus.events()) == before


def test_operations_before_start_are_guarded(bus):
    coordinator = FlowCoordinator(bus)
    with pytest.raises(GuardViolation) as exc_info:
        coordinator.handle_user_action("proceed")
    assert exc_info.value.state == "none"
    assert exc_info.value.message == "No active flow"

    with pytest.raises(GuardViolation):
        coordinator.handle_style_change()
    assert bus.events() == []


def test_start_twice_is_guarded(bus):
    coordinator = FlowCoordinator(bus)
    coordinator.start("run-1", "create an app")
    with pytest.raises(GuardViolation) as exc_info:
        coordinator.start("run-1", "again")
    assert exc_info.value.action == "start"
    assert len(bus.events()) == 3


def test_actions_after_completion_are_guarded(bus):
    coordinator = FlowCoordinator(bus)
    coordinator.start("run-1", "create an app")
    coordinator.handle_user_action("cancel")
    count = len(bus.events())

    with pytest.raises(GuardViolation, match="Cannot handle action in status completed"):
        coordinator.handle_user_action("proceed")
    with pytest.raises(GuardViolation):
        coordinator.handle_style_change()
    with pytest.raises(GuardViolation):
        coordinator.handle_style_select("minimal-dark")
    assert len(bus.events()) == count


def test_unknown_action_is_rejected(bus):
    coordinator = FlowCoordinator(bus)
    coordinator.start("run-1", "create an app")
    with pytest.raises(ValueError):
        coordinator.handle_user_action("deploy")
    assert coordinator.state.status == FlowStatus.AWAITING_DECISION


def test_verify_cache_detects_drift(bus):
    coordinator = FlowCoordinator(bus)
    state = coordinator.start("run-1", "create an app")
    assert coordinator.verify_cache() == state

    bus.publish(new_event(EventType.COMPLETED, "run-1", {"scaffold_id": state.flow_id, "status": "ready"}))
    with pytest.raises(StateDriftError):
        coordinator.verify_cache()


def test_resume_replays_existing_flow(bus):
    original = FlowCoordinator(bus)
    state = original.start("run-1", "create an app")

    resumed = FlowCoordinator.resume(bus, "run-1", state.flow_id)
    assert resumed.state == state
    finished = resumed.handle_user_action("proceed")
    assert finished.completion_status == CompletionStatus.READY


def test_resume_unknown_flow(bus):
    with pytest.raises(GuardViolation):
        FlowCoordinator.resume(bus, "run-1", "scaffold_missing")


def test_same_target_gives_same_pack(bus):
    first = FlowCoordinator(bus).start("run-1", "build a blog", "/work/blog")
    second = FlowCoordinator(EventBus()).start("run-2", "build a blog", "/work/blog")
    assert first.proposal["design_pack_id"] == second.proposal["design_pack_id"]


class FlakyStore(EventStore):
    """Store whose first append fails."""

    def __init__(self) -> None:
        super().__init__()
        self.failures = 1

    def append(self, event):
        if self.failures:
            self.failures -= 1
            raise OSError("disk full")
        return super().append(event)


def test_failed_start_leaves_coordinator_unbound():
    bus = EventBus(FlakyStore())
    coordinator = FlowCoordinator(bus)

    with pytest.raises(OSError):
        coordinator.start("run-1", "create an app")

    assert coordinator.run_id is None
    assert coordinator.flow_id is None
    assert coordinator.state is None
    assert bus.events() == []

    state = coordinator.start("run-1", "create an app")
    assert state.status == FlowStatus.AWAITING_DECISION
    assert len(bus.events()) == 3
