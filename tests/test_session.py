"""End-to-end tests: decision flow into the post-scaffold pipeline."""

import pytest

from orchestrator.errors import GuardViolation
from orchestrator.event_log import EventBus, EventStore
from orchestrator.runner import PipelineRunner
from orchestrator.session import ScaffoldSession, app_name_from_path
from orchestrator.state_machine import FlowCoordinator
from schemas.events import EventType
from schemas.flow_state import CompletionStatus

from .fakes import FakeArtifactWriter, FakeQualityChecker, instant_poll, progress_events


@pytest.fixture
def session(config, bus, quiet_console) -> ScaffoldSession:
    config.local_storage.auto_commit = False
    return ScaffoldSession(
        config=config,
        bus=bus,
        console=quiet_console,
        artifact_writer=FakeArtifactWriter(),
        quality_checker=FakeQualityChecker(),
    )


def test_app_name_from_path():
    assert app_name_from_path("/work/My Cool_App") == "my-cool-app"
    assert app_name_from_path("/work/___") == "my-app"


def test_approved_flow_runs_pipeline(session, config, quiet_console, project_dir, bus):
    session.coordinator.start("run-1", "build an admin dashboard", str(project_dir))
    session.coordinator.handle_user_action("proceed")

    runner = PipelineRunner(config=config, console=quiet_console, poll=instant_poll)
    result = session.run_pipeline(runner)

    assert result.success is True
    flow_id = session.coordinator.flow_id
    stage_events = progress_events(bus)
    assert len(stage_events) == 10
    assert {e.payload["scaffold_id"] for e in stage_events} == {flow_id}
    assert [e.type for e in bus.events()].count(EventType.FINAL_COMPLETE) == 1


def test_build_context_from_proposal(session, project_dir):
    state = session.coordinator.start("run-1", "an expo app", str(project_dir))
    state = session.coordinator.handle_user_action("proceed")

    context = session.build_context(state)

    assert context.recipe_id == "expo"
    assert context.design_pack_id == state.proposal["design_pack_id"]
    assert context.app_name == "my-app"
    assert context.versioner is None
    assert context.quality_checks == ["tsc", "eslint", "build"]


def test_cancelled_flow_cannot_run(session, project_dir):
    session.coordinator.start("run-1", "an app", str(project_dir))
    session.coordinator.handle_user_action("cancel")
    with pytest.raises(GuardViolation, match="not approved"):
        session.run_pipeline()


def test_pending_flow_cannot_run(session, project_dir):
    session.coordinator.start("run-1", "an app", str(project_dir))
    with pytest.raises(GuardViolation):
        session.run_pipeline()


def test_no_flow_cannot_run(session):
    with pytest.raises(GuardViolation, match="No active flow"):
        session.run_pipeline()


def test_flow_survives_restart_via_jsonl(tmp_path, project_dir):
    log_path = tmp_path / "events.jsonl"
    first = FlowCoordinator(EventBus(EventStore(log_path)))
    state = first.start("run-1", "an app", str(project_dir))

    resumed = FlowCoordinator.resume(EventBus(EventStore(log_path)), "run-1", state.flow_id)
    finished = resumed.handle_user_action("proceed")

    assert finished.completion_status == CompletionStatus.READY
    assert len(EventStore(log_path)) == 4


def test_session_persists_to_configured_event_log(config, quiet_console, tmp_path, project_dir):
    log_path = tmp_path / "run" / "events.jsonl"
    config.event_log.jsonl_path = str(log_path)
    config.local_storage.auto_commit = False
    session = ScaffoldSession(config=config, console=quiet_console, artifact_writer=FakeArtifactWriter())

    state = session.coordinator.start("run-1", "an app", str(project_dir))

    assert session.bus.store.jsonl_path == log_path
    assert len(log_path.read_text().splitlines()) == 3
    assert FlowCoordinator.resume(EventBus(EventStore(log_path)), "run-1", state.flow_id).state == state
