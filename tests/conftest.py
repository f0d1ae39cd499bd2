"""Shared fixtures."""

import json
from pathlib import Path

import pytest
from rich.console import Console

from orchestrator.event_log import EventBus, EventStore
from pipeline.config import Config
from stages.base import StageContext

from .fakes import FakeArtifactWriter


@pytest.fixture
def bus() -> EventBus:
    return EventBus(EventStore())


@pytest.fixture
def config() -> Config:
    cfg = Config()
    cfg.polling.max_wait_ms = 1_000
    cfg.polling.poll_interval_ms = 10
    return cfg


@pytest.fixture
def quiet_console() -> Console:
    return Console(quiet=True)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A scaffolded Next.js-like project with a completion marker."""
    project = tmp_path / "my-app"
    (project / "src" / "app").mkdir(parents=True)
    (project / "src" / "app" / "page.tsx").write_text("export default function Page() {}\n")
    (project / "package.json").write_text(
        json.dumps({"name": "my-app", "scripts": {"build": "next build", "lint": "next lint"}})
    )
    return project


@pytest.fixture
def make_context(bus: EventBus, project_dir: Path):
    def _make(**overrides) -> StageContext:
        values = {
            "run_id": "run-1",
            "scaffold_id": "scaffold_test",
            "project_path": project_dir,
            "bus": bus,
            "artifact_writer": FakeArtifactWriter(),
            "design_pack_id": "enterprise-blue",
            "user_prompt": "build an admin dashboard",
            "app_name": "my-app",
        }
        values.update(overrides)
        return StageContext(**values)

    return _make
