"""Wiring between the decision flow and the post-scaffold pipeline.

The two sides share only the event bus and the flow id. A session
builds both from configuration and hands an approved flow to the runner.
"""

import logging
import re
from pathlib import Path

from rich.console import Console

from local_storage.git_versioner import LocalGitVersioner
from pipeline.config import Config, get_config
from schemas.flow_state import CompletionStatus, FlowState
from schemas.pipeline_state import PipelineResult
from scaffolding.style_resolver import ThemeGenerator
from stages.base import AdvisoryTextGenerator, ArtifactWriter, QualityChecker, StageContext
from tools.artifact_writer import ShellArtifactWriter
from tools.quality_checks import ShellQualityChecker

from .errors import GuardViolation
from .event_log import EventBus, EventStore
from .runner import PipelineRunner
from .state_machine import FlowCoordinator

logger = logging.getLogger(__name__)


def app_name_from_path(target_directory: str | Path) -> str:
    """Derive an npm-safe app name from the target directory."""
    name = re.sub(r"[^a-z0-9-]+", "-", Path(target_directory).name.lower()).strip("-")
    return name or "my-app"


class ScaffoldSession:
    """One host-side scaffold session: event bus, coordinator, runner."""

    def __init__(
        self,
        config: Config | None = None,
        bus: EventBus | None = None,
        console: Console | None = None,
        artifact_writer: ArtifactWriter | None = None,
        quality_checker: QualityChecker | None = None,
        advisory_generator: AdvisoryTextGenerator | None = None,
        theme_generator: ThemeGenerator | None = None,
    ) -> None:
        self.config = config or get_config()
        self.bus = bus if bus is not None else EventBus(EventStore(self.config.event_log.jsonl_path or None))
        self.console = console or Console()
        self.artifact_writer = artifact_writer or ShellArtifactWriter(timeout=self.config.quality_gate.timeout)
        self.quality_checker = quality_checker or ShellQualityChecker(timeout=self.config.quality_gate.timeout)
        self.advisory_generator = advisory_generator
        self.theme_generator = theme_generator
        self.coordinator = FlowCoordinator(self.bus)

    def build_context(self, state: FlowState) -> StageContext:
        """Stage context for an approved flow.

        Raises:
            GuardViolation: If the flow was not approved
        """
        if state.completion_status != CompletionStatus.READY:
            raise GuardViolation(state.status.value, "run_pipeline", "Flow was not approved")
        if not state.target_directory:
            raise ValueError(f"Flow {state.flow_id} has no target directory")

        project_path = Path(state.target_directory)
        proposal = state.proposal or {}
        versioner = None
        if self.config.local_storage.auto_commit:
            versioner = LocalGitVersioner(project_path, commit_prefix=self.config.local_storage.commit_prefix)

        return StageContext(
            run_id=state.run_id,
            scaffold_id=state.flow_id,
            project_path=project_path,
            bus=self.bus,
            artifact_writer=self.artifact_writer,
            recipe_id=proposal.get("recipe_id", "nextjs_app_router"),
            design_pack_id=proposal.get("design_pack_id"),
            user_prompt=state.user_prompt,
            app_name=app_name_from_path(project_path),
            quality_checker=self.quality_checker,
            advisory_generator=self.advisory_generator,
            theme_generator=self.theme_generator,
            versioner=versioner,
            quality_checks=list(self.config.quality_gate.checks),
            marker_file=self.config.polling.marker_file,
        )

    def run_pipeline(self, runner: PipelineRunner | None = None) -> PipelineResult:
        """Run the post-scaffold pipeline for the coordinator's approved flow."""
        state = self.coordinator.verify_cache()
        if state is None:
            raise GuardViolation("none", "run_pipeline", "No active flow")
        context = self.build_context(state)
        runner = runner or PipelineRunner(config=self.config, console=self.console)
        logger.info(f"SESSION: running pipeline for {state.flow_id}")
        return runner.run(context)
