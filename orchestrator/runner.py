"""Pipeline runner for the post-scaffold stages."""

import json
import logging
import re
from pathlib import Path
from typing import Callable

from rich.console import Console

from pipeline.config import Config, get_config
from schemas.pipeline_state import (
    POLLING_STAGE,
    Diagnostic,
    PipelineResult,
    PipelineState,
    ProgressStatus,
)
from stages import BaseStage, StageContext, StageOutcome, default_stages

from .errors import PollTimeout, StageFailure
from .poller import poll_for_completion

logger = logging.getLogger(__name__)

PollFunction = Callable[..., bool]

_STATUS_STYLE = {
    ProgressStatus.DONE: ("green", "✓"),
    ProgressStatus.SKIPPED: ("yellow", "-"),
    ProgressStatus.ERROR: ("red", "✗"),
}


def detect_tailwind_version(project_path: Path) -> int:
    """Detect the Tailwind major version (3 or 4) of a project.

    Looks at the ``tailwindcss`` dependency in package.json, then at
    v4-style ``@import "tailwindcss"`` in globals.css. Defaults to 3.
    """
    package_json = project_path / "package.json"
    if package_json.exists():
        try:
            data = json.loads(package_json.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            data = {}
        deps = {**data.get("dependencies", {}), **data.get("devDependencies", {})}
        match = re.search(r"(\d+)", str(deps.get("tailwindcss", "")))
        if match and int(match.group(1)) >= 4:
            return 4

    for css in (project_path / "src" / "app" / "globals.css", project_path / "app" / "globals.css"):
        if css.exists():
            content = css.read_text(encoding="utf-8", errors="replace")
            if '@import "tailwindcss"' in content or "@import 'tailwindcss'" in content:
                return 4
    return 3


class PipelineRunner:
    """Runs the post-scaffold pipeline.

    - Waits for the external scaffold tool's completion marker (fatal on timeout)
    - Runs each stage in order, threading one PipelineState
    - Isolates stage failures: a failing stage is reported and skipped over
    """

    def __init__(
        self,
        config: Config | None = None,
        console: Console | None = None,
        stages: list[BaseStage] | None = None,
        poll: PollFunction = poll_for_completion,
    ) -> None:
        """Initialize pipeline runner.

        Args:
            config: Application configuration (defaults to the global config)
            console: Rich console for output
            stages: Stage sequence (defaults to the standard five stages)
            poll: Completion poller
        """
        self.config = config or get_config()
        self.console = console or Console()
        self.stages = stages if stages is not None else default_stages()
        self.poll = poll

    def create_state(self, project_path: Path) -> PipelineState:
        """Fresh accumulator with environment flags detected from the project."""
        return PipelineState(
            has_src_dir=(project_path / "src").is_dir(),
            tailwind_version=detect_tailwind_version(project_path),
        )

    def run(self, context: StageContext) -> PipelineResult:
        """Execute the pipeline.

        Args:
            context: Run context and collaborators

        Returns:
            Pipeline result; ``success`` is False only on polling timeout
        """
        project_path = Path(context.project_path)
        logger.info(f"PIPELINE: run {context.run_id} for {context.scaffold_id} at {project_path}")

        try:
            self._wait_for_scaffold(context)
        except PollTimeout as timeout:
            logger.error(f"PIPELINE: {timeout}")
            self.console.print(f"[red]Timeout waiting for project completion: {timeout.marker_path}[/red]")
            self.console.print("[dim]The scaffold command may still be running. Check the terminal.[/dim]")
            return PipelineResult(
                success=False,
                project_path=str(project_path),
                failed_stage=POLLING_STAGE,
                error=str(timeout),
                diagnostics=[Diagnostic(stage=POLLING_STAGE, message=str(timeout))],
            )

        self.console.print(f"[green]Project created at {project_path}[/green]")
        state = self.create_state(project_path)
        logger.info(
            f"PIPELINE: has_src_dir={state.has_src_dir}, tailwind_version={state.tailwind_version}"
        )

        for stage in self.stages:
            self._run_stage(stage, context, state)

        result = self._build_result(project_path, state)
        logger.info(f"PIPELINE: complete {result.to_summary()}")
        return result

    def _wait_for_scaffold(self, context: StageContext) -> None:
        polling = self.config.polling
        marker = Path(context.project_path) / context.marker_file

        def on_progress(elapsed_ms: int) -> None:
            self.console.print(f"[dim]Still creating project... ({elapsed_ms // 1000}s)[/dim]")

        with self.console.status(f"Waiting for {marker.name}..."):
            ready = self.poll(
                marker,
                max_wait_ms=polling.max_wait_ms,
                poll_interval_ms=polling.poll_interval_ms,
                on_progress=on_progress,
                progress_every_ms=polling.progress_every_ms,
                stabilize_ms=polling.stabilize_ms,
                exists=context.artifact_writer.marker_exists,
            )
        if not ready:
            raise PollTimeout(str(marker), polling.max_wait_ms)

    def _run_stage(self, stage: BaseStage, context: StageContext, state: PipelineState) -> StageOutcome:
        """Run one stage inside the uniform isolation wrapper."""
        stage_key = stage.stage_id.value
        logger.info(f"PIPELINE: Starting stage {stage_key}")
        context.emit_progress(stage.stage_id, ProgressStatus.STARTED, stage.start_message)

        try:
            outcome = stage.run(context, state)
        except Exception as stage_exc:
            logger.exception(f"Stage {stage_key} failed")
            failure = StageFailure(stage_key, str(stage_exc) or type(stage_exc).__name__)
            message = self._truncate(failure.message)
            state.add_diagnostic(stage_key, message)
            outcome = StageOutcome.error(message)

        context.emit_progress(stage.stage_id, outcome.status, outcome.message, outcome.detail)
        self._print_stage_end(stage, outcome)
        logger.info(f"PIPELINE: Stage {stage_key} finished: {outcome.status.value}")
        return outcome

    def _truncate(self, message: str) -> str:
        limit = self.config.pipeline.error_detail_limit
        if len(message) <= limit:
            return message
        return message[: limit - 3] + "..."

    def _print_stage_end(self, stage: BaseStage, outcome: StageOutcome) -> None:
        color, mark = _STATUS_STYLE.get(outcome.status, ("white", "?"))
        line = f"[{color}]{mark} {stage.name}[/{color}]"
        if outcome.detail:
            line += f" [dim]({outcome.detail})[/dim]"
        if outcome.status != ProgressStatus.DONE and outcome.message:
            line += f" {outcome.message}"
        self.console.print(line)

    def _build_result(self, project_path: Path, state: PipelineState) -> PipelineResult:
        return PipelineResult(
            success=True,
            project_path=str(project_path),
            design_pack_applied=state.design_pack_id is not None,
            feature_code_applied=state.feature_code_applied,
            feature_requirements=list(state.feature_requirements),
            verification_outcome=state.verification_outcome,
            verification_steps=list(state.verification_steps),
            doctor_card=state.doctor_card,
            last_commit_ref=state.last_commit_ref,
            diagnostics=list(state.diagnostics),
        )
