"""Stage contract and collaborator protocols for the post-scaffold pipeline."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from local_storage.git_versioner import LocalGitVersioner
from schemas.events import Event, EventType, new_event
from schemas.pipeline_state import PipelineState, ProgressStatus, StageId
from scaffolding.style_resolver import ThemeGenerator
from tools.base import ApplyResult, ToolResult

if TYPE_CHECKING:
    from orchestrator.event_log import EventBus


@runtime_checkable
class ArtifactWriter(Protocol):
    """Applies artifacts to the external project tree."""

    def marker_exists(self, path: Path | str) -> bool:
        ...

    def apply_component_set(self, project_path: Path | str, components: list[str]) -> ApplyResult:
        ...

    def write_artifact(self, project_path: Path | str, rel_path: str, content: str) -> ApplyResult:
        ...


@runtime_checkable
class AdvisoryTextGenerator(Protocol):
    """Produces advisory text (an LLM, typically)."""

    def generate(self, prompt: str) -> str:
        ...


@runtime_checkable
class QualityChecker(Protocol):
    """Runs one named static check against the project."""

    def run_check(self, name: str, project_path: Path) -> ToolResult:
        ...


@dataclass
class StageContext:
    """Everything a stage needs besides the pipeline state.

    Read-only for stages; per-run data lives in ``PipelineState``.
    """

    run_id: str
    scaffold_id: str
    project_path: Path
    bus: "EventBus"
    artifact_writer: ArtifactWriter
    recipe_id: str = "nextjs_app_router"
    design_pack_id: str | None = None
    user_prompt: str = ""
    app_name: str = ""
    quality_checker: QualityChecker | None = None
    advisory_generator: AdvisoryTextGenerator | None = None
    theme_generator: ThemeGenerator | None = None
    versioner: LocalGitVersioner | None = None
    quality_checks: list[str] = field(default_factory=lambda: ["tsc", "eslint", "build"])
    marker_file: str = "package.json"

    def emit(self, event_type: EventType, payload: dict[str, Any]) -> Event:
        """Publish an event tagged with this flow's scaffold id."""
        event = new_event(event_type, self.run_id, {"scaffold_id": self.scaffold_id, **payload})
        return self.bus.publish(event).result()

    def emit_progress(
        self,
        stage: StageId | str,
        status: ProgressStatus,
        message: str = "",
        detail: str | None = None,
    ) -> Event:
        payload: dict[str, Any] = {
            "stage": stage.value if isinstance(stage, StageId) else stage,
            "status": status.value,
            "message": message,
        }
        if detail:
            payload["detail"] = detail
        return self.emit(EventType.PROGRESS, payload)


@dataclass
class StageOutcome:
    """Terminal status a stage reports back to the runner."""

    status: ProgressStatus
    message: str = ""
    detail: str | None = None

    @classmethod
    def done(cls, message: str = "", detail: str | None = None) -> "StageOutcome":
        return cls(ProgressStatus.DONE, message, detail)

    @classmethod
    def skipped(cls, message: str) -> "StageOutcome":
        return cls(ProgressStatus.SKIPPED, message)

    @classmethod
    def error(cls, message: str, detail: str | None = None) -> "StageOutcome":
        return cls(ProgressStatus.ERROR, message, detail)


class BaseStage(ABC):
    """A failure-isolated unit of pipeline work.

    Stages mutate ``PipelineState`` and return a ``StageOutcome``. They do
    not emit their own begin/end progress events and do not catch their
    own failures; the runner does both uniformly.
    """

    stage_id: StageId
    name: str = "stage"
    start_message: str = ""

    @abstractmethod
    def run(self, context: StageContext, state: PipelineState) -> StageOutcome:
        """Execute the stage.

        Args:
            context: Run context and collaborators
            state: Pipeline accumulator (this stage is its only writer)

        Returns:
            Terminal outcome reported as the stage's end progress event
        """
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(stage_id={self.stage_id.value!r})"
