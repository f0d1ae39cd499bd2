"""Feature generation stage (optional, needs an advisory text generator)."""

import logging
import re

from orchestrator.errors import ExternalCollaboratorFailure
from schemas.pipeline_state import PipelineState, StageId
from scaffolding.recipes import get_recipe

from .base import BaseStage, StageContext, StageOutcome

logger = logging.getLogger(__name__)

FEATURES_FILE = "FEATURES.md"
MAX_REQUIREMENTS = 12

_BULLET = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+(.+?)\s*$")

FEATURE_PROMPT = """You are planning the first features of a newly scaffolded {framework} project.

User request: "{user_prompt}"
Design pack: {design_pack}

List the concrete features this app needs, one per line, as a bulleted list.
No prose before or after the list."""


def parse_requirements(text: str, limit: int = MAX_REQUIREMENTS) -> list[str]:
    """Extract bullet or numbered list items from generated text."""
    requirements: list[str] = []
    for line in text.splitlines():
        match = _BULLET.match(line)
        if match:
            item = match.group(1).strip()
            if item and item not in requirements:
                requirements.append(item)
        if len(requirements) >= limit:
            break
    return requirements


def render_features_doc(app_name: str, requirements: list[str]) -> str:
    lines = [f"# {app_name or 'Project'} features", ""]
    lines += [f"- [ ] {r}" for r in requirements]
    return "\n".join(lines) + "\n"


class FeatureGenerationStage(BaseStage):
    """Ask the advisory generator for feature requirements and record them."""

    stage_id = StageId.FEATURES
    name = "Feature Generation"
    start_message = "Planning features..."

    def run(self, context: StageContext, state: PipelineState) -> StageOutcome:
        if context.advisory_generator is None:
            return StageOutcome.skipped("Feature generation skipped: No LLM client")

        prompt = FEATURE_PROMPT.format(
            framework=get_recipe(context.recipe_id).display_name,
            user_prompt=context.user_prompt[:300],
            design_pack=state.design_pack_id or "default",
        )
        text = context.advisory_generator.generate(prompt)
        requirements = parse_requirements(text or "")
        state.feature_requirements = requirements

        if not requirements:
            logger.info("Advisory generator returned no feature list")
            return StageOutcome.skipped("No features suggested")

        written = context.artifact_writer.write_artifact(
            context.project_path,
            FEATURES_FILE,
            render_features_doc(context.app_name, requirements),
        )
        if not written.success:
            raise ExternalCollaboratorFailure("artifact_writer", written.error or f"could not write {FEATURES_FILE}")

        state.feature_code_applied = True
        return StageOutcome.done(
            f"Planned {len(requirements)} features",
            detail=f"{len(written.changed)} files created",
        )
