"""Init stage: git bookkeeping for the freshly scaffolded project."""

import logging

from schemas.pipeline_state import PipelineState, StageId
from scaffolding.recipes import get_recipe

from .base import BaseStage, StageContext, StageOutcome

logger = logging.getLogger(__name__)


class InitStage(BaseStage):
    """Record the framework version and commit the CLI scaffold."""

    stage_id = StageId.INIT
    name = "Init"
    start_message = "Initializing project context..."

    def run(self, context: StageContext, state: PipelineState) -> StageOutcome:
        state.framework_version = get_recipe(context.recipe_id).framework_version

        if context.versioner is None:
            return StageOutcome.skipped("Git versioning disabled")

        created = context.versioner.ensure_repo()
        state.last_commit_ref = context.versioner.commit_stage(
            "cli_scaffold",
            run_id=context.run_id,
            message="Initial scaffold",
            metadata={"app_name": context.app_name, "recipe": context.recipe_id},
        )
        short = state.last_commit_ref[:7] if state.last_commit_ref else "n/a"
        logger.info(f"Git {'initialized' if created else 'reused'} in {context.project_path} ({short})")
        return StageOutcome.done("Project context initialized", detail=f"commit {short}")
