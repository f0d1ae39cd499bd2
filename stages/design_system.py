"""Design system stage: style tokens, theme stylesheet, UI components."""

import logging

from orchestrator.errors import ExternalCollaboratorFailure
from schemas.pipeline_state import DEFAULT_DESIGN_TOKENS, PipelineState, Severity, StageId
from scaffolding.recipes import get_recipe
from scaffolding.style_resolver import render_theme_css, resolve_pack, resolve_tokens

from .base import BaseStage, StageContext, StageOutcome

logger = logging.getLogger(__name__)


def theme_stylesheet_path(has_src_dir: bool) -> str:
    return "src/styles/theme.css" if has_src_dir else "styles/theme.css"


class DesignSystemStage(BaseStage):
    """Resolve style intent into tokens and apply them to the project.

    Token resolution never fails the stage: on error the default tokens
    stay in place so later stages always have usable values.
    """

    stage_id = StageId.DESIGN_SYSTEM
    name = "Design System"
    start_message = "Applying design system..."

    def run(self, context: StageContext, state: PipelineState) -> StageOutcome:
        tokens_ok = self._resolve(context, state)

        css = render_theme_css(state.design_tokens, state.dark_tokens)
        rel_path = theme_stylesheet_path(state.has_src_dir)
        written = context.artifact_writer.write_artifact(context.project_path, rel_path, css)
        if not written.success:
            raise ExternalCollaboratorFailure("artifact_writer", written.error or f"could not write {rel_path}")

        components = get_recipe(context.recipe_id).components
        applied = context.artifact_writer.apply_component_set(context.project_path, components)
        if not applied.success:
            raise ExternalCollaboratorFailure("artifact_writer", applied.error or "component install failed")

        if context.versioner is not None:
            state.last_commit_ref = context.versioner.commit_stage(
                "design_system",
                run_id=context.run_id,
                metadata={"design_pack": state.design_pack_id},
            )

        detail = f"{len(applied.changed)} components"
        if not tokens_ok:
            return StageOutcome.error("Style resolution failed, default tokens applied", detail=detail)
        return StageOutcome.done(f"Applied {state.design_pack_id}", detail=detail)

    def _resolve(self, context: StageContext, state: PipelineState) -> bool:
        try:
            pack = resolve_pack(context.design_pack_id)
            resolved = resolve_tokens(pack, context.theme_generator)
        except Exception as e:
            logger.warning(f"Style resolution failed, using default tokens: {e}")
            state.design_tokens = DEFAULT_DESIGN_TOKENS.model_copy()
            state.dark_tokens = None
            state.style_vars = state.design_tokens.to_css_vars()
            state.add_diagnostic(self.stage_id.value, f"Style resolution failed: {e}", Severity.WARNING)
            return False

        state.design_pack_id = resolved.pack.id
        state.design_tokens = resolved.light
        state.dark_tokens = resolved.dark
        state.style_vars = resolved.light.to_css_vars()
        logger.info(f"Resolved design pack {resolved.pack.id}: primary={resolved.light.primary}")
        return True
