"""Quality gate stage: non-blocking static checks."""

import logging

from schemas.pipeline_state import QUALITY_CHECKS, CheckStatus, PipelineState, Severity, StageId
from tools.base import ToolStatus

from .base import BaseStage, StageContext, StageOutcome

logger = logging.getLogger(__name__)

_STATUS_BY_TOOL = {
    ToolStatus.SUCCESS: CheckStatus.PASS,
    ToolStatus.FAILURE: CheckStatus.FAIL,
    ToolStatus.TIMEOUT: CheckStatus.FAIL,
    ToolStatus.SKIPPED: CheckStatus.SKIP,
}


def _first_line(text: str | None, limit: int = 200) -> str:
    if not text:
        return ""
    for line in text.splitlines():
        if line.strip():
            return line.strip()[:limit]
    return ""


class QualityGateStage(BaseStage):
    """Run the configured checks and record the results.

    Check failures are diagnostics, not stage failures. An exception from
    the checker marks that check as failed and reports the stage as
    ``error``; it is never raised. Check names the doctor status does not
    track are skipped with a warning.
    """

    stage_id = StageId.QUALITY_GATES
    name = "Quality Gates"
    start_message = "Running quality checks..."

    def run(self, context: StageContext, state: PipelineState) -> StageOutcome:
        results: dict[str, CheckStatus] = {}
        checks: list[str] = []
        for check in context.quality_checks:
            if check in QUALITY_CHECKS:
                checks.append(check)
            else:
                results[check] = CheckStatus.SKIP
                state.add_diagnostic(
                    self.stage_id.value,
                    f"{check}: unknown quality check, skipped",
                    Severity.WARNING,
                )

        if context.quality_checker is None:
            for check in checks:
                state.doctor_status.set(check, CheckStatus.SKIP)
            return StageOutcome.skipped("No quality checker configured")

        crashed: list[str] = []
        for check in checks:
            try:
                result = context.quality_checker.run_check(check, context.project_path)
            except Exception as e:
                logger.exception(f"Quality check {check} crashed")
                results[check] = CheckStatus.FAIL
                state.doctor_status.set(check, CheckStatus.FAIL)
                state.add_diagnostic(self.stage_id.value, f"{check}: check error: {e}")
                crashed.append(check)
                continue

            status = _STATUS_BY_TOOL[result.status]
            results[check] = status
            state.doctor_status.set(check, status)
            if status == CheckStatus.FAIL:
                state.add_diagnostic(
                    self.stage_id.value,
                    f"{check}: {_first_line(result.error) or 'failed'}",
                    Severity.WARNING,
                )
            logger.info(f"Quality check {check}: {status.value}")

        detail = ", ".join(f"{c}: {results[c].value}" for c in context.quality_checks)
        if crashed:
            return StageOutcome.error(f"Check error in {', '.join(crashed)}", detail=detail)
        return StageOutcome.done("Checks complete", detail=detail)
