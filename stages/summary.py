"""Summary stage: verification, doctor card, next steps, final event."""

import json
import logging
from pathlib import Path

from schemas.events import EventType
from schemas.pipeline_state import (
    QUALITY_CHECKS,
    CheckStatus,
    DoctorCard,
    DoctorCheck,
    DoctorStatus,
    PipelineState,
    StageId,
    VerificationOutcome,
    VerificationStatus,
    VerificationStep,
)
from scaffolding.recipes import Recipe, get_recipe

from .base import BaseStage, StageContext, StageOutcome

logger = logging.getLogger(__name__)

STATUS_ICONS = {
    "pass": "✅",
    "fail": "❌",
    "warning": "⚠️",
    "skip": "⏭️",
}


def verify_package_json(project_path: Path, marker_file: str = "package.json") -> VerificationStep:
    """Check that the completion marker exists and is a named package."""
    path = project_path / marker_file
    if not path.exists():
        return VerificationStep(
            id="package_json",
            label="Package.json",
            status=VerificationStatus.FAIL,
            message=f"{marker_file} not found in target directory",
        )
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        return VerificationStep(
            id="package_json",
            label="Package.json",
            status=VerificationStatus.FAIL,
            message=f"{marker_file} parse error: {e}",
        )
    if not isinstance(data, dict) or not data.get("name"):
        return VerificationStep(
            id="package_json",
            label="Package.json",
            status=VerificationStatus.WARN,
            message=f'{marker_file} exists but has no "name" field',
        )
    return VerificationStep(
        id="package_json",
        label="Package.json",
        status=VerificationStatus.PASS,
        message=f"Valid {marker_file} found ({data['name']})",
    )


def verify_key_files(project_path: Path, recipe: Recipe) -> VerificationStep:
    found = [f for f in recipe.key_files if (project_path / f).exists()]
    if found:
        return VerificationStep(
            id="key_files",
            label="Entry files",
            status=VerificationStatus.PASS,
            message=", ".join(found[:3]),
        )
    return VerificationStep(
        id="key_files",
        label="Entry files",
        status=VerificationStatus.WARN,
        message=f"None of {', '.join(recipe.key_files)} found",
    )


def verify_quality(doctor_status: DoctorStatus) -> VerificationStep:
    failed = [c for c in QUALITY_CHECKS if doctor_status.get(c) == CheckStatus.FAIL]
    if failed:
        return VerificationStep(
            id="quality",
            label="Quality checks",
            status=VerificationStatus.WARN,
            message=f"Failing: {', '.join(failed)}",
        )
    return VerificationStep(
        id="quality",
        label="Quality checks",
        status=VerificationStatus.PASS,
        message="No failing checks",
    )


def compute_outcome(steps: list[VerificationStep]) -> VerificationOutcome:
    """Fold step results: any fail with a pass is partial, fail alone is failure."""
    statuses = {s.status for s in steps}
    if VerificationStatus.FAIL in statuses:
        if VerificationStatus.PASS in statuses:
            return VerificationOutcome.PARTIAL
        return VerificationOutcome.FAILURE
    if VerificationStatus.WARN in statuses:
        return VerificationOutcome.PARTIAL
    return VerificationOutcome.SUCCESS


def build_doctor_card(
    doctor_status: DoctorStatus,
    last_commit: str | None = None,
    scaffold_id: str | None = None,
) -> DoctorCard:
    """Build the final diagnostics card.

    Overall is healthy with no failing check, degraded with one,
    failing with more.
    """
    dev = doctor_status.dev_server.status
    dev_status = "pass" if dev == "running" else "fail" if dev == "fail" else "unknown"
    rows = [
        ("tsc", "TypeScript", doctor_status.tsc.value, None),
        ("eslint", "ESLint", doctor_status.eslint.value, None),
        ("build", "Build", doctor_status.build.value, None),
        ("devServer", "Dev Server", dev_status, doctor_status.dev_server.url or None),
    ]
    checks = [
        DoctorCheck(name=name, label=label, status=status, icon=STATUS_ICONS.get(status, "❓"), details=details)
        for name, label, status, details in rows
    ]
    fail_count = sum(1 for c in checks if c.status == "fail")
    overall = "healthy" if fail_count == 0 else "degraded" if fail_count == 1 else "failing"
    return DoctorCard(overall=overall, checks=checks, last_commit=last_commit, scaffold_id=scaffold_id)


def build_next_steps(recipe: Recipe, feature_requirements: list[str]) -> list[str]:
    steps = [f"Start the dev server: {recipe.dev_command}"]
    if feature_requirements:
        steps += [f"Implement: {r}" for r in feature_requirements[:3]]
    else:
        steps.append("Describe the first feature you want to build")
    steps.append(f"Create a production build: {recipe.build_command}")
    return steps


class SummaryStage(BaseStage):
    """Verify the project, aggregate diagnostics and announce completion."""

    stage_id = StageId.SUMMARY
    name = "Summary"
    start_message = "Verifying project..."

    def run(self, context: StageContext, state: PipelineState) -> StageOutcome:
        recipe = get_recipe(context.recipe_id)
        project_path = Path(context.project_path)

        steps = [
            verify_package_json(project_path, context.marker_file),
            verify_key_files(project_path, recipe),
            verify_quality(state.doctor_status),
        ]
        state.verification_steps = steps
        state.verification_outcome = compute_outcome(steps)
        state.doctor_card = build_doctor_card(state.doctor_status, state.last_commit_ref, context.scaffold_id)
        next_steps = build_next_steps(recipe, state.feature_requirements)

        context.emit(
            EventType.FINAL_COMPLETE,
            {
                "project_path": str(project_path),
                "design_pack_id": state.design_pack_id,
                "verification_outcome": state.verification_outcome.value,
                "doctor_status": state.doctor_status.model_dump(mode="json"),
                "doctor_card": state.doctor_card.model_dump(mode="json"),
                "next_steps": next_steps,
                "feature_requirements": state.feature_requirements,
                "diagnostics_count": len(state.diagnostics),
            },
        )
        logger.info(
            f"Verification {state.verification_outcome.value}, doctor card {state.doctor_card.overall}"
        )
        return StageOutcome.done(
            f"Verification {state.verification_outcome.value}",
            detail=f"{len(next_steps)} next steps",
        )
