"""Pipeline state schema.

Mutable accumulator threaded through the post-scaffold stages, plus the
result object returned to the caller.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class StageId(str, Enum):
    """Fixed stage identifiers used to tag progress events."""

    INIT = "init"
    DESIGN_SYSTEM = "design_system"
    FEATURES = "features"
    QUALITY_GATES = "quality_gates"
    SUMMARY = "summary"


# Not a stage: the completion wait that runs before any stage
POLLING_STAGE = "polling"


class ProgressStatus(str, Enum):
    """Status carried by a progress event."""

    STARTED = "started"
    DONE = "done"
    SKIPPED = "skipped"
    ERROR = "error"


class CheckStatus(str, Enum):
    """Outcome of a single quality check."""

    UNKNOWN = "unknown"
    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"


class DesignTokens(BaseModel):
    """Semantic color tokens plus corner radius."""

    background: str = "#ffffff"
    foreground: str = "#0f172a"
    primary: str = "#6366f1"
    primary_foreground: str = "#ffffff"
    secondary: str = "#f1f5f9"
    secondary_foreground: str = "#1e293b"
    muted: str = "#f1f5f9"
    muted_foreground: str = "#64748b"
    destructive: str = "#ef4444"
    destructive_foreground: str = "#ffffff"
    accent: str = "#8b5cf6"
    accent_foreground: str = "#ffffff"
    card: str = "#ffffff"
    card_foreground: str = "#0f172a"
    popover: str = "#ffffff"
    popover_foreground: str = "#0f172a"
    border: str = "#e2e8f0"
    input: str = "#e2e8f0"
    ring: str = "#6366f1"
    chart_1: str = "#6366f1"
    chart_2: str = "#8b5cf6"
    chart_3: str = "#ec4899"
    chart_4: str = "#f59e0b"
    chart_5: str = "#10b981"
    sidebar: str = "#f8fafc"
    sidebar_foreground: str = "#0f172a"
    sidebar_primary: str = "#6366f1"
    sidebar_primary_foreground: str = "#ffffff"
    sidebar_accent: str = "#f1f5f9"
    sidebar_accent_foreground: str = "#0f172a"
    sidebar_border: str = "#e2e8f0"
    sidebar_ring: str = "#6366f1"
    radius: str = "0.5rem"

    def to_css_vars(self) -> dict[str, str]:
        """Map tokens to CSS custom properties (``primary_foreground`` -> ``--primary-foreground``)."""
        return {f"--{name.replace('_', '-')}": value for name, value in self.model_dump().items()}


DEFAULT_DESIGN_TOKENS = DesignTokens()


class DevServerStatus(BaseModel):
    status: str = Field("unknown", description="unknown | running | fail")
    url: str = Field("", description="Dev server URL when running")


# Checks tracked in DoctorStatus
QUALITY_CHECKS = ("tsc", "eslint", "build")


class DoctorStatus(BaseModel):
    """Structured quality diagnostics for the generated project."""

    tsc: CheckStatus = Field(CheckStatus.UNKNOWN, description="TypeScript check")
    eslint: CheckStatus = Field(CheckStatus.UNKNOWN, description="Lint check")
    build: CheckStatus = Field(CheckStatus.UNKNOWN, description="Production build")
    dev_server: DevServerStatus = Field(default_factory=DevServerStatus)

    def get(self, check: str) -> CheckStatus:
        if check not in QUALITY_CHECKS:
            return CheckStatus.UNKNOWN
        return getattr(self, check)

    def set(self, check: str, status: CheckStatus) -> None:
        if check not in QUALITY_CHECKS:
            raise ValueError(f"Unknown quality check: {check}")
        setattr(self, check, status)


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Diagnostic(BaseModel):
    """One entry in the end-of-pipeline diagnostics list."""

    stage: str = Field(..., description="Stage id (or 'polling')")
    severity: Severity = Field(Severity.ERROR, description="Severity")
    message: str = Field(..., description="Human-readable message")


class VerificationStatus(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


class VerificationStep(BaseModel):
    """A single verification step run by the summary stage."""

    id: str = Field(..., description="Step identifier")
    label: str = Field(..., description="Display label")
    status: VerificationStatus = Field(..., description="Step outcome")
    message: str = Field("", description="Step detail")


class VerificationOutcome(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILURE = "failure"


class DoctorCheck(BaseModel):
    name: str
    label: str
    status: str
    icon: str
    details: str | None = None


class DoctorCard(BaseModel):
    """Final diagnostics card rendered by a presentation layer."""

    overall: str = Field(..., description="healthy | degraded | failing")
    checks: list[DoctorCheck] = Field(default_factory=list)
    last_commit: str | None = Field(None, description="Last scaffold commit")
    scaffold_id: str | None = Field(None, description="Flow the card belongs to")


class PipelineState(BaseModel):
    """Mutable accumulator for one pipeline run.

    Created by the runner at pipeline start and discarded at the end.
    Only one stage touches it at a time.
    """

    # Design system
    design_tokens: DesignTokens = Field(
        default_factory=DesignTokens,
        description="Resolved light tokens (defaults until DesignSystem succeeds)",
    )
    dark_tokens: DesignTokens | None = Field(None, description="Resolved dark tokens")
    style_vars: dict[str, str] = Field(
        default_factory=dict,
        description="Auxiliary CSS variables derived from the tokens",
    )
    design_pack_id: str | None = Field(None, description="Design pack actually applied")

    # Features
    feature_code_applied: bool = Field(False, description="Feature artifacts were written")
    feature_requirements: list[str] = Field(default_factory=list)

    # Diagnostics
    doctor_status: DoctorStatus = Field(default_factory=DoctorStatus)
    doctor_card: DoctorCard | None = Field(None)
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    # Environment
    has_src_dir: bool = Field(False, description="Project keeps sources under src/")
    tailwind_version: int = Field(3, description="Detected Tailwind major version (3 or 4)")
    framework_version: str | None = Field(None, description="Pinned framework version")

    # Bookkeeping
    last_commit_ref: str | None = Field(None, description="Last commit made by the pipeline")
    verification_outcome: VerificationOutcome | None = Field(None)
    verification_steps: list[VerificationStep] = Field(default_factory=list)

    def add_diagnostic(
        self,
        stage: str,
        message: str,
        severity: Severity = Severity.ERROR,
    ) -> None:
        self.diagnostics.append(Diagnostic(stage=stage, severity=severity, message=message))


class PipelineResult(BaseModel):
    """Outcome of a pipeline run.

    ``success`` is false only when the completion wait timed out.
    """

    success: bool = Field(..., description="False only on polling timeout")
    project_path: str = Field(..., description="Project directory")
    failed_stage: str | None = Field(None, description="'polling' on timeout")
    error: str | None = Field(None, description="Fatal error message")

    design_pack_applied: bool = Field(False)
    feature_code_applied: bool = Field(False)
    feature_requirements: list[str] = Field(default_factory=list)
    verification_outcome: VerificationOutcome | None = Field(None)
    verification_steps: list[VerificationStep] = Field(default_factory=list)
    doctor_card: DoctorCard | None = Field(None)
    last_commit_ref: str | None = Field(None)
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "project_path": "/work/my-app",
                "failed_stage": None,
                "feature_code_applied": False,
                "verification_outcome": "success",
                "diagnostics": [
                    {"stage": "quality_gates", "severity": "error", "message": "build: fail"}
                ],
            }
        }

    def to_summary(self) -> dict[str, Any]:
        """Compact dict for logging."""
        return {
            "success": self.success,
            "failed_stage": self.failed_stage,
            "verification": self.verification_outcome.value if self.verification_outcome else None,
            "diagnostics": len(self.diagnostics),
        }
