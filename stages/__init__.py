"""Post-scaffold pipeline stages.

Fixed order:
- Init (git bookkeeping)
- DesignSystem (tokens, theme, UI components)
- FeatureGeneration (optional advisory features)
- QualityGate (static checks, never fatal)
- Summary (verification and final report)
"""

from .base import (
    AdvisoryTextGenerator,
    ArtifactWriter,
    BaseStage,
    QualityChecker,
    StageContext,
    StageOutcome,
)
from .design_system import DesignSystemStage
from .feature_generation import FeatureGenerationStage
from .init import InitStage
from .quality_gate import QualityGateStage
from .summary import SummaryStage


def default_stages() -> list[BaseStage]:
    """The pipeline's stage sequence, in execution order."""
    return [
        InitStage(),
        DesignSystemStage(),
        FeatureGenerationStage(),
        QualityGateStage(),
        SummaryStage(),
    ]


__all__ = [
    "AdvisoryTextGenerator",
    "ArtifactWriter",
    "BaseStage",
    "QualityChecker",
    "StageContext",
    "StageOutcome",
    "InitStage",
    "DesignSystemStage",
    "FeatureGenerationStage",
    "QualityGateStage",
    "SummaryStage",
    "default_stages",
]
