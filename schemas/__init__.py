"""Schemas module.

Provides Pydantic models for:
- Events (wire format and type catalog)
- Derived decision flow state
- Pipeline state and results
"""

from .events import Event, EventType, new_event
from .flow_state import CompletionStatus, DecisionOption, FlowState, FlowStatus, UserAction
from .pipeline_state import (
    DEFAULT_DESIGN_TOKENS,
    DesignTokens,
    Diagnostic,
    DoctorStatus,
    PipelineResult,
    PipelineState,
    ProgressStatus,
    StageId,
)

__all__ = [
    "Event",
    "EventType",
    "new_event",
    "CompletionStatus",
    "DecisionOption",
    "FlowState",
    "FlowStatus",
    "UserAction",
    "DEFAULT_DESIGN_TOKENS",
    "DesignTokens",
    "Diagnostic",
    "DoctorStatus",
    "PipelineResult",
    "PipelineState",
    "ProgressStatus",
    "StageId",
]
