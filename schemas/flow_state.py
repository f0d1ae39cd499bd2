"""Decision flow state schema.

FlowState is never stored. It is recomputed from the event log by
``orchestrator.flow_state.derive_flow_state``.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .events import EventType


class FlowStatus(str, Enum):
    """Decision flow status, in precedence order."""

    STARTED = "started"
    PROPOSAL_CREATED = "proposal_created"
    AWAITING_DECISION = "awaiting_decision"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = [
    FlowStatus.STARTED,
    FlowStatus.PROPOSAL_CREATED,
    FlowStatus.AWAITING_DECISION,
    FlowStatus.COMPLETED,
]


class CompletionStatus(str, Enum):
    """How a completed flow ended."""

    READY = "ready"
    CANCELLED = "cancelled"


class UserAction(str, Enum):
    """Actions that resolve the scaffold decision."""

    PROCEED = "proceed"
    CANCEL = "cancel"

    @property
    def completion_status(self) -> CompletionStatus:
        if self is UserAction.PROCEED:
            return CompletionStatus.READY
        return CompletionStatus.CANCELLED


class DecisionOption(BaseModel):
    """One button offered with a decision request."""

    action: str = Field(..., description="Action id sent back by the caller")
    label: str = Field(..., description="Short label")
    description: str = Field("", description="Longer explanation")
    primary: bool = Field(False, description="Highlighted default option")
    disabled: bool = Field(False, description="Rendered but not selectable")


class FlowState(BaseModel):
    """Projection of one scaffold flow from its events."""

    model_config = ConfigDict(frozen=True)

    flow_id: str = Field(..., description="Scaffold flow identifier")
    run_id: str = Field(..., description="Correlation id of the run")
    user_prompt: str = Field("", description="Original user request")
    target_directory: str | None = Field(None, description="Where the project is created")

    status: FlowStatus = Field(..., description="Current status")
    completion_status: CompletionStatus | None = Field(
        None,
        description="Set once status is completed",
    )
    style_picker_active: bool = Field(
        False,
        description="Style picker is open (does not change status)",
    )

    proposal: dict[str, Any] | None = Field(None, description="Latest proposal payload")
    decision: dict[str, Any] | None = Field(
        None,
        description="Decision payload chosen by the alias priority table",
    )
    decision_source: EventType | None = Field(
        None,
        description="Event type the decision payload came from",
    )

    started_at: str | None = Field(None, description="Flow start time (ISO-8601)")
    last_event_at: str | None = Field(None, description="Timestamp of the last flow event")

    @property
    def is_terminal(self) -> bool:
        return self.status == FlowStatus.COMPLETED
