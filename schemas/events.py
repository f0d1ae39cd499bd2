"""Event schema.

Immutable, JSON-serializable facts. The event log is the only durable
state of a scaffold flow; everything else is a projection of it.
"""

import time
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EventType(str, Enum):
    """Event type catalog.

    Extensible: new members may be added, existing values never change.
    """

    STARTED = "started"
    PROPOSAL_CREATED = "proposal_created"
    DECISION_REQUESTED = "decision_requested"
    DECISION_RESOLVED = "decision_resolved"
    STYLE_SELECTION_REQUESTED = "style_selection_requested"
    STYLE_SELECTED = "style_selected"
    COMPLETED = "completed"
    PROGRESS = "progress"
    FINAL_COMPLETE = "final_complete"

    # Legacy generic decision event, still found in historical logs
    DECISION_POINT_NEEDED = "decision_point_needed"


def generate_event_id() -> str:
    """Generate a unique event id (``evt_<epoch ms>_<8 hex>``)."""
    return f"evt_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Event(BaseModel):
    """A single immutable fact in the event log.

    The wire format uses camelCase keys (``correlationId``,
    ``evidenceIds``, ``parentEventId``); both spellings are accepted
    when parsing.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=generate_event_id, description="Unique event id")
    correlation_id: str = Field(
        ...,
        alias="correlationId",
        description="Run identifier shared by every event of a flow",
    )
    timestamp: str = Field(
        default_factory=utc_now_iso,
        description="ISO-8601 creation time (informational, log order is authoritative)",
    )
    type: EventType = Field(..., description="Event type tag")
    payload: dict[str, Any] = Field(default_factory=dict, description="Type-specific data")
    evidence_ids: tuple[str, ...] = Field(
        default_factory=tuple,
        alias="evidenceIds",
        description="Supporting evidence references",
    )
    parent_event_id: str | None = Field(
        None,
        alias="parentEventId",
        description="Event this one was caused by",
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the JSON-compatible wire dictionary."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str) -> "Event":
        return cls.model_validate_json(raw)

    def copy_detached(self) -> "Event":
        """Return a deep copy so callers cannot reach into the stored payload."""
        return self.model_copy(deep=True)


def new_event(
    event_type: EventType,
    correlation_id: str,
    payload: dict[str, Any] | None = None,
    parent_event_id: str | None = None,
    evidence_ids: list[str] | None = None,
) -> Event:
    """Build a new event with a fresh id and timestamp.

    Args:
        event_type: Catalog type of the event
        correlation_id: Run identifier
        payload: Type-specific payload
        parent_event_id: Optional causal parent
        evidence_ids: Optional evidence references

    Returns:
        The constructed (not yet published) event
    """
    return Event(
        correlation_id=correlation_id,
        type=event_type,
        payload=payload or {},
        parent_event_id=parent_event_id,
        evidence_ids=tuple(evidence_ids or ()),
    )
