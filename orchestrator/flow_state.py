"""Flow state derivation.

``derive_flow_state`` replays the event log and returns the current
decision flow state. It is a pure function of its input: no I/O, no
caching, no clock.
"""

from dataclasses import dataclass
from typing import Any, Iterable

from schemas.events import Event, EventType
from schemas.flow_state import CompletionStatus, FlowState, FlowStatus


@dataclass(frozen=True)
class DecisionAlias:
    """An event type recognized as this flow's decision request.

    Higher ``priority`` wins for payload content regardless of log
    position. ``discriminator`` (key, value) must match in the payload
    when set.
    """

    event_type: EventType
    priority: int
    discriminator: tuple[str, str] | None = None

    def matches(self, event: Event) -> bool:
        if event.type != self.event_type:
            return False
        if self.discriminator is None:
            return True
        key, value = self.discriminator
        return event.payload.get(key) == value


DECISION_ALIASES: tuple[DecisionAlias, ...] = (
    DecisionAlias(EventType.DECISION_REQUESTED, priority=2),
    DecisionAlias(
        EventType.DECISION_POINT_NEEDED,
        priority=1,
        discriminator=("decision_type", "scaffold_approval"),
    ),
)


def extract_flow_id(event: Event) -> str | None:
    """Find the flow id in an event payload.

    Checks ``payload["scaffold_id"]`` first, then
    ``payload["context"]["scaffold_id"]``.

    Args:
        event: Event to inspect

    Returns:
        The flow id, or None if absent from both places
    """
    flow_id = event.payload.get("scaffold_id")
    if flow_id:
        return str(flow_id)
    context = event.payload.get("context")
    if isinstance(context, dict) and context.get("scaffold_id"):
        return str(context["scaffold_id"])
    return None


def match_decision_alias(event: Event) -> DecisionAlias | None:
    """Return the alias row an event matches, if any."""
    for alias in DECISION_ALIASES:
        if alias.matches(event):
            return alias
    return None


def _find_started(events: list[Event], flow_id: str | None) -> Event | None:
    for event in events:
        if event.type != EventType.STARTED:
            continue
        if flow_id is None or extract_flow_id(event) == flow_id:
            return event
    return None


def derive_flow_state(events: Iterable[Event], flow_id: str | None = None) -> FlowState | None:
    """Derive the current state of a scaffold flow.

    Args:
        events: Events in log order (may contain other flows and noise)
        flow_id: Flow to derive; defaults to the first started flow in the log

    Returns:
        FlowState, or None if no started event exists for the flow
    """
    ordered = list(events)
    started = _find_started(ordered, flow_id)
    if started is None:
        return None

    flow_id = extract_flow_id(started)
    started_payload = started.payload

    status = FlowStatus.STARTED
    completion_status: CompletionStatus | None = None
    picker_active = False
    proposal: dict[str, Any] | None = None
    decision: tuple[int, Event] | None = None
    last_event_at = started.timestamp

    for event in ordered:
        if event is started or extract_flow_id(event) != flow_id:
            continue

        observed: FlowStatus | None = None
        if event.type == EventType.PROPOSAL_CREATED:
            observed = FlowStatus.PROPOSAL_CREATED
            proposal = dict(event.payload)
        elif event.type == EventType.COMPLETED:
            observed = FlowStatus.COMPLETED
            raw = event.payload.get("status")
            if raw in (CompletionStatus.READY.value, CompletionStatus.CANCELLED.value):
                completion_status = CompletionStatus(raw)
            picker_active = False
        elif event.type == EventType.STYLE_SELECTION_REQUESTED:
            if status != FlowStatus.COMPLETED:
                picker_active = True
        elif event.type == EventType.STYLE_SELECTED:
            picker_active = False
        else:
            alias = match_decision_alias(event)
            if alias is None:
                continue
            observed = FlowStatus.AWAITING_DECISION
            # Ties go to the newer event
            if decision is None or alias.priority >= decision[0]:
                decision = (alias.priority, event)

        last_event_at = event.timestamp
        if observed is not None and observed.rank > status.rank:
            status = observed

    return FlowState(
        flow_id=flow_id or "",
        run_id=started.correlation_id,
        user_prompt=started_payload.get("user_prompt", ""),
        target_directory=started_payload.get("target_directory"),
        status=status,
        completion_status=completion_status if status == FlowStatus.COMPLETED else None,
        style_picker_active=picker_active and status == FlowStatus.AWAITING_DECISION,
        proposal=proposal,
        decision=dict(decision[1].payload) if decision else None,
        decision_source=decision[1].type if decision else None,
        started_at=started_payload.get("created_at_iso", started.timestamp),
        last_event_at=last_event_at,
    )
