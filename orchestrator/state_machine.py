"""State machine for the scaffold decision flow."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from schemas.events import Event, EventType, new_event
from schemas.flow_state import FlowState, FlowStatus, UserAction
from scaffolding.design_packs import is_valid_pack_id

from .checkpoints import (
    build_decision_payload,
    build_proposal_payload,
    build_style_picker_payload,
)
from .errors import GuardViolation, StateDriftError
from .event_log import EventBus
from .flow_state import derive_flow_state

logger = logging.getLogger(__name__)

# Pseudo-status for a coordinator whose flow has not been started
NONE_STATUS = "none"


@dataclass(frozen=True)
class Transition:
    """Statuses from which an operation may run."""

    action: str
    from_statuses: frozenset[str]


class FlowCoordinator:
    """Guarded operations over one scaffold flow.

    The event log is the only source of truth. After each append the
    coordinator re-derives its cached state from the log, and
    ``verify_cache`` checks that the cache still matches.

    Example:
        >>> coordinator = FlowCoordinator(EventBus())
        >>> state = coordinator.start("run-1", "create a new app")
        >>> state.status
        <FlowStatus.AWAITING_DECISION: 'awaiting_decision'>
        >>> coordinator.handle_user_action("proceed").completion_status
        <CompletionStatus.READY: 'ready'>
    """

    TRANSITIONS: list[Transition] = [
        Transition("start", frozenset({NONE_STATUS})),
        Transition("handle_user_action", frozenset({FlowStatus.AWAITING_DECISION.value})),
        Transition("handle_style_change", frozenset({FlowStatus.AWAITING_DECISION.value})),
        Transition("handle_style_select", frozenset({FlowStatus.AWAITING_DECISION.value})),
    ]

    def __init__(self, bus: EventBus) -> None:
        """Initialize coordinator.

        Args:
            bus: Event bus the flow's events are published to
        """
        self.bus = bus
        self.flow_id: str | None = None
        self.run_id: str | None = None
        self._state: FlowState | None = None
        self._guards: dict[str, frozenset[str]] = {t.action: t.from_statuses for t in self.TRANSITIONS}

    @classmethod
    def resume(cls, bus: EventBus, run_id: str, flow_id: str) -> "FlowCoordinator":
        """Attach to an existing flow by replaying its events.

        Raises:
            GuardViolation: If the log holds no started event for the flow
        """
        coordinator = cls(bus)
        coordinator.run_id = run_id
        coordinator.flow_id = flow_id
        coordinator._state = coordinator._derive()
        if coordinator._state is None:
            raise GuardViolation(NONE_STATUS, "resume", f"No flow {flow_id} in run {run_id}")
        return coordinator

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> FlowState | None:
        return self._state

    @property
    def status_name(self) -> str:
        return self._state.status.value if self._state else NONE_STATUS

    def _derive(self) -> FlowState | None:
        if self.run_id is None:
            return None
        return derive_flow_state(self.bus.events(self.run_id), self.flow_id)

    def verify_cache(self) -> FlowState | None:
        """Re-derive from the log and compare with the cached state.

        Raises:
            StateDriftError: If the two differ
        """
        derived = self._derive()
        if derived != self._state:
            raise StateDriftError(
                f"Cached state {self._state!r} does not match derived state {derived!r}"
            )
        return derived

    def _guard(self, action: str) -> None:
        if self._state is None and action != "start":
            raise GuardViolation(NONE_STATUS, action, "No active flow")
        current = self.status_name
        if current not in self._guards[action]:
            raise GuardViolation(current, action, f"Cannot handle action in status {current}")

    def _emit(self, event_type: EventType, payload: dict[str, Any], parent: Event | None = None) -> Event:
        assert self.run_id is not None
        event = new_event(
            event_type,
            self.run_id,
            payload,
            parent_event_id=parent.id if parent else None,
        )
        stored = self.bus.publish(event).result()
        logger.debug(f"FLOW {self.flow_id}: emitted {event_type.value}")
        return stored

    def _refresh(self) -> FlowState:
        state = self._derive()
        assert state is not None
        self._state = state
        return state

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def start(
        self,
        run_id: str,
        user_prompt: str,
        target_directory: str | None = None,
    ) -> FlowState:
        """Start a scaffold flow and request the user's decision.

        Emits ``started``, ``proposal_created`` and ``decision_requested``.

        Args:
            run_id: Correlation id for the run
            user_prompt: The "build a new project" request
            target_directory: Where the project will be created

        Returns:
            State in ``awaiting_decision``

        Raises:
            GuardViolation: If this coordinator already started a flow
        """
        self._guard("start")

        flow_id = f"scaffold_{uuid.uuid4().hex[:8]}"
        started_event = new_event(
            EventType.STARTED,
            run_id,
            {
                "scaffold_id": flow_id,
                "run_id": run_id,
                "target_directory": target_directory,
                "user_prompt": user_prompt,
                "created_at_iso": datetime.now(timezone.utc).isoformat(),
            },
        )
        started = self.bus.publish(started_event).result()

        # Bound to the flow only once its started event is in the log
        self.run_id = run_id
        self.flow_id = flow_id
        self._refresh()

        proposal = build_proposal_payload(
            self.flow_id,
            user_prompt,
            target_directory,
            seed_key=target_directory or run_id,
        )
        proposal_event = self._emit(EventType.PROPOSAL_CREATED, proposal, parent=started)
        self._emit(
            EventType.DECISION_REQUESTED,
            build_decision_payload(self.flow_id, user_prompt, proposal),
            parent=proposal_event,
        )

        logger.info(f"FLOW {self.flow_id}: started for run {run_id} ({proposal['recipe_id']})")
        return self._refresh()

    def handle_user_action(self, action: UserAction | str) -> FlowState:
        """Resolve the pending decision.

        Args:
            action: "proceed" or "cancel"

        Returns:
            Completed state (ready or cancelled)

        Raises:
            GuardViolation: No flow started, or not awaiting a decision
            ValueError: Unknown action
        """
        self._guard("handle_user_action")
        user_action = UserAction(action)
        assert self._state is not None

        completion = user_action.completion_status
        reason = (
            "User approved scaffold proposal"
            if user_action is UserAction.PROCEED
            else "User cancelled scaffold"
        )
        self._emit(
            EventType.COMPLETED,
            {
                "scaffold_id": self.flow_id,
                "status": completion.value,
                "reason": reason,
                "design_pack_id": (self._state.proposal or {}).get("design_pack_id"),
            },
        )
        logger.info(f"FLOW {self.flow_id}: completed ({completion.value})")
        return self._refresh()

    def handle_style_change(self) -> FlowState:
        """Open the style picker. Status is unchanged.

        Raises:
            GuardViolation: No flow started, or not awaiting a decision
        """
        self._guard("handle_style_change")
        assert self._state is not None

        current_pack = (self._state.proposal or {}).get("design_pack_id")
        self._emit(
            EventType.STYLE_SELECTION_REQUESTED,
            build_style_picker_payload(self.flow_id or "", current_pack),
        )
        return self._refresh()

    def handle_style_select(self, pack_id: str) -> FlowState:
        """Apply a style picked in the picker and re-issue the decision.

        Emits ``style_selected``, an updated ``proposal_created`` and a new
        ``decision_requested``.

        Raises:
            GuardViolation: No flow started, or not awaiting a decision
            ValueError: Unknown design pack
        """
        self._guard("handle_style_select")
        if not is_valid_pack_id(pack_id):
            raise ValueError(f"Unknown design pack: {pack_id}")
        assert self._state is not None and self.run_id is not None and self.flow_id is not None

        previous = (self._state.proposal or {}).get("design_pack_id")
        selected = self._emit(
            EventType.STYLE_SELECTED,
            {"scaffold_id": self.flow_id, "design_pack_id": pack_id, "previous_pack_id": previous},
        )
        proposal = build_proposal_payload(
            self.flow_id,
            self._state.user_prompt,
            self._state.target_directory,
            seed_key=self._state.target_directory or self.run_id,
            override_pack_id=pack_id,
        )
        proposal_event = self._emit(EventType.PROPOSAL_CREATED, proposal, parent=selected)
        self._emit(
            EventType.DECISION_REQUESTED,
            build_decision_payload(self.flow_id, self._state.user_prompt, proposal),
            parent=proposal_event,
        )
        logger.info(f"FLOW {self.flow_id}: style changed {previous} -> {pack_id}")
        return self._refresh()
