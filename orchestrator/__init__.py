"""Orchestrator module.

Event-sourced scaffold decision flow with:
- Append-only event log and bus
- Pure flow state derivation
- Guarded flow coordinator
- Completion polling

The post-scaffold pipeline lives in ``orchestrator.runner`` and
``orchestrator.session`` (imported explicitly, they depend on ``stages``).
"""

from .errors import (
    ExternalCollaboratorFailure,
    GuardViolation,
    PollTimeout,
    ScaffoldError,
    StageFailure,
    StateDriftError,
)
from .event_log import EventBus, EventStore
from .flow_state import DECISION_ALIASES, derive_flow_state, extract_flow_id
from .poller import poll_for_completion
from .state_machine import FlowCoordinator, Transition

__all__ = [
    "DECISION_ALIASES",
    "EventBus",
    "EventStore",
    "ExternalCollaboratorFailure",
    "FlowCoordinator",
    "GuardViolation",
    "PollTimeout",
    "ScaffoldError",
    "StageFailure",
    "StateDriftError",
    "Transition",
    "derive_flow_state",
    "extract_flow_id",
    "poll_for_completion",
]
