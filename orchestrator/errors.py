"""Error taxonomy for the scaffold flow and post-scaffold pipeline."""


class ScaffoldError(Exception):
    """Base class for scaffold flow errors."""

    pass


class GuardViolation(ScaffoldError):
    """An operation was invoked outside its valid state.

    Caller error: never retried.
    """

    def __init__(self, state: str, action: str, message: str) -> None:
        super().__init__(message)
        self.state = state
        self.action = action
        self.message = message

    def __repr__(self) -> str:
        return f"GuardViolation(state={self.state!r}, action={self.action!r}, message={self.message!r})"


class StateDriftError(ScaffoldError):
    """Cached flow state no longer matches a re-derivation from the log."""

    pass


class StageFailure(ScaffoldError):
    """An exception escaped a stage body."""

    def __init__(self, stage_id: str, message: str) -> None:
        super().__init__(f"Stage {stage_id} failed: {message}")
        self.stage_id = stage_id
        self.message = message


class ExternalCollaboratorFailure(ScaffoldError):
    """An external collaborator such as the artifact writer reported failure."""

    def __init__(self, collaborator: str, message: str) -> None:
        super().__init__(f"{collaborator}: {message}")
        self.collaborator = collaborator
        self.message = message


class PollTimeout(ScaffoldError):
    """The completion marker never appeared."""

    def __init__(self, marker_path: str, waited_ms: int) -> None:
        super().__init__(f"Timeout waiting for {marker_path} after {waited_ms}ms")
        self.marker_path = marker_path
        self.waited_ms = waited_ms
