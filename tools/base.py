"""Base tool interface for external collaborators."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ToolStatus(Enum):
    """Status of a tool execution."""

    SUCCESS = "success"
    FAILURE = "failure"
    TIMEOUT = "timeout"
    SKIPPED = "skipped"


@dataclass
class ToolResult:
    """Result of a tool execution."""

    status: ToolStatus
    output: Any = None
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.status == ToolStatus.SUCCESS

    @property
    def skipped(self) -> bool:
        return self.status == ToolStatus.SKIPPED

    def __bool__(self) -> bool:
        return self.success


@dataclass
class ApplyResult:
    """Result of applying something to the project tree."""

    success: bool
    changed: list[str] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def from_tool_result(cls, result: ToolResult, changed: list[str]) -> "ApplyResult":
        return cls(success=result.success, changed=changed if result.success else [], error=result.error)


class BaseTool(ABC):
    """Abstract base class for tools.

    Tools wrap deterministic external operations (subprocesses, files).
    """

    name: str = "base_tool"
    description: str = "Base tool interface"

    @abstractmethod
    def execute(self, operation: str, **kwargs: Any) -> ToolResult:
        """Execute a tool operation.

        Args:
            operation: Operation name
            **kwargs: Operation-specific parameters

        Returns:
            ToolResult with status and output
        """
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
