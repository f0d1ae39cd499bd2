"""Tools module for external collaborators.

Provides deterministic tool abstractions for:
- Shell commands (npx, npm scripts)
- Artifact writing and component installs
- Quality checks (tsc, eslint, build)
"""

from .artifact_writer import ShellArtifactWriter
from .base import ApplyResult, BaseTool, ToolResult, ToolStatus
from .quality_checks import ShellQualityChecker
from .shell_tool import ShellTool

__all__ = [
    "ApplyResult",
    "BaseTool",
    "ToolResult",
    "ToolStatus",
    "ShellArtifactWriter",
    "ShellQualityChecker",
    "ShellTool",
]
