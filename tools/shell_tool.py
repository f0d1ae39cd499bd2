"""Shell command execution tool."""

import os
import shlex
import subprocess
from pathlib import Path
from typing import Any

from .base import BaseTool, ToolResult, ToolStatus


class ShellTool(BaseTool):
    """Runs Node.js project tooling in a project directory.

    Used for:
    - Component installers (npx shadcn)
    - Type checking and linting (tsc, eslint)
    - Builds (npm run build)
    """

    name = "shell"
    description = "Shell command execution"

    # Commands that are allowed by default
    ALLOWED_COMMANDS = {
        "node",
        "npm",
        "npx",
        "pnpm",
        "yarn",
        "tsc",
        "eslint",
        "git",
    }

    def __init__(
        self,
        working_dir: Path | str | None = None,
        timeout: int = 300,
        allowed_commands: set[str] | None = None,
    ) -> None:
        """Initialize shell tool.

        Args:
            working_dir: Working directory for commands
            timeout: Default timeout in seconds
            allowed_commands: Override allowed command set
        """
        self.working_dir = Path(working_dir) if working_dir else Path.cwd()
        self.timeout = timeout
        self.allowed_commands = allowed_commands or self.ALLOWED_COMMANDS

    def execute(self, operation: str, **kwargs: Any) -> ToolResult:
        """Execute a shell operation.

        Args:
            operation: Operation name (run, npx, npm_script)
            **kwargs: Operation-specific parameters

        Returns:
            ToolResult with command output
        """
        operations = {
            "run": self._run,
            "npx": self._npx,
            "npm_script": self._npm_script,
        }

        if operation not in operations:
            return ToolResult(
                status=ToolStatus.FAILURE,
                error=f"Unknown operation: {operation}. Available: {list(operations.keys())}",
            )

        try:
            return operations[operation](**kwargs)
        except Exception as e:
            return ToolResult(status=ToolStatus.FAILURE, error=str(e))

    def _run(
        self,
        command: str | list[str],
        timeout: int | None = None,
        cwd: Path | str | None = None,
        env: dict[str, str] | None = None,
    ) -> ToolResult:
        """Run a command without a shell."""
        parts = shlex.split(command) if isinstance(command, str) else list(command)
        if not parts:
            return ToolResult(status=ToolStatus.FAILURE, error="Empty command")

        cmd_name = Path(parts[0]).name
        if cmd_name not in self.allowed_commands:
            return ToolResult(
                status=ToolStatus.FAILURE,
                error=f"Command not allowed: {cmd_name}. Allowed: {sorted(self.allowed_commands)}",
            )

        effective_timeout = timeout or self.timeout
        try:
            result = subprocess.run(
                parts,
                cwd=Path(cwd) if cwd else self.working_dir,
                capture_output=True,
                text=True,
                timeout=effective_timeout,
                check=False,
                env={**os.environ, "CI": "1", **(env or {})},
            )
        except subprocess.TimeoutExpired:
            return ToolResult(
                status=ToolStatus.TIMEOUT,
                error=f"Command timed out after {effective_timeout}s",
                metadata={"command": parts},
            )
        except FileNotFoundError:
            return ToolResult(
                status=ToolStatus.FAILURE,
                error=f"Command not found: {parts[0]}",
                metadata={"command": parts},
            )

        return ToolResult(
            status=ToolStatus.SUCCESS if result.returncode == 0 else ToolStatus.FAILURE,
            output={
                "stdout": result.stdout,
                "stderr": result.stderr,
                "returncode": result.returncode,
            },
            error=(result.stderr or result.stdout) if result.returncode != 0 else None,
            metadata={"command": parts},
        )

    def _npx(self, args: list[str], timeout: int | None = None, cwd: Path | str | None = None) -> ToolResult:
        """Run a package binary through npx."""
        return self._run(["npx", "--yes", *args], timeout=timeout, cwd=cwd)

    def _npm_script(self, script: str, timeout: int | None = None, cwd: Path | str | None = None) -> ToolResult:
        """Run an npm script (npm run <script>)."""
        return self._run(["npm", "run", script], timeout=timeout, cwd=cwd)
