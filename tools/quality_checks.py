"""Quality checks for generated projects (tsc, eslint, build)."""

import json
import logging
from pathlib import Path

from schemas.pipeline_state import QUALITY_CHECKS

from .base import ToolResult, ToolStatus
from .shell_tool import ShellTool

logger = logging.getLogger(__name__)


class ShellQualityChecker:
    """Runs static checks on a Node.js project through ``ShellTool``.

    A check is skipped (not failed) when the project cannot run it:
    no ``tsconfig.json`` for tsc, no lint script or config for eslint,
    no ``build`` script for the build.
    """

    CHECKS = QUALITY_CHECKS

    def __init__(self, shell: ShellTool | None = None, timeout: int = 300) -> None:
        """Initialize checker.

        Args:
            shell: Shell tool to run commands with
            timeout: Per-check timeout in seconds
        """
        self.shell = shell or ShellTool(timeout=timeout)
        self.timeout = timeout

    def run_check(self, name: str, project_path: Path) -> ToolResult:
        """Run one named check.

        Args:
            name: tsc | eslint | build
            project_path: Project root

        Returns:
            ToolResult (SKIPPED when the check does not apply)
        """
        project_path = Path(project_path)
        if name not in self.CHECKS:
            return ToolResult(status=ToolStatus.FAILURE, error=f"Unknown check: {name}")

        scripts = self._package_scripts(project_path)

        if name == "tsc":
            if not (project_path / "tsconfig.json").exists():
                return self._skip("No tsconfig.json")
            return self.shell.execute("npx", args=["tsc", "--noEmit"], cwd=project_path, timeout=self.timeout)

        if name == "eslint":
            if "lint" in scripts:
                return self.shell.execute("npm_script", script="lint", cwd=project_path, timeout=self.timeout)
            if not any(project_path.glob("eslint.config.*")) and not any(project_path.glob(".eslintrc*")):
                return self._skip("No ESLint configuration")
            return self.shell.execute("npx", args=["eslint", "."], cwd=project_path, timeout=self.timeout)

        if "build" not in scripts:
            return self._skip("No build script")
        return self.shell.execute("npm_script", script="build", cwd=project_path, timeout=self.timeout)

    def _skip(self, reason: str) -> ToolResult:
        return ToolResult(status=ToolStatus.SKIPPED, error=reason)

    def _package_scripts(self, project_path: Path) -> dict[str, str]:
        package_json = project_path / "package.json"
        if not package_json.exists():
            return {}
        try:
            data = json.loads(package_json.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read {package_json}: {e}")
            return {}
        scripts = data.get("scripts")
        return scripts if isinstance(scripts, dict) else {}
