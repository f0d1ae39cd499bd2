"""Artifact writer backed by the local filesystem and npx installers."""

import logging
from pathlib import Path

from .base import ApplyResult
from .shell_tool import ShellTool

logger = logging.getLogger(__name__)


class ShellArtifactWriter:
    """Applies artifacts to a scaffolded project tree.

    Component sets are installed with ``npx shadcn add``; plain artifacts
    are written relative to the project root.
    """

    def __init__(self, shell: ShellTool | None = None, timeout: int = 300) -> None:
        self.shell = shell or ShellTool(timeout=timeout)

    def marker_exists(self, path: Path | str) -> bool:
        return Path(path).exists()

    def apply_component_set(self, project_path: Path | str, components: list[str]) -> ApplyResult:
        """Install a named UI component set.

        Args:
            project_path: Project root
            components: Component names (e.g. ["button", "card"])

        Returns:
            ApplyResult listing the installed components
        """
        if not components:
            return ApplyResult(success=True)

        result = self.shell.execute(
            "npx",
            args=["shadcn@latest", "add", "--yes", "--overwrite", *components],
            cwd=Path(project_path),
        )
        if not result:
            logger.warning(f"Component install failed in {project_path}: {result.error}")
        return ApplyResult.from_tool_result(result, list(components))

    def write_artifact(self, project_path: Path | str, rel_path: str, content: str) -> ApplyResult:
        """Write a text artifact under the project root.

        Raises:
            ValueError: If ``rel_path`` escapes the project root
        """
        root = Path(project_path).resolve()
        target = (root / rel_path).resolve()
        if root != target and root not in target.parents:
            raise ValueError(f"Artifact path escapes project root: {rel_path}")

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        except OSError as e:
            return ApplyResult(success=False, error=str(e))
        return ApplyResult(success=True, changed=[rel_path])
