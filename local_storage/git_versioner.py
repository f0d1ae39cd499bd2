"""Local git versioning for scaffolded projects.

Each pipeline stage that changes the project tree can be committed with
a standard prefix and a metadata trailer, so users can see and restore
what the pipeline did.
"""

from __future__ import annotations

import json
import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

DEFAULT_COMMIT_PREFIX = "[scaffold]"
METADATA_MARKER = "Scaffold-Metadata: "

# Used only when the repository has no identity configured
_FALLBACK_IDENTITY = ("-c", "user.name=Scaffold Pipeline", "-c", "user.email=scaffold@localhost")


class GitError(Exception):
    """Raised when a git operation fails."""

    pass


class LocalGitVersioner:
    """Commit pipeline stages to the project's local git repository.

    Example:
        >>> versioner = LocalGitVersioner(Path("/work/my-app"))
        >>> versioner.ensure_repo()
        >>> sha = versioner.commit_stage("cli_scaffold", run_id="run-1")
    """

    def __init__(self, project_dir: Path | str, commit_prefix: str = DEFAULT_COMMIT_PREFIX):
        """Initialize the versioner.

        Args:
            project_dir: Project root (need not be a repository yet)
            commit_prefix: Prefix for commit subjects
        """
        self.project_dir = Path(project_dir).resolve()
        self.commit_prefix = commit_prefix

    def _run_git(
        self, *args: str, check: bool = True
    ) -> subprocess.CompletedProcess[str]:
        """Run a git command in the project directory.

        Args:
            *args: Git command arguments (without 'git' prefix).
            check: Whether to raise on non-zero exit code.

        Returns:
            CompletedProcess with stdout and stderr.

        Raises:
            GitError: If the command fails and check=True.
        """
        cmd = ["git", *args]
        try:
            result = subprocess.run(
                cmd,
                cwd=self.project_dir,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            raise GitError("Git is not installed or not in PATH")
        if check and result.returncode != 0:
            raise GitError(
                f"Git command failed: {' '.join(cmd)}\n"
                f"stderr: {result.stderr}"
            )
        return result

    def is_repo(self) -> bool:
        return (self.project_dir / ".git").exists()

    def ensure_repo(self) -> bool:
        """Initialize a repository if the project has none.

        Returns:
            True if a new repository was created.
        """
        if self.is_repo():
            return False
        if not self.project_dir.exists():
            raise GitError(f"Project directory does not exist: {self.project_dir}")
        self._run_git("init", "--quiet")
        return True

    def head(self) -> str | None:
        """Current HEAD sha, or None before the first commit."""
        result = self._run_git("rev-parse", "--verify", "--quiet", "HEAD", check=False)
        sha = result.stdout.strip()
        return sha or None

    def _has_identity(self) -> bool:
        result = self._run_git("config", "user.email", check=False)
        return bool(result.stdout.strip())

    def _encode_metadata(self, metadata: dict[str, Any]) -> str:
        return f"\n\n{METADATA_MARKER}{json.dumps(metadata, separators=(',', ':'))}"

    def commit_stage(
        self,
        stage: str,
        run_id: str | None = None,
        message: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str | None:
        """Stage every change and commit it for a pipeline stage.

        Args:
            stage: Stage name (e.g. "cli_scaffold", "design_system")
            run_id: Pipeline run identifier
            message: Commit subject (defaults to the stage name)
            metadata: Extra metadata stored in the commit trailer

        Returns:
            The commit sha, the unchanged HEAD when there was nothing to
            commit, or None for an empty repository with no changes.

        Raises:
            GitError: If a git command fails.
        """
        self._run_git("add", "-A")

        status = self._run_git("status", "--porcelain")
        if not status.stdout.strip():
            return self.head()

        full_metadata = {
            "stage": stage,
            "run_id": run_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **(metadata or {}),
        }
        commit_message = f"{self.commit_prefix} {message or stage}"
        commit_message += self._encode_metadata(full_metadata)

        identity: tuple[str, ...] = () if self._has_identity() else _FALLBACK_IDENTITY
        self._run_git(*identity, "commit", "--quiet", "--no-verify", "-m", commit_message)

        return self.head()
