"""Tests for local git versioning (needs a git binary)."""

import json
import shutil
import subprocess

import pytest

from local_storage.git_versioner import METADATA_MARKER, GitError, LocalGitVersioner

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _log(path) -> str:
    return subprocess.run(
        ["git", "log", "-1", "--format=%B"], cwd=path, capture_output=True, text=True, check=True
    ).stdout


def test_ensure_repo(tmp_path):
    versioner = LocalGitVersioner(tmp_path)
    assert versioner.is_repo() is False
    assert versioner.ensure_repo() is True
    assert versioner.ensure_repo() is False
    assert versioner.head() is None


def test_ensure_repo_missing_directory(tmp_path):
    with pytest.raises(GitError):
        LocalGitVersioner(tmp_path / "nope").ensure_repo()


def test_commit_stage_with_metadata(tmp_path):
    (tmp_path / "package.json").write_text("{}")
    versioner = LocalGitVersioner(tmp_path, commit_prefix="[test]")
    versioner.ensure_repo()

    sha = versioner.commit_stage("cli_scaffold", run_id="run-1", metadata={"recipe": "expo"})

    assert sha == versioner.head()
    message = _log(tmp_path)
    assert message.startswith("[test] cli_scaffold")
    trailer = next(line for line in message.splitlines() if line.startswith(METADATA_MARKER))
    metadata = json.loads(trailer[len(METADATA_MARKER):])
    assert metadata["stage"] == "cli_scaffold"
    assert metadata["run_id"] == "run-1"
    assert metadata["recipe"] == "expo"


def test_commit_without_changes_returns_head(tmp_path):
    (tmp_path / "a.txt").write_text("a")
    versioner = LocalGitVersioner(tmp_path)
    versioner.ensure_repo()
    first = versioner.commit_stage("one")

    assert versioner.commit_stage("two") == first


def test_empty_repo_without_changes(tmp_path):
    versioner = LocalGitVersioner(tmp_path)
    versioner.ensure_repo()
    assert versioner.commit_stage("nothing") is None
