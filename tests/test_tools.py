"""Tests for shell-backed collaborators."""

import json

import pytest

from tools.artifact_writer import ShellArtifactWriter
from tools.base import ApplyResult, ToolResult, ToolStatus
from tools.quality_checks import ShellQualityChecker
from tools.shell_tool import ShellTool


class RecordingShell(ShellTool):
    """ShellTool that records operations instead of spawning processes."""

    def __init__(self, status: ToolStatus = ToolStatus.SUCCESS) -> None:
        super().__init__()
        self.status = status
        self.calls: list[tuple[str, dict]] = []

    def execute(self, operation, **kwargs):
        self.calls.append((operation, kwargs))
        return ToolResult(status=self.status, error=None if self.status == ToolStatus.SUCCESS else "failed")


def test_shell_rejects_disallowed_command(tmp_path):
    result = ShellTool(working_dir=tmp_path).execute("run", command="rm -rf build")
    assert result.status == ToolStatus.FAILURE
    assert "Command not allowed: rm" in result.error


def test_shell_rejects_unknown_operation():
    result = ShellTool().execute("deploy")
    assert not result
    assert "Unknown operation" in result.error


def test_shell_empty_command():
    assert ShellTool().execute("run", command="").error == "Empty command"


def test_tool_result_truthiness():
    assert ToolResult(status=ToolStatus.SUCCESS)
    assert not ToolResult(status=ToolStatus.SKIPPED)
    assert ToolResult(status=ToolStatus.SKIPPED).skipped


def test_apply_result_from_failed_tool():
    result = ApplyResult.from_tool_result(ToolResult(status=ToolStatus.FAILURE, error="x"), ["button"])
    assert result.success is False
    assert result.changed == []
    assert result.error == "x"


def test_artifact_writer_writes_under_root(tmp_path):
    writer = ShellArtifactWriter(shell=RecordingShell())
    result = writer.write_artifact(tmp_path, "src/styles/theme.css", ":root {}\n")

    assert result.success
    assert result.changed == ["src/styles/theme.css"]
    assert (tmp_path / "src" / "styles" / "theme.css").read_text() == ":root {}\n"
    assert writer.marker_exists(tmp_path / "src" / "styles" / "theme.css")


def test_artifact_writer_rejects_escape(tmp_path):
    writer = ShellArtifactWriter(shell=RecordingShell())
    with pytest.raises(ValueError, match="escapes project root"):
        writer.write_artifact(tmp_path / "app", "../outside.txt", "x")


def test_component_set_install(tmp_path):
    shell = RecordingShell()
    writer = ShellArtifactWriter(shell=shell)

    result = writer.apply_component_set(tmp_path, ["button", "card"])

    assert result.success
    assert result.changed == ["button", "card"]
    operation, kwargs = shell.calls[0]
    assert operation == "npx"
    assert kwargs["args"] == ["shadcn@latest", "add", "--yes", "--overwrite", "button", "card"]


def test_empty_component_set_is_noop(tmp_path):
    shell = RecordingShell()
    assert ShellArtifactWriter(shell=shell).apply_component_set(tmp_path, []).success
    assert shell.calls == []


def test_component_install_failure(tmp_path):
    result = ShellArtifactWriter(shell=RecordingShell(ToolStatus.FAILURE)).apply_component_set(tmp_path, ["button"])
    assert result.success is False
    assert result.error == "failed"


def test_quality_checks_skip_when_not_applicable(tmp_path):
    shell = RecordingShell()
    checker = ShellQualityChecker(shell=shell)

    assert checker.run_check("tsc", tmp_path).status == ToolStatus.SKIPPED
    assert checker.run_check("eslint", tmp_path).status == ToolStatus.SKIPPED
    assert checker.run_check("build", tmp_path).status == ToolStatus.SKIPPED
    assert shell.calls == []


def test_quality_checks_run_project_scripts(tmp_path):
    (tmp_path / "tsconfig.json").write_text("{}")
    (tmp_path / "package.json").write_text(json.dumps({"scripts": {"lint": "next lint", "build": "next build"}}))
    shell = RecordingShell()
    checker = ShellQualityChecker(shell=shell, timeout=60)

    for name in ("tsc", "eslint", "build"):
        assert checker.run_check(name, tmp_path).success

    assert shell.calls[0] == ("npx", {"args": ["tsc", "--noEmit"], "cwd": tmp_path, "timeout": 60})
    assert shell.calls[1][1]["script"] == "lint"
    assert shell.calls[2][1]["script"] == "build"


def test_eslint_config_without_script(tmp_path):
    (tmp_path / "eslint.config.mjs").write_text("export default []")
    shell = RecordingShell()
    ShellQualityChecker(shell=shell).run_check("eslint", tmp_path)
    assert shell.calls[0][1]["args"] == ["eslint", "."]


def test_unknown_check_fails(tmp_path):
    assert ShellQualityChecker(shell=RecordingShell()).run_check("prettier", tmp_path).status == ToolStatus.FAILURE
