"""Tests for nestgit.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from nestgit.platform.process import (
    TIMEOUT_MESSAGE,
    CommandErrorKind,
    CommandResult,
    CommandRunner,
    run,
)


class TestCommandResult:
    """Test CommandResult constructors and wire shape."""

    def test_ok(self) -> None:
        """Test the success constructor and its wire shape."""
        result = CommandResult.ok("out\n", "warn")
        assert result.success is True
        assert result.exit_code == 0
        assert result.error is None
        assert result.to_dict() == {"success": True, "stdout": "out\n", "stderr": "warn", "exitCode": 0}

    def test_failure_omits_unset_fields(self) -> None:
        """Unset fields are left out of the wire shape."""
        result = CommandResult.failure("Invalid file path")
        assert result.to_dict() == {"success": False, "error": "Invalid file path"}

    def test_failure_keeps_stderr(self) -> None:
        result = CommandResult.failure("boom", stderr="[a] boom", exit_code=128)
        assert result.to_dict() == {"success": False, "stderr": "[a] boom", "exitCode": 128, "error": "boom"}

    def test_frozen(self) -> None:
        result = CommandResult.ok("")
        with pytest.raises(AttributeError):
            result.success = False  # type: ignore[misc]


class TestRun:
    """Test run function."""

    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)

        assert result.success is True
        assert result.stdout.strip() == "hello"
        assert result.exit_code == 0
        assert result.error_kind is None

    def test_non_zero_exit(self, tmp_path: Path) -> None:
        """Test the message names the exit code and first stderr line."""
        result = run(
            [sys.executable, "-c", "import sys; sys.stderr.write('fatal: nope\\n'); sys.exit(42)"],
            cwd=tmp_path,
        )

        assert result.success is False
        assert result.exit_code == 42
        assert result.error_kind is CommandErrorKind.EXIT
        assert "fatal: nope" in result.stderr
        assert result.error is not None
        assert "exit 42" in result.error
        assert "fatal: nope" in result.error

    def test_keeps_stdout_on_failure(self, tmp_path: Path) -> None:
        """Stdout survives a failing exit."""
        result = run([sys.executable, "-c", "print('partial'); raise SystemExit(1)"], cwd=tmp_path)
        assert result.success is False
        assert "partial" in result.stdout

    def test_command_not_found(self, tmp_path: Path) -> None:
        """Test a missing executable gives a SPAWN failure."""
        result = run(["nonexistent_command_12345"], cwd=tmp_path)

        assert result.success is False
        assert result.exit_code == -1
        assert result.error_kind is CommandErrorKind.SPAWN
        assert len(result.stderr) > 0

    def test_timeout(self, tmp_path: Path) -> None:
        """Test the timeout message and exit code."""
        result = run([sys.executable, "-c", "import time; time.sleep(5)"], cwd=tmp_path, timeout=0.2)

        assert result.success is False
        assert result.timed_out is True
        assert result.error == TIMEOUT_MESSAGE
        assert result.exit_code == -1

    def test_uses_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "marker.txt").write_text("x")
        result = run([sys.executable, "-c", "import os; print(os.listdir('.'))"], cwd=tmp_path)
        assert "marker.txt" in result.stdout

    def test_missing_cwd_is_reported(self, tmp_path: Path) -> None:
        """A missing cwd is a spawn failure, not an exception."""
        result = run([sys.executable, "-c", "pass"], cwd=tmp_path / "missing")
        assert result.success is False
        assert result.error_kind is CommandErrorKind.SPAWN


class TestCommandRunner:
    """Test CommandRunner defaults."""

    def test_prepends_executable(self, tmp_path: Path) -> None:
        """Test args follow the bound executable."""
        runner = CommandRunner(sys.executable)
        result = runner.run(["-c", "print('via runner')"], tmp_path)
        assert result.stdout.strip() == "via runner"

    def test_default_timeout_applies(self, tmp_path: Path) -> None:
        runner = CommandRunner(sys.executable, default_timeout=0.2)
        result = runner.run(["-c", "import time; time.sleep(5)"], tmp_path)
        assert result.timed_out is True

    def test_per_call_timeout_overrides(self, tmp_path: Path) -> None:
        """A per-call timeout replaces the default."""
        runner = CommandRunner(sys.executable, default_timeout=0.1)
        result = runner.run(["-c", "import time; time.sleep(0.3)"], tmp_path, timeout=10.0)
        assert result.success is True
