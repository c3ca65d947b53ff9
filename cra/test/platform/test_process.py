"""Tests for cra.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from cra.core.result import Err, Ok
from cra.platform.process import ProcessError, run


class TestProcessError:
    """Test ProcessError dataclass."""

    def test_str_short_command(self) -> None:
        error = ProcessError(
            command=("git", "status"),
            returncode=1,
            stdout="",
            stderr="fatal: not a git repository",
        )
        assert str(error) == "git status failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("helm", "package", "charts/app", "-d", "out"),
            returncode=1,
            stdout="",
            stderr="error",
        )
        assert str(error) == "helm package charts/app ... failed (exit 1)"

    def test_detail_prefers_stderr(self) -> None:
        error = ProcessError(("gh",), 1, "out", " bad credentials \n")
        assert error.detail == "bad credentials"

    def test_detail_falls_back_to_stdout_then_summary(self) -> None:
        assert ProcessError(("gh",), 1, "out", "").detail == "out"
        assert ProcessError(("gh",), 2, "", "").detail == "gh failed (exit 2)"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    """Test run() against real child processes."""

    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)
        assert isinstance(result, Ok)
        assert result.value.strip() == "hello"

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import sys; sys.stderr.write('nope'); sys.exit(3)"],
            cwd=tmp_path,
        )
        assert isinstance(result, Err)
        assert result.error.returncode == 3
        assert result.error.stderr == "nope"

    def test_input_text_goes_to_stdin(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import sys; print(sys.stdin.read().upper())"],
            cwd=tmp_path,
            input_text="secret",
        )
        assert isinstance(result, Ok)
        assert result.value.strip() == "SECRET"

    def test_env_is_passed(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import os; print(os.environ['CRA_PROBE'])"],
            cwd=tmp_path,
            env={"CRA_PROBE": "42"},
        )
        assert isinstance(result, Ok)
        assert result.value.strip() == "42"

    def test_missing_executable(self, tmp_path: Path) -> None:
        result = run(["definitely-not-a-real-binary-xyz"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == -1

    def test_timeout(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import time; time.sleep(5)"], cwd=tmp_path, timeout=0.2
        )
        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert "timed out" in result.error.stderr
