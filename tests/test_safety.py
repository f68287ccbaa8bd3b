"""Tests for the execution gate and shell launcher."""

import io
import subprocess
import sys
from unittest.mock import MagicMock, patch

import pytest
from rich.console import Console

from cmdfy.core.errors import ExecutionError
from cmdfy.core.executor import CommandExecutor
from cmdfy.core.safety import Decision, ExecutionGate


def make_gate(answer=None):
    prompt = MagicMock(return_value=answer)
    console = Console(file=io.StringIO())
    return ExecutionGate(console=console, input_func=prompt), prompt


class TestExecutionGate:
    """Confirmation policy for dangerous commands."""

    def test_safe_command_proceeds_without_prompt(self, git_result):
        gate, prompt = make_gate()

        assert gate.authorize(git_result, "git status && ls -la") == Decision.PROCEED
        prompt.assert_not_called()

    @pytest.mark.parametrize("answer", ["y", "Y", "  y  ", "y\n"])
    def test_yes_proceeds(self, dangerous_result, answer):
        gate, prompt = make_gate(answer)

        assert gate.authorize(dangerous_result, "rm -rf build") == Decision.PROCEED
        prompt.assert_called_once()

    @pytest.mark.parametrize("answer", ["n", "", "yes", "no", "yy"])
    def test_anything_else_aborts(self, dangerous_result, answer):
        gate, _ = make_gate(answer)

        assert gate.authorize(dangerous_result, "rm -rf build") == Decision.ABORT

    def test_eof_aborts(self, dangerous_result):
        gate, prompt = make_gate()
        prompt.side_effect = EOFError

        assert gate.authorize(dangerous_result, "rm -rf build") == Decision.ABORT

    def test_warning_mentions_explanation(self, dangerous_result):
        gate, _ = make_gate("n")
        gate.authorize(dangerous_result, "rm -rf build")

        output = gate.console.file.getvalue()
        assert "[WARNING]" in output
        assert "Remove the build directory" in output
        assert "rm -rf build" in output


class TestCommandExecutor:
    """Launching through the platform shell."""

    def test_posix_argv(self):
        executor = CommandExecutor(shell="/bin/zsh", platform="linux")
        assert executor.build_argv("ls -la") == ["/bin/zsh", "-c", "ls -la"]

    def test_windows_argv(self):
        executor = CommandExecutor(platform="win32")
        assert executor.build_argv("dir") == ["cmd", "/C", "dir"]

    def test_default_shell_from_environment(self, monkeypatch):
        monkeypatch.setenv("SHELL", "/usr/bin/fish")
        assert CommandExecutor(platform="linux").shell == "/usr/bin/fish"

    def test_success(self):
        with patch("cmdfy.core.executor.subprocess.run") as run:
            run.return_value = subprocess.CompletedProcess(args=[], returncode=0)
            assert CommandExecutor(shell="/bin/sh", platform="linux").run("true") == 0

        run.assert_called_once_with(["/bin/sh", "-c", "true"], check=False)

    def test_non_zero_exit(self):
        with patch("cmdfy.core.executor.subprocess.run") as run:
            run.return_value = subprocess.CompletedProcess(args=[], returncode=3)
            with pytest.raises(ExecutionError) as excinfo:
                CommandExecutor(shell="/bin/sh", platform="linux").run("false")

        assert excinfo.value.returncode == 3
        assert excinfo.value.command == "false"

    def test_missing_interpreter(self):
        executor = CommandExecutor(shell="/definitely/not/a/shell", platform="linux")
        with pytest.raises(ExecutionError, match="could not launch"):
            executor.run("echo hi")

    @pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")
    def test_real_shell_round_trip(self, tmp_path):
        target = tmp_path / "out.txt"
        CommandExecutor(shell="/bin/sh", platform="linux").run(f"echo hello > {target}")
        assert target.read_text().strip() == "hello"
