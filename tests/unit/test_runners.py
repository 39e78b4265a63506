"""
Unit tests for command and hook execution.
"""
import logging
import sys

import pytest
from derrick.RUNNERS.hook_runner import HookRunner
from derrick.RUNNERS.process_runner import CommandRunner
from derrick.exceptions import CommandError


class TestCommandRunner:
    """Tests for CommandRunner."""

    def test_execute(self):
        CommandRunner().execute(sys.executable, ["-c", "pass"])

    def test_execute_non_zero_exit(self):
        with pytest.raises(CommandError) as excinfo:
            CommandRunner().execute(sys.executable, ["-c", "raise SystemExit(3)"])
        assert excinfo.value.returncode == 3
        assert excinfo.value.command[0] == sys.executable

    def test_execute_missing_executable(self):
        with pytest.raises(CommandError) as excinfo:
            CommandRunner().execute("derrick-no-such-executable")
        assert excinfo.value.returncode is None

    def test_output(self):
        assert CommandRunner().output(sys.executable, ["-c", "print(' hello ')"]) == "hello"

    def test_output_failure_carries_stderr(self):
        with pytest.raises(CommandError) as excinfo:
            CommandRunner().output(
                sys.executable, ["-c", "import sys; sys.stderr.write('boom'); sys.exit(1)"])
        assert str(excinfo.value) == "boom"

    def test_working_dir(self, tmp_path):
        runner = CommandRunner(working_dir=str(tmp_path))
        assert runner.output(sys.executable, ["-c", "import os; print(os.getcwd())"]) == \
            str(tmp_path.resolve())

    def test_verbose_logs_commands(self, caplog):
        with caplog.at_level(logging.INFO):
            CommandRunner(verbose=True).execute(sys.executable, ["-c", "pass"])
        assert "Running command" in caplog.text


class TestHookRunner:
    """Tests for HookRunner."""

    def test_empty_hook(self, recording_runner):
        runner = recording_runner()
        assert HookRunner(runner).execute("")
        assert runner.commands == []

    def test_hook_is_split_like_a_shell(self, recording_runner):
        runner = recording_runner()
        assert HookRunner(runner).execute("echo 'hello world' again")
        assert runner.commands == [["echo", "hello world", "again"]]

    def test_failing_hook_is_logged(self, recording_runner, caplog):
        runner = recording_runner(failing=["notify"])
        with caplog.at_level(logging.WARNING):
            assert not HookRunner(runner).execute("notify me")
        assert "failed" in caplog.text

    def test_unparsable_hook(self, recording_runner):
        runner = recording_runner()
        assert not HookRunner(runner).execute("echo 'unterminated")
        assert runner.commands == []
