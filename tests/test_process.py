"""Tests for the local process runner."""

import signal

import pytest

from peerdeploy.process import (
    NOT_FOUND_RETURNCODE,
    RunResult,
    RunStatus,
    run,
    run_async,
    wait,
)


class TestRun:
    """Synchronous execution."""

    def test_success(self):
        result = run(["true"])

        assert result.ok
        assert result.status == RunStatus.SUCCESS
        assert result.command == ("true",)

    def test_nonzero_exit(self):
        result = run(["sh", "-c", "exit 3"])

        assert not result.ok
        assert result.status == RunStatus.EXITED
        assert result.returncode == 3

    def test_signaled(self):
        result = run(["sh", "-c", "kill -TERM $$"])

        assert result.status == RunStatus.SIGNALED
        assert result.returncode == -signal.SIGTERM
        assert "SIGTERM" in result.describe()

    def test_missing_program_does_not_raise(self):
        result = run(["peerdeploy-no-such-program-xyz"])

        assert result.status == RunStatus.NOT_FOUND
        assert result.returncode == NOT_FOUND_RETURNCODE
        assert "could not start" in result.describe()

    def test_output_is_inherited(self, capfd):
        run(["sh", "-c", "echo visible"])

        assert "visible" in capfd.readouterr().out


class TestRunAsync:
    """Detached execution keeps the command's identity."""

    def test_handle_retains_command_and_host(self):
        handle = run_async(["sh", "-c", "exit 1"], host="10.0.0.9")

        assert handle.command == ("sh", "-c", "exit 1")
        assert handle.host == "10.0.0.9"

        result = wait(handle)
        assert result.command == handle.command
        assert result.returncode == 1

    def test_returns_before_command_finishes(self):
        handle = run_async(["sleep", "0.3"])

        assert handle.process.poll() is None
        assert wait(handle).ok


class TestDescribe:
    """Error messages name the command and the exit state."""

    def test_exit_status(self):
        result = RunResult(command=("scp", "a b", "host:/x"), returncode=2)

        assert result.describe() == "scp 'a b' host:/x: exited with status 2"

    @pytest.mark.parametrize("returncode", [-9, -64])
    def test_signal(self, returncode):
        result = RunResult(command=("ssh",), returncode=returncode)

        assert result.status == RunStatus.SIGNALED
        assert "terminated by" in result.describe()
